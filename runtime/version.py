"""Runtime version metadata for IslandBridge.

This module is import-safe and exposes authoritative version identifiers for
other runtime modules without executing side effects on import.
"""

from __future__ import annotations

PROJECT_NAME = "IslandBridge"
VERSION = "v0.3.0"
BUILD = "2026.10"
LICENSE = "MIT"

# Archipelago network protocol version announced in the Connect packet.
PROTOCOL_VERSION = (0, 5, 0)

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "BUILD",
    "LICENSE",
    "PROTOCOL_VERSION",
    "as_dict",
    "as_string",
]


def as_dict() -> dict[str, str]:
    """Return version metadata as a dictionary."""

    return {
        "project": PROJECT_NAME,
        "version": VERSION,
        "build": BUILD,
        "protocol": ".".join(str(part) for part in PROTOCOL_VERSION),
        "license": LICENSE,
    }


def as_string() -> str:
    """Return a concise version string."""

    return f"{PROJECT_NAME} {VERSION} (Build {BUILD})"
