"""
Process configuration for the IslandBridge runtime.

All values come from environment variables (optionally seeded from a .env
file by the entrypoint). Unlike the dashboard-driven loaders, nothing here
falls back to defaults for required values: a missing or undecodable value
aborts startup before any component is created.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from shared.logging.logger import get_logger

log = get_logger("shared.config.bridge")

ENV_WEBHOOK = "ISLANDBRIDGE_WEBHOOK"
ENV_AP_URL = "ISLANDBRIDGE_AP_URL"
ENV_AP_SLOT = "ISLANDBRIDGE_AP_SLOT"
ENV_AP_PASSWORD = "ISLANDBRIDGE_AP_PASSWORD"
ENV_POLL_INTERVAL = "ISLANDBRIDGE_POLL_INTERVAL"

DEFAULT_POLL_INTERVAL = 0.25

_REQUIRED = {
    ENV_WEBHOOK: "webhook URL",
    ENV_AP_URL: "Archipelago URL",
    ENV_AP_SLOT: "Archipelago slot",
}


class ConfigError(RuntimeError):
    """Raised when the process configuration cannot be used."""


@dataclass(frozen=True)
class BridgeConfig:
    webhook_url: str
    ap_url: str
    ap_slot: str
    ap_password: Optional[str] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def describe(self) -> Dict[str, Any]:
        """Secret-free view of the config for boot logging."""
        webhook_host = urlparse(self.webhook_url).netloc or "<unparsed>"
        return {
            "webhook": f"{webhook_host}/…",
            "ap_url": self.ap_url,
            "ap_slot": self.ap_slot,
            "ap_password": "SET" if self.ap_password else "MISSING",
            "poll_interval": self.poll_interval,
        }


def _get_env(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = environ.get(key)
    if value is None:
        return None

    # os.environ decodes undecodable bytes as lone surrogates
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ConfigError(
            f"The contents of the environment variable {key} are not valid Unicode."
        ) from e
    return value


def _require(environ: Mapping[str, str], key: str) -> str:
    value = _get_env(environ, key)
    if value is None:
        raise ConfigError(
            f"Missing {_REQUIRED[key]} environment variable {key} (check README.md)"
        )
    if not value.strip():
        raise ConfigError(
            f"Empty {_REQUIRED[key]} environment variable {key} (check README.md)"
        )
    return value


def _parse_poll_interval(raw: Optional[str]) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_POLL_INTERVAL

    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(
            f"{ENV_POLL_INTERVAL} must be a number of seconds, got {raw!r}"
        ) from e

    if value <= 0:
        raise ConfigError(f"{ENV_POLL_INTERVAL} must be positive, got {raw!r}")
    return value


def load_bridge_config(environ: Optional[Mapping[str, str]] = None) -> BridgeConfig:
    environ = os.environ if environ is None else environ

    webhook_url = _require(environ, ENV_WEBHOOK)
    ap_url = _require(environ, ENV_AP_URL)
    ap_slot = _require(environ, ENV_AP_SLOT)

    # An empty password is the same as no password
    ap_password = _get_env(environ, ENV_AP_PASSWORD) or None

    poll_interval = _parse_poll_interval(_get_env(environ, ENV_POLL_INTERVAL))

    config = BridgeConfig(
        webhook_url=webhook_url,
        ap_url=ap_url,
        ap_slot=ap_slot,
        ap_password=ap_password,
        poll_interval=poll_interval,
    )
    log.debug(f"Bridge configuration resolved: {config.describe()}")
    return config


__all__ = [
    "BridgeConfig",
    "ConfigError",
    "DEFAULT_POLL_INTERVAL",
    "load_bridge_config",
]
