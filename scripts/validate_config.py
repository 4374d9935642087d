"""
======================================================================
 IslandBridge — Archipelago to Discord relay
======================================================================

Configuration validation script.

Checks the ISLANDBRIDGE_* environment (including a local .env file) the
same way the runtime does at boot, without connecting anywhere.

Design rules:
- No side effects on import
- No runtime startup
- Validation only (no mutation)
"""

from __future__ import annotations

import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shared.config.bridge import ConfigError, load_bridge_config  # noqa: E402


def _error(msg: str):
    print(f"[CONFIG ERROR] {msg}", file=sys.stderr)


# ------------------------------------------------------------
# Entry point
# ------------------------------------------------------------

def main() -> int:
    load_dotenv()

    try:
        config = load_bridge_config()
    except ConfigError as e:
        _error(str(e))
        print("Configuration validation failed.", file=sys.stderr)
        return 1

    for key, value in config.describe().items():
        print(f"  {key}: {value}")

    print("Configuration validation passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
