"""
======================================================================
 IslandBridge — Archipelago to Discord relay
======================================================================
"""

import argparse
import asyncio
import os

from dotenv import load_dotenv

from services.archipelago.api.client import ArchipelagoClient
from services.archipelago.translator import EventTranslator
from services.discord.messages import AttributedMessage
from shared.logging.logger import get_logger

log = get_logger("archipelago.poc", runtime="poc")


def _env(key: str) -> str:
    return os.getenv(key, "").strip()


async def _run(args) -> None:
    load_dotenv()

    url = args.url or _env("ISLANDBRIDGE_AP_URL")
    slot = args.slot or _env("ISLANDBRIDGE_AP_SLOT")
    password = args.password or _env("ISLANDBRIDGE_AP_PASSWORD") or None

    if not url:
        raise RuntimeError(
            "Missing Archipelago URL. Provide --url or set ISLANDBRIDGE_AP_URL"
        )
    if not slot:
        raise RuntimeError(
            "Missing Archipelago slot. Provide --slot or set ISLANDBRIDGE_AP_SLOT"
        )

    client = ArchipelagoClient(url, slot, password=password)
    translator = EventTranslator()

    await client.start()
    log.info("Archipelago POC started — printing messages instead of posting them")

    try:
        while not translator.should_stop:
            for event in client.poll():
                message = translator.translate(event)
                if isinstance(message, AttributedMessage):
                    print(f"💬 {message.username} → {message.content}")
                elif message is not None:
                    print(f"📢 {message.content}")

            if client.state.disconnected and not translator.should_stop:
                print(f"📢 IslandBridge disconnected: {client.state.reason}")
                break

            await asyncio.sleep(0.25)
    except KeyboardInterrupt:
        log.info("KeyboardInterrupt received — shutting down POC")
    finally:
        await client.close()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="IslandBridge Archipelago smoke test (console output, no webhook)"
    )
    parser.add_argument("--url", help="Archipelago server (host:port, ws:// or wss://)")
    parser.add_argument("--slot", help="Slot name to connect as")
    parser.add_argument("--password", help="Room password")

    args = parser.parse_args()
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
