"""
======================================================================
 IslandBridge — Archipelago to Discord relay
======================================================================
"""

import asyncio
import signal
import sys

from dotenv import load_dotenv

from core.delivery import DeliveryQueue, DeliveryWorker
from core.relay import run_relay
from runtime.version import as_string
from services.archipelago.api.client import ArchipelagoClient
from services.archipelago.translator import EventTranslator
from services.discord.markup import footnote
from services.discord.messages import plain_message
from services.discord.webhook import DiscordWebhookClient
from shared.config.bridge import BridgeConfig, ConfigError, load_bridge_config
from shared.logging.logger import get_logger

log = get_logger("core.app")

STARTING_TEXT = "IslandBridge starting..."


async def main(
    stop_event: asyncio.Event,
    config: BridgeConfig,
    *,
    session=None,
    webhook=None,
) -> None:
    log.info(f"{as_string()} booting")
    log.info(f"Configuration: {config.describe()}")

    # --------------------------------------------------
    # COLLABORATORS (built before anything runs)
    # --------------------------------------------------
    if session is None:
        session = ArchipelagoClient(
            config.ap_url,
            config.ap_slot,
            password=config.ap_password,
        )
    if webhook is None:
        webhook = DiscordWebhookClient(config.webhook_url)

    # --------------------------------------------------
    # DELIVERY PIPELINE
    # --------------------------------------------------
    queue = DeliveryQueue()
    worker = DeliveryWorker(queue=queue, sender=webhook)
    worker_task = asyncio.create_task(worker.run())

    queue.put(plain_message(footnote(STARTING_TEXT)))

    try:
        await session.start()
        await run_relay(
            session,
            queue,
            EventTranslator(),
            poll_interval=config.poll_interval,
            stop_event=stop_event,
        )
    finally:
        await session.close()

        # --------------------------------------------------
        # DRAIN: end-of-stream is seen only after the backlog
        # --------------------------------------------------
        queue.close()
        log.info(f"Draining {queue.pending} pending message(s)")
        try:
            await worker_task
        finally:
            await webhook.close()
            log.info(f"Delivery metrics: {worker.get_metrics()}")

    log.info("IslandBridge stopped")


# ----------------------------------------------------------------------
# SIGNAL HANDLING (WINDOWS-SAFE)
# ----------------------------------------------------------------------

def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    stop_event: asyncio.Event,
):
    """
    Windows-safe Ctrl+C handler.
    Uses signal.signal + asyncio.Event to unwind cleanly.
    """

    def _handler(signum, frame):
        loop.call_soon_threadsafe(stop_event.set)

    try:
        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
    except ValueError:
        log.debug("Signal handlers unavailable outside the main thread")


# ----------------------------------------------------------------------
# ENTRYPOINT
# ----------------------------------------------------------------------

def run() -> int:
    load_dotenv()

    try:
        config = load_bridge_config()
    except ConfigError as e:
        log.error(str(e))
        return 1

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    stop_event = asyncio.Event()
    _install_signal_handlers(loop, stop_event)

    try:
        loop.run_until_complete(main(stop_event, config))
        return 0

    except Exception as e:
        log.error(f"IslandBridge terminated: {e!r}")
        return 1

    finally:
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            asyncio.set_event_loop(None)
            loop.close()


if __name__ == "__main__":
    sys.exit(run())
