from __future__ import annotations

import asyncio
from typing import List, Optional, Protocol

from core.delivery import DeliveryQueue
from services.archipelago.models.events import ConnectionState, SessionEvent
from services.archipelago.translator import EventTranslator, disconnected_message
from shared.logging.logger import get_logger

log = get_logger("core.relay")

SHUTDOWN_REASON = "shutdown requested"


class SessionSource(Protocol):
    @property
    def state(self) -> ConnectionState: ...

    def poll(self) -> List[SessionEvent]: ...


async def run_relay(
    session: SessionSource,
    queue: DeliveryQueue,
    translator: EventTranslator,
    *,
    poll_interval: float,
    stop_event: Optional[asyncio.Event] = None,
) -> str:
    """
    Poll the session every tick and enqueue translated messages.

    Returns the disconnect reason once the final "IslandBridge disconnected"
    message is queued. Never awaits delivery.
    """
    stop_event = stop_event or asyncio.Event()

    while True:
        for event in session.poll():
            message = translator.translate(event)
            if message is not None:
                queue.put(message)
            # Nothing may follow the final disconnect message
            if translator.should_stop:
                break

        if translator.should_stop:
            reason = translator.stop_reason or "disconnected"
            break

        state = session.state
        if state.disconnected:
            reason = state.reason or "disconnected"
            queue.put(disconnected_message(reason))
            break

        if stop_event.is_set():
            reason = SHUTDOWN_REASON
            queue.put(disconnected_message(reason))
            break

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=poll_interval)
        except asyncio.TimeoutError:
            pass

    log.info(f"Relay loop finished: {reason}")
    return reason


__all__ = ["SHUTDOWN_REASON", "SessionSource", "run_relay"]
