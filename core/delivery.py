from __future__ import annotations

import asyncio
from typing import Dict, Optional, Protocol

from services.discord.messages import OutboundMessage
from shared.logging.logger import get_logger

log = get_logger("core.delivery")

# Backlog warnings fire each time pending crosses a multiple of this.
BACKLOG_WARN_STEP = 100

_CLOSED = object()


class QueueClosed(RuntimeError):
    """Raised when a message is enqueued after the producer side closed."""


class MessageSender(Protocol):
    async def send(self, message: OutboundMessage): ...


class DeliveryQueue:
    """
    Unbounded FIFO between the event translator and the delivery worker.

    Producers call put() from the main loop and never wait. close() marks
    end-of-stream; the consumer sees it only after every earlier message.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Messages waiting for delivery (excludes the end-of-stream marker)."""
        size = self._queue.qsize()
        return size - 1 if self._closed and size else size

    def put(self, message: OutboundMessage) -> None:
        if self._closed:
            raise QueueClosed("Delivery queue is closed")

        self._queue.put_nowait(message)

        pending = self.pending
        if pending and pending % BACKLOG_WARN_STEP == 0:
            log.warning(f"Delivery backlog at {pending} message(s)")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        log.debug("Delivery queue closed by producer")

    async def get(self) -> Optional[OutboundMessage]:
        """Next message in enqueue order, or None once closed and drained."""
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        return item


class DeliveryWorker:
    """
    Single consumer of the DeliveryQueue.

    Messages go out strictly one at a time; a message (including all of its
    rate-limit retries) finishes before the next one is dequeued.
    """

    def __init__(self, *, queue: DeliveryQueue, sender: MessageSender):
        self.queue = queue
        self.sender = sender

        # Observational only.
        self._metrics = {
            "delivered": 0,
        }

    def get_metrics(self) -> Dict[str, int]:
        metrics = dict(self._metrics)
        metrics["pending"] = self.queue.pending
        metrics["rate_limited"] = int(getattr(self.sender, "rate_limited", 0))
        return metrics

    # ------------------------------------------------------------------ #

    async def run(self) -> None:
        log.info("Delivery worker starting")

        try:
            while True:
                message = await self.queue.get()
                if message is None:
                    break

                await self.sender.send(message)
                self._metrics["delivered"] += 1

        except asyncio.CancelledError:
            log.debug("Delivery worker cancelled")
            raise
        except Exception as e:
            log.error(f"Delivery worker failed: {e!r}")
            raise

        log.info(f"Delivery worker drained ({self._metrics['delivered']} delivered)")


__all__ = [
    "BACKLOG_WARN_STEP",
    "DeliveryQueue",
    "DeliveryWorker",
    "MessageSender",
    "QueueClosed",
]
