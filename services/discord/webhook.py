from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Optional

import httpx

from services.discord.messages import OutboundMessage
from shared.logging.logger import get_logger

log = get_logger("discord.webhook")

RATE_LIMITED = 429

# Used only when a 429 arrives without a usable retry_after value.
FALLBACK_RETRY_AFTER = 1.0


@dataclass(frozen=True)
class RateLimitSignal:
    retry_after: float

    @classmethod
    def from_response(cls, response: httpx.Response) -> "RateLimitSignal":
        try:
            body = response.json()
            return cls(retry_after=float(body["retry_after"]))
        except (ValueError, KeyError, TypeError):
            pass

        header = response.headers.get("Retry-After")
        try:
            return cls(retry_after=float(header))
        except (TypeError, ValueError):
            log.warning(
                "Rate limit response carried no retry_after; "
                f"waiting {FALLBACK_RETRY_AFTER}s"
            )
            return cls(retry_after=FALLBACK_RETRY_AFTER)


class DiscordWebhookClient:
    """
    Posts OutboundMessage values to a single Discord webhook.

    - A 429 is retried with the same payload after the signalled delay,
      for as long as the destination keeps answering 429.
    - Any other status ends delivery of that message.
    - Transport errors (connect, timeout, protocol) propagate to the caller.
    """

    def __init__(
        self,
        webhook_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        if not webhook_url:
            raise RuntimeError("Discord webhook_url is required")

        self.webhook_url = webhook_url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

        self.requests_sent = 0
        self.rate_limited = 0

    # ------------------------------------------------------------------ #

    async def send(self, message: OutboundMessage) -> httpx.Response:
        body = json.dumps(message.to_payload())

        while True:
            response = await self._client.post(
                self.webhook_url,
                headers={"Content-Type": "application/json"},
                content=body.encode("utf-8"),
            )
            self.requests_sent += 1

            if response.status_code != RATE_LIMITED:
                if response.is_error:
                    log.warning(
                        f"Webhook answered {response.status_code}; "
                        "message not retried"
                    )
                return response

            signal = RateLimitSignal.from_response(response)
            self.rate_limited += 1
            log.warning(f"Rate limited by Discord; retrying in {signal.retry_after}s")
            await asyncio.sleep(signal.retry_after)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["DiscordWebhookClient", "RateLimitSignal"]
