"""Shared fixtures for IslandBridge tests.

- Console-only logging (no per-run log files under ./logs)
- A recording httpx transport standing in for the Discord webhook
- A scripted session standing in for the Archipelago client
"""

import json
import os
import time
from typing import Iterable, List, Optional

os.environ["ISLANDBRIDGE_LOG_DIR"] = ""

import httpx  # noqa: E402
import pytest  # noqa: E402

from services.archipelago.models.events import CONNECTED, ConnectionState  # noqa: E402

WEBHOOK_URL = "https://discord.test/api/webhooks/1/token"


class RecordingWebhook:
    """Answers queued responses in order, then 204 forever."""

    def __init__(self, responses: Optional[Iterable[httpx.Response]] = None):
        self.responses: List[httpx.Response] = list(responses or [])
        self.requests: List[httpx.Request] = []
        self.timestamps: List[float] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.timestamps.append(time.monotonic())
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(204)

    @property
    def payloads(self) -> List[dict]:
        return [json.loads(r.content) for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class ScriptedSession:
    """poll() returns one scripted batch per call; state follows the script."""

    def __init__(self, batches, states=None):
        self.batches = list(batches)
        self.states = list(states or [])
        self._state: ConnectionState = CONNECTED
        self.polls = 0
        self.started = False
        self.closed = False

    async def start(self):
        self.started = True

    async def close(self):
        self.closed = True

    @property
    def state(self) -> ConnectionState:
        return self._state

    def poll(self):
        self.polls += 1
        if self.states:
            self._state = self.states.pop(0)
        if self.batches:
            return self.batches.pop(0)
        return []


@pytest.fixture
def webhook_recorder() -> RecordingWebhook:
    return RecordingWebhook()
