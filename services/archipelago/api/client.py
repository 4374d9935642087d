"""Archipelago session client (text-only tracker slot)."""

from __future__ import annotations

import asyncio
import json
import uuid
from typing import Any, Dict, Iterable, List, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from runtime.version import PROTOCOL_VERSION
from services.archipelago.api.packets import SessionDirectory, parse_print_json
from services.archipelago.models.events import (
    CONNECTED,
    CONNECTING,
    Connected,
    ConnectionState,
    Disconnected,
    SessionError,
    SessionEvent,
    disconnected,
)
from shared.chat.rich_text import plain_text
from shared.logging.logger import get_logger

log = get_logger("archipelago.client")

DEFAULT_PORT = 38281
DEFAULT_TAGS = ("TextOnly", "TeamTracker", "IslandBridge")


def candidate_uris(url: str) -> List[str]:
    """
    Expand a user-supplied server address into websocket URIs to try.

    "host:port" tries wss:// first and falls back to ws://, the way the
    reference Archipelago clients do. A missing port means 38281.
    """
    url = url.strip()
    if "://" in url:
        schemes = [url.split("://", 1)[0]]
        address = url.split("://", 1)[1]
    else:
        schemes = ["wss", "ws"]
        address = url

    netloc, _, path = address.partition("/")
    path = path.rstrip("/")
    host = netloc.rsplit("]", 1)[-1]
    if ":" not in host:
        netloc = f"{netloc}:{DEFAULT_PORT}"

    suffix = f"/{path}" if path else ""
    return [f"{scheme}://{netloc}{suffix}" for scheme in schemes]


class ArchipelagoClient:
    """
    Minimal Archipelago client for a text-only slot.

    - start() spawns a reader task; the caller never awaits network I/O
      through this object afterwards.
    - poll() returns every event buffered since the previous call.
    - state reflects the connection lifecycle; once DISCONNECTED it stays
      there (no reconnect).
    """

    def __init__(
        self,
        url: str,
        slot: str,
        *,
        password: Optional[str] = None,
        tags: Iterable[str] = DEFAULT_TAGS,
        connect=websockets.connect,
    ):
        if not url:
            raise RuntimeError("Archipelago url is required")
        if not slot:
            raise RuntimeError("Archipelago slot is required")

        self.url = url
        self.slot = slot
        self.password = password
        self.tags = list(tags)
        self.directory = SessionDirectory()

        self._connect = connect
        self._ws = None
        self._task: Optional[asyncio.Task] = None
        self._events: List[SessionEvent] = []
        self._state: ConnectionState = CONNECTING

    # ------------------------------------------------------------------ #
    # Public surface
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> ConnectionState:
        return self._state

    def poll(self) -> List[SessionEvent]:
        events, self._events = self._events, []
        return events

    async def start(self) -> None:
        if self._task is not None:
            log.debug("ArchipelagoClient already started")
            return
        self._task = asyncio.create_task(self._run())

    async def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        if self._ws is not None:
            try:
                await self._ws.close()
            except Exception as e:
                log.debug(f"Error during Archipelago close ignored: {e}")
            self._ws = None

        if not self._state.disconnected:
            self._state = disconnected("client closed")

    # ------------------------------------------------------------------ #
    # Connection lifecycle
    # ------------------------------------------------------------------ #

    async def _open(self):
        last_error: Optional[BaseException] = None
        for uri in candidate_uris(self.url):
            log.info(f"Connecting to Archipelago at {uri} as slot={self.slot}")
            try:
                return await self._connect(uri, max_size=None, ping_interval=30)
            except (OSError, WebSocketException, asyncio.TimeoutError) as e:
                log.warning(f"Archipelago connection to {uri} failed: {e}")
                last_error = e
        raise ConnectionError(f"could not reach {self.url}: {last_error}")

    async def _run(self) -> None:
        try:
            self._ws = await self._open()
            async for frame in self._ws:
                await self._handle_frame(frame)
            self._disconnect("connection closed by server")

        except asyncio.CancelledError:
            raise
        except ConnectionClosed as e:
            self._disconnect(f"connection closed: {e}")
        except ConnectionError as e:
            self._disconnect(str(e))
        except Exception as e:
            log.exception("Archipelago reader failed")
            self._disconnect(f"{type(e).__name__}: {e}")

    def _disconnect(self, reason: str) -> None:
        if self._state.disconnected:
            return
        log.warning(f"Archipelago disconnected: {reason}")
        self._state = disconnected(reason)
        self._events.append(Disconnected(reason=reason))

    async def _send(self, *packets: Dict[str, Any]) -> None:
        await self._ws.send(json.dumps(list(packets)))

    # ------------------------------------------------------------------ #
    # Packet handling
    # ------------------------------------------------------------------ #

    async def _handle_frame(self, frame) -> None:
        try:
            packets = json.loads(frame)
        except ValueError:
            self._events.append(SessionError(message="server sent malformed JSON"))
            return

        if isinstance(packets, dict):
            packets = [packets]

        for packet in packets:
            if isinstance(packet, dict):
                await self._handle_packet(packet)

    async def _handle_packet(self, packet: Dict[str, Any]) -> None:
        cmd = packet.get("cmd")

        if cmd == "RoomInfo":
            games = [g for g in packet.get("games") or [] if isinstance(g, str)]
            major, minor, build = PROTOCOL_VERSION
            await self._send(
                {"cmd": "GetDataPackage", "games": games},
                {
                    "cmd": "Connect",
                    "password": self.password,
                    "game": "",
                    "name": self.slot,
                    "uuid": uuid.uuid4().hex,
                    "version": {"major": major, "minor": minor, "build": build, "class": "Version"},
                    "items_handling": 0,
                    "tags": self.tags,
                    "slot_data": False,
                },
            )

        elif cmd == "DataPackage":
            self.directory.load_data_package(packet.get("data") or {})

        elif cmd == "Connected":
            self.directory.load_connected(packet)
            self._state = CONNECTED
            log.info(f"Connected to Archipelago as slot={self.slot}")
            self._events.append(
                Connected(slot=int(packet.get("slot", 0)), team=self.directory.team)
            )

        elif cmd == "ConnectionRefused":
            errors = packet.get("errors") or ["unknown reason"]
            self._disconnect("connection refused: " + ", ".join(str(e) for e in errors))
            await self._ws.close()

        elif cmd == "PrintJSON":
            event = parse_print_json(packet, self.directory)
            log.debug(f"PrintJSON [{event.kind or 'plain'}] {plain_text(event.data)}")
            self._events.append(event)

        elif cmd == "InvalidPacket":
            self._events.append(
                SessionError(
                    message=f"invalid packet ({packet.get('type')}): {packet.get('text', '')}"
                )
            )


__all__ = ["ArchipelagoClient", "DEFAULT_PORT", "DEFAULT_TAGS", "candidate_uris"]
