"""ArchipelagoClient against a scripted in-memory websocket."""

import asyncio
import json

import pytest

from services.archipelago.api.client import ArchipelagoClient
from services.archipelago.models.events import (
    Connected,
    ConnectionStatus,
    Disconnected,
    Print,
    SessionError,
)
from shared.chat.rich_text import ItemRef, PlayerRef


class FakeWebSocket:
    def __init__(self, frames):
        self._frames = asyncio.Queue()
        for frame in frames:
            self._frames.put_nowait(frame)
        self.sent = []
        self.closed = False

    def feed(self, frame):
        self._frames.put_nowait(frame)

    def end(self):
        self._frames.put_nowait(None)

    async def send(self, data):
        self.sent.extend(json.loads(data))

    async def close(self):
        self.closed = True
        self.end()

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self._frames.get()
        if frame is None:
            raise StopAsyncIteration
        return frame


def _frame(*packets):
    return json.dumps(list(packets))


ROOM_INFO = {"cmd": "RoomInfo", "games": ["A Link to the Past", "Archipelago"], "tags": []}
DATA_PACKAGE = {
    "cmd": "DataPackage",
    "data": {"games": {"A Link to the Past": {"item_name_to_id": {"Hookshot": 10}, "location_name_to_id": {}}}},
}
CONNECTED = {
    "cmd": "Connected",
    "team": 0,
    "slot": 2,
    "players": [{"team": 0, "slot": 1, "alias": "Alice", "name": "alice"}],
    "slot_info": {"1": {"name": "alice", "game": "A Link to the Past", "type": 1}},
}


async def _settle(client, predicate, timeout=1.0):
    async def wait():
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(wait(), timeout)


def _client_for(ws, **kwargs):
    uris = []

    async def connect(uri, **options):
        uris.append(uri)
        return ws

    client = ArchipelagoClient("localhost:38281", "Bridge", connect=connect, **kwargs)
    return client, uris


@pytest.mark.asyncio
async def test_handshake_and_print_events():
    ws = FakeWebSocket([_frame(ROOM_INFO), _frame(DATA_PACKAGE, CONNECTED)])
    client, uris = _client_for(ws, password="pw")
    assert client.state.status == ConnectionStatus.CONNECTING

    await client.start()
    await _settle(client, lambda: client.state.status == ConnectionStatus.CONNECTED)

    assert uris == ["wss://localhost:38281"]
    get_data, connect = ws.sent
    assert get_data == {"cmd": "GetDataPackage", "games": ["A Link to the Past", "Archipelago"]}
    assert connect["cmd"] == "Connect"
    assert connect["name"] == "Bridge"
    assert connect["password"] == "pw"
    assert connect["game"] == ""
    assert connect["items_handling"] == 0
    assert connect["tags"] == ["TextOnly", "TeamTracker", "IslandBridge"]
    assert connect["version"]["class"] == "Version"

    ws.feed(_frame({
        "cmd": "PrintJSON",
        "type": "ItemSend",
        "data": [
            {"type": "player_id", "text": "1"},
            {"text": " found their "},
            {"type": "item_id", "text": "10", "player": 1, "flags": 1},
        ],
    }))
    ws.feed(_frame({"cmd": "InvalidPacket", "type": "cmd", "text": "bad"}))
    await _settle(client, lambda: len(client._events) >= 3)

    events = client.poll()
    assert events[0] == Connected(slot=2, team=0)
    assert isinstance(events[1], Print)
    assert events[1].data[0] == PlayerRef(slot=1, name="Alice")
    assert events[1].data[2] == ItemRef(name="Hookshot", player=1, progression=True)
    assert isinstance(events[2], SessionError)
    assert client.poll() == []

    await client.close()
    assert client.state.disconnected


@pytest.mark.asyncio
async def test_server_close_disconnects_with_event():
    ws = FakeWebSocket([_frame(ROOM_INFO), _frame(CONNECTED)])
    client, _ = _client_for(ws)
    await client.start()
    await _settle(client, lambda: client.state.status == ConnectionStatus.CONNECTED)

    ws.end()
    await _settle(client, lambda: client.state.disconnected)

    assert client.state.reason == "connection closed by server"
    assert client.poll()[-1] == Disconnected(reason="connection closed by server")


@pytest.mark.asyncio
async def test_connection_refused():
    ws = FakeWebSocket([_frame(ROOM_INFO), _frame({"cmd": "ConnectionRefused", "errors": ["InvalidSlot"]})])
    client, _ = _client_for(ws)
    await client.start()
    await _settle(client, lambda: client.state.disconnected)

    assert client.state.reason == "connection refused: InvalidSlot"
    assert ws.closed
    disconnects = [e for e in client.poll() if isinstance(e, Disconnected)]
    assert disconnects == [Disconnected(reason="connection refused: InvalidSlot")]


@pytest.mark.asyncio
async def test_unreachable_server_tries_both_schemes():
    attempts = []

    async def connect(uri, **options):
        attempts.append(uri)
        raise OSError("connection refused")

    client = ArchipelagoClient("localhost", "Bridge", connect=connect)
    await client.start()
    await _settle(client, lambda: client.state.disconnected)

    assert attempts == ["wss://localhost:38281", "ws://localhost:38281"]
    assert client.state.reason.startswith("could not reach localhost")
    assert isinstance(client.poll()[0], Disconnected)
