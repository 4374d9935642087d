from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from shared.chat.rich_text import RichTextToken


class ConnectionStatus(Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class ConnectionState:
    status: ConnectionStatus
    reason: Optional[str] = None

    @property
    def disconnected(self) -> bool:
        return self.status == ConnectionStatus.DISCONNECTED


CONNECTING = ConnectionState(ConnectionStatus.CONNECTING)
CONNECTED = ConnectionState(ConnectionStatus.CONNECTED)


def disconnected(reason: str) -> ConnectionState:
    return ConnectionState(ConnectionStatus.DISCONNECTED, reason)


@dataclass(frozen=True)
class SessionPlayer:
    team: int
    slot: int
    name: str
    alias: str = ""
    game: str = ""

    @property
    def display_name(self) -> str:
        return self.alias or self.name


# ---------------------------------------------------------------------- #
# Events returned by ArchipelagoClient.poll()
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class Connected:
    slot: int = 0
    team: int = 0


@dataclass(frozen=True)
class Disconnected:
    reason: str


@dataclass(frozen=True)
class SessionError:
    message: str


@dataclass(frozen=True)
class Print:
    """
    A PrintJSON packet.

    ``kind`` is the packet's ``type`` field ("ItemSend", "Chat", ...); an
    untyped packet has kind "". Chat prints also carry the speaking
    ``player`` and the raw ``message``.
    """

    kind: str
    data: List[RichTextToken] = field(default_factory=list)
    player: Optional[SessionPlayer] = None
    message: Optional[str] = None


SessionEvent = Union[Connected, Disconnected, SessionError, Print]


__all__ = [
    "CONNECTED",
    "CONNECTING",
    "Connected",
    "ConnectionState",
    "ConnectionStatus",
    "Disconnected",
    "Print",
    "SessionError",
    "SessionEvent",
    "SessionPlayer",
    "disconnected",
]
