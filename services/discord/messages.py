from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Union


@dataclass(frozen=True)
class PlainMessage:
    """System message; Discord shows it under the webhook's own name."""

    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"content": self.content}


@dataclass(frozen=True)
class AttributedMessage:
    """Message posted under a player's name via the webhook username override."""

    username: str
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"username": self.username, "content": self.content}


OutboundMessage = Union[PlainMessage, AttributedMessage]


def plain_message(content: str) -> PlainMessage:
    return PlainMessage(content=content)


def player_message(username: str, content: str) -> AttributedMessage:
    return AttributedMessage(username=username, content=content)


__all__ = [
    "AttributedMessage",
    "OutboundMessage",
    "PlainMessage",
    "plain_message",
    "player_message",
]
