from __future__ import annotations

from typing import Optional

from services.archipelago.models.events import (
    Connected,
    Disconnected,
    Print,
    SessionError,
    SessionEvent,
)
from services.discord.markup import footnote, render_rich_text
from services.discord.messages import OutboundMessage, plain_message, player_message
from shared.logging.logger import get_logger

log = get_logger("archipelago.translator")

# Minecraft Fabric players chat through a bridge mod that prefixes every
# line with "<prefix> name> ".
BRIDGED_CHAT_GAME = "Minecraft Fabric"
BRIDGED_CHAT_SEPARATOR = "> "

COMMAND_PREFIX = "!"

RICH_TEXT_KINDS = frozenset({
    "ItemSend",
    "ItemCheat",
    "Hint",
    "Join",
    "Part",
    "Goal",
    "Release",
    "Collect",
    "Countdown",
})

CONNECTED_TEXT = "Successfully connected!"
DISCONNECTED_PREFIX = "IslandBridge disconnected: "


def strip_bridged_prefix(game: str, text: str) -> str:
    if game != BRIDGED_CHAT_GAME:
        return text
    _, separator, rest = text.partition(BRIDGED_CHAT_SEPARATOR)
    return rest if separator else text


def format_chat(game: str, text: str) -> str:
    text = strip_bridged_prefix(game, text)
    if text.startswith(COMMAND_PREFIX):
        return footnote(text)
    return text


def disconnected_message(reason: str) -> OutboundMessage:
    return plain_message(DISCONNECTED_PREFIX + reason)


class EventTranslator:
    """
    Maps one session event to at most one outbound Discord message.

    After a Disconnected event has been translated, ``should_stop`` is set
    and ``stop_reason`` holds its reason, so the relay loop ends once the
    final message is enqueued.
    """

    def __init__(self):
        self.should_stop = False
        self.stop_reason: Optional[str] = None

    def translate(self, event: SessionEvent) -> Optional[OutboundMessage]:
        if isinstance(event, Connected):
            return plain_message(footnote(CONNECTED_TEXT))

        if isinstance(event, Print):
            return self._translate_print(event)

        if isinstance(event, SessionError):
            log.error(f"Error: {event.message}")
            return None

        if isinstance(event, Disconnected):
            self.should_stop = True
            self.stop_reason = event.reason
            return disconnected_message(event.reason)

        return None

    def _translate_print(self, event: Print) -> Optional[OutboundMessage]:
        if event.kind == "Chat" and event.player is not None:
            text = format_chat(event.player.game, event.message or "")
            return player_message(event.player.display_name, text)

        if event.kind == "ServerChat":
            return plain_message(event.message or "")

        if event.kind in RICH_TEXT_KINDS:
            return plain_message(render_rich_text(event.data))

        return None


__all__ = [
    "BRIDGED_CHAT_GAME",
    "EventTranslator",
    "RICH_TEXT_KINDS",
    "disconnected_message",
    "format_chat",
    "strip_bridged_prefix",
]
