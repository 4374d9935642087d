"""Rich-text tokens carried by multiworld session print events.

A rich-text line is an ordered sequence of these tokens. The set of token
shapes is closed; renderers match on the concrete class.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class PlayerRef:
    """A resolved reference to a player slot."""

    slot: int
    name: str


@dataclass(frozen=True)
class ItemRef:
    """An item owned by ``player``, with its classification flags."""

    name: str
    player: int
    progression: bool = False
    useful: bool = False
    trap: bool = False


@dataclass(frozen=True)
class LocationRef:
    name: str
    player: int


@dataclass(frozen=True)
class PlayerNamePart:
    text: str


@dataclass(frozen=True)
class EntranceNamePart:
    text: str


@dataclass(frozen=True)
class ColorPart:
    text: str
    color: str


RichTextToken = Union[
    TextPart,
    PlayerRef,
    ItemRef,
    LocationRef,
    PlayerNamePart,
    EntranceNamePart,
    ColorPart,
]

RichText = Sequence[RichTextToken]


def plain_text(tokens: RichText) -> str:
    """Concatenate the visible text of ``tokens`` without any markup."""
    parts = []
    for token in tokens:
        if isinstance(token, (PlayerRef, ItemRef, LocationRef)):
            parts.append(token.name)
        else:
            parts.append(token.text)
    return "".join(parts)


__all__ = [
    "ColorPart",
    "EntranceNamePart",
    "ItemRef",
    "LocationRef",
    "PlayerNamePart",
    "PlayerRef",
    "RichText",
    "RichTextToken",
    "TextPart",
    "plain_text",
]
