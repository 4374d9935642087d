from __future__ import annotations

from shared.chat.rich_text import (
    ColorPart,
    EntranceNamePart,
    ItemRef,
    LocationRef,
    PlayerNamePart,
    PlayerRef,
    RichText,
    RichTextToken,
    TextPart,
)

# Discord "subtext" line prefix: renders the line small and muted.
FOOTNOTE = "-# "


def footnote(text: str) -> str:
    return f"{FOOTNOTE}{text}"


def bold(text: str) -> str:
    return f"**{text}**"


def italic(text: str) -> str:
    return f"*{text}*"


def underline(text: str) -> str:
    return f"__{text}__"


def strikethrough(text: str) -> str:
    return f"~~{text}~~"


def render_item(item: ItemRef) -> str:
    """
    Bold item name wrapped by its flags.

    Nesting is fixed: useful (italic) inside progression (underline) inside
    trap (strikethrough).
    """
    text = bold(item.name)
    if item.useful:
        text = italic(text)
    if item.progression:
        text = underline(text)
    if item.trap:
        text = strikethrough(text)
    return text


def render_token(token: RichTextToken) -> str:
    if isinstance(token, TextPart):
        return token.text
    if isinstance(token, ItemRef):
        return render_item(token)
    if isinstance(token, (PlayerRef, LocationRef)):
        return bold(token.name)
    # Color is dropped; Discord message content has no colored text.
    if isinstance(token, (PlayerNamePart, EntranceNamePart, ColorPart)):
        return bold(token.text)
    raise TypeError(f"Unsupported rich text token: {token!r}")


def render_rich_text(tokens: RichText) -> str:
    """Render a rich-text line as a single muted Discord message."""
    return FOOTNOTE + "".join(render_token(token) for token in tokens)


__all__ = [
    "FOOTNOTE",
    "bold",
    "footnote",
    "italic",
    "render_item",
    "render_rich_text",
    "render_token",
    "strikethrough",
    "underline",
]
