"""Rich-text rendering into Discord markup."""

import itertools

import pytest

from services.discord.markup import FOOTNOTE, render_item, render_rich_text, render_token
from shared.chat.rich_text import (
    ColorPart,
    EntranceNamePart,
    ItemRef,
    LocationRef,
    PlayerNamePart,
    PlayerRef,
    TextPart,
)


def _expected_item(name, progression, useful, trap):
    text = f"**{name}**"
    if useful:
        text = f"*{text}*"
    if progression:
        text = f"__{text}__"
    if trap:
        text = f"~~{text}~~"
    return text


@pytest.mark.parametrize(
    "progression,useful,trap",
    list(itertools.product([False, True], repeat=3)),
)
def test_item_flag_nesting(progression, useful, trap):
    item = ItemRef(name="Hookshot", player=1, progression=progression, useful=useful, trap=trap)
    assert render_item(item) == _expected_item("Hookshot", progression, useful, trap)


def test_item_all_flags_exact_markers():
    item = ItemRef(name="Bomb", player=2, progression=True, useful=True, trap=True)
    assert render_item(item) == "~~__***Bomb***__~~"


def test_item_without_flags_is_bold_only():
    assert render_item(ItemRef(name="Rupee", player=1)) == "**Rupee**"


def test_render_rich_text_item_send_line():
    tokens = [
        PlayerRef(slot=1, name="Alice"),
        TextPart(text=" sent "),
        ItemRef(name="Master Sword", player=2, progression=True),
        TextPart(text=" to "),
        PlayerRef(slot=2, name="Bob"),
        TextPart(text=" ("),
        LocationRef(name="Link's House", player=1),
        TextPart(text=")"),
    ]
    assert render_rich_text(tokens) == (
        "-# **Alice** sent __**Master Sword**__ to **Bob** (**Link's House**)"
    )


def test_render_rich_text_empty_sequence_is_just_the_prefix():
    assert render_rich_text([]) == FOOTNOTE


def test_plain_text_is_not_bolded():
    assert render_token(TextPart(text="hello *world*")) == "hello *world*"


@pytest.mark.parametrize(
    "token",
    [
        PlayerNamePart(text="Carol"),
        EntranceNamePart(text="Carol"),
        ColorPart(text="Carol", color="green"),
    ],
)
def test_name_and_color_tokens_are_bold_raw_text(token):
    assert render_token(token) == "**Carol**"


def test_rendering_is_deterministic():
    tokens = [
        PlayerRef(slot=3, name="Dana"),
        TextPart(text=" found their "),
        ItemRef(name="Ice Trap", player=3, trap=True),
        TextPart(text=" at "),
        ColorPart(text="somewhere", color="red"),
    ]
    first = render_rich_text(tokens)
    assert all(render_rich_text(list(tokens)) == first for _ in range(5))


def test_unknown_token_is_a_programming_error():
    with pytest.raises(TypeError):
        render_token("not a token")
