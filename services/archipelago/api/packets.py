"""
Archipelago packet helpers.

Pure functions and lookup tables used by ArchipelagoClient to turn raw
server packets into session events. Nothing here touches the network.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from services.archipelago.models.events import Print, SessionPlayer
from shared.chat.rich_text import (
    ColorPart,
    EntranceNamePart,
    ItemRef,
    LocationRef,
    PlayerNamePart,
    PlayerRef,
    RichTextToken,
    TextPart,
)
from shared.logging.logger import get_logger

log = get_logger("archipelago.packets")

# NetworkItem.flags bits
FLAG_PROGRESSION = 0b001
FLAG_USEFUL = 0b010
FLAG_TRAP = 0b100


class SessionDirectory:
    """
    Name tables for the connected room.

    Filled from the Connected packet (players, slot_info) and DataPackage
    (per-game item and location names). Lookups never fail; unknown ids fall
    back to a readable placeholder.
    """

    def __init__(self) -> None:
        self.team: int = 0
        self._players: Dict[int, SessionPlayer] = {}
        self._item_names: Dict[str, Dict[int, str]] = {}
        self._location_names: Dict[str, Dict[int, str]] = {}

    # ------------------------------------------------------------------ #

    def load_data_package(self, data: Dict[str, Any]) -> None:
        games = data.get("games") if isinstance(data, dict) else None
        if not isinstance(games, dict):
            return

        for game, package in games.items():
            if not isinstance(package, dict):
                continue
            items = package.get("item_name_to_id") or {}
            locations = package.get("location_name_to_id") or {}
            self._item_names[game] = {int(i): str(n) for n, i in items.items()}
            self._location_names[game] = {int(i): str(n) for n, i in locations.items()}

        log.debug(f"Data package loaded for {len(games)} game(s)")

    def load_connected(self, packet: Dict[str, Any]) -> None:
        self.team = int(packet.get("team", 0))
        slot_info = packet.get("slot_info") or {}

        players: Dict[int, SessionPlayer] = {}
        for entry in packet.get("players") or []:
            if not isinstance(entry, dict) or int(entry.get("team", 0)) != self.team:
                continue
            slot = int(entry.get("slot", 0))
            info = slot_info.get(str(slot)) or {}
            players[slot] = SessionPlayer(
                team=self.team,
                slot=slot,
                name=str(entry.get("name", "")),
                alias=str(entry.get("alias", "")),
                game=str(info.get("game", "")),
            )

        # Slot 0 is the server itself
        players.setdefault(0, SessionPlayer(team=self.team, slot=0, name="Server", game="Archipelago"))
        self._players = players

    # ------------------------------------------------------------------ #

    def player(self, slot: int) -> SessionPlayer:
        found = self._players.get(slot)
        if found is not None:
            return found
        return SessionPlayer(team=self.team, slot=slot, name=f"Player {slot}")

    def item_name(self, item_id: int, slot: int) -> str:
        game = self.player(slot).game
        return self._item_names.get(game, {}).get(item_id, f"Unknown item (ID: {item_id})")

    def location_name(self, location_id: int, slot: int) -> str:
        game = self.player(slot).game
        return self._location_names.get(game, {}).get(
            location_id, f"Unknown location (ID: {location_id})"
        )


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_message_part(part: Dict[str, Any], directory: SessionDirectory) -> RichTextToken:
    kind = part.get("type") or "text"
    text = str(part.get("text", ""))

    if kind == "player_id":
        player = directory.player(_as_int(text))
        return PlayerRef(slot=player.slot, name=player.display_name)

    if kind == "item_id":
        owner = _as_int(part.get("player"))
        flags = _as_int(part.get("flags"))
        return ItemRef(
            name=directory.item_name(_as_int(text), owner),
            player=owner,
            progression=bool(flags & FLAG_PROGRESSION),
            useful=bool(flags & FLAG_USEFUL),
            trap=bool(flags & FLAG_TRAP),
        )

    if kind == "item_name":
        flags = _as_int(part.get("flags"))
        return ItemRef(
            name=text,
            player=_as_int(part.get("player")),
            progression=bool(flags & FLAG_PROGRESSION),
            useful=bool(flags & FLAG_USEFUL),
            trap=bool(flags & FLAG_TRAP),
        )

    if kind == "location_id":
        owner = _as_int(part.get("player"))
        return LocationRef(name=directory.location_name(_as_int(text), owner), player=owner)

    if kind == "location_name":
        return LocationRef(name=text, player=_as_int(part.get("player")))

    if kind == "player_name":
        return PlayerNamePart(text=text)

    if kind == "entrance_name":
        return EntranceNamePart(text=text)

    if kind == "color":
        return ColorPart(text=text, color=str(part.get("color", "")))

    # "text", "hint_status" and part types newer than this client
    return TextPart(text=text)


def parse_print_json(packet: Dict[str, Any], directory: SessionDirectory) -> Print:
    kind = str(packet.get("type") or "")
    parts = packet.get("data") or []
    tokens: List[RichTextToken] = [
        parse_message_part(part, directory) for part in parts if isinstance(part, dict)
    ]

    player: Optional[SessionPlayer] = None
    if kind == "Chat":
        player = directory.player(_as_int(packet.get("slot")))

    message = packet.get("message")
    return Print(
        kind=kind,
        data=tokens,
        player=player,
        message=str(message) if message is not None else None,
    )


__all__ = [
    "FLAG_PROGRESSION",
    "FLAG_TRAP",
    "FLAG_USEFUL",
    "SessionDirectory",
    "parse_message_part",
    "parse_print_json",
]
