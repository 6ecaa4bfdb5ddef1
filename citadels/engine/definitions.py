"""
Static definitions for characters and districts.
The district table lives in data/districts.tsv (header line, then
name, quantity, color, cost and optional ability, tab separated).
"""

import random
import sys
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, Iterable

from citadels.config import DEFAULT_DECK_FILE
from citadels.engine.deck import Deck


class Role(IntEnum):
    """The eight character roles. The value is the rank, which fixes turn order."""

    ASSASSIN = 1
    THIEF = 2
    MAGICIAN = 3
    KING = 4
    BISHOP = 5
    MERCHANT = 6
    ARCHITECT = 7
    WARLORD = 8

    @property
    def rank(self) -> int:
        return int(self)

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_name(cls, name: Any) -> "Role | None":
        """Case-insensitive lookup by display name ("king", "King"). None if unknown."""
        if not isinstance(name, str):
            return None
        key = name.strip().upper()
        return cls.__members__.get(key)

    @classmethod
    def from_rank(cls, rank: Any) -> "Role | None":
        try:
            return cls(int(rank))
        except (TypeError, ValueError):
            return None


ALL_ROLES: tuple[Role, ...] = tuple(Role)

YELLOW = "yellow"
BLUE = "blue"
GREEN = "green"
RED = "red"
PURPLE = "purple"
DISTRICT_COLORS = (YELLOW, BLUE, GREEN, RED, PURPLE)

# Purple districts with rule effects
KEEP = "Keep"
GREAT_WALL = "Great Wall"
SCHOOL_OF_MAGIC = "School of Magic"
HAUNTED_CITY = "Haunted City"
UNIVERSITY = "University"
DRAGON_GATE = "Dragon Gate"
MUSEUM = "Museum"
LABORATORY = "Laboratory"


@dataclass(frozen=True)
class DistrictCard:
    """A district card. Copies with the same name may coexist in the deck."""
    name: str
    color: str  # one of DISTRICT_COLORS
    cost: int
    ability: str | None = None  # purple districts only

    def __post_init__(self):
        color = str(self.color or "").strip().lower()
        if color not in DISTRICT_COLORS:
            raise ValueError(f"Unknown district color: {self.color!r}")
        object.__setattr__(self, "color", color)
        if not self.name or not str(self.name).strip():
            raise ValueError("District name must not be empty")
        if self.cost < 0:
            raise ValueError(f"District cost must be >= 0, got {self.cost}")
        if self.ability is not None and color != PURPLE:
            raise ValueError(f"Only purple districts carry ability text ({self.name} is {color})")

    @property
    def is_purple(self) -> bool:
        return self.color == PURPLE

    def is_named(self, name: str) -> bool:
        return self.name.lower() == name.lower()

    def __str__(self) -> str:
        text = f"{self.name} ({self.color}, Cost: {self.cost})"
        if self.ability and self.ability.strip():
            text += f" - {self.ability}"
        return text

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "color": self.color, "cost": self.cost}
        if self.ability:
            out["ability"] = self.ability
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DistrictCard":
        """Build a card from a dict. Raises ValueError when name, color or cost is unusable."""
        if not isinstance(data, dict):
            raise ValueError("District data must be a dict")
        name = data.get("name")
        color = data.get("color")
        cost = data.get("cost")
        if not isinstance(name, str) or not isinstance(color, str):
            raise ValueError(f"District needs a name and a color: {data!r}")
        if isinstance(cost, bool) or not isinstance(cost, (int, float)):
            raise ValueError(f"District cost must be a number: {data!r}")
        ability = data.get("ability")
        if not isinstance(ability, str) or color.strip().lower() != PURPLE:
            ability = None
        return cls(name=name, color=color, cost=int(cost), ability=ability)


# ===== Info texts =====

ROLE_INFO = {
    Role.ASSASSIN: "Assassin: Choose a character to assassinate. That player skips their turn.",
    Role.THIEF: "Thief: Choose a character to rob. You steal their gold.",
    Role.MAGICIAN: "Magician: Swap hands or discard your hand and draw the same number.",
    Role.KING: "King: Gains income from yellow districts and takes the crown.",
    Role.BISHOP: "Bishop: Gains income from blue districts. Warlord cannot destroy your city.",
    Role.MERCHANT: "Merchant: Gains one extra gold and income from green districts.",
    Role.ARCHITECT: "Architect: Draw 2 extra cards and may build up to 3 districts.",
    Role.WARLORD: "Warlord: May destroy one district (pay cost - 1). Gains income from red districts.",
}

DISTRICT_INFO = {
    "keep": "Keep: This district cannot be destroyed by the Warlord.",
    "great wall": "Great Wall: The Warlord pays 1 more to destroy your districts.",
    "laboratory": "Laboratory: Once per turn, discard a card to gain 1 gold.",
    "school of magic": "School of Magic: Counts as any color for income purposes.",
    "school": "School of Magic: Counts as any color for income purposes.",
    "haunted city": "Haunted City: Stands in for a missing color at the end of the game.",
    "university": "University: Worth 2 extra points at the end of the game.",
    "dragon gate": "Dragon Gate: Worth 2 extra points at the end of the game.",
    "museum": "Museum: Bank one card per turn; each banked card is worth 1 point at the end.",
}


def info_text(name: str) -> str | None:
    """Rules summary for a character or special district, or None."""
    role = Role.from_name(name)
    if role is not None:
        return ROLE_INFO[role]
    return DISTRICT_INFO.get(name.strip().lower())


# ===== Deck loading =====

def parse_district_table(lines: Iterable[str]) -> list[DistrictCard]:
    """
    Parse district table lines into cards, one card per unit of quantity.
    The first non-blank line is a header. Malformed rows are reported on stderr and skipped.
    """
    cards: list[DistrictCard] = []
    header_seen = False
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        if not header_seen:
            header_seen = True
            continue

        parts = line.split("\t")
        if len(parts) < 4:
            print(f"Skipping invalid line: {line}", file=sys.stderr)
            continue

        name = parts[0].strip()
        color = parts[2].strip().lower()
        ability = parts[4].strip() if len(parts) > 4 and parts[4].strip() else None
        try:
            quantity = int(parts[1].strip())
            cost = int(parts[3].strip())
        except ValueError:
            print(f"Skipping line with invalid numbers: {line}", file=sys.stderr)
            continue

        if not name or quantity < 1:
            print(f"Skipping line with empty name or invalid quantity: {line}", file=sys.stderr)
            continue
        if color != PURPLE:
            ability = None

        try:
            template = DistrictCard(name=name, color=color, cost=cost, ability=ability)
        except ValueError as e:
            print(f"Skipping line ({e}): {line}", file=sys.stderr)
            continue
        cards.extend(template for _ in range(quantity))
    return cards


def load_district_deck(
    path: Path | str | None = None,
    rng: random.Random | None = None,
) -> Deck[DistrictCard]:
    """
    Load the district table into a shuffled deck.

    Args:
        path: Table file. Defaults to config.DEFAULT_DECK_FILE.
        rng: Random source for the shuffle.

    Raises:
        FileNotFoundError: if the table file does not exist.
    """
    if path is None:
        path = DEFAULT_DECK_FILE
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"District table not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        cards = parse_district_table(f)

    deck = Deck(cards)
    deck.shuffle(rng)
    return deck
