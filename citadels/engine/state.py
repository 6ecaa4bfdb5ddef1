"""
Game state representation.
Players, per-round state and the session that owns them.
Includes JSON serialization for save/load functionality.
"""

import json
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from citadels.config import HUMAN_PLAYER_NAME
from citadels.engine import CITY_LIMIT
from citadels.engine.deck import Deck
from citadels.engine.definitions import DistrictCard, Role


def _int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _cards_from_list(value: Any) -> list[DistrictCard]:
    """Parse a list of card dicts, skipping anything malformed."""
    if not isinstance(value, list):
        return []
    cards = []
    for item in value:
        try:
            cards.append(DistrictCard.from_dict(item))
        except ValueError:
            continue
    return cards


class Phase(str, Enum):
    SELECTION = "selection"
    TURN = "turn"
    ROUND_END = "round_end"


@dataclass
class Player:
    """A seat at the table: gold, hand, built city and Museum-banked cards."""
    name: str
    gold: int = 0
    hand: list[DistrictCard] = field(default_factory=list)
    city: list[DistrictCard] = field(default_factory=list)
    banked_cards: list[DistrictCard] = field(default_factory=list)
    is_human: bool = False

    def add_gold(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot add negative gold ({amount}); use spend_gold")
        self.gold += amount

    def spend_gold(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot spend negative gold ({amount})")
        if amount > self.gold:
            raise ValueError(f"Not enough gold: have {self.gold}, need {amount}")
        self.gold -= amount

    def take_all_gold(self) -> int:
        """Empty the treasury and return what was in it."""
        taken = self.gold
        self.gold = 0
        return taken

    def draw_card(self, card: DistrictCard | None) -> bool:
        """Add a card to the hand. A None card (empty deck) is ignored."""
        if card is None:
            return False
        self.hand.append(card)
        return True

    def has_district(self, name: str) -> bool:
        return any(d.is_named(name) for d in self.city)

    def can_afford(self, card: DistrictCard) -> bool:
        return card.cost <= self.gold

    def affordable_districts(self) -> list[DistrictCard]:
        return [c for c in self.hand if self.can_afford(c)]

    def can_build(self, card: DistrictCard, city_limit: int = CITY_LIMIT) -> bool:
        return (
            len(self.city) < city_limit
            and self.can_afford(card)
            and not self.has_district(card.name)
        )

    def build_district(self, index: int, city_limit: int = CITY_LIMIT) -> DistrictCard:
        """
        Build the hand card at index into the city, paying its cost.

        Raises:
            ValueError: bad index, duplicate district, full city or not enough gold.
        """
        if index < 0 or index >= len(self.hand):
            raise ValueError("Invalid card index.")
        card = self.hand[index]
        if self.has_district(card.name):
            raise ValueError(f"You already have a {card.name} in your city.")
        if len(self.city) >= city_limit:
            raise ValueError("Your city is full.")
        if not self.can_afford(card):
            raise ValueError(
                f"Not enough gold to build {card.name}. (Cost: {card.cost}, you have: {self.gold})"
            )
        self.spend_gold(card.cost)
        self.hand.pop(index)
        self.city.append(card)
        return card

    def remove_district(self, card: DistrictCard) -> None:
        self.city.remove(card)

    def bank_card(self, card: DistrictCard) -> None:
        self.banked_cards.append(card)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "gold": self.gold,
            "hand": [c.to_dict() for c in self.hand],
            "city": [c.to_dict() for c in self.city],
            "banked": [c.to_dict() for c in self.banked_cards],
            "human": self.is_human,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        """Raises ValueError when the entry has no name; every other field defaults."""
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise ValueError("Player entry needs a name")
        name = data["name"]
        human = data.get("human")
        if not isinstance(human, bool):
            human = name == HUMAN_PLAYER_NAME
        return cls(
            name=name,
            gold=max(0, _int(data.get("gold"), 0)),
            hand=_cards_from_list(data.get("hand")),
            city=_cards_from_list(data.get("city")),
            banked_cards=_cards_from_list(data.get("banked")),
            is_human=human,
        )


@dataclass
class RoundState:
    """State that lives for one round: the draft result and the ability markers."""
    phase: Phase = Phase.SELECTION
    in_progress: bool = False
    # player name -> role picked this round (values unique)
    role_assignment: dict[str, Role] = field(default_factory=dict)
    face_up_discards: list[Role] = field(default_factory=list)
    mystery_discard: Role | None = None
    # Roles left in the draft pool after every player has picked
    undrafted: list[Role] = field(default_factory=list)
    assassinated: Role | None = None
    robbed: Role | None = None
    # Names of players who used their Laboratory this round
    laboratory_used: set[str] = field(default_factory=set)
    current_player: str | None = None
    current_role: Role | None = None

    def reset(self) -> None:
        """Clear everything a new round starts without. Phase is left to the caller."""
        self.role_assignment.clear()
        self.face_up_discards.clear()
        self.mystery_discard = None
        self.undrafted.clear()
        self.assassinated = None
        self.robbed = None
        self.laboratory_used.clear()
        self.current_player = None
        self.current_role = None

    def holder_of(self, role: Role) -> str | None:
        for name, assigned in self.role_assignment.items():
            if assigned == role:
                return name
        return None


@dataclass
class GameSession:
    """Complete game state, owned by the caller and passed into engine functions."""
    players: list[Player]
    deck: Deck[DistrictCard] = field(default_factory=Deck)
    crown_index: int = 0
    round_state: RoundState = field(default_factory=RoundState)
    round_number: int = 0
    # Name of the first player whose city reached CITY_LIMIT
    first_completed: str | None = None
    game_over: bool = False
    outcome: Any = None  # scoring.GameOutcome once the game has ended
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    @property
    def phase(self) -> Phase:
        return self.round_state.phase

    @property
    def crowned_player(self) -> Player:
        return self.players[self.crown_index]

    def player(self, name: str) -> Player:
        for p in self.players:
            if p.name == name:
                return p
        raise ValueError(f"Unknown player: {name}")

    def index_of(self, name: str) -> int:
        for i, p in enumerate(self.players):
            if p.name == name:
                return i
        raise ValueError(f"Unknown player: {name}")

    def role_of(self, name: str) -> Role | None:
        return self.round_state.role_assignment.get(name)

    def holder_of(self, role: Role) -> Player | None:
        name = self.round_state.holder_of(role)
        return self.player(name) if name is not None else None

    def others(self, name: str) -> list[Player]:
        return [p for p in self.players if p.name != name]

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Snapshot for JSON serialization. Round internals beyond the draft result are not kept."""
        rs = self.round_state
        return {
            "crown_index": self.crown_index,
            "characters": {name: role.display_name for name, role in rs.role_assignment.items()},
            "players": [p.to_dict() for p in self.players],
            "deck": [c.to_dict() for c in self.deck],
            "mystery_discard": rs.mystery_discard.display_name if rs.mystery_discard else None,
            "round_number": self.round_number,
            "first_completed": self.first_completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], rng: random.Random | None = None) -> "GameSession":
        """
        Create a session from a snapshot dict. Missing or ill-typed fields default:
        no deck means an empty deck, unknown role names and malformed cards are dropped.
        Legacy keys "crown" and "mysteryDiscard" are accepted.
        The restored session is between rounds (ROUND_END, no round in progress).
        """
        if not isinstance(data, dict):
            data = {}

        players = players_from_dict(data)

        crown = _int(data.get("crown_index", data.get("crown")), 0)
        if not 0 <= crown < max(len(players), 1):
            crown = 0

        round_state = RoundState(phase=Phase.ROUND_END)
        names = {p.name for p in players}
        characters = data.get("characters")
        if isinstance(characters, dict):
            taken: set[Role] = set()
            for pname, rname in characters.items():
                role = Role.from_name(rname)
                if pname in names and role is not None and role not in taken:
                    round_state.role_assignment[pname] = role
                    taken.add(role)
        round_state.mystery_discard = Role.from_name(
            data.get("mystery_discard", data.get("mysteryDiscard"))
        )

        first_completed = data.get("first_completed")
        if first_completed not in names:
            first_completed = None

        return cls(
            players=players,
            deck=Deck(_cards_from_list(data.get("deck"))),
            crown_index=crown,
            round_state=round_state,
            round_number=max(0, _int(data.get("round_number"), 0)),
            first_completed=first_completed,
            rng=rng or random.Random(),
        )

    def to_json(self, indent: int = 2) -> str:
        """Serialize the session to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str, rng: random.Random | None = None) -> "GameSession":
        """Deserialize a session from a JSON string."""
        return cls.from_dict(json.loads(json_str), rng=rng)

    def save(self, filepath: str) -> None:
        """Save the session to a JSON file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.to_json())

    @classmethod
    def load(cls, filepath: str, rng: random.Random | None = None) -> "GameSession":
        """Load a session from a JSON file."""
        with open(filepath, "r", encoding="utf-8") as f:
            return cls.from_json(f.read(), rng=rng)


def players_to_dict(players: list[Player]) -> dict[str, Any]:
    """Players-only snapshot: {"players": [...]}."""
    return {"players": [p.to_dict() for p in players]}


def players_from_dict(data: dict[str, Any]) -> list[Player]:
    """Parse the "players" list of a snapshot, skipping unnamed or duplicate entries."""
    if not isinstance(data, dict):
        return []
    raw = data.get("players")
    if not isinstance(raw, list):
        return []
    players: list[Player] = []
    seen: set[str] = set()
    for entry in raw:
        try:
            player = Player.from_dict(entry)
        except ValueError:
            continue
        if player.name in seen:
            continue
        seen.add(player.name)
        players.append(player)
    return players
