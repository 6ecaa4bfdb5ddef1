"""
Query functions for deciders and the console.
These functions report what a player may legally do without mutating the session.
"""

from dataclasses import dataclass

from citadels.engine import CITY_LIMIT, HAND_LIMIT
from citadels.engine.definitions import DistrictCard, Role
from citadels.engine.effects import destruction_cost, is_protected_from_destruction
from citadels.engine.state import GameSession, Player

# Resource choices
GOLD = "gold"
CARDS = "cards"


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    error: str | None = None


@dataclass(frozen=True)
class DestructionOption:
    """One district the Warlord may destroy, with its price."""
    target: str
    card: DistrictCard
    cost: int


# ===== Roles =====

def assassination_candidates() -> list[Role]:
    """Any role but the Assassin itself, whether or not someone holds it."""
    return [r for r in Role if r.rank >= 2]


def theft_candidates(session: GameSession) -> list[Role]:
    """
    Ranks 2-8; the Assassin cannot be robbed. Naming the assassinated role is allowed,
    but its turn is skipped so the robbery never happens.
    """
    return [r for r in Role if r.rank >= 2]


def is_bishop_protected(session: GameSession, owner: Player) -> bool:
    """A living Bishop's city is safe from the Warlord."""
    return (
        session.role_of(owner.name) == Role.BISHOP
        and session.round_state.assassinated != Role.BISHOP
    )


# ===== Warlord =====

def destruction_options(session: GameSession, warlord: Player) -> list[DestructionOption]:
    """
    Districts the Warlord can destroy right now: other players' cities, no Keep,
    no living Bishop, and a cost the Warlord can pay (0 <= cost <= gold).
    """
    options: list[DestructionOption] = []
    for owner in session.others(warlord.name):
        if is_bishop_protected(session, owner):
            continue
        for card in owner.city:
            if is_protected_from_destruction(card):
                continue
            cost = destruction_cost(card, owner)
            if 0 <= cost <= warlord.gold:
                options.append(DestructionOption(owner.name, card, cost))
    return options


# ===== Building =====

def validate_build(player: Player, index: int, city_limit: int = CITY_LIMIT) -> ValidationResult:
    """Check whether the hand card at index can be built, without building it."""
    if index < 0 or index >= len(player.hand):
        return ValidationResult(False, "Invalid card index.")
    card = player.hand[index]
    if player.has_district(card.name):
        return ValidationResult(False, f"You already have a {card.name} in your city.")
    if len(player.city) >= city_limit:
        return ValidationResult(False, "Your city is full.")
    if not player.can_afford(card):
        return ValidationResult(
            False, f"Not enough gold to build {card.name}. (Cost: {card.cost}, you have: {player.gold})"
        )
    return ValidationResult(True)


def buildable_indices(player: Player) -> list[int]:
    return [i for i in range(len(player.hand)) if validate_build(player, i).valid]


# ===== Resources =====

def resource_options(session: GameSession, player: Player) -> list[str]:
    """Gold is always available. Cards need room in the hand and at least one card in the deck."""
    options = [GOLD]
    if len(player.hand) < HAND_LIMIT and not session.deck.is_empty():
        options.append(CARDS)
    return options

