"""
Role and district effects.
Pure functions: effective colour, destruction protection and cost,
role income, end-game bonus, plus the per-round Laboratory tracker.
"""

from citadels.engine.definitions import (
    BLUE,
    DISTRICT_COLORS,
    DRAGON_GATE,
    DistrictCard,
    GREAT_WALL,
    GREEN,
    HAUNTED_CITY,
    KEEP,
    LABORATORY,
    MUSEUM,
    RED,
    Role,
    SCHOOL_OF_MAGIC,
    UNIVERSITY,
    YELLOW,
)
from citadels.engine.state import Player, RoundState


# Role -> colour that pays income for it
ROLE_INCOME_COLORS: dict[Role, str] = {
    Role.KING: YELLOW,
    Role.BISHOP: BLUE,
    Role.MERCHANT: GREEN,
    Role.WARLORD: RED,
}

# Flat gold a role gets regardless of its city
ROLE_FLAT_INCOME: dict[Role, int] = {
    Role.MERCHANT: 1,
}

RAINBOW_BONUS = 3
UNIVERSITY_BONUS = 2
DRAGON_GATE_BONUS = 2
MUSEUM_CARD_BONUS = 1


def effective_color(card: DistrictCard, role: Role | None) -> str:
    """Colour the card counts as for the given role's income. School of Magic takes the role's colour."""
    if role is not None and card.is_named(SCHOOL_OF_MAGIC) and role in ROLE_INCOME_COLORS:
        return ROLE_INCOME_COLORS[role]
    return card.color


def count_effective(player: Player, color: str, role: Role | None) -> int:
    return sum(1 for card in player.city if effective_color(card, role) == color)


def role_income(player: Player, role: Role) -> int:
    """Gold the role earns from the player's city this turn (0 for roles without income)."""
    income = ROLE_FLAT_INCOME.get(role, 0)
    color = ROLE_INCOME_COLORS.get(role)
    if color is not None:
        income += count_effective(player, color, role)
    return income


def is_protected_from_destruction(card: DistrictCard) -> bool:
    return card.is_named(KEEP)


def destruction_cost(card: DistrictCard, owner: Player) -> int:
    """
    Gold the Warlord pays to destroy card: cost - 1, plus 1 if the owner has a Great Wall.
    Not clamped, so a cost-0 district gives -1.
    """
    cost = card.cost - 1
    if owner.has_district(GREAT_WALL):
        cost += 1
    return cost


def has_rainbow(player: Player) -> bool:
    """All five colours in the city. Haunted City fills exactly one missing colour."""
    colors = {card.color for card in player.city if not card.is_named(HAUNTED_CITY)}
    if len(colors) == len(DISTRICT_COLORS):
        return True
    return player.has_district(HAUNTED_CITY) and len(colors) == len(DISTRICT_COLORS) - 1


def bonus_score(player: Player) -> int:
    bonus = 0
    if has_rainbow(player):
        bonus += RAINBOW_BONUS
    if player.has_district(UNIVERSITY):
        bonus += UNIVERSITY_BONUS
    if player.has_district(DRAGON_GATE):
        bonus += DRAGON_GATE_BONUS
    if player.has_district(MUSEUM):
        bonus += MUSEUM_CARD_BONUS * len(player.banked_cards)
    return bonus


# ===== Laboratory =====

def can_use_laboratory(round_state: RoundState, player: Player) -> bool:
    return (
        player.has_district(LABORATORY)
        and bool(player.hand)
        and player.name not in round_state.laboratory_used
    )


def mark_laboratory_used(round_state: RoundState, player: Player) -> None:
    round_state.laboratory_used.add(player.name)


def reset_laboratory(round_state: RoundState) -> None:
    round_state.laboratory_used.clear()
