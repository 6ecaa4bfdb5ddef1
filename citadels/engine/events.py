"""
Game events for narration.
Events describe what happened while a round was played; the engine emits
them into an EventLog and the console front end prints them.
"""

from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]


@dataclass
class EventLog:
    """Collects emitted events and forwards each one to an optional listener."""
    events: list[GameEvent] = field(default_factory=list)
    listener: Callable[[GameEvent], None] | None = None

    def emit(self, event: GameEvent) -> GameEvent:
        self.events.append(event)
        if self.listener is not None:
            self.listener(event)
        return event

    def of_type(self, event_type: str) -> list[GameEvent]:
        return [e for e in self.events if e.type == event_type]

    def types(self) -> list[str]:
        return [e.type for e in self.events]


# ===== Event Type Constants =====

# Round events
ROUND_STARTED = "round_started"
ROUND_REJECTED = "round_rejected"
ROUND_ENDED = "round_ended"

# Selection events
CHARACTER_DISCARDED = "character_discarded"
MYSTERY_DISCARDED = "mystery_discarded"
CHARACTER_CHOSEN = "character_chosen"

# Turn order events
ROLE_CALLED = "role_called"
ROLE_UNCLAIMED = "role_unclaimed"
TURN_SKIPPED = "turn_skipped"
TURN_ENDED = "turn_ended"

# Ability events
ASSASSINATION_DECLARED = "assassination_declared"
THEFT_DECLARED = "theft_declared"
PLAYER_ROBBED = "player_robbed"
HANDS_SWAPPED = "hands_swapped"
HAND_REDRAWN = "hand_redrawn"
CROWN_TRANSFERRED = "crown_transferred"
DISTRICT_DESTROYED = "district_destroyed"
LABORATORY_USED = "laboratory_used"
CARD_BANKED = "card_banked"

# Resource events
GOLD_COLLECTED = "gold_collected"
CARDS_DRAWN = "cards_drawn"
CARD_KEPT = "card_kept"
DECK_EXHAUSTED = "deck_exhausted"
INCOME_COLLECTED = "income_collected"

# Build events
DISTRICT_BUILT = "district_built"
BUILD_REJECTED = "build_rejected"
BUILD_FORFEITED = "build_forfeited"

# Victory events
GAME_OVER = "game_over"


# ===== Event Factory Functions =====

def round_started(round_number: int, crown_holder: str) -> GameEvent:
    return GameEvent(ROUND_STARTED, {
        "round_number": round_number,
        "crown_holder": crown_holder,
    })


def round_rejected(reason: str) -> GameEvent:
    return GameEvent(ROUND_REJECTED, {"reason": reason})


def round_ended(round_number: int) -> GameEvent:
    return GameEvent(ROUND_ENDED, {"round_number": round_number})


def character_discarded(role: str) -> GameEvent:
    return GameEvent(CHARACTER_DISCARDED, {"role": role})


def mystery_discarded() -> GameEvent:
    # The role itself stays hidden until the game ends
    return GameEvent(MYSTERY_DISCARDED, {})


def character_chosen(player: str, role: str, is_human: bool) -> GameEvent:
    return GameEvent(CHARACTER_CHOSEN, {
        "player": player,
        "role": role,
        "is_human": is_human,
    })


def role_called(rank: int, role: str) -> GameEvent:
    return GameEvent(ROLE_CALLED, {"rank": rank, "role": role})


def role_unclaimed(role: str) -> GameEvent:
    return GameEvent(ROLE_UNCLAIMED, {"role": role})


def turn_skipped(player: str, role: str, reason: str) -> GameEvent:
    return GameEvent(TURN_SKIPPED, {
        "player": player,
        "role": role,
        "reason": reason,
    })


def turn_ended(player: str, role: str) -> GameEvent:
    return GameEvent(TURN_ENDED, {"player": player, "role": role})


def assassination_declared(player: str, target_role: str) -> GameEvent:
    return GameEvent(ASSASSINATION_DECLARED, {
        "player": player,
        "target_role": target_role,
    })


def theft_declared(player: str, target_role: str) -> GameEvent:
    return GameEvent(THEFT_DECLARED, {
        "player": player,
        "target_role": target_role,
    })


def player_robbed(victim: str, thief: str, amount: int) -> GameEvent:
    return GameEvent(PLAYER_ROBBED, {
        "victim": victim,
        "thief": thief,
        "amount": amount,
    })


def hands_swapped(player: str, target: str, received: int, given: int) -> GameEvent:
    return GameEvent(HANDS_SWAPPED, {
        "player": player,
        "target": target,
        "received": received,
        "given": given,
    })


def hand_redrawn(player: str, discarded: int, drawn: int) -> GameEvent:
    return GameEvent(HAND_REDRAWN, {
        "player": player,
        "discarded": discarded,
        "drawn": drawn,
    })


def crown_transferred(player: str) -> GameEvent:
    return GameEvent(CROWN_TRANSFERRED, {"player": player})


def district_destroyed(warlord: str, target: str, district: str, cost: int) -> GameEvent:
    return GameEvent(DISTRICT_DESTROYED, {
        "warlord": warlord,
        "target": target,
        "district": district,
        "cost": cost,
    })


def laboratory_used(player: str, district: str) -> GameEvent:
    return GameEvent(LABORATORY_USED, {"player": player, "discarded": district})


def card_banked(player: str, district: str) -> GameEvent:
    return GameEvent(CARD_BANKED, {"player": player, "district": district})


def gold_collected(player: str, amount: int, total: int) -> GameEvent:
    return GameEvent(GOLD_COLLECTED, {
        "player": player,
        "amount": amount,
        "total": total,
    })


def cards_drawn(player: str, cards: list[str]) -> GameEvent:
    return GameEvent(CARDS_DRAWN, {"player": player, "cards": cards})


def card_kept(player: str, kept: str, returned: str | None) -> GameEvent:
    return GameEvent(CARD_KEPT, {
        "player": player,
        "kept": kept,
        "returned": returned,
    })


def deck_exhausted(player: str, wanted: int, got: int) -> GameEvent:
    return GameEvent(DECK_EXHAUSTED, {
        "player": player,
        "wanted": wanted,
        "got": got,
    })


def income_collected(player: str, role: str, amount: int, total: int) -> GameEvent:
    return GameEvent(INCOME_COLLECTED, {
        "player": player,
        "role": role,
        "amount": amount,
        "total": total,
    })


def district_built(player: str, district: str, cost: int, remaining_gold: int) -> GameEvent:
    return GameEvent(DISTRICT_BUILT, {
        "player": player,
        "district": district,
        "cost": cost,
        "remaining_gold": remaining_gold,
    })


def build_rejected(player: str, reason: str, attempt: int) -> GameEvent:
    return GameEvent(BUILD_REJECTED, {
        "player": player,
        "reason": reason,
        "attempt": attempt,
    })


def build_forfeited(player: str, slot: int) -> GameEvent:
    return GameEvent(BUILD_FORFEITED, {"player": player, "slot": slot})


def game_over(
    winner: str | None,
    tied: list[str],
    scores: dict[str, int],
    mystery_discard: str | None,
) -> GameEvent:
    return GameEvent(GAME_OVER, {
        "winner": winner,
        "tied": tied,
        "scores": scores,
        "mystery_discard": mystery_discard,
    })
