"""
Decision making for players.
The engine asks a Decider for every choice a player makes, whether the
answers come from the console or from the built-in heuristics.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from citadels.engine.definitions import DistrictCard, Role
from citadels.engine.queries import CARDS, GOLD, DestructionOption, buildable_indices
from citadels.engine.state import GameSession, Player

# Magician actions
SWAP = "swap"
REDRAW = "redraw"
SKIP = "skip"


@dataclass(frozen=True)
class MagicianChoice:
    action: str  # SWAP, REDRAW or SKIP
    target: str | None = None  # player name, SWAP only


class Decider(ABC):
    """
    Source of every choice a player makes during a round.
    Methods receive the session read-only; the engine applies the result.
    Returning None from an optional choice means "skip".
    """

    @abstractmethod
    def choose_character(self, session: GameSession, player: Player, available: list[Role]) -> Role:
        """Pick one role from the current draft pool."""

    @abstractmethod
    def choose_assassination_target(
        self, session: GameSession, player: Player, candidates: list[Role]
    ) -> Role | None:
        pass

    @abstractmethod
    def choose_theft_target(
        self, session: GameSession, player: Player, candidates: list[Role]
    ) -> Role | None:
        pass

    @abstractmethod
    def choose_magician_action(self, session: GameSession, player: Player) -> MagicianChoice:
        pass

    @abstractmethod
    def choose_resource(self, session: GameSession, player: Player, options: list[str]) -> str:
        """Return GOLD or CARDS. Only values in options are accepted."""

    @abstractmethod
    def choose_card_to_keep(
        self, session: GameSession, player: Player, drawn: list[DistrictCard]
    ) -> int:
        """Index into drawn of the card to keep."""

    @abstractmethod
    def choose_laboratory_discard(self, session: GameSession, player: Player) -> int | None:
        """Hand index to discard for 1 gold, or None."""

    @abstractmethod
    def choose_destruction(
        self, session: GameSession, player: Player, options: list[DestructionOption]
    ) -> DestructionOption | None:
        pass

    @abstractmethod
    def choose_museum_bank(self, session: GameSession, player: Player) -> int | None:
        """Hand index to bank under the Museum, or None."""

    @abstractmethod
    def choose_build(self, session: GameSession, player: Player, builds_left: int) -> int | None:
        """Hand index to build, or None to stop building this turn."""


class HeuristicDecider(Decider):
    """Greedy computer player."""

    def choose_character(self, session, player, available):
        return available[0]

    def choose_assassination_target(self, session, player, candidates):
        held = [
            role for name, role in session.round_state.role_assignment.items()
            if name != player.name and role in candidates
        ]
        return max(held) if held else None

    def choose_theft_target(self, session, player, candidates):
        richest: Player | None = None
        for other in session.others(player.name):
            role = session.role_of(other.name)
            if role is None or role not in candidates:
                continue
            if richest is None or other.gold > richest.gold:
                richest = other
        return session.role_of(richest.name) if richest else None

    def choose_magician_action(self, session, player):
        target: Player | None = None
        for other in session.others(player.name):
            if len(other.hand) > len(player.hand) and (
                target is None or len(other.hand) > len(target.hand)
            ):
                target = other
        if target is not None:
            return MagicianChoice(SWAP, target.name)
        if player.hand:
            return MagicianChoice(REDRAW)
        return MagicianChoice(SKIP)

    def choose_resource(self, session, player, options):
        if CARDS in options and len(session.deck) >= 2:
            if not player.hand or not buildable_indices(player) or len(player.hand) < 2:
                return CARDS
        return GOLD

    def choose_card_to_keep(self, session, player, drawn):
        best = 0
        for i, card in enumerate(drawn):
            if card.cost > drawn[best].cost:
                best = i
        return best

    def choose_laboratory_discard(self, session, player):
        return None

    def choose_destruction(self, session, player, options):
        best: DestructionOption | None = None
        for option in options:
            if best is None or option.card.cost > best.card.cost:
                best = option
        return best

    def choose_museum_bank(self, session, player):
        return 0 if player.hand else None

    def choose_build(self, session, player, builds_left):
        indices = buildable_indices(player)
        if not indices:
            return None
        return max(indices, key=lambda i: player.hand[i].cost)
