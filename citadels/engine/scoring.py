"""
End-game evaluation.
Final scores, the winner with the role-rank tie-break, and the reveal of the
mystery discard.
"""

from dataclasses import dataclass, field
from typing import Any

from citadels.engine import CITY_LIMIT, COMPLETION_BONUS, FIRST_COMPLETION_BONUS
from citadels.engine.definitions import Role
from citadels.engine.effects import bonus_score
from citadels.engine.events import EventLog, game_over
from citadels.engine.state import GameSession, Player


@dataclass
class PlayerScore:
    name: str
    base: int
    bonus: int
    completion: int
    role: Role | None = None

    @property
    def total(self) -> int:
        return self.base + self.bonus + self.completion

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "base": self.base,
            "bonus": self.bonus,
            "completion": self.completion,
            "total": self.total,
            "role": self.role.display_name if self.role else None,
        }


@dataclass
class GameOutcome:
    """Result of a finished game. winner is None when the tie could not be broken."""
    scores: list[PlayerScore] = field(default_factory=list)
    winner: str | None = None
    tied: list[str] = field(default_factory=list)
    mystery_discard: Role | None = None

    @property
    def is_unresolved_tie(self) -> bool:
        return self.winner is None and len(self.tied) > 1

    def score_of(self, name: str) -> PlayerScore:
        for s in self.scores:
            if s.name == name:
                return s
        raise ValueError(f"Unknown player: {name}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "scores": [s.to_dict() for s in self.scores],
            "winner": self.winner,
            "tied": list(self.tied),
            "mystery_discard": self.mystery_discard.display_name if self.mystery_discard else None,
        }


def completion_bonus(session: GameSession, player: Player) -> int:
    """
    +4 for the first player to reach a full city, +2 for every other full city.
    Without a recorded first finisher the earliest full city in seat order gets the +4.
    """
    if len(player.city) < CITY_LIMIT:
        return 0
    first = session.first_completed
    completed = [p.name for p in session.players if len(p.city) >= CITY_LIMIT]
    if first not in completed:
        first = completed[0]
    return FIRST_COMPLETION_BONUS if player.name == first else COMPLETION_BONUS


def score_player(session: GameSession, player: Player) -> PlayerScore:
    return PlayerScore(
        name=player.name,
        base=sum(card.cost for card in player.city),
        bonus=bonus_score(player),
        completion=completion_bonus(session, player),
        role=session.role_of(player.name),
    )


def evaluate_game(session: GameSession) -> GameOutcome:
    """Score every player and pick the winner. Does not modify the session."""
    scores = [score_player(session, p) for p in session.players]
    outcome = GameOutcome(scores=scores, mystery_discard=session.round_state.mystery_discard)
    if not scores:
        return outcome

    best = max(s.total for s in scores)
    leaders = [s for s in scores if s.total == best]
    if len(leaders) == 1:
        outcome.winner = leaders[0].name
        return outcome

    # Highest role held this final round breaks the tie
    ranked = [s for s in leaders if s.role is not None]
    if ranked:
        outcome.winner = max(ranked, key=lambda s: s.role.rank).name
        return outcome

    outcome.tied = [s.name for s in leaders]
    return outcome


def end_game(session: GameSession, log: EventLog | None = None) -> GameOutcome:
    """Finish the game now: evaluate, record the outcome on the session and announce it."""
    outcome = evaluate_game(session)
    session.game_over = True
    session.outcome = outcome
    session.round_state.in_progress = False
    if log is not None:
        log.emit(game_over(
            outcome.winner,
            outcome.tied,
            {s.name: s.total for s in outcome.scores},
            outcome.mystery_discard.display_name if outcome.mystery_discard else None,
        ))
    return outcome
