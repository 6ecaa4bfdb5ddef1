"""
Round state machine.

A round moves SELECTION -> TURN -> ROUND_END:
  - selection: shuffle the eight roles, set one aside unseen, discard some
    face up (never the King), then draft clockwise from the crowned player
  - turns: call ranks 1 to 8 in order; unclaimed ranks and the assassinated
    role are skipped
  - end: if any city has reached END_GAME_DISTRICTS the game is scored
"""

from dataclasses import dataclass
from typing import Mapping

from citadels.config import MAX_PLAYERS, MIN_PLAYERS
from citadels.engine import END_GAME_DISTRICTS, FACE_UP_DISCARDS
from citadels.engine.deciders import Decider
from citadels.engine.definitions import ALL_ROLES, Role
from citadels.engine.effects import reset_laboratory
from citadels.engine.events import (
    EventLog,
    character_chosen,
    character_discarded,
    mystery_discarded,
    role_called,
    role_unclaimed,
    round_ended,
    round_rejected,
    round_started,
    turn_skipped,
)
from citadels.engine.scoring import GameOutcome, end_game
from citadels.engine.state import GameSession, Phase, Player
from citadels.engine.turns import resolve_turn

# Reasons a round start is refused
WRONG_PHASE = "wrong_phase"
ALREADY_IN_PROGRESS = "already_in_progress"
GAME_ALREADY_OVER = "game_over"


@dataclass
class RoundResult:
    """What happened to a round start request. A refused start leaves the session untouched."""
    started: bool
    rejection: str | None = None
    game_over: bool = False
    outcome: GameOutcome | None = None


def _decider_for(deciders: Mapping[str, Decider], player: Player) -> Decider:
    try:
        return deciders[player.name]
    except KeyError:
        raise ValueError(f"No decider for {player.name}") from None


def start_round(session: GameSession, log: EventLog | None = None) -> RoundResult:
    """
    Open a new round in SELECTION. Refused (not raised) when the game is over,
    a round is running, or the session is not between rounds.

    Raises:
        ValueError: if the session has fewer than MIN_PLAYERS or more than MAX_PLAYERS players.
    """
    log = log if log is not None else EventLog()
    rs = session.round_state

    rejection = None
    if session.game_over:
        rejection = GAME_ALREADY_OVER
    elif rs.in_progress:
        rejection = ALREADY_IN_PROGRESS
    elif rs.phase not in (Phase.SELECTION, Phase.ROUND_END):
        rejection = WRONG_PHASE
    if rejection is not None:
        log.emit(round_rejected(rejection))
        return RoundResult(started=False, rejection=rejection)

    if not MIN_PLAYERS <= len(session.players) <= MAX_PLAYERS:
        raise ValueError(
            f"Citadels needs {MIN_PLAYERS}-{MAX_PLAYERS} players, got {len(session.players)}"
        )

    rs.reset()
    reset_laboratory(rs)
    rs.phase = Phase.SELECTION
    rs.in_progress = True
    session.round_number += 1
    log.emit(round_started(session.round_number, session.crowned_player.name))
    return RoundResult(started=True)


# ===== Selection =====

def discard_characters(session: GameSession, log: EventLog | None = None) -> list[Role]:
    """
    Shuffle the roles, set the mystery discard aside and discard the face-up
    roles for this player count. Returns the remaining draft pool in order.
    """
    log = log if log is not None else EventLog()
    rs = session.round_state
    pool = list(ALL_ROLES)
    session.rng.shuffle(pool)

    rs.mystery_discard = pool.pop(0)
    log.emit(mystery_discarded())

    wanted = FACE_UP_DISCARDS.get(len(session.players), 0)
    while len(rs.face_up_discards) < wanted:
        candidate = pool.pop(0)
        if candidate == Role.KING:
            # The King is never shown; put it back and try again
            pool.append(candidate)
            session.rng.shuffle(pool)
            continue
        rs.face_up_discards.append(candidate)
        log.emit(character_discarded(candidate.display_name))
    return pool


def run_selection(
    session: GameSession,
    deciders: Mapping[str, Decider],
    log: EventLog | None = None,
) -> None:
    """Draft one role per player, clockwise from the crowned player, then move to TURN."""
    log = log if log is not None else EventLog()
    rs = session.round_state
    pool = discard_characters(session, log)

    count = len(session.players)
    for offset in range(count):
        player = session.players[(session.crown_index + offset) % count]
        decider = _decider_for(deciders, player)
        choice = decider.choose_character(session, player, list(pool))
        if choice not in pool:
            raise ValueError(f"{player.name} chose a role that is not available: {choice!r}")
        pool.remove(choice)
        rs.role_assignment[player.name] = choice
        log.emit(character_chosen(player.name, choice.display_name, player.is_human))

    rs.undrafted = pool
    rs.phase = Phase.TURN


# ===== Turns =====

def run_turns(
    session: GameSession,
    deciders: Mapping[str, Decider],
    log: EventLog | None = None,
) -> None:
    """Call every rank from 1 to 8 and let its holder play."""
    log = log if log is not None else EventLog()
    rs = session.round_state

    for role in sorted(ALL_ROLES):
        log.emit(role_called(role.rank, role.display_name))
        holder = session.holder_of(role)
        if holder is None:
            log.emit(role_unclaimed(role.display_name))
            continue
        if rs.assassinated == role:
            log.emit(turn_skipped(holder.name, role.display_name, "assassinated"))
            continue
        resolve_turn(session, holder, role, _decider_for(deciders, holder), log)

    rs.current_player = None
    rs.current_role = None


def game_end_triggered(session: GameSession) -> bool:
    return any(len(p.city) >= END_GAME_DISTRICTS for p in session.players)


def play_round(
    session: GameSession,
    deciders: Mapping[str, Decider],
    log: EventLog | None = None,
) -> RoundResult:
    """
    Play a full round. Returns the start rejection unchanged if the round could not start;
    otherwise the round runs to ROUND_END and the game is scored if a city is big enough.

    Raises:
        ValueError: if a decider makes an illegal choice. The round is closed first,
            so the session can start a new one.
    """
    log = log if log is not None else EventLog()
    result = start_round(session, log)
    if not result.started:
        return result

    rs = session.round_state
    try:
        run_selection(session, deciders, log)
        run_turns(session, deciders, log)
    finally:
        # A decider error still closes the round so the next one can start
        rs.phase = Phase.ROUND_END
        rs.in_progress = False
        rs.current_player = None
        rs.current_role = None

    log.emit(round_ended(session.round_number))

    if game_end_triggered(session):
        result.outcome = end_game(session, log)
        result.game_over = True
    return result
