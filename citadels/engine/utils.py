"""
Utility functions for the game engine.
"""

import random
from typing import Callable

from citadels.config import MAX_PLAYERS, MIN_PLAYERS
from citadels.engine import STARTING_GOLD, STARTING_HAND_SIZE
from citadels.engine.deck import Deck
from citadels.engine.definitions import DistrictCard, load_district_deck
from citadels.engine.state import GameSession, Phase, Player


def create_players(player_count: int, human_count: int = 1) -> list[Player]:
    """Players named "Player 1".."Player N"; the first human_count seats are human."""
    return [
        Player(name=f"Player {i + 1}", is_human=i < human_count)
        for i in range(player_count)
    ]


def create_session(
    player_count: int,
    deck: Deck[DistrictCard] | None = None,
    rng: random.Random | None = None,
    human_count: int = 1,
) -> GameSession:
    """
    Create a new session with empty-handed players. The crown starts with the first seat.

    Args:
        player_count: Number of seats, MIN_PLAYERS..MAX_PLAYERS
        deck: District deck to play with. Loaded from the default table if not given.
        rng: Random source for shuffles and the draft
        human_count: How many of the first seats are controlled from the console

    Raises:
        ValueError: if player_count is out of range.
    """
    if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
        raise ValueError(f"Player count must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
    rng = rng or random.Random()
    if deck is None:
        deck = load_district_deck(rng=rng)
    return GameSession(
        players=create_players(player_count, human_count),
        deck=deck,
        rng=rng,
    )


def deal_initial_cards(session: GameSession) -> None:
    """Give every player STARTING_HAND_SIZE cards (fewer if the deck runs out) and STARTING_GOLD."""
    for player in session.players:
        player.add_gold(STARTING_GOLD)
        for _ in range(STARTING_HAND_SIZE):
            player.draw_card(session.deck.draw())


def format_card(card: DistrictCard, index: int | None = None) -> str:
    prefix = f"{index}. " if index is not None else ""
    return f"{prefix}{card.name} [{card.color}{card.cost}]"


def format_cards(cards: list[DistrictCard], numbered: bool = False) -> str:
    if not cards:
        return "(none)"
    return ", ".join(
        format_card(c, i + 1 if numbered else None) for i, c in enumerate(cards)
    )


def print_game_state(
    session: GameSession,
    show_hands: bool = False,
    write: Callable[[str], None] = print,
):
    """
    Pretty-print the current session.

    Args:
        session: Current session
        show_hands: If True, list every hand card instead of only the hand size
        write: Line sink, print by default
    """
    write(f"\n{'='*60}")
    write(f"Round {session.round_number} | Phase: {session.phase.value} | "
          f"Crown: {session.crowned_player.name if session.players else '-'}")
    write(f"{'='*60}")
    rs = session.round_state
    if rs.current_player is not None and rs.current_role is not None:
        write(f"Now playing: {rs.current_player} as {rs.current_role.display_name}")

    for i, player in enumerate(session.players):
        role = session.role_of(player.name)
        marker = " (you)" if player.is_human else ""
        crown = " *crown*" if i == session.crown_index else ""
        revealed = player.is_human or session.phase == Phase.ROUND_END
        role_str = f" as {role.display_name}" if role and revealed else ""
        write(f"\n{player.name}{marker}{crown}{role_str}")
        write(f"  Gold: {player.gold}")
        if show_hands:
            write(f"  Hand: {format_cards(player.hand)}")
        else:
            write(f"  Hand: {len(player.hand)} cards")
        write(f"  City: {format_cards(player.city)}")
        if player.banked_cards:
            write(f"  Museum: {len(player.banked_cards)} banked")

    write(f"\nDeck: {session.deck.size()} cards")
