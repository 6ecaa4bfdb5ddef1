"""
Console front end for Citadels.
Reads commands from the human seat, prints the narration and plays rounds
until the game ends.
Run: python main.py [--players N] [--seed S] [--deck FILE] [--load FILE] [--all-ai]
"""

import argparse
import json
import random
import sys
from typing import Callable

from citadels.config import (
    DEFAULT_PLAYER_COUNT,
    DEFAULT_SAVE_FILE,
    MAX_PLAYERS,
    MIN_PLAYERS,
    default_seed,
)
from citadels.engine import MAX_BUILD_ATTEMPTS
from citadels.engine import events as ev
from citadels.engine.deciders import REDRAW, SKIP, SWAP, Decider, HeuristicDecider, MagicianChoice
from citadels.engine.definitions import Role, info_text, load_district_deck
from citadels.engine.events import EventLog, GameEvent
from citadels.engine.queries import CARDS, GOLD
from citadels.engine.rounds import play_round
from citadels.engine.scoring import GameOutcome, end_game
from citadels.engine.state import GameSession, Player, players_from_dict, players_to_dict
from citadels.engine.utils import (
    create_session,
    deal_initial_cards,
    format_card,
    format_cards,
    print_game_state,
)

SKIP_WORDS = ("t", "end", "skip")
YES_WORDS = ("yes", "y")
NO_WORDS = ("no", "n")

# Between-rounds outcomes
CONTINUE = "continue"
EXIT = "exit"

HELP_TEXT = """Available commands:
  gold              show your gold
  hand              show your hand
  city [n]          show your city, or the city of player n
  all               show every player's gold, hand size and city
  state             show the table: round, phase, crown and every seat
  info <name>       explain a character or a special district
  save <file>       save every player's gold, hand and city
  help              show this list
Between rounds:
  t                 continue to the next round
  savegame <file>   save the whole game
  loadgame <file>   load a saved game
  load <file>       restore players saved with 'save'
  exit              quit"""


class ConsoleIO:
    """Console-backed input provider and narration sink."""

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ):
        self.read = read
        self.write = write

    def ask(self, prompt: str = "> ") -> str:
        return self.read(prompt).strip()


# ===== Info commands =====

def show_hand(player: Player, io: ConsoleIO) -> None:
    io.write(f"Your hand (you have {player.gold} gold):")
    if not player.hand:
        io.write("(empty)")
        return
    io.write("✓ = Affordable | ✗ = Too expensive | ⚠ = Already built")
    io.write("-" * 40)
    for i, card in enumerate(player.hand, 1):
        if player.has_district(card.name):
            status = "⚠"
        elif player.can_afford(card):
            status = "✓"
        else:
            status = "✗"
        io.write(f"{i}. {status} {card.name} ({card.color}), cost: {card.cost} gold")


def show_city(session: GameSession, player: Player, args: list[str], io: ConsoleIO) -> None:
    target = player
    if args:
        try:
            target = session.players[int(args[0]) - 1]
        except (ValueError, IndexError):
            io.write("Invalid player number.")
            return
    if not target.city:
        io.write(f"{target.name} has built no districts.")
        return
    io.write(f"{target.name} has built:")
    for card in target.city:
        io.write(f"- {card.name} ({card.color}), points: {card.cost}")


def show_all(session: GameSession, io: ConsoleIO) -> None:
    for player in session.players:
        you = " (you)" if player.is_human else ""
        io.write(
            f"{player.name}{you}: cards={len(player.hand)} gold={player.gold} "
            f"city={format_cards(player.city)}"
        )


def save_players(session: GameSession, path: str, io: ConsoleIO) -> None:
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(players_to_dict(session.players), f, indent=2)
    except OSError as e:
        io.write(f"Could not save to {path}: {e}")
        return
    io.write(f"Players saved to {path}.")


def handle_command(raw: str, session: GameSession, player: Player, io: ConsoleIO) -> bool:
    """Run an info command typed at any prompt. Returns False when raw is not one."""
    parts = raw.split()
    if not parts:
        return False
    command, args = parts[0].lower(), parts[1:]

    if command == "gold" and not args:
        io.write(f"You have {player.gold} gold.")
    elif command == "hand" and not args:
        show_hand(player, io)
    elif command in ("city", "citadel", "list"):
        show_city(session, player, args, io)
    elif command == "all" and not args:
        show_all(session, io)
    elif command == "state" and not args:
        print_game_state(session, write=io.write)
    elif command == "info":
        name = " ".join(args)
        text = info_text(name) if name else None
        io.write(text or f"No information available for '{name}'.")
    elif command == "help":
        io.write(HELP_TEXT)
    elif command == "save":
        save_players(session, args[0] if args else DEFAULT_SAVE_FILE, io)
    else:
        return False
    return True


def _parse_index(raw: str, count: int) -> int | None:
    """1-based number typed by the player -> 0-based index, or None."""
    text = raw.strip().lower()
    for prefix in ("card ", "build "):
        if text.startswith(prefix):
            text = text[len(prefix):].strip()
    if not text.isdigit():
        return None
    index = int(text) - 1
    return index if 0 <= index < count else None


def _parse_role(raw: str, options: list[Role], by_rank: bool) -> Role | None:
    """Match a role typed as a name, or as a list position (by_rank=False) or rank (by_rank=True)."""
    text = raw.strip()
    if text.isdigit():
        if by_rank:
            role = Role.from_rank(text)
        else:
            index = _parse_index(text, len(options))
            role = options[index] if index is not None else None
    else:
        role = Role.from_name(text)
    return role if role in options else None


# ===== Human decider =====

class InteractiveDecider(Decider):
    """
    Asks the console for every choice. Bad input is answered with a message and
    the same question again; info commands work at every prompt.
    """

    def __init__(self, io: ConsoleIO):
        self.io = io

    def _ask(
        self,
        session: GameSession,
        player: Player,
        prompt: str = "> ",
        answers: tuple[str, ...] = (),
    ) -> str:
        while True:
            raw = self.io.ask(prompt)
            if raw.lower() in answers:
                return raw
            if handle_command(raw, session, player, self.io):
                continue
            return raw

    def choose_character(self, session, player, available):
        self.io.write("Choose your character. Available characters:")
        for i, role in enumerate(available, 1):
            self.io.write(f"{i}. {role.display_name}")
        while True:
            role = _parse_role(self._ask(session, player), available, by_rank=False)
            if role is not None:
                self.io.write(f"You chose: {role.display_name}")
                return role
            self.io.write(
                f"Invalid choice. Enter a number 1-{len(available)} or the character's name."
            )

    def _choose_target(self, session, player, candidates, question):
        self.io.write("Your turn.")
        self.io.write(f"{question} Choose a character from 2-8:")
        while True:
            raw = self._ask(session, player)
            if raw.lower() in SKIP_WORDS:
                self.io.write("You skipped that step.")
                return None
            role = _parse_role(raw, candidates, by_rank=True)
            if role is not None:
                return role
            self.io.write("Invalid choice. Enter a number 2-8 or a character name, or 't' to skip.")

    def choose_assassination_target(self, session, player, candidates):
        role = self._choose_target(session, player, candidates, "Who do you want to kill?")
        if role is not None:
            self.io.write(f"You have killed the {role.display_name}")
        return role

    def choose_theft_target(self, session, player, candidates):
        role = self._choose_target(session, player, candidates, "Who do you want to steal from?")
        if role is not None:
            self.io.write(f"You chose to steal from the {role.display_name}")
        return role

    def choose_magician_action(self, session, player):
        others = session.others(player.name)
        self.io.write("Your turn.")
        self.io.write(
            "Do you want to swap hands with another player, redraw your hand, or skip? [swap/redraw/skip]"
        )
        while True:
            answer = self._ask(session, player).lower()
            if answer in SKIP_WORDS:
                return MagicianChoice(SKIP)
            if answer == "redraw":
                return MagicianChoice(REDRAW)
            if answer == "swap":
                self.io.write("Choose a player to swap with:")
                for i, other in enumerate(others, 1):
                    self.io.write(f"{i}. {other.name} ({len(other.hand)} cards)")
                index = _parse_index(self._ask(session, player), len(others))
                if index is not None:
                    return MagicianChoice(SWAP, others[index].name)
                self.io.write("Invalid selection.")
                continue
            self.io.write("Unknown option. Use swap, redraw, or skip.")

    def choose_resource(self, session, player, options):
        self.io.write("Collect 2 gold or draw two cards and pick one [gold/cards]:")
        while True:
            answer = self._ask(session, player, answers=(GOLD, CARDS)).lower()
            if answer == GOLD:
                return GOLD
            if answer == CARDS:
                if CARDS in options:
                    return CARDS
                self.io.write("You cannot draw cards now (your hand is full or the deck is empty).")
                continue
            self.io.write("Invalid input. Enter 'gold' or 'cards'.")

    def choose_card_to_keep(self, session, player, drawn):
        self.io.write("Choose a card to keep by typing its number:")
        for i, card in enumerate(drawn, 1):
            self.io.write(f"  {i}) {format_card(card)}")
        while True:
            index = _parse_index(self._ask(session, player), len(drawn))
            if index is not None:
                self.io.write(f"You kept {drawn[index].name}.")
                return index
            self.io.write(f"Invalid choice. Enter a number 1-{len(drawn)}.")

    def _choose_hand_card(self, session, player, question):
        self.io.write(question)
        for i, card in enumerate(player.hand, 1):
            self.io.write(f"{i}. {format_card(card)}")
        while True:
            raw = self._ask(session, player, "Enter card number or 't' to skip: ")
            if raw.lower() in SKIP_WORDS:
                return None
            index = _parse_index(raw, len(player.hand))
            if index is not None:
                return index
            self.io.write("Invalid input.")

    def choose_laboratory_discard(self, session, player):
        self.io.write("Use Laboratory to discard a card for 1 gold? (yes/no)")
        while True:
            answer = self._ask(session, player).lower()
            if answer in NO_WORDS:
                return None
            if answer in YES_WORDS:
                return self._choose_hand_card(session, player, "Choose a card to discard:")
            self.io.write("Please answer yes or no.")

    def choose_destruction(self, session, player, options):
        self.io.write("You may destroy one district:")
        for i, option in enumerate(options, 1):
            self.io.write(
                f"{i}. {option.target}'s {format_card(option.card)} for {option.cost} gold"
            )
        while True:
            raw = self._ask(session, player, "Enter a number or 't' to skip: ")
            if raw.lower() in SKIP_WORDS:
                return None
            index = _parse_index(raw, len(options))
            if index is not None:
                return options[index]
            self.io.write("Invalid choice.")

    def choose_museum_bank(self, session, player):
        return self._choose_hand_card(
            session, player, "You may bank 1 card at the Museum for +1 point at game end."
        )

    def choose_build(self, session, player, builds_left):
        if not player.hand:
            self.io.write("Your hand is empty.")
            return None
        show_hand(player, self.io)
        plural = "" if builds_left == 1 else "s"
        self.io.write(
            f"You may build up to {builds_left} district{plural}. "
            "Type 'build <card number>' or 't' to end your turn."
        )
        while True:
            raw = self._ask(session, player)
            if raw.lower() in ("t", "end"):
                self.io.write("You ended your turn.")
                return None
            index = _parse_index(raw, len(player.hand))
            if index is not None:
                return index
            if raw.lower().startswith("build") or raw.isdigit():
                self.io.write(f"Invalid card number. Must be between 1 and {len(player.hand)}.")
            else:
                self.io.write("Unknown command. Type 'help' for available commands.")


def build_deciders(session: GameSession, io: ConsoleIO) -> dict[str, Decider]:
    human = InteractiveDecider(io)
    ai = HeuristicDecider()
    return {p.name: human if p.is_human else ai for p in session.players}


# ===== Narration =====

def format_event(event: GameEvent) -> str | None:
    """One console line (or a few) for an event; None for events that print nothing."""
    p = event.payload
    t = event.type
    if t == ev.ROUND_STARTED:
        bar = "=" * 32
        return (f"{bar}\nROUND {p['round_number']} - SELECTION PHASE\n{bar}\n"
                f"{p['crown_holder']} is the crowned player and goes first.")
    if t == ev.ROUND_REJECTED:
        return f"Cannot start a new round ({p['reason'].replace('_', ' ')})."
    if t == ev.MYSTERY_DISCARDED:
        return "A mystery character was removed."
    if t == ev.CHARACTER_DISCARDED:
        return f"{p['role']} was removed."
    if t == ev.CHARACTER_CHOSEN:
        return None if p["is_human"] else f"{p['player']} chose a character."
    if t == ev.ROLE_CALLED:
        line = f"{p['rank']}: {p['role']}"
        if p["rank"] == Role.ASSASSIN.rank:
            bar = "=" * 32
            line = f"Character choosing is over, action round will now begin.\n{bar}\nTURN PHASE\n{bar}\n{line}"
        return line
    if t == ev.ROLE_UNCLAIMED:
        return f"No one is the {p['role']}"
    if t == ev.TURN_SKIPPED:
        return f"{p['player']} is the {p['role']} but was assassinated and loses their turn."
    if t == ev.ASSASSINATION_DECLARED:
        return f"{p['player']} assassinated the {p['target_role']}."
    if t == ev.THEFT_DECLARED:
        return f"{p['player']} will rob the {p['target_role']}."
    if t == ev.PLAYER_ROBBED:
        return f"{p['victim']} was robbed of {p['amount']} gold by {p['thief']}!"
    if t == ev.HANDS_SWAPPED:
        return f"{p['player']} swapped hands with {p['target']}."
    if t == ev.HAND_REDRAWN:
        return f"{p['player']} redrew their hand ({p['drawn']} cards)."
    if t == ev.GOLD_COLLECTED:
        return f"{p['player']} took {p['amount']} gold (has {p['total']})."
    if t == ev.CARDS_DRAWN:
        count = len(p["cards"])
        return f"{p['player']} drew {count} card{'' if count == 1 else 's'}."
    if t == ev.CARD_KEPT:
        return f"{p['player']} kept one card."
    if t == ev.DECK_EXHAUSTED:
        return f"The deck ran out: {p['player']} got {p['got']} of {p['wanted']} cards."
    if t == ev.INCOME_COLLECTED:
        return f"{p['player']} gains {p['amount']} gold as the {p['role']} (now has {p['total']})."
    if t == ev.CROWN_TRANSFERRED:
        return f"{p['player']} is the King and takes the crown."
    if t == ev.LABORATORY_USED:
        return f"{p['player']} discarded a card at the Laboratory. +1 gold."
    if t == ev.DISTRICT_DESTROYED:
        return f"{p['warlord']} destroyed {p['target']}'s {p['district']} for {p['cost']} gold."
    if t == ev.CARD_BANKED:
        return f"{p['player']} banked {p['district']} in the Museum."
    if t == ev.DISTRICT_BUILT:
        return f"{p['player']} built {p['district']}. Remaining gold={p['remaining_gold']}"
    if t == ev.BUILD_REJECTED:
        left = MAX_BUILD_ATTEMPTS - p["attempt"]
        return f"{p['reason']} ({left} attempt{'' if left == 1 else 's'} left)"
    if t == ev.BUILD_FORFEITED:
        return f"{p['player']} used all attempts to build a district this turn."
    if t == ev.TURN_ENDED:
        return f"{p['player']}'s turn ends.\n"
    if t == ev.ROUND_ENDED:
        return f"Round {p['round_number']} complete."
    return None


def print_outcome(outcome: GameOutcome, io: ConsoleIO) -> None:
    io.write("\n--- Final Scores ---")
    for s in outcome.scores:
        io.write(
            f"{s.name}: {s.total} points "
            f"(base={s.base}, bonus={s.bonus}, completion={s.completion})"
        )
    mystery = outcome.mystery_discard.display_name if outcome.mystery_discard else "Unknown"
    if outcome.winner is None:
        io.write("\nIt's a tie between:")
        for name in outcome.tied:
            io.write(f"- {name}")
        io.write(f"Mystery discarded character was: {mystery}")
    else:
        io.write(f"\nWinner: {outcome.winner}")
        io.write(f"Mystery discarded character was: {mystery}")
        io.write(f"\nCongratulations, {outcome.winner} wins the game!")
    io.write("Thanks for playing Citadels!")


# ===== Game loop =====

def _player_count_ok(count: int) -> bool:
    return MIN_PLAYERS <= count <= MAX_PLAYERS


def load_players(session: GameSession, path: str, io: ConsoleIO) -> None:
    """Replace the players with a players-only snapshot. Only valid between rounds."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            players = players_from_dict(json.load(f))
    except (OSError, json.JSONDecodeError) as e:
        io.write(f"Could not load {path}: {e}")
        return
    if not _player_count_ok(len(players)):
        io.write(f"{path} holds {len(players)} players; a game needs {MIN_PLAYERS}-{MAX_PLAYERS}.")
        return
    session.players = players
    session.round_state.reset()
    if session.crown_index >= len(players):
        session.crown_index = 0
    io.write(f"Players loaded from {path}.")


def between_rounds(session: GameSession, io: ConsoleIO) -> tuple[str, GameSession]:
    """Console prompt after a round. Returns (CONTINUE or EXIT, session to continue with)."""
    human = next((p for p in session.players if p.is_human), session.players[0])
    io.write("Round complete. Type 't' to continue or 'exit' to quit.")
    while True:
        raw = io.ask("> ")
        parts = raw.split()
        command = parts[0].lower() if parts else ""
        path = parts[1] if len(parts) > 1 else DEFAULT_SAVE_FILE

        if command == "t":
            return CONTINUE, session
        if command in ("exit", "quit"):
            return EXIT, session
        if command == "savegame":
            try:
                session.save(path)
            except OSError as e:
                io.write(f"Could not save game: {e}")
            else:
                io.write(f"Game saved to {path}.")
            continue
        if command == "loadgame":
            try:
                loaded = GameSession.load(path, rng=session.rng)
            except (OSError, json.JSONDecodeError) as e:
                io.write(f"Could not load game: {e}")
                continue
            if not _player_count_ok(len(loaded.players)):
                io.write(f"{path} holds {len(loaded.players)} players; a game needs {MIN_PLAYERS}-{MAX_PLAYERS}.")
                continue
            session = loaded
            human = next((p for p in session.players if p.is_human), session.players[0])
            io.write(f"Game loaded from {path}.")
            continue
        if command == "load":
            load_players(session, path, io)
            human = next((p for p in session.players if p.is_human), session.players[0])
            continue
        if handle_command(raw, session, human, io):
            continue
        io.write("Unknown command. Type 't', 'exit', or 'help'.")


def run_game(
    session: GameSession,
    io: ConsoleIO,
    max_rounds: int | None = None,
) -> GameOutcome | None:
    """
    Play rounds until the game ends. With a human seat the console is asked
    between rounds; max_rounds ends the game early by scoring it as it stands.
    Returns None if the player quits.
    """
    log = EventLog(listener=lambda e: _narrate(e, io))
    deciders = build_deciders(session, io)

    while not session.game_over:
        result = play_round(session, deciders, log)
        if not result.started or result.game_over:
            break
        if max_rounds is not None and session.round_number >= max_rounds:
            end_game(session, log)
            break
        if any(p.is_human for p in session.players):
            action, session = between_rounds(session, io)
            if action == EXIT:
                return None
            deciders = build_deciders(session, io)

    if session.outcome is not None:
        print_outcome(session.outcome, io)
    return session.outcome


def _narrate(event: GameEvent, io: ConsoleIO) -> None:
    line = format_event(event)
    if line is not None:
        io.write(line)


def ask_player_count(io: ConsoleIO) -> int:
    io.write(f"Enter how many players [{MIN_PLAYERS}-{MAX_PLAYERS}]:")
    while True:
        raw = io.ask("> ")
        try:
            count = int(raw)
        except ValueError:
            io.write("Please enter a number.")
            continue
        if _player_count_ok(count):
            return count
        io.write(f"Must be between {MIN_PLAYERS} and {MAX_PLAYERS} players.")


def new_game(
    player_count: int,
    io: ConsoleIO,
    rng: random.Random,
    deck_path: str | None = None,
    all_ai: bool = False,
) -> GameSession:
    io.write("Shuffling deck...")
    deck = load_district_deck(deck_path, rng=rng)
    io.write("Adding characters...")
    session = create_session(player_count, deck=deck, rng=rng, human_count=0 if all_ai else 1)
    io.write("Dealing cards...")
    deal_initial_cards(session)
    io.write(f"Starting Citadels with {player_count} players...")
    if not all_ai:
        io.write("You are Player 1")
    return session


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="citadels", description="Play Citadels on the console.")
    parser.add_argument("--players", type=int, choices=range(MIN_PLAYERS, MAX_PLAYERS + 1),
                        help="Number of players (asked for if omitted)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed (default: $CITADELS_SEED)")
    parser.add_argument("--deck", default=None, help="District table file (TSV)")
    parser.add_argument("--load", metavar="FILE", default=None, help="Resume a saved game")
    parser.add_argument("--all-ai", action="store_true", help="Let the computer play every seat")
    parser.add_argument("--max-rounds", type=int, default=None,
                        help="Score the game after this many rounds")
    args = parser.parse_args(argv)

    io = ConsoleIO()
    seed = args.seed if args.seed is not None else default_seed()
    rng = random.Random(seed)

    try:
        if args.load:
            session = GameSession.load(args.load, rng=rng)
            if not _player_count_ok(len(session.players)):
                print(f"Error: {args.load} holds {len(session.players)} players", file=sys.stderr)
                return 1
            if args.all_ai:
                for player in session.players:
                    player.is_human = False
        else:
            if args.players is not None:
                count = args.players
            elif args.all_ai:
                count = DEFAULT_PLAYER_COUNT
            else:
                count = ask_player_count(io)
            session = new_game(count, io, rng, deck_path=args.deck, all_ai=args.all_ai)
        run_game(session, io, max_rounds=args.max_rounds)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (EOFError, KeyboardInterrupt):
        io.write("\nGoodbye.")
    return 0
