"""
Single place for default game configuration.
Environment variables override the file defaults (CITADELS_DECK_FILE, CITADELS_SEED).
"""

import os
from pathlib import Path

DATA_DIR = Path(__file__).parent / "data"

# District table used when no deck file is given. Tab-separated: name, quantity, color, cost, ability.
DEFAULT_DECK_FILE = Path(os.environ.get("CITADELS_DECK_FILE") or DATA_DIR / "districts.tsv")

MIN_PLAYERS = 4
MAX_PLAYERS = 7
DEFAULT_PLAYER_COUNT = 4

# Seat driven by the console; every other seat is AI.
HUMAN_PLAYER_NAME = "Player 1"

DEFAULT_SAVE_FILE = "citadels_save.json"


def default_seed() -> int | None:
    """Seed for the session RNG from CITADELS_SEED, or None for a random game."""
    raw = os.environ.get("CITADELS_SEED")
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        return None
