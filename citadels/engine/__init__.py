"""
Citadels round/turn engine
Card model, deck, players, role abilities, round state machine and end-game scoring.
"""

STARTING_GOLD = 2
STARTING_HAND_SIZE = 4

HAND_LIMIT = 7
CITY_LIMIT = 8
# A round that ends with any city at this size ends the game.
END_GAME_DISTRICTS = 7

GOLD_PER_COLLECT = 2
CARDS_PER_DRAW = 2
ARCHITECT_EXTRA_CARDS = 2
MAX_BUILDS = 1
ARCHITECT_MAX_BUILDS = 3
# Failed build attempts allowed per build slot before the slot is forfeited.
MAX_BUILD_ATTEMPTS = 3

# Player count -> number of characters discarded face up each round.
FACE_UP_DISCARDS = {4: 2, 5: 1, 6: 0, 7: 0}

FIRST_COMPLETION_BONUS = 4
COMPLETION_BONUS = 2
