"""
Shared builders for the engine tests: cards, sessions with fixed roles and
deciders with scripted answers.
"""

import random

from citadels.engine.deck import Deck
from citadels.engine.deciders import HeuristicDecider
from citadels.engine.definitions import DistrictCard
from citadels.engine.queries import GOLD
from citadels.engine.state import GameSession, Phase, Player


def card(name, color="yellow", cost=1, ability=None):
    return DistrictCard(name=name, color=color, cost=cost, ability=ability)


def filler_deck(count=20):
    """Cheap, uniquely named green cards."""
    return Deck([card(f"Filler {i}", "green", 1) for i in range(count)])


def make_session(count=4, deck=None, seed=0):
    players = [Player(name=f"Player {i + 1}") for i in range(count)]
    return GameSession(
        players=players,
        deck=deck if deck is not None else filler_deck(),
        rng=random.Random(seed),
    )


def assign(session, roles):
    """Put the session mid-round with the given {player name: Role} picks."""
    rs = session.round_state
    rs.role_assignment.update(roles)
    rs.phase = Phase.TURN
    rs.in_progress = True


class ScriptedDecider(HeuristicDecider):
    """
    Heuristic player with fixed answers for some choices. An answer may be a
    value, a list consumed one item per call, or a callable taking the same
    arguments as the decider method.
    Keys: character, assassinate, steal, magic, resource, keep, laboratory,
    destroy, museum, build.
    """

    def __init__(self, **answers):
        self.answers = answers

    def _scripted(self, key, fallback, *args):
        if key not in self.answers:
            return fallback(*args)
        value = self.answers[key]
        if isinstance(value, list):
            return value.pop(0) if value else fallback(*args)
        if callable(value):
            return value(*args)
        return value

    def choose_character(self, session, player, available):
        return self._scripted("character", super().choose_character, session, player, available)

    def choose_assassination_target(self, session, player, candidates):
        return self._scripted(
            "assassinate", super().choose_assassination_target, session, player, candidates
        )

    def choose_theft_target(self, session, player, candidates):
        return self._scripted("steal", super().choose_theft_target, session, player, candidates)

    def choose_magician_action(self, session, player):
        return self._scripted("magic", super().choose_magician_action, session, player)

    def choose_resource(self, session, player, options):
        return self._scripted("resource", super().choose_resource, session, player, options)

    def choose_card_to_keep(self, session, player, drawn):
        return self._scripted("keep", super().choose_card_to_keep, session, player, drawn)

    def choose_laboratory_discard(self, session, player):
        return self._scripted("laboratory", super().choose_laboratory_discard, session, player)

    def choose_destruction(self, session, player, options):
        return self._scripted("destroy", super().choose_destruction, session, player, options)

    def choose_museum_bank(self, session, player):
        return self._scripted("museum", super().choose_museum_bank, session, player)

    def choose_build(self, session, player, builds_left):
        return self._scripted("build", super().choose_build, session, player, builds_left)


def passive(**answers):
    """A decider that takes gold and never builds, destroys or banks unless told to."""
    defaults = {"resource": GOLD, "build": None, "destroy": None, "museum": None,
                "assassinate": None, "steal": None}
    defaults.update(answers)
    return ScriptedDecider(**defaults)


def deciders_for(session, default=None, **overrides):
    """One decider per player; overrides are keyed by seat number, e.g. p2=ScriptedDecider()."""
    default = default or passive()
    deciders = {p.name: default for p in session.players}
    for key, decider in overrides.items():
        deciders[f"Player {int(key[1:])}"] = decider
    return deciders
