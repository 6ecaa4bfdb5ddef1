"""
Tests for turn resolution: abilities, resources, income, destruction and building.
"""

import pytest

from citadels.engine.deck import Deck
from citadels.engine.deciders import REDRAW, SWAP, HeuristicDecider, MagicianChoice
from citadels.engine.definitions import Role
from citadels.engine.events import (
    BUILD_FORFEITED,
    BUILD_REJECTED,
    DECK_EXHAUSTED,
    DISTRICT_BUILT,
    PLAYER_ROBBED,
    ROLE_CALLED,
    TURN_ENDED,
    TURN_SKIPPED,
    EventLog,
)
from citadels.engine.queries import CARDS, GOLD, destruction_options, resource_options
from citadels.engine.rounds import run_turns
from citadels.engine.turns import resolve_turn

from helpers import assign, card, deciders_for, make_session, passive, ScriptedDecider


def seats(session):
    return session.players


# ===== Turn order and skips =====

def test_ranks_are_called_in_ascending_order():
    session = make_session(4)
    p1, p2, p3, p4 = seats(session)
    assign(session, {p1.name: Role.WARLORD, p2.name: Role.KING,
                     p3.name: Role.ASSASSIN, p4.name: Role.MERCHANT})
    log = EventLog()
    run_turns(session, deciders_for(session), log)
    assert [e.payload["rank"] for e in log.of_type(ROLE_CALLED)] == list(range(1, 9))
    ended = [e.payload["player"] for e in log.of_type(TURN_ENDED)]
    assert ended == [p3.name, p2.name, p4.name, p1.name]


def test_assassinated_player_loses_the_turn():
    session = make_session(4)
    p1, p2, p3, p4 = seats(session)
    p2.gold = 3
    p2.city.append(card("Manor", "yellow", 3))
    p2.hand.append(card("Palace", "yellow", 5))
    assign(session, {p1.name: Role.ASSASSIN, p2.name: Role.KING,
                     p3.name: Role.BISHOP, p4.name: Role.MERCHANT})
    log = EventLog()
    deciders = deciders_for(session, p1=passive(assassinate=Role.KING),
                            p2=ScriptedDecider())
    run_turns(session, deciders, log)

    assert p2.gold == 3
    assert len(p2.city) == 1 and len(p2.hand) == 1
    assert session.crown_index == 0
    assert [e.payload["player"] for e in log.of_type(TURN_SKIPPED)] == [p2.name]


def test_robbery_moves_all_gold_to_the_thief():
    session = make_session(4)
    p1, p2, p3, p4 = seats(session)
    p1.gold, p2.gold = 1, 5
    assign(session, {p1.name: Role.THIEF, p2.name: Role.MERCHANT,
                     p3.name: Role.KING, p4.name: Role.WARLORD})
    log = EventLog()
    run_turns(session, deciders_for(session, p1=passive(steal=Role.MERCHANT)), log)

    # the Thief took 2 gold on its own turn, then 5 from the Merchant
    assert p1.gold == 1 + 2 + 5
    assert p2.gold == 0
    robbed = log.of_type(PLAYER_ROBBED)[0].payload
    assert robbed == {"victim": p2.name, "thief": p1.name, "amount": 5}


def test_robbed_player_collects_nothing():
    session = make_session(4)
    p1, p2, _, _ = seats(session)
    p2.gold = 4
    assign(session, {p1.name: Role.THIEF, p2.name: Role.KING})
    session.round_state.robbed = Role.KING
    resolve_turn(session, p2, Role.KING, passive())
    assert p2.gold == 0
    assert p1.gold == 4
    assert session.crown_index == 0


def test_robbery_without_a_thief_is_ignored():
    session = make_session(4)
    p2 = session.players[1]
    assign(session, {p2.name: Role.MERCHANT})
    session.round_state.robbed = Role.MERCHANT
    resolve_turn(session, p2, Role.MERCHANT, passive())
    assert p2.gold == 2 + 1


def test_assassin_cannot_target_itself():
    session = make_session(4)
    p1 = session.players[0]
    assign(session, {p1.name: Role.ASSASSIN})
    with pytest.raises(ValueError):
        resolve_turn(session, p1, Role.ASSASSIN, passive(assassinate=Role.ASSASSIN))


def test_thief_cannot_rob_the_assassin():
    session = make_session(4)
    p1 = session.players[0]
    assign(session, {p1.name: Role.THIEF})
    with pytest.raises(ValueError):
        resolve_turn(session, p1, Role.THIEF, passive(steal=Role.ASSASSIN))


def test_robbing_the_assassinated_role_moves_no_gold():
    session = make_session(4)
    p1, p2, p3, _ = seats(session)
    p2.gold = 5
    assign(session, {p1.name: Role.THIEF, p2.name: Role.KING, p3.name: Role.ASSASSIN})
    log = EventLog()
    deciders = deciders_for(session, p1=passive(steal=Role.KING),
                            p3=passive(assassinate=Role.KING))
    run_turns(session, deciders, log)

    assert session.round_state.robbed == Role.KING
    assert p2.gold == 5
    assert p1.gold == 2
    assert log.of_type(PLAYER_ROBBED) == []


# ===== AI targets =====

def test_ai_assassin_targets_highest_held_role():
    session = make_session(4)
    p1, p2, p3, p4 = seats(session)
    assign(session, {p1.name: Role.ASSASSIN, p2.name: Role.KING,
                     p3.name: Role.WARLORD, p4.name: Role.BISHOP})
    resolve_turn(session, p1, Role.ASSASSIN, passive(assassinate=HeuristicDecider().choose_assassination_target))
    assert session.round_state.assassinated == Role.WARLORD


def test_ai_thief_targets_richest_player():
    session = make_session(4)
    p1, p2, p3, p4 = seats(session)
    p2.gold, p3.gold, p4.gold = 2, 9, 4
    assign(session, {p1.name: Role.THIEF, p2.name: Role.ASSASSIN,
                     p3.name: Role.MERCHANT, p4.name: Role.KING})
    resolve_turn(session, p1, Role.THIEF, passive(steal=HeuristicDecider().choose_theft_target))
    assert session.round_state.robbed == Role.MERCHANT


# ===== Magician =====

def test_magician_swaps_hands():
    session = make_session(4)
    p1, p2, _, _ = seats(session)
    mine, theirs = [card("A")], [card("B"), card("C")]
    p1.hand[:] = mine
    p2.hand[:] = theirs
    assign(session, {p1.name: Role.MAGICIAN})
    resolve_turn(session, p1, Role.MAGICIAN, passive(magic=MagicianChoice(SWAP, p2.name)))
    assert [c.name for c in p1.hand] == ["B", "C"]
    assert [c.name for c in p2.hand] == ["A"]


def test_magician_redraw_keeps_hand_size_and_card_count():
    session = make_session(4)
    p1 = session.players[0]
    p1.hand[:] = [card("A"), card("B"), card("C")]
    assign(session, {p1.name: Role.MAGICIAN})
    before = len(session.deck) + len(p1.hand)
    resolve_turn(session, p1, Role.MAGICIAN, passive(magic=MagicianChoice(REDRAW)))
    assert len(p1.hand) == 3
    assert len(session.deck) + len(p1.hand) == before


def test_ai_magician_swaps_with_biggest_hand():
    session = make_session(4)
    p1, p2, p3, _ = seats(session)
    p2.hand[:] = [card("B")]
    p3.hand[:] = [card("C"), card("D")]
    choice = HeuristicDecider().choose_magician_action(session, p1)
    assert choice == MagicianChoice(SWAP, p3.name)


# ===== Resources and income =====

def test_draw_two_keep_the_more_expensive():
    tavern, palace = card("Tavern", "green", 1), card("Palace", "yellow", 5)
    session = make_session(4, deck=Deck([tavern, palace, card("Docks", "green", 3)]))
    p1 = session.players[0]
    assign(session, {p1.name: Role.ASSASSIN})
    resolve_turn(session, p1, Role.ASSASSIN, passive(resource=CARDS, keep=HeuristicDecider().choose_card_to_keep))
    assert p1.hand == [palace]
    assert session.deck.cards() == [card("Docks", "green", 3), tavern]


def test_cards_unavailable_when_hand_is_full():
    session = make_session(4)
    p1 = session.players[0]
    p1.hand[:] = [card(f"H{i}") for i in range(7)]
    assert resource_options(session, p1) == [GOLD]
    session.deck = Deck()
    p1.hand.clear()
    assert resource_options(session, p1) == [GOLD]


def test_king_income_and_crown():
    session = make_session(4)
    p3 = session.players[2]
    p3.city[:] = [card("Manor", "yellow", 3), card("Castle", "yellow", 4),
                  card("School of Magic", "purple", 6), card("Temple", "blue", 1)]
    assign(session, {p3.name: Role.KING})
    resolve_turn(session, p3, Role.KING, passive())
    assert p3.gold == 2 + 3
    assert session.crown_index == 2


def test_merchant_bonus_without_green():
    session = make_session(4)
    p1 = session.players[0]
    assign(session, {p1.name: Role.MERCHANT})
    resolve_turn(session, p1, Role.MERCHANT, passive())
    assert p1.gold == 3


def test_architect_draws_what_is_left():
    session = make_session(4, deck=Deck([card("Last")]))
    p1 = session.players[0]
    assign(session, {p1.name: Role.ARCHITECT})
    log = EventLog()
    resolve_turn(session, p1, Role.ARCHITECT, passive(), log)
    assert [c.name for c in p1.hand] == ["Last"]
    assert log.of_type(DECK_EXHAUSTED)[0].payload["got"] == 1


# ===== Warlord =====

def warlord_table():
    session = make_session(4)
    p1, p2, p3, p4 = seats(session)
    p1.gold = 10
    p2.city[:] = [card("Castle", "yellow", 4)]
    p3.city[:] = [card("Keep", "purple", 3), card("Palace", "yellow", 5)]
    p4.city[:] = [card("Temple", "blue", 1), card("Shack", "red", 0)]
    assign(session, {p1.name: Role.WARLORD, p2.name: Role.BISHOP,
                     p3.name: Role.KING, p4.name: Role.MERCHANT})
    return session


def test_destruction_options_respect_protection():
    session = warlord_table()
    options = {(o.target, o.card.name, o.cost) for o in destruction_options(session, session.players[0])}
    assert options == {("Player 3", "Palace", 4), ("Player 4", "Temple", 0)}


def test_assassinated_bishop_loses_protection():
    session = warlord_table()
    session.round_state.assassinated = Role.BISHOP
    names = {o.card.name for o in destruction_options(session, session.players[0])}
    assert "Castle" in names


def test_great_wall_raises_price_and_gold_limits_options():
    session = warlord_table()
    p1, _, p3, _ = seats(session)
    p3.city.append(card("Great Wall", "purple", 6))
    p1.gold = 4
    options = {(o.card.name, o.cost) for o in destruction_options(session, p1)}
    assert ("Palace", 5) not in options
    assert ("Temple", 0) in options


def test_warlord_destroys_most_expensive():
    session = warlord_table()
    p1, _, p3, _ = seats(session)
    resolve_turn(session, p1, Role.WARLORD, ScriptedDecider(resource=GOLD, build=None))
    assert [c.name for c in p3.city] == ["Keep"]
    assert p1.gold == 10 + 2 - 4


# ===== Museum and Laboratory =====

def test_museum_banks_a_card():
    session = make_session(4)
    p1 = session.players[0]
    p1.city.append(card("Museum", "purple", 4))
    p1.hand[:] = [card("A"), card("B")]
    assign(session, {p1.name: Role.ASSASSIN})
    resolve_turn(session, p1, Role.ASSASSIN, passive(museum=1))
    assert [c.name for c in p1.banked_cards] == ["B"]
    assert [c.name for c in p1.hand] == ["A"]


def test_laboratory_once_per_round():
    session = make_session(4)
    p1 = session.players[0]
    p1.city.append(card("Laboratory", "purple", 5))
    p1.hand[:] = [card("A"), card("B")]
    assign(session, {p1.name: Role.ASSASSIN})
    decider = passive(laboratory=0)
    resolve_turn(session, p1, Role.ASSASSIN, decider)
    assert p1.gold == 2 + 1
    assert [c.name for c in p1.hand] == ["B"]
    resolve_turn(session, p1, Role.ASSASSIN, decider)
    assert p1.gold == 3 + 2
    assert len(p1.hand) == 1


# ===== Building =====

def test_one_build_per_turn():
    session = make_session(4)
    p1 = session.players[0]
    p1.gold = 20
    p1.hand[:] = [card("Manor", cost=3), card("Castle", cost=4)]
    assign(session, {p1.name: Role.KING})
    resolve_turn(session, p1, Role.KING, ScriptedDecider(resource=GOLD))
    assert [c.name for c in p1.city] == ["Castle"]


def test_architect_builds_three():
    session = make_session(4)
    p1 = session.players[0]
    p1.gold = 20
    p1.hand[:] = [card("Manor", cost=3), card("Castle", cost=4), card("Palace", cost=5),
                  card("Temple", "blue", 1)]
    assign(session, {p1.name: Role.ARCHITECT})
    resolve_turn(session, p1, Role.ARCHITECT, ScriptedDecider(resource=GOLD))
    assert [c.name for c in p1.city] == ["Palace", "Castle", "Manor"]
    assert p1.gold == 20 + 2 - 12
    # Temple plus the two extra cards
    assert len(p1.hand) == 3


def test_failed_builds_forfeit_the_slot_but_not_the_turn():
    session = make_session(4)
    p1 = session.players[0]
    p1.hand[:] = [card("Palace", cost=5)]
    assign(session, {p1.name: Role.KING})
    log = EventLog()
    resolve_turn(session, p1, Role.KING, passive(build=0), log)

    assert len(log.of_type(BUILD_REJECTED)) == 3
    assert len(log.of_type(BUILD_FORFEITED)) == 1
    assert log.types()[-1] == TURN_ENDED
    assert p1.gold == 2
    assert [c.name for c in p1.hand] == ["Palace"]


def test_rejected_then_successful_build():
    session = make_session(4)
    p1 = session.players[0]
    p1.gold = 1
    p1.hand[:] = [card("Palace", cost=5), card("Manor", cost=3)]
    assign(session, {p1.name: Role.KING})
    log = EventLog()
    resolve_turn(session, p1, Role.KING, passive(build=[0, 1]), log)
    assert len(log.of_type(BUILD_REJECTED)) == 1
    assert [e.payload["district"] for e in log.of_type(DISTRICT_BUILT)] == ["Manor"]
    assert p1.gold == 0


def test_first_full_city_is_remembered():
    session = make_session(4)
    p1 = session.players[0]
    p1.gold = 10
    p1.city[:] = [card(f"D{i}") for i in range(7)]
    p1.hand[:] = [card("Palace", cost=5)]
    assign(session, {p1.name: Role.KING})
    resolve_turn(session, p1, Role.KING, ScriptedDecider(resource=GOLD))
    assert len(p1.city) == 8
    assert session.first_completed == p1.name
