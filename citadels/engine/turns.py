"""
Per-player turn resolution.

A turn runs in a fixed order:
    1. role pre-action (Assassin, Thief, Magician)
    2. robbery check, which ends the turn
    3. resources: 2 gold or draw two and keep one
    4. Laboratory
    5. role income (Architect draws instead, King takes the crown)
    6. Warlord destruction
    7. Museum banking
    8. building
"""

from citadels.engine import (
    ARCHITECT_EXTRA_CARDS,
    ARCHITECT_MAX_BUILDS,
    CARDS_PER_DRAW,
    CITY_LIMIT,
    GOLD_PER_COLLECT,
    MAX_BUILD_ATTEMPTS,
    MAX_BUILDS,
)
from citadels.engine.deciders import REDRAW, SKIP, SWAP, Decider
from citadels.engine.definitions import DistrictCard, MUSEUM, Role
from citadels.engine.effects import can_use_laboratory, mark_laboratory_used, role_income
from citadels.engine.events import (
    EventLog,
    assassination_declared,
    build_forfeited,
    build_rejected,
    card_banked,
    card_kept,
    cards_drawn,
    crown_transferred,
    deck_exhausted,
    district_built,
    district_destroyed,
    gold_collected,
    hand_redrawn,
    hands_swapped,
    income_collected,
    laboratory_used,
    player_robbed,
    theft_declared,
    turn_ended,
)
from citadels.engine.queries import (
    GOLD,
    assassination_candidates,
    destruction_options,
    resource_options,
    theft_candidates,
)
from citadels.engine.state import GameSession, Player


def resolve_turn(
    session: GameSession,
    player: Player,
    role: Role,
    decider: Decider,
    log: EventLog | None = None,
) -> None:
    """
    Play one player's turn for the role they hold. The caller has already
    checked that the role is not assassinated.

    Raises:
        ValueError: if the decider returns a choice outside the options it was given.
    """
    log = log if log is not None else EventLog()
    rs = session.round_state
    rs.current_player = player.name
    rs.current_role = role

    if role == Role.ASSASSIN:
        _assassinate(session, player, decider, log)
    elif role == Role.THIEF:
        _declare_theft(session, player, decider, log)
    elif role == Role.MAGICIAN:
        _use_magic(session, player, decider, log)

    if rs.robbed == role and _rob(session, player, log):
        log.emit(turn_ended(player.name, role.display_name))
        return

    _collect_resources(session, player, decider, log)
    _use_laboratory(session, player, decider, log)
    _collect_income(session, player, role, log)
    if role == Role.WARLORD:
        _destroy(session, player, decider, log)
    _bank_in_museum(session, player, decider, log)
    _build(session, player, role, decider, log)

    log.emit(turn_ended(player.name, role.display_name))


# ===== Pre-actions =====

def _assassinate(session: GameSession, player: Player, decider: Decider, log: EventLog) -> None:
    candidates = assassination_candidates()
    target = decider.choose_assassination_target(session, player, candidates)
    if target is None:
        return
    if target not in candidates:
        raise ValueError(f"The Assassin cannot target {target!r}")
    session.round_state.assassinated = target
    log.emit(assassination_declared(player.name, target.display_name))


def _declare_theft(session: GameSession, player: Player, decider: Decider, log: EventLog) -> None:
    candidates = theft_candidates(session)
    target = decider.choose_theft_target(session, player, candidates)
    if target is None:
        return
    if target not in candidates:
        raise ValueError(f"The Thief cannot target {target!r}")
    session.round_state.robbed = target
    log.emit(theft_declared(player.name, target.display_name))


def _use_magic(session: GameSession, player: Player, decider: Decider, log: EventLog) -> None:
    choice = decider.choose_magician_action(session, player)
    if choice.action == SKIP:
        return
    if choice.action == SWAP:
        if choice.target is None or choice.target == player.name:
            raise ValueError("The Magician must swap with another player")
        other = session.player(choice.target)
        swap_hands(player, other)
        log.emit(hands_swapped(player.name, other.name, len(player.hand), len(other.hand)))
    elif choice.action == REDRAW:
        discarded, drawn = redraw_hand(session, player)
        log.emit(hand_redrawn(player.name, discarded, drawn))
    else:
        raise ValueError(f"Unknown Magician action: {choice.action}")


def swap_hands(a: Player, b: Player) -> None:
    a_hand, b_hand = list(a.hand), list(b.hand)
    a.hand.clear()
    b.hand.clear()
    a.hand.extend(b_hand)
    b.hand.extend(a_hand)


def redraw_hand(session: GameSession, player: Player) -> tuple[int, int]:
    """Put the whole hand on the bottom of the deck, draw as many cards, then reshuffle."""
    old_hand = list(player.hand)
    player.hand.clear()
    for card in old_hand:
        session.deck.place_on_bottom(card)
    drawn = 0
    for _ in old_hand:
        if player.draw_card(session.deck.draw()):
            drawn += 1
    session.deck.shuffle(session.rng)
    return len(old_hand), drawn


def _rob(session: GameSession, victim: Player, log: EventLog) -> bool:
    """Move all of the victim's gold to the Thief. False when nobody holds the Thief."""
    thief = session.holder_of(Role.THIEF)
    if thief is None:
        return False
    amount = victim.take_all_gold()
    thief.add_gold(amount)
    log.emit(player_robbed(victim.name, thief.name, amount))
    return True


# ===== Resources and income =====

def draw_cards(session: GameSession, count: int) -> list[DistrictCard]:
    """Draw up to count cards from the deck, fewer if it runs out."""
    drawn = []
    for _ in range(count):
        card = session.deck.draw()
        if card is None:
            break
        drawn.append(card)
    return drawn


def _collect_resources(session: GameSession, player: Player, decider: Decider, log: EventLog) -> None:
    options = resource_options(session, player)
    choice = decider.choose_resource(session, player, options)
    if choice not in options:
        raise ValueError(f"Resource choice {choice!r} is not one of {options}")

    if choice == GOLD:
        player.add_gold(GOLD_PER_COLLECT)
        log.emit(gold_collected(player.name, GOLD_PER_COLLECT, player.gold))
        return

    drawn = draw_cards(session, CARDS_PER_DRAW)
    if len(drawn) < CARDS_PER_DRAW:
        log.emit(deck_exhausted(player.name, CARDS_PER_DRAW, len(drawn)))
    if not drawn:
        return
    log.emit(cards_drawn(player.name, [c.name for c in drawn]))

    keep = 0
    if len(drawn) > 1:
        keep = decider.choose_card_to_keep(session, player, drawn)
        if keep < 0 or keep >= len(drawn):
            raise ValueError(f"Card index {keep} out of range")
    kept = drawn.pop(keep)
    player.draw_card(kept)
    for card in drawn:
        session.deck.place_on_bottom(card)
    log.emit(card_kept(player.name, kept.name, drawn[0].name if drawn else None))


def _use_laboratory(session: GameSession, player: Player, decider: Decider, log: EventLog) -> None:
    rs = session.round_state
    if not can_use_laboratory(rs, player):
        return
    index = decider.choose_laboratory_discard(session, player)
    if index is None or index < 0 or index >= len(player.hand):
        return
    card = player.hand.pop(index)
    player.add_gold(1)
    mark_laboratory_used(rs, player)
    log.emit(laboratory_used(player.name, card.name))


def _collect_income(session: GameSession, player: Player, role: Role, log: EventLog) -> None:
    if role == Role.ARCHITECT:
        extra = draw_cards(session, ARCHITECT_EXTRA_CARDS)
        for card in extra:
            player.draw_card(card)
        if extra:
            log.emit(cards_drawn(player.name, [c.name for c in extra]))
        if len(extra) < ARCHITECT_EXTRA_CARDS:
            log.emit(deck_exhausted(player.name, ARCHITECT_EXTRA_CARDS, len(extra)))
        return

    if role == Role.KING:
        session.crown_index = session.index_of(player.name)
        log.emit(crown_transferred(player.name))

    income = role_income(player, role)
    if income > 0:
        player.add_gold(income)
        log.emit(income_collected(player.name, role.display_name, income, player.gold))


# ===== Warlord and Museum =====

def _destroy(session: GameSession, warlord: Player, decider: Decider, log: EventLog) -> None:
    options = destruction_options(session, warlord)
    if not options:
        return
    choice = decider.choose_destruction(session, warlord, options)
    if choice is None:
        return
    if choice not in options:
        raise ValueError(f"{choice.card.name} in {choice.target}'s city cannot be destroyed")
    owner = session.player(choice.target)
    warlord.spend_gold(choice.cost)
    owner.remove_district(choice.card)
    log.emit(district_destroyed(warlord.name, owner.name, choice.card.name, choice.cost))


def _bank_in_museum(session: GameSession, player: Player, decider: Decider, log: EventLog) -> None:
    if not player.has_district(MUSEUM) or not player.hand:
        return
    index = decider.choose_museum_bank(session, player)
    if index is None or index < 0 or index >= len(player.hand):
        return
    card = player.hand.pop(index)
    player.bank_card(card)
    log.emit(card_banked(player.name, card.name))


# ===== Building =====

def max_builds_for(role: Role) -> int:
    return ARCHITECT_MAX_BUILDS if role == Role.ARCHITECT else MAX_BUILDS


def _build(session: GameSession, player: Player, role: Role, decider: Decider, log: EventLog) -> None:
    """
    Each build slot allows MAX_BUILD_ATTEMPTS rejected attempts before it is forfeited.
    A None answer from the decider ends building for the turn.
    """
    total = max_builds_for(role)
    for slot in range(total):
        attempts = 0
        while True:
            index = decider.choose_build(session, player, total - slot)
            if index is None:
                return
            try:
                card = player.build_district(index, CITY_LIMIT)
            except ValueError as e:
                attempts += 1
                log.emit(build_rejected(player.name, str(e), attempts))
                if attempts >= MAX_BUILD_ATTEMPTS:
                    log.emit(build_forfeited(player.name, slot + 1))
                    break
                continue
            log.emit(district_built(player.name, card.name, card.cost, player.gold))
            if len(player.city) >= CITY_LIMIT and session.first_completed is None:
                session.first_completed = player.name
            break
