#!/usr/bin/env python3
"""
table_setup.py — Table setup helpers: deck, dealing, drawing, arbitrary positions

This module is responsible for creating *legal initial tables*
on top of a freshly built aggregate (state.build_table).

It does NOT:
- implement marble moves (see actions.py)
- decide whose turn it is after the start (see turns.py)

It DOES:
- build + shuffle the 108-card draw pile
- deal 5 cards per seat in play order
- draw single replacement cards, recombining the discard piles when the draw pile runs out
- place marbles on arbitrary cells (test / replay positions)

by Sziller
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Tuple

from board import HOME_SIZE, SEATS, TRACK_LENGTH, Location, Seat
from cards import HAND_SIZE, CardTD, build_deck, shuffle_deck
from state import GameStateTD, build_table, ensure_seat, get_marble, validate_marbles

logger = logging.getLogger(__name__)


# -------------------------------------------------
# Draw pile
# -------------------------------------------------
def recombine_discards(state: GameStateTD, *, rng: Optional[random.Random] = None) -> int:
    """
    Move every seat's discard pile into the (empty) draw pile and shuffle it.

    Returns the number of cards that came back.
    """
    returned: List[CardTD] = []
    for seat in SEATS:
        returned.extend(state["discards"][seat])
        state["discards"][seat] = []

    state["deck"].extend(returned)
    shuffle_deck(state["deck"], rng=rng)
    logger.info("Recombined %d discarded cards into the draw pile", len(returned))
    return len(returned)


def draw_card(state: GameStateTD, seat: Seat, *, rng: Optional[random.Random] = None) -> Optional[CardTD]:
    """
    Draw the top card of the draw pile into the seat's hand.

    An empty pile is refilled from the discard piles first. Returns None
    only when no card is left anywhere (the hand then stays short).
    """
    ensure_seat(seat)
    if not state["deck"]:
        recombine_discards(state, rng=rng)
    if not state["deck"]:
        logger.warning("No cards left to draw for %s", seat)
        return None

    card = state["deck"].pop()
    state["hands"][seat].append(card)
    return card


def deal_cards(state: GameStateTD, *, rng: Optional[random.Random] = None) -> None:
    """Deal HAND_SIZE cards to every seat, one at a time in play order."""
    for _ in range(HAND_SIZE):
        for seat in state["player_order"]:
            draw_card(state, seat, rng=rng)


# -------------------------------------------------
# Arbitrary positions
# -------------------------------------------------
def place_marbles(
    state: GameStateTD,
    layout: Dict[Tuple[Seat, int], Tuple[Location, int]],
) -> None:
    """
    Put marbles directly onto given locations (no rules applied).

    layout:
        { (seat, marble_id): (location, position) }

    A marble sent to "start" always takes its own slot (position is ignored).
    The resulting table must pass validate_marbles().
    """
    for (seat, marble_id), (location, position) in layout.items():
        marble = get_marble(state, seat, marble_id)
        if location == "start":
            position = marble_id
        elif location == "track" and not 0 <= position < TRACK_LENGTH:
            raise ValueError(f"Track cell out of range: {position}")
        elif location == "home" and not 0 <= position < HOME_SIZE:
            raise ValueError(f"Home index out of range: {position}")
        marble["location"] = location
        marble["position"] = position

    validate_marbles(state)


# -------------------------------------------------
# One-call setup
# -------------------------------------------------
def new_table() -> GameStateTD:
    return build_table()


def setup_new_game(
    state: Optional[GameStateTD] = None,
    *,
    starting_seat: Seat = "Seat1",
    rng: Optional[random.Random] = None,
) -> GameStateTD:
    """
    One-call setup orchestrator: fresh shuffled deck, 5 cards each,
    starting seat on turn, game started.
    """
    state = state if state is not None else new_table()
    ensure_seat(starting_seat)

    state["deck"] = shuffle_deck(build_deck(), rng=rng)
    state["hands"] = {seat: [] for seat in SEATS}
    state["discards"] = {seat: [] for seat in SEATS}
    deal_cards(state, rng=rng)

    state["current_player_index"] = state["player_order"].index(starting_seat)
    state["turn_no"] = 1
    state["pending_split"] = None
    state["winner"] = None
    state["started"] = True
    state["public_log"].append(f"Game started. {starting_seat} begins.")
    logger.info("New game started, %s begins", starting_seat)
    return state
