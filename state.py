#!/usr/bin/env python3
"""
state.py — Table aggregate: marbles, hands, piles, turn cursor, pending split

This module defines:
- the per-table state (one GameStateTD per table, passed explicitly everywhere)
- payload / result shapes shared by the executor, the oracle and the turn controller
- helpers for initialization, lookups and integrity checks

Marble moves belong in actions.py / captures.py.
Turn orchestration belongs in turns.py.

by Sziller
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple, TypedDict

from board import (
    HOME_SIZE,
    MARBLES_PER_SEAT,
    TRACK_LENGTH,
    SEATS,
    Location,
    MarbleTD,
    Marbles,
    Seat,
    Team,
    count_locations,
)
from cards import CardTD


# -----------------------------
# Move payloads
# -----------------------------
class SubMoveTD(TypedDict, total=False):
    marble_id: int
    owner: Optional[Seat]        # None -> the acting seat
    spaces: int
    enter_home: Optional[bool]   # only meaningful when the move reaches the home entry


class MoveTD(TypedDict, total=False):
    """
    Card-play payload (what a client sends with a card index).

    - A / J / Q / K:  action ("enter" | "move"), marble_id, owner, enter_home
    - 2-6, 8, 10:     marble_id, owner, enter_home
    - 7:              moves: [SubMoveTD, (SubMoveTD)]
    - 9:              forward: SubMoveTD, backward: SubMoveTD
    - Joker:          source_marble_id, owner, target_seat, target_marble_id
    """
    action: Literal["enter", "move"]
    marble_id: int
    owner: Optional[Seat]
    enter_home: Optional[bool]
    moves: List[SubMoveTD]
    forward: SubMoveTD
    backward: SubMoveTD
    source_marble_id: int
    target_seat: Seat
    target_marble_id: int


# -----------------------------
# Results
# -----------------------------
class LandingEffectTD(TypedDict):
    by_seat: Seat          # owner of the marble that landed
    by_marble: int
    seat: Seat             # owner of the displaced marble
    marble: int
    from_cell: int
    sent_to: Literal["start", "home_entry"]
    position: int          # start slot or home-entry cell


class MovedTD(TypedDict):
    seat: Seat
    marble: int
    location: Location
    position: int


class MoveResultTD(TypedDict):
    moved: List[MovedTD]
    effects: List[LandingEffectTD]


class PendingSplitTD(TypedDict):
    seat: Seat
    card_index: Optional[int]   # None when the caller manages the cards itself
    card_type: int              # 7 or 9
    first_move: SubMoveTD
    remaining_spaces: int


class ActionResultTD(TypedDict):
    seat: Seat
    card: Optional[CardTD]
    moved: List[MovedTD]
    effects: List[LandingEffectTD]
    pending: Optional[PendingSplitTD]
    winner: Optional[Team]
    next_seat: Optional[Seat]


# -----------------------------
# Table aggregate
# -----------------------------
class GameStateTD(TypedDict):
    marbles: Marbles

    # Cards
    deck: List[CardTD]                     # shared draw pile (top = last element)
    hands: Dict[Seat, List[CardTD]]
    discards: Dict[Seat, List[CardTD]]     # per-seat discard piles

    # Turn cursor
    player_order: List[Seat]
    current_player_index: int
    turn_no: int

    # Two-leg split bookkeeping (7 / 9)
    pending_split: Optional[PendingSplitTD]

    started: bool
    winner: Optional[Team]

    # Public, centrally recorded log entries (transparency)
    public_log: List[str]


def build_marbles() -> Marbles:
    """Every seat starts with 5 marbles, marble N in start slot N."""
    return {
        seat: [{"location": "start", "position": marble_id} for marble_id in range(MARBLES_PER_SEAT)]
        for seat in SEATS
    }


def build_table() -> GameStateTD:
    """
    Build an empty table: all marbles in start, no cards dealt, game not started.
    """
    return {
        "marbles": build_marbles(),
        "deck": [],
        "hands": {seat: [] for seat in SEATS},
        "discards": {seat: [] for seat in SEATS},
        "player_order": list(SEATS),
        "current_player_index": 0,
        "turn_no": 0,
        "pending_split": None,
        "started": False,
        "winner": None,
        "public_log": [],
    }


def scratch_copy(state: GameStateTD) -> GameStateTD:
    """
    Copy of the table whose marbles can be mutated freely.

    Cards are shared with the original (the executor never touches them);
    the log and the pending split are fresh.
    """
    scratch: GameStateTD = dict(state)  # type: ignore[assignment]
    scratch["marbles"] = snapshot_marbles(state)
    scratch["pending_split"] = None
    scratch["public_log"] = []
    return scratch


# -----------------------------
# Lookups (contract checks raise ValueError)
# -----------------------------
def ensure_seat(seat: str) -> Seat:
    if seat not in SEATS:
        raise ValueError(f"Unknown seat: {seat!r}")
    return seat  # type: ignore[return-value]


def get_marble(state: GameStateTD, owner: Seat, marble_id: int) -> MarbleTD:
    ensure_seat(owner)
    if not isinstance(marble_id, int) or not 0 <= marble_id < MARBLES_PER_SEAT:
        raise ValueError(f"Unknown marble id for {owner}: {marble_id!r}")
    return state["marbles"][owner][marble_id]


def current_seat(state: GameStateTD) -> Seat:
    return state["player_order"][state["current_player_index"]]


def is_active(state: GameStateTD) -> bool:
    return state["started"] and state["winner"] is None


def snapshot_marbles(state: GameStateTD) -> Marbles:
    return {seat: [dict(marble) for marble in marbles] for seat, marbles in state["marbles"].items()}  # type: ignore[misc]


def restore_marbles(state: GameStateTD, snapshot: Marbles) -> None:
    """Put a snapshot back IN PLACE (callers may hold references to the lists)."""
    for seat, marbles in snapshot.items():
        state["marbles"][seat][:] = marbles


# -----------------------------
# Integrity checks
# -----------------------------
def validate_marbles(state: GameStateTD) -> None:
    """
    Debug/integrity check:
    - every seat owns exactly 5 marbles, start+track+home == 5
    - a marble in start sits in the start slot equal to its id
    - no two marbles share a track cell
    - no two marbles of a seat share a home index
    """
    seen_cells: Dict[int, Tuple[Seat, int]] = {}

    for seat in SEATS:
        marbles = state["marbles"][seat]
        assert len(marbles) == MARBLES_PER_SEAT, f"{seat} owns {len(marbles)} marbles"
        counts = count_locations(state["marbles"], seat)
        assert sum(counts.values()) == MARBLES_PER_SEAT, f"{seat} location counts {counts}"

        seen_home: set[int] = set()
        for marble_id, marble in enumerate(marbles):
            loc = marble["location"]
            pos = marble["position"]
            if loc == "start":
                assert pos == marble_id, f"{seat} marble {marble_id} in start slot {pos}"
            elif loc == "home":
                assert 0 <= pos < HOME_SIZE, f"{seat} marble {marble_id} home index {pos}"
                assert pos not in seen_home, f"{seat} home index {pos} used twice"
                seen_home.add(pos)
            else:
                assert 0 <= pos < TRACK_LENGTH, f"{seat} marble {marble_id} off track at {pos}"
                assert pos not in seen_cells, (
                    f"track cell {pos} held by {seen_cells.get(pos)} and {(seat, marble_id)}"
                )
                seen_cells[pos] = (seat, marble_id)
