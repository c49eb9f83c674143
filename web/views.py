#!/usr/bin/env python3
"""
web/views.py — View-model builder for the JSON API.

This module converts a table into what ONE seat is allowed to see.
Clients should not interpret engine state; they render this view.

build_seat_view(sess, seat) -> {
  "table_id": str,
  "prompt": str,
  "board": {"marbles": {...}, "current_seat": ..., "turn_no": ..., "winner": ...},
  "hand": [ {card_index, label, playable}, ... ],    (own hand only)
  "players": [ {seat, team, hand_size, top_discard, finished}, ... ],
  "pending": {...} | None,
  "log": [...]
}
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from board import SEATS, Seat, is_finished, team_of
from cards import card_label
from state import current_seat, is_active

from . import engine_ui
from .game_manager import TableSession

LOG_TAIL = 50


def _players(sess: TableSession) -> List[Dict[str, Any]]:
    state = sess.state
    players = []
    for seat in SEATS:
        discards = state["discards"][seat]
        players.append({
            "seat": seat,
            "team": team_of(seat),
            "hand_size": len(state["hands"][seat]),
            "top_discard": card_label(discards[-1]) if discards else None,
            "finished": is_finished(state["marbles"], seat),
        })
    return players


def build_seat_view(sess: TableSession, seat: Optional[Seat] = None) -> Dict[str, Any]:
    """`seat=None` gives the public view (no hand)."""
    state = sess.state
    turn_seat = current_seat(state)

    hand: List[engine_ui.UiCardTD] = []
    if seat is not None:
        if seat == turn_seat and is_active(state):
            hand = engine_ui.playable_cards(state, seat)
        else:
            hand = [
                {"card_index": index, "label": card_label(card), "playable": False}
                for index, card in enumerate(state["hands"][seat])
            ]

    return {
        "table_id": sess.table_id,
        "seat": seat,
        "prompt": engine_ui.compute_prompt(state, seat),
        "board": {
            "marbles": state["marbles"],
            "current_seat": turn_seat,
            "turn_no": state["turn_no"],
            "draw_pile": len(state["deck"]),
            "winner": state["winner"],
        },
        "hand": hand,
        "players": _players(sess),
        "pending": state["pending_split"],
        "log": state["public_log"][-LOG_TAIL:],
    }
