#!/usr/bin/env python3
"""
web/engine_ui.py — Adapter between the JSON API and the engine.

This module is the ONLY place that translates engine state into:
- prompt line text
- playable cards (per hand slot)
- applying a request body to the engine (ACTION_HANDLERS)

The server must remain dumb.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, TypedDict

import legality
import split_moves
import turns
from board import Seat
from cards import card_label
from state import ActionResultTD, GameStateTD, current_seat

from .game_manager import TableSession
from .models import CompleteMoveRequest, DiscardRequest, PartialMoveRequest, PlayRequest


class UiCardTD(TypedDict):
    card_index: int
    label: str
    playable: bool


def compute_prompt(state: GameStateTD, seat: Optional[Seat]) -> str:
    if state["winner"] is not None:
        return f"Game over. {state['winner']} wins."
    if not state["started"]:
        return "Waiting for the game to start."

    turn_seat = current_seat(state)
    if seat != turn_seat:
        return f"Turn {state['turn_no']}. Waiting for {turn_seat}."

    pending = split_moves.pending_for(state, seat)
    if pending is not None:
        direction = "forward" if pending["card_type"] == 7 else "backward"
        return (
            f"Turn {state['turn_no']}. Finish your {pending['card_type']}: "
            f"move another marble {pending['remaining_spaces']} {direction}."
        )
    if not legality.has_legal_play(state, seat):
        return f"Turn {state['turn_no']}. No card can be played: discard one."
    return f"Turn {state['turn_no']}. Your turn: play a card."


def playable_cards(state: GameStateTD, seat: Seat) -> List[UiCardTD]:
    return [
        {
            "card_index": index,
            "label": card_label(card),
            "playable": legality.card_has_legal_play(state, seat, card),
        }
        for index, card in enumerate(state["hands"][seat])
    ]


# -------------------------------------------------------------------
# Request body -> engine call
# -------------------------------------------------------------------
def _apply_play(sess: TableSession, body: PlayRequest) -> ActionResultTD:
    return turns.play_card(sess.state, body.seat, body.card_index, body.to_move(), rng=sess.rng)


def _apply_partial(sess: TableSession, body: PartialMoveRequest) -> ActionResultTD:
    return turns.begin_partial_move(
        sess.state, body.seat, body.card_type, body.move.to_sub_move(),
        card_index=body.card_index, rng=sess.rng,
    )


def _apply_complete(sess: TableSession, body: CompleteMoveRequest) -> ActionResultTD:
    return turns.complete_partial_move(sess.state, body.seat, body.move.to_sub_move(), rng=sess.rng)


def _apply_discard(sess: TableSession, body: DiscardRequest) -> ActionResultTD:
    return turns.discard(sess.state, body.seat, body.card_index, rng=sess.rng)


ACTION_HANDLERS: Dict[str, Callable[[TableSession, Any], ActionResultTD]] = {
    "play": _apply_play,
    "partial": _apply_partial,
    "complete": _apply_complete,
    "discard": _apply_discard,
}


def apply_action(sess: TableSession, action_id: str, body: Any) -> ActionResultTD:
    """
    Single entry point for the web layer. Runs under the table lock.
    """
    handler = ACTION_HANDLERS.get(action_id)
    if handler is None:
        raise ValueError(f"Unknown action: {action_id!r}")
    with sess.lock:
        return handler(sess, body)
