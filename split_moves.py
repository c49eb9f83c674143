#!/usr/bin/env python3
"""
split_moves.py — Two-leg play of the 7 and the 9

States:  Idle -> AwaitingSecondMove -> Idle

- begin_split():    applies leg one immediately and (unless the 7 was used in
                    full) stores a PendingSplitTD on the table
- complete_split(): applies leg two with exactly the remaining spaces
- clear_pending_split(): abandons the record. Leg one is NEVER reverted.

Leg one is refused up front (table unchanged) when no leg two would be
possible afterwards. A failed leg two leaves the record in place, so the
seat may try another marble.

Cards are only looked at, never moved: discarding the finished card
is done by turns.py.

by Sziller
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import actions
import legality
from board import Seat, is_team_finished
from cards import SPLIT_CARD_TYPES, card_rule
from errors import IllegalSplit, InvalidCardChoice, NoPendingSplit
from state import (
    GameStateTD,
    MoveResultTD,
    PendingSplitTD,
    SubMoveTD,
    restore_marbles,
    snapshot_marbles,
)

logger = logging.getLogger(__name__)

FIRST_LEG_MAX = {7: 7, 9: 8}


def pending_for(state: GameStateTD, seat: Seat) -> Optional[PendingSplitTD]:
    pending = state["pending_split"]
    if pending is not None and pending["seat"] == seat:
        return pending
    return None


def clear_pending_split(state: GameStateTD, reason: str = "") -> Optional[PendingSplitTD]:
    """Drop the pending record (if any) and return it. The board is left as is."""
    pending = state["pending_split"]
    state["pending_split"] = None
    if pending is not None:
        logger.debug("Abandoned %s split of %s (%s), %d spaces unused",
                     pending["card_type"], pending["seat"], reason or "cleared", pending["remaining_spaces"])
    return pending


def check_split_card(state: GameStateTD, seat: Seat, card_index: int, card_type: int) -> None:
    """The card at `card_index` must be in the seat's hand and match `card_type`."""
    hand = state["hands"][seat]
    if not 0 <= card_index < len(hand):
        raise InvalidCardChoice(
            "No card at that index",
            context={"seat": seat, "card_index": card_index, "hand_size": len(hand)},
        )
    if card_rule(hand[card_index])["kind"] != SPLIT_CARD_TYPES[card_type]:
        raise InvalidCardChoice(
            f"Card {hand[card_index]['value']} is not a {card_type}",
            context={"seat": seat, "card_index": card_index},
        )


def _normalized(seat: Seat, sub: SubMoveTD) -> SubMoveTD:
    normalized: SubMoveTD = dict(sub)  # type: ignore[assignment]
    normalized["owner"], normalized["marble_id"] = actions.sub_move_ref(seat, sub)
    return normalized


# -----------------------------
# Leg one
# -----------------------------
def begin_split(
    state: GameStateTD,
    seat: Seat,
    card_type: int,
    first: SubMoveTD,
    *,
    card_index: Optional[int] = None,
) -> Tuple[MoveResultTD, Optional[PendingSplitTD]]:
    """
    Apply the first (forward) leg of a 7 or 9.

    Returns (result, pending). pending is None when the 7 was used in full.
    An existing pending record is replaced only if this call succeeds.
    """
    if card_type not in SPLIT_CARD_TYPES:
        raise IllegalSplit(f"Only 7 and 9 can be split, not {card_type}", context={"card_type": card_type})
    if card_index is not None:
        check_split_card(state, seat, card_index, card_type)

    spaces = first.get("spaces")
    max_first = FIRST_LEG_MAX[card_type]
    if not isinstance(spaces, int) or not 1 <= spaces <= max_first:
        raise IllegalSplit(
            f"First move of a {card_type} must be 1-{max_first} spaces",
            context={"spaces": spaces},
        )

    first = _normalized(seat, first)
    snapshot = snapshot_marbles(state)
    result = actions.forward_sub_move(state, seat, first)

    if spaces == card_type:
        clear_pending_split(state, "full 7 played")
        return result, None

    pending: PendingSplitTD = {
        "seat": seat,
        "card_index": card_index,
        "card_type": card_type,
        "first_move": first,
        "remaining_spaces": card_type - spaces,
    }

    if not is_team_finished(state["marbles"], seat) and not legality.has_completion(state, seat, pending):
        restore_marbles(state, snapshot)
        raise IllegalSplit(
            f"No marble can move the remaining {pending['remaining_spaces']} spaces",
            context={"card_type": card_type, "spaces": spaces},
        )

    state["pending_split"] = pending
    logger.debug("%s split %s: %d used, %d remaining", seat, card_type, spaces, pending["remaining_spaces"])
    return result, pending


# -----------------------------
# Leg two
# -----------------------------
def complete_split(state: GameStateTD, seat: Seat, second: SubMoveTD) -> Tuple[MoveResultTD, PendingSplitTD]:
    """
    Apply the second leg of the seat's pending split: forward for a 7,
    backward for a 9. `spaces` may be omitted (the remainder is used).
    """
    pending = pending_for(state, seat)
    if pending is None:
        raise NoPendingSplit("No split move in progress", context={"seat": seat})

    second = _normalized(seat, second)
    remaining = pending["remaining_spaces"]
    spaces = second.setdefault("spaces", remaining)
    if spaces != remaining:
        raise IllegalSplit(
            f"Second move must use exactly {remaining} spaces",
            context={"spaces": spaces, "remaining": remaining},
        )

    first = pending["first_move"]
    if (second["owner"], second["marble_id"]) == (first["owner"], first["marble_id"]):
        raise IllegalSplit("Must use a different marble for the second move")

    if pending["card_type"] == 7:
        result = actions.forward_sub_move(state, seat, second)
    else:
        result = actions.backward_sub_move(state, seat, second)

    state["pending_split"] = None
    return result, pending
