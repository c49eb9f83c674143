#!/usr/bin/env python3
"""
turns.py — Turn controller: turn ownership, card play, discard, win detection

Every engine call from the outside comes through here:

- bare rule moves (enter, move_forward, ...) guarded by turn ownership
- play_card(): card-driven dispatch (CARD_HANDLERS), discard + redraw
- begin_partial_move() / complete_partial_move(): the two legs of a 7 / 9
- discard(): only when the legality oracle finds nothing to play
- public broadcast output + centrally recorded log

After every mutation the team-finish check runs: the game ends on the spot
and the turn does not advance. A completed action otherwise moves the turn
to the next seat in player_order and abandons any pending split.

by Sziller
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional, Set

import actions
import legality
import split_moves
from board import TEAMS, Seat, Team, is_finished
from cards import CardKind, CardTD, card_label, card_rule
from errors import GameNotActive, InvalidCardChoice, NoLegalDiscard, NotYourTurn
from state import (
    ActionResultTD,
    GameStateTD,
    LandingEffectTD,
    MoveResultTD,
    MoveTD,
    PendingSplitTD,
    SubMoveTD,
    current_seat,
    ensure_seat,
    get_marble,
)
from table_setup import draw_card

logger = logging.getLogger(__name__)


# -----------------------------
# Small infrastructure helpers
# -----------------------------
def broadcast(state: GameStateTD, msg: str) -> None:
    """Public, transparent message to all seats + stored centrally."""
    logger.info(msg)
    state["public_log"].append(msg)


def broadcast_effects(state: GameStateTD, effects: List[LandingEffectTD]) -> None:
    for effect in effects:
        if effect["sent_to"] == "start":
            broadcast(state, f"{effect['by_seat']} bumped {effect['seat']}'s marble {effect['marble']} back to start")
        elif effect["from_cell"] == effect["position"]:
            broadcast(state, f"{effect['seat']}'s marble {effect['marble']} holds its home entry ({effect['position']})")
        else:
            broadcast(
                state,
                f"{effect['by_seat']} boosted {effect['seat']}'s marble {effect['marble']} "
                f"to its home entry ({effect['position']})",
            )


def require_turn(state: GameStateTD, seat: Seat) -> None:
    ensure_seat(seat)
    if not state["started"]:
        raise GameNotActive("Game has not started")
    if state["winner"] is not None:
        raise GameNotActive("Game is over", context={"winner": state["winner"]})
    if current_seat(state) != seat:
        raise NotYourTurn("Not your turn", context={"seat": seat, "current": current_seat(state)})


def check_winner(state: GameStateTD) -> Optional[Team]:
    """A team wins the instant both of its seats have all marbles home."""
    if state["winner"] is not None:
        return state["winner"]
    for team, seats in TEAMS.items():
        if all(is_finished(state["marbles"], seat) for seat in seats):
            state["winner"] = team
            split_moves.clear_pending_split(state, "game over")
            broadcast(state, f"{team} ({' & '.join(seats)}) wins the game!")
            return team
    return None


def next_turn(state: GameStateTD) -> Seat:
    """Advance to the next seat. A pending split is abandoned (leg one stays)."""
    split_moves.clear_pending_split(state, "turn change")
    state["current_player_index"] = (state["current_player_index"] + 1) % len(state["player_order"])
    state["turn_no"] += 1
    seat = current_seat(state)
    logger.info("Turn %d: %s", state["turn_no"], seat)
    return seat


def _finish(
    state: GameStateTD,
    seat: Seat,
    result: MoveResultTD,
    *,
    card: Optional[CardTD] = None,
    pending: Optional[PendingSplitTD] = None,
    advance: bool = True,
) -> ActionResultTD:
    broadcast_effects(state, result["effects"])
    winner = check_winner(state)
    next_seat: Optional[Seat] = None
    if winner is None:
        next_seat = next_turn(state) if advance else current_seat(state)
    return {
        "seat": seat,
        "card": card,
        "moved": result["moved"],
        "effects": result["effects"],
        "pending": state["pending_split"] if winner is None else None,
        "winner": winner,
        "next_seat": next_seat,
    }


def _hand_card(state: GameStateTD, seat: Seat, card_index: int) -> CardTD:
    hand = state["hands"][seat]
    if not isinstance(card_index, int) or not 0 <= card_index < len(hand):
        raise InvalidCardChoice(
            "No card at that index",
            context={"seat": seat, "card_index": card_index, "hand_size": len(hand)},
        )
    return hand[card_index]


def _consume_card(
    state: GameStateTD,
    seat: Seat,
    card_index: int,
    *,
    rng: Optional[random.Random] = None,
) -> CardTD:
    """Hand -> own discard pile, then draw a replacement."""
    card = state["hands"][seat].pop(card_index)
    state["discards"][seat].append(card)
    draw_card(state, seat, rng=rng)
    return card


def _require(move: MoveTD, *keys: str) -> None:
    missing = [key for key in keys if key not in move]
    if missing:
        raise InvalidCardChoice("Move payload does not fit the card", context={"missing": missing})


# -----------------------------
# Bare rule moves (no card consumed)
# -----------------------------
def _bare(state: GameStateTD, seat: Seat, apply: Callable[[], MoveResultTD], label: str) -> ActionResultTD:
    require_turn(state, seat)
    result = apply()
    split_moves.clear_pending_split(state, label)
    broadcast(state, f"{seat}: {label}")
    return _finish(state, seat, result)


def enter(state: GameStateTD, seat: Seat, marble_id: int, *, owner: Optional[Seat] = None) -> ActionResultTD:
    return _bare(
        state, seat,
        lambda: actions.enter(state, seat, marble_id, owner=owner),
        f"enters marble {marble_id}",
    )


def move_forward(
    state: GameStateTD,
    seat: Seat,
    marble_id: int,
    spaces: int,
    *,
    enter_home: Optional[bool] = None,
    owner: Optional[Seat] = None,
) -> ActionResultTD:
    return _bare(
        state, seat,
        lambda: actions.move_forward(state, seat, marble_id, spaces, enter_home=enter_home, owner=owner),
        f"moves marble {marble_id} forward {spaces}",
    )


def move_backward(
    state: GameStateTD,
    seat: Seat,
    marble_id: int,
    spaces: int,
    *,
    owner: Optional[Seat] = None,
) -> ActionResultTD:
    return _bare(
        state, seat,
        lambda: actions.move_backward(state, seat, marble_id, spaces, owner=owner),
        f"moves marble {marble_id} backward {spaces}",
    )


def joker_capture(
    state: GameStateTD,
    seat: Seat,
    source_marble_id: int,
    target_seat: Seat,
    target_marble_id: int,
    *,
    owner: Optional[Seat] = None,
) -> ActionResultTD:
    return _bare(
        state, seat,
        lambda: actions.joker_capture(state, seat, source_marble_id, target_seat, target_marble_id, owner=owner),
        f"jokers marble {source_marble_id} onto {target_seat}'s marble {target_marble_id}",
    )


def split_seven(state: GameStateTD, seat: Seat, sub_moves: List[SubMoveTD]) -> ActionResultTD:
    return _bare(state, seat, lambda: actions.split_seven(state, seat, sub_moves), "splits a 7")


def split_nine(
    state: GameStateTD,
    seat: Seat,
    forward: SubMoveTD,
    backward: Optional[SubMoveTD] = None,
) -> ActionResultTD:
    return _bare(state, seat, lambda: actions.split_nine(state, seat, forward, backward), "splits a 9")


# -----------------------------
# Card dispatch
# -----------------------------
CardHandlerFn = Callable[[GameStateTD, Seat, MoveTD, int], MoveResultTD]


def _play_enter_or_forward(state: GameStateTD, seat: Seat, move: MoveTD, spaces: int) -> MoveResultTD:
    _require(move, "marble_id")
    owner = move.get("owner") or seat
    action = move.get("action")
    if action is None:
        action = "enter" if get_marble(state, owner, move["marble_id"])["location"] == "start" else "move"
    if action == "enter":
        return actions.enter(state, seat, move["marble_id"], owner=owner)
    if action != "move":
        raise InvalidCardChoice(f"Unknown action {action!r}", context={"action": action})
    return actions.move_forward(state, seat, move["marble_id"], spaces, enter_home=move.get("enter_home"), owner=owner)


def _play_forward(state: GameStateTD, seat: Seat, move: MoveTD, spaces: int) -> MoveResultTD:
    _require(move, "marble_id")
    if move.get("action") == "enter":
        raise InvalidCardChoice("This card cannot bring a marble out", context={"spaces": spaces})
    return actions.move_forward(
        state, seat, move["marble_id"], spaces, enter_home=move.get("enter_home"), owner=move.get("owner"),
    )


def _play_backward(state: GameStateTD, seat: Seat, move: MoveTD, spaces: int) -> MoveResultTD:
    _require(move, "marble_id")
    return actions.move_backward(state, seat, move["marble_id"], spaces, owner=move.get("owner"))


def _play_seven(state: GameStateTD, seat: Seat, move: MoveTD, spaces: int) -> MoveResultTD:
    _require(move, "moves")
    return actions.split_seven(state, seat, move["moves"])


def _play_nine(state: GameStateTD, seat: Seat, move: MoveTD, spaces: int) -> MoveResultTD:
    _require(move, "forward")
    return actions.split_nine(state, seat, move["forward"], move.get("backward"))


def _play_joker(state: GameStateTD, seat: Seat, move: MoveTD, spaces: int) -> MoveResultTD:
    _require(move, "source_marble_id", "target_seat", "target_marble_id")
    return actions.joker_capture(
        state, seat, move["source_marble_id"], move["target_seat"], move["target_marble_id"],
        owner=move.get("owner"),
    )


# Dispatch table (card kind -> handler)
CARD_HANDLERS: Dict[CardKind, CardHandlerFn] = {
    "enter_or_forward": _play_enter_or_forward,
    "forward": _play_forward,
    "backward": _play_backward,
    "split_seven": _play_seven,
    "split_nine": _play_nine,
    "joker": _play_joker,
}


def play_card(
    state: GameStateTD,
    seat: Seat,
    card_index: int,
    move: MoveTD,
    *,
    rng: Optional[random.Random] = None,
) -> ActionResultTD:
    """
    Play the card at `card_index` with `move` in one go (7 and 9 with all legs).

    The card goes to the seat's discard pile and a replacement is drawn.
    A split pending on ANOTHER card is abandoned.
    """
    require_turn(state, seat)
    card = _hand_card(state, seat, card_index)
    pending = split_moves.pending_for(state, seat)
    if pending is not None and pending["card_index"] == card_index:
        raise InvalidCardChoice(
            "This card is halfway through a split; complete it instead",
            context={"card_index": card_index},
        )

    rule = card_rule(card)
    result = CARD_HANDLERS[rule["kind"]](state, seat, move, rule["spaces"])

    split_moves.clear_pending_split(state, "different card played")
    _consume_card(state, seat, card_index, rng=rng)
    broadcast(state, f"{seat} plays {card_label(card)}")
    return _finish(state, seat, result, card=card)


# -----------------------------
# Split cards in two legs
# -----------------------------
def begin_partial_move(
    state: GameStateTD,
    seat: Seat,
    card_type: int,
    first: SubMoveTD,
    *,
    card_index: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> ActionResultTD:
    """
    Leg one of a 7 / 9. The turn stays with the seat until the split is
    completed (or a full 7 was used, which finishes the card at once).
    """
    require_turn(state, seat)
    pending = split_moves.pending_for(state, seat)
    if card_index is not None and pending is not None and pending["card_index"] == card_index:
        raise InvalidCardChoice(
            "This card is already halfway through a split",
            context={"card_index": card_index},
        )

    result, pending = split_moves.begin_split(state, seat, card_type, first, card_index=card_index)

    if pending is None:
        card = _consume_card(state, seat, card_index, rng=rng) if card_index is not None else None
        broadcast(state, f"{seat} plays a full {card_type} with marble {first['marble_id']}")
        return _finish(state, seat, result, card=card)

    broadcast(
        state,
        f"{seat} moves marble {first['marble_id']} {first['spaces']} of {card_type}, "
        f"{pending['remaining_spaces']} left",
    )
    card = state["hands"][seat][card_index] if card_index is not None else None
    return _finish(state, seat, result, card=card, advance=False)


def complete_partial_move(
    state: GameStateTD,
    seat: Seat,
    second: SubMoveTD,
    *,
    rng: Optional[random.Random] = None,
) -> ActionResultTD:
    require_turn(state, seat)
    result, pending = split_moves.complete_split(state, seat, second)

    card: Optional[CardTD] = None
    if pending["card_index"] is not None:
        card = _consume_card(state, seat, pending["card_index"], rng=rng)
    broadcast(state, f"{seat} completes the {pending['card_type']} with marble {second['marble_id']}")
    return _finish(state, seat, result, card=card)


# -----------------------------
# Discard
# -----------------------------
def discard(
    state: GameStateTD,
    seat: Seat,
    card_index: int,
    *,
    rng: Optional[random.Random] = None,
) -> ActionResultTD:
    """Throw a card away. Only allowed when no card in hand can be played."""
    require_turn(state, seat)
    _hand_card(state, seat, card_index)
    if legality.has_legal_play(state, seat):
        raise NoLegalDiscard("You have a legal play", context={"seat": seat})

    split_moves.clear_pending_split(state, "discard")
    card = _consume_card(state, seat, card_index, rng=rng)
    broadcast(state, f"{seat} discards {card_label(card)} (no legal play)")
    return _finish(state, seat, {"moved": [], "effects": []}, card=card)


# -----------------------------
# Queries with turn ownership
# -----------------------------
def has_legal_play(state: GameStateTD, seat: Seat) -> bool:
    require_turn(state, seat)
    return legality.has_legal_play(state, seat)


def legal_destinations(
    state: GameStateTD,
    seat: Seat,
    card_value: str,
    marble_id: int,
    *,
    owner: Optional[Seat] = None,
) -> Set[legality.Destination]:
    require_turn(state, seat)
    return legality.legal_destinations(state, seat, card_value, marble_id, owner=owner)
