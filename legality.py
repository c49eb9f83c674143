#!/usr/bin/env python3
"""
legality.py — Legality oracle (read-only)

Answers "what can this seat do with this card?" without touching the table.

Every candidate move is run through the REAL executor (actions.py) on a
scratch copy of the marbles. A candidate is legal exactly when the executor
accepts it, so the oracle and the executor cannot disagree.

Split cards (7 / 9) are enumerated leg by leg: the first leg is applied on a
scratch table, then the second-leg candidates are taken from THAT table.
A first leg which finishes the seat therefore makes the teammate's marbles
available for the second leg, the same way it does in a real play.

Public queries:
- iter_card_moves / legal_plays      (payloads usable with turns.play_card)
- card_has_legal_play / has_legal_play
- legal_destinations                 (UI highlighting of the first marble)
- iter_completions / completion_destinations (second leg of a pending split)

by Sziller
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator, List, Optional, Set, Tuple, TypedDict, Union

import actions
from board import MARBLES_PER_SEAT, SEATS, Location, MarbleRef, Seat, is_team_finished, steps_to_home_entry
from cards import CardTD, card_rule
from errors import MoveRejected
from state import GameStateTD, MoveResultTD, MoveTD, PendingSplitTD, SubMoveTD, scratch_copy

logger = logging.getLogger(__name__)

Destination = Tuple[Location, int]


class CandidateTD(TypedDict):
    move: MoveTD
    marble: MarbleRef          # first (or only) marble moved
    destination: Destination   # where that marble stands after its leg


class LegalPlayTD(TypedDict):
    card_index: int
    card: CardTD
    move: MoveTD
    destination: Destination


class CompletionTD(TypedDict):
    sub_move: SubMoveTD
    marble: MarbleRef
    destination: Destination


# -----------------------------
# Scratch execution
# -----------------------------
def _attempt(
    state: GameStateTD,
    apply: Callable[[GameStateTD], MoveResultTD],
) -> Optional[Tuple[GameStateTD, MoveResultTD]]:
    """Run `apply` on a scratch copy. None if the executor rejects it."""
    scratch = scratch_copy(state)
    try:
        result = apply(scratch)
    except MoveRejected:
        return None
    return scratch, result


def _where(state: GameStateTD, ref: MarbleRef) -> Destination:
    marble = state["marbles"][ref[0]][ref[1]]
    return marble["location"], marble["position"]


def controllable_marbles(state: GameStateTD, seat: Seat) -> List[MarbleRef]:
    return [
        (owner, marble_id)
        for owner in actions.controllable_seats(state["marbles"], seat)
        for marble_id in range(MARBLES_PER_SEAT)
    ]


def _enter_home_options(state: GameStateTD, ref: MarbleRef, spaces: int) -> Tuple[Optional[bool], ...]:
    """Both choices when a forward walk reaches the home entry, else just the default."""
    marble = state["marbles"][ref[0]][ref[1]]
    if marble["location"] == "track" and steps_to_home_entry(ref[0], marble["position"], spaces) is not None:
        return True, False
    return (None,)


def _sub(ref: MarbleRef, spaces: int, enter_home: Optional[bool] = None) -> SubMoveTD:
    sub: SubMoveTD = {"marble_id": ref[1], "owner": ref[0], "spaces": spaces}
    if enter_home is not None:
        sub["enter_home"] = enter_home
    return sub


# -----------------------------
# Per card family
# -----------------------------
def _iter_forward(state: GameStateTD, seat: Seat, spaces: int, *, allow_enter: bool) -> Iterator[CandidateTD]:
    for ref in controllable_marbles(state, seat):
        owner, marble_id = ref
        location = state["marbles"][owner][marble_id]["location"]

        if location == "start":
            if not allow_enter:
                continue
            outcome = _attempt(state, lambda s: actions.enter(s, seat, marble_id, owner=owner))
            if outcome is not None:
                yield {
                    "move": {"action": "enter", "marble_id": marble_id, "owner": owner},
                    "marble": ref,
                    "destination": _where(outcome[0], ref),
                }
            continue

        for enter_home in _enter_home_options(state, ref, spaces):
            outcome = _attempt(
                state,
                lambda s: actions.move_forward(s, seat, marble_id, spaces, enter_home=enter_home, owner=owner),
            )
            if outcome is None:
                continue
            move: MoveTD = {"action": "move", "marble_id": marble_id, "owner": owner}
            if enter_home is not None:
                move["enter_home"] = enter_home
            yield {"move": move, "marble": ref, "destination": _where(outcome[0], ref)}


def _iter_backward(state: GameStateTD, seat: Seat, spaces: int) -> Iterator[CandidateTD]:
    for ref in controllable_marbles(state, seat):
        owner, marble_id = ref
        if state["marbles"][owner][marble_id]["location"] != "track":
            continue
        outcome = _attempt(state, lambda s: actions.move_backward(s, seat, marble_id, spaces, owner=owner))
        if outcome is not None:
            yield {
                "move": {"marble_id": marble_id, "owner": owner},
                "marble": ref,
                "destination": _where(outcome[0], ref),
            }


def _iter_joker(state: GameStateTD, seat: Seat) -> Iterator[CandidateTD]:
    marbles = state["marbles"]
    for ref in controllable_marbles(state, seat):
        owner, source_id = ref
        if marbles[owner][source_id]["location"] not in ("start", "track"):
            continue
        for target_seat in SEATS:
            if target_seat == owner:
                continue
            for target_id, target in enumerate(marbles[target_seat]):
                if target["location"] != "track":
                    continue
                outcome = _attempt(
                    state,
                    lambda s: actions.joker_capture(s, seat, source_id, target_seat, target_id, owner=owner),
                )
                if outcome is not None:
                    yield {
                        "move": {
                            "source_marble_id": source_id,
                            "owner": owner,
                            "target_seat": target_seat,
                            "target_marble_id": target_id,
                        },
                        "marble": ref,
                        "destination": _where(outcome[0], ref),
                    }


def _iter_second_legs(
    state: GameStateTD,
    seat: Seat,
    card_type: int,
    used: MarbleRef,
    remaining: int,
) -> Iterator[Tuple[SubMoveTD, GameStateTD]]:
    """Second legs on `state` (the table AFTER the first leg)."""
    for ref in controllable_marbles(state, seat):
        if ref == used:
            continue
        owner, marble_id = ref
        location = state["marbles"][owner][marble_id]["location"]

        if card_type == 9:
            if location != "track":
                continue
            sub = _sub(ref, remaining)
            outcome = _attempt(state, lambda s: actions.backward_sub_move(s, seat, sub))
            if outcome is not None:
                yield sub, outcome[0]
            continue

        if location == "start":
            continue
        for enter_home in _enter_home_options(state, ref, remaining):
            sub = _sub(ref, remaining, enter_home)
            outcome = _attempt(state, lambda s: actions.forward_sub_move(s, seat, sub))
            if outcome is not None:
                yield sub, outcome[0]


def _iter_split(state: GameStateTD, seat: Seat, card_type: int) -> Iterator[CandidateTD]:
    max_first = 7 if card_type == 7 else 8

    for ref in controllable_marbles(state, seat):
        owner, marble_id = ref
        if state["marbles"][owner][marble_id]["location"] == "start":
            continue

        for spaces in range(max_first, 0, -1):
            for enter_home in _enter_home_options(state, ref, spaces):
                first = _sub(ref, spaces, enter_home)
                outcome = _attempt(state, lambda s: actions.forward_sub_move(s, seat, first))
                if outcome is None:
                    continue
                after_first = outcome[0]
                destination = _where(after_first, ref)

                if spaces == card_type or is_team_finished(after_first["marbles"], seat):
                    move: MoveTD = {"moves": [first]} if card_type == 7 else {"forward": first}
                    yield {"move": move, "marble": ref, "destination": destination}
                    continue

                for second, _ in _iter_second_legs(after_first, seat, card_type, ref, card_type - spaces):
                    move = {"moves": [first, second]} if card_type == 7 else {"forward": first, "backward": second}
                    yield {"move": move, "marble": ref, "destination": destination}


# -----------------------------
# Public queries
# -----------------------------
def iter_card_moves(state: GameStateTD, seat: Seat, card: Union[CardTD, str, int]) -> Iterator[CandidateTD]:
    """
    Every legal way `seat` can play `card` on the current table.

    Lazy: callers needing only a yes/no stop at the first candidate.
    """
    rule = card_rule(card)
    kind = rule["kind"]
    if kind == "enter_or_forward":
        return _iter_forward(state, seat, rule["spaces"], allow_enter=True)
    if kind == "forward":
        return _iter_forward(state, seat, rule["spaces"], allow_enter=False)
    if kind == "backward":
        return _iter_backward(state, seat, rule["spaces"])
    if kind == "joker":
        return _iter_joker(state, seat)
    return _iter_split(state, seat, rule["spaces"])


def card_has_legal_play(state: GameStateTD, seat: Seat, card: Union[CardTD, str, int]) -> bool:
    return next(iter_card_moves(state, seat, card), None) is not None


def has_legal_play(state: GameStateTD, seat: Seat) -> bool:
    """True if ANY card in the seat's hand can be played."""
    for card in state["hands"][seat]:
        if card_has_legal_play(state, seat, card):
            logger.debug("%s can play %s", seat, card["value"])
            return True
    return False


def legal_plays(state: GameStateTD, seat: Seat) -> List[LegalPlayTD]:
    plays: List[LegalPlayTD] = []
    for card_index, card in enumerate(state["hands"][seat]):
        for candidate in iter_card_moves(state, seat, card):
            plays.append({
                "card_index": card_index,
                "card": card,
                "move": candidate["move"],
                "destination": candidate["destination"],
            })
    return plays


def legal_destinations(
    state: GameStateTD,
    seat: Seat,
    card_value: Union[CardTD, str, int],
    marble_id: int,
    *,
    owner: Optional[Seat] = None,
) -> Set[Destination]:
    """
    Set of (location, position) the chosen marble can reach with the card.

    For 7 and 9 these are the first-leg cells from which the split can still
    be completed (plus the full-7 cell on a 7, and any leg that wins the game).
    """
    ref = (owner or seat, marble_id)
    return {
        candidate["destination"]
        for candidate in iter_card_moves(state, seat, card_value)
        if candidate["marble"] == ref
    }


def iter_completions(state: GameStateTD, seat: Seat, pending: PendingSplitTD) -> Iterator[CompletionTD]:
    """Second legs that would complete `pending` on the current table."""
    first = pending["first_move"]
    used = (first.get("owner") or pending["seat"], first["marble_id"])
    for sub, after in _iter_second_legs(state, seat, pending["card_type"], used, pending["remaining_spaces"]):
        ref = (sub["owner"], sub["marble_id"])
        yield {"sub_move": sub, "marble": ref, "destination": _where(after, ref)}  # type: ignore[typeddict-item]


def has_completion(state: GameStateTD, seat: Seat, pending: PendingSplitTD) -> bool:
    return next(iter_completions(state, seat, pending), None) is not None


def completion_destinations(
    state: GameStateTD,
    seat: Seat,
    owner: Seat,
    marble_id: int,
) -> Set[Destination]:
    """Destinations for the second leg of the seat's pending split with one marble."""
    pending = state["pending_split"]
    if pending is None or pending["seat"] != seat:
        return set()
    return {
        completion["destination"]
        for completion in iter_completions(state, seat, pending)
        if completion["marble"] == (owner, marble_id)
    }
