#!/usr/bin/env python3
"""
actions.py — Marble moves (state mutations)

This module contains *only* the rule-level moves that mutate the marbles
of a table. One function per card family:

- enter:          start -> own track entry
- move_forward:   track/home forward, with the home-entry choice
- move_backward:  track only, never into home
- joker_capture:  jump onto any other seat's track marble
- split_seven:    1-2 forward sub-moves totalling 7
- split_nine:     forward 1-8 + backward remainder on another marble

Every function checks the full move BEFORE touching the board, then
places the marble and hands any occupant to captures.resolve_landing().
A rejected move raises a MoveRejected subclass and leaves the table as it was.

Cards, turns and the pending split record are NOT handled here
(see turns.py / split_moves.py).

Assumptions / Dependencies
-------------------------
- Occupancy queries come from board.py.
- Data structures and helpers come from state.py.

by Sziller
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from board import (
    HOME_SIZE,
    Direction,
    MarbleRef,
    Marbles,
    Seat,
    cells_between,
    first_home_obstruction,
    home_entry,
    is_finished,
    is_team_finished,
    is_path_blocked,
    marble_at,
    step,
    steps_to_home_entry,
    teammate,
    track_entry,
)
from captures import resolve_landing
from errors import (
    DestinationOccupied,
    IllegalSplit,
    InvalidMarbleState,
    MoveRejected,
    NotController,
    OutOfRange,
    PathBlocked,
)
from state import (
    GameStateTD,
    LandingEffectTD,
    MovedTD,
    MoveResultTD,
    SubMoveTD,
    ensure_seat,
    get_marble,
    restore_marbles,
    snapshot_marbles,
)

logger = logging.getLogger(__name__)


# -----------------------------
# Control
# -----------------------------
def can_control(marbles: Marbles, acting: Seat, owner: Seat) -> bool:
    """
    A seat moves its own marbles. Once finished (5 home) it may also move
    its teammate's marbles, never an opponent's.
    """
    if acting == owner:
        return True
    return owner == teammate(acting) and is_finished(marbles, acting)


def controllable_seats(marbles: Marbles, acting: Seat) -> List[Seat]:
    seats = [acting]
    if is_finished(marbles, acting):
        seats.append(teammate(acting))
    return seats


def require_control(state: GameStateTD, acting: Seat, owner: Seat) -> None:
    ensure_seat(acting)
    ensure_seat(owner)
    if not can_control(state["marbles"], acting, owner):
        raise NotController(
            f"{acting} cannot move {owner}'s marbles",
            context={"seat": acting, "owner": owner},
        )


# -----------------------------
# Low-level helpers
# -----------------------------
def _moved(state: GameStateTD, owner: Seat, marble_id: int) -> MovedTD:
    marble = state["marbles"][owner][marble_id]
    return {"seat": owner, "marble": marble_id, "location": marble["location"], "position": marble["position"]}


def _result(state: GameStateTD, moved: Sequence[MarbleRef], effects: List[LandingEffectTD]) -> MoveResultTD:
    return {"moved": [_moved(state, owner, mid) for owner, mid in moved], "effects": effects}


def _check_track_landing(
    marbles: Marbles,
    owner: Seat,
    start: int,
    target: int,
    direction: Direction,
) -> None:
    """Raise if the walk start -> target is self-blocked or ends on an own marble."""
    if is_path_blocked(marbles, owner, start, target, direction):
        raise PathBlocked(
            f"Path blocked by your own marble ({direction} {start} -> {target})",
            context={"owner": owner, "from": start, "to": target},
        )
    occupant = marble_at(marbles, target)
    if occupant is not None and occupant[0] == owner:
        raise DestinationOccupied(
            f"Cannot land on your own marble at {target}",
            context={"owner": owner, "cell": target},
        )


def _check_home_entry(marbles: Marbles, owner: Seat, start: int, reach: int, spaces: int) -> int:
    """
    Validate entering the home zone from track cell `start`.

    `reach` is the number of steps to the home entry (0 = standing on it).
    Returns the home index the marble would land on.
    """
    spaces_into_home = spaces - reach
    if not 1 <= spaces_into_home <= HOME_SIZE:
        raise OutOfRange(
            f"Cannot enter home with {spaces_into_home} spaces past the home entry",
            context={"owner": owner, "spaces": spaces},
        )

    door = home_entry(owner)
    if reach > 0:
        for cell in cells_between(start, door) + [door]:
            occupant = marble_at(marbles, cell)
            if occupant is not None and occupant[0] == owner:
                raise PathBlocked(
                    f"Own marble at {cell} blocks the way home",
                    context={"owner": owner, "cell": cell},
                )

    home_index = spaces_into_home - 1
    obstruction = first_home_obstruction(marbles, owner, -1, home_index)
    if obstruction == home_index:
        raise DestinationOccupied(
            f"Home space {home_index} is occupied",
            context={"owner": owner, "home_index": home_index},
        )
    if obstruction is not None:
        raise PathBlocked(
            f"Path blocked by your own marble in home ({obstruction})",
            context={"owner": owner, "home_index": obstruction},
        )
    return home_index


def _place_on_track(state: GameStateTD, owner: Seat, marble_id: int, cell: int) -> List[LandingEffectTD]:
    """
    Put a marble on `cell` and displace whatever was there.

    The caller has already verified the cell does not hold an own marble.
    """
    marbles = state["marbles"]
    occupant = marble_at(marbles, cell)
    if occupant == (owner, marble_id):
        occupant = None

    marble = marbles[owner][marble_id]
    marble["location"] = "track"
    marble["position"] = cell

    if occupant is None:
        return []
    return resolve_landing(marbles, (owner, marble_id), occupant)


def _place_in_home(state: GameStateTD, owner: Seat, marble_id: int, home_index: int) -> None:
    marble = state["marbles"][owner][marble_id]
    marble["location"] = "home"
    marble["position"] = home_index


def _check_spaces(spaces: int) -> None:
    if not isinstance(spaces, int) or spaces < 1:
        raise ValueError(f"spaces must be a positive integer, got {spaces!r}")


# -----------------------------
# Enter
# -----------------------------
def enter(state: GameStateTD, seat: Seat, marble_id: int, *, owner: Optional[Seat] = None) -> MoveResultTD:
    """
    Bring a marble from its start slot onto its seat's track entry.
    An occupant that is not the owner's is displaced.
    """
    owner = owner or seat
    require_control(state, seat, owner)
    marble = get_marble(state, owner, marble_id)

    if marble["location"] != "start":
        raise InvalidMarbleState(
            "Marble not in start area",
            context={"owner": owner, "marble": marble_id, "location": marble["location"]},
        )

    entry = track_entry(owner)
    occupant = marble_at(state["marbles"], entry)
    if occupant is not None and occupant[0] == owner:
        raise DestinationOccupied(
            "Cannot land on your own marble",
            context={"owner": owner, "cell": entry},
        )

    effects = _place_on_track(state, owner, marble_id, entry)
    return _result(state, [(owner, marble_id)], effects)


# -----------------------------
# Forward
# -----------------------------
def move_forward(
    state: GameStateTD,
    seat: Seat,
    marble_id: int,
    spaces: int,
    *,
    enter_home: Optional[bool] = None,
    owner: Optional[Seat] = None,
) -> MoveResultTD:
    """
    Move a track or home marble `spaces` cells forward.

    When the walk reaches or crosses the owner's home entry, two destinations
    exist: the home cell `spaces_past_door - 1`, or the track cell beyond.
    - enter_home=True / False forces one of them
    - enter_home=None takes the only open one, and prefers home when both are open
    """
    owner = owner or seat
    require_control(state, seat, owner)
    _check_spaces(spaces)
    marble = get_marble(state, owner, marble_id)
    marbles = state["marbles"]

    if marble["location"] == "start":
        raise InvalidMarbleState(
            "Marble not on track or in home",
            context={"owner": owner, "marble": marble_id},
        )

    if marble["location"] == "home":
        current = marble["position"]
        target = current + spaces
        if target >= HOME_SIZE:
            raise OutOfRange(
                "Move exceeds home zone",
                context={"owner": owner, "marble": marble_id, "target": target},
            )
        obstruction = first_home_obstruction(marbles, owner, current, target)
        if obstruction == target:
            raise DestinationOccupied("Home space occupied", context={"owner": owner, "home_index": target})
        if obstruction is not None:
            raise PathBlocked(
                "Path blocked by your own marble in home",
                context={"owner": owner, "home_index": obstruction},
            )
        _place_in_home(state, owner, marble_id, target)
        return _result(state, [(owner, marble_id)], [])

    start = marble["position"]
    track_target = step(start, spaces)
    reach = steps_to_home_entry(owner, start, spaces)

    if reach is None:
        _check_track_landing(marbles, owner, start, track_target, "forward")
        effects = _place_on_track(state, owner, marble_id, track_target)
        return _result(state, [(owner, marble_id)], effects)

    home_index: Optional[int] = None
    home_error: Optional[MoveRejected] = None
    track_error: Optional[MoveRejected] = None
    try:
        home_index = _check_home_entry(marbles, owner, start, reach, spaces)
    except MoveRejected as e:
        home_error = e
    try:
        _check_track_landing(marbles, owner, start, track_target, "forward")
    except MoveRejected as e:
        track_error = e

    if enter_home is None:
        if home_error is not None and track_error is not None:
            raise track_error
        enter_home = home_error is None
        logger.debug("%s marble %s reaches home entry: home=%s track=%s -> enter_home=%s",
                     owner, marble_id, home_error is None, track_error is None, enter_home)

    if enter_home:
        if home_error is not None:
            raise home_error
        _place_in_home(state, owner, marble_id, home_index)  # type: ignore[arg-type]
        return _result(state, [(owner, marble_id)], [])

    if track_error is not None:
        raise track_error
    effects = _place_on_track(state, owner, marble_id, track_target)
    return _result(state, [(owner, marble_id)], effects)


# -----------------------------
# Backward
# -----------------------------
def move_backward(
    state: GameStateTD,
    seat: Seat,
    marble_id: int,
    spaces: int,
    *,
    owner: Optional[Seat] = None,
) -> MoveResultTD:
    """Move a track marble `spaces` cells backward. Home is never entered backwards."""
    owner = owner or seat
    require_control(state, seat, owner)
    _check_spaces(spaces)
    marble = get_marble(state, owner, marble_id)

    if marble["location"] != "track":
        raise InvalidMarbleState(
            "Marble not on track",
            context={"owner": owner, "marble": marble_id, "location": marble["location"]},
        )

    start = marble["position"]
    target = step(start, spaces, "backward")
    _check_track_landing(state["marbles"], owner, start, target, "backward")
    effects = _place_on_track(state, owner, marble_id, target)
    return _result(state, [(owner, marble_id)], effects)


# -----------------------------
# Joker
# -----------------------------
def joker_capture(
    state: GameStateTD,
    seat: Seat,
    source_marble_id: int,
    target_seat: Seat,
    target_marble_id: int,
    *,
    owner: Optional[Seat] = None,
) -> MoveResultTD:
    """
    Jump a start/track marble directly onto another seat's track marble.
    Distance does not matter; the target is displaced as in any landing.
    """
    owner = owner or seat
    require_control(state, seat, owner)
    source = get_marble(state, owner, source_marble_id)
    target = get_marble(state, target_seat, target_marble_id)

    if source["location"] not in ("start", "track"):
        raise InvalidMarbleState(
            "Source marble must be on track or in start",
            context={"owner": owner, "marble": source_marble_id, "location": source["location"]},
        )
    if target["location"] != "track":
        raise InvalidMarbleState(
            "Target marble must be on track",
            context={"seat": target_seat, "marble": target_marble_id, "location": target["location"]},
        )
    if target_seat == owner:
        raise DestinationOccupied(
            "Cannot joker onto your own marble",
            context={"owner": owner, "cell": target["position"]},
        )

    effects = _place_on_track(state, owner, source_marble_id, target["position"])
    return _result(state, [(owner, source_marble_id)], effects)


# -----------------------------
# Split cards (single call, atomic)
# -----------------------------
def sub_move_ref(seat: Seat, sub: SubMoveTD) -> MarbleRef:
    if "marble_id" not in sub:
        raise IllegalSplit("Sub-move without a marble", context={"sub_move": dict(sub)})
    return (sub.get("owner") or seat, sub["marble_id"])


def _merge(results: Sequence[MoveResultTD]) -> MoveResultTD:
    merged: MoveResultTD = {"moved": [], "effects": []}
    for result in results:
        merged["moved"].extend(result["moved"])
        merged["effects"].extend(result["effects"])
    return merged


def forward_sub_move(state: GameStateTD, seat: Seat, sub: SubMoveTD) -> MoveResultTD:
    owner, marble_id = sub_move_ref(seat, sub)
    return move_forward(state, seat, marble_id, sub["spaces"], enter_home=sub.get("enter_home"), owner=owner)


def backward_sub_move(state: GameStateTD, seat: Seat, sub: SubMoveTD) -> MoveResultTD:
    owner, marble_id = sub_move_ref(seat, sub)
    return move_backward(state, seat, marble_id, sub["spaces"], owner=owner)


def _check_sub_spaces(sub: SubMoveTD, low: int, high: int) -> None:
    spaces = sub.get("spaces")
    if not isinstance(spaces, int) or not low <= spaces <= high:
        raise IllegalSplit(
            f"Sub-move spaces must be between {low} and {high}",
            context={"spaces": spaces},
        )


def _require_winning_leg(
    state: GameStateTD,
    seat: Seat,
    snapshot: Marbles,
    message: str,
    context: Dict[str, Any],
) -> None:
    """A short split is only complete when its single leg won the game."""
    if not is_team_finished(state["marbles"], seat):
        restore_marbles(state, snapshot)
        raise IllegalSplit(message, context=context)


def split_seven(state: GameStateTD, seat: Seat, sub_moves: Sequence[SubMoveTD]) -> MoveResultTD:
    """
    Play a 7 as one or two forward sub-moves totalling exactly 7.

    Sub-moves run in order: the first one's captures are visible to the second.
    Control of the second marble is checked after the first sub-move (a seat
    finishing with the first sub-move may move its teammate with the second).

    A single sub-move of fewer than 7 spaces is accepted only when it
    finishes the team; the rest of the card is forfeit.
    """
    if not 1 <= len(sub_moves) <= 2:
        raise IllegalSplit("A 7 needs one or two sub-moves", context={"count": len(sub_moves)})
    for sub in sub_moves:
        _check_sub_spaces(sub, 1, 7)
    total = sum(sub["spaces"] for sub in sub_moves)
    short = len(sub_moves) == 1 and total < 7
    if total != 7 and not short:
        raise IllegalSplit("Moves must total 7 spaces", context={"total": total})
    if len(sub_moves) == 2 and sub_move_ref(seat, sub_moves[0]) == sub_move_ref(seat, sub_moves[1]):
        raise IllegalSplit("Must use two different marbles when splitting")

    snapshot = snapshot_marbles(state)
    try:
        results = [forward_sub_move(state, seat, sub) for sub in sub_moves]
    except MoveRejected:
        restore_marbles(state, snapshot)
        raise
    if short:
        _require_winning_leg(state, seat, snapshot, "Moves must total 7 spaces", {"total": total})
    return _merge(results)


def split_nine(
    state: GameStateTD,
    seat: Seat,
    forward: SubMoveTD,
    backward: Optional[SubMoveTD] = None,
) -> MoveResultTD:
    """
    Play a 9: forward 1-8 on one marble, then backward the remainder on a
    DIFFERENT track marble.

    Without `backward`, the forward sub-move must finish the team.
    """
    _check_sub_spaces(forward, 1, 8)
    if backward is None:
        snapshot = snapshot_marbles(state)
        result = forward_sub_move(state, seat, forward)
        _require_winning_leg(
            state, seat, snapshot, "A 9 needs a backward sub-move", {"forward": forward["spaces"]},
        )
        return result

    _check_sub_spaces(backward, 1, 8)
    if forward["spaces"] + backward["spaces"] != 9:
        raise IllegalSplit(
            "Moves must total 9 spaces",
            context={"forward": forward["spaces"], "backward": backward["spaces"]},
        )
    if sub_move_ref(seat, forward) == sub_move_ref(seat, backward):
        raise IllegalSplit("Must use two different marbles for 9")

    snapshot = snapshot_marbles(state)
    try:
        results = [forward_sub_move(state, seat, forward), backward_sub_move(state, seat, backward)]
    except MoveRejected:
        restore_marbles(state, snapshot)
        raise
    return _merge(results)
