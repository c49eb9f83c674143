#!/usr/bin/env python3
"""
board.py — Track geometry, seats/teams and occupancy queries

The board is ONE shared circular track of 72 cells plus, per seat,
a private start zone and a private home zone of 5 cells each.

Rules encoded here:
- Track cell index == absolute position 0..71, walking forward increases the index (mod 72)
- Each seat joins the track on its TRACK_ENTRY cell
- The door into a seat's home zone is 5 cells behind its track entry (HOME_ENTRY)
- Home index 0 is nearest the door, index 4 is the final cell

This module only ANSWERS questions about the board. It never mutates marbles.
Mutations belong in actions.py / captures.py.

by Sziller
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple, TypedDict


# -----------------------------
# Seats, teams, geometry
# -----------------------------
Seat = Literal["Seat1", "Seat2", "Seat3", "Seat4"]
Team = Literal["team1", "team2"]
Location = Literal["start", "track", "home"]
Direction = Literal["forward", "backward"]

TRACK_LENGTH: int = 72
HOME_SIZE: int = 5
MARBLES_PER_SEAT: int = 5
HOME_ENTRY_OFFSET: int = 5

SEATS: List[Seat] = ["Seat1", "Seat2", "Seat3", "Seat4"]

TEAMS: Dict[Team, Tuple[Seat, Seat]] = {
    "team1": ("Seat1", "Seat3"),
    "team2": ("Seat2", "Seat4"),
}

TRACK_ENTRY: Dict[Seat, int] = {
    "Seat1": 0,
    "Seat2": 18,
    "Seat3": 36,
    "Seat4": 54,
}

HOME_ENTRY: Dict[Seat, int] = {
    seat: (entry - HOME_ENTRY_OFFSET) % TRACK_LENGTH for seat, entry in TRACK_ENTRY.items()
}


class MarbleTD(TypedDict):
    location: Location
    position: int  # start/home slot 0..4, or absolute track cell 0..71


# marbles[seat][marble_id]: marble_id is the list index 0..4
Marbles = Dict[Seat, List[MarbleTD]]

# (seat, marble_id)
MarbleRef = Tuple[Seat, int]


# -----------------------------
# Seat helpers
# -----------------------------
def team_of(seat: Seat) -> Team:
    """Return the team a seat plays for."""
    for team, seats in TEAMS.items():
        if seat in seats:
            return team
    raise ValueError(f"Unknown seat: {seat!r}")


def teammate(seat: Seat) -> Seat:
    """Return the other seat of the same team."""
    first, second = TEAMS[team_of(seat)]
    return second if seat == first else first


def is_teammate(seat: Seat, other: Seat) -> bool:
    return seat != other and team_of(seat) == team_of(other)


def track_entry(seat: Seat) -> int:
    return TRACK_ENTRY[seat]


def home_entry(seat: Seat) -> int:
    return HOME_ENTRY[seat]


# -----------------------------
# Cell arithmetic
# -----------------------------
def step(cell: int, spaces: int, direction: Direction = "forward") -> int:
    """Return the cell reached after walking `spaces` cells in `direction`."""
    if direction == "forward":
        return (cell + spaces) % TRACK_LENGTH
    return (cell - spaces) % TRACK_LENGTH


def forward_distance(start: int, target: int) -> int:
    """Number of forward steps from `start` to `target` (0 if equal)."""
    return (target - start) % TRACK_LENGTH


def cells_between(start: int, end: int, direction: Direction = "forward") -> List[int]:
    """
    Cells strictly between `start` and `end`, in walking order.

    Walking forward increases the index, backward decreases it (both mod 72).
    """
    cells: List[int] = []
    current = step(start, 1, direction)
    while current != end:
        cells.append(current)
        current = step(current, 1, direction)
    return cells


def steps_to_home_entry(seat: Seat, position: int, spaces: int) -> Optional[int]:
    """
    How many of `spaces` forward steps it takes a marble of `seat` at track
    `position` to reach its own home entry.

    Returns:
        0     if the marble already stands on the home entry
        1..n  if the walk reaches the home entry on that step
        None  if the walk never reaches it
    """
    door = home_entry(seat)
    if position == door:
        return 0
    distance = forward_distance(position, door)
    if distance <= spaces:
        return distance
    return None


# -----------------------------
# Occupancy queries
# -----------------------------
def marble_at(marbles: Marbles, cell: int) -> Optional[MarbleRef]:
    """Return (seat, marble_id) of the marble on track `cell`, or None."""
    for seat in SEATS:
        for marble_id, marble in enumerate(marbles[seat]):
            if marble["location"] == "track" and marble["position"] == cell:
                return seat, marble_id
    return None


def track_occupancy(marbles: Marbles) -> Dict[int, MarbleRef]:
    """Map every occupied track cell to its marble."""
    occupied: Dict[int, MarbleRef] = {}
    for seat in SEATS:
        for marble_id, marble in enumerate(marbles[seat]):
            if marble["location"] == "track":
                occupied[marble["position"]] = (seat, marble_id)
    return occupied


def home_occupant(marbles: Marbles, seat: Seat, index: int) -> Optional[int]:
    """Return the marble_id sitting on home cell `index` of `seat`, or None."""
    for marble_id, marble in enumerate(marbles[seat]):
        if marble["location"] == "home" and marble["position"] == index:
            return marble_id
    return None


def is_home_occupied(marbles: Marbles, seat: Seat, index: int) -> bool:
    return home_occupant(marbles, seat, index) is not None


def is_path_blocked(
    marbles: Marbles,
    owner: Seat,
    start: int,
    end: int,
    direction: Direction = "forward",
) -> bool:
    """
    True if a marble of `owner` sits on any track cell strictly between
    `start` and `end`.

    Only the mover's OWN marbles block. Teammate and opponent marbles on the
    path are simply jumped over.
    """
    occupied = track_occupancy(marbles)
    for cell in cells_between(start, end, direction):
        occupant = occupied.get(cell)
        if occupant is not None and occupant[0] == owner:
            return True
    return False


def first_home_obstruction(marbles: Marbles, owner: Seat, current: int, target: int) -> Optional[int]:
    """
    First occupied home cell of `owner` in the range (current, target].

    Use current = -1 for a marble coming in from the track.
    """
    for index in range(current + 1, target + 1):
        if is_home_occupied(marbles, owner, index):
            return index
    return None


def count_locations(marbles: Marbles, seat: Seat) -> Dict[Location, int]:
    """Return {'start': n, 'track': n, 'home': n} for a seat."""
    counts: Dict[Location, int] = {"start": 0, "track": 0, "home": 0}
    for marble in marbles[seat]:
        counts[marble["location"]] += 1
    return counts


def is_finished(marbles: Marbles, seat: Seat) -> bool:
    """A seat is finished when all of its marbles are in its home zone."""
    return all(marble["location"] == "home" for marble in marbles[seat])


def is_team_finished(marbles: Marbles, seat: Seat) -> bool:
    """Both seats of `seat`'s team are finished (the game is won)."""
    return is_finished(marbles, seat) and is_finished(marbles, teammate(seat))
