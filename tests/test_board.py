"""Geometry and occupancy queries."""

from __future__ import annotations

import pytest

from board import (
    HOME_ENTRY,
    TRACK_ENTRY,
    cells_between,
    first_home_obstruction,
    forward_distance,
    is_finished,
    is_path_blocked,
    marble_at,
    step,
    steps_to_home_entry,
    team_of,
    teammate,
)
from state import build_table, validate_marbles


def test_entries_and_doors():
    assert TRACK_ENTRY == {"Seat1": 0, "Seat2": 18, "Seat3": 36, "Seat4": 54}
    assert HOME_ENTRY == {"Seat1": 67, "Seat2": 13, "Seat3": 31, "Seat4": 49}


def test_teams():
    assert teammate("Seat1") == "Seat3"
    assert teammate("Seat4") == "Seat2"
    assert team_of("Seat3") == "team1"
    assert team_of("Seat2") == "team2"
    with pytest.raises(ValueError):
        team_of("Seat9")  # type: ignore[arg-type]


def test_step_wraps_both_ways():
    assert step(70, 5) == 3
    assert step(2, 8, "backward") == 66
    assert forward_distance(70, 3) == 5
    assert forward_distance(5, 5) == 0


def test_cells_between_is_exclusive():
    assert cells_between(70, 2) == [71, 0, 1]
    assert cells_between(2, 70, "backward") == [1, 0, 71]
    assert cells_between(4, 5) == []


def test_steps_to_home_entry():
    assert steps_to_home_entry("Seat1", 65, 5) == 2
    assert steps_to_home_entry("Seat1", 67, 3) == 0
    assert steps_to_home_entry("Seat1", 10, 5) is None
    assert steps_to_home_entry("Seat2", 70, 10) is None
    assert steps_to_home_entry("Seat2", 5, 10) == 8


def test_only_own_marbles_block(place):
    state = place({("Seat2", 0): ("track", 6), ("Seat3", 0): ("track", 7), ("Seat1", 1): ("track", 12)})
    marbles = state["marbles"]

    assert not is_path_blocked(marbles, "Seat1", 4, 9)
    assert is_path_blocked(marbles, "Seat1", 10, 14)
    assert is_path_blocked(marbles, "Seat2", 4, 9)
    # destination itself is not part of the path
    assert not is_path_blocked(marbles, "Seat1", 10, 12)
    assert is_path_blocked(marbles, "Seat1", 14, 10, "backward")


def test_marble_at(place):
    state = place({("Seat4", 3): ("track", 50)})
    assert marble_at(state["marbles"], 50) == ("Seat4", 3)
    assert marble_at(state["marbles"], 51) is None


def test_home_obstruction(place):
    state = place({("Seat1", 0): ("home", 2)})
    marbles = state["marbles"]
    assert first_home_obstruction(marbles, "Seat1", -1, 4) == 2
    assert first_home_obstruction(marbles, "Seat1", -1, 1) is None
    assert first_home_obstruction(marbles, "Seat1", 2, 4) is None
    assert first_home_obstruction(marbles, "Seat3", -1, 4) is None


def test_finished(place):
    state = place({("Seat2", i): ("home", i) for i in range(5)})
    assert is_finished(state["marbles"], "Seat2")
    assert not is_finished(state["marbles"], "Seat4")


def test_validate_marbles_catches_shared_cell():
    state = build_table()
    validate_marbles(state)

    state["marbles"]["Seat1"][0] = {"location": "track", "position": 10}
    state["marbles"]["Seat2"][0] = {"location": "track", "position": 10}
    with pytest.raises(AssertionError):
        validate_marbles(state)


def test_validate_marbles_catches_wrong_start_slot():
    state = build_table()
    state["marbles"]["Seat3"][1]["position"] = 4
    with pytest.raises(AssertionError):
        validate_marbles(state)
