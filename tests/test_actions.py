"""Move executor: one test group per card family."""

from __future__ import annotations

import pytest

import actions
from errors import (
    DestinationOccupied,
    IllegalSplit,
    InvalidMarbleState,
    NotController,
    OutOfRange,
    PathBlocked,
)
from state import snapshot_marbles, validate_marbles


def _where(state, seat, marble_id):
    marble = state["marbles"][seat][marble_id]
    return marble["location"], marble["position"]


# -----------------------------
# Enter
# -----------------------------
def test_ace_enter_from_start_slot_two(table):
    result = actions.enter(table, "Seat1", 2)

    assert _where(table, "Seat1", 2) == ("track", 0)
    assert result["moved"] == [{"seat": "Seat1", "marble": 2, "location": "track", "position": 0}]
    assert result["effects"] == []


def test_each_seat_enters_on_its_own_entry(table):
    for seat, entry in (("Seat2", 18), ("Seat3", 36), ("Seat4", 54)):
        actions.enter(table, seat, 0)
        assert _where(table, seat, 0) == ("track", entry)


def test_enter_onto_opponent(place):
    state = place({("Seat2", 1): ("track", 0)})
    result = actions.enter(state, "Seat1", 0)

    assert _where(state, "Seat1", 0) == ("track", 0)
    assert _where(state, "Seat2", 1) == ("start", 1)
    assert [e["sent_to"] for e in result["effects"]] == ["start"]


def test_enter_onto_own_marble_is_rejected(place):
    state = place({("Seat1", 0): ("track", 0)})
    with pytest.raises(DestinationOccupied):
        actions.enter(state, "Seat1", 1)
    assert _where(state, "Seat1", 1) == ("start", 1)


def test_enter_needs_start_marble(place):
    state = place({("Seat1", 0): ("track", 5)})
    with pytest.raises(InvalidMarbleState):
        actions.enter(state, "Seat1", 0)


# -----------------------------
# Forward on the track
# -----------------------------
def test_forward_jumps_over_other_seats(place):
    state = place({("Seat1", 0): ("track", 10), ("Seat2", 0): ("track", 12), ("Seat3", 0): ("track", 13)})
    actions.move_forward(state, "Seat1", 0, 5)
    assert _where(state, "Seat1", 0) == ("track", 15)
    assert _where(state, "Seat2", 0) == ("track", 12)


def test_forward_blocked_by_own_marble_changes_nothing(place):
    state = place({("Seat1", 0): ("track", 10), ("Seat1", 1): ("track", 12)})
    before = snapshot_marbles(state)
    with pytest.raises(PathBlocked):
        actions.move_forward(state, "Seat1", 0, 5)
    assert state["marbles"] == before


def test_forward_onto_own_marble_is_rejected(place):
    state = place({("Seat1", 0): ("track", 10), ("Seat1", 1): ("track", 15)})
    with pytest.raises(DestinationOccupied):
        actions.move_forward(state, "Seat1", 0, 5)


def test_forward_wraps_past_zero(place):
    state = place({("Seat2", 0): ("track", 70)})
    actions.move_forward(state, "Seat2", 0, 5)
    assert _where(state, "Seat2", 0) == ("track", 3)


def test_forward_needs_track_or_home(table):
    with pytest.raises(InvalidMarbleState):
        actions.move_forward(table, "Seat1", 0, 3)


# -----------------------------
# Forward across the home entry
# -----------------------------
def test_crossing_home_entry_both_open_defaults_to_home(place):
    state = place({("Seat1", 0): ("track", 65)})
    actions.move_forward(state, "Seat1", 0, 5)
    assert _where(state, "Seat1", 0) == ("home", 2)


def test_crossing_home_entry_explicit_choices(place):
    state = place({("Seat1", 0): ("track", 65)})
    actions.move_forward(state, "Seat1", 0, 5, enter_home=False)
    assert _where(state, "Seat1", 0) == ("track", 70)

    state = place({("Seat1", 0): ("track", 65)})
    actions.move_forward(state, "Seat1", 0, 5, enter_home=True)
    assert _where(state, "Seat1", 0) == ("home", 2)


def test_only_track_open_is_taken_without_flag(place):
    state = place({("Seat1", 0): ("track", 65), ("Seat1", 1): ("home", 2)})
    actions.move_forward(state, "Seat1", 0, 5)
    assert _where(state, "Seat1", 0) == ("track", 70)

    state = place({("Seat1", 0): ("track", 65)})
    with pytest.raises(DestinationOccupied):
        actions.move_forward(state, "Seat1", 0, 5, enter_home=True)


def test_only_home_open_is_taken_without_flag(place):
    state = place({("Seat1", 0): ("track", 65), ("Seat1", 1): ("track", 70)})
    actions.move_forward(state, "Seat1", 0, 5)
    assert _where(state, "Seat1", 0) == ("home", 2)


def test_neither_destination_open(place):
    state = place({("Seat1", 0): ("track", 65), ("Seat1", 1): ("track", 70), ("Seat1", 2): ("home", 2)})
    with pytest.raises(DestinationOccupied):
        actions.move_forward(state, "Seat1", 0, 5)
    assert _where(state, "Seat1", 0) == ("track", 65)


def test_own_marble_on_the_door_blocks_both_ways(place):
    state = place({("Seat1", 0): ("track", 65), ("Seat1", 1): ("track", 67)})
    for enter_home in (None, True, False):
        with pytest.raises(PathBlocked):
            actions.move_forward(state, "Seat1", 0, 5, enter_home=enter_home)
    assert _where(state, "Seat1", 0) == ("track", 65)


def test_overshooting_home_falls_back_to_track(place):
    state = place({("Seat1", 0): ("track", 66)})
    actions.move_forward(state, "Seat1", 0, 10)
    assert _where(state, "Seat1", 0) == ("track", 4)

    state = place({("Seat1", 0): ("track", 66)})
    with pytest.raises(OutOfRange):
        actions.move_forward(state, "Seat1", 0, 10, enter_home=True)


def test_landing_exactly_on_home_entry_stays_on_track(place):
    state = place({("Seat1", 0): ("track", 62)})
    actions.move_forward(state, "Seat1", 0, 5)
    assert _where(state, "Seat1", 0) == ("track", 67)


def test_standing_on_home_entry_counts_as_reaching_it(place):
    state = place({("Seat1", 0): ("track", 67)})
    actions.move_forward(state, "Seat1", 0, 3)
    assert _where(state, "Seat1", 0) == ("home", 2)


def test_own_marble_before_the_door_blocks_home(place):
    state = place({("Seat1", 0): ("track", 64), ("Seat1", 1): ("track", 66)})
    with pytest.raises(PathBlocked):
        actions.move_forward(state, "Seat1", 0, 5, enter_home=True)


def test_other_seats_home_entry_is_just_track(place):
    state = place({("Seat2", 0): ("track", 65)})
    actions.move_forward(state, "Seat2", 0, 5)
    assert _where(state, "Seat2", 0) == ("track", 70)


# -----------------------------
# Forward inside home
# -----------------------------
def test_home_moves(place):
    state = place({("Seat1", 0): ("home", 0), ("Seat1", 1): ("home", 4)})
    actions.move_forward(state, "Seat1", 0, 3)
    assert _where(state, "Seat1", 0) == ("home", 3)

    with pytest.raises(DestinationOccupied):
        actions.move_forward(state, "Seat1", 0, 1)
    with pytest.raises(OutOfRange):
        actions.move_forward(state, "Seat1", 0, 2)


def test_home_cannot_pass_own_marble(place):
    state = place({("Seat1", 0): ("home", 0), ("Seat1", 1): ("home", 2)})
    with pytest.raises(PathBlocked):
        actions.move_forward(state, "Seat1", 0, 3)


# -----------------------------
# Backward
# -----------------------------
def test_backward_bumps_and_wraps(place):
    state = place({("Seat1", 0): ("track", 2), ("Seat2", 0): ("track", 66)})
    result = actions.move_backward(state, "Seat1", 0, 8)

    assert _where(state, "Seat1", 0) == ("track", 66)
    assert _where(state, "Seat2", 0) == ("start", 0)
    assert len(result["effects"]) == 1


def test_backward_never_enters_home(place):
    state = place({("Seat1", 0): ("track", 70)})
    actions.move_backward(state, "Seat1", 0, 8)
    assert _where(state, "Seat1", 0) == ("track", 62)


def test_backward_needs_track_marble(place):
    state = place({("Seat1", 0): ("home", 1)})
    with pytest.raises(InvalidMarbleState):
        actions.move_backward(state, "Seat1", 0, 8)


# -----------------------------
# Joker
# -----------------------------
def test_joker_from_start_onto_opponent(place):
    state = place({("Seat2", 1): ("track", 40)})
    result = actions.joker_capture(state, "Seat1", 0, "Seat2", 1)

    assert _where(state, "Seat1", 0) == ("track", 40)
    assert _where(state, "Seat2", 1) == ("start", 1)
    assert result["effects"][0]["sent_to"] == "start"


def test_joker_onto_teammate_boosts_it(place):
    state = place({("Seat1", 0): ("track", 5), ("Seat3", 2): ("track", 40)})
    actions.joker_capture(state, "Seat1", 0, "Seat3", 2)

    assert _where(state, "Seat1", 0) == ("track", 40)
    assert _where(state, "Seat3", 2) == ("track", 31)


def test_landing_on_teammate_holding_its_entry_boosts_the_mover(place):
    state = place({("Seat1", 0): ("track", 26), ("Seat3", 0): ("track", 31)})

    result = actions.move_forward(state, "Seat1", 0, 5)

    assert _where(state, "Seat3", 0) == ("track", 31)
    assert _where(state, "Seat1", 0) == ("track", 67)
    assert len(result["effects"]) == 2
    assert result["moved"] == [{"seat": "Seat1", "marble": 0, "location": "track", "position": 67}]


def test_joker_rejections(place):
    state = place({("Seat1", 0): ("home", 0), ("Seat1", 1): ("track", 8), ("Seat2", 0): ("track", 30)})

    with pytest.raises(DestinationOccupied):
        actions.joker_capture(state, "Seat1", 2, "Seat1", 1)
    with pytest.raises(InvalidMarbleState):
        actions.joker_capture(state, "Seat1", 0, "Seat2", 0)
    with pytest.raises(InvalidMarbleState):
        actions.joker_capture(state, "Seat1", 2, "Seat2", 3)
    validate_marbles(state)


# -----------------------------
# Control
# -----------------------------
def test_unfinished_seat_cannot_move_teammate(place):
    state = place({("Seat3", 0): ("track", 40)})
    with pytest.raises(NotController):
        actions.move_forward(state, "Seat1", 0, 3, owner="Seat3")


def test_finished_seat_moves_teammate_but_never_opponent(place):
    layout = {("Seat1", i): ("home", i) for i in range(5)}
    layout[("Seat3", 0)] = ("track", 40)
    layout[("Seat2", 0)] = ("track", 50)
    state = place(layout)

    actions.move_forward(state, "Seat1", 0, 3, owner="Seat3")
    assert _where(state, "Seat3", 0) == ("track", 43)

    with pytest.raises(NotController):
        actions.move_forward(state, "Seat1", 0, 3, owner="Seat2")


# -----------------------------
# Split cards
# -----------------------------
def test_split_seven_two_marbles(place):
    state = place({("Seat1", 0): ("track", 10), ("Seat1", 1): ("track", 20)})
    result = actions.split_seven(state, "Seat1", [
        {"marble_id": 0, "spaces": 3},
        {"marble_id": 1, "spaces": 4},
    ])
    assert _where(state, "Seat1", 0) == ("track", 13)
    assert _where(state, "Seat1", 1) == ("track", 24)
    assert len(result["moved"]) == 2


def test_split_seven_single_marble(place):
    state = place({("Seat1", 0): ("track", 10)})
    actions.split_seven(state, "Seat1", [{"marble_id": 0, "spaces": 7}])
    assert _where(state, "Seat1", 0) == ("track", 17)


@pytest.mark.parametrize("sub_moves", [
    [{"marble_id": 0, "spaces": 3}, {"marble_id": 1, "spaces": 3}],
    [{"marble_id": 0, "spaces": 3}, {"marble_id": 0, "spaces": 4}],
    [{"marble_id": 0, "spaces": 6}],
    [],
])
def test_split_seven_rejections(place, sub_moves):
    state = place({("Seat1", 0): ("track", 10), ("Seat1", 1): ("track", 20)})
    with pytest.raises(IllegalSplit):
        actions.split_seven(state, "Seat1", sub_moves)


def test_split_seven_is_atomic(place):
    state = place({("Seat1", 0): ("track", 10), ("Seat1", 1): ("track", 20), ("Seat1", 2): ("track", 22)})
    before = snapshot_marbles(state)
    with pytest.raises(PathBlocked):
        actions.split_seven(state, "Seat1", [
            {"marble_id": 0, "spaces": 3},
            {"marble_id": 1, "spaces": 4},
        ])
    assert state["marbles"] == before


def test_split_seven_second_marble_sees_first_capture(place):
    state = place({("Seat1", 0): ("track", 10), ("Seat1", 1): ("track", 20), ("Seat2", 0): ("track", 13)})
    result = actions.split_seven(state, "Seat1", [
        {"marble_id": 0, "spaces": 3},
        {"marble_id": 1, "spaces": 4},
    ])
    assert _where(state, "Seat2", 0) == ("start", 0)
    assert len(result["effects"]) == 1


def test_finishing_with_first_leg_unlocks_teammate_for_second(place):
    layout = {("Seat1", i): ("home", i + 1) for i in range(4)}
    layout[("Seat1", 4)] = ("track", 64)
    layout[("Seat3", 0)] = ("track", 40)
    state = place(layout)

    actions.split_seven(state, "Seat1", [
        {"marble_id": 4, "spaces": 4},
        {"marble_id": 0, "owner": "Seat3", "spaces": 3},
    ])
    assert _where(state, "Seat1", 4) == ("home", 0)
    assert _where(state, "Seat3", 0) == ("track", 43)


@pytest.fixture
def one_from_winning(place):
    """Seat3 finished, Seat1 needs its last marble (track 63) in home index 0."""
    layout = {("Seat3", i): ("home", i) for i in range(5)}
    layout.update({("Seat1", i): ("home", i + 1) for i in range(4)})
    layout[("Seat1", 4)] = ("track", 63)
    return place(layout)


def test_winning_single_leg_ends_a_seven_early(one_from_winning):
    actions.split_seven(one_from_winning, "Seat1", [{"marble_id": 4, "spaces": 5}])
    assert _where(one_from_winning, "Seat1", 4) == ("home", 0)


def test_winning_forward_leg_needs_no_backward_on_a_nine(one_from_winning):
    actions.split_nine(one_from_winning, "Seat1", {"marble_id": 4, "spaces": 5})
    assert _where(one_from_winning, "Seat1", 4) == ("home", 0)


def test_short_leg_that_does_not_win_is_undone(one_from_winning):
    before = snapshot_marbles(one_from_winning)
    with pytest.raises(IllegalSplit):
        actions.split_nine(one_from_winning, "Seat1", {"marble_id": 4, "spaces": 3})
    with pytest.raises(IllegalSplit):
        actions.split_seven(one_from_winning, "Seat1", [{"marble_id": 4, "spaces": 2}])
    assert one_from_winning["marbles"] == before


def test_split_nine(place):
    state = place({("Seat1", 0): ("track", 10), ("Seat1", 1): ("track", 30)})
    actions.split_nine(state, "Seat1", {"marble_id": 0, "spaces": 5}, {"marble_id": 1, "spaces": 4})
    assert _where(state, "Seat1", 0) == ("track", 15)
    assert _where(state, "Seat1", 1) == ("track", 26)


def test_split_nine_rejections(place):
    state = place({("Seat1", 0): ("track", 10), ("Seat1", 1): ("track", 30)})
    with pytest.raises(IllegalSplit):
        actions.split_nine(state, "Seat1", {"marble_id": 0, "spaces": 5}, {"marble_id": 0, "spaces": 4})
    with pytest.raises(IllegalSplit):
        actions.split_nine(state, "Seat1", {"marble_id": 0, "spaces": 5}, {"marble_id": 1, "spaces": 5})
    with pytest.raises(IllegalSplit):
        actions.split_nine(state, "Seat1", {"marble_id": 0, "spaces": 9}, {"marble_id": 1, "spaces": 0})


def test_split_nine_backward_marble_must_be_on_track(place):
    state = place({("Seat1", 0): ("track", 10)})
    with pytest.raises(InvalidMarbleState):
        actions.split_nine(state, "Seat1", {"marble_id": 0, "spaces": 5}, {"marble_id": 1, "spaces": 4})
    assert _where(state, "Seat1", 0) == ("track", 10)
