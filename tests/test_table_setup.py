"""Deck, dealing, drawing and arbitrary positions."""

from __future__ import annotations

import random
from collections import Counter

import pytest

from cards import JOKER, build_deck, card_label, card_rule
from state import current_seat
from table_setup import draw_card, place_marbles, setup_new_game


def test_double_deck_with_four_jokers():
    deck = build_deck()
    values = Counter(card["value"] for card in deck)

    assert len(deck) == 108
    assert values[JOKER] == 4
    assert values["7"] == 8
    assert values["K"] == 8


def test_card_rule_lookup():
    assert card_rule("1") == card_rule("A") == {"kind": "enter_or_forward", "spaces": 1}
    assert card_rule("k") == {"kind": "enter_or_forward", "spaces": 10}
    assert card_rule("joker")["kind"] == "joker"
    assert card_rule(8) == {"kind": "backward", "spaces": 8}
    assert card_rule({"value": "9", "suit": "clubs"})["kind"] == "split_nine"
    with pytest.raises(ValueError):
        card_rule("11")


def test_card_label():
    assert card_label({"value": "Q", "suit": "spades"}) == "Q of spades"
    assert card_label({"value": JOKER, "suit": "red"}) == "Joker (red)"


def test_setup_new_game_deals_five_each():
    state = setup_new_game(rng=random.Random(1))

    assert state["started"]
    assert current_seat(state) == "Seat1"
    assert all(len(hand) == 5 for hand in state["hands"].values())
    assert len(state["deck"]) == 108 - 20
    assert state["turn_no"] == 1


def test_setup_is_reproducible_with_a_seed():
    first = setup_new_game(rng=random.Random(7), starting_seat="Seat3")
    second = setup_new_game(rng=random.Random(7), starting_seat="Seat3")

    assert first["hands"] == second["hands"]
    assert current_seat(first) == "Seat3"


def test_empty_draw_pile_takes_back_all_discards(table):
    table["deck"] = []
    table["discards"]["Seat2"] = [{"value": "5", "suit": "clubs"}]
    table["discards"]["Seat4"] = [{"value": "9", "suit": "hearts"}]

    card = draw_card(table, "Seat1", rng=random.Random(0))

    assert card in ({"value": "5", "suit": "clubs"}, {"value": "9", "suit": "hearts"})
    assert table["hands"]["Seat1"] == [card]
    assert len(table["deck"]) == 1
    assert all(pile == [] for pile in table["discards"].values())


def test_nothing_left_to_draw(table):
    table["deck"] = []
    assert draw_card(table, "Seat1") is None
    assert table["hands"]["Seat1"] == []


def test_place_marbles(table):
    place_marbles(table, {("Seat2", 3): ("start", 0), ("Seat2", 1): ("home", 4)})
    assert table["marbles"]["Seat2"][3] == {"location": "start", "position": 3}
    assert table["marbles"]["Seat2"][1] == {"location": "home", "position": 4}

    with pytest.raises(ValueError):
        place_marbles(table, {("Seat2", 0): ("home", 5)})
    with pytest.raises(AssertionError):
        place_marbles(table, {("Seat1", 0): ("track", 9), ("Seat4", 0): ("track", 9)})
