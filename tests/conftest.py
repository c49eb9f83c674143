"""Shared fixtures: tables built directly on the aggregate."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from cards import CardTD, build_deck
from state import GameStateTD, build_table
from table_setup import place_marbles


@pytest.fixture
def table() -> GameStateTD:
    """Started table, Seat1 on turn, empty hands, unshuffled draw pile."""
    state = build_table()
    state["deck"] = build_deck()
    state["started"] = True
    state["turn_no"] = 1
    return state


@pytest.fixture
def place(table: GameStateTD) -> Callable[..., GameStateTD]:
    """place({("Seat1", 0): ("track", 10), ...}) on the `table` fixture."""

    def _place(layout: Dict[Tuple[str, int], Tuple[str, int]]) -> GameStateTD:
        place_marbles(table, layout)  # type: ignore[arg-type]
        return table

    return _place


@pytest.fixture
def deal(table: GameStateTD) -> Callable[..., GameStateTD]:
    """deal("Seat1", "7", "K", ...) puts exactly those cards in a seat's hand."""

    def _deal(seat: str, *values: str) -> GameStateTD:
        hand: List[CardTD] = [{"value": value, "suit": "hearts"} for value in values]
        table["hands"][seat] = hand  # type: ignore[index]
        return table

    return _deal
