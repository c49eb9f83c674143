#!/usr/bin/env python3
"""
web/models.py — Request bodies for the JSON API.

Bodies are validated by pydantic and converted into the engine's plain
payload dicts (MoveTD / SubMoveTD) with `to_move()`. Rule checks stay in
the engine: a body that is well-formed but illegal comes back as a 409.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from board import MARBLES_PER_SEAT, Seat
from state import MoveTD, SubMoveTD


class SubMoveIn(BaseModel):
    """One leg of a 7 / 9."""
    marble_id: int = Field(ge=0, le=MARBLES_PER_SEAT - 1)
    owner: Optional[Seat] = None
    spaces: Optional[int] = Field(None, ge=1, le=8)
    enter_home: Optional[bool] = None

    def to_sub_move(self) -> SubMoveTD:
        return self.model_dump(exclude_none=True)  # type: ignore[return-value]


class CreateTableRequest(BaseModel):
    starting_seat: Seat = "Seat1"
    seed: Optional[int] = Field(
        None,
        ge=0,
        le=0x7FFFFFFF,
        description="Optional RNG seed for a reproducible deck",
    )


class PlayRequest(BaseModel):
    """Play one card in full. Which fields are needed depends on the card."""
    seat: Seat
    card_index: int = Field(ge=0)

    # A, J, Q, K and the plain numbers
    action: Optional[Literal["enter", "move"]] = None
    marble_id: Optional[int] = Field(None, ge=0, le=MARBLES_PER_SEAT - 1)
    owner: Optional[Seat] = None
    enter_home: Optional[bool] = None

    # 7
    moves: Optional[List[SubMoveIn]] = None

    # 9
    forward: Optional[SubMoveIn] = None
    backward: Optional[SubMoveIn] = None

    # Joker
    source_marble_id: Optional[int] = Field(None, ge=0, le=MARBLES_PER_SEAT - 1)
    target_seat: Optional[Seat] = None
    target_marble_id: Optional[int] = Field(None, ge=0, le=MARBLES_PER_SEAT - 1)

    def to_move(self) -> MoveTD:
        return self.model_dump(exclude_none=True, exclude={"seat", "card_index"})  # type: ignore[return-value]


class PartialMoveRequest(BaseModel):
    seat: Seat
    card_type: Literal[7, 9]
    card_index: Optional[int] = Field(None, ge=0)
    move: SubMoveIn


class CompleteMoveRequest(BaseModel):
    seat: Seat
    move: SubMoveIn


class DiscardRequest(BaseModel):
    seat: Seat
    card_index: int = Field(ge=0)
