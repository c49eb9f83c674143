#!/usr/bin/env python3
"""
captures.py — Bump / chain-reaction resolution

Called by the executor AFTER a marble has been placed on a track cell that
was already occupied. The previous occupant is displaced:

- opponent of the lander  -> back to its own start slot (slot == marble id)
- teammate of the lander  -> boosted forward to its OWN home entry

A boosted teammate may land on another occupied cell (its home entry).
It then becomes the lander there and the occupant is displaced by the same
rules: a chain reaction. Every displacement is returned as a landing effect.

A teammate already standing on its own home entry keeps its cell. The
lander is displaced from that cell instead; being the occupant's teammate,
it is boosted to ITS own home entry and the chain goes on from there.

A teammate goes to start instead of its home entry when that entry is
held by a marble of its own seat.

by Sziller
"""

from __future__ import annotations

import logging
from typing import List, Literal

from board import (
    MARBLES_PER_SEAT,
    SEATS,
    MarbleRef,
    Marbles,
    Seat,
    home_entry,
    is_teammate,
    marble_at,
)
from state import LandingEffectTD

logger = logging.getLogger(__name__)

# Each step moves one marble; no chain can be longer than the marble count.
MAX_CHAIN_STEPS: int = MARBLES_PER_SEAT * len(SEATS)


def _can_boost(marbles: Marbles, victim: MarbleRef) -> bool:
    seat = victim[0]
    occupant = marble_at(marbles, home_entry(seat))
    return occupant is None or occupant[0] != seat


def send_to_start(marbles: Marbles, seat: Seat, marble_id: int) -> None:
    """Relocate a marble to its own start slot."""
    marble = marbles[seat][marble_id]
    marble["location"] = "start"
    marble["position"] = marble_id


def _effect(
    lander: MarbleRef,
    victim: MarbleRef,
    from_cell: int,
    sent_to: Literal["start", "home_entry"],
    position: int,
) -> LandingEffectTD:
    return {
        "by_seat": lander[0],
        "by_marble": lander[1],
        "seat": victim[0],
        "marble": victim[1],
        "from_cell": from_cell,
        "sent_to": sent_to,
        "position": position,
    }


def resolve_landing(marbles: Marbles, lander: MarbleRef, victim: MarbleRef) -> List[LandingEffectTD]:
    """
    Displace `victim` after `lander` arrived on its cell, following chains.

    `marbles` is mutated in place. Returns the landing effects in the order
    they happened.
    """
    effects: List[LandingEffectTD] = []

    for _ in range(MAX_CHAIN_STEPS):
        by_seat, by_marble = lander
        seat, marble_id = victim
        if by_seat == seat:
            raise ValueError(f"{by_seat} marble {by_marble} cannot displace its own marble {marble_id}")

        marble = marbles[seat][marble_id]
        from_cell = marble["position"]

        if is_teammate(by_seat, seat):
            door = home_entry(seat)
            if from_cell == door:
                effects.append(_effect(lander, victim, from_cell, "home_entry", door))
                logger.debug("%s marble %s holds its home entry %s, %s marble %s gives way",
                             seat, marble_id, door, by_seat, by_marble)
                lander, victim = victim, lander
                continue

            if _can_boost(marbles, victim):
                next_victim = marble_at(marbles, door)
                marble["position"] = door
                effects.append(_effect(lander, victim, from_cell, "home_entry", door))
                logger.debug("%s marble %s boosted %s marble %s from %s to home entry %s",
                             by_seat, by_marble, seat, marble_id, from_cell, door)
                if next_victim is None:
                    return effects
                lander, victim = victim, next_victim
                continue

        send_to_start(marbles, seat, marble_id)
        effects.append(_effect(lander, victim, from_cell, "start", marble_id))
        logger.debug("%s marble %s sent %s marble %s from %s back to start",
                     by_seat, by_marble, seat, marble_id, from_cell)
        return effects

    raise RuntimeError(f"Chain reaction did not settle after {MAX_CHAIN_STEPS} steps")
