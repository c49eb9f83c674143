#!/usr/bin/env python3
"""
simulate.py — self-play runner (random legal moves for all four seats)

Every turn the current seat picks a random legal play from the oracle,
or discards a random card when there is none. The table is validated
after each action.

Run:
    python simulate.py --seed 7 --max-turns 2000
"""

from __future__ import annotations

import argparse
import logging
import os
import random
from typing import Optional

import legality
import turns
from board import Team
from state import GameStateTD, current_seat, is_active, validate_marbles
from table_setup import setup_new_game

logger = logging.getLogger(__name__)

MAX_TURNS = 3000


def play_turn(state: GameStateTD, rng: random.Random) -> None:
    seat = current_seat(state)
    plays = legality.legal_plays(state, seat)
    if plays:
        play = rng.choice(plays)
        turns.play_card(state, seat, play["card_index"], play["move"], rng=rng)
    else:
        turns.discard(state, seat, rng.randrange(len(state["hands"][seat])), rng=rng)
    validate_marbles(state)


def play_random_game(seed: int = 42, max_turns: int = MAX_TURNS) -> GameStateTD:
    """Play until a team wins or `max_turns` actions were taken."""
    rng = random.Random(seed)
    state = setup_new_game(rng=rng)
    validate_marbles(state)

    for _ in range(max_turns):
        if not is_active(state):
            break
        play_turn(state, rng)
    return state


def main(argv: Optional[list[str]] = None) -> Optional[Team]:
    parser = argparse.ArgumentParser(description="Play a random self-play game.")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--max-turns", type=int, default=MAX_TURNS)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    state = play_random_game(args.seed, args.max_turns)
    print(f"Turns played: {state['turn_no']}")
    print(f"Winner: {state['winner'] or 'none (turn limit reached)'}")
    for line in state["public_log"][-10:]:
        print(f"  {line}")
    return state["winner"]


if __name__ == "__main__":
    main()
