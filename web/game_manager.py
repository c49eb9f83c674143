#!/usr/bin/env python3
"""
web/game_manager.py — In-memory tables for the JSON API.

- Creates tables (fresh deck, cards dealt, starting seat on turn)
- Looks tables up by id
- One lock per table: actions on a table run one at a time,
  different tables never wait for each other
"""

from __future__ import annotations

import logging
import random
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from board import Seat
from state import GameStateTD
from table_setup import setup_new_game

logger = logging.getLogger(__name__)


def _now_ts() -> float:
    return time.time()


def _new_id(nbytes: int = 8) -> str:
    return secrets.token_hex(nbytes)


@dataclass
class TableSession:
    table_id: str
    state: GameStateTD
    rng: random.Random
    seed: Optional[int] = None
    created_ts: float = field(default_factory=_now_ts)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class GameManager:
    """Simple in-memory store. Tables are lost on restart."""

    def __init__(self) -> None:
        self._tables: Dict[str, TableSession] = {}
        self._registry_lock = threading.Lock()

    def create_table(self, *, starting_seat: Seat = "Seat1", seed: Optional[int] = None) -> TableSession:
        rng = random.Random(seed)
        state = setup_new_game(starting_seat=starting_seat, rng=rng)
        session = TableSession(table_id=_new_id(8), state=state, rng=rng, seed=seed)
        with self._registry_lock:
            self._tables[session.table_id] = session
        logger.info("Table %s created (starting seat %s, seed %s)", session.table_id, starting_seat, seed)
        return session

    def get_table(self, table_id: str) -> Optional[TableSession]:
        with self._registry_lock:
            return self._tables.get(table_id)

    def drop_table(self, table_id: str) -> bool:
        with self._registry_lock:
            return self._tables.pop(table_id, None) is not None

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._tables)
