#!/usr/bin/env python3
"""
cards.py — Double deck definition + the canonical card table

The deck is two standard 52-card decks plus 4 Jokers (108 cards).
Cards are drawn WITHOUT replacement from a shared draw pile; played
cards go onto the player's own discard pile.

CARD_RULES is the ONE table that maps a card value to its effect.
Both the move executor (via turns.py) and the legality oracle read it,
so they can never disagree about what a card does.

by Sziller
"""

from __future__ import annotations

import random
from typing import Dict, List, Literal, Optional, TypedDict, Union


CardKind = Literal[
    "enter_or_forward",  # A, J, Q, K
    "forward",           # 2-6, 10
    "split_seven",       # 7
    "backward",          # 8
    "split_nine",        # 9
    "joker",             # Joker
]


class CardTD(TypedDict):
    value: str  # "A", "2".."10", "J", "Q", "K", "Joker"
    suit: str   # hearts/diamonds/clubs/spades, or red/black for Jokers


class CardRuleTD(TypedDict):
    kind: CardKind
    spaces: int


SUITS: List[str] = ["hearts", "diamonds", "clubs", "spades"]
VALUES: List[str] = ["A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"]
JOKER: str = "Joker"
JOKER_SUITS: List[str] = ["red", "black"]
DECK_COPIES: int = 2
HAND_SIZE: int = 5

FACE_SPACES: int = 10


# ---------------------------------------------------------------------
# Canonical card table (value -> effect)
# ---------------------------------------------------------------------
CARD_RULES: Dict[str, CardRuleTD] = {
    "A": {"kind": "enter_or_forward", "spaces": 1},
    "2": {"kind": "forward", "spaces": 2},
    "3": {"kind": "forward", "spaces": 3},
    "4": {"kind": "forward", "spaces": 4},
    "5": {"kind": "forward", "spaces": 5},
    "6": {"kind": "forward", "spaces": 6},
    "7": {"kind": "split_seven", "spaces": 7},
    "8": {"kind": "backward", "spaces": 8},
    "9": {"kind": "split_nine", "spaces": 9},
    "10": {"kind": "forward", "spaces": 10},
    "J": {"kind": "enter_or_forward", "spaces": FACE_SPACES},
    "Q": {"kind": "enter_or_forward", "spaces": FACE_SPACES},
    "K": {"kind": "enter_or_forward", "spaces": FACE_SPACES},
    JOKER: {"kind": "joker", "spaces": 0},
}

SPLIT_CARD_TYPES: Dict[int, CardKind] = {
    7: "split_seven",
    9: "split_nine",
}


def card_rule(card: Union[CardTD, str, int]) -> CardRuleTD:
    """
    Look up the rule for a card, a card value ("7", "K", "Joker") or a number.
    """
    value = card["value"] if isinstance(card, dict) else str(card)
    if value == "1":
        value = "A"
    value = JOKER if value.lower() == JOKER.lower() else value.upper()
    try:
        return CARD_RULES[value]
    except KeyError:
        raise ValueError(f"Unknown card value: {value!r}")


def card_label(card: CardTD) -> str:
    if card["value"] == JOKER:
        return f"Joker ({card['suit']})"
    return f"{card['value']} of {card['suit']}"


# -----------------------------
# Deck construction
# -----------------------------
def build_deck() -> List[CardTD]:
    """Return the full, UNSHUFFLED 108-card deck."""
    deck: List[CardTD] = []
    for _ in range(DECK_COPIES):
        for suit in SUITS:
            for value in VALUES:
                deck.append({"value": value, "suit": suit})
        for suit in JOKER_SUITS:
            deck.append({"value": JOKER, "suit": suit})
    return deck


def shuffle_deck(deck: List[CardTD], *, rng: Optional[random.Random] = None) -> List[CardTD]:
    """Shuffle in place and return the same list."""
    rng = rng or random
    rng.shuffle(deck)
    return deck
