"""
errors.py — Typed rule failures

Every failure the engine reports to its caller is a MoveRejected subclass.
A rejected call never leaves a half-applied move on the table (the only
intentional partial state is the first leg of a split card, see split_moves.py).

Caller bugs (unknown seat, marble id outside 0..4, ...) are NOT rule
failures and raise ValueError instead.

Usage:
    from errors import MoveRejected

    try:
        turns.play_card(state, "Seat1", 0, {"action": "enter", "marble_id": 2})
    except MoveRejected as e:
        logger.debug("Rejected: %s", e.to_dict())
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "DestinationOccupied",
    "GameNotActive",
    "IllegalSplit",
    "InvalidCardChoice",
    "InvalidMarbleState",
    "MoveRejected",
    "NoLegalDiscard",
    "NoPendingSplit",
    "NotController",
    "NotYourTurn",
    "OutOfRange",
    "PathBlocked",
]


class MoveRejected(Exception):
    """Base class for every recoverable rule failure.

    Attributes:
        code: Machine-readable error code
        message: Human-readable description
        context: Extra detail for logs and API responses
    """
    code: str = "MOVE_REJECTED"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Move rule failures
# =============================================================================


class InvalidMarbleState(MoveRejected):
    """The marble is in the wrong zone for the requested action."""
    code: str = "INVALID_MARBLE_STATE"


class PathBlocked(MoveRejected):
    """One of the mover's own marbles sits on the traversed path."""
    code: str = "PATH_BLOCKED"


class DestinationOccupied(MoveRejected):
    """The destination holds the mover's own marble (or a disallowed one)."""
    code: str = "DESTINATION_OCCUPIED"


class OutOfRange(MoveRejected):
    """The move would overshoot the home zone."""
    code: str = "OUT_OF_RANGE"


class IllegalSplit(MoveRejected):
    """Wrong total, marble reused, or a leg that cannot be completed."""
    code: str = "ILLEGAL_SPLIT"


class NotController(MoveRejected):
    """The acting seat may not move the named marble."""
    code: str = "NOT_CONTROLLER"


class NoLegalDiscard(MoveRejected):
    """Discarding is only allowed when no card in hand has a legal play."""
    code: str = "NO_LEGAL_DISCARD"


# =============================================================================
# Turn failures
# =============================================================================


class NotYourTurn(MoveRejected):
    code: str = "NOT_YOUR_TURN"


class GameNotActive(MoveRejected):
    code: str = "GAME_NOT_ACTIVE"


class NoPendingSplit(MoveRejected):
    code: str = "NO_PENDING_SPLIT"


class InvalidCardChoice(MoveRejected):
    """The chosen card does not exist or does not fit the requested move."""
    code: str = "INVALID_CARD_CHOICE"
