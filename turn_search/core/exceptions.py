"""
Error hierarchy for the search engines.

All custom exceptions inherit from TurnSearchError so callers can catch
every engine error in one place.

Usage:
    from turn_search.core.exceptions import EmptyMoveSetError

    try:
        move = engine.best_move(state, previous_moves, player)
    except EmptyMoveSetError as e:
        logger.error(f"Broken game model: {e.message}")
"""
from typing import Any, Dict, Optional

__all__ = [
    "TurnSearchError",
    "StaleTreeError",
    "ArenaExhaustedError",
    "EmptyMoveSetError",
]


class TurnSearchError(Exception):
    """
    Base exception for all search engine errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "TURN_SEARCH_ERROR"

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


class StaleTreeError(TurnSearchError):
    """
    The retained tree does not contain a move that was actually played.

    Raised while re-rooting. The engine recovers by resetting its arena.
    """
    code: str = "STALE_TREE"


class ArenaExhaustedError(TurnSearchError):
    """
    A node allocation would exceed the arena capacity.

    The engines stop expanding and return the best move found so far.
    """
    code: str = "ARENA_EXHAUSTED"

    def __init__(self, requested: int, remaining: int):
        super().__init__(
            f"cannot allocate {requested} nodes",
            context={"requested": requested, "remaining": remaining},
        )
        self.requested = requested
        self.remaining = remaining


class EmptyMoveSetError(TurnSearchError, ValueError):
    """
    A game model returned no legal move.

    Models must return a single pass move when nothing else is legal, so
    this always points at a bug in the model and is never swallowed.
    """
    code: str = "EMPTY_MOVE_SET"
