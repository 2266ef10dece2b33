"""
Game model contract shared by every search engine.

A game plugs into the engines by subclassing GameModel. The engines only
ever talk to the game through these methods, so any conforming model can be
swapped in without touching engine code.

Models may precompute expensive lookup tables in their constructor. The
engines hold on to one model instance for a whole search episode and never
mutate it, so such tables act as a read-only cache.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Generic, Hashable, Sequence, Tuple, TypeVar

import numpy as np

from turn_search.core.exceptions import EmptyMoveSetError

MAX_PLAYERS = 4
"""Length of every score vector. Unused player slots are 0."""

GameScore = np.ndarray
"""Float array of length MAX_PLAYERS holding one reward per player."""

S = TypeVar("S")
M = TypeVar("M", bound=Hashable)


def make_scores(*values: float) -> GameScore:
    """
    Build a score vector from the rewards of the first players.

    Args:
        values: Rewards for players 0, 1, ... (at most MAX_PLAYERS)

    Returns:
        Score vector padded with zeros
    """
    if len(values) > MAX_PLAYERS:
        raise ValueError(f"at most {MAX_PLAYERS} scores are supported")
    scores = np.zeros(MAX_PLAYERS, dtype=np.float64)
    scores[:len(values)] = values
    return scores


def check_moves(player: int, moves: Sequence[Any]) -> Tuple[int, Sequence[Any]]:
    """
    Ensure a model honoured the non-empty move set guarantee.

    Raises:
        EmptyMoveSetError: If moves is empty
    """
    if len(moves) == 0:
        raise EmptyMoveSetError(
            "game model returned no legal move",
            context={"player": player},
        )
    return player, moves


class GameModel(ABC, Generic[S, M]):
    """
    Abstract base class for games searched by the engines.

    States are values: apply() returns a new state and never mutates the
    one it receives. Moves must be hashable and comparable with ==, since
    re-rooting looks moves up among a node's children.
    """

    name: str = "game"

    @abstractmethod
    def valid_moves(self, state: S) -> Tuple[int, Sequence[M]]:
        """
        Get the player to act and the legal moves.

        When no move is otherwise legal the sequence must hold a single
        pass move, so callers never receive an empty sequence.

        Args:
            state: Current game state

        Returns:
            Tuple of (acting player, legal moves)
        """

    @abstractmethod
    def apply(self, state: S, player: int, move: M) -> S:
        """
        Return the state reached when player plays move.

        Must be deterministic and total over the legal move set.
        """

    @abstractmethod
    def is_terminal(self, state: S) -> bool:
        """Check whether the game is over."""

    @abstractmethod
    def scores(self, state: S) -> GameScore:
        """
        Get the per-player rewards of a terminal state.

        Returns:
            Array of MAX_PLAYERS rewards in a bounded range (usually [0, 1])
        """

    def random_move(self, state: S, rng: np.random.Generator) -> Tuple[int, M]:
        """
        Pick a uniformly random legal move (rollout fast path).

        Models with a cheaper way to sample a move can override this.

        Args:
            state: Current game state
            rng: Random generator owned by the caller

        Returns:
            Tuple of (acting player, move)
        """
        player, moves = check_moves(*self.valid_moves(state))
        return player, moves[int(rng.integers(len(moves)))]

    def evaluate(self, state: S) -> float:
        """
        Static evaluation used by Beam Search (higher is better).

        Raises:
            NotImplementedError: If the model has no heuristic
        """
        raise NotImplementedError(f"{type(self).__name__} has no evaluation heuristic")

    def initial_state(self) -> S:
        """
        Get the starting state of a new game.

        Only needed by the match runner.
        """
        raise NotImplementedError(f"{type(self).__name__} has no initial state")

    def format_move(self, move: M) -> str:
        """Human-readable representation of a move."""
        return str(move)
