"""
Agent interface used by the match runner.

An agent wraps one decision strategy (a search engine, or random play) and
is asked for a move once per turn. It receives the moves played since its
previous turn so that tree-reusing engines can follow the game.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Sequence

import numpy as np

from turn_search.core.game import GameModel, check_moves


class Agent(ABC):
    """
    Abstract base class for all agents.

    This class defines the common interface that all agents must implement.
    """

    name: str = "Agent"

    @abstractmethod
    def select_action(
        self,
        state: Any,
        player_id: int,
        previous_moves: Sequence[Any] = ()
    ) -> Any:
        """
        Select a move from the current game state.

        Args:
            state: Current game state
            player_id: ID of the player making the decision
            previous_moves: Moves played since this agent's previous turn

        Returns:
            Selected move
        """

    def new_game(self) -> None:
        """Forget everything tied to the previous game."""

    def get_last_statistics(self) -> Dict[str, Any]:
        """
        Get statistics from the most recent decision.

        Returns:
            Dictionary of statistics (empty by default)
        """
        return {}

    def get_action_callback(self) -> Callable[[Any, int, Sequence[Any]], Any]:
        """
        Get a callback function for selecting moves.

        Returns:
            Callback taking a state, a player ID and the previous moves
        """
        return lambda state, player_id, previous_moves=(): self.select_action(
            state, player_id, previous_moves
        )

    def __str__(self) -> str:
        return self.name


class RandomAgent(Agent):
    """
    Agent that plays uniformly random legal moves.

    This agent serves as a baseline for comparison with the search agents.
    """

    def __init__(
        self,
        game: GameModel,
        name: str = "Random Agent",
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize the random agent.

        Args:
            game: Game model providing the legal moves
            name: Name of the agent
            seed: Seed of the agent's generator (ignored when rng is given)
            rng: Random generator to draw moves from
        """
        self.game = game
        self.name = name
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def select_action(
        self,
        state: Any,
        player_id: int,
        previous_moves: Sequence[Any] = ()
    ) -> Any:
        """
        Select a random legal move.

        Args:
            state: Current game state
            player_id: ID of the player making the decision
            previous_moves: Ignored for random agent

        Returns:
            Randomly selected move
        """
        _, moves = check_moves(*self.game.valid_moves(state))
        return moves[int(self.rng.integers(len(moves)))]
