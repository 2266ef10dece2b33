"""
Beam Search Agent.

This module provides the BeamAgent class, a player that picks the first
move of the best path found by a BeamSearch engine.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple

from turn_search.beam.config import BeamConfig
from turn_search.beam.search import BeamSearch
from turn_search.core.agent import Agent
from turn_search.core.game import GameModel
from turn_search.core.timing import Clock, default_clock


class BeamAgent(Agent):
    """
    Beam search agent.

    The best path of the last search is kept for inspection.
    """

    def __init__(
        self,
        game: GameModel,
        config: Optional[BeamConfig] = None,
        name: str = "Beam Agent",
        verbose: bool = False,
        clock: Clock = default_clock,
    ):
        """
        Initialize a beam search agent.

        Args:
            game: Game model to play (must implement evaluate())
            config: Beam configuration parameters
            name: Name of the agent
            verbose: Whether to print the best path of every search
            clock: Clock handed to the engine
        """
        self.game = game
        self.config = config or BeamConfig()
        self.name = name
        self.verbose = verbose
        self.engine = BeamSearch(game, self.config, clock=clock)

        self.last_stats: Dict[str, Any] = {}
        self.last_path: List[Tuple[Any, float]] = []

    def select_action(
        self,
        state: Any,
        player_id: int,
        previous_moves: Sequence[Any] = ()
    ) -> Any:
        """
        Select the first move of the best path from state.

        Args:
            state: Current game state
            player_id: ID of the player making the decision
            previous_moves: Ignored, beam search starts from scratch every turn

        Returns:
            Selected move
        """
        action = self.engine.best_move(state, previous_moves, player_id)
        self.last_path = list(self.engine.last_path)
        self.last_stats = dict(self.engine.last_stats)

        if self.verbose:
            path = " -> ".join(f"{self.game.format_move(m)} ({s:.1f})" for m, s in self.last_path)
            print(f"\n{self.name} selected: {self.game.format_move(action)}")
            print(f"Rounds: {self.last_stats['rounds']}, nodes: {self.last_stats['node_count']}")
            print(f"Best path: {path or 'none'}")

        return action

    def get_last_statistics(self) -> Dict[str, Any]:
        """Get statistics from the most recent search."""
        return self.last_stats

    def __str__(self) -> str:
        return f"{self.name} (Beam, width {self.config.beam_width})"
