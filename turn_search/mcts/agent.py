"""
Monte Carlo Tree Search Agent.

This module provides the MCTSAgent class, a ready-to-use player that picks
its moves with an MCTSSearch engine. The agent keeps the engine (and its
tree) across turns and forwards the moves played in between, so the engine
can reuse the matching subtree.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json
import logging

import numpy as np

from turn_search.core.agent import Agent
from turn_search.core.game import GameModel, check_moves
from turn_search.core.timing import Clock, default_clock
from turn_search.mcts.config import MCTSConfig
from turn_search.mcts.search import MCTSSearch

logger = logging.getLogger(__name__)


class MCTSAgent(Agent):
    """
    Monte Carlo Tree Search agent.

    This agent uses MCTS to select moves. It can be configured with
    different parameters and provides statistics about its search process.
    """

    def __init__(
        self,
        game: GameModel,
        config: Optional[MCTSConfig] = None,
        name: str = "MCTS Agent",
        verbose: bool = False,
        rng: Optional[np.random.Generator] = None,
        clock: Clock = default_clock,
    ):
        """
        Initialize an MCTS agent.

        Args:
            game: Game model to play
            config: MCTS configuration parameters
            name: Name of the agent
            verbose: Whether to print a summary of every search
            rng: Random generator handed to the engine
            clock: Clock handed to the engine
        """
        self.game = game
        self.config = config or MCTSConfig()
        self.name = name
        self.verbose = verbose
        self.engine = MCTSSearch(game, self.config, rng=rng, clock=clock)

        # Statistics from the most recent search
        self.last_stats: Dict[str, Any] = {}

        # History of all moves and their statistics
        self.action_history: List[Tuple[Any, Dict[str, Any]]] = []

        # Moves the engine has not seen yet (turns decided without a search)
        self._unsearched_moves: List[Any] = []

    def select_action(
        self,
        state: Any,
        player_id: int,
        previous_moves: Sequence[Any] = ()
    ) -> Any:
        """
        Select a move using Monte Carlo Tree Search.

        Args:
            state: Current game state
            player_id: ID of the player making the decision
            previous_moves: Moves played since this agent's previous turn,
                starting with that turn's own move

        Returns:
            Selected move
        """
        acting_player, valid_moves = check_moves(*self.game.valid_moves(state))

        # Check if it's actually our turn
        if acting_player != player_id:
            raise ValueError(f"Not player {player_id}'s turn")

        # If there's only one valid move, no need to search
        if len(valid_moves) == 1:
            self._unsearched_moves.extend(previous_moves)
            action = valid_moves[0]
            logger.debug(f"{self.name}: forced move {self.game.format_move(action)}")
            self.last_stats = {"iterations": 0, "forced_move": True}
            self.action_history.append((action, self.last_stats))
            return action

        history = self._unsearched_moves + list(previous_moves)
        self._unsearched_moves = []

        action = self.engine.best_move(state, history, player_id)

        # Store statistics
        self.last_stats = dict(self.engine.last_stats)
        self.last_stats["action_visits"] = {
            self.game.format_move(move): visits
            for move, visits, _ in self.engine.root_child_stats()
        }
        self.last_stats["action_rewards"] = {
            self.game.format_move(move): reward / visits
            for move, visits, reward in self.engine.root_child_stats()
            if visits > 0
        }

        # Store in history
        self.action_history.append((action, self.last_stats))

        if self.verbose:
            self._print_search_info(action, self.last_stats)

        return action

    def _print_search_info(self, action: Any, stats: Dict[str, Any]) -> None:
        """
        Print information about the search.

        Args:
            action: Selected move
            stats: Search statistics
        """
        print(f"\n{self.name} selected: {self.game.format_move(action)}")
        print(f"Iterations: {stats['iterations']}")
        print(f"Time: {stats['time_elapsed']:.3f}s ({stats['iterations_per_second']:.1f} it/s)")
        print(f"Nodes: {stats['node_count']} (tree reused: {stats['reused_tree']})")

        # Print top moves by visit count
        print("\nTop moves:")
        moves_by_visits = sorted(
            stats['action_visits'].items(),
            key=lambda x: x[1],
            reverse=True
        )
        for i, (move_str, visits) in enumerate(moves_by_visits[:5]):
            value = stats['action_rewards'].get(move_str, 0)
            print(f"{i+1}. {move_str} - {visits} visits, {value:.3f} value")

    def new_game(self) -> None:
        """Drop the retained tree before a new game."""
        self.engine.new_episode()
        self._unsearched_moves = []

    def get_last_statistics(self) -> Dict[str, Any]:
        """
        Get statistics from the most recent search.

        Returns:
            Dictionary of search statistics
        """
        return self.last_stats

    def get_principal_variation(self) -> List[Tuple[Any, float]]:
        """
        Get the principal variation (most visited path) from the last search.

        Returns:
            List of (move, value) pairs representing the principal variation
        """
        if len(self.engine.arena) == 0:
            return []
        return self.engine.principal_variation()

    def get_action_statistics(self) -> Dict[str, Dict[str, float]]:
        """
        Get statistics for all root moves from the last search.

        Returns:
            Dictionary mapping move strings to statistics
        """
        if len(self.engine.arena) == 0:
            return {}
        return self.engine.action_statistics()

    def reset_statistics(self) -> None:
        """Reset all statistics."""
        self.last_stats = {}
        self.action_history = []

    def save_statistics(self, filename: str) -> None:
        """
        Save statistics to a file.

        Args:
            filename: Name of the file to save to
        """
        # Convert moves to strings for JSON serialization
        history = []
        for action, stats in self.action_history:
            history.append({
                "action": self.game.format_move(action),
                "stats": {k: v for k, v in stats.items() if not isinstance(v, dict)}
            })

        data = {
            "agent_name": self.name,
            "config": self.config.to_dict(),
            "history": history,
            "total_actions": len(self.action_history)
        }

        with open(filename, 'w') as f:
            json.dump(data, f, indent=2)

    def __str__(self) -> str:
        return f"{self.name} (MCTS, {self.config.time_limit * 1000:.0f} ms)"


class MCTSAgentFactory:
    """
    Factory for creating MCTS agents with different configurations.
    """

    @staticmethod
    def create_fast(game: GameModel) -> MCTSAgent:
        """Create an agent for tight turn budgets."""
        return MCTSAgent(game, config=MCTSConfig.fast(), name="Fast MCTS")

    @staticmethod
    def create_standard(game: GameModel) -> MCTSAgent:
        """Create an agent with balanced parameters."""
        return MCTSAgent(game, config=MCTSConfig.default(), name="Standard MCTS")

    @staticmethod
    def create_strong(game: GameModel) -> MCTSAgent:
        """Create an agent with a long thinking time."""
        return MCTSAgent(game, config=MCTSConfig.deep(), name="Strong MCTS")

    @staticmethod
    def create_custom(
        game: GameModel,
        time_limit: float = 0.1,
        exploration_weight: float = 1.41,
        reuse_tree: bool = True,
        seed: Optional[int] = None,
        name: str = "Custom MCTS"
    ) -> MCTSAgent:
        """
        Create a custom MCTS agent.

        Args:
            game: Game model to play
            time_limit: Time budget per move in seconds
            exploration_weight: UCB1 exploration constant
            reuse_tree: Whether to keep the tree between turns
            seed: Seed of the engine's generator
            name: Name of the agent

        Returns:
            MCTSAgent
        """
        config = MCTSConfig(
            time_limit=time_limit,
            exploration_weight=exploration_weight,
            reuse_tree=reuse_tree,
            seed=seed,
        )
        return MCTSAgent(game, config=config, name=name)
