"""
Configuration for Monte Carlo Tree Search (MCTS).

This module defines the configuration parameters for the MCTS engine,
including the time budget, the arena ceiling and the exploration constant.
"""
from dataclasses import dataclass
from typing import Optional
import math


@dataclass
class MCTSConfig:
    """
    Configuration parameters for Monte Carlo Tree Search.

    This class defines all tunable parameters for the MCTS engine,
    with validation and sensible defaults.
    """
    # Budget
    time_limit: float = 0.1
    """Wall-clock budget of one search in seconds"""

    max_nodes: int = 300_000
    """Capacity of the node arena"""

    max_moves: int = 81
    """Worst-case branching factor; a new iteration starts only if this many nodes are free"""

    # Search parameters
    exploration_weight: float = 1.41
    """UCB1 exploration constant C"""

    reuse_tree: bool = True
    """Whether to keep the subtree of the moves actually played between calls"""

    # Rollouts
    max_rollout_depth: Optional[int] = None
    """Maximum number of rollout moves (None = play until the game ends)"""

    rollout_cutoff_reward: float = 0.5
    """Reward given to every player when a rollout hits max_rollout_depth"""

    # Reproducibility
    seed: Optional[int] = None
    """Seed of the engine's random generator (None = fresh entropy)"""

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.time_limit <= 0:
            raise ValueError("time_limit must be positive")

        if self.max_moves <= 0:
            raise ValueError("max_moves must be positive")

        if self.max_nodes <= self.max_moves:
            raise ValueError("max_nodes must be greater than max_moves")

        if self.exploration_weight < 0 or not math.isfinite(self.exploration_weight):
            raise ValueError("exploration_weight must be a finite non-negative number")

        if self.max_rollout_depth is not None and self.max_rollout_depth <= 0:
            raise ValueError("max_rollout_depth must be positive or None")

    @classmethod
    def default(cls) -> 'MCTSConfig':
        """
        Get the default configuration.

        Returns:
            Default MCTSConfig object
        """
        return cls()

    @classmethod
    def fast(cls) -> 'MCTSConfig':
        """
        Get a configuration for tight turn budgets.

        Returns:
            Fast MCTSConfig object
        """
        return cls(
            time_limit=0.05,
            max_nodes=55_000,
            exploration_weight=1.41,
        )

    @classmethod
    def deep(cls) -> 'MCTSConfig':
        """
        Get a configuration for long thinking times.

        Returns:
            Deep MCTSConfig object
        """
        return cls(
            time_limit=1.0,
            max_nodes=3_000_000,
            exploration_weight=0.41,  # Less exploration, the tree gets deep
        )

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'MCTSConfig':
        """
        Create a configuration from a dictionary.

        Args:
            config_dict: Dictionary of configuration parameters

        Returns:
            MCTSConfig object
        """
        # Filter out any keys that aren't valid parameters
        valid_params = {k: v for k, v in config_dict.items()
                        if k in cls.__dataclass_fields__}
        return cls(**valid_params)

    def to_dict(self) -> dict:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary of configuration parameters
        """
        return {name: getattr(self, name) for name in self.__dataclass_fields__}

    def __str__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in self.to_dict().items())
        return f"MCTSConfig({params})"
