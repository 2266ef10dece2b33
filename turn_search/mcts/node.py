"""
Monte Carlo Tree Search node storage.

MCTS nodes are rows of an MCTSArena. Each node records the move that led to
it, the player who made that move, its visit count and the total reward of
the rollouts that went through it.
"""
from __future__ import annotations
from typing import Any, Dict

import numpy as np

from turn_search.core.arena import NodeArena


class MCTSArena(NodeArena):
    """
    Arena of MCTS nodes.

    Besides the tree links every node has:
        player: Player who made the node's move (-1 for a root)
        visits: Number of rollouts that went through the node
        reward: Sum of the rewards of those rollouts for player
        expanded: Whether the node has been visited once by the expansion step
    """

    COLUMNS = {
        "player": (np.int16, -1),
        "visits": (np.int64, 0),
        "reward": (np.float64, 0.0),
        "expanded": (np.bool_, False),
    }

    def average_reward(self, idx: int) -> float:
        """Average rollout reward of node idx (0 when never visited)."""
        visits = int(self.visits[idx])
        if visits == 0:
            return 0.0
        return float(self.reward[idx]) / visits

    def update(self, idx: int, reward: float) -> None:
        """Record one rollout through node idx."""
        self.visits[idx] += 1
        self.reward[idx] += reward

    def node_info(self, idx: int) -> Dict[str, Any]:
        """Snapshot of node idx as a dictionary (for logs and tests)."""
        parent = self.parent_of(idx)
        return {
            "index": idx,
            "move": self.move[idx],
            "player": int(self.player[idx]),
            "parent": parent,
            "children": list(self.children(idx)),
            "visits": int(self.visits[idx]),
            "reward": float(self.reward[idx]),
            "expanded": bool(self.expanded[idx]),
        }
