"""
Beam search node storage.

Unlike MCTS nodes, beam nodes keep a full copy of the state they stand for,
so a frontier node can be expanded without replaying its path.
"""
from __future__ import annotations
from typing import Any, List, Tuple

import numpy as np

from turn_search.core.arena import NodeArena


class BeamArena(NodeArena):
    """
    Arena of beam search nodes.

    Besides the tree links every node has:
        state: Game state reached by the node's move
        depth: Distance from the search root
        score: Cached discounted evaluation
    """

    COLUMNS = {
        "depth": (np.int32, 0),
        "score": (np.float64, 0.0),
    }
    OBJECT_COLUMNS = ("state",)

    def start(self, state: Any) -> int:
        """
        Reset the arena to a single root holding state.

        Returns:
            Index of the root
        """
        root = self.reset()
        self.state[root] = state
        return root

    def path_to(self, idx: int) -> List[Tuple[Any, float]]:
        """
        Collect the moves leading from the root to node idx.

        Returns:
            List of (move, score) pairs, root side first
        """
        path = []
        parent = self.parent_of(idx)
        while parent is not None:
            path.append((self.move[idx], float(self.score[idx])))
            idx = parent
            parent = self.parent_of(idx)
        path.reverse()
        return path
