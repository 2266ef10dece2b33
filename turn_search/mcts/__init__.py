"""
Monte Carlo Tree Search (MCTS) for turn-based games.

The engine repeats four phases until its time budget runs out:

1. Selection: Starting from the root, follow the child with the best UCB1
   score until reaching a node without children.
2. Expansion: A node seen for the first time is simulated from directly;
   on its second visit all of its children are created and one of them is
   picked at random.
3. Simulation: From that node, play uniformly random moves to the end of
   the game.
4. Backpropagation: Credit every node on the path with the reward of the
   player who made its move.

The move returned is the root child with the best average reward. The tree
is kept between turns and re-rooted on the moves actually played.
"""

from turn_search.mcts.node import MCTSArena
from turn_search.mcts.agent import MCTSAgent, MCTSAgentFactory
from turn_search.mcts.search import (
    MCTSSearch,
    mcts_search,
    ucb_score,
    get_principal_variation,
    get_action_statistics
)
from turn_search.mcts.config import MCTSConfig

# Default configuration
DEFAULT_CONFIG = MCTSConfig(
    time_limit=0.1,           # Seconds per move
    exploration_weight=1.41,  # UCB1 exploration parameter (sqrt(2))
    max_nodes=300_000,        # Arena ceiling
    max_moves=81,             # Largest branching factor of the games played
    reuse_tree=True,          # Keep the subtree of the moves played
)

__all__ = [
    'MCTSAgent',
    'MCTSAgentFactory',
    'MCTSArena',
    'MCTSConfig',
    'MCTSSearch',
    'mcts_search',
    'ucb_score',
    'get_principal_variation',
    'get_action_statistics',
    'DEFAULT_CONFIG'
]
