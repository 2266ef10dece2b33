"""
Beam Search engine.

Each round expands every frontier node with all of its legal moves, scores
the children with the game's static evaluation discounted by depth, and
keeps the best beam_width children as the next frontier. When the time
budget runs out the path to the best node ever scored is returned.

The arena is rebuilt from scratch on every call; beam search does not reuse
work across turns.
"""
from __future__ import annotations
from operator import itemgetter
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import heapq
import logging
import math

from turn_search.beam.config import BeamConfig
from turn_search.beam.node import BeamArena
from turn_search.core.exceptions import ArenaExhaustedError
from turn_search.core.game import GameModel, check_moves
from turn_search.core.timing import Clock, Deadline, default_clock

logger = logging.getLogger(__name__)


class BeamSearch:
    """
    Beam search engine bound to one game model.

    Args:
        game: Game model to search
        config: Beam configuration parameters
        clock: Clock measuring the time budget
        evaluate: Evaluation function (defaults to game.evaluate)
    """

    def __init__(
        self,
        game: GameModel,
        config: Optional[BeamConfig] = None,
        clock: Clock = default_clock,
        evaluate: Optional[Callable[[Any], float]] = None,
    ):
        self.game = game
        self.config = config or BeamConfig()
        self.clock = clock
        self.evaluate = evaluate or game.evaluate

        self.arena = BeamArena(self.config.max_nodes)
        self.last_stats: Dict[str, Any] = {}
        self.last_path: List[Tuple[Any, float]] = []

    def score(self, state: Any, depth: int) -> float:
        """Evaluation of state discounted by its depth."""
        return self.evaluate(state) * self.config.depth_decay ** depth

    def best_path(self, start_state: Any) -> List[Tuple[Any, float]]:
        """
        Search from start_state and return the best path found.

        Args:
            start_state: State to search from

        Returns:
            List of (move, score) pairs from the root to the best node.
            Empty when no child could be scored.
        """
        deadline = Deadline(self.config.time_limit, self.clock)
        arena = self.arena
        root = arena.start(start_state)

        frontier = [root]
        best_idx = root
        best_score = -math.inf
        rounds = 0
        max_frontier = 1
        stopped_by = "time"

        while frontier and not deadline.expired():
            candidates: List[Tuple[int, float]] = []
            try:
                for node_idx in frontier:
                    children = self._expand(node_idx)
                    for child_idx, child_score in children:
                        if child_score > best_score:
                            best_score = child_score
                            best_idx = child_idx
                    candidates.extend(children)
            except ArenaExhaustedError as e:
                logger.info(f"[BEAM] Stopping early: {e}")
                stopped_by = "capacity"
                break

            # Equal scores keep their insertion order
            top = heapq.nlargest(self.config.beam_width, candidates, key=itemgetter(1))
            frontier = [idx for idx, _ in top]
            max_frontier = max(max_frontier, len(frontier))
            rounds += 1

        if not frontier:
            stopped_by = "exhausted"

        elapsed = deadline.last_reading - deadline.start
        self.last_stats = {
            "rounds": rounds,
            "node_count": len(arena),
            "max_frontier": max_frontier,
            "best_score": best_score,
            "best_depth": int(arena.depth[best_idx]),
            "stopped_by": stopped_by,
            "time_elapsed": elapsed,
        }

        if stopped_by == "exhausted":
            logger.debug(
                f"[BEAM] End. Sending best path after expanding ALL {len(arena)} nodes in {elapsed:.4f}s"
            )
        else:
            logger.debug(
                f"[BEAM] End. Sending best path after expanding {len(arena)} nodes in {elapsed:.4f}s"
            )

        return arena.path_to(best_idx)

    def _expand(self, node_idx: int) -> List[Tuple[int, float]]:
        """
        Create and score every child of node_idx.

        Terminal nodes have no children.

        Returns:
            List of (child index, score)

        Raises:
            ArenaExhaustedError: If the children do not fit in the arena
        """
        arena = self.arena
        state = arena.state[node_idx]
        if self.game.is_terminal(state):
            return []

        player, moves = check_moves(*self.game.valid_moves(state))
        first = arena.allocate_children(node_idx, list(moves))
        depth = int(arena.depth[node_idx]) + 1

        children = []
        for child_idx in range(first, first + len(moves)):
            child_state = self.game.apply(state, player, arena.move[child_idx])
            child_score = self.score(child_state, depth)
            arena.state[child_idx] = child_state
            arena.depth[child_idx] = depth
            arena.score[child_idx] = child_score
            children.append((child_idx, child_score))

        return children

    def best_move(
        self,
        root_state: Any,
        previous_moves: Sequence[Any] = (),
        player: Optional[int] = None,
    ) -> Any:
        """
        Search from root_state and return the first move of the best path.

        previous_moves and player are accepted for parity with the MCTS
        engine; beam search starts from scratch on every call.

        Returns:
            First move of the best path, or the first legal move when the
            search produced no path
        """
        path = self.best_path(root_state)
        self.last_path = path
        if path:
            self.last_stats["used_fallback"] = False
            return path[0][0]

        logger.warning("[BEAM] No path found, playing the first legal move")
        self.last_stats["used_fallback"] = True
        _, moves = check_moves(*self.game.valid_moves(root_state))
        return moves[0]
