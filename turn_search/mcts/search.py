"""
Monte Carlo Tree Search (MCTS) engine.

This module implements the MCTS loop with the four standard phases:
1. Selection: Descend the tree with UCB1 until a leaf
2. Expansion: Mark a first-visited node, or create all children of a
   revisited one and pick one of them at random
3. Simulation: Uniformly random playout to the end of the game
4. Backpropagation: Update visits and rewards up to the search root

The tree lives in an MCTSArena. Between calls the engine keeps its tree and
descends to the subtree of the moves actually played (re-rooting), so work
done in previous turns is not lost.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import math

import numpy as np

from turn_search.core.arena import NO_NODE
from turn_search.core.exceptions import ArenaExhaustedError, StaleTreeError
from turn_search.core.game import MAX_PLAYERS, GameModel, GameScore, check_moves
from turn_search.core.timing import Clock, Deadline, default_clock
from turn_search.mcts.config import MCTSConfig
from turn_search.mcts.node import MCTSArena

logger = logging.getLogger(__name__)


def ucb_score(parent_visits: int, reward: float, visits: int, exploration_weight: float) -> float:
    """
    Calculate the UCB1 score of a child node.

    UCB1 = average_reward + exploration_weight * sqrt(ln(parent_visits) / visits)

    Args:
        parent_visits: Visit count of the parent
        reward: Total reward of the child
        visits: Visit count of the child
        exploration_weight: Exploration constant C

    Returns:
        UCB1 score (infinite for a child that was never visited)
    """
    if visits == 0:
        return math.inf
    exploitation = reward / visits
    exploration = math.sqrt(math.log(parent_visits) / visits)
    return exploitation + exploration_weight * exploration


class MCTSSearch:
    """
    Monte Carlo Tree Search engine bound to one game model.

    The engine owns its arena, its random generator and its clock. One call
    to best_move() blocks for at most config.time_limit seconds.
    """

    def __init__(
        self,
        game: GameModel,
        config: Optional[MCTSConfig] = None,
        rng: Optional[np.random.Generator] = None,
        clock: Clock = default_clock,
    ):
        """
        Initialize an MCTS engine.

        Args:
            game: Game model to search
            config: MCTS configuration parameters
            rng: Random generator (defaults to one seeded with config.seed,
                re-seeded whenever the tree is reset)
            clock: Clock measuring the time budget
        """
        self.game = game
        self.config = config or MCTSConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self._reseed = rng is None and self.config.seed is not None
        self.clock = clock

        self.arena = MCTSArena(self.config.max_nodes)
        self.root_idx = 0
        self.nb_simulations = 0

        # Statistics from the most recent search
        self.last_stats: Dict[str, Any] = {}

    def new_episode(self) -> None:
        """Forget the retained tree; the next search starts from scratch."""
        self.arena.clear()
        self.root_idx = 0
        self._restart_rng()

    def _restart_rng(self) -> None:
        """Rewind the generator to config.seed so fresh trees grow alike."""
        if self._reseed:
            self.rng = np.random.default_rng(self.config.seed)

    def best_move(
        self,
        root_state: Any,
        previous_moves: Sequence[Any] = (),
        player: Optional[int] = None,
    ) -> Any:
        """
        Search for the best move from root_state.

        Args:
            root_state: State to play from
            previous_moves: Moves played since the last call, oldest first
            player: Player the move is searched for (informational)

        Returns:
            The root move with the highest average reward
        """
        deadline = Deadline(self.config.time_limit, self.clock)
        reused = self._init(previous_moves)
        stopped_by = "time"
        steps_total = 0
        steps_max = 0

        try:
            self._prepare_root(root_state)
        except ArenaExhaustedError as e:
            logger.warning(f"[MCTS] Root does not fit in the arena: {e}")
            stopped_by = "capacity"

        while stopped_by == "time" and not deadline.expired():
            if self.arena.remaining < self.config.max_moves:
                stopped_by = "capacity"
                break

            try:
                node_idx, state = self.select(root_state)
                node_idx, state = self.expand(node_idx, state)
            except ArenaExhaustedError as e:
                logger.info(f"[MCTS] Stopping early: {e}")
                stopped_by = "capacity"
                break

            scores, steps = self.simulate(state)
            self.backpropagate(node_idx, scores)

            self.nb_simulations += 1
            steps_total += steps
            steps_max = max(steps_max, steps)

        move, used_fallback = self._extract(root_state)

        elapsed = deadline.last_reading - deadline.start
        self.last_stats = {
            "iterations": self.nb_simulations,
            "node_count": len(self.arena),
            "root_visits": int(self.arena.visits[self.root_idx]),
            "reused_tree": reused,
            "used_fallback": used_fallback,
            "stopped_by": stopped_by,
            "player": player,
            "time_elapsed": elapsed,
            "iterations_per_second": self.nb_simulations / max(0.001, elapsed),
            "max_rollout_steps": steps_max,
            "average_simulation_steps": steps_total / max(1, self.nb_simulations),
        }

        logger.debug(
            f"[MCTS] End. Sending best move after expanding {len(self.arena)} nodes "
            f"and running {self.nb_simulations} simulations in {elapsed:.4f}s"
        )
        return move

    def _init(self, previous_moves: Sequence[Any]) -> bool:
        """
        Reset the tree or move its root down along previous_moves.

        Returns:
            True if the previous tree was reused
        """
        self.nb_simulations = 0

        if self.config.reuse_tree and len(self.arena) > 0:
            try:
                self._reroot(previous_moves)
            except StaleTreeError as e:
                logger.warning(f"[MCTS] {e}, resetting the tree")
            else:
                if self.arena.remaining >= self.config.max_moves:
                    return True
                logger.info("[MCTS] Reused tree leaves no room in the arena, resetting the tree")

        self.root_idx = self.arena.reset()
        self._restart_rng()
        return False

    def _reroot(self, previous_moves: Sequence[Any]) -> None:
        """
        Walk the root down the tree, one played move at a time.

        The new root is detached from its former parent. Rows above it stay
        allocated but are no longer reachable.

        Raises:
            StaleTreeError: If a move is not among the current root's children
        """
        for move in previous_moves:
            child = self.arena.find_child(self.root_idx, move)
            if child is None:
                raise StaleTreeError(
                    "couldn't find a played move among the root's children",
                    context={"move": move, "root": self.root_idx},
                )
            self.root_idx = child
        self.arena.parent[self.root_idx] = NO_NODE

    def _prepare_root(self, root_state: Any) -> None:
        """Mark the root expanded and give it one child per legal move."""
        root = self.root_idx
        if self.arena.child_count[root] == 0 and not self.game.is_terminal(root_state):
            player, moves = check_moves(*self.game.valid_moves(root_state))
            first = self.arena.allocate_children(root, list(moves))
            self.arena.player[first:first + len(moves)] = player
        self.arena.expanded[root] = True

    def select(self, state: Any) -> Tuple[int, Any]:
        """
        Descend from the root to a node without children.

        The move of every selected node is applied to the state on the way
        down.

        Args:
            state: State at the root

        Returns:
            Tuple of (selected node index, state at that node)
        """
        arena = self.arena
        node_idx = self.root_idx

        while arena.child_count[node_idx] > 0:
            node_idx = self.select_child(node_idx)
            state = self.game.apply(state, int(arena.player[node_idx]), arena.move[node_idx])

        return node_idx, state

    def select_child(self, node_idx: int) -> int:
        """
        Pick the child of node_idx with the largest UCB1 score.

        Children are scanned in ascending index order. The first unvisited
        child is returned at once; among visited children ties go to the
        last maximal one.
        """
        arena = self.arena
        first = int(arena.first_child[node_idx])
        count = int(arena.child_count[node_idx])
        visits = arena.visits[first:first + count]

        unvisited = np.flatnonzero(visits == 0)
        if unvisited.size > 0:
            return first + int(unvisited[0])

        parent_visits = int(arena.visits[node_idx])
        ucb = (arena.reward[first:first + count] / visits
               + self.config.exploration_weight * np.sqrt(math.log(parent_visits) / visits))

        # argmax returns the first maximum, so search the reversed scores
        return first + count - 1 - int(np.argmax(ucb[::-1]))

    def expand(self, node_idx: int, state: Any) -> Tuple[int, Any]:
        """
        Expand the selected node.

        A node reached for the first time is only marked as expanded and
        evaluated itself. On its next visit all of its children are created
        in one block and one of them, chosen uniformly, is returned.

        Args:
            node_idx: Node returned by select()
            state: State at that node

        Returns:
            Tuple of (node to simulate from, state at that node)

        Raises:
            ArenaExhaustedError: If the children do not fit in the arena
        """
        arena = self.arena

        if not arena.expanded[node_idx]:
            arena.expanded[node_idx] = True
            return node_idx, state

        if self.game.is_terminal(state):
            return node_idx, state

        player, moves = check_moves(*self.game.valid_moves(state))
        first = arena.allocate_children(node_idx, list(moves))
        arena.player[first:first + len(moves)] = player

        chosen_idx = first + int(self.rng.integers(len(moves)))
        arena.expanded[chosen_idx] = True
        state = self.game.apply(state, player, arena.move[chosen_idx])

        return chosen_idx, state

    def simulate(self, state: Any) -> Tuple[GameScore, int]:
        """
        Play uniformly random moves until the game ends.

        Args:
            state: State to start the playout from

        Returns:
            Tuple of (score vector, number of moves played)
        """
        limit = self.config.max_rollout_depth
        steps = 0

        while not self.game.is_terminal(state):
            if limit is not None and steps >= limit:
                return np.full(MAX_PLAYERS, self.config.rollout_cutoff_reward), steps

            player, move = self.game.random_move(state, self.rng)
            state = self.game.apply(state, player, move)
            steps += 1

        return np.asarray(self.game.scores(state), dtype=np.float64), steps

    def backpropagate(self, node_idx: int, scores: GameScore) -> None:
        """
        Add a rollout result to every node from node_idx up to the root.

        Each node is credited with the reward of the player who made its
        move. The root only gets its visit count incremented.
        """
        arena = self.arena
        while node_idx != self.root_idx:
            arena.update(node_idx, float(scores[arena.player[node_idx]]))
            node_idx = arena.parent_of(node_idx)

        arena.visits[self.root_idx] += 1

    def _extract(self, root_state: Any) -> Tuple[Any, bool]:
        """
        Choose the root child with the highest average reward.

        Ties go to the first child. When no child was visited the first
        legal move is returned instead.

        Returns:
            Tuple of (move, whether the fallback was used)
        """
        arena = self.arena
        children = arena.children(self.root_idx)
        visits = arena.visits[children.start:children.stop]

        if len(children) == 0 or not visits.any():
            logger.warning("[MCTS] No completed iteration, playing the first legal move")
            _, moves = check_moves(*self.game.valid_moves(root_state))
            return moves[0], True

        averages = np.full(len(children), -np.inf)
        np.divide(arena.reward[children.start:children.stop], visits, out=averages, where=visits > 0)
        return arena.move[children.start + int(np.argmax(averages))], False

    def root_child_stats(self) -> List[Tuple[Any, int, float]]:
        """
        Get the raw statistics of the root's children from the last search.

        Returns:
            List of (move, visits, total reward) in child order
        """
        arena = self.arena
        return [
            (arena.move[c], int(arena.visits[c]), float(arena.reward[c]))
            for c in arena.children(self.root_idx)
        ]

    def principal_variation(self, max_depth: int = 10) -> List[Tuple[Any, float]]:
        """
        Get the principal variation (most visited path) from the root.

        Args:
            max_depth: Maximum number of moves to return

        Returns:
            List of (move, average reward) pairs
        """
        return get_principal_variation(self.arena, self.root_idx, max_depth)

    def action_statistics(self) -> Dict[str, Dict[str, float]]:
        """
        Get statistics for every root move of the last search.

        Returns:
            Dictionary mapping move strings to statistics
        """
        return get_action_statistics(self.arena, self.root_idx, self.config.exploration_weight,
                                     self.game.format_move)


def get_principal_variation(
    arena: MCTSArena,
    root_idx: int = 0,
    max_depth: int = 10
) -> List[Tuple[Any, float]]:
    """
    Follow the most visited child from root_idx.

    This is useful for analysis and debugging.

    Args:
        arena: Arena holding the tree
        root_idx: Node to start from
        max_depth: Maximum depth to explore

    Returns:
        List of (move, average reward) pairs
    """
    result = []
    current = root_idx

    while len(arena.children(current)) > 0 and len(result) < max_depth:
        children = arena.children(current)
        best = children.start + int(np.argmax(arena.visits[children.start:children.stop]))
        if arena.visits[best] == 0:
            break
        result.append((arena.move[best], arena.average_reward(best)))
        current = best

    return result


def get_action_statistics(
    arena: MCTSArena,
    root_idx: int,
    exploration_weight: float,
    format_move=str,
) -> Dict[str, Dict[str, float]]:
    """
    Get statistics for every child of root_idx.

    Args:
        arena: Arena holding the tree
        root_idx: Node whose children are reported
        exploration_weight: Exploration constant used for the UCB column
        format_move: Function turning a move into its dictionary key

    Returns:
        Dictionary mapping move strings to statistics
    """
    result = {}
    parent_visits = int(arena.visits[root_idx])

    for child in arena.children(root_idx):
        visits = int(arena.visits[child])
        reward = float(arena.reward[child])
        result[format_move(arena.move[child])] = {
            "visits": visits,
            "reward": reward,
            "value": reward / max(1, visits),
            "ucb": ucb_score(parent_visits, reward, visits, exploration_weight),
        }

    return result


def mcts_search(
    game: GameModel,
    state: Any,
    config: Optional[MCTSConfig] = None,
    rng: Optional[np.random.Generator] = None,
    clock: Clock = default_clock,
) -> Tuple[Any, Dict[str, Any]]:
    """
    Run a one-off search from state without tree reuse.

    Args:
        game: Game model to search
        state: Current game state
        config: MCTS configuration parameters
        rng: Random generator
        clock: Clock measuring the time budget

    Returns:
        Tuple of (best move, search statistics)
    """
    engine = MCTSSearch(game, config, rng=rng, clock=clock)
    move = engine.best_move(state)
    return move, engine.last_stats
