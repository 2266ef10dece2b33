#!/usr/bin/env python
"""
Play games between search agents.

The Match class runs one game sequentially: it asks the agent of the acting
player for a move, hands it the moves played since that agent's previous
turn, and applies the move. run_matches plays a series and the command line
entry point prints a summary.

Usage:
    turn-search-play --game tic-tac-toe --player1 mcts --player2 beam --games 10
    turn-search-play --game brewing --player1 beam --time-limit 0.05
"""
import argparse
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from tqdm import tqdm

from turn_search.beam.agent import BeamAgent
from turn_search.beam.config import BeamConfig
from turn_search.core.agent import Agent, RandomAgent
from turn_search.core.game import GameModel, GameScore, check_moves, make_scores
from turn_search.games.brewing import BrewingGame
from turn_search.games.ultimate_tic_tac_toe import UltimateTicTacToe
from turn_search.mcts.agent import MCTSAgent
from turn_search.mcts.config import MCTSConfig

logger = logging.getLogger(__name__)

GAMES = {
    "tic-tac-toe": UltimateTicTacToe,
    "brewing": BrewingGame,
}
AGENT_TYPES = ("mcts", "beam", "random")


@dataclass
class MatchResult:
    """
    Outcome of one game.

    Attributes:
        scores: Final score vector
        winner: Player with the strictly highest score, None for a tie or a
            single-player game
        turn_count: Number of moves played
        moves: Every move played, in order
        completed: False if the game was stopped by the turn limit
    """
    scores: GameScore
    winner: Optional[int]
    turn_count: int
    moves: List[Any] = field(default_factory=list)
    completed: bool = True


class Match:
    """
    Sequential game runner.

    Args:
        game: Game model to play
        agents: One agent per player, indexed by player id
        max_turns: Safety cap on the number of moves of one game
    """

    def __init__(self, game: GameModel, agents: Sequence[Agent], max_turns: int = 1000):
        if not agents:
            raise ValueError("at least one agent is required")
        self.game = game
        self.agents = list(agents)
        self.max_turns = max_turns

    def run_game(self, state: Any = None) -> MatchResult:
        """
        Play one game to the end.

        Args:
            state: Starting state (defaults to game.initial_state())

        Returns:
            MatchResult of the game
        """
        if state is None:
            state = self.game.initial_state()

        for agent in self.agents:
            agent.new_game()

        moves: List[Any] = []
        # Index in moves of each agent's own last move
        since = [0] * len(self.agents)

        while not self.game.is_terminal(state):
            if len(moves) >= self.max_turns:
                logger.warning(f"Game stopped after {self.max_turns} moves")
                return MatchResult(make_scores(), None, len(moves), moves, completed=False)

            player, _ = check_moves(*self.game.valid_moves(state))
            agent = self.agents[player]
            move = agent.select_action(state, player, moves[since[player]:])

            logger.debug(f"Turn {len(moves)}: {agent.name} plays {self.game.format_move(move)}")
            state = self.game.apply(state, player, move)
            moves.append(move)
            since[player] = len(moves) - 1

        scores = self.game.scores(state)
        return MatchResult(scores, self._winner(scores), len(moves), moves)

    def _winner(self, scores: GameScore) -> Optional[int]:
        if len(self.agents) < 2:
            return None
        played = scores[:len(self.agents)]
        best = int(np.argmax(played))
        if np.count_nonzero(played == played[best]) > 1:
            return None
        return best


def run_matches(
    game: GameModel,
    agents: Sequence[Agent],
    num_games: int,
    max_turns: int = 1000,
    progress: bool = True,
) -> List[MatchResult]:
    """
    Play a series of games between the same agents.

    Args:
        game: Game model to play
        agents: One agent per player
        num_games: Number of games to play
        max_turns: Safety cap on the number of moves of one game
        progress: Whether to show a progress bar

    Returns:
        List of MatchResult, one per game
    """
    match = Match(game, agents, max_turns=max_turns)
    results = []

    for _ in tqdm(range(num_games), desc="Playing", disable=not progress):
        results.append(match.run_game())

    return results


def summarize(results: Sequence[MatchResult], agents: Sequence[Agent]) -> Dict[str, Any]:
    """
    Aggregate a series of results.

    Returns:
        Dictionary with wins per agent, ties, average scores and game length
    """
    summary: Dict[str, Any] = {
        "games": len(results),
        "wins": {agent.name: 0 for agent in agents},
        "ties": 0,
        "average_scores": {},
        "average_turns": float(np.mean([r.turn_count for r in results])) if results else 0.0,
    }
    for result in results:
        if result.winner is None:
            summary["ties"] += 1
        else:
            summary["wins"][agents[result.winner].name] += 1

    for player, agent in enumerate(agents):
        summary["average_scores"][agent.name] = (
            float(np.mean([r.scores[player] for r in results])) if results else 0.0
        )
    return summary


def create_agent(
    kind: str,
    game: GameModel,
    player: int,
    time_limit: float,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> Agent:
    """
    Create an agent by type name.

    Args:
        kind: One of "mcts", "beam" or "random"
        game: Game model to play
        player: Player id, used in the agent's name
        time_limit: Seconds per move for the search agents
        seed: Seed of the agent's generator
        verbose: Whether the agent prints a summary of every search

    Returns:
        The new agent
    """
    name = f"P{player + 1} {kind}"
    if kind == "mcts":
        config = MCTSConfig(time_limit=time_limit, seed=seed)
        return MCTSAgent(game, config=config, name=name, verbose=verbose)
    if kind == "beam":
        return BeamAgent(game, config=BeamConfig(time_limit=time_limit), name=name, verbose=verbose)
    if kind == "random":
        return RandomAgent(game, name=name, seed=seed)
    raise ValueError(f"Unknown agent type: {kind}")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Play games between tree search agents")

    parser.add_argument("--game", type=str, default="tic-tac-toe", choices=sorted(GAMES),
                        help="Game to play")
    parser.add_argument("--player1", type=str, default="mcts", choices=AGENT_TYPES,
                        help="Agent of the first player")
    parser.add_argument("--player2", type=str, default="random", choices=AGENT_TYPES,
                        help="Agent of the second player (two-player games only)")
    parser.add_argument("--games", type=int, default=1,
                        help="Number of games to play")
    parser.add_argument("--time-limit", type=float, default=0.1,
                        help="Seconds per move for the search agents")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed")
    parser.add_argument("--verbose", action="store_true",
                        help="Print every search and enable debug logging")

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command line entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    game = GAMES[args.game]()
    kinds = [args.player1] if args.game == "brewing" else [args.player1, args.player2]

    agents = []
    for player, kind in enumerate(kinds):
        seed = None if args.seed is None else args.seed + player
        if kind == "beam" and args.game == "tic-tac-toe":
            logger.error("Beam search needs an evaluation heuristic, tic-tac-toe has none")
            return 1
        agents.append(create_agent(kind, game, player, args.time_limit, seed, args.verbose))

    logger.info(f"Playing {args.games} game(s) of {game.name}: "
                + " vs ".join(str(agent) for agent in agents))

    results = run_matches(game, agents, args.games, progress=not args.verbose)
    summary = summarize(results, agents)

    print(f"\nGames played: {summary['games']}")
    print(f"Average length: {summary['average_turns']:.1f} moves")
    if len(agents) > 1:
        for name, wins in summary["wins"].items():
            print(f"  {name}: {wins} wins")
        print(f"  Ties: {summary['ties']}")
    for name, score in summary["average_scores"].items():
        print(f"  {name}: average score {score:.3f}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
