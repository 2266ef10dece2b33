"""
Turn Search - decision-time tree search for turn-based games.

This package provides two anytime search engines, Monte Carlo Tree Search
and Beam Search, that pick a move for any game implementing the GameModel
contract within a fixed time budget. Both store their trees in a flat,
capacity-bounded node arena.
"""

__version__ = "0.1.0"
__author__ = "Turn Search Team"

# Make key components available at package level
from turn_search.core.game import GameModel, make_scores
from turn_search.core.agent import Agent, RandomAgent
from turn_search.mcts.search import MCTSSearch
from turn_search.mcts.config import MCTSConfig
from turn_search.beam.search import BeamSearch
from turn_search.beam.config import BeamConfig

# Version info as a tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split('.')))
