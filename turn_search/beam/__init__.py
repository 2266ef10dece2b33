"""
Beam Search for turn-based games.

Each round expands the whole frontier, scores every child with the game's
static evaluation discounted by depth, and keeps the beam_width best. The
first move of the path to the best node ever scored is played.
"""

from turn_search.beam.node import BeamArena
from turn_search.beam.agent import BeamAgent
from turn_search.beam.search import BeamSearch
from turn_search.beam.config import BeamConfig

__all__ = [
    'BeamAgent',
    'BeamArena',
    'BeamConfig',
    'BeamSearch',
]
