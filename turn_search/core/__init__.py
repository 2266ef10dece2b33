"""
Turn Search Core Package

This package contains the pieces shared by every engine:
- The game model contract
- The flat node arena
- Time budget handling
- The error hierarchy
- The agent interface

All core components can be imported directly from this package.
"""

# Game model
from turn_search.core.game import (
    GameModel, GameScore, MAX_PLAYERS,
    make_scores, check_moves
)

# Node storage
from turn_search.core.arena import NodeArena, NO_NODE

# Time budget
from turn_search.core.timing import Clock, Deadline, default_clock

# Errors
from turn_search.core.exceptions import (
    TurnSearchError, StaleTreeError,
    ArenaExhaustedError, EmptyMoveSetError
)

# Agents
from turn_search.core.agent import Agent, RandomAgent

__all__ = [
    # Game
    'GameModel', 'GameScore', 'MAX_PLAYERS',
    'make_scores', 'check_moves',

    # Arena
    'NodeArena', 'NO_NODE',

    # Timing
    'Clock', 'Deadline', 'default_clock',

    # Errors
    'TurnSearchError', 'StaleTreeError',
    'ArenaExhaustedError', 'EmptyMoveSetError',

    # Agents
    'Agent', 'RandomAgent',
]
