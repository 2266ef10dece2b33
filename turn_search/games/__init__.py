"""Reference game models used by the command line and the tests."""

from turn_search.games.ultimate_tic_tac_toe import UltimateTicTacToe, TicTacToeState
from turn_search.games.brewing import BrewingGame, BrewingState, BrewMove

__all__ = [
    'UltimateTicTacToe', 'TicTacToeState',
    'BrewingGame', 'BrewingState', 'BrewMove',
]
