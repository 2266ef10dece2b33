"""
Tests for the reference games and the game model helpers.
"""
from dataclasses import replace

import numpy as np
import pytest

from turn_search.core.exceptions import EmptyMoveSetError, TurnSearchError
from turn_search.core.game import MAX_PLAYERS, check_moves, make_scores
from turn_search.games.brewing import REST, WAIT, BrewingGame, BrewMove
from turn_search.games.ultimate_tic_tac_toe import (
    NO_MOVE,
    TicTacToeState,
    UltimateTicTacToe,
    cell_to_rowcol,
    rowcol_to_cell,
)


@pytest.fixture(scope="module")
def tic_tac_toe():
    return UltimateTicTacToe()


@pytest.fixture(scope="module")
def brewing():
    return BrewingGame()


# Helpers

def test_make_scores_pads_to_max_players():
    scores = make_scores(1.0, 0.5)

    assert scores.shape == (MAX_PLAYERS,)
    assert list(scores) == [1.0, 0.5, 0.0, 0.0]

    with pytest.raises(ValueError):
        make_scores(*([0.0] * (MAX_PLAYERS + 1)))


def test_check_moves():
    assert check_moves(1, [3]) == (1, [3])

    with pytest.raises(EmptyMoveSetError) as excinfo:
        check_moves(1, [])

    assert isinstance(excinfo.value, TurnSearchError)
    assert excinfo.value.to_dict() == {
        "code": "EMPTY_MOVE_SET",
        "message": "game model returned no legal move",
        "context": {"player": 1},
    }
    assert str(excinfo.value) == "[EMPTY_MOVE_SET] game model returned no legal move (player=1)"


# Ultimate tic-tac-toe

def test_cell_numbering():
    assert rowcol_to_cell(0, 0) == 0
    assert rowcol_to_cell(4, 4) == 40
    assert rowcol_to_cell(0, 3) == 9
    assert cell_to_rowcol(80) == (8, 8)
    assert cell_to_rowcol(rowcol_to_cell(5, 7)) == (5, 7)


def test_first_move_is_free(tic_tac_toe):
    player, moves = tic_tac_toe.valid_moves(tic_tac_toe.initial_state())

    assert player == 0
    assert moves == list(range(81))


def test_move_sends_opponent_to_matching_square(tic_tac_toe):
    state = tic_tac_toe.apply(tic_tac_toe.initial_state(), 0, 4)

    player, moves = tic_tac_toe.valid_moves(state)

    assert player == 1
    assert moves == list(range(36, 45))


def test_locked_target_square_frees_the_choice(tic_tac_toe):
    state = TicTacToeState(locked=0b1, squares=(0b1, 0), boards=(0b111, 0), last_move=45)

    _, moves = tic_tac_toe.valid_moves(state)

    assert len(moves) == 72
    assert all(move >= 9 for move in moves)


def test_square_and_game_win(tic_tac_toe):
    # Player 0 owns squares 0 and 1 and two cells of square 2
    boards = (0b111 | 0b111 << 9 | 0b11 << 18, 0)
    state = TicTacToeState(boards=boards, squares=(0b011, 0), locked=0b011)

    state = tic_tac_toe.apply(state, 0, 20)

    assert state.squares[0] == 0b111
    assert state.over
    assert state.winner == 0
    assert tic_tac_toe.is_terminal(state)
    assert list(tic_tac_toe.scores(state)[:2]) == [1.0, 0.0]
    assert tic_tac_toe.valid_moves(state) == (0, [NO_MOVE])


def test_full_square_is_locked(tic_tac_toe):
    # Square 0 filled without a line: X O X / X O O / O X X
    x_cells = sum(1 << p for p in (0, 2, 3, 7, 8))
    o_cells = sum(1 << p for p in (1, 4, 5, 6))
    state = TicTacToeState(boards=(x_cells & ~(1 << 8), o_cells), player=0, turn=8)

    state = tic_tac_toe.apply(state, 0, 8)

    assert state.locked == 0b1
    assert state.squares == (0, 0)
    assert not state.over


@pytest.mark.parametrize("opponent_squares, winner", [(0b110, None), (0b1110, 1)])
def test_all_squares_locked_majority_wins(tic_tac_toe, opponent_squares, winner):
    # Every square but the last is locked; player 0 wins the last one
    state = TicTacToeState(
        boards=(0b11 << 72, 0),
        squares=(0b1, opponent_squares),
        locked=0b011111111,
        player=0,
    )

    state = tic_tac_toe.apply(state, 0, 74)

    assert state.squares[0] == 0b100000001
    assert state.locked == 0b111111111
    assert state.over
    assert state.winner == winner


def test_scores_require_finished_game(tic_tac_toe):
    with pytest.raises(ValueError):
        tic_tac_toe.scores(tic_tac_toe.initial_state())


def test_random_game_ends(tic_tac_toe):
    rng = np.random.default_rng(7)
    state = tic_tac_toe.initial_state()

    while not tic_tac_toe.is_terminal(state):
        player, move = tic_tac_toe.random_move(state, rng)
        state = tic_tac_toe.apply(state, player, move)

    assert state.turn <= 81
    assert sum(tic_tac_toe.scores(state)) == 1.0


def test_format_move(tic_tac_toe):
    assert tic_tac_toe.format_move(rowcol_to_cell(4, 7)) == "4 7"
    assert tic_tac_toe.format_move(NO_MOVE) == "PASS"
    assert len(tic_tac_toe.render(tic_tac_toe.initial_state()).splitlines()) == 11


# Brewing

def test_brewing_opening_moves(brewing):
    player, moves = brewing.valid_moves(brewing.initial_state())

    assert player == 0
    assert moves == [
        BrewMove("CAST", 0, 1),
        BrewMove("CAST", 1, 1),
        BrewMove("CAST", 4, 1),
        BrewMove("CAST", 6, 1),
    ]


def test_cast_exhausts_until_rest(brewing):
    state = brewing.apply(brewing.initial_state(), 0, BrewMove("CAST", 0, 1))

    assert state.stock == (5, 0, 0, 0)
    assert state.turn == 1
    _, moves = brewing.valid_moves(state)
    assert BrewMove("CAST", 0, 1) not in moves
    assert REST in moves

    state = brewing.apply(state, 0, REST)
    assert all(state.active)
    assert REST not in brewing.valid_moves(state)[1]


def test_repeatable_spell_can_be_cast_several_times(brewing):
    state = brewing.initial_state(stock=(0, 2, 0, 0))
    _, moves = brewing.valid_moves(state)

    assert BrewMove("CAST", 7, 1) in moves
    assert BrewMove("CAST", 7, 2) in moves
    assert BrewMove("CAST", 7, 3) not in moves

    state = brewing.apply(state, 0, BrewMove("CAST", 7, 2))
    assert state.stock == (6, 0, 0, 0)


def test_inventory_is_capped(brewing):
    state = brewing.initial_state(stock=(9, 0, 0, 0))
    _, moves = brewing.valid_moves(state)

    assert BrewMove("CAST", 0, 1) not in moves
    assert BrewMove("CAST", 4, 1) not in moves


def test_first_order_pays_urgency_bonus(brewing):
    state = brewing.initial_state(stock=(2, 2, 0, 0), orders=[0, 1])

    assert BrewMove("BREW", 0) in brewing.valid_moves(state)[1]
    state = brewing.apply(state, 0, BrewMove("BREW", 0))

    assert state.rupees == 9
    assert state.bonuses == 3
    assert state.potions == 1
    assert state.stock == (0, 0, 0, 0)
    assert state.orders == (1,)


def test_later_order_pays_no_bonus(brewing):
    state = brewing.initial_state(stock=(3, 2, 0, 0), orders=[2, 1])

    state = brewing.apply(state, 0, BrewMove("BREW", 1))

    assert state.rupees == 7
    assert state.bonuses == 4
    assert state.orders == (2,)


def test_brewing_end_conditions():
    game = BrewingGame(max_turns=2)
    state = game.initial_state()
    state = game.apply(game.apply(state, 0, REST), 0, REST)

    assert game.is_terminal(state)
    assert game.valid_moves(state) == (0, [WAIT])
    assert game.is_terminal(game.initial_state(orders=[]))


def test_brewing_evaluation_and_scores(brewing):
    state = brewing.initial_state(stock=(1, 2, 0, 1))

    assert brewing.evaluate(state) == 1 + 6 + 3
    assert brewing.scores(state)[0] == 0.0

    rich = replace(state, rupees=150)
    assert brewing.evaluate(rich) == 3000 + 10
    assert brewing.scores(rich)[0] == 1.0
    assert brewing.scores(replace(state, rupees=50))[0] == 0.5


def test_move_formatting(brewing):
    assert brewing.format_move(BrewMove("CAST", 7, 2)) == "CAST 7 2"
    assert brewing.format_move(BrewMove("BREW", 3)) == "BREW 3"
    assert brewing.format_move(REST) == "REST"
