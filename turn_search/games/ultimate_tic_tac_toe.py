"""
Ultimate tic-tac-toe.

The board is made of 9 small boards ("squares") of 9 cells each. A move
sends the opponent to the square matching the cell just played, unless that
square is already locked, in which case any free cell may be played.
A square is won by a line of three cells and locked once won or full. The
game is won by a line of three won squares. When every square is locked
without such a line, the player with more won squares wins, otherwise the
game is a tie.

Cells are numbered 0..80 as square * 9 + position, both in row-major order
inside their 3x3 grid. Boards are stored as 81-bit integers, one per
player.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from turn_search.core.game import GameModel, GameScore, make_scores

FULL_SQUARE = 0b111111111
ALL_SQUARES = FULL_SQUARE
NO_MOVE = -1
"""Previous move of a fresh game, and the pass move of a finished one."""

LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)
LINE_MASKS: Tuple[int, ...] = tuple(sum(1 << i for i in line) for line in LINES)


def rowcol_to_cell(row: int, col: int) -> int:
    """Convert board coordinates (0..8, 0..8) to a cell index."""
    square = (row // 3) * 3 + col // 3
    position = (row % 3) * 3 + col % 3
    return square * 9 + position


def cell_to_rowcol(cell: int) -> Tuple[int, int]:
    """Convert a cell index to board coordinates (row, col)."""
    square, position = divmod(cell, 9)
    row = (square // 3) * 3 + position // 3
    col = (square % 3) * 3 + position % 3
    return row, col


@dataclass(frozen=True)
class TicTacToeState:
    """
    Complete ultimate tic-tac-toe position.

    Attributes:
        boards: Cells taken by each player (81-bit masks)
        squares: Squares won by each player (9-bit masks)
        locked: Squares that can no longer be played (9-bit mask)
        player: Player to move
        last_move: Previous cell played (NO_MOVE at the start)
        winner: Winning player, None while playing or for a tie
        over: Whether the game has ended
        turn: Number of moves played
    """
    boards: Tuple[int, int] = (0, 0)
    squares: Tuple[int, int] = (0, 0)
    locked: int = 0
    player: int = 0
    last_move: int = NO_MOVE
    winner: Optional[int] = None
    over: bool = False
    turn: int = 0


class UltimateTicTacToe(GameModel[TicTacToeState, int]):
    """
    Ultimate tic-tac-toe game model.

    Line checks and the free-cell masks of every locked-squares combination
    are precomputed once per instance.
    """

    name = "ultimate-tic-tac-toe"

    def __init__(self):
        # Whether each 9-bit pattern contains a line
        self._has_line = [any(mask & line == line for line in LINE_MASKS)
                          for mask in range(FULL_SQUARE + 1)]
        # 81-bit mask of the cells of the squares in each 9-bit pattern
        self._cells_of = [sum(FULL_SQUARE << (9 * s) for s in range(9) if mask >> s & 1)
                          for mask in range(FULL_SQUARE + 1)]

    def initial_state(self) -> TicTacToeState:
        return TicTacToeState()

    def playable_cells(self, state: TicTacToeState) -> int:
        """81-bit mask of the cells the player to move may take."""
        taken = state.boards[0] | state.boards[1]
        free = ~(taken | self._cells_of[state.locked]) & self._cells_of[ALL_SQUARES]

        if state.last_move != NO_MOVE:
            target = state.last_move % 9
            if not state.locked >> target & 1:
                free &= FULL_SQUARE << (9 * target)

        return free

    def valid_moves(self, state: TicTacToeState) -> Tuple[int, List[int]]:
        if state.over:
            return state.player, [NO_MOVE]

        free = self.playable_cells(state)
        moves = []
        while free:
            low = free & -free
            moves.append(low.bit_length() - 1)
            free ^= low
        return state.player, moves

    def apply(self, state: TicTacToeState, player: int, move: int) -> TicTacToeState:
        if move == NO_MOVE:
            return state

        boards = list(state.boards)
        squares = list(state.squares)
        locked = state.locked
        square = move // 9

        boards[player] |= 1 << move

        # Win or fill the square
        if self._has_line[boards[player] >> (9 * square) & FULL_SQUARE]:
            squares[player] |= 1 << square
            locked |= 1 << square
        elif (boards[0] | boards[1]) >> (9 * square) & FULL_SQUARE == FULL_SQUARE:
            locked |= 1 << square

        winner = None
        over = False
        if self._has_line[squares[player]]:
            winner, over = player, True
        elif locked == ALL_SQUARES:
            over = True
            won = [bin(squares[0]).count("1"), bin(squares[1]).count("1")]
            if won[0] != won[1]:
                winner = 0 if won[0] > won[1] else 1

        return replace(
            state,
            boards=(boards[0], boards[1]),
            squares=(squares[0], squares[1]),
            locked=locked,
            player=player if over else 1 - player,
            last_move=move,
            winner=winner,
            over=over,
            turn=state.turn + 1,
        )

    def is_terminal(self, state: TicTacToeState) -> bool:
        return state.over

    def scores(self, state: TicTacToeState) -> GameScore:
        if not state.over:
            raise ValueError("scores are only defined once the game is over")
        if state.winner is None:
            return make_scores(0.5, 0.5)
        return make_scores(*((1.0, 0.0) if state.winner == 0 else (0.0, 1.0)))

    def format_move(self, move: int) -> str:
        if move == NO_MOVE:
            return "PASS"
        row, col = cell_to_rowcol(move)
        return f"{row} {col}"

    def render(self, state: TicTacToeState) -> str:
        """Text picture of the board, rows top to bottom."""
        lines = []
        for row in range(9):
            cells = []
            for col in range(9):
                bit = 1 << rowcol_to_cell(row, col)
                cells.append("X" if state.boards[0] & bit else "O" if state.boards[1] & bit else ".")
                if col in (2, 5):
                    cells.append("|")
            lines.append(" ".join(cells))
            if row in (2, 5):
                lines.append("------+-------+------")
        return "\n".join(lines)
