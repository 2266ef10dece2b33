"""
Shared fixtures: small games whose outcomes are known, and fake clocks.
"""
from typing import List, Tuple

import pytest

from turn_search.core.game import GameModel, make_scores


class OneShotGame(GameModel):
    """Player 0 plays once: "X" wins, "Y" loses. Both moves end the game."""

    name = "one-shot"

    def initial_state(self):
        return "start"

    def valid_moves(self, state):
        if state != "start":
            return 0, ["PASS"]
        return 0, ["Y", "X"]

    def apply(self, state, player, move):
        return move

    def is_terminal(self, state):
        return state != "start"

    def scores(self, state):
        return make_scores(1.0, 0.0) if state == "X" else make_scores(0.0, 1.0)


class NimGame(GameModel):
    """
    Two-player Nim on one pile: take 1 or 2, whoever takes the last wins.

    States are (pile, player to move).
    """

    name = "nim"

    def __init__(self, pile: int = 7):
        self.pile = pile

    def initial_state(self):
        return self.pile, 0

    def valid_moves(self, state):
        pile, player = state
        if pile == 0:
            return player, [0]
        return player, [1, 2] if pile >= 2 else [1]

    def apply(self, state, player, move):
        pile, _ = state
        return pile - move, 1 - player

    def is_terminal(self, state):
        return state[0] == 0

    def scores(self, state):
        # The player to move did not take the last item
        return make_scores(0.0, 1.0) if state[1] == 0 else make_scores(1.0, 0.0)


class DigitGame(GameModel):
    """
    Single player picks `length` digits in 0..2; states are tuples of digits.
    """

    name = "digits"

    def __init__(self, length: int = 3):
        self.length = length

    def initial_state(self):
        return ()

    def valid_moves(self, state):
        if len(state) >= self.length:
            return 0, [-1]
        return 0, [0, 1, 2]

    def apply(self, state, player, move):
        return state + (move,)

    def is_terminal(self, state):
        return len(state) >= self.length

    def scores(self, state):
        return make_scores(self.evaluate(state) / (4.0 * self.length))

    def evaluate(self, state):
        return float(sum((d * 7 + i * 3) % 5 for i, d in enumerate(state)))


class BrokenGame(GameModel):
    """Never over, never has a legal move."""

    def valid_moves(self, state):
        return 0, []

    def apply(self, state, player, move):
        return state

    def is_terminal(self, state):
        return False

    def scores(self, state):
        return make_scores()


class IterationClock:
    """
    Fake clock letting every search loop run exactly `iterations` times.

    Each search reads the clock once at start and once per loop check: the
    first iterations + 1 reads of a search report no elapsed time, the next
    one reports the whole budget.
    """

    def __init__(self, iterations: int, budget: float):
        self.iterations = iterations
        self.budget = budget
        self.reads = 0

    def __call__(self) -> float:
        period = self.iterations + 2
        search, position = divmod(self.reads, period)
        self.reads += 1
        base = search * 10.0 * self.budget
        return base + (self.budget if position == period - 1 else 0.0)


class TickClock:
    """Fake clock advancing by `step` seconds on every read."""

    def __init__(self, step: float):
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


def frozen_clock() -> float:
    """Clock for which no time ever passes."""
    return 0.0


def greedy_path(game: GameModel, state, decay: float) -> List[Tuple[object, float]]:
    """Follow the first best-scoring child until the game ends."""
    path = []
    depth = 0
    while not game.is_terminal(state):
        depth += 1
        player, moves = game.valid_moves(state)
        scored = [(m, game.evaluate(game.apply(state, player, m)) * decay ** depth) for m in moves]
        best = max(range(len(scored)), key=lambda i: (scored[i][1], -i))
        path.append(scored[best])
        state = game.apply(state, player, scored[best][0])
    return path


@pytest.fixture
def one_shot():
    return OneShotGame()


@pytest.fixture
def nim():
    return NimGame()


@pytest.fixture
def digits():
    return DigitGame()


@pytest.fixture
def broken():
    return BrokenGame()


@pytest.fixture
def iteration_clock():
    return IterationClock


@pytest.fixture
def tick_clock():
    return TickClock


@pytest.fixture
def no_time():
    return frozen_clock


@pytest.fixture
def greedy():
    return greedy_path


@pytest.fixture
def small_nim():
    return NimGame(pile=4)
