"""
Single-player potion brewing.

The player holds an inventory of four ingredient tiers (at most 10
ingredients in total). Each turn it either casts one of its spells, which
converts ingredients and then stays exhausted until the player rests,
brews one of the pending orders for rupees, rests to refresh every spell,
or waits when nothing else is possible. The first pending order pays an
urgency bonus while bonuses last. The game ends after max_turns turns,
after max_potions potions, or once no order is left.

The model precomputes, for every possible inventory, how many times each
spell can be cast and which orders can be brewed, so move generation is a
pair of table lookups.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from itertools import product
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from turn_search.core.game import GameModel, GameScore, make_scores

Stock = Tuple[int, int, int, int]

MAX_STOCK = 10
URGENCY_BONUS = 3
RUPEES_FACTOR = 20.0
TIER_FACTORS = (1.0, 3.0, 3.0, 3.0)


class Spell(NamedTuple):
    """A stock conversion; repeatable spells may be cast several times at once."""
    id: int
    recipe: Stock
    repeatable: bool


class Order(NamedTuple):
    """A potion: the ingredients it consumes and the rupees it pays."""
    id: int
    cost: Stock
    price: int


class BrewMove(NamedTuple):
    """
    A brewing move.

    kind is one of BREW (target = order id), CAST (target = spell id,
    times = number of casts), REST or WAIT.
    """
    kind: str
    target: int = -1
    times: int = 1

    def __str__(self) -> str:
        if self.kind == "BREW":
            return f"BREW {self.target}"
        if self.kind == "CAST":
            return f"CAST {self.target} {self.times}"
        return self.kind


REST = BrewMove("REST")
WAIT = BrewMove("WAIT")


BASIC_SPELLS: Tuple[Spell, ...] = (
    Spell(0, (2, 0, 0, 0), False),
    Spell(1, (-1, 1, 0, 0), False),
    Spell(2, (0, -1, 1, 0), False),
    Spell(3, (0, 0, -1, 1), False),
)

EXTRA_SPELLS: Tuple[Spell, ...] = (
    Spell(4, (1, 1, 0, 0), False),
    Spell(5, (0, 2, -1, 0), True),
    Spell(6, (-3, 0, 0, 1), True),
    Spell(7, (3, -1, 0, 0), True),
)

ORDERS: Tuple[Order, ...] = tuple(
    Order(i, cost, price) for i, (cost, price) in enumerate([
        ((2, 2, 0, 0), 6), ((3, 2, 0, 0), 7), ((0, 4, 0, 0), 8), ((2, 0, 2, 0), 8),
        ((2, 3, 0, 0), 8), ((3, 0, 2, 0), 9), ((0, 2, 2, 0), 10), ((0, 5, 0, 0), 10),
        ((2, 0, 0, 2), 10), ((2, 0, 3, 0), 11), ((3, 0, 0, 2), 11), ((0, 0, 4, 0), 12),
        ((0, 2, 0, 2), 12), ((0, 3, 2, 0), 12), ((0, 2, 3, 0), 13), ((0, 0, 2, 2), 14),
        ((0, 3, 0, 2), 14), ((2, 0, 0, 3), 14), ((0, 0, 5, 0), 15), ((0, 0, 0, 4), 16),
        ((0, 2, 0, 3), 16), ((0, 0, 3, 2), 17), ((0, 0, 2, 3), 18), ((0, 0, 0, 5), 20),
        ((2, 1, 0, 1), 9), ((0, 2, 1, 1), 12), ((1, 0, 2, 1), 12), ((2, 2, 2, 0), 13),
        ((2, 2, 0, 2), 15), ((2, 0, 2, 2), 17), ((0, 2, 2, 2), 19), ((1, 1, 1, 1), 12),
        ((3, 1, 1, 1), 14), ((1, 3, 1, 1), 16), ((1, 1, 3, 1), 18), ((1, 1, 1, 3), 20),
    ])
)


@dataclass(frozen=True)
class BrewingState:
    """
    Complete brewing position.

    Attributes:
        stock: Ingredients held per tier
        active: Whether each known spell can be cast (indexed like the model's spells)
        orders: Ids of the pending orders, most urgent first
        rupees: Rupees earned so far
        potions: Potions brewed so far
        bonuses: Urgency bonuses left
        turn: Number of turns played
    """
    stock: Stock
    active: Tuple[bool, ...]
    orders: Tuple[int, ...]
    rupees: int = 0
    potions: int = 0
    bonuses: int = 4
    turn: int = 0


def can_cast(recipe: Stock, stock: Stock) -> bool:
    """Whether recipe can be applied once to stock."""
    if sum(stock) + sum(recipe) > MAX_STOCK:
        return False
    return all(s + r >= 0 for s, r in zip(stock, recipe))


def times_castable(spell: Spell, stock: Stock) -> int:
    """How many times spell can be cast in a row from stock."""
    if not spell.repeatable:
        return int(can_cast(spell.recipe, stock))
    times = 0
    while can_cast(spell.recipe, stock):
        stock = tuple(s + r for s, r in zip(stock, spell.recipe))
        times += 1
    return times


class BrewingGame(GameModel[BrewingState, BrewMove]):
    """
    Brewing game model.

    Args:
        spells: Spells known by the player
        orders: Catalogue of orders that may appear
        max_turns: Turn limit
        max_potions: Potion limit
        reward_scale: Rupees mapped to a reward of 1.0
    """

    name = "brewing"

    def __init__(
        self,
        spells: Sequence[Spell] = BASIC_SPELLS + EXTRA_SPELLS,
        orders: Sequence[Order] = ORDERS,
        max_turns: int = 40,
        max_potions: int = 6,
        reward_scale: float = 100.0,
    ):
        self.spells = tuple(spells)
        self.orders: Dict[int, Order] = {o.id: o for o in orders}
        self.max_turns = max_turns
        self.max_potions = max_potions
        self.reward_scale = reward_scale

        # Every inventory with at most MAX_STOCK ingredients
        self.stocks: List[Stock] = [s for s in product(range(MAX_STOCK + 1), repeat=4)
                                    if sum(s) <= MAX_STOCK]
        self.stock_index: Dict[Stock, int] = {s: i for i, s in enumerate(self.stocks)}

        order_ids = sorted(self.orders)
        self._order_column = {order_id: col for col, order_id in enumerate(order_ids)}

        stocks = np.array(self.stocks, dtype=np.int8)
        costs = np.array([self.orders[i].cost for i in order_ids], dtype=np.int8).reshape(-1, 4)
        # brewable[stock, order]: every tier covers the order's cost
        self.brewable = (stocks[:, None, :] >= costs[None, :, :]).all(axis=2)
        # cast_times[stock, spell]
        self.cast_times = np.array(
            [[times_castable(spell, stock) for spell in self.spells] for stock in self.stocks],
            dtype=np.uint8,
        ).reshape(len(self.stocks), len(self.spells))

    def initial_state(
        self,
        stock: Stock = (3, 0, 0, 0),
        orders: Optional[Sequence[int]] = None,
    ) -> BrewingState:
        """
        Build the starting position.

        Args:
            stock: Starting inventory
            orders: Pending order ids (defaults to the first five of the catalogue)
        """
        if orders is None:
            orders = sorted(self.orders)[:5]
        return BrewingState(
            stock=tuple(stock),
            active=(True,) * len(self.spells),
            orders=tuple(orders),
        )

    def valid_moves(self, state: BrewingState) -> Tuple[int, List[BrewMove]]:
        if self.is_terminal(state):
            return 0, [WAIT]

        stock_idx = self.stock_index[state.stock]
        moves = [BrewMove("BREW", order_id) for order_id in state.orders
                 if self.brewable[stock_idx, self._order_column[order_id]]]

        for spell_pos, spell in enumerate(self.spells):
            if state.active[spell_pos]:
                for times in range(1, int(self.cast_times[stock_idx, spell_pos]) + 1):
                    moves.append(BrewMove("CAST", spell.id, times))

        if not all(state.active):
            moves.append(REST)

        return 0, moves or [WAIT]

    def apply(self, state: BrewingState, player: int, move: BrewMove) -> BrewingState:
        if move.kind == "BREW":
            order = self.orders[move.target]
            position = state.orders.index(move.target)
            bonus = URGENCY_BONUS if position == 0 and state.bonuses > 0 else 0
            return replace(
                state,
                stock=tuple(s - c for s, c in zip(state.stock, order.cost)),
                orders=state.orders[:position] + state.orders[position + 1:],
                rupees=state.rupees + order.price + bonus,
                potions=state.potions + 1,
                bonuses=state.bonuses - 1 if bonus else state.bonuses,
                turn=state.turn + 1,
            )

        if move.kind == "CAST":
            spell_pos = next(i for i, s in enumerate(self.spells) if s.id == move.target)
            recipe = self.spells[spell_pos].recipe
            active = list(state.active)
            active[spell_pos] = False
            return replace(
                state,
                stock=tuple(s + r * move.times for s, r in zip(state.stock, recipe)),
                active=tuple(active),
                turn=state.turn + 1,
            )

        if move.kind == "REST":
            return replace(state, active=(True,) * len(self.spells), turn=state.turn + 1)

        return replace(state, turn=state.turn + 1)

    def is_terminal(self, state: BrewingState) -> bool:
        return (state.turn >= self.max_turns
                or state.potions >= self.max_potions
                or not state.orders)

    def scores(self, state: BrewingState) -> GameScore:
        return make_scores(min(1.0, state.rupees / self.reward_scale))

    def evaluate(self, state: BrewingState) -> float:
        """Rupees dominate; ingredients break ties, higher tiers worth more."""
        return RUPEES_FACTOR * state.rupees + sum(f * s for f, s in zip(TIER_FACTORS, state.stock))
