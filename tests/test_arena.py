"""
Tests for the flat node arena.
"""
import pytest

from turn_search.beam.node import BeamArena
from turn_search.core.arena import NO_NODE, NodeArena
from turn_search.core.exceptions import ArenaExhaustedError
from turn_search.mcts.node import MCTSArena


def test_reset_creates_single_root():
    arena = NodeArena(10)
    assert len(arena) == 0

    root = arena.reset()

    assert root == 0
    assert len(arena) == 1
    assert arena.remaining == 9
    assert arena.parent_of(root) is None
    assert arena.children(root) == range(0)


def test_allocate_children_links_contiguous_block():
    arena = NodeArena(10)
    root = arena.reset()

    first = arena.allocate_children(root, ["a", "b", "c"])

    assert first == 1
    assert arena.children(root) == range(1, 4)
    assert [arena.move[c] for c in arena.children(root)] == ["a", "b", "c"]
    assert all(arena.parent_of(c) == root for c in arena.children(root))
    assert arena.find_child(root, "b") == 2
    assert arena.find_child(root, "z") is None
    assert len(arena) == 4


def test_allocation_beyond_capacity_raises():
    arena = NodeArena(4)
    arena.reset()
    arena.allocate(2)

    with pytest.raises(ArenaExhaustedError) as excinfo:
        arena.allocate(2)

    assert excinfo.value.requested == 2
    assert excinfo.value.remaining == 1
    assert excinfo.value.code == "ARENA_EXHAUSTED"
    # A failed allocation changes nothing
    assert len(arena) == 3


def test_columns_grow_up_to_capacity():
    arena = MCTSArena(5000)
    root = arena.reset()

    first = arena.allocate_children(root, list(range(3000)))
    arena.visits[first + 2999] = 7

    assert len(arena) == 3001
    assert len(arena.visits) >= 3001
    assert len(arena.visits) <= 5000
    assert len(arena.move) == len(arena.visits)
    assert arena.visits[first + 2999] == 7
    assert arena.parent[first + 2999] == root


def test_reset_after_use_hands_out_clean_rows():
    arena = MCTSArena(100)
    root = arena.reset()
    first = arena.allocate_children(root, [1, 2])
    arena.update(first, 1.0)
    arena.expanded[first] = True

    root = arena.reset()
    first = arena.allocate_children(root, [3, 4])

    assert arena.visits[first] == 0
    assert arena.reward[first] == 0.0
    assert not arena.expanded[first]
    assert arena.first_child[first] == NO_NODE
    assert arena.player[first] == -1


def test_subclass_columns_extend_base_columns():
    arena = BeamArena(10)
    root = arena.start("root state")

    assert arena.state[root] == "root state"
    assert arena.depth[root] == 0
    assert hasattr(arena, "parent")
    assert hasattr(arena, "move")


def test_path_to_lists_moves_from_root():
    arena = BeamArena(10)
    root = arena.start(None)
    first = arena.allocate_children(root, ["a", "b"])
    arena.score[first + 1] = 2.0
    second = arena.allocate_children(first + 1, ["c"])
    arena.score[second] = 3.0

    assert arena.path_to(second) == [("b", 2.0), ("c", 3.0)]
    assert arena.path_to(root) == []


def test_average_reward_and_node_info():
    arena = MCTSArena(10)
    root = arena.reset()
    child = arena.allocate_children(root, ["x"])
    arena.update(child, 1.0)
    arena.update(child, 0.0)

    assert arena.average_reward(child) == 0.5
    assert arena.average_reward(root) == 0.0
    info = arena.node_info(child)
    assert info["visits"] == 2
    assert info["parent"] == root
    assert info["move"] == "x"


def test_invalid_capacity():
    with pytest.raises(ValueError):
        NodeArena(0)


def test_reset_releases_stored_objects():
    arena = BeamArena(10)
    root = arena.start("old root")
    first = arena.allocate_children(root, ["a", "b"])
    arena.state[first] = "old child"

    arena.start("new root")

    assert arena.state[0] == "new root"
    assert arena.state[first] is None
    assert arena.move[first + 1] is None

    arena.clear()
    assert arena.state[0] is None
    assert len(arena) == 0
