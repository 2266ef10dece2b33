"""
Flat node storage shared by the search engines.

Nodes live in one append-only, capacity-bounded arena and refer to each
other through integer indices, never through object references. Numeric
fields are stored column-wise in numpy arrays; the arrays grow
geometrically up to the fixed capacity so a large ceiling does not commit
all of its memory up front.

A node's children always occupy one contiguous block
[first_child, first_child + child_count), reserved by a single allocate()
call, and every child index is greater than its parent's.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional

import numpy as np

from turn_search.core.exceptions import ArenaExhaustedError

NO_NODE = -1
"""Index stored in parent/first_child when there is no such node."""

_INITIAL_SIZE = 1024


class NodeArena:
    """
    Base arena holding the tree links and the move of every node.

    Subclasses declare extra numeric columns in COLUMNS (name -> (dtype,
    fill value)) and extra per-node Python objects in OBJECT_COLUMNS.
    """

    COLUMNS: Dict[str, tuple] = {
        "parent": (np.int64, NO_NODE),
        "first_child": (np.int64, NO_NODE),
        "child_count": (np.int32, 0),
    }
    OBJECT_COLUMNS: tuple = ("move",)

    def __init__(self, capacity: int):
        """
        Initialize an empty arena.

        Args:
            capacity: Maximum number of nodes the arena may ever hold
        """
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._size = 0
        self._length = 0
        self._grow(min(capacity, _INITIAL_SIZE))

    def _columns(self) -> Dict[str, tuple]:
        columns = {}
        for klass in reversed(type(self).__mro__):
            columns.update(getattr(klass, "COLUMNS", {}))
        return columns

    def _object_columns(self) -> List[str]:
        names: List[str] = []
        for klass in reversed(type(self).__mro__):
            for name in getattr(klass, "OBJECT_COLUMNS", ()):
                if name not in names:
                    names.append(name)
        return names

    def _grow(self, size: int) -> None:
        """Resize every column to hold size nodes."""
        old = self._size
        for name, (dtype, fill) in self._columns().items():
            column = np.full(size, fill, dtype=dtype)
            if old:
                column[:old] = getattr(self, name)[:old]
            setattr(self, name, column)
        for name in self._object_columns():
            column = getattr(self, name, [])
            column.extend([None] * (size - old))
            setattr(self, name, column)
        self._size = size

    def _clear(self, start: int, stop: int) -> None:
        """Restore default values in [start, stop)."""
        for name, (_, fill) in self._columns().items():
            getattr(self, name)[start:stop] = fill
        for name in self._object_columns():
            column = getattr(self, name)
            for idx in range(start, stop):
                column[idx] = None

    @property
    def remaining(self) -> int:
        """Number of nodes that can still be allocated."""
        return self.capacity - self._length

    def __len__(self) -> int:
        return self._length

    def clear(self) -> None:
        """Drop every node, including the root."""
        for name in self._object_columns():
            column = getattr(self, name)
            column[:self._length] = [None] * self._length
        self._length = 0

    def reset(self) -> int:
        """
        Drop every node and create a fresh root.

        Numeric rows are not wiped since allocate() clears every block it
        hands out. Object rows are released so old states and moves can be
        garbage collected.

        Returns:
            Index of the root (always 0)
        """
        self._clear(0, 1)
        for name in self._object_columns():
            column = getattr(self, name)
            column[1:self._length] = [None] * max(0, self._length - 1)
        self._length = 1
        return 0

    def allocate(self, count: int) -> int:
        """
        Reserve a contiguous block of count nodes.

        Args:
            count: Number of nodes to reserve

        Returns:
            Index of the first reserved node

        Raises:
            ArenaExhaustedError: If fewer than count nodes remain
        """
        if count > self.remaining:
            raise ArenaExhaustedError(count, self.remaining)
        first = self._length
        end = first + count
        if end > self._size:
            size = self._size
            while size < end:
                size *= 2
            self._grow(min(size, self.capacity))
        self._clear(first, end)
        self._length = end
        return first

    def allocate_children(self, parent: int, moves: List[Any]) -> int:
        """
        Reserve one child per move under parent and link them.

        Returns:
            Index of the first child
        """
        first = self.allocate(len(moves))
        for offset, move in enumerate(moves):
            self.move[first + offset] = move
        self.parent[first:first + len(moves)] = parent
        self.first_child[parent] = first
        self.child_count[parent] = len(moves)
        return first

    def children(self, idx: int) -> range:
        """Indices of the children of node idx (empty when it has none)."""
        count = int(self.child_count[idx])
        if count == 0:
            return range(0)
        first = int(self.first_child[idx])
        return range(first, first + count)

    def parent_of(self, idx: int) -> Optional[int]:
        """Parent index of node idx, or None for a root."""
        parent = int(self.parent[idx])
        return None if parent == NO_NODE else parent

    def find_child(self, idx: int, move: Any) -> Optional[int]:
        """Index of the child of idx reached by move, or None."""
        for child in self.children(idx):
            if self.move[child] == move:
                return child
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(length={self._length}, capacity={self.capacity})"
