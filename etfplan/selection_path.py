"""
etfplan/selection_path.py
-------------------------
Persistent, structure-sharing lists of selected item indices.

The knapsack sweep needs, for every capacity cell, the list of items that
produced that cell's best value.  Copying a list per cell costs
O(capacity × items) memory.  Instead every update appends a single node
``(item_index, parent_node)`` to an arena and the cell stores only the new
node id; cells whose selections share a tail share the same parent chain.

Nodes are never modified once written, so a node id identifies one fixed
selection for the lifetime of the arena.
"""

from __future__ import annotations

from typing import Iterator, List

import numpy as np

#: Node id of the empty selection.
EMPTY: int = -1


class SelectionPath:
    """
    Append-only arena of ``(item_index, parent)`` nodes.

    Usage::

        arena = SelectionPath()
        a = arena.push(3, EMPTY)        # [3]
        b = arena.push(7, a)            # [7, 3]   shares node a
        c = arena.push(9, a)            # [9, 3]   shares node a
        arena.to_list(b)                # → [3, 7]
    """

    def __init__(self):
        self._items: List[int] = []
        self._parents: List[int] = []

    def __len__(self) -> int:
        return len(self._items)

    def push(self, item_index: int, parent: int) -> int:
        """Prepend *item_index* to the selection *parent*; return the new node id."""
        self._items.append(item_index)
        self._parents.append(parent)
        return len(self._items) - 1

    def push_many(self, item_index: int, parents: np.ndarray) -> np.ndarray:
        """
        Prepend *item_index* to each selection in *parents* at once.

        Returns the new node ids, positionally aligned with *parents*.
        """
        start = len(self._items)
        count = len(parents)
        self._items.extend([item_index] * count)
        self._parents.extend(parents.tolist())
        return np.arange(start, start + count, dtype=np.int64)

    def walk(self, node: int) -> Iterator[int]:
        """Yield item indices from the most recently added back to the first."""
        while node != EMPTY:
            yield self._items[node]
            node = self._parents[node]

    def to_list(self, node: int) -> List[int]:
        """Return the selection at *node* in insertion (oldest-first) order."""
        indices = list(self.walk(node))
        indices.reverse()
        return indices
