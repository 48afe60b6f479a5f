# src/tdm/engine/queue.py
from __future__ import annotations

import functools
import itertools
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")

Comparator = Callable[[Any, Any], int]


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def ascending_priority(a: Any, b: Any) -> int:
    """Default ordering: smaller .priority first."""
    return _cmp(a.priority, b.priority)


def descending_priority(a: Any, b: Any) -> int:
    """Larger .priority first."""
    return _cmp(b.priority, a.priority)


def natural_order(a: Any, b: Any) -> int:
    """Orders plain comparable values (ints, strings, tuples)."""
    return _cmp(a, b)


class PriorityQueue(Generic[T]):
    """
    Binary min-heap over a Python list, ordered by a three-way comparator
    (negative: a first, zero: tie, positive: b first).

    Ties are broken by insertion order: each item is stored with a sequence
    number taken when it was inserted.

    Heap invariant: for every non-root index i the entry at (i - 1) // 2
    compares <= the entry at i. It holds before and after every public call.
    """

    def __init__(self, compare: Optional[Comparator] = None) -> None:
        self._compare: Comparator = compare or ascending_priority
        self._heap: list[tuple[T, int]] = []
        self._seq = itertools.count()

    def insert(self, item: T) -> None:
        self._heap.append((item, next(self._seq)))
        self._sift_up(len(self._heap) - 1)

    def extract_min(self) -> Optional[T]:
        """Removes and returns the smallest item, or None when empty."""
        if not self._heap:
            return None

        root = self._heap[0]
        last = self._heap.pop()
        if self._heap:
            self._heap[0] = last
            self._sift_down(0)
        return root[0]

    def peek(self) -> Optional[T]:
        return self._heap[0][0] if self._heap else None

    def size(self) -> int:
        return len(self._heap)

    def is_empty(self) -> bool:
        return not self._heap

    def discard(self, predicate: Callable[[T], bool]) -> int:
        """
        Drops every item matching predicate and restores heap order in O(n).
        Surviving items keep their original sequence numbers.
        Returns how many items were dropped.
        """
        kept = [entry for entry in self._heap if not predicate(entry[0])]
        dropped = len(self._heap) - len(kept)
        if dropped:
            self._heap = kept
            for i in range(len(self._heap) // 2 - 1, -1, -1):
                self._sift_down(i)
        return dropped

    def clear(self) -> None:
        self._heap.clear()

    def to_list(self) -> list[T]:
        """Items in heap (array) order."""
        return [entry[0] for entry in self._heap]

    def ordered(self) -> list[T]:
        """Items in the order extract_min() would return them; no mutation."""
        entries = sorted(self._heap, key=functools.cmp_to_key(self._compare_entries))
        return [entry[0] for entry in entries]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __iter__(self) -> Iterator[T]:
        return iter(self.to_list())

    # -------------------------
    # Heap internals
    # -------------------------

    def _compare_entries(self, a: tuple[T, int], b: tuple[T, int]) -> int:
        c = self._compare(a[0], b[0])
        if c != 0:
            return c
        return _cmp(a[1], b[1])

    def _less(self, i: int, j: int) -> bool:
        return self._compare_entries(self._heap[i], self._heap[j]) < 0

    def _swap(self, i: int, j: int) -> None:
        self._heap[i], self._heap[j] = self._heap[j], self._heap[i]

    def _sift_up(self, index: int) -> None:
        while index > 0:
            parent = (index - 1) // 2
            if not self._less(index, parent):
                break
            self._swap(index, parent)
            index = parent

    def _sift_down(self, index: int) -> None:
        n = len(self._heap)
        while True:
            left = 2 * index + 1
            right = left + 1
            smallest = index

            if left < n and self._less(left, smallest):
                smallest = left
            if right < n and self._less(right, smallest):
                smallest = right

            if smallest == index:
                return
            self._swap(index, smallest)
            index = smallest
