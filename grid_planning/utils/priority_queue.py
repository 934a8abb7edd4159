"""
Priority queue with key updates and removal.

LPA* and D* Lite change the key of queued vertices and remove vertices
from the middle of the queue. This wraps heapq with lazy deletion: stale
heap entries are skipped when they reach the top.
"""

import heapq
import itertools
from typing import Dict, Hashable, List, Tuple

INFINITE_KEY = (float('inf'), float('inf'))


class KeyedPriorityQueue:
    """
    Min-priority queue holding each item at most once.

    Keys are tuples compared lexicographically. Pushing an item that is
    already queued replaces its key.

    Example:
        >>> queue = KeyedPriorityQueue()
        >>> queue.push('a', (2.0, 1.0))
        >>> queue.push('b', (1.0, 1.0))
        >>> queue.pop()
        ('b', (1.0, 1.0))
    """

    def __init__(self):
        self._heap: List[Tuple[tuple, int, Hashable]] = []
        self._keys: Dict[Hashable, tuple] = {}
        self._counter = itertools.count()

    def push(self, item: Hashable, key: tuple) -> None:
        """Insert item, or update its key if already queued."""
        self._keys[item] = key
        heapq.heappush(self._heap, (key, next(self._counter), item))

    def remove(self, item: Hashable) -> None:
        """Remove item if queued; no-op otherwise."""
        self._keys.pop(item, None)

    def _discard_stale(self) -> None:
        while self._heap:
            key, _, item = self._heap[0]
            if self._keys.get(item) == key:
                return
            heapq.heappop(self._heap)

    def top_key(self) -> tuple:
        """Smallest key in the queue, or (inf, inf) when empty."""
        self._discard_stale()
        return self._heap[0][0] if self._heap else INFINITE_KEY

    def pop(self) -> Tuple[Hashable, tuple]:
        """
        Remove and return the item with the smallest key.

        Raises:
            IndexError: If the queue is empty
        """
        self._discard_stale()
        if not self._heap:
            raise IndexError("pop from an empty priority queue")
        key, _, item = heapq.heappop(self._heap)
        del self._keys[item]
        return item, key

    def __contains__(self, item: Hashable) -> bool:
        return item in self._keys

    def __len__(self) -> int:
        return len(self._keys)
