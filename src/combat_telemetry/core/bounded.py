"""Capacity-bounded collections used for every raw event log.

``BoundedLog`` is an append-only FIFO log: once full, each append evicts
the oldest entry.  ``TopN`` keeps the *N* largest items by a key, sorted
descending, and is used for encounter highlight lists.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")


class BoundedLog(Generic[T]):
    """Append-only sequence with a fixed capacity.

    Parameters
    ----------
    capacity:
        Maximum number of entries kept.  Must be >= 1.
    items:
        Optional initial entries; only the newest *capacity* are kept.
    """

    def __init__(self, capacity: int, items: Iterable[T] = ()) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._items: deque[T] = deque(items, maxlen=capacity)

    # -- queries -------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return self._items.maxlen  # type: ignore[return-value]

    @property
    def latest(self) -> T | None:
        """Return the most recently appended entry, or ``None`` if empty."""
        return self._items[-1] if self._items else None

    def to_list(self) -> list[T]:
        """Return the entries oldest-first as a new list."""
        return list(self._items)

    # -- mutation ------------------------------------------------------------

    def append(self, item: T) -> None:
        """Append *item*, evicting the oldest entry if at capacity."""
        self._items.append(item)

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self._items.append(item)

    def clear(self) -> None:
        self._items.clear()

    # -- dunder helpers ------------------------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __repr__(self) -> str:
        return f"BoundedLog(capacity={self.capacity}, size={len(self)})"


class TopN(Generic[T]):
    """Keep the *size* largest items by *key*, sorted descending.

    A new item enters when the list is not yet full, or when it strictly
    beats the current smallest entry.  Equal values keep insertion order.
    """

    def __init__(self, size: int, key: Callable[[T], float]) -> None:
        if size < 1:
            raise ValueError(f"size must be >= 1, got {size}")
        self._size = size
        self._key = key
        self._items: list[T] = []

    def offer(self, item: T) -> bool:
        """Try to add *item*.  Returns ``True`` if it was kept."""
        if len(self._items) >= self._size:
            if self._key(item) <= self._key(self._items[-1]):
                return False
            self._items.pop()
        self._items.append(item)
        # sorted() is stable, so earlier equal entries stay ahead
        self._items = sorted(self._items, key=self._key, reverse=True)
        return True

    def to_list(self) -> list[T]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)
