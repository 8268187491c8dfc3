"""A growable first-in first-out queue."""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Iterator


class FifoQueue:
    """FIFO queue whose capacity doubles whenever it is full."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("queue size must be positive")
        self._items: deque[Any] = deque()
        self._capacity = size

    @property
    def capacity(self) -> int:
        """Number of elements the queue holds before it grows."""
        return self._capacity

    def add(self, element: Any) -> None:
        """Append ``element`` at the tail; ``None`` is refused."""
        if element is None:
            raise ValueError("cannot queue None")
        if len(self._items) + 1 > self._capacity:
            self._capacity *= 2
        self._items.append(element)

    def head(self) -> Any:
        """Return the head element, or ``None`` when the queue is empty."""
        return self._items[0] if self._items else None

    def get(self, index: int) -> Any:
        """Return the element at ``index`` from the head, or ``None``."""
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def remove_head(self) -> Any:
        """Remove and return the head element, or ``None`` when empty."""
        return self._items.popleft() if self._items else None

    def drain(self, release: Callable[[Any], None] | None = None) -> None:
        """Empty the queue, passing each element to ``release`` in order."""
        while self._items:
            element = self._items.popleft()
            if release is not None:
                release(element)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))