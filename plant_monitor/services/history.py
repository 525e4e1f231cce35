from __future__ import annotations

from collections import deque

DEFAULT_CAPACITY = 21


class HistoryBuffer:
    """Bounded, append-only window of recent moisture readings (oldest first)."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._values: deque[float] = deque(maxlen=capacity)

    def append(self, value: float) -> None:
        self._values.append(value)

    def snapshot(self) -> tuple[float, ...]:
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)
