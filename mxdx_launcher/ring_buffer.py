"""Bounded store of sequenced events for replay."""

from __future__ import annotations

from collections import deque
from typing import Generic, TypeVar

T = TypeVar("T")


class EventRingBuffer(Generic[T]):
    """Keeps the most recent ``capacity`` events, keyed by sequence number."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity
        self._buffer: deque[tuple[int, T]] = deque(maxlen=capacity)

    def push(self, seq: int, event: T) -> None:
        """Store an event, evicting the oldest one when full."""
        self._buffer.append((seq, event))

    def get_range(self, start: int, end: int) -> list[T]:
        """Return events whose sequence numbers lie in [start, end]."""
        return [event for seq, event in self._buffer if start <= seq <= end]

    def get(self, seq: int) -> T | None:
        """Return the event with the given sequence number, if still held."""
        return next((event for s, event in self._buffer if s == seq), None)

    def __len__(self) -> int:
        return len(self._buffer)