"""Accumulates terminal output and releases it in batches."""

from __future__ import annotations

import time
from datetime import timedelta


class OutputBatcher:
    """Buffers bytes until a size threshold or a flush interval is reached."""

    def __init__(self, max_bytes: int, flush_interval: float | timedelta) -> None:
        if isinstance(flush_interval, timedelta):
            flush_interval = flush_interval.total_seconds()
        self.max_bytes = max_bytes
        self.flush_interval = float(flush_interval)
        self._buffer = bytearray()
        self._last_flush = time.monotonic()

    def __len__(self) -> int:
        return len(self._buffer)

    def push(self, data: bytes) -> bytes | None:
        """Add data; return the whole buffer once it reaches ``max_bytes``."""
        self._buffer += data
        if len(self._buffer) >= self.max_bytes:
            return self._drain()
        return None

    def tick(self) -> bytes | None:
        """Return buffered data if the flush interval has elapsed."""
        if self._buffer and time.monotonic() - self._last_flush >= self.flush_interval:
            return self._drain()
        return None

    def flush(self) -> bytes | None:
        """Return any buffered data regardless of thresholds."""
        if not self._buffer:
            return None
        return self._drain()

    def _drain(self) -> bytes:
        self._last_flush = time.monotonic()
        data = bytes(self._buffer)
        self._buffer.clear()
        return data