from __future__ import annotations

import itertools
import threading


class IdGenerator:
    """Monotonically increasing element ids, safe to share between line workers."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self, prefix: str = "") -> str:
        with self._lock:
            value = next(self._counter)
        return f"{prefix}genid{value}"
