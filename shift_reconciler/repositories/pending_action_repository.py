# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: In-flight mutation registry.
One mutation per key (slot or assignment) may be pending at a time; a second
submission for the same key is refused instead of queued.
"""

import threading
from datetime import datetime, timezone


class PendingActionRepository:
    """Thread-safe in-memory set of pending action keys."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self._lock = threading.Lock()

    def acquire(self, key: str) -> bool:
        """Mark ``key`` pending. Returns False if it already is."""
        with self._lock:
            if key in self._store:
                return False
            self._store[key] = datetime.now(timezone.utc).isoformat()
            return True

    def release(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def count(self) -> int:
        with self._lock:
            return len(self._store)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
