# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Mutation history (event log) data access.
Bounded append-only log of every assignment mutation and its outcome.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from shift_reconciler.core.config import settings


class HistoryRepository:
    """In-memory event log (bounded ring buffer)."""

    def __init__(self) -> None:
        self._events: list[dict[str, Any]] = []

    # ── Read ──

    def get_all(
        self,
        collection_id: Optional[str] = None,
        event_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        effective_limit = limit or settings.DEFAULT_HISTORY_LIMIT
        result = list(self._events)
        if collection_id:
            result = [e for e in result if e["collection_id"] == collection_id]
        if event_type:
            result = [e for e in result if e["event_type"] == event_type]
        return result[-effective_limit:]

    def count(self) -> int:
        return len(self._events)

    # ── Write ──

    def record_event(
        self, event_type: str, collection_id: str, details: dict[str, Any]
    ) -> dict[str, Any]:
        """Append an event to the log, trimming oldest if over max."""
        event: dict[str, Any] = {
            "event_id": str(uuid.uuid4()),
            "event_type": event_type,
            "collection_id": collection_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": details,
        }
        self._events.append(event)
        if len(self._events) > settings.MAX_HISTORY_SIZE:
            del self._events[: len(self._events) - settings.MAX_HISTORY_SIZE]
        return event

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._events.clear()
