# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Sort and role-filter state of the matrix and picker views.
Keyed by (collection, view) so a repeated header click can flip direction.
NO business rules here: the toggle rule lives on SortState.
"""

from typing import Optional

from shift_reconciler.models.reconciliation import SortState

REVIEW_VIEW = "review"
PICKER_VIEW = "picker"


class ViewStateRepository:
    """In-memory view state storage."""

    def __init__(self) -> None:
        self._sort: dict[tuple[str, str], SortState] = {}
        self._role_filter: dict[tuple[str, str], list[str]] = {}

    # ── Read ──

    def get_sort(self, collection_id: str, view: str = REVIEW_VIEW) -> SortState:
        return self._sort.get((collection_id, view)) or SortState()

    def get_role_filter(self, collection_id: str, view: str = REVIEW_VIEW) -> list[str]:
        return list(self._role_filter.get((collection_id, view), []))

    def count(self) -> int:
        return len(set(self._sort) | set(self._role_filter))

    # ── Write ──

    def save_sort(self, collection_id: str, state: SortState, view: str = REVIEW_VIEW) -> None:
        self._sort[(collection_id, view)] = state

    def save_role_filter(
        self, collection_id: str, role_ids: list[str], view: str = REVIEW_VIEW
    ) -> None:
        # Selection order matters for grouping; drop repeats only
        self._role_filter[(collection_id, view)] = list(dict.fromkeys(role_ids))

    def delete(self, collection_id: str, view: Optional[str] = None) -> None:
        for store in (self._sort, self._role_filter):
            for key in [k for k in store if k[0] == collection_id and view in (None, k[1])]:
                del store[key]

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._sort.clear()
        self._role_filter.clear()
