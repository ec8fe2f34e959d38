# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package: re-exports the in-memory stores."""
from shift_reconciler.repositories.history_repository import HistoryRepository
from shift_reconciler.repositories.pending_action_repository import PendingActionRepository
from shift_reconciler.repositories.view_state_repository import ViewStateRepository

__all__ = ["HistoryRepository", "PendingActionRepository", "ViewStateRepository"]
