# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection: wire repositories, clients and services.
Repositories are process-wide singletons; clients and services are built per
request because every client carries the caller's SessionContext.
"""

from typing import Optional

import httpx
from fastapi import Depends, Request

from shift_reconciler.core.session import SessionContext
from shift_reconciler.repositories.history_repository import HistoryRepository
from shift_reconciler.repositories.pending_action_repository import PendingActionRepository
from shift_reconciler.repositories.view_state_repository import ViewStateRepository
from shift_reconciler.services.actual_attendance_client import ActualAttendanceClient
from shift_reconciler.services.assignment_client import AssignmentClient
from shift_reconciler.services.assignment_service import AssignmentService
from shift_reconciler.services.attendance_client import AttendanceClient
from shift_reconciler.services.business_day_client import BusinessDayClient
from shift_reconciler.services.member_client import MemberClient
from shift_reconciler.services.reconciliation_service import ReconciliationService
from shift_reconciler.services.shift_slot_client import ShiftSlotClient

# ── Singleton repository instances (in-memory stores) ──
_history_repo = HistoryRepository()
_view_state_repo = ViewStateRepository()
_pending_repo = PendingActionRepository()


# ── FastAPI dependency functions ──
def get_history_repo() -> HistoryRepository:
    return _history_repo


def get_view_state_repo() -> ViewStateRepository:
    return _view_state_repo


def get_pending_repo() -> PendingActionRepository:
    return _pending_repo


def get_transport() -> Optional[httpx.BaseTransport]:
    """Transport for collaborator calls. None uses the network; tests override it."""
    return None


def get_session(request: Request) -> SessionContext:
    return SessionContext.from_headers(
        request.headers, getattr(request.state, "request_id", None)
    )


def get_reconciliation_service(
    session: SessionContext = Depends(get_session),
    transport: Optional[httpx.BaseTransport] = Depends(get_transport),
) -> ReconciliationService:
    return ReconciliationService(
        attendance_client=AttendanceClient(session, transport=transport),
        business_day_client=BusinessDayClient(session, transport=transport),
        shift_slot_client=ShiftSlotClient(session, transport=transport),
        assignment_client=AssignmentClient(session, transport=transport),
        member_client=MemberClient(session, transport=transport),
        actual_attendance_client=ActualAttendanceClient(session, transport=transport),
        view_state_repo=_view_state_repo,
    )


def get_assignment_service(
    session: SessionContext = Depends(get_session),
    transport: Optional[httpx.BaseTransport] = Depends(get_transport),
    reconciliation_service: ReconciliationService = Depends(get_reconciliation_service),
) -> AssignmentService:
    return AssignmentService(
        assignment_client=AssignmentClient(session, transport=transport),
        reconciliation_service=reconciliation_service,
        history_repo=_history_repo,
        pending_repo=_pending_repo,
    )
