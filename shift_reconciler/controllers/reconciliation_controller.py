# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Board, picker, shift text and attendance matrix endpoints.
Thin HTTP layer: delegates ALL logic to ReconciliationService.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.responses import PlainTextResponse

from shift_reconciler.core.dependencies import get_reconciliation_service
from shift_reconciler.core.errors import ReconciliationError
from shift_reconciler.models.reconciliation import (
    AttendanceHistory,
    AttendanceMatrix,
    PoolMember,
    ReconciliationBoard,
    SortState,
)
from shift_reconciler.schemas.reconciliation import (
    RoleFilterRequest,
    RoleFilterResponse,
    SortRequest,
)
from shift_reconciler.services.reconciliation_service import ReconciliationService
from shift_reconciler.services.shift_text import MemberSeparator

router = APIRouter(prefix="/api/v1/collections/{collection_id}", tags=["Reconciliation"])


# ── Board ──

@router.get("/dates/{target_date_id}/board", response_model=ReconciliationBoard)
def get_board(
    collection_id: str,
    target_date_id: str,
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    """Slots grouped by instance, with capacity and the availability pool."""
    try:
        return service.load_board(collection_id, target_date_id)
    except ReconciliationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.get("/dates/{target_date_id}/picker", response_model=list[PoolMember])
def get_picker(
    collection_id: str,
    target_date_id: str,
    role_ids: Optional[list[str]] = Query(default=None, description="Role filter"),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    """Assignable members of the date, filtered and sorted like the review table."""
    try:
        return service.load_picker(collection_id, target_date_id, role_ids)
    except ReconciliationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.get("/dates/{target_date_id}/attendance-history", response_model=AttendanceHistory)
def get_attendance_history(
    collection_id: str,
    target_date_id: str,
    role_ids: Optional[list[str]] = Query(default=None, description="Role filter"),
    include_future: bool = Query(default=False),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    """Recent confirmed shifts of the members attending the date."""
    try:
        return service.load_attendance_history(
            collection_id, target_date_id, role_ids, include_future
        )
    except ReconciliationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.get("/dates/{target_date_id}/shift-text", response_class=PlainTextResponse)
def get_shift_text(
    collection_id: str,
    target_date_id: str,
    separator: MemberSeparator = Query(default=MemberSeparator.NEWLINE),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    try:
        return service.shift_text(collection_id, target_date_id, separator)
    except ReconciliationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


# ── Matrix ──

@router.get("/matrix", response_model=AttendanceMatrix)
def get_matrix(
    collection_id: str,
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    """Member x date response table with per-date statistics."""
    try:
        return service.load_matrix(collection_id)
    except ReconciliationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.post("/matrix/sort", response_model=SortState)
def toggle_sort(
    collection_id: str,
    payload: SortRequest,
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    """Header click: same key flips direction, another key starts ascending."""
    try:
        return service.toggle_sort(
            collection_id,
            key=payload.key,
            target_date_id=payload.target_date_id,
            view=payload.view,
        )
    except ReconciliationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.put("/matrix/filter", response_model=RoleFilterResponse)
def set_role_filter(
    collection_id: str,
    payload: RoleFilterRequest,
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    try:
        role_ids = service.set_role_filter(collection_id, payload.role_ids, payload.view)
    except ReconciliationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
    return RoleFilterResponse(collection_id=collection_id, view=payload.view, role_ids=role_ids)
