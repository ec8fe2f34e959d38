# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Assign, unassign, roster replacement and mutation history.
Thin HTTP layer: delegates ALL logic to AssignmentService.
Each mutation starts from a freshly loaded board of the target date.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from shift_reconciler.core.dependencies import (
    get_assignment_service,
    get_history_repo,
    get_reconciliation_service,
)
from shift_reconciler.core.errors import ReconciliationError
from shift_reconciler.models.reconciliation import AssignmentResult, BulkReplaceResult
from shift_reconciler.repositories.history_repository import HistoryRepository
from shift_reconciler.schemas.reconciliation import AssignRequest, RosterRequest
from shift_reconciler.services.assignment_service import AssignmentService
from shift_reconciler.services.reconciliation_service import ReconciliationService

router = APIRouter(prefix="/api/v1", tags=["Assignments"])

DATE_PREFIX = "/collections/{collection_id}/dates/{target_date_id}"


# ── Mutations ──

@router.post(f"{DATE_PREFIX}/assignments", status_code=201, response_model=AssignmentResult)
def assign_member(
    collection_id: str,
    target_date_id: str,
    payload: AssignRequest,
    reconciliation: ReconciliationService = Depends(get_reconciliation_service),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Confirm a pool member on a slot. 409 means the slot filled up meanwhile."""
    try:
        board = reconciliation.load_board(collection_id, target_date_id)
        return service.assign(board, payload.slot_id, payload.member_id, payload.note)
    except ReconciliationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.delete(f"{DATE_PREFIX}/assignments/{{assignment_id}}", response_model=AssignmentResult)
def unassign_member(
    collection_id: str,
    target_date_id: str,
    assignment_id: str,
    reconciliation: ReconciliationService = Depends(get_reconciliation_service),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Cancel an assignment. An id missing from the date's board is 404."""
    try:
        board = reconciliation.load_board(collection_id, target_date_id)
        return service.unassign(board, assignment_id)
    except ReconciliationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.put(f"{DATE_PREFIX}/slots/{{slot_id}}/roster", response_model=BulkReplaceResult)
def replace_roster(
    collection_id: str,
    target_date_id: str,
    slot_id: str,
    payload: RosterRequest,
    reconciliation: ReconciliationService = Depends(get_reconciliation_service),
    service: AssignmentService = Depends(get_assignment_service),
):
    """
    Replace the slot's roster with the given members.
    Not atomic: inspect ``failures`` in the result.
    """
    try:
        board = reconciliation.load_board(collection_id, target_date_id)
        return service.bulk_replace(board, slot_id, payload.member_ids)
    except ReconciliationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())


# ── History ──

@router.get("/history")
def get_history(
    collection_id: Optional[str] = None,
    event_type: Optional[str] = None,
    limit: int = Query(default=None, ge=1, description="Max results"),
    history_repo: HistoryRepository = Depends(get_history_repo),
):
    """Audit log for all assignment mutations."""
    return history_repo.get_all(
        collection_id=collection_id, event_type=event_type, limit=limit
    )
