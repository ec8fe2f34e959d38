# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Board reducer. Pure computation, no side effects.
Combines aggregation, capacity and pool resolution for one target date.
"""

from typing import Optional, Sequence

from shift_reconciler.models.domain import (
    AttendanceResponse,
    BusinessDay,
    ShiftAssignment,
    ShiftSlot,
    TargetDate,
)
from shift_reconciler.models.reconciliation import ReconciliationBoard
from shift_reconciler.services.attendance import aggregate_responses
from shift_reconciler.services.capacity import build_instance_groups
from shift_reconciler.services.pool import resolve_pool


def match_business_day(
    target_date: TargetDate,
    business_days: Sequence[BusinessDay],
) -> Optional[BusinessDay]:
    """Business days are matched to target dates by calendar-date equality."""
    return next(
        (bd for bd in business_days if bd.target_date == target_date.target_date),
        None,
    )


def build_board(
    collection_id: str,
    target_date: TargetDate,
    responses: Sequence[AttendanceResponse],
    business_day: Optional[BusinessDay],
    slots: Sequence[ShiftSlot],
    assignments: Sequence[ShiftAssignment],
    notices: Sequence[str] = (),
) -> ReconciliationBoard:
    index = aggregate_responses(responses)
    groups = build_instance_groups(slots, assignments)
    pool = resolve_pool(target_date.target_date_id, index, groups)
    return ReconciliationBoard(
        collection_id=collection_id,
        target_date=target_date,
        business_day_id=business_day.business_day_id if business_day else None,
        groups=groups,
        pool=pool,
        notices=list(notices),
    )
