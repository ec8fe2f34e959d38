# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Availability pool. Pure computation, no side effects.

    pool(date) = attending(date) - assigned(date)

where assigned(date) spans every slot of the business day matched to the date.
Calling it twice with the same inputs yields the same pool.
"""

from typing import Sequence

from shift_reconciler.models.domain import ResponseValue
from shift_reconciler.models.reconciliation import (
    AttendanceIndex,
    AvailabilityPool,
    InstanceGroup,
    PoolMember,
)


def attending_members(index: AttendanceIndex, target_date_id: str) -> list[PoolMember]:
    """Members whose current answer for the date is attending, in first-seen order."""
    result: list[PoolMember] = []
    for member_id in index.member_order:
        if index.response_for(member_id, target_date_id) != ResponseValue.ATTENDING:
            continue
        window = index.window_for(member_id, target_date_id)
        result.append(
            PoolMember(
                member_id=member_id,
                member_name=index.member_names.get(member_id, ""),
                available_from=window.available_from if window else None,
                available_to=window.available_to if window else None,
            )
        )
    return result


def resolve_pool(
    target_date_id: str,
    index: AttendanceIndex,
    groups: Sequence[InstanceGroup],
) -> AvailabilityPool:
    """Attending members not holding a confirmed assignment on any slot of the date."""
    assigned_labels: dict[str, str] = {}
    assignment_counts: dict[str, int] = {}

    for group in groups:
        for capacity in group.slots:
            for assignment in capacity.assignments:
                if not assignment.is_confirmed:
                    continue
                member_id = assignment.member_id
                assignment_counts[member_id] = assignment_counts.get(member_id, 0) + 1
                # First slot in display order labels the member
                assigned_labels.setdefault(member_id, capacity.label)

    attending = attending_members(index, target_date_id)
    return AvailabilityPool(
        target_date_id=target_date_id,
        attending=attending,
        pool=[m for m in attending if m.member_id not in assigned_labels],
        assigned_labels=assigned_labels,
        double_booked=sorted(m for m, n in assignment_counts.items() if n > 1),
    )
