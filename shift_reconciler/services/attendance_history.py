# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Actual attendance history beside the pool. Pure computation.
Keeps the rows of members attending the target date, narrowed by the same
role filter as the picker. A business day missing from a member's map counts
as absent.
"""

from typing import Mapping, Sequence

from shift_reconciler.models.domain import (
    ActualAttendance,
    ActualAttendanceStatus,
    Member,
)
from shift_reconciler.models.reconciliation import AttendanceHistoryRow
from shift_reconciler.services.sorting import matches_roles


def build_history_rows(
    actual: ActualAttendance,
    attending_ids: Sequence[str],
    members: Mapping[str, Member],
    role_ids: Sequence[str],
) -> list[AttendanceHistoryRow]:
    attending = set(attending_ids)
    day_ids = [d.target_date_id for d in actual.target_dates]
    rows: list[AttendanceHistoryRow] = []

    for entry in actual.member_attendances:
        if entry.member_id not in attending:
            continue
        # Attendees missing from the active roster hold no roles
        member = members.get(entry.member_id) or Member(
            member_id=entry.member_id, display_name=entry.member_name
        )
        if not matches_roles(member, role_ids):
            continue

        statuses = {
            day_id: entry.attendance_map.get(day_id, ActualAttendanceStatus.ABSENT)
            for day_id in day_ids
        }
        rows.append(
            AttendanceHistoryRow(
                member_id=entry.member_id,
                member_name=entry.member_name or member.display_name,
                attended_count=sum(
                    1 for s in statuses.values() if s == ActualAttendanceStatus.ATTENDED
                ),
                statuses=statuses,
            )
        )
    return rows
