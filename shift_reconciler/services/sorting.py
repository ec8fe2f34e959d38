# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Sort/filter engine for the member x date response matrix.
Pure computation: shared by the review table and the assignment picker.

Filter: a member passes when no role is selected or when it holds any of the
selected roles. With two or more roles selected, members are grouped by the
position of their first matching role in selection order; the active sort key
only orders members inside a group.
"""

from functools import cmp_to_key
from typing import Optional, Sequence

from shift_reconciler.models.domain import (
    AttendanceCollection,
    AttendanceResponse,
    Member,
    ResponseValue,
)
from shift_reconciler.models.reconciliation import (
    AttendanceIndex,
    AttendanceMatrix,
    MatrixCell,
    MatrixRow,
    SortDirection,
    SortKey,
    SortState,
)
from shift_reconciler.services.attendance import aggregate_responses, date_statistics
from shift_reconciler.services.collation import compare_text

DATE_RANK: dict[ResponseValue, int] = {
    ResponseValue.ATTENDING: 0,
    ResponseValue.UNDECIDED: 1,
    ResponseValue.ABSENT: 2,
}
NO_RESPONSE_RANK = 3


def matches_roles(member: Member, role_ids: Sequence[str]) -> bool:
    if not role_ids:
        return True
    return any(rid in role_ids for rid in member.role_ids)


def filter_by_roles(members: Sequence[Member], role_ids: Sequence[str]) -> list[Member]:
    return [m for m in members if matches_roles(m, role_ids)]


def role_group_index(member: Member, role_ids: Sequence[str]) -> int:
    """Index of the first selected role the member holds; len(role_ids) if none."""
    positions = {rid: i for i, rid in enumerate(role_ids)}
    return min(
        (positions[rid] for rid in member.role_ids if rid in positions),
        default=len(role_ids),
    )


def date_rank(index: AttendanceIndex, member_id: str, target_date_id: str) -> int:
    answer = index.response_for(member_id, target_date_id)
    return DATE_RANK.get(answer, NO_RESPONSE_RANK)


def _key_compare(
    a: Member,
    b: Member,
    state: SortState,
    index: AttendanceIndex,
    target_date_ids: Optional[Sequence[str]],
) -> int:
    if state.key == SortKey.NAME:
        return compare_text(a.display_name, b.display_name)
    if state.key == SortKey.ATTENDING_COUNT:
        return index.attending_count(a.member_id, target_date_ids) - index.attending_count(
            b.member_id, target_date_ids
        )
    if state.key == SortKey.DATE_ATTENDING and state.target_date_id:
        return date_rank(index, a.member_id, state.target_date_id) - date_rank(
            index, b.member_id, state.target_date_id
        )
    return 0


def sort_members(
    members: Sequence[Member],
    index: AttendanceIndex,
    state: SortState,
    role_filter: Sequence[str] = (),
    target_date_ids: Optional[Sequence[str]] = None,
) -> list[Member]:
    """
    Order members by the active key. Ties fall back to name, then member id,
    and follow the direction too, so flipping direction reverses the list.
    """
    grouped = len(role_filter) >= 2
    sign = 1 if state.direction == SortDirection.ASC else -1

    def compare(a: Member, b: Member) -> int:
        if grouped:
            group_diff = role_group_index(a, role_filter) - role_group_index(b, role_filter)
            if group_diff:
                return group_diff
        result = _key_compare(a, b, state, index, target_date_ids)
        if result == 0 and state.key != SortKey.NAME:
            result = compare_text(a.display_name, b.display_name)
        if result == 0:
            result = compare_text(a.member_id, b.member_id)
        return sign * result

    return sorted(members, key=cmp_to_key(compare))


def arrange_members(
    members: Sequence[Member],
    index: AttendanceIndex,
    state: SortState,
    role_filter: Sequence[str] = (),
    target_date_ids: Optional[Sequence[str]] = None,
) -> list[Member]:
    """Filter by roles, then sort."""
    return sort_members(
        filter_by_roles(members, role_filter),
        index,
        state,
        role_filter,
        target_date_ids,
    )


def build_matrix(
    collection: AttendanceCollection,
    members: Sequence[Member],
    responses: Sequence[AttendanceResponse],
    state: SortState,
    role_filter: Sequence[str] = (),
) -> AttendanceMatrix:
    """Rows of the attendance review table in display order."""
    index = aggregate_responses(responses)
    target_dates = collection.sorted_target_dates()
    date_ids = [d.target_date_id for d in target_dates]

    # Collections addressed to specific roles only list those members
    targeted = filter_by_roles(members, collection.role_ids)
    ordered = arrange_members(targeted, index, state, role_filter, date_ids)

    rows: list[MatrixRow] = []
    for member in ordered:
        cells = []
        for date_id in date_ids:
            window = index.window_for(member.member_id, date_id)
            cells.append(
                MatrixCell(
                    target_date_id=date_id,
                    response=index.response_for(member.member_id, date_id),
                    available_from=window.available_from if window else None,
                    available_to=window.available_to if window else None,
                )
            )
        rows.append(
            MatrixRow(
                member_id=member.member_id,
                display_name=member.display_name,
                role_ids=list(member.role_ids),
                role_group=(
                    role_group_index(member, role_filter) if len(role_filter) >= 2 else None
                ),
                attending_count=index.attending_count(member.member_id, date_ids),
                note=index.notes.get(member.member_id),
                cells=cells,
            )
        )

    return AttendanceMatrix(
        collection_id=collection.collection_id,
        target_dates=target_dates,
        sort=state,
        role_filter=list(role_filter),
        rows=rows,
        statistics=date_statistics(index, target_dates, [m.member_id for m in targeted]),
        respondent_count=len(index.responses),
        member_count=len(targeted),
    )
