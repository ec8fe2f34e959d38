# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Attendance aggregation. Pure computation, no side effects.
Turns the raw response list of a collection into lookup tables.
"""

from typing import Iterable, Sequence

from shift_reconciler.models.domain import AttendanceResponse, ResponseValue, TargetDate
from shift_reconciler.models.reconciliation import (
    AttendanceIndex,
    DateStatistics,
    TimeWindow,
)


def _supersedes(candidate: AttendanceResponse, current: AttendanceResponse) -> bool:
    if candidate.responded_at != current.responded_at:
        return candidate.responded_at > current.responded_at
    # Same timestamp: fall back to the id so input order never decides
    return candidate.response_id > current.response_id


def current_responses(
    responses: Iterable[AttendanceResponse],
) -> list[AttendanceResponse]:
    """Keep exactly one response per (member, target date): the latest recorded."""
    winners: dict[tuple[str, str], AttendanceResponse] = {}
    for resp in responses:
        key = (resp.member_id, resp.target_date_id)
        existing = winners.get(key)
        if existing is None or _supersedes(resp, existing):
            winners[key] = resp
    return list(winners.values())


def aggregate_responses(responses: Sequence[AttendanceResponse]) -> AttendanceIndex:
    """
    Build the response, time-window and note lookups.
    The note kept per member is the latest non-blank one across every response,
    superseded ones included, whichever date it answers.
    """
    index = AttendanceIndex()

    for resp in responses:
        if resp.member_id not in index.member_names:
            index.member_order.append(resp.member_id)
            index.member_names[resp.member_id] = resp.member_name

    current = current_responses(responses)
    note_source: dict[str, AttendanceResponse] = {}
    name_source: dict[str, AttendanceResponse] = {}

    for resp in current:
        index.responses.setdefault(resp.member_id, {})[resp.target_date_id] = resp.response

        if resp.available_from or resp.available_to:
            index.time_windows.setdefault(resp.member_id, {})[resp.target_date_id] = (
                TimeWindow(
                    available_from=resp.available_from,
                    available_to=resp.available_to,
                )
            )

        if resp.member_name:
            previous = name_source.get(resp.member_id)
            if previous is None or _supersedes(resp, previous):
                index.member_names[resp.member_id] = resp.member_name
                name_source[resp.member_id] = resp

    # Every response, superseded ones included
    for resp in responses:
        if resp.note and resp.note.strip():
            previous = note_source.get(resp.member_id)
            if previous is None or _supersedes(resp, previous):
                index.notes[resp.member_id] = resp.note
                note_source[resp.member_id] = resp

    return index


def date_statistics(
    index: AttendanceIndex,
    target_dates: Sequence[TargetDate],
    member_ids: Sequence[str],
) -> list[DateStatistics]:
    """Per-date answer counts over ``member_ids`` (members who never answered count as no-response)."""
    stats: list[DateStatistics] = []
    for target_date in target_dates:
        entry = DateStatistics(target_date_id=target_date.target_date_id)
        for member_id in member_ids:
            answer = index.response_for(member_id, target_date.target_date_id)
            if answer == ResponseValue.ATTENDING:
                entry.attending += 1
            elif answer == ResponseValue.UNDECIDED:
                entry.undecided += 1
            elif answer == ResponseValue.ABSENT:
                entry.absent += 1
            else:
                entry.no_response += 1
        stats.append(entry)
    return stats
