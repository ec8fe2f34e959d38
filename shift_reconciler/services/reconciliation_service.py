# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Reconciliation loader, the read half of the command layer.
Fetches everything from the collaborators, then hands typed records to the
pure reducer. Every call is a full re-fetch; nothing is patched incrementally.
"""

from typing import Optional, Sequence

from shift_reconciler.core.config import settings
from shift_reconciler.core.errors import (
    NotFoundError,
    ReconciliationError,
    ValidationError,
)
from shift_reconciler.core.logging import get_logger
from shift_reconciler.metrics.prometheus import BOARDS_BUILT
from shift_reconciler.models.domain import (
    AssignmentStatus,
    AttendanceCollection,
    AttendanceResponse,
    BusinessDay,
    Member,
    ShiftAssignment,
    ShiftSlot,
    TargetDate,
)
from shift_reconciler.models.reconciliation import (
    AttendanceHistory,
    AttendanceMatrix,
    PoolMember,
    ReconciliationBoard,
    SortKey,
    SortState,
)
from shift_reconciler.repositories.view_state_repository import (
    PICKER_VIEW,
    REVIEW_VIEW,
    ViewStateRepository,
)
from shift_reconciler.services.actual_attendance_client import ActualAttendanceClient
from shift_reconciler.services.assignment_client import AssignmentClient
from shift_reconciler.services.attendance import aggregate_responses
from shift_reconciler.services.attendance_client import AttendanceClient
from shift_reconciler.services.attendance_history import build_history_rows
from shift_reconciler.services.board import build_board, match_business_day
from shift_reconciler.services.business_day_client import BusinessDayClient
from shift_reconciler.services.member_client import MemberClient
from shift_reconciler.services.shift_slot_client import ShiftSlotClient
from shift_reconciler.services.shift_text import MemberSeparator, render_shift_text
from shift_reconciler.services.sorting import arrange_members, build_matrix

logger = get_logger(__name__)


class ReconciliationService:
    """Loads boards, matrices and picker lists for one collection."""

    def __init__(
        self,
        attendance_client: AttendanceClient,
        business_day_client: BusinessDayClient,
        shift_slot_client: ShiftSlotClient,
        assignment_client: AssignmentClient,
        member_client: MemberClient,
        actual_attendance_client: ActualAttendanceClient,
        view_state_repo: ViewStateRepository,
    ) -> None:
        self._attendance = attendance_client
        self._business_days = business_day_client
        self._slots = shift_slot_client
        self._assignments = assignment_client
        self._members = member_client
        self._actual = actual_attendance_client
        self._view_state = view_state_repo

    # ── Board ──

    def load_board(self, collection_id: str, target_date_id: str) -> ReconciliationBoard:
        """
        Rebuild the board of one target date from scratch.
        A missing business day or slot set degrades to an empty board with a
        notice; any other collaborator failure propagates.
        """
        _, _, board = self._snapshot(collection_id, target_date_id)
        return board

    def _snapshot(
        self, collection_id: str, target_date_id: str
    ) -> tuple[AttendanceCollection, list[AttendanceResponse], ReconciliationBoard]:
        collection = self._attendance.get_collection(collection_id)
        target_date = self._require_target_date(collection, target_date_id)
        if collection.target_type != "event" or not collection.target_id:
            raise ValidationError(
                f"Collection '{collection_id}' is not linked to an event; "
                "shift adjustment is unavailable",
                code="ERR_NOT_EVENT_COLLECTION",
            )

        responses = self._attendance.get_responses(collection_id)
        business_day, slots, assignments, notices = self._load_day(
            collection.target_id, target_date
        )

        board = build_board(
            collection_id=collection_id,
            target_date=target_date,
            responses=responses,
            business_day=business_day,
            slots=slots,
            assignments=assignments,
            notices=notices,
        )
        BOARDS_BUILT.inc()
        if board.pool.double_booked:
            logger.warning(
                "Members hold several confirmed assignments on %s: %s",
                target_date.target_date.isoformat(),
                ", ".join(board.pool.double_booked),
            )
        return collection, responses, board

    def _load_day(
        self, event_id: str, target_date: TargetDate
    ) -> tuple[Optional[BusinessDay], list[ShiftSlot], list[ShiftAssignment], list[str]]:
        day_label = target_date.target_date.isoformat()
        try:
            business_days = self._business_days.list_business_days(event_id)
        except NotFoundError as exc:
            logger.info("No business days for event=%s: %s", event_id, exc.message)
            return None, [], [], [f"No business days found for event '{event_id}'"]

        business_day = match_business_day(target_date, business_days)
        if business_day is None:
            return None, [], [], [f"No business day is scheduled on {day_label}"]

        try:
            slots = self._slots.list_slots(business_day.business_day_id)
            assignments: list[ShiftAssignment] = []
            for slot in slots:
                assignments.extend(
                    self._assignments.list_assignments(
                        slot_id=slot.slot_id, status=AssignmentStatus.CONFIRMED
                    )
                )
        except NotFoundError as exc:
            logger.info(
                "Slot set missing for business_day=%s: %s",
                business_day.business_day_id, exc.message,
            )
            return business_day, [], [], [f"No shift slots found for {day_label}"]

        return business_day, slots, assignments, []

    @staticmethod
    def _require_target_date(
        collection: AttendanceCollection, target_date_id: str
    ) -> TargetDate:
        target_date = collection.find_target_date(target_date_id)
        if target_date is None:
            raise ValidationError(
                f"Target date '{target_date_id}' is not part of collection "
                f"'{collection.collection_id}'",
                code="ERR_DATE_MISMATCH",
            )
        return target_date

    def shift_text(
        self,
        collection_id: str,
        target_date_id: str,
        separator: MemberSeparator = MemberSeparator.NEWLINE,
    ) -> str:
        board = self.load_board(collection_id, target_date_id)
        return render_shift_text(board.groups, separator)

    # ── Picker ──

    def load_picker(
        self,
        collection_id: str,
        target_date_id: str,
        role_ids: Optional[Sequence[str]] = None,
    ) -> list[PoolMember]:
        """Pool members of the date, role-filtered and sorted like the review table."""
        collection, responses, board = self._snapshot(collection_id, target_date_id)
        index = aggregate_responses(responses)

        if role_ids is None:
            role_ids = self._view_state.get_role_filter(collection_id, PICKER_VIEW)
        role_ids = list(dict.fromkeys(role_ids))
        state = self._view_state.get_sort(collection_id, PICKER_VIEW)

        known = {m.member_id: m for m in self._members.list_active_members()}
        by_id = {p.member_id: p for p in board.pool.pool}
        # Attendees missing from the active roster still show up, without roles
        candidates = [
            known.get(p.member_id)
            or Member(member_id=p.member_id, display_name=p.member_name or p.member_id)
            for p in board.pool.pool
        ]
        date_ids = [d.target_date_id for d in collection.sorted_target_dates()]
        ordered = arrange_members(candidates, index, state, role_ids, date_ids)
        return [by_id[m.member_id] for m in ordered]

    def load_attendance_history(
        self,
        collection_id: str,
        target_date_id: str,
        role_ids: Optional[Sequence[str]] = None,
        include_future: bool = False,
    ) -> AttendanceHistory:
        """
        Confirmed shifts on recent business days of the event, for every member
        attending the date. Shares the picker's role filter. When the history
        cannot be fetched the result is empty with a notice.
        """
        collection, _, board = self._snapshot(collection_id, target_date_id)
        if role_ids is None:
            role_ids = self._view_state.get_role_filter(collection_id, PICKER_VIEW)
        role_ids = list(dict.fromkeys(role_ids))

        history = AttendanceHistory(
            collection_id=collection_id,
            target_date_id=target_date_id,
            include_future=include_future,
            role_filter=role_ids,
        )
        limit = (
            settings.ACTUAL_ATTENDANCE_FUTURE_LIMIT
            if include_future
            else settings.ACTUAL_ATTENDANCE_LIMIT
        )
        try:
            actual = self._actual.get_recent(collection.target_id, limit, include_future)
        except ReconciliationError as exc:
            logger.warning(
                "Actual attendance unavailable for event=%s: %s",
                collection.target_id, exc.message,
                extra={"error_code": exc.code},
            )
            history.notices.append(f"Attendance history could not be loaded: {exc.message}")
            return history

        members = (
            {m.member_id: m for m in self._members.list_active_members()}
            if role_ids
            else {}
        )
        history.target_dates = sorted(actual.target_dates, key=lambda d: d.display_order)
        history.rows = build_history_rows(
            actual,
            [m.member_id for m in board.pool.attending],
            members,
            role_ids,
        )
        return history

    # ── Matrix ──

    def load_matrix(self, collection_id: str) -> AttendanceMatrix:
        collection = self._attendance.get_collection(collection_id)
        responses = self._attendance.get_responses(collection_id)
        members = self._members.list_active_members()
        return build_matrix(
            collection,
            members,
            responses,
            self._view_state.get_sort(collection_id, REVIEW_VIEW),
            self._view_state.get_role_filter(collection_id, REVIEW_VIEW),
        )

    def toggle_sort(
        self,
        collection_id: str,
        key: SortKey,
        target_date_id: Optional[str] = None,
        view: str = REVIEW_VIEW,
    ) -> SortState:
        """Apply a header click to the remembered sort state."""
        if key == SortKey.DATE_ATTENDING and target_date_id:
            collection = self._attendance.get_collection(collection_id)
            self._require_target_date(collection, target_date_id)
        state = self._view_state.get_sort(collection_id, view).toggle(key, target_date_id)
        self._view_state.save_sort(collection_id, state, view)
        return state

    def set_role_filter(
        self, collection_id: str, role_ids: Sequence[str], view: str = REVIEW_VIEW
    ) -> list[str]:
        """Remember the role filter of a view. Unknown role ids are rejected."""
        role_ids = list(dict.fromkeys(role_ids))
        if role_ids:
            known = {r.role_id for r in self._members.list_roles()}
            unknown = [rid for rid in role_ids if rid not in known]
            if unknown:
                raise ValidationError(
                    "Unknown role in filter",
                    code="ERR_UNKNOWN_ROLE",
                    details={"role_ids": unknown},
                )
        self._view_state.save_role_filter(collection_id, role_ids, view)
        return self._view_state.get_role_filter(collection_id, view)
