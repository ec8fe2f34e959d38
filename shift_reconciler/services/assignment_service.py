# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Assignment mutations, the write half of the command layer.

Every mutation is checked locally against the caller's board first, then sent
to the Assignment Service, which holds the authoritative capacity check.
Nothing is changed locally before the service confirms; after a success the
board is rebuilt from a full re-fetch.

    Unassigned ─► Confirmed ─► Cancelled   (terminal)
"""

from contextlib import contextmanager
from typing import Optional, Sequence

from shift_reconciler.core.errors import (
    ConflictError,
    NotFoundError,
    ReconciliationError,
    ValidationError,
)
from shift_reconciler.core.logging import get_logger
from shift_reconciler.metrics.prometheus import (
    ASSIGNMENT_CONFLICTS,
    ASSIGNMENTS_CANCELLED,
    ASSIGNMENTS_CREATED,
    BULK_ITEM_FAILURES,
)
from shift_reconciler.models.domain import AssignmentStatus
from shift_reconciler.models.reconciliation import (
    AssignmentResult,
    BulkItemFailure,
    BulkReplaceResult,
    ReconciliationBoard,
    SlotCapacity,
)
from shift_reconciler.repositories.history_repository import HistoryRepository
from shift_reconciler.repositories.pending_action_repository import (
    PendingActionRepository,
)
from shift_reconciler.services.assignment_client import AssignmentClient
from shift_reconciler.services.reconciliation_service import ReconciliationService

logger = get_logger(__name__)


class AssignmentService:
    """Business logic for assign, unassign and roster replacement."""

    def __init__(
        self,
        assignment_client: AssignmentClient,
        reconciliation_service: ReconciliationService,
        history_repo: HistoryRepository,
        pending_repo: PendingActionRepository,
    ) -> None:
        self._assignments = assignment_client
        self._reconciliation = reconciliation_service
        self._history = history_repo
        self._pending = pending_repo

    # ── Commands ──

    def assign(
        self,
        board: ReconciliationBoard,
        slot_id: str,
        member_id: str,
        note: Optional[str] = None,
    ) -> AssignmentResult:
        """
        Confirm ``member_id`` on ``slot_id``.
        Raises ValidationError before any call when the member is not in the
        pool or the slot is full, ConflictError when the service reports the
        slot filled up meanwhile. Neither is retried.
        """
        if not member_id:
            raise ValidationError("Select a member to assign", code="ERR_EMPTY_SELECTION")
        capacity = self._require_slot(board, slot_id)
        self._require_in_pool(board, member_id)
        if capacity.is_full:
            raise ValidationError(
                f"Slot '{capacity.label}' is full "
                f"({capacity.confirmed_count}/{capacity.slot.required_count})",
                code="ERR_SLOT_FULL",
            )

        with self._pending_action(f"slot:{slot_id}"):
            try:
                assignment = self._assignments.create(slot_id, member_id, note)
            except ConflictError as exc:
                ASSIGNMENT_CONFLICTS.labels(operation="assign").inc()
                self._history.record_event(
                    "assignment_conflict",
                    board.collection_id,
                    {"slot_id": slot_id, "member_id": member_id, "message": exc.message},
                )
                logger.warning(
                    "Capacity conflict: slot=%s, member=%s: %s",
                    slot_id, member_id, exc.message,
                )
                raise

        ASSIGNMENTS_CREATED.labels(operation="assign").inc()
        self._history.record_event(
            "assignment_created",
            board.collection_id,
            {
                "assignment_id": assignment.assignment_id,
                "slot_id": slot_id,
                "member_id": member_id,
            },
        )
        logger.info(
            "Assignment confirmed: slot=%s, member=%s, assignment=%s",
            slot_id, member_id, assignment.assignment_id,
        )
        return AssignmentResult(assignment=assignment, board=self._refresh(board))

    def unassign(self, board: ReconciliationBoard, assignment_id: str) -> AssignmentResult:
        """
        Cancel an assignment. The service deletes it outright; when an
        assignment shown on the board is already gone the cancel still succeeds.
        """
        if not assignment_id:
            raise ValidationError("Select an assignment to cancel", code="ERR_EMPTY_SELECTION")

        record = board.find_assignment(assignment_id)
        key = f"slot:{record.slot_id}" if record is not None else f"assignment:{assignment_id}"

        already_cancelled = False
        with self._pending_action(key):
            try:
                self._assignments.cancel(assignment_id)
            except NotFoundError as exc:
                if record is None:
                    raise
                # Another session removed it after our board was loaded
                already_cancelled = True
                logger.info(
                    "Assignment already cancelled: assignment=%s: %s",
                    assignment_id, exc.message,
                )

        if not already_cancelled:
            ASSIGNMENTS_CANCELLED.labels(operation="unassign").inc()
        self._history.record_event(
            "assignment_cancelled",
            board.collection_id,
            {
                "assignment_id": assignment_id,
                "slot_id": record.slot_id if record else None,
                "member_id": record.member_id if record else None,
                "already_cancelled": already_cancelled,
            },
        )
        logger.info("Assignment cancelled: assignment=%s", assignment_id)
        return AssignmentResult(assignment=record, board=self._refresh(board))

    def bulk_replace(
        self,
        board: ReconciliationBoard,
        slot_id: str,
        desired_member_ids: Sequence[str],
    ) -> BulkReplaceResult:
        """
        Make the slot's roster equal ``desired_member_ids``, one call at a time.

        Cancels first, then creates, continuing past individual failures. The
        sequence is NOT atomic: when some calls fail the slot can end up over
        or under the desired roster. Every failure is listed in the result.
        """
        capacity = self._require_slot(board, slot_id)
        desired = list(dict.fromkeys(m for m in desired_member_ids if m))
        if len(desired) > capacity.slot.required_count:
            raise ValidationError(
                f"{len(desired)} members selected but slot '{capacity.label}' "
                f"only takes {capacity.slot.required_count}",
                code="ERR_CAPACITY_EXCEEDED",
            )
        on_slot = {a.member_id for a in capacity.assignments}
        unavailable = [m for m in desired if m not in on_slot and not board.pool.contains(m)]
        if unavailable:
            raise ValidationError(
                "Some selected members are not available on this date",
                code="ERR_NOT_IN_POOL",
                details={"member_ids": unavailable},
            )

        result = BulkReplaceResult(slot_id=slot_id)
        with self._pending_action(f"slot:{slot_id}"):
            current = self._assignments.list_assignments(
                slot_id=slot_id, status=AssignmentStatus.CONFIRMED
            )

            for assignment in current:
                if assignment.member_id in desired:
                    continue
                try:
                    self._assignments.cancel(assignment.assignment_id)
                except NotFoundError:
                    # Removed by another session since the listing
                    result.cancelled.append(assignment.assignment_id)
                except ReconciliationError as exc:
                    self._record_failure(result, "cancel", assignment.member_id, exc,
                                         assignment.assignment_id)
                else:
                    ASSIGNMENTS_CANCELLED.labels(operation="bulk_replace").inc()
                    result.cancelled.append(assignment.assignment_id)

            confirmed_members = {a.member_id for a in current}
            for member_id in desired:
                if member_id in confirmed_members:
                    continue
                try:
                    created = self._assignments.create(slot_id, member_id)
                except ReconciliationError as exc:
                    if isinstance(exc, ConflictError):
                        ASSIGNMENT_CONFLICTS.labels(operation="bulk_replace").inc()
                    self._record_failure(result, "create", member_id, exc)
                else:
                    ASSIGNMENTS_CREATED.labels(operation="bulk_replace").inc()
                    result.created.append(created)

        self._history.record_event(
            "bulk_replace",
            board.collection_id,
            {
                "slot_id": slot_id,
                "desired_member_ids": desired,
                "cancelled": len(result.cancelled),
                "created": len(result.created),
                "failures": len(result.failures),
            },
        )
        logger.info(
            "Roster replaced: slot=%s, cancelled=%d, created=%d, failures=%d",
            slot_id, len(result.cancelled), len(result.created), len(result.failures),
        )
        result.board = self._refresh(board)
        return result

    # ── Internal ──

    @contextmanager
    def _pending_action(self, key: str):
        if not self._pending.acquire(key):
            raise ValidationError(
                "Another change for this item is still in progress",
                code="ERR_ACTION_PENDING",
            )
        try:
            yield
        finally:
            self._pending.release(key)

    @staticmethod
    def _require_slot(board: ReconciliationBoard, slot_id: str) -> SlotCapacity:
        capacity = board.find_slot(slot_id)
        if capacity is None:
            raise ValidationError(
                f"Slot '{slot_id}' does not belong to "
                f"{board.target_date.target_date.isoformat()}",
                code="ERR_DATE_MISMATCH",
            )
        return capacity

    @staticmethod
    def _require_in_pool(board: ReconciliationBoard, member_id: str) -> None:
        if board.pool.contains(member_id):
            return
        label = board.pool.assigned_labels.get(member_id)
        if label:
            message = f"Member '{member_id}' is already assigned to {label} on this date"
        else:
            message = f"Member '{member_id}' is not attending on this date"
        raise ValidationError(message, code="ERR_NOT_IN_POOL")

    def _record_failure(
        self,
        result: BulkReplaceResult,
        operation: str,
        member_id: str,
        exc: ReconciliationError,
        assignment_id: Optional[str] = None,
    ) -> None:
        BULK_ITEM_FAILURES.labels(operation=operation).inc()
        logger.warning(
            "Roster %s failed: slot=%s, member=%s: %s",
            operation, result.slot_id, member_id, exc.message,
            extra={"error_code": exc.code},
        )
        result.failures.append(
            BulkItemFailure(
                operation=operation,
                member_id=member_id,
                assignment_id=assignment_id,
                code=exc.code,
                message=exc.message,
            )
        )

    def _refresh(self, board: ReconciliationBoard) -> ReconciliationBoard:
        """Full re-fetch. If it fails the stale board is returned with a notice, never a patched one."""
        try:
            return self._reconciliation.load_board(
                board.collection_id, board.target_date.target_date_id
            )
        except ReconciliationError as exc:
            logger.warning("Board refresh failed after mutation: %s", exc.message)
            return board.model_copy(
                update={
                    "notices": board.notices
                    + [f"The change was saved but the board could not be refreshed: {exc.message}"]
                }
            )
