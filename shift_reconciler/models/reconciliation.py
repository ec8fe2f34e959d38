# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Derived read models: outputs of the pure reconciliation reducer.
"""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from shift_reconciler.core.errors import ValidationError
from shift_reconciler.models.domain import (
    ActualAttendanceDate,
    ActualAttendanceStatus,
    ResponseValue,
    ShiftAssignment,
    ShiftSlot,
    TargetDate,
)


# ── Attendance ──

class TimeWindow(BaseModel):
    available_from: Optional[str] = None
    available_to: Optional[str] = None


class AttendanceIndex(BaseModel):
    """Lookup tables keyed by member id, then target date id."""

    responses: dict[str, dict[str, ResponseValue]] = Field(default_factory=dict)
    time_windows: dict[str, dict[str, TimeWindow]] = Field(default_factory=dict)
    notes: dict[str, str] = Field(default_factory=dict)
    member_names: dict[str, str] = Field(default_factory=dict)
    member_order: list[str] = Field(default_factory=list)

    def response_for(self, member_id: str, target_date_id: str) -> Optional[ResponseValue]:
        return self.responses.get(member_id, {}).get(target_date_id)

    def window_for(self, member_id: str, target_date_id: str) -> Optional[TimeWindow]:
        return self.time_windows.get(member_id, {}).get(target_date_id)

    def attending_count(
        self, member_id: str, target_date_ids: Optional[Iterable[str]] = None
    ) -> int:
        answers = self.responses.get(member_id, {})
        if target_date_ids is None:
            target_date_ids = answers.keys()
        return sum(
            1 for d in target_date_ids if answers.get(d) == ResponseValue.ATTENDING
        )


class DateStatistics(BaseModel):
    target_date_id: str
    attending: int = 0
    undecided: int = 0
    absent: int = 0
    no_response: int = 0


# ── Capacity ──

class SlotCapacity(BaseModel):
    slot: ShiftSlot
    instance_name: str
    assignments: list[ShiftAssignment] = Field(default_factory=list)
    confirmed_count: int = 0
    remaining: int = 0
    is_full: bool = False

    @property
    def label(self) -> str:
        return f"{self.instance_name}-{self.slot.slot_name}"


class InstanceGroup(BaseModel):
    instance_id: Optional[str] = None
    instance_name: str
    is_unclassified: bool = False
    slots: list[SlotCapacity] = Field(default_factory=list)


# ── Pool ──

class PoolMember(BaseModel):
    member_id: str
    member_name: str = ""
    available_from: Optional[str] = None
    available_to: Optional[str] = None


class AvailabilityPool(BaseModel):
    target_date_id: str
    attending: list[PoolMember] = Field(default_factory=list)
    pool: list[PoolMember] = Field(default_factory=list)
    assigned_labels: dict[str, str] = Field(default_factory=dict)
    double_booked: list[str] = Field(default_factory=list)

    def contains(self, member_id: str) -> bool:
        return any(m.member_id == member_id for m in self.pool)

    def member_ids(self) -> list[str]:
        return [m.member_id for m in self.pool]


class ReconciliationBoard(BaseModel):
    """Everything the shift adjustment view needs for one target date."""

    collection_id: str
    target_date: TargetDate
    business_day_id: Optional[str] = None
    groups: list[InstanceGroup] = Field(default_factory=list)
    pool: AvailabilityPool
    notices: list[str] = Field(default_factory=list)

    def slots(self) -> list[SlotCapacity]:
        return [s for g in self.groups for s in g.slots]

    def find_slot(self, slot_id: str) -> Optional[SlotCapacity]:
        return next((s for s in self.slots() if s.slot.slot_id == slot_id), None)

    def find_assignment(self, assignment_id: str) -> Optional[ShiftAssignment]:
        for capacity in self.slots():
            for assignment in capacity.assignments:
                if assignment.assignment_id == assignment_id:
                    return assignment
        return None


# ── Sorting ──

class SortKey(str, Enum):
    NAME = "name"
    ATTENDING_COUNT = "attending_count"
    DATE_ATTENDING = "date_attending"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortState(BaseModel):
    key: SortKey = SortKey.NAME
    direction: SortDirection = SortDirection.ASC
    target_date_id: Optional[str] = None

    def flipped(self) -> "SortState":
        direction = (
            SortDirection.DESC if self.direction == SortDirection.ASC else SortDirection.ASC
        )
        return self.model_copy(update={"direction": direction})

    def toggle(self, key: SortKey, target_date_id: Optional[str] = None) -> "SortState":
        """Return the state after the user picks ``key`` (header click)."""
        key = SortKey(key)
        if key == SortKey.DATE_ATTENDING:
            if not target_date_id:
                raise ValidationError("date_attending sort requires a target date")
            if self.key == SortKey.DATE_ATTENDING and self.target_date_id == target_date_id:
                return self.flipped()
            return SortState(key=key, target_date_id=target_date_id)
        if key == self.key:
            return self.flipped()
        return SortState(key=key)


class MatrixCell(BaseModel):
    target_date_id: str
    response: Optional[ResponseValue] = None
    available_from: Optional[str] = None
    available_to: Optional[str] = None


class MatrixRow(BaseModel):
    member_id: str
    display_name: str
    role_ids: list[str] = Field(default_factory=list)
    role_group: Optional[int] = None
    attending_count: int = 0
    note: Optional[str] = None
    cells: list[MatrixCell] = Field(default_factory=list)


class AttendanceMatrix(BaseModel):
    collection_id: str
    target_dates: list[TargetDate] = Field(default_factory=list)
    sort: SortState
    role_filter: list[str] = Field(default_factory=list)
    rows: list[MatrixRow] = Field(default_factory=list)
    statistics: list[DateStatistics] = Field(default_factory=list)
    respondent_count: int = 0
    member_count: int = 0


# ── Attendance history ──

class AttendanceHistoryRow(BaseModel):
    member_id: str
    member_name: str = ""
    attended_count: int = 0
    statuses: dict[str, ActualAttendanceStatus] = Field(default_factory=dict)


class AttendanceHistory(BaseModel):
    """Past shifts of the members attending one target date, shown beside the pool."""

    collection_id: str
    target_date_id: str
    include_future: bool = False
    role_filter: list[str] = Field(default_factory=list)
    target_dates: list[ActualAttendanceDate] = Field(default_factory=list)
    rows: list[AttendanceHistoryRow] = Field(default_factory=list)
    notices: list[str] = Field(default_factory=list)


# ── Mutations ──

class AssignmentResult(BaseModel):
    assignment: Optional[ShiftAssignment] = None
    board: ReconciliationBoard


class BulkItemFailure(BaseModel):
    operation: str
    member_id: str
    assignment_id: Optional[str] = None
    code: str
    message: str


class BulkReplaceResult(BaseModel):
    """Outcome of a best-effort, non-atomic roster replacement."""

    slot_id: str
    cancelled: list[str] = Field(default_factory=list)
    created: list[ShiftAssignment] = Field(default_factory=list)
    failures: list[BulkItemFailure] = Field(default_factory=list)
    board: Optional[ReconciliationBoard] = None

    @property
    def succeeded(self) -> bool:
        return not self.failures
