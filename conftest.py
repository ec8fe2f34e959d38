# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Shared fixtures: an in-memory fake of the scheduling backend served through
httpx.MockTransport, seeded with one event collection.

Seed (collection col-1, event evt-1):
    td-1  2026-11-01  business day bd-1
    td-2  2026-11-02  no business day
    slots on bd-1:  s-morning (Hall, 2)  s-evening (Hall, 1)  s-prep (unclassified, 1)
    m1 Alice  hall          td-1 attending   td-2 absent
    m2 Bob    kitchen       td-1 attending   td-2 attending
    m3 Carol  hall+kitchen  td-1 attending   td-2 attending
    m4 Dave   bar           td-1 absent      td-2 attending
    m5 Eve    (none)        td-1 undecided   td-2 (no response)
    actual attendance on past business days bd-old1, bd-old2 for m1..m5
"""

import json
import re
from datetime import datetime, timezone
from types import SimpleNamespace

import httpx
import pytest

from shift_reconciler.core.dependencies import (
    get_history_repo,
    get_pending_repo,
    get_view_state_repo,
)
from shift_reconciler.core.session import SessionContext
from shift_reconciler.models.domain import (
    AttendanceCollection,
    AttendanceResponse,
    BusinessDay,
    Member,
    ShiftSlot,
)
from shift_reconciler.repositories.history_repository import HistoryRepository
from shift_reconciler.repositories.pending_action_repository import PendingActionRepository
from shift_reconciler.repositories.view_state_repository import ViewStateRepository
from shift_reconciler.services.actual_attendance_client import ActualAttendanceClient
from shift_reconciler.services.assignment_client import AssignmentClient
from shift_reconciler.services.assignment_service import AssignmentService
from shift_reconciler.services.attendance_client import AttendanceClient
from shift_reconciler.services.business_day_client import BusinessDayClient
from shift_reconciler.services.member_client import MemberClient
from shift_reconciler.services.reconciliation_service import ReconciliationService
from shift_reconciler.services.shift_slot_client import ShiftSlotClient

COLLECTION_ID = "col-1"
EVENT_ID = "evt-1"
BUSINESS_DAY_ID = "bd-1"


def _error(status: int, code: str, message: str) -> httpx.Response:
    return httpx.Response(
        status, json={"error": {"code": code, "message": message, "details": {}}}
    )


class FakeUpstream:
    """Scheduling backend double. Every call is logged in ``calls``."""

    def __init__(self) -> None:
        self.collections: dict[str, dict] = {}
        self.responses: dict[str, list[dict]] = {}
        self.business_days: dict[str, list[dict]] = {}
        self.slots: dict[str, list[dict]] = {}
        self.assignments: dict[str, dict] = {}
        self.members: list[dict] = []
        self.roles: list[dict] = []
        self.enforce_capacity = True
        self.fail_cancel: set[str] = set()
        self.fail_create: set[str] = set()
        # Deleted by another session just before our DELETE arrives
        self.removed_elsewhere: set[str] = set()
        self.actual_attendance: dict = {"target_dates": [], "member_attendances": []}
        self.fail_actual = False
        self.actual_params: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.last_headers: httpx.Headers = httpx.Headers()
        self._seq = 0
        self.transport = httpx.MockTransport(self.handle)

    # ── Helpers ──

    def find_slot(self, slot_id: str):
        for slots in self.slots.values():
            for slot in slots:
                if slot["slot_id"] == slot_id:
                    return slot
        return None

    def confirmed(self, slot_id: str) -> list[dict]:
        return [
            a for a in self.assignments.values()
            if a["slot_id"] == slot_id and a["assignment_status"] == "confirmed"
        ]

    def add_assignment(self, slot_id: str, member_id: str, status: str = "confirmed") -> dict:
        self._seq += 1
        assignment = {
            "assignment_id": f"a-{self._seq}",
            "slot_id": slot_id,
            "member_id": member_id,
            "member_display_name": self._member_name(member_id),
            "assignment_status": status,
            "note": None,
            "assigned_at": datetime.now(timezone.utc).isoformat(),
            "cancelled_at": None,
        }
        self.assignments[assignment["assignment_id"]] = assignment
        return assignment

    def mutations(self) -> list[tuple[str, str]]:
        return [c for c in self.calls if c[0] in ("POST", "DELETE")]

    def _member_name(self, member_id: str):
        return next(
            (m["display_name"] for m in self.members if m["member_id"] == member_id),
            None,
        )

    # ── Routing ──

    def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path
        self.calls.append((method, path))
        self.last_headers = request.headers

        m = re.fullmatch(r"/api/v1/attendance/collections/([^/]+)", path)
        if m and method == "GET":
            collection = self.collections.get(m.group(1))
            if collection is None:
                return _error(404, "ERR_NOT_FOUND", "collection not found")
            return httpx.Response(200, json={"data": collection})

        m = re.fullmatch(r"/api/v1/attendance/collections/([^/]+)/responses", path)
        if m and method == "GET":
            if m.group(1) not in self.collections:
                return _error(404, "ERR_NOT_FOUND", "collection not found")
            return httpx.Response(
                200, json={"data": {"responses": self.responses.get(m.group(1), [])}}
            )

        m = re.fullmatch(r"/api/v1/events/([^/]+)/business-days", path)
        if m and method == "GET":
            if m.group(1) not in self.business_days:
                return _error(404, "ERR_NOT_FOUND", "event not found")
            return httpx.Response(
                200, json={"data": {"business_days": self.business_days[m.group(1)]}}
            )

        m = re.fullmatch(r"/api/v1/business-days/([^/]+)/shift-slots", path)
        if m and method == "GET":
            if m.group(1) not in self.slots:
                return _error(404, "ERR_NOT_FOUND", "business day not found")
            return httpx.Response(200, json={"data": {"shift_slots": self.slots[m.group(1)]}})

        if path == "/api/v1/shift-assignments" and method == "GET":
            return self._list_assignments(request)
        if path == "/api/v1/shift-assignments" and method == "POST":
            return self._create_assignment(json.loads(request.content))

        m = re.fullmatch(r"/api/v1/shift-assignments/([^/]+)", path)
        if m and method == "DELETE":
            return self._cancel_assignment(m.group(1))

        if path == "/api/v1/members" and method == "GET":
            members = self.members
            if request.url.params.get("is_active") == "true":
                members = [mb for mb in members if mb.get("is_active", True)]
            return httpx.Response(200, json={"data": {"members": members}})

        if path == "/api/v1/roles" and method == "GET":
            return httpx.Response(200, json={"data": {"roles": self.roles}})

        if path == "/api/v1/actual-attendance" and method == "GET":
            self.actual_params = dict(request.url.params)
            if self.fail_actual:
                return _error(500, "ERR_INTERNAL", "Failed to get actual attendance")
            return httpx.Response(200, json={"data": self.actual_attendance})

        return _error(404, "ERR_NOT_FOUND", f"no route for {method} {path}")

    def _list_assignments(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        result = list(self.assignments.values())
        if params.get("slot_id"):
            result = [a for a in result if a["slot_id"] == params["slot_id"]]
        if params.get("member_id"):
            result = [a for a in result if a["member_id"] == params["member_id"]]
        if params.get("assignment_status"):
            result = [a for a in result if a["assignment_status"] == params["assignment_status"]]
        return httpx.Response(200, json={"data": {"assignments": result}})

    def _create_assignment(self, body: dict) -> httpx.Response:
        slot = self.find_slot(body.get("slot_id"))
        if slot is None:
            return _error(404, "ERR_NOT_FOUND", "slot not found")
        member_id = body.get("member_id")
        if member_id in self.fail_create:
            return _error(500, "ERR_INTERNAL", "create failed")
        confirmed = self.confirmed(slot["slot_id"])
        if self.enforce_capacity and len(confirmed) >= slot["required_count"]:
            return _error(409, "ERR_SLOT_FULL", "slot is full")
        assignment = self.add_assignment(slot["slot_id"], member_id)
        assignment["note"] = body.get("note")
        return httpx.Response(201, json={"data": assignment})

    def _cancel_assignment(self, assignment_id: str) -> httpx.Response:
        # Cancel is a hard delete; nothing deleted answers 404
        if assignment_id in self.removed_elsewhere:
            self.assignments.pop(assignment_id, None)
        if assignment_id not in self.assignments:
            return _error(404, "ERR_NOT_FOUND", "Shift assignment not found")
        if assignment_id in self.fail_cancel:
            return _error(500, "ERR_INTERNAL", "Failed to delete shift assignment")
        del self.assignments[assignment_id]
        return httpx.Response(204)


def _response(rid, member_id, name, date_id, answer, at, note="", window=(None, None)):
    return {
        "response_id": rid,
        "member_id": member_id,
        "member_name": name,
        "target_date_id": date_id,
        "response": answer,
        "note": note,
        "available_from": window[0],
        "available_to": window[1],
        "responded_at": at,
    }


def seed(fake: FakeUpstream) -> FakeUpstream:
    fake.collections[COLLECTION_ID] = {
        "collection_id": COLLECTION_ID,
        "title": "November festival",
        "target_type": "event",
        "target_id": EVENT_ID,
        "target_dates": [
            {"target_date_id": "td-2", "target_date": "2026-11-02T00:00:00Z", "display_order": 1},
            {"target_date_id": "td-1", "target_date": "2026-11-01", "display_order": 0},
        ],
        "role_ids": [],
        "group_ids": [],
        "status": "open",
    }
    t1 = "2026-10-01T09:00:00Z"
    t2 = "2026-10-02T09:00:00Z"
    fake.responses[COLLECTION_ID] = [
        _response("r-01", "m1", "Alice", "td-1", "attending", t1, window=("10:00", "18:00")),
        _response("r-02", "m1", "Alice", "td-2", "absent", t1),
        _response("r-03", "m2", "Bob", "td-1", "attending", t1),
        _response("r-04", "m2", "Bob", "td-2", "attending", t1, note="Late on the 2nd"),
        _response("r-05", "m3", "Carol", "td-1", "attending", t1),
        _response("r-06", "m3", "Carol", "td-2", "attending", t1),
        _response("r-07", "m4", "Dave", "td-1", "absent", t1),
        _response("r-08", "m4", "Dave", "td-2", "attending", t1),
        _response("r-09", "m5", "Eve", "td-1", "attending", t1),
        # Later answer supersedes the first one
        _response("r-10", "m5", "Eve", "td-1", "undecided", t2, note="Maybe"),
    ]
    fake.business_days[EVENT_ID] = [
        {"business_day_id": BUSINESS_DAY_ID, "event_id": EVENT_ID, "target_date": "2026-11-01"},
    ]
    fake.slots[BUSINESS_DAY_ID] = [
        {
            "slot_id": "s-evening", "business_day_id": BUSINESS_DAY_ID,
            "slot_name": "Evening", "instance_id": "inst-hall", "instance_name": "Hall",
            "required_count": 1, "priority": 2,
        },
        {
            "slot_id": "s-prep", "business_day_id": BUSINESS_DAY_ID,
            "slot_name": "Prep", "instance_id": None, "instance_name": None,
            "required_count": 1, "priority": 0,
        },
        {
            "slot_id": "s-morning", "business_day_id": BUSINESS_DAY_ID,
            "slot_name": "Morning", "instance_id": "inst-hall", "instance_name": "Hall",
            "required_count": 2, "priority": 1,
        },
    ]
    fake.members = [
        {"member_id": "m1", "display_name": "Alice", "role_ids": ["r-hall"]},
        {"member_id": "m2", "display_name": "Bob", "role_ids": ["r-kitchen"]},
        {"member_id": "m3", "display_name": "Carol", "role_ids": ["r-hall", "r-kitchen"]},
        {"member_id": "m4", "display_name": "Dave", "role_ids": ["r-bar"]},
        {"member_id": "m5", "display_name": "Eve", "role_ids": None},
        {"member_id": "m6", "display_name": "Frank", "role_ids": ["r-hall"], "is_active": False},
    ]
    fake.roles = [
        {"role_id": "r-kitchen", "name": "Kitchen", "display_order": 2},
        {"role_id": "r-hall", "name": "Hall", "display_order": 1},
        {"role_id": "r-bar", "name": "Bar", "display_order": 3},
    ]
    fake.actual_attendance = {
        "target_dates": [
            {"target_date_id": "bd-old2", "target_date": "2026-10-08T00:00:00Z", "display_order": 2},
            {"target_date_id": "bd-old1", "target_date": "2026-10-01T00:00:00Z", "display_order": 1},
        ],
        "member_attendances": [
            {"member_id": "m1", "member_name": "Alice",
             "attendance_map": {"bd-old1": "attended", "bd-old2": "absent"}},
            {"member_id": "m2", "member_name": "Bob",
             "attendance_map": {"bd-old1": "absent", "bd-old2": "attended"}},
            {"member_id": "m3", "member_name": "Carol",
             "attendance_map": {"bd-old1": "attended"}},
            {"member_id": "m4", "member_name": "Dave",
             "attendance_map": {"bd-old1": "attended", "bd-old2": "attended"}},
            {"member_id": "m5", "member_name": "Eve", "attendance_map": {}},
        ],
    }
    return fake


# ── Fixtures ──

@pytest.fixture
def upstream():
    return seed(FakeUpstream())


@pytest.fixture
def session():
    return SessionContext(tenant_id="tenant-1", member_id="admin-1", request_id="req-test")


@pytest.fixture
def history_repo():
    return HistoryRepository()


@pytest.fixture
def pending_repo():
    return PendingActionRepository()


@pytest.fixture
def view_state_repo():
    return ViewStateRepository()


@pytest.fixture
def reconciliation_service(upstream, session, view_state_repo):
    transport = upstream.transport
    return ReconciliationService(
        attendance_client=AttendanceClient(session, transport=transport),
        business_day_client=BusinessDayClient(session, transport=transport),
        shift_slot_client=ShiftSlotClient(session, transport=transport),
        assignment_client=AssignmentClient(session, transport=transport),
        member_client=MemberClient(session, transport=transport),
        actual_attendance_client=ActualAttendanceClient(session, transport=transport),
        view_state_repo=view_state_repo,
    )


@pytest.fixture
def assignment_service(upstream, session, reconciliation_service, history_repo, pending_repo):
    return AssignmentService(
        assignment_client=AssignmentClient(session, transport=upstream.transport),
        reconciliation_service=reconciliation_service,
        history_repo=history_repo,
        pending_repo=pending_repo,
    )


@pytest.fixture
def reset_singletons():
    """Clear the process-wide repositories used by the FastAPI app."""
    get_history_repo().clear()
    get_pending_repo().clear()
    get_view_state_repo().clear()
    yield


@pytest.fixture
def records(upstream):
    """The seed as validated domain records, for the pure reducer tests."""
    return SimpleNamespace(
        collection=AttendanceCollection.model_validate(upstream.collections[COLLECTION_ID]),
        responses=[
            AttendanceResponse.model_validate(r) for r in upstream.responses[COLLECTION_ID]
        ],
        business_days=[BusinessDay.model_validate(b) for b in upstream.business_days[EVENT_ID]],
        slots=[ShiftSlot.model_validate(s) for s in upstream.slots[BUSINESS_DAY_ID]],
        members=[Member.model_validate(m) for m in upstream.members if m.get("is_active", True)],
    )
