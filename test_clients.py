# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Tests for the collaborator clients: envelope unwrapping, error
classification, boundary validation and session header propagation.
"""

from unittest.mock import patch

import httpx
import pytest

from shift_reconciler.core.config import settings
from shift_reconciler.core.errors import ConflictError, NotFoundError, TransientError
from shift_reconciler.core.session import SessionContext
from shift_reconciler.models.domain import ActualAttendanceStatus, AssignmentStatus
from shift_reconciler.services.actual_attendance_client import ActualAttendanceClient
from shift_reconciler.services.assignment_client import AssignmentClient
from shift_reconciler.services.attendance_client import AttendanceClient
from shift_reconciler.services.business_day_client import BusinessDayClient
from shift_reconciler.services.member_client import MemberClient
from shift_reconciler.services.shift_slot_client import ShiftSlotClient


def client_for(handler, cls=AttendanceClient, session=None):
    return cls(session or SessionContext(), transport=httpx.MockTransport(handler))


# ============================================
# Envelopes and parsing
# ============================================
class TestParsing:
    def test_collection_unwrapped_from_data(self, upstream, session):
        client = AttendanceClient(session, transport=upstream.transport)
        collection = client.get_collection("col-1")
        assert collection.target_id == "evt-1"
        assert [d.target_date_id for d in collection.sorted_target_dates()] == ["td-1", "td-2"]
        assert collection.find_target_date("td-2").target_date.isoformat() == "2026-11-02"

    def test_list_without_envelope(self):
        def handler(request):
            return httpx.Response(200, json={"business_days": [
                {"business_day_id": "bd-9", "target_date": "2026-12-24T00:00:00+09:00"},
            ]})

        days = client_for(handler, BusinessDayClient).list_business_days("evt-9")
        assert days[0].business_day_id == "bd-9"
        assert days[0].target_date.isoformat() == "2026-12-24"

    def test_bare_list_payload(self):
        def handler(request):
            return httpx.Response(200, json={"data": [
                {"slot_id": "s1", "business_day_id": "bd", "slot_name": "A",
                 "instance_id": "", "required_count": 3},
            ]})

        slots = client_for(handler, ShiftSlotClient).list_slots("bd")
        assert slots[0].instance_id is None
        assert slots[0].required_count == 3

    def test_missing_list_is_empty(self):
        def handler(request):
            return httpx.Response(200, json={"data": {}})

        assert client_for(handler).get_responses("col-1") == []

    def test_invalid_record_is_transient(self):
        def handler(request):
            return httpx.Response(200, json={"data": {"title": "no id"}})

        with pytest.raises(TransientError) as exc_info:
            client_for(handler).get_collection("col-1")
        assert exc_info.value.code == "ERR_INVALID_UPSTREAM"

    def test_negative_required_count_is_rejected(self):
        def handler(request):
            return httpx.Response(200, json={"data": {"shift_slots": [
                {"slot_id": "s1", "business_day_id": "bd", "slot_name": "A", "required_count": -1},
            ]}})

        with pytest.raises(TransientError):
            client_for(handler, ShiftSlotClient).list_slots("bd")

    def test_non_json_body_is_transient(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(TransientError) as exc_info:
            client_for(handler).get_collection("col-1")
        assert exc_info.value.code == "ERR_INVALID_UPSTREAM"

    def test_no_content_returns_none(self, upstream, session):
        record = upstream.add_assignment("s-morning", "m1")
        client = AssignmentClient(session, transport=upstream.transport)
        assert client.cancel(record["assignment_id"]) is None


# ============================================
# Error classification
# ============================================
class TestErrorClassification:
    def test_409_is_conflict_with_upstream_code(self):
        def handler(request):
            return httpx.Response(409, json={"error": {
                "code": "ERR_SLOT_FULL", "message": "slot is full", "details": {"slot_id": "s1"},
            }})

        client = client_for(handler, AssignmentClient)
        with pytest.raises(ConflictError) as exc_info:
            client.create("s1", "m1")
        assert exc_info.value.code == "ERR_SLOT_FULL"
        assert exc_info.value.message == "slot is full"
        assert exc_info.value.details == {"slot_id": "s1"}
        assert exc_info.value.upstream_status == 409

    def test_404_is_not_found(self):
        def handler(request):
            return httpx.Response(404, json={"detail": "no such collection"})

        with pytest.raises(NotFoundError) as exc_info:
            client_for(handler).get_collection("nope")
        assert exc_info.value.message == "no such collection"
        assert exc_info.value.code == "ERR_NOT_FOUND"

    def test_other_status_is_transient(self):
        def handler(request):
            return httpx.Response(503)

        with pytest.raises(TransientError) as exc_info:
            client_for(handler).get_collection("col-1")
        assert exc_info.value.code == "ERR_HTTP_503"
        assert exc_info.value.upstream_status == 503

    def test_network_failure_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransientError) as exc_info:
            client_for(handler).get_collection("col-1")
        assert exc_info.value.code == "ERR_NETWORK"

    def test_timeout_is_transient(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransientError):
            client_for(handler, MemberClient).list_roles()


# ============================================
# Requests
# ============================================
class TestRequests:
    def test_assignment_filters_sent_as_query(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={"data": {"assignments": []}})

        client_for(handler, AssignmentClient).list_assignments(
            slot_id="s1", status=AssignmentStatus.CONFIRMED
        )
        assert seen == {"slot_id": "s1", "assignment_status": "confirmed"}

    def test_create_posts_note_only_when_given(self):
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(201, json={"data": {
                "assignment_id": "a1", "slot_id": "s1", "member_id": "m1",
            }})

        client = client_for(handler, AssignmentClient)
        client.create("s1", "m1")
        client.create("s1", "m1", note="hi")
        assert b"note" not in bodies[0]
        assert b'"note":"hi"' in bodies[1].replace(b" ", b"")

    def test_active_members_only(self, upstream, session):
        members = MemberClient(session, transport=upstream.transport).list_active_members()
        assert [m.member_id for m in members] == ["m1", "m2", "m3", "m4", "m5"]
        assert members[4].role_ids == []

    def test_roles_sorted_by_display_order(self, upstream, session):
        roles = MemberClient(session, transport=upstream.transport).list_roles()
        assert [r.role_id for r in roles] == ["r-hall", "r-kitchen", "r-bar"]

    def test_cancel_of_missing_assignment_is_not_found(self, upstream, session):
        with pytest.raises(NotFoundError) as exc_info:
            AssignmentClient(session, transport=upstream.transport).cancel("a-gone")
        assert exc_info.value.upstream_status == 404

    def test_actual_attendance_query(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={"data": {
                "target_dates": [
                    {"target_date_id": "bd-1", "target_date": "2026-10-01T00:00:00Z"},
                ],
                "member_attendances": [
                    {"member_id": "m1", "member_name": "Alice",
                     "attendance_map": {"bd-1": "attended"}},
                ],
            }})

        actual = client_for(handler, ActualAttendanceClient).get_recent("evt-1", 10)
        assert seen == {"event_id": "evt-1", "limit": "10", "include_future": "false"}
        assert actual.target_dates[0].target_date.isoformat() == "2026-10-01"
        assert actual.member_attendances[0].attendance_map["bd-1"] == ActualAttendanceStatus.ATTENDED

    def test_actual_attendance_null_lists(self):
        def handler(request):
            return httpx.Response(200, json={"data": {"target_dates": None, "member_attendances": None}})

        actual = client_for(handler, ActualAttendanceClient).get_recent("evt-1", 100, include_future=True)
        assert actual.target_dates == []
        assert actual.member_attendances == []


# ============================================
# Session headers
# ============================================
class TestSession:
    def test_tenant_and_member_headers(self, upstream, session):
        AttendanceClient(session, transport=upstream.transport).get_collection("col-1")
        assert upstream.last_headers["X-Tenant-ID"] == "tenant-1"
        assert upstream.last_headers["X-Member-ID"] == "admin-1"
        assert upstream.last_headers["X-Request-ID"] == "req-test"
        assert "Authorization" not in upstream.last_headers

    def test_bearer_token_takes_precedence(self, upstream):
        session = SessionContext(auth_token="tok", tenant_id="tenant-1", member_id="admin-1")
        AttendanceClient(session, transport=upstream.transport).get_collection("col-1")
        assert upstream.last_headers["Authorization"] == "Bearer tok"
        assert "X-Tenant-ID" not in upstream.last_headers

    def test_default_tenant_fallback(self):
        with patch.object(settings, "DEFAULT_TENANT_ID", "fallback"):
            headers = SessionContext(member_id="m1").headers()
        assert headers["X-Tenant-ID"] == "fallback"

    def test_from_headers(self):
        session = SessionContext.from_headers(
            {"Authorization": "Bearer abc", "X-Tenant-ID": "t1"}, request_id="rid"
        )
        assert session.auth_token == "abc"
        assert session.tenant_id == "t1"
        assert session.request_id == "rid"

    def test_from_headers_without_bearer(self):
        session = SessionContext.from_headers({"Authorization": "Basic xyz", "X-Member-ID": "m1"})
        assert session.auth_token is None
        assert session.member_id == "m1"
