"""Tests for coursecal/google_sink.py

The Google API client is replaced with MagicMock; OAuth flow and client
construction are patched so nothing touches the network.
"""

import json
from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

from coursecal.errors import CalendarNameRequiredError, SessionStateError
from coursecal.events import CalendarEvent, ResultStatus
from coursecal.google_sink import (
    AuthState,
    CalendarSession,
    ClientState,
    GoogleCalendarSink,
)


def make_event(summary: str) -> CalendarEvent:
    return CalendarEvent(
        summary=summary,
        location="Urbauer 222",
        start="2025-08-25T11:30:00",
        end="2025-08-25T12:50:00",
        time_zone="America/Chicago",
        recurrence=("RRULE:FREQ=WEEKLY;BYDAY=MO,WE;UNTIL=20251217T235959Z",),
    )


def http_error(status: int, message: str) -> HttpError:
    resp = httplib2.Response({"status": status})
    content = json.dumps({"error": {"code": status, "message": message}}).encode()
    return HttpError(resp, content)


@pytest.fixture
def service() -> MagicMock:
    return MagicMock()


@pytest.fixture
def sink(service) -> GoogleCalendarSink:
    return GoogleCalendarSink(CalendarSession.from_service(service))


# ─────────────────────────────────────────────────────────────────────────────
# Session State Machine Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestCalendarSession:
    """Tests for the explicit auth/client states."""

    def test_starts_uninitialized_and_unauthenticated(self):
        session = CalendarSession("credentials.json")
        assert session.client_state is ClientState.UNINITIALIZED
        assert session.auth_state is AuthState.UNAUTHENTICATED

    def test_client_requires_authentication(self):
        session = CalendarSession("credentials.json")
        with pytest.raises(SessionStateError):
            session.initialize()
        with pytest.raises(SessionStateError):
            session.service

    def test_authenticate_then_initialize(self, monkeypatch):
        creds = MagicMock(valid=True)
        flow = MagicMock()
        flow.run_local_server.return_value = creds
        seen_states = []

        def fake_secrets(path, scopes):
            seen_states.append(session.auth_state)
            return flow

        monkeypatch.setattr(
            "coursecal.google_sink.InstalledAppFlow.from_client_secrets_file", fake_secrets
        )
        built = MagicMock()
        monkeypatch.setattr("coursecal.google_sink.build", lambda *a, **kw: built)

        session = CalendarSession("credentials.json")
        assert session.authenticate() is creds
        assert seen_states == [AuthState.TOKEN_PENDING]
        assert session.auth_state is AuthState.AUTHENTICATED

        assert session.initialize() is built
        assert session.client_state is ClientState.READY
        assert session.service is built

    def test_failed_sign_in_returns_to_unauthenticated(self, monkeypatch):
        def fail(path, scopes):
            raise FileNotFoundError(path)

        monkeypatch.setattr("coursecal.google_sink.InstalledAppFlow.from_client_secrets_file", fail)
        session = CalendarSession("missing.json")
        with pytest.raises(FileNotFoundError):
            session.authenticate()
        assert session.auth_state is AuthState.UNAUTHENTICATED

    def test_token_is_cached_only_when_asked(self, monkeypatch, tmp_path):
        creds = MagicMock(valid=True)
        creds.to_json.return_value = '{"token": "abc"}'
        flow = MagicMock()
        flow.run_local_server.return_value = creds
        monkeypatch.setattr(
            "coursecal.google_sink.InstalledAppFlow.from_client_secrets_file", lambda p, s: flow
        )

        token_path = tmp_path / "token.json"
        CalendarSession("credentials.json", token_path=str(token_path)).authenticate()
        assert json.loads(token_path.read_text()) == {"token": "abc"}

    def test_from_service_is_ready(self, service):
        session = CalendarSession.from_service(service)
        assert session.client_state is ClientState.READY
        assert session.ensure_ready() is service


# ─────────────────────────────────────────────────────────────────────────────
# Calendar Operation Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestCalendars:
    """Tests for listing, creating and choosing the target calendar."""

    def test_list_calendars_follows_pages(self, sink, service):
        service.calendarList.return_value.list.return_value.execute.side_effect = [
            {"items": [{"id": "a"}], "nextPageToken": "p2"},
            {"items": [{"id": "b", "primary": True}]},
        ]
        calendars = sink.list_calendars()
        assert [c["id"] for c in calendars] == ["a", "b"]
        service.calendarList.return_value.list.assert_called_with(minAccessRole="writer", pageToken="p2")
        assert sink.default_calendar_id(calendars) == "b"

    def test_default_calendar_without_primary(self, sink):
        assert sink.default_calendar_id([{"id": "x"}]) == "x"
        assert sink.default_calendar_id([]) == "primary"

    def test_create_calendar(self, sink, service):
        service.calendars.return_value.insert.return_value.execute.return_value = {"id": "new-id"}
        assert sink.resolve_target_calendar("__create__", "  Fall 2025 ") == "new-id"
        service.calendars.return_value.insert.assert_called_once_with(body={"summary": "Fall 2025"})

    def test_create_calendar_needs_name(self, sink, service):
        with pytest.raises(CalendarNameRequiredError):
            sink.resolve_target_calendar("__create__", "   ")
        service.calendars.assert_not_called()

    def test_existing_calendar_is_used_as_is(self, sink, service):
        assert sink.resolve_target_calendar("abc@group.calendar.google.com") == "abc@group.calendar.google.com"
        service.calendarList.assert_not_called()

    def test_no_selection_uses_primary_calendar(self, sink, service):
        service.calendarList.return_value.list.return_value.execute.return_value = {
            "items": [{"id": "shared"}, {"id": "me@example.com", "primary": True}]
        }
        assert sink.resolve_target_calendar(None) == "me@example.com"

    def test_no_selection_without_primary_uses_first_writable(self, sink, service):
        service.calendarList.return_value.list.return_value.execute.return_value = {"items": [{"id": "shared"}]}
        assert sink.resolve_target_calendar("") == "shared"


class TestPushEvents:
    """Tests for sequential inserts with per-row failure isolation."""

    def test_inserts_google_body(self, sink, service):
        insert = service.events.return_value.insert
        insert.return_value.execute.return_value = {"id": "evt1"}
        event = make_event("CSE 3300 (11)")

        report = sink.push_events("cal", [event])

        insert.assert_called_once_with(calendarId="cal", body=event.to_google_body())
        assert report.created == ["evt1"]
        assert report.status is ResultStatus.SUCCESS

    def test_failure_does_not_stop_later_rows(self, sink, service):
        service.events.return_value.insert.return_value.execute.side_effect = [
            {"id": "evt1"},
            http_error(400, "Invalid recurrence rule"),
            {"id": "evt3"},
        ]
        events = [make_event("A"), make_event("B"), make_event("C")]

        report = sink.push_events("cal", events)

        assert report.created == ["evt1", "evt3"]
        assert len(report.failures) == 1
        assert report.failures[0].index == 1
        assert report.failures[0].summary == "B"
        assert "Invalid recurrence rule" in report.failures[0].message
        assert report.status is ResultStatus.PARTIAL

    def test_all_failed(self, sink, service):
        service.events.return_value.insert.return_value.execute.side_effect = http_error(403, "Forbidden")
        report = sink.push_events("cal", [make_event("A")])
        assert report.status is ResultStatus.FAILURE
