"""
Push calendar events to Google Calendar.

``CalendarSession`` owns the OAuth credentials and the API client and moves
through two explicit state machines:

    client: uninitialized -> ready
    auth:   unauthenticated -> token_pending -> authenticated

``GoogleCalendarSink`` takes a session and does the calendar work: list the
writable calendars, create a new one, insert events one at a time.

Usage:
    session = CalendarSession("credentials.json")
    sink = GoogleCalendarSink(session)
    calendar_id = sink.resolve_target_calendar("primary")
    report = sink.push_events(calendar_id, result.events)
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from coursecal.config import CREATE_CALENDAR_OPTION, GOOGLE_SCOPES
from coursecal.errors import CalendarNameRequiredError, SessionStateError
from coursecal.events import CalendarEvent, ResultStatus

logger = logging.getLogger(__name__)


class ClientState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class AuthState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    TOKEN_PENDING = "token_pending"
    AUTHENTICATED = "authenticated"


class CalendarSession:
    def __init__(
        self,
        credentials_path: str = "credentials.json",
        token_path: Optional[str] = None,
        scopes: Optional[list[str]] = None,
    ) -> None:
        """
        Args:
            credentials_path: OAuth client secrets downloaded from Google Cloud.
            token_path: Where to cache the user token. None keeps it in memory
                only, so every run asks for consent again.
            scopes: OAuth scopes, defaults to calendar + calendar.events.
        """
        self.credentials_path = credentials_path
        self.token_path = token_path
        self.scopes = scopes or list(GOOGLE_SCOPES)
        self.client_state = ClientState.UNINITIALIZED
        self.auth_state = AuthState.UNAUTHENTICATED
        self._credentials: Optional[Credentials] = None
        self._service = None

    @classmethod
    def from_service(cls, service) -> "CalendarSession":
        """A session around an already-built API client (tests, notebooks)."""
        session = cls()
        session._service = service
        session.auth_state = AuthState.AUTHENTICATED
        session.client_state = ClientState.READY
        return session

    # ---------- auth ----------

    def _load_cached_token(self) -> Optional[Credentials]:
        if not self.token_path or not os.path.exists(self.token_path):
            return None
        try:
            return Credentials.from_authorized_user_file(self.token_path, self.scopes)
        except ValueError:
            logger.warning("Ignoring unreadable token cache %s", self.token_path)
            return None

    def authenticate(self) -> Credentials:
        if self.auth_state is AuthState.AUTHENTICATED and self._credentials is not None:
            return self._credentials

        self.auth_state = AuthState.TOKEN_PENDING
        try:
            creds = self._load_cached_token()
            if creds and creds.expired and creds.refresh_token:
                creds.refresh(Request())
            if not creds or not creds.valid:
                flow = InstalledAppFlow.from_client_secrets_file(self.credentials_path, self.scopes)
                creds = flow.run_local_server(port=0, prompt="consent")
        except Exception:
            self.auth_state = AuthState.UNAUTHENTICATED
            raise

        if self.token_path:
            with open(self.token_path, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        self._credentials = creds
        self.auth_state = AuthState.AUTHENTICATED
        logger.info("Google sign-in complete")
        return creds

    # ---------- client ----------

    def initialize(self):
        if self.client_state is ClientState.READY:
            return self._service
        if self.auth_state is not AuthState.AUTHENTICATED:
            raise SessionStateError(f"Cannot build the Calendar client while {self.auth_state.value}")
        self._service = build("calendar", "v3", credentials=self._credentials, cache_discovery=False)
        self.client_state = ClientState.READY
        return self._service

    def ensure_ready(self):
        """Authenticate and build the client if that has not happened yet."""
        if self.auth_state is not AuthState.AUTHENTICATED:
            self.authenticate()
        return self.initialize()

    @property
    def service(self):
        if self.client_state is not ClientState.READY:
            raise SessionStateError("Calendar client is not ready; call ensure_ready() first")
        return self._service


@dataclass(frozen=True)
class PushFailure:
    index: int
    summary: str
    message: str


@dataclass
class PushReport:
    calendar_id: str
    created: list[str] = field(default_factory=list)  # Google event ids
    failures: list[PushFailure] = field(default_factory=list)

    @property
    def status(self) -> ResultStatus:
        if not self.created:
            return ResultStatus.FAILURE
        if self.failures:
            return ResultStatus.PARTIAL
        return ResultStatus.SUCCESS


def _http_error_message(err: HttpError) -> str:
    return getattr(err, "reason", None) or str(err)


class GoogleCalendarSink:
    def __init__(self, session: CalendarSession, num_retries: int = 2) -> None:
        self.session = session
        self.num_retries = num_retries

    @property
    def _service(self):
        return self.session.ensure_ready()

    def list_calendars(self, min_access_role: str = "writer") -> list[dict]:
        items: list[dict] = []
        page_token = None
        while True:
            res = self._service.calendarList().list(
                minAccessRole=min_access_role, pageToken=page_token
            ).execute(num_retries=self.num_retries)
            items.extend(res.get("items", []))
            page_token = res.get("nextPageToken")
            if not page_token:
                return items

    def default_calendar_id(self, calendars: list[dict]) -> str:
        primary = next((c for c in calendars if c.get("primary")), None)
        if primary:
            return primary["id"]
        return calendars[0]["id"] if calendars else "primary"

    def create_calendar(self, name: str) -> dict:
        name = (name or "").strip()
        if not name:
            raise CalendarNameRequiredError()
        cal = self._service.calendars().insert(body={"summary": name}).execute(num_retries=self.num_retries)
        logger.info("Created calendar %r (%s)", name, cal.get("id"))
        return cal

    def resolve_target_calendar(self, selected: Optional[str], new_name: str = "") -> str:
        """
        The calendar id to write into. ``__create__`` makes a new calendar;
        nothing selected falls back to the primary (or first writable) one.
        """
        if selected == CREATE_CALENDAR_OPTION:
            return self.create_calendar(new_name)["id"]
        if selected:
            return selected
        return self.default_calendar_id(self.list_calendars())

    def insert_event(self, calendar_id: str, event: CalendarEvent) -> dict:
        return self._service.events().insert(
            calendarId=calendar_id or "primary", body=event.to_google_body()
        ).execute(num_retries=self.num_retries)

    def push_events(self, calendar_id: str, events: Iterable[CalendarEvent]) -> PushReport:
        """Insert events one by one; a rejected event does not stop the rest."""
        report = PushReport(calendar_id=calendar_id)
        for index, event in enumerate(events):
            try:
                created = self.insert_event(calendar_id, event)
            except HttpError as err:
                message = _http_error_message(err)
                logger.error("Insert failed for %r: %s", event.summary, message)
                report.failures.append(PushFailure(index, event.summary, message))
                continue
            report.created.append(created.get("id", ""))
        logger.info(
            "Pushed %d event(s) to %s, %d failed",
            len(report.created), calendar_id, len(report.failures),
        )
        return report
