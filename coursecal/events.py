"""
Course rows in, calendar events out.

One ``CalendarEvent`` per course row whose meeting pattern parses; every other
row is reported back as a ``RowIssue`` instead of raising, so the caller can
decide how loudly to complain.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence, Union

from coursecal.academic_calendar import days_off_within
from coursecal.config import DEFAULT_TIMEZONE
from coursecal.meeting_pattern import parse_meeting_pattern
from coursecal.recurrence import build_recurrence
from coursecal.timeutil import (
    build_local_datetime,
    first_occurrence_on_or_after,
    parse_hour_minute,
    parse_iso_date,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CourseRow:
    course: str
    section: str
    meeting_pattern: str
    start_date: str  # ISO, or the raw cell text when it could not be read
    end_date: str
    row_index: int = 0  # spreadsheet row number, 1-based

    @property
    def summary(self) -> str:
        return f"{self.course} ({self.section})" if self.section else self.course


@dataclass(frozen=True)
class CalendarEvent:
    summary: str
    location: str
    start: str  # naive local YYYY-MM-DDTHH:MM:SS
    end: str
    time_zone: str
    recurrence: tuple[str, ...]

    def to_google_body(self) -> dict:
        return {
            "summary": self.summary,
            "location": self.location,
            "start": {"dateTime": self.start, "timeZone": self.time_zone},
            "end": {"dateTime": self.end, "timeZone": self.time_zone},
            "recurrence": list(self.recurrence),
        }


class RowIssueReason(str, enum.Enum):
    UNPARSED_PATTERN = "unparsed_pattern"
    NO_DAYS = "no_days"
    INVALID_DATE = "invalid_date"


class ResultStatus(str, enum.Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"


@dataclass(frozen=True)
class RowIssue:
    row_index: int
    reason: RowIssueReason
    detail: str = ""


@dataclass
class AssemblyResult:
    events: list[CalendarEvent] = field(default_factory=list)
    issues: list[RowIssue] = field(default_factory=list)

    @property
    def status(self) -> ResultStatus:
        if not self.events:
            return ResultStatus.FAILURE
        if self.issues:
            return ResultStatus.PARTIAL
        return ResultStatus.SUCCESS


def _build(row: CourseRow, days_off: Sequence[date], time_zone: str) -> Union[CalendarEvent, RowIssue]:
    meeting = parse_meeting_pattern(row.meeting_pattern)
    if meeting is None:
        return RowIssue(row.row_index, RowIssueReason.UNPARSED_PATTERN, row.meeting_pattern)
    if not meeting.days:
        return RowIssue(row.row_index, RowIssueReason.NO_DAYS, row.meeting_pattern)
    start, end = parse_iso_date(row.start_date), parse_iso_date(row.end_date)
    if start is None or end is None:
        return RowIssue(row.row_index, RowIssueReason.INVALID_DATE, f"{row.start_date} / {row.end_date}")
    if start > end:
        # not validated; the RRULE just ends before it begins
        logger.warning("Row %s starts after it ends (%s > %s)", row.row_index, start, end)

    first_day = first_occurrence_on_or_after(start, meeting.days)
    start_hour, start_minute = parse_hour_minute(meeting.start_time)
    end_hour, end_minute = parse_hour_minute(meeting.end_time)

    return CalendarEvent(
        summary=row.summary,
        location=meeting.location,
        start=build_local_datetime(first_day, start_hour, start_minute),
        end=build_local_datetime(first_day, end_hour, end_minute),
        time_zone=time_zone,
        recurrence=tuple(build_recurrence(meeting.days, end, days_off_within(days_off, start, end))),
    )


def build_event(
    row: CourseRow,
    days_off: Sequence[date] = (),
    time_zone: str = DEFAULT_TIMEZONE,
) -> Optional[CalendarEvent]:
    """The weekly event for one row, or None if the row has no usable meeting."""
    built = _build(row, days_off, time_zone)
    return built if isinstance(built, CalendarEvent) else None


def assemble_events(
    rows: Iterable[CourseRow],
    days_off: Sequence[date] = (),
    time_zone: str = DEFAULT_TIMEZONE,
) -> AssemblyResult:
    result = AssemblyResult()
    for row in rows:
        built = _build(row, days_off, time_zone)
        if isinstance(built, RowIssue):
            logger.info("Skipping row %s: %s", row.row_index, built.reason.value)
            result.issues.append(built)
        else:
            result.events.append(built)
    logger.info("Built %d event(s), skipped %d row(s)", len(result.events), len(result.issues))
    return result
