"""
Write calendar events to an .ics file with the ``ics`` library.

``ics`` 0.7 always serializes DTSTART/DTEND in UTC, which lets a weekly
RRULE drift by an hour across a DST change. The start and end are therefore
written by hand as ``DTSTART;TZID=<zone>:<local time>`` lines, and the
calendar carries a VTIMEZONE block for every zone its events use.

The RRULE line goes out exactly as it is sent to Google Calendar. Date-only
EXDATEs are rewritten to TZID date-times at the class start time so they
share DTSTART's value type.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Union

import pytz
from ics import Calendar, Event
from ics.grammar.parse import Container, ContentLine
from ics.serializers.icalendar_serializer import CalendarSerializer

from coursecal.events import CalendarEvent

STAMP = "%Y%m%dT%H%M%S"


def make_uid() -> str:
    return f"{uuid.uuid4()}@coursecal"


def _line(name: str, value: str, **params: str) -> ContentLine:
    return ContentLine(name, {k: [v] for k, v in params.items()}, value)


def _local_stamp(local_dt: str) -> str:
    return datetime.fromisoformat(local_dt).strftime(STAMP)


def _utc_offset(delta: timedelta) -> str:
    minutes = int(delta.total_seconds() // 60)
    hours, mins = divmod(abs(minutes), 60)
    return f"{'-' if minutes < 0 else '+'}{hours:02d}{mins:02d}"


def vtimezone(tz_name: str) -> Container:
    """
    VTIMEZONE for one of the supported zones.

    The North American zones all follow the US rules in force since 2007:
    DST from the second Sunday of March to the first Sunday of November.
    """
    zone = pytz.timezone(tz_name)
    winter = zone.localize(datetime(2025, 1, 15))
    summer = zone.localize(datetime(2025, 7, 15))
    std, dst = _utc_offset(winter.utcoffset()), _utc_offset(summer.utcoffset())

    block = Container("VTIMEZONE", _line("TZID", tz_name))
    if std == dst:
        block.append(Container(
            "STANDARD",
            _line("DTSTART", "19700101T000000"),
            _line("TZOFFSETFROM", std),
            _line("TZOFFSETTO", std),
            _line("TZNAME", winter.tzname()),
        ))
        return block
    block.append(Container(
        "STANDARD",
        _line("DTSTART", "19701101T020000"),
        _line("RRULE", "FREQ=YEARLY;BYMONTH=11;BYDAY=1SU"),
        _line("TZOFFSETFROM", dst),
        _line("TZOFFSETTO", std),
        _line("TZNAME", winter.tzname()),
    ))
    block.append(Container(
        "DAYLIGHT",
        _line("DTSTART", "19700308T020000"),
        _line("RRULE", "FREQ=YEARLY;BYMONTH=3;BYDAY=2SU"),
        _line("TZOFFSETFROM", std),
        _line("TZOFFSETTO", dst),
        _line("TZNAME", summer.tzname()),
    ))
    return block


def _recurrence_line(line: str, start_time: str, tz_name: str) -> ContentLine:
    # "RRULE:FREQ=..." / "EXDATE;VALUE=DATE:20250901,20251006"
    parsed = ContentLine.parse(line)
    if parsed.name == "EXDATE" and parsed.params.get("VALUE") == ["DATE"]:
        stamps = [f"{value}T{start_time}" for value in parsed.value.split(",")]
        return _line("EXDATE", ",".join(stamps), TZID=tz_name)
    return parsed


def to_ics_event(event: CalendarEvent) -> Event:
    ev = Event(name=event.summary, uid=make_uid(), created=datetime.now(timezone.utc))
    start, end = _local_stamp(event.start), _local_stamp(event.end)
    ev.extra.append(_line("DTSTART", start, TZID=event.time_zone))
    # an end before the start (e.g. an unreadable end time) is left out
    if end >= start:
        ev.extra.append(_line("DTEND", end, TZID=event.time_zone))
    if event.location:
        ev.location = event.location
    start_time = start.split("T", 1)[1]
    for line in event.recurrence:
        ev.extra.append(_recurrence_line(line, start_time, event.time_zone))
    return ev


class ZonedCalendarSerializer(CalendarSerializer):
    def serialize_event(calendar, container):
        # zone definitions ahead of the events that reference them
        for tz_name in sorted(calendar.time_zones):
            container.append(vtimezone(tz_name))
        CalendarSerializer.serialize_event(calendar, container)


class CourseCalendar(Calendar):
    class Meta(Calendar.Meta):
        serializer = ZonedCalendarSerializer

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.time_zones: set[str] = set()


def build_calendar(events: Iterable[CalendarEvent]) -> CourseCalendar:
    cal = CourseCalendar()
    for event in events:
        cal.events.add(to_ics_event(event))
        cal.time_zones.add(event.time_zone)
    return cal


def write_calendar(cal: Calendar, path: Union[str, Path]) -> Path:
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        f.writelines(cal.serialize_iter())
    return path
