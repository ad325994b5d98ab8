"""
Parse the Workday "Meeting Patterns" field:

    Mon/Wed | 11:30 AM - 12:50 PM | URBAUER, Room 00222
    Tue & Thu | 2:00 PM to 3:20 PM | Location

→  ParsedMeeting(days=('MO', 'WE'), start_time='11:30 AM',
                 end_time='12:50 PM', location='Urbauer 222')
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from coursecal.cells import NBSP, cell_to_string

DAY_MAP = {
    "Mon": "MO", "Tue": "TU", "Wed": "WE", "Thu": "TH",
    "Fri": "FR", "Sat": "SA", "Sun": "SU",
}

DAY_SPLIT_RE = re.compile(r"[/,&\s]+")
_CLOCK = r"(\d{1,2}:\d{2}\s*[AP]M)"
TIME_RANGE_PATTERNS = (
    re.compile(_CLOCK + r"\s*-\s*" + _CLOCK, re.I),
    re.compile(_CLOCK + r"\s*(?:to)\s*" + _CLOCK, re.I),
)
MERIDIEM_RE = re.compile(r"\s*(AM|PM)$", re.I)
ROOM_RE = re.compile(r",?\s*Room\s*0{0,2}(\d+)", re.I)
FIRST_WORD_RE = re.compile(r"^([A-Z])[A-Z]*", re.I)


@dataclass(frozen=True)
class ParsedMeeting:
    days: tuple[str, ...]
    start_time: str
    end_time: str
    location: str


# ---------- Days ----------

def parse_days(days_part: str) -> tuple[str, ...]:
    """Weekday codes in the order they appear, each code once."""
    codes: list[str] = []
    for token in DAY_SPLIT_RE.split(days_part):
        if not token:
            continue
        code = DAY_MAP.get(token) or token.upper()[:2]
        if code not in codes:
            codes.append(code)
    return tuple(codes)


# ---------- Times ----------

def _normalize_clock(clock: str) -> str:
    return MERIDIEM_RE.sub(lambda m: " " + m.group(1), clock)


def parse_time_range(times_part: str) -> tuple[str, str]:
    times_part = times_part.replace("\u2013", "-").replace("\u2014", "-")
    for pattern in TIME_RANGE_PATTERNS:
        m = pattern.search(times_part)
        if m:
            return _normalize_clock(m.group(1)), _normalize_clock(m.group(2))
    return "", ""


# ---------- Location ----------

def collapse_whitespace(location: str) -> str:
    return re.sub(r"\s+", " ", location).strip()


def strip_room_prefix(location: str) -> str:
    """'URBAUER, Room 00222' -> 'URBAUER 222'"""
    return ROOM_RE.sub(lambda m: " " + m.group(1), location, count=1)


def titlecase_first_word(location: str) -> str:
    """'URBAUER 222' -> 'Urbauer 222'; later words are left alone."""
    return FIRST_WORD_RE.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), location, count=1)


LOCATION_STEPS = (collapse_whitespace, strip_room_prefix, titlecase_first_word, collapse_whitespace)


def normalize_location(location_raw) -> str:
    location = cell_to_string(location_raw)
    if not location:
        return ""
    for step in LOCATION_STEPS:
        location = step(location)
    return location


def parse_meeting_pattern(pattern) -> Optional[ParsedMeeting]:
    """
    Split one meeting pattern into days / times / location.

    Returns None when the text does not have the three pipe-separated parts;
    callers skip such rows (online or asynchronous components have none).
    """
    raw = cell_to_string(pattern).replace(NBSP, " ")
    if not raw.strip():
        return None
    parts = [p.strip() for p in raw.split("|")]
    if len(parts) < 3:
        return None
    days_part, times_part, *location_parts = parts

    start_time, end_time = parse_time_range(times_part)
    return ParsedMeeting(
        days=parse_days(days_part),
        start_time=start_time,
        end_time=end_time,
        location=normalize_location(" | ".join(location_parts)),
    )
