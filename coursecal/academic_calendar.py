"""
Academic calendar: days with no class.

Each days-off entry is either one ISO date or a
two-item [start, end] range, inclusive on both ends:

    ["2025-09-01", ["2025-10-04", "2025-10-07"]]

Expand the list once per run with ``expand_days_off`` and cut it down per course
with ``days_off_within``.
"""

from __future__ import annotations

import json
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Sequence, Union

from coursecal.errors import DaysOffConfigError

DaysOffEntry = Union[str, Sequence[str]]

DEFAULT_DAYS_OFF: list[DaysOffEntry] = [
    "2025-09-01",                    # Labor Day
    ["2025-10-04", "2025-10-07"],    # Fall break
    ["2025-11-26", "2025-11-30"],    # Thanksgiving break
    ["2025-12-08", "2025-12-10"],    # Reading days
    ["2025-12-11", "2025-12-17"],    # Final exams
]


def _to_date(value) -> date:
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise DaysOffConfigError(f"Not an ISO date: {value!r}")


def daterange_inclusive(start: date, end: date) -> Iterable[date]:
    cur = start
    while cur <= end:
        yield cur
        cur += timedelta(days=1)


def expand_days_off(entries: Iterable[DaysOffEntry]) -> list[date]:
    out: list[date] = []
    for item in entries:
        if isinstance(item, str):
            out.append(_to_date(item))
        elif isinstance(item, Sequence) and len(item) == 2:
            out.extend(daterange_inclusive(_to_date(item[0]), _to_date(item[1])))
        else:
            raise DaysOffConfigError(f"Expected a date or a [start, end] pair, got {item!r}")
    return out


def days_off_within(days_off: Iterable[date], start: date, end: date) -> list[date]:
    return [d for d in days_off if start <= d <= end]


def load_days_off(path: Union[str, Path]) -> list[DaysOffEntry]:
    """Read a days-off list from a JSON file (same shape as DEFAULT_DAYS_OFF)."""
    try:
        with open(path, encoding="utf-8") as f:
            entries = json.load(f)
    except json.JSONDecodeError as e:
        raise DaysOffConfigError(f"{path}: {e}")
    if not isinstance(entries, list):
        raise DaysOffConfigError(f"{path}: expected a JSON list of dates and [start, end] ranges")
    # validate now rather than halfway through a run
    expand_days_off(entries)
    return entries
