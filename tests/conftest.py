"""Shared test fixtures for coursecal tests.

- Workday-style .xlsx exports written on the fly with openpyxl
- Ready-made course rows and the default days-off expansion
"""

from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import Workbook

from coursecal.academic_calendar import DEFAULT_DAYS_OFF, expand_days_off
from coursecal.events import CourseRow


HEADERS = ["Course Listing", "Section", "Meeting Patterns", "Start Date", "End Date", "Instructor"]


# ─────────────────────────────────────────────────────────────────────────────
# Workbook Fixtures
# ─────────────────────────────────────────────────────────────────────────────


def write_workbook(path: Path, rows: list, title_rows: int = 2, headers: list = HEADERS) -> Path:
    """Write an export with ``title_rows`` banner rows above the header row."""
    wb = Workbook()
    ws = wb.active
    ws.title = "View My Courses"
    for i in range(title_rows):
        ws.append([f"Banner line {i + 1}"])
    ws.append(headers)
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


COURSE_ROWS = [
    [
        "CSE 3300 - Rapid Prototyping",
        "CSE 3300-11 - Rapid Prototyping",
        "Mon/Wed | 11:30 AM - 12:50 PM | URBAUER, Room 00222",
        datetime(2025, 8, 25),
        datetime(2025, 12, 17),
        "Ada Lovelace",
    ],
    [
        "MATH 2200 - Statistics",
        "MATH 2200-02 - Statistics",
        "Tue & Thu | 2:00 PM to 3:20 PM | Crow Hall, Room 204",
        45894,  # 2025-08-25 as a date serial
        "12/17/25",
        "Grace Hopper",
    ],
    [
        "CSE 3301 - Online Lab",
        "CSE 3301-01 - Online Lab",
        "Asynchronous",
        datetime(2025, 8, 25),
        datetime(2025, 12, 17),
        "",
    ],
    [
        "CSE 3302 - Reading",
        "CSE 3302-01 - Reading",
        None,
        datetime(2025, 8, 25),
        datetime(2025, 12, 17),
        "",
    ],
]


@pytest.fixture
def course_xlsx(tmp_path: Path) -> Path:
    """An export shaped like Workday's: header on row 3."""
    return write_workbook(tmp_path / "courses.xlsx", COURSE_ROWS)


@pytest.fixture
def xlsx_factory(tmp_path: Path):
    """Build custom exports: xlsx_factory(rows, title_rows=..., headers=...)."""
    def _make(rows, **kwargs):
        return write_workbook(tmp_path / "custom.xlsx", rows, **kwargs)
    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Pipeline Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def days_off():
    return expand_days_off(DEFAULT_DAYS_OFF)


@pytest.fixture
def monday_wednesday_row() -> CourseRow:
    return CourseRow(
        course="CSE 3300 - Rapid Prototyping",
        section="11",
        meeting_pattern="Mon/Wed | 11:30 AM - 12:50 PM | URBAUER, Room 00222",
        start_date="2025-08-25",
        end_date="2025-12-17",
        row_index=4,
    )
