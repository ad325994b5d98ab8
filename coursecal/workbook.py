"""
Read course rows out of a Workday "Current Classes" .xlsx export.

The export has a couple of title rows above the real header, so the header is
located first (row 3, else the first of the top 30 rows holding both the
course and meeting-pattern headers) and every row below it is read through a
header -> column index map.
"""

from __future__ import annotations

import logging
from io import BytesIO

import pandas as pd

from coursecal.cells import cell_to_string, coerce_excel_date
from coursecal.config import COLUMNS, HEADER_ROW_GUESS, HEADER_SCAN_ROWS
from coursecal.errors import MissingColumnsError, NoWorksheetError
from coursecal.events import CourseRow
from coursecal.sections import parse_section

logger = logging.getLogger(__name__)


def _headers(raw: pd.DataFrame, idx: int) -> list[str]:
    return [cell_to_string(v).strip() for v in raw.iloc[idx].tolist()]


def find_header_row(raw: pd.DataFrame, columns: dict = COLUMNS) -> tuple[int, list[str]]:
    """0-based index of the header row and its trimmed cell texts."""
    def has_required(headers: list[str]) -> bool:
        return columns["course"] in headers and columns["meeting_pattern"] in headers

    guess = HEADER_ROW_GUESS - 1
    if guess < len(raw):
        headers = _headers(raw, guess)
        if has_required(headers):
            return guess, headers
    else:
        headers = []

    for idx in range(min(HEADER_SCAN_ROWS, len(raw))):
        candidate = _headers(raw, idx)
        if has_required(candidate):
            return idx, candidate
    return guess, headers


def read_raw_sheet(source) -> pd.DataFrame:
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(source)
    raw = pd.read_excel(source, sheet_name=0, header=None, engine="openpyxl")
    if raw.empty:
        raise NoWorksheetError("No worksheet data found in the file.")
    return raw


def rows_from_frame(raw: pd.DataFrame, columns: dict = COLUMNS) -> list[CourseRow]:
    header_idx, headers = find_header_row(raw, columns)
    logger.info("Detected headers at row %d: %s", header_idx + 1, headers)

    hidx = {h: i for i, h in enumerate(headers)}
    missing = [columns[k] for k in ("course", "section", "meeting_pattern", "start_date", "end_date")
               if columns[k] not in hidx]
    if missing:
        logger.warning("Missing expected headers %s; available: %s", missing, headers)
        raise MissingColumnsError(missing, [h for h in headers if h])

    rows: list[CourseRow] = []
    for r in range(header_idx + 1, len(raw)):
        values = raw.iloc[r].tolist()

        def get(key):
            return values[hidx[columns[key]]]

        course = cell_to_string(get("course")).strip()
        section = parse_section(get("section"), course)
        patterns = cell_to_string(get("meeting_pattern")).strip()
        start_date = coerce_excel_date(get("start_date"))
        end_date = coerce_excel_date(get("end_date"))
        if not (course and patterns and start_date and end_date):
            continue

        # one cell can hold several meeting patterns, one per line
        for line in patterns.split("\n"):
            line = line.strip()
            if not line:
                continue
            rows.append(CourseRow(
                course=course,
                section=section,
                meeting_pattern=line,
                start_date=start_date,
                end_date=end_date,
                row_index=r + 1,
            ))

    logger.info("Parsed %d course row(s)", len(rows))
    return rows


def read_course_rows(source, columns: dict = COLUMNS) -> list[CourseRow]:
    """Course rows from an .xlsx path, file object or raw bytes."""
    return rows_from_frame(read_raw_sheet(source), columns)
