"""
Normalise raw spreadsheet cells.

pandas/openpyxl hand back strings, ints, floats (NaN for blanks), datetimes,
pandas Timestamps and, for rich text cells, a list of text runs.  Everything
downstream only wants plain strings and ISO dates.
"""

from __future__ import annotations

import math
import numbers
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta

import pandas as pd

NBSP = "\u00a0"

# Spreadsheet date serials count days from here (the 1900 leap-year bug baked in)
EXCEL_EPOCH = datetime(1899, 12, 30)

US_DATE_RE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})$")


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NaT


def _number_to_string(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def cell_to_string(value) -> str:
    """Plain text of a cell: strings/numbers as-is, rich text runs joined."""
    if _is_blank(value):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return _number_to_string(value)
    if isinstance(value, Mapping):
        if value.get("text") is not None:
            return str(value["text"])
        runs = value.get("richText")
        if isinstance(runs, list):
            return "".join(cell_to_string(run.get("text") if isinstance(run, Mapping) else run) for run in runs)
        return str(value)
    text = getattr(value, "text", None)
    if text is not None:
        return str(text)
    # openpyxl CellRichText: a list of str / TextBlock runs
    if isinstance(value, Iterable):
        return "".join(cell_to_string(run) for run in value)
    return str(value)


def coerce_excel_date(value) -> str:
    """
    ISO date string for a date-typed cell.

        datetime(2025, 8, 25, 9, 0)  -> '2025-08-25'
        45658                        -> '2025-01-01'
        '8/25/25'                    -> '2025-08-25'

    Strings that look like neither M/D/Y nor ISO come back unchanged so the
    caller can show them as-is.
    """
    if _is_blank(value):
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return (EXCEL_EPOCH + timedelta(days=float(value))).date().isoformat()

    s = cell_to_string(value).replace(NBSP, " ").strip()
    m = US_DATE_RE.match(s)
    if m:
        mm, dd, yy = m.groups()
        if len(yy) == 2:
            yy = ("19" if int(yy) >= 70 else "20") + yy
        return f"{yy}-{int(mm):02d}-{int(dd):02d}"
    # already ISO, or unparseable and shown raw
    return s
