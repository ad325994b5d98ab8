"""
Pull the short section code out of a Workday "Section" cell.

    'CSE 3300-11 - Rapid Prototyping'  -> '11'
    'CPEN 211-T1B - Computing Systems'   -> 'T1B'
    '011'                                -> '11'

Three strategies are tried in order; each one is a plain function so it can be
tested on its own.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from coursecal.cells import cell_to_string

STRICT_RE = re.compile(r"^[A-Za-z]{2,}\s*\d{3,4}\s*-\s*([A-Za-z0-9]+)\s*-")
CODE_RE = re.compile(r"\b([A-Za-z]?\d{1,3}[A-Za-z]?)\b")


def _strip_zeros(code: str) -> str:
    return code.lstrip("0")


def strict_section(section: str, course: str = "") -> Optional[str]:
    """'<SUBJ> <NUM>-<SECTION> - <title>'"""
    m = STRICT_RE.match(section)
    return _strip_zeros(m.group(1)) if m else None


def course_prefix_section(section: str, course: str = "") -> Optional[str]:
    """'<course prefix>-<SECTION>' using the course listing's 'CSE 3300' part."""
    if not course:
        return None
    prefix = course.split("-")[0].strip()
    if not prefix:
        return None
    m = re.match("^" + re.escape(prefix) + r"\s*-\s*([A-Za-z0-9]+)\b", section)
    return _strip_zeros(m.group(1)) if m else None


def bare_code_section(section: str, course: str = "") -> Optional[str]:
    """Last resort: the first short code-looking token ('11', 'A01', ...)."""
    m = CODE_RE.search(section)
    return _strip_zeros(m.group(1)) if m else None


STRATEGIES: list[Callable[[str, str], Optional[str]]] = [
    strict_section,
    course_prefix_section,
    bare_code_section,
]


def parse_section(section_cell, course: str = "") -> str:
    section = cell_to_string(section_cell).strip()
    if not section:
        return ""
    for strategy in STRATEGIES:
        code = strategy(section, course)
        if code is not None:
            return code
    return ""
