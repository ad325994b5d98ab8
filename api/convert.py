#!/usr/bin/env python3
"""
Serverless Python function for Vercel.
Converts the uploaded Workday "Current Classes" Excel export into an .ics
calendar file and streams it back to the caller.

POST multipart/form-data with a ``file`` field (and optionally ``tz``).
"""

from __future__ import annotations

import json
import logging
import traceback
from email.parser import BytesParser
from email.policy import HTTP
from http.server import BaseHTTPRequestHandler

from coursecal.academic_calendar import DEFAULT_DAYS_OFF, expand_days_off
from coursecal.config import DEFAULT_TIMEZONE, validate_timezone
from coursecal.errors import CourseCalError
from coursecal.events import ResultStatus, assemble_events
from coursecal.ics_export import build_calendar
from coursecal.logging_config import setup_logging
from coursecal.workbook import read_course_rows

logger = logging.getLogger(__name__)

_logging_ready = False

# expanded once per process, reused across requests
ALL_DAYS_OFF = expand_days_off(DEFAULT_DAYS_OFF)


class BadRequest(Exception):
    pass


def _ensure_logging():
    global _logging_ready
    if not _logging_ready:
        setup_logging()
        _logging_ready = True


def parse_form(content_type: str, body: bytes) -> dict[str, bytes]:
    """Field name -> raw bytes for a multipart/form-data body."""
    if not content_type or not content_type.lower().startswith("multipart/form-data"):
        raise BadRequest("Content-Type must be multipart/form-data")
    msg = BytesParser(policy=HTTP).parsebytes(
        b"Content-Type: " + content_type.encode("latin-1") + b"\r\n\r\n" + body
    )
    if not msg.is_multipart():
        raise BadRequest("Malformed multipart body")
    fields = {}
    for part in msg.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if name:
            fields[name] = part.get_payload(decode=True) or b""
    return fields


def convert_upload(content_type: str, body: bytes) -> tuple[str, int]:
    """(.ics text, event count) for an uploaded form; raises on bad input."""
    fields = parse_form(content_type, body)
    file_content = fields.get("file")
    if not file_content:
        raise BadRequest("No file field in form")
    tz = validate_timezone(fields.get("tz", b"").decode("utf-8") or DEFAULT_TIMEZONE)

    result = assemble_events(read_course_rows(file_content), ALL_DAYS_OFF, tz)
    if result.status is ResultStatus.FAILURE:
        raise BadRequest("No events found in the spreadsheet")
    return build_calendar(result.events).serialize(), len(result.events)


class handler(BaseHTTPRequestHandler):
    def do_POST(self):
        _ensure_logging()
        try:
            length = int(self.headers.get("content-length") or 0)
            body = self.rfile.read(length)
            ics, count = convert_upload(self.headers.get("content-type", ""), body)
        except (BadRequest, CourseCalError) as e:
            self._err(400, f"Conversion error: {e}")
            return
        except Exception:
            tb = traceback.format_exc()
            logger.exception("Unhandled error converting upload")
            self._err(500, "Internal server error", tb)
            return

        logger.info("Converted upload into %d event(s)", count)
        self.send_response(200)
        self.send_header("Content-Type", "text/calendar")
        self.send_header("Content-Disposition", 'attachment; filename="courses.ics"')
        self.end_headers()
        self.wfile.write(ics.encode("utf-8"))

    def _err(self, code, msg, tb=None):
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        payload = {"error": msg}
        if tb:
            payload["traceback"] = tb
        self.wfile.write(json.dumps(payload).encode())
