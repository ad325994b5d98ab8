#!/usr/bin/env python3
"""
Generate a calendar from Workday's **Current Classes** export.

Usage
-----

    python generate_course_calendar.py "View My Courses.xlsx" -o courses.ics
    python generate_course_calendar.py courses.xlsx --push --new-calendar "Fall 2025"

Dependencies
------------
    pip install -e .
"""

import argparse
import sys
from pathlib import Path

from coursecal.academic_calendar import DEFAULT_DAYS_OFF, expand_days_off, load_days_off
from coursecal.config import CREATE_CALENDAR_OPTION, SUPPORTED_TIMEZONES, Settings, validate_timezone
from coursecal.errors import CourseCalError
from coursecal.events import ResultStatus, assemble_events
from coursecal.ics_export import build_calendar, write_calendar
from coursecal.logging_config import get_logger, setup_logging
from coursecal.workbook import read_course_rows

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert a Workday course export (.xlsx) to calendar events")
    parser.add_argument('xlsx', type=Path, nargs='?', help='Input Excel file (Current Classes export)')
    parser.add_argument('-o', '--output', type=Path, default=Path('courses.ics'), help='Output .ics path')
    parser.add_argument('--tz', default=None, choices=SUPPORTED_TIMEZONES,
                        help='Time zone for class times (default: COURSECAL_TIMEZONE or America/Chicago)')
    parser.add_argument('--days-off', type=Path, default=None,
                        help='JSON list of no-class dates and [start, end] ranges')
    parser.add_argument('--push', action='store_true', help='Also create the events in Google Calendar')
    target = parser.add_mutually_exclusive_group()
    target.add_argument('--calendar-id', default=None, help='Target Google calendar (default: your primary, else the first writable one)')
    target.add_argument('--new-calendar', metavar='NAME', default=None, help='Create a new Google calendar')
    parser.add_argument('--list-calendars', action='store_true', help='List writable Google calendars and exit')
    parser.add_argument('--credentials', default=None, help='OAuth client secrets JSON')
    parser.add_argument('--token', default=None, help='Cache the Google token in this file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def _google_sink(settings: Settings, args):
    # google libraries are only needed for --push / --list-calendars
    from coursecal.google_sink import CalendarSession, GoogleCalendarSink

    session = CalendarSession(
        credentials_path=args.credentials or settings.credentials_path,
        token_path=args.token or settings.token_path,
    )
    return GoogleCalendarSink(session)


def run(args) -> int:
    settings = Settings.from_env()
    tz = validate_timezone(args.tz or settings.timezone)

    if args.list_calendars:
        sink = _google_sink(settings, args)
        calendars = sink.list_calendars()
        default_id = sink.default_calendar_id(calendars)
        for cal in calendars:
            marker = " (default)" if cal['id'] == default_id else ""
            print(f"{cal['id']}\t{cal.get('summary', '')}{marker}")
        return 0

    if not args.xlsx.exists():
        logger.error("input_missing", path=str(args.xlsx))
        return 1

    days_off_path = args.days_off or settings.days_off_path
    days_off = expand_days_off(load_days_off(days_off_path) if days_off_path else DEFAULT_DAYS_OFF)

    rows = read_course_rows(args.xlsx)
    result = assemble_events(rows, days_off, tz)
    for issue in result.issues:
        logger.warning("row_skipped", row=issue.row_index, reason=issue.reason.value, detail=issue.detail)
    if result.status is ResultStatus.FAILURE:
        logger.error("no_events", hint="Be sure you pointed at a Workday Current Classes export.")
        return 1

    # Ensure output file has .ics extension
    output = args.output if args.output.suffix.lower() == '.ics' else args.output.with_suffix('.ics')
    write_calendar(build_calendar(result.events), output)
    logger.info("calendar_saved", path=str(output), events=len(result.events), status=result.status.value)

    if args.push:
        sink = _google_sink(settings, args)
        selected = CREATE_CALENDAR_OPTION if args.new_calendar else args.calendar_id
        calendar_id = sink.resolve_target_calendar(selected, args.new_calendar or "")
        report = sink.push_events(calendar_id, result.events)
        for failure in report.failures:
            logger.error("push_failed", summary=failure.summary, message=failure.message)
        if report.status is ResultStatus.FAILURE:
            return 1
        logger.info("events_created", calendar_id=calendar_id, count=len(report.created))
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.xlsx is None and not args.list_calendars:
        parser.error('the xlsx argument is required')
    setup_logging(level="DEBUG" if args.verbose else None)
    try:
        return run(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130
    except CourseCalError as e:
        logger.error("conversion_failed", error=str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
