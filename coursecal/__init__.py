"""
Turn a Workday "Current Classes" .xlsx export into weekly recurring
calendar events (.ics file or Google Calendar).
"""

from coursecal.events import AssemblyResult, CalendarEvent, CourseRow, assemble_events, build_event
from coursecal.meeting_pattern import ParsedMeeting, parse_meeting_pattern

__version__ = "0.3.0"

__all__ = [
    "AssemblyResult",
    "CalendarEvent",
    "CourseRow",
    "ParsedMeeting",
    "assemble_events",
    "build_event",
    "parse_meeting_pattern",
]
