"""Exceptions raised by coursecal. Recoverable row problems are never raised."""

from __future__ import annotations


class CourseCalError(Exception):
    """Base class for every error coursecal raises on purpose."""


class NoWorksheetError(CourseCalError):
    pass


class MissingColumnsError(CourseCalError):
    def __init__(self, missing: list[str], available: list[str] | None = None):
        self.missing = list(missing)
        self.available = list(available or [])
        super().__init__(f"Missing expected header(s): {', '.join(self.missing)}")


class UnsupportedTimezoneError(CourseCalError):
    def __init__(self, name: str, supported: tuple[str, ...]):
        self.name = name
        self.supported = supported
        super().__init__(f"Unsupported time zone {name!r}; choose one of: {', '.join(supported)}")


class DaysOffConfigError(CourseCalError):
    pass


class SessionStateError(CourseCalError):
    """A Google Calendar call was made before the session reached the required state."""


class CalendarNameRequiredError(CourseCalError):
    def __init__(self):
        super().__init__("Please enter a name for the new calendar.")
