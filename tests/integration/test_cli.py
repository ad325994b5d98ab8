"""Integration tests for the generate_course_calendar command line."""

import json
from unittest.mock import MagicMock

import generate_course_calendar
from generate_course_calendar import main


class TestMain:
    """Tests for exit codes and written files."""

    def test_writes_ics(self, course_xlsx, tmp_path):
        out = tmp_path / "out.ics"
        assert main([str(course_xlsx), "-o", str(out)]) == 0
        assert "RRULE:FREQ=WEEKLY;BYDAY=MO,WE;UNTIL=20251217T235959Z" in out.read_text(encoding="utf-8")

    def test_adds_ics_suffix(self, course_xlsx, tmp_path):
        assert main([str(course_xlsx), "-o", str(tmp_path / "schedule")]) == 0
        assert (tmp_path / "schedule.ics").exists()

    def test_custom_days_off(self, course_xlsx, tmp_path):
        days_off = tmp_path / "days_off.json"
        days_off.write_text(json.dumps(["2025-09-03"]))
        out = tmp_path / "out.ics"
        assert main([str(course_xlsx), "-o", str(out), "--days-off", str(days_off)]) == 0
        text = out.read_text(encoding="utf-8")
        assert "EXDATE;TZID=America/Chicago:20250903T113000" in text
        assert "20250901" not in text

    def test_missing_columns_exit_1(self, xlsx_factory, tmp_path):
        path = xlsx_factory([["x"]], headers=["Course Listing", "Meeting Patterns"])
        assert main([str(path), "-o", str(tmp_path / "out.ics")]) == 1
        assert not (tmp_path / "out.ics").exists()

    def test_no_events_exit_1(self, xlsx_factory, tmp_path):
        path = xlsx_factory([["CSE 1", "01", "Online", "2025-08-25", "2025-12-17"]])
        assert main([str(path), "-o", str(tmp_path / "out.ics")]) == 1

    def test_missing_input_exit_1(self, tmp_path):
        assert main([str(tmp_path / "nope.xlsx")]) == 1

    def test_push_uses_google_sink(self, course_xlsx, tmp_path, monkeypatch):
        sink = MagicMock()
        sink.resolve_target_calendar.return_value = "new-cal"
        sink.push_events.return_value = MagicMock(failures=[], created=["a", "b"])
        monkeypatch.setattr(generate_course_calendar, "_google_sink", lambda settings, args: sink)

        code = main([str(course_xlsx), "-o", str(tmp_path / "out.ics"), "--push", "--new-calendar", "Fall"])

        assert code == 0
        sink.resolve_target_calendar.assert_called_once_with("__create__", "Fall")
        calendar_id, events = sink.push_events.call_args.args
        assert calendar_id == "new-cal"
        assert len(events) == 2

    def test_list_calendars_marks_default(self, monkeypatch, capsys):
        sink = MagicMock()
        sink.list_calendars.return_value = [
            {"id": "shared", "summary": "Lab"},
            {"id": "me@example.com", "summary": "Me", "primary": True},
        ]
        sink.default_calendar_id.return_value = "me@example.com"
        monkeypatch.setattr(generate_course_calendar, "_google_sink", lambda settings, args: sink)

        assert main(["--list-calendars"]) == 0

        out = capsys.readouterr().out.splitlines()
        assert out == ["shared\tLab", "me@example.com\tMe (default)"]
