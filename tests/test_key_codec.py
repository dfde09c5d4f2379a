"""Tests for key_codec.py: artifact prefix derivation."""

import re
from datetime import date, datetime, timedelta, timezone

import pytest

from artifacts.key_codec import build_prefix, format_meeting_date, prefix_for, sanitize

PREFIX_RE = re.compile(r"^schedule_\d{4}-\d{2}-\d{2}_[A-Za-z0-9.\-_]{1,30}_[A-Za-z0-9.\-_]{1,20}$")


class TestBuildPrefix:

    def test_phone_screen_example(self):
        prefix = build_prefix("2025-08-21", "Phone Screen", "Phoenix Support Services")
        assert prefix == "schedule_2025-08-21_Phone_Screen_Phoenix_Support_Serv"

    def test_deterministic(self):
        args = (datetime(2025, 8, 21, 9, 30, tzinfo=timezone.utc), "Onsite / Final", "Acme & Co.")
        assert build_prefix(*args) == build_prefix(*args)

    @pytest.mark.parametrize("title,company", [
        ("x" * 200, "y" * 200),
        ("Zoom: Round #2 (panel)", "Société Générale"),
        ("   ", ""),
        ("Team-Lead.v2", "A.B-C"),
    ])
    def test_matches_bounded_pattern(self, title, company):
        assert PREFIX_RE.match(build_prefix("2025-01-02", title, company))

    def test_defaults_for_blank_fields(self):
        assert build_prefix("2025-08-21", "", None) == "schedule_2025-08-21_Interview_Unknown"
        assert build_prefix("2025-08-21", "   ", "  ") == "schedule_2025-08-21_Interview_Unknown"

    def test_collisions_are_deliberate(self):
        assert build_prefix("2025-08-21", "Phone Screen", "X") == build_prefix("2025-08-21", "Phone/Screen", "X")

    def test_invalid_date_raises(self):
        with pytest.raises(ValueError):
            build_prefix("not a date", "Phone Screen", "Acme")
        with pytest.raises(ValueError):
            build_prefix("", "Phone Screen", "Acme")

    def test_prefix_for_records(self):
        interview = {"meeting_date": "2025-08-21T16:00:00Z", "meeting_title": "Phone Screen"}
        resume = {"company": "Phoenix Support Services"}
        assert prefix_for(interview, resume) == "schedule_2025-08-21_Phone_Screen_Phoenix_Support_Serv"


class TestMeetingDate:

    def test_utc_calendar_for_offset_times(self):
        # 23:30 at UTC-07:00 is already the next day in UTC
        assert format_meeting_date("2025-08-21T23:30:00-07:00") == "2025-08-22"

    def test_naive_datetime_taken_as_utc(self):
        assert format_meeting_date(datetime(2025, 8, 21, 23, 59)) == "2025-08-21"

    def test_aware_datetime_converted(self):
        tz = timezone(timedelta(hours=9))
        assert format_meeting_date(datetime(2025, 8, 22, 1, 0, tzinfo=tz)) == "2025-08-21"

    def test_plain_date(self):
        assert format_meeting_date(date(2025, 8, 21)) == "2025-08-21"

    def test_z_suffix(self):
        assert format_meeting_date("2025-08-21T00:00:00.000Z") == "2025-08-21"


class TestSanitize:

    def test_replaces_disallowed_characters(self):
        assert sanitize("a b/c:d.e-f", 30) == "a_b_c_d.e-f"

    def test_truncates(self):
        assert sanitize("abcdef", 3) == "abc"
