"""Tests for config.py, clock.py, timeutils.py and logger.py."""

import logging

import pytest
from datetime import date, datetime, time, timedelta, timezone
from pydantic import ValidationError

from workload_engine import (
    Assignment,
    CalendarSession,
    CourseGrade,
    EventKind,
    FixedClock,
    InvalidTimeError,
    LoadEvent,
    StudyTask,
    get_config_summary,
    get_load_meter_config,
    get_planner_config,
    get_sync_config,
    reload_config,
    resolve_now,
)
from workload_engine.timeutils import (
    calendar_days_until,
    date_range,
    format_time,
    minutes_to_time,
    parse_time,
    start_of_week,
    time_to_minutes,
    to_naive,
    whole_days_until,
)


class TestConfig:
    def test_defaults(self):
        planner = get_planner_config()
        assert planner.default_session_length_minutes == 60
        assert planner.cram_max_days == 3
        assert planner.moderate_max_days == 7
        assert get_sync_config().max_study_days == 10
        assert get_load_meter_config().max_daily_hours == 8.0

    def test_cached(self):
        assert get_planner_config() is get_planner_config()

    def test_env_override_after_reload(self, monkeypatch):
        monkeypatch.setenv("SYNC_MAX_STUDY_DAYS", "5")
        reload_config()
        assert get_sync_config().max_study_days == 5

    def test_bounds_enforced(self, monkeypatch):
        monkeypatch.setenv("SYNC_REGENERATION_JITTER", "0.9")
        reload_config()
        with pytest.raises(ValidationError):
            get_sync_config()

    def test_summary(self):
        summary = get_config_summary()
        assert summary["planner"]["session_length"] == 60
        assert summary["sync"]["max_study_days"] == 10
        assert summary["load_meter"]["thresholds"]["overloaded"] == 80


class TestClock:
    def test_fixed_clock(self):
        clock = FixedClock(datetime(2025, 1, 1, 9, 0))
        assert clock.now() == datetime(2025, 1, 1, 9, 0)
        clock.advance(hours=2)
        assert clock.now() == datetime(2025, 1, 1, 11, 0)

    def test_resolve_now(self):
        instant = datetime(2025, 1, 1)
        assert resolve_now(instant) is instant
        assert resolve_now(FixedClock(instant)) == instant
        assert isinstance(resolve_now(), datetime)

    def test_resolve_now_drops_timezone(self):
        aware = datetime(2025, 11, 4, 10, 0, tzinfo=timezone.utc)
        assert resolve_now(aware) == datetime(2025, 11, 4, 10, 0)
        assert resolve_now(FixedClock(aware)).tzinfo is None


class TestTimeUtils:
    def test_minutes_round_trip(self):
        assert time_to_minutes(time(14, 30)) == 870
        assert minutes_to_time(870) == time(14, 30)
        assert minutes_to_time(24 * 60 + 5) == time(0, 5)

    def test_parse_and_format(self):
        assert parse_time("09:05") == time(9, 5)
        assert format_time(time(9, 5)) == "09:05"

    @pytest.mark.parametrize("value", ["9am", "25:00", "12:61", "12"])
    def test_invalid_times(self, value):
        with pytest.raises(InvalidTimeError):
            parse_time(value)

    def test_day_counts(self):
        now = datetime(2025, 11, 4, 10, 0)
        due = now + timedelta(days=2, hours=3)
        assert whole_days_until(due, now) == 2
        assert calendar_days_until(due, now) == 3

    def test_date_range_inclusive(self):
        days = list(date_range(date(2025, 11, 9), datetime(2025, 11, 11, 20, 0)))
        assert days == [date(2025, 11, 9), date(2025, 11, 10), date(2025, 11, 11)]

    def test_aware_timestamps_become_naive_utc(self):
        aware = datetime(2025, 11, 4, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_naive(aware) == datetime(2025, 11, 4, 10, 0)
        naive = datetime(2025, 11, 4, 10, 0)
        assert to_naive(naive) is naive

    def test_day_counts_mix_naive_and_aware(self):
        now = datetime(2025, 11, 4, 10, 0)
        due = datetime(2025, 11, 6, 10, 0, tzinfo=timezone.utc)
        assert whole_days_until(due, now) == 2
        assert calendar_days_until(due, now) == 2

    def test_start_of_week_is_sunday(self):
        assert start_of_week(date(2025, 11, 12)) == date(2025, 11, 9)
        assert start_of_week(date(2025, 11, 9)) == date(2025, 11, 9)


class TestValidation:
    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            StudyTask(id="t", title="t", duration=-5)

    def test_percentage_bounds(self):
        with pytest.raises(ValidationError):
            CourseGrade(course_id="c", percentage=120)

    def test_session_start_time_validated(self):
        with pytest.raises(ValidationError):
            CalendarSession(id="s", course_id="c", title="t", date=date(2025, 11, 5), start_time="noon")

    def test_aware_timestamps_stored_as_naive_utc(self):
        due = datetime(2025, 11, 6, 23, 59, tzinfo=timezone(timedelta(hours=-5)))
        assignment = Assignment(id="a", course_id="c", title="t", due_date=due)
        assert assignment.due_date == datetime(2025, 11, 7, 4, 59)
        assert assignment.due_date.tzinfo is None

        event = LoadEvent(id="e", kind=EventKind.ASSIGNMENT, start=due)
        assert event.start == datetime(2025, 11, 7, 4, 59)


class TestLogging:
    def test_plan_generation_is_logged(self, caplog, make_assignment, now):
        from workload_engine import generate_plan
        with caplog.at_level(logging.INFO, logger="workload_engine"):
            generate_plan([make_assignment()], {}, now=now)
        assert any("Generated plan" in r.getMessage() for r in caplog.records)
