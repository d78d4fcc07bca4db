"""
Test fixtures for the workload engine.

"now" is pinned to Tuesday 2025-11-04 10:00 so every schedule is deterministic.
File logging is switched off before the package is imported.
"""

import os

os.environ.setdefault("WORKLOAD_LOG_TO_FILE", "false")

import pytest
from datetime import datetime, timedelta

from workload_engine import (
    Assignment,
    AssignmentType,
    CourseGrade,
    FixedClock,
    reload_config,
)


NOW = datetime(2025, 11, 4, 10, 0)


@pytest.fixture(autouse=True)
def fresh_config():
    """Each test sees configuration rebuilt from its own environment."""
    reload_config()
    yield
    reload_config()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def make_assignment():
    """Factory for assignments due a number of days after NOW."""

    def _make(
        id="a1",
        days=5,
        hours=3.0,
        points=100,
        type=AssignmentType.ASSIGNMENT,
        course_id="c1",
        title="Essay",
        **extra,
    ):
        return Assignment(
            id=id,
            course_id=course_id,
            title=title,
            due_date=NOW + timedelta(days=days),
            points=points,
            type=type,
            estimated_hours=hours,
            **extra,
        )

    return _make


@pytest.fixture
def grades():
    return {
        "c1": CourseGrade(course_id="c1", letter="C", percentage=70),
        "c2": CourseGrade(course_id="c2", letter="A", percentage=95),
    }
