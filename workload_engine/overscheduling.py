"""
Workload Engine - Over-Scheduling Detector
Finds over-scheduled days and suggests how to spread their sessions out.
"""

import logging
from datetime import datetime, date, timedelta
from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel

from .config import get_load_meter_config
from .load_meter import DailyLoad, LoadMeter, get_load_meter
from .models import EventKind, LoadEvent
from .timeutils import as_date, date_range, start_of_week

logger = logging.getLogger(__name__)


# ============================================
# ENUMS AND CONSTANTS
# ============================================

class SuggestionType(str, Enum):
    MOVE = "move"
    REDUCE = "reduce"
    REDISTRIBUTE = "redistribute"
    ADD_BREAK = "add_break"


# Daily study-hour limit comes from the load meter config (LOAD_MAX_DAILY_HOURS)
THRESHOLDS = {
    # Daily limits
    "max_assignments_due": 3,

    # Break time (hours) required once a day passes the study threshold
    "break_check_study_hours": 4,
    "min_break_hours": 1,
    "max_break_gap_hours": 4,  # longer gaps are not breaks

    # Session timing
    "earliest_start_hour": 6,
    "latest_end_hour": 23,
    "overnight_end_hour": 4,
    "back_to_back_gap_minutes": 15,
    "long_session_minutes": 120,

    # Redistribution
    "redistribute_load": 80,
    "min_lighter_days": 2,
    "target_day_max_load": 60,
    "max_events_to_move": 2,
    "redistributed_load_factor": 0.6,
}


# ============================================
# PYDANTIC MODELS
# ============================================

class Conflict(BaseModel):
    first: LoadEvent
    second: LoadEvent
    overlap_minutes: int


class Suggestion(BaseModel):
    type: SuggestionType
    description: str
    target_date: Optional[date] = None
    event_id: Optional[str] = None
    estimated_impact: str


class OverScheduledDay(BaseModel):
    date: date
    issues: List[str]
    recommendations: List[Suggestion]
    load: int
    events: List[LoadEvent]


class RedistributionPlan(BaseModel):
    from_date: date
    to_date: date
    events_to_move: List[LoadEvent]
    estimated_from_load: int
    estimated_to_load: int
    rationale: str


def format_day(day: date) -> str:
    """Short display date, e.g. 'Tue, Nov 4'."""
    return f"{day:%a}, {day:%b} {day.day}"


# ============================================
# OVER-SCHEDULING DETECTOR CLASS
# ============================================

class OverSchedulingDetector:
    """
    Flags days whose schedule is unhealthy, beyond the plain load score:
    - Too many study hours or assignments due
    - Overlapping events
    - Too little break time on long study days
    - Sessions very early or very late
    - Back-to-back sessions
    """

    def __init__(self, load_meter: Optional[LoadMeter] = None):
        self.load_meter = load_meter or get_load_meter()

    def detect_over_scheduling(
        self,
        events: List[LoadEvent],
        start: Union[date, datetime],
        end: Union[date, datetime],
    ) -> List[OverScheduledDay]:
        """Days in the inclusive range with at least one issue, with suggestions."""
        start, end = as_date(start), as_date(end)
        flagged = []

        for day in date_range(start, end):
            daily = self.load_meter.calculate_daily_load(events, day)
            issues = self._detect_issues(daily)
            if not issues:
                continue

            flagged.append(OverScheduledDay(
                date=day,
                issues=issues,
                recommendations=self._generate_suggestions(daily, events, start, end),
                load=daily.load,
                events=daily.events,
            ))

        if flagged:
            logger.info(f"{len(flagged)} over-scheduled day(s) between {start} and {end}")
        return flagged

    def detect_conflicts(self, events: List[LoadEvent]) -> List[Conflict]:
        """Every overlapping pair of events with the overlap in minutes."""
        conflicts = []
        for i, first in enumerate(events):
            for second in events[i + 1:]:
                if first.start < second.end and first.end > second.start:
                    overlap = min(first.end, second.end) - max(first.start, second.start)
                    conflicts.append(Conflict(
                        first=first,
                        second=second,
                        overlap_minutes=round(overlap.total_seconds() / 60),
                    ))
        return conflicts

    def suggest_redistribution(
        self,
        day: OverScheduledDay,
        events: List[LoadEvent],
    ) -> List[RedistributionPlan]:
        """
        Ways to move a day's editable study sessions to lighter days of the
        same (Sunday-started) week.
        """
        movable = self._movable_sessions(day.events)
        if not movable:
            return []

        week_start = start_of_week(day.date)
        week_end = week_start + timedelta(days=6)
        to_move = movable[:THRESHOLDS["max_events_to_move"]]
        moved_minutes = sum(e.duration for e in to_move)
        load_shift = moved_minutes / 60 / self._max_hours() * 100

        plans = []
        for target in self._lighter_days(events, week_start, week_end, day.date):
            if target.load >= THRESHOLDS["target_day_max_load"]:
                continue
            plans.append(RedistributionPlan(
                from_date=day.date,
                to_date=target.date,
                events_to_move=to_move,
                estimated_from_load=max(0, round(day.load - load_shift)),
                estimated_to_load=round(target.load + load_shift),
                rationale=(
                    f"Move {len(to_move)} session(s) to {format_day(target.date)} "
                    f"to balance workload"
                ),
            ))
        return plans

    # ============================================
    # ISSUES
    # ============================================

    def _detect_issues(self, daily: DailyLoad) -> List[str]:
        issues = []
        events = daily.events
        sessions = self._study_sessions(events)

        max_hours = self._max_hours()
        if daily.total_hours > max_hours:
            issues.append(
                f"{daily.total_hours:.1f} hours of study scheduled "
                f"(recommended max: {max_hours:g}h)"
            )

        if daily.assignments_due > THRESHOLDS["max_assignments_due"]:
            issues.append(f"{daily.assignments_due} assignments due (high volume)")

        conflicts = self.detect_conflicts(events)
        if conflicts:
            issues.append(f"{len(conflicts)} scheduling conflict(s) detected")

        if (
            daily.total_hours > THRESHOLDS["break_check_study_hours"]
            and self._break_hours(sessions) < THRESHOLDS["min_break_hours"]
        ):
            issues.append("Insufficient break time between study sessions")

        if any(e.start.hour < THRESHOLDS["earliest_start_hour"] for e in sessions):
            issues.append("Study session scheduled very early (before 6 AM)")

        if any(
            e.end.hour > THRESHOLDS["latest_end_hour"] or e.end.hour < THRESHOLDS["overnight_end_hour"]
            for e in sessions
        ):
            issues.append("Study session scheduled very late (after 11 PM)")

        if self._back_to_back(sessions):
            issues.append("Back-to-back study sessions without adequate breaks")

        return issues

    # ============================================
    # SUGGESTIONS
    # ============================================

    def _generate_suggestions(
        self,
        daily: DailyLoad,
        events: List[LoadEvent],
        start: date,
        end: date,
    ) -> List[Suggestion]:
        suggestions = []
        lighter = self._lighter_days(events, start, end, daily.date)

        movable = self._movable_sessions(daily.events)
        if movable and lighter:
            target = lighter[0]
            for event in movable:
                share = (event.duration / 60 / daily.total_hours) if daily.total_hours else 0
                suggestions.append(Suggestion(
                    type=SuggestionType.MOVE,
                    description=f'Move "{event.title}" to {format_day(target.date)}',
                    target_date=target.date,
                    event_id=event.id,
                    estimated_impact=f"Reduces load by {round(share * daily.load)}%",
                ))

        for event in daily.events:
            if event.is_editable and event.duration > THRESHOLDS["long_session_minutes"]:
                suggestions.append(Suggestion(
                    type=SuggestionType.REDUCE,
                    description=f'Shorten "{event.title}" by 30-60 minutes',
                    event_id=event.id,
                    estimated_impact="Reduces daily load and improves focus",
                ))

        if self._back_to_back(self._study_sessions(daily.events)):
            suggestions.append(Suggestion(
                type=SuggestionType.ADD_BREAK,
                description="Add 15-minute breaks between consecutive study sessions",
                estimated_impact="Improves focus and reduces fatigue",
            ))

        if daily.load > THRESHOLDS["redistribute_load"] and len(lighter) >= THRESHOLDS["min_lighter_days"]:
            reduced = round(daily.load * THRESHOLDS["redistributed_load_factor"])
            suggestions.append(Suggestion(
                type=SuggestionType.REDISTRIBUTE,
                description=f"Redistribute workload across {len(lighter)} lighter days this week",
                estimated_impact=f"Could reduce load to ~{reduced}%",
            ))

        return suggestions

    # ============================================
    # HELPERS
    # ============================================

    def _max_hours(self) -> float:
        return get_load_meter_config().max_daily_hours

    def _study_sessions(self, events: List[LoadEvent]) -> List[LoadEvent]:
        return sorted(
            (e for e in events if e.kind == EventKind.STUDY_SESSION),
            key=lambda e: e.start,
        )

    def _movable_sessions(self, events: List[LoadEvent]) -> List[LoadEvent]:
        return [e for e in self._study_sessions(events) if e.is_editable]

    def _lighter_days(
        self,
        events: List[LoadEvent],
        start: date,
        end: date,
        exclude: date,
    ) -> List[DailyLoad]:
        """Other days of the range, lightest first."""
        loads = [
            self.load_meter.calculate_daily_load(events, day)
            for day in date_range(start, end)
            if day != exclude
        ]
        return sorted(loads, key=lambda d: d.load)

    def _break_hours(self, sessions: List[LoadEvent]) -> float:
        """Total gaps between consecutive sessions, ignoring gaps of 4h or more."""
        total = 0.0
        for previous, current in zip(sessions, sessions[1:]):
            gap_hours = (current.start - previous.end).total_seconds() / 3600
            if 0 < gap_hours < THRESHOLDS["max_break_gap_hours"]:
                total += gap_hours
        return total

    def _back_to_back(self, sessions: List[LoadEvent]) -> List[Tuple[LoadEvent, LoadEvent]]:
        limit = timedelta(minutes=THRESHOLDS["back_to_back_gap_minutes"])
        return [
            (previous, current)
            for previous, current in zip(sessions, sessions[1:])
            if current.start - previous.end < limit
        ]


# ============================================
# SINGLETON AND MODULE-LEVEL HELPERS
# ============================================

_detector: Optional[OverSchedulingDetector] = None


def get_over_scheduling_detector() -> OverSchedulingDetector:
    global _detector
    if _detector is None:
        _detector = OverSchedulingDetector()
    return _detector


def detect_conflicts(events: List[LoadEvent]) -> List[Conflict]:
    return get_over_scheduling_detector().detect_conflicts(events)


def detect_over_scheduling(
    events: List[LoadEvent],
    start: Union[date, datetime],
    end: Union[date, datetime],
) -> List[OverScheduledDay]:
    return get_over_scheduling_detector().detect_over_scheduling(events, start, end)


def suggest_redistribution(day: OverScheduledDay, events: List[LoadEvent]) -> List[RedistributionPlan]:
    return get_over_scheduling_detector().suggest_redistribution(day, events)
