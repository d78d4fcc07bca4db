"""
Workload Engine - Load Meter
Scores how full a day or a date range is.

The daily load (0-100) is a weighted blend of:
- Study time scheduled (40%, saturates at 8 hours)
- Assignments due (40%, saturates at 5)
- Urgency of assignments due within 3 days, weighted by points (20%)
"""

import logging
from datetime import datetime, date, time, timedelta
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel

from .clock import Clock, resolve_now
from .config import get_load_meter_config
from .models import EventKind, LoadEvent
from .timeutils import as_date, calendar_days_until, date_range

logger = logging.getLogger(__name__)


# ============================================
# ENUMS AND CONSTANTS
# ============================================

class LoadLevel(str, Enum):
    """Load classifications (inclusive lower edges)."""
    LOW = "low"                # < 40
    MODERATE = "moderate"      # 40-59
    HIGH = "high"              # 60-79
    OVERLOADED = "overloaded"  # >= 80


LOAD_COLORS = {
    LoadLevel.LOW: "#10B981",         # Green
    LoadLevel.MODERATE: "#F59E0B",    # Yellow
    LoadLevel.HIGH: "#F97316",        # Orange
    LoadLevel.OVERLOADED: "#EF4444",  # Red
}

# Urgency score at which the urgency load saturates (three urgent 100-point items)
URGENCY_SATURATION = 3.0

POINTS_BASELINE = 100.0


# ============================================
# PYDANTIC MODELS
# ============================================

class DailyLoad(BaseModel):
    """Load snapshot for a single day."""
    date: date
    total_hours: float
    assignments_due: int
    events: List[LoadEvent]
    load: int  # 0-100
    level: LoadLevel
    is_overloaded: bool
    warnings: List[str]


class LoadBreakdown(BaseModel):
    assignment_load: float
    study_time_load: float
    urgency_load: float


class RangeLoad(BaseModel):
    """Aggregate load over a date range."""
    start: date
    end: date
    percentage: int  # 0-100
    level: LoadLevel
    total_study_hours: float
    assignments_due: int
    upcoming_exams: int
    overloaded_days: List[date]
    recommendations: List[str]
    breakdown: LoadBreakdown
    daily_loads: List[DailyLoad]


# ============================================
# LOAD METER CLASS
# ============================================

class LoadMeter:
    """
    Calculates academic workload for days and date ranges.

    All methods are pure: events are passed in and results returned.
    """

    def calculate_daily_load(self, events: List[LoadEvent], day: Union[date, datetime]) -> DailyLoad:
        """
        Load for one day.

        Args:
            events: Any events; only those starting on the day are considered
            day: The day to score (also the reference point for urgency)

        Returns:
            DailyLoad with the composite load, its level, the independent
            overload flag and warnings
        """
        config = get_load_meter_config()
        day = as_date(day)
        day_events = [e for e in events if e.start.date() == day]

        total_hours = self._total_study_hours(day_events)
        assignments_due = sum(1 for e in day_events if e.kind == EventKind.ASSIGNMENT)

        study_time_load = self._study_time_load(total_hours)
        assignment_load = self._assignment_load(assignments_due)
        urgency_load = self._urgency_load(day_events, datetime.combine(day, time.min))

        load = (
            study_time_load * config.study_time_weight
            + assignment_load * config.assignment_weight
            + urgency_load * config.urgency_weight
        )
        level = self.get_load_level(load)

        # Raw limits can flag a day even when the blended load stays below the overloaded band
        is_overloaded = (
            level == LoadLevel.OVERLOADED
            or total_hours > config.max_daily_hours
            or assignments_due > config.max_assignments_per_day
        )

        warnings = []
        if total_hours > config.max_daily_hours:
            warnings.append(
                f"{total_hours:.1f} hours of study scheduled "
                f"(max recommended: {config.max_daily_hours:g}h)"
            )
        if assignments_due > config.max_assignments_per_day:
            warnings.append(f"{assignments_due} assignments due (very high)")
        if self.has_schedule_conflicts(day_events):
            warnings.append("Scheduling conflicts detected")
        if self.has_insufficient_breaks(day_events):
            warnings.append("Insufficient break time scheduled")

        return DailyLoad(
            date=day,
            total_hours=total_hours,
            assignments_due=assignments_due,
            events=day_events,
            load=round(load),
            level=level,
            is_overloaded=is_overloaded,
            warnings=warnings,
        )

    def calculate_academic_load(
        self,
        events: List[LoadEvent],
        start: Union[date, datetime],
        end: Union[date, datetime],
        now: Union[datetime, Clock, None] = None,
    ) -> RangeLoad:
        """
        Load over a date range (inclusive), e.g. a week or a month.

        Args:
            events: Calendar events
            start: First day of the range
            end: Last day of the range
            now: Reference timestamp for urgency and "due soon" advice

        Returns:
            RangeLoad with averages, totals, overloaded days and recommendations
        """
        now = resolve_now(now)
        start, end = as_date(start), as_date(end)

        daily_loads = [self.calculate_daily_load(events, day) for day in date_range(start, end)]
        range_events = [e for e in events if start <= e.start.date() <= end]

        if daily_loads:
            average_load = sum(d.load for d in daily_loads) / len(daily_loads)
            total_study_hours = sum(d.total_hours for d in daily_loads)
            average_hours = total_study_hours / len(daily_loads)
        else:
            average_load = total_study_hours = average_hours = 0.0

        assignments_due = sum(1 for e in range_events if e.kind == EventKind.ASSIGNMENT)
        upcoming_exams = sum(1 for e in range_events if e.kind == EventKind.EXAM)

        logger.debug(
            f"Load {start} to {end}: average {average_load:.1f} over {len(daily_loads)} days"
        )

        breakdown = LoadBreakdown(
            assignment_load=self._assignment_load(assignments_due),
            study_time_load=self._study_time_load(average_hours),
            urgency_load=self._urgency_load(range_events, now),
        )

        return RangeLoad(
            start=start,
            end=end,
            percentage=round(average_load),
            level=self.get_load_level(average_load),
            total_study_hours=total_study_hours,
            assignments_due=assignments_due,
            upcoming_exams=upcoming_exams,
            overloaded_days=[d.date for d in daily_loads if d.level == LoadLevel.OVERLOADED],
            recommendations=self._generate_recommendations(daily_loads, range_events, average_load, now),
            breakdown=breakdown,
            daily_loads=daily_loads,
        )

    # ============================================
    # LOAD FACTORS
    # ============================================

    def _study_time_load(self, hours: float) -> float:
        return min(100.0, hours / get_load_meter_config().max_daily_hours * 100)

    def _assignment_load(self, count: int) -> float:
        return min(100.0, count / get_load_meter_config().max_assignments_per_day * 100)

    def _urgency_load(self, events: List[LoadEvent], reference: datetime) -> float:
        """Closer and higher-point assignments contribute more."""
        window = get_load_meter_config().urgency_window_days
        score = 0.0
        for event in events:
            if event.kind != EventKind.ASSIGNMENT:
                continue
            days_until = calendar_days_until(event.start, reference)
            if 0 <= days_until <= window:
                weight = event.points or POINTS_BASELINE
                score += (1 - days_until / window) * (weight / POINTS_BASELINE)
        return min(100.0, score / URGENCY_SATURATION * 100)

    def _total_study_hours(self, events: List[LoadEvent]) -> float:
        return sum(e.duration for e in events if e.kind == EventKind.STUDY_SESSION) / 60

    # ============================================
    # CHECKS
    # ============================================

    def get_load_level(self, percentage: float) -> LoadLevel:
        config = get_load_meter_config()
        if percentage >= config.overloaded_threshold:
            return LoadLevel.OVERLOADED
        if percentage >= config.high_threshold:
            return LoadLevel.HIGH
        if percentage >= config.moderate_threshold:
            return LoadLevel.MODERATE
        return LoadLevel.LOW

    def has_schedule_conflicts(self, events: List[LoadEvent]) -> bool:
        """True when any two events overlap in time (touching ends do not count)."""
        timed = sorted(events, key=lambda e: e.start)
        latest_end = None
        for event in timed:
            if latest_end is not None and event.start < latest_end:
                return True
            if latest_end is None or event.end > latest_end:
                latest_end = event.end
        return False

    def has_insufficient_breaks(self, events: List[LoadEvent]) -> bool:
        """True when consecutive study sessions leave less than the minimum break."""
        min_break = timedelta(minutes=get_load_meter_config().min_break_minutes)
        sessions = sorted(
            (e for e in events if e.kind == EventKind.STUDY_SESSION),
            key=lambda e: e.start,
        )
        for previous, current in zip(sessions, sessions[1:]):
            if current.start - previous.end < min_break:
                return True
        return False

    def get_load_color(self, level: LoadLevel) -> str:
        return LOAD_COLORS[LoadLevel(level)]

    def get_load_color_by_percentage(self, percentage: float) -> str:
        return self.get_load_color(self.get_load_level(percentage))

    # ============================================
    # RECOMMENDATIONS
    # ============================================

    def _generate_recommendations(
        self,
        daily_loads: List[DailyLoad],
        events: List[LoadEvent],
        average_load: float,
        now: datetime,
    ) -> List[str]:
        config = get_load_meter_config()
        recommendations = []

        overloaded = [d for d in daily_loads if d.level == LoadLevel.OVERLOADED]
        if overloaded:
            recommendations.append(
                f"Redistribute workload: {len(overloaded)} day(s) are overloaded"
            )

        if any(d.assignments_due >= config.heavy_assignment_day_count for d in daily_loads):
            recommendations.append("Consider starting assignments earlier to spread out due dates")

        if any(d.total_hours > config.long_study_day_hours for d in daily_loads):
            recommendations.append("Add more breaks between study sessions on heavy days")

        due_soon = [
            e for e in events
            if e.kind == EventKind.ASSIGNMENT
            and 0 <= calendar_days_until(e.start, now) <= config.urgent_focus_days
        ]
        if due_soon:
            recommendations.append(
                f"Focus on {len(due_soon)} assignment(s) due in next {config.urgent_focus_days} days"
            )

        if any(self.has_schedule_conflicts(d.events) for d in daily_loads):
            recommendations.append("Resolve scheduling conflicts to avoid time overlap")

        if not recommendations:
            if average_load < config.moderate_threshold:
                recommendations.append("Great balance! Your schedule looks manageable")
            else:
                recommendations.append("Good workload distribution across the week")

        return recommendations


# ============================================
# SINGLETON AND MODULE-LEVEL HELPERS
# ============================================

_load_meter: Optional[LoadMeter] = None


def get_load_meter() -> LoadMeter:
    """Get the shared load meter instance."""
    global _load_meter
    if _load_meter is None:
        _load_meter = LoadMeter()
    return _load_meter


def calculate_daily_load(events: List[LoadEvent], day: Union[date, datetime]) -> DailyLoad:
    return get_load_meter().calculate_daily_load(events, day)


def calculate_academic_load(
    events: List[LoadEvent],
    start: Union[date, datetime],
    end: Union[date, datetime],
    now: Union[datetime, Clock, None] = None,
) -> RangeLoad:
    return get_load_meter().calculate_academic_load(events, start, end, now)


def has_schedule_conflicts(events: List[LoadEvent]) -> bool:
    return get_load_meter().has_schedule_conflicts(events)


def has_insufficient_breaks(events: List[LoadEvent]) -> bool:
    return get_load_meter().has_insufficient_breaks(events)


def get_load_level(percentage: float) -> LoadLevel:
    return get_load_meter().get_load_level(percentage)


def get_load_color(level: LoadLevel) -> str:
    return get_load_meter().get_load_color(level)


def get_load_color_by_percentage(percentage: float) -> str:
    return get_load_meter().get_load_color_by_percentage(percentage)
