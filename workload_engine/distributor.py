"""
Workload Engine - Session Distributor
Packs an assignment's tasks into calendar sessions and spreads them between
tomorrow and the due date.

Spacing strategy by days available:
- cram (<= 3 days): two sessions per day
- moderate (<= 7 days): one session per day
- comfortable: sessions spaced evenly across the window

A session lasts at most the session length. Sessions that share a date are
placed one after another from the tier start time, separated by the break
length.
"""

import logging
import math
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .config import get_planner_config
from .models import (
    Assignment, AssignmentType, CalendarSession, GenerationSource,
    Preferences, PriorityTier, SessionKind, StudyTask, plan_id_for_assignment,
)
from .timeutils import (
    as_date, format_time, minutes_to_time, parse_time, time_to_minutes, tomorrow, whole_days_until,
)

logger = logging.getLogger(__name__)


class SpacingStrategy(str, Enum):
    CRAM = "cram"
    MODERATE = "moderate"
    COMFORTABLE = "comfortable"


# ============================================
# TIERS AND SPACING
# ============================================

def tier_for_score(score: float) -> Tuple[str, PriorityTier]:
    """Start time and priority tier for a composite priority score."""
    config = get_planner_config()
    if score > config.high_priority_threshold:
        return config.high_priority_start, PriorityTier.HIGH
    if score > config.medium_priority_threshold:
        return config.medium_priority_start, PriorityTier.MEDIUM
    return config.low_priority_start, PriorityTier.LOW


def start_time_for_tier(tier: PriorityTier) -> str:
    config = get_planner_config()
    return {
        PriorityTier.HIGH: config.high_priority_start,
        PriorityTier.MEDIUM: config.medium_priority_start,
        PriorityTier.LOW: config.low_priority_start,
    }[PriorityTier(tier)]


def spacing_strategy(days_available: int) -> SpacingStrategy:
    config = get_planner_config()
    if days_available <= config.cram_max_days:
        return SpacingStrategy.CRAM
    if days_available <= config.moderate_max_days:
        return SpacingStrategy.MODERATE
    return SpacingStrategy.COMFORTABLE


def session_offsets(num_sessions: int, days_available: int) -> List[int]:
    """
    Day offset from tomorrow for each planned session slot.

    Args:
        num_sessions: Slots to place
        days_available: Whole days until the due date (at least 1)

    Returns:
        Non-decreasing list of offsets, one per slot
    """
    strategy = spacing_strategy(days_available)

    if strategy == SpacingStrategy.CRAM:
        per_day = get_planner_config().cram_sessions_per_day
        return [i // per_day for i in range(num_sessions)]

    if strategy == SpacingStrategy.MODERATE:
        return list(range(num_sessions))

    spacing = max(1, days_available // num_sessions)
    return [i * spacing for i in range(num_sessions)]


# ============================================
# PACKING
# ============================================

def pack_tasks(tasks: List[StudyTask], session_length: int) -> List[List[StudyTask]]:
    """
    Greedy single pass: keep adding tasks to the current session until its
    accumulated minutes reach the session length, then start a new one.

    Task order is preserved and every task lands in exactly one group.
    A task longer than the session length gets a session of its own.
    """
    groups: List[List[StudyTask]] = []
    current: List[StudyTask] = []
    accumulated = 0

    for task in tasks:
        current.append(task)
        accumulated += task.duration
        if accumulated >= session_length:
            groups.append(current)
            current = []
            accumulated = 0

    if current:
        groups.append(current)

    return groups


def _session_length(preferences: Optional[Preferences]) -> int:
    if preferences is not None and preferences.session_length:
        return preferences.session_length
    return get_planner_config().default_session_length_minutes


def _break_length(preferences: Optional[Preferences]) -> int:
    if preferences is not None:
        return preferences.break_length
    return get_planner_config().default_break_minutes


# ============================================
# DISTRIBUTION
# ============================================

def distribute_tasks(
    tasks: List[StudyTask],
    *,
    session_id_prefix: str,
    title: str,
    course_id: str,
    due_date: datetime,
    now: datetime,
    kind: SessionKind = SessionKind.STUDY,
    priority: PriorityTier = PriorityTier.MEDIUM,
    start_time: Optional[str] = None,
    preferences: Optional[Preferences] = None,
    days_available: Optional[int] = None,
    related_assignment_id: Optional[str] = None,
    plan_id: Optional[str] = None,
    course_name: Optional[str] = None,
    course_color: Optional[str] = None,
) -> List[CalendarSession]:
    """
    Turn tasks into dated sessions between tomorrow and the due date.

    Used both for fresh plans and for re-syncing an edited plan. Passing
    days_available overrides the whole-days-until-due window.

    Returns:
        Sessions ordered by date. Empty when there are no tasks or the due
        date is before tomorrow.
    """
    if not tasks:
        return []

    first_day = tomorrow(now)
    last_day = as_date(due_date)
    if last_day < first_day:
        logger.debug(f"No room to schedule '{title}': due {last_day} is before {first_day}")
        return []

    if days_available is None:
        days_available = whole_days_until(due_date, now)
    days_available = max(1, days_available)

    session_length = _session_length(preferences)
    total_minutes = sum(t.duration for t in tasks)
    num_sessions = max(1, math.ceil(total_minutes / session_length))
    offsets = session_offsets(num_sessions, days_available)

    groups = pack_tasks(tasks, session_length)
    if start_time is None:
        start_time = start_time_for_tier(priority)
    tier_start = time_to_minutes(parse_time(start_time))
    break_minutes = _break_length(preferences)

    # Next free start (minutes since midnight) on each date already used
    next_start: Dict[date, int] = {}

    sessions = []
    for idx, group in enumerate(groups):
        # Packing can produce more groups than planned slots; reuse the last one
        offset = offsets[min(idx, len(offsets) - 1)]
        session_date = min(first_day + timedelta(days=offset), last_day)

        duration = min(sum(t.duration for t in group), session_length)
        slot_start = next_start.get(session_date, tier_start)
        next_start[session_date] = slot_start + duration + break_minutes

        sessions.append(CalendarSession(
            id=f"{session_id_prefix}-session-{idx}",
            kind=kind,
            course_id=course_id,
            title=f"{title} - Study Session {idx + 1}",
            date=session_date,
            start_time=format_time(minutes_to_time(slot_start)),
            duration=duration,
            task_ids=[t.id for t in group],
            priority=priority,
            source=GenerationSource.AI_GENERATED,
            related_assignment_id=related_assignment_id,
            plan_id=plan_id,
            course_name=course_name,
            course_color=course_color,
        ))

    return sessions


def distribute_sessions(
    assignment: Assignment,
    score: float,
    tasks: List[StudyTask],
    preferences: Optional[Preferences],
    now: datetime,
) -> List[CalendarSession]:
    """Schedule an assignment's tasks using its priority score for the tier."""
    start_time, tier = tier_for_score(score)
    kind = SessionKind.EXAM if assignment.type == AssignmentType.EXAM else SessionKind.STUDY

    return distribute_tasks(
        tasks,
        session_id_prefix=assignment.id,
        title=assignment.title,
        course_id=assignment.course_id,
        due_date=assignment.due_date,
        now=now,
        kind=kind,
        priority=tier,
        start_time=start_time,
        preferences=preferences,
        related_assignment_id=assignment.id,
        plan_id=plan_id_for_assignment(assignment.id),
        course_name=assignment.course_name,
        course_color=assignment.course_color,
    )


def sessions_by_date(sessions: List[CalendarSession]) -> List[CalendarSession]:
    return sorted(sessions, key=lambda s: (s.date, s.start_time, s.id))


