"""
Workload Engine - Plan/Calendar Synchronizer
Keeps a study plan and its calendar sessions consistent in both directions.

Plan -> calendar: a plan's sessions are regenerated from its remaining
(incomplete) tasks. Calendar -> plan: moving a session reschedules the whole
plan to the session's date (plan-level rescheduling).

Plans move active <-> completed as progress reaches or leaves 100%.
Every function returns new objects and leaves its inputs untouched.
"""

import logging
import random
from datetime import datetime
from typing import Iterable, List, Optional

from .config import get_sync_config
from .distributor import distribute_tasks, sessions_by_date, tier_for_score
from .errors import OrphanedTaskError, TaskNotFoundError
from .models import (
    CalendarSession, PlanStatus, PlanType, Preferences, PriorityTier,
    SessionKind, StudyPlan, StudyTask, SyncResult,
)
from .timeutils import calendar_days_until, to_naive

logger = logging.getLogger(__name__)


# ============================================
# PROGRESS AND STATUS
# ============================================

def compute_progress(tasks: List[StudyTask]) -> int:
    """Rounded percentage of completed tasks (0 for an empty plan)."""
    if not tasks:
        return 0
    completed = sum(1 for t in tasks if t.completed)
    return round(completed / len(tasks) * 100)


def derive_status(progress: int, current: PlanStatus = PlanStatus.ACTIVE) -> PlanStatus:
    """Completed exactly at 100%; archived plans otherwise stay archived."""
    if progress >= 100:
        return PlanStatus.COMPLETED
    if current == PlanStatus.ARCHIVED:
        return PlanStatus.ARCHIVED
    return PlanStatus.ACTIVE


def _with_tasks(plan: StudyPlan, tasks: List[StudyTask], **update) -> StudyPlan:
    progress = compute_progress(tasks)
    return plan.model_copy(update={
        "tasks": tasks,
        "progress": progress,
        "status": derive_status(progress, plan.status),
        **update,
    })


# ============================================
# LINKAGE
# ============================================

def is_linked(session: CalendarSession, plan: StudyPlan) -> bool:
    """A session belongs to a plan by plan id or by the plan's source assignment."""
    if session.plan_id is not None and session.plan_id == plan.id:
        return True
    return (
        plan.assignment_id is not None
        and session.related_assignment_id == plan.assignment_id
    )


def sessions_for_plan(plan: StudyPlan, sessions: List[CalendarSession]) -> List[CalendarSession]:
    return [s for s in sessions if is_linked(s, plan)]


def find_plan_for_session(session: CalendarSession, plans: List[StudyPlan]) -> Optional[StudyPlan]:
    for plan in plans:
        if is_linked(session, plan):
            return plan
    return None


def is_synced(plan: StudyPlan, sessions: List[CalendarSession]) -> bool:
    """False only when work remains but nothing is scheduled for it."""
    if not plan.incomplete_tasks:
        return True
    return len(sessions_for_plan(plan, sessions)) > 0


def study_days(plan: StudyPlan, now: datetime) -> int:
    """Days to spread remaining work over: due-day excluded, capped."""
    days_until_due = calendar_days_until(plan.due_date, now)
    return max(1, min(days_until_due - 1, get_sync_config().max_study_days))


# ============================================
# PLAN -> CALENDAR
# ============================================

def sync_plan_to_calendar(
    plan: StudyPlan,
    sessions: List[CalendarSession],
    now: datetime,
    preferences: Optional[Preferences] = None,
    priority_score: Optional[float] = None,
) -> SyncResult:
    """
    Replace a plan's sessions with ones generated from its incomplete tasks.

    Args:
        plan: The plan to schedule
        sessions: The full current calendar
        now: Reference timestamp
        preferences: Study preferences (session length)
        priority_score: Composite priority to derive the tier from. When
            omitted the tier of the plan's existing sessions is kept.

    Returns:
        SyncResult with the plan (tasks stamped with their new session dates)
        and the merged calendar sorted by date.
    """
    linked = sessions_for_plan(plan, sessions)
    unrelated = [s for s in sessions if not is_linked(s, plan)]

    start_time = None
    if priority_score is not None:
        start_time, tier = tier_for_score(priority_score)
    elif linked:
        tier = linked[0].priority
    else:
        tier = PriorityTier.MEDIUM

    course_color = next((s.course_color for s in linked if s.course_color), None)
    kind = SessionKind.EXAM if plan.type == PlanType.EXAM else SessionKind.STUDY

    regenerated = distribute_tasks(
        plan.incomplete_tasks,
        session_id_prefix=plan.assignment_id or plan.id,
        title=plan.title,
        course_id=plan.course_id,
        due_date=plan.due_date,
        now=now,
        kind=kind,
        priority=tier,
        start_time=start_time,
        preferences=preferences,
        days_available=study_days(plan, now),
        related_assignment_id=plan.assignment_id,
        plan_id=plan.id,
        course_name=plan.course_name,
        course_color=course_color,
    )

    scheduled = {}
    for session in regenerated:
        for task_id in session.task_ids:
            scheduled[task_id] = session.date

    tasks = [
        task if task.completed else task.model_copy(update={"scheduled_date": scheduled.get(task.id)})
        for task in plan.tasks
    ]

    logger.debug(
        f"Synced plan {plan.id}: replaced {len(linked)} sessions with {len(regenerated)}"
    )

    return SyncResult(
        plan=_with_tasks(plan, tasks),
        sessions=sessions_by_date(unrelated + regenerated),
    )


# ============================================
# CALENDAR -> PLAN
# ============================================

def sync_calendar_to_plan(
    session: CalendarSession,
    plans: List[StudyPlan],
    completed_task_ids: Iterable[str] = (),
) -> List[StudyPlan]:
    """
    Reschedule the plan a session belongs to onto the session's date.

    The date is applied to every task of the plan, not only those the
    session covers. Task ids in completed_task_ids are marked complete.

    Raises:
        OrphanedTaskError: If the session references tasks the plan lacks
    """
    plan = find_plan_for_session(session, plans)
    if plan is None:
        logger.warning(f"Session {session.id} does not belong to any known plan")
        return list(plans)

    known_ids = {t.id for t in plan.tasks}
    missing = [task_id for task_id in session.task_ids if task_id not in known_ids]
    if missing:
        raise OrphanedTaskError(session.id, plan.id, missing)

    completed_ids = set(completed_task_ids)
    tasks = [
        task.model_copy(update={
            "scheduled_date": session.date,
            "completed": task.completed or task.id in completed_ids,
        })
        for task in plan.tasks
    ]
    updated = _with_tasks(plan, tasks)

    return [updated if p.id == plan.id else p for p in plans]


# ============================================
# TASK COMPLETION
# ============================================

def set_task_completion(
    task_id: str,
    completed: bool,
    plan: StudyPlan,
    sessions: List[CalendarSession],
    now: datetime,
    preferences: Optional[Preferences] = None,
) -> SyncResult:
    """
    Mark a task complete or incomplete and re-sync the calendar.

    Idempotent: setting a task to its current state only re-syncs.

    Raises:
        TaskNotFoundError: If the task is not part of the plan
    """
    if plan.find_task(task_id) is None:
        raise TaskNotFoundError(task_id, plan.id)

    tasks = [
        task.model_copy(update={"completed": completed}) if task.id == task_id else task
        for task in plan.tasks
    ]
    updated = _with_tasks(plan, tasks)

    if updated.status != plan.status:
        logger.info(f"Plan {plan.id} is now {updated.status.value} ({updated.progress}%)")

    return sync_plan_to_calendar(updated, sessions, now, preferences)


def mark_task_completed(
    task_id: str,
    plan: StudyPlan,
    sessions: List[CalendarSession],
    now: datetime,
    preferences: Optional[Preferences] = None,
) -> SyncResult:
    return set_task_completion(task_id, True, plan, sessions, now, preferences)


def mark_task_incomplete(
    task_id: str,
    plan: StudyPlan,
    sessions: List[CalendarSession],
    now: datetime,
    preferences: Optional[Preferences] = None,
) -> SyncResult:
    return set_task_completion(task_id, False, plan, sessions, now, preferences)


# ============================================
# REGENERATION
# ============================================

def regenerate_plan_with_ai(
    plan: StudyPlan,
    now: datetime,
    rng: Optional[random.Random] = None,
) -> StudyPlan:
    """
    Re-estimate the remaining work of a plan.

    Incomplete task durations are scaled by a uniform factor within the
    configured jitter (default +/-10%); completed tasks are kept as-is.
    The creation timestamp moves to now.
    """
    if not plan.allow_regeneration:
        logger.warning(f"Regeneration is disabled for plan {plan.id}")
        return plan

    rng = rng or random.Random()
    jitter = get_sync_config().regeneration_jitter

    tasks = []
    for task in plan.tasks:
        if task.completed:
            tasks.append(task)
            continue
        factor = rng.uniform(1 - jitter, 1 + jitter)
        tasks.append(task.model_copy(update={"duration": max(0, round(task.duration * factor))}))

    logger.info(f"Regenerated plan {plan.id}: {len(plan.incomplete_tasks)} tasks re-estimated")

    return _with_tasks(plan, tasks, created_date=to_naive(now))
