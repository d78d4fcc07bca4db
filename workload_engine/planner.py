"""
Workload Engine - Plan Generator
Ranks assignments, decomposes and distributes each into calendar sessions,
builds the matching study plans and explains the result.
"""

import logging
from collections import OrderedDict
from datetime import datetime, date
from typing import Dict, List, Optional, Tuple, Union

from .clock import Clock, resolve_now
from .config import get_planner_config
from .decomposer import decompose_assignment
from .distributor import distribute_sessions
from .errors import DuplicateAssignmentError
from .models import (
    Assignment, CalendarSession, CourseGrade, CoursePriority, DateDistribution,
    PlanExplanation, PlanGenerationResult, PlanSource, PlanStatus, PlanType,
    Preferences, StudyPlan, StudyTask, plan_id_for_assignment,
)
from .scoring import grade_for, priority_score

logger = logging.getLogger(__name__)


# ============================================
# EXPLANATION TEXT
# ============================================

STRATEGY_STRONG = (
    "Maintain your strong performance by staying ahead of deadlines "
    "and reinforcing key concepts."
)
STRATEGY_BALANCED = (
    "Focus on courses with lower grades while maintaining your current "
    "performance. Prioritize understanding over completion."
)
STRATEGY_RECOVERY = (
    "Concentrate on improving grades in struggling courses. Consider forming "
    "study groups and utilizing office hours."
)


def grade_standing(percentage: float) -> str:
    if percentage < 75:
        return "needs improvement"
    if percentage < 85:
        return "good standing"
    return "excellent"


def urgency_label(score: float) -> str:
    config = get_planner_config()
    if score > config.high_priority_threshold:
        return "urgent attention required"
    if score > config.medium_priority_threshold:
        return "moderate priority"
    return "on track"


def workload_reason(hours: float) -> str:
    if hours > 4:
        return "High workload day - multiple deadlines approaching"
    if hours > 2:
        return "Moderate study load"
    return "Light study day"


def course_reasoning(course_name: str, grade: CourseGrade, assignments: int, score: float) -> str:
    plural = "" if assignments == 1 else "s"
    return (
        f"{course_name} ({grade.letter}, {grade.percentage:g}%) is in {grade_standing(grade.percentage)}. "
        f"With {assignments} upcoming assignment{plural}, this course has {urgency_label(score)}. "
        f"AI prioritized based on due dates and current grade."
    )


def general_strategy(grades: Dict[str, CourseGrade]) -> str:
    """Overall advice from the average of the supplied course grades."""
    if grades:
        average = sum(g.percentage for g in grades.values()) / len(grades)
    else:
        average = get_planner_config().default_grade_percentage

    if average > 85:
        return STRATEGY_STRONG
    if average > 75:
        return STRATEGY_BALANCED
    return STRATEGY_RECOVERY


# ============================================
# EXPLANATION ROLLUPS
# ============================================

def course_breakdown(
    assignments: List[Assignment],
    grades: Dict[str, CourseGrade],
    scores: Dict[str, float],
) -> List[CoursePriority]:
    """Per-course rollup, highest average priority first."""
    by_course: "OrderedDict[str, List[Assignment]]" = OrderedDict()
    for assignment in assignments:
        by_course.setdefault(assignment.course_id, []).append(assignment)

    breakdown = []
    for course_id, course_assignments in by_course.items():
        first = course_assignments[0]
        grade = grade_for(course_id, grades)
        average = sum(scores[a.id] for a in course_assignments) / len(course_assignments)
        breakdown.append(CoursePriority(
            course_id=course_id,
            course_name=first.display_course,
            course_color=first.course_color,
            current_grade=grade,
            assignments=len(course_assignments),
            total_hours=sum(a.estimated_hours for a in course_assignments),
            priority_score=average,
            reasoning=course_reasoning(first.display_course, grade, len(course_assignments), average),
        ))

    breakdown.sort(key=lambda c: c.priority_score, reverse=True)
    return breakdown


def time_distribution(sessions: List[CalendarSession]) -> List[DateDistribution]:
    """Scheduled hours per date, in date order."""
    minutes_by_date: Dict[date, int] = {}
    for session in sessions:
        minutes_by_date[session.date] = minutes_by_date.get(session.date, 0) + session.duration

    distribution = []
    for day in sorted(minutes_by_date):
        hours = minutes_by_date[day] / 60
        distribution.append(DateDistribution(
            date=day,
            hours=round(hours, 1),
            reason=workload_reason(hours),
        ))
    return distribution


# ============================================
# STUDY PLAN CREATION
# ============================================

def _plan_type(assignment: Assignment) -> PlanType:
    return PlanType(assignment.type.value)


def build_study_plan(
    assignment: Assignment,
    tasks: List[StudyTask],
    sessions: List[CalendarSession],
    now: datetime,
) -> StudyPlan:
    """
    Study plan mirroring an assignment's generated sessions.

    Each task is stamped with the date of the session covering it.
    """
    scheduled: Dict[str, date] = {}
    for session in sessions:
        for task_id in session.task_ids:
            scheduled.setdefault(task_id, session.date)

    plan_tasks = [
        task.model_copy(update={"scheduled_date": scheduled.get(task.id)})
        for task in tasks
    ]

    return StudyPlan(
        id=plan_id_for_assignment(assignment.id),
        title=f"{assignment.title} Prep",
        course_id=assignment.course_id,
        type=_plan_type(assignment),
        due_date=assignment.due_date,
        created_date=now,
        status=PlanStatus.ACTIVE,
        progress=0,
        source=PlanSource.CALENDAR_GENERATED,
        allow_regeneration=True,
        tasks=plan_tasks,
        assignment_id=assignment.id,
        course_name=assignment.course_name,
    )


# ============================================
# ORCHESTRATION
# ============================================

def rank_assignments(
    assignments: List[Assignment],
    grades: Dict[str, CourseGrade],
    now: datetime,
) -> List[Tuple[Assignment, float]]:
    """Assignments paired with their priority, highest first (stable on ties)."""
    ranked = [
        (a, priority_score(a, grade_for(a.course_id, grades), now).total)
        for a in assignments
    ]
    ranked.sort(key=lambda pair: pair[1], reverse=True)
    return ranked


def generate_plan(
    assignments: List[Assignment],
    grades: Optional[Dict[str, CourseGrade]] = None,
    preferences: Optional[Preferences] = None,
    now: Union[datetime, Clock, None] = None,
) -> PlanGenerationResult:
    """
    Generate the study calendar, plans and explanation for a set of assignments.

    Args:
        assignments: Upcoming assignments
        grades: Course grade snapshots by course id (missing ones use the default)
        preferences: Study preferences (session and break length)
        now: Reference timestamp or clock

    Returns:
        PlanGenerationResult; the calendar lists sessions grouped by
        assignment in descending priority order.

    Raises:
        DuplicateAssignmentError: If two assignments share an id
    """
    now = resolve_now(now)
    grades = grades or {}

    seen = set()
    for assignment in assignments:
        if assignment.id in seen:
            raise DuplicateAssignmentError(assignment.id)
        seen.add(assignment.id)

    ranked = rank_assignments(assignments, grades, now)

    calendar: List[CalendarSession] = []
    plans: Dict[str, StudyPlan] = {}
    scores: Dict[str, float] = {}

    for assignment, score in ranked:
        scores[assignment.id] = score
        tasks = decompose_assignment(assignment)
        sessions = distribute_sessions(assignment, score, tasks, preferences, now)
        calendar.extend(sessions)
        plans[assignment.id] = build_study_plan(assignment, tasks, sessions, now)
        logger.debug(
            f"Scheduled '{assignment.title}' (priority {score:.2f}): "
            f"{len(tasks)} tasks in {len(sessions)} sessions"
        )

    explanation = PlanExplanation(
        total_assignments=len(assignments),
        total_study_hours=sum(a.estimated_hours for a in assignments),
        priority_breakdown=course_breakdown(assignments, grades, scores),
        time_distribution=time_distribution(calendar),
        general_strategy=general_strategy(grades),
    )

    logger.info(
        f"Generated plan: {len(assignments)} assignments, {len(calendar)} sessions "
        f"across {len(explanation.time_distribution)} days"
    )

    return PlanGenerationResult(
        calendar=calendar,
        explanation=explanation,
        plans=[plans[a.id] for a in assignments],
    )
