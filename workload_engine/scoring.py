"""
Workload Engine - Scoring Primitives
Urgency, workload and grade-priority sub-scores and the composite priority
used to rank assignments. Scores are recomputed on every call since they
depend on "now".
"""

from datetime import datetime
from typing import Dict, Optional

from .config import get_planner_config
from .errors import MissingGradeError
from .models import Assignment, AssignmentType, CourseGrade, PriorityScore
from .timeutils import fractional_days_between


# Weighted formula: 40% urgency, 30% workload, 30% grade
URGENCY_WEIGHT = 0.4
WORKLOAD_WEIGHT = 0.3
GRADE_WEIGHT = 0.3

TYPE_FACTORS = {
    AssignmentType.EXAM: 1.5,
    AssignmentType.PROJECT: 1.3,
}

HOURS_BASELINE = 5.0
POINTS_BASELINE = 100.0


def urgency_score(due_date: datetime, now: datetime) -> float:
    """
    Inverse power-law urgency: max(1, days)^-1.5 * 10.

    The one-day floor keeps the score finite for due dates today or in
    the past. Ranges from ~0.06 (30 days out) to 10 (due within a day).
    """
    days_until = max(1.0, fractional_days_between(now, due_date))
    return days_until ** -1.5 * 10


def workload_score(estimated_hours: float, points: float, assignment_type: AssignmentType) -> float:
    """Effort relative to a 5-hour, 100-point baseline, scaled by type."""
    type_factor = TYPE_FACTORS.get(AssignmentType(assignment_type), 1.0)
    return (estimated_hours / HOURS_BASELINE) * (points / POINTS_BASELINE) * type_factor


def grade_priority_score(percentage: float) -> float:
    """Lower grades need more attention: 0 at 100%, 5 at 0%."""
    return (100 - percentage) / 20


def default_grade(course_id: str) -> CourseGrade:
    """Neutral grade snapshot used when a course has none."""
    config = get_planner_config()
    return CourseGrade(
        course_id=course_id,
        letter=config.default_grade_letter,
        percentage=config.default_grade_percentage,
    )


def grade_for(course_id: str, grades: Dict[str, CourseGrade]) -> CourseGrade:
    """Look up a course grade, falling back to the neutral default."""
    grade = grades.get(course_id)
    if grade is not None:
        return grade
    if not get_planner_config().use_default_grade:
        raise MissingGradeError(course_id)
    return default_grade(course_id)


def priority_score(
    assignment: Assignment,
    grade: Optional[CourseGrade],
    now: datetime
) -> PriorityScore:
    """
    Composite priority for an assignment.

    Args:
        assignment: The assignment to score
        grade: Its course's grade snapshot (None uses the default grade)
        now: Reference timestamp

    Returns:
        PriorityScore with each sub-score and the weighted total. The total
        is unbounded above so urgent, high-stakes work sorts first.
    """
    if grade is None:
        grade = grade_for(assignment.course_id, {})

    urgency = urgency_score(assignment.due_date, now)
    workload = workload_score(assignment.estimated_hours, assignment.points, assignment.type)
    grade_priority = grade_priority_score(grade.percentage)

    total = (
        urgency * URGENCY_WEIGHT
        + workload * WORKLOAD_WEIGHT
        + grade_priority * GRADE_WEIGHT
    )

    return PriorityScore(
        assignment_id=assignment.id,
        urgency=urgency,
        workload=workload,
        grade_priority=grade_priority,
        total=total,
    )
