"""
Workload Engine - Task Decomposer
Expands an assignment into an ordered list of named study tasks.

Exams and projects follow a fixed checklist whose total does not depend on
the estimated effort; generic assignments and quizzes are split into
~45 minute work sessions sized from the estimate.
"""

import math
from typing import Dict, List, Tuple

from .config import get_planner_config
from .models import Assignment, AssignmentType, StudyTask


# ============================================
# TEMPLATES
# ============================================

EXAM_TEMPLATE: List[Tuple[str, int]] = [
    ("Review lecture notes", 45),
    ("Create study guide", 60),
    ("Practice problems", 90),
    ("Review with flashcards", 30),
    ("Final review", 45),
]

PROJECT_TEMPLATE: List[Tuple[str, int]] = [
    ("Research and planning", 60),
    ("Create outline/structure", 45),
    ("Draft main content", 120),
    ("Revisions and refinement", 60),
    ("Final polish and submission prep", 30),
]

FINAL_GENERIC_TITLE = "Complete and submit"


def _task_id(assignment: Assignment, index: int) -> str:
    return f"{assignment.id}-{index + 1}"


# ============================================
# DECOMPOSITION STRATEGIES
# ============================================

class TemplateDecomposition:
    """Fixed checklist of (title, minutes) steps."""

    template: List[Tuple[str, int]] = []

    def decompose(self, assignment: Assignment) -> List[StudyTask]:
        return [
            StudyTask(id=_task_id(assignment, i), title=title, duration=minutes)
            for i, (title, minutes) in enumerate(self.template)
        ]


class ExamDecomposition(TemplateDecomposition):
    template = EXAM_TEMPLATE


class ProjectDecomposition(TemplateDecomposition):
    template = PROJECT_TEMPLATE


class GenericDecomposition:
    """Split estimated effort into equal chunks of about chunk_minutes."""

    def __init__(self, chunk_minutes: int = 45):
        self.chunk_minutes = chunk_minutes

    def decompose(self, assignment: Assignment) -> List[StudyTask]:
        total = max(0, int(assignment.estimated_hours * 60))
        if total <= 0:
            return []

        num_tasks = math.ceil(total / self.chunk_minutes)
        minutes_per_task = total // num_tasks

        tasks = []
        for i in range(num_tasks):
            title = FINAL_GENERIC_TITLE if i == num_tasks - 1 else f"Work session {i + 1}"
            tasks.append(StudyTask(
                id=_task_id(assignment, i),
                title=title,
                duration=minutes_per_task,
            ))
        return tasks


# ============================================
# DISPATCH
# ============================================

_TEMPLATE_STRATEGIES: Dict[AssignmentType, TemplateDecomposition] = {
    AssignmentType.EXAM: ExamDecomposition(),
    AssignmentType.PROJECT: ProjectDecomposition(),
}


def strategy_for(assignment_type: AssignmentType):
    """Pick the decomposition strategy for an assignment type."""
    strategy = _TEMPLATE_STRATEGIES.get(AssignmentType(assignment_type))
    if strategy is not None:
        return strategy
    return GenericDecomposition(get_planner_config().generic_chunk_minutes)


def decompose_assignment(assignment: Assignment) -> List[StudyTask]:
    """Ordered study tasks for an assignment."""
    return strategy_for(assignment.type).decompose(assignment)
