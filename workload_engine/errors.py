"""
Workload Engine - Errors
The engine prefers degenerate-but-valid results; these cover the few cases
where external data is genuinely inconsistent.
"""

from typing import Optional, List


class WorkloadEngineError(Exception):
    """Base class for engine errors."""


class MissingGradeError(WorkloadEngineError):
    """A course has no grade snapshot and the default grade policy is disabled."""

    def __init__(self, course_id: str):
        self.course_id = course_id
        super().__init__(f"No grade for course {course_id!r} and no default grade policy")


class TaskNotFoundError(WorkloadEngineError):
    """A task id does not belong to the plan it was addressed to."""

    def __init__(self, task_id: str, plan_id: str):
        self.task_id = task_id
        self.plan_id = plan_id
        super().__init__(f"Task {task_id!r} not found in plan {plan_id!r}")


class OrphanedTaskError(WorkloadEngineError):
    """A calendar session references tasks that its plan no longer has."""

    def __init__(self, session_id: str, plan_id: str, task_ids: List[str]):
        self.session_id = session_id
        self.plan_id = plan_id
        self.task_ids = list(task_ids)
        missing = ", ".join(self.task_ids)
        super().__init__(
            f"Session {session_id!r} references tasks missing from plan {plan_id!r}: {missing}"
        )


class DuplicateAssignmentError(WorkloadEngineError, ValueError):
    """Two assignments in one planning request share an id."""

    def __init__(self, assignment_id: str):
        self.assignment_id = assignment_id
        super().__init__(f"Assignment id {assignment_id!r} appears more than once")


class InvalidTimeError(WorkloadEngineError, ValueError):
    """A time-of-day string is not in HH:MM form."""

    def __init__(self, value: str, reason: Optional[str] = None):
        self.value = value
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Invalid time {value!r}, expected HH:MM{detail}")
