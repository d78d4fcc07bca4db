"""
Workload Engine - Pydantic Models (v2 syntax)
Assignments, grades, study plans, calendar sessions and load events.
"""

from datetime import datetime, date, timedelta
from enum import Enum
from typing import Optional, List, Set
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .timeutils import parse_time, to_naive


# ============================================
# ENUMS
# ============================================

class AssignmentType(str, Enum):
    ASSIGNMENT = "assignment"
    EXAM = "exam"
    QUIZ = "quiz"
    PROJECT = "project"


class SessionKind(str, Enum):
    STUDY = "study"
    ASSIGNMENT = "assignment"
    EXAM = "exam"


class PriorityTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class GenerationSource(str, Enum):
    AI_GENERATED = "ai-generated"
    USER_CREATED = "user-created"


class PlanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class PlanSource(str, Enum):
    CALENDAR_GENERATED = "calendar-generated"
    CUSTOM = "custom"


class PlanType(str, Enum):
    ASSIGNMENT = "assignment"
    EXAM = "exam"
    QUIZ = "quiz"
    PROJECT = "project"
    CUSTOM = "custom"


class StudyTimeTag(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class EventKind(str, Enum):
    STUDY_SESSION = "study_session"
    ASSIGNMENT = "assignment"
    EXAM = "exam"
    EVENT = "event"
    EXTERNAL = "external"


# ============================================
# INBOUND MODELS
# ============================================

class Assignment(BaseModel):
    """Graded work item synced from the course system. Read-only here."""
    model_config = ConfigDict(frozen=True)

    id: str
    course_id: str
    title: str
    due_date: datetime
    points: float = Field(default=100.0, ge=0)
    type: AssignmentType = AssignmentType.ASSIGNMENT
    estimated_hours: float = Field(default=0.0, ge=0)
    description: Optional[str] = None
    course_name: Optional[str] = None
    course_color: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def _naive_due_date(cls, value: datetime) -> datetime:
        return to_naive(value)

    @property
    def display_course(self) -> str:
        return self.course_name or self.course_id


class CourseGrade(BaseModel):
    model_config = ConfigDict(frozen=True)

    course_id: str
    letter: str = "B"
    percentage: float = Field(default=85.0, ge=0, le=100)


class Preferences(BaseModel):
    """Study preferences. Session and break length drive distribution."""
    preferred_study_times: Set[StudyTimeTag] = Field(default_factory=set)
    session_length: Optional[int] = Field(default=None, ge=1)
    break_length: int = Field(default=15, ge=0)
    weekend_study: bool = True


# ============================================
# PLAN MODELS
# ============================================

class StudyTask(BaseModel):
    id: str
    title: str
    duration: int = Field(ge=0)  # minutes
    completed: bool = False
    scheduled_date: Optional[date] = None


def plan_id_for_assignment(assignment_id: str) -> str:
    """Plans generated for an assignment are identified by it."""
    return f"plan-{assignment_id}"


class StudyPlan(BaseModel):
    id: str
    title: str
    course_id: str
    type: PlanType = PlanType.CUSTOM
    due_date: datetime
    created_date: datetime
    status: PlanStatus = PlanStatus.ACTIVE
    progress: int = Field(default=0, ge=0, le=100)
    source: PlanSource = PlanSource.CUSTOM
    allow_regeneration: bool = True
    tasks: List[StudyTask] = Field(default_factory=list)
    assignment_id: Optional[str] = None
    course_name: Optional[str] = None

    @field_validator("due_date", "created_date")
    @classmethod
    def _naive_timestamps(cls, value: datetime) -> datetime:
        return to_naive(value)

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self.tasks if t.completed)

    @property
    def incomplete_tasks(self) -> List[StudyTask]:
        return [t for t in self.tasks if not t.completed]

    def find_task(self, task_id: str) -> Optional[StudyTask]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


# ============================================
# CALENDAR MODELS
# ============================================

class CalendarSession(BaseModel):
    """A scheduled time block covering some of a plan's tasks (by id)."""
    id: str
    kind: SessionKind = SessionKind.STUDY
    course_id: str
    title: str
    date: date
    start_time: str = "14:00"
    duration: int = Field(default=0, ge=0)  # minutes
    task_ids: List[str] = Field(default_factory=list)
    priority: PriorityTier = PriorityTier.MEDIUM
    source: GenerationSource = GenerationSource.AI_GENERATED
    related_assignment_id: Optional[str] = None
    plan_id: Optional[str] = None
    course_name: Optional[str] = None
    course_color: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def _check_start_time(cls, value: str) -> str:
        parse_time(value)
        return value

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(self.date, parse_time(self.start_time))

    @property
    def end_datetime(self) -> datetime:
        return self.start_datetime + timedelta(minutes=self.duration)


class LoadEvent(BaseModel):
    """Calendar-like event observed by the load meter."""
    id: str
    title: str = ""
    kind: EventKind
    start: datetime
    duration: int = Field(default=0, ge=0)  # minutes
    points: Optional[float] = None
    course_id: Optional[str] = None
    assignment_id: Optional[str] = None
    is_editable: bool = True

    @field_validator("start")
    @classmethod
    def _naive_start(cls, value: datetime) -> datetime:
        return to_naive(value)

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration)


# ============================================
# DERIVED RESULTS
# ============================================

class PriorityScore(BaseModel):
    assignment_id: str
    urgency: float
    workload: float
    grade_priority: float
    total: float


class CoursePriority(BaseModel):
    course_id: str
    course_name: str
    course_color: Optional[str] = None
    current_grade: CourseGrade
    assignments: int
    total_hours: float
    priority_score: float
    reasoning: str


class DateDistribution(BaseModel):
    date: date
    hours: float
    reason: str


class PlanExplanation(BaseModel):
    total_assignments: int
    total_study_hours: float
    priority_breakdown: List[CoursePriority]
    time_distribution: List[DateDistribution]
    general_strategy: str


class PlanGenerationResult(BaseModel):
    calendar: List[CalendarSession]
    explanation: PlanExplanation
    plans: List[StudyPlan] = Field(default_factory=list)


class SyncResult(BaseModel):
    plan: StudyPlan
    sessions: List[CalendarSession]
