"""
Workload Engine
Academic workload scheduling: prioritizes assignments, turns them into study
plans and calendar sessions, keeps both in sync and measures daily load.
"""

from .logger import logger, setup_logger

from .clock import Clock, SystemClock, FixedClock, system_clock, resolve_now

from .config import (
    PlannerConfig,
    SyncConfig,
    LoadMeterConfig,
    get_planner_config,
    get_sync_config,
    get_load_meter_config,
    reload_config,
    get_config_summary,
)

from .errors import (
    WorkloadEngineError,
    MissingGradeError,
    TaskNotFoundError,
    OrphanedTaskError,
    DuplicateAssignmentError,
    InvalidTimeError,
)

from .models import (
    # Enums
    AssignmentType,
    SessionKind,
    PriorityTier,
    GenerationSource,
    PlanStatus,
    PlanSource,
    PlanType,
    StudyTimeTag,
    EventKind,
    # Inputs
    Assignment,
    CourseGrade,
    Preferences,
    # Plans and sessions
    StudyTask,
    StudyPlan,
    CalendarSession,
    LoadEvent,
    plan_id_for_assignment,
    # Results
    PriorityScore,
    CoursePriority,
    DateDistribution,
    PlanExplanation,
    PlanGenerationResult,
    SyncResult,
)

from .scoring import (
    urgency_score,
    workload_score,
    grade_priority_score,
    priority_score,
    default_grade,
    grade_for,
)

from .decomposer import (
    ExamDecomposition,
    ProjectDecomposition,
    GenericDecomposition,
    strategy_for,
    decompose_assignment,
)

from .distributor import (
    SpacingStrategy,
    tier_for_score,
    spacing_strategy,
    session_offsets,
    pack_tasks,
    distribute_tasks,
    distribute_sessions,
)

from .planner import generate_plan, build_study_plan

from .sync import (
    sync_plan_to_calendar,
    sync_calendar_to_plan,
    set_task_completion,
    mark_task_completed,
    mark_task_incomplete,
    regenerate_plan_with_ai,
    is_synced,
    sessions_for_plan,
    compute_progress,
    derive_status,
)

from .transformers import session_to_event, assignment_to_event, build_load_events

from .load_meter import (
    LoadLevel,
    LOAD_COLORS,
    DailyLoad,
    RangeLoad,
    LoadBreakdown,
    LoadMeter,
    get_load_meter,
    calculate_daily_load,
    calculate_academic_load,
    has_schedule_conflicts,
    has_insufficient_breaks,
    get_load_level,
    get_load_color,
    get_load_color_by_percentage,
)

from .overscheduling import (
    SuggestionType,
    Conflict,
    Suggestion,
    OverScheduledDay,
    RedistributionPlan,
    OverSchedulingDetector,
    get_over_scheduling_detector,
    detect_conflicts,
    detect_over_scheduling,
    suggest_redistribution,
)


__all__ = [
    # Logging
    "logger",
    "setup_logger",
    # Clock
    "Clock",
    "SystemClock",
    "FixedClock",
    "system_clock",
    "resolve_now",
    # Configuration
    "PlannerConfig",
    "SyncConfig",
    "LoadMeterConfig",
    "get_planner_config",
    "get_sync_config",
    "get_load_meter_config",
    "reload_config",
    "get_config_summary",
    # Errors
    "WorkloadEngineError",
    "MissingGradeError",
    "TaskNotFoundError",
    "OrphanedTaskError",
    "DuplicateAssignmentError",
    "InvalidTimeError",
    # Enums
    "AssignmentType",
    "SessionKind",
    "PriorityTier",
    "GenerationSource",
    "PlanStatus",
    "PlanSource",
    "PlanType",
    "StudyTimeTag",
    "EventKind",
    "LoadLevel",
    "SpacingStrategy",
    "SuggestionType",
    # Models
    "Assignment",
    "CourseGrade",
    "Preferences",
    "StudyTask",
    "StudyPlan",
    "CalendarSession",
    "LoadEvent",
    "PriorityScore",
    "CoursePriority",
    "DateDistribution",
    "PlanExplanation",
    "PlanGenerationResult",
    "SyncResult",
    "DailyLoad",
    "RangeLoad",
    "LoadBreakdown",
    "Conflict",
    "Suggestion",
    "OverScheduledDay",
    "RedistributionPlan",
    "plan_id_for_assignment",
    # Scoring
    "urgency_score",
    "workload_score",
    "grade_priority_score",
    "priority_score",
    "default_grade",
    "grade_for",
    # Decomposition and distribution
    "ExamDecomposition",
    "ProjectDecomposition",
    "GenericDecomposition",
    "strategy_for",
    "decompose_assignment",
    "tier_for_score",
    "spacing_strategy",
    "session_offsets",
    "pack_tasks",
    "distribute_tasks",
    "distribute_sessions",
    # Planning
    "generate_plan",
    "build_study_plan",
    # Synchronization
    "sync_plan_to_calendar",
    "sync_calendar_to_plan",
    "set_task_completion",
    "mark_task_completed",
    "mark_task_incomplete",
    "regenerate_plan_with_ai",
    "is_synced",
    "sessions_for_plan",
    "compute_progress",
    "derive_status",
    # Load events
    "session_to_event",
    "assignment_to_event",
    "build_load_events",
    # Load meter
    "LOAD_COLORS",
    "LoadMeter",
    "get_load_meter",
    "calculate_daily_load",
    "calculate_academic_load",
    "has_schedule_conflicts",
    "has_insufficient_breaks",
    "get_load_level",
    "get_load_color",
    "get_load_color_by_percentage",
    # Over-scheduling
    "OverSchedulingDetector",
    "get_over_scheduling_detector",
    "detect_conflicts",
    "detect_over_scheduling",
    "suggest_redistribution",
]
