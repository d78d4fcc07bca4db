"""
Workload Engine - Configuration Management
Supports .env files and environment overrides for plan generation,
plan/calendar synchronization and load metering.
"""

from typing import Dict, Any
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


# ============================================
# PLAN GENERATION CONFIGURATION
# ============================================

class PlannerConfig(BaseSettings):
    """Scoring bands, spacing strategy limits and session defaults."""

    default_session_length_minutes: int = Field(
        default=60,
        ge=15,
        le=240,
        description="Session length used when preferences do not set one"
    )
    default_break_minutes: int = Field(
        default=15,
        ge=0,
        le=120,
        description="Gap left between sessions placed on the same day when preferences do not set one"
    )
    generic_chunk_minutes: int = Field(
        default=45,
        ge=15,
        le=120,
        description="Target size of each generic work-session task"
    )

    # Spacing strategy selection by days available
    cram_max_days: int = Field(
        default=3,
        ge=1,
        le=14,
        description="Days available at or below which sessions are crammed"
    )
    cram_sessions_per_day: int = Field(
        default=2,
        ge=1,
        le=6,
        description="Sessions scheduled per day in cram mode"
    )
    moderate_max_days: int = Field(
        default=7,
        ge=1,
        le=30,
        description="Days available at or below which one session per day is used"
    )

    # Priority tiers
    high_priority_threshold: float = Field(
        default=7.0,
        description="Priority score above which sessions are high priority"
    )
    medium_priority_threshold: float = Field(
        default=4.0,
        description="Priority score above which sessions are medium priority"
    )
    high_priority_start: str = Field(default="09:00", description="Start time for high priority sessions")
    medium_priority_start: str = Field(default="14:00", description="Start time for medium priority sessions")
    low_priority_start: str = Field(default="18:00", description="Start time for low priority sessions")

    # Neutral grade used when a course has no grade snapshot
    use_default_grade: bool = Field(
        default=True,
        description="Fall back to the default grade when a course has none"
    )
    default_grade_letter: str = Field(default="B", description="Letter of the neutral default grade")
    default_grade_percentage: float = Field(
        default=85.0,
        ge=0.0,
        le=100.0,
        description="Percentage of the neutral default grade"
    )

    model_config = {
        "env_prefix": "PLANNER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }


# ============================================
# SYNCHRONIZATION CONFIGURATION
# ============================================

class SyncConfig(BaseSettings):
    """Plan/calendar synchronization settings."""

    max_study_days: int = Field(
        default=10,
        ge=1,
        le=60,
        description="Upper bound on the days a regenerated plan is spread over"
    )
    regeneration_jitter: float = Field(
        default=0.10,
        ge=0.0,
        le=0.5,
        description="Relative +/- perturbation applied to incomplete task durations on regeneration"
    )

    model_config = {
        "env_prefix": "SYNC_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }


# ============================================
# LOAD METER CONFIGURATION
# ============================================

class LoadMeterConfig(BaseSettings):
    """Daily and range load scoring settings."""

    max_daily_hours: float = Field(
        default=8.0,
        gt=0.0,
        le=24.0,
        description="Study hours that saturate the study-time load"
    )
    max_assignments_per_day: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Assignments due that saturate the assignment load"
    )
    urgency_window_days: int = Field(
        default=3,
        ge=1,
        le=14,
        description="Assignments due within this many days count as urgent"
    )
    urgent_focus_days: int = Field(
        default=2,
        ge=0,
        le=14,
        description="Window for the 'focus on assignments due soon' recommendation"
    )
    min_break_minutes: int = Field(
        default=10,
        ge=0,
        le=60,
        description="Gap between consecutive study sessions below which breaks are insufficient"
    )

    # Composite weights
    study_time_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    assignment_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    urgency_weight: float = Field(default=0.2, ge=0.0, le=1.0)

    # Level thresholds (inclusive lower edges)
    overloaded_threshold: float = Field(default=80.0, ge=0.0, le=100.0)
    high_threshold: float = Field(default=60.0, ge=0.0, le=100.0)
    moderate_threshold: float = Field(default=40.0, ge=0.0, le=100.0)

    # Recommendation triggers
    heavy_assignment_day_count: int = Field(
        default=3,
        ge=1,
        description="Assignments due on one day that trigger the 'start earlier' advice"
    )
    long_study_day_hours: float = Field(
        default=6.0,
        gt=0.0,
        description="Study hours on one day that trigger the 'add breaks' advice"
    )

    model_config = {
        "env_prefix": "LOAD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }


# ============================================
# CACHED CONFIGURATION INSTANCES
# ============================================

@lru_cache()
def get_planner_config() -> PlannerConfig:
    """Get cached plan generation configuration instance."""
    return PlannerConfig()


@lru_cache()
def get_sync_config() -> SyncConfig:
    """Get cached synchronization configuration instance."""
    return SyncConfig()


@lru_cache()
def get_load_meter_config() -> LoadMeterConfig:
    """Get cached load meter configuration instance."""
    return LoadMeterConfig()


def reload_config():
    """Clear configuration cache and reload from environment."""
    get_planner_config.cache_clear()
    get_sync_config.cache_clear()
    get_load_meter_config.cache_clear()


# ============================================
# CONFIGURATION SUMMARY
# ============================================

def get_config_summary() -> Dict[str, Any]:
    """
    Get a summary of all configuration values.
    Useful for debugging and settings display.
    """
    planner = get_planner_config()
    sync = get_sync_config()
    load = get_load_meter_config()

    return {
        "planner": {
            "session_length": planner.default_session_length_minutes,
            "break_length": planner.default_break_minutes,
            "generic_chunk": planner.generic_chunk_minutes,
            "cram_max_days": planner.cram_max_days,
            "moderate_max_days": planner.moderate_max_days,
            "tiers": {
                "high": f"> {planner.high_priority_threshold} @ {planner.high_priority_start}",
                "medium": f"> {planner.medium_priority_threshold} @ {planner.medium_priority_start}",
                "low": f"else @ {planner.low_priority_start}",
            },
            "default_grade": f"{planner.default_grade_letter} ({planner.default_grade_percentage}%)",
        },
        "sync": {
            "max_study_days": sync.max_study_days,
            "regeneration_jitter": sync.regeneration_jitter,
        },
        "load_meter": {
            "max_daily_hours": load.max_daily_hours,
            "max_assignments": load.max_assignments_per_day,
            "urgency_window_days": load.urgency_window_days,
            "min_break_minutes": load.min_break_minutes,
            "thresholds": {
                "overloaded": load.overloaded_threshold,
                "high": load.high_threshold,
                "moderate": load.moderate_threshold,
            },
        },
    }
