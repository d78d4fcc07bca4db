"""Tests for sync.py - plan/calendar synchronization in both directions."""

import random

import pytest
from datetime import date, datetime, timedelta

from workload_engine import (
    CalendarSession,
    GenerationSource,
    OrphanedTaskError,
    PlanStatus,
    PriorityTier,
    StudyPlan,
    StudyTask,
    TaskNotFoundError,
    compute_progress,
    derive_status,
    generate_plan,
    is_synced,
    mark_task_completed,
    mark_task_incomplete,
    regenerate_plan_with_ai,
    sessions_for_plan,
    sync_calendar_to_plan,
    sync_plan_to_calendar,
)


@pytest.fixture
def generated(make_assignment, grades, now):
    """A generated plan for a 3-hour assignment due in 6 days, plus an unrelated session."""
    result = generate_plan([make_assignment(id="hw", days=6, hours=3)], grades, now=now)
    other = CalendarSession(
        id="other",
        course_id="c9",
        title="Reading group",
        date=date(2025, 11, 6),
        start_time="11:00",
        duration=60,
        source=GenerationSource.USER_CREATED,
    )
    return result.plans[0], result.calendar + [other]


def _custom_plan(now, tasks=None, **extra):
    return StudyPlan(
        id="custom-1",
        title="Revise chapter 4",
        course_id="c1",
        due_date=now + timedelta(days=5),
        created_date=now,
        tasks=tasks if tasks is not None else [
            StudyTask(id="k1", title="Read", duration=40),
            StudyTask(id="k2", title="Summarise", duration=40),
        ],
        **extra,
    )


class TestProgress:
    def test_empty_is_zero(self):
        assert compute_progress([]) == 0

    def test_rounded_percentage(self):
        tasks = [StudyTask(id=str(i), title="t", duration=10, completed=i == 0) for i in range(3)]
        assert compute_progress(tasks) == 33

    @pytest.mark.parametrize("progress,current,expected", [
        (100, PlanStatus.ACTIVE, PlanStatus.COMPLETED),
        (99, PlanStatus.COMPLETED, PlanStatus.ACTIVE),
        (50, PlanStatus.ARCHIVED, PlanStatus.ARCHIVED),
        (100, PlanStatus.ARCHIVED, PlanStatus.COMPLETED),
        (0, PlanStatus.ACTIVE, PlanStatus.ACTIVE),
    ])
    def test_status(self, progress, current, expected):
        assert derive_status(progress, current) == expected


class TestPlanToCalendar:
    def test_replaces_only_linked_sessions(self, generated, now):
        plan, sessions = generated
        result = sync_plan_to_calendar(plan, sessions, now)
        assert any(s.id == "other" for s in result.sessions)
        assert len(sessions_for_plan(plan, result.sessions)) == len(sessions_for_plan(plan, sessions))

    def test_sorted_by_date(self, generated, now):
        plan, sessions = generated
        result = sync_plan_to_calendar(plan, list(reversed(sessions)), now)
        dates = [s.date for s in result.sessions]
        assert dates == sorted(dates)

    def test_idempotent(self, generated, now):
        plan, sessions = generated
        first = sync_plan_to_calendar(plan, sessions, now)
        second = sync_plan_to_calendar(first.plan, first.sessions, now)
        assert first == second

    def test_inputs_not_mutated(self, generated, now):
        plan, sessions = generated
        before_plan = plan.model_copy(deep=True)
        before_sessions = [s.model_copy(deep=True) for s in sessions]
        sync_plan_to_calendar(plan, sessions, now)
        assert plan == before_plan
        assert sessions == before_sessions

    def test_study_days_excludes_due_day(self, make_assignment, grades, now):
        # Due in 3 days: remaining work is spread over 2 days
        plan = generate_plan([make_assignment(id="hw", days=3, hours=6)], grades, now=now).plans[0]
        result = sync_plan_to_calendar(plan, [], now)
        assert {s.date for s in result.sessions} == {date(2025, 11, 5), date(2025, 11, 6)}

    def test_keeps_existing_tier(self, generated, now):
        plan, sessions = generated
        tier = sessions_for_plan(plan, sessions)[0].priority
        result = sync_plan_to_calendar(plan, sessions, now)
        assert all(s.priority == tier for s in sessions_for_plan(plan, result.sessions))

    def test_explicit_score_sets_tier(self, generated, now):
        plan, sessions = generated
        result = sync_plan_to_calendar(plan, sessions, now, priority_score=9.0)
        linked = sessions_for_plan(plan, result.sessions)
        assert all(s.priority == PriorityTier.HIGH and s.start_time == "09:00" for s in linked)

    def test_custom_plan_links_by_plan_id(self, now):
        plan = _custom_plan(now)
        result = sync_plan_to_calendar(plan, [], now)
        assert result.sessions
        assert all(s.plan_id == "custom-1" for s in result.sessions)
        assert all(s.priority == PriorityTier.MEDIUM for s in result.sessions)
        assert is_synced(result.plan, result.sessions)


class TestCalendarToPlan:
    def test_stamps_date_on_every_task(self, generated):
        plan, sessions = generated
        moved = sessions_for_plan(plan, sessions)[0].model_copy(update={"date": date(2025, 11, 8)})
        [updated] = sync_calendar_to_plan(moved, [plan])
        assert all(t.scheduled_date == date(2025, 11, 8) for t in updated.tasks)

    def test_marks_completed_ids(self, generated):
        plan, sessions = generated
        session = sessions_for_plan(plan, sessions)[0]
        [updated] = sync_calendar_to_plan(session, [plan], completed_task_ids=session.task_ids)
        assert updated.completed_count == len(session.task_ids)
        assert updated.progress == round(len(session.task_ids) / len(plan.tasks) * 100)

    def test_unknown_plan_leaves_plans_unchanged(self, generated):
        plan, sessions = generated
        stray = next(s for s in sessions if s.id == "other")
        assert sync_calendar_to_plan(stray, [plan]) == [plan]

    def test_orphaned_task_raises(self, generated):
        plan, sessions = generated
        session = sessions_for_plan(plan, sessions)[0]
        broken = session.model_copy(update={"task_ids": session.task_ids + ["hw-99"]})
        with pytest.raises(OrphanedTaskError) as exc:
            sync_calendar_to_plan(broken, [plan])
        assert exc.value.task_ids == ["hw-99"]

    def test_other_plans_untouched(self, generated, now):
        plan, sessions = generated
        other = _custom_plan(now)
        session = sessions_for_plan(plan, sessions)[0]
        updated = sync_calendar_to_plan(session, [other, plan])
        assert updated[0] == other


class TestTaskCompletion:
    def test_progress_and_resync(self, generated, now):
        plan, sessions = generated
        result = mark_task_completed("hw-1", plan, sessions, now)
        assert result.plan.find_task("hw-1").completed
        assert result.plan.progress == 25
        covered = {tid for s in sessions_for_plan(plan, result.sessions) for tid in s.task_ids}
        assert "hw-1" not in covered
        assert covered == {"hw-2", "hw-3", "hw-4"}

    def test_idempotent(self, generated, now):
        plan, sessions = generated
        once = mark_task_completed("hw-1", plan, sessions, now)
        twice = mark_task_completed("hw-1", once.plan, once.sessions, now)
        assert twice == once

    def test_completing_everything(self, generated, now):
        plan, sessions = generated
        result = None
        for task in plan.tasks:
            result = mark_task_completed(task.id, plan, sessions, now)
            plan, sessions = result.plan, result.sessions
        assert result.plan.progress == 100
        assert result.plan.status == PlanStatus.COMPLETED
        assert sessions_for_plan(plan, result.sessions) == []
        assert is_synced(result.plan, result.sessions)

    def test_uncompleting_reactivates(self, generated, now):
        plan, sessions = generated
        for task in plan.tasks:
            result = mark_task_completed(task.id, plan, sessions, now)
            plan, sessions = result.plan, result.sessions
        result = mark_task_incomplete("hw-2", plan, sessions, now)
        assert result.plan.status == PlanStatus.ACTIVE
        assert result.plan.progress == 75
        assert sessions_for_plan(plan, result.sessions)

    def test_unknown_task_raises(self, generated, now):
        plan, sessions = generated
        with pytest.raises(TaskNotFoundError):
            mark_task_completed("nope", plan, sessions, now)


class TestRegeneration:
    def test_completed_tasks_unchanged(self, generated, now):
        plan, sessions = generated
        plan = mark_task_completed("hw-1", plan, sessions, now).plan
        later = now + timedelta(hours=5)
        regenerated = regenerate_plan_with_ai(plan, later, rng=random.Random(7))

        assert regenerated.find_task("hw-1") == plan.find_task("hw-1")
        assert regenerated.created_date == later
        assert regenerated.progress == plan.progress

    def test_incomplete_durations_within_jitter(self, now):
        plan = _custom_plan(now, tasks=[StudyTask(id=f"k{i}", title="t", duration=100) for i in range(20)])
        regenerated = regenerate_plan_with_ai(plan, now, rng=random.Random(1))
        for task in regenerated.tasks:
            assert 90 <= task.duration <= 110

    def test_disabled_regeneration_returns_plan(self, now):
        plan = _custom_plan(now, allow_regeneration=False)
        assert regenerate_plan_with_ai(plan, now + timedelta(days=1)) is plan

    def test_seeded_rng_is_reproducible(self, now):
        plan = _custom_plan(now)
        first = regenerate_plan_with_ai(plan, now, rng=random.Random(3))
        second = regenerate_plan_with_ai(plan, now, rng=random.Random(3))
        assert first == second


class TestIsSynced:
    def test_out_of_sync_without_sessions(self, generated):
        plan, _ = generated
        assert not is_synced(plan, [])

    def test_synced_with_sessions(self, generated):
        plan, sessions = generated
        assert is_synced(plan, sessions)

    def test_empty_plan_is_synced(self, now):
        assert is_synced(_custom_plan(now, tasks=[]), [])
