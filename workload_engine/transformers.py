"""
Workload Engine - Event Transformers
Converts calendar sessions and assignments into the load events observed by
the load meter and the over-scheduling detector.
"""

from typing import List, Optional

from .models import Assignment, AssignmentType, CalendarSession, EventKind, GenerationSource, LoadEvent


def session_to_event(session: CalendarSession) -> LoadEvent:
    """A scheduled session counts as study time on its date."""
    return LoadEvent(
        id=session.id,
        title=session.title,
        kind=EventKind.STUDY_SESSION,
        start=session.start_datetime,
        duration=session.duration,
        course_id=session.course_id,
        assignment_id=session.related_assignment_id,
        # Generated sessions can be moved; user-created ones stay put
        is_editable=session.source == GenerationSource.AI_GENERATED,
    )


def assignment_to_event(assignment: Assignment) -> LoadEvent:
    """Zero-length due marker carrying the assignment's points."""
    kind = EventKind.EXAM if assignment.type == AssignmentType.EXAM else EventKind.ASSIGNMENT
    return LoadEvent(
        id=f"due-{assignment.id}",
        title=assignment.title,
        kind=kind,
        start=assignment.due_date,
        duration=0,
        points=assignment.points,
        course_id=assignment.course_id,
        assignment_id=assignment.id,
        is_editable=False,
    )


def build_load_events(
    sessions: Optional[List[CalendarSession]] = None,
    assignments: Optional[List[Assignment]] = None,
) -> List[LoadEvent]:
    """All load events for a calendar, ordered by start time."""
    events = [session_to_event(s) for s in sessions or []]
    events.extend(assignment_to_event(a) for a in assignments or [])
    events.sort(key=lambda e: e.start)
    return events
