"""Filtering and ranking over enriched tasks - no I/O dependencies."""

from collections.abc import Iterable, Sequence
from datetime import datetime

from .errors import NotFoundError
from .tasks import EnrichedTask, Priority, ProjectData, TaskSuggestion, TaskSummary, TimeWindow
from .timectx import DAY, resolve_now, to_millis

DEFAULT_UPCOMING_DAYS = 7


def _by_due(task: EnrichedTask) -> int:
    return task.due_timestamp


def filter_due_today(tasks: Iterable[EnrichedTask]) -> list[EnrichedTask]:
    return [t for t in tasks if t.is_due_today]


def filter_overdue(tasks: Iterable[EnrichedTask]) -> list[EnrichedTask]:
    """Overdue tasks, most overdue first."""
    return sorted((t for t in tasks if t.is_overdue), key=_by_due)


def filter_floating(tasks: Iterable[EnrichedTask]) -> list[EnrichedTask]:
    """Tasks with no due date."""
    return [t for t in tasks if t.is_floating]


def filter_by_project(tasks: Iterable[EnrichedTask], project_name: str) -> list[EnrichedTask]:
    """Case-insensitive substring match on the project name."""
    needle = project_name.lower()
    return [t for t in tasks if needle in t.project.name.lower()]


def search_tasks(tasks: Iterable[EnrichedTask], keyword: str) -> list[EnrichedTask]:
    """Case-insensitive substring match on title or content."""
    needle = keyword.lower()
    return [
        t
        for t in tasks
        if needle in t.title.lower() or (t.content is not None and needle in t.content.lower())
    ]


def filter_upcoming(
    tasks: Iterable[EnrichedTask],
    days: float = DEFAULT_UPCOMING_DAYS,
    now: datetime | None = None,
) -> list[EnrichedTask]:
    """Tasks due after now and no later than now + `days`, soonest first."""
    start = to_millis(resolve_now(now))
    end = start + days * DAY
    upcoming = [t for t in tasks if t.due_date and start < t.due_date.timestamp <= end]
    return sorted(upcoming, key=_by_due)


def summarize(tasks: Sequence[EnrichedTask]) -> TaskSummary:
    """Count each bucket on its own; the counts need not add up to total."""
    return TaskSummary(
        overdue=sum(1 for t in tasks if t.is_overdue),
        due_today=sum(1 for t in tasks if t.is_due_today),
        due_soon=sum(1 for t in tasks if t.is_due_soon),
        floating=sum(1 for t in tasks if t.is_floating),
        total=len(tasks),
    )


def suggest_next(
    tasks: Sequence[EnrichedTask],
    window: TimeWindow | None = None,
) -> TaskSuggestion | None:
    """
    Pick one task to work on next.

    Cascade, first non-empty bucket wins and its first task (in input
    order) is returned:
      1. overdue
      2. due today
      3. due within 48 hours
      4. high priority with no deadline
      5. anything without subtasks, if the caller gave available minutes
    Returns None when nothing qualifies.
    """
    for task in tasks:
        if task.is_overdue:
            return TaskSuggestion(task, f"Overdue by {task.due_date.relative}")

    for task in tasks:
        if task.is_due_today:
            return TaskSuggestion(task, "Due today")

    for task in tasks:
        if task.is_due_soon:
            return TaskSuggestion(task, f"Due {task.due_date.relative}")

    for task in tasks:
        if task.is_floating and task.priority is Priority.HIGH:
            return TaskSuggestion(task, "High priority task with no deadline")

    if window and window.available_minutes:
        minutes = window.available_minutes
        for task in tasks:
            if not task.has_subtasks:
                return TaskSuggestion(
                    task,
                    f"Fits your {minutes} minute window",
                    estimated_minutes=minutes,
                )

    return None


def select_project(project_data: Sequence[ProjectData], name: str | None = None) -> ProjectData:
    """
    Choose where a new task goes.

    First project whose name contains `name` (case-insensitive), else the
    first project in the snapshot.
    """
    if not project_data:
        raise NotFoundError("No projects found")

    if name:
        needle = name.lower()
        for data in project_data:
            if needle in data.project.name.lower():
                return data

    return project_data[0]
