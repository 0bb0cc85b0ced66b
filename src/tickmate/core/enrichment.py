"""Task enrichment - raw TickTick tasks to agent-friendly views.

Pure logic - no I/O. The enricher owns a TaskIndex snapshot that is
rebuilt whole on every load and swapped in with a single assignment.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

from .errors import DataIntegrityError, DateParseError
from .tasks import EnrichedTask, ProjectData, ProjectRef, RawProject, RawTask
from .timectx import (
    DEFAULT_TIMEZONE,
    get_zone,
    is_due_soon,
    is_due_today,
    is_overdue,
    resolve_now,
    to_time_context,
)

RRULE_PREFIX = "RRULE:"

# FREQ -> (phrase when INTERVAL=1, plural unit)
_FREQUENCIES = {
    "daily": ("Every day", "days"),
    "weekly": ("Weekly", "weeks"),
    "monthly": ("Monthly", "months"),
    "yearly": ("Yearly", "years"),
}


@dataclass(frozen=True)
class TaskIndex:
    """Read-only project-by-id and task-by-id lookups for one snapshot."""

    projects: Mapping[str, RawProject] = field(default_factory=lambda: MappingProxyType({}))
    tasks: Mapping[str, RawTask] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(cls, project_data: Iterable[ProjectData]) -> "TaskIndex":
        projects: dict[str, RawProject] = {}
        tasks: dict[str, RawTask] = {}
        for data in project_data:
            projects[data.project.id] = data.project
            for task in data.tasks:
                tasks[task.id] = task
        return cls(projects=MappingProxyType(projects), tasks=MappingProxyType(tasks))


def describe_recurrence(flag: str | None) -> str | None:
    """
    Human-readable form of an RRULE string.

    "RRULE:FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE" -> "Every 2 weeks on MO,WE".
    Anything without the RRULE prefix or with an unknown FREQ comes back
    unchanged.
    """
    if not flag or not flag.startswith(RRULE_PREFIX):
        return flag

    rules: dict[str, str] = {}
    for part in flag[len(RRULE_PREFIX):].split(";"):
        key, sep, value = part.partition("=")
        if sep:
            rules[key.strip().upper()] = value.strip()

    freq = rules.get("FREQ", "").lower()
    if freq not in _FREQUENCIES:
        return flag

    single, unit = _FREQUENCIES[freq]
    interval = rules.get("INTERVAL") or "1"
    text = single if interval == "1" else f"Every {interval} {unit}"

    by_day = rules.get("BYDAY")
    if freq == "weekly" and by_day:
        text = f"{text} on {by_day}"
    return text


class TaskEnricher:
    """
    Turns RawTask records into EnrichedTask views.

    `load_data` must be called before enriching; enrichment always uses the
    most recently loaded snapshot.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE, index: TaskIndex | None = None):
        get_zone(timezone)
        self.timezone = timezone
        self._index = index or TaskIndex()

    @property
    def index(self) -> TaskIndex:
        return self._index

    def load_data(self, project_data: Iterable[ProjectData]) -> TaskIndex:
        """Replace the whole index with a fresh snapshot."""
        index = TaskIndex.build(project_data)
        self._index = index
        return index

    def enrich_task(
        self,
        task: RawTask,
        now: datetime | None = None,
        index: TaskIndex | None = None,
    ) -> EnrichedTask:
        """Enrich a single task. Raises DataIntegrityError for unknown projects."""
        return self._enrich(task, index or self._index, resolve_now(now))

    def enrich_tasks(
        self,
        tasks: Iterable[RawTask],
        now: datetime | None = None,
        index: TaskIndex | None = None,
    ) -> list[EnrichedTask]:
        """
        Enrich in order against one snapshot and one clock reading.

        Pass the index returned by `load_data` to pin the batch to that
        snapshot even if another load happens meanwhile.
        """
        index = index or self._index
        now = resolve_now(now)
        return [self._enrich(task, index, now) for task in tasks]

    def _enrich(self, task: RawTask, index: TaskIndex, now: datetime) -> EnrichedTask:
        project = index.projects.get(task.project_id)
        if project is None:
            raise DataIntegrityError(f"Project not found for task: {task.id}")

        tz = self.timezone
        try:
            enriched = EnrichedTask(
                id=task.id,
                title=task.title,
                content=task.content,
                project=ProjectRef(id=project.id, name=project.name),
                is_overdue=is_overdue(task.due_date, now, tz),
                is_due_today=is_due_today(task.due_date, tz, now),
                is_due_soon=is_due_soon(task.due_date, now, tz),
                priority=task.priority,
                status=task.status,
                has_subtasks=len(task.child_ids) > 0,
                is_subtask=bool(task.parent_id),
            )

            if task.due_date:
                enriched.due_date = to_time_context(task.due_date, tz, now)
            if task.start_date:
                enriched.start_date = to_time_context(task.start_date, tz, now)
        except DateParseError as e:
            raise DataIntegrityError(f"Invalid date on task {task.id}: {e.input}") from e

        if task.parent_id:
            parent = index.tasks.get(task.parent_id)
            if parent is not None:
                enriched.context = f"Subtask of: {parent.title}"

        if task.repeat_flag:
            enriched.repeat_info = describe_recurrence(task.repeat_flag)

        return enriched
