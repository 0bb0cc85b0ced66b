"""Shared service layer between the CLI and the MCP server.

Each query refreshes the snapshot from the repository, enriches the active
tasks and hands them to the pure query functions. Nothing is cached across
calls, so due-state flags always reflect the time of the call.
"""

import logging
from datetime import datetime, timezone as dt_timezone

from .core import queries
from .core.dates import parse_flexible_date
from .core.enrichment import TaskEnricher, TaskIndex
from .core.errors import NotFoundError, ValidationError
from .core.tasks import (
    EnrichedTask,
    Priority,
    ProjectData,
    TaskSuggestion,
    TaskSummary,
    TimeWindow,
)
from .core.timectx import DEFAULT_TIMEZONE
from .ports.task_repo import TaskRepository

logger = logging.getLogger(__name__)


def _require(name: str, value: str | None) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} is required")
    return str(value).strip()


class TaskService:
    """Agent-facing task operations over a TaskRepository."""

    def __init__(self, repo: TaskRepository, timezone: str = DEFAULT_TIMEZONE):
        self.repo = repo
        self.enricher = TaskEnricher(timezone)

    @property
    def timezone(self) -> str:
        return self.enricher.timezone

    def refresh(self) -> list[ProjectData]:
        """Pull a fresh snapshot and load it into the enricher."""
        data, _ = self._load()
        return data

    def _load(self) -> tuple[list[ProjectData], TaskIndex]:
        data = list(self.repo.list_projects_with_tasks())
        index = self.enricher.load_data(data)
        logger.debug(f"Loaded {len(data)} projects, {len(index.tasks)} tasks")
        return data, index

    def active_tasks(self, now: datetime | None = None) -> list[EnrichedTask]:
        """Every active task, enriched against a fresh snapshot."""
        data, index = self._load()
        active = [t for project in data for t in project.tasks if t.is_active]
        return self.enricher.enrich_tasks(active, now, index)

    # ============== Queries ==============

    def tasks_due_today(self) -> list[EnrichedTask]:
        return queries.filter_due_today(self.active_tasks())

    def overdue_tasks(self) -> list[EnrichedTask]:
        return queries.filter_overdue(self.active_tasks())

    def floating_tasks(self) -> list[EnrichedTask]:
        return queries.filter_floating(self.active_tasks())

    def upcoming_tasks(self, days: float | None = None) -> list[EnrichedTask]:
        if days is None:
            days = queries.DEFAULT_UPCOMING_DAYS
        if days <= 0:
            raise ValidationError(f"days must be positive, got {days}")
        now = datetime.now(dt_timezone.utc)
        return queries.filter_upcoming(self.active_tasks(now), days, now)

    def tasks_by_project(self, project_name: str) -> list[EnrichedTask]:
        name = _require("project_name", project_name)
        return queries.filter_by_project(self.active_tasks(), name)

    def search(self, keyword: str) -> list[EnrichedTask]:
        keyword = _require("keyword", keyword)
        return queries.search_tasks(self.active_tasks(), keyword)

    def suggest_next(self, window: TimeWindow | None = None) -> TaskSuggestion | None:
        return queries.suggest_next(self.active_tasks(), window)

    def summary(self) -> TaskSummary:
        return queries.summarize(self.active_tasks())

    # ============== Pass-throughs ==============

    def create_task(
        self,
        title: str,
        project: str | None = None,
        due: str | None = None,
        content: str | None = None,
        priority: str | None = None,
    ) -> EnrichedTask:
        """Create a task in the best-matching project and return it enriched."""
        title = _require("title", title)
        level = Priority.from_label(priority) if priority else Priority.NONE
        due_date = parse_flexible_date(due, self.timezone) if due else None

        data, index = self._load()
        target = queries.select_project(data, project)
        logger.info(f"Creating task {title!r} in project {target.project.name}")

        created = self.repo.create_task(
            {
                "title": title,
                "projectId": target.project.id,
                "content": content,
                "priority": int(level),
                "dueDate": due_date,
            }
        )
        return self.enricher.enrich_task(created, index=index)

    def complete_task(self, task_id: str) -> None:
        """Complete a task found anywhere in the current snapshot."""
        task_id = _require("task_id", task_id)
        for project in self.refresh():
            for task in project.tasks:
                if task.id == task_id:
                    self.repo.complete_task(task_id, task.project_id or project.project.id)
                    logger.info(f"Completed task {task_id}")
                    return

        raise NotFoundError(f"Task not found: {task_id}")
