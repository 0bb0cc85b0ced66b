"""Functional core - pure business logic with no I/O."""

from .errors import (
    TickmateError,
    DataIntegrityError,
    ValidationError,
    DateParseError,
    NotFoundError,
)
from .timectx import TimeContext, to_time_context, is_overdue, is_due_today, is_due_soon
from .dates import parse_flexible_date
from .tasks import (
    Priority,
    Status,
    RawProject,
    RawTask,
    ProjectData,
    EnrichedTask,
    TaskSuggestion,
    TaskSummary,
    TimeWindow,
)
from .enrichment import TaskEnricher, TaskIndex, describe_recurrence
from .queries import (
    filter_due_today,
    filter_overdue,
    filter_floating,
    filter_by_project,
    search_tasks,
    filter_upcoming,
    summarize,
    suggest_next,
    select_project,
)

__all__ = [
    # Errors
    "TickmateError",
    "DataIntegrityError",
    "ValidationError",
    "DateParseError",
    "NotFoundError",
    # Time
    "TimeContext",
    "to_time_context",
    "is_overdue",
    "is_due_today",
    "is_due_soon",
    "parse_flexible_date",
    # Tasks
    "Priority",
    "Status",
    "RawProject",
    "RawTask",
    "ProjectData",
    "EnrichedTask",
    "TaskSuggestion",
    "TaskSummary",
    "TimeWindow",
    # Enrichment
    "TaskEnricher",
    "TaskIndex",
    "describe_recurrence",
    # Queries
    "filter_due_today",
    "filter_overdue",
    "filter_floating",
    "filter_by_project",
    "search_tasks",
    "filter_upcoming",
    "summarize",
    "suggest_next",
    "select_project",
]
