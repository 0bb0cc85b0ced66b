"""Task domain types - raw TickTick records and their enriched views.

Pure data - no I/O. Numeric TickTick codes are translated to enums only in
the `from_api` constructors; everything downstream compares enum members.
"""

from dataclasses import dataclass
from enum import IntEnum

from .errors import ValidationError
from .timectx import TimeContext


class Priority(IntEnum):
    """TickTick priority levels (the API uses 0/1/3/5)."""

    NONE = 0
    LOW = 1
    MEDIUM = 3
    HIGH = 5

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_api(cls, value: int | None) -> "Priority":
        """Unknown numbers fall back to NONE."""
        try:
            return cls(value or 0)
        except ValueError:
            return cls.NONE

    @classmethod
    def from_label(cls, label: str) -> "Priority":
        """Parse "none"/"low"/"medium"/"high"."""
        try:
            return cls[label.strip().upper()]
        except KeyError:
            raise ValidationError(
                f"Invalid priority: {label} (expected none, low, medium or high)"
            )


class Status(IntEnum):
    """Task completion state. TickTick reports 0 for open, 2 for done."""

    ACTIVE = 0
    COMPLETED = 2

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_api(cls, value: int | None) -> "Status":
        return cls.ACTIVE if not value else cls.COMPLETED


@dataclass(frozen=True)
class RawProject:
    """A TickTick project (list)."""

    id: str
    name: str
    sort_order: int = 0
    view_mode: str = ""
    kind: str = ""
    color: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "RawProject":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            sort_order=data.get("sortOrder", 0) or 0,
            view_mode=data.get("viewMode", "") or "",
            kind=data.get("kind", "") or "",
            color=data.get("color"),
        )


@dataclass(frozen=True)
class RawTask:
    """A task exactly as the source reported it, dates left as strings."""

    id: str
    project_id: str
    title: str
    content: str | None = None
    start_date: str | None = None
    due_date: str | None = None
    priority: Priority = Priority.NONE
    status: Status = Status.ACTIVE
    repeat_flag: str | None = None
    parent_id: str | None = None
    child_ids: tuple[str, ...] = ()
    sort_order: int = 0
    time_zone: str | None = None
    is_all_day: bool = False
    kind: str = "TEXT"
    etag: str = ""

    @property
    def is_active(self) -> bool:
        return self.status is Status.ACTIVE

    @classmethod
    def from_api(cls, data: dict) -> "RawTask":
        """Create RawTask from a TickTick API task object."""
        return cls(
            id=data["id"],
            project_id=data.get("projectId", ""),
            title=data.get("title", ""),
            content=data.get("content") or data.get("desc") or None,
            start_date=data.get("startDate") or None,
            due_date=data.get("dueDate") or None,
            priority=Priority.from_api(data.get("priority")),
            status=Status.from_api(data.get("status")),
            repeat_flag=data.get("repeatFlag") or None,
            parent_id=data.get("parentId") or None,
            child_ids=tuple(data.get("childIds") or ()),
            sort_order=data.get("sortOrder", 0) or 0,
            time_zone=data.get("timeZone"),
            is_all_day=bool(data.get("isAllDay", False)),
            kind=data.get("kind", "TEXT") or "TEXT",
            etag=data.get("etag", "") or "",
        )


@dataclass(frozen=True)
class ProjectData:
    """One project and the tasks fetched for it."""

    project: RawProject
    tasks: tuple[RawTask, ...] = ()

    @classmethod
    def from_api(cls, project: dict | RawProject, data: dict) -> "ProjectData":
        """Build from a project record and its `/project/{id}/data` payload."""
        if isinstance(project, dict):
            project = RawProject.from_api(project)
        tasks = tuple(RawTask.from_api(t) for t in data.get("tasks") or [])
        return cls(project=project, tasks=tasks)


@dataclass(frozen=True)
class ProjectRef:
    id: str
    name: str


@dataclass
class EnrichedTask:
    """A task annotated with time context and derived classifications."""

    id: str
    title: str
    project: ProjectRef
    priority: Priority
    status: Status
    content: str | None = None
    due_date: TimeContext | None = None
    start_date: TimeContext | None = None
    is_overdue: bool = False
    is_due_today: bool = False
    is_due_soon: bool = False
    context: str | None = None
    has_subtasks: bool = False
    is_subtask: bool = False
    repeat_info: str | None = None

    @property
    def is_floating(self) -> bool:
        """No due date at all."""
        return self.due_date is None

    @property
    def due_timestamp(self) -> int:
        return self.due_date.timestamp if self.due_date else 0

    def to_dict(self) -> dict:
        """JSON-ready view; optional fields are omitted when unset."""
        data = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "project": {"id": self.project.id, "name": self.project.name},
            "due_date": self.due_date.to_dict() if self.due_date else None,
            "start_date": self.start_date.to_dict() if self.start_date else None,
            "is_overdue": self.is_overdue,
            "is_due_today": self.is_due_today,
            "is_due_soon": self.is_due_soon,
            "priority": self.priority.label,
            "status": self.status.label,
            "context": self.context,
            "has_subtasks": self.has_subtasks,
            "is_subtask": self.is_subtask,
            "repeat_info": self.repeat_info,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class TimeWindow:
    """What the caller told us about their available time."""

    available_minutes: int | None = None
    context: str | None = None


@dataclass
class TaskSuggestion:
    task: EnrichedTask
    reason: str
    estimated_minutes: int | None = None

    def to_dict(self) -> dict:
        data = {"task": self.task.to_dict(), "reason": self.reason}
        if self.estimated_minutes is not None:
            data["estimated_minutes"] = self.estimated_minutes
        return data


@dataclass
class TaskSummary:
    """Independent counts - the four buckets may overlap."""

    overdue: int = 0
    due_today: int = 0
    due_soon: int = 0
    floating: int = 0
    total: int = 0

    def to_dict(self) -> dict:
        return {
            "overdue": self.overdue,
            "due_today": self.due_today,
            "due_soon": self.due_soon,
            "floating": self.floating,
            "total": self.total,
        }
