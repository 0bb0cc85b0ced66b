"""Task repository interface."""

from typing import Protocol

from tickmate.core.tasks import ProjectData, RawTask


class TaskRepository(Protocol):
    """Interface for reading and writing tasks on any backend."""

    def list_projects_with_tasks(self) -> list[ProjectData]:
        """Fetch every project with its tasks. Projects that fail to load are left out."""
        ...

    def create_task(self, fields: dict) -> RawTask:
        """Create a task from API-shaped fields and return the stored record."""
        ...

    def complete_task(self, task_id: str, project_id: str) -> None:
        """Mark a task as completed."""
        ...
