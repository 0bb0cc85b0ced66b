"""MCP server exposing the task tools to language-model agents over stdio."""

import json
import logging
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP

from .adapters.ticktick_api import TickTickAdapter
from .config import Config, load_config
from .core.errors import TickmateError
from .core.tasks import TimeWindow
from .service import TaskService

logger = logging.getLogger(__name__)

mcp = FastMCP("tickmate")

_service: TaskService | None = None


def get_service() -> TaskService:
    """Build the service on first use so importing this module needs no token."""
    global _service
    if _service is None:
        config = load_config()
        _service = TaskService(TickTickAdapter(config), config.timezone)
    return _service


def _dump(result: Any) -> str:
    return json.dumps(result, indent=2)


def _call(fn: Callable[[TaskService], Any]) -> str:
    """Run a service call and render the result, or a structured error, as JSON."""
    try:
        return _dump(fn(get_service()))
    except TickmateError as e:
        logger.info(f"Tool failed ({e.kind}): {e}")
        return json.dumps(e.to_dict())


@mcp.tool()
def get_tasks_today() -> str:
    """Get all tasks due today with full time context (relative, local time, ISO)."""
    return _call(lambda s: [t.to_dict() for t in s.tasks_due_today()])


@mcp.tool()
def get_overdue_tasks() -> str:
    """Get all overdue tasks, most overdue first."""
    return _call(lambda s: [t.to_dict() for t in s.overdue_tasks()])


@mcp.tool()
def get_floating_tasks() -> str:
    """Get tasks without deadlines."""
    return _call(lambda s: [t.to_dict() for t in s.floating_tasks()])


@mcp.tool()
def get_upcoming_tasks(days: float = 7) -> str:
    """Get tasks due in the next N days (default 7), soonest first."""
    return _call(lambda s: [t.to_dict() for t in s.upcoming_tasks(days)])


@mcp.tool()
def get_tasks_by_project(project_name: str) -> str:
    """Get all active tasks in a project. Partial, case-insensitive name match."""
    return _call(lambda s: [t.to_dict() for t in s.tasks_by_project(project_name)])


@mcp.tool()
def search_tasks(keyword: str) -> str:
    """Search active tasks by keyword in title or content."""
    return _call(lambda s: [t.to_dict() for t in s.search(keyword)])


@mcp.tool()
def suggest_next_task(available_minutes: int | None = None, context: str | None = None) -> str:
    """
    Suggest what to work on next, considering deadlines and priorities.

    available_minutes: how much time the user has (optional).
    context: where or when the user is, e.g. "morning" or "at office" (optional).
    """

    def suggest(s: TaskService) -> dict:
        suggestion = s.suggest_next(TimeWindow(available_minutes, context))
        return suggestion.to_dict() if suggestion else {"suggestion": None}

    return _call(suggest)


@mcp.tool()
def get_task_summary() -> str:
    """Get counts of overdue, due today, due soon and floating tasks."""
    return _call(lambda s: s.summary().to_dict())


@mcp.tool()
def create_task(
    title: str,
    project: str | None = None,
    due_date: str | None = None,
    content: str | None = None,
    priority: str | None = None,
) -> str:
    """
    Create a task.

    due_date accepts "today", "tomorrow", "next week" or an ISO date.
    project is a partial name; the first project is used when nothing matches.
    priority is one of none, low, medium, high.
    """
    return _call(
        lambda s: s.create_task(
            title, project=project, due=due_date, content=content, priority=priority
        ).to_dict()
    )


@mcp.tool()
def complete_task(task_id: str) -> str:
    """Mark a task as completed."""

    def complete(s: TaskService) -> dict:
        s.complete_task(task_id)
        return {"success": True}

    return _call(complete)


def main(config: Config | None = None) -> None:
    """Run the MCP server on stdio. Logs go to stderr."""
    global _service
    config = config or load_config()
    _service = TaskService(TickTickAdapter(config), config.timezone)
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, config.log_level, logging.INFO),
    )
    logger.info(f"Starting tickmate MCP server (timezone {config.timezone})")
    mcp.run()


if __name__ == "__main__":
    main()
