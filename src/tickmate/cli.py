"""tickmate CLI - agent-friendly TickTick queries from the terminal."""

import json
import logging
import sys
from functools import update_wrapper

import click

from .adapters.ticktick_api import TickTickAdapter
from .config import load_config
from .core.errors import TickmateError
from .core.tasks import EnrichedTask, Priority, TimeWindow
from .service import TaskService

PRIORITY_MARKERS = {
    Priority.NONE: "",
    Priority.LOW: "!",
    Priority.MEDIUM: "!!",
    Priority.HIGH: "!!!",
}


def build_service() -> TaskService:
    config = load_config()
    return TaskService(TickTickAdapter(config), config.timezone)


def handle_errors(f):
    """Print core errors as `Error: ...` and exit 1."""

    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except TickmateError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    return update_wrapper(wrapper, f)


def format_task_line(task: EnrichedTask) -> str:
    """One-line human rendering of an enriched task."""
    marker = PRIORITY_MARKERS[task.priority]
    line = f"[{marker:3}] {task.title}"
    if task.due_date:
        flag = " OVERDUE" if task.is_overdue else ""
        line += f" (due {task.due_date.user_local}, {task.due_date.relative}{flag})"
    line += f" [{task.project.name}]"
    if task.context:
        line += f" - {task.context}"
    if task.repeat_info:
        line += f" ({task.repeat_info})"
    return line


def echo_tasks(tasks: list[EnrichedTask], as_json: bool, empty: str) -> None:
    if as_json:
        click.echo(json.dumps([t.to_dict() for t in tasks], indent=2))
        return

    if not tasks:
        click.echo(empty)
        return

    for task in tasks:
        click.echo(format_task_line(task))


json_option = click.option("--json", "as_json", is_flag=True, help="Output as JSON")


@click.group()
@click.version_option(package_name="tickmate")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """tickmate - time-aware TickTick task assistant."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if verbose else logging.WARNING,
    )


@main.command()
@json_option
@handle_errors
def today(as_json: bool):
    """List tasks due today."""
    echo_tasks(build_service().tasks_due_today(), as_json, "Nothing due today.")


@main.command()
@json_option
@handle_errors
def overdue(as_json: bool):
    """List overdue tasks, most overdue first."""
    echo_tasks(build_service().overdue_tasks(), as_json, "No overdue tasks.")


@main.command()
@json_option
@handle_errors
def floating(as_json: bool):
    """List tasks with no due date."""
    echo_tasks(build_service().floating_tasks(), as_json, "No floating tasks.")


@main.command()
@click.option("--days", "-d", type=float, default=7, show_default=True, help="Days to look ahead")
@json_option
@handle_errors
def upcoming(days: float, as_json: bool):
    """List tasks due in the next N days."""
    echo_tasks(build_service().upcoming_tasks(days), as_json, f"Nothing due in the next {days:g} days.")


@main.command()
@click.argument("name")
@json_option
@handle_errors
def project(name: str, as_json: bool):
    """List tasks in projects whose name contains NAME."""
    echo_tasks(build_service().tasks_by_project(name), as_json, f"No tasks in projects matching {name!r}.")


@main.command()
@click.argument("keyword")
@json_option
@handle_errors
def search(keyword: str, as_json: bool):
    """Search task titles and content."""
    echo_tasks(build_service().search(keyword), as_json, f"No tasks matching {keyword!r}.")


@main.command("next")
@click.option("--minutes", "-m", type=int, default=None, help="Minutes you have available")
@click.option("--context", "-c", default=None, help='Where/when you are, e.g. "morning"')
@json_option
@handle_errors
def next_task(minutes: int | None, context: str | None, as_json: bool):
    """Suggest what to work on next."""
    suggestion = build_service().suggest_next(TimeWindow(minutes, context))

    if as_json:
        click.echo(json.dumps(suggestion.to_dict() if suggestion else None, indent=2))
        return

    if not suggestion:
        click.echo("No suggestion - nothing urgent or high priority.")
        return

    click.echo(format_task_line(suggestion.task))
    click.echo(f"  Why: {suggestion.reason}")


@main.command()
@json_option
@handle_errors
def summary(as_json: bool):
    """Show counts of overdue, today, soon and floating tasks."""
    counts = build_service().summary()

    if as_json:
        click.echo(json.dumps(counts.to_dict(), indent=2))
        return

    click.echo(f"Overdue:   {counts.overdue}")
    click.echo(f"Due today: {counts.due_today}")
    click.echo(f"Due soon:  {counts.due_soon}")
    click.echo(f"Floating:  {counts.floating}")
    click.echo(f"Total:     {counts.total}")


@main.command()
@click.argument("title")
@click.option("--project", "-p", default=None, help="Project name (partial match)")
@click.option("--due", "-d", default=None, help='"today", "tomorrow", "next week" or ISO date')
@click.option("--content", default=None, help="Task description")
@click.option(
    "--priority",
    type=click.Choice(["none", "low", "medium", "high"], case_sensitive=False),
    default=None,
)
@json_option
@handle_errors
def add(title: str, project: str | None, due: str | None, content: str | None,
        priority: str | None, as_json: bool):
    """Create a task."""
    task = build_service().create_task(
        title, project=project, due=due, content=content, priority=priority
    )

    if as_json:
        click.echo(json.dumps(task.to_dict(), indent=2))
    else:
        click.echo(f"Created: {format_task_line(task)}")


@main.command()
@click.argument("task_id")
@handle_errors
def done(task_id: str):
    """Mark a task as completed."""
    build_service().complete_task(task_id)
    click.echo(f"Completed {task_id}")


@main.command()
def serve():
    """Run the MCP server on stdio."""
    from .mcp_server import main as run_server

    run_server()


if __name__ == "__main__":
    main()
