"""Tests for the click CLI."""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from tickmate.cli import format_task_line, main
from tickmate.core.errors import NotFoundError, ValidationError
from tickmate.core.tasks import (
    EnrichedTask,
    Priority,
    ProjectRef,
    Status,
    TaskSuggestion,
    TaskSummary,
)
from tickmate.core.timectx import TimeContext


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def task():
    return EnrichedTask(
        id="t1",
        title="Write report",
        project=ProjectRef(id="p1", name="Work"),
        priority=Priority.HIGH,
        status=Status.ACTIVE,
        due_date=TimeContext(
            iso="2025-01-13T08:00:00.000Z",
            relative="2 days ago",
            user_local="Jan 13, 2025, 08:00 AM",
            timestamp=1736755200000,
        ),
        is_overdue=True,
        context="Subtask of: Quarterly review",
    )


@pytest.fixture
def service():
    with patch("tickmate.cli.build_service") as build:
        svc = MagicMock()
        build.return_value = svc
        yield svc


class TestFormatTaskLine:
    def test_overdue_task(self, task):
        line = format_task_line(task)

        assert line.startswith("[!!!] Write report")
        assert "due Jan 13, 2025, 08:00 AM, 2 days ago OVERDUE" in line
        assert "[Work]" in line
        assert line.endswith("- Subtask of: Quarterly review")

    def test_floating_low_priority(self):
        task = EnrichedTask(
            id="t2",
            title="Read",
            project=ProjectRef(id="p2", name="Home"),
            priority=Priority.NONE,
            status=Status.ACTIVE,
        )
        assert format_task_line(task) == "[   ] Read [Home]"


class TestCommands:
    def test_overdue_text(self, runner, service, task):
        service.overdue_tasks.return_value = [task]

        result = runner.invoke(main, ["overdue"])

        assert result.exit_code == 0
        assert "Write report" in result.output

    def test_today_empty(self, runner, service):
        service.tasks_due_today.return_value = []

        result = runner.invoke(main, ["today"])

        assert result.exit_code == 0
        assert "Nothing due today." in result.output

    def test_floating_json(self, runner, service, task):
        service.floating_tasks.return_value = [task]

        result = runner.invoke(main, ["floating", "--json"])

        data = json.loads(result.output)
        assert data[0]["id"] == "t1"
        assert data[0]["priority"] == "high"

    def test_upcoming_passes_days(self, runner, service):
        service.upcoming_tasks.return_value = []

        result = runner.invoke(main, ["upcoming", "--days", "3"])

        assert result.exit_code == 0
        service.upcoming_tasks.assert_called_once_with(3.0)

    def test_next_with_window(self, runner, service, task):
        service.suggest_next.return_value = TaskSuggestion(task, "Overdue by 2 days ago")

        result = runner.invoke(main, ["next", "--minutes", "20", "--context", "morning"])

        window = service.suggest_next.call_args[0][0]
        assert window.available_minutes == 20
        assert window.context == "morning"
        assert "Why: Overdue by 2 days ago" in result.output

    def test_next_without_suggestion_json(self, runner, service):
        service.suggest_next.return_value = None

        result = runner.invoke(main, ["next", "--json"])

        assert json.loads(result.output) is None

    def test_summary(self, runner, service):
        service.summary.return_value = TaskSummary(overdue=1, due_today=2, due_soon=3, floating=4, total=9)

        result = runner.invoke(main, ["summary", "--json"])

        assert json.loads(result.output) == {
            "overdue": 1,
            "due_today": 2,
            "due_soon": 3,
            "floating": 4,
            "total": 9,
        }

    def test_add(self, runner, service, task):
        service.create_task.return_value = task

        result = runner.invoke(
            main, ["add", "Write report", "--project", "work", "--due", "tomorrow", "--priority", "HIGH"]
        )

        assert result.exit_code == 0
        service.create_task.assert_called_once_with(
            "Write report", project="work", due="tomorrow", content=None, priority="high"
        )
        assert result.output.startswith("Created: ")

    def test_done(self, runner, service):
        result = runner.invoke(main, ["done", "t1"])

        assert result.exit_code == 0
        service.complete_task.assert_called_once_with("t1")

    def test_error_exits_nonzero(self, runner, service):
        service.search.side_effect = ValidationError("keyword is required")

        result = runner.invoke(main, ["search", " "])

        assert result.exit_code == 1
        assert "Error: keyword is required" in result.output

    def test_not_found_error(self, runner, service):
        service.complete_task.side_effect = NotFoundError("Task not found: t9")

        result = runner.invoke(main, ["done", "t9"])

        assert result.exit_code == 1
        assert "Task not found: t9" in result.output
