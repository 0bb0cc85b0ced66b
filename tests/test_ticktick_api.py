"""Tests for the TickTick API adapter."""

import logging
from unittest.mock import MagicMock

import pytest
import requests

from tickmate.adapters.ticktick_api import AuthenticationError, TickTickAdapter, TickTickAPIError
from tickmate.config import Config

API = "https://api.example.test/open/v1"


def response(data=None, status=200, text=""):
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    resp.text = text
    resp.content = b"" if data is None else b"{}"
    resp.json.return_value = data
    return resp


@pytest.fixture
def config():
    return Config(ticktick_token="secret", ticktick_api_base=API, fetch_workers=4)


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def adapter(config, session):
    return TickTickAdapter(config, session=session)


def route(routes):
    """Build a session.request side effect keyed on (method, url)."""

    def handler(method, url, **kwargs):
        result = routes[(method, url)]
        if isinstance(result, Exception):
            raise result
        return result

    return handler


class TestRequest:
    def test_sends_bearer_token(self, adapter, session):
        session.request.return_value = response([])

        adapter.get_projects()

        method, url = session.request.call_args[0]
        assert (method, url) == ("GET", f"{API}/project")
        headers = session.request.call_args[1]["headers"]
        assert headers["Authorization"] == "Bearer secret"

    def test_missing_token(self, session):
        adapter = TickTickAdapter(Config(ticktick_token=""), session=session)

        with pytest.raises(AuthenticationError, match="No access token"):
            adapter.get_projects()
        session.request.assert_not_called()

    def test_error_status(self, adapter, session):
        session.request.return_value = response(status=401, text="unauthorized")

        with pytest.raises(TickTickAPIError, match="401 unauthorized"):
            adapter.get_projects()

    def test_network_error_wrapped(self, adapter, session):
        session.request.side_effect = requests.ConnectionError("boom")

        with pytest.raises(TickTickAPIError, match="boom"):
            adapter.get_projects()


class TestListProjectsWithTasks:
    def test_gathers_all_projects_in_order(self, adapter, session):
        session.request.side_effect = route(
            {
                ("GET", f"{API}/project"): response(
                    [{"id": "p1", "name": "Work"}, {"id": "p2", "name": "Home"}]
                ),
                ("GET", f"{API}/project/p1/data"): response(
                    {"project": {"id": "p1"}, "tasks": [{"id": "t1", "projectId": "p1", "title": "A"}]}
                ),
                ("GET", f"{API}/project/p2/data"): response(
                    {"tasks": [{"id": "t2", "projectId": "p2", "title": "B", "priority": 5}]}
                ),
            }
        )

        data = adapter.list_projects_with_tasks()

        assert [d.project.name for d in data] == ["Work", "Home"]
        assert [t.id for d in data for t in d.tasks] == ["t1", "t2"]
        assert data[1].tasks[0].priority == 5

    def test_failed_project_is_dropped_and_logged(self, adapter, session, caplog):
        session.request.side_effect = route(
            {
                ("GET", f"{API}/project"): response(
                    [
                        {"id": "p1", "name": "Work"},
                        {"id": "p2", "name": "Broken"},
                        {"id": "p3", "name": "Home"},
                    ]
                ),
                ("GET", f"{API}/project/p1/data"): response({"tasks": []}),
                ("GET", f"{API}/project/p2/data"): response(status=500, text="oops"),
                ("GET", f"{API}/project/p3/data"): requests.Timeout("slow"),
            }
        )

        with caplog.at_level(logging.WARNING, logger="tickmate.adapters.ticktick_api"):
            data = adapter.list_projects_with_tasks()

        assert [d.project.id for d in data] == ["p1"]
        assert "Broken" in caplog.text
        assert "Home" in caplog.text

    def test_malformed_project_data_is_dropped(self, adapter, session, caplog):
        session.request.side_effect = route(
            {
                ("GET", f"{API}/project"): response(
                    [
                        {"id": "p1", "name": "Work"},
                        {"id": "p2", "name": "NoIds"},
                        {"id": "p3", "name": "NotADict"},
                    ]
                ),
                ("GET", f"{API}/project/p1/data"): response(
                    {"tasks": [{"id": "t1", "projectId": "p1", "title": "A"}]}
                ),
                ("GET", f"{API}/project/p2/data"): response(
                    {"tasks": [{"projectId": "p2", "title": "Missing id"}]}
                ),
                ("GET", f"{API}/project/p3/data"): response(["unexpected"]),
            }
        )

        with caplog.at_level(logging.WARNING, logger="tickmate.adapters.ticktick_api"):
            data = adapter.list_projects_with_tasks()

        assert [d.project.id for d in data] == ["p1"]
        assert "NoIds" in caplog.text
        assert "NotADict" in caplog.text

    def test_project_list_failure_propagates(self, adapter, session):
        session.request.return_value = response(status=503, text="down")

        with pytest.raises(TickTickAPIError):
            adapter.list_projects_with_tasks()

    def test_no_projects(self, adapter, session):
        session.request.return_value = response([])
        assert adapter.list_projects_with_tasks() == []


class TestWrites:
    def test_create_task_drops_empty_fields(self, adapter, session):
        session.request.return_value = response(
            {"id": "new", "projectId": "p1", "title": "Call mom", "priority": 3, "status": 0}
        )

        task = adapter.create_task({"title": "Call mom", "projectId": "p1", "content": None, "priority": 3})

        method, url = session.request.call_args[0]
        assert (method, url) == ("POST", f"{API}/task")
        assert session.request.call_args[1]["json"] == {
            "title": "Call mom",
            "projectId": "p1",
            "priority": 3,
        }
        assert task.id == "new"
        assert task.priority == 3

    def test_create_task_without_body(self, adapter, session):
        session.request.return_value = response(None)

        with pytest.raises(TickTickAPIError):
            adapter.create_task({"title": "x", "projectId": "p1"})

    def test_complete_task(self, adapter, session):
        session.request.return_value = response(None)

        assert adapter.complete_task("t1", "p1") is None

        method, url = session.request.call_args[0]
        assert (method, url) == ("POST", f"{API}/project/p1/task/t1/complete")

    def test_delete_task(self, adapter, session):
        session.request.return_value = response(None)

        adapter.delete_task("t1", "p1")

        method, url = session.request.call_args[0]
        assert (method, url) == ("DELETE", f"{API}/project/p1/task/t1")

    def test_update_task(self, adapter, session):
        session.request.return_value = response({"id": "t1", "projectId": "p1", "title": "Renamed"})

        task = adapter.update_task("t1", {"title": "Renamed", "projectId": "p1"})

        assert session.request.call_args[1]["json"]["id"] == "t1"
        assert task.title == "Renamed"
