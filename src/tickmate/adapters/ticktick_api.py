"""TickTick API adapter - HTTP client for reading and writing tasks."""

import logging
from concurrent.futures import ThreadPoolExecutor

import requests

from tickmate.config import Config, load_config
from tickmate.core.errors import TickmateError
from tickmate.core.tasks import ProjectData, RawProject, RawTask

logger = logging.getLogger(__name__)


class AuthenticationError(TickmateError):
    """Raised when no usable access token is configured."""

    kind = "auth"


class TickTickAPIError(TickmateError):
    """Raised when the TickTick API rejects a request or cannot be reached."""

    kind = "external"


class TickTickAdapter:
    """
    TickTick API adapter.

    Implements TaskRepository protocol. Handles the bearer token, HTTP calls
    and the per-project fan-out. No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        self._session = session or requests.Session()

    def _request(self, method: str, endpoint: str, payload: dict | None = None) -> dict | list | None:
        """Make an authenticated API request. Empty bodies come back as None."""
        if not self.config.ticktick_token:
            raise AuthenticationError("No access token. Set TICKTICK_TOKEN in the environment or tickmate.conf.")

        url = f"{self.config.ticktick_api_base}{endpoint}"
        logger.debug(f"{method} {url}")
        try:
            resp = self._session.request(
                method,
                url,
                json=payload,
                headers={"Authorization": f"Bearer {self.config.ticktick_token}"},
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            raise TickTickAPIError(f"TickTick API request failed: {e}") from e

        if not resp.ok:
            raise TickTickAPIError(f"TickTick API error: {resp.status_code} {resp.text}")

        if not resp.content:
            return None
        try:
            return resp.json()
        except requests.JSONDecodeError as e:
            raise TickTickAPIError(f"TickTick API returned invalid JSON: {e}") from e

    def get_projects(self) -> list[RawProject]:
        """Get all projects."""
        return [RawProject.from_api(p) for p in self._request("GET", "/project") or []]

    def get_project_data(self, project: RawProject) -> ProjectData:
        """Get a project together with its tasks."""
        data = self._request("GET", f"/project/{project.id}/data") or {}
        return ProjectData.from_api(project, data)

    def _fetch_or_none(self, project: RawProject) -> ProjectData | None:
        try:
            return self.get_project_data(project)
        except TickTickAPIError as e:
            logger.warning(f"Failed to fetch project {project.name} ({project.id}): {e}")
            return None
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning(f"Malformed data for project {project.name} ({project.id}): {e!r}")
            return None

    def list_projects_with_tasks(self) -> list[ProjectData]:
        """
        Fetch every project's tasks concurrently.

        A project whose fetch fails is logged and left out; the rest are
        returned in project-list order.
        """
        projects = self.get_projects()
        if not projects:
            return []

        workers = min(self.config.fetch_workers, len(projects))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(self._fetch_or_none, projects))

        return [r for r in results if r is not None]

    def create_task(self, fields: dict) -> RawTask:
        """Create a task. `fields` uses TickTick's camelCase keys."""
        payload = {k: v for k, v in fields.items() if v is not None}
        data = self._request("POST", "/task", payload)
        if not data:
            raise TickTickAPIError("TickTick API returned no task after create")
        return RawTask.from_api(data)

    def update_task(self, task_id: str, fields: dict) -> RawTask:
        """Update fields on an existing task."""
        payload = {k: v for k, v in fields.items() if v is not None}
        payload.setdefault("id", task_id)
        return RawTask.from_api(self._request("POST", f"/task/{task_id}", payload))

    def complete_task(self, task_id: str, project_id: str) -> None:
        """Mark a task as completed."""
        self._request("POST", f"/project/{project_id}/task/{task_id}/complete")

    def delete_task(self, task_id: str, project_id: str) -> None:
        """Delete a task."""
        self._request("DELETE", f"/project/{project_id}/task/{task_id}")
