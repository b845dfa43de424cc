"""Todoist API adapter - HTTP client for task fetching and updates."""

import logging

import requests

from tod.config import Config, load_config
from tod.core.tasks import DecodeError, Priority, Task

logger = logging.getLogger(__name__)

TASKS_PATH = "/rest/v2/tasks"
QUICK_ADD_PATH = "/sync/v9/quick/add"


class AuthenticationError(Exception):
    """Raised when no usable API token is configured."""

    pass


class TodoistAdapter:
    """
    Todoist REST API adapter.

    Implements TaskRepository protocol. Handles authentication and API calls.
    No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        if not self.config.todoist_token:
            raise AuthenticationError(
                "No Todoist token. Set TODOIST_TOKEN or add TODOIST_TOKEN to tod.conf"
            )
        return {"Authorization": f"Bearer {self.config.todoist_token}"}

    def _url(self, path: str) -> str:
        return f"{self.config.api_url}{path}"

    def _get_tasks(self, params: dict[str, str]) -> list[Task]:
        """GET the task list endpoint and decode every task."""
        resp = self._session.get(self._url(TASKS_PATH), headers=self._headers(), params=params)
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as e:
            raise DecodeError(f"Could not parse response for tasks: {e}") from e

        if not isinstance(data, list):
            raise DecodeError(f"Expected a list of tasks, got {type(data).__name__}")

        tasks = [Task.from_api(item) for item in data]
        logger.debug(f"Fetched {len(tasks)} task(s) with {params}")
        return tasks

    def _post(self, path: str, payload: dict | None = None) -> None:
        resp = self._session.post(self._url(path), headers=self._headers(), json=payload)
        resp.raise_for_status()

    def fetch_filter(self, query: str) -> list[Task]:
        """Fetch tasks matching a Todoist filter query, e.g. 'today | overdue'."""
        return self._get_tasks({"filter": query})

    def fetch_project(self, project_id: str) -> list[Task]:
        """Fetch all active tasks in a project."""
        return self._get_tasks({"project_id": project_id})

    def complete_task(self, task_id: str) -> None:
        """Close a task."""
        self._post(f"{TASKS_PATH}/{task_id}/close")
        logger.info(f"Completed task {task_id}")

    def update_priority(self, task_id: str, priority: Priority) -> None:
        """Set a task's priority."""
        self._post(f"{TASKS_PATH}/{task_id}", {"priority": int(priority)})
        logger.info(f"Set priority of task {task_id} to {priority.label}")

    def create_task(
        self,
        content: str,
        project_id: str | None = None,
        priority: Priority = Priority.NONE,
        description: str = "",
        due_string: str | None = None,
    ) -> None:
        """Create a task. The due text is sent as-is for Todoist to parse."""
        payload: dict = {"content": content, "priority": int(priority)}
        if project_id:
            payload["project_id"] = project_id
        if description:
            payload["description"] = description
        if due_string:
            payload["due_string"] = due_string
        self._post(TASKS_PATH, payload)
        logger.info(f"Created task '{content}'")

    def quick_add(self, text: str) -> None:
        """Create a task from natural language, e.g. 'Buy milk tomorrow p1'."""
        self._post(QUICK_ADD_PATH, {"text": text})
        logger.info(f"Quick added '{text}'")
