"""Task repository interface."""

from typing import Protocol

from tod.core.tasks import Priority, Task


class TaskRepository(Protocol):
    """Interface for fetching and updating tasks on any backend."""

    def fetch_filter(self, query: str) -> list[Task]:
        """Fetch active tasks matching a filter query."""
        ...

    def fetch_project(self, project_id: str) -> list[Task]:
        """Fetch active tasks in a project."""
        ...

    def complete_task(self, task_id: str) -> None:
        """Mark a task as done."""
        ...

    def update_priority(self, task_id: str, priority: Priority) -> None:
        """Change a task's priority."""
        ...

    def create_task(
        self,
        content: str,
        project_id: str | None = None,
        priority: Priority = Priority.NONE,
        description: str = "",
        due_string: str | None = None,
    ) -> None:
        """Create a task; due_string is interpreted by the backend."""
        ...

    def quick_add(self, text: str) -> None:
        """Create a task from free text parsed by the backend."""
        ...
