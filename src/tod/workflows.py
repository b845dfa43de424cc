"""Shared workflow layer between the CLI and the task core.

Each function fetches through a TaskRepository, runs the pure core over the
result and returns the text to print.
"""

import logging
from pathlib import Path

import click

from .config import Config, State, save_projects
from .core.tasks import (
    Priority,
    Task,
    filter_not_in_future,
    filter_overdue,
    filter_recurring,
    filter_today_and_timed,
    filter_unscheduled,
    format_task,
    sort_by_datetime,
    sort_by_value,
)
from .core.time import Context
from .ports.task_repo import TaskRepository

logger = logging.getLogger(__name__)


def _green(text: str) -> str:
    return click.style(text, fg="green")


def _render(header: str, tasks: list[Task], context: Context) -> str:
    lines = [_green(header)]
    lines.extend(format_task(t, context, list_item=True) for t in tasks)
    return "\n".join(lines)


def pick_next(tasks: list[Task], context: Context) -> tuple[Task, int] | None:
    """Most urgent task that is not due in the future, plus the candidate count."""
    candidates = sort_by_value(filter_not_in_future(tasks, context), context)
    if not candidates:
        return None
    return candidates[0], len(candidates)


def next_task(
    repo: TaskRepository,
    context: Context,
    query: str,
    state_path: Path | None = None,
) -> str:
    """Show the next task for a filter and remember its id."""
    picked = pick_next(repo.fetch_filter(query), context)
    if picked is None:
        return _green("No tasks on list")

    task, remaining = picked
    State(next_id=task.id).save(state_path)
    logger.debug(f"Next task is {task.id} out of {remaining} candidate(s)")
    return f"{format_task(task, context)}\n{remaining} task(s) remaining"


def list_tasks(repo: TaskRepository, context: Context, query: str) -> str:
    """All tasks for a filter, untimed first then by due time."""
    tasks = repo.fetch_filter(query)
    if not tasks:
        return f"No tasks for filter: '{query}'"
    return _render(f"Tasks for filter: '{query}'", sort_by_datetime(tasks, context), context)


def _saved_next_id(state_path: Path | None) -> str:
    state = State.load(state_path)
    if not state.next_id:
        raise click.ClickException("There is no next task. Run 'tod task next' first.")
    return state.next_id


def complete_next(repo: TaskRepository, state_path: Path | None = None) -> str:
    """Complete the task last shown by next_task."""
    task_id = _saved_next_id(state_path)
    repo.complete_task(task_id)
    State().save(state_path)
    return _green("Task completed")


def prioritize_next(
    repo: TaskRepository,
    priority: Priority,
    state_path: Path | None = None,
) -> str:
    """Set the priority of the task last shown by next_task."""
    task_id = _saved_next_id(state_path)
    repo.update_priority(task_id, priority)
    return _green(f"Priority set to {priority.label}")


def create_task(
    repo: TaskRepository,
    config: Config,
    content: str,
    project: str | None = None,
    priority: Priority = Priority.NONE,
    description: str = "",
    due: str | None = None,
) -> str:
    """Create a task without natural language parsing of the content."""
    project_id = config.project_id(project) if project else None
    repo.create_task(
        content,
        project_id=project_id,
        priority=priority,
        description=description,
        due_string=due,
    )
    return _green("✓")


def quick_add(repo: TaskRepository, text: str) -> str:
    """Hand free text to Todoist's own parser."""
    repo.quick_add(text)
    return _green("✓")


def list_projects(config: Config) -> str:
    if not config.projects:
        return "No projects found"
    lines = [_green("Projects")]
    lines.extend(f" - {name}" for name in sorted(config.projects))
    return "\n".join(lines)


def project_schedule(repo: TaskRepository, context: Context, config: Config, name: str) -> str:
    """Today's timed tasks (appointments) for a project, in time order."""
    tasks = repo.fetch_project(config.project_id(name))
    scheduled = filter_today_and_timed(tasks, context)
    if not scheduled:
        return "No scheduled tasks found"
    return _render(f"Schedule for {name}", sort_by_datetime(scheduled, context), context)


def project_overdue(repo: TaskRepository, context: Context, config: Config, name: str) -> str:
    """Overdue tasks for a project, most urgent first."""
    tasks = filter_overdue(repo.fetch_project(config.project_id(name)), context)
    if not tasks:
        return _green(f"No overdue tasks in {name}")
    return _render(f"Overdue tasks for {name}", sort_by_value(tasks, context), context)


def project_unscheduled(repo: TaskRepository, context: Context, config: Config, name: str) -> str:
    """Tasks that need a date: undated or overdue, most urgent first."""
    tasks = filter_unscheduled(repo.fetch_project(config.project_id(name)), context)
    if not tasks:
        return _green(f"No tasks to schedule in {name}")
    return _render(f"Unscheduled tasks for {name}", sort_by_value(tasks, context), context)


def project_recurring(repo: TaskRepository, context: Context, config: Config, name: str) -> str:
    tasks = filter_recurring(repo.fetch_project(config.project_id(name)))
    if not tasks:
        return _green(f"No recurring tasks in {name}")
    return _render(f"Recurring tasks for {name}", sort_by_datetime(tasks, context), context)


def remove_project(
    config: Config,
    name: str | None = None,
    remove_all: bool = False,
    path: Path | None = None,
) -> str:
    """Remove one project, or all of them, from the config. Todoist is untouched."""
    if remove_all:
        config.projects.clear()
        save_projects(config.projects, path)
        return _green("Removed all projects from config")
    if not name:
        raise click.UsageError("Provide a project name or --all")

    removed = config.remove_project(name)
    save_projects(config.projects, path)
    return _green(f"Removed {removed} from config")
