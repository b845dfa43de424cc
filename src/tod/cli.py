"""tod CLI - pick the next Todoist task."""

import logging
import sys
from typing import Callable

import click
import requests

from . import workflows
from .adapters.todoist_api import AuthenticationError, TodoistAdapter
from .config import Config, ProjectNotFoundError, load_config
from .core.tasks import DecodeError, Priority
from .core.time import Context, TemporalError

EXPECTED_ERRORS = (
    AuthenticationError,
    ProjectNotFoundError,
    TemporalError,
    DecodeError,
    requests.RequestException,
)


def _run(action: Callable[[Config, Context, TodoistAdapter], str]) -> None:
    """Build config, context and adapter once, run the action and print its output."""
    try:
        config = load_config()
        context = Context.from_config(config)
        output = action(config, context, TodoistAdapter(config))
    except EXPECTED_ERRORS as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(output)


@click.group(invoke_without_command=True)
@click.version_option(package_name="tod")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--quickadd", "-q", default=None, help="Create a task from natural language")
@click.pass_context
def main(ctx: click.Context, debug: bool, quickadd: str | None):
    """tod - Todoist from the command line."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )

    if quickadd:
        _run(lambda config, context, repo: workflows.quick_add(repo, quickadd))
    elif ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.group()
def task():
    """Commands for individual tasks."""
    pass


@task.command("next")
@click.option("--filter", "-f", "query", default=None, help="Todoist filter query")
def task_next(query: str | None):
    """Get the next task by priority and urgency."""
    _run(lambda config, context, repo: workflows.next_task(
        repo, context, query or config.default_filter
    ))


@task.command("list")
@click.option("--filter", "-f", "query", default=None, help="Todoist filter query")
def task_list(query: str | None):
    """List all tasks for a filter, ordered by due time."""
    _run(lambda config, context, repo: workflows.list_tasks(
        repo, context, query or config.default_filter
    ))


@task.command("complete")
def task_complete():
    """Complete the last task fetched with the next command."""
    _run(lambda config, context, repo: workflows.complete_next(repo))


@task.command("priority")
@click.argument("priority")
def task_priority(priority: str):
    """Set the priority (p1-p4 or none/low/medium/high) of the last next task."""
    try:
        level = Priority.from_label(priority)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="PRIORITY")
    _run(lambda config, context, repo: workflows.prioritize_next(repo, level))


@task.command("create")
@click.option("--content", "-c", required=True, help="Task content, not parsed for dates")
@click.option("--priority", "-p", "priority", default=None, help="p1-p4 or none/low/medium/high")
@click.option("--description", "-d", default="", help="Task description")
@click.option("--due", default=None, help="Due date in Todoist's words, e.g. 'tomorrow 5pm'")
@click.option("--project", default=None, help="Configured project name")
def task_create(
    content: str,
    priority: str | None,
    description: str,
    due: str | None,
    project: str | None,
):
    """Create a task from explicit fields."""
    try:
        level = Priority.from_label(priority) if priority else Priority.NONE
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--priority")
    _run(lambda config, context, repo: workflows.create_task(
        repo, config, content, project=project, priority=level, description=description, due=due
    ))


@main.group()
def project():
    """Commands for configured projects."""
    pass


@project.command("list")
def project_list():
    """List the projects in the config."""
    click.echo(workflows.list_projects(load_config()))


@project.command("schedule")
@click.argument("name")
def project_schedule(name: str):
    """Show today's timed tasks for a project."""
    _run(lambda config, context, repo: workflows.project_schedule(repo, context, config, name))


@project.command("overdue")
@click.argument("name")
def project_overdue(name: str):
    """Show overdue tasks for a project."""
    _run(lambda config, context, repo: workflows.project_overdue(repo, context, config, name))


@project.command("unscheduled")
@click.argument("name")
def project_unscheduled(name: str):
    """Show undated or overdue tasks for a project."""
    _run(lambda config, context, repo: workflows.project_unscheduled(repo, context, config, name))


@project.command("recurring")
@click.argument("name")
def project_recurring(name: str):
    """Show recurring tasks for a project."""
    _run(lambda config, context, repo: workflows.project_recurring(repo, context, config, name))


@project.command("remove")
@click.argument("name", required=False)
@click.option("--all", "remove_all", is_flag=True, help="Remove every project")
def project_remove(name: str | None, remove_all: bool):
    """Remove a project from the config. Nothing is deleted in Todoist."""
    try:
        output = workflows.remove_project(load_config(), name, remove_all=remove_all)
    except ProjectNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(output)


if __name__ == "__main__":
    main()
