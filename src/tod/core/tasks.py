"""Pure task domain logic - no I/O dependencies."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum

import click

from .time import (
    Context,
    DueDate,
    DueDateTime,
    NoDateTime,
    Resolved,
    TemporalError,
    format_date,
    format_datetime,
    resolve,
)

logger = logging.getLogger(__name__)

RECURRING_ICON = " ↻"

# Minutes either side of "now" in which a timed task counts as happening now
NOW_WINDOW_MINUTES = 15

# REST v2 due.datetime, e.g. 2016-09-01T12:00:00.000000Z; fraction optional
_REST_DATETIME = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.\d+)?(Z?)$")


class DecodeError(Exception):
    """Raised when a task payload from the API is malformed."""

    pass


class Priority(IntEnum):
    """Task priority, valued as the Todoist API encodes it."""

    NONE = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4

    @property
    def label(self) -> str:
        """Todoist's own label, where p1 is the most important."""
        return f"p{5 - self.value}"

    @classmethod
    def from_label(cls, label: str) -> "Priority":
        """Parse 'p1'..'p4' or a member name like 'high'."""
        text = label.strip().lower()
        if text in ("p1", "p2", "p3", "p4"):
            return cls(5 - int(text[1]))
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"Unknown priority: {label}") from None


# Ranking weights. Not the same ordering as Priority.label.
PRIORITY_VALUES = {
    Priority.NONE: 2,
    Priority.LOW: 1,
    Priority.MEDIUM: 3,
    Priority.HIGH: 4,
}


@dataclass(frozen=True)
class DueSpec:
    """Scheduling information as Todoist sends it."""

    date: str
    is_recurring: bool = False
    timezone: str | None = None
    string: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "DueSpec":
        """
        Create DueSpec from a Todoist due object.

        A timed due carries its time in "datetime" and only the day in "date";
        the time wins, trimmed to the 19 or 20 character encoding.
        """
        if not isinstance(data, dict):
            raise DecodeError(f"Due is not an object: {data!r}")
        raw = data.get("datetime") or data.get("date")
        if not isinstance(raw, str):
            raise DecodeError(f"Due date missing or not a string: {data!r}")
        match = _REST_DATETIME.match(raw)
        if match:
            raw = match.group(1) + match.group(2)
        return cls(
            date=raw,
            is_recurring=bool(data.get("is_recurring", False)),
            timezone=data.get("timezone") or None,
            string=data.get("string") or "",
        )


@dataclass(frozen=True)
class Task:
    """A Todoist task."""

    id: str
    content: str
    priority: Priority = Priority.NONE
    description: str = ""
    due: DueSpec | None = None
    is_completed: bool | None = None
    is_deleted: bool | None = None

    def __str__(self) -> str:
        return self.content

    @classmethod
    def from_api(cls, data: dict) -> "Task":
        """Create Task from a Todoist REST API response."""
        if not isinstance(data, dict):
            raise DecodeError(f"Task payload is not an object: {data!r}")
        try:
            task_id = data["id"]
            content = data["content"]
        except KeyError as e:
            raise DecodeError(f"Task payload missing {e}") from e

        try:
            priority = Priority(data.get("priority", Priority.NONE))
        except ValueError as e:
            raise DecodeError(f"Invalid priority in task {task_id}: {e}") from e

        due = DueSpec.from_api(data["due"]) if data.get("due") else None
        return cls(
            id=str(task_id),
            content=content,
            priority=priority,
            description=data.get("description") or "",
            due=due,
            is_completed=data.get("is_completed"),
            is_deleted=data.get("is_deleted"),
        )


def resolved(task: Task, context: Context) -> Resolved:
    """Resolve a task's due date. Raises TemporalError on bad input."""
    return resolve(task.due, context)


# ============== Ranking ==============


def date_value(task: Task, context: Context) -> int:
    """Urgency contribution of the due date."""
    try:
        info = resolved(task, context)
        match info:
            case NoDateTime():
                return 80
            case DueDate(date=due_date, is_recurring=recurring):
                today_value = 100 if due_date == context.today else 0
                overdue_value = 150 if due_date < context.today else 0
                recurring_value = 0 if recurring else 50
                return today_value + overdue_value + recurring_value
            case DueDateTime(datetime=due_at, is_recurring=recurring):
                recurring_value = 0 if recurring else 50
                minutes = int((due_at - context.now).total_seconds() / 60)
                if -NOW_WINDOW_MINUTES <= minutes <= NOW_WINDOW_MINUTES:
                    return 200 + recurring_value
                return recurring_value
    except TemporalError as e:
        logger.debug(f"Ranking task {task.id} with neutral date value: {e}")
        return 50


def priority_value(task: Task) -> int:
    return PRIORITY_VALUES[task.priority]


def value(task: Task, context: Context) -> int:
    """Combined urgency and priority rank; higher is more urgent."""
    return date_value(task, context) + priority_value(task)


def datetime_of(task: Task, context: Context) -> datetime | None:
    """The concrete instant a task is due, if it has a time."""
    try:
        info = resolved(task, context)
    except TemporalError:
        return None
    match info:
        case DueDateTime(datetime=due_at):
            return due_at
        case NoDateTime() | DueDate():
            return None


def sort_by_value(tasks: list[Task], context: Context) -> list[Task]:
    """
    Sort tasks by rank value (descending).

    Stable: tasks of equal value keep their input order.
    Pure function - no I/O.
    """
    return sorted(tasks, key=lambda t: value(t, context), reverse=True)


def sort_by_datetime(tasks: list[Task], context: Context) -> list[Task]:
    """
    Sort tasks chronologically, untimed tasks first in input order.

    Pure function - no I/O.
    """

    def sort_key(t: Task) -> tuple:
        due_at = datetime_of(t, context)
        if due_at is None:
            return (0,)
        return (1, due_at)

    return sorted(tasks, key=sort_key)


# ============== Predicates ==============


def has_no_date(task: Task) -> bool:
    return task.due is None


def is_today(task: Task, context: Context) -> bool:
    """Due date (or date part of the due time) is the current date."""
    try:
        info = resolved(task, context)
    except TemporalError:
        return False
    match info:
        case NoDateTime():
            return False
        case DueDate(date=due_date):
            return due_date == context.today
        case DueDateTime(datetime=due_at):
            return due_at.date() == context.today


def is_overdue(task: Task, context: Context) -> bool:
    """Due date (or date part of the due time) is before the current date."""
    try:
        info = resolved(task, context)
    except TemporalError:
        return False
    match info:
        case NoDateTime():
            return False
        case DueDate(date=due_date):
            return due_date < context.today
        case DueDateTime(datetime=due_at):
            return due_at.date() < context.today


def is_recurring(task: Task) -> bool:
    return task.due is not None and task.due.is_recurring


def has_time(task: Task, context: Context) -> bool:
    try:
        return isinstance(resolved(task, context), DueDateTime)
    except TemporalError:
        return False


# ============== Filters ==============


def filter_unscheduled(tasks: list[Task], context: Context) -> list[Task]:
    """Tasks that need a (new) date: undated or overdue."""
    return [t for t in tasks if has_no_date(t) or is_overdue(t, context)]


def filter_overdue(tasks: list[Task], context: Context) -> list[Task]:
    """Filter to overdue tasks only."""
    return [t for t in tasks if is_overdue(t, context)]


def filter_recurring(tasks: list[Task]) -> list[Task]:
    return [t for t in tasks if is_recurring(t)]


def filter_not_in_future(tasks: list[Task], context: Context) -> list[Task]:
    """
    Candidates for the next task: due today, overdue, or undated.

    Pure function - no I/O.
    """
    return [
        t
        for t in tasks
        if is_today(t, context) or has_no_date(t) or is_overdue(t, context)
    ]


def filter_today_and_timed(tasks: list[Task], context: Context) -> list[Task]:
    """Appointments: due today at a specific time."""
    return [t for t in tasks if is_today(t, context) and has_time(t, context)]


# ============== Presentation ==============

_PRIORITY_COLORS = {
    Priority.LOW: "blue",
    Priority.MEDIUM: "yellow",
    Priority.HIGH: "red",
}


def format_due(task: Task, context: Context) -> str:
    """Due label for a task, empty when undated; the error text if unresolvable."""
    try:
        info = resolved(task, context)
    except TemporalError as e:
        return str(e)

    match info:
        case NoDateTime():
            return ""
        case DueDate(date=due_date, is_recurring=recurring):
            label = format_date(due_date, context)
        case DueDateTime(datetime=due_at, is_recurring=recurring):
            label = format_datetime(due_at, context)
    icon = RECURRING_ICON if recurring else ""
    return f"Due: {label}{icon}"


def format_task(task: Task, context: Context, list_item: bool = False) -> str:
    """Render a task for the terminal."""
    color = _PRIORITY_COLORS.get(task.priority)
    content = click.style(task.content, fg=color) if color else task.content

    indent = "  " if list_item else ""
    prefix = "- " if list_item else ""

    lines = [f"{prefix}{content}"]
    if task.description:
        lines.append(f"{indent}{task.description}")
    due = format_due(task, context)
    if due:
        lines.append(f"{indent}{due}")
    return "\n".join(lines)
