"""Functional core - pure business logic with no I/O."""

from .time import (
    Context,
    DueDate,
    DueDateTime,
    NoDateTime,
    ParseError,
    Resolved,
    TemporalError,
    TimezoneError,
    resolve,
)
from .tasks import (
    DecodeError,
    DueSpec,
    Priority,
    Task,
    filter_not_in_future,
    filter_today_and_timed,
    format_task,
    sort_by_datetime,
    sort_by_value,
    value,
)

__all__ = [
    # Time
    "Context",
    "DueDate",
    "DueDateTime",
    "NoDateTime",
    "ParseError",
    "Resolved",
    "TemporalError",
    "TimezoneError",
    "resolve",
    # Tasks
    "DecodeError",
    "DueSpec",
    "Priority",
    "Task",
    "filter_not_in_future",
    "filter_today_and_timed",
    "format_task",
    "sort_by_datetime",
    "sort_by_value",
    "value",
]
