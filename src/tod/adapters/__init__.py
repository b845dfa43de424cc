"""Adapters - I/O implementations of ports."""

from .todoist_api import TodoistAdapter, AuthenticationError

__all__ = [
    "TodoistAdapter",
    "AuthenticationError",
]
