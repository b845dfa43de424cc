"""Pure temporal resolution - no I/O dependencies.

Due dates arrive from Todoist in three encodings, distinguished by length:

    2021-09-16            date only
    2021-09-16T16:00:00   local date-time, in the task's (or configured) zone
    2021-09-16T16:00:00Z  date-time fixed to UTC

Everything here takes an explicit Context so results never depend on the
system clock.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DATE_FORMAT = "%Y-%m-%d"
LOCAL_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
UTC_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class TemporalError(Exception):
    """Base class for due date resolution failures."""

    pass


class ParseError(TemporalError):
    """Raised when a raw due date string is not a recognized encoding."""

    def __init__(self, raw: str, reason: str = "unknown format"):
        self.raw = raw
        super().__init__(f"Cannot parse due date '{raw}': {reason}")


class TimezoneError(TemporalError):
    """Raised when a timezone name does not resolve to a known zone."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown timezone: '{name}'")


def resolve_timezone(name: str | None) -> tzinfo:
    """Look up an IANA zone name; None means UTC."""
    if name is None:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise TimezoneError(name) from e


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Context:
    """Configured timezone plus the instant a command started at."""

    now: datetime
    timezone: str | None = None

    def __post_init__(self):
        if self.now.tzinfo is None or self.now.utcoffset() is None:
            raise ValueError(f"Context.now must be timezone-aware, got {self.now!r}")

    @classmethod
    def from_config(cls, config, clock: Callable[[], datetime] = _utc_now) -> "Context":
        """Capture the current instant once and validate the configured zone."""
        tz_name = config.timezone or None
        resolve_timezone(tz_name)
        return cls(now=clock(), timezone=tz_name)

    @property
    def tz(self) -> tzinfo:
        return resolve_timezone(self.timezone)

    @property
    def local_now(self) -> datetime:
        return self.now.astimezone(self.tz)

    @property
    def today(self) -> date:
        return self.local_now.date()


@dataclass(frozen=True)
class NoDateTime:
    """Task has no due date."""


@dataclass(frozen=True)
class DueDate:
    """Due on a calendar date, no time of day."""

    date: date
    is_recurring: bool


@dataclass(frozen=True)
class DueDateTime:
    """Due at a concrete instant."""

    datetime: datetime
    is_recurring: bool


Resolved = NoDateTime | DueDate | DueDateTime


def resolve(due, context: Context) -> Resolved:
    """
    Resolve a task's DueSpec into one of the three temporal states.

    Zone precedence: the DueSpec's own timezone, then the context's, then UTC.
    UTC-suffixed strings ignore both.

    Raises:
        TimezoneError: if the applicable zone name is unknown
        ParseError: if the raw string is not one of the recognized encodings
    """
    if due is None:
        return NoDateTime()

    tz = resolve_timezone(due.timezone or context.timezone)
    raw = due.date

    match len(raw):
        case 10:
            return DueDate(date=_parse(raw, DATE_FORMAT).date(), is_recurring=due.is_recurring)
        case 19:
            parsed = _parse(raw, LOCAL_DATETIME_FORMAT)
            return DueDateTime(datetime=parsed.replace(tzinfo=tz), is_recurring=due.is_recurring)
        case 20:
            parsed = _parse(raw, UTC_DATETIME_FORMAT)
            return DueDateTime(
                datetime=parsed.replace(tzinfo=timezone.utc),
                is_recurring=due.is_recurring,
            )
        case _:
            raise ParseError(raw, f"unexpected length {len(raw)}")


def _parse(raw: str, fmt: str) -> datetime:
    try:
        return datetime.strptime(raw, fmt)
    except ValueError as e:
        raise ParseError(raw, str(e)) from e


def format_date(value: date, context: Context) -> str:
    """'Today' for the current date, ISO date otherwise."""
    if value == context.today:
        return "Today"
    return value.strftime(DATE_FORMAT)


def format_datetime(value: datetime, context: Context) -> str:
    """Time only for today, full date-time otherwise, shown in the context zone."""
    local = value.astimezone(context.tz)
    if value.date() == context.today:
        return local.strftime("%H:%M")
    return local.strftime("%Y-%m-%d %H:%M:%S %Z")

