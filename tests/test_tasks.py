"""Tests for core task logic."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import click
import pytest

from tod.core.tasks import (
    DecodeError,
    DueSpec,
    Priority,
    Task,
    date_value,
    datetime_of,
    filter_not_in_future,
    filter_overdue,
    filter_recurring,
    filter_today_and_timed,
    filter_unscheduled,
    format_task,
    has_no_date,
    has_time,
    is_overdue,
    is_recurring,
    is_today,
    priority_value,
    sort_by_datetime,
    sort_by_value,
    value,
)
from tod.core.time import Context

LA = ZoneInfo("America/Los_Angeles")


# Fixtures
@pytest.fixture
def now():
    return datetime(2024, 1, 1, 17, 0, tzinfo=LA)


@pytest.fixture
def context(now):
    return Context(now=now, timezone="America/Los_Angeles")


def make_task(task_id="1", due=None, recurring=False, priority=Priority.NONE, **kwargs):
    due_spec = DueSpec(date=due, is_recurring=recurring) if due else None
    return Task(id=task_id, content=f"Task {task_id}", priority=priority, due=due_spec, **kwargs)


def local(now, **delta):
    """A 19-character local due string offset from now."""
    return (now + timedelta(**delta)).strftime("%Y-%m-%dT%H:%M:%S")


class TestTask:
    def test_from_api(self):
        api_data = {
            "id": "999999",
            "content": "Put out recycling",
            "description": "Blue bin",
            "priority": 3,
            "due": {
                "date": "2021-09-06T16:00:00",
                "is_recurring": True,
                "string": "every other mon at 16:00",
                "timezone": "America/Los_Angeles",
            },
            "is_completed": False,
        }
        task = Task.from_api(api_data)

        assert task.id == "999999"
        assert task.content == "Put out recycling"
        assert task.description == "Blue bin"
        assert task.priority == Priority.MEDIUM
        assert task.due == DueSpec(
            date="2021-09-06T16:00:00",
            is_recurring=True,
            timezone="America/Los_Angeles",
            string="every other mon at 16:00",
        )
        assert task.is_completed is False
        assert task.is_deleted is None

    def test_from_api_no_due_date(self):
        task = Task.from_api({"id": 5, "content": "Undated", "due": None})

        assert task.id == "5"
        assert task.due is None
        assert task.priority == Priority.NONE
        assert task.description == ""

    def test_from_api_missing_content(self):
        with pytest.raises(DecodeError, match="content"):
            Task.from_api({"id": "1"})

    def test_from_api_invalid_priority(self):
        with pytest.raises(DecodeError):
            Task.from_api({"id": "1", "content": "x", "priority": 9})

    def test_from_api_due_without_date(self):
        with pytest.raises(DecodeError):
            Task.from_api({"id": "1", "content": "x", "due": {"is_recurring": False}})

    def test_from_api_timed_due_uses_datetime(self):
        task = Task.from_api(
            {
                "id": "1",
                "content": "Standup",
                "due": {
                    "date": "2016-09-01",
                    "datetime": "2016-09-01T12:00:00.000000Z",
                    "string": "tomorrow at 12",
                    "timezone": "Europe/Moscow",
                },
            }
        )

        assert task.due.date == "2016-09-01T12:00:00Z"
        assert task.due.timezone == "Europe/Moscow"

    def test_from_api_floating_datetime(self):
        due = DueSpec.from_api({"date": "2024-01-01", "datetime": "2024-01-01T09:00:00.000000"})
        assert due.date == "2024-01-01T09:00:00"

    def test_from_api_datetime_without_fraction(self):
        due = DueSpec.from_api({"date": "2024-01-01", "datetime": "2024-01-01T17:00:00Z"})
        assert due.date == "2024-01-01T17:00:00Z"

    def test_from_api_due_as_string(self):
        with pytest.raises(DecodeError, match="Due is not an object"):
            Task.from_api({"id": "1", "content": "x", "due": "2024-01-01"})

    def test_from_api_not_an_object(self):
        with pytest.raises(DecodeError):
            Task.from_api(["id", "content"])

    def test_str_is_content(self):
        assert str(make_task("7")) == "Task 7"

    def test_tasks_are_immutable(self):
        task = make_task()
        with pytest.raises(AttributeError):
            task.content = "changed"


class TestPriority:
    def test_labels_are_reversed_ordinals(self):
        assert Priority.HIGH.label == "p1"
        assert Priority.MEDIUM.label == "p2"
        assert Priority.LOW.label == "p3"
        assert Priority.NONE.label == "p4"

    def test_from_label(self):
        assert Priority.from_label("p1") == Priority.HIGH
        assert Priority.from_label("P4") == Priority.NONE
        assert Priority.from_label("medium") == Priority.MEDIUM

    def test_from_label_unknown(self):
        with pytest.raises(ValueError):
            Priority.from_label("urgent")

    def test_priority_value_scale(self):
        assert priority_value(make_task(priority=Priority.NONE)) == 2
        assert priority_value(make_task(priority=Priority.LOW)) == 1
        assert priority_value(make_task(priority=Priority.MEDIUM)) == 3
        assert priority_value(make_task(priority=Priority.HIGH)) == 4


class TestDateValue:
    def test_no_date(self, context):
        for priority in Priority:
            assert date_value(make_task(priority=priority), context) == 80

    def test_another_day(self, context):
        assert date_value(make_task(due="2024-03-01"), context) == 50

    def test_another_day_recurring(self, context):
        assert date_value(make_task(due="2024-03-01", recurring=True), context) == 0

    def test_today(self, context):
        assert date_value(make_task(due="2024-01-01"), context) == 150

    def test_today_recurring(self, context):
        assert date_value(make_task(due="2024-01-01", recurring=True), context) == 100

    def test_overdue(self, context):
        assert date_value(make_task(due="2001-11-13"), context) == 200

    def test_overdue_recurring(self, context):
        assert date_value(make_task(due="2001-11-13", recurring=True), context) == 150

    def test_datetime_now(self, context, now):
        assert date_value(make_task(due=local(now, minutes=10)), context) == 250

    def test_datetime_now_recurring(self, context, now):
        assert date_value(make_task(due=local(now, minutes=-10), recurring=True), context) == 200

    def test_datetime_window_edges(self, context, now):
        assert date_value(make_task(due=local(now, minutes=15)), context) == 250
        assert date_value(make_task(due=local(now, minutes=-15)), context) == 250
        assert date_value(make_task(due=local(now, minutes=16)), context) == 50
        assert date_value(make_task(due=local(now, minutes=-16)), context) == 50

    def test_datetime_far_away(self, context):
        task = make_task(due="2021-02-27T19:41:56Z")
        assert date_value(task, context) == 50

    def test_datetime_far_away_recurring(self, context):
        task = make_task(due="2021-02-27T19:41:56Z", recurring=True)
        assert date_value(task, context) == 0

    def test_unparseable_is_neutral(self, context):
        assert date_value(make_task(due="2{invalid"), context) == 50

    def test_unknown_zone_is_neutral(self, context):
        task = Task(id="1", content="x", due=DueSpec(date="2024-01-01", timezone="Bad/Zone"))
        assert date_value(task, context) == 50


class TestValue:
    def test_overdue_medium(self):
        # 2020-12-20 is overdue on 2024-01-01 in Los Angeles
        context = Context(now=datetime(2024, 1, 1, 9, 0, tzinfo=LA), timezone="America/Los_Angeles")
        task = make_task(due="2020-12-20", priority=Priority.MEDIUM)

        assert is_overdue(task, context) is True
        assert date_value(task, context) == 200
        assert priority_value(task) == 3
        assert value(task, context) == 203

    def test_utc_datetime_plus_priority(self, context):
        task = make_task(due="2021-02-27T19:41:56Z", priority=Priority.HIGH)
        assert value(task, context) == 54


class TestSortByValue:
    def test_sorts_descending(self, context):
        tasks = [
            make_task("future", due="2024-03-01"),
            make_task("undated"),
            make_task("overdue", due="2023-12-01"),
            make_task("today", due="2024-01-01"),
        ]
        sorted_tasks = sort_by_value(tasks, context)
        assert [t.id for t in sorted_tasks] == ["overdue", "today", "undated", "future"]

    def test_is_stable(self, context):
        tasks = [make_task(str(i)) for i in range(5)]
        assert [t.id for t in sort_by_value(tasks, context)] == ["0", "1", "2", "3", "4"]

    def test_priority_breaks_ties(self, context):
        tasks = [
            make_task("low", priority=Priority.LOW),
            make_task("none", priority=Priority.NONE),
            make_task("high", priority=Priority.HIGH),
        ]
        assert [t.id for t in sort_by_value(tasks, context)] == ["high", "none", "low"]

    def test_keeps_unparseable_tasks(self, context):
        broken = make_task("broken", due="2{invalid")
        tasks = [broken, make_task("undated")]

        sorted_tasks = sort_by_value(tasks, context)
        assert broken in sorted_tasks
        assert [t.id for t in sorted_tasks] == ["undated", "broken"]

    def test_does_not_mutate_input(self, context):
        tasks = [make_task("a", due="2024-03-01"), make_task("b", due="2023-12-01")]
        sort_by_value(tasks, context)
        assert [t.id for t in tasks] == ["a", "b"]

    def test_empty(self, context):
        assert sort_by_value([], context) == []


class TestSortByDatetime:
    def test_untimed_first_in_input_order(self, context, now):
        tasks = [
            make_task("late", due=local(now, hours=2)),
            make_task("date", due="2024-01-01"),
            make_task("early", due=local(now, hours=-2)),
            make_task("undated"),
            make_task("broken", due="nonsense"),
        ]
        sorted_tasks = sort_by_datetime(tasks, context)
        assert [t.id for t in sorted_tasks] == ["date", "undated", "broken", "early", "late"]

    def test_compares_across_zones(self, context):
        tasks = [
            make_task("la", due="2024-01-01T09:00:00"),  # 17:00 UTC
            make_task("utc", due="2024-01-01T10:00:00Z"),
        ]
        assert [t.id for t in sort_by_datetime(tasks, context)] == ["utc", "la"]

    def test_empty(self, context):
        assert sort_by_datetime([], context) == []

    def test_datetime_of(self, context):
        assert datetime_of(make_task(due="2021-09-06T16:00:00"), context) == datetime(
            2021, 9, 6, 16, 0, tzinfo=LA
        )
        assert datetime_of(make_task(due="2024-01-01"), context) is None
        assert datetime_of(make_task(), context) is None


class TestPredicates:
    def test_has_no_date(self):
        assert has_no_date(make_task()) is True
        assert has_no_date(make_task(due="2024-01-01")) is False

    def test_is_today(self, context, now):
        assert is_today(make_task(), context) is False
        assert is_today(make_task(due="2024-01-01"), context) is True
        assert is_today(make_task(due=local(now, hours=1)), context) is True
        assert is_today(make_task(due="2021-09-06T16:00:00"), context) is False

    def test_is_overdue(self, context):
        assert is_overdue(make_task(), context) is False
        assert is_overdue(make_task(due="2024-01-01"), context) is False
        assert is_overdue(make_task(due="2023-12-31"), context) is True
        assert is_overdue(make_task(due="2023-12-31T23:00:00"), context) is True

    def test_is_recurring(self):
        assert is_recurring(make_task()) is False
        assert is_recurring(make_task(due="2024-01-01")) is False
        assert is_recurring(make_task(due="2024-01-01", recurring=True)) is True

    def test_has_time(self, context):
        assert has_time(make_task(), context) is False
        assert has_time(make_task(due="2024-01-01"), context) is False
        assert has_time(make_task(due="2021-09-06T16:00:00"), context) is True

    def test_unparseable_matches_nothing(self, context):
        task = make_task(due="2{invalid")
        assert is_today(task, context) is False
        assert is_overdue(task, context) is False
        assert has_time(task, context) is False


class TestFilters:
    @pytest.fixture
    def tasks(self, now):
        return [
            make_task("undated"),
            make_task("today", due="2024-01-01"),
            make_task("timed", due=local(now, hours=1), recurring=True),
            make_task("overdue", due="2023-12-20"),
            make_task("future", due="2024-02-01", recurring=True),
        ]

    def test_unscheduled(self, tasks, context):
        assert [t.id for t in filter_unscheduled(tasks, context)] == ["undated", "overdue"]

    def test_overdue(self, tasks, context):
        assert [t.id for t in filter_overdue(tasks, context)] == ["overdue"]

    def test_recurring(self, tasks):
        assert [t.id for t in filter_recurring(tasks)] == ["timed", "future"]

    def test_not_in_future(self, tasks, context):
        assert [t.id for t in filter_not_in_future(tasks, context)] == [
            "undated",
            "today",
            "timed",
            "overdue",
        ]

    def test_today_and_timed(self, tasks, context):
        assert [t.id for t in filter_today_and_timed(tasks, context)] == ["timed"]

    def test_empty(self, context):
        assert filter_unscheduled([], context) == []
        assert filter_overdue([], context) == []
        assert filter_recurring([]) == []
        assert filter_not_in_future([], context) == []
        assert filter_today_and_timed([], context) == []


class TestFormatTask:
    def test_with_a_date(self, context):
        task = Task(id="1", content="Get gifts for the twins", due=DueSpec(date="2021-08-13"))
        assert format_task(task, context) == "Get gifts for the twins\nDue: 2021-08-13"

    def test_with_today(self, context):
        task = Task(id="1", content="Get gifts for the twins", due=DueSpec(date="2024-01-01"))
        assert format_task(task, context) == "Get gifts for the twins\nDue: Today"

    def test_list_item_with_time_and_recurrence(self, context):
        task = Task(
            id="1",
            content="Put out recycling",
            description="Blue bin",
            due=DueSpec(date="2024-01-01T16:30:00", is_recurring=True),
        )
        assert format_task(task, context, list_item=True) == (
            "- Put out recycling\n  Blue bin\n  Due: 16:30 ↻"
        )

    def test_without_due(self, context):
        assert format_task(Task(id="1", content="Plain"), context) == "Plain"

    def test_unparseable_due_shows_error(self, context):
        task = Task(id="1", content="Broken", due=DueSpec(date="2{invalid"))
        output = format_task(task, context)
        assert output.startswith("Broken\n")
        assert "2{invalid" in output

    def test_priority_colors(self, context):
        high = format_task(Task(id="1", content="Now", priority=Priority.HIGH), context)
        assert high != "Now"
        assert click.unstyle(high) == "Now"
        assert format_task(Task(id="2", content="Whenever"), context) == "Whenever"
