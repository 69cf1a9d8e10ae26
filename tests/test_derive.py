"""Tests for the pure view/stats derivations (task_engine/derive.py)."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from task_tracker.task_engine import derive
from task_tracker.task_engine.model import (
    QuerySpec,
    SortDirection,
    SortKey,
    StatusFilter,
    Task,
    TaskPriority,
    TaskStatus,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _task(task_id: str, title: str, *, minutes: int = 0, **kw) -> Task:
    return Task(id=task_id, title=title, created_at=T0 + timedelta(minutes=minutes), **kw)


@pytest.fixture
def tasks() -> list[Task]:
    return [
        _task("a", "Buy milk", minutes=0, description="2% milk", priority=TaskPriority.LOW,
              status=TaskStatus.TODO, due_date=date(2026, 2, 1)),
        _task("b", "Write report", minutes=1, description="Quarterly MILK numbers",
              priority=TaskPriority.HIGH, status=TaskStatus.IN_PROGRESS),
        _task("c", "call plumber", minutes=2, priority=TaskPriority.MEDIUM,
              status=TaskStatus.COMPLETED, due_date=date(2026, 1, 15)),
        _task("d", "Book flights", minutes=3, priority=TaskPriority.HIGH, status=TaskStatus.TODO),
    ]


def _ids(view: list[Task]) -> list[str]:
    return [t.id for t in view]


class TestSearch:
    def test_empty_search_passes_all(self, tasks: list[Task]) -> None:
        spec = QuerySpec(sort_direction=SortDirection.ASC)
        assert _ids(derive.view(tasks, spec)) == ["a", "b", "c", "d"]

    def test_case_insensitive_title_or_description(self, tasks: list[Task]) -> None:
        spec = QuerySpec(search_text="MiLk", sort_direction=SortDirection.ASC)
        assert _ids(derive.view(tasks, spec)) == ["a", "b"]

    def test_search_is_trimmed(self, tasks: list[Task]) -> None:
        spec = QuerySpec(search_text="  plumber  ")
        assert _ids(derive.view(tasks, spec)) == ["c"]

    def test_whitespace_only_search_passes_all(self, tasks: list[Task]) -> None:
        assert len(derive.view(tasks, QuerySpec(search_text="   "))) == 4

    def test_substring_not_tokenized(self, tasks: list[Task]) -> None:
        assert derive.view(tasks, QuerySpec(search_text="milk report")) == []


class TestStatusFilter:
    def test_filter_single_status(self, tasks: list[Task]) -> None:
        spec = QuerySpec(status_filter=StatusFilter.TODO, sort_direction=SortDirection.ASC)
        view = derive.view(tasks, spec)
        assert _ids(view) == ["a", "d"]
        assert all(t.status == TaskStatus.TODO for t in view)

    def test_search_and_filter_combine(self, tasks: list[Task]) -> None:
        spec = QuerySpec(search_text="milk", status_filter=StatusFilter.IN_PROGRESS)
        assert _ids(derive.view(tasks, spec)) == ["b"]


class TestSort:
    def test_default_is_created_desc(self, tasks: list[Task]) -> None:
        assert _ids(derive.view(tasks, QuerySpec())) == ["d", "c", "b", "a"]

    def test_title_is_plain_lexicographic(self, tasks: list[Task]) -> None:
        spec = QuerySpec(sort_key=SortKey.TITLE, sort_direction=SortDirection.ASC)
        view = derive.view(tasks, spec)
        # upper-case letters sort before lower-case ones
        assert _ids(view) == ["d", "a", "b", "c"]
        titles = [t.title for t in view]
        assert all(titles[i] <= titles[i + 1] for i in range(len(titles) - 1))

    def test_priority_desc(self, tasks: list[Task]) -> None:
        spec = QuerySpec(sort_key=SortKey.PRIORITY, sort_direction=SortDirection.DESC)
        view = derive.view(tasks, spec)
        ranks = [t.priority.rank for t in view]
        assert all(ranks[i] >= ranks[i + 1] for i in range(len(ranks) - 1))
        # b and d tie on HIGH and keep their filtered order
        assert _ids(view) == ["b", "d", "c", "a"]

    def test_status_lexicographic(self, tasks: list[Task]) -> None:
        spec = QuerySpec(sort_key=SortKey.STATUS, sort_direction=SortDirection.ASC)
        assert _ids(derive.view(tasks, spec)) == ["c", "b", "a", "d"]

    def test_due_date_undated_first_ascending(self, tasks: list[Task]) -> None:
        spec = QuerySpec(sort_key=SortKey.DUE_DATE, sort_direction=SortDirection.ASC)
        assert _ids(derive.view(tasks, spec)) == ["b", "d", "c", "a"]

    def test_due_date_undated_last_descending(self, tasks: list[Task]) -> None:
        spec = QuerySpec(sort_key=SortKey.DUE_DATE, sort_direction=SortDirection.DESC)
        assert _ids(derive.view(tasks, spec)) == ["a", "c", "b", "d"]

    def test_pre_epoch_date_sorts_before_undated(self) -> None:
        old = _task("old", "x", due_date=date(1969, 12, 31))
        none = _task("none", "y")
        spec = QuerySpec(sort_key=SortKey.DUE_DATE, sort_direction=SortDirection.ASC)
        assert _ids(derive.view([none, old], spec)) == ["old", "none"]

    def test_stable_on_ties(self) -> None:
        same = [_task(str(i), "same", priority=TaskPriority.MEDIUM) for i in range(5)]
        for direction in SortDirection:
            spec = QuerySpec(sort_key=SortKey.PRIORITY, sort_direction=direction)
            assert _ids(derive.view(same, spec)) == ["0", "1", "2", "3", "4"]


class TestPurity:
    def test_inputs_not_mutated(self, tasks: list[Task]) -> None:
        before = list(tasks)
        derive.view(tasks, QuerySpec(sort_key=SortKey.TITLE))
        assert tasks == before

    def test_deterministic(self, tasks: list[Task]) -> None:
        spec = QuerySpec(search_text="o", sort_key=SortKey.PRIORITY)
        assert derive.view(tasks, spec) == derive.view(tasks, spec)


class TestStats:
    def test_counts(self, tasks: list[Task]) -> None:
        s = derive.stats(tasks)
        assert (s.total, s.todo, s.in_progress, s.completed) == (4, 2, 1, 1)

    def test_empty(self) -> None:
        s = derive.stats([])
        assert s.total == 0

    def test_total_is_sum(self, tasks: list[Task]) -> None:
        for n in range(len(tasks) + 1):
            s = derive.stats(tasks[:n])
            assert s.total == s.todo + s.in_progress + s.completed
