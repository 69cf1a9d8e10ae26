"""Pure derivations over a task collection: the filtered/sorted view and stats.

Neither function mutates its inputs, and both return equal results for
equal inputs.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Iterable

from .model import QuerySpec, SortDirection, SortKey, StatusFilter, Task, TaskStats, TaskStatus

_EPOCH = date(1970, 1, 1)


def _due_date_key(task: Task) -> int:
    # Undated tasks sort as the epoch.
    if task.due_date is None:
        return 0
    return (task.due_date - _EPOCH).days


_SORT_KEYS: dict[SortKey, Callable[[Task], Any]] = {
    SortKey.TITLE: lambda t: t.title,
    SortKey.DUE_DATE: _due_date_key,
    SortKey.PRIORITY: lambda t: t.priority.rank,
    SortKey.STATUS: lambda t: t.status.value,
    SortKey.CREATED_AT: lambda t: t.created_at,
}


def sort_key_for(key: SortKey) -> Callable[[Task], Any]:
    """Return the key function used to order tasks by *key*."""
    return _SORT_KEYS[key]


def matches_search(task: Task, needle: str) -> bool:
    """True if *needle* (already trimmed and lower-cased) occurs in title or description."""
    if not needle:
        return True
    return needle in task.title.lower() or needle in task.description.lower()


def view(tasks: Iterable[Task], spec: QuerySpec) -> list[Task]:
    """Filter by search text, then by status, then stable-sort.

    ``desc`` reverses the ordering but keeps tasks that compare equal in
    their filtered order, the same as negating the comparator.
    """
    needle = spec.search_text.strip().lower()
    result = [t for t in tasks if matches_search(t, needle)]

    if spec.status_filter is not StatusFilter.ALL:
        result = [t for t in result if spec.status_filter.matches(t)]

    return sorted(
        result,
        key=sort_key_for(spec.sort_key),
        reverse=spec.sort_direction is SortDirection.DESC,
    )


def stats(tasks: Iterable[Task]) -> TaskStats:
    """Count tasks by status in a single pass."""
    counts = {status: 0 for status in TaskStatus}
    for t in tasks:
        counts[t.status] += 1
    return TaskStats(
        total=sum(counts.values()),
        todo=counts[TaskStatus.TODO],
        in_progress=counts[TaskStatus.IN_PROGRESS],
        completed=counts[TaskStatus.COMPLETED],
    )
