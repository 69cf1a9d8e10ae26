"""Reactive task query engine.

This package provides the task model, the in-memory store, the query state,
the pure view/stats derivations, and the :class:`TaskEngine` facade that ties
them together with memoization and change notifications.
"""

from .engine import TaskEngine
from .events import ChangeEvent, ChangeNotifier
from .model import (
    QuerySpec,
    SortDirection,
    SortKey,
    StatusFilter,
    Task,
    TaskPriority,
    TaskStats,
    TaskStatus,
)

__all__ = [
    "ChangeEvent",
    "ChangeNotifier",
    "QuerySpec",
    "SortDirection",
    "SortKey",
    "StatusFilter",
    "Task",
    "TaskEngine",
    "TaskPriority",
    "TaskStats",
    "TaskStatus",
]
