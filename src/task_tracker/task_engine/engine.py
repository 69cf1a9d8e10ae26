"""Task engine — the programmatic surface consumed by the UI layer.

This is the primary entry-point for task manipulation and querying.  It
wraps :class:`TaskStore` and :class:`QueryState`, memoizes the derived view
and stats per (store version, query spec), and tells observers when an
output may have changed.

Every store mutation, query change and derivation read runs under one
re-entrant lock; observers are notified after the lock is released.
"""

from __future__ import annotations

import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Optional, Union

from loguru import logger

from ..logging_utils import configure_logging, summarize_stats, summarize_view
from . import derive
from .events import ChangeEvent, ChangeNotifier, Handler
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
from .query import QueryState
from .samples import sample_tasks
from .store import TaskStore


class TaskEngine:
    """Own one task collection and its query state.

    Parameters
    ----------
    defaults:
        Initial (and reset) query spec; the stock defaults when omitted.
    clock:
        Optional callable returning the current UTC ``datetime``; used for
        created/updated timestamps.  Naive values are taken as UTC.
    """

    def __init__(
        self,
        defaults: Optional[QuerySpec] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._lock = threading.RLock()
        self.store = TaskStore(lock=self._lock)
        self.query_state = QueryState(defaults)
        self.notifier = ChangeNotifier()
        self._clock = clock

        self._view_key: Optional[tuple[int, QuerySpec]] = None
        self._view_cache: tuple[Task, ...] = ()
        self._stats_key: Optional[int] = None
        self._stats_cache = TaskStats()

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "TaskEngine":
        """Build an engine from a loaded tracker config mapping."""
        from ..config import get_query_config, get_seed_samples

        engine = cls(defaults=get_query_config(config))
        if get_seed_samples(config):
            engine.seed_samples()
        return engine

    @classmethod
    def from_project(cls, project_dir: Path) -> "TaskEngine":
        """Load ``.task_tracker/config.yaml`` under *project_dir*, set up logging, and build an engine.

        A missing or unreadable config file yields the stock defaults.
        """
        from ..config import get_log_level, load_tracker_config

        config, _err = load_tracker_config(Path(project_dir))
        configure_logging(get_log_level(config))
        engine = cls.from_config(config)
        logger.info("Task engine ready for {} (query={})", project_dir, engine.query.to_dict())
        return engine

    def _now(self) -> Optional[datetime]:
        return self._clock() if self._clock else None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, channel: str, handler: Handler) -> Callable[[], None]:
        return self.notifier.subscribe(channel, handler)

    def unsubscribe(self, channel: str, handler: Handler) -> bool:
        return self.notifier.unsubscribe(channel, handler)

    def _store_events(self, event_type: str, task: Optional[Task] = None, **details: Any) -> list[ChangeEvent]:
        version = self.store.version
        task_id = task.id if task else None
        payload: dict[str, Any] = dict(details)
        if task is not None:
            payload.setdefault("task", task.to_dict())
        return [
            ChangeEvent("tasks", event_type, version, task_id, payload),
            ChangeEvent("view", event_type, version, task_id),
            ChangeEvent("stats", event_type, version, task_id),
        ]

    def _query_events(self, event_type: str, spec: QuerySpec) -> list[ChangeEvent]:
        return [ChangeEvent("view", event_type, self.query_state.version, None, spec.to_dict())]

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_task(
        self,
        title: str,
        description: str = "",
        status: Union[TaskStatus, str] = TaskStatus.TODO,
        priority: Union[TaskPriority, str] = TaskPriority.MEDIUM,
        due_date: Optional[date] = None,
    ) -> Task:
        """Create a new task, returning it."""
        return self.create_task_from(
            {
                "title": title,
                "description": description,
                "status": status,
                "priority": priority,
                "due_date": due_date,
            }
        )

    def create_task_from(self, fields: dict[str, Any]) -> Task:
        """Create a task from a pre-validated field mapping."""
        with self._lock:
            task = self.store.create(fields, now=self._now())
            events = self._store_events("task.created", task)
        logger.info("Created task {}: {}", task.id, task.title)
        self.notifier.publish_all(events)
        return task

    def update_task(self, task_id: str, changes: dict[str, Any]) -> bool:
        """Merge *changes* into a task.  ``False`` if the id is unknown."""
        with self._lock:
            with self.store.transaction() as tx:
                task = tx.update(task_id, changes, now=self._now())
            if task is None:
                logger.debug("Update skipped, task {} not found", task_id)
                return False
            events = self._store_events("task.updated", task, fields=sorted(changes.keys()))
        logger.info("Updated task {} fields={}", task_id, sorted(changes.keys()))
        self.notifier.publish_all(events)
        return True

    def delete_task(self, task_id: str) -> bool:
        """Remove a task.  ``False`` (and no change) if the id is unknown."""
        with self._lock:
            task = self.store.get(task_id)
            if task is None or not self.store.delete(task_id):
                logger.debug("Delete skipped, task {} not found", task_id)
                return False
            events = self._store_events("task.deleted", task)
        logger.info("Deleted task {}", task_id)
        self.notifier.publish_all(events)
        return True

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.store.get(task_id)

    def all_tasks(self) -> list[Task]:
        return self.store.all()

    def seed_samples(self, now: Optional[datetime] = None) -> list[Task]:
        """Load the demo task set (ids ``1``..``7``) into the store."""
        with self._lock:
            tasks = self.store.add_many(sample_tasks(now or self._now()))
            events = self._store_events("task.seeded", None, count=len(tasks))
        logger.info("Seeded {} sample tasks", len(tasks))
        self.notifier.publish_all(events)
        return tasks

    # ------------------------------------------------------------------
    # Query state
    # ------------------------------------------------------------------

    @property
    def query(self) -> QuerySpec:
        return self.query_state.spec

    def _change_query(self, event_type: str, apply: Callable[[], bool]) -> bool:
        with self._lock:
            changed = apply()
            events = self._query_events(event_type, self.query_state.spec) if changed else []
        self.notifier.publish_all(events)
        return changed

    def set_search_query(self, text: str) -> bool:
        return self._change_query("query.search", lambda: self.query_state.set_search(text))

    def set_filter(self, status_filter: Union[StatusFilter, TaskStatus, str]) -> bool:
        return self._change_query("query.filter", lambda: self.query_state.set_filter(status_filter))

    def set_sort(self, key: Union[SortKey, str], direction: Union[SortDirection, str]) -> bool:
        return self._change_query("query.sort", lambda: self.query_state.set_sort(key, direction))

    def toggle_sort_direction(self) -> SortDirection:
        """Flip asc/desc, keeping the current sort key."""
        def _flip() -> bool:
            spec = self.query_state.spec
            return self.query_state.set_sort(spec.sort_key, spec.sort_direction.flipped())

        self._change_query("query.sort", _flip)
        return self.query_state.spec.sort_direction

    def reset_query(self) -> bool:
        return self._change_query("query.reset", self.query_state.reset)

    # ------------------------------------------------------------------
    # Derived outputs
    # ------------------------------------------------------------------

    def get_view(self) -> list[Task]:
        """Return the filtered, sorted view for the current store and query."""
        with self._lock:
            key = (self.store.version, self.query_state.spec)
            if key != self._view_key:
                self._view_cache = tuple(derive.view(self.store.all(), key[1]))
                self._view_key = key
                logger.debug(
                    "Recomputed view store_version={}: {}",
                    key[0],
                    summarize_view(self._view_cache, key[1]),
                )
            return list(self._view_cache)

    def get_stats(self) -> TaskStats:
        with self._lock:
            version = self.store.version
            if version != self._stats_key:
                self._stats_cache = derive.stats(self.store.all())
                self._stats_key = version
                logger.debug(
                    "Recomputed stats store_version={}: {}", version, summarize_stats(self._stats_cache)
                )
            return self._stats_cache
