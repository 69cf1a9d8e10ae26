"""In-memory task store with a version counter.

The store owns the authoritative, insertion-ordered collection of tasks.
All writes go through :meth:`TaskStore.transaction`, which holds the store
lock for the whole batch and bumps :attr:`TaskStore.version` once on exit if
anything changed.  Readers compare versions to know whether a derived value
is stale.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

from loguru import logger

from .model import Task, new_task


# ---------------------------------------------------------------------------
# TaskStore
# ---------------------------------------------------------------------------

class TaskStore:
    """Ordered, in-memory store for :class:`Task` records.

    Parameters
    ----------
    lock:
        Optional re-entrant lock shared with the owner, so a store mutation and
        a derivation read can sit behind a single mutual-exclusion boundary.
    """

    def __init__(self, lock: Optional[Any] = None) -> None:
        self._lock = lock if lock is not None else threading.RLock()
        self._tasks: list[Task] = []
        self._index: dict[str, int] = {}
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._index

    # -- public API ---------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[_TaskTx]:
        """Acquire the lock, yield a transaction, and publish on exit.

        Usage::

            with store.transaction() as tx:
                tx.update("task-abc123", {"status": TaskStatus.IN_PROGRESS})
                # version bumped on exit if anything changed
        """
        with self._lock:
            tx = _TaskTx(self._tasks, self._index)
            yield tx
            if tx.dirty:
                self._tasks = tx.tasks
                self._index = tx.index
                self._version += 1

    def create(self, fields: dict[str, Any], *, now: Optional[datetime] = None) -> Task:
        """Build a task from *fields*, append it, and return it."""
        with self.transaction() as tx:
            task = tx.add(new_task(fields, now=now))
        logger.debug("Store created {} (version={})", task.id, self._version)
        return task

    def update(self, task_id: str, changes: dict[str, Any], *, now: Optional[datetime] = None) -> bool:
        with self.transaction() as tx:
            return tx.update(task_id, changes, now=now) is not None

    def delete(self, task_id: str) -> bool:
        with self.transaction() as tx:
            return tx.remove(task_id)

    def add_many(self, tasks: list[Task]) -> list[Task]:
        """Bulk-load pre-built tasks, keeping their ids and timestamps."""
        with self.transaction() as tx:
            return tx.add_many(tasks)

    def get(self, task_id: str) -> Optional[Task]:
        with self._lock:
            idx = self._index.get(task_id)
            return self._tasks[idx] if idx is not None else None

    def all(self) -> list[Task]:
        """Return the live collection in insertion order (a fresh list)."""
        with self._lock:
            return list(self._tasks)


class _TaskTx:
    """Copy-on-write transaction over the task list.

    Mutations work on private copies of the list and index; the store swaps
    them in only when the ``transaction`` context-manager exits normally, so
    a failure half-way through leaves the store untouched.
    """

    def __init__(self, tasks: list[Task], index: dict[str, int]) -> None:
        self.tasks = list(tasks)
        self.index = dict(index)
        self.dirty = False

    # -- lookups ------------------------------------------------------------

    def get(self, task_id: str) -> Optional[Task]:
        idx = self.index.get(task_id)
        return self.tasks[idx] if idx is not None else None

    def list_all(self) -> list[Task]:
        return list(self.tasks)

    # -- mutations ----------------------------------------------------------

    def add(self, task: Task) -> Task:
        if task.id in self.index:
            raise ValueError(f"Task {task.id} already exists")
        self.index[task.id] = len(self.tasks)
        self.tasks.append(task)
        self.dirty = True
        return task

    def add_many(self, tasks: list[Task]) -> list[Task]:
        for t in tasks:
            self.add(t)
        return tasks

    def update(self, task_id: str, changes: dict[str, Any], *, now: Optional[datetime] = None) -> Optional[Task]:
        idx = self.index.get(task_id)
        if idx is None:
            return None
        updated = self.tasks[idx].with_changes(changes, now=now)
        self.tasks[idx] = updated
        self.dirty = True
        return updated

    def remove(self, task_id: str) -> bool:
        """Physically remove a task; ``False`` if it is not present."""
        idx = self.index.pop(task_id, None)
        if idx is None:
            return False
        self.tasks.pop(idx)
        # rebuild index
        self.index = {t.id: i for i, t in enumerate(self.tasks)}
        self.dirty = True
        return True
