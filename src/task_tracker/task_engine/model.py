"""Task model for the query engine.

This module defines the task record, its enums, and the value objects that
drive the derived view (:class:`QuerySpec`) and the aggregate counts
(:class:`TaskStats`).  Tasks are frozen: an update produces a new record
that replaces the old one in the store, so a view handed out earlier never
changes under the consumer's feet.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional, Union


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TaskStatus(str, Enum):
    """Workflow status of a task."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class TaskPriority(str, Enum):
    """Priority level; HIGH is most urgent."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return {"LOW": 1, "MEDIUM": 2, "HIGH": 3}[self.value]


class StatusFilter(str, Enum):
    """Status filter for the view: ``ALL`` or exactly one status."""

    ALL = "ALL"
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @classmethod
    def coerce(cls, raw: Union["StatusFilter", TaskStatus, str]) -> "StatusFilter":
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, TaskStatus):
            return cls(raw.value)
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            raise ValueError(
                f"Unknown status filter {raw!r}; expected one of {[e.value for e in cls]}"
            ) from None

    def matches(self, task: "Task") -> bool:
        return self is StatusFilter.ALL or task.status.value == self.value


class SortKey(str, Enum):
    """Field the view is ordered by."""

    TITLE = "title"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    STATUS = "status"
    CREATED_AT = "createdAt"

    @classmethod
    def coerce(cls, raw: Union["SortKey", str]) -> "SortKey":
        if isinstance(raw, cls):
            return raw
        value = str(raw).strip()
        value = _SORT_KEY_ALIASES.get(value, value)
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Unknown sort key {raw!r}; expected one of {[e.value for e in cls]}"
            ) from None


_SORT_KEY_ALIASES = {
    "due_date": "dueDate",
    "created_at": "createdAt",
}


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def coerce(cls, raw: Union["SortDirection", str]) -> "SortDirection":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown sort direction {raw!r}; expected 'asc' or 'desc'") from None

    def flipped(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


# Consumer-facing labels, in display order.
FILTER_LABELS: dict[StatusFilter, str] = {
    StatusFilter.ALL: "All Tasks",
    StatusFilter.TODO: "To Do",
    StatusFilter.IN_PROGRESS: "In Progress",
    StatusFilter.COMPLETED: "Completed",
}

SORT_LABELS: dict[SortKey, str] = {
    SortKey.CREATED_AT: "Created Date",
    SortKey.TITLE: "Title",
    SortKey.DUE_DATE: "Due Date",
    SortKey.PRIORITY: "Priority",
    SortKey.STATUS: "Status",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(timezone.utc)


def _generate_id() -> str:
    """Opaque task ID: ``task-<12hex>``."""
    return f"task-{uuid.uuid4().hex[:12]}"


def _parse_datetime(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        value = str(raw)
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        dt = datetime.fromisoformat(value)
    # Naive timestamps are taken as UTC.
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _parse_date(raw: Any) -> Optional[date]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    return date.fromisoformat(str(raw)[:10])


# ---------------------------------------------------------------------------
# Task dataclass
# ---------------------------------------------------------------------------

# Fields a partial update may never touch.
PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class Task:
    """A single tracked task.

    ``created_at`` is fixed at construction; ``updated_at`` starts equal to it
    and only moves forward through :meth:`with_changes`.
    """

    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None
    id: str = field(default_factory=_generate_id)
    created_at: datetime = field(default_factory=_now)
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        created = _parse_datetime(self.created_at) or _now()
        object.__setattr__(self, "created_at", created)
        object.__setattr__(self, "updated_at", _parse_datetime(self.updated_at) or created)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def with_changes(self, changes: dict[str, Any], *, now: Optional[datetime] = None) -> "Task":
        """Return a copy with *changes* merged in and ``updated_at`` refreshed.

        ``id``, ``created_at`` and ``updated_at`` in *changes* are ignored.
        Unknown keys raise :class:`ValueError`.
        """
        allowed = {f.name for f in fields(self)} - PROTECTED_FIELDS
        merged: dict[str, Any] = {}
        for key, value in changes.items():
            if key in PROTECTED_FIELDS:
                continue
            if key not in allowed:
                raise ValueError(f"Unknown task field {key!r}")
            merged[key] = value
        merged = _coerce_fields(merged)
        stamp = _parse_datetime(now) or _now()
        # Never let updated_at go backwards if the wall clock steps back.
        floor = self.updated_at or self.created_at
        if stamp < floor:
            stamp = floor
        return replace(self, updated_at=stamp, **merged)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @classmethod
    def validate_dict(cls, data: dict[str, Any]) -> list[str]:
        """Lightweight validation of a task dict.

        Returns a list of error strings (empty = valid).
        """
        errors: list[str] = []
        if not isinstance(data, dict):
            return ["Expected a dict"]
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            errors.append("'title' is required and must be non-empty")
        description = data.get("description")
        if description is not None and not isinstance(description, str):
            errors.append("'description' must be a string")
        status = data.get("status")
        if status is not None:
            valid_statuses = {e.value for e in TaskStatus}
            if str(getattr(status, "value", status)) not in valid_statuses:
                errors.append(f"'status' must be one of {sorted(valid_statuses)}, got '{status}'")
        priority = data.get("priority")
        if priority is not None:
            valid_prios = {e.value for e in TaskPriority}
            if str(getattr(priority, "value", priority)) not in valid_prios:
                errors.append(f"'priority' must be one of {sorted(valid_prios)}, got '{priority}'")
        due = data.get("due_date")
        if due is not None:
            try:
                _parse_date(due)
            except (TypeError, ValueError):
                errors.append(f"'due_date' must be an ISO date, got '{due}'")
        return errors

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain, JSON-friendly dict."""
        updated_at = self.updated_at or self.created_at
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Deserialize from a plain dict, coercing enums gracefully."""
        d = dict(data)  # shallow copy

        def _enum(enum_cls: type[Enum], key: str, default: Enum) -> Any:
            raw = d.pop(key, None)
            if raw is None:
                return default
            if isinstance(raw, enum_cls):
                return raw
            try:
                return enum_cls(str(raw))
            except (ValueError, KeyError):
                return default

        status = _enum(TaskStatus, "status", TaskStatus.TODO)
        priority = _enum(TaskPriority, "priority", TaskPriority.MEDIUM)
        created_at = _parse_datetime(d.pop("created_at", None)) or _now()
        updated_at = _parse_datetime(d.pop("updated_at", None)) or created_at
        due_raw = d.pop("due_date", d.pop("dueDate", None))
        try:
            due_date = _parse_date(due_raw)
        except (TypeError, ValueError):
            due_date = None

        return cls(
            id=str(d.pop("id", None) or _generate_id()),
            title=str(d.pop("title", "")),
            description=str(d.pop("description", "") or ""),
            status=status,
            priority=priority,
            due_date=due_date,
            created_at=created_at,
            updated_at=max(updated_at, created_at),
        )


def _coerce_fields(values: dict[str, Any]) -> dict[str, Any]:
    """Coerce enum and date fields given as strings.

    Enum strings are matched case-insensitively, like :meth:`StatusFilter.coerce`.
    """
    out = dict(values)
    if isinstance(out.get("status"), str) and not isinstance(out["status"], TaskStatus):
        out["status"] = TaskStatus(out["status"].strip().upper())
    if isinstance(out.get("priority"), str) and not isinstance(out["priority"], TaskPriority):
        out["priority"] = TaskPriority(out["priority"].strip().upper())
    if "due_date" in out:
        out["due_date"] = _parse_date(out["due_date"])
    return out


def new_task(fields_: dict[str, Any], *, now: Optional[datetime] = None) -> Task:
    """Build a fresh task from caller-supplied fields.

    A new id is always generated and both timestamps are set to *now*;
    identity/timestamp keys in *fields_* are ignored.
    """
    values = {k: v for k, v in fields_.items() if k not in PROTECTED_FIELDS}
    values = _coerce_fields(values)
    stamp = _parse_datetime(now) or _now()
    return Task(**values, created_at=stamp, updated_at=stamp)


# ---------------------------------------------------------------------------
# Query value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QuerySpec:
    """The (search, filter, sort) tuple that drives the derived view."""

    search_text: str = ""
    status_filter: StatusFilter = StatusFilter.ALL
    sort_key: SortKey = SortKey.CREATED_AT
    sort_direction: SortDirection = SortDirection.DESC

    def to_dict(self) -> dict[str, Any]:
        return {
            "search_text": self.search_text,
            "status_filter": self.status_filter.value,
            "sort_key": self.sort_key.value,
            "sort_direction": self.sort_direction.value,
        }


@dataclass(frozen=True)
class TaskStats:
    total: int = 0
    todo: int = 0
    in_progress: int = 0
    completed: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "todo": self.todo,
            "inProgress": self.in_progress,
            "completed": self.completed,
        }
