"""Demo task set used to populate an empty board."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from .model import Task, TaskPriority, TaskStatus


def _utc(day: str) -> datetime:
    return datetime.fromisoformat(day).replace(tzinfo=timezone.utc)


def sample_tasks(now: Optional[datetime] = None) -> list[Task]:
    """Return seven demo tasks with fixed ids and due dates relative to *now*."""
    now = now or datetime.now(timezone.utc)
    today = now.date()
    yesterday = today - timedelta(days=1)
    tomorrow = today + timedelta(days=1)
    next_week = today + timedelta(days=7)

    return [
        Task(
            id="1",
            title="Complete project setup",
            description="Set up the initial project structure with all necessary dependencies",
            status=TaskStatus.COMPLETED,
            priority=TaskPriority.HIGH,
            due_date=yesterday,
            created_at=_utc("2026-01-01"),
            updated_at=_utc("2026-01-05"),
        ),
        Task(
            id="2",
            title="Implement task engine with change tracking",
            description="Create a task engine that recomputes the view whenever its inputs change",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.HIGH,
            due_date=tomorrow,
            created_at=_utc("2026-01-05"),
            updated_at=_utc("2026-01-10"),
        ),
        Task(
            id="3",
            title="Design task list UI",
            description="Create mockups and design the user interface for the task list page",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.MEDIUM,
            due_date=tomorrow,
            created_at=_utc("2026-01-06"),
            updated_at=_utc("2026-01-09"),
        ),
        Task(
            id="4",
            title="Write unit tests",
            description="Implement comprehensive unit tests for all components and services",
            status=TaskStatus.TODO,
            priority=TaskPriority.HIGH,
            due_date=next_week,
            created_at=_utc("2026-01-07"),
        ),
        Task(
            id="5",
            title="Add form validation",
            description="Implement proper form validation for the task edit dialog",
            status=TaskStatus.TODO,
            priority=TaskPriority.MEDIUM,
            due_date=next_week,
            created_at=_utc("2026-01-08"),
        ),
        Task(
            id="6",
            title="Implement search functionality",
            description="Add search capability to filter tasks by title and description",
            status=TaskStatus.TODO,
            priority=TaskPriority.LOW,
            due_date=None,
            created_at=_utc("2026-01-09"),
        ),
        Task(
            id="7",
            title="Add accessibility features",
            description="Ensure all components are accessible with proper labels and keyboard navigation",
            status=TaskStatus.TODO,
            priority=TaskPriority.MEDIUM,
            due_date=next_week,
            created_at=_utc("2026-01-10"),
        ),
    ]
