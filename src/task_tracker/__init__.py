"""Provide the public `task_tracker` package exports."""

from __future__ import annotations

from .task_engine import TaskEngine

__all__ = ["TaskEngine"]
