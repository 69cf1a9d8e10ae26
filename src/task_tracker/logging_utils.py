"""Configure loguru and format engine state for log lines."""

from __future__ import annotations

import json
import sys
from typing import Any, Iterable

from loguru import logger

from .constants import DEFAULT_LOG_LEVEL
from .task_engine.model import QuerySpec, Task, TaskStats


def configure_logging(level: str = DEFAULT_LOG_LEVEL, sink: Any = None) -> int:
    """Replace loguru's default sink with one at *level*.

    Args:
        level: Minimum level name (e.g. ``"DEBUG"``).
        sink: Where to write; ``sys.stderr`` by default.

    Returns:
        The loguru handler id, so callers can remove it later.
    """
    logger.remove()
    return logger.add(
        sink if sink is not None else sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan>\n"
            "{message}"
        ),
    )


def summarize_view(view: Iterable[Task], spec: QuerySpec, max_ids: int = 5) -> dict[str, Any]:
    """Render a compact, JSON-friendly summary of a derived view.

    Args:
        view: The ordered tasks returned by the engine.
        spec: The query spec the view was derived with.
        max_ids: How many leading task ids to include.

    Returns:
        A dictionary suitable for logging or serialization.
    """
    tasks = list(view)
    d: dict[str, Any] = {"size": len(tasks), "query": spec.to_dict()}
    d["head"] = [t.id for t in tasks[:max_ids]]
    if len(tasks) > max_ids:
        d["truncated"] = len(tasks) - max_ids
    return d


def summarize_stats(stats: TaskStats) -> str:
    """One-line stats string, e.g. ``7 tasks (todo=4 in_progress=2 completed=1)``."""
    return (
        f"{stats.total} tasks (todo={stats.todo} "
        f"in_progress={stats.in_progress} completed={stats.completed})"
    )


def pretty(obj: Any, *, indent: int = 2) -> str:
    """Serialize an object as JSON for readable logs.

    Args:
        obj: Object to serialize.
        indent: Indentation level for JSON output.

    Returns:
        A JSON string when possible; otherwise `str(obj)`.
    """
    try:
        return json.dumps(obj, indent=indent, default=str)
    except (TypeError, ValueError):
        return str(obj)
