"""Load optional tracker configuration from `.task_tracker/config.yaml`."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger

from .constants import (
    CONFIG_FILE,
    CONFIG_FILE_JSON,
    DEFAULT_LOG_LEVEL,
    STATE_DIR_NAME,
    VALID_LOG_LEVELS,
)
from .io_utils import _load_data_with_error
from .task_engine.model import QuerySpec, SortDirection, SortKey, StatusFilter


def load_tracker_config(project_dir: Path) -> tuple[dict[str, Any], str | None]:
    """Load the optional tracker config file.

    Args:
        project_dir: Directory holding the `.task_tracker/` folder.

    Returns:
        A tuple of `(config, error_message)`. If no file exists, returns `({}, None)`.
        `config.yaml` wins over `config.json` when both are present.
    """
    project_dir = project_dir.resolve()
    state_dir = project_dir / STATE_DIR_NAME
    for name in (CONFIG_FILE, CONFIG_FILE_JSON):
        path = state_dir / name
        if not path.exists():
            continue
        data, err = _load_data_with_error(path, {})
        if err:
            logger.warning("Ignoring tracker config: {}", err)
            return {}, err
        return data, None
    return {}, None


def _get_nested(config: dict[str, Any], *keys: str) -> Any:
    cur: Any = config
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def get_query_config(config: dict[str, Any]) -> QuerySpec:
    """Build the default query spec from the `query` block.

    Invalid values fall back to the stock default for that field.
    """
    defaults = QuerySpec()
    raw = _get_nested(config, "query")
    if not isinstance(raw, dict):
        return defaults

    search = raw.get("search_text")
    if search is None:
        search = defaults.search_text
    elif not isinstance(search, str):
        logger.warning("query.search_text must be a string, got {!r}", search)
        search = defaults.search_text

    def _coerce(name: str, coerce: Any, default: Any) -> Any:
        value = raw.get(name)
        if value is None:
            return default
        try:
            return coerce(value)
        except ValueError as exc:
            logger.warning("Invalid query.{}: {}", name, exc)
            return default

    return QuerySpec(
        search_text=search,
        status_filter=_coerce("status_filter", StatusFilter.coerce, defaults.status_filter),
        sort_key=_coerce("sort_key", SortKey.coerce, defaults.sort_key),
        sort_direction=_coerce("sort_direction", SortDirection.coerce, defaults.sort_direction),
    )


def get_seed_samples(config: dict[str, Any]) -> bool:
    """Return whether the demo tasks should be loaded at startup."""
    return config.get("seed_samples") is True


def get_log_level(config: dict[str, Any]) -> str:
    """Extract the log level, or the default if unset or invalid."""
    raw = config.get("log_level")
    if isinstance(raw, str) and raw.upper() in VALID_LOG_LEVELS:
        return raw.upper()
    return DEFAULT_LOG_LEVEL
