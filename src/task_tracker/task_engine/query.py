"""Current query parameters for the derived view."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Union

from loguru import logger

from .model import QuerySpec, SortDirection, SortKey, StatusFilter, TaskStatus


class QueryState:
    """Holds the current :class:`QuerySpec`.

    Each setter replaces its own field(s) and returns ``True`` only when the
    spec actually changed; ``version`` is bumped on those changes alone.
    """

    def __init__(self, defaults: Optional[QuerySpec] = None) -> None:
        self._defaults = defaults or QuerySpec()
        self._spec = self._defaults
        self._version = 0

    @property
    def spec(self) -> QuerySpec:
        return self._spec

    @property
    def version(self) -> int:
        return self._version

    def _apply(self, new_spec: QuerySpec) -> bool:
        if new_spec == self._spec:
            return False
        self._spec = new_spec
        self._version += 1
        logger.debug("Query changed to {} (version={})", new_spec.to_dict(), self._version)
        return True

    def set_search(self, text: str) -> bool:
        return self._apply(replace(self._spec, search_text=str(text or "")))

    def set_filter(self, status_filter: Union[StatusFilter, TaskStatus, str]) -> bool:
        return self._apply(replace(self._spec, status_filter=StatusFilter.coerce(status_filter)))

    def set_sort(
        self,
        key: Union[SortKey, str],
        direction: Union[SortDirection, str],
    ) -> bool:
        """Set key and direction together."""
        return self._apply(
            replace(
                self._spec,
                sort_key=SortKey.coerce(key),
                sort_direction=SortDirection.coerce(direction),
            )
        )

    def reset(self) -> bool:
        return self._apply(self._defaults)
