"""Change notifications for engine observers.

Observers subscribe to a channel and receive a :class:`ChangeEvent` each
time an output on that channel could have changed:

    tasks   — a store mutation (created, updated, deleted, seeded)
    view    — the store or the query changed
    stats   — the store changed

No event is published for a no-op (unknown id, unchanged query value).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from loguru import logger

VALID_CHANNELS = ("tasks", "view", "stats")


@dataclass(frozen=True)
class ChangeEvent:
    channel: str
    event_type: str
    version: int
    task_id: Optional[str] = None
    payload: dict[str, Any] = field(default_factory=dict)
    ts: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


Handler = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """Channel-based observer registry.

    Handlers run in subscription order.  A failing handler is logged and does
    not stop the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    @staticmethod
    def _check_channel(channel: str) -> None:
        if channel not in VALID_CHANNELS:
            raise ValueError(f"Unknown channel {channel!r}; expected one of {list(VALID_CHANNELS)}")

    def subscribe(self, channel: str, handler: Handler) -> Callable[[], None]:
        """Register *handler* on *channel*; returns a callable that unsubscribes it."""
        self._check_channel(channel)
        self._handlers[channel].append(handler)

        def _unsubscribe() -> None:
            self.unsubscribe(channel, handler)

        return _unsubscribe

    def unsubscribe(self, channel: str, handler: Handler) -> bool:
        self._check_channel(channel)
        handlers = self._handlers.get(channel, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def subscriber_count(self, channel: Optional[str] = None) -> int:
        if channel is not None:
            return len(self._handlers.get(channel, []))
        return sum(len(h) for h in self._handlers.values())

    def publish(self, event: ChangeEvent) -> None:
        # Snapshot so a handler may unsubscribe itself mid-dispatch.
        for handler in list(self._handlers.get(event.channel, [])):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Change handler failed channel={} event={}", event.channel, event.event_type
                )

    def publish_all(self, events: list[ChangeEvent]) -> None:
        for event in events:
            self.publish(event)
