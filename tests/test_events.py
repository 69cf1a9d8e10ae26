"""Tests for the change notifier (task_engine/events.py)."""

from __future__ import annotations

import pytest

from task_tracker.task_engine.events import ChangeEvent, ChangeNotifier


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


class TestChangeNotifier:
    def test_publish_routes_by_channel(self, notifier: ChangeNotifier) -> None:
        views: list[ChangeEvent] = []
        stats: list[ChangeEvent] = []
        notifier.subscribe("view", views.append)
        notifier.subscribe("stats", stats.append)

        notifier.publish(ChangeEvent("view", "query.search", 1))
        assert len(views) == 1
        assert stats == []

    def test_unknown_channel_raises(self, notifier: ChangeNotifier) -> None:
        with pytest.raises(ValueError, match="Unknown channel"):
            notifier.subscribe("metrics", lambda e: None)
        with pytest.raises(ValueError, match="Unknown channel"):
            notifier.unsubscribe("metrics", lambda e: None)

    def test_failing_handler_does_not_stop_others(self, notifier: ChangeNotifier) -> None:
        received: list[str] = []

        def _boom(event: ChangeEvent) -> None:
            raise RuntimeError("handler broke")

        notifier.subscribe("tasks", _boom)
        notifier.subscribe("tasks", lambda e: received.append(e.event_type))
        notifier.publish(ChangeEvent("tasks", "task.created", 1, "task-1"))
        assert received == ["task.created"]

    def test_handler_can_unsubscribe_itself(self, notifier: ChangeNotifier) -> None:
        calls: list[int] = []

        def _once(event: ChangeEvent) -> None:
            calls.append(event.version)
            cancel()

        cancel = notifier.subscribe("view", _once)
        notifier.publish_all([ChangeEvent("view", "a", 1), ChangeEvent("view", "b", 2)])
        assert calls == [1]
        assert notifier.subscriber_count("view") == 0

    def test_subscriber_count(self, notifier: ChangeNotifier) -> None:
        notifier.subscribe("view", lambda e: None)
        notifier.subscribe("stats", lambda e: None)
        assert notifier.subscriber_count() == 2
        assert notifier.subscriber_count("tasks") == 0

    def test_event_defaults(self) -> None:
        event = ChangeEvent("view", "query.sort", 3)
        assert event.task_id is None
        assert event.payload == {}
        assert event.ts
