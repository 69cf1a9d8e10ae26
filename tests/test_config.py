"""Tests for tracker config loading (config.py)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from loguru import logger

from task_tracker.config import (
    get_log_level,
    get_query_config,
    get_seed_samples,
    load_tracker_config,
)
from task_tracker.task_engine.model import QuerySpec, SortDirection, SortKey, StatusFilter


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    d = tmp_path / ".task_tracker"
    d.mkdir()
    return d


class TestLoadTrackerConfig:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_tracker_config(tmp_path) == ({}, None)

    def test_yaml(self, tmp_path: Path, state_dir: Path) -> None:
        (state_dir / "config.yaml").write_text(
            "query:\n  sort_key: title\n  sort_direction: asc\nseed_samples: true\n",
            encoding="utf-8",
        )
        config, err = load_tracker_config(tmp_path)
        assert err is None
        assert config["query"]["sort_key"] == "title"
        assert get_seed_samples(config) is True

    def test_json_fallback(self, tmp_path: Path, state_dir: Path) -> None:
        (state_dir / "config.json").write_text(json.dumps({"log_level": "debug"}), encoding="utf-8")
        config, err = load_tracker_config(tmp_path)
        assert err is None
        assert get_log_level(config) == "DEBUG"

    def test_empty_yaml(self, tmp_path: Path, state_dir: Path) -> None:
        (state_dir / "config.yaml").write_text("", encoding="utf-8")
        assert load_tracker_config(tmp_path) == ({}, None)

    def test_invalid_yaml_reports_error(self, tmp_path: Path, state_dir: Path) -> None:
        (state_dir / "config.yaml").write_text("query: [unclosed\n", encoding="utf-8")
        config, err = load_tracker_config(tmp_path)
        assert config == {}
        assert err is not None
        assert "YAMLError" in err

    def test_non_mapping_reports_error(self, tmp_path: Path, state_dir: Path) -> None:
        (state_dir / "config.yaml").write_text("- a\n- b\n", encoding="utf-8")
        config, err = load_tracker_config(tmp_path)
        assert config == {}
        assert err is not None
        assert "expected object" in err


class TestConfigAccessors:
    def test_query_defaults_when_absent(self) -> None:
        assert get_query_config({}) == QuerySpec()
        assert get_query_config({"query": "nonsense"}) == QuerySpec()

    def test_query_values(self) -> None:
        spec = get_query_config(
            {
                "query": {
                    "search_text": "milk",
                    "status_filter": "in_progress",
                    "sort_key": "due_date",
                    "sort_direction": "ASC",
                }
            }
        )
        assert spec == QuerySpec(
            search_text="milk",
            status_filter=StatusFilter.IN_PROGRESS,
            sort_key=SortKey.DUE_DATE,
            sort_direction=SortDirection.ASC,
        )

    def test_invalid_query_values_fall_back(self) -> None:
        spec = get_query_config({"query": {"search_text": 5, "status_filter": "DONE", "sort_key": "owner"}})
        assert spec == QuerySpec()

    def test_null_search_text_is_default_without_warning(self) -> None:
        messages: list[str] = []
        handler_id = logger.add(messages.append, level="WARNING", format="{message}")
        try:
            spec = get_query_config({"query": {"search_text": None, "sort_direction": "asc"}})
        finally:
            logger.remove(handler_id)
        assert spec == QuerySpec(sort_direction=SortDirection.ASC)
        assert messages == []

    def test_seed_samples_requires_true(self) -> None:
        assert get_seed_samples({}) is False
        assert get_seed_samples({"seed_samples": "yes"}) is False

    def test_log_level(self) -> None:
        assert get_log_level({}) == "INFO"
        assert get_log_level({"log_level": "verbose"}) == "INFO"
        assert get_log_level({"log_level": "warning"}) == "WARNING"
