"""Shared file names and defaults."""

from __future__ import annotations

STATE_DIR_NAME = ".task_tracker"
CONFIG_FILE = "config.yaml"
CONFIG_FILE_JSON = "config.json"

DEFAULT_LOG_LEVEL = "INFO"
VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
