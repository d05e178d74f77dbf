"""
jvmdeps Repository
Introductory remarks: This module is part of the jvmdeps codebase.

Unit tests for logging configuration helper.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

from jvmdeps import logging_config


@pytest.fixture(autouse=True)
def _reset_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(logging_config, "_CONFIGURED", False)


@pytest.fixture
def basic_config_calls(monkeypatch: pytest.MonkeyPatch) -> List[Dict[str, Any]]:
    calls: List[Dict[str, Any]] = []

    def fake_basic_config(**kwargs: Any) -> None:
        calls.append(kwargs)

    monkeypatch.setattr(logging_config.logging, "basicConfig", fake_basic_config)
    return calls


def test_read_level_invalid_returns_none() -> None:
    assert logging_config._read_level("not-an-int") is None


def test_map_level_thresholds() -> None:
    assert logging_config._map_level(1) == logging_config.logging.INFO
    assert logging_config._map_level(2) == logging_config.logging.DEBUG
    assert logging_config._map_level(7) == logging_config.logging.DEBUG


def test_configure_logging_silent_mode_skips_basic_config(
    basic_config_calls: List[Dict[str, Any]],
) -> None:
    logging_config.configure_logging()

    assert basic_config_calls == []


def test_configure_logging_writes_to_stderr_when_enabled(
    monkeypatch: pytest.MonkeyPatch,
    basic_config_calls: List[Dict[str, Any]],
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "1")

    logging_config.configure_logging()

    assert len(basic_config_calls) == 1
    assert basic_config_calls[0]["stream"] is sys.stderr
    assert basic_config_calls[0]["level"] == logging_config.logging.INFO


def test_configure_logging_uses_file_when_log_file_set(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    basic_config_calls: List[Dict[str, Any]],
) -> None:
    log_path = tmp_path / "nested" / "jvmdeps.log"
    monkeypatch.setenv("LOG_LEVEL", "2")
    monkeypatch.setenv("LOG_FILE", str(log_path))

    logging_config.configure_logging()

    assert basic_config_calls and basic_config_calls[0]["filename"] == log_path
    assert basic_config_calls[0]["filemode"] == "a"
    assert basic_config_calls[0]["level"] == logging_config.logging.DEBUG
    assert log_path.parent.is_dir()


def test_configure_logging_runs_once(
    monkeypatch: pytest.MonkeyPatch,
    basic_config_calls: List[Dict[str, Any]],
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "1")

    logging_config.configure_logging()
    logging_config.configure_logging()

    assert len(basic_config_calls) == 1


def test_level_override_beats_environment(
    basic_config_calls: List[Dict[str, Any]],
) -> None:
    logging_config.configure_logging(level_override=2)

    assert basic_config_calls[0]["level"] == logging_config.logging.DEBUG
