from __future__ import annotations

import allure
import pytest

from task_runner.config import DisplaySettings, Settings
from task_runner.models import DependencyFailurePolicy, UnsetResultPolicy

pytestmark = [
    allure.epic("Task Graph"),
    allure.feature("Configuration"),
]


def test_from_env_defaults() -> None:
    settings = Settings.from_env()

    assert settings.execution.dependency_failure_policy == DependencyFailurePolicy.CONTINUE
    assert settings.execution.unset_result_policy == UnsetResultPolicy.SUCCEED
    assert settings.display.show_progress is True
    assert settings.display.color is None
    assert settings.display.indent_width == 3
    assert settings.log_level is None


def test_from_env_reads_overrides(monkeypatch) -> None:
    monkeypatch.setenv("TASK_RUNNER_DEPENDENCY_FAILURE_POLICY", "SHORT_CIRCUIT")
    monkeypatch.setenv("TASK_RUNNER_UNSET_RESULT_POLICY", "fail")
    monkeypatch.setenv("TASK_RUNNER_SHOW_PROGRESS", "no")
    monkeypatch.setenv("TASK_RUNNER_COLOR", "off")
    monkeypatch.setenv("TASK_RUNNER_INDENT_WIDTH", "2")
    monkeypatch.setenv("TASK_RUNNER_LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.execution.dependency_failure_policy == DependencyFailurePolicy.SHORT_CIRCUIT
    assert settings.execution.unset_result_policy == UnsetResultPolicy.FAIL
    assert settings.display.show_progress is False
    assert settings.display.color is False
    assert settings.display.indent_width == 2
    assert settings.log_level == "DEBUG"
    settings.validate()


def test_from_env_rejects_unknown_policy(monkeypatch) -> None:
    monkeypatch.setenv("TASK_RUNNER_UNSET_RESULT_POLICY", "ignore")

    with pytest.raises(ValueError, match="TASK_RUNNER_UNSET_RESULT_POLICY"):
        Settings.from_env()


def test_from_env_rejects_invalid_boolean(monkeypatch) -> None:
    monkeypatch.setenv("TASK_RUNNER_SHOW_PROGRESS", "maybe")

    with pytest.raises(ValueError, match="Invalid boolean value for TASK_RUNNER_SHOW_PROGRESS"):
        Settings.from_env()


def test_from_env_rejects_non_numeric_indent(monkeypatch) -> None:
    monkeypatch.setenv("TASK_RUNNER_INDENT_WIDTH", "wide")

    with pytest.raises(ValueError, match="Invalid integer value for TASK_RUNNER_INDENT_WIDTH"):
        Settings.from_env()


def test_validate_rejects_negative_indent() -> None:
    settings = Settings(display=DisplaySettings(indent_width=-1))

    with pytest.raises(ValueError, match="TASK_RUNNER_INDENT_WIDTH"):
        settings.validate()


def test_validate_rejects_unknown_log_level() -> None:
    with pytest.raises(ValueError, match="TASK_RUNNER_LOG_LEVEL"):
        Settings(log_level="LOUD").validate()
