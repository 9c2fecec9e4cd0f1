"""Runtime configuration for task execution and console output."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

from task_runner.models import DependencyFailurePolicy, UnsetResultPolicy

E = TypeVar("E", bound=Enum)


@dataclass(slots=True)
class ExecutionSettings:
    """Policies applied by the execution engine."""

    dependency_failure_policy: DependencyFailurePolicy = DependencyFailurePolicy.CONTINUE
    unset_result_policy: UnsetResultPolicy = UnsetResultPolicy.SUCCEED


@dataclass(slots=True)
class DisplaySettings:
    """Console output settings."""

    show_progress: bool = True
    color: bool | None = None
    indent_width: int = 3


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    execution: ExecutionSettings = field(default_factory=ExecutionSettings)
    display: DisplaySettings = field(default_factory=DisplaySettings)
    log_level: str | None = None

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from ``TASK_RUNNER_*`` environment variables."""

        return cls(
            execution=ExecutionSettings(
                dependency_failure_policy=_env_enum(
                    "TASK_RUNNER_DEPENDENCY_FAILURE_POLICY",
                    DependencyFailurePolicy,
                    DependencyFailurePolicy.CONTINUE,
                ),
                unset_result_policy=_env_enum(
                    "TASK_RUNNER_UNSET_RESULT_POLICY",
                    UnsetResultPolicy,
                    UnsetResultPolicy.SUCCEED,
                ),
            ),
            display=DisplaySettings(
                show_progress=_env_bool("TASK_RUNNER_SHOW_PROGRESS", default=True),
                color=_env_optional_bool("TASK_RUNNER_COLOR"),
                indent_width=_env_int("TASK_RUNNER_INDENT_WIDTH", default=3),
            ),
            log_level=os.getenv("TASK_RUNNER_LOG_LEVEL", "").strip().upper() or None,
        )

    def validate(self) -> None:
        """Raise configuration error if a value is out of range."""

        if self.display.indent_width < 0:
            raise ValueError("TASK_RUNNER_INDENT_WIDTH must be >= 0.")
        if self.log_level is not None and not isinstance(
            logging.getLevelName(self.log_level),
            int,
        ):
            raise ValueError(f"Invalid TASK_RUNNER_LOG_LEVEL: {self.log_level!r}")


def _env_enum(name: str, enum_type: type[E], default: E) -> E:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower().replace("_", "-")
    for member in enum_type:
        if member.value == normalized:
            return member
    allowed = ", ".join(member.value for member in enum_type)
    raise ValueError(f"Invalid value for {name}: {value!r}. Expected one of: {allowed}.")


def _env_optional_bool(name: str) -> bool | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return _env_bool(name, default=False)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
