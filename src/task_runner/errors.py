"""Errors reported to the user before or during a run.

Every error carries a short ``title`` and an explanatory ``message``; the
runner prints both and exits with status 1.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TaskRunnerError(Exception):
    """Base error for invocation and configuration failures."""

    title: str
    message: str

    def __str__(self) -> str:
        return f"{self.title}: {self.message}"


@dataclass(slots=True)
class TaskDefinitionError(TaskRunnerError):
    """A task class declares an invalid schema."""


@dataclass(slots=True)
class NoCommandError(TaskRunnerError):
    """The invocation named no command."""


@dataclass(slots=True)
class UnknownCommandError(TaskRunnerError):
    """The root command is not registered or is internal."""

    command: str = ""


@dataclass(slots=True)
class InvalidDependencyError(TaskRunnerError):
    """A task depends on a command that is not registered."""

    task_label: str = ""
    command: str = ""


@dataclass(slots=True)
class DependencyCycleError(TaskRunnerError):
    """Dependency resolution reached a command already on its own path."""

    cycle: tuple[str, ...] = ()


@dataclass(slots=True)
class MissingParamsError(TaskRunnerError):
    """Fewer positional values were supplied than a task requires."""

    task_label: str = ""
    missing: tuple[str, ...] = ()


@dataclass(slots=True)
class InvalidParamError(TaskRunnerError):
    """A task asked for a param it does not declare."""

    name: str = ""


@dataclass(slots=True)
class MissingParamError(TaskRunnerError):
    """A declared param has no value in the invocation."""

    name: str = ""


@dataclass(slots=True)
class InvalidFlagError(TaskRunnerError):
    """A task asked for a flag it does not declare."""

    name: str = ""


@dataclass(slots=True)
class MissingRequiredFlagError(TaskRunnerError):
    """A flag declared as required was not supplied."""

    name: str = ""
