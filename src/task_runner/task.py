"""Task definitions and their per-invocation context.

A ``Task`` subclass is an immutable definition: its command, declared params,
flags and dependencies, and the ``run`` coroutine. Every execution receives a
fresh ``TaskContext`` holding the scoped arguments, the result, the deferred
logger and the progress indicator, so one definition can run concurrently as
the dependency of several parents.

Example:
    >>> class Greet(Task):
    ...     command = "greet"
    ...     description = "Say hello."
    ...     params = ("name",)
    ...     flags = (TaskFlag("shout", "Use capitals."),)
    ...
    ...     async def run(self, ctx: TaskContext) -> None:
    ...         greeting = f"Hello, {ctx.get_param('name')}!"
    ...         ctx.log.info(greeting.upper() if ctx.get_flag("shout") else greeting)
    ...         ctx.set_result(RunResult.SUCCESS)
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import ClassVar

from task_runner.args import ArgumentBag, FlagValue
from task_runner.errors import (
    InvalidFlagError,
    InvalidParamError,
    MissingParamError,
    MissingRequiredFlagError,
    TaskDefinitionError,
)
from task_runner.logs import DeferredLogger
from task_runner.models import (
    DependencyFailurePolicy,
    ExecutionMode,
    RunResult,
    TaskDependency,
    TaskFlag,
)
from task_runner.progress import ProgressIndicator

RESERVED_FLAGS = frozenset({"help"})


class Task(ABC):
    """A distinct action that can be invoked by its command.

    Subclasses set ``command`` and ``description`` and implement ``run``.
    ``params``, ``flags`` and ``dependencies`` default to empty.
    """

    command: ClassVar[str] = ""
    description: ClassVar[str] = ""
    params: ClassVar[Sequence[str]] = ()
    flags: ClassVar[Sequence[TaskFlag]] = ()
    dependencies: ClassVar[Sequence[TaskDependency]] = ()
    execution_mode: ClassVar[ExecutionMode] = ExecutionMode.PARALLEL
    dependency_failure_policy: ClassVar[DependencyFailurePolicy | None] = None
    internal: ClassVar[bool] = False

    @property
    def label(self) -> str:
        """Human-friendly name used for display; defaults to the command."""

        return self.command

    @abstractmethod
    async def run(self, ctx: TaskContext) -> None:
        """Do the work of this task for one invocation."""

    def find_flag(self, name: str) -> TaskFlag | None:
        for flag in self.flags:
            if flag.name == name:
                return flag
        return None

    def validate(self) -> None:
        """Raise ``TaskDefinitionError`` if the declared schema is inconsistent."""

        owner = type(self).__name__
        if not isinstance(self.command, str) or not self.command.strip():
            raise _definition_error(owner, "command must be a non-empty string.")
        if any(char.isspace() for char in self.command):
            raise _definition_error(owner, f"command {self.command!r} must not contain whitespace.")

        _check_names(owner, "param", list(self.params))
        flag_names = [flag.name for flag in self.flags]
        _check_names(owner, "flag", flag_names)
        for name in flag_names:
            if name.startswith("-"):
                raise _definition_error(owner, f"flag {name!r} must be declared without dashes.")
            if name in RESERVED_FLAGS:
                raise _definition_error(owner, f"flag {name!r} is reserved.")

        for dependency in self.dependencies:
            if not isinstance(dependency, TaskDependency):
                raise _definition_error(owner, f"dependency {dependency!r} is not a TaskDependency.")
            if not isinstance(dependency.command, str) or not dependency.command.strip():
                raise _definition_error(owner, "dependency command must be a non-empty string.")
            override = dependency.params_override
            if isinstance(override, str):
                raise _definition_error(
                    owner,
                    f"params override for {dependency.command!r} must be a sequence, not a string.",
                )
            if override is not None and not all(isinstance(value, str) for value in override):
                raise _definition_error(
                    owner,
                    f"params override for {dependency.command!r} must contain strings only.",
                )

        if not inspect.iscoroutinefunction(self.run):
            raise _definition_error(owner, "run() must be declared with 'async def'.")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} command={self.command!r}>"


class InternalTask(Task):
    """Task reachable only as a dependency, never invoked directly."""

    internal: ClassVar[bool] = True


@dataclass(slots=True)
class TaskContext:
    """Run-scoped state for one invocation of a task."""

    task: Task
    args: ArgumentBag
    depth: int = 0
    progress: ProgressIndicator | None = None
    log: DeferredLogger = field(default_factory=DeferredLogger)
    result: RunResult = RunResult.PENDING

    def __post_init__(self) -> None:
        self.log.set_tag(self.task.label)

    def get_param(self, name: str) -> str:
        """Value of the declared param ``name``, matched by position."""

        params = list(self.task.params)
        if name not in params:
            raise InvalidParamError(
                title="Invalid param",
                message=(
                    f'[{self.task.command}] Invalid param name "{name}" requested; '
                    "it must be one of the task's declared params."
                ),
                name=name,
            )
        index = params.index(name)
        if index >= len(self.args.positional):
            raise MissingParamError(
                title="Missing param",
                message=f'[{self.task.command}] Param "{name}" not supplied.',
                name=name,
            )
        return self.args.positional[index]

    def get_flag(self, name: str) -> FlagValue | None:
        """Value of the declared flag ``name`` or ``None`` when absent."""

        definition = self.task.find_flag(name)
        if definition is None:
            raise InvalidFlagError(
                title="Invalid flag",
                message=(
                    f'[{self.task.command}] Invalid flag name "{name}" requested; '
                    "it must be one of the task's declared flags."
                ),
                name=name,
            )
        value = self.args.flags.get(name)
        if value is None and definition.required:
            raise MissingRequiredFlagError(
                title="Missing flag",
                message=f'[{self.task.command}] Flag "--{name}" is required but was not supplied.',
                name=name,
            )
        return value

    def set_result(self, result: RunResult) -> None:
        self.result = result

    def set_progress_text(self, text: str) -> None:
        if self.progress is None:
            return
        self.progress.text = text


def _check_names(owner: str, kind: str, names: list[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise _definition_error(owner, f"{kind} names must be non-empty strings.")
        if name in seen:
            raise _definition_error(owner, f"{kind} {name!r} is declared more than once.")
        seen.add(name)


def _definition_error(owner: str, detail: str) -> TaskDefinitionError:
    return TaskDefinitionError(title="Invalid task definition", message=f"{owner}: {detail}")
