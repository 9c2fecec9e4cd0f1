"""Domain models for task definitions, results and deferred logs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RunResult(str, Enum):
    """Outcome a task reports for one invocation."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class ExecutionMode(str, Enum):
    """How a task starts its declared dependencies."""

    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"


class DependencyFailurePolicy(str, Enum):
    """What a parent does once a dependency reported a failure."""

    CONTINUE = "continue"
    SHORT_CIRCUIT = "short-circuit"


class UnsetResultPolicy(str, Enum):
    """How a run that never set its result is judged."""

    SUCCEED = "succeed"
    WARN = "warn"
    FAIL = "fail"


class LogLevel(str, Enum):
    """Deferred log entry levels."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class TaskFlag:
    """Optional named flag accepted by a task (``--name[=value]``)."""

    name: str
    description: str = ""
    required: bool = False


@dataclass(frozen=True, slots=True)
class TaskDependency:
    """Prerequisite task reference with an optional positional override."""

    command: str
    params_override: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        override = self.params_override
        if override is not None and not isinstance(override, (tuple, str)):
            object.__setattr__(self, "params_override", tuple(self.params_override))


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One buffered log line."""

    level: LogLevel
    message: str
    params: Any = None


@dataclass(slots=True)
class InvocationOutcome:
    """Result of one node of an executed dependency tree."""

    command: str
    label: str
    depth: int
    result: RunResult
    skipped: bool = False
    dependencies: tuple[InvocationOutcome, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.result != RunResult.FAILED

    def failed_dependencies(self) -> list[InvocationOutcome]:
        return [outcome for outcome in self.dependencies if not outcome.succeeded]

    def walk(self) -> list[InvocationOutcome]:
        """Return this node and every descendant, depth-first."""

        nodes = [self]
        for child in self.dependencies:
            nodes.extend(child.walk())
        return nodes
