"""Task-graph execution engine for building command-line tools."""

from task_runner.models import (
    DependencyFailurePolicy,
    ExecutionMode,
    RunResult,
    TaskDependency,
    TaskFlag,
    UnsetResultPolicy,
)
from task_runner.runner import TaskRunner
from task_runner.task import InternalTask, Task, TaskContext

__version__ = "0.3.0"

__all__ = [
    "DependencyFailurePolicy",
    "ExecutionMode",
    "InternalTask",
    "RunResult",
    "Task",
    "TaskContext",
    "TaskDependency",
    "TaskFlag",
    "TaskRunner",
    "UnsetResultPolicy",
    "__version__",
]
