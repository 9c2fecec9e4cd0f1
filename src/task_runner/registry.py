"""Registry mapping command names to task definitions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from task_runner.task import Task

logger = logging.getLogger(__name__)

TaskFactory = Callable[[], Task]


class TaskRegistry:
    """Command name -> task instance, populated once at startup.

    Dependency references are not checked here; the engine resolves them
    lazily when a tree is executed.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def register(self, task_type: type[Task] | TaskFactory) -> Task:
        """Instantiate, validate and store a task.

        Registering a command that already exists replaces the previous
        definition.
        """

        task = task_type()
        task.validate()
        previous = self._tasks.get(task.command)
        if previous is not None:
            logger.warning(
                "Task command %r re-registered: %s replaces %s",
                task.command,
                type(task).__name__,
                type(previous).__name__,
            )
        self._tasks[task.command] = task
        return task

    def lookup(self, command: str) -> Task | None:
        return self._tasks.get(command)

    def list_invocable(self) -> list[Task]:
        return [task for task in self._tasks.values() if not task.internal]

    def available_commands(self) -> list[str]:
        return [task.command for task in self.list_invocable()]

    def __contains__(self, command: object) -> bool:
        return command in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))
