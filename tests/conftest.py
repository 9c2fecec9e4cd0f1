"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable, Sequence

import pytest

from task_runner.config import DisplaySettings, Settings
from task_runner.models import TaskDependency, TaskFlag
from task_runner.task import InternalTask, Task, TaskContext

TaskBody = Callable[[TaskContext], Awaitable[None]]


@pytest.fixture(autouse=True)
def _clean_task_runner_env(monkeypatch):
    """Keep developer TASK_RUNNER_* variables out of the tests."""
    for name in list(os.environ):
        if name.startswith("TASK_RUNNER_"):
            monkeypatch.delenv(name)


@pytest.fixture()
def quiet_settings() -> Settings:
    return Settings(display=DisplaySettings(show_progress=False, color=False))


@pytest.fixture()
def task_factory():
    """Build Task subclasses on the fly; ``body`` is awaited inside ``run``."""

    def _make(
        command: str,
        *,
        params: Sequence[str] = (),
        flags: Sequence[TaskFlag] = (),
        dependencies: Sequence[TaskDependency] = (),
        body: TaskBody | None = None,
        internal: bool = False,
        **attrs,
    ) -> type[Task]:
        async def run(self, ctx: TaskContext) -> None:
            if body is not None:
                await body(ctx)

        namespace = {
            "command": command,
            "description": f"{command} task",
            "params": tuple(params),
            "flags": tuple(flags),
            "dependencies": tuple(dependencies),
            "run": run,
            **attrs,
        }
        base = InternalTask if internal else Task
        class_name = "".join(part.title() for part in command.split("-")) + "Task"
        return type(class_name, (base,), namespace)

    return _make
