"""Execution engine: resolves and runs a task's dependency tree."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from task_runner.args import (
    ArgumentBag,
    bind_dependency_arguments,
    check_required_params,
    root_arguments,
)
from task_runner.config import ExecutionSettings
from task_runner.errors import DependencyCycleError, InvalidDependencyError, UnknownCommandError
from task_runner.logs import LogAggregator
from task_runner.models import (
    DependencyFailurePolicy,
    ExecutionMode,
    InvocationOutcome,
    RunResult,
    TaskDependency,
    UnsetResultPolicy,
)
from task_runner.progress import NullProgressBoard, ProgressBoard, ProgressIndicator
from task_runner.registry import TaskRegistry
from task_runner.task import Task, TaskContext

logger = logging.getLogger(__name__)

WAITING_TEXT = "Waiting..."
RUNNING_TEXT = "Running..."
DONE_TEXT = "Done."
FAILED_TEXT = "Failed."
SKIPPED_TEXT = "Skipped: a dependency failed."


class ExecutionEngine:
    """Runs a root command after its full prerequisite subgraph.

    Sibling dependencies start together and the parent waits for all of them
    (AND-join). Each node gets its own argument bag and ``TaskContext``;
    finished loggers go to the shared ``LogAggregator`` in completion order.
    """

    def __init__(
        self,
        registry: TaskRegistry,
        *,
        settings: ExecutionSettings | None = None,
        progress: ProgressBoard | None = None,
        aggregator: LogAggregator | None = None,
        indent_width: int = 3,
    ) -> None:
        self.registry = registry
        self.settings = settings or ExecutionSettings()
        self.progress = progress or NullProgressBoard()
        self.aggregator = aggregator or LogAggregator()
        self.indent_width = indent_width

    def resolve_root(self, command: str | None) -> Task:
        task = self.registry.lookup(command) if command is not None else None
        if task is None or task.internal:
            available = ", ".join(self.registry.available_commands())
            raise UnknownCommandError(
                title="Invalid command specified.",
                message=(
                    f'The command "{command}" is not valid. Available commands: {available}\n'
                    "Run this with the --help flag for more details."
                ),
                command=command or "",
            )
        return task

    async def execute(self, invocation: ArgumentBag) -> InvocationOutcome:
        """Run the command named by the first positional value of ``invocation``."""

        task = self.resolve_root(invocation.command)
        return await self._invoke(task, invocation, depth=0, dependency=None, path=())

    async def _invoke(
        self,
        task: Task,
        invocation: ArgumentBag,
        *,
        depth: int,
        dependency: TaskDependency | None,
        path: tuple[str, ...],
    ) -> InvocationOutcome:
        path = (*path, task.command)
        indicator = self.progress.start(WAITING_TEXT, prefix=self._prefix(task, depth))

        children = self._resolve_dependencies(task, path)
        child_outcomes = await self._run_dependencies(task, children, invocation, depth, path)

        if self._should_short_circuit(task, child_outcomes):
            return self._skip(task, indicator, depth, child_outcomes)

        if dependency is None:
            bag = root_arguments(invocation)
        else:
            bag = bind_dependency_arguments(invocation, dependency)
        check_required_params(task, bag)

        ctx = TaskContext(task=task, args=bag, depth=depth, progress=indicator)
        indicator.text = RUNNING_TEXT
        logger.debug("Running task %s (depth=%d, args=%s)", task.command, depth, bag.positional)
        await task.run(ctx)

        result = self._final_result(ctx)
        self.aggregator.append(ctx.log)
        logger.debug("Task %s finished: %s", task.command, result.value)

        self._finish_indicator(indicator, failed=result == RunResult.FAILED)
        return InvocationOutcome(
            command=task.command,
            label=task.label,
            depth=depth,
            result=result,
            dependencies=child_outcomes,
        )

    def _resolve_dependencies(
        self,
        task: Task,
        path: tuple[str, ...],
    ) -> list[tuple[Task, TaskDependency]]:
        resolved: list[tuple[Task, TaskDependency]] = []
        for dependency in task.dependencies:
            dependency_task = self.registry.lookup(dependency.command)
            if dependency_task is None:
                raise InvalidDependencyError(
                    title="Invalid dependency",
                    message=(
                        f"The task {task.label} defined a dependency "
                        f'"{dependency.command}", but this command is not valid.'
                    ),
                    task_label=task.label,
                    command=dependency.command,
                )
            if dependency.command in path:
                cycle = (*path[path.index(dependency.command) :], dependency.command)
                raise DependencyCycleError(
                    title="Dependency cycle",
                    message=(
                        f"The task {task.label} depends on itself through: {' -> '.join(cycle)}"
                    ),
                    cycle=cycle,
                )
            resolved.append((dependency_task, dependency))
        return resolved

    async def _run_dependencies(
        self,
        task: Task,
        children: Sequence[tuple[Task, TaskDependency]],
        invocation: ArgumentBag,
        depth: int,
        path: tuple[str, ...],
    ) -> tuple[InvocationOutcome, ...]:
        if not children:
            return ()

        if task.execution_mode == ExecutionMode.SEQUENTIAL:
            outcomes: list[InvocationOutcome] = []
            for child, dependency in children:
                outcomes.append(
                    await self._invoke(
                        child,
                        invocation,
                        depth=depth + 1,
                        dependency=dependency,
                        path=path,
                    ),
                )
            return tuple(outcomes)

        return tuple(
            await asyncio.gather(
                *(
                    self._invoke(child, invocation, depth=depth + 1, dependency=dependency, path=path)
                    for child, dependency in children
                ),
            ),
        )

    def _should_short_circuit(
        self,
        task: Task,
        child_outcomes: tuple[InvocationOutcome, ...],
    ) -> bool:
        policy = task.dependency_failure_policy or self.settings.dependency_failure_policy
        if policy != DependencyFailurePolicy.SHORT_CIRCUIT:
            return False
        return any(not outcome.succeeded for outcome in child_outcomes)

    def _skip(
        self,
        task: Task,
        indicator: ProgressIndicator,
        depth: int,
        child_outcomes: tuple[InvocationOutcome, ...],
    ) -> InvocationOutcome:
        failed = [outcome.label for outcome in child_outcomes if not outcome.succeeded]
        logger.info("Skipping task %s: failed dependencies %s", task.command, failed)
        ctx = TaskContext(task=task, args=ArgumentBag(), depth=depth, progress=indicator)
        ctx.log.warn(f"Skipped because dependencies failed: {', '.join(failed)}")
        ctx.set_result(RunResult.FAILED)
        self.aggregator.append(ctx.log)
        indicator.text = SKIPPED_TEXT
        indicator.failed()
        return InvocationOutcome(
            command=task.command,
            label=task.label,
            depth=depth,
            result=RunResult.FAILED,
            skipped=True,
            dependencies=child_outcomes,
        )

    def _final_result(self, ctx: TaskContext) -> RunResult:
        if ctx.result != RunResult.PENDING:
            return ctx.result

        policy = self.settings.unset_result_policy
        if policy == UnsetResultPolicy.FAIL:
            ctx.log.error("Task finished without setting a result.")
            ctx.set_result(RunResult.FAILED)
            return RunResult.FAILED
        if policy == UnsetResultPolicy.WARN:
            ctx.log.warn("Task finished without setting a result; treating it as a success.")
        return RunResult.SUCCESS

    def _finish_indicator(self, indicator: ProgressIndicator, *, failed: bool) -> None:
        if failed:
            if indicator.text == RUNNING_TEXT:
                indicator.text = FAILED_TEXT
            indicator.failed()
        else:
            if indicator.text == RUNNING_TEXT:
                indicator.text = DONE_TEXT
            indicator.succeed()

    def _prefix(self, task: Task, depth: int) -> str:
        spacer = " " * (self.indent_width * depth)
        if spacer:
            spacer += "↳ "
        return f"{spacer}[{task.label}] "
