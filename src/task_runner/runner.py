"""Top-level task runner: argument handling, help output and exit codes."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from collections.abc import Sequence

import rich_click as click
from rich.console import Console

from task_runner.args import ArgumentBag, parse_argv
from task_runner.config import Settings
from task_runner.engine import ExecutionEngine
from task_runner.errors import NoCommandError, TaskRunnerError
from task_runner.logs import LogAggregator
from task_runner.models import InvocationOutcome
from task_runner.progress import NullProgressBoard, ProgressBoard, RichProgressBoard
from task_runner.registry import TaskFactory, TaskRegistry
from task_runner.task import Task

logger = logging.getLogger(__name__)


class TaskRunner:
    """A command-line tool made of registered tasks.

    Example:
        >>> runner = TaskRunner("my-tool")
        >>> runner.register_task(Build)
        >>> runner.main()
    """

    def __init__(
        self,
        name: str,
        *,
        settings: Settings | None = None,
        prog_name: str | None = None,
    ) -> None:
        self.name = name
        self.settings = settings or Settings.from_env()
        self.settings.validate()
        self.prog_name = prog_name
        self.registry = TaskRegistry()
        self.last_outcome: InvocationOutcome | None = None

    def register_task(self, task_type: type[Task] | TaskFactory) -> Task:
        """Register a task class (or zero-argument factory) with this runner."""

        return self.registry.register(task_type)

    def run(self, argv: Sequence[str] | None = None) -> int:
        """Run the tool for ``argv`` and return the process exit status."""

        tokens = list(sys.argv[1:] if argv is None else argv)
        return asyncio.run(self.run_async(parse_argv(tokens)))

    async def run_async(self, invocation: ArgumentBag) -> int:
        self.last_outcome = None
        if invocation.has_flag("help"):
            self._emit_lines(self.help_lines())
            return 0

        aggregator = LogAggregator()
        engine = ExecutionEngine(
            self.registry,
            settings=self.settings.execution,
            progress=self._progress_board(),
            aggregator=aggregator,
            indent_width=self.settings.display.indent_width,
        )
        try:
            if invocation.command is None:
                raise self._no_command_error()
            engine.resolve_root(invocation.command)
            with engine.progress:
                self.last_outcome = await engine.execute(invocation)
        except TaskRunnerError as error:
            logger.debug("Run aborted: %s", error)
            self.print_error(error.title, error.message)
            return 1

        click.echo("", color=self.settings.display.color)
        aggregator.flush(self._emit)
        return 0

    def main(self, argv: Sequence[str] | None = None) -> None:
        """Run as a console script; exits the process with the run status."""

        from task_runner.main import build_cli

        build_cli(self).main(
            args=list(sys.argv[1:] if argv is None else argv),
            prog_name=self.prog_name or self._default_prog_name(),
        )

    def help_lines(self) -> list[str]:
        prog_name = self.prog_name or self._default_prog_name()
        lines = [
            click.style(self.name, bold=True, underline=True),
            "",
            f"Usage: {prog_name} <command> [...params] [--flag[=value]]...",
            "",
            click.style("Available commands:", italic=True, underline=True),
        ]
        for task in self.registry.list_invocable():
            params = "".join(f"<{param}> " for param in task.params)
            lines.append(
                f"* {click.style(task.command, bold=True)} {params}- "
                f"{click.style(task.description, fg='bright_black')}",
            )
            if task.flags:
                lines.append(click.style("\tFlags:", italic=True))
                for flag in task.flags:
                    required = " [REQUIRED]" if flag.required else ""
                    lines.append(
                        f"\t --{flag.name} ({click.style(flag.description, fg='bright_black')})"
                        f"{required}",
                    )
        return lines

    def print_error(self, title: str, message: str) -> None:
        click.echo(
            click.style(f"<!> {title}", fg="red", bold=True) + "\n" + click.style(message, fg="red"),
            color=self.settings.display.color,
        )

    def _no_command_error(self) -> NoCommandError:
        available = ", ".join(self.registry.available_commands())
        return NoCommandError(
            title="No command specified.",
            message=(
                f"You must provide a command to run. Available commands: {available}\n"
                "Run this with the --help flag for more details."
            ),
        )

    def _progress_board(self) -> ProgressBoard:
        display = self.settings.display
        if not display.show_progress:
            return NullProgressBoard()
        no_color = display.color is False
        return RichProgressBoard(
            Console(force_terminal=display.color or None, no_color=no_color),
        )

    def _emit_lines(self, lines: list[str]) -> None:
        for line in lines:
            self._emit(line)

    def _emit(self, line: str) -> None:
        click.echo(line, color=self.settings.display.color)

    @staticmethod
    def _default_prog_name() -> str:
        return os.path.basename(sys.argv[0]) or "tool"
