"""rich-click entrypoint wrapping a ``TaskRunner``."""

from __future__ import annotations

import logging

import rich_click as click

from task_runner.runner import TaskRunner


def build_cli(runner: TaskRunner) -> click.Command:
    """Build a click command that hands every token to ``runner``.

    Help handling stays with the runner so ``--help`` lists registered tasks
    rather than click's own options.
    """

    @click.command(
        name=runner.name,
        add_help_option=False,
        context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
    )
    @click.argument("argv", nargs=-1, type=click.UNPROCESSED)
    @click.pass_context
    def cli(ctx: click.Context, argv: tuple[str, ...]) -> None:
        _configure_logging(runner.settings.log_level)
        ctx.exit(runner.run([*argv, *ctx.args]))

    return cli


def _configure_logging(level: str | None) -> None:
    if level is None:
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
