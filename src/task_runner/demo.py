"""Example tool built with task-runner.

    task-runner-demo scaffold my-project --title="My Project"
    task-runner-demo doctor
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from task_runner import (
    ExecutionMode,
    InternalTask,
    RunResult,
    Task,
    TaskContext,
    TaskDependency,
    TaskFlag,
    TaskRunner,
)


class CheckToolTask(InternalTask):
    command = "check-tool"
    params = ("tool_name",)

    @property
    def label(self) -> str:
        return "Check tool"

    async def run(self, ctx: TaskContext) -> None:
        tool_name = ctx.get_param("tool_name")
        ctx.set_progress_text(f"Looking for {tool_name}...")
        location = await asyncio.to_thread(shutil.which, tool_name)
        if location is None:
            ctx.log.error(f"{tool_name} was not found on PATH.")
            ctx.set_result(RunResult.FAILED)
            return
        ctx.log.info(f"{tool_name} found.", {"path": location})
        ctx.set_result(RunResult.SUCCESS)


class DoctorTask(Task):
    command = "doctor"
    description = "Check that the tools a project needs are installed."
    dependencies = (
        TaskDependency("check-tool", params_override=("git",)),
        TaskDependency("check-tool", params_override=("python3",)),
    )

    async def run(self, ctx: TaskContext) -> None:
        ctx.log.info("Environment checks finished.")
        ctx.set_result(RunResult.SUCCESS)


class CreateFolderTask(InternalTask):
    command = "create-folder"
    params = ("folder_name",)

    async def run(self, ctx: TaskContext) -> None:
        folder = Path(ctx.get_param("folder_name"))
        await asyncio.to_thread(folder.mkdir, parents=True, exist_ok=True)
        ctx.log.info(f"Created {folder}.")
        ctx.set_result(RunResult.SUCCESS)


class WriteReadmeTask(Task):
    command = "write-readme"
    description = "Write a README.md into a project folder."
    params = ("folder_name",)
    flags = (TaskFlag("title", "Heading of the README."),)
    dependencies = (TaskDependency("create-folder"),)

    async def run(self, ctx: TaskContext) -> None:
        folder = Path(ctx.get_param("folder_name"))
        title = ctx.get_flag("title")
        heading = title if isinstance(title, str) else folder.name
        readme = folder / "README.md"
        await asyncio.to_thread(readme.write_text, f"# {heading}\n", encoding="utf-8")
        ctx.log.info(f"Wrote {readme}.")
        ctx.set_result(RunResult.SUCCESS)


class WriteGitignoreTask(InternalTask):
    command = "write-gitignore"
    params = ("folder_name",)
    dependencies = (TaskDependency("create-folder"),)

    async def run(self, ctx: TaskContext) -> None:
        gitignore = Path(ctx.get_param("folder_name")) / ".gitignore"
        if gitignore.exists():
            ctx.log.warn(f"{gitignore} already exists; leaving it untouched.")
        else:
            await asyncio.to_thread(gitignore.write_text, "__pycache__/\n.venv/\n", encoding="utf-8")
            ctx.log.info(f"Wrote {gitignore}.")
        ctx.set_result(RunResult.SUCCESS)


class ScaffoldTask(Task):
    command = "scaffold"
    description = "Create a project folder with a README and a .gitignore."
    params = ("folder_name",)
    flags = (TaskFlag("title", "Heading of the README."),)
    dependencies = (
        TaskDependency("write-readme"),
        TaskDependency("write-gitignore"),
    )

    async def run(self, ctx: TaskContext) -> None:
        ctx.log.info(f"Project {ctx.get_param('folder_name')} is ready.")
        ctx.set_result(RunResult.SUCCESS)


class ReleaseTask(Task):
    command = "release"
    description = "Run the doctor checks, then scaffold a release notes folder."
    params = ("version",)
    flags = (TaskFlag("channel", "Release channel name.", required=True),)
    execution_mode = ExecutionMode.SEQUENTIAL
    dependencies = (
        TaskDependency("doctor"),
        TaskDependency("create-folder", params_override=("release-notes",)),
    )

    async def run(self, ctx: TaskContext) -> None:
        version = ctx.get_param("version")
        channel = ctx.get_flag("channel")
        notes = Path("release-notes") / f"{version}.md"
        await asyncio.to_thread(
            notes.write_text,
            f"# {version} ({channel})\n",
            encoding="utf-8",
        )
        ctx.log.info(f"Release notes written to {notes}.", {"channel": channel})
        ctx.set_result(RunResult.SUCCESS)


DEMO_TASKS: tuple[type[Task], ...] = (
    CheckToolTask,
    DoctorTask,
    CreateFolderTask,
    WriteReadmeTask,
    WriteGitignoreTask,
    ScaffoldTask,
    ReleaseTask,
)


def build_runner() -> TaskRunner:
    runner = TaskRunner("task-runner demo", prog_name="task-runner-demo")
    for task_type in DEMO_TASKS:
        runner.register_task(task_type)
    return runner


def main() -> None:
    build_runner().main()


if __name__ == "__main__":  # pragma: no cover
    main()
