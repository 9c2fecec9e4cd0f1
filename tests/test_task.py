from __future__ import annotations

import allure
import pytest

from task_runner.args import ArgumentBag
from task_runner.errors import (
    InvalidFlagError,
    InvalidParamError,
    MissingParamError,
    MissingRequiredFlagError,
    TaskDefinitionError,
)
from task_runner.models import RunResult, TaskDependency, TaskFlag
from task_runner.progress import NullProgressIndicator
from task_runner.task import InternalTask, Task, TaskContext

pytestmark = [
    allure.epic("Task Graph"),
    allure.feature("Task Contract"),
]


def _context(task: Task, *positional: str, **flags) -> TaskContext:
    return TaskContext(task=task, args=ArgumentBag(positional=positional, flags=flags))


def test_defaults_of_a_minimal_task(task_factory) -> None:
    task = task_factory("build")()

    assert task.label == "build"
    assert task.params == ()
    assert task.flags == ()
    assert task.dependencies == ()
    assert task.internal is False


def test_internal_task_is_marked_internal() -> None:
    class Setup(InternalTask):
        command = "setup"

        async def run(self, ctx: TaskContext) -> None:
            ctx.set_result(RunResult.SUCCESS)

    task = Setup()
    task.validate()
    assert task.internal is True
    assert task.description == ""


def test_get_param_resolves_by_declared_position(task_factory) -> None:
    task = task_factory("copy", params=("source", "target"))()
    ctx = _context(task, "a.txt", "b.txt")

    assert ctx.get_param("source") == "a.txt"
    assert ctx.get_param("target") == "b.txt"
    assert ctx.get_param("target") == ctx.get_param("target")


def test_get_param_rejects_undeclared_name(task_factory) -> None:
    ctx = _context(task_factory("copy", params=("source",))(), "a.txt")

    with pytest.raises(InvalidParamError, match='Invalid param name "target"'):
        ctx.get_param("target")


def test_get_param_reports_missing_value(task_factory) -> None:
    ctx = _context(task_factory("copy", params=("source", "target"))(), "a.txt")

    with pytest.raises(MissingParamError, match='Param "target" not supplied'):
        ctx.get_param("target")


def test_get_flag_returns_value_or_none(task_factory) -> None:
    task = task_factory("deploy", flags=(TaskFlag("env", "Target env"), TaskFlag("dry-run")))()
    ctx = _context(task, **{"env": "prod"})

    assert ctx.get_flag("env") == "prod"
    assert ctx.get_flag("dry-run") is None
    assert ctx.get_flag("env") == ctx.get_flag("env")


def test_get_flag_rejects_undeclared_flag(task_factory) -> None:
    ctx = _context(task_factory("deploy")(), env="prod")

    with pytest.raises(InvalidFlagError):
        ctx.get_flag("env")


def test_get_flag_requires_required_flag(task_factory) -> None:
    task = task_factory("deploy", flags=(TaskFlag("env", "Target env", required=True),))()

    with pytest.raises(MissingRequiredFlagError, match='Flag "--env" is required'):
        _context(task).get_flag("env")


def test_context_tags_logger_and_tracks_result(task_factory) -> None:
    task = task_factory("lint", label=property(lambda self: "Lint sources"))()
    indicator = NullProgressIndicator("Running...")
    ctx = TaskContext(task=task, args=ArgumentBag(), progress=indicator)

    ctx.log.info("checked")
    ctx.set_progress_text("Checking 3 files")
    ctx.set_result(RunResult.FAILED)

    assert ctx.log.entries[0].message == "[Lint sources] checked"
    assert indicator.text == "Checking 3 files"
    assert ctx.result == RunResult.FAILED


def test_set_progress_text_without_indicator_is_noop(task_factory) -> None:
    ctx = _context(task_factory("lint")())

    ctx.set_progress_text("ignored")

    assert ctx.progress is None


def test_contexts_do_not_share_state(task_factory) -> None:
    task = task_factory("lint")()
    first = _context(task)
    second = _context(task)

    first.log.info("only in first")
    first.set_result(RunResult.FAILED)

    assert len(second.log) == 0
    assert second.result == RunResult.PENDING


@pytest.mark.parametrize(
    ("attrs", "message"),
    [
        ({"command": ""}, "command must be a non-empty string"),
        ({"command": "two words"}, "must not contain whitespace"),
        ({"params": ("a", "a")}, "param 'a' is declared more than once"),
        ({"flags": (TaskFlag("x"), TaskFlag("x"))}, "flag 'x' is declared more than once"),
        ({"flags": (TaskFlag("--x"),)}, "without dashes"),
        ({"flags": (TaskFlag("help"),)}, "reserved"),
        ({"dependencies": ("other",)}, "is not a TaskDependency"),
        ({"dependencies": (TaskDependency(" "),)}, "dependency command must be a non-empty"),
        ({"dependencies": (TaskDependency("b", params_override=(1,)),)}, "strings only"),
        ({"dependencies": (TaskDependency("b", params_override="abc"),)}, "not a string"),
        (
            {"dependencies": (TaskDependency(None),)},  # type: ignore[arg-type]
            "dependency command must be a non-empty",
        ),
    ],
)
def test_validate_rejects_inconsistent_schema(task_factory, attrs, message) -> None:
    command = attrs.pop("command", "broken")
    task = task_factory(command, **attrs)()

    with pytest.raises(TaskDefinitionError, match=message):
        task.validate()


def test_validate_requires_coroutine_run() -> None:
    class Blocking(Task):
        command = "blocking"

        def run(self, ctx: TaskContext) -> None:  # type: ignore[override]
            ctx.set_result(RunResult.SUCCESS)

    with pytest.raises(TaskDefinitionError, match="async def"):
        Blocking().validate()
