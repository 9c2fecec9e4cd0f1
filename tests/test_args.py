from __future__ import annotations

import allure
import pytest

from task_runner.args import (
    ArgumentBag,
    bind_dependency_arguments,
    check_required_params,
    parse_argv,
    root_arguments,
)
from task_runner.errors import MissingParamsError
from task_runner.models import TaskDependency

pytestmark = [
    allure.epic("Task Graph"),
    allure.feature("Argument Binding"),
]


def test_parse_argv_splits_positional_values_and_flags() -> None:
    bag = parse_argv(["build", "x", "y", "--flag=1", "--verbose", "-qv"])

    assert bag.positional == ("build", "x", "y")
    assert dict(bag.flags) == {"flag": "1", "verbose": True, "q": True, "v": True}
    assert bag.command == "build"


def test_parse_argv_keeps_empty_value_and_negative_numbers() -> None:
    bag = parse_argv(["shift", "-3", "--label="])

    assert bag.positional == ("shift", "-3")
    assert dict(bag.flags) == {"label": ""}


def test_parse_argv_keeps_nameless_flag_positional() -> None:
    bag = parse_argv(["tag", "--=value"])

    assert bag.positional == ("tag", "--=value")
    assert dict(bag.flags) == {}


def test_parse_argv_double_dash_ends_flag_parsing() -> None:
    bag = parse_argv(["run", "--", "--not-a-flag", "-x"])

    assert bag.positional == ("run", "--not-a-flag", "-x")
    assert dict(bag.flags) == {}


def test_parse_argv_without_command() -> None:
    bag = parse_argv(["--help"])

    assert bag.command is None
    assert bag.has_flag("help")


def test_argument_bag_is_read_only() -> None:
    bag = ArgumentBag(positional=["a"], flags={"x": "1"})

    assert bag.positional == ("a",)
    with pytest.raises(TypeError):
        bag.flags["x"] = "2"  # type: ignore[index]


def test_root_arguments_strip_command_token() -> None:
    invocation = parse_argv(["A", "x", "y", "--flag=1"])

    bag = root_arguments(invocation)

    assert bag.positional == ("x", "y")
    assert dict(bag.flags) == {"flag": "1"}


def test_dependency_without_override_inherits_invocation_values() -> None:
    invocation = parse_argv(["A", "x", "y", "--flag=1"])

    bag = bind_dependency_arguments(invocation, TaskDependency("B"))

    assert bag.positional == ("x", "y")
    assert dict(bag.flags) == {"flag": "1"}


def test_dependency_override_replaces_positional_values_only() -> None:
    invocation = parse_argv(["A", "x", "y", "--flag=1"])

    bag = bind_dependency_arguments(invocation, TaskDependency("B", params_override=["z"]))

    assert bag.positional == ("z",)
    assert dict(bag.flags) == {"flag": "1"}
    assert invocation.positional == ("A", "x", "y")


def test_empty_override_clears_positional_values() -> None:
    invocation = parse_argv(["A", "x"])

    bag = bind_dependency_arguments(invocation, TaskDependency("B", params_override=()))

    assert bag.positional == ()


def test_check_required_params_names_missing_values(task_factory) -> None:
    task = task_factory("copy", params=("source", "target"))()

    check_required_params(task, ArgumentBag(positional=("a", "b", "extra")))
    with pytest.raises(MissingParamsError, match="Required params: source, target") as error:
        check_required_params(task, ArgumentBag(positional=("a",)))

    assert error.value.missing == ("target",)
    assert error.value.task_label == "copy"
