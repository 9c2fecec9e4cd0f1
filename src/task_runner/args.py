"""Argument bags: tokenizing process input and scoping it per task invocation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from task_runner.errors import MissingParamsError
from task_runner.models import TaskDependency

if TYPE_CHECKING:
    from task_runner.task import Task

FlagValue = str | bool


@dataclass(frozen=True, slots=True)
class ArgumentBag:
    """Positional values plus named flags for one invocation.

    Both parts are read-only so a bag can be handed to concurrent sibling
    invocations without one of them leaking changes into another.
    """

    positional: tuple[str, ...] = ()
    flags: Mapping[str, FlagValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "positional", tuple(self.positional))
        object.__setattr__(self, "flags", MappingProxyType(dict(self.flags)))

    @property
    def command(self) -> str | None:
        """Leading positional token of a raw invocation."""

        return self.positional[0] if self.positional else None

    def has_flag(self, name: str) -> bool:
        return name in self.flags

    def with_positional(self, values: Iterable[str]) -> ArgumentBag:
        return ArgumentBag(positional=tuple(values), flags=self.flags)


def parse_argv(tokens: Sequence[str]) -> ArgumentBag:
    """Split raw process arguments into positional values and flags.

    ``--name=value`` binds a string, a bare ``--name`` or ``-n`` binds
    ``True``, ``-abc`` sets three short flags and ``--`` ends flag parsing.
    """

    positional: list[str] = []
    flags: dict[str, FlagValue] = {}
    tokens_iter = iter(tokens)
    for token in tokens_iter:
        if token == "--":
            positional.extend(tokens_iter)
            break
        if token.startswith("--="):
            positional.append(token)
        elif token.startswith("--") and len(token) > 2:
            name, sep, value = token[2:].partition("=")
            flags[name] = value if sep else True
        elif token.startswith("-") and len(token) > 1 and not _looks_numeric(token):
            for short_name in token[1:]:
                flags[short_name] = True
        else:
            positional.append(token)
    return ArgumentBag(positional=tuple(positional), flags=flags)


def root_arguments(invocation: ArgumentBag) -> ArgumentBag:
    """Scoped bag for the invoked task: everything after the command token."""

    return invocation.with_positional(invocation.positional[1:])


def bind_dependency_arguments(
    invocation: ArgumentBag,
    dependency: TaskDependency,
) -> ArgumentBag:
    """Scoped bag for a dependency of any depth.

    An override list replaces the positional values outright; flags always
    come unchanged from the invocation.
    """

    if dependency.params_override is not None:
        return invocation.with_positional(dependency.params_override)
    return root_arguments(invocation)


def check_required_params(task: Task, bag: ArgumentBag) -> None:
    """Raise ``MissingParamsError`` if ``bag`` cannot satisfy ``task.params``."""

    required = tuple(task.params)
    if len(bag.positional) >= len(required):
        return
    missing = required[len(bag.positional) :]
    raise MissingParamsError(
        title="Missing params",
        message=(
            f'One or more required params for the task "{task.label}" was not provided. '
            f"Required params: {', '.join(required)}. Missing: {', '.join(missing)}."
        ),
        task_label=task.label,
        missing=missing,
    )


def _looks_numeric(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True
