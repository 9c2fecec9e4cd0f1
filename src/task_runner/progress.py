"""Progress indicators shown while a dependency tree executes.

One board renders every running task as a row with a spinner, replaced by a
check mark or a cross once the task reaches a terminal state.
"""

from __future__ import annotations

from types import TracebackType
from typing import Protocol

from rich.console import Console, RenderableType
from rich.progress import Progress, ProgressColumn, TaskID, TextColumn
from rich.progress import Task as ProgressTask
from rich.spinner import Spinner
from rich.text import Text

_STATE_RUNNING = "running"
_STATE_SUCCEEDED = "succeeded"
_STATE_FAILED = "failed"


class ProgressIndicator(Protocol):
    """A single task's indicator: settable text and terminal states."""

    text: str

    def succeed(self) -> None:
        """Mark the task as finished successfully."""

    def failed(self) -> None:
        """Mark the task as finished with a failure."""


class ProgressBoard(Protocol):
    """Factory and lifetime owner of progress indicators."""

    def start(self, initial_text: str, *, prefix: str = "") -> ProgressIndicator:
        """Start a new indicator row."""

    def __enter__(self) -> ProgressBoard: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


class _StateColumn(ProgressColumn):
    def __init__(self, spinner_name: str = "dots") -> None:
        self._spinner = Spinner(spinner_name, style="progress.spinner")
        super().__init__()

    def render(self, task: ProgressTask) -> RenderableType:
        state = task.fields.get("state")
        if state == _STATE_SUCCEEDED:
            return Text("✔", style="green")
        if state == _STATE_FAILED:
            return Text("✖", style="red")
        return self._spinner.render(task.get_time())


class RichProgressIndicator:
    """Indicator backed by one row of a rich ``Progress`` display."""

    def __init__(self, progress: Progress, task_id: TaskID, text: str) -> None:
        self._progress = progress
        self._task_id = task_id
        self._text = text

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        self._text = value
        self._progress.update(self._task_id, description=value)

    def succeed(self) -> None:
        self._progress.update(self._task_id, state=_STATE_SUCCEEDED)

    def failed(self) -> None:
        self._progress.update(self._task_id, state=_STATE_FAILED)


class RichProgressBoard:
    """Live rich display holding one row per task invocation."""

    def __init__(self, console: Console | None = None) -> None:
        self._progress = Progress(
            _StateColumn(),
            TextColumn("{task.fields[prefix]}{task.description}", markup=False),
            console=console,
            transient=False,
        )

    def start(self, initial_text: str, *, prefix: str = "") -> RichProgressIndicator:
        task_id = self._progress.add_task(
            initial_text,
            total=None,
            prefix=prefix,
            state=_STATE_RUNNING,
        )
        return RichProgressIndicator(self._progress, task_id, initial_text)

    def __enter__(self) -> RichProgressBoard:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._progress.stop()


class NullProgressIndicator:
    """Indicator that only remembers its text and terminal state."""

    def __init__(self, text: str, prefix: str = "") -> None:
        self.text = text
        self.prefix = prefix
        self.state = _STATE_RUNNING

    def succeed(self) -> None:
        self.state = _STATE_SUCCEEDED

    def failed(self) -> None:
        self.state = _STATE_FAILED


class NullProgressBoard:
    """Board used when progress display is disabled."""

    def __init__(self) -> None:
        self.indicators: list[NullProgressIndicator] = []

    def start(self, initial_text: str, *, prefix: str = "") -> NullProgressIndicator:
        indicator = NullProgressIndicator(initial_text, prefix)
        self.indicators.append(indicator)
        return indicator

    def __enter__(self) -> NullProgressBoard:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        return None
