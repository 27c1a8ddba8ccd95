from __future__ import annotations

from rich.console import Console
from rich.status import Status as Spinner
from rich.text import Text

from pkg_repair.core import Status, indent
from pkg_repair.pipeline.events import Message, RunFinished, StageFinished, StageStarted
from pkg_repair.pipeline.sequencer import RunState

from .theme import Theme


class ConsoleRenderer:
    """
    Renders pipeline messages as they arrive: a spinner while a stage
    runs, then one status line per finished stage.

    `compact` drops the header and the detail blocks.
    """

    def __init__(
        self,
        *,
        theme: Theme,
        console: Console | None = None,
        compact: bool = False,
    ) -> None:
        self.theme = theme
        self.console = console or Console()
        self.compact = compact
        self._spinner: Spinner | None = None
        self._header_done = False

    def handle(self, message: Message) -> None:
        if isinstance(message, StageStarted):
            self._header()
            self._start_spinner(message)
        elif isinstance(message, StageFinished):
            self._stop_spinner()
            self._stage_line(message)
        elif isinstance(message, RunFinished):
            self._stop_spinner()
            self._summary(message)

    def _header(self) -> None:
        if self._header_done or self.compact:
            return
        self._header_done = True
        self.console.print(Text(self.theme.title, style=self.theme.title_style), justify="center")
        for label in self.theme.labels:
            self.console.print(Text(label, style=self.theme.label_style), justify="center")
        self.console.print()

    def _start_spinner(self, message: StageStarted) -> None:
        self._stop_spinner()
        if not self.console.is_terminal:
            return
        text = f"{self.theme.label(message.stage)} ({message.position}/{message.total})"
        self._spinner = self.console.status(
            text, spinner=self.theme.spinner, spinner_style=self.theme.spinner_style
        )
        self._spinner.start()

    def _stop_spinner(self) -> None:
        if self._spinner is not None:
            self._spinner.stop()
            self._spinner = None

    def _stage_line(self, message: StageFinished) -> None:
        ev = message.event
        line = Text("  ")
        line.append(
            f"{self.theme.icon(ev.status)} {self.theme.label(ev.stage)}",
            style=self.theme.style(ev.status),
        )
        if ev.message:
            line.append(f": {ev.message}")
        self.console.print(line, highlight=False)

        if ev.detail and not self.compact:
            self.console.print(
                Text(indent(ev.detail), style=self.theme.detail_style), highlight=False
            )

    def _summary(self, message: RunFinished) -> None:
        outcome = message.outcome
        if outcome.succeeded:
            text = Text(self.theme.success_text, style=self.theme.style(Status.OK))
        elif outcome.state is RunState.INTERRUPTED:
            text = Text(self.theme.interrupted_text, style=self.theme.style(Status.ERROR))
        else:
            text = Text(self.theme.failure_text, style=self.theme.style(Status.ERROR))
        self.console.print(text, highlight=False)
