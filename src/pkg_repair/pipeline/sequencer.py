from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

import structlog

from pkg_repair.core import (
    Deadline,
    RepairConfig,
    format_duration_ms,
    monotonic_ms,
)

from .events import EventBus, RunFinished, StageFinished, StageStarted
from .stage import StageHandler
from .types import Event, Stage

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PERMISSION = 126
EXIT_INTERRUPTED = 130


class RunState(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    INTERRUPTED = "interrupted"


@dataclass(frozen=True, slots=True)
class RunOutcome:
    state: RunState
    events: tuple[Event, ...]
    failed_stage: Stage | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.COMPLETED and not any(
            e.status.is_fatal for e in self.events
        )

    @property
    def exit_code(self) -> int:
        if self.succeeded:
            return EXIT_OK
        if self.state is RunState.INTERRUPTED:
            return EXIT_INTERRUPTED
        if self.failed_stage is Stage.DETECT_ENV:
            return EXIT_PERMISSION
        return EXIT_FAILED


class Sequencer:
    """
    Walks the handlers in order, one at a time.

    An error Event moves the run to FAILED and nothing after it runs.
    Every other status advances. Each stage gets a fresh deadline of
    `config.timeout`, so the timeout bounds stages, not the whole run.
    """

    def __init__(
        self,
        *,
        handlers: Sequence[StageHandler],
        config: RepairConfig,
        bus: EventBus,
        deadline_factory: Callable[[RepairConfig], Deadline] | None = None,
    ) -> None:
        if not handlers:
            raise ValueError("Sequencer needs at least one stage")
        self.handlers = tuple(handlers)
        self.config = config
        self.bus = bus
        self._deadline_factory = deadline_factory or (
            lambda cfg: Deadline.after(cfg.timeout)
        )

        self.index = 0
        self.state = RunState.RUNNING
        self._events: list[Event] = []
        self._failed_stage: Stage | None = None
        self._finalized = False

    @property
    def total(self) -> int:
        return len(self.handlers)

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    @property
    def current(self) -> StageHandler:
        return self.handlers[self.index]

    def outcome(self) -> RunOutcome:
        return RunOutcome(
            state=self.state,
            events=self.events,
            failed_stage=self._failed_stage,
        )

    def run(self) -> RunOutcome:
        t0 = monotonic_ms()
        log.info(
            "run.start",
            stages=[h.stage.value for h in self.handlers],
            **self.config.to_dict(),
        )
        try:
            event = self.execute_current()
            while True:
                self.advance(event)
                if self.state is not RunState.RUNNING:
                    break
                event = self.execute_current()
        except KeyboardInterrupt:
            stage = self.current.stage.value if self.state is RunState.RUNNING else None
            log.warning("run.interrupted", stage=stage)
            self.state = RunState.INTERRUPTED
            self._finalize()

        duration = monotonic_ms() - t0
        log.info(
            "run.finish",
            state=self.state.value,
            events=len(self._events),
            duration=format_duration_ms(duration),
        )
        return self.outcome()

    def execute_current(self) -> Event:
        handler = self.current
        position = self.index + 1
        self.bus.publish(StageStarted(handler.stage, position, self.total))

        stage_log = log.bind(stage=handler.stage.value, position=f"{position}/{self.total}")
        t0 = monotonic_ms()
        event = handler.execute(self.config, self._deadline_factory(self.config))
        stage_log.info(
            "stage.finish",
            status=event.status.value,
            message=event.message,
            duration=format_duration_ms(monotonic_ms() - t0),
        )
        return event

    def advance(self, event: Event) -> None:
        if self.state is not RunState.RUNNING:
            raise RuntimeError(f"cannot advance a {self.state.value} run")

        self._events.append(event)
        self.bus.publish(StageFinished(event, self.index + 1, self.total))

        if event.status.is_fatal:
            self.state = RunState.FAILED
            self._failed_stage = event.stage
            log.error("run.stopped", stage=event.stage.value, message=event.message)
            self._finalize()
            return

        self.index += 1
        if self.index >= self.total:
            self.state = RunState.COMPLETED
            self._finalize()

    def _finalize(self) -> None:
        if self._finalized:
            return
        # only marked once every consumer has taken it, so an interrupt
        # mid-publish gets a second RunFinished
        self.bus.publish(RunFinished(self.outcome()))
        self._finalized = True
