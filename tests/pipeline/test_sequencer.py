from __future__ import annotations

import json
from pathlib import Path

import pytest

from pkg_repair.core import Deadline, RepairConfig, Status
from pkg_repair.pipeline import (
    STAGE_ORDER,
    Event,
    EventBus,
    EventReporter,
    RunFinished,
    RunState,
    Sequencer,
    Stage,
    StageFinished,
    StageStarted,
)


class ScriptedHandler:
    def __init__(self, stage: Stage, status: Status, calls: list[Stage]) -> None:
        self.stage = stage
        self.status = status
        self.calls = calls
        self.deadlines: list[Deadline] = []

    def execute(self, config: RepairConfig, deadline: Deadline) -> Event:
        self.calls.append(self.stage)
        self.deadlines.append(deadline)
        return Event.create(self.stage, self.status, f"{self.stage.value} done")


class Recorder:
    def __init__(self) -> None:
        self.messages: list[object] = []

    def handle(self, message: object) -> None:
        self.messages.append(message)


def _handlers(statuses: dict[int, Status] | None = None):
    calls: list[Stage] = []
    statuses = statuses or {}
    handlers = [
        ScriptedHandler(stage, statuses.get(i, Status.OK), calls)
        for i, stage in enumerate(STAGE_ORDER)
    ]
    return handlers, calls


def test_runs_every_stage_in_order() -> None:
    handlers, calls = _handlers({0: Status.WARN, 2: Status.SKIP})
    bus = EventBus()
    rec = Recorder()
    bus.subscribe(rec)

    outcome = Sequencer(handlers=handlers, config=RepairConfig(), bus=bus).run()

    assert calls == list(STAGE_ORDER)
    assert outcome.state is RunState.COMPLETED
    assert outcome.succeeded
    assert outcome.exit_code == 0
    assert [e.stage for e in outcome.events] == list(STAGE_ORDER)
    assert [e.status for e in outcome.events][:3] == [Status.WARN, Status.OK, Status.SKIP]

    finished = [m for m in rec.messages if isinstance(m, StageFinished)]
    assert [m.position for m in finished] == list(range(1, 9))
    assert isinstance(rec.messages[0], StageStarted)
    assert isinstance(rec.messages[-1], RunFinished)
    assert sum(isinstance(m, RunFinished) for m in rec.messages) == 1


def test_halts_on_first_error() -> None:
    handlers, calls = _handlers({1: Status.ERROR, 3: Status.ERROR})
    bus = EventBus()
    outcome = Sequencer(handlers=handlers, config=RepairConfig(), bus=bus).run()

    assert calls == [Stage.REPO_NETWORK, Stage.DETECT_ENV]
    assert outcome.state is RunState.FAILED
    assert outcome.failed_stage is Stage.DETECT_ENV
    assert len(outcome.events) == 2
    assert outcome.exit_code == 126


def test_error_after_environment_exits_one() -> None:
    handlers, calls = _handlers({5: Status.ERROR})
    outcome = Sequencer(handlers=handlers, config=RepairConfig(), bus=EventBus()).run()

    assert len(calls) == 6
    assert outcome.exit_code == 1


def test_each_stage_gets_a_fresh_deadline() -> None:
    handlers, _ = _handlers()
    made: list[float] = []

    def factory(cfg: RepairConfig) -> Deadline:
        made.append(cfg.timeout.total_seconds())
        return Deadline.after(cfg.timeout)

    Sequencer(
        handlers=handlers, config=RepairConfig(), bus=EventBus(), deadline_factory=factory
    ).run()
    assert made == [1200.0] * 8


def test_advance_after_terminal_state_is_rejected() -> None:
    handlers, _ = _handlers({0: Status.ERROR})
    seq = Sequencer(handlers=handlers, config=RepairConfig(), bus=EventBus())
    seq.run()
    with pytest.raises(RuntimeError):
        seq.advance(Event.create(Stage.DETECT_ENV, Status.OK, "late"))


def test_interrupt_flushes_report(tmp_path: Path) -> None:
    handlers, calls = _handlers()

    class Interrupting(ScriptedHandler):
        def execute(self, config: RepairConfig, deadline: Deadline) -> Event:
            raise KeyboardInterrupt

    handlers[3] = Interrupting(Stage.PKG_UPDATE, Status.OK, calls)
    report = tmp_path / "report.json"
    bus = EventBus()
    bus.subscribe(EventReporter(report))

    outcome = Sequencer(handlers=handlers, config=RepairConfig(), bus=bus).run()

    assert outcome.state is RunState.INTERRUPTED
    assert outcome.exit_code == 130
    assert len(outcome.events) == 3
    assert [e["stage"] for e in json.loads(report.read_text())] == [
        "repo_network_check",
        "detect_env",
        "clear_repo_cache",
    ]


def test_reporter_flushes_once_on_failure(tmp_path: Path) -> None:
    handlers, _ = _handlers({1: Status.ERROR})
    report = tmp_path / "report.json"
    reporter = EventReporter(report)
    bus = EventBus()
    bus.subscribe(reporter)

    Sequencer(handlers=handlers, config=RepairConfig(report_path=report), bus=bus).run()

    assert reporter.flushed
    data = json.loads(report.read_text())
    assert [e["status"] for e in data] == ["ok", "error"]


class InterruptOnFinish:
    """Raises KeyboardInterrupt on the first RunFinished it sees."""

    def __init__(self) -> None:
        self.seen: list[RunState] = []

    def handle(self, message: object) -> None:
        if isinstance(message, RunFinished):
            self.seen.append(message.outcome.state)
            if len(self.seen) == 1:
                raise KeyboardInterrupt


def test_interrupt_while_finishing_completed_run(tmp_path: Path) -> None:
    handlers, calls = _handlers()
    report = tmp_path / "report.json"
    reporter = EventReporter(report)
    interrupter = InterruptOnFinish()
    bus = EventBus()
    bus.subscribe(interrupter)
    bus.subscribe(reporter)

    outcome = Sequencer(handlers=handlers, config=RepairConfig(), bus=bus).run()

    assert calls == list(STAGE_ORDER)
    assert outcome.state is RunState.INTERRUPTED
    assert outcome.exit_code == 130
    assert interrupter.seen == [RunState.COMPLETED, RunState.INTERRUPTED]
    assert reporter.flushed
    assert len(json.loads(report.read_text())) == 8


def test_interrupt_while_finishing_failed_run_still_flushes(tmp_path: Path) -> None:
    handlers, _ = _handlers({2: Status.ERROR})
    report = tmp_path / "report.json"
    reporter = EventReporter(report)
    bus = EventBus()
    bus.subscribe(InterruptOnFinish())
    bus.subscribe(reporter)

    outcome = Sequencer(handlers=handlers, config=RepairConfig(), bus=bus).run()

    assert outcome.exit_code == 130
    assert reporter.flushed
    assert [e["status"] for e in json.loads(report.read_text())] == ["ok", "ok", "error"]
