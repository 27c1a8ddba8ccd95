from __future__ import annotations

import json
from pathlib import Path

from pkg_repair.core import Status
from pkg_repair.pipeline import (
    Event,
    EventBus,
    EventReporter,
    Stage,
    StageFinished,
    StageStarted,
)


def _event(stage: Stage, status: Status, detail: str = "") -> Event:
    return Event(
        time="2025-01-02T03:04:05Z",
        stage=stage,
        status=status,
        message=f"{stage.value} message",
        detail=detail,
    )


def test_event_dict_omits_empty_detail() -> None:
    assert _event(Stage.DETECT_ENV, Status.OK).to_dict() == {
        "time": "2025-01-02T03:04:05Z",
        "stage": "detect_env",
        "status": "ok",
        "message": "detect_env message",
    }
    assert _event(Stage.PKG_CHECK, Status.WARN, "line1\nline2").to_dict()["detail"] == (
        "line1\nline2"
    )


def test_report_file_is_overwritten(tmp_path: Path) -> None:
    path = tmp_path / "out" / "report.json"
    path.parent.mkdir()
    path.write_text("stale contents that are longer than the report " * 50)

    reporter = EventReporter(path)
    reporter.record(_event(Stage.REPO_NETWORK, Status.WARN, "[x] http://a (down)"))
    reporter.record(_event(Stage.PKG_CHECK, Status.OK))
    reporter.record(_event(Stage.PKG_CHECK, Status.OK))
    assert reporter.flush()

    raw = path.read_text()
    assert raw.startswith("[\n  {")
    data = json.loads(raw)
    assert [e["stage"] for e in data] == ["repo_network_check", "pkg_check_da", "pkg_check_da"]
    assert "detail" not in data[1]
    assert data[0]["detail"] == "[x] http://a (down)"


def test_flush_only_writes_once(tmp_path: Path) -> None:
    path = tmp_path / "report.json"
    reporter = EventReporter(path)
    reporter.record(_event(Stage.DETECT_ENV, Status.OK))
    assert reporter.flush()
    path.unlink()
    assert not reporter.flush()
    assert not path.exists()


def test_flush_without_path_writes_nothing(tmp_path: Path) -> None:
    reporter = EventReporter(None)
    reporter.record(_event(Stage.DETECT_ENV, Status.OK))
    assert not reporter.flush()
    assert list(tmp_path.iterdir()) == []


def test_flush_failure_is_swallowed(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    reporter = EventReporter(blocker / "report.json")
    reporter.record(_event(Stage.DETECT_ENV, Status.OK))
    assert reporter.flush() is False


def test_bus_delivers_in_publication_order() -> None:
    bus = EventBus()
    seen: dict[str, list[object]] = {"a": [], "b": []}

    class Echo:
        def __init__(self, name: str) -> None:
            self.name = name

        def handle(self, message: object) -> None:
            seen[self.name].append(message)
            if self.name == "a" and isinstance(message, StageStarted):
                bus.publish(StageFinished(_event(message.stage, Status.OK), 1, 1))

    bus.subscribe(Echo("a"))
    bus.subscribe(Echo("b"))
    bus.publish(StageStarted(Stage.DETECT_ENV, 1, 1))

    for name in ("a", "b"):
        kinds = [type(m).__name__ for m in seen[name]]
        assert kinds == ["StageStarted", "StageFinished"]
