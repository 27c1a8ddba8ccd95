from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog

from pkg_repair.core import atomic_write_text

from .events import Message, RunFinished, StageFinished
from .types import Event

log = structlog.get_logger(__name__)


def render_report(events: list[Event]) -> str:
    payload: list[dict[str, Any]] = [e.to_dict() for e in events]
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


class EventReporter:
    """
    Collects stage Events in emission order and writes them out once,
    when the run reaches a terminal state.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path else None
        self._events: list[Event] = []
        self.flushed = False

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    def record(self, event: Event) -> None:
        self._events.append(event)

    def handle(self, message: Message) -> None:
        if isinstance(message, StageFinished):
            self.record(message.event)
        elif isinstance(message, RunFinished):
            self.flush()

    def flush(self) -> bool:
        """
        Write the JSON report if a path was configured.

        Only the first call writes. Failures are logged and swallowed;
        the run outcome is already decided by the time this runs.
        """
        if self.flushed:
            return False
        self.flushed = True
        if self.path is None:
            return False

        try:
            atomic_write_text(self.path, render_report(self._events))
        except (OSError, TypeError, ValueError) as e:
            log.warning("report.write_failed", path=str(self.path), error=str(e))
            return False

        log.debug("report.written", path=str(self.path), events=len(self._events))
        return True
