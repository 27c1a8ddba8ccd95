from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

import structlog

from pkg_repair.core import Deadline, RepairConfig, RepairError, Status
from pkg_repair.pipeline.types import Event, Stage

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class StageOutcome:
    status: Status
    message: str
    detail: str = ""


def ok(message: str, detail: str = "") -> StageOutcome:
    return StageOutcome(Status.OK, message, detail)


def warn(message: str, detail: str = "") -> StageOutcome:
    return StageOutcome(Status.WARN, message, detail)


def skip(message: str, detail: str = "") -> StageOutcome:
    return StageOutcome(Status.SKIP, message, detail)


class BaseStage(ABC):
    """
    A stage handler. Subclasses implement `run`; `execute` turns whatever
    happens inside it into exactly one Event.

    A RepairError maps to its class status. Any other exception becomes
    a warn so later, independent stages still run.
    """

    stage: ClassVar[Stage]

    def execute(self, config: RepairConfig, deadline: Deadline) -> Event:
        stage_log = log.bind(stage=self.stage.value)
        try:
            outcome = self.run(config, deadline)
        except RepairError as e:
            stage_log.debug(
                "stage.error", error_type=type(e).__name__, message=e.message
            )
            outcome = StageOutcome(e.status, e.message, e.detail)
        except Exception as e:
            stage_log.exception("stage.unexpected_error")
            outcome = warn(f"unexpected error: {type(e).__name__}", str(e))

        return Event.create(self.stage, outcome.status, outcome.message, outcome.detail)

    @abstractmethod
    def run(self, config: RepairConfig, deadline: Deadline) -> StageOutcome: ...
