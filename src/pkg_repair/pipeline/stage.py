from __future__ import annotations

from typing import Protocol

from pkg_repair.core import Deadline, RepairConfig

from .types import Event, Stage


class StageHandler(Protocol):
    stage: Stage

    def execute(self, config: RepairConfig, deadline: Deadline) -> Event: ...
