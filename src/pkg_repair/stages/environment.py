from __future__ import annotations

import os
from typing import Callable

from pkg_repair.core import Deadline, PrivilegeError, RepairConfig
from pkg_repair.pipeline.types import Stage

from .base import BaseStage, StageOutcome, ok


class DetectEnvStage(BaseStage):
    stage = Stage.DETECT_ENV

    def __init__(self, geteuid: Callable[[], int] | None = None) -> None:
        self._geteuid = geteuid or os.geteuid

    def run(self, config: RepairConfig, deadline: Deadline) -> StageOutcome:
        uid = self._geteuid()
        if uid != 0:
            raise PrivilegeError("must run as root", detail=f"effective uid is {uid}")
        return ok("running as root")
