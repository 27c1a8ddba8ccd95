from __future__ import annotations

import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_none,
)

from pkg_repair.core import (
    LONG_TAIL,
    SHORT_TAIL,
    Deadline,
    ExternalCommandFailure,
    RepairConfig,
    tail,
)
from pkg_repair.execution import Executor, PkgCommands
from pkg_repair.pipeline.types import Stage

from .base import BaseStage, StageOutcome, ok, skip, warn

log = structlog.get_logger(__name__)

# first attempt, then one retry after bootstrap
_UPDATE_ATTEMPTS = 2


class ForceUpdateStage(BaseStage):
    """
    Forced catalog update. A failed update is followed by a bootstrap
    and exactly one retry; once the first attempt has failed the stage
    reports warn whatever the retry does.
    """

    stage = Stage.PKG_UPDATE

    def __init__(self, executor: Executor, pkg: PkgCommands) -> None:
        self.executor = executor
        self.pkg = pkg

    def run(self, config: RepairConfig, deadline: Deadline) -> StageOutcome:
        if config.dry_run:
            return skip(f"dry run: would run {' '.join(self.pkg.update())}")

        outputs: list[str] = []
        failures: list[ExternalCommandFailure] = []

        def _bootstrap(retry_state: RetryCallState) -> None:
            try:
                self.executor.run(self.pkg.bootstrap(), deadline)
            except ExternalCommandFailure as e:
                log.debug("update.bootstrap_failed", error=e.message)

        retrying = Retrying(
            stop=stop_after_attempt(_UPDATE_ATTEMPTS),
            wait=wait_none(),
            retry=retry_if_exception_type(ExternalCommandFailure),
            before_sleep=_bootstrap,
            reraise=True,
        )

        try:
            for attempt in retrying:
                with attempt:
                    try:
                        outputs.append(self.executor.run(self.pkg.update(), deadline))
                    except ExternalCommandFailure as e:
                        outputs.append(e.output)
                        failures.append(e)
                        raise
        except ExternalCommandFailure as e:
            log.debug("update.retry_failed", error=e.message)

        if not failures:
            return ok("pkg update completed", tail(outputs[0], SHORT_TAIL))
        return warn(
            "pkg update had problems; tried bootstrap and retry",
            tail("\n".join(outputs), LONG_TAIL),
        )
