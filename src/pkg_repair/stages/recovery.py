from __future__ import annotations

import os

import structlog

from pkg_repair.core import (
    DatabaseLayout,
    Deadline,
    ExternalCommandFailure,
    FilesystemError,
    RepairConfig,
)
from pkg_repair.execution import Executor, PkgCommands
from pkg_repair.pipeline.types import Stage

from .base import BaseStage, StageOutcome, ok, skip

log = structlog.get_logger(__name__)


class MoveLocalDbStage(BaseStage):
    """
    Last resort: move the local database aside, then rebuild it with a
    forced update and an integrity check. The follow-up commands are
    best effort and do not change the reported status.
    """

    stage = Stage.MOVE_LOCAL_DB

    def __init__(
        self, executor: Executor, pkg: PkgCommands, layout: DatabaseLayout
    ) -> None:
        self.executor = executor
        self.pkg = pkg
        self.layout = layout

    def run(self, config: RepairConfig, deadline: Deadline) -> StageOutcome:
        src = self.layout.local_db()
        dst = self.layout.local_db_backup()

        if not src.exists():
            return ok("no local database found", "database already in a clean state")

        if config.dry_run:
            return skip(f"dry run: would move {src.name} aside", f"{src} -> {dst}")

        try:
            os.rename(src, dst)
        except OSError as e:
            raise FilesystemError(f"could not move {src.name}", detail=str(e)) from e

        for argv in (self.pkg.update(), self.pkg.check_all()):
            try:
                self.executor.run(argv, deadline)
            except ExternalCommandFailure as e:
                log.debug("recovery.followup_failed", argv=argv, error=e.message)

        return ok(f"moved {src.name} aside", f"{src} -> {dst}")
