from __future__ import annotations

from abc import abstractmethod

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


class PkgCommandStage(BaseStage):
    """
    Runs a single package-manager command: ok on a clean exit, warn with
    the tail of its output otherwise.
    """

    ok_message: str
    warn_message: str
    read_only: bool = False

    def __init__(self, executor: Executor, pkg: PkgCommands) -> None:
        self.executor = executor
        self.pkg = pkg

    @abstractmethod
    def command(self) -> list[str]: ...

    def run(self, config: RepairConfig, deadline: Deadline) -> StageOutcome:
        argv = self.command()
        if config.dry_run and not self.read_only:
            return skip(f"dry run: would run {' '.join(argv)}")

        try:
            out = self.executor.run(argv, deadline)
        except ExternalCommandFailure as e:
            return warn(self.warn_message, tail(f"{e.output}\n{e.message}", LONG_TAIL))
        return ok(self.ok_message, tail(out, SHORT_TAIL))


class VerifyDbStage(PkgCommandStage):
    stage = Stage.PKG_CHECK
    ok_message = "local package database looks consistent"
    warn_message = "integrity issues detected"
    read_only = True

    def command(self) -> list[str]:
        return self.pkg.check_all()


class RecomputeStage(PkgCommandStage):
    stage = Stage.PKG_RECOMPUTE
    ok_message = "recomputed package metadata"
    warn_message = "recompute reported problems"

    def command(self) -> list[str]:
        return self.pkg.recompute()
