from __future__ import annotations

from pkg_repair.core import Deadline, NetworkUnreachable, RepairConfig
from pkg_repair.network import RepoProber
from pkg_repair.pipeline.types import Stage

from .base import BaseStage, StageOutcome, ok


class RepoNetworkStage(BaseStage):
    """Read-only; runs the same way in a dry run."""

    stage = Stage.REPO_NETWORK

    def __init__(self, prober: RepoProber) -> None:
        self.prober = prober

    def run(self, config: RepairConfig, deadline: Deadline) -> StageOutcome:
        summary = self.prober.probe_all(deadline)
        if not summary.ok:
            raise NetworkUnreachable(summary.message, detail=summary.detail)
        return ok(summary.message, summary.detail)
