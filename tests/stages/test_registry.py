from __future__ import annotations

from pathlib import Path

from pkg_repair.core import DatabaseLayout, Deadline, RepairConfig, Status
from pkg_repair.execution import PkgCommands
from pkg_repair.network import RepoProber
from pkg_repair.pipeline import STAGE_ORDER, Stage
from pkg_repair.stages import BaseStage, RepoNetworkStage, StageDeps, build_stages
from pkg_repair.stages.base import StageOutcome


def test_registry_follows_stage_order(tmp_path: Path, make_executor) -> None:
    ex = make_executor()
    pkg = PkgCommands()
    deps = StageDeps(
        executor=ex,
        pkg=pkg,
        layout=DatabaseLayout(root=tmp_path),
        prober=RepoProber(executor=ex, pkg=pkg),
        geteuid=lambda: 0,
    )
    handlers = build_stages(deps)

    assert len(handlers) == 8
    assert [h.stage for h in handlers] == list(STAGE_ORDER)
    assert [h.stage for h in handlers].count(Stage.PKG_CHECK) == 2
    assert handlers[4] is handlers[6]


def test_unexpected_exception_becomes_warn(deadline: Deadline) -> None:
    class Broken(BaseStage):
        stage = Stage.CLEAR_CACHE

        def run(self, config: RepairConfig, deadline: Deadline) -> StageOutcome:
            raise KeyError("boom")

    ev = Broken().execute(RepairConfig(), deadline)
    assert ev.status is Status.WARN
    assert ev.message == "unexpected error: KeyError"


def test_network_stage_warns_when_unreachable(make_executor, deadline) -> None:
    ex = make_executor({("pkg", "-vv"): ["nothing useful\n"]})
    ev = RepoNetworkStage(RepoProber(executor=ex, pkg=PkgCommands())).execute(
        RepairConfig(), deadline
    )
    assert ev.stage is Stage.REPO_NETWORK
    assert ev.status is Status.WARN
    assert ev.message == "could not detect repository URLs"
