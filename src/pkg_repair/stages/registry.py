from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from pkg_repair.core import DatabaseLayout
from pkg_repair.execution import Executor, PkgCommands
from pkg_repair.network import RepoProber
from pkg_repair.pipeline.stage import StageHandler
from pkg_repair.pipeline.types import STAGE_ORDER, Stage

from .cache import ClearCacheStage
from .checks import RecomputeStage, VerifyDbStage
from .environment import DetectEnvStage
from .network import RepoNetworkStage
from .recovery import MoveLocalDbStage
from .update import ForceUpdateStage


@dataclass(frozen=True, slots=True)
class StageDeps:
    executor: Executor
    pkg: PkgCommands
    layout: DatabaseLayout
    prober: RepoProber
    geteuid: Callable[[], int] | None = None


def build_stages(deps: StageDeps) -> tuple[StageHandler, ...]:
    """
    Handlers in run order. The same verify handler fills both of its
    slots.
    """
    verify = VerifyDbStage(deps.executor, deps.pkg)
    by_stage: dict[Stage, StageHandler] = {
        h.stage: h
        for h in (
            RepoNetworkStage(deps.prober),
            DetectEnvStage(deps.geteuid),
            ClearCacheStage(deps.layout),
            ForceUpdateStage(deps.executor, deps.pkg),
            verify,
            RecomputeStage(deps.executor, deps.pkg),
            MoveLocalDbStage(deps.executor, deps.pkg, deps.layout),
        )
    }
    return tuple(by_stage[s] for s in STAGE_ORDER)
