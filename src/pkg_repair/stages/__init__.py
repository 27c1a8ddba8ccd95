from .base import BaseStage, StageOutcome
from .cache import ClearCacheStage
from .checks import PkgCommandStage, RecomputeStage, VerifyDbStage
from .environment import DetectEnvStage
from .network import RepoNetworkStage
from .recovery import MoveLocalDbStage
from .registry import StageDeps, build_stages
from .update import ForceUpdateStage

__all__ = [
    "BaseStage",
    "StageOutcome",
    "ClearCacheStage",
    "PkgCommandStage",
    "RecomputeStage",
    "VerifyDbStage",
    "DetectEnvStage",
    "RepoNetworkStage",
    "MoveLocalDbStage",
    "StageDeps",
    "build_stages",
    "ForceUpdateStage",
]
