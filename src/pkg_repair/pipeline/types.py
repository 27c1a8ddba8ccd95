from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pkg_repair.core import Status, utc_now_rfc3339


class Stage(str, Enum):
    REPO_NETWORK = "repo_network_check"
    DETECT_ENV = "detect_env"
    CLEAR_CACHE = "clear_repo_cache"
    PKG_UPDATE = "pkg_update_force"
    PKG_CHECK = "pkg_check_da"
    PKG_RECOMPUTE = "pkg_check_recompute"
    MOVE_LOCAL_DB = "move_local_sqlite"


# The integrity check runs on both sides of the recompute to catch
# regressions it introduces.
STAGE_ORDER: tuple[Stage, ...] = (
    Stage.REPO_NETWORK,
    Stage.DETECT_ENV,
    Stage.CLEAR_CACHE,
    Stage.PKG_UPDATE,
    Stage.PKG_CHECK,
    Stage.PKG_RECOMPUTE,
    Stage.PKG_CHECK,
    Stage.MOVE_LOCAL_DB,
)


@dataclass(frozen=True, slots=True)
class Event:
    """
    Outcome of one stage execution.
    """

    time: str
    stage: Stage
    status: Status
    message: str
    detail: str = ""

    @classmethod
    def create(
        cls, stage: Stage, status: Status, message: str, detail: str = ""
    ) -> "Event":
        return cls(
            time=utc_now_rfc3339(),
            stage=stage,
            status=status,
            message=message,
            detail=detail,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "time": self.time,
            "stage": self.stage.value,
            "status": self.status.value,
            "message": self.message,
        }
        if self.detail:
            d["detail"] = self.detail
        return d
