from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from pkg_repair.core import Status
from pkg_repair.pipeline.types import Stage

APP_TITLE = "ppr · pkg repair"

_BLUE = "#003366"
_GREEN = "#10b981"
_YELLOW = "#f59e0b"
_RED = "#ef4444"
_MUTED = "#6b7280"


@dataclass(frozen=True, slots=True)
class Theme:
    """
    Labels and styles for the progress display. Built once, passed to
    the renderer.
    """

    title: str
    labels: tuple[str, ...]
    title_style: str
    label_style: str
    detail_style: str
    spinner: str
    spinner_style: str
    status_styles: Mapping[Status, str]
    status_icons: Mapping[Status, str]
    stage_labels: Mapping[Stage, str]
    success_text: str = "Completed successfully. Run `pkg -vv` to confirm repos."
    failure_text: str = "Finished with errors."
    interrupted_text: str = "Interrupted."
    unknown_icon: str = "[ ]"

    def icon(self, status: Status) -> str:
        return self.status_icons.get(status, self.unknown_icon)

    def style(self, status: Status) -> str:
        return self.status_styles.get(status, "")

    def label(self, stage: Stage) -> str:
        return self.stage_labels.get(stage, stage.value)


def default_theme() -> Theme:
    return Theme(
        title=APP_TITLE,
        labels=(
            "Repairs the local package catalog and database",
            "Licensed under the BSD 2-Clause License",
        ),
        title_style=f"bold {_BLUE}",
        label_style=_MUTED,
        detail_style=_MUTED,
        spinner="dots",
        spinner_style=_BLUE,
        status_styles=MappingProxyType(
            {
                Status.OK: _GREEN,
                Status.WARN: _YELLOW,
                Status.SKIP: _MUTED,
                Status.ERROR: f"bold {_RED}",
            }
        ),
        status_icons=MappingProxyType(
            {
                Status.OK: "[✓]",
                Status.WARN: "[!]",
                Status.SKIP: "[...]",
                Status.ERROR: "[x]",
            }
        ),
        stage_labels=MappingProxyType(
            {
                Stage.REPO_NETWORK: "Check repository network",
                Stage.DETECT_ENV: "Detect environment",
                Stage.CLEAR_CACHE: "Clear repo cache",
                Stage.PKG_UPDATE: "Force pkg update",
                Stage.PKG_CHECK: "Verify package DB",
                Stage.PKG_RECOMPUTE: "Recompute package metadata",
                Stage.MOVE_LOCAL_DB: "Last resort: move local.sqlite",
            }
        ),
    )
