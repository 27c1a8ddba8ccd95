from __future__ import annotations

import structlog

from pkg_repair.core import DatabaseLayout, Deadline, FilesystemError, RepairConfig
from pkg_repair.pipeline.types import Stage

from .base import BaseStage, StageOutcome, ok, skip

log = structlog.get_logger(__name__)


class ClearCacheStage(BaseStage):
    stage = Stage.CLEAR_CACHE

    def __init__(self, layout: DatabaseLayout) -> None:
        self.layout = layout

    def run(self, config: RepairConfig, deadline: Deadline) -> StageOutcome:
        try:
            paths = self.layout.cache_files()
        except OSError as e:
            raise FilesystemError(
                f"could not scan {self.layout.root}", detail=str(e)
            ) from e

        if not paths:
            return ok(
                "repo cache already clean",
                f"checked {self.layout.root} for {self.layout.cache_glob}",
            )

        listing = "\n".join(str(p) for p in paths)
        if config.dry_run:
            return skip(f"dry run: would remove {len(paths)} cached catalog(s)", listing)

        failed: list[str] = []
        for p in paths:
            try:
                p.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                log.debug("cache.unlink_failed", path=str(p), error=str(e))
                failed.append(f"{p}: {e}")

        if failed:
            raise FilesystemError(
                f"could not remove {len(failed)} cached catalog(s)",
                detail="\n".join(failed),
            )
        return ok("removed cached repo catalogs", listing)
