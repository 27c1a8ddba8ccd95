from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogFormat = Literal["json", "console"]

DEFAULT_TIMEOUT = timedelta(minutes=20)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PKG_REPAIR_",
        env_file=".env",
        extra="ignore",
    )

    pkg_bin: str = Field(default="pkg")
    db_dir: Path = Field(default=Path("/var/db/pkg"))
    cache_glob: str = Field(default="repo-*.sqlite*")
    local_db_name: str = Field(default="local.sqlite")
    backup_suffix: str = Field(default=".bak")
    log_level: str = Field(default="WARNING")
    log_format: LogFormat = Field(default="console")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return Settings()


@dataclass(frozen=True, slots=True)
class RepairConfig:
    """
    Options for a single repair run. Built once by the CLI.

    `timeout` is applied per stage, not to the run as a whole.
    """

    dry_run: bool = False
    compact: bool = False
    report_path: Path | None = None
    timeout: timedelta = DEFAULT_TIMEOUT

    def to_dict(self) -> dict[str, object]:
        return {
            "dry_run": self.dry_run,
            "compact": self.compact,
            "report_path": str(self.report_path) if self.report_path else None,
            "timeout_s": self.timeout.total_seconds(),
        }
