from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .config import Settings


@dataclass(frozen=True, slots=True)
class DatabaseLayout:
    """
    Files the repair stages touch inside the package database directory:

      {root}/{cache_glob}                    repository catalogs
      {root}/{local_db_name}                 local package database
      {root}/{local_db_name}{backup_suffix}  rename-aside target
    """

    root: Path
    cache_glob: str = "repo-*.sqlite*"
    local_db_name: str = "local.sqlite"
    backup_suffix: str = ".bak"

    @classmethod
    def from_settings(cls, s: Settings) -> "DatabaseLayout":
        return cls(
            root=Path(s.db_dir),
            cache_glob=s.cache_glob,
            local_db_name=s.local_db_name,
            backup_suffix=s.backup_suffix,
        )

    def cache_pattern(self) -> str:
        return str(self.root / self.cache_glob)

    def cache_files(self) -> list[Path]:
        """
        Repository catalogs currently on disk, sorted.

        A missing directory holds no catalogs. Raises OSError when an
        existing directory cannot be listed.
        """
        # Path.glob hides permission errors, so list the directory first.
        try:
            with os.scandir(self.root):
                pass
        except FileNotFoundError:
            return []
        return sorted(p for p in self.root.glob(self.cache_glob) if p.is_file())

    def local_db(self) -> Path:
        return self.root / self.local_db_name

    def local_db_backup(self) -> Path:
        return self.root / f"{self.local_db_name}{self.backup_suffix}"
