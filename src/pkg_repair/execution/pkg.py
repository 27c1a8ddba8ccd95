from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PkgCommands:
    """
    Argument vectors for the package-manager subcommands the stages run.
    """

    bin: str = "pkg"

    def abi(self) -> list[str]:
        return [self.bin, "config", "ABI"]

    def dump_config(self) -> list[str]:
        return [self.bin, "-vv"]

    def update(self) -> list[str]:
        return [self.bin, "update", "-f"]

    def bootstrap(self) -> list[str]:
        return [self.bin, "bootstrap", "-f"]

    def check_all(self) -> list[str]:
        return [self.bin, "check", "-da"]

    def recompute(self) -> list[str]:
        return [self.bin, "check", "-r", "-a"]
