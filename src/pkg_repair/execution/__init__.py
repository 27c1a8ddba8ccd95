from .command import CommandRunner, Executor
from .pkg import PkgCommands

__all__ = ["CommandRunner", "Executor", "PkgCommands"]
