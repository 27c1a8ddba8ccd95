from __future__ import annotations

from typing import ClassVar, Sequence

from .status import Status


class RepairError(RuntimeError):
    """
    Base error for stage actions.

    `status` is the Status a stage reports when this error ends its action.
    """

    status: ClassVar[Status] = Status.WARN

    def __init__(self, message: str, *, detail: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class PrivilegeError(RepairError):
    """Not running with root privileges. Ends the run."""

    status = Status.ERROR


class NetworkUnreachable(RepairError):
    """One or more repositories failed the reachability probe"""


class ConfigParseIncomplete(RepairError):
    """No repository URLs could be parsed from the tool's configuration"""


class FilesystemError(RepairError):
    """Enumerating, deleting or renaming database files failed"""


class ExternalCommandFailure(RepairError):
    """
    The package-manager command exited nonzero or could not be spawned.

    `output` holds whatever was captured before the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        output: str = "",
        returncode: int | None = None,
    ) -> None:
        super().__init__(message, detail=output)
        self.command = tuple(command)
        self.output = output
        self.returncode = returncode


class CommandTimeout(ExternalCommandFailure):
    """The stage deadline expired while the command was running"""
