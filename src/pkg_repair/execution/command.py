from __future__ import annotations

import os
import signal
import subprocess
import threading
from typing import Protocol, Sequence

import structlog

from pkg_repair.core import (
    CommandTimeout,
    Deadline,
    ExternalCommandFailure,
    format_duration_ms,
    monotonic_ms,
)

log = structlog.get_logger(__name__)

# How long to wait for the output pump once the process is gone.
_DRAIN_GRACE_S = 2.0


class Executor(Protocol):
    def run(self, argv: Sequence[str], deadline: Deadline) -> str: ...


class CommandRunner:
    """
    Runs one external command per call, bounded by a deadline.

    stdout and stderr share a single pipe, so captured lines keep the
    order the process wrote them. Returns the captured text on a zero
    exit; otherwise raises ExternalCommandFailure (CommandTimeout on
    expiry) carrying whatever was captured up to that point.

    The child runs in its own process group, and the whole group is
    killed on timeout or interrupt so nothing outlives the call.
    """

    def __init__(self, *, env: dict[str, str] | None = None) -> None:
        self._env = env

    def run(self, argv: Sequence[str], deadline: Deadline) -> str:
        argv = list(argv)
        t0 = monotonic_ms()
        log.debug("command.start", argv=argv, timeout_s=round(deadline.remaining(), 3))

        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                bufsize=1,
                env=self._env,
                start_new_session=True,
            )
        except OSError as e:
            log.debug("command.spawn_failed", argv=argv, error=str(e))
            raise ExternalCommandFailure(
                f"could not start {argv[0]}: {e}", command=argv
            ) from e

        lines: list[str] = []
        pump = threading.Thread(
            target=_pump, args=(proc, lines), name="command-output", daemon=True
        )
        pump.start()

        try:
            returncode = proc.wait(timeout=deadline.remaining())
        except subprocess.TimeoutExpired:
            _kill_group(proc)
            pump.join(_DRAIN_GRACE_S)
            output = "".join(lines)
            duration = monotonic_ms() - t0
            log.debug(
                "command.timeout",
                argv=argv,
                duration=format_duration_ms(duration),
            )
            raise CommandTimeout(
                f"{' '.join(argv)} timed out after {format_duration_ms(duration)}",
                command=argv,
                output=output,
            ) from None
        except BaseException:
            _kill_group(proc)
            pump.join(_DRAIN_GRACE_S)
            raise

        # stray children of the command still hold the group
        _kill_group(proc)
        pump.join(_DRAIN_GRACE_S)
        output = "".join(lines)
        duration = monotonic_ms() - t0
        log.debug(
            "command.finish",
            argv=argv,
            returncode=returncode,
            duration_ms=duration,
            output_chars=len(output),
        )

        if returncode != 0:
            raise ExternalCommandFailure(
                f"{' '.join(argv)} exited with status {returncode}",
                command=argv,
                output=output,
                returncode=returncode,
            )
        return output


def _pump(proc: subprocess.Popen[str], sink: list[str]) -> None:
    assert proc.stdout is not None
    with proc.stdout:
        for line in proc.stdout:
            sink.append(line if line.endswith("\n") else line + "\n")


def _kill_group(proc: subprocess.Popen[str]) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass
    proc.wait()
