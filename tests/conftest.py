from __future__ import annotations

from typing import Sequence

import pytest

from pkg_repair.core import Deadline, ExternalCommandFailure


class FakeExecutor:
    """
    Scripted stand-in for CommandRunner.

    `script` maps an argv tuple to the results of successive calls: a str
    is returned, an int is raised as a nonzero exit with no output, and a
    (returncode, output) tuple is raised with that output. Unscripted
    commands succeed with empty output.
    """

    def __init__(self, script: dict[tuple[str, ...], list[object]] | None = None) -> None:
        self.script = {k: list(v) for k, v in (script or {}).items()}
        self.calls: list[tuple[str, ...]] = []

    def run(self, argv: Sequence[str], deadline: Deadline) -> str:
        key = tuple(argv)
        self.calls.append(key)
        results = self.script.get(key)
        if not results:
            return ""
        result = results.pop(0)
        if isinstance(result, str):
            return result
        if isinstance(result, int):
            result = (result, "")
        code, output = result  # type: ignore[misc]
        raise ExternalCommandFailure(
            f"{' '.join(key)} exited with status {code}",
            command=key,
            output=str(output),
            returncode=int(code),
        )

    def count(self, *argv: str) -> int:
        return self.calls.count(tuple(argv))


@pytest.fixture
def deadline() -> Deadline:
    return Deadline.after(60)


@pytest.fixture
def make_executor():
    return FakeExecutor
