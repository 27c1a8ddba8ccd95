from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Callable

import httpx
import structlog

from pkg_repair.core import (
    ConfigParseIncomplete,
    Deadline,
    ExternalCommandFailure,
    RepairError,
)
from pkg_repair.execution import Executor, PkgCommands

from .repos import parse_repo_urls

log = structlog.get_logger(__name__)

CONNECT_TIMEOUT_S = 5.0
HTTP_TIMEOUT_S = 6.0
META_PATH = "meta.conf"

PASS_MARK = "[✓]"
FAIL_MARK = "[x]"

ConnectFn = Callable[[tuple[str, int], float], socket.socket]
ClientFactory = Callable[[float], httpx.Client]


def make_probe_client(timeout: float) -> httpx.Client:
    return httpx.Client(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers={"User-Agent": "pkg-repair/0.1"},
    )


def _default_connect(address: tuple[str, int], timeout: float) -> socket.socket:
    return socket.create_connection(address, timeout=timeout)


@dataclass(frozen=True, slots=True)
class RepoOutcome:
    url: str
    reachable: bool
    info: str

    def line(self) -> str:
        mark = PASS_MARK if self.reachable else FAIL_MARK
        return f"{mark} {self.url} ({self.info})"


@dataclass(frozen=True, slots=True)
class ProbeSummary:
    message: str
    detail: str
    ok: bool


def meta_url(url: str) -> str:
    return f"{url.rstrip('/')}/{META_PATH}"


class RepoProber:
    """
    Best-effort liveness check of every configured repository.

    Each URL gets a TCP connect to its host, then a GET of meta.conf.
    Per-URL failures are recorded, never raised.
    """

    def __init__(
        self,
        *,
        executor: Executor,
        pkg: PkgCommands,
        connect: ConnectFn | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.executor = executor
        self.pkg = pkg
        self._connect = connect or _default_connect
        self._client_factory = client_factory or make_probe_client

    def discover(self, deadline: Deadline) -> list[str]:
        """
        Ask the package manager for its ABI and configuration and return
        the repository URLs it declares.
        """
        try:
            abi = self.executor.run(self.pkg.abi(), deadline).strip()
        except ExternalCommandFailure as e:
            # URLs without the placeholder are still usable
            log.debug("probe.abi_failed", error=e.message)
            abi = ""

        try:
            dump = self.executor.run(self.pkg.dump_config(), deadline)
        except ExternalCommandFailure as e:
            raise ExternalCommandFailure(
                f"could not run {' '.join(self.pkg.dump_config())}",
                command=e.command,
                output=f"{e.output}\n{e.message}".strip(),
                returncode=e.returncode,
            ) from e

        urls = parse_repo_urls(dump, abi)
        if not urls:
            raise ConfigParseIncomplete(
                "could not detect repository URLs",
                detail=f"no url entries parsed from {' '.join(self.pkg.dump_config())} output",
            )
        log.debug("probe.urls", abi=abi, urls=urls)
        return urls

    def probe(self, url: str, deadline: Deadline) -> RepoOutcome:
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            return RepoOutcome(url, False, f"parse error: {e}")
        if not parsed.host:
            return RepoOutcome(url, False, "parse error: missing host")

        port = parsed.port or (443 if parsed.scheme == "https" else 80)

        connect_timeout = deadline.cap(CONNECT_TIMEOUT_S)
        if connect_timeout <= 0:
            return RepoOutcome(url, False, "tcp connect skipped: deadline exceeded")
        try:
            conn = self._connect((parsed.host, port), connect_timeout)
        except (OSError, ValueError) as e:
            # ValueError covers idna failures on hosts with empty or oversized labels
            return RepoOutcome(url, False, f"tcp connect failed: {e}")
        conn.close()

        http_timeout = deadline.cap(HTTP_TIMEOUT_S)
        if http_timeout <= 0:
            return RepoOutcome(url, False, f"GET /{META_PATH} skipped: deadline exceeded")
        try:
            with self._client_factory(http_timeout) as client:
                resp = client.get(meta_url(url))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return RepoOutcome(url, False, f"GET /{META_PATH} failed: {e}")

        if 200 <= resp.status_code < 400:
            return RepoOutcome(url, True, "ok")
        return RepoOutcome(url, False, f"GET /{META_PATH} status {resp.status_code}")

    def probe_all(self, deadline: Deadline) -> ProbeSummary:
        try:
            urls = self.discover(deadline)
        except RepairError as e:
            return ProbeSummary(e.message, e.detail, False)

        outcomes = [self.probe(u, deadline) for u in urls]
        for o in outcomes:
            log.debug("probe.result", url=o.url, reachable=o.reachable, info=o.info)

        detail = "\n".join(o.line() for o in outcomes)
        if all(o.reachable for o in outcomes):
            return ProbeSummary("repository network reachable", detail, True)
        return ProbeSummary("some repositories are unreachable", detail, False)
