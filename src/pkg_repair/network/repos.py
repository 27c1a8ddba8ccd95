from __future__ import annotations

from typing import Iterable

ABI_PLACEHOLDER = "${ABI}"

_SCHEME_REWRITES = (
    ("pkg+http://", "http://"),
    ("pkg+https://", "https://"),
)


def normalize_repo_url(value: str, abi: str) -> str:
    """
    Clean one `url` value from the package-manager configuration dump.

    Strips whitespace, trailing commas and quotes, rewrites the pkg+
    transport prefix to plain http(s) and substitutes the ABI placeholder.
    """
    u = value.strip().rstrip(",").strip("\"'").strip()
    for prefix, replacement in _SCHEME_REWRITES:
        if u.startswith(prefix):
            u = replacement + u[len(prefix) :]
            break
    return u.replace(ABI_PLACEHOLDER, abi)


def parse_repo_urls(dump: str | Iterable[str], abi: str) -> list[str]:
    """
    Repository URLs declared in a verbose configuration dump, in order.

    A declaration is any line whose stripped form starts with `url`;
    the value is everything after the first colon. Lines without a
    colon or with an empty value are skipped.
    """
    lines = dump.splitlines() if isinstance(dump, str) else dump
    urls: list[str] = []
    for raw in lines:
        line = raw.strip()
        if not line.startswith("url"):
            continue
        _, sep, value = line.partition(":")
        if not sep:
            continue
        u = normalize_repo_url(value, abi)
        if u:
            urls.append(u)
    return urls
