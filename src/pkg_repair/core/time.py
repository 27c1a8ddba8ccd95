from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

_DURATION_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def utc_now_rfc3339() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


def format_duration_ms(ms: int) -> str:
    """Return a short human-readable duration string."""
    if ms < 1000:
        return f"{ms} ms"
    return f"{ms / 1000:.2f} s"


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration such as "20m", "1h30m", "90s" or "500ms".

    A bare "0" is accepted. Raises ValueError on anything else.
    """
    s = text.strip()
    if s == "0":
        return timedelta(0)
    if not s:
        raise ValueError("empty duration")

    pos = 0
    total = 0.0
    for m in _DURATION_RE.finditer(s):
        if m.start() != pos:
            break
        total += float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()

    if pos != len(s):
        raise ValueError(f"invalid duration {text!r}")
    return timedelta(seconds=total)


@dataclass(frozen=True, slots=True)
class Deadline:
    """
    A point on the monotonic clock after which work should stop.
    """

    expires_at: float

    @classmethod
    def after(cls, duration: timedelta | float) -> "Deadline":
        seconds = (
            duration.total_seconds() if isinstance(duration, timedelta) else duration
        )
        return cls(expires_at=time.monotonic() + float(seconds))

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def cap(self, seconds: float) -> float:
        """Bound a fixed timeout by the time left."""
        return min(float(seconds), self.remaining())
