SHORT_TAIL = 200
LONG_TAIL = 300


def tail(s: str, limit: int) -> str:
    """Keep the last `limit` characters of `s`."""
    if len(s) <= limit:
        return s
    return s[len(s) - limit :]


def indent(s: str, prefix: str = "    ") -> str:
    lines = s.rstrip("\n").split("\n")
    return "\n".join(prefix + line for line in lines)
