from enum import Enum


class Status(str, Enum):
    OK = "ok"
    WARN = "warn"
    SKIP = "skip"
    ERROR = "error"

    @property
    def is_fatal(self) -> bool:
        return self is Status.ERROR
