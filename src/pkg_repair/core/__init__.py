from .config import DEFAULT_TIMEOUT, RepairConfig, Settings, load_settings
from .errors import (
    CommandTimeout,
    ConfigParseIncomplete,
    ExternalCommandFailure,
    FilesystemError,
    NetworkUnreachable,
    PrivilegeError,
    RepairError,
)
from .fs import atomic_write_text, safe_unlink
from .logging import bind, configure_logging, get_logger
from .paths import DatabaseLayout
from .status import Status
from .text import LONG_TAIL, SHORT_TAIL, indent, tail
from .time import (
    Deadline,
    format_duration_ms,
    monotonic_ms,
    parse_duration,
    utc_now_rfc3339,
)

__all__ = [
    "DEFAULT_TIMEOUT",
    "RepairConfig",
    "Settings",
    "load_settings",
    "CommandTimeout",
    "ConfigParseIncomplete",
    "ExternalCommandFailure",
    "FilesystemError",
    "NetworkUnreachable",
    "PrivilegeError",
    "RepairError",
    "atomic_write_text",
    "safe_unlink",
    "bind",
    "configure_logging",
    "get_logger",
    "DatabaseLayout",
    "Status",
    "LONG_TAIL",
    "SHORT_TAIL",
    "indent",
    "tail",
    "Deadline",
    "format_duration_ms",
    "monotonic_ms",
    "parse_duration",
    "utc_now_rfc3339",
]
