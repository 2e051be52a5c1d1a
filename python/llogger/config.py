# Emitter configuration: typed fields plus the reserved "llogger-*" key parser.

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Tuple

UNIX = "Unix"
UNIX_NANO = "UnixNano"
DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

# reserved key -> Config attribute
RESERVED_KEYS: Dict[str, str] = {
    "llogger-tfn": "time_field",
    "llogger-llfn": "level_field",
    "llogger-mfn": "message_field",
    "llogger-dfn": "duration_field",
    "llogger-tlfn": "time_left_field",
    "llogger-rfn": "resource_field",
    "llogger-wm": "warning_label",
    "llogger-cm": "critical_label",
    "llogger-tf": "time_format",
    "llogger-prefix": "prefix",
    "llogger-suffix": "suffix",
}

# Empty strings are meaningful only for prefix/suffix.
_ALLOW_EMPTY = {"prefix", "suffix"}


@dataclass(frozen=True)
class Config:
    """Field names, level labels, time format and line decoration for an Emitter."""

    time_field: str = "time"
    level_field: str = "loglevel"
    message_field: str = "message"
    duration_field: str = "duration"
    time_left_field: str = "timeLeft"
    resource_field: str = "resource"
    warning_label: str = "warning"
    critical_label: str = "error"
    time_format: str = DEFAULT_TIME_FORMAT
    prefix: str = ""
    suffix: str = ""
    # When set, records carry OpenTelemetry trace/span ids under this key.
    trace_field: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: Optional[Mapping[str, Any]],
                    base: Optional["Config"] = None) -> Tuple["Config", Dict[str, Any]]:
        """Split reserved ``llogger-*`` keys out of a bag of fields.

        Returns the resulting config and a new dict with the remaining
        fields. The input mapping is left untouched. Reserved keys whose value
        is not a usable string are dropped and the default is kept.
        """
        cfg = base or cls()
        rest: Dict[str, Any] = {}
        overrides: Dict[str, str] = {}
        for key, value in (fields or {}).items():
            attr = RESERVED_KEYS.get(key) if isinstance(key, str) else None
            if attr is None:
                rest[key] = value
                continue
            if isinstance(value, str) and (value or attr in _ALLOW_EMPTY):
                overrides[attr] = value
        if overrides:
            cfg = replace(cfg, **overrides)
        return cfg, rest
