from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Union

from .config import UNIX, UNIX_NANO

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_time(now_ns: int, fmt: str) -> Union[str, int]:
    """Render the time field: integer epoch seconds/nanoseconds or a UTC strftime string."""
    if fmt == UNIX:
        return now_ns // 1_000_000_000
    if fmt == UNIX_NANO:
        return now_ns
    # Built from integer microseconds to avoid float rounding on %f.
    return (_EPOCH + timedelta(microseconds=now_ns // 1_000)).strftime(fmt)


def usable_time_format(fmt: str) -> bool:
    """False for patterns strftime can't render faithfully (NUL truncates, surrogates raise)."""
    if fmt in (UNIX, UNIX_NANO):
        return True
    if "\x00" in fmt:
        return False
    try:
        format_time(0, fmt).encode("utf-8")
    except (ValueError, TypeError):
        return False
    return True
