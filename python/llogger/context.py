# Deadline-bearing execution contexts.
#
# The emitter only needs one question answered: "when must this invocation
# finish?". Contexts may answer it through a ``deadline()`` method or, like the
# AWS Lambda context object, through ``get_remaining_time_in_millis()``.

from __future__ import annotations
import math, time
from datetime import datetime, timezone
from typing import Any, Optional, Protocol


class DeadlineContext(Protocol):
    def deadline(self) -> Optional[datetime]: ...


class Deadline:
    """Context with a fixed absolute deadline."""

    def __init__(self, at: datetime):
        self._at = at

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(datetime.fromtimestamp(time.time() + seconds, tz=timezone.utc))

    def deadline(self) -> Optional[datetime]:
        return self._at


class Background:
    """Context that carries no deadline."""

    def deadline(self) -> Optional[datetime]:
        return None


def to_ns(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000


def resolve_deadline(context: Any, now_ns: int) -> Optional[int]:
    """Return the context's deadline in ns since epoch, or None if it has none."""
    if context is None:
        return None

    # A context that fails to answer is treated as one without a deadline.
    get_deadline = getattr(context, "deadline", None)
    if callable(get_deadline):
        try:
            dt = get_deadline()
        except Exception:
            return None
        if isinstance(dt, datetime):
            return to_ns(dt)
        return None

    remaining = getattr(context, "get_remaining_time_in_millis", None)
    if callable(remaining):
        try:
            ms = remaining()
        except Exception:
            return None
        if isinstance(ms, (int, float)) and not isinstance(ms, bool) and math.isfinite(ms):
            return now_ns + int(ms * 1_000_000)
    return None
