# JSON line emitter for serverless request handlers.
#
# One Emitter per invocation: it remembers when the invocation started and
# when it must finish, and prints every record as a single JSON line on stdout
# with timing and caller metadata attached.

from __future__ import annotations
import json, sys, threading, time
from dataclasses import replace
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, TextIO

from opentelemetry import trace

from .config import DEFAULT_TIME_FORMAT, Config
from .context import resolve_deadline
from .timefmt import format_time, usable_time_format

MISSING_DEADLINE_MSG = "Couldn't get Deadline from context"
MARSHAL_FAILED_MSG = "Couldn't JSON marshal the error message"

_ENCODE_ERRORS = (TypeError, ValueError, OverflowError, RecursionError)

# Serializes write+flush so lines from different threads never interleave.
_lock = threading.Lock()


class Logger(Protocol):
    def print(self, fields: Optional[Mapping[str, Any]] = None) -> None: ...
    def debug(self, msg: str, **kv: Any) -> None: ...
    def info(self, msg: str, **kv: Any) -> None: ...
    def warn(self, msg: str, **kv: Any) -> None: ...
    def error(self, msg: str, **kv: Any) -> None: ...


class NopLogger:
    def print(self, fields: Optional[Mapping[str, Any]] = None) -> None: pass
    def debug(self, msg: str, **kv: Any) -> None: pass
    def info(self, msg: str, **kv: Any) -> None: pass
    def warn(self, msg: str, **kv: Any) -> None: pass
    def error(self, msg: str, **kv: Any) -> None: pass


def _encode(rec: Dict[str, Any], ascii_only: bool = False) -> str:
    raw = json.dumps(rec, separators=(",", ":"), ensure_ascii=ascii_only, allow_nan=False)
    # Lone surrogates pass json.dumps but fail on a UTF-8 stream.
    raw.encode("utf-8")
    return raw


def _utf8(text: str) -> bool:
    try:
        text.encode("utf-8")
    except (UnicodeEncodeError, AttributeError):
        return False
    return True


def _caller(depth: int) -> Dict[str, Any]:
    # depth counts frames above the function calling _caller.
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return {"function": "", "file": "", "row": 0}
    code = frame.f_code
    name = getattr(code, "co_qualname", code.co_name)
    module = frame.f_globals.get("__name__")
    return {
        "function": f"{module}.{name}" if module else name,
        "file": code.co_filename,
        "row": frame.f_lineno,
    }


def _trace_ids() -> Optional[Dict[str, str]]:
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return None
    return {"trace_id": format(ctx.trace_id, "032x"), "span_id": format(ctx.span_id, "016x")}


class Emitter:
    """Prints structured JSON records for one serverless invocation.

    ``context`` is the platform's execution context (or ``None``). When it
    carries a deadline every record gets ``duration`` and ``timeLeft`` in
    seconds. ``fields`` are default fields added to every record; the mapping
    is copied. ``clock`` returns nanoseconds since the epoch.
    """

    def __init__(
        self,
        context: Any = None,
        fields: Optional[Mapping[str, Any]] = None,
        config: Optional[Config] = None,
        *,
        stream: Optional[TextIO] = None,
        clock: Callable[[], int] = time.time_ns,
        stacklevel: int = 1,
    ) -> None:
        cfg = config or Config()
        if not isinstance(cfg.time_format, str) or not usable_time_format(cfg.time_format):
            cfg = replace(cfg, time_format=DEFAULT_TIME_FORMAT)
        if not _utf8(cfg.prefix) or not _utf8(cfg.suffix):
            cfg = replace(cfg, prefix="", suffix="")
        self.config = cfg
        self._fields: Dict[str, Any] = dict(fields or {})
        self._stream = stream
        self._clock = clock
        self.start: int = clock()
        self.deadline: Optional[int] = None

        if context is None:
            return

        self.deadline = resolve_deadline(context, self.start)
        if self.deadline is None:
            cfg = self.config
            self._emit(
                {cfg.level_field: cfg.critical_label, cfg.message_field: MISSING_DEADLINE_MSG},
                stacklevel + 1,
            )

    def print(self, fields: Optional[Mapping[str, Any]] = None) -> None:
        """Print ``fields`` merged over the default fields as one JSON line.

        Never raises. If the record can't be encoded a fixed error record is
        printed in its place.
        """
        self._emit(fields, 2)

    def debug(self, msg: str, **kv: Any) -> None: self._emit(self._leveled("debug", msg, kv), 2)
    def info(self, msg: str, **kv: Any) -> None: self._emit(self._leveled("info", msg, kv), 2)
    def warn(self, msg: str, **kv: Any) -> None: self._emit(self._leveled(self.config.warning_label, msg, kv), 2)
    def error(self, msg: str, **kv: Any) -> None: self._emit(self._leveled(self.config.critical_label, msg, kv), 2)

    def _leveled(self, level: str, msg: str, kv: Dict[str, Any]) -> Dict[str, Any]:
        rec = {self.config.level_field: level, self.config.message_field: msg}
        rec.update(kv)
        return rec

    def _build(self, now: int, fields: Optional[Mapping[str, Any]], defaults: bool = True) -> Dict[str, Any]:
        cfg = self.config
        out: Dict[str, Any] = {cfg.time_field: format_time(now, cfg.time_format)}
        if defaults:
            out.update(self._fields)
        if fields:
            out.update(fields)
        if self.deadline is not None:
            out[cfg.duration_field] = (now - self.start) / 1e9
            out[cfg.time_left_field] = (self.deadline - now) / 1e9
        if cfg.trace_field:
            ids = _trace_ids()
            if ids is not None:
                out[cfg.trace_field] = ids
        return out

    def _emit(self, fields: Optional[Mapping[str, Any]], depth: int) -> None:
        now = self._clock()
        cfg = self.config
        resource = _caller(depth)

        try:
            out = self._build(now, fields)
            out.pop(cfg.resource_field, None)
            out[cfg.resource_field] = resource
            raw = _encode(out)
        except _ENCODE_ERRORS:
            # The original payload is never repeated; it is what failed.
            raw = self._fallback(now, resource)
        self._write(raw)

    def _fallback(self, now: int, resource: Dict[str, Any]) -> str:
        cfg = self.config
        msg = {cfg.level_field: cfg.critical_label, cfg.message_field: MARSHAL_FAILED_MSG}
        try:
            out = self._build(now, msg)
            out.pop(cfg.resource_field, None)
            out[cfg.resource_field] = resource
            return _encode(out)
        except _ENCODE_ERRORS:
            pass
        # Default fields are unencodable too; drop them.
        out = {cfg.time_field: format_time(now, cfg.time_format)}
        out.update(msg)
        if self.deadline is not None:
            out[cfg.duration_field] = (now - self.start) / 1e9
            out[cfg.time_left_field] = (self.deadline - now) / 1e9
        out[cfg.resource_field] = resource
        return _encode(out, ascii_only=True)

    def _write(self, raw: str) -> None:
        line = f"{self.config.prefix}{raw}{self.config.suffix}\n"
        stream = self._stream if self._stream is not None else sys.stdout
        with _lock:
            try:
                stream.write(line)
                stream.flush()
            except (OSError, ValueError):
                # Best-effort: a closed or broken stream drops the line.
                return


def create(context: Any = None, fields: Optional[Mapping[str, Any]] = None, **kw: Any) -> Emitter:
    """Build an Emitter from a single bag of fields.

    Reserved ``llogger-*`` keys in ``fields`` configure the emitter (see
    ``Config.from_fields``); all other keys become default fields.
    """
    cfg, rest = Config.from_fields(fields, kw.pop("config", None))
    kw.setdefault("stacklevel", 2)
    return Emitter(context, rest, cfg, **kw)
