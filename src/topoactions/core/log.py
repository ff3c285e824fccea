from __future__ import annotations

"""
topoactions.core.log
====================

Structured logging for the action tooling, built on stdlib `logging`:
- per-worker context (op, path) propagated through contextvars,
- JSON formatter for machines, compact human formatter for operators,
- LoggerAdapter that accepts arbitrary keyword fields.

Library code stays silent (NullHandler) until an entrypoint calls
`configure_from_env()` or `enable_stdout_logging()`.
"""

import contextvars
import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, ClassVar, Final

__all__ = [
    "bind_context",
    "configure_from_env",
    "disable_stdout_logging",
    "enable_stdout_logging",
    "get_logger",
    "log_context",
    "set_level",
    "warn_once",
]

# ---------- Context ----------

_log_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "topoactions_log_ctx", default=None
)


def _ctx_copy() -> dict[str, Any]:
    ctx = _log_context.get()
    return dict(ctx) if ctx else {}


def bind_context(**fields: Any) -> None:
    """
    Merge fields into the current structured log context.
    asyncio tasks inherit a copy, so binding inside a worker stays local to it.
    """
    ctx = _ctx_copy()
    ctx.update({k: v for k, v in fields.items() if v is not None})
    _log_context.set(ctx)


@contextmanager
def log_context(**fields: Any):
    """Temporarily add fields to the structured log context."""
    token = _log_context.set({**_ctx_copy(), **{k: v for k, v in fields.items() if v is not None}})
    try:
        yield
    finally:
        _log_context.reset(token)


# ---------- Formatters ----------

_STD_ATTRS: Final[frozenset[str]] = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "asctime",
    }
)


def _iso_utc_ms(ts: float) -> str:
    dt = datetime.fromtimestamp(ts, tz=UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line: ts, level, logger, message, context fields,
    keyword extras and a short error block when exc_info is attached.
    """

    def __init__(self, *, include_stack: bool = False) -> None:
        super().__init__()
        self.include_stack = include_stack

    def format(self, record: logging.LogRecord) -> str:
        out: dict[str, Any] = {
            "ts": _iso_utc_ms(record.created),
            "level": record.levelname,
            "logger": record.name,
        }
        msg = record.getMessage()
        if msg:
            out["message"] = msg

        ctx = _log_context.get()
        if ctx:
            out.update(ctx)

        for k, v in record.__dict__.items():
            if k in _STD_ATTRS or k in out:
                continue
            out[k] = v

        if record.exc_info:
            exc_type = record.exc_info[0].__name__ if record.exc_info[0] else "Exception"
            err = {"type": exc_type, "message": str(record.exc_info[1]) if record.exc_info[1] else None}
            if self.include_stack:
                err["stack"] = self.formatException(record.exc_info)
            out["error"] = err

        return json.dumps(out, ensure_ascii=False, separators=(",", ":"), default=str)


class HumanFormatter(logging.Formatter):
    """Compact formatter for terminals."""

    default_time_format = "%Y-%m-%d %H:%M:%S"
    default_msec_format = "%s.%03d"

    def format(self, record: logging.LogRecord) -> str:
        s = f"{self.formatTime(record)} {record.levelname:<5} {record.name}: {record.getMessage()}"
        ctx = _log_context.get()
        if ctx:
            compact = {k: ctx.get(k) for k in ("op", "path") if ctx.get(k) is not None}
            if compact:
                s += "  [" + ", ".join(f"{k}={v}" for k, v in compact.items()) + "]"
        if record.exc_info:
            s += "\n" + self.formatException(record.exc_info)
        return s


# ---------- Filters / adapter ----------


class ContextFilter(logging.Filter):
    """Copy the current context onto the record so handlers and caplog can see it."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _log_context.get()
        if ctx:
            for k, v in ctx.items():
                if k not in record.__dict__:
                    record.__dict__[k] = v
        return True


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= self.max_level


class _KwExtraAdapter(logging.LoggerAdapter):
    """
    Moves unknown keyword arguments into `extra`, so callers can write
        log.warning("node vanished", event="actions.node.vanished", node=p)
    """

    _passthrough: ClassVar[frozenset[str]] = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

    def process(self, msg, kwargs):
        extra = kwargs.get("extra")
        if not isinstance(extra, dict):
            extra = {}
        for k in [k for k in kwargs if k not in self._passthrough]:
            key = f"field_{k}" if k in _STD_ATTRS else k
            extra.setdefault(key, kwargs.pop(k))
        # logger filters do not run for records of child loggers, so context is attached here
        for k, v in _ctx_copy().items():
            extra.setdefault(f"field_{k}" if k in _STD_ATTRS else k, v)
        kwargs["extra"] = extra
        return msg, kwargs


_WARN_ONCE_SEEN: set[str] = set()
_WARN_ONCE_LOCK = threading.Lock()


def warn_once(
    logger: logging.Logger | logging.LoggerAdapter,
    code: str,
    msg: str,
    *,
    level: int = logging.WARNING,
    **extra: Any,
) -> None:
    """Log `msg` only the first time `code` is seen in this process."""
    with _WARN_ONCE_LOCK:
        if code in _WARN_ONCE_SEEN:
            return
        _WARN_ONCE_SEEN.add(code)
    adapter = logger if isinstance(logger, logging.LoggerAdapter) else _KwExtraAdapter(logger, {})
    adapter.log(level, msg, code=code, **extra)


# ---------- Public configuration API ----------

_ROOT_LOGGER_NAME = "topoactions"
_configured = False
_stdout_handler_key = "_topoactions_stdout_handler"
_stderr_handler_key = "_topoactions_stderr_handler"


def _truthy_env(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes", "on")


def _level_of(level: int | str) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(level.upper())
    if isinstance(lvl, str):
        raise ValueError(f"Invalid level name: {level!r}")
    return lvl


def get_logger(name: str | None = None) -> logging.LoggerAdapter:
    """Namespaced adapter under `topoactions`; silent until a handler is attached."""
    _bootstrap_minimal()
    base = logging.getLogger(_ROOT_LOGGER_NAME)
    target = base.getChild(name) if name else base
    return _KwExtraAdapter(target, {})


def _bootstrap_minimal() -> None:
    global _configured
    if _configured:
        return
    lg = logging.getLogger(_ROOT_LOGGER_NAME)
    lg.setLevel(logging.DEBUG)
    if not any(isinstance(h, logging.NullHandler) for h in lg.handlers):
        lg.addHandler(logging.NullHandler())
    if not any(isinstance(f, ContextFilter) for f in lg.filters):
        lg.addFilter(ContextFilter())
    _configured = True


def set_level(level: int | str) -> None:
    logging.getLogger(_ROOT_LOGGER_NAME).setLevel(_level_of(level))


def enable_stdout_logging(
    *,
    level: int | str = logging.DEBUG,
    json_output: bool = True,
    include_stack: bool = False,
    pretty: bool = False,
    route_errors_to_stderr: bool = False,
) -> None:
    """
    Attach stream handlers. pretty=True wins over json_output.
    route_errors_to_stderr=True sends ERROR+ to stderr and the rest to stdout.
    """
    lvl = _level_of(level)
    _bootstrap_minimal()
    lg = logging.getLogger(_ROOT_LOGGER_NAME)
    disable_stdout_logging()

    fmt: logging.Formatter
    if pretty:
        fmt = HumanFormatter()
    elif json_output:
        fmt = JsonFormatter(include_stack=include_stack)
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    h_out = logging.StreamHandler(sys.stdout)
    h_out.set_name(_stdout_handler_key)
    h_out.setLevel(lvl)
    h_out.setFormatter(fmt)
    if route_errors_to_stderr:
        h_out.addFilter(_MaxLevelFilter(logging.WARNING))
        h_err = logging.StreamHandler(sys.stderr)
        h_err.set_name(_stderr_handler_key)
        h_err.setLevel(max(lvl, logging.ERROR))
        h_err.setFormatter(fmt)
        lg.addHandler(h_err)
    lg.addHandler(h_out)


def disable_stdout_logging() -> None:
    lg = logging.getLogger(_ROOT_LOGGER_NAME)
    for h in list(lg.handlers):
        if h.get_name() in (_stdout_handler_key, _stderr_handler_key):
            lg.removeHandler(h)


def configure_from_env() -> None:
    """
    Honors:
      - TOPOACTIONS_LOG_STDOUT=1|true -> enable stdout
      - TOPOACTIONS_LOG_LEVEL=DEBUG|INFO|...
      - TOPOACTIONS_LOG_PRETTY=1 -> human formatter instead of JSON
      - TOPOACTIONS_LOG_STACK=1 -> include stack in JSON logs
    """
    level = os.getenv("TOPOACTIONS_LOG_LEVEL", "INFO")
    pretty = _truthy_env("TOPOACTIONS_LOG_PRETTY")

    _bootstrap_minimal()
    set_level(level)
    if _truthy_env("TOPOACTIONS_LOG_STDOUT"):
        enable_stdout_logging(
            level=level,
            json_output=not pretty,
            include_stack=_truthy_env("TOPOACTIONS_LOG_STACK"),
            pretty=pretty,
            route_errors_to_stderr=True,
        )
    else:
        disable_stdout_logging()


_bootstrap_minimal()
