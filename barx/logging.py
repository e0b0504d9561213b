"""BAR-X structured logging with audit events and call tracing."""

import functools
import json
import logging
import re
import sys
import time
import traceback
from datetime import datetime, timezone

# Custom AUDIT level (between WARNING=30 and ERROR=40)
AUDIT = 35
logging.addLevelName(AUDIT, "AUDIT")

ROOT = "barx"

_PATTERN = re.compile(r"[01]{16,}")


def _truncate(value: object, max_len: int = 80) -> str:
    s = str(value)
    return s if len(s) <= max_len else s[:max_len] + "..."


def _short(value) -> str:
    """Compact a logged value; bar patterns collapse to their module count."""
    if isinstance(value, str) and _PATTERN.fullmatch(value):
        return f"<pattern {len(value)} modules>"
    s = repr(value)
    if len(s) > 100 or "Image" in type(value).__name__:
        return f"<{type(value).__name__}>"
    return _truncate(s)


def _fields(record) -> dict:
    """Structured fields shared by both formatters, in output order."""
    out = {}
    for name in ("event", "duration_ms", "ctx"):
        if hasattr(record, name):
            out[name] = getattr(record, name)
    if "event" not in out and record.getMessage():
        out["msg"] = record.getMessage()
    return out


def _stamp(record, fmt: str) -> str:
    return datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(fmt)[:-3]


class JsonFormatter(logging.Formatter):
    """One JSON object per line for log files and --json output."""

    def format(self, record):
        entry = {
            "ts": _stamp(record, "%Y-%m-%dT%H:%M:%S.%f") + "Z",
            "level": record.levelname,
            "src": record.name,
            **_fields(record),
        }
        if "duration_ms" in entry:
            entry["duration_ms"] = round(entry["duration_ms"], 2)
        if record.exc_info and record.exc_info[1]:
            entry["traceback"] = traceback.format_exception(*record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Single-line console output, level colored when color is on."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "AUDIT": "\033[35m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
    }
    RESET = "\033[0m"

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def format(self, record):
        level = f"{record.levelname:5s}"
        if self.color and record.levelname in self.COLORS:
            level = f"{self.COLORS[record.levelname]}{level}{self.RESET}"
        parts = [_stamp(record, "%H:%M:%S.%f"), level, f"[{record.name}]"]

        f = _fields(record)
        if "event" in f:
            parts.append(f["event"])
        if "duration_ms" in f:
            parts.append(f"({f['duration_ms']:.1f}ms)")
        if f.get("ctx"):
            parts.append(" ".join(f"{k}={_truncate(v)}" for k, v in f["ctx"].items()))
        elif "msg" in f:
            parts.append(f["msg"])

        if record.exc_info and record.exc_info[1]:
            parts.append("\n" + "".join(traceback.format_exception(*record.exc_info)))
        return " ".join(parts)


def setup_logging(level: str = "INFO", log_file: str | None = None, json_format: bool = False):
    """Configure the barx logger.

    Console output goes to stderr so stdout stays free for command output.
    Colors are used only when stderr is a terminal.

    Args:
        level: DEBUG, INFO, AUDIT, WARNING or ERROR.
        log_file: Also append JSON lines to this file.
        json_format: Use JSON lines on the console too.
    """
    root = logging.getLogger(ROOT)
    level_name = level.upper()
    root.setLevel(AUDIT if level_name == "AUDIT" else getattr(logging, level_name, logging.INFO))
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    if json_format:
        console.setFormatter(JsonFormatter())
    else:
        console.setFormatter(ConsoleFormatter(color=sys.stderr.isatty()))
    root.addHandler(console)

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(JsonFormatter())
        root.addHandler(fh)


def get_logger(module_name: str) -> logging.Logger:
    """Logger under the barx namespace, e.g. "svg" -> barx.svg."""
    return logging.getLogger(f"{ROOT}.{module_name}")


def _emit(log: logging.Logger, level: int, event: str, ctx: dict,
          duration_ms: float | None = None, exc_info=None):
    record = log.makeRecord(log.name, level, "", 0, "", (), exc_info)
    record.event = event
    record.ctx = ctx
    if duration_ms is not None:
        record.duration_ms = duration_ms
    log.handle(record)


def audit(event: str, logger: logging.Logger | None = None, **context):
    """Emit an AUDIT-level event such as "svg.saved" with context fields.

    Nothing is built when the logger is not enabled for AUDIT.
    """
    log = logger or logging.getLogger(ROOT)
    if log.isEnabledFor(AUDIT):
        _emit(log, AUDIT, event, context)


def _summarize(result) -> str:
    if isinstance(result, (list, tuple)):
        return f"{type(result).__name__}[{len(result)}]"
    if isinstance(result, dict):
        return f"dict[{len(result)} keys]"
    if isinstance(result, str) and _PATTERN.fullmatch(result):
        return _short(result)
    if isinstance(result, (str, int, float, bool)):
        return _truncate(repr(result))
    return type(result).__name__


def trace(func=None, *, logger_name: str | None = None):
    """Log calls as <qualname>.enter (DEBUG), .done (INFO) or .error (ERROR).

    .done and .error carry the elapsed time; .error carries the traceback
    and the exception is re-raised.
    """
    def decorator(fn):
        log = get_logger(logger_name or fn.__module__.replace(f"{ROOT}.", ""))
        name = fn.__qualname__

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            if log.isEnabledFor(logging.DEBUG):
                _emit(log, logging.DEBUG, f"{name}.enter", {
                    "args": [_short(a) for a in args],
                    "kwargs": {k: _short(v) for k, v in kwargs.items()},
                })

            start = time.perf_counter()
            try:
                result = fn(*args, **kwargs)
            except Exception:
                if log.isEnabledFor(logging.ERROR):
                    _emit(log, logging.ERROR, f"{name}.error", {"function": name},
                          duration_ms=(time.perf_counter() - start) * 1000,
                          exc_info=sys.exc_info())
                raise

            if log.isEnabledFor(logging.INFO):
                _emit(log, logging.INFO, f"{name}.done", {"result": _summarize(result)},
                      duration_ms=(time.perf_counter() - start) * 1000)
            return result

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
