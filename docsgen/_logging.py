"""
Structured logging (OpenTelemetry-compliant).

Produces structured log output following the OpenTelemetry Logging Data Model,
or a compact colored line format for terminals.

Usage::

    from ._logging import scoped_logger

    log = scoped_logger("materialize")
    log.debug("Copying file", extra={"path": "guides/intro.md"})
    log.warning("Failed to process frontmatter", extra={"path": rel})

Environment::

    DOCSGEN_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: info)
    DOCSGEN_LOG_FORMAT=json|human (default: human if tty, json if piped)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Any

__all__ = ["logger", "setup_logging", "scoped_logger"]

# =============================================================================
# Version
# =============================================================================


def _get_version() -> str:
    """Get docsgen version from package metadata."""
    try:
        return get_version("docsgen")
    except (ImportError, PackageNotFoundError, AttributeError):
        return "0.0.0"


# =============================================================================
# Level Mapping
# =============================================================================

# Map Python levels to OpenTelemetry severity text
_LEVEL_TO_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

# Map string names to Python levels (case-insensitive)
_NAME_TO_LEVEL = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "err": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "off": logging.CRITICAL + 10,
    "none": logging.CRITICAL + 10,
}

# Levels that include code location
_CODE_LOCATION_LEVELS = {logging.DEBUG, logging.ERROR, logging.CRITICAL}

_STANDARD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "scope",
        "message",
    }
)


def _infer_scope(logger_name: str) -> str:
    """Infer scope from the module a record was logged from."""
    if not logger_name or logger_name == "docsgen":
        return "docsgen"
    return logger_name.rsplit(".", 1)[-1]


def _scalar(value: Any) -> Any:
    return value if isinstance(value, (str, int, float, bool)) else str(value)


def _strip_path_prefix(filepath: str) -> str:
    """Strip common prefixes from filepath for cleaner log output."""
    for prefix in ("docsgen/", "src/"):
        if prefix in filepath:
            return filepath[filepath.index(prefix) + len(prefix) :]
    return filepath


# =============================================================================
# Formatters
# =============================================================================


class JsonFormatter(logging.Formatter):
    """OpenTelemetry-compliant JSON formatter."""

    def __init__(self) -> None:
        super().__init__()
        self._version = _get_version()

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        # Python's timestamp has microsecond precision, pad to nanoseconds
        timestamp = dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{int(dt.microsecond * 1000):09d}Z"

        severity = _LEVEL_TO_SEVERITY.get(record.levelno, "INFO")

        attributes: dict[str, Any] = {}
        attributes["scope"] = getattr(record, "scope", None) or _infer_scope(record.name)

        for key, value in record.__dict__.items():
            if key in _STANDARD_FIELDS or key.startswith("_"):
                continue
            # DocsgenError details become dotted attributes
            if key == "details" and isinstance(value, dict):
                for name, item in value.items():
                    attributes[f"details.{name}"] = _scalar(item)
            else:
                attributes[key] = _scalar(value)

        if record.levelno in _CODE_LOCATION_LEVELS:
            attributes["code.filepath"] = _strip_path_prefix(record.pathname)
            attributes["code.lineno"] = record.lineno

        if record.exc_info:
            attributes["exception.message"] = str(record.exc_info[1])

        log_record = {
            "timestamp": timestamp,
            "severityText": severity,
            "body": record.getMessage(),
            "attributes": attributes,
            "resource": {
                "service.name": "docsgen",
                "service.version": self._version,
            },
        }

        return json.dumps(log_record, separators=(",", ":"))


class HumanFormatter(logging.Formatter):
    """Human-readable formatter for terminal output."""

    # ANSI color codes
    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _RED = "\x1b[31m"
    _YELLOW = "\x1b[33m"
    _CYAN = "\x1b[36m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        time_str = dt.strftime("%H:%M:%S")

        severity = _LEVEL_TO_SEVERITY.get(record.levelno, "INFO")

        if self._use_colors:
            if record.levelno <= logging.DEBUG:
                level_color = self._DIM
            elif record.levelno >= logging.ERROR:
                level_color = self._RED
            elif record.levelno >= logging.WARNING:
                level_color = self._YELLOW
            else:
                level_color = ""
        else:
            level_color = ""

        scope = getattr(record, "scope", None) or _infer_scope(record.name)

        parts = [time_str, " "]

        if level_color:
            parts.append(level_color)
        parts.append(f"{severity:<5} ")
        if level_color:
            parts.append(self._RESET)

        if self._use_colors:
            parts.append(self._CYAN)
        parts.append(f"[{scope}] ")
        if self._use_colors:
            parts.append(self._RESET)

        code = getattr(record, "code", None)
        if code:
            parts.append(f"{code}: ")

        parts.append(record.getMessage())

        # Key attribute inline (path shown in parentheses)
        path = getattr(record, "path", None)
        if path:
            parts.append(f" ({path})")

        if record.exc_info:
            parts.append(f": {record.exc_info[1]}")

        if record.levelno in _CODE_LOCATION_LEVELS:
            filepath = _strip_path_prefix(record.pathname)
            if self._use_colors:
                parts.append(self._DIM)
            parts.append(f" [{filepath}:{record.lineno}]")
            if self._use_colors:
                parts.append(self._RESET)

        return "".join(parts)


# =============================================================================
# Logger Setup
# =============================================================================


def _get_log_level() -> int:
    """Get log level from environment."""
    level_name = os.environ.get("DOCSGEN_LOG_LEVEL", "info")
    return _NAME_TO_LEVEL.get(level_name.lower(), logging.INFO)


def _get_log_format() -> str:
    """Get log format from environment or auto-detect."""
    fmt = os.environ.get("DOCSGEN_LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _create_handler(fmt: str) -> logging.Handler:
    """Create a stderr handler for the given format."""
    handler = logging.StreamHandler(sys.stderr)

    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=sys.stderr.isatty()))

    return handler


# Single logger for all of docsgen
logger = logging.getLogger("docsgen")


def _setup_default_handler() -> None:
    """Configure default logging based on environment."""
    # Don't add handler if user already configured logging
    if logger.handlers:
        return

    logger.addHandler(_create_handler(_get_log_format()))
    logger.setLevel(_get_log_level())


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
) -> None:
    """
    Configure docsgen logging.

    Parameters
    ----------
    level : str or int, default "INFO"
        Log level. Can be "DEBUG", "INFO", "WARNING", "ERROR", "FATAL",
        or a logging constant like ``logging.DEBUG``.

    format : str, optional
        Log format. Either "json" or "human". If not specified,
        uses DOCSGEN_LOG_FORMAT env var or auto-detects based on TTY.

    Examples
    --------
    ::

        >>> from docsgen import setup_logging
        >>> setup_logging("DEBUG", format="human")
    """
    if isinstance(level, str):
        level = _NAME_TO_LEVEL.get(level.lower(), logging.INFO)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    logger.addHandler(_create_handler(format.lower() if format else _get_log_format()))
    logger.setLevel(level)


class _ScopedLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges extra attributes with scope."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra: dict[str, Any] = dict(self.extra) if self.extra else {}
        if "extra" in kwargs:
            extra.update(kwargs["extra"])
        kwargs["extra"] = extra
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """
    Create a logger adapter with a fixed scope.

    Parameters
    ----------
    scope : str
        The scope name (e.g., "materialize", "navigation", "cache").

    Returns
    -------
    logging.LoggerAdapter
        A logger adapter that automatically adds scope to all messages.
    """
    return _ScopedLoggerAdapter(logger, {"scope": scope})


# Initialize on import
_setup_default_handler()
