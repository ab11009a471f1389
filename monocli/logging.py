"""
monocli Logging

Two channels live here:

- stdlib loggers under the ``monocli`` hierarchy for diagnostic traces,
  with context propagation so every record knows which command and module
  it belongs to;
- ``ConsoleLogger``, the level-tagged, colored output the user reads.
  One instance is created per invocation and handed to services explicitly.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import IO, Any, Dict, Generator, Optional

from rich.console import Console


STANDARD_FIELDS = ("command", "module_name")

# Context variable for log context propagation
_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("MONOCLI_LOG_CONTEXT", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the current log context to avoid accidental mutation."""
    return dict(_LOG_CONTEXT.get() or {})


@contextmanager
def log_context(**fields: Any) -> Generator[None, None, None]:
    """Context manager for temporarily adding fields to the log context."""
    token = _LOG_CONTEXT.set({**get_log_context(), **{k: v for k, v in fields.items() if v is not None}})
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)


class ContextFilter(logging.Filter):
    """
    Logging filter that ensures the standard context fields exist on every record.

    Values come from the active ``log_context`` and fall back to "-" so the
    text formatter can always reference them.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_log_context()
        for key in STANDARD_FIELDS:
            if not hasattr(record, key):
                setattr(record, key, ctx.get(key, "-"))
        return True


def setup_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None) -> logging.Logger:
    """
    Configure the monocli logger hierarchy.

    Args:
        level: Log level name (default: WARNING, so traces stay quiet)
        stream: Destination stream (default: stderr)

    Returns:
        The monocli logger instance
    """
    resolved_level = getattr(logging, str(level or "WARNING").upper(), logging.WARNING)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.addFilter(ContextFilter())
    handler.setFormatter(
        logging.Formatter("%(levelname)s %(name)s %(message)s cmd=%(command)s module=%(module_name)s")
    )

    logger = logging.getLogger("monocli")
    logger.handlers = []
    logger.setLevel(resolved_level)
    logger.propagate = False
    logger.addHandler(handler)
    return logger


def get_logger(name: str = "monocli") -> logging.Logger:
    """Get a logger instance with the specified name."""
    if name != "monocli" and not name.startswith("monocli."):
        name = f"monocli.{name}"
    return logging.getLogger(name)


def init_cli_logging(verbose: bool = False) -> logging.Logger:
    """Initialize logging for the CLI: DEBUG with --verbose, WARNING otherwise."""
    return setup_logging("DEBUG" if verbose else "WARNING")


def log_extra(*, command: Optional[str] = None, module: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """
    Build a consistent extra dict for structured logging.

    Only non-None values are included so the ContextFilter defaults still apply.

    Example:
        logger.debug("module_loaded", extra=log_extra(module="api", path="services/api"))
    """
    payload: Dict[str, Any] = {}
    if command is not None:
        payload["command"] = command
    if module is not None:
        payload["module_name"] = module
    payload.update({k: v for k, v in extra.items() if v is not None})
    return payload


class ConsoleLogger:
    """
    Level-tagged console output.

    Every call writes one line immediately; nothing is buffered and no
    structured fields are attached. Levels map to colors:
    default (plain), info (cyan), warning (yellow), success (green),
    verbose (bright black), fatal (red).
    """

    STYLES = {
        "default": None,
        "info": "cyan",
        "warning": "yellow",
        "success": "green",
        "verbose": "bright_black",
        "fatal": "red",
    }

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True, emoji=False)

    def _line(self, level: str, message: str) -> None:
        self.console.print(message, style=self.STYLES[level], markup=False, highlight=False, emoji=False)

    def default(self, message: str) -> None:
        self._line("default", message)

    def info(self, message: str) -> None:
        self._line("info", message)

    def warning(self, message: str) -> None:
        self._line("warning", message)

    def success(self, message: str) -> None:
        self._line("success", message)

    def verbose(self, message: str) -> None:
        self._line("verbose", message)

    def fatal(self, message: str) -> None:
        self._line("fatal", message)


# Standard exit codes for CLIs
EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
