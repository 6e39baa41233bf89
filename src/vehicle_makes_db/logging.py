"""Centralized logging configuration using loguru.

Provides:
- Configurable log levels from Settings, overridable by --verbose/--quiet
- Standard library interception (SQLAlchemy, httpx, uvicorn, APScheduler)
- Sync context on every line: the run kind and the make being loaded
- Optional rotating log file
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger

from vehicle_makes_db.config import LoggingConfig

if TYPE_CHECKING:
    from loguru import Logger, Record

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Bound extras shown after the message, in this order
CONTEXT_KEYS = ("run", "make_id")

_configured = False


class InterceptHandler(logging.Handler):
    """Handler to intercept standard library logging and route to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        from types import FrameType

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _source(record: Record) -> str:
    # Records routed from stdlib loggers carry no bound name
    return "{extra[name]}" if "name" in record["extra"] else "{name}"


def _context(record: Record) -> str:
    fields = [f"{key}={{extra[{key}]}}" for key in CONTEXT_KEYS if key in record["extra"]]
    return f" [{' '.join(fields)}]" if fields else ""


def console_format(record: Record) -> str:
    """Short console line: time, level, source, message and sync context."""
    return (
        "<dim>{time:HH:mm:ss}</dim> | "
        "<level>{level: <8}</level> | "
        f"<cyan>{_source(record)}</cyan> - "
        "<level>{message}</level>"
        f"<dim>{_context(record)}</dim>\n{{exception}}"
    )


def file_format(record: Record) -> str:
    """Full file line with date, call site and sync context."""
    return (
        "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
        f"{_source(record)}:{{function}}:{{line}} | "
        "{message}"
        f"{_context(record)}\n{{exception}}"
    )


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    config: LoggingConfig | None = None,
) -> Logger:
    """Configure logging for the application.

    Args:
        level: Base log level from settings
        verbose: Use DEBUG (wins over ``quiet``)
        quiet: Use WARNING
        log_file: Rotating log file (defaults to ``config.log_file``)
        config: File rotation, retention and serialization settings

    Returns:
        Configured logger instance
    """
    global _configured
    config = config or LoggingConfig()

    effective_level: LogLevel
    if verbose:
        effective_level = "DEBUG"
    elif quiet:
        effective_level = "WARNING"
    else:
        effective_level = level

    logger.remove()
    logger.add(
        sys.stderr,
        level=effective_level,
        format=console_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file is None and config.log_file:
        log_file = Path(config.log_file)
    if log_file is not None:
        logger.add(
            log_file,
            level="DEBUG",
            format=file_format,
            rotation=config.rotation,
            retention=config.retention,
            compression="gz",
            serialize=config.serialize,
        )

    _intercept_stdlib_logging(effective_level)

    _configured = True
    return logger


def _intercept_stdlib_logging(level: LogLevel) -> None:
    """Route standard library loggers through loguru.

    SQL echo is only shown at DEBUG; httpx, uvicorn access and APScheduler
    chatter is kept at WARNING unless debugging.
    """
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    debug = level in ("TRACE", "DEBUG")
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)

    noisy_level = logging.DEBUG if debug else logging.WARNING
    for name in ("httpx", "httpcore", "apscheduler", "uvicorn.access"):
        logging.getLogger(name).setLevel(noisy_level)

    # uvicorn installs its own handlers
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False


def get_logger(name: str) -> Logger:
    """Get a logger with the module name bound.

    Usage:
        logger = get_logger(__name__)
        logger.info("{} makes retrieved", len(makes))
    """
    return logger.bind(name=name)


def bind_make(make_id: str) -> Logger:
    """Logger for work on one make; lines carry ``make_id=<id>``."""
    return logger.bind(name="sync", make_id=make_id)


class LogContext:
    """Bind context to every line logged inside the block, across tasks.

    Usage:
        with LogContext(run="scheduled"):
            await run_sync_cycle()  # every line carries run=scheduled
    """

    def __init__(self, **context: Any) -> None:
        self._context = context
        self._token: Any = None

    def __enter__(self) -> Logger:
        self._token = logger.contextualize(**self._context)
        self._token.__enter__()
        return logger

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._token:
            self._token.__exit__(exc_type, exc_val, exc_tb)


def is_configured() -> bool:
    return _configured


def reset_logging() -> None:
    """Remove all sinks and mark logging unconfigured (for tests)."""
    global _configured
    logger.remove()
    _configured = False
