"""Structured logging for the Requesty client.

Events are emitted with structlog and routed through the standard library
root logger, so they can go to stderr and, optionally, a rotating JSON file.
Stdout is left alone for command output.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog

from requesty_ai.config import Settings, get_settings

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _formatter(renderer: structlog.types.Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer]
    )


def _console_renderer(settings: Settings) -> structlog.types.Processor:
    """Human-readable output while developing, JSON lines everywhere else."""
    if settings.is_development:
        return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.processors.JSONRenderer()


def _open_log_file(settings: Settings) -> tuple[RotatingFileHandler | None, str | None]:
    """Open the rotating log file.

    Returns:
        The handler, or None together with the reason it could not be opened.
    """
    try:
        Path(settings.log_directory).mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=settings.log_file_path,
            maxBytes=settings.log_file_max_bytes,
            backupCount=settings.log_file_backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        return None, str(e)
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    return handler, None


def setup_logging(settings: Settings | None = None) -> None:
    """Route structlog events to stderr and, if enabled, a rotating file.

    Any handlers previously installed on the root logger are replaced. A log
    file that cannot be opened is reported as a warning and file output is
    skipped; console logging always works.

    Args:
        settings: Settings to read. Defaults to the cached application settings.
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_formatter(_console_renderer(settings)))
    handlers: list[logging.Handler] = [console]

    file_error = None
    if settings.log_to_file:
        file_handler, file_error = _open_log_file(settings)
        if file_handler is not None:
            handlers.append(file_handler)

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    for handler in handlers:
        handler.setLevel(level)
        root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if file_error is not None:
        get_logger(__name__).warning(
            "file_logging_disabled", path=str(settings.log_file_path), error=file_error
        )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]
