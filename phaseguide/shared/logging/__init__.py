"""Structured logging: structlog rendering over stdlib logging handlers."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog

_SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def _file_handler(file_path: str, max_mb: int, backups: int) -> logging.Handler | None:
    path = Path(file_path).expanduser().resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=max_mb * 1024 * 1024,
            backupCount=backups,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"Log file disabled: could not open {path}: {e}\n")
        return None


def setup_logging(
    level: str = "INFO",
    file_path: str = "",
    rotation_max_mb: int = 5,
    rotation_backups: int = 3,
) -> None:
    """Route structlog events and stdlib records through one formatter.

    JSON lines unless level is DEBUG, where the console renderer is used.
    Output always goes to stdout; when file_path is set it is also written
    to a size-rotated file.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = _formatter(json_output=level.upper() != "DEBUG")
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if file_path and file_path.strip():
        handler = _file_handler(file_path.strip(), rotation_max_mb, rotation_backups)
        if handler is not None:
            handlers.append(handler)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        root.addHandler(handler)
