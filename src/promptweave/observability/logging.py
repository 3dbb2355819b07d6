"""Structured logging for promptweave.

Console output goes through a rich handler on stderr whose level follows
the CLI's ``-v`` count. With ``--log-dir`` every event, debug included, is
also appended to ``{log_dir}/debug.jsonl`` as one JSON object per line.
Engine modules obtain their logger with ``get_logger(__name__)`` and log
structured events (``log.debug("upstream_collected", sink=..., count=...)``).
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger, Processor

LOG_FILE_NAME = "debug.jsonl"
CONSOLE_LEVELS = {0: logging.WARNING, 1: logging.INFO}

_configured = False
_file_handler: logging.FileHandler | None = None
_logs_dir: Path | None = None


def _record_to_entry(record: logging.LogRecord) -> dict[str, Any]:
    """Flatten a log record into the JSONL entry layout.

    structlog hands its event dict over as ``record.msg``; its keys are
    merged into the entry and ``event`` becomes the message.
    """
    entry: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "level": record.levelname,
        "logger": record.name,
    }
    if isinstance(record.msg, dict):
        fields = {k: v for k, v in record.msg.items() if k not in ("level", "timestamp")}
        entry["message"] = fields.pop("event", "")
        entry.update(fields)
    else:
        entry["message"] = record.getMessage()
    return entry


class JSONLFileHandler(logging.FileHandler):
    """File handler writing one JSON object per record."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if self.stream is None:
                return
            self.stream.write(json.dumps(_record_to_entry(record), default=str) + "\n")
            self.stream.flush()
        except Exception:
            self.handleError(record)


def _console_handler(verbosity: int) -> RichHandler:
    return RichHandler(
        console=Console(stderr=True),
        level=CONSOLE_LEVELS.get(verbosity, logging.DEBUG),
        markup=True,
        rich_tracebacks=True,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        tracebacks_show_locals=verbosity >= 2,
    )


def _open_file_handler(log_dir: Path) -> JSONLFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = JSONLFileHandler(str(log_dir / LOG_FILE_NAME), mode="a", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    return handler


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    log_dir: Path | None = None,
) -> None:
    """Set up stdlib and structlog logging.

    Calling it again replaces the previous setup and closes any open log
    file.

    Args:
        verbosity: 0 for warnings only, 1 for INFO, 2 or more for DEBUG.
        log_to_file: Append all events to ``debug.jsonl`` in *log_dir*.
        log_dir: Directory for the JSONL log. Created if missing.

    Raises:
        ValueError: If log_to_file is set without a log_dir.
    """
    global _configured, _file_handler, _logs_dir

    if log_to_file and log_dir is None:
        raise ValueError("log_dir is required when log_to_file=True")

    close_file_logging()
    _logs_dir = None

    handlers: list[logging.Handler] = [_console_handler(verbosity)]
    if log_to_file and log_dir is not None:
        _file_handler = _open_file_handler(log_dir)
        _logs_dir = log_dir
        handlers.append(_file_handler)

    # The root stays open to DEBUG whenever some handler wants more than warnings.
    root_level = logging.DEBUG if verbosity > 0 or _file_handler is not None else logging.WARNING
    logging.basicConfig(level=root_level, format="%(message)s", handlers=handlers, force=True)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Return a structlog logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    logger: FilteringBoundLogger = structlog.get_logger(name)
    return logger


def get_logs_dir() -> Path | None:
    """Directory receiving ``debug.jsonl``, or None when file logging is off."""
    return _logs_dir


def close_file_logging() -> None:
    """Close the JSONL log file if one is open."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
