"""Logging configuration for vidinfo.

Everything goes to a rotating JSON log file. Console output is only enabled
with ``--verbose`` so that ``vidinfo resolve`` keeps printing clean JSON.
"""

import logging
import logging.config
import uuid
from pathlib import Path
from typing import Any

import structlog

LOG_FILE = Path.home() / ".vidinfo" / "logs" / "vidinfo.log"

# HTTP client libraries log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3")


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _formatter(renderer: Any) -> dict[str, Any]:
    return {
        "()": structlog.stdlib.ProcessorFormatter,
        "processors": [
            *_pre_chain(),
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    }


def setup_logging(verbose: bool = False, log_file: Path = LOG_FILE) -> None:
    """Configure stdlib and structlog logging for a CLI run.

    Args:
        verbose: Log at DEBUG and mirror records to stderr.
        log_file: Path of the JSON log file (parent directories are created).
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)
    level = logging.DEBUG if verbose else logging.INFO
    handlers = ["file", "console"] if verbose else ["file"]

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": _formatter(structlog.dev.ConsoleRenderer(colors=True)),
                "json": _formatter(structlog.processors.JSONRenderer()),
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "console",
                    "stream": "ext://sys.stderr",
                },
                "file": {
                    "class": "logging.handlers.RotatingFileHandler",
                    "formatter": "json",
                    "filename": str(log_file),
                    "maxBytes": 5 * 1024 * 1024,
                    "backupCount": 3,
                    "encoding": "utf-8",
                },
            },
            "root": {"handlers": handlers, "level": level},
            "loggers": {name: {"level": logging.WARNING} for name in NOISY_LOGGERS},
        }
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Every record of this run carries the same trace id
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(trace_id=uuid.uuid4().hex)
