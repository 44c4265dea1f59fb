"""
Logging configuration for the WolfQuant client shell.

structlog on top of the standard logging handlers: key/value events are
rendered for the terminal, and the CLI can also append them to a weekly
rotated file under ./logs.

Stores, the reconciler and the poller all log key/value events, e.g.:
    logger.info("Entity created", store="asset", entity_id=12)
"""
import logging
import logging.handlers
import sys
from pathlib import Path

import structlog

LOG_FILE_NAME = "wolfquant-client.log"


def get_log_directory() -> Path:
    """Get or create the log directory."""
    log_dir = Path(__file__).parent.parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def configure_logging(log_level: str = "INFO", enable_file_logging: bool = False) -> None:
    """
    Configure structured logging for the client shell.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_file_logging: Also write to logs/wolfquant-client.log (rotated
            every Monday, 8 weeks kept)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if enable_file_logging:
        handlers.append(logging.handlers.TimedRotatingFileHandler(
            filename=str(get_log_directory() / LOG_FILE_NAME),
            when="W0",
            backupCount=8,
            encoding="utf-8",
            utc=True
            ))

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=numeric_level,
        force=True
        )

    # Colors only when nothing but a terminal reads the output
    colors = sys.stdout.isatty() and not enable_file_logging

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=colors),
            ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger for `name` (typically __name__)."""
    return structlog.get_logger(name)
