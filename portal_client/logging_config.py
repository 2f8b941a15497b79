"""Logging and call metrics for the portal client."""

import json
import logging
import sys
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .exceptions import ApiError

LOGGER_NAME = "portal_client"
TRANSPORT_LOGGERS = ("httpx", "httpcore")

# Configure rich console
console = Console(stderr=True)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    transport_level: str = "WARNING",
) -> logging.Logger:
    """
    Set up logging for the portal client.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to write JSON logs to
        json_format: Use JSON format on stderr instead of rich output
        transport_level: Level for the httpx and httpcore loggers unless level is DEBUG

    Returns:
        Configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    logger.handlers = []

    if json_format:
        # JSON format for structured logging
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
    else:
        # Rich format for human-readable output
        handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    # File handler if specified
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    # httpx logs every request at INFO; keep it quiet unless debugging
    wire_level = logger.level if logger.level == logging.DEBUG else getattr(logging, transport_level.upper())
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(wire_level)

    return logger


class JsonFormatter(logging.Formatter):
    """JSON log formatter that expands ApiError details."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data.update({
                "exception_type": exc_type.__name__,
                "exception_message": str(exc_value),
            })
            if isinstance(exc_value, ApiError):
                log_data["error"] = exc_value.to_dict()

        if isinstance(record.msg, ApiError):
            log_data["error"] = record.msg.to_dict()

        return json.dumps(log_data, default=str)


@dataclass
class ClientMetrics:
    """Counters for client calls and attempts."""
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    timed_out_calls: int = 0
    attempts: int = 0
    retries: int = 0

    def record_attempt(self):
        self.attempts += 1

    def record_retry(self):
        self.retries += 1

    def record_call(self, success: bool, timed_out: bool = False):
        self.total_calls += 1
        if success:
            self.successful_calls += 1
        else:
            self.failed_calls += 1
        if timed_out:
            self.timed_out_calls += 1

    def get_summary(self) -> dict:
        return asdict(self)


_metrics_collector: Optional[ClientMetrics] = None


def get_metrics_collector() -> ClientMetrics:
    """Get or create the global metrics collector."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = ClientMetrics()
    return _metrics_collector
