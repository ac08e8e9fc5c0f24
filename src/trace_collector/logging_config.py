# logging_config.py
import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class SensitiveDataFilter(logging.Filter):
    """Filter to mask the WebPageTest API key in log records."""

    def __init__(self, secrets=None):
        super().__init__()
        self.secrets = [s for s in (secrets or []) if s]

    def filter(self, record):
        message = record.getMessage()
        for secret in self.secrets:
            message = message.replace(secret, "****REDACTED****")
        record.msg, record.args = message, None
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(
    name: str,
    level: Optional[str] = None,
    console_handler: Optional[logging.Handler] = None,
    secrets=None,
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """Set up logging configuration.

    Args:
        name: Logger name, also used for the log file name
        level: Log level; defaults to LOG_LEVEL from the environment
        console_handler: Handler for terminal output; defaults to stderr
        secrets: Strings to mask in log messages
        log_dir: Directory for the log file; defaults to LOG_DIR or ./logs

    Returns:
        Configured logger instance
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_dir = str(log_dir or os.getenv("LOG_DIR", "logs"))
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_handler = RotatingFileHandler(
        os.path.join(log_dir, f"{name}.log"),
        maxBytes=10485760,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(JSONFormatter())
    logger.addHandler(file_handler)

    if console_handler is None:
        console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if secrets:
        redact = SensitiveDataFilter(secrets)
        for handler in logger.handlers:
            handler.addFilter(redact)

    if log_level == "DEBUG":
        logger.debug("Debug logging enabled")

    return logger
