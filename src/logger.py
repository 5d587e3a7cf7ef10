"""
Logging Setup Module.

Builds the application logger used across Devyzer. Log records carry either
plain strings or structured dictionaries (``{"message": ..., "repository": ...}``);
structlog renders them, so log files stay machine readable.

Features:
- Console output, human readable in development
- Rotating JSON log files under the configured log directory
"""

import logging
import os
from logging.handlers import RotatingFileHandler

import structlog


def merge_dict_message(logger, method_name, event_dict):
    """Expand a dict log message into top-level event keys."""
    record = event_dict.get("_record")
    if record is not None and isinstance(record.msg, dict):
        payload = dict(record.msg)
        event_dict["event"] = payload.pop("message", "")
        event_dict.update(payload)
    return event_dict


PRE_CHAIN = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    merge_dict_message,
]


def json_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=PRE_CHAIN,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
    )


def console_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=PRE_CHAIN,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )


class LogManager:
    """
    Configures and owns the application logger.

    Attributes:
        logger (logging.Logger): Configured logger instance
    """

    def __init__(
        self,
        app_name: str,
        log_dir: str = "logs",
        development: bool = False,
        level: int = logging.INFO,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ):
        """
        Initialize the log manager.

        Args:
            app_name (str): Logger name, also used as the log file name
            log_dir (str): Directory for rotating log files
            development (bool): Use the console renderer instead of JSON on stderr
            level (int): Logging level
            max_bytes (int): Size at which a log file is rotated
            backup_count (int): Number of rotated files to keep
        """
        self.logger = logging.getLogger(app_name)
        self.logger.setLevel(level)
        self.logger.propagate = False

        # Re-importing config must not stack handlers
        if self.logger.handlers:
            return

        console = logging.StreamHandler()
        console.setFormatter(console_formatter() if development else json_formatter())
        self.logger.addHandler(console)

        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, f"{app_name}.log"),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(json_formatter())
        self.logger.addHandler(file_handler)
