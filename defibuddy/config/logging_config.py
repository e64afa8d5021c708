"""
Logging Configuration for DefiBuddy

Centralized logging setup: colored console output for development,
JSON lines for production, rotating log files for both.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


# Extra attributes copied into JSON log lines when present on the record
EXTRA_FIELDS = (
    'request_id', 'session_id', 'address', 'symbol', 'service',
    'duration_ms', 'error_code', 'status_code',
)


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging

    Outputs log records as JSON for easy parsing and aggregation
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_data = {
            'timestamp': datetime.utcnow().isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """
    Colored console formatter for better readability during development
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors"""
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        # [TIMESTAMP] LEVEL - MODULE.FUNCTION:LINE - MESSAGE
        formatted = (
            f"{color}[{self.formatTime(record, '%Y-%m-%d %H:%M:%S')}] "
            f"{record.levelname:8s}{reset} - "
            f"{record.module}.{record.funcName}:{record.lineno} - "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def setup_logging(
    log_level: Optional[str] = None,
    log_dir: Optional[str] = None,
    json_logs: Optional[bool] = None,
    console_output: bool = True,
    file_output: Optional[bool] = None
) -> None:
    """
    Setup logging configuration for the application

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (creates if doesn't exist)
        json_logs: Use JSON formatting (defaults to LOG_JSON env var)
        console_output: Enable console output
        file_output: Write rotating log files (disabled under ENVIRONMENT=test)
    """
    log_level = log_level or os.getenv('LOG_LEVEL', 'INFO')
    log_level = getattr(logging, log_level.upper(), logging.INFO)

    if json_logs is None:
        json_logs = os.getenv('LOG_JSON', 'false').lower() == 'true'

    if file_output is None:
        file_output = os.getenv('ENVIRONMENT', 'development').lower() != 'test'

    if log_dir is None:
        log_dir = os.getenv('LOG_DIR', 'logs')
    log_path = Path(log_dir)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(JSONFormatter() if json_logs else ColoredFormatter())
        root_logger.addHandler(console_handler)

    if file_output:
        log_path.mkdir(parents=True, exist_ok=True)

        if json_logs:
            file_formatter = JSONFormatter()
        else:
            file_formatter = logging.Formatter(
                '[%(asctime)s] %(levelname)-8s - %(name)s.%(funcName)s:%(lineno)d - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path / 'defibuddy.log',
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            filename=log_path / 'errors.log',
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        root_logger.addHandler(error_handler)

    # Suppress noisy third-party loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('openai').setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging initialized - Level: {logging.getLevelName(log_level)}, "
        f"Files: {log_path if file_output else 'disabled'}, JSON: {json_logs}"
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module"""
    return logging.getLogger(name)


class PerformanceLogger:
    """Context manager that times an upstream call or other slow operation"""

    def __init__(self, logger: logging.Logger, operation: str, **kwargs):
        self.logger = logger
        self.operation = operation
        self.extra = kwargs
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.utcnow()
        self.logger.debug(f"Starting: {self.operation}", extra=self.extra)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = (datetime.utcnow() - self.start_time).total_seconds() * 1000

        self.extra['duration_ms'] = round(duration, 2)

        if exc_type is None:
            if duration > 5000:
                self.logger.warning(
                    f"Slow operation: {self.operation} took {duration:.2f}ms",
                    extra=self.extra
                )
            else:
                self.logger.debug(
                    f"Completed: {self.operation} in {duration:.2f}ms",
                    extra=self.extra
                )
        else:
            self.logger.error(
                f"Failed: {self.operation} after {duration:.2f}ms - {exc_val}",
                extra=self.extra,
                exc_info=(exc_type, exc_val, exc_tb)
            )
