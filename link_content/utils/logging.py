"""
Logging configuration for the link content workflow.

This module provides centralized logging setup and
configuration for the application.
"""

import logging
import logging.handlers
import os
from datetime import datetime
from typing import Any, Dict, Optional


def setup_logging(config: Dict[str, Any]):
    """
    Setup logging configuration.

    Args:
        config: Configuration dictionary
    """
    log_file = config.get('LOG_FILE', 'logs/app.log')
    log_dir = os.path.dirname(log_file) if log_file else ''
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    level = getattr(logging, config.get('LOG_LEVEL', 'INFO'))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler with rotation
    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=config.get('LOG_MAX_BYTES', 10485760),  # 10MB
            backupCount=config.get('LOG_BACKUP_COUNT', 5)
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    configure_loggers()


def configure_loggers():
    """Quiet chatty third-party loggers."""
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('celery').setLevel(logging.INFO)
    logging.getLogger('litellm').setLevel(logging.WARNING)
    logging.getLogger('LiteLLM').setLevel(logging.WARNING)
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('playwright').setLevel(logging.WARNING)
    # readability-lxml logs every candidate it scores
    logging.getLogger('readability').setLevel(logging.WARNING)


class StructuredLogger:
    """
    Logger that attaches keyword fields to each record as ``extra``.

    Fields bound with ``bind`` are added to every record; fields that are
    None are left out so a record only carries what is known.
    """

    def __init__(self, name: str, **context):
        self.logger = logging.getLogger(name)
        self.context = context

    def bind(self, **fields) -> 'StructuredLogger':
        """Logger with the same name and additional bound fields."""
        return StructuredLogger(self.logger.name, **{**self.context, **fields})

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, **kwargs)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def _log(self, level: int, message: str, **kwargs):
        fields = {**self.context, **kwargs}
        extra = {key: value for key, value in fields.items() if value is not None}
        extra['timestamp'] = datetime.utcnow().isoformat()
        self.logger.log(level, message, extra=extra)


def get_logger(name: str, **context) -> StructuredLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name
        **context: Fields attached to every record

    Returns:
        Structured logger instance
    """
    return StructuredLogger(name, **context)


def _subject(job_id: Optional[str], item_id: Optional[str]) -> str:
    if item_id:
        return f" for item {item_id} of job {job_id}"
    return f" for job {job_id}" if job_id else ""


class TaskLogger:
    """Logs the lifecycle of background workflow operations with their job and item ids."""

    def __init__(self):
        self.logger = get_logger('link_content.tasks')

    def for_task(self, task_id: str, operation: str, job_id: str = None,
                 item_id: str = None) -> StructuredLogger:
        return self.logger.bind(task_id=task_id, operation=operation, job_id=job_id, item_id=item_id)

    def log_task_start(self, task_id: str, operation: str, job_id: str = None, item_id: str = None):
        self.for_task(task_id, operation, job_id, item_id).info(
            f"Task started: {operation}{_subject(job_id, item_id)}"
        )

    def log_task_complete(self, task_id: str, operation: str, duration: float,
                          job_id: str = None, item_id: str = None, **fields):
        self.for_task(task_id, operation, job_id, item_id).info(
            f"Task completed: {operation}{_subject(job_id, item_id)} in {duration:.2f}s",
            duration=duration,
            **fields
        )

    def log_task_error(self, task_id: str, operation: str, error: str,
                       job_id: str = None, item_id: str = None):
        self.for_task(task_id, operation, job_id, item_id).error(
            f"Task error: {operation}{_subject(job_id, item_id)}: {error}",
            error=error
        )
