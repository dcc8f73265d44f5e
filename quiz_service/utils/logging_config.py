"""
Logging Setup - Console and file logging for the quiz service

Defaults come from settings (LOG_LEVEL, LOG_TO_FILE, LOG_DIR, LOG_MAX_BYTES,
LOG_BACKUP_COUNT). Files written under LOG_DIR:
- quiz-service.log         everything at the configured level
- quiz-service_errors.log  ERROR and above
- quiz-events.log          only the [QUIZ] session event lines
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import List, Optional

from ..config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
EVENT_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Logger that emits the [QUIZ] event lines
QUIZ_EVENT_LOGGER = "quiz_service.quiz.utils.logging"


class QuizEventFilter(logging.Filter):
    """Passes only records from the quiz event logger."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name == QUIZ_EVENT_LOGGER


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8"
    )
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def build_handlers(
    service_name: str,
    log_to_file: bool,
    log_to_console: bool,
    log_dir: Optional[str]
) -> List[logging.Handler]:
    """Create the handler set without touching any logger."""
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers: List[logging.Handler] = []

    if log_to_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        handlers.append(console)

    if log_to_file:
        directory = Path(log_dir or settings.LOG_DIR)
        directory.mkdir(parents=True, exist_ok=True)

        handlers.append(_rotating_handler(directory / f"{service_name}.log", logging.DEBUG, formatter))
        handlers.append(_rotating_handler(directory / f"{service_name}_errors.log", logging.ERROR, formatter))

        if settings.LOG_QUIZ_EVENTS_FILE:
            events = _rotating_handler(
                directory / "quiz-events.log",
                logging.DEBUG,
                logging.Formatter(EVENT_FORMAT, DATE_FORMAT)
            )
            events.addFilter(QuizEventFilter())
            handlers.append(events)

    return handlers


def setup_logging(
    service_name: str = "quiz-service",
    level: Optional[str] = None,
    log_to_file: Optional[bool] = None,
    log_to_console: bool = True,
    log_dir: Optional[str] = None
) -> logging.Logger:
    """
    Configure the root logger for the quiz service.

    Args:
        service_name: Prefix for log file names
        level: Log level name (settings.LOG_LEVEL if None)
        log_to_file: Write log files (settings.LOG_TO_FILE if None)
        log_to_console: Write to stdout
        log_dir: Directory for log files (settings.LOG_DIR if None)

    Returns:
        The service logger
    """
    level = (level or settings.LOG_LEVEL).upper()
    log_to_file = settings.LOG_TO_FILE if log_to_file is None else log_to_file

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    for handler in build_handlers(service_name, log_to_file, log_to_console, log_dir):
        root_logger.addHandler(handler)

    logger = logging.getLogger(service_name)
    logger.info(f"Logging configured: level={level} files={'on' if log_to_file else 'off'}")
    return logger
