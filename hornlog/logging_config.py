"""
Logging Configuration for hornlog

Console and rotating-file logging setup, a structured JSON formatter, and
helpers for the events the engine reports (queries, clause changes).
"""

import logging
import logging.handlers
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .config import HornlogConfig

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class StructuredFormatter(logging.Formatter):
    """Structured JSON formatter for logs"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry)


class QueryEventFilter(logging.Filter):
    """Pass only records carrying a query or clause event"""

    EVENT_TYPES = ('query_performance', 'clause_change')

    def filter(self, record: logging.LogRecord) -> bool:
        return hasattr(record, 'extra_fields') and \
            record.extra_fields.get('event_type') in self.EVENT_TYPES


def setup_logging(log_dir: Optional[Path] = None,
                  log_level: str = "WARNING",
                  enable_file_logging: bool = True,
                  enable_structured_logging: bool = False) -> None:
    """
    Setup logging for hornlog

    Args:
        log_dir: Directory for log files (optional)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_file_logging: Whether to enable file logging
        enable_structured_logging: Whether to use structured JSON logging
    """
    level = getattr(logging, log_level.upper())

    if log_dir and enable_file_logging:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers
    root_logger.handlers.clear()

    if enable_structured_logging:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(DEFAULT_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if enable_file_logging and log_dir:
        main_log_handler = logging.handlers.RotatingFileHandler(
            log_dir / "hornlog.log",
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        main_log_handler.setLevel(level)
        main_log_handler.setFormatter(formatter)
        root_logger.addHandler(main_log_handler)

        # Query timings, always structured
        perf_log_handler = logging.handlers.RotatingFileHandler(
            log_dir / "hornlog_queries.log",
            maxBytes=20*1024*1024,  # 20MB
            backupCount=3
        )
        perf_log_handler.setLevel(logging.DEBUG)
        perf_log_handler.addFilter(QueryEventFilter())
        perf_log_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(perf_log_handler)

    setup_component_loggers(level)


def configure_logging(config: "HornlogConfig") -> Optional[logging.Handler]:
    """
    Apply the log_level and log_file settings of a configuration.

    Unlike setup_logging this leaves the root logger alone: it sets the
    hornlog component levels and, if log_file is set, attaches a rotating
    file handler to the hornlog logger.

    Returns:
        The file handler that was added, or None
    """
    level = getattr(logging, config.log_level.upper())
    setup_component_loggers(level)
    if not config.log_file:
        return None

    log_path = Path(config.log_file).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    logging.getLogger('hornlog').addHandler(handler)
    return handler


def setup_component_loggers(level: int = logging.WARNING) -> None:
    """Setup levels for the individual hornlog loggers"""
    logging.getLogger('hornlog.engine').setLevel(level)
    logging.getLogger('hornlog.runtime').setLevel(level)
    # Search tracing only shows up at DEBUG
    logging.getLogger('hornlog.evaluator').setLevel(
        level if level <= logging.DEBUG else logging.WARNING)


def log_query_performance(logger: logging.Logger,
                          query: str,
                          solution_count: int,
                          execution_time_ms: float,
                          level: int = logging.DEBUG) -> None:
    """Log one executed query with its timing"""
    logger.log(
        level,
        "Query executed: %s (%d solution(s), %.2f ms)", query, solution_count, execution_time_ms,
        extra={
            'extra_fields': {
                'event_type': 'query_performance',
                'query': query,
                'solution_count': solution_count,
                'execution_time_ms': execution_time_ms
            }
        }
    )


def log_clause_change(logger: logging.Logger, action: str, clause: str) -> None:
    """Log an assert / retract / rule addition"""
    logger.debug(
        "%s: %s", action, clause,
        extra={
            'extra_fields': {
                'event_type': 'clause_change',
                'action': action,
                'clause': clause
            }
        }
    )
