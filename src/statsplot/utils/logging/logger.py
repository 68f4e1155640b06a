"""Logging configuration for statsplot"""

import functools
import logging
import logging.handlers
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any
import json


class StatsPlotLogger:
    """
    Centralized logging setup for the statsplot package

    Attaches console and (optionally) rotating file handlers to a named
    logger. Library modules log through ``logging.getLogger(__name__)``
    so configuring the ``statsplot`` logger here covers all of them.
    """

    def __init__(self,
                 name: str = 'statsplot',
                 log_level: str = 'INFO',
                 log_dir: Optional[str] = None,
                 enable_file_logging: bool = False,
                 enable_console_logging: bool = True,
                 max_log_size: int = 10 * 1024 * 1024,  # 10 MB
                 backup_count: int = 5,
                 reset_handlers: bool = False):
        """
        Initialize statsplot logger

        Parameters:
        -----------
        name : str
            Logger name
        log_level : str
            Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        log_dir : str, optional
            Directory for log files. If None, uses './logs'
        enable_file_logging : bool
            Enable logging to files
        enable_console_logging : bool
            Enable logging to console
        max_log_size : int
            Maximum log file size in bytes
        backup_count : int
            Number of backup log files to keep
        reset_handlers : bool
            Remove handlers already attached to the named logger
        """
        self.name = name
        self.log_level = getattr(logging, log_level.upper())
        self.log_dir = Path(log_dir) if log_dir else Path('./logs')
        self.enable_file_logging = enable_file_logging
        self.enable_console_logging = enable_console_logging
        self.max_log_size = max_log_size
        self.backup_count = backup_count
        self.reset_handlers = reset_handlers

        if self.enable_file_logging:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Setup logger with handlers and formatters"""
        logger = logging.getLogger(self.name)
        logger.setLevel(self.log_level)

        if self.reset_handlers:
            logger.handlers.clear()

        if self.enable_console_logging:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(self.log_level)
            console_handler.setFormatter(self._get_console_formatter())
            logger.addHandler(console_handler)

        if self.enable_file_logging:
            file_handler = logging.handlers.RotatingFileHandler(
                self.log_dir / f'{self.name}.log',
                maxBytes=self.max_log_size,
                backupCount=self.backup_count
            )
            file_handler.setLevel(self.log_level)
            file_handler.setFormatter(self._get_file_formatter())
            logger.addHandler(file_handler)

            # Structured chart events only
            analysis_handler = logging.handlers.RotatingFileHandler(
                self.log_dir / f'{self.name}_analysis.log',
                maxBytes=self.max_log_size,
                backupCount=self.backup_count
            )
            analysis_handler.setLevel(logging.INFO)
            analysis_handler.setFormatter(AnalysisJSONFormatter())
            analysis_handler.addFilter(AnalysisLogFilter())
            logger.addHandler(analysis_handler)

        return logger

    def _get_console_formatter(self) -> logging.Formatter:
        """Get formatter for console output"""
        return logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%H:%M:%S'
        )

    def _get_file_formatter(self) -> logging.Formatter:
        """Get formatter for file output"""
        return logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)s | %(module)s.%(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def _log_event(self, event_type: str, **kwargs):
        context = {
            'event_type': event_type,
            'timestamp': datetime.now().isoformat(),
            **kwargs
        }
        self.logger.info("ANALYSIS_EVENT", extra={'analysis_data': context})

    def log_analysis_start(self, analysis_type: str, **kwargs):
        """Log start of a chart build"""
        self._log_event('analysis_start', analysis_type=analysis_type, **kwargs)

    def log_analysis_end(self, analysis_type: str, success: bool = True, **kwargs):
        """Log end of a chart build"""
        self._log_event('analysis_end', analysis_type=analysis_type,
                        success=success, **kwargs)

    def get_logger(self) -> logging.Logger:
        """Get the underlying logger instance"""
        return self.logger


class AnalysisLogFilter(logging.Filter):
    """Filter for analysis-specific log events"""

    def filter(self, record):
        return hasattr(record, 'analysis_data')


class AnalysisJSONFormatter(logging.Formatter):
    """JSON formatter for structured analysis logging"""

    def format(self, record):
        if hasattr(record, 'analysis_data'):
            return json.dumps(record.analysis_data, indent=None,
                              separators=(',', ':'), default=str)
        return super().format(record)


class ContextualLogger:
    """
    Context manager that brackets a chart build with start/end events
    """

    def __init__(self, logger: StatsPlotLogger, analysis_type: str, **context):
        self.logger = logger
        self.analysis_type = analysis_type
        self.context = context
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.log_analysis_start(self.analysis_type, **self.context)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = (datetime.now() - self.start_time).total_seconds()

        self.logger.log_analysis_end(
            self.analysis_type,
            success=exc_type is None,
            duration_seconds=duration,
            error_type=exc_type.__name__ if exc_type else None,
            error_message=str(exc_val) if exc_val else None,
            **self.context
        )


# Global logger instances
_loggers: Dict[str, StatsPlotLogger] = {}
_loggers_lock = threading.Lock()


def get_logger(name: str = 'statsplot', **kwargs) -> StatsPlotLogger:
    """
    Get or create a logger instance

    Parameters:
    -----------
    name : str
        Logger name
    **kwargs
        Logger configuration parameters

    Returns:
    --------
    StatsPlotLogger
        Logger instance
    """
    with _loggers_lock:
        if name not in _loggers:
            _loggers[name] = StatsPlotLogger(name=name, **kwargs)
        return _loggers[name]


def configure_logging(config: Dict[str, Any]) -> StatsPlotLogger:
    """
    Configure logging from configuration dictionary

    Parameters:
    -----------
    config : Dict[str, Any]
        Logging configuration
    """
    logger_name = config.get('name', 'statsplot')

    # Replaces any existing instance and its handlers
    with _loggers_lock:
        _loggers[logger_name] = StatsPlotLogger(**{**config, 'reset_handlers': True})
        return _loggers[logger_name]


def log_function_call(func):
    """
    Decorator for function call logging through the module's logger
    """
    logger = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f"Entering {func.__name__} with kwargs={sorted(kwargs)}")

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error in {func.__name__}: {e}")
            raise

        logger.debug(f"Exiting {func.__name__} successfully")
        return result

    return wrapper
