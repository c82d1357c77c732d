"""
Logging configuration for the staff feedback form.
Provides console and rotating file logging plus error tracking for store and mirror failures.
"""
import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime


class LoggingConfig:
    """
    Configures logging for the staff feedback form.
    Supports multiple log levels, file rotation, and structured logging.
    """

    def __init__(self,
                 log_level: str = "INFO",
                 log_file: Optional[str] = None,
                 enable_console: bool = True,
                 enable_file: bool = True,
                 max_file_size_mb: int = 10,
                 backup_count: int = 5):
        """
        Initialize logging configuration.

        Args:
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Path to log file (optional, defaults to logs/staff_feedback.log)
            enable_console: Whether to enable console logging
            enable_file: Whether to enable file logging
            max_file_size_mb: Maximum log file size in MB before rotation
            backup_count: Number of backup log files to keep
        """
        self.log_level = getattr(logging, log_level.upper(), logging.INFO)
        self.enable_console = enable_console
        self.enable_file = enable_file
        self.max_file_size_mb = max_file_size_mb
        self.backup_count = backup_count

        # Set default log file path if not provided
        if log_file is None:
            log_dir = Path("logs")
            if enable_file:
                log_dir.mkdir(exist_ok=True)
            self.log_file = log_dir / "staff_feedback.log"
        else:
            self.log_file = Path(log_file)
            if enable_file:
                self.log_file.parent.mkdir(parents=True, exist_ok=True)

        self._setup_logging()

    def _setup_logging(self) -> None:
        """Configure logging with appropriate handlers and formatters."""
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level)

        # Clear existing handlers to avoid duplicates
        root_logger.handlers.clear()

        detailed_formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        simple_formatter = logging.Formatter(
            fmt='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

        if self.enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(self.log_level)
            console_handler.setFormatter(simple_formatter)
            root_logger.addHandler(console_handler)

        if self.enable_file:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=self.log_file,
                maxBytes=self.max_file_size_mb * 1024 * 1024,
                backupCount=self.backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(self.log_level)
            file_handler.setFormatter(detailed_formatter)
            root_logger.addHandler(file_handler)

        logger = logging.getLogger(__name__)
        logger.info(f"Logging configured - Level: {logging.getLevelName(self.log_level)}, "
                    f"Console: {self.enable_console}, File: {self.enable_file}")
        if self.enable_file:
            logger.info(f"Log file: {self.log_file}")

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger instance with the specified name.

        Args:
            name: Logger name (typically __name__)

        Returns:
            Configured logger instance
        """
        return logging.getLogger(name)

    def log_system_info(self) -> None:
        """Log system information for debugging purposes."""
        logger = logging.getLogger(__name__)
        logger.info("=== System Information ===")
        logger.info(f"Python version: {sys.version}")
        logger.info(f"Platform: {sys.platform}")
        logger.info(f"Current working directory: {Path.cwd()}")
        logger.info(f"Log file location: {self.log_file}")
        logger.info("=== End System Information ===")


class ErrorHandler:
    """
    Error tracking for the staff feedback form.
    Logs store and mirror failures with context and keeps per-kind counts.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, history_size: int = 50):
        """
        Initialize error handler.

        Args:
            logger: Logger instance (optional, creates default if not provided)
            history_size: Number of error entries kept in memory
        """
        self.logger = logger or logging.getLogger(__name__)
        self.history_size = history_size
        self.error_counts: Dict[str, int] = {}
        self.error_history: list = []
        self._lock = threading.Lock()

    def handle_store_error(self,
                           error: Exception,
                           operation: str,
                           context: Optional[str] = None) -> Dict[str, Any]:
        """
        Log a primary store failure and record it.

        Args:
            error: The exception raised by the store client
            operation: What was being done ("unit catalog", "roster", "feedback insert")
            context: Optional detail such as the unit name

        Returns:
            Dict containing error details and recovery suggestions
        """
        error_type = type(error).__name__
        error_message = str(error)
        status_code = getattr(error, 'status_code', None)

        where = f" ({context})" if context else ""
        self.logger.error(f"Store error during {operation}{where}: {error_type} - {error_message}")

        self._track_error(f"store_{operation.replace(' ', '_')}")

        error_details = {
            'kind': 'store',
            'operation': operation,
            'context': context,
            'error_type': error_type,
            'error_message': error_message,
            'status_code': status_code,
            'timestamp': datetime.now().isoformat(),
            'recovery_suggestions': self._get_store_recovery_suggestions(status_code, error_message),
        }
        self._remember(error_details)
        return error_details

    def handle_mirror_error(self, error: Exception, record_summary: str = '') -> Dict[str, Any]:
        """
        Log a spreadsheet mirror failure. Mirror failures never reach the user.

        Args:
            error: The exception raised by the mirror sink
            record_summary: Short description of the record that was not mirrored

        Returns:
            Dict containing error details
        """
        error_type = type(error).__name__
        error_message = str(error)

        self.logger.warning(f"Spreadsheet mirror failed for {record_summary or 'record'}: "
                            f"{error_type} - {error_message}")

        self._track_error("mirror")

        error_details = {
            'kind': 'mirror',
            'operation': 'mirror append',
            'context': record_summary,
            'error_type': error_type,
            'error_message': error_message,
            'timestamp': datetime.now().isoformat(),
        }
        self._remember(error_details)
        return error_details

    def _track_error(self, error_type: str) -> None:
        """Track error statistics for monitoring."""
        with self._lock:
            self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1

    def _remember(self, error_details: Dict[str, Any]) -> None:
        with self._lock:
            self.error_history.append(error_details)
            if len(self.error_history) > self.history_size:
                del self.error_history[:-self.history_size]

    def _get_store_recovery_suggestions(self, status_code: Optional[int], error_message: str) -> list:
        """Get recovery suggestions for store errors."""
        message = error_message.lower()

        if status_code in (401, 403):
            return ["Check SUPABASE_KEY and the row level security policies of the table"]
        if status_code == 404:
            return ["Check STAFF_TABLE / FEEDBACK_TABLE; the table was not found"]
        if status_code is not None and status_code >= 500:
            return ["The store reported a server error; try again later"]
        if "timeout" in message or "timed out" in message:
            return ["The store did not answer in time; consider raising REQUEST_TIMEOUT"]
        if "connection" in message:
            return ["Check network access and SUPABASE_URL"]
        return ["Review the store response in the log"]

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Get summary of all errors encountered.

        Returns:
            Dict containing error statistics and recent errors
        """
        with self._lock:
            error_counts = self.error_counts.copy()
            recent_errors = self.error_history[-10:]

        return {
            'total_errors': sum(error_counts.values()),
            'error_counts_by_type': error_counts,
            'recent_errors': recent_errors,
            'most_common_error': max(error_counts.items(), key=lambda x: x[1])[0] if error_counts else None
        }

    def clear_error_history(self) -> None:
        """Clear error history and statistics."""
        with self._lock:
            self.error_counts.clear()
            self.error_history.clear()
        self.logger.info("Error history and statistics cleared")

    def log_error_summary(self) -> None:
        """Log a summary of errors for monitoring."""
        summary = self.get_error_summary()

        if summary['total_errors'] == 0:
            self.logger.info("No errors encountered")
            return

        self.logger.warning(f"Error Summary: {summary['total_errors']} total errors")

        for error_type, count in summary['error_counts_by_type'].items():
            self.logger.warning(f"  {error_type}: {count} occurrences")


def setup_logging(log_level: str = "INFO",
                  log_file: Optional[str] = None,
                  enable_console: bool = True,
                  enable_file: bool = True) -> tuple:
    """
    Convenience function to set up logging and error handling.

    Args:
        log_level: Logging level
        log_file: Path to log file (optional)
        enable_console: Whether to enable console logging
        enable_file: Whether to enable rotating file logging

    Returns:
        Tuple of (LoggingConfig, ErrorHandler)
    """
    logging_config = LoggingConfig(
        log_level=log_level,
        log_file=log_file,
        enable_console=enable_console,
        enable_file=enable_file
    )

    error_handler = ErrorHandler(logging_config.get_logger(__name__))

    logging_config.log_system_info()

    return logging_config, error_handler
