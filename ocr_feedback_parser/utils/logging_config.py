"""
Logging configuration for OCR feedback parser system.
Provides console and rotating file logging plus structured error tracking.
"""
import logging
import logging.handlers
import platform
import sys
from pathlib import Path
from typing import Optional, Dict, Any, Iterable
from datetime import datetime


DEFAULT_LOG_FILE = Path("logs") / "ocr_feedback_parser.log"
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

# HTTP retries and image decoding are noisy at DEBUG
NOISY_LOGGERS = ("urllib3", "PIL", "requests")


class LoggingConfig:
    """
    Sets up the root logger for a parsing run.

    Console output is short; the rotating file keeps module and line
    numbers so a bad OCR batch can be traced afterwards.
    """

    def __init__(self,
                 log_level: str = "INFO",
                 log_file: Optional[str] = None,
                 enable_console: bool = True,
                 enable_file: bool = True,
                 max_file_size_mb: int = 10,
                 backup_count: int = 5,
                 quiet_loggers: Iterable[str] = NOISY_LOGGERS):
        """
        Args:
            log_level: Name of the root level, unknown names fall back to INFO
            log_file: Rotating log file, defaults to logs/ocr_feedback_parser.log
            enable_console: Echo records to stdout
            enable_file: Write records to the rotating file
            max_file_size_mb: Size that triggers rotation
            backup_count: Rotated files to keep
            quiet_loggers: Third-party loggers held at WARNING
        """
        self.log_level = getattr(logging, log_level.upper(), logging.INFO)
        self.enable_console = enable_console
        self.enable_file = enable_file
        self.max_file_size_mb = max_file_size_mb
        self.backup_count = backup_count
        self.quiet_loggers = tuple(quiet_loggers)
        self.log_file = Path(log_file) if log_file else DEFAULT_LOG_FILE

        if self.enable_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

        self._configure_root()

    def _configure_root(self) -> None:
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level)
        # Re-running main() in one process must not stack handlers
        root_logger.handlers.clear()

        for handler in self._build_handlers():
            handler.setLevel(self.log_level)
            root_logger.addHandler(handler)

        for name in self.quiet_loggers:
            logging.getLogger(name).setLevel(max(self.log_level, logging.WARNING))

        logger = logging.getLogger(__name__)
        logger.info(f"Logging configured - Level: {logging.getLevelName(self.log_level)}, "
                    f"Console: {self.enable_console}, File: {self.enable_file}")
        if self.enable_file:
            logger.info(f"Log file: {self.log_file}")

    def _build_handlers(self) -> list:
        handlers = []

        if self.enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
            handlers.append(console_handler)

        if self.enable_file:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=self.log_file,
                maxBytes=self.max_file_size_mb * 1024 * 1024,
                backupCount=self.backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            handlers.append(file_handler)

        return handlers

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def log_run_info(self) -> None:
        """Write interpreter and library versions at the start of a run."""
        from .. import __version__

        logger = logging.getLogger(__name__)
        logger.info(f"ocr-feedback-parser {__version__} on Python {platform.python_version()} "
                    f"({sys.platform})")
        logger.debug(f"Working directory: {Path.cwd()}")

    def close(self) -> None:
        """Flush and detach the handlers this config installed."""
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            handler.flush()
            handler.close()
            root_logger.removeHandler(handler)


class ErrorHandler:
    """
    Error tracking for the OCR feedback parser system.
    Records file, OCR and parsing problems with recovery hints.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize error handler.

        Args:
            logger: Logger instance (optional, creates default if not provided)
        """
        self.logger = logger or logging.getLogger(__name__)
        self.error_counts: Dict[str, int] = {}
        self.error_history: list = []

    def handle_file_error(self,
                          file_path: str,
                          error: Exception,
                          operation: str = "processing") -> Dict[str, Any]:
        """
        Handle file-related errors with appropriate logging and recovery suggestions.

        Args:
            file_path: Path to the file that caused the error
            error: The exception that occurred
            operation: Description of the operation being performed

        Returns:
            Dict containing error details and recovery suggestions
        """
        error_type = type(error).__name__
        error_message = str(error)

        self.logger.error(f"File {operation} error for {file_path}: {error_type} - {error_message}")
        self._track_error(error_type)

        error_details = {
            'file_path': file_path,
            'error_type': error_type,
            'error_message': error_message,
            'operation': operation,
            'timestamp': datetime.now().isoformat(),
            'recovery_suggestions': self._get_file_error_recovery_suggestions(error),
            'is_recoverable': self._is_recoverable_file_error(error)
        }

        self.error_history.append(error_details)
        return error_details

    def handle_api_error(self,
                         error: Exception,
                         file_name: Optional[str] = None,
                         retry_count: int = 0) -> Dict[str, Any]:
        """
        Handle OCR API errors with appropriate logging and retry logic.

        Args:
            error: The API exception that occurred
            file_name: Name of file being processed (optional)
            retry_count: Current retry attempt number

        Returns:
            Dict containing error details and retry recommendations
        """
        error_type = type(error).__name__
        error_message = str(error)
        is_rate_limit = "rate limit" in error_message.lower() or "429" in error_message
        is_timeout = "timeout" in error_message.lower()

        if is_rate_limit:
            self.logger.warning(f"OCR rate limit hit for {file_name or 'unknown file'} "
                                f"(attempt {retry_count + 1}): {error_message}")
        elif is_timeout:
            self.logger.warning(f"OCR timeout for {file_name or 'unknown file'} "
                                f"(attempt {retry_count + 1}): {error_message}")
        else:
            self.logger.error(f"OCR error for {file_name or 'unknown file'} "
                              f"(attempt {retry_count + 1}): {error_type} - {error_message}")

        self._track_error(f"api_{error_type.lower()}")

        should_retry, retry_delay = self._get_api_retry_recommendation(error, retry_count)

        error_details = {
            'error_type': error_type,
            'error_message': error_message,
            'file_name': file_name,
            'retry_count': retry_count,
            'timestamp': datetime.now().isoformat(),
            'should_retry': should_retry,
            'retry_delay_seconds': retry_delay,
            'is_rate_limit': is_rate_limit,
            'is_timeout': is_timeout
        }

        self.error_history.append(error_details)
        return error_details

    def handle_no_feedback(self, file_name: str, text_length: int = 0) -> Dict[str, Any]:
        """
        Record an input whose text yielded zero feedback records.

        This is not a parser failure; the operator should re-check the OCR text.

        Args:
            file_name: Name of file being processed
            text_length: Length of the text that was parsed

        Returns:
            Dict containing details and likely causes
        """
        self.logger.warning(f"No feedback extracted from {file_name} ({text_length} characters) - "
                            f"please re-check the OCR text")
        self._track_error("no_feedback_found")

        details = {
            'error_type': 'no_feedback_found',
            'file_name': file_name,
            'text_length': text_length,
            'timestamp': datetime.now().isoformat(),
            'potential_causes': self._analyze_empty_parse(text_length),
            'is_recoverable': False
        }

        self.error_history.append(details)
        return details

    def _track_error(self, error_type: str) -> None:
        """Track error statistics for monitoring."""
        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1

    def _get_file_error_recovery_suggestions(self, error: Exception) -> list:
        """Get recovery suggestions for file errors."""
        suggestions = []
        error_message = str(error).lower()

        if "permission" in error_message:
            suggestions.extend([
                "Check file permissions and ensure read access",
                "Verify the file is not locked by another application"
            ])
        elif "not found" in error_message or "no such file" in error_message:
            suggestions.extend([
                "Verify the file path is correct",
                "Check if the file was moved or deleted"
            ])
        elif "decode" in error_message or "codec" in error_message:
            suggestions.append("Save the text file as UTF-8 and try again")
        elif "corrupted" in error_message or "invalid" in error_message:
            suggestions.extend([
                "Check if the image is corrupted or incomplete",
                "Re-scan the feedback sheet if possible"
            ])
        elif "size" in error_message or "large" in error_message:
            suggestions.append("Reduce the image resolution or split the document")
        else:
            suggestions.append("Review file format and ensure it's supported")

        return suggestions

    def _is_recoverable_file_error(self, error: Exception) -> bool:
        """Determine if a file error is potentially recoverable."""
        error_message = str(error).lower()

        recoverable_indicators = ["timeout", "busy", "locked", "temporary"]
        non_recoverable_indicators = ["not found", "permission denied", "corrupted", "invalid format"]

        if any(indicator in error_message for indicator in non_recoverable_indicators):
            return False

        if any(indicator in error_message for indicator in recoverable_indicators):
            return True

        return False

    def _get_api_retry_recommendation(self, error: Exception, retry_count: int) -> tuple:
        """Get retry recommendation for API errors."""
        error_message = str(error).lower()
        max_retries = 3

        if "rate limit" in error_message or "429" in error_message:
            if retry_count < max_retries:
                return True, min(60, 2 ** retry_count)

        elif "timeout" in error_message:
            if retry_count < max_retries:
                return True, 5 + retry_count * 2

        elif any(code in error_message for code in ["500", "502", "503", "504"]):
            if retry_count < max_retries:
                return True, 2 ** retry_count

        # Authentication and client errors won't succeed on retry
        elif any(code in error_message for code in ["400", "401", "403", "404"]):
            return False, 0

        elif retry_count == 0:
            return True, 5

        return False, 0

    def _analyze_empty_parse(self, text_length: int) -> list:
        """Explain the usual reasons a text produced no feedback."""
        causes = []

        if text_length == 0:
            causes.append("No text was extracted from the input")
        elif text_length < 20:
            causes.append("Very little text extracted - the scan may be blurry or mostly blank")

        causes.append("No recognized labels such as ##Positive##, [Good], Bad: or **Observational** were found")
        causes.append("Labels may be misread by OCR - check the extracted text manually")

        return causes

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Get summary of all errors encountered.

        Returns:
            Dict containing error statistics and recent errors
        """
        total_errors = sum(self.error_counts.values())

        return {
            'total_errors': total_errors,
            'error_counts_by_type': self.error_counts.copy(),
            'recent_errors': self.error_history[-10:],
            'most_common_error': max(self.error_counts.items(), key=lambda x: x[1])[0] if self.error_counts else None
        }

    def clear_error_history(self) -> None:
        """Clear error history and statistics."""
        self.error_counts.clear()
        self.error_history.clear()
        self.logger.info("Error history and statistics cleared")

    def log_error_summary(self) -> None:
        """Log a summary of errors for monitoring."""
        summary = self.get_error_summary()

        if summary['total_errors'] == 0:
            self.logger.info("No errors encountered during processing")
            return

        self.logger.warning(f"Error Summary: {summary['total_errors']} total errors")

        for error_type, count in summary['error_counts_by_type'].items():
            self.logger.warning(f"  {error_type}: {count} occurrences")

        if summary['most_common_error']:
            self.logger.warning(f"Most common error: {summary['most_common_error']}")


def setup_logging(log_level: str = "INFO",
                  log_file: Optional[str] = None,
                  enable_console: bool = True) -> tuple:
    """
    Convenience function to set up logging and error handling.

    Args:
        log_level: Logging level
        log_file: Path to log file (optional)
        enable_console: Whether to enable console logging

    Returns:
        Tuple of (LoggingConfig, ErrorHandler)
    """
    logging_config = LoggingConfig(
        log_level=log_level,
        log_file=log_file,
        enable_console=enable_console
    )

    error_handler = ErrorHandler(logging_config.get_logger(__name__))
    logging_config.log_run_info()

    return logging_config, error_handler
