# Utilities module

from .file_validator import FileValidator, ValidationError
from .logging_config import LoggingConfig, ErrorHandler, setup_logging
from .report_generator import ReportGenerator

__all__ = [
    'FileValidator', 'ValidationError',
    'LoggingConfig', 'ErrorHandler', 'setup_logging',
    'ReportGenerator'
]
