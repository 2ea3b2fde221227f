# Services module

from .file_scanner import FileScanner, FileValidationResult
from .vision_client import VisionOCRClient, VisionAPIError, OCRResult
from .excel_writer import ExcelWriter
from .batch_processor import BatchProcessor, BatchProcessingError

__all__ = [
    'FileScanner', 'FileValidationResult',
    'VisionOCRClient', 'VisionAPIError', 'OCRResult',
    'ExcelWriter',
    'BatchProcessor', 'BatchProcessingError'
]
