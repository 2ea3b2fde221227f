"""
File validation utilities for OCR feedback parser.

Checks that input files (plain text, scanned images, PDFs) are readable,
within the size limit and of a supported type before they are processed.
"""

import os
import mimetypes
import logging
from pathlib import Path
from typing import List, Dict, Optional, Tuple
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError


@dataclass
class ValidationError:
    """Represents a file validation error with details."""
    file_path: Path
    error_type: str
    error_message: str
    is_recoverable: bool = False


class FileValidator:
    """
    File validation with detailed error handling.

    Beyond access checks, verifies MIME type and, for images, that Pillow
    can identify and verify the file so OCR isn't wasted on corrupt scans.
    """

    SUPPORTED_MIME_TYPES = {
        'text/plain',
        'application/pdf',
        'image/png',
        'image/jpeg',
        'image/webp'
    }

    IMAGE_MIME_TYPES = {'image/png', 'image/jpeg', 'image/webp'}

    _EXTENSION_MIME_TYPES = {
        '.txt': 'text/plain',
        '.pdf': 'application/pdf',
        '.png': 'image/png',
        '.jpg': 'image/jpeg',
        '.jpeg': 'image/jpeg',
        '.webp': 'image/webp'
    }

    # Matches the upload limit of the capture screen
    MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024

    def __init__(self, max_file_size_bytes: Optional[int] = None):
        self.logger = logging.getLogger(__name__)
        if max_file_size_bytes is not None:
            self.MAX_FILE_SIZE_BYTES = max_file_size_bytes

    def validate_files_batch(self, file_paths: List[Path]) -> Tuple[List[Path], List[ValidationError]]:
        """
        Validate a batch of files and return valid files and errors.

        Args:
            file_paths: List of file paths to validate

        Returns:
            Tuple of (valid_files, validation_errors)
        """
        valid_files = []
        validation_errors = []

        for file_path in file_paths:
            error = self.validate_file(file_path)
            if error is None:
                valid_files.append(file_path)
                self.logger.debug(f"File passed validation: {file_path}")
            else:
                validation_errors.append(error)

        self.logger.info(f"Validation complete: {len(valid_files)} valid, {len(validation_errors)} errors")
        return valid_files, validation_errors

    def validate_file(self, file_path: Path) -> Optional[ValidationError]:
        """
        Validate one file.

        Args:
            file_path: Path to file to validate

        Returns:
            None if the file is valid, otherwise a ValidationError
        """
        try:
            reason = self._validate_file_comprehensive(file_path)
            if reason is None:
                return None
            return ValidationError(
                file_path=file_path,
                error_type="validation_failed",
                error_message=reason,
                is_recoverable=False
            )

        except PermissionError as e:
            self.logger.warning(f"Permission error for {file_path}: {e}")
            return ValidationError(
                file_path=file_path,
                error_type="permission_error",
                error_message=f"Permission denied: {str(e)}",
                is_recoverable=False
            )

        except OSError as e:
            self.logger.warning(f"OS error for {file_path}: {e}")
            return ValidationError(
                file_path=file_path,
                error_type="os_error",
                error_message=f"OS error: {str(e)}",
                is_recoverable=True  # Might be temporary
            )

    def _validate_file_comprehensive(self, file_path: Path) -> Optional[str]:
        """
        Perform comprehensive file validation including MIME type and size checks.

        Args:
            file_path: Path to file to validate

        Returns:
            None if the file passes, otherwise the reason it failed

        Raises:
            PermissionError: If file access is denied
            OSError: If file system error occurs
        """
        if not file_path.exists():
            return "File does not exist"

        if not file_path.is_file():
            return "Path is not a file"

        if not os.access(file_path, os.R_OK):
            raise PermissionError(f"No read permission for file: {file_path}")

        file_size = file_path.stat().st_size
        if file_size == 0:
            return "File is empty"

        if file_size > self.MAX_FILE_SIZE_BYTES:
            self.logger.warning(f"File too large ({file_size} bytes): {file_path}")
            return f"File too large: {file_size / (1024 * 1024):.1f}MB"

        mime_type = self.get_mime_type(file_path)
        if mime_type not in self.SUPPORTED_MIME_TYPES:
            self.logger.debug(f"Unsupported MIME type {mime_type} for {file_path}")
            return f"Unsupported file type: {mime_type or file_path.suffix}"

        with open(file_path, 'rb') as f:
            f.read(4096)

        if mime_type in self.IMAGE_MIME_TYPES and not self._verify_image(file_path):
            return "Image file is corrupted or invalid"

        return None

    def get_mime_type(self, file_path: Path) -> Optional[str]:
        """
        Determine the MIME type of a file from its name.

        Args:
            file_path: Path to file

        Returns:
            MIME type string or None if unknown
        """
        mime_type, _ = mimetypes.guess_type(str(file_path))
        if mime_type is None or mime_type not in self.SUPPORTED_MIME_TYPES:
            mime_type = self._EXTENSION_MIME_TYPES.get(file_path.suffix.lower(), mime_type)
        return mime_type

    def _verify_image(self, file_path: Path) -> bool:
        """Check that Pillow can identify and verify the image."""
        try:
            with Image.open(file_path) as image:
                image.verify()
            return True
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            self.logger.warning(f"Image verification failed for {file_path}: {e}")
            return False

    def get_validation_summary(self, validation_errors: List[ValidationError]) -> Dict[str, int]:
        """
        Generate summary statistics for validation errors.

        Args:
            validation_errors: List of validation errors

        Returns:
            Dictionary with error type counts
        """
        summary = {}
        for error in validation_errors:
            summary[error.error_type] = summary.get(error.error_type, 0) + 1

        return summary

    def filter_recoverable_errors(self, validation_errors: List[ValidationError]) -> List[ValidationError]:
        """
        Filter validation errors to return only recoverable ones.

        Args:
            validation_errors: List of all validation errors

        Returns:
            List of recoverable validation errors
        """
        return [error for error in validation_errors if error.is_recoverable]
