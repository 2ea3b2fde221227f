"""
File scanner module for discovering and validating feedback inputs.

Inputs are either plain text files (already transcribed or OCR'd elsewhere)
or scanned feedback sheets (images, PDFs) that still need text recognition.
"""

import os
import logging
from pathlib import Path
from typing import List, Set, Tuple
from dataclasses import dataclass

from ..utils.file_validator import FileValidator, ValidationError


@dataclass
class FileValidationResult:
    """Result of file validation containing file path and validation status."""
    file_path: Path
    is_valid: bool
    error_message: str = ""


class FileScanner:
    """
    Handles scanning directories for supported feedback input files.
    """

    TEXT_EXTENSIONS: Set[str] = {'.txt'}
    OCR_EXTENSIONS: Set[str] = {'.png', '.jpg', '.jpeg', '.webp', '.pdf'}

    def __init__(self, supported_formats: List[str] = None, max_file_size_mb: int = 10):
        """
        Initialize file scanner.

        Args:
            supported_formats: Extensions without dot to accept (defaults to all known)
            max_file_size_mb: Largest accepted input file
        """
        self.logger = logging.getLogger(__name__)
        self.file_validator = FileValidator(max_file_size_bytes=max_file_size_mb * 1024 * 1024)

        known = self.TEXT_EXTENSIONS | self.OCR_EXTENSIONS
        if supported_formats:
            self.supported_extensions = {f".{fmt.lower().lstrip('.')}" for fmt in supported_formats} & known
        else:
            self.supported_extensions = set(known)

    def scan_directory(self, directory_path: str) -> Tuple[List[Path], List[ValidationError]]:
        """
        Scan directory for supported, valid input files.

        Args:
            directory_path: Path to directory containing feedback inputs

        Returns:
            Tuple of (valid_files sorted by name, validation_errors)

        Raises:
            FileNotFoundError: If directory doesn't exist
            NotADirectoryError: If the path is not a directory
            PermissionError: If directory is not accessible
        """
        dir_path = Path(directory_path)

        if not dir_path.exists():
            raise FileNotFoundError(f"Directory not found: {directory_path}")

        if not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {directory_path}")

        if not os.access(dir_path, os.R_OK):
            raise PermissionError(f"No read permission for directory: {directory_path}")

        self.logger.info(f"Scanning directory: {directory_path}")

        all_files = sorted(f for f in dir_path.iterdir() if f.is_file())
        supported_files = self._filter_supported_formats(all_files)

        valid_files, validation_errors = self.file_validator.validate_files_batch(supported_files)

        error_summary = self.file_validator.get_validation_summary(validation_errors)
        self.logger.info(f"Found {len(valid_files)} valid files out of {len(all_files)} total files. "
                         f"Error summary: {error_summary}")

        return valid_files, validation_errors

    def _filter_supported_formats(self, files: List[Path]) -> List[Path]:
        """
        Filter files by supported formats.

        Args:
            files: List of file paths to filter

        Returns:
            List of files with supported extensions
        """
        supported_files = []

        for file_path in files:
            if file_path.suffix.lower() in self.supported_extensions:
                supported_files.append(file_path)
                self.logger.debug(f"Found supported file: {file_path}")
            else:
                self.logger.debug(f"Skipping unsupported file: {file_path}")

        return supported_files

    def validate_single_file(self, file_path: str) -> FileValidationResult:
        """
        Validate a single file for processing.

        Args:
            file_path: Path to file to validate

        Returns:
            FileValidationResult with validation status
        """
        path_obj = Path(file_path)

        if path_obj.suffix.lower() not in self.supported_extensions:
            return FileValidationResult(
                file_path=path_obj,
                is_valid=False,
                error_message=f"Unsupported file format: {path_obj.suffix}"
            )

        error = self.file_validator.validate_file(path_obj)
        if error is not None:
            return FileValidationResult(file_path=path_obj, is_valid=False, error_message=error.error_message)

        return FileValidationResult(file_path=path_obj, is_valid=True)

    def needs_ocr(self, file_path: Path) -> bool:
        """Whether the file must go through text recognition before parsing."""
        return file_path.suffix.lower() in self.OCR_EXTENSIONS

    def get_supported_extensions(self) -> Set[str]:
        """
        Get the set of supported file extensions.

        Returns:
            Set of supported file extensions
        """
        return self.supported_extensions.copy()

    def handle_validation_errors_gracefully(self, validation_errors: List[ValidationError]) -> None:
        """
        Log validation errors with recovery hints.

        Args:
            validation_errors: List of validation errors to handle
        """
        if not validation_errors:
            return

        error_summary = self.file_validator.get_validation_summary(validation_errors)

        self.logger.warning(f"File validation encountered {len(validation_errors)} errors:")
        for error_type, count in error_summary.items():
            self.logger.warning(f"  {error_type}: {count} files")

        for error in validation_errors:
            if error.error_type == "permission_error":
                self.logger.error(f"Permission denied for {error.file_path}. "
                                  f"Check file permissions and try again.")
            elif error.error_type == "os_error" and error.is_recoverable:
                self.logger.warning(f"Temporary error for {error.file_path}: {error.error_message}. "
                                    f"File may be processed in retry attempt.")
            else:
                self.logger.error(f"Validation failed for {error.file_path}: {error.error_message}")

        recoverable_errors = self.file_validator.filter_recoverable_errors(validation_errors)
        if recoverable_errors:
            self.logger.info(f"{len(recoverable_errors)} errors may be recoverable. "
                             f"Consider retrying these files later.")
