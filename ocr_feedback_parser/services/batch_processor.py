"""
Batch processing orchestrator for OCR feedback parser system.
Coordinates file scanning, text recognition, feedback parsing and Excel writing
with proper error isolation.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple

from ..config.config_manager import ConfigManager, ConfigurationError
from ..models.feedback_data import FeedbackEntry, ParseResult, ProcessingResult, SessionContext
from ..parsing.parser import FeedbackParser
from ..services.excel_writer import ExcelWriter
from ..services.file_scanner import FileScanner
from ..services.vision_client import VisionOCRClient, VisionAPIError
from ..utils.logging_config import ErrorHandler
from ..utils.report_generator import ReportGenerator


class BatchProcessingError(Exception):
    """Exception raised for batch processing errors."""
    pass


class BatchProcessor:
    """
    Orchestrates the batch workflow for feedback inputs.

    Text files are parsed directly; images and PDFs go through Google Vision
    first. Every extracted record is stored with the session context of the run.
    """

    def __init__(self,
                 config_manager: ConfigManager,
                 context: SessionContext,
                 strict: Optional[bool] = None,
                 ocr_client: Optional[VisionOCRClient] = None):
        """
        Initialize batch processor with configuration.

        Args:
            config_manager: Configuration manager instance
            context: Candidate/module/session/author attached to every entry
            strict: Override for STRICT_MODE
            ocr_client: Pre-built OCR client (created lazily when omitted)
        """
        self.config = config_manager
        self.context = context
        self.logger = logging.getLogger(__name__)

        self.error_handler = ErrorHandler(self.logger)
        self.report_generator = ReportGenerator(self.logger)

        self.file_scanner = FileScanner(
            supported_formats=self.config.get_supported_formats(),
            max_file_size_mb=self.config.get_max_file_size_mb()
        )
        self.parser = FeedbackParser(self.config.get_parser_settings(strict))

        self._ocr_client = ocr_client
        self._ocr_setup_error: Optional[str] = None

        self.stats = {
            'total_files': 0,
            'successful': 0,
            'failed': 0,
            'errors': 0,
            'records_extracted': 0,
            'start_time': None,
            'end_time': None,
            'processing_duration': 0.0
        }

        self.processing_results: List[ProcessingResult] = []

        self.logger.info(f"Batch processor initialized for candidate {context.candidate_id}, "
                         f"module {context.module_id} ({context.session_type})")

    def process_directory(self,
                          input_directory: str,
                          output_excel_file: str,
                          max_workers: int = 3,
                          dry_run: bool = False) -> Dict[str, Any]:
        """
        Process all feedback inputs in a directory and generate Excel output.

        Args:
            input_directory: Path to directory containing feedback inputs
            output_excel_file: Path to output Excel file
            max_workers: Maximum number of concurrent processing threads
            dry_run: Parse everything but leave the workbook untouched

        Returns:
            Dict containing processing summary and statistics

        Raises:
            BatchProcessingError: If processing fails
        """
        self.logger.info(f"Starting batch processing - Input: {input_directory}, Output: {output_excel_file}")

        self._reset_stats()
        self.stats['start_time'] = datetime.now()

        try:
            self.logger.info("Step 1: Scanning directory for feedback inputs")
            valid_files = self._scan_and_validate_files(input_directory)

            if not valid_files:
                raise BatchProcessingError(f"No valid feedback input files found in {input_directory}")

            self.stats['total_files'] = len(valid_files)
            self.logger.info(f"Found {len(valid_files)} valid files to process")

            # The OCR client is shared by the workers, so build it up front
            if any(self.file_scanner.needs_ocr(f) for f in valid_files):
                self._prepare_ocr_client()

            excel_writer = None
            if dry_run:
                self.logger.info("Step 2: Dry run - Excel output will not be written")
            else:
                self.logger.info("Step 2: Initializing Excel output file")
                excel_writer = self._initialize_excel_writer(output_excel_file)

            self.logger.info(f"Step 3: Processing files with {max_workers} concurrent workers")
            self._process_files_concurrently(valid_files, excel_writer, max_workers)

            if excel_writer is not None:
                self.logger.info("Step 4: Saving Excel file and generating summary")
                excel_writer.save_workbook()
                excel_writer.close_workbook()

            self._finish_stats()

            comprehensive_report = self.generate_detailed_report()

            self.error_handler.log_error_summary()

            summary_text = self.report_generator.generate_summary_text(comprehensive_report)
            self.logger.info("Processing Summary Report:")
            for line in summary_text.split('\n'):
                if line.strip():
                    self.logger.info(line)

            self.logger.info(f"Batch processing completed successfully in {self.stats['processing_duration']:.1f}s")

            return comprehensive_report

        except Exception as e:
            self.logger.error(f"Batch processing failed: {e}")
            self._finish_stats()
            self.error_handler.log_error_summary()

            if isinstance(e, BatchProcessingError):
                raise
            raise BatchProcessingError(f"Batch processing failed: {e}") from e

    def _scan_and_validate_files(self, input_directory: str) -> List[Path]:
        """
        Scan directory and validate files for processing.

        Args:
            input_directory: Directory path to scan

        Returns:
            List of valid file paths

        Raises:
            BatchProcessingError: If scanning fails
        """
        try:
            valid_files, validation_errors = self.file_scanner.scan_directory(input_directory)

            if validation_errors:
                self.file_scanner.handle_validation_errors_gracefully(validation_errors)
                self.logger.warning(f"File validation found {len(validation_errors)} issues, "
                                    f"but {len(valid_files)} files are still processable")

            return valid_files

        except OSError as e:
            raise BatchProcessingError(f"Failed to scan directory {input_directory}: {e}") from e

    def _initialize_excel_writer(self, output_excel_file: str) -> ExcelWriter:
        """
        Initialize Excel writer with proper error handling.

        Args:
            output_excel_file: Path to output Excel file

        Returns:
            Initialized ExcelWriter instance

        Raises:
            BatchProcessingError: If Excel initialization fails
        """
        existed = Path(output_excel_file).exists()
        try:
            excel_writer = ExcelWriter(output_excel_file)
            excel_writer.create_or_load_workbook()
        except Exception as e:
            raise BatchProcessingError(f"Failed to initialize Excel file {output_excel_file}: {e}") from e

        if existed:
            self.logger.info(f"Loaded existing Excel file: {output_excel_file}")
        else:
            self.logger.info(f"Created new Excel file: {output_excel_file}")

        return excel_writer

    def _prepare_ocr_client(self) -> Optional[VisionOCRClient]:
        """
        Build the OCR client if it does not exist yet.

        A missing credential is not fatal for the batch: text inputs still get
        processed and each image/PDF is reported as an error.
        """
        if self._ocr_client is None and self._ocr_setup_error is None:
            try:
                self._ocr_client = VisionOCRClient(self.config)
            except ConfigurationError as e:
                self._ocr_setup_error = str(e)
                self.logger.error(f"OCR unavailable, image and PDF inputs will fail: {e}")
        return self._ocr_client

    def _process_files_concurrently(self,
                                    files: List[Path],
                                    excel_writer: Optional[ExcelWriter],
                                    max_workers: int) -> None:
        """
        Process files concurrently with proper error isolation.

        Workers only extract and parse; all workbook writes happen on this thread.

        Args:
            files: List of file paths to process
            excel_writer: Excel writer instance (None for dry runs)
            max_workers: Maximum number of concurrent workers
        """
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_file = {
                executor.submit(self._process_single_file, file_path): file_path
                for file_path in files
            }

            for future in as_completed(future_to_file):
                file_path = future_to_file[future]

                try:
                    processing_result, entries = future.result()
                except Exception as e:
                    self.error_handler.handle_file_error(str(file_path), e, "concurrent processing")
                    processing_result = ProcessingResult(
                        file_name=file_path.name,
                        status="error",
                        error_message=f"Unexpected processing error: {e}"
                    )
                    entries = []

                self._record_result(processing_result)

                if excel_writer is not None:
                    excel_writer.append_entries_and_log(processing_result, entries)

                processed_count = self.stats['successful'] + self.stats['failed'] + self.stats['errors']
                self.log_processing_progress(processed_count, self.stats['total_files'], file_path.name)
                self.logger.info(f"Processed {processed_count}/{self.stats['total_files']}: "
                                 f"{file_path.name} - {processing_result.status}")

    def _record_result(self, processing_result: ProcessingResult) -> None:
        self.processing_results.append(processing_result)

        if processing_result.status == "pass":
            self.stats['successful'] += 1
            self.stats['records_extracted'] += len(processing_result.records)
        elif processing_result.status == "fail":
            self.stats['failed'] += 1
        else:
            self.stats['errors'] += 1

    def extract_text(self, file_path: Path) -> str:
        """
        Get the raw text of an input, running OCR where needed.

        Args:
            file_path: Text, image or PDF input

        Returns:
            Extracted text

        Raises:
            VisionAPIError: If OCR is unavailable or fails
            OSError: If the file cannot be read
            UnicodeDecodeError: If a text file is not UTF-8
        """
        if not self.file_scanner.needs_ocr(file_path):
            # utf-8-sig drops the BOM Notepad puts in front of saved transcripts
            return file_path.read_text(encoding='utf-8-sig')

        client = self._prepare_ocr_client()
        if client is None:
            raise VisionAPIError(f"OCR not configured: {self._ocr_setup_error}")

        return client.extract_text(str(file_path)).text

    def parse_text(self, text: str, source_name: str = "<text>") -> ParseResult:
        """
        Parse already extracted text without touching any output file.

        Args:
            text: Feedback text
            source_name: Name used in log messages

        Returns:
            ParseResult with records and any warnings
        """
        result = self.parser.parse_with_report(text)
        self.logger.info(f"Parsed {source_name}: {len(result.records)} feedback records")
        return result

    def _process_single_file(self, file_path: Path) -> Tuple[ProcessingResult, List[FeedbackEntry]]:
        """
        Extract and parse one input.

        Args:
            file_path: Path to file to process

        Returns:
            Tuple of (ProcessingResult, entries ready to be stored)
        """
        file_name = file_path.name
        self.logger.debug(f"Processing file: {file_name}")
        text_length = 0

        try:
            text = self.extract_text(file_path)
            text_length = len(text)

            parse_result = self.parse_text(text, file_name)

            if parse_result.is_empty():
                self.error_handler.handle_no_feedback(file_name, text_length)
                return ProcessingResult(
                    file_name=file_name,
                    status="fail",
                    error_message="No feedback found in text",
                    warnings=parse_result.warnings,
                    text_length=text_length
                ), []

            processing_result = ProcessingResult(
                file_name=file_name,
                status="pass",
                records=parse_result.records,
                warnings=parse_result.warnings,
                text_length=text_length
            )
            entries = [
                FeedbackEntry.from_record(record, self.context, source_file=file_name,
                                          created_at=processing_result.processing_timestamp)
                for record in parse_result.records
            ]
            return processing_result, entries

        except VisionAPIError as e:
            self.error_handler.handle_api_error(e, file_name)
            return ProcessingResult(
                file_name=file_name,
                status="error",
                error_message=f"OCR error: {e}"
            ), []

        except (OSError, UnicodeDecodeError, ValueError) as e:
            self.error_handler.handle_file_error(str(file_path), e, "processing")
            return ProcessingResult(
                file_name=file_name,
                status="error",
                error_message=f"File error: {e}",
                text_length=text_length
            ), []

    def _reset_stats(self) -> None:
        """Reset processing statistics."""
        self.stats = {
            'total_files': 0,
            'successful': 0,
            'failed': 0,
            'errors': 0,
            'records_extracted': 0,
            'start_time': None,
            'end_time': None,
            'processing_duration': 0.0
        }
        self.processing_results.clear()

    def _finish_stats(self) -> None:
        self.stats['end_time'] = datetime.now()
        if self.stats['start_time']:
            self.stats['processing_duration'] = (
                self.stats['end_time'] - self.stats['start_time']
            ).total_seconds()

    def generate_detailed_report(self, output_file: Optional[str] = None) -> Dict[str, Any]:
        """
        Generate detailed processing report.

        Args:
            output_file: Optional path to save report as JSON file

        Returns:
            Dict containing the processing report
        """
        error_summary = self.error_handler.get_error_summary()
        return self.report_generator.generate_processing_report(
            processing_results=self.processing_results,
            processing_stats=self.stats,
            error_summary=error_summary,
            output_file=output_file
        )

    def save_processing_report(self, output_file: str) -> None:
        """
        Save processing report to file.

        Args:
            output_file: Path to save the report JSON file
        """
        try:
            self.generate_detailed_report(output_file)
            self.logger.info(f"Processing report saved to: {output_file}")
        except Exception as e:
            self.logger.error(f"Failed to save processing report: {e}")
            raise BatchProcessingError(f"Failed to save processing report: {e}") from e

    def get_processing_results(self) -> List[ProcessingResult]:
        """
        Get all processing results from the last batch operation.

        Returns:
            List of ProcessingResult objects
        """
        return self.processing_results.copy()

    def get_processing_statistics(self) -> Dict[str, Any]:
        """
        Get current processing statistics.

        Returns:
            Dict containing current statistics
        """
        return self.stats.copy()

    def validate_configuration(self, skip_api_check: bool = False) -> bool:
        """
        Validate the OCR configuration.

        Args:
            skip_api_check: If True, skip the live connection check

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if not self.config.validate_api_key():
            self.logger.error("Invalid or missing Google Vision credential configuration")
            return False

        client = self._prepare_ocr_client()
        if client is None:
            return False

        if skip_api_check:
            self.logger.info("Skipping API connection validation as requested")
        elif not client.validate_connection():
            self.logger.error("Google Vision API connection validation failed")
            return False

        self.logger.info("Configuration validation successful")
        return True

    def process_single_file_standalone(self,
                                       file_path: str,
                                       output_excel_file: str,
                                       dry_run: bool = False) -> ProcessingResult:
        """
        Process a single file independently.

        Args:
            file_path: Path to single file to process
            output_excel_file: Path to output Excel file
            dry_run: Parse but leave the workbook untouched

        Returns:
            ProcessingResult with processing status and data

        Raises:
            BatchProcessingError: If processing fails
        """
        self.logger.info(f"Processing single file: {file_path}")

        self._reset_stats()
        self.stats['start_time'] = datetime.now()
        self.stats['total_files'] = 1

        file_path_obj = Path(file_path)
        validation_result = self.file_scanner.validate_single_file(str(file_path_obj))

        if not validation_result.is_valid:
            self.error_handler.handle_file_error(
                file_path, ValueError(validation_result.error_message), "validation"
            )
            raise BatchProcessingError(f"File validation failed: {validation_result.error_message}")

        processing_result, entries = self._process_single_file(file_path_obj)
        self._record_result(processing_result)

        if not dry_run:
            excel_writer = self._initialize_excel_writer(output_excel_file)
            try:
                excel_writer.append_entries_and_log(processing_result, entries)
                excel_writer.save_workbook()
            except Exception as e:
                self.error_handler.handle_file_error(output_excel_file, e, "writing")
                raise BatchProcessingError(f"Failed to write {output_excel_file}: {e}") from e
            finally:
                excel_writer.close_workbook()

        self._finish_stats()
        self.error_handler.log_error_summary()

        self.logger.info(f"Single file processing completed: {processing_result.status}")
        return processing_result

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Get error summary from the error handler.

        Returns:
            Dict containing detailed error information and statistics
        """
        return self.error_handler.get_error_summary()

    def clear_error_history(self) -> None:
        """Clear error history and statistics for a fresh start."""
        self.error_handler.clear_error_history()
        self.logger.info("Error history cleared for batch processor")

    def log_processing_progress(self, processed_count: int, total_count: int, current_file: str) -> None:
        """
        Log intermediate statistics every 10 files.

        Args:
            processed_count: Number of files processed so far
            total_count: Total number of files to process
            current_file: Name of file just processed
        """
        self.logger.debug(f"Progress {processed_count}/{total_count} (last: {current_file})")

        if processed_count % 10 == 0 and processed_count > 0:
            self.logger.info(f"Intermediate stats - Success: {self.stats['successful']}, "
                             f"Failed: {self.stats['failed']}, Errors: {self.stats['errors']}, "
                             f"Records: {self.stats['records_extracted']}")

            if self.stats['errors'] > 0 or self.stats['failed'] > 0:
                error_summary = self.error_handler.get_error_summary()
                if error_summary['total_errors'] > 0:
                    self.logger.warning(f"Error types encountered: "
                                        f"{list(error_summary['error_counts_by_type'].keys())}")

    def get_success_failure_statistics(self) -> Dict[str, Any]:
        """
        Get statistics on successful vs failed processing.

        Returns:
            Dict containing success/failure statistics and analysis
        """
        total_processed = len(self.processing_results)
        duration = self.stats.get('processing_duration', 0)

        if total_processed == 0:
            return {
                'total_files': 0,
                'successful': 0,
                'failed': 0,
                'errors': 0,
                'records_extracted': 0,
                'success_rate_percent': 0.0,
                'failure_rate_percent': 0.0,
                'error_rate_percent': 0.0,
                'analysis': ['No files processed'],
                'processing_duration_seconds': duration,
                'files_per_second': 0
            }

        successful = self.stats['successful']
        failed = self.stats['failed']
        errors = self.stats['errors']

        success_rate = (successful / total_processed) * 100
        failure_rate = (failed / total_processed) * 100
        error_rate = (errors / total_processed) * 100

        analysis = []
        if success_rate >= 90:
            analysis.append("Excellent success rate (≥90%)")
        elif success_rate >= 70:
            analysis.append("Good success rate (70-89%)")
        elif success_rate >= 50:
            analysis.append("Moderate success rate (50-69%)")
        else:
            analysis.append("Low success rate (<50%) - requires attention")

        if error_rate > 20:
            analysis.append("High error rate (>20%) - check OCR configuration")
        elif error_rate > 10:
            analysis.append("Moderate error rate (10-20%) - monitor OCR health")

        if failure_rate > 30:
            analysis.append("High no-feedback rate (>30%) - review label formatting on the sheets")

        return {
            'total_files': total_processed,
            'successful': successful,
            'failed': failed,
            'errors': errors,
            'records_extracted': self.stats['records_extracted'],
            'success_rate_percent': round(success_rate, 2),
            'failure_rate_percent': round(failure_rate, 2),
            'error_rate_percent': round(error_rate, 2),
            'analysis': analysis,
            'processing_duration_seconds': duration,
            'files_per_second': round(total_processed / duration, 2) if duration > 0 else 0
        }

    def print_processing_statistics(self) -> None:
        """Print formatted processing statistics to console and log."""
        stats = self.get_success_failure_statistics()

        print("\n" + "=" * 60)
        print("FEEDBACK EXTRACTION STATISTICS")
        print("=" * 60)
        print(f"Total files processed: {stats['total_files']}")
        print(f"Successful extractions: {stats['successful']} ({stats['success_rate_percent']:.1f}%)")
        print(f"No feedback found: {stats['failed']} ({stats['failure_rate_percent']:.1f}%)")
        print(f"Processing errors: {stats['errors']} ({stats['error_rate_percent']:.1f}%)")
        print(f"Feedback records extracted: {stats['records_extracted']}")
        print(f"Processing time: {stats['processing_duration_seconds']:.1f} seconds")
        print(f"Throughput: {stats['files_per_second']:.2f} files/second")

        if stats['analysis']:
            print("\nAnalysis:")
            for analysis_point in stats['analysis']:
                print(f"  • {analysis_point}")

        print("=" * 60 + "\n")

        self.logger.info("Processing statistics summary:")
        self.logger.info(f"  Total: {stats['total_files']}, Success: {stats['successful']}, "
                         f"Failed: {stats['failed']}, Errors: {stats['errors']}, "
                         f"Records: {stats['records_extracted']}")
