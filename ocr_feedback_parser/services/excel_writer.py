"""
Excel writer service for OCR feedback parser system.
Stores parsed feedback entries and a processing log in one workbook.
"""
from pathlib import Path
from typing import Optional, List

import openpyxl
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill
from openpyxl.worksheet.worksheet import Worksheet
from openpyxl.worksheet.datavalidation import DataValidation

from ..models.feedback_data import Category, FeedbackEntry, ProcessingResult
from ..models.modules import get_session_types


class ExcelWriter:
    """
    Manages Excel file operations for feedback storage and processing tracking.

    Creates and maintains a single Excel file with two sheets:
    - "Feedback_Data": One row per extracted feedback entry
    - "Processing_Log": Tracks input processing status
    """

    FEEDBACK_SHEET = "Feedback_Data"
    LOG_SHEET = "Processing_Log"

    # Column headers for Feedback_Data sheet
    FEEDBACK_COLUMNS = [
        "candidate_id",
        "module_id",
        "session_type",
        "feedback_type",
        "feedback_text",
        "author",
        "created_at",
        "source_file"
    ]

    # Column headers for Processing_Log sheet
    LOG_COLUMNS = [
        "file_name",
        "status",
        "records_extracted",
        "warnings",
        "error_message",
        "processing_timestamp"
    ]

    HEADER_FILL = PatternFill(start_color="CCCCCC", end_color="CCCCCC", fill_type="solid")

    # Row fill per feedback type, matching the colours operators see on screen
    TYPE_FILLS = {
        Category.POSITIVE: PatternFill(start_color="DCFCE7", end_color="DCFCE7", fill_type="solid"),
        Category.NEEDS_IMPROVEMENT: PatternFill(start_color="FEE2E2", end_color="FEE2E2", fill_type="solid"),
        Category.OBSERVATIONAL: PatternFill(start_color="DBEAFE", end_color="DBEAFE", fill_type="solid"),
    }

    def __init__(self, file_path: str):
        """
        Initialize Excel writer with target file path.

        Args:
            file_path (str): Path to Excel file to create or load
        """
        self.file_path = Path(file_path)
        self.workbook: Optional[Workbook] = None
        self.feedback_sheet: Optional[Worksheet] = None
        self.log_sheet: Optional[Worksheet] = None

    def create_or_load_workbook(self) -> None:
        """
        Create new Excel workbook or load existing one with proper sheet structure.
        """
        if self.file_path.exists():
            self.workbook = openpyxl.load_workbook(self.file_path)

            if self.FEEDBACK_SHEET in self.workbook.sheetnames:
                self.feedback_sheet = self.workbook[self.FEEDBACK_SHEET]
            else:
                self.feedback_sheet = self.workbook.create_sheet(self.FEEDBACK_SHEET)
                self._setup_headers(self.feedback_sheet, self.FEEDBACK_COLUMNS)
                self._apply_feedback_sheet_formatting()

            if self.LOG_SHEET in self.workbook.sheetnames:
                self.log_sheet = self.workbook[self.LOG_SHEET]
            else:
                self.log_sheet = self.workbook.create_sheet(self.LOG_SHEET)
                self._setup_headers(self.log_sheet, self.LOG_COLUMNS)
                self._apply_log_sheet_formatting()

            # Remove default sheet if it exists and is empty
            if "Sheet" in self.workbook.sheetnames and len(self.workbook.sheetnames) > 1:
                default_sheet = self.workbook["Sheet"]
                if default_sheet.max_row == 1 and default_sheet.max_column == 1:
                    self.workbook.remove(default_sheet)
        else:
            self.workbook = Workbook()

            if "Sheet" in self.workbook.sheetnames:
                self.workbook.remove(self.workbook["Sheet"])

            self.feedback_sheet = self.workbook.create_sheet(self.FEEDBACK_SHEET)
            self._setup_headers(self.feedback_sheet, self.FEEDBACK_COLUMNS)
            self._apply_feedback_sheet_formatting()

            self.log_sheet = self.workbook.create_sheet(self.LOG_SHEET)
            self._setup_headers(self.log_sheet, self.LOG_COLUMNS)
            self._apply_log_sheet_formatting()

            self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def _setup_headers(self, sheet: Worksheet, columns: List[str]) -> None:
        """
        Write bold, shaded header cells to an empty sheet.
        """
        if sheet.max_row == 1 and sheet.max_column == 1 and sheet.cell(row=1, column=1).value is None:
            for col_idx, header in enumerate(columns, 1):
                cell = sheet.cell(row=1, column=col_idx, value=header)
                cell.font = Font(bold=True)
                cell.alignment = Alignment(horizontal='center')
                cell.fill = self.HEADER_FILL

    def _apply_feedback_sheet_formatting(self) -> None:
        """
        Apply column widths, validation and frozen header to Feedback_Data.
        """
        if not self.feedback_sheet:
            raise ValueError("Feedback sheet not initialized")

        column_widths = {
            'A': 18,  # candidate_id
            'B': 20,  # module_id
            'C': 14,  # session_type
            'D': 16,  # feedback_type
            'E': 60,  # feedback_text
            'F': 20,  # author
            'G': 20,  # created_at
            'H': 30,  # source_file
        }

        for col_letter, width in column_widths.items():
            self.feedback_sheet.column_dimensions[col_letter].width = width

        session_validation = DataValidation(
            type="list",
            formula1=f'"{",".join(get_session_types())}"',
            showErrorMessage=True,
            errorTitle="Invalid Session Type",
            error="Session type must be one of: " + ", ".join(get_session_types())
        )
        session_validation.add("C2:C1000")
        self.feedback_sheet.add_data_validation(session_validation)

        type_codes = [category.value for category in Category]
        type_validation = DataValidation(
            type="list",
            formula1=f'"{",".join(type_codes)}"',
            showErrorMessage=True,
            errorTitle="Invalid Feedback Type",
            error="Feedback type must be one of: " + ", ".join(type_codes)
        )
        type_validation.add("D2:D1000")
        self.feedback_sheet.add_data_validation(type_validation)

        self.feedback_sheet.freeze_panes = "A2"

    def _apply_log_sheet_formatting(self) -> None:
        """
        Apply column widths, status validation and frozen header to Processing_Log.
        """
        if not self.log_sheet:
            raise ValueError("Log sheet not initialized")

        column_widths = {
            'A': 30,  # file_name
            'B': 12,  # status
            'C': 18,  # records_extracted
            'D': 12,  # warnings
            'E': 50,  # error_message
            'F': 20,  # processing_timestamp
        }

        for col_letter, width in column_widths.items():
            self.log_sheet.column_dimensions[col_letter].width = width

        status_validation = DataValidation(
            type="list",
            formula1='"pass,fail,error"',
            showErrorMessage=True,
            errorTitle="Invalid Status",
            error="Status must be one of: pass, fail, error"
        )
        status_validation.add("B2:B1000")
        self.log_sheet.add_data_validation(status_validation)

        self.log_sheet.freeze_panes = "A2"

    def save_workbook(self) -> None:
        """
        Save the workbook to file.
        """
        if not self.workbook:
            raise ValueError("Workbook not initialized")

        self.workbook.save(self.file_path)

    def _write_row(self, sheet: Worksheet, row: int, values: list) -> None:
        """Write values into a row, keeping strings as literal text."""
        for col_idx, value in enumerate(values, 1):
            cell = sheet.cell(row=row, column=col_idx, value=value)
            # openpyxl turns any string starting with "=" into a formula
            if isinstance(value, str):
                cell.data_type = 's'

    def append_feedback_entry(self, entry: FeedbackEntry) -> None:
        """
        Add a row to Feedback_Data for one feedback entry.

        Args:
            entry (FeedbackEntry): The entry to append
        """
        if not self.feedback_sheet:
            raise ValueError("Feedback sheet not initialized")

        next_row = self.feedback_sheet.max_row + 1

        self._write_row(self.feedback_sheet, next_row, entry.to_row())

        type_cell = self.feedback_sheet.cell(row=next_row, column=4)
        type_cell.fill = self.TYPE_FILLS[entry.feedback_type]
        type_cell.alignment = Alignment(horizontal='center')
        self.feedback_sheet.cell(row=next_row, column=5).alignment = Alignment(wrap_text=True, vertical='top')

    def update_processing_log(self, processing_result: ProcessingResult) -> None:
        """
        Update Processing_Log sheet with input processing status.

        Args:
            processing_result (ProcessingResult): The processing result to log
        """
        if not self.log_sheet:
            raise ValueError("Log sheet not initialized")

        next_row = self.log_sheet.max_row + 1

        log_row = [
            processing_result.file_name,
            processing_result.status,
            len(processing_result.records),
            len(processing_result.warnings),
            processing_result.error_message or "",
            processing_result.processing_timestamp
        ]

        self._write_row(self.log_sheet, next_row, log_row)

    def append_entries_and_log(self, processing_result: ProcessingResult, entries: List[FeedbackEntry]) -> None:
        """
        Convenience method to append feedback entries and the processing log row.

        Args:
            processing_result (ProcessingResult): Outcome for one input
            entries (List[FeedbackEntry]): Entries built from its records
        """
        self.update_processing_log(processing_result)

        if processing_result.is_successful():
            for entry in entries:
                self.append_feedback_entry(entry)

    def get_feedback_data_count(self) -> int:
        """
        Get the number of feedback rows (excluding header).

        Returns:
            int: Number of data rows in Feedback_Data sheet
        """
        if not self.feedback_sheet:
            return 0
        return max(0, self.feedback_sheet.max_row - 1)

    def get_processing_log_count(self) -> int:
        """
        Get the number of processing log entries (excluding header).

        Returns:
            int: Number of log entries in Processing_Log sheet
        """
        if not self.log_sheet:
            return 0
        return max(0, self.log_sheet.max_row - 1)

    def get_processing_summary(self) -> dict:
        """
        Get summary statistics from the processing log.

        Returns:
            dict: Summary with counts of pass, fail, error statuses
        """
        summary = {"pass": 0, "fail": 0, "error": 0, "total": 0}
        if not self.log_sheet:
            return summary

        for row in range(2, self.log_sheet.max_row + 1):
            status_cell = self.log_sheet.cell(row=row, column=2)
            if status_cell.value:
                status = str(status_cell.value).lower()
                if status in summary:
                    summary[status] += 1
                summary["total"] += 1

        return summary

    def close_workbook(self) -> None:
        """
        Close the workbook and clean up resources.
        """
        if self.workbook:
            self.workbook.close()
            self.workbook = None
            self.feedback_sheet = None
            self.log_sheet = None
