"""Tests for ocr_feedback_parser.services.excel_writer."""

from datetime import datetime

import openpyxl

from ocr_feedback_parser.models.feedback_data import (
    Category,
    FeedbackEntry,
    FeedbackRecord,
    ProcessingResult,
    SessionContext,
)
from ocr_feedback_parser.parsing.parser import parse_feedback_text
from ocr_feedback_parser.services.excel_writer import ExcelWriter


def _entries(context, file_name="a.txt"):
    created = datetime(2024, 3, 1, 9, 30)
    records = [
        FeedbackRecord(Category.POSITIVE, "Great attitude in class"),
        FeedbackRecord(Category.NEEDS_IMPROVEMENT, "Talks over others"),
    ]
    return [FeedbackEntry.from_record(r, context, file_name, created) for r in records], records


class TestExcelWriter:
    def test_creates_both_sheets(self, tmp_path) -> None:
        path = tmp_path / "out" / "feedback.xlsx"
        writer = ExcelWriter(str(path))
        writer.create_or_load_workbook()
        writer.save_workbook()
        writer.close_workbook()

        workbook = openpyxl.load_workbook(path)
        assert workbook.sheetnames == ["Feedback_Data", "Processing_Log"]
        header = [cell.value for cell in workbook["Feedback_Data"][1]]
        assert header == ExcelWriter.FEEDBACK_COLUMNS
        assert workbook["Feedback_Data"].freeze_panes == "A2"

    def test_round_trip(self, tmp_path, context) -> None:
        path = tmp_path / "feedback.xlsx"
        entries, records = _entries(context)
        result = ProcessingResult(file_name="a.txt", status="pass", records=records)

        writer = ExcelWriter(str(path))
        writer.create_or_load_workbook()
        writer.append_entries_and_log(result, entries)
        assert writer.get_feedback_data_count() == 2
        writer.save_workbook()
        writer.close_workbook()

        workbook = openpyxl.load_workbook(path)
        rows = list(workbook["Feedback_Data"].iter_rows(min_row=2, values_only=True))
        assert rows[0][:6] == ("C-042", "ethics", "lecture", "good", "Great attitude in class", "Trainer A")
        assert rows[1][3] == "bad"
        assert rows[1][7] == "a.txt"

        log_rows = list(workbook["Processing_Log"].iter_rows(min_row=2, values_only=True))
        assert log_rows[0][:4] == ("a.txt", "pass", 2, 0)

    def test_failed_result_only_logged(self, tmp_path, context) -> None:
        entries, _ = _entries(context)
        result = ProcessingResult(file_name="b.txt", status="fail", error_message="No feedback found in text")

        writer = ExcelWriter(str(tmp_path / "feedback.xlsx"))
        writer.create_or_load_workbook()
        writer.append_entries_and_log(result, entries)

        assert writer.get_feedback_data_count() == 0
        assert writer.get_processing_log_count() == 1

    def test_appends_to_existing_workbook(self, tmp_path, context) -> None:
        path = tmp_path / "feedback.xlsx"
        entries, records = _entries(context)

        for name in ("a.txt", "b.txt"):
            writer = ExcelWriter(str(path))
            writer.create_or_load_workbook()
            writer.append_entries_and_log(ProcessingResult(file_name=name, status="pass", records=records),
                                          entries)
            writer.save_workbook()
            writer.close_workbook()

        writer = ExcelWriter(str(path))
        writer.create_or_load_workbook()
        assert writer.get_feedback_data_count() == 4
        assert writer.get_processing_summary() == {"pass": 2, "fail": 0, "error": 0, "total": 2}
        writer.close_workbook()

    def test_text_starting_with_equals_stays_text(self, tmp_path) -> None:
        path = tmp_path / "feedback.xlsx"
        context = SessionContext(candidate_id="=C-7", module_id="ethics",
                                 session_type="lecture", author="=HYPERLINK(\"x\")")
        records = parse_feedback_text("Bad: =interrupts everyone, twice")
        entries = [FeedbackEntry.from_record(r, context, "=scan.txt") for r in records]

        writer = ExcelWriter(str(path))
        writer.create_or_load_workbook()
        writer.append_entries_and_log(
            ProcessingResult(file_name="=scan.txt", status="pass", records=records), entries)
        writer.save_workbook()
        writer.close_workbook()

        sheet = openpyxl.load_workbook(path)["Feedback_Data"]
        assert sheet["E2"].data_type == "s"
        assert sheet["E2"].value == "=interrupts everyone, twice"
        assert sheet["A2"].value == "=C-7"
        assert sheet["F2"].value == "=HYPERLINK(\"x\")"
        assert openpyxl.load_workbook(path)["Processing_Log"]["A2"].data_type == "s"
