"""Tests for ocr_feedback_parser.utils.report_generator."""

import json

from ocr_feedback_parser.models.feedback_data import (
    Category,
    FeedbackRecord,
    ParseWarning,
    ProcessingResult,
)
from ocr_feedback_parser.utils.report_generator import ReportGenerator


def _results():
    return [
        ProcessingResult(
            file_name="a.txt",
            status="pass",
            records=[FeedbackRecord(Category.POSITIVE, "Kind to peers"),
                     FeedbackRecord(Category.OBSERVATIONAL, "Sat in back")],
            warnings=[ParseWarning(0, "[Bad", "Unterminated delimiter '[Bad' at offset 0")],
            text_length=40,
        ),
        ProcessingResult(file_name="b.png", status="error", error_message="OCR error: timeout"),
        ProcessingResult(file_name="c.txt", status="fail", error_message="No feedback found in text"),
    ]


class TestReportGenerator:
    def test_sections(self) -> None:
        stats = {"total_files": 3, "successful": 1, "failed": 1, "errors": 1,
                 "records_extracted": 2, "processing_duration": 2.0}
        report = ReportGenerator().generate_processing_report(_results(), stats, {})

        assert report["processing_summary"]["success_rate_percent"] == 33.33
        assert report["file_analysis"]["status_breakdown"] == {"pass": 1, "fail": 1, "error": 1}
        assert report["feedback_analysis"]["records_by_category"] == {
            "Positive": 1, "Needs Improvement": 0, "Observational": 1
        }
        assert report["feedback_analysis"]["files_with_warnings"] == ["a.txt"]
        assert report["error_analysis"]["error_categories"]["ocr_errors"] == 1
        assert report["error_analysis"]["error_categories"]["no_feedback_found"] == 1
        assert report["detailed_results"][0]["records"][0] == {"type": "good", "text": "Kind to peers"}

    def test_recommendations_mention_unterminated_labels(self) -> None:
        recommendations = ReportGenerator()._generate_recommendations(_results(), {})
        assert any("unterminated labels" in r for r in recommendations)

    def test_saves_json(self, tmp_path) -> None:
        path = tmp_path / "nested" / "report.json"
        ReportGenerator().generate_processing_report(_results(), {}, {}, output_file=str(path))
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert saved["file_analysis"]["total_files"] == 3

    def test_summary_text(self) -> None:
        generator = ReportGenerator()
        report = generator.generate_processing_report(_results(), {"successful": 1, "failed": 1, "errors": 1}, {})
        text = generator.generate_summary_text(report)
        assert "FEEDBACK EXTRACTED:" in text
        assert "Needs Improvement: 0" in text

    def test_empty_results(self) -> None:
        report = ReportGenerator().generate_processing_report([], {}, {})
        assert report["recommendations"] == ["No processing results available for analysis"]
        assert report["performance_metrics"]["files_per_second"] == 0
