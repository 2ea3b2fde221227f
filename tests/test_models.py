"""Tests for ocr_feedback_parser.models."""

from datetime import datetime

import pytest

from ocr_feedback_parser.models.feedback_data import (
    Category,
    FeedbackEntry,
    FeedbackRecord,
    ProcessingResult,
    SessionContext,
)
from ocr_feedback_parser.models.modules import get_module, get_module_ids, get_session_types


class TestCategory:
    def test_storage_codes(self) -> None:
        assert [c.value for c in Category] == ["good", "bad", "observational"]

    def test_display_names(self) -> None:
        assert Category.NEEDS_IMPROVEMENT.display_name == "Needs Improvement"

    def test_from_code(self) -> None:
        assert Category.from_code(" GOOD ") is Category.POSITIVE
        assert Category.from_code("neutral") is None
        assert Category.from_code(None) is None


class TestModules:
    def test_catalogue(self) -> None:
        assert "ethics" in get_module_ids()
        assert get_session_types() == ["lecture", "social"]

    def test_get_module(self) -> None:
        assert get_module("Time-Management").name == "Time Management"
        assert get_module("unknown") is None


class TestSessionContext:
    def test_normalizes_fields(self) -> None:
        context = SessionContext(" C-1 ", "ethics", " Lecture ", author="  ")
        assert context.candidate_id == "C-1"
        assert context.session_type == "lecture"
        assert context.author == "Anonymous"

    def test_rejects_unknown_session(self) -> None:
        with pytest.raises(ValueError):
            SessionContext("C-1", "ethics", "workshop")

    def test_requires_candidate(self) -> None:
        with pytest.raises(ValueError):
            SessionContext("", "ethics", "lecture")


class TestFeedbackEntry:
    def test_from_record(self, context: SessionContext) -> None:
        record = FeedbackRecord(Category.OBSERVATIONAL, "Sat in back")
        created = datetime(2024, 3, 1, 9, 30)
        entry = FeedbackEntry.from_record(record, context, source_file="a.txt", created_at=created)

        assert entry.to_row() == [
            "C-042", "ethics", "lecture", "observational", "Sat in back", "Trainer A", created, "a.txt"
        ]
        assert entry.to_dict()["created_at"] == "2024-03-01T09:30:00"
        # The record itself is passed through unchanged
        assert record == FeedbackRecord(Category.OBSERVATIONAL, "Sat in back")


class TestProcessingResult:
    def test_timestamp_defaults(self) -> None:
        result = ProcessingResult(file_name="a.txt", status="pass")
        assert isinstance(result.processing_timestamp, datetime)
        assert result.is_successful()
        assert not result.has_data()

    def test_error_summary(self) -> None:
        result = ProcessingResult(file_name="a.png", status="error", error_message="OCR error: boom")
        assert result.get_error_summary() == "File: a.png, Status: error, Records: 0, Error: OCR error: boom"
