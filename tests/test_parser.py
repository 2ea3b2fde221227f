"""Tests for ocr_feedback_parser.parsing.parser.

Covers the end-to-end scenarios, strict mode and the trace hook.
"""

import logging

import pytest

from ocr_feedback_parser.models.feedback_data import Category, FeedbackRecord
from ocr_feedback_parser.parsing.parser import FeedbackParser, ParserSettings, parse_feedback_text


class TestScenarios:
    def test_two_double_hash_labels(self) -> None:
        records = parse_feedback_text("##Positive## Great attitude in class ##Bad## Talks over others")
        assert records == [
            FeedbackRecord(Category.POSITIVE, "Great attitude in class"),
            FeedbackRecord(Category.NEEDS_IMPROVEMENT, "Talks over others"),
        ]

    def test_colon_label(self) -> None:
        records = parse_feedback_text("Observational: Quiet during group work.")
        assert records == [FeedbackRecord(Category.OBSERVATIONAL, "Quiet during group work.")]

    def test_no_markers(self) -> None:
        assert parse_feedback_text("No markers here at all.") == []

    def test_duplicate_dropped(self) -> None:
        records = parse_feedback_text("[Good] Helped a peer. [Good] Helped a peer.")
        assert records == [FeedbackRecord(Category.POSITIVE, "Helped a peer.")]

    def test_short_body(self) -> None:
        assert parse_feedback_text("**Bad** x") == []

    def test_mixed_conventions(self) -> None:
        records = parse_feedback_text("#Positive# Arrived early [Observational] Sat in back")
        assert [r.category for r in records] == [Category.POSITIVE, Category.OBSERVATIONAL]
        assert [r.text for r in records] == ["Arrived early", "Sat in back"]


class TestFeedbackParser:
    def test_empty_and_none(self) -> None:
        parser = FeedbackParser()
        assert parser.parse("") == []
        assert parser.parse(None) == []

    def test_rejects_non_text(self) -> None:
        with pytest.raises(TypeError):
            FeedbackParser().parse(b"##Good## bytes")

    def test_long_text_without_labels(self) -> None:
        assert FeedbackParser().parse("lorem ipsum " * 2000) == []

    def test_ocr_style_sheet(self) -> None:
        text = (
            "VANGUARD FEEDBACK SHEET\n"
            "Module: Ethics\n"
            "## POSITIVE ##\n"
            "- Great attitude\n  in class\n"
            "## NEEDS IMPROVEMENT ##\n"
            "• Talks over others\n"
            "[observation] sits at the back\n"
        )
        records = FeedbackParser().parse(text)
        assert [r.to_dict() for r in records] == [
            {"type": "good", "text": "Great attitude in class"},
            {"type": "bad", "text": "Talks over others"},
            {"type": "observational", "text": "sits at the back"},
        ]

    def test_report_contains_segments(self) -> None:
        text = "intro [Good] Kind to peers Bad: Late twice"
        result = FeedbackParser().parse_with_report(text)
        assert len(result.segments) == 2
        assert result.segments[0].start == text.index("[Good]")
        assert result.warnings == []
        assert result.count_by_category() == {
            Category.POSITIVE: 1,
            Category.NEEDS_IMPROVEMENT: 1,
            Category.OBSERVATIONAL: 0,
        }

    def test_settings_are_used(self) -> None:
        parser = FeedbackParser(ParserSettings(min_body_length=1, dedup_prefix_length=3))
        records = parser.parse("[Good] x [Good] abc one [Good] abc two")
        assert [r.text for r in records] == ["x", "abc one"]

    @pytest.mark.parametrize("kwargs", [{"min_body_length": 0}, {"dedup_prefix_length": 0}])
    def test_invalid_settings(self, kwargs) -> None:
        with pytest.raises(ValueError):
            ParserSettings(**kwargs)

    def test_parser_is_reusable(self) -> None:
        parser = FeedbackParser()
        first = parser.parse("[Good] Helped a peer.")
        second = parser.parse("[Good] Helped a peer.")
        assert first == second


class TestStrictMode:
    TEXT = "##Positive Great attitude [Bad] Talks over others"

    def test_lenient_by_default(self) -> None:
        result = FeedbackParser().parse_with_report(self.TEXT)
        assert result.warnings == []

    def test_strict_reports_unterminated(self, caplog) -> None:
        parser = FeedbackParser(ParserSettings(strict=True))
        with caplog.at_level(logging.WARNING):
            result = parser.parse_with_report(self.TEXT)
        assert [w.literal for w in result.warnings] == ["##Positive"]
        assert "Unterminated delimiter" in caplog.text

    def test_strict_does_not_change_records(self) -> None:
        lenient = FeedbackParser().parse(self.TEXT)
        strict = FeedbackParser(ParserSettings(strict=True)).parse(self.TEXT)
        assert lenient == strict
        assert lenient == [FeedbackRecord(Category.NEEDS_IMPROVEMENT, "Talks over others")]


class TestTraceHook:
    def test_events_cover_pipeline(self) -> None:
        events = []
        parser = FeedbackParser(trace=events.append)
        parser.parse("[Good] Helped a peer. [Good] Helped a peer. **Bad** x")

        stages = [event.stage for event in events]
        assert stages[0] == "scan"
        assert stages[1] == "segment"
        assert stages[-1] == "complete"
        assert stages.count("record") == 2
        assert stages.count("drop") == 1
        assert stages.count("duplicate") == 1
        assert events[-1].data["records"] == 1

    def test_warning_events_in_strict_mode(self) -> None:
        events = []
        parser = FeedbackParser(ParserSettings(strict=True), trace=events.append)
        parser.parse("[Good unfinished")
        assert any(event.stage == "warning" for event in events)

    def test_failing_hook_does_not_break_parse(self, caplog) -> None:
        def broken(event):
            raise RuntimeError("hook exploded")

        parser = FeedbackParser(trace=broken)
        with caplog.at_level(logging.WARNING):
            records = parser.parse("[Good] Helped a peer.")
        assert records == [FeedbackRecord(Category.POSITIVE, "Helped a peer.")]
        assert "hook exploded" in caplog.text
