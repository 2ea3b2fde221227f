"""Tests for ocr_feedback_parser.parsing.segment_parser."""

from ocr_feedback_parser.models.feedback_data import Category, Segment
from ocr_feedback_parser.parsing.segment_parser import (
    DROP_NO_LABEL,
    DROP_SHORT_BODY,
    classify_segment,
    parse_segment,
)


def _segment(text: str) -> Segment:
    return Segment(start=0, end=len(text), text=text)


class TestParseSegment:
    def test_double_hash(self) -> None:
        record = parse_segment(_segment("##Positive## Great attitude in class "))
        assert record.category is Category.POSITIVE
        assert record.text == "Great attitude in class"

    def test_colon(self) -> None:
        record = parse_segment(_segment("Observational: Quiet during group work."))
        assert record.category is Category.OBSERVATIONAL
        assert record.text == "Quiet during group work."

    def test_multiline_body(self) -> None:
        record = parse_segment(_segment("[Bad]\n- Talks over\n  others\n"))
        assert record.category is Category.NEEDS_IMPROVEMENT
        assert record.text == "Talks over others"

    def test_short_body_dropped(self) -> None:
        record, reason = classify_segment(_segment("**Bad** x"))
        assert record is None
        assert reason == DROP_SHORT_BODY

    def test_three_characters_is_too_short(self) -> None:
        assert parse_segment(_segment("[Good] abc")) is None
        assert parse_segment(_segment("[Good] abcd")).text == "abcd"

    def test_custom_min_body_length(self) -> None:
        assert parse_segment(_segment("[Good] abc"), min_body_length=2).text == "abc"

    def test_unlabelled_segment(self) -> None:
        record, reason = classify_segment(_segment("No markers here at all."))
        assert record is None
        assert reason == DROP_NO_LABEL

    def test_label_must_start_the_segment(self) -> None:
        assert parse_segment(_segment("  text before [Good] body text")) is None

    def test_first_convention_wins(self) -> None:
        # "##Good##" is tried before "Bad:" even though both shapes appear
        record = parse_segment(_segment("##Good## Bad: interrupting"))
        assert record.category is Category.POSITIVE
        assert record.text == "interrupting"

    def test_segment_category_is_not_trusted(self) -> None:
        # The label is re-read from the segment text itself
        segment = Segment(start=0, end=15, text="[Positive] okay", category=None)
        record, reason = classify_segment(segment)
        assert reason is None
        assert record.category is Category.POSITIVE
