"""Tests for ocr_feedback_parser.parsing.segmenter."""

from ocr_feedback_parser.models.feedback_data import Category
from ocr_feedback_parser.parsing.scanner import scan
from ocr_feedback_parser.parsing.segmenter import segment


class TestSegment:
    def test_no_delimiters_gives_one_unlabelled_segment(self) -> None:
        text = "Just some notes"
        segments = segment(text, [])
        assert len(segments) == 1
        assert segments[0].text == text
        assert segments[0].category is None
        assert (segments[0].start, segments[0].end) == (0, len(text))

    def test_spans_between_delimiters(self) -> None:
        text = "##Positive## Great attitude ##Bad## Talks over others"
        segments = segment(text, scan(text))
        assert [s.text for s in segments] == [
            "##Positive## Great attitude ",
            "##Bad## Talks over others",
        ]
        assert [s.category for s in segments] == [Category.POSITIVE, Category.NEEDS_IMPROVEMENT]

    def test_text_before_first_delimiter_is_not_a_segment(self) -> None:
        text = "Header line\n[Good] Kind to peers"
        segments = segment(text, scan(text))
        assert len(segments) == 1
        assert segments[0].start == text.index("[Good]")

    def test_segments_cover_text_without_gaps(self) -> None:
        text = "intro [Observational] Sat in back #Positive# Early Bad: Late **Good** Calm"
        matches = scan(text)
        segments = segment(text, matches)
        assert "".join(s.text for s in segments) == text[matches[0].offset:]
        for previous, current in zip(segments, segments[1:]):
            assert previous.end == current.start
        assert segments[-1].end == len(text)
