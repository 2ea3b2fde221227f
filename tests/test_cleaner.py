"""Tests for ocr_feedback_parser.parsing.cleaner."""

import pytest

from ocr_feedback_parser.parsing.cleaner import clean

IDEMPOTENCE_SAMPLES = [
    "",
    "   ",
    "Great attitude",
    "  - Great   attitude\n in class  ",
    "• • - bullet run",
    "- ##Good## nested",
    "## [Bad] Good ##",
    "text [Good] more **Bad** end",
    "-",
    "x - y",
    "\n\t• - \n",
    "Bad: Good: ok",
]


class TestClean:
    def test_collapses_whitespace(self) -> None:
        assert clean("Great\n\n attitude\tin   class") == "Great attitude in class"

    def test_strips_leading_bullet(self) -> None:
        assert clean("- Helped a peer") == "Helped a peer"
        assert clean("• Helped a peer") == "Helped a peer"

    def test_keeps_inner_dashes(self) -> None:
        assert clean("self-aware - mostly") == "self-aware - mostly"

    def test_removes_residual_delimiters(self) -> None:
        assert clean("Kind [Good] and calm") == "Kind and calm"
        assert clean("ok **Bad** not") == "ok not"

    def test_removes_delimiters_exposed_by_earlier_removal(self) -> None:
        assert clean("## [Bad] Good ##") == ""

    def test_empty(self) -> None:
        assert clean("") == ""
        assert clean(None) == ""

    @pytest.mark.parametrize("sample", IDEMPOTENCE_SAMPLES)
    def test_idempotent(self, sample: str) -> None:
        once = clean(sample)
        assert clean(once) == once
