"""Tests for ocr_feedback_parser.parsing.scanner."""

from ocr_feedback_parser.models.feedback_data import Category
from ocr_feedback_parser.parsing.scanner import find_unterminated, scan


class TestScan:
    def test_no_markup(self) -> None:
        assert scan("No markers here at all.") == []

    def test_empty_text(self) -> None:
        assert scan("") == []

    def test_each_convention(self) -> None:
        cases = {
            "##Good## nice": "double_hash",
            "#Good# nice": "hash",
            "[Good] nice": "bracket",
            "Good: nice": "colon",
            "**Good** nice": "bold",
        }
        for text, convention in cases.items():
            matches = scan(text)
            assert len(matches) == 1, text
            assert matches[0].convention == convention
            assert matches[0].offset == 0
            assert matches[0].category is Category.POSITIVE

    def test_double_hash_not_reported_twice(self) -> None:
        matches = scan("##Positive## Great attitude in class ##Bad## Talks over others")
        assert [m.convention for m in matches] == ["double_hash", "double_hash"]
        assert [m.category for m in matches] == [Category.POSITIVE, Category.NEEDS_IMPROVEMENT]

    def test_sorted_by_offset(self) -> None:
        text = "[Observational] quiet #Positive# early Bad: late **Good** kind"
        matches = scan(text)
        offsets = [m.offset for m in matches]
        assert offsets == sorted(offsets)
        assert len(matches) == 4

    def test_case_insensitive(self) -> None:
        matches = scan("[nEeDs ImPrOvEmEnT] listen more")
        assert matches[0].category is Category.NEEDS_IMPROVEMENT
        assert matches[0].literal == "[nEeDs ImPrOvEmEnT]"

    def test_colon_requires_word_boundary(self) -> None:
        assert scan("notbad: really") == []

    def test_match_end(self) -> None:
        match = scan("xx [Bad] yy")[0]
        assert match.offset == 3
        assert match.end == 8


class TestFindUnterminated:
    def test_reports_unclosed_double_hash(self) -> None:
        text = "##Positive Great attitude"
        warnings = find_unterminated(text, scan(text))
        assert len(warnings) == 1
        assert warnings[0].offset == 0
        assert warnings[0].literal == "##Positive"

    def test_ignores_terminated_delimiters(self) -> None:
        text = "##Positive## Great [Bad] Rude **Good** kind #Observation# notes"
        assert find_unterminated(text, scan(text)) == []

    def test_unclosed_bracket_next_to_valid_marker(self) -> None:
        text = "[Good] Helpful [Bad Rude"
        warnings = find_unterminated(text, scan(text))
        assert [w.literal for w in warnings] == ["[Bad"]
        assert warnings[0].offset == text.index("[Bad")
