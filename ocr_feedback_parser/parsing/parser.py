"""
Feedback extraction parser.

Splits loosely structured (typically OCR'd) text into typed feedback records:
raw text -> scan -> segment -> parse each segment -> clean -> dedupe.
The parser is pure and holds no shared state, so one instance may be used
from many threads at once.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from ..models.feedback_data import FeedbackRecord, ParseResult, TraceEvent
from .deduplicator import DEDUP_PREFIX_LENGTH, partition_duplicates
from .scanner import find_unterminated, scan
from .segment_parser import MIN_BODY_LENGTH, classify_segment
from .segmenter import segment

TraceHook = Callable[[TraceEvent], None]


@dataclass(frozen=True)
class ParserSettings:
    """Tunable parser constants."""
    min_body_length: int = MIN_BODY_LENGTH
    dedup_prefix_length: int = DEDUP_PREFIX_LENGTH
    strict: bool = False

    def __post_init__(self):
        if self.min_body_length < 1:
            raise ValueError(f"min_body_length must be at least 1, got {self.min_body_length}")
        if self.dedup_prefix_length < 1:
            raise ValueError(f"dedup_prefix_length must be at least 1, got {self.dedup_prefix_length}")


class FeedbackParser:
    """
    Extracts FeedbackRecords from free text.

    Malformed input never raises: unrecognized labels, short bodies and
    unterminated delimiters simply contribute no records. In strict mode
    unterminated delimiters are additionally reported as warnings.
    """

    def __init__(self, settings: Optional[ParserSettings] = None, trace: Optional[TraceHook] = None):
        """
        Initialize the parser.

        Args:
            settings: Parser constants (defaults used if not provided)
            trace: Optional callable receiving a TraceEvent per pipeline step
        """
        self.settings = settings or ParserSettings()
        self.trace = trace
        self.logger = logging.getLogger(__name__)

    def parse(self, text: Optional[str]) -> List[FeedbackRecord]:
        """
        Parse text into an ordered list of unique feedback records.

        Args:
            text: Extracted text, e.g. OCR output

        Returns:
            Possibly empty list of records in text order
        """
        return self.parse_with_report(text).records

    def parse_with_report(self, text: Optional[str]) -> ParseResult:
        """
        Parse text and return records together with segments and warnings.

        Args:
            text: Extracted text, e.g. OCR output

        Returns:
            ParseResult

        Raises:
            TypeError: If text is neither a string nor None
        """
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise TypeError(f"Expected text as str, got {type(text).__name__}")

        self.logger.debug(f"Parsing feedback text ({len(text)} characters)")

        matches = scan(text)
        self._emit("scan", f"Found {len(matches)} delimiters",
                   delimiters=[(m.offset, m.category.value, m.convention) for m in matches])

        warnings = []
        if self.settings.strict:
            warnings = find_unterminated(text, matches)
            for warning in warnings:
                self.logger.warning(warning.message)
                self._emit("warning", warning.message, offset=warning.offset, literal=warning.literal)

        segments = segment(text, matches)
        self._emit("segment", f"Split text into {len(segments)} segments",
                   spans=[(s.start, s.end) for s in segments])

        candidates = []
        for index, seg in enumerate(segments):
            record, reason = classify_segment(seg, self.settings.min_body_length)
            if record is None:
                self.logger.debug(f"Segment {index + 1} dropped: {reason}")
                self._emit("drop", f"Segment {index + 1} dropped: {reason}",
                           start=seg.start, end=seg.end, reason=reason)
                continue
            candidates.append(record)
            self._emit("record", f"Extracted {record.category.value}: {record.text[:50]}",
                       start=seg.start, category=record.category.value)

        records, duplicates = partition_duplicates(candidates, self.settings.dedup_prefix_length)
        for duplicate in duplicates:
            self.logger.debug(f"Skipped duplicate: {duplicate.category.value} - {duplicate.text[:30]}")
            self._emit("duplicate", f"Skipped duplicate {duplicate.category.value}",
                       category=duplicate.category.value, text=duplicate.text)

        self._emit("complete", f"Extracted {len(records)} unique feedback records",
                   records=len(records), duplicates=len(duplicates), warnings=len(warnings))
        self.logger.debug(f"Extracted {len(records)} records ({len(duplicates)} duplicates skipped)")

        return ParseResult(records=records, segments=segments, warnings=warnings)

    def _emit(self, stage: str, message: str, **data: Any) -> None:
        """Send a trace event; a failing hook never affects the parse."""
        if self.trace is None:
            return
        try:
            self.trace(TraceEvent(stage=stage, message=message, data=data))
        except Exception as e:
            self.logger.warning(f"Trace hook failed at stage '{stage}': {e}")


def parse_feedback_text(text: Optional[str], settings: Optional[ParserSettings] = None) -> List[FeedbackRecord]:
    """
    Convenience wrapper around FeedbackParser.parse().

    Args:
        text: Extracted text
        settings: Optional parser settings

    Returns:
        List of unique feedback records
    """
    return FeedbackParser(settings).parse(text)
