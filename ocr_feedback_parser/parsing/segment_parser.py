"""
Segment parser: turns one segment into at most one feedback record.
"""
from typing import Optional, Tuple

from ..models.feedback_data import FeedbackRecord, Segment
from .cleaner import clean
from .conventions import CONVENTIONS
from .labels import normalize

# Bodies shorter than this after cleaning are OCR noise, not feedback.
MIN_BODY_LENGTH = 4

DROP_NO_LABEL = "no label"
DROP_UNRECOGNIZED_LABEL = "unrecognized label"
DROP_SHORT_BODY = "body too short"


def classify_segment(segment: Segment,
                     min_body_length: int = MIN_BODY_LENGTH) -> Tuple[Optional[FeedbackRecord], Optional[str]]:
    """
    Parse a segment and explain why it was dropped when it yields nothing.

    Conventions are tried in fixed order against the start of the segment;
    the first syntactic match wins even if its label or body is then
    rejected.

    Args:
        segment: Segment produced by the segmenter
        min_body_length: Minimum cleaned body length to emit a record

    Returns:
        Tuple of (record, None) on success or (None, drop_reason)
    """
    for convention in CONVENTIONS:
        match = convention.segment_pattern.match(segment.text)
        if match is None:
            continue

        category = normalize(match.group("label"))
        if category is None:
            return None, DROP_UNRECOGNIZED_LABEL

        body = clean(match.group("body"))
        if len(body) < min_body_length:
            return None, DROP_SHORT_BODY

        return FeedbackRecord(category=category, text=body), None

    return None, DROP_NO_LABEL


def parse_segment(segment: Segment, min_body_length: int = MIN_BODY_LENGTH) -> Optional[FeedbackRecord]:
    """Return the record for a segment, or None if it contributes nothing."""
    record, _ = classify_segment(segment, min_body_length)
    return record
