"""
Near-duplicate suppression for extracted feedback records.
"""
from typing import List, Sequence, Tuple

from ..models.feedback_data import FeedbackRecord

DEDUP_PREFIX_LENGTH = 20


def _key(record: FeedbackRecord, prefix_length: int) -> Tuple[str, str]:
    return record.category.value, record.text.lower()[:prefix_length]


def partition_duplicates(records: Sequence[FeedbackRecord],
                         prefix_length: int = DEDUP_PREFIX_LENGTH) -> Tuple[List[FeedbackRecord], List[FeedbackRecord]]:
    """
    Split records into first occurrences and near-duplicates.

    Two records are duplicates when they share a category and the first
    `prefix_length` characters of their lower-cased text.

    Returns:
        Tuple of (kept, dropped), both in input order
    """
    seen = set()
    kept: List[FeedbackRecord] = []
    dropped: List[FeedbackRecord] = []

    for record in records:
        key = _key(record, prefix_length)
        if key in seen:
            dropped.append(record)
        else:
            seen.add(key)
            kept.append(record)

    return kept, dropped


def dedupe(records: Sequence[FeedbackRecord],
           prefix_length: int = DEDUP_PREFIX_LENGTH) -> List[FeedbackRecord]:
    """Drop near-duplicates, keeping the first occurrence and input order."""
    kept, _ = partition_duplicates(records, prefix_length)
    return kept
