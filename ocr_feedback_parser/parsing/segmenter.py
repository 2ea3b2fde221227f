"""
Segmenter: slices raw text into contiguous segments, one per delimiter.
"""
from typing import List, Sequence

from ..models.feedback_data import DelimiterMatch, Segment


def segment(text: str, matches: Sequence[DelimiterMatch]) -> List[Segment]:
    """
    Slice text at consecutive delimiter offsets.

    Segment i spans ``[matches[i].offset, matches[i + 1].offset)``; the last
    one runs to the end of the text. With no delimiters the whole text is a
    single segment without a category.

    Args:
        text: Raw input text
        matches: Ascending delimiter matches from scan()

    Returns:
        Ordered, non-overlapping segments
    """
    if not matches:
        return [Segment(start=0, end=len(text), text=text, category=None)]

    segments = []
    for index, match in enumerate(matches):
        end = matches[index + 1].offset if index + 1 < len(matches) else len(text)
        segments.append(Segment(
            start=match.offset,
            end=end,
            text=text[match.offset:end],
            category=match.category,
        ))

    return segments
