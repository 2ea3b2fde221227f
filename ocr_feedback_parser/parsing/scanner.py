"""
Delimiter scanner: locates every label marker in raw text.
"""
import logging
from typing import List, Sequence

from ..models.feedback_data import DelimiterMatch, ParseWarning
from .conventions import CONVENTIONS, OPENING_PATTERN
from .labels import normalize

logger = logging.getLogger(__name__)


def scan(text: str) -> List[DelimiterMatch]:
    """
    Find all delimiter occurrences of every convention.

    Each convention is scanned independently over the full text. The pooled
    matches are sorted by offset; a match that starts inside an already
    accepted match (``#Good#`` inside ``##Good##``) is discarded, so the
    result is strictly ascending by offset.

    Args:
        text: Raw input text

    Returns:
        Ordered list of DelimiterMatch, empty when the text has no markup
    """
    pool: List[DelimiterMatch] = []

    for convention in CONVENTIONS:
        for match in convention.pattern.finditer(text):
            category = normalize(match.group("label"))
            if category is None:
                continue
            pool.append(DelimiterMatch(
                offset=match.start(),
                literal=match.group(0),
                category=category,
                convention=convention.name,
            ))

    # Longest literal first when two conventions start at the same offset
    pool.sort(key=lambda m: (m.offset, -len(m.literal)))

    resolved: List[DelimiterMatch] = []
    for candidate in pool:
        if resolved and candidate.offset < resolved[-1].end:
            logger.debug(f"Discarding overlapping {candidate.convention} delimiter "
                         f"'{candidate.literal}' at {candidate.offset}")
            continue
        resolved.append(candidate)

    return resolved


def find_unterminated(text: str, matches: Sequence[DelimiterMatch]) -> List[ParseWarning]:
    """
    Report opening delimiters (``##label``, ``#label``, ``[label``, ``**label``)
    that are not part of any recognized delimiter.

    Args:
        text: Raw input text
        matches: Delimiters already accepted by scan()

    Returns:
        One ParseWarning per unterminated opening, in text order
    """
    warnings: List[ParseWarning] = []

    for opening in OPENING_PATTERN.finditer(text):
        offset = opening.start()
        if any(m.offset <= offset < m.end for m in matches):
            continue
        literal = opening.group(0)
        warnings.append(ParseWarning(
            offset=offset,
            literal=literal,
            message=f"Unterminated delimiter '{literal}' at offset {offset}; text after it was not extracted",
        ))

    return warnings
