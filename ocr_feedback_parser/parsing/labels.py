"""
Label vocabulary and normalization to the closed Category enum.
"""
from typing import Optional, Tuple

from ..models.feedback_data import Category

# Label tokens accepted inside any delimiter convention (case-insensitive).
LABEL_PATTERN = r"(?P<label>positive|good|needs?\s*improvement|bad|observational|observation)"

# Checked in order, first rule wins.
SYNONYMS: Tuple[Tuple[Category, Tuple[str, ...]], ...] = (
    (Category.POSITIVE, ("positive", "good")),
    (Category.NEEDS_IMPROVEMENT, ("improvement", "bad")),
    (Category.OBSERVATIONAL, ("observational", "observation")),
)


def normalize(raw_label: Optional[str]) -> Optional[Category]:
    """
    Map a raw label token to its Category.

    Matching is substring based on the lower-cased, trimmed label, so
    "GOOD", " positive " and "Needs Improvement" all resolve.

    Args:
        raw_label: Label text captured from a delimiter

    Returns:
        Category, or None when the label is not in the vocabulary
    """
    if not raw_label:
        return None

    label = raw_label.strip().lower()
    for category, synonyms in SYNONYMS:
        if any(synonym in label for synonym in synonyms):
            return category

    return None
