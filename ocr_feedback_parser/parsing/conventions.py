"""
The five delimiter conventions used to tag a feedback category in raw text.

Order matters: the segment parser tries conventions in this order and the
first one that matches wins. New conventions go at the end.
"""
import re
from dataclasses import dataclass
from typing import Pattern, Tuple

from .labels import LABEL_PATTERN

_FLAGS = re.IGNORECASE


@dataclass(frozen=True)
class DelimiterConvention:
    """A markup shape such as ``##Good##`` or ``Bad:``."""
    name: str
    pattern: Pattern[str]
    segment_pattern: Pattern[str]


def _convention(name: str, delimiter: str) -> DelimiterConvention:
    return DelimiterConvention(
        name=name,
        pattern=re.compile(delimiter, _FLAGS),
        # Label at the very start of a segment, body runs to segment end.
        segment_pattern=re.compile(delimiter + r"\s*(?P<body>.+)$", _FLAGS | re.DOTALL),
    )


CONVENTIONS: Tuple[DelimiterConvention, ...] = (
    _convention("double_hash", r"##\s*" + LABEL_PATTERN + r"\s*##"),
    _convention("hash", r"#\s*" + LABEL_PATTERN + r"\s*#"),
    _convention("bracket", r"\[\s*" + LABEL_PATTERN + r"\s*\]"),
    _convention("colon", r"\b" + LABEL_PATTERN + r"\s*:"),
    _convention("bold", r"\*\*\s*" + LABEL_PATTERN + r"\s*\*\*"),
)

# Opening half of the enclosing conventions, used to spot unterminated markup.
OPENING_PATTERN = re.compile(r"(?:##|\*\*|#|\[)\s*" + LABEL_PATTERN + r"\b", _FLAGS)
