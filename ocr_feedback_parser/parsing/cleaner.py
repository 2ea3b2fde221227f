"""
Body cleaner for extracted feedback text.
"""
import re

from .conventions import CONVENTIONS

_WHITESPACE = re.compile(r"\s+")
_LEADING_BULLETS = re.compile(r"^[\s\-•]+")


def _strip_delimiters(text: str) -> str:
    # Removing one delimiter can close up another (e.g. "## [Bad] Good ##"),
    # so repeat until nothing matches.
    previous = None
    while previous != text:
        previous = text
        for convention in CONVENTIONS:
            text = convention.pattern.sub(" ", text)
    return text


def clean(raw_body: str) -> str:
    """
    Normalize a feedback body.

    Removes residual delimiter markup, collapses whitespace to single
    spaces, drops leading bullet glyphs ("-" or "•") and trims.
    clean(clean(x)) == clean(x) for every x.

    Args:
        raw_body: Text following a label

    Returns:
        Cleaned body, possibly empty
    """
    if not raw_body:
        return ""

    text = _strip_delimiters(raw_body)
    text = _WHITESPACE.sub(" ", text)
    text = _LEADING_BULLETS.sub("", text)
    return text.strip()
