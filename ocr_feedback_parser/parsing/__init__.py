"""
Free-text feedback extraction parser.
"""
from .cleaner import clean
from .deduplicator import DEDUP_PREFIX_LENGTH, dedupe
from .labels import normalize
from .parser import FeedbackParser, ParserSettings, TraceHook, parse_feedback_text
from .scanner import find_unterminated, scan
from .segment_parser import MIN_BODY_LENGTH, parse_segment
from .segmenter import segment

__all__ = [
    'FeedbackParser', 'ParserSettings', 'TraceHook', 'parse_feedback_text',
    'normalize', 'scan', 'find_unterminated', 'segment', 'parse_segment',
    'clean', 'dedupe', 'MIN_BODY_LENGTH', 'DEDUP_PREFIX_LENGTH'
]
