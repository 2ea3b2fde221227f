"""
Data models for OCR feedback parser system.
"""
from .feedback_data import (
    Category,
    DelimiterMatch,
    FeedbackEntry,
    FeedbackRecord,
    ParseResult,
    ParseWarning,
    ProcessingResult,
    Segment,
    SessionContext,
    TraceEvent,
)
from .modules import MODULES, get_module, get_module_ids, get_session_types

__all__ = [
    'Category', 'DelimiterMatch', 'FeedbackEntry', 'FeedbackRecord',
    'ParseResult', 'ParseWarning', 'ProcessingResult', 'Segment',
    'SessionContext', 'TraceEvent',
    'MODULES', 'get_module', 'get_module_ids', 'get_session_types'
]
