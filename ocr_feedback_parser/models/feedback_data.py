"""
Data models for the OCR feedback parser system.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .modules import get_session_types


class Category(str, Enum):
    """
    Closed classification of a feedback record.

    Member values are the storage codes written by the persistence layer.
    """
    POSITIVE = "good"
    NEEDS_IMPROVEMENT = "bad"
    OBSERVATIONAL = "observational"

    @property
    def display_name(self) -> str:
        """Human readable name shown to operators."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["Category"]:
        """
        Look up a category by its storage code.

        Args:
            code: Storage code such as "good" or "bad"

        Returns:
            Matching Category or None if the code is unknown
        """
        if not code:
            return None
        try:
            return cls(code.strip().lower())
        except ValueError:
            return None


_DISPLAY_NAMES = {
    Category.POSITIVE: "Positive",
    Category.NEEDS_IMPROVEMENT: "Needs Improvement",
    Category.OBSERVATIONAL: "Observational",
}


@dataclass(frozen=True)
class DelimiterMatch:
    """One recognized label marker in the source text."""
    offset: int
    literal: str
    category: Category
    convention: str

    @property
    def end(self) -> int:
        return self.offset + len(self.literal)


@dataclass(frozen=True)
class Segment:
    """
    Slice of the source text bounded by two consecutive delimiter offsets.

    `category` is None only for the unlabeled segment produced when the
    text contains no delimiters at all.
    """
    start: int
    end: int
    text: str
    category: Optional[Category] = None


@dataclass(frozen=True)
class FeedbackRecord:
    """A single typed feedback entry extracted from free text."""
    category: Category
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.category.value, "text": self.text}


@dataclass(frozen=True)
class ParseWarning:
    """An opening delimiter that never closes (reported in strict mode)."""
    offset: int
    literal: str
    message: str


@dataclass(frozen=True)
class TraceEvent:
    """Structured progress event handed to an optional trace hook."""
    stage: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ParseResult:
    """Complete outcome of parsing one input text."""
    records: List[FeedbackRecord] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.records

    def count_by_category(self) -> Dict[Category, int]:
        """
        Count extracted records per category.

        Returns:
            Dict with an entry for every category, including zero counts
        """
        counts = {category: 0 for category in Category}
        for record in self.records:
            counts[record.category] += 1
        return counts


@dataclass
class SessionContext:
    """
    Extrinsic fields the persistence layer attaches to every record.
    """
    candidate_id: str
    module_id: str
    session_type: str
    author: str = "Anonymous"

    def __post_init__(self):
        """Normalize and validate the context fields."""
        self.candidate_id = (self.candidate_id or "").strip()
        self.module_id = (self.module_id or "").strip()
        self.session_type = (self.session_type or "").strip().lower()
        self.author = (self.author or "").strip() or "Anonymous"

        if not self.candidate_id:
            raise ValueError("candidate_id is required")
        if not self.module_id:
            raise ValueError("module_id is required")
        if self.session_type not in get_session_types():
            raise ValueError(
                f"Unknown session type '{self.session_type}'. "
                f"Expected one of: {', '.join(get_session_types())}"
            )


@dataclass
class FeedbackEntry:
    """
    A parsed feedback record enriched with session context, ready for storage.
    """
    candidate_id: str
    module_id: str
    session_type: str
    feedback_type: Category
    feedback_text: str
    author: str
    created_at: datetime
    source_file: Optional[str] = None

    @classmethod
    def from_record(cls,
                    record: FeedbackRecord,
                    context: SessionContext,
                    source_file: Optional[str] = None,
                    created_at: Optional[datetime] = None) -> "FeedbackEntry":
        """
        Attach session context to a parsed record.

        Args:
            record: Parsed feedback record (left unchanged)
            context: Candidate/module/session/author fields
            source_file: Name of the input the record came from
            created_at: Timestamp override (defaults to now)

        Returns:
            FeedbackEntry for the persistence layer
        """
        return cls(
            candidate_id=context.candidate_id,
            module_id=context.module_id,
            session_type=context.session_type,
            feedback_type=record.category,
            feedback_text=record.text,
            author=context.author,
            created_at=created_at or datetime.now(),
            source_file=source_file,
        )

    def to_row(self) -> list:
        """Values in Feedback_Data column order."""
        return [
            self.candidate_id,
            self.module_id,
            self.session_type,
            self.feedback_type.value,
            self.feedback_text,
            self.author,
            self.created_at,
            self.source_file or "",
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "module_id": self.module_id,
            "session_type": self.session_type,
            "feedback_type": self.feedback_type.value,
            "feedback_text": self.feedback_text,
            "author": self.author,
            "created_at": self.created_at.isoformat(),
            "source_file": self.source_file,
        }


@dataclass
class ProcessingResult:
    """
    Data model for tracking input processing status and results.
    """
    file_name: str
    status: str  # "pass", "fail", "error"
    error_message: Optional[str] = None
    processing_timestamp: Optional[datetime] = None
    records: List[FeedbackRecord] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)
    text_length: int = 0

    def __post_init__(self):
        """Set processing timestamp if not provided."""
        if self.processing_timestamp is None:
            self.processing_timestamp = datetime.now()

    def is_successful(self) -> bool:
        """
        Check if processing was successful.

        Returns:
            bool: True if status is "pass", False otherwise
        """
        return self.status == "pass"

    def has_data(self) -> bool:
        """
        Check if processing result contains extracted records.

        Returns:
            bool: True if at least one record is present
        """
        return bool(self.records)

    def get_error_summary(self) -> str:
        """
        Get a summary of the processing result for logging.

        Returns:
            str: Summary string with file name, status, and error if applicable
        """
        summary = f"File: {self.file_name}, Status: {self.status}, Records: {len(self.records)}"
        if self.error_message:
            summary += f", Error: {self.error_message}"
        return summary
