"""
Operation result domain objects for srcfetch.

Provides progress messages and the result types of a clone attempt and
of a fetch batch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional

from .package import FetchResult


class MessageLevel(Enum):
    """Kind of a progress line emitted while fetching."""
    STEP = "step"            # A package or batch-level event
    DETAIL = "detail"        # Intermediate step of the current package
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ProgressMessage:
    """One progress line; the level decides how it is shown."""
    text: str
    level: MessageLevel = MessageLevel.STEP

    def __str__(self) -> str:
        return self.text

    @classmethod
    def detail(cls, text: str) -> "ProgressMessage":
        return cls(text, MessageLevel.DETAIL)

    @classmethod
    def success(cls, text: str) -> "ProgressMessage":
        return cls(text, MessageLevel.SUCCESS)

    @classmethod
    def warning(cls, text: str) -> "ProgressMessage":
        return cls(text, MessageLevel.WARNING)

    @classmethod
    def error(cls, text: str) -> "ProgressMessage":
        return cls(text, MessageLevel.ERROR)


class CloneOutcome(Enum):
    """How a clone of a candidate reference ended."""
    EXACT = "exact"          # Candidate reference checked out
    FALLBACK = "fallback"    # Reference missing, default branch used
    FAILED = "failed"        # Nothing usable was cloned


@dataclass
class CloneResult:
    """Result of the reference-then-default-branch clone sequence."""
    outcome: CloneOutcome
    reference: Optional[str] = None
    commit: Optional[str] = None
    warning: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome != CloneOutcome.FAILED


@dataclass
class FetchSummary:
    """
    Summary of a fetch batch.

    Holds one FetchResult per requested package, in request order.
    """
    results: List[FetchResult] = field(default_factory=list)
    successful: int = 0
    failed: int = 0
    cancelled: bool = False

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success(self) -> bool:
        """True if no failures occurred."""
        return self.failed == 0

    def add(self, result: FetchResult) -> None:
        """Add a per-package result and update counts."""
        self.results.append(result)
        if result.success:
            self.successful += 1
        else:
            self.failed += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'cancelled': self.cancelled,
            'errors': [f"{r.package}: {r.error}" for r in self.results if not r.success],
        }
