"""Models for proficiency tracking and phrase scheduling."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from phonecoach.models.base import utc_now
from phonecoach.models.models import Phrase


class SearchStrategy(Enum):
    """How target phonemes are chosen when populating the queue."""
    URGENCY = "urgency"  # Lowest recency-adjusted score first
    ATTEMPTS = "attempts"  # Least practiced first
    MIXED = "mixed"  # Two thirds urgency, one third attempts


@dataclass
class PhonemeProficiency:
    """Learner's running proficiency for a single phoneme."""
    symbol: str
    score: float = 0.5
    attempts: int = 0
    last_updated: datetime = field(default_factory=utc_now)

    def as_tuple(self) -> tuple:
        return (self.symbol, self.score, self.attempts, self.last_updated)


@dataclass
class RandomPicks:
    """Random phrases drawn from each category of the phrase bank."""
    formal: List[Phrase] = field(default_factory=list)
    informal: List[Phrase] = field(default_factory=list)
    user_added: List[Phrase] = field(default_factory=list)


class PersistErrorKind(Enum):
    """Why a persistence call failed."""
    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"


@dataclass
class PersistResult:
    """Outcome of a proficiency read or write."""
    ok: bool
    error_kind: Optional[PersistErrorKind] = None
    message: Optional[str] = None
    records: List[PhonemeProficiency] = field(default_factory=list)

    @classmethod
    def success(cls, records: Optional[List[PhonemeProficiency]] = None) -> "PersistResult":
        return cls(ok=True, records=records or [])

    @classmethod
    def failure(cls, kind: PersistErrorKind, message: str) -> "PersistResult":
        return cls(ok=False, error_kind=kind, message=message)
