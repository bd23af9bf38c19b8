"""Models for alignment verdicts produced by the scoring engine."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional


class AlignmentType(Enum):
    """How a recognized phoneme lines up with the target transcription."""
    MATCH = "match"  # Recognized phoneme equals the target
    REPLACE = "replace"  # A different phoneme was produced
    DELETE = "delete"  # Target phoneme was not produced
    INSERT = "insert"  # Extra phoneme with no target


@dataclass(frozen=True)
class AlignedPhoneme:
    """One aligned unit of a word, as emitted by the alignment engine."""
    type: AlignmentType
    target: Optional[str] = None
    actual: Optional[str] = None
    score: float = 0.0
    note: Optional[str] = None

    @property
    def is_observation(self) -> bool:
        """Whether this unit carries a single realized phoneme to learn from."""
        return self.type in (AlignmentType.MATCH, AlignmentType.REPLACE)


@dataclass
class WordEvaluation:
    """Scored word with its phoneme-level alignment."""
    word: str
    score: float
    aligned_phonemes: List[AlignedPhoneme] = field(default_factory=list)
    evaluated: bool = False

    def all_targets(self) -> str:
        return " ".join(p.target for p in self.aligned_phonemes if p.target)

    def all_actuals(self) -> str:
        return " ".join(p.actual for p in self.aligned_phonemes if p.actual)

    def mark_evaluated(self) -> None:
        self.evaluated = True


def flatten(evaluations: Iterable[WordEvaluation]) -> Iterator[AlignedPhoneme]:
    """Yield the aligned phonemes of an utterance in word order."""
    for evaluation in evaluations:
        yield from evaluation.aligned_phonemes
