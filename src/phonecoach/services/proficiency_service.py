"""Service for tracking per-phoneme pronunciation proficiency."""
import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from phonecoach import monitoring
from phonecoach.config import settings
from phonecoach.models.base import as_utc, utc_now
from phonecoach.models.proficiency_models import PersistResult, PhonemeProficiency
from phonecoach.services.proficiency_repository import ProficiencyRepository
from phonecoach.services.vocabulary import load_vocabulary

logger = logging.getLogger(__name__)


class ProficiencyStore:
    """Owns the learner's proficiency records, keyed by phoneme symbol."""

    def __init__(
        self,
        repository: Optional[ProficiencyRepository] = None,
        vocabulary_loader: Callable[[], Dict[str, int]] = load_vocabulary,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the store.

        Args:
            repository: Persistence backend. Without one, flushes are no-ops.
            vocabulary_loader: Returns the token -> id mapping used on first run.
            clock: Source of the current time for ``last_updated``.
        """
        self.repository = repository
        self.vocabulary_loader = vocabulary_loader
        self.clock = clock
        self._records: Dict[str, PhonemeProficiency] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._records

    def __iter__(self) -> Iterator[PhonemeProficiency]:
        return iter(self._records.values())

    def get(self, symbol: str) -> Optional[PhonemeProficiency]:
        """Get the record for a phoneme, if tracked."""
        return self._records.get(symbol)

    def records(self) -> List[PhonemeProficiency]:
        """All records in insertion order."""
        return list(self._records.values())

    def seed_or_load(self) -> None:
        """Load persisted records, or seed defaults from the vocabulary on first run."""
        if self.repository is not None:
            result = self.repository.load()
            if result.ok and result.records:
                self.restore(result.records)
                logger.info(f"Loaded {len(self)} phoneme proficiency records")
                return
            if not result.ok:
                logger.warning(f"Could not read stored proficiency ({result.message}), seeding from vocabulary")

        vocabulary = self.vocabulary_loader()
        now = as_utc(self.clock())
        self._records = {
            symbol: PhonemeProficiency(
                symbol=symbol,
                score=settings.learning.initial_score,
                attempts=0,
                last_updated=now,
            )
            for symbol in sorted(vocabulary)
        }
        monitoring.proficiency_records.set(len(self._records))

        if not self._records:
            logger.warning("Proficiency store is empty, practice will fall back to random phrases")
            return

        logger.info(f"Seeded {len(self)} phonemes from vocabulary")
        self.flush()

    def update(self, phoneme: str, eval_score: float) -> PhonemeProficiency:
        """Blend a new observation into the phoneme's score.

        ``eval_score`` must already be on the [0, 1] scale of ``score``.
        The blending rate starts at ``base_rate`` and shrinks by ``rate_decay``
        per recorded attempt, never dropping below ``min_rate``. Unknown
        phonemes are created at defaults before the step is applied.
        """
        learning = settings.learning
        record = self._records.get(phoneme)
        if record is None:
            record = PhonemeProficiency(
                symbol=phoneme,
                score=learning.initial_score,
                attempts=0,
                last_updated=as_utc(self.clock()),
            )
            self._records[phoneme] = record
            monitoring.proficiency_records.set(len(self._records))
            logger.debug(f"Tracking new phoneme [{phoneme}]")

        rate = self.dynamic_rate(record.attempts)
        old_score = record.score
        record.score = old_score * (1 - rate) + eval_score * rate
        record.attempts += 1
        record.last_updated = as_utc(self.clock())

        logger.debug(f"Updated [{phoneme}]: {old_score:.2f} -> {record.score:.2f} (rate {rate:.2f})")
        return record

    @staticmethod
    def dynamic_rate(attempts: int) -> float:
        """Blending rate used for the next update after ``attempts`` observations."""
        learning = settings.learning
        return max(learning.min_rate, learning.base_rate - attempts * learning.rate_decay)

    def snapshot(self) -> List[PhonemeProficiency]:
        """Copy of every record, detached from the store."""
        return [
            PhonemeProficiency(
                symbol=r.symbol,
                score=r.score,
                attempts=r.attempts,
                last_updated=r.last_updated,
            )
            for r in self._records.values()
        ]

    def restore(self, data: Iterable[PhonemeProficiency]) -> None:
        """Replace the record set with ``data``.

        Naive ``last_updated`` values are taken to be UTC.
        """
        self._records = {
            r.symbol: PhonemeProficiency(
                symbol=r.symbol,
                score=r.score,
                attempts=r.attempts,
                last_updated=as_utc(r.last_updated),
            )
            for r in data
        }
        monitoring.proficiency_records.set(len(self._records))

    def flush(self) -> PersistResult:
        """Persist the current snapshot."""
        if self.repository is None:
            return PersistResult.success()
        return self.repository.save(self.snapshot())
