"""Read-side rankings over the proficiency store."""
import logging
from datetime import datetime
from typing import List, Optional

from phonecoach.config import settings
from phonecoach.models.base import as_utc, utc_now
from phonecoach.models.proficiency_models import PhonemeProficiency, SearchStrategy
from phonecoach.services.proficiency_service import ProficiencyStore

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


class UrgencyRanker:
    """Chooses which phonemes most need practice."""

    def __init__(self, store: ProficiencyStore):
        self.store = store

    def adjusted_score(self, record: PhonemeProficiency, now: Optional[datetime] = None) -> float:
        """Score lowered by how long the phoneme has gone unpracticed."""
        now = as_utc(now) if now else utc_now()
        days_since = (now - as_utc(record.last_updated)).total_seconds() / SECONDS_PER_DAY
        return record.score - settings.learning.recency_decay_per_day * days_since

    def most_urgent(self, limit: Optional[int] = None, now: Optional[datetime] = None) -> List[str]:
        """Phonemes with the lowest recency-adjusted score first."""
        limit = settings.learning.targets_per_refill if limit is None else limit
        now = as_utc(now) if now else utc_now()
        ranked = sorted(self.store.records(), key=lambda r: self.adjusted_score(r, now))
        return [r.symbol for r in ranked[:limit]]

    def least_attempted(self, limit: Optional[int] = None) -> List[str]:
        """Phonemes with the fewest attempts first."""
        limit = settings.learning.targets_per_refill if limit is None else limit
        ranked = sorted(self.store.records(), key=lambda r: r.attempts)
        return [r.symbol for r in ranked[:limit]]

    def mixed_urgency(self, limit: Optional[int] = None, now: Optional[datetime] = None) -> List[str]:
        """Two thirds by urgency followed by one third by attempts.

        The two halves are not deduplicated, so a phoneme can appear twice.
        """
        limit = settings.learning.targets_per_refill if limit is None else limit
        attempts_share = limit // 3
        score_share = limit - attempts_share
        return self.most_urgent(score_share, now) + self.least_attempted(attempts_share)

    def targets_for(self, strategy: SearchStrategy, limit: Optional[int] = None) -> List[str]:
        """Resolve target phonemes for a search strategy."""
        if strategy == SearchStrategy.URGENCY:
            targets = self.most_urgent(limit)
        elif strategy == SearchStrategy.ATTEMPTS:
            targets = self.least_attempted(limit)
        elif strategy == SearchStrategy.MIXED:
            targets = self.mixed_urgency(limit)
        else:
            raise ValueError(f"Unknown search strategy: {strategy}")
        logger.debug(f"Targets for {strategy.value}: {targets}")
        return targets

    def raw_top_by_attempts(self, limit: Optional[int] = None) -> List[PhonemeProficiency]:
        """Most practiced records, for diagnostics."""
        limit = settings.learning.targets_per_refill if limit is None else limit
        return sorted(self.store.records(), key=lambda r: r.attempts, reverse=True)[:limit]

    def raw_top_by_score(self, limit: Optional[int] = None) -> List[PhonemeProficiency]:
        """Highest scoring records, for diagnostics."""
        limit = settings.learning.targets_per_refill if limit is None else limit
        return sorted(self.store.records(), key=lambda r: r.score, reverse=True)[:limit]
