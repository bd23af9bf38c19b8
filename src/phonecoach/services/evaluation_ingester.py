"""Routes alignment verdicts into the proficiency store."""
import logging
from typing import Iterable, Optional

from phonecoach import monitoring
from phonecoach.config import settings
from phonecoach.models.evaluation_models import AlignedPhoneme
from phonecoach.services.proficiency_service import ProficiencyStore

logger = logging.getLogger(__name__)


def normalize_score(score: float, scale: Optional[float] = None) -> float:
    """Bring an alignment score onto the [0, 1] proficiency scale."""
    scale = settings.learning.eval_score_scale if scale is None else scale
    return min(1.0, max(0.0, score / scale))


class EvaluationIngester:
    """Applies one completed evaluation to the learner's proficiency."""

    def __init__(self, store: ProficiencyStore):
        self.store = store

    def ingest(self, aligned_phonemes: Iterable[AlignedPhoneme]) -> int:
        """Update proficiency from a batch of aligned phonemes.

        Only match and replace units count, keyed by the phoneme the speaker
        actually produced. The store is flushed once after the batch; a
        failed flush is logged and the in-memory state is kept.

        Returns:
            Number of observations applied.
        """
        applied = 0
        for entry in aligned_phonemes:
            if not entry.is_observation:
                continue
            if not entry.actual:
                continue
            self.store.update(entry.actual, normalize_score(entry.score))
            applied += 1

        monitoring.observations_ingested.inc(applied)

        result = self.store.flush()
        if not result.ok:
            logger.error(f"Failed to persist proficiency after evaluation ({result.error_kind.value}): {result.message}")

        logger.info(f"Ingested {applied} phoneme observations")
        return applied
