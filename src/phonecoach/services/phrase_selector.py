"""Turns ranked phonemes into scheduled practice phrases."""
import logging
import random
from typing import Dict, List, Optional, Protocol, Sequence

from phonecoach import monitoring
from phonecoach.config import settings
from phonecoach.models.models import Phrase, PhraseCategory
from phonecoach.models.proficiency_models import RandomPicks, SearchStrategy
from phonecoach.services.practice_queue import PracticeQueue
from phonecoach.services.urgency_ranker import UrgencyRanker

logger = logging.getLogger(__name__)


class PhraseStore(Protocol):
    """Phrase lookups the selector relies on."""

    def find_phrases_containing(
        self, phonemes: Sequence[str], category: Optional[PhraseCategory] = None
    ) -> List[Phrase]:
        ...

    def random_picks(self) -> RandomPicks:
        ...


class PhraseSelector:
    """Populates the practice queue from the learner's weakest phonemes."""

    def __init__(
        self,
        ranker: UrgencyRanker,
        phrase_store: PhraseStore,
        queue: PracticeQueue,
        rng: Optional[random.Random] = None,
    ):
        self.ranker = ranker
        self.phrase_store = phrase_store
        self.queue = queue
        self.rng = rng or random.Random()

    def populate(self, strategy: SearchStrategy = SearchStrategy.MIXED) -> List[Phrase]:
        """Add phrases targeting the chosen phonemes, or random ones if none fit.

        Returns the phrases that were enqueued.
        """
        targets = self.ranker.targets_for(strategy)

        candidates: Dict[str, Phrase] = {}
        for phoneme in targets:
            for phrase in self.phrase_store.find_phrases_containing([phoneme]):
                candidates.setdefault(phrase.id, phrase)

        available = [p for p in candidates.values() if not self.queue.contains_text(p.text)]

        if not available:
            logger.warning(f"No phrases found for {targets}, using fallback random phrases")
            picks = self.phrase_store.random_picks()
            # Random picks are not checked against queued texts
            selected = list(picks.formal) + list(picks.informal)
            self.rng.shuffle(selected)
            monitoring.fallback_selections.inc()
        else:
            self.rng.shuffle(available)
            selected = available[: settings.learning.max_phrases_per_refill]

        self.queue.enqueue(selected)
        monitoring.queue_refills.labels(strategy=strategy.value).inc()
        logger.info(
            f"Added {len(selected)} phrases to queue ({len(self.queue)} waiting). Strategy: {strategy.value}"
        )
        return selected
