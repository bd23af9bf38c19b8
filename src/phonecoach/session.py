"""Learner session: the single owner of proficiency and queue state."""
import logging
import random
from typing import Any, Callable, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from phonecoach.config import settings
from phonecoach.exceptions import EmptyQueueError
from phonecoach.models.evaluation_models import AlignedPhoneme, WordEvaluation, flatten
from phonecoach.models.models import Phrase
from phonecoach.models.proficiency_models import SearchStrategy
from phonecoach.services.evaluation_ingester import EvaluationIngester
from phonecoach.services.phrase_selector import PhraseSelector, PhraseStore
from phonecoach.services.phrase_service import PhraseService
from phonecoach.services.practice_queue import PracticeQueue
from phonecoach.services.proficiency_repository import ProficiencyRepository
from phonecoach.services.proficiency_service import ProficiencyStore
from phonecoach.services.urgency_ranker import UrgencyRanker
from phonecoach.services.vocabulary import load_vocabulary

logger = logging.getLogger(__name__)


class LearnerSession:
    """Wires the scheduling components for one learner.

    Construct once per launch and pass it to whatever needs proficiency or
    practice material. Nothing is loaded until :meth:`start` is called.
    """

    def __init__(
        self,
        db: Optional[Session] = None,
        phrase_store: Optional[PhraseStore] = None,
        vocabulary_loader: Callable[[], Dict[str, int]] = load_vocabulary,
        rng: Optional[random.Random] = None,
    ):
        if phrase_store is None:
            if db is None:
                raise ValueError("A database session or a phrase store is required")
            phrase_store = PhraseService(db)

        repository = ProficiencyRepository(db) if db is not None else None
        self.store = ProficiencyStore(repository=repository, vocabulary_loader=vocabulary_loader)
        self.ranker = UrgencyRanker(self.store)
        self.queue = PracticeQueue()
        self.selector = PhraseSelector(self.ranker, phrase_store, self.queue, rng=rng)
        self.queue.refill = self.add_to_queue
        self.ingester = EvaluationIngester(self.store)
        self.started = False

    def start(self, strategy: Optional[SearchStrategy] = None) -> None:
        """Load or seed proficiency and warm the queue."""
        if self.started:
            return
        self.store.seed_or_load()
        strategy = strategy or SearchStrategy(settings.learning.initial_strategy)
        self.add_to_queue(strategy)
        self.started = True
        logger.info(f"Learner session started with {len(self.store)} phonemes and {len(self.queue)} phrases queued")

    def ingest_evaluation(self, aligned_phonemes: Iterable[AlignedPhoneme]) -> None:
        """Record a completed evaluation. Every call counts as new observations."""
        self.ingester.ingest(aligned_phonemes)

    def ingest_word_evaluations(self, evaluations: Iterable[WordEvaluation]) -> None:
        """Record an utterance given as scored words."""
        self.ingest_evaluation(flatten(evaluations))

    def add_to_queue(self, strategy: SearchStrategy = SearchStrategy.MIXED) -> None:
        """Populate the queue with the given strategy."""
        self.selector.populate(strategy)

    def next_practice_item(self) -> Phrase:
        """Next phrase to practice.

        Raises:
            EmptyQueueError: if nothing is queued and a refill finds nothing.
        """
        if not len(self.queue):
            logger.warning("Practice queue ran dry, attempting refill")
            self.add_to_queue(SearchStrategy.ATTEMPTS)
            if not len(self.queue):
                raise EmptyQueueError()
        return self.queue.next()

    def diagnostics(self, limit: Optional[int] = None) -> Dict[str, Any]:
        """Ranking views for display or debugging."""
        return {
            "most_urgent": self.ranker.most_urgent(limit),
            "least_attempted": self.ranker.least_attempted(limit),
            "mixed": self.ranker.mixed_urgency(limit),
            "top_by_attempts": [r.as_tuple() for r in self.ranker.raw_top_by_attempts(limit)],
            "top_by_score": [r.as_tuple() for r in self.ranker.raw_top_by_score(limit)],
            "queue_length": len(self.queue),
            "recent_history": self.queue.recent_history,
        }
