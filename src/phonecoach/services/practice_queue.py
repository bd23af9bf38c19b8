"""FIFO of scheduled practice phrases."""
import logging
from collections import OrderedDict, deque
from typing import Callable, Iterable, List, Optional

from phonecoach import monitoring
from phonecoach.config import settings
from phonecoach.exceptions import EmptyQueueError
from phonecoach.models.models import Phrase
from phonecoach.models.proficiency_models import SearchStrategy

logger = logging.getLogger(__name__)


class PracticeQueue:
    """Queue of phrases waiting to be practiced.

    Popping a phrase that leaves ``refill_watermark`` or fewer behind calls
    the refill hook with the attempts strategy before returning. A failing
    refill is logged and the popped phrase is still served. Consumed
    texts are remembered in a bounded history; nothing reads it yet.
    """

    def __init__(
        self,
        refill: Optional[Callable[[SearchStrategy], object]] = None,
        watermark: Optional[int] = None,
        history_capacity: Optional[int] = None,
    ):
        self.refill = refill
        self.watermark = settings.learning.refill_watermark if watermark is None else watermark
        self.history_capacity = (
            settings.learning.history_capacity if history_capacity is None else history_capacity
        )
        self._phrases: deque = deque()
        self._history: "OrderedDict[str, None]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._phrases)

    def __iter__(self):
        return iter(list(self._phrases))

    @property
    def recent_history(self) -> List[str]:
        """Consumed phrase texts, oldest first."""
        return list(self._history)

    def contains_text(self, text: str) -> bool:
        """Whether a phrase with this text is waiting in the queue."""
        return any(p.text == text for p in self._phrases)

    def peek(self) -> Optional[Phrase]:
        """Next phrase without removing it."""
        return self._phrases[0] if self._phrases else None

    def enqueue(self, phrases: Iterable[Phrase]) -> None:
        """Append phrases to the tail in the given order."""
        self._phrases.extend(phrases)
        monitoring.queue_length.set(len(self._phrases))

    def next(self) -> Phrase:
        """Pop the head of the queue, refilling at the low watermark."""
        if not self._phrases:
            raise EmptyQueueError()

        phrase = self._phrases.popleft()
        if len(self._phrases) <= self.watermark and self.refill is not None:
            logger.debug(f"Queue at {len(self._phrases)} phrases, refilling")
            try:
                self.refill(SearchStrategy.ATTEMPTS)
            except Exception as e:
                logger.error(f"Failed to refill practice queue: {e}")

        self._add_to_history(phrase.text)
        monitoring.phrases_served.inc()
        monitoring.queue_length.set(len(self._phrases))
        return phrase

    def clear(self) -> None:
        self._phrases.clear()
        monitoring.queue_length.set(0)

    def _add_to_history(self, text: str) -> None:
        if text in self._history:
            self._history.move_to_end(text)
        else:
            self._history[text] = None
        while len(self._history) > self.history_capacity:
            self._history.popitem(last=False)
