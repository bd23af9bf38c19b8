"""Service for managing the bank of practice phrases."""
import json
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from sqlalchemy import and_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from phonecoach.config import settings
from phonecoach.exceptions import PhraseSeedError
from phonecoach.models.models import Phrase, PhraseCategory
from phonecoach.models.proficiency_models import RandomPicks

logger = logging.getLogger(__name__)

# Categories read from the seed file, in the order they are inserted
SEED_CATEGORIES = (PhraseCategory.FORMAL, PhraseCategory.INFORMAL)


def _clean_terms(terms: Sequence[str]) -> List[str]:
    return [t.strip() for t in terms if t and t.strip()]


class PhraseService:
    """Phrase store backed by the database."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def add_phrase(self, text: str, phonemes: str, category: PhraseCategory) -> Phrase:
        """Add a phrase to the bank."""
        phrase = Phrase(text=text, phonemes=phonemes, category=category)
        self.db.add(phrase)
        self.db.commit()
        self.db.refresh(phrase)
        logger.info(f"Saved new {category.value} phrase: {text!r}")
        return phrase

    def add_user_phrase(self, text: str, phonemes: str) -> Optional[Phrase]:
        """Add a learner-provided phrase with its transcription."""
        if not phonemes.strip():
            logger.warning(f"No phonemes given for user phrase {text!r}, not saving")
            return None
        return self.add_phrase(text, phonemes.strip(), PhraseCategory.USER_ADDED)

    def get_phrase_count(self, category: Optional[PhraseCategory] = None) -> int:
        """Get the count of phrases, optionally for one category."""
        query = self.db.query(Phrase)
        if category is not None:
            query = query.filter(Phrase.category == category)
        return query.count()

    def needs_seeding(self) -> bool:
        """Whether the phrase bank is still empty."""
        try:
            return self.get_phrase_count() == 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch phrase count: {e}")
            return False

    def seed_from_file(self, path: Optional[Union[str, Path]] = None) -> int:
        """Load the base phrase set into an empty bank.

        The file holds ``{"formal": [{"text", "phonemes"}], "informal": [...]}``.
        Returns the number of phrases inserted.
        """
        if not self.needs_seeding():
            logger.info("Phrase bank already seeded")
            return 0

        path = Path(path) if path is not None else settings.paths.phrase_seed_file
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise PhraseSeedError(f"Phrase seed file {path} not found") from e
        except (OSError, json.JSONDecodeError) as e:
            raise PhraseSeedError(f"Failed to decode phrase seed file {path}: {e}") from e

        phrases = []
        for category in SEED_CATEGORIES:
            for item in data.get(category.value, []):
                try:
                    phrases.append(Phrase(text=item["text"], phonemes=item["phonemes"], category=category))
                except (KeyError, TypeError) as e:
                    raise PhraseSeedError(f"Invalid {category.value} phrase entry {item!r}") from e

        self.db.add_all(phrases)
        self.db.commit()
        logger.info(f"Phrase bank seeded with {len(phrases)} phrases from {path}")
        return len(phrases)

    def get_random_phrases(self, category: PhraseCategory, count: int) -> List[Phrase]:
        """Fetch up to ``count`` random phrases from a category."""
        try:
            return (
                self.db.query(Phrase)
                .filter(Phrase.category == category)
                .order_by(func.random())
                .limit(count)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch random phrases for category {category.display_name}: {e}")
            return []

    def get_random_phrase(self, category: PhraseCategory) -> Optional[Phrase]:
        """Fetch a single random phrase from a category."""
        phrases = self.get_random_phrases(category, 1)
        return phrases[0] if phrases else None

    def random_picks(self, count: Optional[int] = None) -> RandomPicks:
        """Random phrases from each category."""
        count = settings.learning.random_picks_per_category if count is None else count
        return RandomPicks(
            formal=self.get_random_phrases(PhraseCategory.FORMAL, count),
            informal=self.get_random_phrases(PhraseCategory.INFORMAL, count),
            user_added=self.get_random_phrases(PhraseCategory.USER_ADDED, count),
        )

    def find_phrases_containing(
        self, phonemes: Sequence[str], category: Optional[PhraseCategory] = None
    ) -> List[Phrase]:
        """Phrases whose transcription contains the query phonemes.

        Earlier phonemes weigh more. If nothing contains every phoneme, the
        last one is dropped and the search repeated. Results are ordered by
        weighted occurrence count, highest first.
        """
        return self._ranked_search(
            _clean_terms(phonemes),
            category,
            column=Phrase.phonemes,
            count=lambda phrase, term: phrase.phonemes.count(term),
            case_sensitive=True,
        )

    def find_phrases_containing_text(
        self, terms: Sequence[str], category: Optional[PhraseCategory] = None
    ) -> List[Phrase]:
        """Phrases whose text contains the query terms, ignoring case."""
        return self._ranked_search(
            _clean_terms(terms),
            category,
            column=Phrase.text,
            count=lambda phrase, term: phrase.text.lower().count(term.lower()),
            case_sensitive=False,
        )

    def _ranked_search(
        self,
        terms: List[str],
        category: Optional[PhraseCategory],
        column,
        count: Callable[[Phrase, str], int],
        case_sensitive: bool,
    ) -> List[Phrase]:
        current = list(terms)
        while current:
            matches = self._fetch_with_terms(current, category, column, case_sensitive)
            # SQLite LIKE ignores ASCII case, so confirm every term really occurs
            matches = [p for p in matches if all(count(p, term) for term in current)]
            if matches:
                def weight(phrase: Phrase) -> float:
                    return sum(
                        count(phrase, term) * (len(current) - index)
                        for index, term in enumerate(current)
                    )
                return sorted(matches, key=weight, reverse=True)
            # Drop the least important term and try again
            current.pop()
        return []

    def _fetch_with_terms(
        self,
        terms: List[str],
        category: Optional[PhraseCategory],
        column,
        case_sensitive: bool,
    ) -> List[Phrase]:
        conditions = []
        if category is not None:
            conditions.append(Phrase.category == category)
        for term in terms:
            if case_sensitive:
                conditions.append(column.contains(term, autoescape=True))
            else:
                conditions.append(func.lower(column).contains(term.lower(), autoescape=True))

        try:
            return self.db.query(Phrase).filter(and_(*conditions)).order_by(Phrase.created_at).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch phrases for terms {terms}: {e}")
            return []
