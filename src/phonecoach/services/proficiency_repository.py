"""Persistence of proficiency records."""
import logging
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from phonecoach import monitoring
from phonecoach.models.models import PhonemeScore
from phonecoach.models.proficiency_models import (
    PersistErrorKind,
    PersistResult,
    PhonemeProficiency,
)

logger = logging.getLogger(__name__)


class ProficiencyRepository:
    """Reads and writes the full proficiency record set."""

    def __init__(self, db: Session):
        """Initialize the repository with a database session."""
        self.db = db

    def load(self) -> PersistResult:
        """Load every persisted record, ordered by symbol."""
        try:
            rows = self.db.query(PhonemeScore).order_by(PhonemeScore.symbol).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to load proficiency records: {e}")
            monitoring.persistence_errors.labels(error_kind=PersistErrorKind.READ_FAILED.value).inc()
            return PersistResult.failure(PersistErrorKind.READ_FAILED, str(e))

        records = [
            PhonemeProficiency(
                symbol=row.symbol,
                score=row.score,
                attempts=row.attempts,
                last_updated=row.last_updated_utc,
            )
            for row in rows
        ]
        logger.debug(f"Loaded {len(records)} proficiency records")
        return PersistResult.success(records)

    def save(self, records: Iterable[PhonemeProficiency]) -> PersistResult:
        """Write the record set, inserting new symbols and updating known ones."""
        records: List[PhonemeProficiency] = list(records)
        try:
            existing = {row.symbol: row for row in self.db.query(PhonemeScore).all()}
            for record in records:
                row = existing.get(record.symbol)
                if row is None:
                    row = PhonemeScore(symbol=record.symbol)
                    self.db.add(row)
                row.score = record.score
                row.attempts = record.attempts
                row.last_updated = record.last_updated
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save {len(records)} proficiency records: {e}")
            monitoring.persistence_errors.labels(error_kind=PersistErrorKind.WRITE_FAILED.value).inc()
            return PersistResult.failure(PersistErrorKind.WRITE_FAILED, str(e))

        logger.debug(f"Saved {len(records)} proficiency records")
        return PersistResult.success()
