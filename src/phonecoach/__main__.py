"""Main entry point for the pronunciation coach."""
import logging
import sys

from phonecoach.config import ensure_directories, settings
from phonecoach.exceptions import EmptyQueueError, PhraseSeedError
from phonecoach.logging_config import setup_logging
from phonecoach.models.base import SessionLocal, init_db
from phonecoach.monitoring import start_monitoring
from phonecoach.services.phrase_service import PhraseService
from phonecoach.session import LearnerSession

logger = logging.getLogger(__name__)

PREVIEW_COUNT = 5


def main() -> int:
    """Prepare the database and print the first practice phrases."""
    ensure_directories()
    setup_logging("Starting phonecoach ...")

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics exposed on port {settings.monitoring.port}")

    init_db()
    db = SessionLocal()
    try:
        try:
            PhraseService(db).seed_from_file()
        except PhraseSeedError as e:
            logger.error(f"Could not seed phrase bank: {e}")

        session = LearnerSession(db)
        session.start()

        for _ in range(PREVIEW_COUNT):
            try:
                phrase = session.next_practice_item()
            except EmptyQueueError as e:
                logger.error(str(e))
                return 1
            print(f"[{phrase.category.display_name}] {phrase.text}  /{phrase.phonemes}/")
        return 0
    finally:
        db.close()
        logger.info("Database session closed")


if __name__ == "__main__":
    sys.exit(main())
