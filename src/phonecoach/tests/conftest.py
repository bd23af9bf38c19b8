"""Test configuration."""
import os
import random
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Generator, List

import pytest
from dotenv import load_dotenv
from faker import Faker
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from phonecoach.models.base import init_db
from phonecoach.models.models import Phrase, PhraseCategory
from phonecoach.models.proficiency_models import PhonemeProficiency

fake = Faker()

FIXED_NOW = datetime(2025, 11, 17, 12, 0, tzinfo=UTC)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh in-memory database session for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def now() -> datetime:
    """Fixed reference time."""
    return FIXED_NOW


@pytest.fixture
def rng() -> random.Random:
    """Seeded random generator for shuffles."""
    return random.Random(1234)


@pytest.fixture
def make_phrase() -> Callable[..., Phrase]:
    """Factory for unsaved phrases."""
    def _make(
        text: str = None,
        phonemes: str = "h ə l oʊ",
        category: PhraseCategory = PhraseCategory.FORMAL,
    ) -> Phrase:
        return Phrase(text=text or fake.unique.sentence(), phonemes=phonemes, category=category)

    return _make


@pytest.fixture
def make_records() -> Callable[..., List[PhonemeProficiency]]:
    """Factory for proficiency records stamped at FIXED_NOW."""
    def _make(*specs) -> List[PhonemeProficiency]:
        return [
            PhonemeProficiency(symbol=symbol, score=score, attempts=attempts, last_updated=FIXED_NOW)
            for symbol, score, attempts in specs
        ]

    return _make
