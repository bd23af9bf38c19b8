"""Database models for the pronunciation coach."""
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, Float, Integer, String

from phonecoach.models.base import Base, TimestampMixin, as_utc, utc_now


class PhraseCategory(str, enum.Enum):
    """Content tags for practice phrases."""
    FORMAL = "formal"
    INFORMAL = "informal"
    USER_ADDED = "user_added"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class Phrase(Base):
    """Practice phrase stored in the phrase bank."""

    __tablename__ = "phrases"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    text = Column(String, nullable=False, index=True)
    phonemes = Column(String, nullable=False)
    category = Column(
        Enum(PhraseCategory, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PhraseCategory.FORMAL,
    )
    created_at = Column(DateTime(timezone=True), default=utc_now)

    def __init__(self, **kwargs):
        # Identity is assigned up front so unsaved phrases can be deduplicated
        kwargs.setdefault("id", str(uuid.uuid4()))
        kwargs.setdefault("category", PhraseCategory.FORMAL)
        kwargs.setdefault("created_at", utc_now())
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<Phrase {self.text!r} ({self.category.value if self.category else None})>"


class PhonemeScore(Base, TimestampMixin):
    """Persisted proficiency row, one per phoneme symbol."""

    __tablename__ = "phoneme_proficiencies"

    id = Column(Integer, primary_key=True)
    symbol = Column(String, unique=True, nullable=False, index=True)
    score = Column(Float, nullable=False, default=0.5)
    attempts = Column(Integer, nullable=False, default=0)
    last_updated = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    @property
    def last_updated_utc(self):
        return as_utc(self.last_updated)
