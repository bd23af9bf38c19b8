"""Tests for the phrase bank."""
import json
from pathlib import Path
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from phonecoach.exceptions import PhraseSeedError
from phonecoach.models.models import Phrase, PhraseCategory
from phonecoach.services.phrase_service import PhraseService


@pytest.fixture
def phrase_service(db: Session) -> PhraseService:
    """Create a phrase service instance."""
    return PhraseService(db)


@pytest.fixture
def bank(phrase_service: PhraseService) -> PhraseService:
    """Phrase bank with a few transcribed phrases."""
    phrase_service.add_phrase("Good morning", "ɡ ʊ d m ɔː n ɪ ŋ", PhraseCategory.FORMAL)
    phrase_service.add_phrase("Thank you", "θ æ ŋ k j uː", PhraseCategory.FORMAL)
    phrase_service.add_phrase("Think it through", "θ ɪ ŋ k ɪ t θ r uː", PhraseCategory.INFORMAL)
    phrase_service.add_phrase("See you soon", "s iː j uː s uː n", PhraseCategory.INFORMAL)
    phrase_service.add_phrase("My own line", "m aɪ oʊ n l aɪ n", PhraseCategory.USER_ADDED)
    return phrase_service


@pytest.fixture
def seed_file(tmp_path: Path) -> Path:
    """Seed file with two formal and one informal phrase."""
    path = tmp_path / "base_data.json"
    path.write_text(json.dumps({
        "formal": [
            {"text": "How do you do", "phonemes": "h aʊ d uː j uː d uː"},
            {"text": "Pleased to meet you", "phonemes": "p l iː z d t uː m iː t j uː"},
        ],
        "informal": [
            {"text": "What's up", "phonemes": "w ɒ t s ʌ p"},
        ],
    }), encoding="utf-8")
    return path


def test_add_phrase(phrase_service: PhraseService) -> None:
    """Test adding a phrase."""
    phrase = phrase_service.add_phrase("Hello", "h ə l oʊ", PhraseCategory.FORMAL)

    assert phrase.id is not None
    assert phrase.category == PhraseCategory.FORMAL
    assert phrase.created_at is not None
    assert phrase_service.get_phrase_count() == 1


def test_add_user_phrase_requires_phonemes(phrase_service: PhraseService) -> None:
    """Test that user phrases without a transcription are rejected."""
    assert phrase_service.add_user_phrase("Mumble", "   ") is None

    phrase = phrase_service.add_user_phrase("Mine", " m aɪ n ")
    assert phrase.category == PhraseCategory.USER_ADDED
    assert phrase.phonemes == "m aɪ n"


def test_seed_from_file(phrase_service: PhraseService, seed_file: Path) -> None:
    """Test seeding an empty bank."""
    assert phrase_service.needs_seeding() is True

    inserted = phrase_service.seed_from_file(seed_file)

    assert inserted == 3
    assert phrase_service.get_phrase_count(PhraseCategory.FORMAL) == 2
    assert phrase_service.get_phrase_count(PhraseCategory.INFORMAL) == 1
    assert phrase_service.needs_seeding() is False


def test_seed_skips_populated_bank(bank: PhraseService, seed_file: Path) -> None:
    """Test that seeding only happens once."""
    assert bank.seed_from_file(seed_file) == 0
    assert bank.get_phrase_count() == 5


def test_seed_missing_file(phrase_service: PhraseService, tmp_path: Path) -> None:
    """Test that a missing seed file raises."""
    with pytest.raises(PhraseSeedError):
        phrase_service.seed_from_file(tmp_path / "absent.json")


def test_seed_corrupt_file(phrase_service: PhraseService, tmp_path: Path) -> None:
    """Test that an undecodable seed file raises."""
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PhraseSeedError):
        phrase_service.seed_from_file(path)


def test_find_phrases_containing_single_phoneme(bank: PhraseService) -> None:
    """Test phoneme search."""
    found = bank.find_phrases_containing(["θ"])

    # "Think it through" has two θ, so it ranks first
    assert [p.text for p in found] == ["Think it through", "Thank you"]


def test_find_phrases_containing_with_category(bank: PhraseService) -> None:
    """Test that the category narrows the search."""
    found = bank.find_phrases_containing(["θ"], category=PhraseCategory.FORMAL)

    assert [p.text for p in found] == ["Thank you"]


def test_find_phrases_containing_drops_trailing_terms(bank: PhraseService) -> None:
    """Test that unmatched trailing phonemes are dropped until something matches."""
    found = bank.find_phrases_containing(["ŋ", "θ", "ʒ"])

    assert {p.text for p in found} == {"Thank you", "Think it through"}


def test_find_phrases_containing_weights_earlier_terms(bank: PhraseService) -> None:
    """Test weighted ranking across several phonemes."""
    found = bank.find_phrases_containing(["uː", "j"])

    # Thank you: 1*2 + 1*1 = 3; See you soon: 2*2 + 1*1 = 5
    assert [p.text for p in found] == ["See you soon", "Thank you"]


def test_find_phrases_containing_no_match(bank: PhraseService) -> None:
    """Test that an unknown phoneme finds nothing."""
    assert bank.find_phrases_containing(["ʒ"]) == []
    assert bank.find_phrases_containing(["  ", ""]) == []


def test_find_phrases_containing_text(bank: PhraseService) -> None:
    """Test case-insensitive text search."""
    found = bank.find_phrases_containing_text(["you"])

    assert {p.text for p in found} == {"Thank you", "See you soon"}
    assert bank.find_phrases_containing_text(["GOOD"])[0].text == "Good morning"


def test_random_picks(bank: PhraseService) -> None:
    """Test random picks per category."""
    picks = bank.random_picks()

    assert {p.text for p in picks.formal} == {"Good morning", "Thank you"}
    assert {p.text for p in picks.informal} == {"Think it through", "See you soon"}
    assert [p.text for p in picks.user_added] == ["My own line"]


def test_random_picks_respects_count(bank: PhraseService) -> None:
    """Test the per-category limit."""
    picks = bank.random_picks(count=1)

    assert len(picks.formal) == 1
    assert len(picks.informal) == 1


def test_get_random_phrase_empty_category(phrase_service: PhraseService) -> None:
    """Test that an empty category yields None."""
    assert phrase_service.get_random_phrase(PhraseCategory.INFORMAL) is None


def test_query_errors_return_empty() -> None:
    """Test that database errors degrade to empty results."""
    db = Mock(spec=Session)
    db.query.side_effect = OperationalError("SELECT", {}, Exception("locked"))
    service = PhraseService(db)

    assert service.find_phrases_containing(["θ"]) == []
    assert service.get_random_phrases(PhraseCategory.FORMAL, 3) == []
    assert service.needs_seeding() is False


def test_phrase_defaults() -> None:
    """Test that unsaved phrases already carry an identity."""
    first = Phrase(text="One", phonemes="w ʌ n")
    second = Phrase(text="One", phonemes="w ʌ n")

    assert first.id != second.id
    assert first.category == PhraseCategory.FORMAL
