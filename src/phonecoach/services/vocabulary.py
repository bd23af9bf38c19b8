"""Phoneme vocabulary loading used to seed the proficiency store."""
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from phonecoach.config import settings

logger = logging.getLogger(__name__)


def load_vocabulary(path: Optional[Union[str, Path]] = None) -> Dict[str, int]:
    """Read the token -> id mapping of the recognizer vocabulary.

    The file is the recognizer's vocabulary JSON, which carries a
    ``token_to_id`` object. Missing or undecodable files yield an empty
    mapping so that start-up can continue without seeded phonemes.
    """
    path = Path(path) if path is not None else settings.paths.vocabulary_file

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning(f"Vocabulary file {path} not found, starting with an empty proficiency set")
        return {}
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to decode vocabulary file {path}: {e}")
        return {}

    token_to_id = data.get("token_to_id") if isinstance(data, dict) else None
    if not isinstance(token_to_id, dict):
        logger.warning(f"Vocabulary file {path} has no token_to_id mapping")
        return {}

    vocabulary = {}
    for token, token_id in token_to_id.items():
        token = str(token).strip()
        if not token:
            continue
        try:
            vocabulary[token] = int(token_id)
        except (TypeError, ValueError):
            logger.warning(f"Skipping vocabulary token {token!r} with invalid id {token_id!r}")

    logger.info(f"Loaded {len(vocabulary)} phoneme tokens from {path}")
    return vocabulary
