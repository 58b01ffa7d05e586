"""Shared test fixtures for the subtitle_cues test suite.

WHY: Several test modules need the same small German transcriptions and a
fresh default config. Centralizing them keeps the expected timings in one
place.

HOW: Plain helper functions build word dicts in the ``{word, start, end}``
shape a transcription provider returns; fixtures wrap the recurring cases.

RULES:
- Word timings are written out explicitly (no accumulated float sums) so
  expected cue boundaries are exact.
- Configs always come from resolve_config(), never from the preset constants.
"""

from typing import Any, Dict, List, Sequence, Tuple

import pytest

from subtitle_cues.presets import resolve_config


def words_from(triples: Sequence[Tuple[str, float, float]]) -> List[Dict[str, Any]]:
    """Build provider-shaped word dicts from (word, start, end) triples."""
    return [{"word": w, "start": s, "end": e} for w, s, e in triples]


@pytest.fixture
def default_config():
    """A fresh copy of the german preset."""
    return resolve_config("german")


@pytest.fixture
def greeting():
    """Three words, one sentence: 'Guten Tag zusammen.'"""
    return "Guten Tag zusammen.", words_from([
        ("Guten", 0.0, 0.5),
        ("Tag", 0.5, 1.0),
        ("zusammen.", 1.0, 1.8),
    ])


@pytest.fixture
def five_short_words():
    """Five short words spoken within 1.5s, no punctuation."""
    return "eins zwei drei vier fünf", words_from([
        ("eins", 0.0, 0.3),
        ("zwei", 0.3, 0.6),
        ("drei", 0.6, 0.9),
        ("vier", 0.9, 1.2),
        ("fünf", 1.2, 1.5),
    ])


@pytest.fixture
def long_word_sentence():
    """A 27-character compound noun between shorter words."""
    return "Die Sozialversicherungsbeiträge steigen weiter.", words_from([
        ("Die", 0.0, 0.3),
        ("Sozialversicherungsbeiträge", 0.3, 1.5),
        ("steigen", 1.5, 1.9),
        ("weiter.", 1.9, 2.4),
    ])


@pytest.fixture
def sample_payload():
    """OpenAI-style transcription result (seconds)."""
    return {
        "text": "Guten Tag zusammen. Wie geht es euch?",
        "words": words_from([
            ("Guten", 0.0, 0.5),
            ("Tag", 0.5, 1.0),
            ("zusammen", 1.0, 1.8),
            ("Wie", 2.6, 2.8),
            ("geht", 2.8, 3.0),
            ("es", 3.0, 3.1),
            ("euch", 3.1, 3.5),
        ]),
    }
