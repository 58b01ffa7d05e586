"""Word-timestamp driven subtitle segmentation.

WHY: The subtitling pipeline transcribes a video, turns the word timestamps
into short readable cues, lets a human review the cues as plain text, and
finally burns them into the video. This package is the segmentation step and
its text interchange format; transcription and rendering live elsewhere.

HOW: generate_subtitles(full_text, words) resolves a config preset, runs
core.segment_words() and renders the cues with text_format.format_cues().
The lower-level primitives (validation, punctuation detection, time
formatting, parsing) are re-exported for the rendering stage and for tests.

RULES:
- generate_subtitles() and segment() are pure: same input, same output, no
  shared state. Re-running them after a downstream failure is always safe.
- ValidationError propagates to the caller; lookup misses and parse skips
  are absorbed and logged.
- Preset names: "german" (default, overridable via SUBTITLE_PRESET),
  "english", and the aliases "de" / "en".
"""

import logging
from typing import Any, Dict, List, Optional

from . import config as env_config
from .core import (
    STRONG,
    WEAK,
    apply_elastic_timing,
    detect_punctuation,
    find_smart_break,
    segment_words,
    validate_words,
)
from .exceptions import ValidationError
from .models import Cue, ParsedCue, Word
from .presets import PRESETS, resolve_config
from .text_format import format_cues, format_time, parse_subtitle_text, parse_time_line

__version__ = "0.1.0"

__all__ = [
    "generate_subtitles",
    "segment",
    "Cue",
    "ParsedCue",
    "Word",
    "ValidationError",
    "PRESETS",
    "resolve_config",
    "validate_words",
    "detect_punctuation",
    "find_smart_break",
    "apply_elastic_timing",
    "format_time",
    "format_cues",
    "parse_time_line",
    "parse_subtitle_text",
    "STRONG",
    "WEAK",
]

logger = logging.getLogger(__name__)


def segment(
    words: Any,
    transcript: str,
    preset: Optional[str] = None,
    config: Optional[Dict] = None,
) -> List[Cue]:
    """Segment word timestamps into cues.

    Args:
        words: Word objects or ``{word, start, end}`` mappings.
        transcript: Full transcript text, used for punctuation and spacing.
        preset: Preset name. Defaults to SUBTITLE_PRESET (or "german").
        config: Partial config dict merged over the preset.

    Raises:
        ValidationError: If the word list is malformed.
        ValueError: If the preset or a config key is unknown.
    """
    cfg = resolve_config(preset or env_config.DEFAULT_PRESET, config)
    return segment_words(words, transcript, cfg)


def generate_subtitles(
    full_text: str,
    words: Any,
    preset: Optional[str] = None,
    config: Optional[Dict] = None,
) -> str:
    """Generate the canonical subtitle text block from a transcription.

    Args:
        full_text: Full transcript text.
        words: Word objects or ``{word, start, end}`` mappings.
        preset: Preset name. Defaults to SUBTITLE_PRESET (or "german").
        config: Partial config dict merged over the preset.

    Returns:
        Cues rendered as ``M:SS.d - M:SS.d`` / text blocks.

    Raises:
        ValidationError: If the word list is malformed.
    """
    try:
        cues = segment(words, full_text, preset=preset, config=config)
    except ValidationError as e:
        logger.error("Subtitle generation failed: %s", e)
        raise

    avg = sum(c.duration for c in cues) / len(cues)
    logger.info("Generated %d cues, avg duration: %.1fs", len(cues), avg)
    return format_cues(cues)
