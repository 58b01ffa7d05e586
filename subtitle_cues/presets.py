"""Configuration presets and linguistic constants for subtitle segmentation.

WHY: The segmentation rules are driven by tuned constants (durations, word
ceilings, the long-word threshold, the smart-break fallback ratio) and by a
language-specific set of natural break words. Keeping them as plain data lets
callers swap languages or tweak a single threshold without touching the
algorithm, and keeps concurrent calls with different settings independent.

HOW: Each preset is a plain dict. PRESETS maps preset names (and short
aliases) to their dicts. resolve_config() deep-copies a preset and merges a
partial override dict over it, rejecting keys the segmenter does not know.

RULES:
- Presets are frozen constants, never mutate them at runtime.
- resolve_config() is the only place a working config dict is built.
- "german" is the default; break words are compared lowercased with
  punctuation stripped.
"""

import copy
from typing import Dict, FrozenSet, Optional

# Characters removed from a word token before matching it against the
# transcript, measuring its length or looking it up in the break words.
# Letters outside ASCII (ä, ö, ü, ß, é, ...) are never stripped.
DEFAULT_STRIP_CHARS = ".!?,:;\"'()[]{}„“”‚‘’«»"

GERMAN_BREAK_WORDS: FrozenSet[str] = frozenset({
    "der", "die", "das", "den", "dem", "des",
    "ein", "eine", "einen", "einem", "einer", "eines",
    "von", "zu", "mit", "bei", "nach", "vor", "über", "unter", "durch",
    "für", "ohne", "gegen",
    "und", "oder", "aber", "doch", "jedoch", "sowie", "als", "wie",
    "wenn", "weil", "dass", "da",
})

ENGLISH_BREAK_WORDS: FrozenSet[str] = frozenset({
    "the", "a", "an",
    "of", "for", "from", "with", "in", "on", "at", "by", "to", "as",
    "and", "but", "or", "so", "because", "that", "if", "when",
})

PRESET_GERMAN: Dict = {
    "target_duration": 1.8,
    "max_duration": 2.5,
    "min_duration": 1.0,
    "min_duration_punctuation": 1.0,
    "max_words": 4,
    "long_word_threshold": 15,
    "lookahead_words": 3,
    "pause_threshold": 0.1,
    "smart_break_fallback_ratio": 0.85,
    "elastic_gap": 0.6,
    "elastic_buffer": 0.1,
    "strong_punctuation": ".!?",
    "weak_punctuation": ",;:",
    "strip_chars": DEFAULT_STRIP_CHARS,
    "break_words": GERMAN_BREAK_WORDS,
}

PRESET_ENGLISH: Dict = dict(PRESET_GERMAN, break_words=ENGLISH_BREAK_WORDS)

PRESETS: Dict[str, Dict] = {
    "german": PRESET_GERMAN,
    "de": PRESET_GERMAN,  # Alias
    "english": PRESET_ENGLISH,
    "en": PRESET_ENGLISH,  # Alias
}

CONFIG_KEYS = frozenset(PRESET_GERMAN)


def resolve_config(preset: str = "german", overrides: Optional[Dict] = None) -> Dict:
    """Build a working config dict from a preset name and optional overrides.

    Args:
        preset: Preset name ("german", "english", or an alias).
        overrides: Partial config dict merged over the preset.

    Returns:
        A fresh config dict owned by the caller.

    Raises:
        ValueError: If the preset name or an override key is unknown.
    """
    if preset not in PRESETS:
        raise ValueError(
            "Unknown preset '{}'. Available: {}".format(preset, ", ".join(PRESETS))
        )
    cfg = copy.deepcopy(PRESETS[preset])

    if overrides:
        unknown = sorted(set(overrides) - CONFIG_KEYS)
        if unknown:
            raise ValueError("Unknown config keys: {}".format(", ".join(unknown)))
        cfg.update(copy.deepcopy(overrides))

    cfg["break_words"] = frozenset(w.lower() for w in cfg["break_words"])
    return cfg
