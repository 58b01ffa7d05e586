"""Data models for the subtitle segmenter.

WHY: Segmentation consumes timestamped words from a speech-to-text engine and
produces subtitle cues. Both sides need a small, explicit structure so the
segmenter, the text formatter and the parser agree on field names and units.

HOW: Three dataclasses. Word is the read-only input unit, Cue is the output
of segmentation (with a diagnostic ``reason``), and ParsedCue is what the
parser recovers from the canonical text block, including the optional
bracketed tag a reviewer may add to the time line.

RULES:
- Timestamps are in seconds (float), not milliseconds.
- Word.text is the raw token as delivered by the engine; it may carry
  trailing punctuation or none at all.
- Cues are frozen. The elastic gap-fill pass builds a replacement via
  Cue.with_end() instead of mutating in place.
"""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class Word:
    """A single timestamped word from a speech-to-text engine.

    Attributes:
        text: The raw word token.
        start: Start time in seconds.
        end: End time in seconds (strictly greater than start).
    """
    text: str
    start: float
    end: float


@dataclass(frozen=True)
class Cue:
    """One subtitle cue produced by the segmenter.

    Attributes:
        start: Start time in seconds (the first word's start).
        end: End time in seconds, never later than the next word's start.
        text: Display text, trimmed and non-empty.
        reason: Why the cue was closed, e.g. "max words" or "last word".
    """
    start: float
    end: float
    text: str
    reason: str = ""

    @property
    def duration(self) -> float:
        return self.end - self.start

    def with_end(self, end: float) -> "Cue":
        return replace(self, end=end)

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "duration": self.duration,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ParsedCue:
    """A cue recovered from the canonical text block.

    Attributes:
        start: Start time in seconds, decisecond precision.
        end: End time in seconds, decisecond precision.
        text: Cue text; multi-line blocks are joined with single spaces.
        tag: Optional bracketed tag from the time line ("HIGHLIGHT", "STATIC").
    """
    start: float
    end: float
    text: str
    tag: Optional[str] = None

    @property
    def is_highlight(self) -> bool:
        return self.tag == "HIGHLIGHT"

    @property
    def is_static(self) -> bool:
        return self.tag == "STATIC"
