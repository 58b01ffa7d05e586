"""Core segmentation logic: validation, transcript alignment, cue building.

WHY: Speech-to-text engines deliver a flat list of timestamped words plus the
full transcript. Subtitles need short, readable cues that break at natural
boundaries, never show text before it is spoken, and never overlap each other
(overlapping cues flicker on screen). This module turns the word list into
such a cue sequence.

HOW: The pipeline has four stages:
  1. validate_words() - structural checks, raised as ValidationError before
     any work starts.
  2. map_word_positions() - a monotonic, never-rewinding scan that locates
     each cleaned word in the transcript so cue text keeps the original
     punctuation, casing and spacing.
  3. segment_words() - a fold over the word indices. step() appends one
     word to the open cue, assigns its clamped end time, and runs the close
     cascade (long word, max words, strong punctuation, weak punctuation,
     smart break, max duration, last word). First match wins.
  4. apply_elastic_timing() - extends a cue's end over small silent gaps
     to the next cue, leaving a short visual buffer.

RULES:
- ALL functions accept an explicit `config` dict, no global state.
- An open cue's end is clamped to the next word's start. This is what keeps
  consecutive cues from overlapping.
- A cue only closes once its start and end fall in different deciseconds,
  so the rendered text block can be parsed back without dropping it.
- The transcript cursor only moves forward; a repeated word is matched at its
  next occurrence, never an earlier one.
- A word that cannot be located in the transcript degrades only its own cue
  to space-joined word tokens (logged as a warning).
"""

import logging
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from .exceptions import ValidationError
from .models import Cue, Word
from .text_format import decisecond

logger = logging.getLogger(__name__)

STRONG = "strong"
WEAK = "weak"

_LINE_BREAK_RE = re.compile(r"\s*[\r\n]+\s*")

# =============================================================================
# Text Utilities
# =============================================================================


@lru_cache(maxsize=32)
def _char_class(chars: str) -> "re.Pattern":
    if not chars:
        return re.compile(r"(?!)")
    return re.compile("[{}]".format(re.escape(chars)))


def clean_word(text: str, config: Dict) -> str:
    """Strip the configured punctuation/quote characters from a word token."""
    return _char_class(config["strip_chars"]).sub("", text).strip()


def is_long_word(text: str, config: Dict) -> bool:
    return len(clean_word(text, config)) >= config["long_word_threshold"]


def is_break_word(text: str, config: Dict) -> bool:
    return clean_word(text, config).lower() in config["break_words"]


def detect_punctuation(text: str, config: Dict) -> Optional[str]:
    """Classify the punctuation a token ends with.

    Closing quotes and brackets after the punctuation mark are ignored, so
    both ``zusammen.`` and ``zusammen."`` count as strong.

    Returns:
        STRONG for sentence-final marks, WEAK for comma-class marks,
        None otherwise.
    """
    strong = config["strong_punctuation"]
    weak = config["weak_punctuation"]
    closers = "".join(c for c in config["strip_chars"] if c not in strong and c not in weak)
    tail = text.strip().rstrip(closers)
    if not tail:
        return None
    if tail[-1] in strong:
        return STRONG
    if tail[-1] in weak:
        return WEAK
    return None


# =============================================================================
# Input Validation
# =============================================================================

def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _coerce_word(raw: Any, index: int) -> Word:
    if isinstance(raw, Word):
        text, start, end = raw.text, raw.start, raw.end
    elif isinstance(raw, Mapping):
        text = raw.get("word", raw.get("text"))
        start, end = raw.get("start"), raw.get("end")
    else:
        text = start = end = None

    if not isinstance(text, str) or not _is_number(start) or not _is_number(end):
        raise ValidationError(
            "Invalid word timestamp structure at index {}. "
            "Expected: {{word: str, start: number, end: number}}".format(index)
        )
    if not text.strip():
        raise ValidationError("Empty word text at index {}".format(index))
    if start < 0 or end < 0 or start >= end:
        raise ValidationError(
            "Invalid timing at index {}: start={}, end={}".format(index, start, end)
        )
    return Word(text=text, start=float(start), end=float(end))


def validate_words(words: Any) -> List[Word]:
    """Validate a word timestamp list and normalize it to Word objects.

    Every element is checked, not just a prefix. Elements may be Word
    instances or mappings with ``word`` (or ``text``), ``start`` and ``end``.

    Raises:
        ValidationError: If words is not a non-empty list, an element has the
            wrong shape, times are negative or inverted, or start times go
            backwards.
    """
    if isinstance(words, (str, bytes)) or not isinstance(words, Sequence):
        raise ValidationError("Word timestamps must be a list")
    if len(words) == 0:
        raise ValidationError("Word timestamps list cannot be empty")

    result = []  # type: List[Word]
    for index, raw in enumerate(words):
        word = _coerce_word(raw, index)
        if result and word.start < result[-1].start:
            raise ValidationError(
                "Words out of order at index {}: start={} is before previous start={}".format(
                    index, word.start, result[-1].start
                )
            )
        result.append(word)
    return result


# =============================================================================
# Transcript Alignment
# =============================================================================

class TextSpan(NamedTuple):
    """Where a word sits in the transcript, including trailing punctuation."""
    start: int
    end: int
    text: str


def _locate(transcript: str, cursor: int, word: Word, config: Dict) -> Tuple[Optional[TextSpan], int]:
    clean = clean_word(word.text, config)
    if not clean:
        return None, cursor

    match = re.compile(re.escape(clean), re.IGNORECASE).search(transcript, cursor)
    if match is None:
        return None, cursor

    strip_chars = config["strip_chars"]
    end = match.end()
    while end < len(transcript) and transcript[end] in strip_chars:
        end += 1

    cursor = end
    while cursor < len(transcript) and transcript[cursor].isspace():
        cursor += 1

    return TextSpan(match.start(), end, transcript[match.start():end]), cursor


def map_word_positions(words: List[Word], transcript: str, config: Dict) -> List[Optional[TextSpan]]:
    """Locate each word in the transcript with a forward-only cursor.

    Args:
        words: Validated words.
        transcript: Full transcript text (may be empty).
        config: Config dict (uses strip_chars).

    Returns:
        One entry per word: its TextSpan, or None when it was not found.
        A miss leaves the cursor where it was.
    """
    positions = []  # type: List[Optional[TextSpan]]
    cursor = 0
    for word in words:
        span, cursor = _locate(transcript, cursor, word, config)
        positions.append(span)
    return positions


# =============================================================================
# Smart Phrase Break
# =============================================================================

class BreakDecision(NamedTuple):
    should_break: bool
    reason: str


def find_smart_break(
    cue_start: float, index: int, words: List[Word], duration: float, config: Dict
) -> BreakDecision:
    """Decide whether a cue that reached the target duration should close now.

    Checked in order:
      a. the current word is a break word -> break after it;
      b. a break word follows within the lookahead window and reaching it
         stays within max_duration -> keep going;
      c. the lookahead stops as soon as a future word would exceed
         max_duration;
      d. a pause longer than pause_threshold before the current word -> break;
      e. duration is at least smart_break_fallback_ratio of the target -> break;
      f. otherwise keep going.
    """
    current = words[index]
    current_clean = clean_word(current.text, config).lower()
    if current_clean in config["break_words"]:
        return BreakDecision(True, 'smart break (after "{}")'.format(current_clean))

    for offset in range(1, config["lookahead_words"] + 1):
        if index + offset >= len(words):
            break
        future = words[index + offset]
        future_duration = future.end - cue_start
        if future_duration > config["max_duration"]:
            break
        if is_break_word(future.text, config):
            return BreakDecision(
                False,
                'continuing to break word "{}"'.format(clean_word(future.text, config).lower()),
            )

    if index > 0:
        gap = current.start - words[index - 1].end
        if gap > config["pause_threshold"]:
            return BreakDecision(True, "smart break (natural pause: {:.1f}s)".format(gap))

    if duration >= config["target_duration"] * config["smart_break_fallback_ratio"]:
        return BreakDecision(True, "smart break (target duration reached)")

    return BreakDecision(False, "continuing (no natural break found yet)")


# =============================================================================
# Segmentation
# =============================================================================

@dataclass(frozen=True)
class SegmentState:
    """Accumulator threaded through step().

    Attributes:
        first: Index of the open cue's first word, None when no cue is open.
        start: Start time of the open cue.
        end: Current (clamped) end time of the open cue.
        cues: Cues finalized so far.
    """
    first: Optional[int] = None
    start: float = 0.0
    end: float = 0.0
    cues: Tuple[Cue, ...] = ()


class SegmentContext(NamedTuple):
    words: List[Word]
    positions: List[Optional[TextSpan]]
    transcript: str
    config: Dict


def cue_text(first: int, last: int, ctx: SegmentContext) -> str:
    """Extract display text for words[first..last] from the transcript.

    Falls back to joining the raw word tokens with single spaces when either
    boundary word was not located.
    """
    first_span, last_span = ctx.positions[first], ctx.positions[last]
    if first_span is not None and last_span is not None:
        text = _LINE_BREAK_RE.sub(" ", ctx.transcript[first_span.start:last_span.end]).strip()
        if text:
            return text

    logger.warning(
        "Transcript position lookup failed for words %d-%d, using word join fallback",
        first, last,
    )
    return " ".join(w.text.strip() for w in ctx.words[first:last + 1]).strip()


def open_cue_end(cue_start: float, index: int, words: List[Word], config: Dict) -> float:
    """End time of the open cue after appending words[index].

    The word's own end is raised to the minimum duration floor, then clamped
    to the next word's start. The last word has no clamp.
    """
    end = words[index].end
    if end - cue_start < config["min_duration"]:
        end = cue_start + config["min_duration"]
    if index + 1 < len(words):
        end = min(end, words[index + 1].start)
    return end


def _punctuation_after(index: int, ctx: SegmentContext) -> Optional[str]:
    span = ctx.positions[index]
    if span is not None:
        found = detect_punctuation(span.text, ctx.config)
        if found:
            return found
    return detect_punctuation(ctx.words[index].text, ctx.config)


def close_reason(state: SegmentState, index: int, ctx: SegmentContext) -> Optional[str]:
    """Run the close cascade for the open cue ending at words[index].

    Returns the reason of the first rule that fires, or None to keep
    accumulating.
    """
    cfg = ctx.config
    duration = state.end - state.start

    if is_long_word(ctx.words[index].text, cfg):
        return "long word"
    if index - state.first + 1 >= cfg["max_words"]:
        return "max words"

    punctuation = _punctuation_after(index, ctx)
    if punctuation == STRONG:
        return "strong punctuation"
    if punctuation == WEAK and duration >= cfg["min_duration_punctuation"]:
        return "weak punctuation"

    if duration >= cfg["target_duration"]:
        decision = find_smart_break(state.start, index, ctx.words, duration, cfg)
        if decision.should_break:
            return decision.reason
    if duration >= cfg["max_duration"]:
        return "max duration"

    if index == len(ctx.words) - 1:
        return "last word"
    return None


def _close(state: SegmentState, last: int, end: float, reason: str, ctx: SegmentContext) -> SegmentState:
    cue = Cue(start=state.start, end=end, text=cue_text(state.first, last, ctx), reason=reason)
    logger.debug(
        "Cue %d closed (%.2f-%.2fs, %s): %s",
        len(state.cues) + 1, cue.start, cue.end, reason, cue.text,
    )
    return SegmentState(cues=state.cues + (cue,))


def step(state: SegmentState, index: int, ctx: SegmentContext) -> SegmentState:
    """Fold one word into the segmentation state."""
    words, cfg = ctx.words, ctx.config
    word = words[index]

    if state.first is not None:
        # Close the open cue before this word if it must stand alone or
        # would push the cue past the hard maximum.
        early_reason, early_end = None, state.end
        if is_long_word(word.text, cfg):
            early_reason, early_end = "before long word", min(words[index - 1].end, word.start)
        elif word.end - state.start > cfg["max_duration"]:
            early_reason = "max duration"
        if early_reason is not None and _renders_apart(state.start, early_end):
            state = _close(state, index - 1, early_end, early_reason, ctx)

    if state.first is None:
        state = replace(state, first=index, start=word.start)

    end = open_cue_end(state.start, index, words, cfg)
    if index == len(words) - 1 and not _renders_apart(state.start, end):
        # Nothing follows the final cue, so it can run into the next decisecond.
        end = (decisecond(state.start) + 1) / 10.0
    state = replace(state, end=end)

    reason = close_reason(state, index, ctx)
    # A cue whose start and end render to the same decisecond stays open.
    if reason is not None and _renders_apart(state.start, state.end):
        state = _close(state, index, state.end, reason, ctx)
    return state


def _renders_apart(start: float, end: float) -> bool:
    return decisecond(end) > decisecond(start)


def apply_elastic_timing(cues: List[Cue], config: Dict) -> List[Cue]:
    """Fill small silent gaps between adjacent cues.

    A gap strictly between 0 and elastic_gap is bridged by moving the earlier
    cue's end to the next start minus elastic_buffer, capped at max_duration
    and never earlier than its current end. Larger or non-positive gaps are
    left alone.
    """
    result = list(cues)
    for i in range(len(result) - 1):
        current, following = result[i], result[i + 1]
        gap = following.start - current.end
        if 0 < gap < config["elastic_gap"]:
            target = min(
                following.start - config["elastic_buffer"],
                current.start + config["max_duration"],
            )
            new_end = max(target, current.end)
            if new_end != current.end:
                result[i] = current.with_end(new_end)
    return result


def segment_words(words: Any, transcript: str, config: Dict) -> List[Cue]:
    """Segment timestamped words into subtitle cues.

    Args:
        words: Word objects or ``{word, start, end}`` mappings, ordered by start.
        transcript: Full transcript used to recover punctuation and spacing.
        config: Working config dict from presets.resolve_config().

    Returns:
        Ordered, non-overlapping, gap-filled cues.

    Raises:
        ValidationError: If the word list is malformed.
    """
    validated = validate_words(words)
    transcript = transcript or ""

    ctx = SegmentContext(
        words=validated,
        positions=map_word_positions(validated, transcript, config),
        transcript=transcript,
        config=config,
    )

    state = SegmentState()
    for index in range(len(validated)):
        state = step(state, index, ctx)

    return apply_elastic_timing(list(state.cues), config)
