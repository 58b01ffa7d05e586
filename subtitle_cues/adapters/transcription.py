"""Adapter: transcription provider payload to segmenter Words.

WHY: The segmenter takes a transcript string and a list of Word objects, but
transcription providers return JSON with their own field names and time
units. OpenAI-style results carry ``{word, start, end}`` in seconds;
AssemblyAI carries ``{text, start, end, confidence}`` in milliseconds. This
adapter bridges both into one shape and rejects malformed payloads early.

HOW: Pydantic models validate the payload (field types, required keys) and
accept either ``word`` or ``text`` for the token. Millisecond timestamps are
divided by 1000 when ``time_unit="ms"``. Tokens are trimmed.

RULES:
- Any payload shape error surfaces as ValidationError, never as a pydantic
  exception.
- A payload without words is not an error here; words_from_transcription()
  returns an empty list and subtitles_from_transcription() refuses it.
- Timing rules (start < end, ordering) are checked by the segmenter, not here.
- A payload file cut off mid-write is recovered by load_transcription_json()
  up to its last complete word object.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from subtitle_cues import generate_subtitles
from subtitle_cues.exceptions import ValidationError
from subtitle_cues.models import Word

logger = logging.getLogger(__name__)

TIME_UNITS = {"s": 1.0, "ms": 1000.0}
TRAILING_COMMA_RE = re.compile(r",\s*$")


class ProviderWord(BaseModel):
    """One word as delivered by a transcription provider."""

    word: str = Field(
        validation_alias=AliasChoices("word", "text"),
        description="Word token; providers use either 'word' or 'text'.",
    )
    start: float = Field(description="Start time in the provider's time unit.")
    end: float = Field(description="End time in the provider's time unit.")
    confidence: Optional[float] = Field(
        default=None,
        description="Recognition confidence, if the provider reports one.",
    )


class TranscriptionResult(BaseModel):
    """Transcription provider result: full text plus optional word timestamps."""

    text: str = Field(default="", description="Full transcript text.")
    words: Optional[List[ProviderWord]] = Field(
        default=None,
        description="Word timestamps; absent when the provider was not asked for them.",
    )


def _open_brackets(raw: str) -> Tuple[str, bool]:
    """Closers for the brackets still open at the end of ``raw``.

    Also reports whether ``raw`` ends inside a string literal.
    """
    stack = []  # type: List[str]
    in_string = escaped = False
    for ch in raw:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            stack.append("}")
        elif ch == "[":
            stack.append("]")
        elif ch in "}]" and stack:
            stack.pop()
    return "".join(reversed(stack)), in_string


def load_transcription_json(raw: str) -> Any:
    """Decode a provider JSON file, recovering one that was cut off mid-write.

    Saved results are usually truncated inside the ``words`` array. The text
    is cut back to its last complete word object (falling back to the text
    as-is), a trailing comma is dropped and the brackets still open are
    closed. A half-written word is discarded rather than closed as ``{}``.

    Raises:
        ValidationError: If no attempt yields valid JSON.
    """
    raw = raw.replace("\r\n", "\n").replace("\r", "\n").strip()
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass

    candidates = []
    last_object = raw.rfind("}")
    if last_object != -1:
        candidates.append(raw[:last_object + 1])
    candidates.append(raw)

    for candidate in candidates:
        candidate = TRAILING_COMMA_RE.sub("", candidate)
        closers, in_string = _open_brackets(candidate)
        if in_string:
            continue
        try:
            payload = json.loads(candidate + closers)
        except json.JSONDecodeError:
            continue
        logger.warning("Recovered truncated transcription JSON by appending %r", closers)
        return payload

    raise ValidationError("Could not parse transcription JSON (even after closing open brackets)")


def words_from_transcription(
    payload: Dict[str, Any],
    time_unit: str = "s",
) -> Tuple[str, List[Word]]:
    """Convert a provider payload into (transcript, words).

    Args:
        payload: Decoded provider JSON.
        time_unit: "s" for seconds (OpenAI) or "ms" for milliseconds (AssemblyAI).

    Returns:
        The transcript text and the words converted to seconds.

    Raises:
        ValidationError: If the payload does not match the expected shape.
        ValueError: If time_unit is unknown.
    """
    if time_unit not in TIME_UNITS:
        raise ValueError(
            "Unknown time unit '{}'. Available: {}".format(time_unit, ", ".join(TIME_UNITS))
        )
    scale = TIME_UNITS[time_unit]

    try:
        result = TranscriptionResult.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError("Invalid transcription payload: {}".format(e)) from e

    words = [
        Word(text=w.word.strip(), start=w.start / scale, end=w.end / scale)
        for w in result.words or []
    ]
    return result.text, words


def subtitles_from_transcription(
    payload: Dict[str, Any],
    preset: Optional[str] = None,
    config: Optional[Dict] = None,
    time_unit: str = "s",
) -> str:
    """Run the full pipeline on a provider payload.

    Raises:
        ValidationError: If the payload is malformed or has no word timestamps.
    """
    text, words = words_from_transcription(payload, time_unit=time_unit)
    if not words:
        raise ValidationError(
            "Transcription contains no word timestamps; request word-level timestamps from the provider"
        )
    return generate_subtitles(text, words, preset=preset, config=config)
