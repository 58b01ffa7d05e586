"""Canonical subtitle text block: rendering and parsing.

WHY: Generated cues are stored, shown to a reviewer who may hand-edit them,
and re-parsed before the final render. The interchange format is a plain
text block, so the renderer and the parser must stay in lock-step.

HOW: Each cue is two lines, ``M:SS.d - M:SS.d`` followed by the text, and
cues are separated by a blank line. parse_subtitle_text() splits on blank
lines, matches the time line (optionally followed by a bracketed tag such as
``[HIGHLIGHT]``), joins the remaining lines as text, and sorts by start.

RULES:
- Times are truncated to deciseconds, never rounded up into the next second.
- The parser never raises on malformed content. Bad blocks are skipped and
  logged at debug level; an input with no valid block yields [].
- parse_subtitle_text(format_cues(cues)) reproduces every cue, times to
  within 0.1s and the text exactly.
"""

import logging
import math
import re
from typing import Iterable, List, Optional, Tuple

from .models import Cue, ParsedCue

logger = logging.getLogger(__name__)

TIME_LINE_RE = re.compile(
    r"^(\d+):(\d{2})\.(\d)\s*-\s*(\d+):(\d{2})\.(\d)(?:\s*\[([A-Za-z_]+)\])?$"
)
BLOCK_SEPARATOR_RE = re.compile(r"\n[ \t]*\n")

# Values this close below a decisecond boundary count as on it (2.3 is
# stored as 2.2999...).
BOUNDARY_TOLERANCE = 1e-6


def decisecond(seconds: float) -> int:
    """Whole deciseconds in ``seconds``, truncated."""
    return int(math.floor((seconds + BOUNDARY_TOLERANCE) * 10))


def format_time(seconds: float) -> str:
    """Convert seconds to ``M:SS.d``.

    Minutes are not zero-padded or capped, seconds are two digits, and the
    decisecond is truncated, so 59.9996 stays ``0:59.9``.
    """
    tenths_total = decisecond(seconds)
    minutes = tenths_total // 600
    secs = (tenths_total // 10) % 60
    return "{}:{:02d}.{}".format(minutes, secs, tenths_total % 10)


def format_cues(cues: Iterable[Cue]) -> str:
    """Render cues to the canonical text block."""
    return "\n\n".join(
        "{} - {}\n{}".format(format_time(cue.start), format_time(cue.end), cue.text)
        for cue in cues
    )


def _to_seconds(minutes: str, secs: str, tenths: str) -> float:
    m, s = int(minutes), int(secs)
    if s >= 60:
        m += s // 60
        s = s % 60
    return m * 60 + s + int(tenths) / 10.0


def parse_time_line(line: str) -> Optional[Tuple[float, float, Optional[str]]]:
    """Parse a ``M:SS.d - M:SS.d [TAG]`` line.

    Returns:
        (start, end, tag) or None if the line does not match. The tag is
        upper-cased, None when absent.
    """
    match = TIME_LINE_RE.match(line.strip())
    if not match:
        return None
    start = _to_seconds(*match.group(1, 2, 3))
    end = _to_seconds(*match.group(4, 5, 6))
    tag = match.group(7).upper() if match.group(7) else None
    return start, end, tag


def parse_subtitle_text(text: str) -> List[ParsedCue]:
    """Parse a (possibly hand-edited) text block back into cues.

    Blocks are dropped when the time line does not match, when start is not
    before end, or when no text follows. Surviving cues are sorted by start.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    cues = []  # type: List[ParsedCue]

    for number, block in enumerate(BLOCK_SEPARATOR_RE.split(normalized), 1):
        lines = [line.strip() for line in block.strip().split("\n")]
        if not lines or not lines[0]:
            continue

        parsed = parse_time_line(lines[0])
        if parsed is None:
            logger.debug("Skipping block %d: no time line in %r", number, lines[0])
            continue
        start, end, tag = parsed
        if start >= end:
            logger.debug("Skipping block %d: start %.1f is not before end %.1f", number, start, end)
            continue

        body = " ".join(line for line in lines[1:] if line)
        if not body:
            logger.debug("Skipping block %d: empty text", number)
            continue

        cues.append(ParsedCue(start=start, end=end, text=body, tag=tag))

    cues.sort(key=lambda c: c.start)
    return cues
