"""Command-line wrapper for the subtitle segmenter.

WHY: Reviewers and pipeline scripts need to turn a saved transcription result
into the subtitle text block without writing Python, and to check whether a
hand-edited block still parses before it goes to the renderer.

HOW: argparse reads a provider JSON payload (file or stdin), tolerating a
truncated file via load_transcription_json(). The payload goes through the
transcription adapter and the segmenter; the result is written as the
canonical text block or, with --json, as a JSON array of cue objects.
--check parses an existing text block and reports how many cues survived.

RULES:
- Usage:
    python -m subtitle_cues transcription.json subtitles.txt
    python -m subtitle_cues transcription.json --preset english --json
    cat transcription.json | python -m subtitle_cues - subtitles.txt
    python -m subtitle_cues --check subtitles.txt
- Exit codes: 0 = success, 1 = error.
- Status messages and logs go to stderr; output goes to stdout when no
  output file is given.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from subtitle_cues import config as env_config
from subtitle_cues import segment
from subtitle_cues.adapters.transcription import load_transcription_json, words_from_transcription
from subtitle_cues.exceptions import ValidationError
from subtitle_cues.presets import PRESETS
from subtitle_cues.text_format import format_cues, parse_subtitle_text


def _status(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _write(path: Optional[str], content: str) -> None:
    if path:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    else:
        print(content)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subtitle_cues",
        description="Segment word timestamps into subtitle cues.",
    )
    parser.add_argument("input", nargs="?", default="-",
                        help="Transcription JSON file ('-' for stdin).")
    parser.add_argument("output", nargs="?", default=None,
                        help="Output file (default: stdout).")
    parser.add_argument("--preset", choices=sorted(PRESETS), default=None,
                        help="Segmentation preset (default: SUBTITLE_PRESET or german).")
    parser.add_argument("--ms", action="store_true",
                        help="Word timestamps are in milliseconds (AssemblyAI).")
    parser.add_argument("--json", action="store_true", dest="as_json",
                        help="Write cues as a JSON array instead of the text block.")
    parser.add_argument("--check", metavar="TEXT_FILE", default=None,
                        help="Parse an existing subtitle text block and report valid cues.")
    parser.add_argument("--log-level", default=env_config.LOG_LEVEL,
                        help="Logging level (default: SUBTITLE_LOG_LEVEL or WARNING).")
    return parser


def _fail(error: Exception) -> None:
    _status("Error: {}".format(error))
    sys.exit(1)


def _check(path: str) -> None:
    try:
        text = _read(path)
    except OSError as e:
        _fail(e)
    cues = parse_subtitle_text(text)
    if not cues:
        _status("Error: No valid subtitle blocks found in {}".format(path))
        sys.exit(1)
    _status("{} valid cues in {}".format(len(cues), path))


def main(argv: Optional[List[str]] = None) -> None:
    """Run the subtitle segmenter CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )

    if args.check:
        _check(args.check)
        return

    # ValidationError is a ValueError; an unknown SUBTITLE_PRESET also
    # surfaces as ValueError from resolve_config().
    try:
        payload = load_transcription_json(_read(args.input))
        text, words = words_from_transcription(payload, time_unit="ms" if args.ms else "s")
        if not words:
            raise ValidationError("No word timestamps found in input")
        cues = segment(words, text, preset=args.preset)
    except (ValueError, OSError) as e:
        _fail(e)

    if args.as_json:
        content = json.dumps([c.to_dict() for c in cues], ensure_ascii=False, indent=2)
    else:
        content = format_cues(cues)

    try:
        _write(args.output, content)
    except OSError as e:
        _fail(e)

    if args.output:
        _status("Wrote {} cues to {}".format(len(cues), args.output))


if __name__ == "__main__":
    main()
