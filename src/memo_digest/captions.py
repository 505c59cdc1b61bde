"""
Caption-track parsing for the digest pipeline.

Reads SRT documents (index line, timing line, text lines, blank line) as
produced by whisper.cpp's -osrt output, and formats timestamps for the
outline and WebVTT artifacts.
"""

import re
from typing import NamedTuple, Optional

from memo_digest.shared import tprint as print

TIMING_PATTERN = re.compile(
    r'(\d{2}):(\d{2}):(\d{2}),(\d{3})\s*-->\s*(\d{2}):(\d{2}):(\d{2}),(\d{3})'
)


class CaptionSegment(NamedTuple):
    """One caption block: start and end in seconds, text on a single line."""
    start: float
    end: float
    text: str


def _to_seconds(hours: str, minutes: str, seconds: str, millis: str) -> float:
    return int(hours) * 3600 + int(minutes) * 60 + int(seconds) + int(millis) / 1000.0


def match_timing(line: str) -> Optional[re.Match]:
    """Match an SRT timing line; None when the line is not one."""
    return TIMING_PATTERN.search(line)


def _parse_block(lines: list[str]) -> Optional[CaptionSegment]:
    """Turn one block's non-blank lines into a segment.

    Returns None for blocks without an index and timing line, whose
    timing line does not parse, or whose cue has no duration.
    """
    if len(lines) < 2:
        return None
    m = match_timing(lines[1])
    if not m:
        return None
    start = _to_seconds(*m.group(1, 2, 3, 4))
    end = _to_seconds(*m.group(5, 6, 7, 8))
    if end <= start:
        return None
    text = " ".join(lines[2:]).strip()
    return CaptionSegment(start, end, text)


def parse_srt(document: str, verbose: bool = False) -> list[CaptionSegment]:
    """Parse an SRT document into segments in document order.

    Malformed blocks are skipped; parsing continues with the next block.
    A final block without a trailing blank line is still parsed.
    """
    segments = []
    block = []
    skipped = 0

    def _flush():
        nonlocal skipped
        if not block:
            return
        segment = _parse_block(block)
        if segment is None:
            skipped += 1
        else:
            segments.append(segment)

    for line in document.splitlines():
        line = line.strip()
        if not line:
            _flush()
            block = []
            continue
        block.append(line)
    _flush()

    if skipped and verbose:
        print(f"  Skipped {skipped} malformed caption block(s)")
    return segments


def split_timestamp(seconds: float) -> tuple[int, int, int, int]:
    """Split seconds into (hours, minutes, seconds, milliseconds).

    Rounds to the nearest millisecond first, so a time parsed from
    "00:00:05,300" splits back into exactly 5 s and 300 ms.
    """
    total_s, ms = divmod(int(round(seconds * 1000)), 1000)
    total_m, s = divmod(total_s, 60)
    h, m = divmod(total_m, 60)
    return h, m, s, ms


def format_timestamp(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    h, m, s, _ = split_timestamp(seconds)
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_vtt_timestamp(seconds: float) -> str:
    """Format seconds as HH:MM:SS.mmm for WebVTT cues."""
    h, m, s, ms = split_timestamp(seconds)
    return f"{h:02d}:{m:02d}:{s:02d}.{ms:03d}"
