"""Shared test fixtures and utilities."""

from memo_digest.captions import CaptionSegment


def _srt_time(seconds: float) -> str:
    millis = int(round(seconds * 1000))
    h, rest = divmod(millis, 3_600_000)
    m, rest = divmod(rest, 60_000)
    s, ms = divmod(rest, 1000)
    return f"{h:02d}:{m:02d}:{s:02d},{ms:03d}"


def make_srt(cues):
    """Build an SRT document from (start, end, text) tuples."""
    blocks = []
    for i, (start, end, text) in enumerate(cues, 1):
        blocks.append(f"{i}\n{_srt_time(start)} --> {_srt_time(end)}\n{text}\n")
    return "\n".join(blocks) + "\n"


def make_segments(cues):
    """Build CaptionSegments from (start, end, text) tuples."""
    return [CaptionSegment(float(start), float(end), text) for start, end, text in cues]
