"""
Silence-gap chaptering of caption segments.

A chapter closes when a pause longer than the gap threshold follows a
chapter that already spans at least the minimum chapter length. Shorter
pauses, and pauses inside a young chapter, are folded into it.
"""

from functools import reduce
from typing import NamedTuple

from memo_digest.captions import CaptionSegment


class Chapter(NamedTuple):
    start: float
    end: float
    text: str


class _PendingChapter(NamedTuple):
    """Fold accumulator: the open chapter plus the chapters already closed."""
    start: float
    end: float
    texts: tuple
    closed: tuple

    def to_chapter(self) -> Chapter:
        return Chapter(self.start, self.end, " ".join(self.texts))


def build_chapters(segments: list[CaptionSegment], gap_threshold: float = 7.0,
                   min_chapter_length: float = 30.0,
                   min_trailing_length: float = 1.0) -> list[Chapter]:
    """Group time-ordered segments into chapters.

    The final open chapter is kept only if it spans at least
    min_trailing_length seconds.
    """
    if gap_threshold < 0 or min_chapter_length < 0 or min_trailing_length < 0:
        raise ValueError("Chapter thresholds must be non-negative")
    if not segments:
        return []

    def step(pending: _PendingChapter, segment: CaptionSegment) -> _PendingChapter:
        silence = segment.start - pending.end
        span = pending.end - pending.start
        if silence > gap_threshold and span >= min_chapter_length:
            return _PendingChapter(segment.start, segment.end, (segment.text,),
                                   pending.closed + (pending.to_chapter(),))
        return pending._replace(end=segment.end, texts=pending.texts + (segment.text,))

    first = segments[0]
    initial = _PendingChapter(first.start, first.end, (first.text,), ())
    final = reduce(step, segments[1:], initial)

    chapters = list(final.closed)
    if final.end - final.start >= min_trailing_length:
        chapters.append(final.to_chapter())
    return chapters
