"""
Diarization-lite for the digest pipeline.

Infers speaker turns from caption timing alone: a pause followed by an
abrupt change in words per caption is taken as a change of speaker, and
the label flips between two symbolic speakers. This is a best-effort
rhythm heuristic, not voice identification. It produces false positives
and misses, and with more than two real speakers its labels mean nothing.
"""

from functools import reduce
from typing import NamedTuple

import numpy as np

from memo_digest.captions import CaptionSegment, split_timestamp

SPEAKER_LABELS = ("Speaker A", "Speaker B")


class SpeakerTurn(NamedTuple):
    start: float
    end: float
    label: str


class _OpenTurn(NamedTuple):
    """Fold accumulator: the current turn plus the turns already closed."""
    label: str
    start: float
    prev_end: float
    closed: tuple


def _word_counts(segments: list[CaptionSegment]) -> np.ndarray:
    """Words per segment, floored at 1 so ratios stay finite."""
    counts = np.array([len(seg.text.split()) for seg in segments], dtype=float)
    return np.maximum(counts, 1.0)


def speaker_changes(segments: list[CaptionSegment], ratio_threshold: float = 1.6,
                    turn_gap: float = 1.2) -> np.ndarray:
    """Flag, for each segment after the first, whether it starts a new turn.

    A change needs a pause longer than turn_gap after the previous segment
    and a word-count ratio to it above ratio_threshold or below its inverse.
    """
    if len(segments) < 2:
        return np.zeros(0, dtype=bool)
    starts = np.array([seg.start for seg in segments])
    ends = np.array([seg.end for seg in segments])
    counts = _word_counts(segments)

    gaps = starts[1:] - ends[:-1]
    ratios = counts[1:] / counts[:-1]
    rate_jump = (ratios > ratio_threshold) | (ratios < 1.0 / ratio_threshold)
    return (gaps > turn_gap) & rate_jump


def _flip(label: str) -> str:
    return SPEAKER_LABELS[1] if label == SPEAKER_LABELS[0] else SPEAKER_LABELS[0]


def diarize_lite(segments: list[CaptionSegment], ratio_threshold: float = 1.6,
                 turn_gap: float = 1.2) -> list[SpeakerTurn]:
    """Split the caption timeline into alternating speaker turns.

    Turns start with SPEAKER_LABELS[0]. Each turn ends at the end of its
    last segment, so consecutive turns are separated only by the pause
    that triggered the change.
    """
    if ratio_threshold <= 1.0:
        raise ValueError(f"ratio_threshold must be greater than 1, got {ratio_threshold}")
    if not segments:
        return []

    changes = speaker_changes(segments, ratio_threshold, turn_gap)

    def step(turn: _OpenTurn, item) -> _OpenTurn:
        segment, changed = item
        if changed:
            closed = turn.closed + (SpeakerTurn(turn.start, turn.prev_end, turn.label),)
            return _OpenTurn(_flip(turn.label), segment.start, segment.end, closed)
        return turn._replace(prev_end=segment.end)

    first = segments[0]
    initial = _OpenTurn(SPEAKER_LABELS[0], first.start, first.end, ())
    final = reduce(step, zip(segments[1:], changes.tolist()), initial)
    return list(final.closed) + [SpeakerTurn(final.start, final.prev_end, final.label)]


def _find_speaker_at_time(time_point: float, turns: list[SpeakerTurn]) -> str:
    """Find which speaker is active at a given time point."""
    for turn in turns:
        if turn.start <= time_point <= turn.end:
            return turn.label
    # If no exact match, find nearest turn
    if turns:
        nearest = min(turns,
                      key=lambda t: min(abs(t.start - time_point),
                                        abs(t.end - time_point)))
        return nearest.label
    return "UNKNOWN"


def _format_timestamp(seconds: float) -> str:
    """Format seconds as H:MM:SS."""
    h, m, s, _ = split_timestamp(seconds)
    return f"{h}:{m:02d}:{s:02d}"


def format_diarized_transcript(segments: list[CaptionSegment],
                               turns: list[SpeakerTurn]) -> str:
    """Format caption text grouped by speaker turn.

    Output: [H:MM:SS] Speaker A: text
    Each segment is attributed by its midpoint.
    """
    lines = []
    current_speaker = None
    current_text = []
    current_start = 0

    for seg in segments:
        text = seg.text.strip()
        if not text:
            continue
        speaker = _find_speaker_at_time((seg.start + seg.end) / 2, turns)

        if speaker != current_speaker:
            # Flush previous speaker's text
            if current_speaker is not None and current_text:
                timestamp = _format_timestamp(current_start)
                lines.append(f"[{timestamp}] {current_speaker}: {' '.join(current_text)}")
            current_speaker = speaker
            current_text = [text]
            current_start = seg.start
        else:
            current_text.append(text)

    # Flush last speaker
    if current_speaker is not None and current_text:
        timestamp = _format_timestamp(current_start)
        lines.append(f"[{timestamp}] {current_speaker}: {' '.join(current_text)}")

    return "\n\n".join(lines)
