"""
Shared types and utilities for the voice-memo digest pipeline.

Contains DigestConfig, DigestData, the standard artifact filenames, and
utility functions used by digest.py, output.py, and tasks.py.
"""

import time
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

import builtins


def tprint(*args, **kwargs):
    """Print with [HH:MM:SS] timestamp prefix.

    Skips the timestamp for carriage-return progress lines (end != newline)
    so that in-place progress updates remain clean.
    """
    if kwargs.get("end", "\n") != "\n":
        builtins.print(*args, flush=True, **kwargs)
        return
    stamp = time.strftime("[%H:%M:%S]")
    builtins.print(stamp, *args, flush=True, **kwargs)


print = tprint


@dataclass
class DigestConfig:
    """Configuration for one digest run."""
    transcript_path: Path
    output_dir: Path
    captions_path: Optional[Path] = None  # SRT track; None = no chaptering/diarization
    # Chaptering
    gap_threshold: float = 7.0  # seconds of silence that may start a new chapter
    min_chapter_length: float = 30.0  # a chapter must span this long before it can close
    min_trailing_length: float = 1.0  # final chapter is dropped when shorter than this
    # Diarization-lite
    ratio_threshold: float = 1.6  # word-count ratio that signals a change of speaker
    turn_gap: float = 1.2  # seconds of silence required before a speaker change
    # Text analysis
    summary_sentences: int = 6
    highlight_sentences: int = 6
    num_keywords: int = 12
    export_tasks: bool = True  # Write tasks.csv / tasks.ics from tasks.md
    steps: Optional[list] = None  # Run only these artifact steps (None = all)
    skip_existing: bool = False  # Reuse artifacts newer than their inputs
    dry_run: bool = False  # Show what would be done without doing it
    verbose: bool = False


# Standard output filenames
SUMMARY_MD = "summary.md"
HIGHLIGHTS_MD = "highlights.md"
TASKS_MD = "tasks.md"
TAGS_TXT = "tags.txt"
CHAPTERS_MD = "chapters.md"
SPEAKERS_VTT = "speakers.vtt"
SPEAKERS_TXT = "speakers.txt"
TASKS_CSV = "tasks.csv"
TASKS_ICS = "tasks.ics"


@dataclass
class DigestData:
    """Data collected during pipeline execution."""
    text: str = ""
    segments: list = field(default_factory=list)  # CaptionSegments, empty without captions
    has_captions: bool = False
    chapters: list = field(default_factory=list)
    turns: list = field(default_factory=list)  # SpeakerTurns
    summary: list = field(default_factory=list)
    highlights: list = field(default_factory=list)
    action_items: list = field(default_factory=list)
    tags: list = field(default_factory=list)
    artifacts: dict = field(default_factory=dict)  # {filename: path} for each artifact written
    failed_artifacts: list = field(default_factory=list)  # filenames whose write failed


def is_up_to_date(output: Path, *inputs: Path) -> bool:
    """Check if output file is newer than all input files (make-style)."""
    if not output.exists():
        return False
    output_mtime = output.stat().st_mtime
    for inp in inputs:
        if inp and inp.exists() and inp.stat().st_mtime > output_mtime:
            return False
    return True


def read_text_lenient(path: Optional[Path]) -> str:
    """Read a UTF-8 text file, ignoring undecodable bytes.

    Returns "" when the path is None or the file cannot be read.
    """
    if path is None:
        return ""
    try:
        with open(path, 'r', encoding="utf-8", errors="ignore") as f:
            return f.read()
    except OSError as e:
        print(f"  Warning: Could not read {path}: {e}")
        return ""


def _print_reusing(label: str) -> None:
    """Print a 'Reusing' message for a cached artifact."""
    print(f"  Reusing: {label}")


def _dry_run_skip(config: DigestConfig, action: str, output: str) -> bool:
    """In dry-run mode, print what would happen and return True to skip execution."""
    if not config.dry_run:
        return False
    print(f"  [dry-run] Would {action} → {output}")
    return True


def _should_skip(config: DigestConfig, output: Path, action: str,
                  *inputs: Path) -> bool:
    """Check if a pipeline stage should skip: output is fresh or dry-run mode.

    Returns True if the stage should skip (and prints the reason).
    """
    if config.skip_existing and is_up_to_date(output, *inputs):
        _print_reusing(output.name)
        return True
    if _dry_run_skip(config, action, output.name):
        return True
    return False


def _collect_source_paths(config: DigestConfig) -> list:
    """Collect input file paths for artifact staleness checks."""
    paths = []
    for path in (config.transcript_path, config.captions_path):
        if path and path.exists():
            paths.append(path)
    return paths


def write_artifact(config: DigestConfig, data: DigestData, name: str,
                   content: str, action: str) -> Optional[Path]:
    """Write one artifact into the output directory.

    A write failure is reported and recorded in data.failed_artifacts
    rather than raised, so the remaining artifacts are still produced.
    Returns the written path, or None if skipped or failed.
    """
    path = config.output_dir / name
    if _should_skip(config, path, action, *_collect_source_paths(config)):
        if path.exists():
            data.artifacts[name] = path
        return None
    try:
        with open(path, 'w', encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        print(f"  Warning: Could not write {name}: {e}")
        data.failed_artifacts.append(name)
        return None
    data.artifacts[name] = path
    print(f"  Saved: {name}")
    return path
