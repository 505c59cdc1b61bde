#!/usr/bin/env python3
"""
Memo Digest
===========
Post-processes a voice-memo transcript into a set of small artifacts.

Pipeline:
1. Read the plain transcript and, if given, its SRT caption track
2. Chapter the caption track by silence gaps
3. Infer speaker turns from caption timing (diarization-lite)
4. Summarize, pick highlights, tag keywords, and extract action items
5. Write summary.md, highlights.md, tasks.md, tags.txt, chapters.md,
   speakers.vtt and speakers.txt
6. Export tasks.md to tasks.csv and tasks.ics

Usage:
    memo-digest --txt <transcript.txt> --outdir <dir> [options]

Examples:
    # Text-only digest (no chapters or speaker track)
    memo-digest --txt memo.wav.txt --outdir out/

    # Full digest with chapters from the caption track
    memo-digest --txt memo.wav.txt --srt memo.wav.srt --outdir out/

    # Re-export a hand-annotated checklist only
    memo-digest --txt memo.wav.txt --outdir out/ --steps export
"""

import argparse
import sys
from pathlib import Path

from memo_digest import __version__
from memo_digest.shared import (
    tprint as print,
    DigestConfig, DigestData,
    read_text_lenient,
)
from memo_digest.analysis import extract_action_items, highlights, keyword_tags, summarize
from memo_digest.captions import parse_srt
from memo_digest.chapters import build_chapters
from memo_digest.diarization import diarize_lite
from memo_digest.output import write_artifacts
from memo_digest.tasks import export_tasks

SECTION_SEPARATOR = "=" * 50

# Valid pipeline step names
VALID_STEPS = {"summary", "highlights", "tasks", "tags", "chapters", "speakers", "export"}


def _should_run_step(step_name: str, config: DigestConfig) -> bool:
    """Check if a pipeline step should run based on --steps filter."""
    if config.steps is None:
        return True
    return step_name in config.steps


def load_inputs(config: DigestConfig, data: DigestData) -> None:
    """Read the transcript and caption track once, up front."""
    print()
    print("[input] Reading inputs...")

    if config.transcript_path.exists():
        data.text = read_text_lenient(config.transcript_path)
    else:
        print(f"  Warning: Transcript not found: {config.transcript_path}")
    if not data.text.strip():
        print("  Warning: Transcript is empty; summary, tags and tasks will be empty")
    else:
        print(f"  Transcript: {len(data.text.split()):,} words")

    if config.captions_path is None:
        print("  No caption track; chaptering and diarization skipped")
        return
    if not config.captions_path.exists():
        print(f"  Warning: Caption track not found: {config.captions_path}")
        print("  Chaptering and diarization skipped")
        return

    data.segments = parse_srt(read_text_lenient(config.captions_path), config.verbose)
    if not data.segments:
        print("  Warning: Caption track has no usable blocks; chaptering and diarization skipped")
        return
    data.has_captions = True
    print(f"  Captions: {len(data.segments)} segments")


def analyze_captions(config: DigestConfig, data: DigestData) -> None:
    """Build chapters and speaker turns from the parsed caption segments."""
    if not data.has_captions:
        return
    print()
    print("[chapters] Building chapters and speaker turns...")

    data.chapters = build_chapters(
        data.segments,
        gap_threshold=config.gap_threshold,
        min_chapter_length=config.min_chapter_length,
        min_trailing_length=config.min_trailing_length,
    )
    print(f"  Chapters: {len(data.chapters)} "
          f"(gap > {config.gap_threshold:g}s, min length {config.min_chapter_length:g}s)")

    data.turns = diarize_lite(
        data.segments,
        ratio_threshold=config.ratio_threshold,
        turn_gap=config.turn_gap,
    )
    print(f"  Speaker turns: {len(data.turns)} (best-effort, timing heuristic)")


def analyze_text(config: DigestConfig, data: DigestData) -> None:
    """Derive summary, highlights, tags and action items from the transcript."""
    print()
    print("[text] Analyzing transcript text...")

    data.summary = summarize(data.text, config.summary_sentences)
    data.highlights = highlights(data.text, config.highlight_sentences)
    data.tags = keyword_tags(data.text, config.num_keywords)
    data.action_items = extract_action_items(data.text)
    print(f"  Summary: {len(data.summary)} sentences, "
          f"tags: {len(data.tags)}, action items: {len(data.action_items)}")


def run_digest(config: DigestConfig, data: DigestData) -> None:
    """Run every selected stage of the pipeline."""
    load_inputs(config, data)
    analyze_captions(config, data)
    analyze_text(config, data)
    write_artifacts(config, data)
    if config.export_tasks and _should_run_step("export", config):
        export_tasks(config, data)


def _positive_int(value: str) -> int:
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return n


def _non_negative_float(value: str) -> float:
    x = float(value)
    if x < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {value}")
    return x


def main():
    parser = argparse.ArgumentParser(
        prog="memo-digest",
        description="Turn a voice-memo transcript into summary, tasks, tags and chapters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --txt memo.wav.txt --outdir out/
  %(prog)s --txt memo.wav.txt --srt memo.wav.srt --outdir out/
  %(prog)s --txt memo.wav.txt --srt memo.wav.srt --outdir out/ --gap 5 --minlen 60
  %(prog)s --txt memo.wav.txt --outdir out/ --steps export
        """
    )
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")

    # Input
    input_group = parser.add_argument_group("input")
    input_group.add_argument("--txt", required=True,
                        help="Plain-text transcript (UTF-8)")
    input_group.add_argument("--srt", default=None,
                        help="SRT caption track; enables chapters and the speaker track")

    # Output
    output_group = parser.add_argument_group("output")
    output_group.add_argument("--outdir", required=True,
                        help="Directory for the generated artifacts (created if missing)")

    # Chapters
    chapter_group = parser.add_argument_group("chapters")
    chapter_group.add_argument("--gap", type=_non_negative_float, default=7.0,
                        help="Silence in seconds that may start a new chapter (default: 7)")
    chapter_group.add_argument("--minlen", type=_non_negative_float, default=30.0,
                        help="Minimum chapter length in seconds before it can close (default: 30)")
    chapter_group.add_argument("--min-trailing", type=_non_negative_float, default=1.0,
                        help="Drop a final chapter shorter than this many seconds (default: 1)")

    # Diarization-lite
    diarize_group = parser.add_argument_group("diarization-lite")
    diarize_group.add_argument("--ratio-threshold", type=float, default=1.6,
                        help="Word-count ratio between captions that signals a new speaker (default: 1.6)")
    diarize_group.add_argument("--turn-gap", type=_non_negative_float, default=1.2,
                        help="Pause in seconds required before a speaker change (default: 1.2)")

    # Text analysis
    text_group = parser.add_argument_group("text analysis")
    text_group.add_argument("--summary-sentences", type=_positive_int, default=6,
                        help="Sentences in summary.md (default: 6)")
    text_group.add_argument("--highlight-sentences", type=_positive_int, default=6,
                        help="Sentences in highlights.md (default: 6)")
    text_group.add_argument("--keywords", type=_positive_int, default=12,
                        help="Number of keyword tags (default: 12)")

    # Pipeline control
    pipeline_group = parser.add_argument_group("pipeline")
    pipeline_group.add_argument("--steps",
                        help="Run only these steps (comma-separated). "
                             "Steps: summary, highlights, tasks, tags, chapters, speakers, export")
    pipeline_group.add_argument("--no-export", action="store_true",
                        help="Do not write tasks.csv / tasks.ics")
    pipeline_group.add_argument("--skip-existing", action="store_true",
                        help="Reuse artifacts that are newer than their inputs")
    pipeline_group.add_argument("--dry-run", action="store_true",
                        help="Show what would be done without actually doing it")
    pipeline_group.add_argument("-v", "--verbose", action="store_true",
                        help="Show detailed output")

    args = parser.parse_args()

    if args.ratio_threshold <= 1.0:
        print(f"Error: --ratio-threshold must be greater than 1, got {args.ratio_threshold}")
        sys.exit(1)

    # Parse --steps
    steps = None
    if args.steps:
        steps = [s.strip() for s in args.steps.split(",")]
        invalid = set(steps) - VALID_STEPS
        if invalid:
            print(f"Invalid step(s): {', '.join(sorted(invalid))}")
            print(f"Valid steps: {', '.join(sorted(VALID_STEPS))}")
            sys.exit(1)

    output_dir = Path(args.outdir)
    if not args.dry_run:
        output_dir.mkdir(parents=True, exist_ok=True)

    config = DigestConfig(
        transcript_path=Path(args.txt),
        output_dir=output_dir,
        captions_path=Path(args.srt) if args.srt else None,
        gap_threshold=args.gap,
        min_chapter_length=args.minlen,
        min_trailing_length=args.min_trailing,
        ratio_threshold=args.ratio_threshold,
        turn_gap=args.turn_gap,
        summary_sentences=args.summary_sentences,
        highlight_sentences=args.highlight_sentences,
        num_keywords=args.keywords,
        export_tasks=not args.no_export,
        steps=steps,
        skip_existing=args.skip_existing,
        dry_run=args.dry_run,
        verbose=args.verbose,
    )
    data = DigestData()

    print(f"Processing: {config.transcript_path}")
    print(f"Output directory: {output_dir}")

    if config.dry_run:
        print()
        print(SECTION_SEPARATOR)
        print("DRY RUN - No files will be written")
        print(SECTION_SEPARATOR)

    try:
        run_digest(config, data)
    except Exception as e:
        print()
        print(f"Error: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    print()
    print(SECTION_SEPARATOR)
    print("COMPLETE!" if not data.failed_artifacts else "COMPLETE (with errors)")
    print(SECTION_SEPARATOR)
    print()
    print(f"Output directory: {config.output_dir}")
    if data.artifacts:
        print("Generated files:")
        for name in data.artifacts:
            print(f"  - {name}")
    if data.failed_artifacts:
        print(f"Failed to write: {', '.join(data.failed_artifacts)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
