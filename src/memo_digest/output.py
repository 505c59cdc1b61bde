"""
Artifact rendering and writing for the digest pipeline.

The render_* functions are pure and return the exact text of each
artifact; write_artifacts() writes the ones selected for this run.
"""

from memo_digest.shared import (
    tprint as print,
    DigestConfig, DigestData,
    SUMMARY_MD, HIGHLIGHTS_MD, TASKS_MD, TAGS_TXT,
    CHAPTERS_MD, SPEAKERS_VTT, SPEAKERS_TXT,
    write_artifact,
)
from memo_digest.captions import format_timestamp, format_vtt_timestamp
from memo_digest.chapters import Chapter
from memo_digest.diarization import SpeakerTurn, format_diarized_transcript
from memo_digest.tokenizer import sentences

NO_TASKS_LINE = "_No explicit tasks detected._"
NO_CAPTIONS_LINE = "_Add an SRT to enable chaptering._"
CHECKBOX = "- [ ]"
EXCERPT_SENTENCES = 2


def _bulleted(title: str, items: list[str]) -> str:
    lines = [f"# {title}", ""]
    lines.extend(f"- {item}" for item in items)
    return "\n".join(lines) + "\n"


def render_summary(summary: list[str]) -> str:
    return _bulleted("Summary", summary)


def render_highlights(highlights: list[str]) -> str:
    return _bulleted("Highlights", highlights)


def render_tasks(action_items: list) -> str:
    """Render action items as an unchecked markdown checklist."""
    lines = ["# Action Items", ""]
    if not action_items:
        lines.append(NO_TASKS_LINE)
    for item in action_items:
        lines.append(f"{CHECKBOX} {item.description.strip()}")
    return "\n".join(lines) + "\n"


def render_tags(tags: list[str]) -> str:
    return ", ".join(tags)


def render_chapters(chapters: list[Chapter], has_captions: bool = True) -> str:
    """Render the chapter outline: one heading per chapter with a short excerpt.

    Without a caption track the outline only says chaptering needs one.
    """
    if not has_captions:
        return f"# Chapters\n\n{NO_CAPTIONS_LINE}\n"
    parts = ["# Chapters\n\n"]
    for chapter in chapters:
        excerpt = " ".join(sentences(chapter.text)[:EXCERPT_SENTENCES])
        parts.append(f"## {format_timestamp(chapter.start)}–{format_timestamp(chapter.end)}\n\n"
                     f"{excerpt}\n\n")
    return "".join(parts)


def render_speakers_vtt(turns: list[SpeakerTurn]) -> str:
    """Render speaker turns as WebVTT cues whose payload is the label."""
    parts = ["WEBVTT\n\n"]
    for turn in turns:
        parts.append(f"{format_vtt_timestamp(turn.start)} --> "
                     f"{format_vtt_timestamp(turn.end)}\n{turn.label}\n\n")
    return "".join(parts)


def write_artifacts(config: DigestConfig, data: DigestData) -> None:
    """Write every artifact selected by config.steps.

    Each artifact is written independently; one failing write does not
    stop the others.
    """
    print()
    print("[output] Writing artifacts...")

    def wanted(step: str) -> bool:
        return config.steps is None or step in config.steps

    if wanted("summary"):
        write_artifact(config, data, SUMMARY_MD, render_summary(data.summary),
                       "write summary")
    if wanted("tasks"):
        write_artifact(config, data, TASKS_MD, render_tasks(data.action_items),
                       "write checklist")
    if wanted("highlights"):
        write_artifact(config, data, HIGHLIGHTS_MD, render_highlights(data.highlights),
                       "write highlights")
    if wanted("tags"):
        write_artifact(config, data, TAGS_TXT, render_tags(data.tags),
                       "write tags")
    if wanted("chapters"):
        write_artifact(config, data, CHAPTERS_MD,
                       render_chapters(data.chapters, data.has_captions),
                       "write chapter outline")
    if wanted("speakers"):
        if not data.has_captions:
            if config.verbose:
                print("  Skipping speaker track (no captions)")
            return
        write_artifact(config, data, SPEAKERS_VTT, render_speakers_vtt(data.turns),
                       "write speaker track")
        write_artifact(config, data, SPEAKERS_TXT,
                       format_diarized_transcript(data.segments, data.turns),
                       "write speaker transcript")
