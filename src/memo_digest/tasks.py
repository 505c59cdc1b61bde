"""
Checklist export: turns tasks.md into tasks.csv and tasks.ics.

Reads the unchecked items of the checklist, including any (due: ...) and
(owner: ...) annotations added by hand, and writes them as a CSV table
and as iCalendar VTODO entries.
"""

import csv
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from memo_digest.analysis import ActionItem
from memo_digest.shared import (
    tprint as print,
    DigestConfig, DigestData,
    TASKS_MD, TASKS_CSV, TASKS_ICS,
    _should_skip,
)

CHECKBOX = "- [ ]"
PARENTHETICAL = re.compile(r"\s*\(.*?\)\s*")
DUE_PATTERN = re.compile(r"\(due:\s*([^)]+)\)", re.IGNORECASE)
OWNER_PATTERN = re.compile(r"\(owner:\s*([^)]+)\)", re.IGNORECASE)
CSV_FIELDS = ["description", "due", "owner"]


def _annotation(pattern: re.Pattern, line: str):
    m = pattern.search(line)
    return m.group(1).strip() if m else None


def parse_checklist_line(line: str):
    """Parse one checklist line; None if it is not an unchecked item."""
    line = line.strip()
    if not line.startswith(CHECKBOX):
        return None
    description = PARENTHETICAL.sub(" ", line[len(CHECKBOX):]).strip()
    return ActionItem(
        description=description,
        due=_annotation(DUE_PATTERN, line),
        owner=_annotation(OWNER_PATTERN, line),
    )


def parse_checklist(path: Path) -> list[ActionItem]:
    """Read the unchecked items of a checklist file. A missing file has none."""
    if not path.exists():
        return []
    items = []
    with open(path, 'r', encoding="utf-8") as f:
        for line in f:
            item = parse_checklist_line(line)
            if item is not None:
                items.append(item)
    return items


def write_tasks_csv(items: list[ActionItem], path: Path) -> None:
    with open(path, 'w', newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for item in items:
            writer.writerow({
                "description": item.description,
                "due": item.due or "",
                "owner": item.owner or "",
            })


def _ics_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace(";", "\\;")


def render_tasks_ics(items: list[ActionItem], now: Optional[datetime] = None) -> str:
    """Render items as an iCalendar document with one VTODO each."""
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y%m%dT%H%M%SZ")
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//MemoDigest//Tasks//EN"]
    for i, item in enumerate(items, 1):
        lines += [
            "BEGIN:VTODO",
            f"UID:{stamp}-{i}@memo-digest",
            f"DTSTAMP:{stamp}",
            f"SUMMARY:{_ics_escape(item.description)}",
        ]
        if item.due:
            lines.append(f"DESCRIPTION:Due {_ics_escape(item.due)}")
        if item.owner:
            lines.append(f"DESCRIPTION:Owner {_ics_escape(item.owner)}")
        lines.append("END:VTODO")
    lines.append("END:VCALENDAR")
    return "\n".join(lines)


def write_tasks_ics(items: list[ActionItem], path: Path, now: Optional[datetime] = None) -> None:
    with open(path, 'w', encoding="utf-8") as f:
        f.write(render_tasks_ics(items, now))


def export_tasks(config: DigestConfig, data: DigestData) -> None:
    """Export tasks.md to tasks.csv and tasks.ics.

    Runs after the checklist is written so hand-added annotations are
    picked up on re-export. Writes nothing when the checklist has no items.
    """
    print()
    print("[export] Exporting checklist...")

    tasks_md = config.output_dir / TASKS_MD
    items = parse_checklist(tasks_md)
    if not items:
        print("  No checklist items to export")
        return
    print(f"  Found {len(items)} checklist item(s)")

    for name, writer in ((TASKS_CSV, write_tasks_csv), (TASKS_ICS, write_tasks_ics)):
        path = config.output_dir / name
        if _should_skip(config, path, "export checklist", tasks_md):
            if path.exists():
                data.artifacts[name] = path
            continue
        try:
            writer(items, path)
        except OSError as e:
            print(f"  Warning: Could not write {name}: {e}")
            data.failed_artifacts.append(name)
            continue
        data.artifacts[name] = path
        print(f"  Saved: {name}")
