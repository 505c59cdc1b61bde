"""
Text analysis of a plain transcript: extractive summary, highlights,
keyword tags, and action-item candidates.

Nothing here is learned. The summary is the opening sentences, tags are
the most frequent content words, and action items are clauses that
match a small intent pattern.
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from memo_digest.tokenizer import keywords, sentences

# Subject (we / I / let's / please / team), then an intent phrase, then the
# rest of the clause up to the next period or line break.
ACTION_ITEM_PATTERN = re.compile(
    r"\b(?:we|i|let's|lets|please|team)[ \t]+"
    r"((?:will|need[ \t]+to|should|must|can|to)[ \t]+[^.\n]+)",
    re.IGNORECASE,
)


@dataclass
class ActionItem:
    """A candidate task found in the transcript."""
    description: str
    due: Optional[str] = None
    owner: Optional[str] = None


def summarize(text: str, n: int = 6) -> list[str]:
    """Return the first n sentences of text, verbatim."""
    return sentences(text)[:n]


def highlights(text: str, n: int = 6) -> list[str]:
    """Return the highlight sentences of text.

    Uses the same selection as summarize(), with its own count.
    """
    return summarize(text, n)


def keyword_tags(text: str, n: int = 12) -> list[str]:
    return keywords(text, n)


def match_action_item(text: str, pos: int = 0) -> Optional[re.Match]:
    """Find the next action-item clause at or after pos; None if there is none."""
    return ACTION_ITEM_PATTERN.search(text, pos)


def _iter_action_matches(text: str) -> Iterator[re.Match]:
    pos = 0
    while True:
        m = match_action_item(text, pos)
        if m is None:
            return
        yield m
        pos = m.end()


def extract_action_items(text: str) -> list[ActionItem]:
    """Extract action items in the order they appear in text.

    The description is the intent phrase and the rest of its clause,
    without the subject ("We will review the budget." gives
    "will review the budget"). A clause never spans lines, so each item
    fits on one checklist line. Due dates and owners are left empty.
    """
    items = []
    for m in _iter_action_matches(text):
        description = " ".join(m.group(1).split())
        if description:
            items.append(ActionItem(description))
    return items
