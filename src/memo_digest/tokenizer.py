"""
Sentence and word tokenization for transcript text.

All functions are pure: the same text always yields the same tokens.
"""

import re
from collections import Counter

STOPWORDS = frozenset("""
a an the and or not of in on at to for with from up down by as is am are was were be been being
it its they them he she we you i this that these those there here then than so just very really have has had do did does
can could should would may might must will wont dont isnt arent wasnt werent havent hasnt hadnt couldnt wouldnt shouldnt
over under into out about across after before again further once each own same too only more most other some such no nor
per via within without between among upon your my our their his her theirs ours yours me us him itself themselves
""".split())

# Sentence ends at . ! or ? followed by whitespace
SENTENCE_BREAK = re.compile(r'(?<=[.!?])\s+')
# Letters, optionally joined by single internal hyphens or apostrophes
WORD_PATTERN = re.compile(r"[a-z]+(?:[-'][a-z]+)*")

MIN_KEYWORD_LENGTH = 3


def sentences(text: str) -> list[str]:
    """Split text into sentences, dropping empty pieces."""
    return [s.strip() for s in SENTENCE_BREAK.split(text.strip()) if s.strip()]


def words(text: str) -> list[str]:
    """Return the lowercase word tokens of text.

    Digits and punctuation separate tokens and never appear in them;
    a hyphen or apostrophe is kept only between two letters.
    """
    return WORD_PATTERN.findall(text.lower())


def keywords(text: str, n: int = 12) -> list[str]:
    """Return up to n content words ranked by frequency.

    Stopwords and tokens shorter than three letters are ignored. Ties keep
    the order in which the words first appear.
    """
    content = [w for w in words(text)
               if w not in STOPWORDS and len(w) >= MIN_KEYWORD_LENGTH]
    # Counter preserves insertion order and most_common sorts stably
    return [w for w, _ in Counter(content).most_common(n)]
