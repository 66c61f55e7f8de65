"""Text normalization, tokenization and context extraction for keyword matching."""

from __future__ import annotations

import re
from dataclasses import dataclass

# Straight and typographic apostrophes are both removed ("don't" -> "dont")
APOSTROPHES: frozenset[str] = frozenset({"'", "’"})

_TOKEN_PATTERN = re.compile(r"[^\W_]+")


@dataclass(frozen=True)
class NormalizedText:
    """Normalized text plus, for each normalized character, its index in the original."""

    text: str
    offsets: tuple[int, ...]

    def original_span(self, start: int, end: int) -> tuple[int, int]:
        """Map a half-open span of the normalized text back onto the original text."""
        if not self.offsets:
            return 0, 0
        if start >= end:
            position = self.offsets[start] if start < len(self.offsets) else self.offsets[-1] + 1
            return position, position
        return self.offsets[start], self.offsets[end - 1] + 1


def normalize_with_offsets(text: str) -> NormalizedText:
    """Case-fold, strip apostrophes, turn hyphens into spaces and trim.

    Characters whose case-folded form expands (e.g. "ß" -> "ss") map every
    produced character back to the same original index.
    """
    chars: list[str] = []
    offsets: list[int] = []
    for index, char in enumerate(text):
        if char in APOSTROPHES:
            continue
        if char == "-":
            chars.append(" ")
            offsets.append(index)
            continue
        for folded in char.casefold():
            chars.append(folded)
            offsets.append(index)

    start = 0
    end = len(chars)
    while start < end and chars[start].isspace():
        start += 1
    while end > start and chars[end - 1].isspace():
        end -= 1

    return NormalizedText(text="".join(chars[start:end]), offsets=tuple(offsets[start:end]))


def normalize_text(text: str) -> str:
    """Normalize text for consistent matching."""
    return normalize_with_offsets(text).text


def tokenize(text: str) -> list[tuple[str, int, int]]:
    """Split text into word tokens on whitespace and punctuation.

    Returns (word, start, end) tuples in order of appearance.
    """
    return [(m.group(), m.start(), m.end()) for m in _TOKEN_PATTERN.finditer(text)]


def count_words(text: str) -> int:
    """Number of whitespace-separated words."""
    return len(text.split())


def extract_context(text: str, start: int, end: int, context_length: int = 30) -> str:
    """Return the span plus up to ``context_length`` characters on each side, trimmed."""
    context_start = max(0, start - context_length)
    context_end = min(len(text), end + context_length)
    return text[context_start:context_end].strip()
