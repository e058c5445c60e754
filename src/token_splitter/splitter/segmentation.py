"""Segmentation of free text into ordered units.

Paragraph, sentence and line strategies are regex heuristics. The sentence
splitter is not linguistically exact: it breaks after ".", "!" or "?" when
the next non-space character looks like the start of a sentence.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from token_splitter.errors import ConfigurationError
from token_splitter.splitter.models import SegmentMode

SEGMENT_MODES: tuple[str, ...] = ("paragraph", "sentence", "line")

PARAGRAPH_BREAK_PATTERN = re.compile(r"\n{2,}")
SENTENCE_BREAK_PATTERN = re.compile(r"(?<=[.!?])\s+(?=[A-Z0-9\"“‘(\[])")


def normalize_newlines(text: str) -> str:
    """Convert CRLF line endings to LF."""
    return text.replace("\r\n", "\n")


class TextSegmenter(ABC):
    """Splits text into an ordered list of trimmed, non-empty units."""

    # Joiner used when units are packed back into a chunk
    separator: str = "\n\n"

    @abstractmethod
    def split_units(self, text: str) -> list[str]:
        """Return the units found in normalized text (possibly none)."""

    def segment(self, text: str) -> list[str]:
        """Split text into units.

        Falls back to a single unit holding the whole trimmed input when
        no unit is found. That unit is empty for blank input.
        """
        cleaned = normalize_newlines(text)
        units = self.split_units(cleaned)
        return units if units else [cleaned.strip()]


class RegexSegmenter(TextSegmenter):
    """Paragraph, sentence or line segmentation by regular expressions."""

    def __init__(self, mode: SegmentMode = "paragraph") -> None:
        if mode not in SEGMENT_MODES:
            raise ConfigurationError(
                f"Unknown segmentation mode {mode!r} (expected one of {', '.join(SEGMENT_MODES)})"
            )
        self.mode = mode
        self.separator = "\n" if mode == "line" else "\n\n"

    def split_units(self, text: str) -> list[str]:
        if self.mode == "line":
            lines = (line.rstrip() for line in text.split("\n"))
            return [line for line in lines if line]

        pattern = SENTENCE_BREAK_PATTERN if self.mode == "sentence" else PARAGRAPH_BREAK_PATTERN
        parts = (part.strip() for part in pattern.split(text))
        return [part for part in parts if part]

    def __repr__(self) -> str:
        return f"RegexSegmenter({self.mode!r})"


def get_segmenter(mode: str) -> TextSegmenter:
    """Return the segmenter for a mode name.

    Raises:
        ConfigurationError: If the mode is not paragraph, sentence or line
    """
    return RegexSegmenter(mode)  # type: ignore[arg-type]
