"""Core data models for the splitting pipeline.

This module contains the dataclasses shared by the packers:
- CountConfig: How tokens are counted (model hint, forced approximation)
- Chunk: A token-bounded group of text units
- TextSplitResult: Ordered chunks of one text split
- CsvDialect: Delimiter and quote character for tabular input
- Part: A token-bounded group of rows carrying the header
- CsvSplitResult: Files and totals of one CSV split
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

SegmentMode = Literal["paragraph", "sentence", "line"]
TokenMode = Literal["line", "cells"]


@dataclass(frozen=True)
class CountConfig:
    """Configuration for token counting.

    Attributes:
        model: Model hint used only to pick an exact encoding (e.g. "gpt-4o")
        approximate: Skip exact encoders and use the heuristic formula
    """

    model: str | None = None
    approximate: bool = False


@dataclass(frozen=True)
class Chunk:
    """Group of text units emitted as one output body.

    Attributes:
        units: Constituent units in input order
        token_count: Sum of unit counts, or the recount of a hard-split fragment
        separator: Joiner between units ("\\n" for line mode, "\\n\\n" otherwise)
        hard_split: True when this chunk is a fragment of an oversized unit
    """

    units: tuple[str, ...]
    token_count: int
    separator: str = "\n\n"
    hard_split: bool = False

    @property
    def text(self) -> str:
        return self.separator.join(self.units)


@dataclass
class TextSplitResult:
    """Ordered chunks produced from one text."""

    chunks: list[Chunk] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.chunks)

    @property
    def bodies(self) -> list[str]:
        return [chunk.text for chunk in self.chunks]

    @property
    def token_counts(self) -> list[int]:
        return [chunk.token_count for chunk in self.chunks]

    @property
    def total_tokens(self) -> int:
        return sum(self.token_counts)


@dataclass(frozen=True)
class CsvDialect:
    """Delimiter and quote character of a line-oriented CSV source.

    An escaped quote is the quote character doubled. Fields spanning
    several physical lines are not supported.
    """

    delimiter: str = ","
    quote: str = '"'


@dataclass(frozen=True)
class Part:
    """Group of rows preceded by the replicated header.

    Attributes:
        index: 1-based sequential part number
        header: Header line, verbatim
        rows: Raw data lines in input order
        token_count: Sum of row token counts (header excluded)
    """

    index: int
    header: str
    rows: tuple[str, ...]
    token_count: int

    def render(self) -> str:
        """Return the part body: header and rows, one per line, newline-terminated."""
        return "\n".join((self.header, *self.rows)) + "\n"


@dataclass
class CsvSplitResult:
    """Outcome of splitting a CSV file.

    Attributes:
        part_paths: Written part files in order
        token_counts: Token total of each part, parallel to part_paths
        rows: Number of data rows written across all parts
    """

    part_paths: list[Path] = field(default_factory=list)
    token_counts: list[int] = field(default_factory=list)
    rows: int = 0

    @property
    def parts(self) -> int:
        return len(self.part_paths)

    @property
    def total_tokens(self) -> int:
        return sum(self.token_counts)
