"""Streaming, row-atomic splitting of CSV data.

The source is read one physical line at a time, so each line must be a
whole record: quoted fields spanning several lines are not supported.
The first non-blank line is the header and is repeated at the top of
every part. Blank lines are dropped. Rows are never split; a row that
alone exceeds max_tokens gets a part of its own.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from token_splitter.errors import (
    ConfigurationError,
    InputNotFoundError,
    MissingHeaderError,
    UnsupportedModeError,
)
from token_splitter.splitter.models import CsvDialect, CsvSplitResult, Part, TokenMode
from token_splitter.splitter.output import part_filename, write_part
from token_splitter.splitter.text_splitting import validate_max_tokens
from token_splitter.splitter.token_counting import TokenCounter

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)

TOKEN_MODES: tuple[str, ...] = ("line", "cells")

# Cells are joined with this when counting in "cells" mode
CELL_JOINER = " | "


def parse_csv_line(line: str, delimiter: str = ",", quote: str = '"') -> list[str]:
    """Split one CSV line into cell values.

    Quote characters toggle quoted state and are dropped; a doubled quote
    inside a quoted field yields a literal quote. Delimiters inside quotes
    are kept.

    Example:
        >>> parse_csv_line('a,"b, c","say ""hi"" twice"')
        ['a', 'b, c', 'say "hi" twice']
    """
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        ch = line[i]
        if ch == quote:
            if in_quotes and line[i + 1 : i + 2] == quote:
                current.append(quote)
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            cells.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    cells.append("".join(current))
    return cells


def validate_dialect(dialect: CsvDialect) -> None:
    """Raise ConfigurationError unless delimiter and quote are distinct single characters."""
    if len(dialect.delimiter) != 1 or len(dialect.quote) != 1:
        raise ConfigurationError(
            f"CSV delimiter and quote must be single characters "
            f"(got {dialect.delimiter!r}, {dialect.quote!r})"
        )
    if dialect.delimiter == dialect.quote:
        raise ConfigurationError(f"CSV delimiter and quote are both {dialect.quote!r}")


class RowPacker:
    """Packs a stream of CSV lines into header-carrying parts.

    Only the header and the rows of the open part are held in memory.

    Attributes:
        counter: Token counter used for every row
        max_tokens: Token budget per part (header excluded)
        token_mode: "line" counts the raw line; "cells" counts the parsed
            cells joined by " | "
        dialect: Delimiter and quote used in "cells" mode
    """

    def __init__(
        self,
        counter: TokenCounter,
        max_tokens: int,
        token_mode: TokenMode = "line",
        dialect: CsvDialect | None = None,
    ) -> None:
        validate_max_tokens(max_tokens)
        if token_mode not in TOKEN_MODES:
            raise ConfigurationError(
                f"Unknown token mode {token_mode!r} (expected one of {', '.join(TOKEN_MODES)})"
            )
        self.counter = counter
        self.max_tokens = max_tokens
        self.token_mode = token_mode
        self.dialect = dialect or CsvDialect()
        validate_dialect(self.dialect)

    def count_row(self, line: str) -> int:
        """Count the tokens of one data line according to token_mode."""
        if self.token_mode == "cells":
            cells = parse_csv_line(line, self.dialect.delimiter, self.dialect.quote)
            return self.counter.count(CELL_JOINER.join(cells))
        return self.counter.count(line)

    def pack(self, lines: Iterable[str]) -> Iterator[Part]:
        """Consume lines lazily and yield parts as they are completed.

        Header, open rows and part numbering belong to one call, so a
        packer can be reused for several sources.

        Args:
            lines: Raw lines without line terminators

        Yields:
            Parts in order, indexed from 1

        Raises:
            MissingHeaderError: If the stream holds no non-blank line
        """
        header: str | None = None
        rows: list[str] = []
        tokens = 0
        index = 0

        def flush() -> Part | None:
            nonlocal rows, tokens, index
            if header is None:
                raise MissingHeaderError("Missing header: no non-blank line before flush")
            if not rows:
                return None

            index += 1
            part = Part(index, header, tuple(rows), tokens)
            rows = []
            tokens = 0
            logger.debug(
                f"Flushed part {part.index}: {len(part.rows)} rows, {part.token_count} tokens"
            )
            return part

        for line in lines:
            if not line.strip():
                continue

            if header is None:
                header = line
                continue

            row_tokens = self.count_row(line)

            if row_tokens > self.max_tokens:
                part = flush()
                if part is not None:
                    yield part
                logger.warning(
                    f"Row of {row_tokens} tokens exceeds max {self.max_tokens}; "
                    f"writing it as its own part"
                )
                rows = [line]
                tokens = row_tokens
                part = flush()
                if part is not None:
                    yield part
                continue

            if tokens + row_tokens > self.max_tokens:
                part = flush()
                if part is not None:
                    yield part

            rows.append(line)
            tokens += row_tokens

        part = flush()
        if part is not None:
            yield part


def iter_lines(path: Path) -> Iterator[str]:
    """Yield the lines of a text file one at a time, terminators stripped.

    Bytes that are not valid UTF-8 are decoded as U+FFFD.
    """
    with path.open(encoding="utf-8", errors="replace") as f:
        for line in f:
            yield line.rstrip("\r\n")


def split_csv_by_tokens(
    input_path: Path,
    out_dir: Path,
    max_tokens: int,
    counter: TokenCounter,
    token_mode: TokenMode = "line",
    dialect: CsvDialect | None = None,
    multiline_fields: bool = False,
) -> CsvSplitResult:
    """Split a CSV file into header-carrying part files.

    Each part is written to {stem}_part{NNN}{suffix} as soon as it is
    complete. Parts already written stay on disk if a later row fails.

    Args:
        input_path: CSV source file
        out_dir: Output directory (created if missing)
        max_tokens: Token budget per part (must be > 0)
        counter: Token counter for the whole operation
        token_mode: "line" or "cells"
        dialect: Delimiter and quote character
        multiline_fields: Must be False; multiline records are unsupported

    Returns:
        CsvSplitResult with written paths and per-part token totals

    Raises:
        ConfigurationError: If max_tokens <= 0 or the dialect is invalid
        UnsupportedModeError: If multiline_fields is True
        InputNotFoundError: If input_path does not exist
        MissingHeaderError: If the file has no non-blank line
    """
    validate_max_tokens(max_tokens)
    if multiline_fields:
        raise UnsupportedModeError(
            "Multiline quoted CSV fields are not supported; every record must be one line"
        )
    packer = RowPacker(counter, max_tokens, token_mode=token_mode, dialect=dialect)

    if not input_path.exists():
        raise InputNotFoundError(input_path)

    out_dir.mkdir(parents=True, exist_ok=True)
    base = input_path.stem
    suffix = input_path.suffix or ".csv"

    result = CsvSplitResult()
    for part in packer.pack(iter_lines(input_path)):
        path = write_part(out_dir, part_filename(base, part.index, suffix), part.render())
        result.part_paths.append(path)
        result.token_counts.append(part.token_count)
        result.rows += len(part.rows)

    logger.info(f"Split {input_path} into {result.parts} parts ({result.rows} rows)")
    return result
