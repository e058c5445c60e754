"""File output for chunks and parts.

Part files are named {base}_part{NNN}{suffix} with a 1-based, zero-padded
index and no gaps.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from token_splitter.errors import InputNotFoundError
from token_splitter.splitter.models import TextSplitResult

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_ROOT = Path("token_output")


def part_filename(base: str, index: int, suffix: str = ".txt") -> str:
    """Build the file name of a chunk or part.

    Example:
        >>> part_filename("emails", 7, ".csv")
        'emails_part007.csv'
    """
    return f"{base}_part{index:03d}{suffix}"


def default_output_dir(base: str, root: Path | None = None) -> Path:
    """Create and return a timestamped output directory.

    Args:
        base: Base name of the input (file stem, or "text" for inline text)
        root: Parent directory (default: ./token_output)

    Returns:
        Path like token_output/{base}_20240131_235959
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_dir = (root or DEFAULT_OUTPUT_ROOT) / f"{base}_{timestamp}"
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir


def write_part(out_dir: Path, name: str, content: str) -> Path:
    """Write one chunk or part body and return its path."""
    path = out_dir / name
    path.write_text(content, encoding="utf-8")
    logger.debug(f"Wrote {path} ({len(content)} chars)")
    return path


def write_text_chunks(result: TextSplitResult, out_dir: Path, base: str) -> list[Path]:
    """Write each chunk body to {base}_partNNN.txt.

    Args:
        result: Chunks to write, in order
        out_dir: Output directory (created if missing)
        base: Base file name

    Returns:
        Written paths in chunk order
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    return [
        write_part(out_dir, part_filename(base, i, ".txt"), body)
        for i, body in enumerate(result.bodies, 1)
    ]


def read_text_input(path: Path) -> str:
    """Read a UTF-8 text input, decoding invalid bytes as U+FFFD.

    Raises:
        InputNotFoundError: If path does not exist
    """
    if not path.exists():
        raise InputNotFoundError(path)
    return path.read_text(encoding="utf-8", errors="replace")
