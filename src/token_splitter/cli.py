"""CLI for token counting and splitting.

Commands:
    token-splitter count   Count tokens in inline text or a file
    token-splitter split   Split text, a text file or a CSV file under a token budget

Examples:
    # Count tokens with tiktoken for a model
    token-splitter --model gpt-4o count --file notes.md

    # Split a document into paragraph-packed chunks of at most 800 tokens
    token-splitter split --max 800 --file notes.md --out chunks/

    # Split a CSV export, counting cell text only, with approximate counts
    token-splitter --approx split --max 2000 --file emails.csv --token-mode cells

    # Machine-readable summary
    token-splitter --json split --max 500 --text "First. Second." --mode sentence
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

from token_splitter.config import SplitterConfig, load_config
from token_splitter.errors import InputNotFoundError, TokenSplitterError
from token_splitter.splitter import (
    CountConfig,
    CsvDialect,
    TokenCounter,
    default_output_dir,
    open_counter,
    read_text_input,
    split_csv_by_tokens,
    split_text_into_chunks,
    write_text_chunks,
)
from token_splitter.splitter.text_splitting import validate_max_tokens

# =============================================================================
# LOGGING SETUP
# =============================================================================

# Module-level logger
logger = logging.getLogger("token_splitter")

# Files routed to the row packer; .tsv implies a tab delimiter
CSV_SUFFIXES = (".csv", ".tsv")


def _setup_logging(log_dir: Path | None = None, verbose: bool = False) -> Path | None:
    """Configure logging with a console handler and an optional file handler.

    Args:
        log_dir: Directory for log files (no file logging when None)
        verbose: If True, set console to DEBUG level

    Returns:
        Path to the log file, or None
    """
    logger.setLevel(logging.DEBUG)

    # Console handler - less verbose unless --verbose flag
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logger.handlers.clear()
    logger.addHandler(console_handler)

    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"token_splitter_{timestamp}.log"

    # File handler - captures everything with full detail
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    logger.info(f"Logging initialized - log file: {log_file}")
    return log_file


def _log_exception(msg: str, exc: Exception) -> None:
    """Log an exception with full traceback; the console shows it only with --verbose."""
    logger.debug(f"{msg}: {type(exc).__name__}: {exc}")
    logger.debug(f"Traceback:\n{traceback.format_exc()}")


def _create_parser(defaults: SplitterConfig | None = None) -> argparse.ArgumentParser:
    """Create argument parser with subcommands.

    Args:
        defaults: Configuration supplying argument defaults

    Returns:
        Configured ArgumentParser
    """
    defaults = defaults or SplitterConfig()

    parser = argparse.ArgumentParser(
        prog="token-splitter",
        description="Token counting and splitting for text/CSV.",
    )
    parser.add_argument("--model", default=defaults.model, help="Model hint for tokenizer")
    parser.add_argument(
        "--approx",
        action="store_true",
        default=defaults.approximate,
        help="Force approximate token counting",
    )
    parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Also write a timestamped log file to this directory",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # =========================================================================
    # COUNT SUBCOMMAND
    # =========================================================================
    count_parser = subparsers.add_parser(
        "count",
        help="Count tokens for a string or file",
    )
    count_source = count_parser.add_mutually_exclusive_group()
    count_source.add_argument("--text", help="Inline text to count")
    count_source.add_argument("--file", type=Path, help="File to count")

    # =========================================================================
    # SPLIT SUBCOMMAND
    # =========================================================================
    split_parser = subparsers.add_parser(
        "split",
        help="Split text or a file into chunks under a max token limit",
        description=(
            "Split inline text or a file into token-bounded parts. .csv and .tsv "
            "files are split by rows with the header repeated in every part; "
            "everything else is split as text."
        ),
    )
    split_parser.add_argument(
        "--max",
        type=int,
        default=defaults.max_tokens,
        dest="max_tokens",
        help=f"Max tokens per chunk/file (default: {defaults.max_tokens})",
    )
    split_source = split_parser.add_mutually_exclusive_group()
    split_source.add_argument("--text", help="Inline text to split")
    split_source.add_argument("--file", type=Path, help="File to split (CSV or text)")
    split_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help=f"Output directory (default: {defaults.output_root}/<name>_<timestamp>)",
    )
    split_parser.add_argument(
        "--mode",
        choices=["paragraph", "sentence", "line"],
        default=defaults.mode,
        help=f"Text segmentation mode (default: {defaults.mode})",
    )
    split_parser.add_argument(
        "--token-mode",
        choices=["cells", "line"],
        default=defaults.token_mode,
        help=f"How CSV rows are counted (default: {defaults.token_mode})",
    )
    split_parser.add_argument(
        "--delimiter",
        default=None,
        help=f"CSV delimiter (default: {defaults.delimiter!r}, or tab for .tsv)",
    )
    split_parser.add_argument(
        "--quote",
        default=defaults.quote,
        help=f"CSV quote character (default: {defaults.quote})",
    )
    split_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a hard-split text fragment cannot get under the limit",
    )
    split_parser.set_defaults(default_delimiter=defaults.delimiter)

    return parser


def _count_config(args: argparse.Namespace) -> CountConfig:
    return CountConfig(model=args.model, approximate=args.approx)


def _print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2))


def _print_summary(title: str, rows: list[tuple[str, Any]]) -> None:
    width = max(len(label) for label, _ in rows)
    print()
    print(title)
    print("=" * 44)
    for label, value in rows:
        if isinstance(value, int):
            value = f"{value:,}"
        print(f"{label:<{width}} : {value}")
    print()


def _run_count(args: argparse.Namespace) -> int:
    """Run the count subcommand.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if args.text is not None:
        text: str = args.text
        source = "inline text"
    elif args.file is not None:
        text = read_text_input(args.file)
        source = str(args.file)
    else:
        print("Error: Provide --text or --file", file=sys.stderr)
        return 1

    with open_counter(_count_config(args)) as counter:
        tokens = counter.count(text)
        exact = counter.exact

    if args.json:
        _print_json(
            {
                "tokens": tokens,
                "source": source,
                "approximate": not exact,
                "model": args.model,
            }
        )
        return 0

    rows: list[tuple[str, Any]] = [
        ("Tokens", tokens),
        ("Mode", "tiktoken" if exact else "approximate"),
    ]
    if args.model:
        rows.append(("Model", args.model))
    rows.append(("Source", source))
    _print_summary("Token Count", rows)
    return 0


def _split_text(
    args: argparse.Namespace,
    counter: TokenCounter,
    text: str,
    base: str,
    out_dir: Path,
    kind: str,
) -> int:
    result = split_text_into_chunks(
        text,
        args.max_tokens,
        counter,
        mode=args.mode,
        strict=args.strict,
    )
    write_text_chunks(result, out_dir, base)

    if args.json:
        _print_json(
            {
                "type": kind,
                "chunks": len(result),
                "totalTokens": result.total_tokens,
                "maxTokens": args.max_tokens,
                "outDir": str(out_dir),
            }
        )
        return 0

    _print_summary(
        f"Split Complete ({kind.replace('-', ' ')})",
        [
            ("Chunks", len(result)),
            ("Total tokens", result.total_tokens),
            ("Max/chunk", args.max_tokens),
            ("Output dir", str(out_dir)),
        ],
    )
    return 0


def _split_csv(args: argparse.Namespace, counter: TokenCounter, out_dir: Path) -> int:
    input_path: Path = args.file
    delimiter = args.delimiter
    if delimiter is None:
        delimiter = "\t" if input_path.suffix.lower() == ".tsv" else args.default_delimiter
    result = split_csv_by_tokens(
        input_path,
        out_dir,
        args.max_tokens,
        counter,
        token_mode=args.token_mode,
        dialect=CsvDialect(delimiter=delimiter, quote=args.quote),
    )

    if args.json:
        _print_json(
            {
                "type": "csv",
                "parts": result.parts,
                "totalTokens": result.total_tokens,
                "maxTokens": args.max_tokens,
                "outDir": str(out_dir),
            }
        )
        return 0

    _print_summary(
        "Split Complete (csv)",
        [
            ("Parts", result.parts),
            ("Rows", result.rows),
            ("Total tokens", result.total_tokens),
            ("Max/part", args.max_tokens),
            ("Output dir", str(out_dir)),
        ],
    )
    return 0


def _run_split(args: argparse.Namespace, defaults: SplitterConfig) -> int:
    """Run the split subcommand.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if args.text is None and args.file is None:
        print("Error: Provide --text or --file", file=sys.stderr)
        return 1

    # Fail on a bad budget or missing input before touching the filesystem
    validate_max_tokens(args.max_tokens)

    text: str | None = args.text
    is_csv = False
    base = "text"
    if args.file is not None:
        if not args.file.exists():
            raise InputNotFoundError(args.file)
        base = args.file.stem
        is_csv = args.file.suffix.lower() in CSV_SUFFIXES
        if not is_csv:
            text = read_text_input(args.file)

    if args.out is not None:
        out_dir: Path = args.out
        out_dir.mkdir(parents=True, exist_ok=True)
    else:
        out_dir = default_output_dir(base, defaults.output_root)

    with open_counter(_count_config(args)) as counter:
        if is_csv:
            return _split_csv(args, counter, out_dir)
        kind = "text-file" if args.file is not None else "text"
        return _split_text(args, counter, text or "", base, out_dir, kind)


def run(argv: list[str] | None = None) -> int:
    """Parse arguments, run a command and return its exit code."""
    try:
        defaults = load_config()
    except TokenSplitterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    parser = _create_parser(defaults)
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args.log_dir, args.verbose)

    try:
        if args.command == "count":
            return _run_count(args)
        if args.command == "split":
            return _run_split(args, defaults)
    except TokenSplitterError as e:
        _log_exception(f"{args.command} failed", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted", file=sys.stderr)
        return 130  # Standard exit code for SIGINT

    # Unknown subcommand (shouldn't happen with argparse)
    parser.print_help()
    return 1


def main() -> None:
    """Entry point for the token-splitter command."""
    sys.exit(run())


if __name__ == "__main__":
    main()
