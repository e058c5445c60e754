"""Splitter package - token-bounded splitting of text and CSV data.

Public API:
- CountConfig: Frozen token-counting configuration
- TokenCounter / ApproximateTokenCounter / TiktokenCounter: Counting backends
- select_counter / open_counter: Per-operation counter selection and release
- count_tokens / approximate_token_count: Counting utilities
- TextSegmenter / RegexSegmenter / get_segmenter: Text segmentation
- ChunkPacker / split_text_into_chunks: Greedy chunk packing with hard-split
- RowPacker / split_csv_by_tokens / parse_csv_line: Streaming CSV packing
- part_filename / default_output_dir / write_text_chunks: Output helpers
"""

from token_splitter.splitter.csv_splitting import (
    RowPacker,
    parse_csv_line,
    split_csv_by_tokens,
)
from token_splitter.splitter.models import (
    Chunk,
    CountConfig,
    CsvDialect,
    CsvSplitResult,
    Part,
    TextSplitResult,
)
from token_splitter.splitter.output import (
    default_output_dir,
    part_filename,
    read_text_input,
    write_text_chunks,
)
from token_splitter.splitter.segmentation import (
    RegexSegmenter,
    TextSegmenter,
    get_segmenter,
)
from token_splitter.splitter.text_splitting import (
    MIN_FRAGMENT_CHARS,
    ChunkPacker,
    split_text_into_chunks,
)
from token_splitter.splitter.token_counting import (
    ApproximateTokenCounter,
    TiktokenCounter,
    TokenCounter,
    approximate_token_count,
    count_tokens,
    open_counter,
    select_counter,
)

__all__ = [
    # Constants
    "MIN_FRAGMENT_CHARS",
    # Models
    "Chunk",
    "CountConfig",
    "CsvDialect",
    "CsvSplitResult",
    "Part",
    "TextSplitResult",
    # Token counting
    "ApproximateTokenCounter",
    "TiktokenCounter",
    "TokenCounter",
    "approximate_token_count",
    "count_tokens",
    "open_counter",
    "select_counter",
    # Segmentation
    "RegexSegmenter",
    "TextSegmenter",
    "get_segmenter",
    # Packing
    "ChunkPacker",
    "RowPacker",
    "parse_csv_line",
    "split_csv_by_tokens",
    "split_text_into_chunks",
    # Output
    "default_output_dir",
    "part_filename",
    "read_text_input",
    "write_text_chunks",
]
