"""Greedy packing of text units into token-bounded chunks.

Units are counted once each, strictly in input order, and appended to the
open chunk until the next unit would push it over max_tokens. A unit that
alone exceeds max_tokens is hard-split into character windows, each
emitted as its own chunk.

A hard-split window never shrinks below MIN_FRAGMENT_CHARS. For very
token-dense text a fragment at that floor can still exceed max_tokens;
such a fragment is kept and logged, or rejected when strict=True.
"""

from __future__ import annotations

import logging
import math

from token_splitter.errors import ConfigurationError, OversizedFragmentError
from token_splitter.splitter.models import Chunk, SegmentMode, TextSplitResult
from token_splitter.splitter.segmentation import TextSegmenter, get_segmenter
from token_splitter.splitter.token_counting import TokenCounter

logger = logging.getLogger(__name__)

# Hard-split windows start at ~4 chars per token and never go below this
MIN_FRAGMENT_CHARS = 50
CHARS_PER_TOKEN_GUESS = 4
SHRINK_RATIO = 0.85


def validate_max_tokens(max_tokens: int) -> None:
    """Raise ConfigurationError unless max_tokens is a positive integer."""
    if max_tokens <= 0:
        raise ConfigurationError(f"max_tokens must be > 0 (got {max_tokens})")


class ChunkPacker:
    """Packs an ordered sequence of units into chunks.

    Attributes:
        counter: Token counter used for every unit and fragment
        max_tokens: Token budget per chunk
        separator: Joiner between units of a chunk
        strict: Raise OversizedFragmentError instead of keeping an
            over-budget hard-split fragment
    """

    def __init__(
        self,
        counter: TokenCounter,
        max_tokens: int,
        separator: str = "\n\n",
        strict: bool = False,
    ) -> None:
        validate_max_tokens(max_tokens)
        self.counter = counter
        self.max_tokens = max_tokens
        self.separator = separator
        self.strict = strict

    def pack(self, units: list[str]) -> TextSplitResult:
        """Pack units into chunks.

        Args:
            units: Ordered text units

        Returns:
            TextSplitResult with chunks in emission order
        """
        result = TextSplitResult()
        current: list[str] = []
        current_tokens = 0

        def flush() -> None:
            nonlocal current, current_tokens
            if current:
                result.chunks.append(
                    Chunk(tuple(current), current_tokens, separator=self.separator)
                )
            current = []
            current_tokens = 0

        for unit in units:
            unit_tokens = self.counter.count(unit)

            if unit_tokens > self.max_tokens:
                flush()
                logger.debug(
                    f"Hard-splitting unit of {unit_tokens} tokens (max {self.max_tokens})"
                )
                result.chunks.extend(self.hard_split(unit))
                continue

            if current_tokens + unit_tokens > self.max_tokens:
                flush()

            current.append(unit)
            current_tokens += unit_tokens

        flush()
        return result

    def hard_split(self, text: str) -> list[Chunk]:
        """Split an oversized unit into character windows.

        Each window starts at max(MIN_FRAGMENT_CHARS, max_tokens * 4)
        characters and shrinks to 85% of its length while it is over
        budget and longer than MIN_FRAGMENT_CHARS.

        Args:
            text: Unit whose token count exceeds max_tokens

        Returns:
            One chunk per window, each carrying its own token count

        Raises:
            OversizedFragmentError: If strict and a window at the floor is
                still over budget
        """
        fragments: list[Chunk] = []
        guess_chars = max(MIN_FRAGMENT_CHARS, self.max_tokens * CHARS_PER_TOKEN_GUESS)
        remaining = text

        while remaining:
            window = remaining[:guess_chars]
            window_tokens = self.counter.count(window)
            while window_tokens > self.max_tokens and len(window) > MIN_FRAGMENT_CHARS:
                window = window[: math.floor(len(window) * SHRINK_RATIO)]
                window_tokens = self.counter.count(window)

            if window_tokens > self.max_tokens:
                if self.strict:
                    raise OversizedFragmentError(window, window_tokens, self.max_tokens)
                logger.warning(
                    f"Hard-split fragment still over budget: {window_tokens} tokens "
                    f"in {len(window)} chars (max {self.max_tokens})"
                )

            fragments.append(
                Chunk((window,), window_tokens, separator=self.separator, hard_split=True)
            )
            remaining = remaining[len(window) :].lstrip()

        return fragments


def split_text_into_chunks(
    text: str,
    max_tokens: int,
    counter: TokenCounter,
    mode: SegmentMode = "paragraph",
    segmenter: TextSegmenter | None = None,
    strict: bool = False,
) -> TextSplitResult:
    """Split text into chunks of at most max_tokens tokens.

    Args:
        text: Raw input text
        max_tokens: Token budget per chunk (must be > 0)
        counter: Token counter for the whole operation
        mode: Segmentation mode, ignored when segmenter is given
        segmenter: Custom segmenter replacing the regex strategies
        strict: Reject hard-split fragments that stay over budget

    Returns:
        TextSplitResult whose bodies and token_counts are parallel lists

    Raises:
        ConfigurationError: If max_tokens <= 0 or mode is unknown
    """
    validate_max_tokens(max_tokens)
    segmenter = segmenter or get_segmenter(mode)
    units = segmenter.segment(text)

    packer = ChunkPacker(counter, max_tokens, separator=segmenter.separator, strict=strict)
    result = packer.pack(units)
    logger.debug(
        f"Packed {len(units)} units into {len(result)} chunks ({result.total_tokens} tokens)"
    )
    return result
