"""Token counting with tiktoken and an always-available approximation.

A counter is chosen once per operation by select_counter() and released
by open_counter() when the operation ends. Exact counting uses tiktoken;
the model is only a hint. When no tiktoken encoding can be initialized the
approximate counter is used instead.
"""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING

from token_splitter.errors import TokenizationError
from token_splitter.splitter.models import CountConfig

if TYPE_CHECKING:
    from collections.abc import Iterator

    import tiktoken

logger = logging.getLogger(__name__)

# Encoding used when the model hint is missing or unknown to tiktoken
DEFAULT_ENCODING = "cl100k_base"

_WHITESPACE_RUN = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[.,;:!?()\[\]{}\"']")


def approximate_token_count(text: str) -> int:
    """Estimate tokens from character and punctuation counts.

    Roughly four characters per token, plus one token per six
    punctuation marks.

    Args:
        text: Text to estimate

    Returns:
        0 for empty or whitespace-only text, otherwise at least 1
    """
    normalized = _WHITESPACE_RUN.sub(" ", text).strip()
    if not normalized:
        return 0

    punct = len(_PUNCTUATION.findall(normalized))
    base = math.ceil(len(normalized) / 4)
    bump = math.ceil(punct / 6)
    return max(1, base + bump)


class TokenCounter(ABC):
    """Counts tokens in a piece of text."""

    exact: bool = False

    @abstractmethod
    def count(self, text: str) -> int:
        """Return the non-negative token count of text."""

    def close(self) -> None:  # noqa: B027
        """Release any encoder resource held by the counter."""


class ApproximateTokenCounter(TokenCounter):
    """Heuristic counter; never raises."""

    def count(self, text: str) -> int:
        return approximate_token_count(text)

    def __repr__(self) -> str:
        return "ApproximateTokenCounter()"


class TiktokenCounter(TokenCounter):
    """Exact counter backed by a tiktoken encoding."""

    exact = True

    def __init__(self, encoding: tiktoken.Encoding) -> None:
        self._encoding: tiktoken.Encoding | None = encoding

    @property
    def name(self) -> str:
        if self._encoding is None:
            return "<closed>"
        return str(self._encoding.name)

    def count(self, text: str) -> int:
        if self._encoding is None:
            raise TokenizationError("Token counter used after close()")
        if not text:
            return 0
        try:
            return len(self._encoding.encode(text, disallowed_special=()))
        except Exception as e:
            raise TokenizationError(f"{self.name} failed to encode text: {e}") from e

    def close(self) -> None:
        self._encoding = None

    def __repr__(self) -> str:
        return f"TiktokenCounter({self.name!r})"


def _load_encoding(model: str | None) -> tiktoken.Encoding:
    """Resolve a tiktoken encoding for a model hint, defaulting to cl100k_base."""
    import tiktoken

    if model:
        try:
            return tiktoken.encoding_for_model(model)
        except KeyError:
            logger.debug(f"No tiktoken encoding for model {model!r}, using {DEFAULT_ENCODING}")
    return tiktoken.get_encoding(DEFAULT_ENCODING)


def select_counter(config: CountConfig | None = None) -> TokenCounter:
    """Choose the counter implementation for an operation.

    Args:
        config: Counting configuration (default: exact, no model hint)

    Returns:
        An ApproximateTokenCounter when approximation is forced or no
        encoding can be initialized, otherwise a TiktokenCounter
    """
    config = config or CountConfig()
    if config.approximate:
        return ApproximateTokenCounter()

    try:
        encoding = _load_encoding(config.model)
    except ImportError:
        logger.debug("tiktoken is not installed; using approximate token counts")
        return ApproximateTokenCounter()
    except Exception as e:
        # Typically the BPE file could not be fetched
        logger.warning(
            f"tiktoken unavailable ({type(e).__name__}: {e}); using approximate token counts"
        )
        return ApproximateTokenCounter()

    counter = TiktokenCounter(encoding)
    logger.debug(f"Selected {counter!r} for model hint {config.model!r}")
    return counter


@contextmanager
def open_counter(config: CountConfig | None = None) -> Iterator[TokenCounter]:
    """Acquire a counter for the duration of one operation.

    The counter is closed on every exit path.

    Example:
        >>> with open_counter(CountConfig(approximate=True)) as counter:
        ...     counter.count("Hello, world.")
        5
    """
    counter = select_counter(config)
    try:
        yield counter
    finally:
        counter.close()


def count_tokens(text: str, config: CountConfig | None = None) -> int:
    """Count tokens in text with a counter scoped to this call.

    Args:
        text: Text to count tokens for
        config: Counting configuration

    Returns:
        Number of tokens (0 for empty string)
    """
    with open_counter(config) as counter:
        return counter.count(text)
