"""Shared pytest fixtures for token-splitter tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from token_splitter.splitter import ApproximateTokenCounter, TokenCounter

# =============================================================================
# COUNTER DOUBLES
# =============================================================================


class RecordingCounter(TokenCounter):
    """Counter returning fixed or per-text counts and recording every call.

    Texts not found in ``counts`` are counted as ``default``, or with the
    approximate formula when ``default`` is None.
    """

    def __init__(self, counts: dict[str, int] | None = None, default: int | None = None) -> None:
        self.counts = counts or {}
        self.default = default
        self.calls: list[str] = []
        self.closed = False

    def count(self, text: str) -> int:
        self.calls.append(text)
        if text in self.counts:
            return self.counts[text]
        if self.default is not None:
            return self.default
        return ApproximateTokenCounter().count(text)

    def close(self) -> None:
        self.closed = True


class CharCounter(TokenCounter):
    """One token per character; makes budgets easy to reason about."""

    def count(self, text: str) -> int:
        return len(text)


@pytest.fixture
def approx_counter() -> ApproximateTokenCounter:
    """Deterministic approximate counter."""
    return ApproximateTokenCounter()


@pytest.fixture
def char_counter() -> CharCounter:
    """Counter with one token per character."""
    return CharCounter()


@pytest.fixture
def recording_counter() -> Callable[..., RecordingCounter]:
    """Factory fixture for RecordingCounter.

    Usage:
        def test_something(recording_counter):
            counter = recording_counter(default=10)
    """
    return RecordingCounter


# =============================================================================
# INPUT FIXTURES
# =============================================================================


@pytest.fixture
def sample_text() -> str:
    """Three paragraphs of mixed sentences."""
    return (
        "Token budgets matter. Every model has a context window.\n"
        "\n"
        "Splitting by paragraph keeps related sentences together! "
        "It is the safest default.\n"
        "\n"
        "Line mode keeps one record per line. Sentence mode is a heuristic."
    )


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture writing CSV content to a temp file.

    Usage:
        def test_something(write_csv):
            path = write_csv("a,b\\n1,2\\n")
    """

    def _write(content: str, name: str = "data.csv") -> Path:
        path = tmp_path / name
        path.write_bytes(content.encode("utf-8"))
        return path

    return _write
