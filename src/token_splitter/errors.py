"""Exceptions raised by token-splitter.

Every error aborts the operation in progress and propagates to the caller
unmodified. Translation into console messages and exit codes happens only
in the CLI.
"""

from __future__ import annotations


class TokenSplitterError(Exception):
    """Base exception for all token-splitter errors."""

    pass


class ConfigurationError(TokenSplitterError):
    """Raised for invalid settings (non-positive budget, unknown mode, bad dialect)."""

    pass


class InputNotFoundError(TokenSplitterError, FileNotFoundError):
    """Raised when the source path does not exist."""

    def __init__(self, path: object) -> None:
        super().__init__(f"Input not found: {path}")
        self.path = path


class MissingHeaderError(TokenSplitterError):
    """Raised when a tabular part is flushed before any header was read."""

    pass


class UnsupportedModeError(TokenSplitterError):
    """Raised when multiline quoted CSV fields are requested."""

    pass


class TokenizationError(TokenSplitterError):
    """Raised when an exact-mode encoder fails while counting."""

    pass


class OversizedFragmentError(TokenSplitterError):
    """Raised in strict mode when a hard-split fragment cannot get under budget."""

    def __init__(self, fragment: str, token_count: int, max_tokens: int) -> None:
        super().__init__(
            f"Hard-split fragment of {len(fragment)} chars still has "
            f"{token_count} tokens (max {max_tokens})"
        )
        self.fragment = fragment
        self.token_count = token_count
        self.max_tokens = max_tokens
