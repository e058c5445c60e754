"""Project configuration loaded from pyproject.toml."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from token_splitter.errors import ConfigurationError


class SplitterConfig(BaseModel):
    """Defaults for token-splitter, overridable per command."""

    # Token counting
    model: str | None = None
    approximate: bool = False

    # Splitting
    max_tokens: int = Field(default=1000, gt=0)
    mode: Literal["paragraph", "sentence", "line"] = "paragraph"
    token_mode: Literal["cells", "line"] = "cells"
    delimiter: str = Field(default=",", min_length=1, max_length=1)
    quote: str = Field(default='"', min_length=1, max_length=1)

    # Output
    output_root: Path = Path("token_output")


def load_config(start: Path | None = None) -> SplitterConfig:
    """Load configuration from the nearest pyproject.toml.

    Results are cached per resolved pyproject.toml, so a change of working
    directory picks up the file that applies there.

    Args:
        start: Directory to search from (default: working directory)

    Returns:
        SplitterConfig with settings from the [tool.token-splitter] section,
        falling back to defaults if not found.

    Raises:
        ConfigurationError: If the file is not valid TOML or the section
            holds invalid values
    """
    return _load_config_file(_find_pyproject(start))


@lru_cache(maxsize=8)
def _load_config_file(pyproject_path: Path | None) -> SplitterConfig:
    if pyproject_path is None:
        return SplitterConfig()

    try:
        with pyproject_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {pyproject_path}: {e}") from e

    tool_config: dict[str, Any] = data.get("tool", {}).get("token-splitter", {})
    try:
        return SplitterConfig(**tool_config)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid [tool.token-splitter] settings in {pyproject_path}: {e}"
        ) from e


def _find_pyproject(start: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from the working directory."""
    current = (start or Path.cwd()).resolve()
    for _ in range(10):  # Max 10 levels up
        candidate = current / "pyproject.toml"
        if candidate.exists():
            return candidate
        if current.parent == current:
            break
        current = current.parent
    return None
