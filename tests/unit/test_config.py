"""Unit tests for pyproject-based configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from token_splitter.config import (
    SplitterConfig,
    _find_pyproject,
    _load_config_file,
    load_config,
)
from token_splitter.errors import ConfigurationError


@pytest.fixture
def fresh_config():
    """Clear the load_config cache around a test."""
    _load_config_file.cache_clear()
    yield load_config
    _load_config_file.cache_clear()


class TestSplitterConfig:
    """Tests for configuration defaults and validation."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        config = SplitterConfig()
        assert config.model is None
        assert config.approximate is False
        assert config.max_tokens == 1000
        assert config.mode == "paragraph"
        assert config.token_mode == "cells"
        assert config.delimiter == ","
        assert config.quote == '"'
        assert config.output_root == Path("token_output")

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "overrides",
        [{"max_tokens": 0}, {"mode": "word"}, {"delimiter": ";;"}, {"token_mode": "bytes"}],
    )
    def test_invalid_values_rejected(self, overrides: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            SplitterConfig(**overrides)


class TestLoadConfig:
    """Tests for reading [tool.token-splitter] from pyproject.toml."""

    @pytest.mark.unit
    def test_reads_tool_section(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fresh_config
    ) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.token-splitter]\nmax_tokens = 300\nmode = "sentence"\napproximate = true\n',
            encoding="utf-8",
        )
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = fresh_config()

        assert config.max_tokens == 300
        assert config.mode == "sentence"
        assert config.approximate is True
        assert config.token_mode == "cells"

    @pytest.mark.unit
    def test_missing_section_uses_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fresh_config
    ) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        assert fresh_config() == SplitterConfig()

    @pytest.mark.unit
    def test_follows_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fresh_config
    ) -> None:
        for name, budget in [("one", 100), ("two", 200)]:
            project = tmp_path / name
            project.mkdir()
            (project / "pyproject.toml").write_text(
                f"[tool.token-splitter]\nmax_tokens = {budget}\n", encoding="utf-8"
            )

        monkeypatch.chdir(tmp_path / "one")
        assert fresh_config().max_tokens == 100
        monkeypatch.chdir(tmp_path / "two")
        assert fresh_config().max_tokens == 200

    @pytest.mark.unit
    def test_invalid_section_raises_configuration_error(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fresh_config
    ) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[tool.token-splitter]\nmax_tokens = 0\n", encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigurationError, match="tool.token-splitter"):
            fresh_config()

    @pytest.mark.unit
    def test_malformed_toml_raises_configuration_error(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fresh_config
    ) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.token-splitter\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            fresh_config()

    @pytest.mark.unit
    def test_find_pyproject_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
        nested = tmp_path / "x" / "y" / "z"
        nested.mkdir(parents=True)

        assert _find_pyproject(nested) == (tmp_path / "pyproject.toml").resolve()
