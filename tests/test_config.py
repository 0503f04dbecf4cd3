"""Unit tests for depsource.config module.

Test Coverage:
- DepSourceConfig defaults and log output
- Config file discovery and precedence
- TOML reading and section validation
- load_config end to end
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from depsource.config import (
    DepSourceConfig,
    discover_config_file,
    load_config,
    _parse_section,
    _pyproject_has_depsource_section,
    _read_toml,
)
from depsource.exceptions import ConfigError


@pytest.mark.unit
class TestDepSourceConfig:
    """Tests for DepSourceConfig dataclass."""

    def test_default_initialization(self) -> None:
        """Test DepSourceConfig initializes with correct defaults."""
        config = DepSourceConfig()

        assert config.tool_name == "uv"
        assert config.warn_missing_extras is False
        assert config.source_path is None

    def test_to_log_dict(self) -> None:
        """Test to_log_dict returns configuration without metadata."""
        config = DepSourceConfig(
            tool_name="hatch",
            warn_missing_extras=True,
            source_path=Path("/test/path.toml"),
        )

        result = config.to_log_dict()

        assert result == {"tool_name": "hatch", "warn_missing_extras": True}


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file function."""

    def test_explicit_path_priority(self, tmp_path: Path) -> None:
        """Test explicit path is used when provided and exists."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[depsource]\n", encoding="utf-8")
        (tmp_path / "depsource.toml").write_text("[depsource]\n", encoding="utf-8")

        with patch("depsource.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file(config_file)

        assert result == config_file.resolve()

    def test_explicit_path_not_found_raises_error(self, tmp_path: Path) -> None:
        """Test ConfigError raised when explicit path doesn't exist."""
        with pytest.raises(ConfigError) as exc_info:
            discover_config_file(tmp_path / "nonexistent.toml")

        assert "not found" in str(exc_info.value).lower()

    def test_discovers_depsource_toml(self, tmp_path: Path) -> None:
        """Test discovers depsource.toml in current directory."""
        config_file = tmp_path / "depsource.toml"
        config_file.write_text("[depsource]\n", encoding="utf-8")

        with patch("depsource.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == config_file

    def test_discovers_pyproject_toml_with_section(self, tmp_path: Path) -> None:
        """Test discovers pyproject.toml with [tool.depsource] section."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text(
            "[tool.depsource]\nwarn_missing_extras = true\n", encoding="utf-8"
        )

        with patch("depsource.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == config_file

    def test_ignores_pyproject_toml_without_section(self, tmp_path: Path) -> None:
        """Test ignores a project manifest that only configures other tools."""
        (tmp_path / "pyproject.toml").write_text(
            "[project]\nname = 'demo'\n\n[tool.uv.sources]\n", encoding="utf-8"
        )

        with patch("depsource.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result is None

    def test_precedence_order(self, tmp_path: Path) -> None:
        """Test discovery precedence: depsource.toml before pyproject.toml."""
        depsource_toml = tmp_path / "depsource.toml"
        depsource_toml.write_text("[depsource]\n", encoding="utf-8")
        (tmp_path / "pyproject.toml").write_text("[tool.depsource]\n", encoding="utf-8")

        with patch("depsource.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == depsource_toml


@pytest.mark.unit
class TestPyprojectHasDepsourceSection:
    """Tests for _pyproject_has_depsource_section helper."""

    def test_returns_true_when_section_exists(self, tmp_path: Path) -> None:
        """Test returns True when [tool.depsource] is present."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.depsource]\ntool_name = 'uv'\n", encoding="utf-8")

        assert _pyproject_has_depsource_section(config_file) is True

    def test_returns_false_on_errors(self, tmp_path: Path) -> None:
        """Test returns False gracefully on parse errors or missing files."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("invalid ][[", encoding="utf-8")

        assert _pyproject_has_depsource_section(config_file) is False
        assert _pyproject_has_depsource_section(tmp_path / "missing.toml") is False


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml helper."""

    def test_reads_valid_toml(self, tmp_path: Path) -> None:
        """Test a valid TOML file is read into a dict."""
        toml_file = tmp_path / "test.toml"
        toml_file.write_text("[depsource]\nwarn_missing_extras = true\n", encoding="utf-8")

        result = _read_toml(toml_file)

        assert result == {"depsource": {"warn_missing_extras": True}}

    def test_raises_error_on_invalid_toml(self, tmp_path: Path) -> None:
        """Test invalid TOML raises ConfigError naming the file."""
        toml_file = tmp_path / "invalid.toml"
        toml_file.write_text("invalid ][[ toml", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            _read_toml(toml_file)

        assert "Invalid TOML" in str(exc_info.value)

    def test_raises_error_when_file_not_found(self, tmp_path: Path) -> None:
        """Test a missing file raises ConfigError."""
        with pytest.raises(ConfigError) as exc_info:
            _read_toml(tmp_path / "nonexistent.toml")

        assert "Cannot read" in str(exc_info.value)


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section configuration validator."""

    def test_parses_empty_section(self) -> None:
        """Test an empty section yields the defaults."""
        result = _parse_section({}, config_path="test.toml")

        assert result == DepSourceConfig()

    def test_parses_all_options(self) -> None:
        """Test every supported option is read."""
        section = {"tool_name": "hatch", "warn_missing_extras": True}

        result = _parse_section(section, config_path="test.toml")

        assert result.tool_name == "hatch"
        assert result.warn_missing_extras is True

    def test_raises_error_on_unknown_keys(self) -> None:
        """Test unknown keys are rejected and listed."""
        section = {"unknown_key": "value", "another_unknown": True}

        with pytest.raises(ConfigError) as exc_info:
            _parse_section(section, config_path="test.toml")

        assert "Unknown configuration keys" in str(exc_info.value)
        assert "another_unknown, unknown_key" in str(exc_info.value)

    @pytest.mark.parametrize(
        "section, message",
        [
            ({"tool_name": 3}, "tool_name must be a str"),
            ({"warn_missing_extras": "yes"}, "warn_missing_extras must be a bool"),
        ],
    )
    def test_raises_error_on_wrong_type(self, section: dict, message: str) -> None:
        """Test options of the wrong type are rejected."""
        with pytest.raises(ConfigError) as exc_info:
            _parse_section(section, config_path="test.toml")

        assert message in str(exc_info.value)
        assert exc_info.value.details["option"] == next(iter(section))

    def test_raises_error_on_empty_tool_name(self) -> None:
        """Test a blank tool_name is rejected."""
        with pytest.raises(ConfigError, match="must not be empty"):
            _parse_section({"tool_name": ""}, config_path="test.toml")


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config main function."""

    def test_returns_defaults_when_no_config_found(self, tmp_path: Path) -> None:
        """Test defaults are used when no config file exists."""
        with patch("depsource.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result == DepSourceConfig()
        assert result.source_path is None

    def test_loads_depsource_toml(self, tmp_path: Path) -> None:
        """Test options are loaded from depsource.toml."""
        config_file = tmp_path / "depsource.toml"
        config_file.write_text("[depsource]\ntool_name = 'hatch'\n", encoding="utf-8")

        with patch("depsource.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result.tool_name == "hatch"
        assert result.source_path == config_file

    def test_loads_pyproject_toml(self, tmp_path: Path) -> None:
        """Test options are loaded from pyproject.toml [tool.depsource]."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text(
            "[tool.depsource]\nwarn_missing_extras = true\n", encoding="utf-8"
        )

        with patch("depsource.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result.warn_missing_extras is True
        assert result.source_path == config_file

    def test_loads_explicit_config_path(self, tmp_path: Path) -> None:
        """Test an explicit path is loaded regardless of its name."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[depsource]\ntool_name = 'pdm'\n", encoding="utf-8")

        result = load_config(config_file)

        assert result.tool_name == "pdm"
        assert result.source_path == config_file.resolve()

    def test_file_without_section_uses_defaults(self, tmp_path: Path) -> None:
        """Test a config file without a depsource section yields defaults."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[other]\nkey = 1\n", encoding="utf-8")

        result = load_config(config_file)

        assert result.tool_name == "uv"
        assert result.source_path == config_file.resolve()

    def test_raises_error_on_unknown_keys(self, tmp_path: Path) -> None:
        """Test unknown keys are rejected and listed."""
        config_file = tmp_path / "depsource.toml"
        config_file.write_text("[depsource]\nunknown_option = true\n", encoding="utf-8")

        with patch("depsource.config.Path.cwd", return_value=tmp_path):
            with pytest.raises(ConfigError) as exc_info:
                load_config()

        assert exc_info.value.config_path == str(config_file)
