"""Configuration file loader for depsource.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``depsource.toml``: settings under ``[depsource]`` table
- ``pyproject.toml``: settings under ``[tool.depsource]`` table

Discovery order:

1. Explicit path from ``--config`` or ``DEPSOURCE_CONFIG``
2. ``depsource.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.depsource]`` section

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``depsource.toml``)::

    [depsource]
    tool_name = "uv"
    warn_missing_extras = true
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import tomli as tomllib

from depsource.constants import DEFAULT_TOOL_NAME, DEFAULT_WARN_MISSING_EXTRAS
from depsource.exceptions import ConfigError
from depsource.utils.logger import get_logger

logger = get_logger("config")

#: Option name -> expected type.
_OPTIONS: Dict[str, type] = {
    "tool_name": str,
    "warn_missing_extras": bool,
}


@dataclass
class DepSourceConfig:
    """Parsed and validated depsource configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        tool_name: Name of the ``[tool.<name>]`` table that holds
            ``sources`` and ``workspace`` in project manifests.
        warn_missing_extras: Log a warning when a requested extra is not
            defined by the project, instead of a debug message.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    tool_name: str = DEFAULT_TOOL_NAME
    warn_missing_extras: bool = DEFAULT_WARN_MISSING_EXTRAS

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {name: getattr(self, name) for name in _OPTIONS}


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    depsource_toml = cwd / "depsource.toml"
    if depsource_toml.is_file():
        logger.debug("Found depsource.toml: %s", depsource_toml)
        return depsource_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_depsource_section(pyproject_toml):
        logger.debug("Found [tool.depsource] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_depsource_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.depsource] section.

    An unreadable or invalid pyproject.toml is not a depsource config.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring %s: %s", path, exc)
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and "depsource" in tool


def load_config(config_path: Optional[Path] = None) -> DepSourceConfig:
    """Load and validate depsource configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`DepSourceConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return DepSourceConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("depsource", {})
    else:
        section = raw.get("depsource", {})

    if not section:
        logger.debug("Config file found but no depsource section, using defaults")
        return DepSourceConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> DepSourceConfig:
    """Parse and validate a ``[depsource]`` or ``[tool.depsource]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    if not isinstance(section, dict):
        raise ConfigError(
            "depsource configuration must be a table", config_path=config_path
        )

    unknown = set(section) - set(_OPTIONS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    config = DepSourceConfig()
    for option, expected in _OPTIONS.items():
        if option not in section:
            continue
        value = section[option]
        if not isinstance(value, expected):
            raise ConfigError(
                f"{option} must be a {expected.__name__}, got {type(value).__name__}",
                config_path=config_path,
                option=option,
            )
        setattr(config, option, value)

    if not config.tool_name:
        raise ConfigError(
            "tool_name must not be empty", config_path=config_path, option="tool_name"
        )

    return config
