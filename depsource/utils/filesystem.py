"""
Filesystem utilities for depsource.

The core never reads files; these helpers exist for the CLI, which loads
manifests and requirements files and hands their text to the core. All
filesystem errors are normalized to ``FileOperationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from depsource.constants import MAX_FILE_SIZE
from depsource.exceptions import FileOperationError
from depsource.utils.logger import get_logger

logger = get_logger("filesystem")

PathLike = Union[str, Path]

MANIFEST_NAME = "pyproject.toml"


def _validated_file(path: Path) -> Path:
    """Validate and resolve a file path."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Safely read a text file with optional size limits.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        content = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc

    logger.debug("Read %d bytes from %s", size, path)
    return content


def resolve_manifest_path(path: PathLike) -> Path:
    """Return the manifest for *path*: the file itself, or the
    ``pyproject.toml`` inside a directory."""
    candidate = Path(path)
    if candidate.is_dir():
        candidate = candidate / MANIFEST_NAME
    return _validated_file(candidate)
