"""Unit tests for depsource.utils.filesystem module.

Test Coverage:
- Size-capped UTF-8 reads and their errors
- Manifest path resolution from files and directories
"""

from __future__ import annotations

from pathlib import Path

import pytest

from depsource.exceptions import FileOperationError
from depsource.utils.filesystem import resolve_manifest_path, safe_read_file


@pytest.mark.unit
class TestSafeReadFile:
    """Tests for safe_read_file."""

    def test_reads_text(self, tmp_path: Path) -> None:
        """Test a UTF-8 file is read as text."""
        target = tmp_path / "requirements.txt"
        target.write_text("requests>=2.0\n", encoding="utf-8")

        assert safe_read_file(target) == "requests>=2.0\n"

    def test_accepts_string_paths(self, tmp_path: Path) -> None:
        """Test string paths are accepted."""
        target = tmp_path / "requirements.txt"
        target.write_text("flask\n", encoding="utf-8")

        assert safe_read_file(str(target)) == "flask\n"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Test a missing file raises FileOperationError for the read operation."""
        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(tmp_path / "missing.txt")

        assert "File not found" in str(exc_info.value)
        assert exc_info.value.operation == "read"

    def test_directory_raises(self, tmp_path: Path) -> None:
        """Test a directory is rejected."""
        with pytest.raises(FileOperationError, match="Not a file"):
            safe_read_file(tmp_path)

    def test_size_limit(self, tmp_path: Path) -> None:
        """Test files above the size cap are rejected."""
        target = tmp_path / "big.txt"
        target.write_text("x" * 100, encoding="utf-8")

        with pytest.raises(FileOperationError, match="File too large"):
            safe_read_file(target, max_size=10)

        assert len(safe_read_file(target, max_size=None)) == 100

    def test_decode_error_is_wrapped(self, tmp_path: Path) -> None:
        """Test undecodable bytes raise FileOperationError."""
        target = tmp_path / "binary.txt"
        target.write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(target)

        assert isinstance(exc_info.value.original_error, UnicodeDecodeError)


@pytest.mark.unit
class TestResolveManifestPath:
    """Tests for resolve_manifest_path."""

    def test_file_is_returned_resolved(self, tmp_path: Path) -> None:
        """Test a file path is returned resolved."""
        manifest = tmp_path / "custom.toml"
        manifest.write_text("", encoding="utf-8")

        assert resolve_manifest_path(manifest) == manifest.resolve()

    def test_directory_maps_to_pyproject(self, tmp_path: Path) -> None:
        """Test a directory resolves to its pyproject.toml."""
        manifest = tmp_path / "pyproject.toml"
        manifest.write_text("", encoding="utf-8")

        assert resolve_manifest_path(tmp_path) == manifest.resolve()

    def test_directory_without_manifest_raises(self, tmp_path: Path) -> None:
        """Test a directory without pyproject.toml is rejected."""
        with pytest.raises(FileOperationError, match="File not found"):
            resolve_manifest_path(tmp_path)
