"""
Custom exception hierarchy for depsource.

This module defines structured exception types used across depsource.
All exceptions inherit from :class:`DepSourceError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Lowering failures are always attributed to a single package (and, for
optional dependency groups, to the extra that declared it).
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, MutableMapping, Optional


class DepSourceError(Exception):
    """Base exception for all depsource errors.

    All depsource-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


# ---------------------------------------------------------------------------
# Grammar errors
# ---------------------------------------------------------------------------


class GrammarError(DepSourceError):
    """Raised when requirement text cannot be parsed.

    Args:
        message: Error description.
        input_text: The requirement text that failed to parse.
        position: Zero-based offset of the offending character, if known.
        line_number: Line number in a requirements file, if any.
    """

    __slots__ = ("input_text", "position", "line_number")

    def __init__(
        self,
        message: str,
        *,
        input_text: Optional[str] = None,
        position: Optional[int] = None,
        line_number: Optional[int] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "line", line_number)
        _add_if(
            details, "input", _truncate(input_text) if input_text is not None else None
        )
        _add_if(details, "position", position)

        super().__init__(message, details)

        self.input_text = input_text
        self.position = position
        self.line_number = line_number

    def with_line(self, line_number: int) -> "GrammarError":
        """Return a copy of this error attributed to ``line_number``."""
        return type(self)(
            self.message,
            input_text=self.input_text,
            position=self.position,
            line_number=line_number,
        )


class UnsupportedRequirementError(GrammarError):
    """Raised when text is not a named PEP 508 requirement but looks like
    a bare URL or path.

    Callers that accept the requirements-file grammar retry such input
    as an unnamed requirement; every other :class:`GrammarError` is final.
    """


# ---------------------------------------------------------------------------
# Lowering errors
# ---------------------------------------------------------------------------


class LoweringError(DepSourceError):
    """Raised when a requirement cannot be combined with its source overrides.

    Args:
        message: Error description.
        package: Normalized name of the package being lowered.
        extra: Optional dependency group that declared the requirement.
    """

    __slots__ = ("package", "extra")

    def __init__(
        self,
        message: str,
        *,
        package: Optional[str] = None,
        extra: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "package", package)
        _add_if(details, "extra", extra)

        super().__init__(message, details)

        self.package = package
        self.extra = extra


class SourceConflictError(LoweringError):
    """Raised when a source override combines incompatible keys, or sets
    more than one of ``rev``, ``tag`` and ``branch``.

    Args:
        message: Error description.
        keys: The conflicting keys, in a stable order.
        **kwargs: Additional arguments forwarded to ``LoweringError``.
    """

    __slots__ = ("keys",)

    def __init__(
        self,
        message: str,
        *,
        keys: Iterable[str] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.keys = tuple(keys)
        if self.keys:
            self.details["keys"] = ", ".join(self.keys)


class PolicyError(LoweringError):
    """Raised when a requirement violates the provenance policy.

    Either a workspace member is referenced without ``workspace = true``,
    or a bare name has neither a version constraint nor an override.
    """


class UnsupportedSourceError(LoweringError):
    """Raised when an override resolves to a source kind that cannot be
    lowered yet (``path``, ``index``, ``workspace = false``)."""


# ---------------------------------------------------------------------------
# Manifest errors
# ---------------------------------------------------------------------------


class MissingEntryError(DepSourceError):
    """Raised when source overrides exist but the static metadata they
    apply to is missing or marked dynamic.

    Args:
        entry: The manifest entry that is required, e.g. ``[project]``.
    """

    __slots__ = ("entry",)

    def __init__(self, entry: str) -> None:
        super().__init__(f"Missing entry `{entry}`", {"entry": entry})
        self.entry = entry


class ManifestError(DepSourceError):
    """Raised when a project manifest is not valid TOML or has values of
    the wrong shape.

    Args:
        message: Error description.
        key: Dotted key path of the offending value.
    """

    __slots__ = ("key",)

    def __init__(self, message: str, *, key: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "key", key)

        super().__init__(message, details)

        self.key = key


# ---------------------------------------------------------------------------
# Ambient errors
# ---------------------------------------------------------------------------


class ConfigError(DepSourceError):
    """Raised when the depsource configuration cannot be loaded.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Name of the offending option.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class FileOperationError(DepSourceError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/validate).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error
