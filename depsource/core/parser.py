"""Requirement parsing for PEP 508 and the requirements-file superset.

Two grammars are supported:

- **Named** (PEP 508): ``name[extra,...] (specifiers | @ url) ; marker``.
  Parsing is delegated to :mod:`packaging.requirements`.
- **Unnamed** (requirements files only): a bare URL or path, optionally
  followed by ``[extras]`` and ``; marker``.

When named parsing fails on text that looks like a URL or path,
:func:`parse_requirement` raises :exc:`UnsupportedRequirementError` so that
:func:`parse_requirements_txt_requirement` can retry with the unnamed
grammar. Every other failure is a plain :exc:`GrammarError`.

Typical usage::

    from depsource.core.parser import RequirementsTxtParser

    parser = RequirementsTxtParser()
    entries = parser.parse_string(content, working_dir="/project")

    for entry in entries:
        print(entry.requirement.name_or_url(), entry.line_number)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from packaging.markers import InvalidMarker, Marker
from packaging.requirements import InvalidRequirement
from packaging.requirements import Requirement as PkgRequirement

from depsource.constants import (
    ARCHIVE_EXTENSIONS,
    EDITABLE_DIRECTIVE,
    EDITABLE_DIRECTIVE_LONG,
    HASH_DIRECTIVE,
)
from depsource.exceptions import GrammarError, UnsupportedRequirementError
from depsource.models.names import ExtraName, normalize_package_name, unique_extras
from depsource.models.requirement import (
    Requirement,
    RequirementsTxtRequirement,
    UnnamedRequirement,
    UvRequirement,
    VersionOrUrl,
)
from depsource.models.url import VerbatimUrl, url_scheme
from depsource.utils.logger import get_logger

logger = get_logger("parser")

WorkingDir = Optional[Union[str, Path]]

_LEADING_EXTRAS = re.compile(
    r"^\s*[A-Za-z0-9][A-Za-z0-9._-]*\s*\[(?P<extras>[^\]]*)\]"
)
_TRAILING_EXTRAS = re.compile(r"^(?P<url>.*?)\[(?P<extras>[^\[\]]*)\]$")
_EXTRA_NAME = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9._-]*[A-Za-z0-9])?$")
_MARKER_SEPARATOR = re.compile(r"\s;|;\s")
_WINDOWS_DRIVE = re.compile(r"^[A-Za-z]:[\\/]")


# ---------------------------------------------------------------------------
# Named and unnamed grammars
# ---------------------------------------------------------------------------


def parse_requirement(text: str, working_dir: WorkingDir = None) -> Requirement:
    """Parse a PEP 508 requirement.

    Args:
        text: Requirement text, e.g. ``"foo[bar]>=1,<2; python_version>='3.8'"``.
        working_dir: Base directory for relative paths after ``@``.

    Returns:
        The parsed :class:`Requirement`.

    Raises:
        UnsupportedRequirementError: The text is a bare URL or path.
        GrammarError: Any other syntax error.
    """
    try:
        parsed = PkgRequirement(text)
    except InvalidRequirement as exc:
        if _looks_like_unnamed(_strip_marker_and_extras(text)):
            raise UnsupportedRequirementError(
                "Expected a package name, found a URL or path",
                input_text=text,
                position=0,
            ) from exc
        span = getattr(exc.__cause__, "span", None)
        raise GrammarError(
            f"Invalid requirement: {exc}",
            input_text=text,
            position=span[0] if span else None,
        ) from exc

    version_or_url: Optional[VersionOrUrl] = None
    if parsed.url:
        version_or_url = VerbatimUrl.parse(parsed.url, working_dir)
    elif len(parsed.specifier) > 0:
        version_or_url = parsed.specifier

    return Requirement(
        name=normalize_package_name(parsed.name),
        extras=_ordered_extras(text, parsed.extras),
        marker=parsed.marker,
        version_or_url=version_or_url,
    )


def parse_unnamed_requirement(
    text: str, working_dir: WorkingDir = None
) -> UnnamedRequirement:
    """Parse a bare URL or path requirement, as allowed in requirements files.

    Raises:
        GrammarError: The text is not a URL or path, or its extras or
            marker are malformed.
    """
    url_text, marker = _split_marker(text)

    extras: Tuple[str, ...] = ()
    match = _TRAILING_EXTRAS.match(url_text)
    if match:
        url_text = match.group("url").strip()
        extras = tuple(
            extra.strip() for extra in match.group("extras").split(",") if extra.strip()
        )
        for extra in extras:
            if not _EXTRA_NAME.match(extra):
                raise GrammarError(
                    f"Invalid extra name: {extra!r}",
                    input_text=text,
                    position=text.find(extra),
                )

    if not _looks_like_unnamed(url_text):
        raise GrammarError(
            "Expected a package name, URL or path", input_text=text, position=0
        )

    return UnnamedRequirement(
        url=VerbatimUrl.parse(url_text, working_dir),
        extras=unique_extras(extras),
        marker=marker,
    )


def parse_requirements_txt_requirement(
    text: str, working_dir: WorkingDir = None
) -> RequirementsTxtRequirement:
    """Parse one requirements-file requirement, named or unnamed."""
    try:
        requirement = parse_requirement(text, working_dir)
    except UnsupportedRequirementError:
        logger.debug("Parsing %r as an unnamed requirement", text)
        return RequirementsTxtRequirement(parse_unnamed_requirement(text, working_dir))
    return RequirementsTxtRequirement(UvRequirement.from_requirement(requirement))


# ---------------------------------------------------------------------------
# Requirements files
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RequirementEntry:
    """One requirement line of a requirements file.

    Attributes:
        requirement: The parsed requirement.
        editable: Whether the line used ``-e``/``--editable``.
        hashes: Values of ``--hash`` options.
        comment: Inline comment without the ``#`` prefix.
        line_number: 1-indexed line number of the first physical line.
        raw_line: The logical line as written (continuations joined).
    """

    requirement: RequirementsTxtRequirement
    editable: bool = False
    hashes: Tuple[str, ...] = field(default_factory=tuple)
    comment: Optional[str] = None
    line_number: int = 0
    raw_line: Optional[str] = None


class RequirementsTxtParser:
    """Parser for the in-memory text of a pip-style requirements file.

    Option lines other than ``-e`` (``-r``, ``-c``, ``--index-url``, ...)
    are skipped: following includes or configuring indexes is the
    caller's business.

    Example::

        >>> parser = RequirementsTxtParser()
        >>> entries = parser.parse_string("flask>=2.0  # web\\n")
        >>> entries[0].comment
        'web'
    """

    def __init__(self) -> None:
        self.logger = get_logger("parser")

    def parse_string(
        self,
        content: str,
        working_dir: WorkingDir = None,
        source_file_path: Optional[str] = None,
    ) -> List[RequirementEntry]:
        """Parse all requirement lines of *content*.

        Raises:
            GrammarError: A requirement line is malformed; the error carries
                its line number.
        """
        entries: List[RequirementEntry] = []
        logical_lines = list(_join_continuations(content.splitlines()))
        self.logger.debug(
            "Parsing %d line(s)%s",
            len(logical_lines),
            f" from {source_file_path}" if source_file_path else "",
        )

        for line_number, line_text in logical_lines:
            entry = self.parse_line(line_text, line_number, working_dir)
            if entry is not None:
                entries.append(entry)

        self.logger.debug("Completed parsing: %d requirement(s)", len(entries))
        return entries

    def parse_line(
        self,
        line_text: str,
        line_number: int,
        working_dir: WorkingDir = None,
    ) -> Optional[RequirementEntry]:
        """Parse a single logical line.

        Returns:
            ``None`` for blank lines, comments and skipped options,
            otherwise a :class:`RequirementEntry`.
        """
        stripped_line = line_text.strip()
        if not stripped_line or stripped_line.startswith("#"):
            return None

        requirement_spec, inline_comment = _extract_inline_comment(stripped_line)

        is_editable, requirement_spec = _strip_editable(requirement_spec)
        if not is_editable and requirement_spec.startswith("-"):
            self.logger.info("Line %d: Ignoring option %r", line_number, requirement_spec)
            return None

        hash_values = re.findall(HASH_DIRECTIVE + r"[=\s]+(\S+)", requirement_spec)
        if hash_values:
            requirement_spec = re.sub(
                HASH_DIRECTIVE + r"[=\s]+\S+", "", requirement_spec
            ).strip()

        requirement_spec = _remove_surrounding_quotes(requirement_spec.strip())
        if not requirement_spec:
            raise GrammarError(
                "Expected a requirement", input_text=line_text, line_number=line_number
            )

        try:
            requirement = parse_requirements_txt_requirement(
                requirement_spec, working_dir
            )
        except GrammarError as exc:
            raise exc.with_line(line_number) from exc

        return RequirementEntry(
            requirement=requirement,
            editable=is_editable,
            hashes=tuple(hash_values),
            comment=inline_comment,
            line_number=line_number,
            raw_line=line_text,
        )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _ordered_extras(text: str, parsed: Iterable[str]) -> Tuple[ExtraName, ...]:
    """Recover the written order of extras, which ``packaging`` drops."""
    match = _LEADING_EXTRAS.match(text)
    if match:
        written = [e.strip() for e in match.group("extras").split(",") if e.strip()]
        if set(written) == set(parsed):
            return unique_extras(written)
    return unique_extras(sorted(parsed))


def _split_marker(text: str) -> Tuple[str, Optional[Marker]]:
    match = _MARKER_SEPARATOR.search(text)
    if match is None:
        return text.strip(), None

    marker_start = text.index(";", match.start()) + 1
    marker_text = text[marker_start:].strip()
    try:
        marker = Marker(marker_text)
    except InvalidMarker as exc:
        raise GrammarError(
            f"Invalid marker: {exc}", input_text=text, position=marker_start
        ) from exc
    return text[: match.start()].strip(), marker


def _strip_marker_and_extras(text: str) -> str:
    match = _MARKER_SEPARATOR.search(text)
    candidate = text[: match.start()] if match else text
    candidate = candidate.strip()
    extras = _TRAILING_EXTRAS.match(candidate)
    return extras.group("url").strip() if extras else candidate


def _looks_like_unnamed(text: str) -> bool:
    """Return True if *text* is a URL or filesystem path rather than a name."""
    if not text:
        return False
    if url_scheme(text) is not None:
        return True
    if text.startswith((".", "/", "~", "\\")) or _WINDOWS_DRIVE.match(text):
        return True
    if "/" in text or "\\" in text:
        return True
    return text.lower().endswith(ARCHIVE_EXTENSIONS)


def _join_continuations(lines: List[str]) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, logical_line)`` with ``\\`` continuations joined."""
    buffer: List[str] = []
    start = 0
    for line_number, line in enumerate(lines, start=1):
        if not buffer:
            start = line_number
        if line.endswith("\\") and not line.lstrip().startswith("#"):
            buffer.append(line[:-1])
            continue
        buffer.append(line)
        yield start, " ".join(part.strip() for part in buffer)
        buffer = []
    if buffer:
        yield start, " ".join(part.strip() for part in buffer)


def _strip_editable(text: str) -> Tuple[bool, str]:
    """Split an ``-e``/``--editable`` prefix off *text*."""
    for directive in (EDITABLE_DIRECTIVE_LONG, EDITABLE_DIRECTIVE):
        if text == directive or text.startswith((directive + " ", directive + "=")):
            return True, text[len(directive) :].lstrip(" =")
    return False, text


def _remove_surrounding_quotes(text: str) -> str:
    """Strip matching single or double quotes from a string."""
    if len(text) >= 2 and text[0] in ('"', "'") and text[0] == text[-1]:
        return text[1:-1]
    return text


def _extract_inline_comment(line: str) -> Tuple[str, Optional[str]]:
    """Split a requirement line into ``(requirement_text, comment_text)``.

    A ``#`` starts a comment unless it is a URL fragment (``#egg=``,
    ``#subdirectory=``, ``#sha256=``) or sits inside a URL token.

    Example::

        >>> _extract_inline_comment("requests>=2.25  # a comment")
        ('requests>=2.25', 'a comment')
    """
    for char_index, char in enumerate(line):
        if char != "#":
            continue

        text_before_hash = line[:char_index]
        text_after_hash = line[char_index + 1 :]

        if text_after_hash.startswith(("egg=", "subdirectory=", "sha1=", "sha256=")):
            continue

        url_scheme_position = text_before_hash.rfind("://")
        if url_scheme_position == -1 or " " in text_before_hash[url_scheme_position:]:
            return text_before_hash.strip(), text_after_hash.strip()

    return line, None
