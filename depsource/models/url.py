"""
URL value object that remembers how the user wrote it.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlsplit

from depsource.exceptions import GrammarError

# A scheme needs at least two characters so that ``C:\pkg`` stays a path
_SCHEME_PATTERN = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.\-]+):")

#: Schemes that do not need a network location.
_LOCAL_SCHEMES = ("file",)


def url_scheme(text: str) -> Optional[str]:
    """Return the lower-cased URL scheme of *text*, or ``None`` for paths."""
    match = _SCHEME_PATTERN.match(text.strip())
    return match.group("scheme").lower() if match else None


@dataclass(frozen=True)
class VerbatimUrl:
    """An absolute URL plus the text it was parsed from.

    Attributes:
        url: Absolute URL; relative paths are already ``file://`` URIs.
        given: The verbatim input, used for display.
    """

    url: str
    given: Optional[str] = field(default=None, compare=False)

    @classmethod
    def parse(
        cls,
        given: str,
        working_dir: Optional[Union[str, Path]] = None,
    ) -> "VerbatimUrl":
        """Parse a URL or a filesystem path.

        Paths are made absolute against *working_dir* without touching the
        filesystem.

        Raises:
            GrammarError: Empty input, a network URL without a host, or a
                relative path with no working directory to anchor it.
        """
        text = given.strip()
        if not text:
            raise GrammarError("Expected a URL, found nothing", input_text=given)

        scheme = url_scheme(text)
        if scheme is not None:
            base_scheme = scheme.split("+")[-1]
            if base_scheme not in _LOCAL_SCHEMES and not urlsplit(text).netloc:
                raise GrammarError(
                    f"URL has no host: {text}", input_text=given, position=0
                )
            return cls(url=text, given=given)

        path = Path(os.path.expanduser(text))
        if not path.is_absolute():
            if working_dir is None:
                raise GrammarError(
                    f"Relative path requires a working directory: {text}",
                    input_text=given,
                )
            path = Path(working_dir) / path
        normalized = Path(os.path.normpath(str(path)))
        return cls(url=normalized.as_uri(), given=given)

    @classmethod
    def from_url(cls, given: str) -> "VerbatimUrl":
        """Parse *given* as an absolute URL; paths are rejected."""
        if url_scheme(given) is None:
            raise GrammarError(
                f"Expected an absolute URL with a scheme: {given}",
                input_text=given,
                position=0,
            )
        return cls.parse(given)

    def __str__(self) -> str:
        return self.given.strip() if self.given else self.url
