"""
Normalized package and extra names.

Both kinds of names compare equal after PEP 503 / PEP 685 normalization,
so ``Foo_Bar``, ``foo-bar`` and ``FOO.bar`` are the same package. The
types are ``NewType`` wrappers: values are plain strings that have been
through :func:`packaging.utils.canonicalize_name`.
"""

from __future__ import annotations

from typing import Iterable, NewType, Tuple

from packaging.utils import canonicalize_name

PackageName = NewType("PackageName", str)
ExtraName = NewType("ExtraName", str)


def normalize_package_name(name: str) -> PackageName:
    """Normalise a package name per PEP 503.

    Example::

        >>> normalize_package_name("My_Cool.Package")
        'my-cool-package'
    """
    return PackageName(canonicalize_name(name))


def normalize_extra_name(name: str) -> ExtraName:
    """Normalise an extra name per PEP 685."""
    return ExtraName(canonicalize_name(name))


def unique_extras(extras: Iterable[str]) -> Tuple[ExtraName, ...]:
    """Normalise *extras*, dropping duplicates but keeping first-seen order."""
    seen = []
    for extra in extras:
        normalized = normalize_extra_name(extra)
        if normalized not in seen:
            seen.append(normalized)
    return tuple(seen)
