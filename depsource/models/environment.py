"""
Marker environments.

A :class:`MarkerEnvironment` carries the PEP 508 environment attributes a
marker is evaluated against. :class:`TargetTriple` lets callers resolve
for another platform while keeping the interpreter's Python markers.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, replace
from typing import Dict, Iterable, Mapping, Optional

from packaging.markers import Marker, default_environment


@dataclass(frozen=True)
class MarkerEnvironment:
    implementation_name: str = "cpython"
    implementation_version: str = "3.12.0"
    os_name: str = "posix"
    platform_machine: str = "x86_64"
    platform_python_implementation: str = "CPython"
    platform_release: str = ""
    platform_system: str = "Linux"
    platform_version: str = ""
    python_full_version: str = "3.12.0"
    python_version: str = "3.12"
    sys_platform: str = "linux"

    @classmethod
    def current(cls) -> "MarkerEnvironment":
        """The environment of the running interpreter."""
        return cls.from_mapping(default_environment())

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "MarkerEnvironment":
        known = {name: values[name] for name in cls.__dataclass_fields__ if name in values}
        return cls(**known)

    def with_python_version(self, version: str) -> "MarkerEnvironment":
        """Return a copy targeting Python *version* (``3.8`` or ``3.8.10``)."""
        full_version = version if version.count(".") >= 2 else f"{version}.0"
        return replace(
            self,
            python_version=".".join(full_version.split(".")[:2]),
            python_full_version=full_version,
        )

    def for_target(self, triple: "TargetTriple") -> "MarkerEnvironment":
        return triple.markers(self)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    def evaluate(self, marker: Optional[Marker], extras: Iterable[str] = ()) -> bool:
        """Evaluate *marker* with *extras* enabled.

        No marker always applies. ``extra == "x"`` terms hold only when
        ``x`` is among *extras*.

        The marker is evaluated once per enabled extra and applies if any
        single evaluation is true, as pip does for the extras it installs.
        ``extra`` terms therefore see one extra at a time:
        ``extra != "a"`` holds with extras ``a, b`` (through ``b``), and
        ``extra == "a" and extra == "b"`` never holds.
        """
        if marker is None:
            return True
        env = self.to_dict()
        extras = list(extras)
        if not extras:
            return marker.evaluate(dict(env, extra=""))
        return any(marker.evaluate(dict(env, extra=extra)) for extra in extras)


class TargetTriple(str, enum.Enum):
    """Supported target triples (architecture, vendor, operating system)."""

    X86_64_PC_WINDOWS_MSVC = "x86_64-pc-windows-msvc"
    X86_64_UNKNOWN_LINUX_GNU = "x86_64-unknown-linux-gnu"
    X86_64_APPLE_DARWIN = "x86_64-apple-darwin"
    AARCH64_APPLE_DARWIN = "aarch64-apple-darwin"
    AARCH64_UNKNOWN_LINUX_GNU = "aarch64-unknown-linux-gnu"
    AARCH64_UNKNOWN_LINUX_MUSL = "aarch64-unknown-linux-musl"
    X86_64_UNKNOWN_LINUX_MUSL = "x86_64-unknown-linux-musl"

    @property
    def platform_machine(self) -> str:
        return self.value.split("-", 1)[0]

    @property
    def platform_system(self) -> str:
        if self is TargetTriple.X86_64_PC_WINDOWS_MSVC:
            return "Windows"
        if self.value.endswith("-apple-darwin"):
            return "Darwin"
        return "Linux"

    @property
    def sys_platform(self) -> str:
        return {"Windows": "win32", "Darwin": "darwin", "Linux": "linux"}[
            self.platform_system
        ]

    @property
    def os_name(self) -> str:
        return "nt" if self.platform_system == "Windows" else "posix"

    def markers(self, base: MarkerEnvironment) -> MarkerEnvironment:
        """Override the platform markers of *base*, keeping its Python markers.

        ``platform_release`` and ``platform_version`` are unknown for a
        foreign target and become empty.
        """
        return replace(
            base,
            os_name=self.os_name,
            platform_machine=self.platform_machine,
            platform_system=self.platform_system,
            sys_platform=self.sys_platform,
            platform_release="",
            platform_version="",
        )
