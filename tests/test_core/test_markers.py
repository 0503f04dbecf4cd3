"""Unit tests for depsource.core.markers module.

Test Coverage:
- Requirements without markers
- Platform and Python version markers
- ``extra`` markers against the enabled extras, one extra at a time
- Extra name normalization
- Named, unnamed and requirements-file requirement forms
- Order-preserving filtering and Python version overrides
"""

from __future__ import annotations

import pytest
from packaging.markers import Marker

from depsource.core.markers import evaluate_markers, filter_requirements
from depsource.core.parser import parse_requirement, parse_requirements_txt_requirement
from depsource.models import MarkerEnvironment, RegistrySource, TargetTriple, UvRequirement

LINUX_312 = MarkerEnvironment()


def uv(name: str, marker: str = None) -> UvRequirement:
    return UvRequirement(
        name=name,
        source=RegistrySource(),
        marker=Marker(marker) if marker else None,
    )


@pytest.mark.unit
class TestEvaluateMarkers:
    """Tests for evaluate_markers."""

    def test_no_marker_always_applies(self) -> None:
        """Test a requirement without a marker applies with or without extras."""
        assert evaluate_markers(uv("foo"), LINUX_312) is True
        assert evaluate_markers(uv("foo"), LINUX_312, ["any"]) is True

    @pytest.mark.parametrize(
        "marker, expected",
        [
            ("python_version >= '3.8'", True),
            ("python_version < '3.8'", False),
            ("sys_platform == 'win32'", False),
            ("platform_machine == 'x86_64' and os_name == 'posix'", True),
        ],
    )
    def test_environment_markers(self, marker: str, expected: bool) -> None:
        """Test environment markers are evaluated against the Linux default."""
        assert evaluate_markers(uv("foo", marker), LINUX_312) is expected

    def test_extra_marker_requires_enabled_extra(self) -> None:
        """Test ``extra == 'x'`` holds only when ``x`` is enabled."""
        requirement = uv("pysocks", "extra == 'socks'")

        assert evaluate_markers(requirement, LINUX_312) is False
        assert evaluate_markers(requirement, LINUX_312, ["socks"]) is True
        assert evaluate_markers(requirement, LINUX_312, ["other", "socks"]) is True

    def test_extra_names_are_normalized(self) -> None:
        """Test enabled extras match marker extras after normalization."""
        requirement = uv("foo", "extra == 'dev-tools'")

        assert evaluate_markers(requirement, LINUX_312, ["Dev_Tools"]) is True

    def test_negated_extra_holds_through_another_extra(self) -> None:
        """Test ``extra != 'a'`` applies when any other extra is enabled.

        Each enabled extra is evaluated on its own, so with ``a`` and ``b``
        the marker holds through ``b``. With only ``a`` it does not.
        """
        requirement = uv("foo", "extra != 'a'")

        assert evaluate_markers(requirement, LINUX_312, ["a", "b"]) is True
        assert evaluate_markers(requirement, LINUX_312, ["a"]) is False
        assert evaluate_markers(requirement, LINUX_312) is True

    def test_conjunction_of_extras_never_holds(self) -> None:
        """Test ``extra == 'a' and extra == 'b'`` is false even with both enabled.

        Edge case: a single evaluation sees one extra at a time.
        """
        requirement = uv("foo", "extra == 'a' and extra == 'b'")

        assert evaluate_markers(requirement, LINUX_312, ["a", "b"]) is False

    def test_accepts_every_requirement_form(self) -> None:
        """Test named, unnamed and requirements-file forms are all accepted."""
        named = parse_requirement("foo ; sys_platform == 'darwin'")
        unnamed = parse_requirements_txt_requirement(
            "https://x.org/foo.whl ; sys_platform == 'darwin'"
        )
        mac = LINUX_312.for_target(TargetTriple.AARCH64_APPLE_DARWIN)

        assert evaluate_markers(named, LINUX_312) is False
        assert evaluate_markers(named, mac) is True
        assert evaluate_markers(unnamed, mac) is True
        assert unnamed.evaluate_markers(LINUX_312) is False


@pytest.mark.unit
class TestFilterRequirements:
    """Tests for filter_requirements."""

    def test_keeps_order_and_drops_inapplicable(self) -> None:
        """Test inapplicable requirements are dropped and order is kept."""
        requirements = [
            uv("a"),
            uv("b", "sys_platform == 'win32'"),
            uv("c", "python_version >= '3.10'"),
            uv("d", "extra == 'test'"),
        ]

        kept = filter_requirements(requirements, LINUX_312)

        assert [r.name for r in kept] == ["a", "c"]

    def test_python_version_override(self) -> None:
        """Test a Python version override changes which requirements apply."""
        requirements = [uv("tomli", "python_version < '3.11'")]

        assert filter_requirements(requirements, LINUX_312) == []
        assert filter_requirements(
            requirements, LINUX_312.with_python_version("3.9")
        ) == requirements
