"""Unit tests for depsource.models.requirement module.

Test Coverage:
- Requirement accessors, display form and immutability
- Policy-free conversion to UvRequirement
- Display form and JSON serialization of every source variant
- The requirements-file facade over named and unnamed requirements
"""

from __future__ import annotations

import pytest
from packaging.markers import Marker
from packaging.specifiers import SpecifierSet

from depsource.models import (
    GitReference,
    GitReferenceKind,
    GitSource,
    PathSource,
    RegistrySource,
    Requirement,
    RequirementsTxtRequirement,
    UnnamedRequirement,
    UrlSource,
    UvRequirement,
    VerbatimUrl,
    WorkspaceSource,
)

URL = VerbatimUrl("https://example.com/foo-1.0.tar.gz")


@pytest.mark.unit
class TestRequirement:
    """Tests for the parsed PEP 508 requirement."""

    def test_accessors(self) -> None:
        """Test specifier and url split version_or_url by kind."""
        versioned = Requirement(name="foo", version_or_url=SpecifierSet(">=1"))
        direct = Requirement(name="foo", version_or_url=URL)

        assert versioned.specifier == SpecifierSet(">=1")
        assert versioned.url is None
        assert direct.url == URL
        assert direct.specifier is None

    def test_str_with_url_and_marker(self) -> None:
        """Test the display form of a direct URL requirement with a marker."""
        requirement = Requirement(
            name="foo",
            extras=("a",),
            marker=Marker("os_name == 'nt'"),
            version_or_url=URL,
        )

        assert str(requirement) == (
            'foo[a] @ https://example.com/foo-1.0.tar.gz ; os_name == "nt"'
        )

    def test_is_immutable(self) -> None:
        """Test requirements are frozen."""
        requirement = Requirement(name="foo")

        with pytest.raises(AttributeError):
            requirement.name = "bar"  # type: ignore


@pytest.mark.unit
class TestUvRequirement:
    """Tests for UvRequirement conversion and display."""

    def test_from_requirement_without_version(self) -> None:
        """Test a bare name converts to an unconstrained registry source."""
        lowered = UvRequirement.from_requirement(Requirement(name="foo"))

        assert lowered.source == RegistrySource(version=SpecifierSet(), index=None)

    def test_from_requirement_with_url(self) -> None:
        """Test a direct URL converts to a URL source and keeps extras."""
        lowered = UvRequirement.from_requirement(
            Requirement(name="foo", extras=("x",), version_or_url=URL)
        )

        assert lowered == UvRequirement(name="foo", source=UrlSource(URL), extras=("x",))

    @pytest.mark.parametrize(
        "source, expected",
        [
            (RegistrySource(SpecifierSet(">=1")), "foo>=1"),
            (RegistrySource(index="internal"), "foo (index: internal)"),
            (UrlSource(URL), "foo @ https://example.com/foo-1.0.tar.gz"),
            (
                GitSource(
                    VerbatimUrl("https://github.com/o/r"),
                    GitReference(GitReferenceKind.TAG, "v1"),
                ),
                "foo @ git+https://github.com/o/r@v1",
            ),
            (GitSource(VerbatimUrl("git+ssh://git@github.com/o/r")), "foo @ git+ssh://git@github.com/o/r"),
            (PathSource("../foo", editable=True), "foo @ ../foo (editable)"),
            (WorkspaceSource(path="/ws/foo"), "foo (workspace)"),
        ],
    )
    def test_display(self, source, expected: str) -> None:
        """Test the display form of every source variant."""
        assert str(UvRequirement(name="foo", source=source)) == expected

    def test_display_with_extras_and_marker(self) -> None:
        """Test extras and the marker appear in the display form."""
        requirement = UvRequirement(
            name="foo",
            source=RegistrySource(),
            extras=("a", "b"),
            marker=Marker("python_version < '3.9'"),
        )

        assert str(requirement) == 'foo[a,b] ; python_version < "3.9"'

    def test_to_json(self) -> None:
        """Test JSON serialization breaks the source out by kind."""
        requirement = UvRequirement(
            name="foo",
            source=GitSource(
                VerbatimUrl("https://github.com/o/r"),
                GitReference(GitReferenceKind.BRANCH, "main"),
            ),
            extras=("a",),
        )

        assert requirement.to_json() == {
            "name": "foo",
            "extras": ["a"],
            "marker": None,
            "source": {"kind": "git", "git": "https://github.com/o/r", "branch": "main"},
        }


@pytest.mark.unit
class TestRequirementsTxtRequirement:
    """Tests for the requirements-file facade."""

    def test_named(self) -> None:
        """Test the facade over a named requirement."""
        wrapped = RequirementsTxtRequirement(
            UvRequirement(name="foo", source=RegistrySource(), extras=("x",))
        )

        assert wrapped.name == "foo"
        assert wrapped.name_or_url() == "foo"
        assert wrapped.extras() == ("x",)
        assert wrapped.markers() is None
        assert wrapped.source() == RegistrySource()

    def test_unnamed(self) -> None:
        """Test the facade over an unnamed requirement.

        The URL doubles as the source and there is no name.
        """
        marker = Marker("sys_platform == 'linux'")
        wrapped = RequirementsTxtRequirement(
            UnnamedRequirement(url=URL, extras=("x",), marker=marker)
        )

        assert wrapped.name is None
        assert wrapped.source() == UrlSource(URL)
        assert wrapped.markers() is marker
        assert wrapped.to_json()["name"] is None

    def test_parse_delegates_to_parser(self) -> None:
        """Test RequirementsTxtRequirement.parse uses the requirements-file grammar."""
        wrapped = RequirementsTxtRequirement.parse("requests>=2")

        assert wrapped.name == "requests"
