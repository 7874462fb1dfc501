# SPDX-License-Identifier: MIT
"""Version parsing and ordering for Roast packages.

Supports MAJOR.MINOR.PATCH with an optional pre-release suffix:
- 1.0.0
- 1.0.0-alpha, 1.0.0-rc.1, 2.3.4-beta2

Ordering compares the numeric components only. Two versions that differ
only by pre-release suffix compare equal, and their relative position in a
sorted list is the order in which they were inserted.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar, Union

from .middleware.errors import InvalidVersionError

VERSION_PATTERN = re.compile(
    r"^(?P<major>\d+)"
    r"\.(?P<minor>\d+)"
    r"\.(?P<patch>\d+)"
    r"(?:-(?P<prerelease>[a-zA-Z0-9.]+))?$"
)

T = TypeVar("T")


class Ordering(enum.IntEnum):
    """Result of comparing two versions."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True, slots=True)
class Version:
    """A parsed package version.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        prerelease: Optional pre-release suffix (e.g., "alpha", "rc.1")
    """

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        return version

    @property
    def is_prerelease(self) -> bool:
        """Return True if this is a pre-release version."""
        return self.prerelease is not None


def parse_version(version_string: str) -> Version:
    """Parse a version string into a Version object.

    Args:
        version_string: A string of the form MAJOR.MINOR.PATCH[-prerelease]

    Returns:
        A Version object with parsed components

    Raises:
        InvalidVersionError: If the string does not match the grammar

    Examples:
        >>> parse_version("1.2.3")
        Version(major=1, minor=2, patch=3, prerelease=None)

        >>> parse_version("1.0.0-alpha.1")
        Version(major=1, minor=0, patch=0, prerelease='alpha.1')
    """
    if not isinstance(version_string, str):
        raise InvalidVersionError(
            str(version_string), f"Version must be a string, got {type(version_string).__name__}"
        )

    if not version_string:
        raise InvalidVersionError(version_string, "Version string cannot be empty")

    match = VERSION_PATTERN.match(version_string)
    if not match:
        raise InvalidVersionError(version_string)

    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=match.group("prerelease"),
    )


def is_valid_version(version_string: str) -> bool:
    """Check if a string is a valid package version.

    Examples:
        >>> is_valid_version("1.0.0")
        True
        >>> is_valid_version("1.0")
        False
        >>> is_valid_version("1.0.0+build")
        False
    """
    if not isinstance(version_string, str):
        return False
    return VERSION_PATTERN.match(version_string) is not None


def _leading_int(part: str) -> int:
    digits = ""
    for char in part:
        if not char.isdigit():
            break
        digits += char
    return int(digits) if digits else 0


def _numeric_parts(version: Union[str, Version]) -> tuple[int, int, int]:
    """Extract (major, minor, patch) leniently.

    Missing or non-numeric components count as 0 so that malformed
    strings still compare.
    """
    if isinstance(version, Version):
        return (version.major, version.minor, version.patch)

    parts = [_leading_int(p) for p in str(version).split(".")[:3]]
    while len(parts) < 3:
        parts.append(0)
    return (parts[0], parts[1], parts[2])


def compare_versions(version1: Union[str, Version], version2: Union[str, Version]) -> int:
    """Compare two versions by their numeric components.

    Returns:
        -1 if version1 < version2
        0 if version1 == version2
        1 if version1 > version2

    Note:
        Pre-release suffixes are not considered.

    Examples:
        >>> compare_versions("1.2.0", "1.10.0")
        -1
        >>> compare_versions("1.0.0-alpha", "1.0.0-beta")
        0
    """
    key1 = _numeric_parts(version1)
    key2 = _numeric_parts(version2)
    if key1 == key2:
        return 0
    return -1 if key1 < key2 else 1


def compare(version1: Union[str, Version], version2: Union[str, Version]) -> Ordering:
    """Compare two versions and return an Ordering."""
    return Ordering(compare_versions(version1, version2))


def version_key(version: Union[str, Version]) -> tuple[int, int, int]:
    """Return a sort key consistent with compare_versions."""
    return _numeric_parts(version)


def sort_versions_desc(items: Iterable[T], key: Callable[[T], str]) -> list[T]:
    """Sort items newest first by the version string returned from ``key``.

    The sort is stable, so items with equal numeric versions keep their
    relative order.
    """
    return sorted(items, key=lambda item: version_key(key(item)), reverse=True)
