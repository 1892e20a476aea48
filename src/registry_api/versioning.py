"""Semantic version parsing and ordering (SemVer 2.0)."""

from __future__ import annotations

from typing import Iterable, Optional

from semver import Version

_LOWEST = Version(0, 0, 0)


def parse_version(value: str) -> Optional[Version]:
    """Parse ``value`` as a strict ``major.minor.patch`` semantic version.

    Pre-release and build suffixes (``1.0.0-beta.1``, ``1.0.0+build``) are
    accepted; two-part, four-part and ``v``-prefixed strings are not.
    """

    # Surrounding whitespace, including a trailing newline, is never part of a version.
    if not isinstance(value, str) or value != value.strip():
        return None
    try:
        return Version.parse(value)
    except ValueError:
        return None


def is_valid_version(value: str) -> bool:
    return parse_version(value) is not None


def version_sort_key(value: str) -> tuple[bool, Version]:
    # Unparseable strings sort below every valid version. Build metadata
    # does not affect precedence.
    parsed = parse_version(value)
    if parsed is None:
        return (False, _LOWEST)
    return (True, parsed)


def sort_versions_desc(values: Iterable[str]) -> list[str]:
    return sorted(values, key=version_sort_key, reverse=True)


__all__ = ["is_valid_version", "parse_version", "sort_versions_desc", "version_sort_key"]
