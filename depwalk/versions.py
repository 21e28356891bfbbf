"""Version parsing and comparison utilities.

Manifest versions are mostly dotted numbers, but real-world manifests also
carry four-component versions, pre-release suffixes and dates. Comparison
tries the strictest parser first and falls back to a segment-wise ordering
that still gives a total order over arbitrary strings.
"""

from __future__ import annotations

import re

import semver
from packaging.version import InvalidVersion, Version

_SEGMENT_SPLIT = re.compile(r"[.\-_+]")
_DIGITS_OR_TEXT = re.compile(r"\d+|[^\d]+")


def parse_version(version_str: str) -> semver.Version | None:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3-beta" → "1.2.3-beta"

    Returns None when the string is not a semantic version at all.
    """
    try:
        return semver.Version.parse(version_str, optional_minor_and_patch=True)
    except ValueError:
        return None


def _parse_pep440(version_str: str) -> Version | None:
    try:
        return Version(version_str)
    except InvalidVersion:
        return None


def _segments(version_str: str) -> list[int | str]:
    """Split "1.2b3-rc" into [1, 2, "b", 3, "rc"]."""
    parts: list[int | str] = []
    for chunk in _SEGMENT_SPLIT.split(version_str.lower()):
        for piece in _DIGITS_OR_TEXT.findall(chunk):
            parts.append(int(piece) if piece.isdecimal() else piece)
    return parts


def _compare_segments(a: str, b: str) -> int:
    left, right = _segments(a), _segments(b)
    for x, y in zip(left, right):
        if x == y:
            continue
        if isinstance(x, int) and isinstance(y, int):
            return 1 if x > y else -1
        # A number outranks a text tag: "1.0.1" > "1.0.beta"
        if isinstance(x, int):
            return 1
        if isinstance(y, int):
            return -1
        return 1 if x > y else -1

    if len(left) == len(right):
        return 0
    # Extra numeric segment means newer ("1.0.1" > "1.0"), extra text means
    # a pre-release ("1.0-beta" < "1.0").
    longer, sign = (left, 1) if len(left) > len(right) else (right, -1)
    extra = longer[min(len(left), len(right))]
    return sign if isinstance(extra, int) else -sign


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns:
        -1 if a is older than b, 0 if equal, 1 if a is newer.

    Examples:
        compare_versions("1.10", "1.9") → 1
        compare_versions("1.0-beta", "1.0") → -1
        compare_versions("2.42.0.2", "2.42.0.10") → -1
    """
    if a == b:
        return 0

    sa, sb = parse_version(a), parse_version(b)
    if sa is not None and sb is not None:
        return sa.compare(sb)

    pa, pb = _parse_pep440(a), _parse_pep440(b)
    if pa is not None and pb is not None:
        if pa == pb:
            return 0
        return 1 if pa > pb else -1

    return _compare_segments(a, b)


def is_newer(candidate: str | None, current: str | None) -> bool:
    """Return True if candidate is strictly newer than current.

    Unknown versions never count as newer.
    """
    if candidate is None or current is None:
        return False
    return compare_versions(candidate, current) > 0
