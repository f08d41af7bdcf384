"""
npm-style semantic version helpers built on ``semantic_version``.

- ``coerce_version``: loose normalization ('v12', 'node 12.1' -> 12.0.0, 12.1.0)
- ``clean_version``: strict cleanup of an exact version ('v12.0.0' -> '12.0.0')
- ``parse_spec``: npm range expressions (^, ~, x-ranges, hyphen ranges)
- ``max_satisfying``: highest exact version in a list satisfying a range
"""

import logging
import re
from typing import Iterable, Optional

import semantic_version

logger = logging.getLogger(__name__)

_COERCE_RE = re.compile(
    r"(?:^|[^\d])(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?:$|[^\d])"
)
_OPERATOR_SPACE_RE = re.compile(r"(<=|>=|<|>|=|~|\^)\s+")


def coerce_version(text: Optional[str]) -> Optional[semantic_version.Version]:
    """
    Coerce a loosely formatted version string into a semantic version.

    Takes the first run of up to three dot-separated numbers; missing minor and
    patch parts default to zero. Prerelease and build metadata are dropped.

    Returns:
        Version, or None if the text contains no number

    Example:
        >>> str(coerce_version("v12.1"))
        '12.1.0'
    """
    if not text:
        return None

    m = _COERCE_RE.search(str(text))
    if not m:
        return None

    major, minor, patch = m.groups()
    return semantic_version.Version(
        major=int(major),
        minor=int(minor or 0),
        patch=int(patch or 0),
    )


def clean_version(text: Optional[str]) -> Optional[str]:
    """
    Clean an exact version string.

    Strips surrounding whitespace and leading '=' / 'v' characters, then
    requires a strict semantic version.

    Returns:
        Normalized version string, or None if not an exact version

    Example:
        >>> clean_version(" =v16.2.0 ")
        '16.2.0'
        >>> clean_version("^16.2.0") is None
        True
    """
    if not text:
        return None

    candidate = str(text).strip().lstrip("=v")
    try:
        return str(semantic_version.Version(candidate))
    except ValueError:
        return None


def is_exact_version(text: Optional[str]) -> bool:
    """Whether ``text`` names one exact version rather than a range."""
    return clean_version(text) is not None


def parse_spec(spec: str) -> Optional[semantic_version.NpmSpec]:
    """
    Parse an npm range expression.

    Whitespace between an operator and its version is dropped first, so
    ">= 12.0.0 < 13" reads as ">=12.0.0 <13".

    Returns:
        NpmSpec, or None if the expression is not a valid range
    """
    try:
        return semantic_version.NpmSpec(_OPERATOR_SPACE_RE.sub(r"\1", spec.strip()))
    except ValueError as e:
        logger.warning(f"Invalid version spec '{spec}': {e}")
        return None


def max_satisfying(versions: Iterable[str], spec: str) -> Optional[str]:
    """
    Highest exact version string in ``versions`` satisfying ``spec``.

    Strings that are not exact versions are ignored.
    """
    parsed = parse_spec(spec)
    if parsed is None:
        return None

    candidates = []
    for text in versions:
        cleaned = clean_version(text)
        if cleaned is None:
            continue
        parsed_version = semantic_version.Version(cleaned)
        if parsed.match(parsed_version):
            candidates.append((parsed_version, text))

    if not candidates:
        return None

    candidates.sort(key=lambda item: item[0])
    return candidates[-1][1]


__all__ = [
    "coerce_version",
    "clean_version",
    "is_exact_version",
    "parse_spec",
    "max_satisfying",
]
