"""
Version matching for catalog entries.

Given the releases listed for the current platform and an npm range, picks the
numerically highest release that satisfies the range. Releases whose versions
coerce to the same normalized version are told apart by release date, the
newest winning.

Example:
    >>> entries = [CatalogEntry("12.0.0", "2020-01-01"), CatalogEntry("12.1.0", "2019-06-01")]
    >>> match(entries, "^12.0.0")
    '12.1.0'
"""

import functools
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from nodesetup.core.semver import coerce_version, parse_spec
from nodesetup.installer.models import CatalogEntry

logger = logging.getLogger(__name__)


def _compare_dates(a: Optional[datetime], b: Optional[datetime]) -> int:
    a = a or datetime.min
    b = b or datetime.min
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def compare_entries(a: CatalogEntry, b: CatalogEntry) -> int:
    """
    Order two entries by coerced version, ascending.

    Entries whose versions coerce equal, or fail to coerce, are ordered by
    release date instead (later date sorts later).
    """
    version_a = coerce_version(a.version)
    version_b = coerce_version(b.version)

    if version_a is None or version_b is None or version_a == version_b:
        return _compare_dates(a.release_date, b.release_date)

    return 1 if version_a > version_b else -1


def sort_entries(entries: Iterable[CatalogEntry]) -> List[CatalogEntry]:
    """Return entries sorted ascending (see :func:`compare_entries`)."""
    return sorted(entries, key=functools.cmp_to_key(compare_entries))


def match(entries: Sequence[CatalogEntry], spec: str) -> Optional[str]:
    """
    Select the best published version for ``spec``.

    Sorts ascending and scans from the highest entry down, returning the
    version string (as published) of the first entry whose coerced version
    satisfies the range. Entries that fail to coerce are skipped.

    Args:
        entries: Catalog entries, already filtered to the current platform
        spec: npm range expression

    Returns:
        Matching version string, or None if nothing satisfies
    """
    logger.debug(f"evaluating {len(entries)} versions")

    parsed = parse_spec(spec)
    version = None

    if parsed is not None:
        for entry in reversed(sort_entries(entries)):
            coerced = coerce_version(entry.version)
            if coerced is None:
                logger.debug(f"Skipping version that cannot be coerced: {entry.version!r}")
                continue
            if parsed.match(coerced):
                version = entry.version
                break

    if version:
        logger.debug(f"matched: {version}")
    else:
        logger.debug("match not found")

    return version


__all__ = [
    "compare_entries",
    "sort_entries",
    "match",
]
