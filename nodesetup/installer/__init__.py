"""
Node.js version resolution and installation.

Catalog lookup, version matching, archive acquisition with legacy fallback,
and the resolver tying them to the tool cache.
"""

from .models import CatalogEntry
from .matcher import compare_entries, sort_entries, match
from .catalog import CatalogClient
from .legacy import (
    LegacyAsset,
    LegacyLayout,
    WindowsLegacyLayout,
    get_legacy_layout,
    register_legacy_layout,
    acquire_fallback,
)
from .acquisition import NodeAcquirer
from .resolver import NodeResolver, add_path, create_resolver

__all__ = [
    "CatalogEntry",
    "compare_entries",
    "sort_entries",
    "match",
    "CatalogClient",
    "LegacyAsset",
    "LegacyLayout",
    "WindowsLegacyLayout",
    "get_legacy_layout",
    "register_legacy_layout",
    "acquire_fallback",
    "NodeAcquirer",
    "NodeResolver",
    "add_path",
    "create_resolver",
]
