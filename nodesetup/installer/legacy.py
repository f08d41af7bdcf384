"""
Fallback acquisition from legacy loose-file layouts.

Some early releases publish no archive for a platform. Instead the runtime
binary and its import library sit as plain files next to the release, in one
of two places. For a Windows x64 release these are tried in order::

    {mirror}/v5.10.1/win-x64/node.exe   {mirror}/v5.10.1/win-x64/node.lib
    {mirror}/v0.12.18/node.exe          {mirror}/v0.12.18/node.lib

A :class:`LegacyLayout` names these tiers for one platform family. Layouts are
looked up by OS in a small registry; an OS without a layout has no fallback.
"""

import logging
import secrets
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from nodesetup.core.download import Downloader, DownloadOutcome
from nodesetup.core.exceptions import TransportError
from nodesetup.core.platform import PlatformInfo

logger = logging.getLogger(__name__)

TEMP_DIR_PREFIX = "temp_"
TEMP_DIR_RANGE = 2_000_000_000


@dataclass(frozen=True)
class LegacyAsset:
    """One loose file to fetch and the name it is installed under."""

    url: str
    name: str


class LegacyLayout(ABC):
    """
    Abstract base class for legacy asset layouts.

    A layout returns its candidate locations as tiers. Every asset of a tier
    must download for the tier to succeed; a not-found response moves on to
    the next tier.
    """

    @abstractmethod
    def candidates(
        self, mirror: str, version: str, platform: PlatformInfo
    ) -> List[List[LegacyAsset]]:
        """
        Get the tiers of assets to try, most specific first.

        Args:
            mirror: Distribution base URL (no trailing slash)
            version: Exact version without a leading 'v'
            platform: Target platform

        Returns:
            Non-empty list of tiers, each a list of assets
        """
        pass


class WindowsLegacyLayout(LegacyLayout):
    """``node.exe`` and ``node.lib`` under ``win-{arch}/``, then at the release root."""

    FILES = ("node.exe", "node.lib")

    def candidates(
        self, mirror: str, version: str, platform: PlatformInfo
    ) -> List[List[LegacyAsset]]:
        bases = [
            f"{mirror}/v{version}/win-{platform.arch}",
            f"{mirror}/v{version}",
        ]
        return [
            [LegacyAsset(f"{base}/{name}", name) for name in self.FILES]
            for base in bases
        ]


# ============================================================================
# Layout Registry
# ============================================================================

_layouts: Dict[str, LegacyLayout] = {
    "win32": WindowsLegacyLayout(),
}


def register_legacy_layout(os_name: str, layout: LegacyLayout) -> None:
    """
    Register (or replace) the legacy layout for an OS.

    Raises:
        TypeError: If layout is not a LegacyLayout instance

    Example:
        register_legacy_layout("linux", MyLinuxLayout())
    """
    if not isinstance(layout, LegacyLayout):
        raise TypeError(f"layout must be LegacyLayout instance, got {type(layout)}")
    _layouts[os_name] = layout


def unregister_legacy_layout(os_name: str) -> None:
    _layouts.pop(os_name, None)


def get_legacy_layout(platform: PlatformInfo) -> Optional[LegacyLayout]:
    """Legacy layout for the platform's OS, or None if it has no fallback."""
    return _layouts.get(platform.os)


# ============================================================================
# Fallback Acquisition
# ============================================================================


def create_temp_dir(work_dir: Path) -> Path:
    """Create a fresh ``temp_<random>`` directory under ``work_dir``."""
    suffix = secrets.randbelow(TEMP_DIR_RANGE)
    temp_dir = Path(work_dir) / f"{TEMP_DIR_PREFIX}{suffix}"
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir


def _fetch_tier(
    tier: List[LegacyAsset], downloader: Downloader, temp_dir: Path
) -> Optional[DownloadOutcome]:
    """Download every asset of a tier; return the first failed outcome, if any."""
    for asset in tier:
        outcome = downloader.download(asset.url)
        if not outcome.ok:
            return outcome
        shutil.copy2(outcome.path, temp_dir / asset.name)
    return None


def acquire_fallback(
    version: str,
    platform: PlatformInfo,
    cache,
    mirror: str,
    downloader: Downloader,
    work_dir: Path,
    layout: LegacyLayout,
) -> Path:
    """
    Install a release from its legacy loose files.

    Args:
        version: Exact version without a leading 'v'
        platform: Target platform
        cache: Tool cache receiving the installed directory
        mirror: Distribution base URL
        downloader: Transport
        work_dir: Parent of the temporary download directory
        layout: Legacy layout naming the tiers to try

    Returns:
        Cached installation path holding the canonically named files

    Raises:
        TransportNotFoundError: If the last tier is not found either
        TransportError: For any other download failure, in any tier
    """
    temp_dir = create_temp_dir(work_dir)
    logger.debug(f"Legacy download directory: {temp_dir}")

    tiers = layout.candidates(mirror, version, platform)
    if not tiers:
        raise TransportError(f"No legacy locations known for {version} on {platform}")

    for index, tier in enumerate(tiers):
        failed = _fetch_tier(tier, downloader, temp_dir)
        if failed is None:
            break
        if failed.not_found and index < len(tiers) - 1:
            logger.info(f"Not found at {failed.url}, trying next legacy location")
            continue
        failed.unwrap()

    # Partially downloaded temp dirs are left for external cleanup
    return cache.cache_dir(temp_dir, "node", version, platform.arch)


__all__ = [
    "LegacyAsset",
    "LegacyLayout",
    "WindowsLegacyLayout",
    "register_legacy_layout",
    "unregister_legacy_layout",
    "get_legacy_layout",
    "create_temp_dir",
    "acquire_fallback",
]
