"""
Acquisition pipeline: download, extract and cache one exact release.

The release archive is ``{mirror}/v{version}/{stem}{ext}`` where the stem is
``node-v{version}-{os}-{arch}`` (``win`` instead of the OS on Windows) and the
extension is ``.7z`` on Windows, ``.tar.gz`` elsewhere. The archive unpacks
into a single directory named after the stem, which becomes the cached tree.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Optional

from nodesetup.core.download import Downloader
from nodesetup.core.filesystem import ArchiveLayoutError, extract_7z, extract_tar
from nodesetup.core.platform import PlatformInfo
from nodesetup.core.semver import clean_version
from nodesetup.installer.legacy import LegacyLayout, acquire_fallback, get_legacy_layout

logger = logging.getLogger(__name__)

TOOL_NAME = "node"


class NodeAcquirer:
    """
    Downloads a release and installs it into the tool cache.

    Example:
        >>> acquirer = NodeAcquirer(platform, ToolCache(), "https://nodejs.org/dist",
        ...                         Downloader(work_dir), work_dir)
        >>> acquirer.acquire("18.17.0")
        PosixPath('/home/user/.nodesetup/tools/node/18.17.0/x64')
    """

    def __init__(
        self,
        platform: PlatformInfo,
        cache,
        mirror: str,
        downloader: Downloader,
        work_dir: Path,
        seven_zip_path: Optional[Path] = None,
        legacy_layout: Optional[LegacyLayout] = None,
    ):
        """
        Initialize acquirer.

        Args:
            platform: Target platform
            cache: Tool cache (``cache_dir(source, tool, version, arch)``)
            mirror: Distribution base URL
            downloader: Transport returning DownloadOutcome values
            work_dir: Scratch directory for extraction and legacy downloads
            seven_zip_path: Optional 7-Zip executable for .7z archives
            legacy_layout: Fallback layout (default: the one registered for
                the platform's OS, if any)
        """
        self.platform = platform
        self.cache = cache
        self.mirror = mirror.rstrip("/")
        self.downloader = downloader
        self.work_dir = Path(work_dir)
        self.seven_zip_path = seven_zip_path
        self.legacy_layout = legacy_layout or get_legacy_layout(platform)

    def archive_url(self, version: str) -> str:
        stem = self.platform.archive_stem(version)
        return f"{self.mirror}/v{version}/{stem}{self.platform.archive_extension}"

    def acquire(self, version: str) -> Path:
        """
        Download, extract and cache ``version``.

        A not-found archive hands over to the legacy fallback when the
        platform has one; every other failure propagates.

        Args:
            version: Exact version (a leading 'v' or '=' is stripped)

        Returns:
            Cached installation root

        Raises:
            TransportNotFoundError: Archive missing and no fallback succeeded
            TransportError: Download failed
            ArchiveExtractionError: Archive could not be extracted
            ArchiveLayoutError: Archive lacks the expected top-level directory
            CacheError: Cache insert failed
        """
        version = clean_version(version) or ""
        stem = self.platform.archive_stem(version)
        url = self.archive_url(version)

        start_time = time.time()
        outcome = self.downloader.download(url)

        if outcome.not_found:
            if self.legacy_layout is None:
                outcome.unwrap()
            logger.info(f"Archive not found at {url}, trying legacy locations")
            return acquire_fallback(
                version,
                self.platform,
                self.cache,
                self.mirror,
                self.downloader,
                self.work_dir,
                self.legacy_layout,
            )

        archive_path = outcome.unwrap()
        logger.info(f"Download complete in {time.time() - start_time:.2f}s")

        extract_dir = self._extract(archive_path)

        tool_root = extract_dir / stem
        if not tool_root.is_dir():
            raise ArchiveLayoutError(
                f"Expected directory '{stem}' in extracted archive {archive_path}"
            )

        return self.cache.cache_dir(tool_root, TOOL_NAME, version, self.platform.arch)

    def _extract(self, archive_path: Path) -> Path:
        destination = self.work_dir / str(uuid.uuid4())
        logger.info(f"Extracting to: {destination}")

        if self.platform.is_windows:
            return extract_7z(archive_path, destination, self.seven_zip_path)
        return extract_tar(archive_path, destination)


__all__ = ["TOOL_NAME", "NodeAcquirer"]
