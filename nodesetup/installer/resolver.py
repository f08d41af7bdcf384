"""
Resolve a version spec to an installed Node.js runtime.

Usage:
    from nodesetup.core.config import load_config
    from nodesetup.installer.resolver import create_resolver

    resolver = create_resolver(load_config())
    bin_dir = resolver.install("^18.0.0")
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import requests

from nodesetup.cache.tool_cache import ToolCache
from nodesetup.core.config import InstallerConfig
from nodesetup.core.download import Downloader
from nodesetup.core.exceptions import NotFoundError
from nodesetup.core.platform import PlatformInfo, detect_platform
from nodesetup.core.semver import is_exact_version
from nodesetup.installer.acquisition import TOOL_NAME, NodeAcquirer
from nodesetup.installer.catalog import CatalogClient

logger = logging.getLogger(__name__)

GITHUB_PATH_ENV = "GITHUB_PATH"


class NodeResolver:
    """
    Turns a version spec into an execution directory.

    Order of lookups: cache by the literal spec, then the exact version
    (either the spec itself or the catalog's best match), then acquisition.
    """

    def __init__(
        self,
        platform: PlatformInfo,
        cache,
        catalog: CatalogClient,
        acquirer: NodeAcquirer,
    ):
        self.platform = platform
        self.cache = cache
        self.catalog = catalog
        self.acquirer = acquirer

    def resolve(self, spec: str) -> Path:
        """
        Find or install a runtime satisfying ``spec``.

        Args:
            spec: Exact version or npm range

        Returns:
            Directory containing the node executable

        Raises:
            NotFoundError: If no published version satisfies the spec
            TransportError: If a download fails
        """
        if not spec or not spec.strip():
            raise ValueError("Version spec cannot be empty")

        arch = self.platform.arch
        tool_path = self.cache.find(TOOL_NAME, spec, arch)

        if tool_path:
            logger.info(f"Found in cache @ {tool_path}")
        else:
            if is_exact_version(spec):
                version = spec
            else:
                version = self.catalog.query_latest_match(spec)
                if not version:
                    raise NotFoundError(spec, self.platform.os, arch)
                logger.info(f"Resolved '{spec}' to {version}")
                tool_path = self.cache.find(TOOL_NAME, version, arch)

            if not tool_path:
                logger.info(f"Acquiring {version} for {self.platform}")
                tool_path = self.acquirer.acquire(version)

        tool_path = Path(tool_path)
        if not self.platform.is_windows:
            tool_path = tool_path / "bin"
        return tool_path

    def install(self, spec: str) -> Path:
        """Resolve ``spec`` and put the result on PATH."""
        tool_path = self.resolve(spec)
        add_path(tool_path)
        return tool_path


def add_path(directory: Union[str, Path]) -> None:
    """
    Prepend a directory to PATH for this process and later CI steps.

    When ``GITHUB_PATH`` names a file, the directory is appended to it as
    one line.
    """
    directory = str(directory)
    current = os.environ.get("PATH", "")
    os.environ["PATH"] = f"{directory}{os.pathsep}{current}" if current else directory

    path_file = os.environ.get(GITHUB_PATH_ENV)
    if path_file:
        with open(path_file, "a", encoding="utf-8") as f:
            f.write(f"{directory}\n")

    logger.info(f"Added to PATH: {directory}")


def create_resolver(
    config: InstallerConfig,
    platform: Optional[PlatformInfo] = None,
    session: Optional[requests.Session] = None,
) -> NodeResolver:
    """
    Wire a resolver from configuration.

    Args:
        config: Installer settings
        platform: Target platform (default: detected host)
        session: Optional requests session shared by catalog and downloads

    Returns:
        NodeResolver
    """
    platform = platform or detect_platform()
    session = session or requests.Session()

    cache = ToolCache(config.cache_dir)
    catalog = CatalogClient(
        platform, config.mirror, session=session, timeout=config.timeout
    )
    downloader = Downloader(config.work_dir, timeout=config.timeout, session=session)
    acquirer = NodeAcquirer(
        platform,
        cache,
        config.mirror,
        downloader,
        config.work_dir,
        seven_zip_path=config.seven_zip_path,
    )
    return NodeResolver(platform, cache, catalog, acquirer)


__all__ = ["NodeResolver", "add_path", "create_resolver"]
