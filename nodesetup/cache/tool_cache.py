"""
On-disk tool cache for installed runtime versions.

Layout under the cache root::

    <root>/<tool>/<version>/<arch>/            installed tree
    <root>/<tool>/<version>/<arch>.complete    marker written after a full insert

An entry only counts as cached once its marker exists, so a half-copied tree
left behind by an interrupted process is never returned. Inserts on the same
key are serialized with a file lock; the last writer wins.
"""

import logging
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

from filelock import FileLock, Timeout

from nodesetup.core.directory import get_default_tool_cache_dir
from nodesetup.core.exceptions import CacheError, CacheLockTimeout
from nodesetup.core.filesystem import (
    FilesystemError,
    recursive_copy,
    safe_rmtree,
)
from nodesetup.core.semver import clean_version, max_satisfying

logger = logging.getLogger(__name__)

COMPLETE_SUFFIX = ".complete"


class ToolCache:
    """
    Find and insert tool installations keyed by ``(tool, version, arch)``.

    Example:
        >>> cache = ToolCache(Path("/opt/hostedtoolcache"))
        >>> cache.find("node", "18.17.0", "x64")
        PosixPath('/opt/hostedtoolcache/node/18.17.0/x64')
        >>> cache.find("node", "^18", "x64")  # best locally cached match
        PosixPath('/opt/hostedtoolcache/node/18.17.0/x64')
    """

    def __init__(self, root: Optional[Path] = None, lock_timeout: int = 300):
        """
        Initialize tool cache.

        Args:
            root: Cache root (default: RUNNER_TOOL_CACHE or ~/.nodesetup/tools)
            lock_timeout: Seconds to wait for another process inserting the same key
        """
        self.root = Path(root) if root is not None else get_default_tool_cache_dir()
        self.lock_dir = self.root / ".lock"
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized tool cache at {self.root}")

    def _version_dir(self, tool: str, version: str) -> Path:
        return self.root / tool / version

    def _entry_dir(self, tool: str, version: str, arch: str) -> Path:
        return self._version_dir(tool, version) / arch

    def _marker(self, tool: str, version: str, arch: str) -> Path:
        return self._version_dir(tool, version) / f"{arch}{COMPLETE_SUFFIX}"

    def _require_exact(self, version: str) -> str:
        cleaned = clean_version(version)
        if not cleaned:
            raise CacheError(f"Cache keys need an exact version, got '{version}'")
        return cleaned

    @contextmanager
    def _lock(self, tool: str, version: str, arch: str):
        """
        Acquire the insert lock for one cache key.

        Raises:
            CacheLockTimeout: If lock cannot be acquired within timeout
        """
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        lock_path = self.lock_dir / f"{tool}-{version}-{arch}.lock"
        lock = FileLock(lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                logger.debug(f"Acquired cache lock: {lock_path}")
                yield
            logger.debug(f"Released cache lock: {lock_path}")
        except Timeout as e:
            raise CacheLockTimeout(
                f"Could not acquire cache lock for {tool} {version} ({arch}) "
                f"within {self.lock_timeout} seconds"
            ) from e

    def find(self, tool: str, version_spec: str, arch: str) -> Optional[Path]:
        """
        Find a cached installation.

        An exact version is looked up directly; a range resolves to the highest
        locally cached version that satisfies it.

        Args:
            tool: Tool name (e.g. "node")
            version_spec: Exact version or npm range
            arch: Architecture key

        Returns:
            Installed path, or None when not cached
        """
        if not tool:
            raise ValueError("Tool name cannot be empty")
        if not version_spec:
            raise ValueError("Version spec cannot be empty")

        version = clean_version(version_spec)
        if version is None:
            local_versions = self.find_all_versions(tool, arch)
            version = max_satisfying(local_versions, version_spec)
            if version is None:
                logger.debug(f"No cached {tool} satisfies '{version_spec}' ({arch})")
                return None

        entry = self._entry_dir(tool, version, arch)
        if entry.is_dir() and self._marker(tool, version, arch).is_file():
            logger.debug(f"Found tool in cache {tool} {version} {arch}")
            return entry

        logger.debug(f"Not found in cache: {tool} {version} {arch}")
        return None

    def find_all_versions(self, tool: str, arch: str) -> List[str]:
        """
        List every fully cached version of a tool for an architecture.

        Returns:
            Version strings in directory order
        """
        tool_dir = self.root / tool
        if not tool_dir.is_dir():
            return []

        versions = []
        for child in sorted(tool_dir.iterdir()):
            if not child.is_dir() or child.name.startswith("."):
                continue
            if (child / arch).is_dir() and (child / f"{arch}{COMPLETE_SUFFIX}").is_file():
                versions.append(child.name)
        return versions

    def cache_dir(self, source_dir: Path, tool: str, version: str, arch: str) -> Path:
        """
        Install the contents of ``source_dir`` into the cache.

        Args:
            source_dir: Directory whose contents become the cached tree
            tool: Tool name
            version: Exact version (cleaned before use)
            arch: Architecture key

        Returns:
            Path of the cached tree

        Raises:
            CacheError: If the source is not a directory or copying fails
            CacheLockTimeout: If another process holds the key too long
        """
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            raise CacheError(f"Source is not a directory: {source_dir}")

        version = self._require_exact(version)
        logger.info(f"Caching tool {tool} {version} {arch}")
        logger.debug(f"source dir: {source_dir}")

        with self._lock(tool, version, arch):
            entry = self._create_entry(tool, version, arch)
            try:
                recursive_copy(source_dir, entry)
            except (FilesystemError, OSError) as e:
                raise CacheError(f"Failed to cache {tool} {version}: {e}") from e
            self._complete_entry(tool, version, arch)

        return entry

    def cache_file(
        self,
        source_file: Path,
        target_name: str,
        tool: str,
        version: str,
        arch: str,
    ) -> Path:
        """
        Install a single file into the cache under ``target_name``.

        Returns:
            Path of the cached tree (the directory holding the file)
        """
        source_file = Path(source_file)
        if not source_file.is_file():
            raise CacheError(f"Source is not a file: {source_file}")

        version = self._require_exact(version)
        logger.info(f"Caching tool {tool} {version} {arch}")

        with self._lock(tool, version, arch):
            entry = self._create_entry(tool, version, arch)
            try:
                shutil.copy2(source_file, entry / target_name)
            except OSError as e:
                raise CacheError(f"Failed to cache {tool} {version}: {e}") from e
            self._complete_entry(tool, version, arch)

        return entry

    def _create_entry(self, tool: str, version: str, arch: str) -> Path:
        entry = self._entry_dir(tool, version, arch)
        marker = self._marker(tool, version, arch)

        # Replace whatever an earlier insert left behind
        marker.unlink(missing_ok=True)
        try:
            safe_rmtree(entry, require_prefix=self.root)
            entry.mkdir(parents=True, exist_ok=True)
        except (FilesystemError, OSError) as e:
            raise CacheError(f"Failed to prepare cache entry {entry}: {e}") from e
        return entry

    def _complete_entry(self, tool: str, version: str, arch: str) -> None:
        self._marker(tool, version, arch).touch()
        logger.debug("finished caching tool")


__all__ = ["COMPLETE_SUFFIX", "ToolCache"]
