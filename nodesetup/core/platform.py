"""
Platform detection for nodesetup.

Detects the host operating system and CPU architecture once per process and
expresses them in the naming used by Node.js distributions (``linux``,
``darwin``, ``win32``; ``x64``, ``arm64``, ...). The resulting
:class:`PlatformInfo` is passed explicitly to the catalog client and the
acquisition pipeline instead of being read from global state.

Usage:
    from nodesetup.core.platform import detect_platform

    platform_info = detect_platform()
    print(platform_info.asset_id())      # 'linux-x64'
    print(platform_info.archive_stem("18.17.0"))
"""

import functools
import platform
from dataclasses import dataclass

from nodesetup.core.exceptions import UnsupportedPlatformError


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform in Node.js naming.

    Attributes:
        os: Operating system ('linux', 'darwin', 'win32', or raw lowercase name)
        arch: CPU architecture ('x64', 'arm64', 'arm', 'ia32', 'ppc64', 's390x')
    """

    os: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os == "win32"

    @property
    def archive_extension(self) -> str:
        """Extension of the primary distribution archive."""
        return ".7z" if self.is_windows else ".tar.gz"

    def asset_id(self) -> str:
        """
        Get the asset identifier listed in the catalog ``files`` field.

        Returns:
            Asset identifier (e.g. 'linux-x64', 'osx-arm64-tar', 'win-x64-exe')

        Raises:
            UnsupportedPlatformError: If the OS is not linux, darwin or win32

        Example:
            >>> PlatformInfo("darwin", "arm64").asset_id()
            'osx-arm64-tar'
        """
        if self.os == "linux":
            return f"linux-{self.arch}"
        elif self.os == "darwin":
            return f"osx-{self.arch}-tar"
        elif self.os == "win32":
            return f"win-{self.arch}-exe"
        raise UnsupportedPlatformError(self.os)

    def archive_stem(self, version: str) -> str:
        """
        Get the distribution file name without extension.

        The archive's top-level directory carries the same name.

        Example:
            >>> PlatformInfo("win32", "x64").archive_stem("12.0.0")
            'node-v12.0.0-win-x64'
        """
        if self.is_windows:
            return f"node-v{version}-win-{self.arch}"
        return f"node-v{version}-{self.os}-{self.arch}"

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo for the running interpreter
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        'win32', 'linux', 'darwin', or the lowercase system name otherwise
    """
    system = platform.system().lower()

    if system == "windows":
        return "win32"
    elif system == "linux":
        return "linux"
    elif system == "darwin":
        return "darwin"
    # Left unmapped; consumers raise UnsupportedPlatformError when it matters
    return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'ia32', 'arm', 'ppc64', 's390x'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86", "ia32"):
        return "ia32"
    elif machine.startswith("arm"):
        return "arm"
    elif machine.startswith("ppc64"):
        return "ppc64"
    elif machine == "s390x":
        return "s390x"
    else:
        # Return original for unknown architectures
        return machine


def clear_platform_cache():
    """
    Clear the platform detection cache.

    Forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
]
