"""
Core functionality for nodesetup.

This package contains the foundational modules that other components depend on.
"""

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .download import (
    Downloader,
    DownloadOutcome,
    DownloadStatus,
    DownloadProgress,
)

from .config import (
    InstallerConfig,
    load_config,
)

from .exceptions import (
    NodeSetupError,
    ConfigError,
    PlatformError,
    UnsupportedPlatformError,
    ResolutionError,
    NotFoundError,
    CatalogError,
    TransportError,
    TransportNotFoundError,
    CacheError,
    CacheLockTimeout,
)

__all__ = [
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "Downloader",
    "DownloadOutcome",
    "DownloadStatus",
    "DownloadProgress",
    "InstallerConfig",
    "load_config",
    "NodeSetupError",
    "ConfigError",
    "PlatformError",
    "UnsupportedPlatformError",
    "ResolutionError",
    "NotFoundError",
    "CatalogError",
    "TransportError",
    "TransportNotFoundError",
    "CacheError",
    "CacheLockTimeout",
]
