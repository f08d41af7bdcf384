"""
Centralized exception hierarchy for nodesetup.

This module defines all custom exceptions used across the codebase
so that callers can tell terminal resolution failures apart from
recoverable transport conditions.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class NodeSetupError(Exception):
    """Base exception for all nodesetup errors."""

    pass


class ConfigError(NodeSetupError):
    """Invalid or unreadable configuration."""

    pass


# ============================================================================
# Platform Exceptions
# ============================================================================


class PlatformError(NodeSetupError):
    """Base exception for platform-related errors."""

    pass


class UnsupportedPlatformError(PlatformError):
    """Raised when the host OS is not one of the recognized families."""

    def __init__(self, os_name: str):
        self.os_name = os_name
        super().__init__(f"Unexpected OS '{os_name}'")


# ============================================================================
# Resolution Exceptions
# ============================================================================


class ResolutionError(NodeSetupError):
    """Base exception for version resolution errors."""

    pass


class NotFoundError(ResolutionError):
    """Raised when no published version satisfies a spec for this platform."""

    def __init__(self, spec: str, os_name: str, arch: str):
        self.spec = spec
        self.os_name = os_name
        self.arch = arch
        super().__init__(
            f"Unable to find Node version '{spec}' for platform {os_name} "
            f"and architecture {arch}."
        )


class CatalogError(ResolutionError):
    """Raised when the remote version catalog cannot be interpreted."""

    pass


# ============================================================================
# Transport Exceptions
# ============================================================================


class TransportError(NodeSetupError):
    """Network or download failure that is not recovered locally."""

    def __init__(
        self, message: str, url: str = "", status_code: Optional[int] = None
    ):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class TransportNotFoundError(TransportError):
    """Raised for HTTP 404; the only transport failure that triggers a fallback."""

    def __init__(self, url: str):
        super().__init__(f"Unexpected HTTP response: 404 for {url}", url, 404)


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(NodeSetupError):
    """Base exception for tool cache errors."""

    pass


class CacheLockTimeout(CacheError):
    """Raised when a cache entry lock cannot be acquired within timeout."""

    pass
