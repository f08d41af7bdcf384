"""
Directory layout for nodesetup.

Global Cache (~/.nodesetup/ or %USERPROFILE%\\.nodesetup\\):
    - tools/   : Tool cache (installed runtime versions)
    - temp/    : Download and extraction scratch space
"""

import os
from pathlib import Path

from nodesetup.core.exceptions import ConfigError


def get_global_cache_dir() -> Path:
    """
    Get the platform-specific global cache directory path.

    Returns:
        Path: The global cache directory path.
            - Windows: %USERPROFILE%\\.nodesetup
            - Linux/macOS: ~/.nodesetup/

    Raises:
        ConfigError: If USERPROFILE is not set on Windows
    """
    if os.name == "nt":  # Windows
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise ConfigError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine global cache directory."
            )
        return Path(user_profile) / ".nodesetup"
    else:  # Linux/macOS
        return Path.home() / ".nodesetup"


def get_default_tool_cache_dir() -> Path:
    """Tool cache root: ``RUNNER_TOOL_CACHE`` if set, else ``<global>/tools``."""
    runner_cache = os.environ.get("RUNNER_TOOL_CACHE")
    if runner_cache:
        return Path(runner_cache)
    return get_global_cache_dir() / "tools"


def get_default_work_dir() -> Path:
    """Scratch root: ``RUNNER_TEMP`` if set, else ``<global>/temp``."""
    runner_temp = os.environ.get("RUNNER_TEMP")
    if runner_temp:
        return Path(runner_temp)
    return get_global_cache_dir() / "temp"


__all__ = [
    "get_global_cache_dir",
    "get_default_tool_cache_dir",
    "get_default_work_dir",
]
