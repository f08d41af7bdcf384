"""
Installer configuration.

Settings are layered in increasing precedence:
defaults < YAML file < environment variables < explicit overrides.

YAML layout (either at top level or under a ``node:`` key)::

    node:
      mirror: https://nodejs.org/dist
      cache_dir: ~/.nodesetup/tools
      work_dir: /tmp/nodesetup
      timeout: 60
      seven_zip_path: C:/tools/7zr.exe
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from nodesetup.core.directory import get_default_tool_cache_dir, get_default_work_dir
from nodesetup.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MIRROR = "https://nodejs.org/dist"
DEFAULT_CONFIG_FILE = "nodesetup.yaml"

ENV_MIRROR = "NODESETUP_MIRROR"
ENV_TIMEOUT = "NODESETUP_TIMEOUT"
ENV_SEVEN_ZIP = "NODESETUP_7Z_PATH"


@dataclass(frozen=True)
class InstallerConfig:
    """Resolved installer settings."""

    mirror: str = DEFAULT_MIRROR
    cache_dir: Path = field(default_factory=get_default_tool_cache_dir)
    work_dir: Path = field(default_factory=get_default_work_dir)
    timeout: Optional[float] = None
    seven_zip_path: Optional[Path] = None

    def __post_init__(self):
        if not self.mirror:
            raise ConfigError("Mirror URL cannot be empty")
        if not isinstance(self.mirror, str):
            raise ConfigError(f"Mirror must be a string, got {self.mirror!r}")
        if not self.mirror.startswith(("http://", "https://", "file://")):
            raise ConfigError(f"Mirror must be an http(s) URL: {self.mirror}")
        # Normalize so URLs can be joined with '/'
        object.__setattr__(self, "mirror", self.mirror.rstrip("/"))
        object.__setattr__(self, "cache_dir", Path(self.cache_dir).expanduser())
        object.__setattr__(self, "work_dir", Path(self.work_dir).expanduser())
        if self.seven_zip_path is not None:
            object.__setattr__(
                self, "seven_zip_path", Path(self.seven_zip_path).expanduser()
            )
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")


def _parse_timeout(value: Any, source: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid timeout in {source}: {value!r}")


def load_yaml_settings(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load installer settings from a YAML file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Settings dictionary (empty if the file is absent and not required)

    Raises:
        ConfigError: If the file is required but missing, or not valid YAML
    """
    config_file = Path(config_file)
    if not config_file.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {config_file}")

    section = data.get("node", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Expected 'node' to be a mapping in {config_file}")

    known = {f.name for f in fields(InstallerConfig)}
    unknown = set(section) - known
    if unknown:
        logger.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")

    settings = {k: v for k, v in section.items() if k in known}
    if "timeout" in settings:
        settings["timeout"] = _parse_timeout(settings["timeout"], str(config_file))
    return settings


def _env_settings() -> Dict[str, Any]:
    settings: Dict[str, Any] = {}
    if os.environ.get(ENV_MIRROR):
        settings["mirror"] = os.environ[ENV_MIRROR]
    if os.environ.get(ENV_TIMEOUT):
        settings["timeout"] = _parse_timeout(os.environ[ENV_TIMEOUT], ENV_TIMEOUT)
    if os.environ.get(ENV_SEVEN_ZIP):
        settings["seven_zip_path"] = Path(os.environ[ENV_SEVEN_ZIP])
    return settings


def load_config(
    config_file: Optional[Path] = None, **overrides: Any
) -> InstallerConfig:
    """
    Build the installer configuration.

    Args:
        config_file: Optional YAML file; when None, ``./nodesetup.yaml`` is
            read if present
        **overrides: Explicit values (e.g. from the CLI); None is ignored

    Returns:
        InstallerConfig

    Example:
        >>> config = load_config(mirror="https://nodejs.org/download/release")
        >>> config.mirror
        'https://nodejs.org/download/release'
    """
    if config_file is None:
        settings = load_yaml_settings(Path.cwd() / DEFAULT_CONFIG_FILE)
    else:
        settings = load_yaml_settings(config_file, required=True)

    settings.update(_env_settings())
    settings.update({k: v for k, v in overrides.items() if v is not None})

    return InstallerConfig(**settings)


__all__ = [
    "DEFAULT_MIRROR",
    "InstallerConfig",
    "load_yaml_settings",
    "load_config",
]
