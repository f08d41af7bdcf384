"""
Shared CLI utilities.
"""

import logging

from nodesetup.core.config import InstallerConfig, load_config

logger = logging.getLogger(__name__)


def build_config(args) -> InstallerConfig:
    """
    Build installer configuration from parsed arguments.

    ``--config`` selects the YAML file; ``--mirror`` (where the command has
    it) overrides every other mirror source.
    """
    config = load_config(
        getattr(args, "config", None),
        mirror=getattr(args, "mirror", None),
    )
    logger.debug(f"Using mirror {config.mirror}, cache {config.cache_dir}")
    return config


__all__ = ["build_config"]
