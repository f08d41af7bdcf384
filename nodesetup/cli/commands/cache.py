"""
Cache command: list versions installed in the local tool cache.
"""

import logging

from nodesetup.cache.tool_cache import ToolCache
from nodesetup.cli.utils import build_config
from nodesetup.core.platform import detect_platform
from nodesetup.core.semver import coerce_version

logger = logging.getLogger(__name__)


def run(args) -> int:
    """Run the cache command."""
    config = build_config(args)
    cache = ToolCache(config.cache_dir)
    arch = detect_platform().arch

    versions = cache.find_all_versions(args.tool, arch)
    if not versions:
        logger.info(f"No cached {args.tool} versions for {arch} in {cache.root}")
        return 0

    versions.sort(key=lambda v: coerce_version(v) or coerce_version("0"))
    for version in versions:
        print(f"{version:<12} {cache.find(args.tool, version, arch)}")
    return 0
