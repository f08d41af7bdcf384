"""
Versions command: list catalog versions for this platform.
"""

import logging

from nodesetup.cli.utils import build_config
from nodesetup.core.platform import detect_platform
from nodesetup.installer.catalog import CatalogClient
from nodesetup.installer.matcher import match, sort_entries

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the versions command.

    Without SPEC, prints the newest ``--limit`` versions published for this
    platform. With SPEC, prints the best match, failing when there is none.
    """
    config = build_config(args)
    platform = detect_platform()
    client = CatalogClient(platform, config.mirror, timeout=config.timeout)

    entries = client.platform_versions()

    if args.spec:
        version = match(entries, args.spec)
        if not version:
            logger.error(f"No version matches '{args.spec}' for {platform}")
            return 1
        print(version)
        return 0

    newest_first = list(reversed(sort_entries(entries)))
    if args.limit and args.limit > 0:
        newest_first = newest_first[: args.limit]

    for entry in newest_first:
        print(f"{entry.version:<12} {entry.date}")
    return 0
