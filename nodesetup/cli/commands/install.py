"""
Install command: resolve a spec, install it and register it on PATH.
"""

import logging

from nodesetup.cli.utils import build_config
from nodesetup.installer.resolver import create_resolver

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = build_config(args)
    resolver = create_resolver(config)

    if args.no_path:
        tool_path = resolver.resolve(args.spec)
    else:
        tool_path = resolver.install(args.spec)

    print(tool_path)
    return 0
