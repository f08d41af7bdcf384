"""
nodesetup CLI argument parser.

This module implements the command-line interface for nodesetup using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("nodesetup")
except PackageNotFoundError:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """nodesetup command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="nodesetup",
            description="nodesetup - Resolve and install Node.js runtimes",
            epilog='Use "nodesetup COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"nodesetup {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./nodesetup.yaml)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_versions_command(subparsers)
        self._add_cache_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install a Node.js version",
            description="Resolve a version spec, install it if needed and add it to PATH",
        )
        parser.add_argument(
            "spec", metavar="SPEC", help="Exact version or npm range (e.g. ^18.0.0)"
        )
        parser.add_argument(
            "--mirror", metavar="URL", help="Distribution mirror base URL"
        )
        parser.add_argument(
            "--no-path",
            action="store_true",
            help="Only print the install location, do not register it on PATH",
        )

    def _add_versions_command(self, subparsers):
        """Add 'versions' subcommand."""
        parser = subparsers.add_parser(
            "versions",
            help="List published versions",
            description="List catalog versions available for this platform, "
            "or show the best match for SPEC",
        )
        parser.add_argument(
            "spec", metavar="SPEC", nargs="?", help="Optional npm range to match"
        )
        parser.add_argument(
            "--mirror", metavar="URL", help="Distribution mirror base URL"
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=20,
            metavar="N",
            help="Maximum number of versions to list [default: 20]",
        )

    def _add_cache_command(self, subparsers):
        """Add 'cache' subcommand."""
        parser = subparsers.add_parser(
            "cache",
            help="List cached versions",
            description="List versions installed in the local tool cache",
        )
        parser.add_argument(
            "--tool", default="node", metavar="NAME", help="Tool name [default: node]"
        )

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "nodesetup.cli.commands.install",
            "versions": "nodesetup.cli.commands.versions",
            "cache": "nodesetup.cli.commands.cache",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
