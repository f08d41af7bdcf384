"""
Entry point for running nodesetup CLI as a module.

Usage: python -m nodesetup [command] [options]
"""

from nodesetup.cli.parser import main

if __name__ == "__main__":
    main()
