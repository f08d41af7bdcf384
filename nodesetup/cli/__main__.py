"""
Entry point for running nodesetup CLI as a module.

Usage: python -m nodesetup.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
