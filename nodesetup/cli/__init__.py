"""
nodesetup CLI module.

This module provides the command-line interface for nodesetup.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
