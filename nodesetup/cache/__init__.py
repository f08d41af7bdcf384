"""
Local artifact cache for installed runtime versions.
"""

from .tool_cache import ToolCache, COMPLETE_SUFFIX

__all__ = ["ToolCache", "COMPLETE_SUFFIX"]
