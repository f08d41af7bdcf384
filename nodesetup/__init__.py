"""
nodesetup - resolve a Node.js version spec and install the matching runtime.
"""

from nodesetup.core.config import InstallerConfig, load_config
from nodesetup.installer.resolver import NodeResolver, create_resolver

__all__ = ["InstallerConfig", "load_config", "NodeResolver", "create_resolver"]
