"""
Render package.

Both renderers read the same Topology and never modify it.
"""

from rondb_compose.render.compose import ComposeRenderer, ServiceDescriptor
from rondb_compose.render.config import ConfigRenderer, ConfigSlot

__all__ = ["ComposeRenderer", "ConfigRenderer", "ConfigSlot", "ServiceDescriptor"]
