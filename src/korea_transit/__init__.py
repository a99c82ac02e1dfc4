"""Korea Transit Package

Real-time Seoul subway, bus and bike-share information exposed as MCP
tools, with an HTTP server, a stdio server and a CLI.
"""

__version__ = "1.0.0"

from .core.config import Settings, load_settings
from .core.transit import TransitService

__all__ = ["Settings", "TransitService", "load_settings"]
