"""MCP (Model Context Protocol) server module for Seoul transit lookups.

This module exposes the transit tools over stdio through the MCP library
and over HTTP as JSON-RPC.
"""

from .server import TransitMCPServer, main

__all__ = ["TransitMCPServer", "main"]
