"""ClickUp MCP - Model Context Protocol gateway for ClickUp task search."""

__version__ = "0.1.0"
