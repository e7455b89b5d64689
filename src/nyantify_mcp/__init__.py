"""Nyantify MCP: task completion notifications for coding agents."""

__version__ = "1.0.0"

__all__ = ["__version__"]
