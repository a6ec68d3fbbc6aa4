"""Wealth analytics engine and MCP server."""
