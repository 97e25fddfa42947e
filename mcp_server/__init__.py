"""MCP server exposing the Messages archive and contacts as read-only tools."""
