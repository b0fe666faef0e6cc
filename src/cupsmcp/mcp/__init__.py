"""MCP adapter: FastMCP tools and resources plus the SSE session transport."""
