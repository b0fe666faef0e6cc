"""cupsmcp: remote printing over MCP, backed by CUPS."""

__version__ = "0.1.0"
