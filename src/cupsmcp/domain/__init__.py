"""Domain layer: access policy, print options, page math, and errors.

This layer depends only on stdlib. It must never import from services,
infrastructure, commands, mcp, or output.
"""
