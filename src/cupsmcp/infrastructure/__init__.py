"""Infrastructure layer: CUPS command-line tools, quarantine storage,
PDF inspection, and document renderers.

This layer may raise domain errors but must never import from services,
commands, mcp, or output.
"""
