"""structlog setup for the CLI and the MCP server.

Everything goes to stderr: stdout carries the stdio transport's JSON-RPC
stream and the CLI's results. ``--log-json`` switches the console renderer
for JSON lines. Lines logged while serving an SSE client carry that
client's ``session_id`` (see :func:`session_context`).
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from typing import Any

import structlog

# logger name -> (normal level, verbose level)
_LIBRARY_LEVELS: dict[str, tuple[int, int]] = {
    "mcp": (logging.WARNING, logging.INFO),
    "uvicorn.error": (logging.WARNING, logging.INFO),
    "uvicorn.access": (logging.WARNING, logging.DEBUG),
    "sse_starlette": (logging.WARNING, logging.INFO),
}

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _stderr_formatter(log_json: bool) -> structlog.stdlib.ProcessorFormatter:
    processors: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if log_json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=processors,
    )


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Args:
        verbose: DEBUG for ``cupsmcp`` and chattier MCP/uvicorn loggers.
            Otherwise only warnings (render fallbacks, cleanup failures).
        log_json: JSON lines instead of the console renderer.
    """
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_stderr_formatter(log_json))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("cupsmcp").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name, (normal, chatty) in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(chatty if verbose else normal)


def session_context(session_id: str) -> AbstractContextManager[Any]:
    """Bind *session_id* to every log line emitted inside the block.

    Tasks and worker threads started inside the block inherit the binding.
    """
    return structlog.contextvars.bound_contextvars(session_id=session_id)
