"""SSE transport: a Starlette app serving many MCP clients at once.

Routes:
  GET  /health   liveness probe
  GET  /sse      open a session; the first event names the message endpoint
  POST /message  deliver one JSON-RPC message to a session

Each ``/sse`` connection gets its own pair of memory streams and its own run
of the low-level MCP server loop. Inbound messages are routed through the
:class:`SessionRegistry` by session id, so sessions never see each other's
traffic.
"""

from __future__ import annotations

import math
from typing import Any

import anyio
import structlog
import uvicorn
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp import types
from mcp.shared.message import SessionMessage
from pydantic import ValidationError as PydanticValidationError
from sse_starlette import EventSourceResponse
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from cupsmcp.config.logging import session_context
from cupsmcp.config.settings import CupsSettings
from cupsmcp.mcp.sessions import SessionHandle, SessionRegistry

log = structlog.get_logger(__name__)

SESSION_HEADER = "X-Session-Id"
MESSAGE_PATH = "/message"

# Room for the JSON-RPC envelope around a base64 upload.
_ENVELOPE_ALLOWANCE = 64 * 1024


def max_message_bytes(upload_max_size: int) -> int:
    """Largest POST body that can still carry an upload within the size limit."""
    return math.ceil(upload_max_size * 4 / 3) + _ENVELOPE_ALLOWANCE


class SseEndpoint:
    """Raw ASGI endpoint for ``GET /sse``.

    Streams server-to-client messages as SSE events and runs the MCP server
    loop for the lifetime of the connection. The session is unregistered
    when either side goes away.
    """

    def __init__(self, server: Any, registry: SessionRegistry) -> None:
        self._server = server
        self._registry = registry

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        session_id = self._registry.new_id()

        inbound_writer: MemoryObjectSendStream[SessionMessage | Exception]
        inbound_reader: MemoryObjectReceiveStream[SessionMessage | Exception]
        inbound_writer, inbound_reader = anyio.create_memory_object_stream(0)
        outbound_writer: MemoryObjectSendStream[SessionMessage]
        outbound_reader: MemoryObjectReceiveStream[SessionMessage]
        outbound_writer, outbound_reader = anyio.create_memory_object_stream(0)
        event_writer: MemoryObjectSendStream[dict[str, Any]]
        event_reader: MemoryObjectReceiveStream[dict[str, Any]]
        event_writer, event_reader = anyio.create_memory_object_stream(0)

        async def pump_events() -> None:
            async with event_writer, outbound_reader:
                await event_writer.send(
                    {"event": "endpoint", "data": f"{MESSAGE_PATH}?session_id={session_id}"}
                )
                async for outgoing in outbound_reader:
                    await event_writer.send(
                        {
                            "event": "message",
                            "data": outgoing.message.model_dump_json(
                                by_alias=True, exclude_none=True
                            ),
                        }
                    )

        response = EventSourceResponse(
            content=event_reader,
            data_sender_callable=pump_events,
            headers={SESSION_HEADER: session_id},
        )

        self._registry.register(SessionHandle(session_id=session_id, inbound=inbound_writer))
        try:
            with session_context(session_id):
                await self._serve(scope, receive, send, response, inbound_reader, outbound_writer)
        finally:
            self._registry.unregister(session_id)
            await inbound_writer.aclose()
            await outbound_writer.aclose()

    async def _serve(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
        response: EventSourceResponse,
        inbound_reader: MemoryObjectReceiveStream[SessionMessage | Exception],
        outbound_writer: MemoryObjectSendStream[SessionMessage],
    ) -> None:
        low_level = self._server._mcp_server
        async with anyio.create_task_group() as tg:

            async def stream_response() -> None:
                await response(scope, receive, send)
                tg.cancel_scope.cancel()

            tg.start_soon(stream_response)
            await low_level.run(
                inbound_reader,
                outbound_writer,
                low_level.create_initialization_options(),
            )
            tg.cancel_scope.cancel()


def _session_id(request: Request) -> str | None:
    return request.headers.get(SESSION_HEADER) or request.query_params.get("session_id")


def create_http_app(
    server: Any,
    settings: CupsSettings,
    registry: SessionRegistry | None = None,
) -> Starlette:
    """Build the Starlette app serving *server* over SSE."""
    sessions = registry if registry is not None else SessionRegistry()
    limit = max_message_bytes(settings.upload.max_size)

    async def health(request: Request) -> Response:
        return JSONResponse({"status": "healthy", "server": "cupsmcp", "transport": "sse"})

    async def handle_message(request: Request) -> Response:
        session_id = _session_id(request)
        if not session_id:
            return Response("session_id is required", status_code=400)

        handle = sessions.lookup(session_id)
        if handle is None:
            return Response("Could not find session", status_code=404)

        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > limit:
            return Response("Message too large", status_code=413)
        body = await request.body()
        if len(body) > limit:
            return Response("Message too large", status_code=413)

        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except PydanticValidationError:
            log.info("session.bad_message", session_id=session_id)
            return Response("Could not parse message", status_code=400)

        try:
            await handle.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            sessions.unregister(session_id)
            return Response("Could not find session", status_code=404)
        return Response("Accepted", status_code=202)

    app = Starlette(
        routes=[
            Route("/health", endpoint=health, methods=["GET"]),
            Route("/sse", endpoint=SseEndpoint(server, sessions), methods=["GET"]),
            Route(MESSAGE_PATH, endpoint=handle_message, methods=["POST"]),
        ]
    )
    app.state.sessions = sessions
    return app


def serve_http(server: Any, settings: CupsSettings, *, host: str, port: int) -> None:
    """Run the SSE app under uvicorn until interrupted."""
    app = create_http_app(server, settings)
    config = uvicorn.Config(app, host=host, port=port, log_config=None)
    log.info("server.listening", host=host, port=port, transport="sse")
    anyio.run(uvicorn.Server(config).serve)
