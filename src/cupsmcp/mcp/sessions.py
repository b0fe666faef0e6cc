"""Session registry for the SSE transport.

Maps session ids to the write side of each connected client's inbound
message stream. This table is the only mutable state shared between
concurrent sessions; every access goes through one lock.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field

import structlog
from anyio.streams.memory import MemoryObjectSendStream
from mcp.shared.message import SessionMessage

log = structlog.get_logger(__name__)


@dataclass
class SessionHandle:
    """Delivery endpoint for one SSE client."""

    session_id: str
    inbound: MemoryObjectSendStream[SessionMessage | Exception]
    messages_delivered: int = field(default=0, init=False)

    async def send(self, message: SessionMessage | Exception) -> None:
        await self.inbound.send(message)
        self.messages_delivered += 1


class SessionRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, SessionHandle] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def new_id(self) -> str:
        """Return a fresh id not present in the table."""
        while True:
            candidate = uuid.uuid4().hex
            with self._lock:
                if candidate not in self._sessions:
                    return candidate

    def register(self, handle: SessionHandle) -> None:
        with self._lock:
            if handle.session_id in self._sessions:
                msg = f"Session {handle.session_id} is already registered"
                raise KeyError(msg)
            self._sessions[handle.session_id] = handle
            active = len(self._sessions)
        log.info("session.opened", session_id=handle.session_id, active=active)

    def lookup(self, session_id: str) -> SessionHandle | None:
        with self._lock:
            return self._sessions.get(session_id)

    def unregister(self, session_id: str) -> bool:
        """Drop *session_id*. Returns False when it was not registered."""
        with self._lock:
            handle = self._sessions.pop(session_id, None)
            active = len(self._sessions)
        if handle is None:
            return False
        log.info(
            "session.closed",
            session_id=session_id,
            active=active,
            messages_delivered=handle.messages_delivered,
        )
        return True
