# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Server-side session records and the registry that owns them.

A session is created by ``initialize`` and identified by the opaque token
returned in the ``Mcp-Session-Id`` header. It tracks two pieces of shared
mutable state:

- ``cursor``: the per-session SSE event counter. Every event written on any
  stream of the session (push channel or per-call stream) takes the next
  value, so ids never repeat across concurrent streams.
- ``subscribers``: the open push channels. Held weakly; the registry tracks
  membership only and never keeps a connection alive.

Both are mutated only under the session's lock, so the registry is safe to
share between the event loop and worker threads.

Sessions are never evicted. A long-running process accumulates them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
import threading
from typing import Any
import uuid
import weakref

from ..exceptions import SessionNotFoundError
from ..utils import get_logger


_logger = get_logger("streamable_mcp.sessions")


def generate_session_id() -> str:
    return str(uuid.uuid4())


@dataclass(eq=False)
class Session:
    id: str
    initialized: bool = False
    cursor: int = 0
    subscribers: weakref.WeakSet[Any] = field(default_factory=weakref.WeakSet, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def snapshot_subscribers(self) -> list[Any]:
        """Copy of the open push channels, safe to iterate while others mutate."""
        with self._lock:
            return list(self.subscribers)


class SessionRegistry:
    """Creates, looks up and mutates :class:`Session` records."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self) -> Session:
        with self._lock:
            session_id = generate_session_id()
            while session_id in self._sessions:
                session_id = generate_session_id()
            session = Session(id=session_id)
            self._sessions[session_id] = session
        _logger.info("session created", extra={"event": "session.create", "session_id": session_id})
        return session

    def get(self, session_id: str | None) -> Session:
        """Return the session or raise :class:`SessionNotFoundError`."""
        if not session_id:
            raise SessionNotFoundError(session_id)
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def mark_initialized(self, session: Session) -> None:
        with session._lock:
            if session.initialized:
                return
            session.initialized = True
        _logger.debug("session initialized", extra={"event": "session.initialized", "session_id": session.id})

    def next_sequence(self, session: Session) -> int:
        """Pre-increment the session cursor and return the new value."""
        with session._lock:
            session.cursor += 1
            return session.cursor

    def add_subscriber(self, session: Session, handle: Any) -> None:
        with session._lock:
            session.subscribers.add(handle)

    def remove_subscriber(self, session: Session, handle: Any) -> None:
        with session._lock:
            session.subscribers.discard(handle)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __iter__(self) -> Iterator[Session]:
        with self._lock:
            return iter(list(self._sessions.values()))


__all__ = ["Session", "SessionRegistry", "generate_session_id"]
