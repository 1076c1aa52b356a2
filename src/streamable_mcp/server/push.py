# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Persistent push channel (the GET-initiated SSE stream).

A channel moves through ``OPENING → OPEN → CLOSED``:

- entering ``OPEN`` writes one ``logging/message`` notification, registers the
  channel in the session's subscriber set and starts the keepalive
- while ``OPEN`` the channel relays payloads handed to :meth:`PushChannel.send`
  and writes a comment-only keepalive every ``keepalive_interval`` seconds,
  whether or not other events were written in between
- on disconnect :meth:`PushChannel.close` runs exactly once: it deregisters
  the channel and stops the keepalive; later sends are dropped

Every data event takes the next value of the session cursor, shared with all
other streams of the same session.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from enum import Enum
from typing import Any

import anyio

from ..envelope import log_message
from ..sse import SSEEvent, encode_comment
from ..utils import get_logger
from .sessions import Session, SessionRegistry


_logger = get_logger("streamable_mcp.push")


class ChannelState(str, Enum):
    OPENING = "opening"
    OPEN = "open"
    CLOSED = "closed"


class PushChannel:
    """One open GET stream for a session.

    Args:
        session: The session this channel belongs to.
        sessions: Registry that owns the session's cursor and subscriber set.
        keepalive_interval: Seconds between keepalive comments.
        keepalive_text: Comment body of each keepalive.
        buffer_size: Outbound events buffered before :meth:`send` drops.
    """

    def __init__(
        self,
        session: Session,
        sessions: SessionRegistry,
        *,
        keepalive_interval: float = 15.0,
        keepalive_text: str = "keepalive",
        buffer_size: int = 64,
    ) -> None:
        self.session = session
        self._sessions = sessions
        self._keepalive_interval = keepalive_interval
        self._keepalive_text = keepalive_text
        self._send_stream, self._receive_stream = anyio.create_memory_object_stream(max_buffer_size=buffer_size)
        self.state = ChannelState.OPENING
        self.keepalives_sent = 0

    @property
    def is_open(self) -> bool:
        return self.state is ChannelState.OPEN

    def open(self) -> SSEEvent:
        """Enter ``OPEN`` and return the greeting event to write first."""
        if self.state is not ChannelState.OPENING:
            raise RuntimeError(f"cannot open a channel in state {self.state.value}")
        greeting = SSEEvent(self._sessions.next_sequence(self.session), log_message("SSE stream opened"))
        self._sessions.add_subscriber(self.session, self)
        self.state = ChannelState.OPEN
        _logger.info("push channel opened", extra={"event": "push.open", "session_id": self.session.id})
        return greeting

    def send(self, payload: dict[str, Any]) -> bool:
        """Queue a server-initiated message. Returns False if it was dropped."""
        if self.state is not ChannelState.OPEN:
            return False
        event = SSEEvent(self._sessions.next_sequence(self.session), payload)
        try:
            self._send_stream.send_nowait(event)
        except anyio.WouldBlock:
            _logger.warning(
                "push channel buffer full; dropping event",
                extra={"event": "push.drop", "session_id": self.session.id, "sequence": event.sequence},
            )
            return False
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            return False
        return True

    def close(self) -> None:
        """Leave ``OPEN``: deregister and stop the keepalive. Idempotent."""
        if self.state is ChannelState.CLOSED:
            return
        was_open = self.state is ChannelState.OPEN
        self.state = ChannelState.CLOSED
        self._sessions.remove_subscriber(self.session, self)
        self._send_stream.close()
        self._receive_stream.close()
        if was_open:
            _logger.info(
                "push channel closed",
                extra={"event": "push.close", "session_id": self.session.id, "keepalives": self.keepalives_sent},
            )

    async def events(self) -> AsyncIterator[str]:
        """Encoded SSE frames for the lifetime of the channel."""
        try:
            next_keepalive = anyio.current_time() + self._keepalive_interval
            yield self.open().encode()
            while self.state is ChannelState.OPEN:
                event: SSEEvent | None = None
                with anyio.move_on_after(max(0.0, next_keepalive - anyio.current_time())):
                    try:
                        event = await self._receive_stream.receive()
                    except (anyio.EndOfStream, anyio.ClosedResourceError):
                        break
                if self.state is not ChannelState.OPEN:
                    break
                if event is None:
                    self.keepalives_sent += 1
                    next_keepalive = anyio.current_time() + self._keepalive_interval
                    yield encode_comment(self._keepalive_text)
                else:
                    yield event.encode()
        finally:
            self.close()


__all__ = ["ChannelState", "PushChannel"]
