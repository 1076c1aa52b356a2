# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Streamable HTTP transport: one endpoint, three verbs.

Every exchange passes the origin gatekeeper first, then:

- ``OPTIONS``: CORS preflight, 204
- ``GET``: opens a persistent push channel (:mod:`.push`)
- ``POST``: classify the envelope, route it, and pick a delivery:

  ============================  ==============================================
  ``initialize``                one-shot JSON, new ``Mcp-Session-Id`` header
  notification / client reply   202, empty body
  request, no SSE in Accept     one-shot JSON with ``result`` or ``error``
  request, SSE in Accept        per-call stream: log event, final response,
                                close
  ============================  ==============================================

Any other verb, and any other path, is answered with 405.

See: https://modelcontextprotocol.io/specification/2025-06-18/basic/transports#streamable-http
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
import json
from typing import Any

import anyio
from mcp.types import INVALID_REQUEST
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response, StreamingResponse
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from ..envelope import (
    JSONRPCMessage,
    JSONRPCNotification,
    JSONRPCRequest,
    RequestId,
    classify,
    error_payload,
    log_message,
    response_payload,
)
from ..exceptions import OriginNotAllowedError, SessionNotFoundError, TransportError
from ..registry import CapabilityRegistry, ResourceStore
from ..sse import encode_event, wants_event_stream
from ..utils import get_logger
from .config import ServerConfig
from .gatekeeper import OriginGatekeeper
from .headers import (
    JSON_HEADERS,
    PROTOCOL_VERSION_HEADER,
    SESSION_HEADER,
    SSE_HEADERS,
    TEXT_HEADERS,
    build_headers,
)
from .push import PushChannel
from .router import CapabilityRouter, Outcome
from .sessions import Session, SessionRegistry


ENDPOINT_METHODS = ["GET", "POST", "OPTIONS", "PUT", "PATCH", "DELETE"]


class EventStreamResponse(StreamingResponse):
    """SSE response that always watches for client disconnect.

    When the client goes away the body iterator is cancelled and closed
    right away, so generator ``finally`` blocks (channel deregistration) run
    before any further write is attempted.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        async with anyio.create_task_group() as task_group:

            async def watch_disconnect() -> None:
                await self.listen_for_disconnect(receive)
                task_group.cancel_scope.cancel()

            task_group.start_soon(watch_disconnect)
            try:
                await self.stream_response(send)
            except OSError:
                pass
            finally:
                task_group.cancel_scope.cancel()
                aclose = getattr(self.body_iterator, "aclose", None)
                if aclose is not None:
                    with anyio.CancelScope(shield=True):
                        await aclose()

        if self.background is not None:
            await self.background()


class StreamableHTTPTransport:
    """Session-multiplexed JSON-RPC over HTTP with optional SSE delivery.

    Example:
        >>> from streamable_mcp.demo import build_registry, build_resource_store
        >>> transport = StreamableHTTPTransport(build_registry(), build_resource_store())
        >>> app = transport.app()  # any ASGI server, e.g. uvicorn.run(app)

    Args:
        tools: Capability registry backing ``tools/*``.
        resources: Resource store backing ``resources/*``.
        config: Server configuration; defaults to :class:`ServerConfig`.
        sessions: Injected session registry; a fresh one is created if omitted.
    """

    def __init__(
        self,
        tools: CapabilityRegistry | None = None,
        resources: ResourceStore | None = None,
        *,
        config: ServerConfig | None = None,
        sessions: SessionRegistry | None = None,
    ) -> None:
        self.config = config or ServerConfig()
        self.sessions = sessions if sessions is not None else SessionRegistry()
        self.gatekeeper = OriginGatekeeper(self.config.allowed_origin)
        self.router = CapabilityRouter(
            self.sessions,
            tools if tools is not None else CapabilityRegistry(),
            resources if resources is not None else ResourceStore(),
            self.config,
        )
        self._logger = get_logger("streamable_mcp.transport")

    # ------------------------------------------------------------------
    # ASGI wiring
    # ------------------------------------------------------------------

    def app(self, *, debug: bool = False) -> Starlette:
        return Starlette(
            debug=debug,
            routes=[Route(self.config.endpoint_path, self.handle, methods=ENDPOINT_METHODS)],
            exception_handlers={404: self._unrouted, 405: self._unrouted},
            lifespan=self._lifespan,
        )

    async def _unrouted(self, request: Request, exc: Exception) -> Response:
        # Only one path is served; anything else is answered like an unsupported verb.
        origin = request.headers.get("origin") or None
        if not self.gatekeeper.is_allowed(origin):
            origin = None
        return self._text(origin, 405, "Method Not Allowed")

    @asynccontextmanager
    async def _lifespan(self, app: Starlette) -> AsyncIterator[None]:
        self._logger.info(
            "transport ready",
            extra={"event": "transport.start", "path": self.config.endpoint_path, "origin": self.config.allowed_origin},
        )
        try:
            yield
        finally:
            closed = self.close_channels()
            self._logger.info("transport stopped", extra={"event": "transport.stop", "channels_closed": closed})

    async def handle(self, request: Request) -> Response:
        origin = request.headers.get("origin") or None
        try:
            if request.method == "OPTIONS":
                return self._preflight(origin)
            if request.method == "GET":
                return self._open_push_channel(request, origin)
            if request.method == "POST":
                return await self._handle_post(request, origin)
            return self._text(origin, 405, "Method Not Allowed")
        except TransportError as exc:
            return self._transport_error(origin, exc)
        except Exception as exc:
            self._logger.exception("unhandled error", extra={"event": "transport.error", "method": request.method})
            return self._bad_request(origin, f"Server error: {exc}")

    # ------------------------------------------------------------------
    # OPTIONS / GET
    # ------------------------------------------------------------------

    def _preflight(self, origin: str | None) -> Response:
        if not self.gatekeeper.is_allowed(origin):
            self._logger.warning("preflight rejected", extra={"event": "origin.reject", "origin": origin})
            return self._text(None, 400, "Origin not allowed")
        return Response(status_code=204, headers=build_headers(self._cors_origin(origin)))

    def _open_push_channel(self, request: Request, origin: str | None) -> Response:
        self.gatekeeper.check(origin)
        if not wants_event_stream(request.headers.get("accept")):
            return self._text(origin, 405, "Method Not Allowed")
        try:
            session = self.sessions.get(request.headers.get(SESSION_HEADER))
        except SessionNotFoundError:
            return self._text(origin, 404, "Unknown or missing session")

        stream = self.config.stream
        channel = PushChannel(
            session,
            self.sessions,
            keepalive_interval=stream.keepalive_interval,
            keepalive_text=stream.keepalive_text,
            buffer_size=stream.buffer_size,
        )
        return EventStreamResponse(channel.events(), headers=self._sse_headers(origin))

    # ------------------------------------------------------------------
    # POST
    # ------------------------------------------------------------------

    async def _handle_post(self, request: Request, origin: str | None) -> Response:
        self.gatekeeper.check(origin)
        message = classify(await request.body())

        if message.method == "initialize":
            return await self._initialize(message, origin)

        try:
            session = self.sessions.get(request.headers.get(SESSION_HEADER))
        except SessionNotFoundError:
            return self._text(origin, 404, "Session not found (initialize first)")

        if isinstance(message, JSONRPCNotification):
            await self.router.route(session, message)
            return Response(status_code=202, headers=build_headers(self._cors_origin(origin)))

        if wants_event_stream(request.headers.get("accept")):
            return EventStreamResponse(self._call_stream(session, message), headers=self._sse_headers(origin))

        outcome = await self.router.route(session, message)
        return self._json(origin, 200, self._response_body(message.id, outcome), self._protocol_header())

    async def _initialize(self, message: JSONRPCMessage, origin: str | None) -> Response:
        session = self.sessions.create()
        if isinstance(message, JSONRPCRequest):
            request_id = message.id
            outcome = await self.router.route(session, message)
        else:
            request_id = None
            outcome = Outcome.ok(self.router.initialize_result())
        body = self._response_body(request_id, outcome)
        return self._json(origin, 200, body, {SESSION_HEADER: session.id, **self._protocol_header()})

    async def _call_stream(self, session: Session, message: JSONRPCRequest) -> AsyncIterator[str]:
        yield encode_event(log_message(f"Handling {message.method}"), self.sessions.next_sequence(session))
        try:
            outcome = await self.router.route(session, message)
            final = self._response_body(message.id, outcome)
        except Exception as exc:
            self._logger.exception(
                "unhandled error in stream", extra={"event": "transport.stream.error", "session_id": session.id}
            )
            final = response_payload(message.id, error={"code": INVALID_REQUEST, "message": f"Server error: {exc}"})
        yield encode_event(final, self.sessions.next_sequence(session))

    # ------------------------------------------------------------------
    # Server-initiated messages
    # ------------------------------------------------------------------

    def notify(self, session_id: str, payload: dict[str, Any]) -> int:
        """Push ``payload`` to every open channel of a session.

        Returns the number of channels that accepted it.

        Raises:
            SessionNotFoundError: no such session.
        """
        session = self.sessions.get(session_id)
        delivered = 0
        for channel in session.snapshot_subscribers():
            if channel.send(payload):
                delivered += 1
        return delivered

    def close_channels(self) -> int:
        """Close every open push channel across all sessions."""
        closed = 0
        for session in self.sessions:
            for channel in session.snapshot_subscribers():
                channel.close()
                closed += 1
        return closed

    # ------------------------------------------------------------------
    # Response helpers
    # ------------------------------------------------------------------

    def _response_body(self, request_id: RequestId | None, outcome: Outcome) -> dict[str, Any]:
        if outcome.is_error:
            return response_payload(request_id, error=outcome.error)
        return response_payload(request_id, result=outcome.result)

    def _cors_origin(self, origin: str | None) -> str:
        return origin or self.config.allowed_origin

    def _protocol_header(self) -> dict[str, str]:
        return {PROTOCOL_VERSION_HEADER: self.config.protocol_version}

    def _sse_headers(self, origin: str | None) -> dict[str, str]:
        return build_headers(self._cors_origin(origin), base=SSE_HEADERS, overrides=self._protocol_header())

    def _json(
        self, origin: str | None, status: int, body: Any, overrides: Mapping[str, str] | None = None
    ) -> Response:
        headers = build_headers(self._cors_origin(origin), base=JSON_HEADERS, overrides=overrides)
        return Response(json.dumps(body), status_code=status, headers=headers)

    def _text(self, origin: str | None, status: int, text: str) -> Response:
        headers = build_headers(self._cors_origin(origin), base=TEXT_HEADERS)
        return Response(text, status_code=status, headers=headers)

    def _bad_request(self, origin: str | None, message: str) -> Response:
        return self._json(origin, 400, error_payload(INVALID_REQUEST, message), self._protocol_header())

    def _transport_error(self, origin: str | None, exc: TransportError) -> Response:
        if isinstance(exc, OriginNotAllowedError):
            # Never mirror a rejected origin back in CORS headers.
            origin = None
        if exc.code is None:
            return self._text(origin, exc.status_code, exc.message)
        self._logger.info(
            "transport error", extra={"event": "transport.reject", "status": exc.status_code, "error": exc.message}
        )
        return self._json(origin, exc.status_code, error_payload(exc.code, exc.message), self._protocol_header())


__all__ = ["EventStreamResponse", "StreamableHTTPTransport", "ENDPOINT_METHODS"]
