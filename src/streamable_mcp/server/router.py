# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Capability router: classified message → :class:`Outcome`.

Dispatch goes through a table keyed by method name. Each entry declares
whether it needs a session that has completed the ``notifications/initialized``
handshake. The declaration is only enforced when
``ServerConfig.require_initialized`` is set; by default every method is
served on any known session.

Failure split:

- unknown method / tool / resource: :class:`ApplicationError`, rendered as a
  JSON-RPC ``error``
- exception raised by a tool: folded into ``{content, isError: true}``
- anything else escaping a handler propagates to the transport

See: https://modelcontextprotocol.io/specification/2025-06-18/server/tools#error-handling
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import mcp.types as types

from ..envelope import JSONRPCMessage, JSONRPCNotification
from ..exceptions import ApplicationError
from ..registry import CapabilityRegistry, ResourceStore
from ..utils import get_logger
from .config import ServerConfig
from .sessions import Session, SessionRegistry


Handler = Callable[[Session, dict[str, Any]], Awaitable[dict[str, Any] | None]]


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of routing one message: a result, an error, or accept-only."""

    result: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
    accept_only: bool = False

    @classmethod
    def ok(cls, result: dict[str, Any]) -> Outcome:
        return cls(result=result)

    @classmethod
    def fail(cls, code: int, message: str) -> Outcome:
        return cls(error=types.ErrorData(code=code, message=message).model_dump(exclude_none=True))

    @classmethod
    def accepted(cls) -> Outcome:
        return cls(accept_only=True)

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass(frozen=True, slots=True)
class Route:
    handler: Handler
    requires_initialized: bool = False


class CapabilityRouter:
    """Maps ``(session, message)`` to an :class:`Outcome`.

    Args:
        sessions: Registry used for session mutations (``initialized`` flag).
        tools: Tool registry consulted by ``tools/list`` and ``tools/call``.
        resources: Resource store consulted by ``resources/list`` and ``resources/read``.
        config: Server identity, protocol version and precondition policy.
    """

    def __init__(
        self,
        sessions: SessionRegistry,
        tools: CapabilityRegistry,
        resources: ResourceStore,
        config: ServerConfig | None = None,
    ) -> None:
        self._sessions = sessions
        self._tools = tools
        self._resources = resources
        self._config = config or ServerConfig()
        self._logger = get_logger("streamable_mcp.router")
        self._routes: dict[str, Route] = {
            "initialize": Route(self._initialize),
            "notifications/initialized": Route(self._initialized),
            "tools/list": Route(self._list_tools, requires_initialized=True),
            "tools/call": Route(self._call_tool, requires_initialized=True),
            "resources/list": Route(self._list_resources, requires_initialized=True),
            "resources/read": Route(self._read_resource, requires_initialized=True),
        }

    @property
    def methods(self) -> list[str]:
        return list(self._routes)

    def add_route(self, method: str, handler: Handler, *, requires_initialized: bool = False) -> None:
        """Install or replace the handler for ``method``."""
        self._routes[method] = Route(handler, requires_initialized=requires_initialized)

    async def route(self, session: Session, message: JSONRPCMessage) -> Outcome:
        if isinstance(message, JSONRPCNotification):
            if not message.is_response:
                await self._notify(session, message)
            return Outcome.accepted()

        route = self._routes.get(message.method or "")
        if route is None:
            return self._error(ApplicationError.method_not_found(message.method))

        if route.requires_initialized and self._config.require_initialized and not session.initialized:
            return Outcome.fail(types.INVALID_REQUEST, "Session not initialized")

        try:
            result = await route.handler(session, message.arguments)
        except ApplicationError as exc:
            return self._error(exc)
        return Outcome.ok(result if result is not None else {})

    async def _notify(self, session: Session, message: JSONRPCNotification) -> None:
        route = self._routes.get(message.method or "")
        if route is None:
            self._logger.debug(
                "ignoring unknown notification", extra={"event": "router.notification.unknown", "method": message.method}
            )
            return
        try:
            await route.handler(session, message.arguments)
        except ApplicationError as exc:
            self._logger.debug(
                "notification failed", extra={"event": "router.notification.error", "method": message.method, "error": exc.message}
            )

    def _error(self, exc: ApplicationError) -> Outcome:
        self._logger.info("rpc error", extra={"event": "router.error", "code": exc.code, "error": exc.message})
        return Outcome.fail(exc.code, exc.message)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize_result(self) -> dict[str, Any]:
        info = self._config.server_info
        result = types.InitializeResult(
            protocolVersion=self._config.protocol_version,
            capabilities=types.ServerCapabilities(
                logging=types.LoggingCapability(),
                prompts=types.PromptsCapability(listChanged=True),
                resources=types.ResourcesCapability(subscribe=False, listChanged=True),
                tools=types.ToolsCapability(listChanged=True),
            ),
            serverInfo=types.Implementation(name=info.name, title=info.title, version=info.version),
            instructions=self._config.instructions,
        )
        return result.model_dump(by_alias=True, exclude_none=True, mode="json")

    async def _initialize(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        client = params.get("clientInfo") or {}
        self._logger.info(
            "initialize",
            extra={
                "event": "router.initialize",
                "session_id": session.id,
                "client": client.get("name") if isinstance(client, dict) else None,
                "client_protocol": params.get("protocolVersion"),
            },
        )
        return self.initialize_result()

    async def _initialized(self, session: Session, params: dict[str, Any]) -> None:
        self._sessions.mark_initialized(session)
        return None

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def _list_tools(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": self._tools.descriptors(), "nextCursor": None}

    async def _call_tool(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        spec = self._tools.get(name)
        if spec is None:
            raise ApplicationError.unknown_tool(name)

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        try:
            content = await spec.invoke(arguments)
        except Exception as exc:
            self._logger.info(
                "tool raised", extra={"event": "router.tool.error", "tool": spec.name, "error": str(exc)}
            )
            return {"content": [{"type": "text", "text": str(exc)}], "isError": True}
        return {"content": content, "isError": False}

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def _list_resources(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        return {"resources": self._resources.descriptors(), "nextCursor": None}

    async def _read_resource(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        uri = params.get("uri")
        spec = self._resources.get(uri)
        if spec is None:
            raise ApplicationError.unknown_resource(uri)
        return {"contents": [spec.contents()]}


__all__ = ["CapabilityRouter", "Handler", "Outcome", "Route"]
