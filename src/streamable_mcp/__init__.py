# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Streamable HTTP transport for MCP-style JSON-RPC servers.

The transport core lives in :mod:`streamable_mcp.server`; capabilities are
plugged in through :class:`CapabilityRegistry` and :class:`ResourceStore`:

    from streamable_mcp import CapabilityRegistry, ResourceStore, StreamableHTTPTransport

    tools = CapabilityRegistry()

    @tools.tool(description="Say hello")
    async def hello(arguments: dict) -> str:
        return f"hello {arguments.get('name', 'world')}"

    app = StreamableHTTPTransport(tools, ResourceStore()).app()
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .exceptions import (
    ApplicationError,
    InvalidEnvelopeError,
    OriginNotAllowedError,
    SessionNotFoundError,
    ToolError,
    ToolErrorCode,
    TransportError,
)
from .registry import CapabilityRegistry, ResourceSpec, ResourceStore, ToolSpec
from .server import ServerConfig, StreamableHTTPTransport


try:
    __version__ = version("streamable-mcp")
except PackageNotFoundError:
    __version__ = "0.0.0+local"


__all__ = [
    "ApplicationError",
    "CapabilityRegistry",
    "InvalidEnvelopeError",
    "OriginNotAllowedError",
    "ResourceSpec",
    "ResourceStore",
    "ServerConfig",
    "SessionNotFoundError",
    "StreamableHTTPTransport",
    "ToolError",
    "ToolErrorCode",
    "ToolSpec",
    "TransportError",
    "__version__",
]
