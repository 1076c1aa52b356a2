# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Server configuration dataclasses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
import os


DEFAULT_PROTOCOL_VERSION = "2025-06-18"
DEFAULT_ALLOWED_ORIGIN = "http://localhost:3000"
DEFAULT_INSTRUCTIONS = "Use tools/list, tools/call, resources/list, resources/read. Streamable HTTP enabled."


@dataclass(slots=True, frozen=True)
class ServerInfoConfig:
    """Identity advertised in the ``initialize`` result."""

    name: str = "StreamableMCP-HTTP"
    title: str = "Streamable MCP (HTTP)"
    version: str = "0.2.0"


@dataclass(slots=True, frozen=True)
class StreamConfig:
    """SSE stream tuning.

    See: https://modelcontextprotocol.io/specification/2025-06-18/basic/transports
    """

    keepalive_interval: float = 15.0
    """Seconds between keepalive comments on an open push channel."""

    keepalive_text: str = "keepalive"
    """Comment text written for each keepalive."""

    buffer_size: int = 64
    """Outbound events buffered per push channel before sends are dropped."""


@dataclass(slots=True)
class ServerConfig:
    """Tunable parameters for the Streamable HTTP transport.

    All fields have sane defaults. Override only what you need.

    Example:
        >>> from streamable_mcp.server import ServerConfig, StreamConfig
        >>>
        >>> config = ServerConfig(allowed_origin="https://app.example.com")
        >>> config = ServerConfig(stream=StreamConfig(keepalive_interval=5.0))
    """

    server_info: ServerInfoConfig = field(default_factory=ServerInfoConfig)
    """Server identity for ``initialize``."""

    stream: StreamConfig = field(default_factory=StreamConfig)
    """SSE stream configuration."""

    endpoint_path: str = "/mcp"
    """The single HTTP path serving OPTIONS, GET and POST."""

    allowed_origin: str = DEFAULT_ALLOWED_ORIGIN
    """Browser origin admitted besides ``http://localhost*``."""

    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    """Advertised in ``initialize`` and the ``MCP-Protocol-Version`` header."""

    instructions: str | None = DEFAULT_INSTRUCTIONS
    """Usage hint returned by ``initialize``."""

    require_initialized: bool = False
    """Reject calls on sessions that never sent ``notifications/initialized``."""

    host: str = "127.0.0.1"
    port: int = 3333

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerConfig:
        """Build a config from ``PORT``, ``ALLOWED_ORIGIN``, ``MCP_HOST``,
        ``MCP_PATH`` and ``MCP_KEEPALIVE_INTERVAL``."""
        env = os.environ if environ is None else environ
        config = cls()
        if env.get("PORT"):
            config.port = int(env["PORT"])
        if env.get("ALLOWED_ORIGIN"):
            config.allowed_origin = env["ALLOWED_ORIGIN"]
        if env.get("MCP_HOST"):
            config.host = env["MCP_HOST"]
        if env.get("MCP_PATH"):
            config.endpoint_path = env["MCP_PATH"]
        if env.get("MCP_KEEPALIVE_INTERVAL"):
            config.stream = replace(config.stream, keepalive_interval=float(env["MCP_KEEPALIVE_INTERVAL"]))
        return config


__all__ = ["ServerConfig", "ServerInfoConfig", "StreamConfig"]
