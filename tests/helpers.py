# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Shared helpers for transport tests."""

from __future__ import annotations

from itertools import count
from typing import Any

from starlette.testclient import TestClient

from streamable_mcp.demo import build_registry, build_resource_store
from streamable_mcp.server import ServerConfig, StreamableHTTPTransport


MCP_PATH = "/mcp"
SSE_ACCEPT = "text/event-stream, application/json"

_ids = count(1)


def make_transport(**overrides: Any) -> StreamableHTTPTransport:
    return StreamableHTTPTransport(build_registry(), build_resource_store(), config=ServerConfig(**overrides))


def make_client(transport: StreamableHTTPTransport | None = None) -> TestClient:
    transport = transport or make_transport()
    return TestClient(transport.app(), raise_server_exceptions=False)


def rpc(method: str, params: dict[str, Any] | None = None, *, request_id: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"jsonrpc": "2.0", "id": next(_ids) if request_id is None else request_id, "method": method}
    if params is not None:
        body["params"] = params
    return body


def notification(method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        body["params"] = params
    return body


def initialize(client: TestClient, **headers: str) -> str:
    """Run ``initialize`` and return the new session id."""
    response = client.post(
        MCP_PATH,
        json=rpc(
            "initialize",
            {
                "protocolVersion": "2025-06-18",
                "capabilities": {},
                "clientInfo": {"name": "pytest-client", "version": "0.1.0"},
            },
        ),
        headers=headers,
    )
    assert response.status_code == 200
    return response.headers["mcp-session-id"]
