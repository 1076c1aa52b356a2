# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Capability router: method dispatch, error split, tool error folding."""

from __future__ import annotations

from typing import Any

import pytest

from streamable_mcp.demo import HELLO_TEXT, build_registry, build_resource_store
from streamable_mcp.envelope import classify
from streamable_mcp.registry import ToolSpec
from streamable_mcp.server import CapabilityRouter, ServerConfig, SessionRegistry


def _router(**config: Any) -> tuple[CapabilityRouter, SessionRegistry]:
    sessions = SessionRegistry()
    router = CapabilityRouter(sessions, build_registry(), build_resource_store(), ServerConfig(**config))
    return router, sessions


def _request(method: str, params: dict[str, Any] | None = None, request_id: int = 1):
    body: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        body["params"] = params
    return classify(body)


async def _call(router: CapabilityRouter, session, method: str, params: dict[str, Any] | None = None):
    return await router.route(session, _request(method, params))


# --- Lifecycle ---


@pytest.mark.anyio
async def test_initialize_result():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "initialize", {"protocolVersion": "2025-06-18"})

    result = outcome.result
    assert not outcome.is_error
    assert result["protocolVersion"] == "2025-06-18"
    assert result["serverInfo"] == {
        "name": "StreamableMCP-HTTP",
        "title": "Streamable MCP (HTTP)",
        "version": "0.2.0",
    }
    assert result["capabilities"]["tools"] == {"listChanged": True}
    assert result["capabilities"]["resources"] == {"subscribe": False, "listChanged": True}
    assert result["capabilities"]["prompts"] == {"listChanged": True}
    assert result["capabilities"]["logging"] == {}
    assert "tools/list" in result["instructions"]


@pytest.mark.anyio
async def test_initialized_notification_marks_session():
    router, sessions = _router()
    session = sessions.create()

    outcome = await router.route(session, classify({"jsonrpc": "2.0", "method": "notifications/initialized"}))

    assert outcome.accept_only
    assert session.initialized


@pytest.mark.anyio
async def test_unknown_notification_is_accepted_silently():
    router, sessions = _router()
    outcome = await router.route(sessions.create(), classify({"jsonrpc": "2.0", "method": "notifications/whatever"}))
    assert outcome.accept_only
    assert not outcome.is_error


@pytest.mark.anyio
async def test_client_response_is_accepted_without_dispatch():
    router, sessions = _router()
    session = sessions.create()
    outcome = await router.route(session, classify({"jsonrpc": "2.0", "result": {}}))
    assert outcome.accept_only
    assert not session.initialized


# --- Tools ---


@pytest.mark.anyio
async def test_tools_list():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "tools/list")

    assert outcome.result["nextCursor"] is None
    assert [tool["name"] for tool in outcome.result["tools"]] == ["echo", "sum"]
    echo = outcome.result["tools"][0]
    assert echo["inputSchema"]["required"] == ["text"]


@pytest.mark.anyio
async def test_echo():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "tools/call", {"name": "echo", "arguments": {"text": "hi"}})
    assert outcome.result == {"content": [{"type": "text", "text": "hi"}], "isError": False}


@pytest.mark.anyio
async def test_echo_without_text_returns_empty_string():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "tools/call", {"name": "echo"})
    assert outcome.result == {"content": [{"type": "text", "text": ""}], "isError": False}


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ([1, 2, 3.5], "6.5"),
        ([1, 2, 3], "6"),
        ([], "0"),
        (["2", 3], "5"),
        ([None, 0, 4], "4"),
    ],
)
async def test_sum(values, expected):
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "tools/call", {"name": "sum", "arguments": {"values": values}})
    assert outcome.result == {"content": [{"type": "text", "text": expected}], "isError": False}


@pytest.mark.anyio
@pytest.mark.parametrize("arguments", [{}, {"values": "1,2"}, {"values": {"a": 1}}])
async def test_sum_rejects_non_array(arguments):
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "tools/call", {"name": "sum", "arguments": arguments})

    assert not outcome.is_error
    assert outcome.result == {"content": [{"type": "text", "text": "values must be array"}], "isError": True}


@pytest.mark.anyio
async def test_sum_rejects_non_numeric_string():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "tools/call", {"name": "sum", "arguments": {"values": [1, "abc"]}})

    assert outcome.result == {"content": [{"type": "text", "text": "not a number: 'abc'"}], "isError": True}


@pytest.mark.anyio
async def test_tool_exception_is_folded_into_result():
    router, sessions = _router()

    async def explode(arguments: dict[str, Any]) -> str:
        raise RuntimeError("kaboom")

    router._tools.register(ToolSpec(name="explode", fn=explode))
    outcome = await _call(router, sessions.create(), "tools/call", {"name": "explode"})

    assert outcome.result == {"content": [{"type": "text", "text": "kaboom"}], "isError": True}


@pytest.mark.anyio
async def test_unknown_tool_is_method_not_found():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "tools/call", {"name": "nope"})
    assert outcome.error == {"code": -32601, "message": "Unknown tool: nope"}


# --- Resources ---


@pytest.mark.anyio
async def test_resources_list():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "resources/list")
    assert outcome.result == {
        "resources": [
            {
                "uri": "mem://hello.txt",
                "name": "hello.txt",
                "title": "Hello Text",
                "description": "Small in-memory resource",
                "mimeType": "text/plain",
            }
        ],
        "nextCursor": None,
    }


@pytest.mark.anyio
async def test_resources_read():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "resources/read", {"uri": "mem://hello.txt"})
    assert outcome.result == {"contents": [{"uri": "mem://hello.txt", "mimeType": "text/plain", "text": HELLO_TEXT}]}


@pytest.mark.anyio
async def test_unknown_resource_is_invalid_params():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "resources/read", {"uri": "mem://missing"})
    assert outcome.error == {"code": -32602, "message": "Unknown resource: mem://missing"}


# --- Dispatch ---


@pytest.mark.anyio
async def test_unknown_method():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "prompts/list")
    assert outcome.error == {"code": -32601, "message": "Method not found: prompts/list"}


@pytest.mark.anyio
async def test_calls_before_initialized_are_served_by_default():
    router, sessions = _router()
    outcome = await _call(router, sessions.create(), "tools/list")
    assert not outcome.is_error


@pytest.mark.anyio
async def test_require_initialized_gates_capability_methods():
    router, sessions = _router(require_initialized=True)
    session = sessions.create()

    outcome = await _call(router, session, "tools/list")
    assert outcome.error == {"code": -32600, "message": "Session not initialized"}

    await router.route(session, classify({"jsonrpc": "2.0", "method": "notifications/initialized"}))
    outcome = await _call(router, session, "tools/list")
    assert not outcome.is_error


@pytest.mark.anyio
async def test_add_route_installs_custom_method():
    router, sessions = _router()

    async def ping(session, params: dict[str, Any]) -> None:
        return None

    router.add_route("ping", ping)
    assert "ping" in router.methods

    outcome = await _call(router, sessions.create(), "ping")
    assert outcome.result == {}
