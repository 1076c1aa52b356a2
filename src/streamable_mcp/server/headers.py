# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Response header composition.

Headers are merged in a fixed order, later layers winning:

1. base headers for the body kind (JSON, SSE, plain text)
2. CORS headers for the origin being answered
3. per-response overrides (``Mcp-Session-Id``, ``MCP-Protocol-Version``)
"""

from __future__ import annotations

from collections.abc import Mapping


SESSION_HEADER = "Mcp-Session-Id"
PROTOCOL_VERSION_HEADER = "MCP-Protocol-Version"

JSON_HEADERS: Mapping[str, str] = {
    "Content-Type": "application/json; charset=utf-8",
    "Cache-Control": "no-cache",
}
SSE_HEADERS: Mapping[str, str] = {
    "Content-Type": "text/event-stream; charset=utf-8",
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
TEXT_HEADERS: Mapping[str, str] = {
    "Content-Type": "text/plain; charset=utf-8",
}


def cors_headers(origin: str | None) -> dict[str, str]:
    """CORS headers mirroring ``origin``; empty when there is nothing to mirror."""
    if not origin:
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Vary": "Origin",
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Access-Control-Allow-Headers": f"Content-Type, {SESSION_HEADER}",
        "Access-Control-Expose-Headers": f"{SESSION_HEADER}, {PROTOCOL_VERSION_HEADER}",
    }


def build_headers(
    origin: str | None,
    *,
    base: Mapping[str, str] | None = None,
    overrides: Mapping[str, str] | None = None,
) -> dict[str, str]:
    headers: dict[str, str] = dict(base or {})
    headers.update(cors_headers(origin))
    if overrides:
        headers.update(overrides)
    return headers


__all__ = [
    "JSON_HEADERS",
    "PROTOCOL_VERSION_HEADER",
    "SESSION_HEADER",
    "SSE_HEADERS",
    "TEXT_HEADERS",
    "build_headers",
    "cors_headers",
]
