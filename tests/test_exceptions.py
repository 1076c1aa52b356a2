# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Error taxonomy: transport, application and tool errors."""

from __future__ import annotations

import pytest

from streamable_mcp.exceptions import (
    ApplicationError,
    InvalidEnvelopeError,
    OriginNotAllowedError,
    SessionNotFoundError,
    ToolError,
    ToolErrorCode,
    TransportError,
)


class TestTransportErrors:
    """HTTP-level failures carry a status and an optional JSON-RPC code."""

    def test_invalid_envelope(self):
        err = InvalidEnvelopeError()
        assert isinstance(err, TransportError)
        assert (err.status_code, err.code, err.message) == (400, -32600, "Invalid JSON-RPC")

    def test_origin_not_allowed(self):
        err = OriginNotAllowedError("https://evil.example")
        assert (err.status_code, err.code, err.message) == (400, -32600, "Origin not allowed")
        assert err.origin == "https://evil.example"

    def test_session_not_found_is_plain_text(self):
        err = SessionNotFoundError("abc")
        assert err.status_code == 404
        assert err.code is None
        assert "abc" in str(err)


class TestApplicationErrors:
    """RPC-level failures map to fixed JSON-RPC codes."""

    def test_method_not_found(self):
        err = ApplicationError.method_not_found("x/y")
        assert (err.code, err.message) == (-32601, "Method not found: x/y")

    def test_unknown_tool(self):
        err = ApplicationError.unknown_tool("calc")
        assert (err.code, err.message) == (-32601, "Unknown tool: calc")

    def test_unknown_resource(self):
        err = ApplicationError.unknown_resource("mem://x")
        assert (err.code, err.message) == (-32602, "Unknown resource: mem://x")


class TestToolError:
    """ToolError carries a structured code."""

    def test_defaults_to_error_code(self):
        err = ToolError("something went wrong")
        assert str(err) == "something went wrong"
        assert err.code == "ERROR"

    def test_accepts_enum_code(self):
        err = ToolError("bad input", code=ToolErrorCode.INVALID_INPUT)
        assert err.code == "INVALID_INPUT"

    def test_can_be_raised(self):
        with pytest.raises(ToolError) as exc_info:
            raise ToolError("conflict", code=ToolErrorCode.CONFLICT)
        assert exc_info.value.code == ToolErrorCode.CONFLICT
