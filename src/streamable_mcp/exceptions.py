# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Error taxonomy for the Streamable HTTP transport.

Three families, resolved at different layers:

- :class:`TransportError` and subclasses: the HTTP exchange itself failed
  (bad envelope, rejected origin, unknown session). They carry an HTTP status
  and never reach the capability router.
- :class:`ApplicationError`: the exchange succeeded but the RPC call did not
  (unknown method, unknown tool, unknown resource). Rendered as a JSON-RPC
  ``error`` object inside a 200 response.
- :class:`ToolError` (or any exception raised by a tool): folded into a
  successful ``tools/call`` result with ``isError: true``.
"""

from __future__ import annotations

from enum import Enum

from mcp.types import INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND


# =============================================================================
# Transport errors
# =============================================================================


class TransportError(Exception):
    """Base class for failures surfaced as an HTTP error status."""

    status_code: int = 400
    code: int | None = INVALID_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidEnvelopeError(TransportError):
    """Body is not a JSON object tagged ``jsonrpc: "2.0"``."""

    def __init__(self, message: str = "Invalid JSON-RPC") -> None:
        super().__init__(message)


class OriginNotAllowedError(TransportError):
    """Declared ``Origin`` failed the gatekeeper policy."""

    def __init__(self, origin: str) -> None:
        self.origin = origin
        super().__init__("Origin not allowed")


class SessionNotFoundError(TransportError):
    """No session is registered under the supplied id."""

    status_code = 404
    code = None

    def __init__(self, session_id: str | None) -> None:
        self.session_id = session_id
        super().__init__(f"Unknown or missing session: {session_id}")


# =============================================================================
# Application errors
# =============================================================================


class ApplicationError(Exception):
    """JSON-RPC level failure carried back inside a successful response."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @classmethod
    def method_not_found(cls, method: str | None) -> ApplicationError:
        return cls(METHOD_NOT_FOUND, f"Method not found: {method}")

    @classmethod
    def unknown_tool(cls, name: str | None) -> ApplicationError:
        return cls(METHOD_NOT_FOUND, f"Unknown tool: {name}")

    @classmethod
    def unknown_resource(cls, uri: str | None) -> ApplicationError:
        return cls(INVALID_PARAMS, f"Unknown resource: {uri}")


# =============================================================================
# Tool errors
# =============================================================================


class ToolErrorCode(str, Enum):
    """Codes tool authors can attach to a :class:`ToolError`."""

    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"
    ERROR = "ERROR"


class ToolError(Exception):
    """Exception for tool failures with a structured error code.

    Raising it (or anything else) from a tool yields a normal ``tools/call``
    result flagged ``isError: true`` whose text is the exception message:

        @registry.tool(description="Look up a user")
        async def get_user(arguments: dict) -> list[dict]:
            raise ToolError("user not found", code=ToolErrorCode.NOT_FOUND)
    """

    def __init__(self, message: str, *, code: str = "ERROR") -> None:
        super().__init__(message)
        self.code = code


__all__ = [
    "ApplicationError",
    "InvalidEnvelopeError",
    "OriginNotAllowedError",
    "SessionNotFoundError",
    "ToolError",
    "ToolErrorCode",
    "TransportError",
]
