# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""JSON-RPC envelope parsing and classification.

A POST body carries exactly one JSON-RPC 2.0 message. Classification is by
the ``id`` member alone:

- non-null ``id``: :class:`JSONRPCRequest`, answered with a response
- absent or null ``id``: :class:`JSONRPCNotification`, acknowledged with 202

A message sent by the client in reply to a server request carries ``result``
or ``error`` and no ``method``. It is accepted as a notification so the
transport acknowledges it without dispatching anything.

Batches (JSON arrays) are not accepted.
"""

from __future__ import annotations

import json
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr, ValidationError

from .exceptions import InvalidEnvelopeError


JSONRPC_VERSION = "2.0"

# Strict so ids are echoed back exactly as sent (2.0 stays 2.0, "1" stays "1").
RequestId = Union[StrictStr, StrictInt, StrictFloat]


class _Envelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    jsonrpc: Literal["2.0"]
    method: str | None = None
    params: dict[str, Any] | None = None

    @property
    def arguments(self) -> dict[str, Any]:
        """``params`` or an empty dict."""
        return self.params or {}


class JSONRPCRequest(_Envelope):
    """A call expecting a response keyed by ``id``."""

    id: RequestId


class JSONRPCNotification(_Envelope):
    """A one-way message; no response payload is ever produced."""

    @property
    def is_response(self) -> bool:
        """True when this is the client answering a server-initiated request."""
        extra = self.model_extra or {}
        return self.method is None and ("result" in extra or "error" in extra)


JSONRPCMessage = JSONRPCRequest | JSONRPCNotification


def parse_body(body: bytes | str) -> dict[str, Any]:
    """Decode a raw POST body into a JSON-RPC shaped object."""
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise InvalidEnvelopeError() from exc
    if not isinstance(data, dict) or data.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidEnvelopeError()
    return data


def classify(body: bytes | str | dict[str, Any]) -> JSONRPCMessage:
    """Parse and classify one inbound message.

    Raises:
        InvalidEnvelopeError: body is not JSON, not an object, lacks
            ``jsonrpc: "2.0"``, or has members of the wrong type.
    """
    data = body if isinstance(body, dict) else parse_body(body)
    if data.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidEnvelopeError()

    model: type[_Envelope] = JSONRPCRequest if data.get("id") is not None else JSONRPCNotification
    payload = data
    if model is JSONRPCNotification and "id" in data:
        payload = {key: value for key, value in data.items() if key != "id"}
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidEnvelopeError() from exc


def response_payload(request_id: RequestId | None, *, result: Any = None, error: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the JSON-RPC response object for ``request_id``."""
    if error is not None:
        return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_payload(code: int, message: str) -> dict[str, Any]:
    """A JSON-RPC error object with no ``id`` (transport-level failures)."""
    return {"jsonrpc": JSONRPC_VERSION, "error": {"code": code, "message": message}}


def notification_payload(method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        payload["params"] = params
    return payload


def log_message(message: str, *, level: str = "info", logger: str = "mcp") -> dict[str, Any]:
    """A ``logging/message`` notification as written onto SSE streams."""
    return notification_payload("logging/message", {"level": level, "logger": logger, "message": message})


__all__ = [
    "JSONRPCMessage",
    "JSONRPCNotification",
    "JSONRPCRequest",
    "JSONRPC_VERSION",
    "RequestId",
    "classify",
    "error_payload",
    "log_message",
    "notification_payload",
    "parse_body",
    "response_payload",
]
