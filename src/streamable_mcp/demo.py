# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Demo capabilities served by ``python -m streamable_mcp``.

Two tools (``echo``, ``sum``) and one in-memory resource (``mem://hello.txt``).
"""

from __future__ import annotations

from typing import Any

import mcp.types as types

from .exceptions import ToolError, ToolErrorCode
from .registry import CapabilityRegistry, ResourceSpec, ResourceStore


HELLO_TEXT = "Hello from a minimal MCP Streamable HTTP server!\n"


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_registry() -> CapabilityRegistry:
    registry = CapabilityRegistry()

    @registry.tool(
        title="Echo text",
        description="Returns the given text.",
        input_schema={
            "type": "object",
            "properties": {"text": {"type": "string"}},
            "required": ["text"],
        },
    )
    async def echo(arguments: dict[str, Any]) -> list[types.TextContent]:
        text = arguments.get("text")
        return [types.TextContent(type="text", text="" if text is None else str(text))]

    @registry.tool(
        name="sum",
        title="Sum numbers",
        description="Sums an array of numbers.",
        input_schema={
            "type": "object",
            "properties": {"values": {"type": "array", "items": {"type": "number"}}},
            "required": ["values"],
        },
    )
    async def sum_values(arguments: dict[str, Any]) -> list[types.TextContent]:
        values = arguments.get("values")
        if not isinstance(values, list):
            raise ToolError("values must be array", code=ToolErrorCode.INVALID_INPUT)
        total: float = 0
        for value in values:
            if not value:
                continue
            try:
                total += float(value) if isinstance(value, str) else value
            except (TypeError, ValueError) as exc:
                raise ToolError(f"not a number: {value!r}", code=ToolErrorCode.INVALID_INPUT) from exc
        return [types.TextContent(type="text", text=_format_number(total))]

    return registry


def build_resource_store() -> ResourceStore:
    return ResourceStore(
        [
            ResourceSpec(
                uri="mem://hello.txt",
                name="hello.txt",
                title="Hello Text",
                description="Small in-memory resource",
                mime_type="text/plain",
                text=HELLO_TEXT,
            )
        ]
    )


__all__ = ["HELLO_TEXT", "build_registry", "build_resource_store"]
