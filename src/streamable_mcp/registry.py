# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Capability registry and resource store.

These are the two collaborators the router consults:

- :class:`CapabilityRegistry` maps tool names to a :class:`ToolSpec`, which
  holds the callable plus the descriptor advertised by ``tools/list``;
  the callable itself is never serialized.
- :class:`ResourceStore` maps uris to a :class:`ResourceSpec` holding the
  descriptor advertised by ``resources/list`` and the text served by
  ``resources/read``.

Tools are registered with a decorator::

    registry = CapabilityRegistry()

    @registry.tool(title="Echo text", description="Returns the given text.",
                   input_schema={"type": "object", "properties": {"text": {"type": "string"}}})
    async def echo(arguments: dict) -> str:
        return str(arguments.get("text", ""))

A tool receives the raw ``arguments`` object and returns either a string, a
list of content blocks (dicts or ``mcp.types`` content models), or a single
content model. Sync and async callables are both accepted.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
import inspect
from typing import Any

import mcp.types as types
from pydantic import BaseModel

from .utils import get_logger


_logger = get_logger("streamable_mcp.registry")

ToolFunction = Callable[[dict[str, Any]], Any]

_EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


@dataclass(slots=True)
class ToolSpec:
    name: str
    fn: ToolFunction
    title: str | None = None
    description: str | None = None
    input_schema: dict[str, Any] = field(default_factory=lambda: dict(_EMPTY_SCHEMA))

    def to_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=self.input_schema,
        )

    def descriptor(self) -> dict[str, Any]:
        return self.to_tool().model_dump(by_alias=True, exclude_none=True, mode="json")

    async def invoke(self, arguments: dict[str, Any]) -> list[dict[str, Any]]:
        result = self.fn(arguments)
        if inspect.isawaitable(result):
            result = await result
        return normalize_content(result)


def normalize_content(value: Any) -> list[dict[str, Any]]:
    """Coerce a tool return value into a list of JSON content blocks."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [types.TextContent(type="text", text=value)]
    elif isinstance(value, (BaseModel, dict)):
        value = [value]

    blocks: list[dict[str, Any]] = []
    for item in value:
        if isinstance(item, BaseModel):
            blocks.append(item.model_dump(by_alias=True, exclude_none=True, mode="json"))
        elif isinstance(item, dict):
            blocks.append(item)
        else:
            blocks.append({"type": "text", "text": str(item)})
    return blocks


class CapabilityRegistry:
    """Tool name → :class:`ToolSpec`. Registration order is listing order."""

    def __init__(self, specs: Iterable[ToolSpec] = ()) -> None:
        self._tools: dict[str, ToolSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: ToolSpec) -> ToolSpec:
        if spec.name in self._tools:
            _logger.warning("tool replaced", extra={"event": "registry.tool.replace", "tool": spec.name})
        self._tools[spec.name] = spec
        return spec

    def tool(
        self,
        name: str | None = None,
        *,
        title: str | None = None,
        description: str | None = None,
        input_schema: dict[str, Any] | None = None,
    ) -> Callable[[ToolFunction], ToolFunction]:
        """Register the decorated callable; the function name is the default tool name."""

        def decorator(fn: ToolFunction) -> ToolFunction:
            self.register(
                ToolSpec(
                    name=name or fn.__name__,
                    fn=fn,
                    title=title,
                    description=description if description is not None else inspect.getdoc(fn),
                    input_schema=dict(input_schema) if input_schema is not None else dict(_EMPTY_SCHEMA),
                )
            )
            return fn

        return decorator

    def get(self, name: str | None) -> ToolSpec | None:
        if not isinstance(name, str):
            return None
        return self._tools.get(name)

    def descriptors(self) -> list[dict[str, Any]]:
        return [spec.descriptor() for spec in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


@dataclass(slots=True)
class ResourceSpec:
    uri: str
    name: str
    text: str
    title: str | None = None
    description: str | None = None
    mime_type: str = "text/plain"

    def descriptor(self) -> dict[str, Any]:
        data: dict[str, Any] = {"uri": self.uri, "name": self.name}
        if self.title is not None:
            data["title"] = self.title
        if self.description is not None:
            data["description"] = self.description
        data["mimeType"] = self.mime_type
        return data

    def contents(self) -> dict[str, Any]:
        return {"uri": self.uri, "mimeType": self.mime_type, "text": self.text}


class ResourceStore:
    """Uri → :class:`ResourceSpec`."""

    def __init__(self, specs: Iterable[ResourceSpec] = ()) -> None:
        self._resources: dict[str, ResourceSpec] = {}
        for spec in specs:
            self.add(spec)

    def add(self, spec: ResourceSpec) -> ResourceSpec:
        self._resources[spec.uri] = spec
        return spec

    def get(self, uri: str | None) -> ResourceSpec | None:
        if not isinstance(uri, str):
            return None
        return self._resources.get(uri)

    def descriptors(self) -> list[dict[str, Any]]:
        return [spec.descriptor() for spec in self._resources.values()]

    def __contains__(self, uri: object) -> bool:
        return uri in self._resources

    def __len__(self) -> int:
        return len(self._resources)


__all__ = [
    "CapabilityRegistry",
    "ResourceSpec",
    "ResourceStore",
    "ToolFunction",
    "ToolSpec",
    "normalize_content",
]
