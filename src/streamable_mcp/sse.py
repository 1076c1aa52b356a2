# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Server-Sent Events framing.

Each data event is an optional ``id:`` line and one ``data:`` line carrying a
compact JSON document, terminated by a blank line. Keepalives are comment
lines, which clients ignore::

    id: 3
    data: {"jsonrpc":"2.0","id":7,"result":{}}

    : keepalive

See: https://html.spec.whatwg.org/multipage/server-sent-events.html
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any


SSE_MEDIA_TYPE = "text/event-stream"


def wants_event_stream(accept: str | None) -> bool:
    """True when an ``Accept`` header declares SSE support."""
    return SSE_MEDIA_TYPE in (accept or "")


def encode_event(payload: Any, event_id: int | None = None) -> str:
    lines = ""
    if event_id is not None:
        lines += f"id: {event_id}\n"
    lines += f"data: {json.dumps(payload, separators=(',', ':'))}\n\n"
    return lines


def encode_comment(text: str) -> str:
    return f": {text}\n\n"


@dataclass(frozen=True, slots=True)
class SSEEvent:
    """One sequenced event written to a session stream."""

    sequence: int
    payload: dict[str, Any]

    def encode(self) -> str:
        return encode_event(self.payload, self.sequence)


def parse_events(raw: str) -> list[dict[str, Any]]:
    """Split a raw SSE body into ``{"id", "data"}`` / ``{"comment"}`` dicts.

    Used by clients and tests reading a finished stream.
    """
    events: list[dict[str, Any]] = []
    for block in raw.replace("\r\n", "\n").split("\n\n"):
        if not block.strip():
            continue
        event: dict[str, Any] = {}
        for line in block.split("\n"):
            if line.startswith(":"):
                event["comment"] = line[1:].strip()
            elif line.startswith("id:"):
                event["id"] = int(line[3:].strip())
            elif line.startswith("data:"):
                event["data"] = json.loads(line[5:].strip())
        events.append(event)
    return events


__all__ = ["SSEEvent", "SSE_MEDIA_TYPE", "encode_comment", "encode_event", "parse_events", "wants_event_stream"]
