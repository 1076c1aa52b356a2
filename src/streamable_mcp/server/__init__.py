# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Server-side surface: the transport and the services it is built from."""

from __future__ import annotations

from .config import ServerConfig, ServerInfoConfig, StreamConfig
from .gatekeeper import OriginGatekeeper
from .headers import PROTOCOL_VERSION_HEADER, SESSION_HEADER, build_headers, cors_headers
from .push import ChannelState, PushChannel
from .router import CapabilityRouter, Outcome
from .sessions import Session, SessionRegistry
from .transport import EventStreamResponse, StreamableHTTPTransport


__all__ = [
    # Transport
    "StreamableHTTPTransport",
    "EventStreamResponse",
    # Config
    "ServerConfig",
    "ServerInfoConfig",
    "StreamConfig",
    # Services
    "OriginGatekeeper",
    "SessionRegistry",
    "Session",
    "CapabilityRouter",
    "Outcome",
    "PushChannel",
    "ChannelState",
    # Headers
    "SESSION_HEADER",
    "PROTOCOL_VERSION_HEADER",
    "build_headers",
    "cors_headers",
]
