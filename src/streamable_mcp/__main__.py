# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Run the demo server: ``python -m streamable_mcp``.

Binds to localhost by default. Put a TLS-terminating reverse proxy in front
before exposing it anywhere else.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import replace
import logging

import uvicorn

from .demo import build_registry, build_resource_store
from .server import ServerConfig, StreamableHTTPTransport
from .utils import get_logger, setup_logger


_logger = get_logger("streamable_mcp.main")


def parse_args(argv: Sequence[str] | None = None, config: ServerConfig | None = None) -> argparse.Namespace:
    defaults = config or ServerConfig.from_env()
    parser = argparse.ArgumentParser(prog="streamable-mcp", description="Minimal MCP Streamable HTTP server")
    parser.add_argument("--host", default=defaults.host, help="bind address (default: %(default)s)")
    parser.add_argument("--port", type=int, default=defaults.port, help="bind port (default: %(default)s)")
    parser.add_argument("--path", default=defaults.endpoint_path, help="endpoint path (default: %(default)s)")
    parser.add_argument(
        "--allowed-origin", default=defaults.allowed_origin, help="browser origin to admit (default: %(default)s)"
    )
    parser.add_argument(
        "--keepalive", type=float, default=defaults.stream.keepalive_interval, help="SSE keepalive seconds"
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--json-logs", action="store_true", help="emit structured JSON logs")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServerConfig:
    config = ServerConfig.from_env()
    config.host = args.host
    config.port = args.port
    config.endpoint_path = args.path
    config.allowed_origin = args.allowed_origin
    config.stream = replace(config.stream, keepalive_interval=args.keepalive)
    return config


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logger(level=getattr(logging, args.log_level), use_json=args.json_logs)
    config = build_config(args)

    transport = StreamableHTTPTransport(build_registry(), build_resource_store(), config=config)
    _logger.info(
        "listening on http://%s:%s%s",
        config.host,
        config.port,
        config.endpoint_path,
        extra={"event": "server.listen"},
    )
    uvicorn.run(transport.app(), host=config.host, port=config.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
