# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""ServerConfig defaults and environment overrides."""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from streamable_mcp.server import ServerConfig, StreamableHTTPTransport, StreamConfig


# --- Defaults ---


def test_defaults():
    config = ServerConfig()
    assert config.endpoint_path == "/mcp"
    assert config.allowed_origin == "http://localhost:3000"
    assert config.protocol_version == "2025-06-18"
    assert config.port == 3333
    assert config.require_initialized is False
    assert config.stream.keepalive_interval == 15.0
    assert config.server_info.name == "StreamableMCP-HTTP"


def test_nested_configs_are_frozen():
    with pytest.raises(FrozenInstanceError):
        ServerConfig().stream.keepalive_interval = 1.0


# --- Environment ---


def test_from_env_reads_known_variables():
    config = ServerConfig.from_env(
        {
            "PORT": "8080",
            "ALLOWED_ORIGIN": "https://app.example.com",
            "MCP_HOST": "0.0.0.0",
            "MCP_PATH": "/rpc",
            "MCP_KEEPALIVE_INTERVAL": "2.5",
        }
    )
    assert config.port == 8080
    assert config.allowed_origin == "https://app.example.com"
    assert config.host == "0.0.0.0"
    assert config.endpoint_path == "/rpc"
    assert config.stream.keepalive_interval == 2.5
    assert config.stream.buffer_size == StreamConfig().buffer_size


def test_from_env_ignores_empty_values():
    assert ServerConfig.from_env({"PORT": "", "ALLOWED_ORIGIN": ""}) == ServerConfig()


def test_from_env_defaults_to_process_environment(monkeypatch):
    monkeypatch.setenv("PORT", "4444")
    assert ServerConfig.from_env().port == 4444


def test_invalid_port_raises():
    with pytest.raises(ValueError):
        ServerConfig.from_env({"PORT": "http"})


# --- Propagation ---


def test_config_flows_into_transport():
    config = ServerConfig(allowed_origin="https://app.example.com", protocol_version="2025-03-26")
    transport = StreamableHTTPTransport(config=config)
    assert transport.gatekeeper.allowed_origin == "https://app.example.com"
    assert transport.router.initialize_result()["protocolVersion"] == "2025-03-26"


def test_zero_config_transport():
    transport = StreamableHTTPTransport()
    assert transport.config == ServerConfig()
    assert len(transport.sessions) == 0
