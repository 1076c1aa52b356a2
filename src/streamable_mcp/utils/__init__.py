# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Utility helpers for streamable-mcp."""

from .logger import ColoredFormatter, JSONFormatter, get_logger, setup_logger


__all__ = ["ColoredFormatter", "JSONFormatter", "get_logger", "setup_logger"]
