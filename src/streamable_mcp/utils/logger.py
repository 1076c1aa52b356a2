# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Logging setup for streamable-mcp.

Loggers are plain :mod:`logging` loggers under the ``streamable_mcp``
namespace. Call sites attach structured fields through ``extra``::

    _logger.info("session created", extra={"event": "session.create", "session_id": sid})

:func:`setup_logger` installs either a colored console formatter or a JSON
formatter on the root logger. Structured fields show up as JSON keys (or as a
trailing ``key=value`` list in colored output).
"""

from __future__ import annotations

from collections.abc import Callable
import json
import logging
import sys
from typing import Any, ClassVar


# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys() | {"message", "asctime", "taskName"}
)

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS}


class ColoredFormatter(logging.Formatter):
    """ANSI-colored formatter. Subclass and override ``LEVEL_COLORS`` to restyle."""

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, *, use_color: bool = True) -> None:
        super().__init__(fmt or DEFAULT_FORMAT, datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        extras = _extra_fields(record)
        if extras:
            text += " " + " ".join(f"{key}={value}" for key, value in extras.items())
        if not self.use_color:
            return text
        color = self.LEVEL_COLORS.get(record.levelname)
        if color is None:
            return text
        return f"{color}{text}{self.RESET}"


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Args:
        serializer: Callable turning the payload dict into a string.
        payload_transformer: Hook applied to the payload before serialization.
    """

    def __init__(
        self,
        *,
        serializer: Callable[[dict[str, Any]], str] | None = None,
        payload_transformer: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
    ) -> None:
        super().__init__()
        self._serializer = serializer or (lambda payload: json.dumps(payload, default=str))
        self._transform = payload_transformer

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if self._transform is not None:
            payload = self._transform(payload)
        return self._serializer(payload).rstrip("\n")


def setup_logger(
    *,
    level: int | str = logging.INFO,
    use_json: bool = False,
    json_serializer: Callable[[dict[str, Any]], str] | None = None,
    payload_transformer: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
    stream: Any = None,
    force: bool = False,
) -> logging.Logger:
    """Configure the root logger.

    Existing handlers are kept unless ``force`` is set, so calling this twice
    is harmless.
    """
    root = logging.getLogger()
    if root.handlers and not force:
        root.setLevel(level)
        return root

    for handler in list(root.handlers):
        root.removeHandler(handler)

    target = stream if stream is not None else sys.stderr
    handler = logging.StreamHandler(target)
    if use_json:
        handler.setFormatter(JSONFormatter(serializer=json_serializer, payload_transformer=payload_transformer))
    else:
        handler.setFormatter(ColoredFormatter(use_color=hasattr(target, "isatty") and target.isatty()))

    root.addHandler(handler)
    root.setLevel(level)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger; bare names are placed under ``streamable_mcp``."""
    if name != "streamable_mcp" and not name.startswith("streamable_mcp."):
        name = f"streamable_mcp.{name}"
    return logging.getLogger(name)


__all__ = ["ColoredFormatter", "JSONFormatter", "get_logger", "setup_logger", "DEFAULT_FORMAT"]
