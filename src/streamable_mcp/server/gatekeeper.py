# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Origin gatekeeper for the Streamable HTTP endpoint.

Browsers attach an ``Origin`` header to cross-site requests; servers are
expected to validate it to defeat DNS rebinding. The policy:

- no ``Origin`` header: admit (non-browser clients omit it)
- exact match with the configured origin: admit
- any ``http://localhost`` origin, whatever the port: admit
- anything else: reject

The same check guards OPTIONS, GET and POST.

References:
    https://modelcontextprotocol.io/specification/2025-06-18/basic/transports#security-warning
"""

from __future__ import annotations

from ..exceptions import OriginNotAllowedError
from ..utils import get_logger


_logger = get_logger("streamable_mcp.gatekeeper")

LOCALHOST_PREFIX = "http://localhost"


class OriginGatekeeper:
    """Admits or rejects a connection by its declared origin.

    Example:
        >>> gate = OriginGatekeeper("https://app.example.com")
        >>> gate.is_allowed(None)
        True
        >>> gate.is_allowed("http://localhost:5173")
        True
        >>> gate.check("https://evil.example")  # Raises OriginNotAllowedError
    """

    def __init__(self, allowed_origin: str) -> None:
        self._allowed_origin = allowed_origin

    @property
    def allowed_origin(self) -> str:
        return self._allowed_origin

    def is_allowed(self, origin: str | None) -> bool:
        if not origin:
            return True
        if origin == self._allowed_origin:
            return True
        return origin.startswith(LOCALHOST_PREFIX)

    def check(self, origin: str | None) -> None:
        """Raise :class:`OriginNotAllowedError` unless ``origin`` is admitted."""
        if self.is_allowed(origin):
            return
        _logger.warning("origin rejected", extra={"event": "origin.reject", "origin": origin})
        raise OriginNotAllowedError(origin or "")


__all__ = ["OriginGatekeeper", "LOCALHOST_PREFIX"]
