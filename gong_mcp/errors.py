"""Error taxonomy shared by the URI router, the search tool and the adapter.

Every failure detected while serving a request is raised as a
:class:`GongError` subclass.  Each carries a machine-readable ``kind``, a
short human ``message`` and a JSON-serialisable ``context`` with enough
detail (offending field, attempted value, backend status code) to diagnose
the problem without re-running the request.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# JSON-RPC error codes used when a GongError crosses the protocol boundary.
INVALID_REQUEST = -32600
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
RESOURCE_NOT_FOUND = -32002

_REDACTED = "***"


class ErrorKind(str, Enum):
    NOT_CONFIGURED = "NotConfigured"
    INVALID_URI = "InvalidUri"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    INVALID_PARAMS = "InvalidParams"
    API_ERROR = "ApiError"


_JSONRPC_CODES: dict[ErrorKind, int] = {
    ErrorKind.NOT_CONFIGURED: INVALID_REQUEST,
    ErrorKind.INVALID_URI: INVALID_PARAMS,
    ErrorKind.RESOURCE_NOT_FOUND: RESOURCE_NOT_FOUND,
    ErrorKind.INVALID_PARAMS: INVALID_PARAMS,
    ErrorKind.API_ERROR: INTERNAL_ERROR,
}


class GongError(Exception):
    """Base class for every request-time failure."""

    kind: ErrorKind = ErrorKind.API_ERROR

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        self.message = message
        self.context: dict[str, Any] = dict(context or {})
        super().__init__(message)

    @property
    def code(self) -> int:
        """JSON-RPC error code for this kind."""
        return _JSONRPC_CODES[self.kind]

    def to_envelope(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "context": self.context,
        }

    def redact(self, secrets: tuple[str, ...] | list[str]) -> GongError:
        """Strip any occurrence of *secrets* from ``message`` and ``context``.

        Returns ``self`` for chaining.
        """
        secrets = [s for s in secrets if s]
        if secrets:
            self.message = _scrub(self.message, secrets)
            self.context = _scrub(self.context, secrets)
            self.args = (self.message,)
        return self


class NotConfiguredError(GongError):
    kind = ErrorKind.NOT_CONFIGURED


class InvalidUriError(GongError):
    kind = ErrorKind.INVALID_URI


class ResourceNotFoundError(GongError):
    kind = ErrorKind.RESOURCE_NOT_FOUND


class InvalidParamsError(GongError):
    kind = ErrorKind.INVALID_PARAMS


class ApiError(GongError):
    kind = ErrorKind.API_ERROR


def _scrub(value: Any, secrets: list[str]) -> Any:
    if isinstance(value, str):
        for secret in secrets:
            value = value.replace(secret, _REDACTED)
        return value
    if isinstance(value, dict):
        return {_scrub(k, secrets): _scrub(v, secrets) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_scrub(v, secrets) for v in value]
    return value
