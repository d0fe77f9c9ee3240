"""Async HTTP client for the Gong REST API v2.

Gong API docs: https://gong.app.gong.io/settings/api/documentation
Every request authenticates with HTTP basic auth using the access key and
access key secret generated in the Gong admin console.

The client is deliberately single-shot: each public method issues exactly
one HTTP request and never retries.  Retry policy, if any, belongs to the
caller.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from gong_mcp.config import GongConfig
from gong_mcp.services.metrics import metrics

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30.0
_SERVICE = "gong"

# Fields requested from /v2/calls/extensive for every search.
_CONTENT_SELECTOR: dict[str, Any] = {
    "exposedFields": {
        "parties": True,
        "content": {"structure": True},
    },
}


class GongAPIError(Exception):
    """Raised when a Gong API call fails or returns an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class GongClient:
    """Thin async wrapper around the Gong REST API v2.

    One instance is shared by every request of a server process; it holds
    no per-request state.  ``transport`` is injectable so tests can plug in
    an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: GongConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            auth=(config.access_key, config.access_key_secret),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Internal helpers ─────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute one HTTP request and return the decoded JSON object."""
        operation = f"{method} {path}"
        started = time.perf_counter()
        try:
            response = await self._client.request(method, path, params=params, json=json_body)
        except httpx.HTTPError as exc:
            elapsed = (time.perf_counter() - started) * 1000
            metrics.record_failure(_SERVICE, operation, type(exc).__name__, latency_ms=elapsed)
            logger.warning("Gong API %s failed: %s", operation, type(exc).__name__)
            raise GongAPIError(f"Gong API request failed: {type(exc).__name__}: {exc}") from exc

        elapsed = (time.perf_counter() - started) * 1000
        if response.status_code >= 400:
            bucket = "5xx" if response.status_code >= 500 else "4xx"
            metrics.record_failure(_SERVICE, operation, bucket, latency_ms=elapsed)
            logger.info("Gong API %s returned %d", operation, response.status_code)
            raise GongAPIError(
                f"Gong API error {response.status_code}: {_error_detail(response)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            metrics.record_failure(_SERVICE, operation, "malformed", latency_ms=elapsed)
            raise GongAPIError(
                "Gong API returned a non-JSON response",
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict):
            metrics.record_failure(_SERVICE, operation, "malformed", latency_ms=elapsed)
            raise GongAPIError(
                f"Gong API returned an unexpected payload of type {type(data).__name__}",
                status_code=response.status_code,
            )

        metrics.record_success(_SERVICE, operation, latency_ms=elapsed)
        return data

    # ── Public API methods ───────────────────────────────────────────

    async def list_users(self, cursor: str | None = None) -> dict[str, Any]:
        """Fetch one page of workspace users (``GET /v2/users``)."""
        params: dict[str, str] = {"includeAvatars": "false"}
        if cursor:
            params["cursor"] = cursor
        return await self._request("GET", "/v2/users", params=params)

    async def get_call_transcripts(self, call_ids: list[str]) -> dict[str, Any]:
        """Fetch transcripts for the given calls (``POST /v2/calls/transcript``).

        Gong answers 404 when none of the ids match a call.
        """
        return await self._request(
            "POST",
            "/v2/calls/transcript",
            json_body={"filter": {"callIds": list(call_ids)}},
        )

    async def list_calls_extensive(
        self,
        filter_: dict[str, Any],
        cursor: str | None = None,
    ) -> dict[str, Any]:
        """Search calls with parties and structure (``POST /v2/calls/extensive``).

        Args:
            filter_: Gong ``filter`` object (``fromDateTime``, ``toDateTime``,
                     ``workspaceId``, ``callIds``, ``primaryUserIds``).
            cursor: Opaque pagination token from a previous response, sent
                    unchanged.
        """
        body: dict[str, Any] = {"filter": filter_, "contentSelector": _CONTENT_SELECTOR}
        if cursor is not None:
            body["cursor"] = cursor
        return await self._request("POST", "/v2/calls/extensive", json_body=body)


def _error_detail(response: httpx.Response) -> str:
    """Pull Gong's error message out of a failed response."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(e) for e in errors)
        if data.get("message"):
            return str(data["message"])
    return response.reason_phrase
