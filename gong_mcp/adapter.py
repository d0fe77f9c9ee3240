"""Transport-independent facade over the Gong API.

:class:`GongAdapter` implements the five protocol operations (list
resources, list resource templates, read resource, list tools, call tool)
by composing the URI router, the Gong client, the response transformer and
the ``search_calls`` tool.  It knows nothing about MCP wire types; see
``gong_mcp.server`` for that binding.

Failures are raised as :mod:`gong_mcp.errors` exceptions.  Any configured
access key or secret is scrubbed from them before they leave the adapter.
"""

from __future__ import annotations

import logging
from typing import Any

from gong_mcp import __version__
from gong_mcp.config import REQUIRED_ENV, SERVER_NAME, GongConfig
from gong_mcp.errors import (
    ApiError,
    GongError,
    InvalidParamsError,
    NotConfiguredError,
    ResourceNotFoundError,
)
from gong_mcp.routing import (
    RESOURCE_TEMPLATES,
    STATIC_RESOURCES,
    ResourceDescriptor,
    ResourceTemplateDescriptor,
    StatusAddress,
    TranscriptAddress,
    UserListAddress,
    parse_resource_uri,
)
from gong_mcp.services.gong_client import GongAPIError, GongClient
from gong_mcp.tools import ToolDescriptor
from gong_mcp.tools.search_calls import SEARCH_CALLS_TOOL, parse_search_arguments, search_calls
from gong_mcp.transform import flatten_transcript, flatten_users

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Gong MCP Server - Access Gong calls, transcripts and users. "
    "Read gong://status to check configuration, gong://users for the user "
    "list, gong://calls/{callId}/transcript for a transcript, and use the "
    "search_calls tool to find calls. Configure using environment variables: "
    + ", ".join(REQUIRED_ENV)
    + "."
)

_NOT_CONFIGURED_MESSAGE = "Gong API is not configured. Please set environment variables."


class GongAdapter:
    """Routes protocol requests to the Gong API.

    Args:
        config: Gong credentials, or ``None`` when the process has none.
        client: Optional pre-built client (tests inject one backed by
                ``httpx.MockTransport``).  Built from *config* otherwise.
    """

    def __init__(self, config: GongConfig | None, client: GongClient | None = None):
        self._config = config
        if client is None and config is not None:
            client = GongClient(config)
        self._client = client

    @property
    def name(self) -> str:
        return SERVER_NAME

    @property
    def version(self) -> str:
        return __version__

    @property
    def instructions(self) -> str:
        return INSTRUCTIONS

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    # ── Internal helpers ─────────────────────────────────────────────

    def _is_configured(self) -> bool:
        return self._config is not None and self._client is not None

    def _require_configured(self, **context: Any) -> GongClient:
        if not self._is_configured():
            raise NotConfiguredError(
                _NOT_CONFIGURED_MESSAGE,
                {**context, "required_env": list(REQUIRED_ENV)},
            )
        return self._client

    def _redacted(self, exc: GongError) -> GongError:
        if self._config is not None:
            exc.redact(self._config.secrets)
        return exc

    # ── Listing (static, configuration-independent) ──────────────────

    def list_resources(self) -> list[ResourceDescriptor]:
        return list(STATIC_RESOURCES)

    def list_resource_templates(self) -> list[ResourceTemplateDescriptor]:
        return list(RESOURCE_TEMPLATES)

    def list_tools(self) -> list[ToolDescriptor]:
        return [SEARCH_CALLS_TOOL]

    # ── Resources ────────────────────────────────────────────────────

    async def read_resource(self, uri: str) -> dict[str, Any]:
        """Resolve *uri* and return its JSON payload."""
        try:
            address = parse_resource_uri(uri)
            if isinstance(address, StatusAddress):
                return self._status()
            if isinstance(address, UserListAddress):
                return await self._users(uri)
            if isinstance(address, TranscriptAddress):
                return await self._transcript(uri, address.call_id)
            raise AssertionError(f"unhandled address {address!r}")
        except GongError as exc:
            logger.info("read_resource %s failed: %s (%s)", uri, exc.kind.value, exc.message)
            raise self._redacted(exc)

    def _status(self) -> dict[str, Any]:
        if self._config is not None:
            return {
                "configured": True,
                "base_url": self._config.base_url,
                "server": {"name": self.name, "version": self.version},
                "message": "Gong API is configured and ready to use",
            }
        return {
            "configured": False,
            "base_url": None,
            "server": {"name": self.name, "version": self.version},
            "required_env": list(REQUIRED_ENV),
            "message": (
                "Gong API is not configured. Please set "
                "GONG_BASE_URL, GONG_ACCESS_KEY, and GONG_ACCESS_KEY_SECRET "
                "environment variables."
            ),
        }

    async def _users(self, uri: str) -> dict[str, Any]:
        client = self._require_configured(uri=uri)
        try:
            data = await client.list_users()
        except GongAPIError as exc:
            raise ApiError(
                "Gong API request failed",
                {"uri": uri, "status_code": exc.status_code, "error": str(exc)},
            ) from exc

        users = flatten_users(data.get("users"))
        if not users:
            return {"users": [], "count": 0, "message": "No users found"}
        return {
            "users": users,
            "count": len(users),
            "message": f"Retrieved {len(users)} users",
        }

    async def _transcript(self, uri: str, call_id: str) -> dict[str, Any]:
        client = self._require_configured(uri=uri, callId=call_id)
        try:
            data = await client.get_call_transcripts([call_id])
        except GongAPIError as exc:
            if exc.is_not_found:
                raise ResourceNotFoundError(
                    "Call not found",
                    {"uri": uri, "callId": call_id, "status_code": exc.status_code, "error": str(exc)},
                ) from exc
            raise ApiError(
                "Gong API request failed",
                {"uri": uri, "callId": call_id, "status_code": exc.status_code, "error": str(exc)},
            ) from exc

        transcripts = data.get("callTranscripts")
        if not isinstance(transcripts, list) or not transcripts:
            raise ResourceNotFoundError(
                "No transcript found for this call",
                {"uri": uri, "callId": call_id},
            )

        # Entries without a callId are taken to be the requested call
        transcript = next(
            (t for t in transcripts if isinstance(t, dict) and t.get("callId") in (call_id, None)),
            None,
        )
        if transcript is None:
            raise ResourceNotFoundError(
                "No transcript found for this call",
                {"uri": uri, "callId": call_id},
            )
        flat = flatten_transcript(transcript)
        if flat["callId"] is None:
            flat["callId"] = call_id
        return flat

    # ── Tools ────────────────────────────────────────────────────────

    async def call_tool(self, name: str, arguments: Any = None) -> dict[str, Any]:
        """Invoke a tool by name with raw JSON *arguments*."""
        try:
            if name != SEARCH_CALLS_TOOL.name:
                raise InvalidParamsError(
                    f"Unknown tool: {name}",
                    {"tool": name, "known": [t.name for t in self.list_tools()]},
                )
            filters = parse_search_arguments(arguments)
            return await search_calls(self._client, filters, is_configured=self._is_configured())
        except GongError as exc:
            logger.info("call_tool %s failed: %s (%s)", name, exc.kind.value, exc.message)
            raise self._redacted(exc)
