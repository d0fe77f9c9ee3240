"""The ``search_calls`` tool: filtered, paginated search over Gong calls.

Arguments arrive as an untyped JSON object.  They are validated by the
:class:`SearchFilters` pydantic model in strict mode (no implicit coercion),
turned into a Gong ``/v2/calls/extensive`` filter, and the single backend
response is flattened and packaged with its pagination cursor.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from gong_mcp.errors import ApiError, InvalidParamsError, NotConfiguredError
from gong_mcp.services.gong_client import GongAPIError, GongClient
from gong_mcp.tools import ToolDescriptor
from gong_mcp.transform import flatten_calls

logger = logging.getLogger(__name__)

TOOL_NAME = "search_calls"

# Tool parameter name → Gong filter field.
_GONG_FILTER_FIELDS = {
    "from_date_time": "fromDateTime",
    "to_date_time": "toDateTime",
    "workspace_id": "workspaceId",
    "call_ids": "callIds",
    "primary_user_ids": "primaryUserIds",
}


def _parse_datetime(value: str) -> datetime:
    """Parse ISO 8601; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


class SearchFilters(BaseModel):
    """Validated ``search_calls`` arguments.

    Every field is optional; an empty instance means "first page of every
    call the credentials can see".  Strings are trimmed and blank values
    normalise to absent.  ``cursor`` is opaque and kept verbatim.
    """

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    from_date_time: str | None = None
    to_date_time: str | None = None
    workspace_id: str | None = None
    call_ids: list[str] | None = None
    primary_user_ids: list[str] | None = None
    cursor: str | None = None

    @field_validator("from_date_time", "to_date_time")
    @classmethod
    def _iso_datetime(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        value = value.strip()
        try:
            _parse_datetime(value)
        except ValueError as exc:
            raise ValueError(f"'{value}' is not an ISO 8601 date-time") from exc
        return value

    @field_validator("workspace_id")
    @classmethod
    def _trimmed(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("call_ids", "primary_user_ids")
    @classmethod
    def _trimmed_items(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        items = [item.strip() for item in value if item.strip()]
        return items or None

    @field_validator("cursor")
    @classmethod
    def _opaque(cls, value: str | None) -> str | None:
        return value or None

    def to_gong_filter(self) -> dict[str, Any]:
        """Gong ``filter`` object with only the applied fields."""
        return {
            gong_name: getattr(self, name)
            for name, gong_name in _GONG_FILTER_FIELDS.items()
            if getattr(self, name) is not None
        }

    def echo(self) -> dict[str, Any]:
        """The applied filters, keyed by tool parameter name."""
        return self.model_dump(exclude_none=True)


SEARCH_CALLS_TOOL = ToolDescriptor(
    name=TOOL_NAME,
    description=(
        "Search Gong calls with optional filters. Returns flattened call "
        "summaries (title, time window, duration, participants, workspace) "
        "and a cursor for the next page. Pass next_cursor back as 'cursor' "
        "to continue; all other filters should be repeated unchanged."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "from_date_time": {
                "type": "string",
                "description": "Only calls started at or after this ISO 8601 date-time (e.g. 2024-01-01T00:00:00Z)",
            },
            "to_date_time": {
                "type": "string",
                "description": "Only calls started before this ISO 8601 date-time",
            },
            "workspace_id": {
                "type": "string",
                "description": "Restrict to one Gong workspace",
            },
            "call_ids": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Restrict to these call IDs",
            },
            "primary_user_ids": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Restrict to calls hosted by these user IDs",
            },
            "cursor": {
                "type": "string",
                "description": "Opaque pagination cursor from a previous result's nextCursor",
            },
        },
        "required": [],
    },
)


def parse_search_arguments(arguments: Any) -> SearchFilters:
    """Validate raw tool arguments into :class:`SearchFilters`.

    Raises:
        InvalidParamsError: wrong types, malformed dates, or
            ``from_date_time`` later than ``to_date_time``.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise InvalidParamsError(
            "Tool arguments must be a JSON object",
            {"tool": TOOL_NAME, "value": repr(arguments)[:200]},
        )

    try:
        filters = SearchFilters.model_validate(arguments)
    except ValidationError as exc:
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
                "value": err.get("input"),
            }
            for err in exc.errors(include_url=False, include_context=False)
        ]
        first = errors[0] if errors else {"field": None, "value": None}
        raise InvalidParamsError(
            f"Invalid arguments for {TOOL_NAME}: {first['field']}",
            {"tool": TOOL_NAME, "field": first["field"], "value": first["value"], "errors": errors},
        ) from exc

    if filters.from_date_time and filters.to_date_time:
        if _parse_datetime(filters.from_date_time) > _parse_datetime(filters.to_date_time):
            raise InvalidParamsError(
                "from_date_time must not be later than to_date_time",
                {
                    "tool": TOOL_NAME,
                    "field": "from_date_time",
                    "value": filters.from_date_time,
                    "to_date_time": filters.to_date_time,
                },
            )

    return filters


async def search_calls(
    client: GongClient | None,
    filters: SearchFilters,
    *,
    is_configured: bool,
) -> dict[str, Any]:
    """Run one call search and package it as a paginated call list.

    The result always satisfies ``count == len(calls)`` and
    ``hasMore == ("nextCursor" in result)``.
    """
    if not is_configured or client is None:
        raise NotConfiguredError(
            "Gong API is not configured. Please set environment variables.",
            {"tool": TOOL_NAME},
        )

    try:
        data = await client.list_calls_extensive(filters.to_gong_filter(), cursor=filters.cursor)
    except GongAPIError as exc:
        if exc.is_not_found:
            # Gong answers 404 when no call matches the filter.
            logger.debug("search_calls: no calls match %s", filters.echo())
            data = {}
        else:
            logger.error("search_calls failed: %s", exc)
            raise ApiError(
                "Gong API request failed",
                {"tool": TOOL_NAME, "status_code": exc.status_code, "error": str(exc)},
            ) from exc

    calls = flatten_calls(data.get("calls"))
    records = data.get("records")
    records = records if isinstance(records, dict) else {}
    next_cursor = records.get("cursor")

    result: dict[str, Any] = {
        "calls": calls,
        "count": len(calls),
        "hasMore": False,
    }
    if isinstance(next_cursor, str) and next_cursor:
        result["nextCursor"] = next_cursor
        result["hasMore"] = True
    if isinstance(records.get("totalRecords"), int):
        result["totalRecords"] = records["totalRecords"]
    result["filtersEcho"] = filters.echo()
    return result
