"""FastAPI route definitions served next to the MCP endpoint in HTTP mode."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request

from gong_mcp.api.schemas import HealthResponse, StatusResponse
from gong_mcp.routing import STATUS_URI

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_adapter(request: Request):
    """Retrieve the Gong adapter from app state (set in ``create_app``)."""
    adapter = getattr(request.app.state, "adapter", None)
    if adapter is None:
        raise HTTPException(
            status_code=503,
            detail="The server is still starting up. Please try again in a moment.",
        )
    return adapter


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Liveness check; never calls the Gong API."""
    adapter = _get_adapter(request)
    status = await adapter.read_resource(STATUS_URI)
    return HealthResponse(service=adapter.name, configured=status["configured"])


@router.get("/status", response_model=StatusResponse)
async def configuration_status(request: Request):
    """HTTP view of the ``gong://status`` resource for operators."""
    adapter = _get_adapter(request)
    return StatusResponse(**await adapter.read_resource(STATUS_URI))
