"""Pydantic schemas for the FastAPI endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "gong-mcp"
    configured: bool = Field(..., description="Whether Gong credentials are present")


class StatusResponse(BaseModel):
    """Configuration diagnostics, same content as the ``gong://status`` resource."""

    configured: bool
    base_url: str | None = None
    message: str
    required_env: list[str] = Field(default_factory=list)
