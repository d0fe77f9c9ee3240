"""MCP protocol binding and the FastAPI application for HTTP mode.

``create_mcp_server`` registers a :class:`~gong_mcp.adapter.GongAdapter` on a
low-level ``mcp`` server, converting adapter results to MCP types and
adapter errors to MCP error responses.  The same server is then served
either over stdio (``run_stdio``) or over streamable HTTP mounted at
``/mcp`` inside a FastAPI app (``create_app``).

Run with:
    gong-mcp                                   # stdio
    gong-mcp --mode http --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

import json
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.shared.exceptions import McpError
from pydantic import AnyUrl
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from gong_mcp.adapter import GongAdapter
from gong_mcp.api.routes import router
from gong_mcp.errors import GongError

logger = logging.getLogger(__name__)

MCP_PATH = "/mcp"
JSON_MIME = "application/json"


def _to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _mcp_error(exc: GongError) -> McpError:
    return McpError(types.ErrorData(code=exc.code, message=exc.message, data=exc.to_envelope()))


# ── MCP binding ──────────────────────────────────────────────────────


def create_mcp_server(adapter: GongAdapter) -> Server:
    """Build a low-level MCP server whose handlers delegate to *adapter*."""
    server: Server = Server(adapter.name, version=adapter.version, instructions=adapter.instructions)

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [
            types.Resource(uri=r.uri, name=r.name, description=r.description, mimeType=r.mime_type)
            for r in adapter.list_resources()
        ]

    @server.list_resource_templates()
    async def list_resource_templates() -> list[types.ResourceTemplate]:
        return [
            types.ResourceTemplate(
                uriTemplate=t.uri_template,
                name=t.name,
                description=t.description,
                mimeType=t.mime_type,
            )
            for t in adapter.list_resource_templates()
        ]

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        try:
            payload = await adapter.read_resource(str(uri))
        except GongError as exc:
            raise _mcp_error(exc) from exc
        return [ReadResourceContents(content=_to_json(payload), mime_type=JSON_MIME)]

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=t.name, description=t.description, inputSchema=t.input_schema)
            for t in adapter.list_tools()
        ]

    # Arguments are validated by the adapter so type errors come back as
    # InvalidParams envelopes rather than generic schema messages.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> Any:
        try:
            result = await adapter.call_tool(name, arguments)
        except GongError as exc:
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=_to_json(exc.to_envelope()))],
                isError=True,
            )
        return [types.TextContent(type="text", text=_to_json(result))]

    return server


async def run_stdio(adapter: GongAdapter) -> None:
    """Serve *adapter* over stdin/stdout until the client disconnects."""
    server = create_mcp_server(adapter)
    logger.info("Using stdio transport")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await adapter.aclose()


# ── HTTP application ─────────────────────────────────────────────────


class _MCPEndpoint:
    """ASGI endpoint forwarding ``/mcp`` requests to the session manager."""

    def __init__(self, session_manager: StreamableHTTPSessionManager) -> None:
        self._session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._session_manager.handle_request(scope, receive, send)


def create_app(adapter: GongAdapter) -> FastAPI:
    """FastAPI app exposing the MCP streamable-HTTP endpoint plus health routes.

    Each call creates a fresh session manager, whose ``run()`` may only be
    entered once.
    """
    session_manager = StreamableHTTPSessionManager(
        app=create_mcp_server(adapter),
        json_response=True,
        stateless=True,
    )

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        application.state.adapter = adapter
        try:
            async with session_manager.run():
                logger.info("MCP HTTP endpoint ready at %s", MCP_PATH)
                yield
        finally:
            await adapter.aclose()

    application = FastAPI(
        title="Gong MCP Server",
        description="Gong calls, transcripts and users over the Model Context Protocol.",
        version=adapter.version,
        lifespan=lifespan,
    )
    application.state.adapter = adapter

    # ── Request-ID middleware ────────────────────────────────────────
    @application.middleware("http")
    async def add_request_id(request: Request, call_next) -> Response:
        """Attach a request ID to every request and echo it in ``X-Request-ID``."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        logger.info("[%s] %s %s", request_id, request.method, request.url.path)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    application.router.routes.append(
        Route(MCP_PATH, endpoint=_MCPEndpoint(session_manager), methods=["GET", "POST", "DELETE"])
    )
    application.include_router(router, prefix="/api")

    @application.get("/")
    async def root():
        """Root endpoint with service info."""
        return {
            "service": adapter.name,
            "version": adapter.version,
            "mcp": MCP_PATH,
            "health": "/api/health",
        }

    return application
