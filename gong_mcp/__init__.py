"""Gong MCP Server — Gong calls, transcripts and users over the Model Context Protocol.

Architecture Overview
=====================

The server is a thin adapter between MCP clients (LLM applications) and the
Gong REST API v2.  Every MCP request is handled by the ``GongAdapter`` facade:

1. **Resources** — ``gong://status``, ``gong://users`` and the
   ``gong://calls/{callId}/transcript`` template.  The URI router turns the
   address into a typed intent, the Gong client makes one API call, and the
   response transformer flattens the nested payload into LLM-friendly JSON.

2. **Tools** — ``search_calls``: arguments are validated into
   ``SearchFilters`` (pydantic, strict), sent as one ``/v2/calls/extensive``
   request, and the flattened calls are returned with an opaque cursor for
   the next page.

Routing: MCP request → adapter → (router | argument validation) → Gong API →
transformer → JSON result or typed error envelope.

Key Design Decisions
--------------------
- **Optional configuration**: missing credentials are a valid runtime state.
  ``gong://status`` always works; everything else fails fast with
  ``NotConfigured`` before any network call.
- **Single-shot backend calls**: one HTTP request per MCP request, no retries,
  no caching.  Timeouts belong to the HTTP client.
- **Error taxonomy**: ``NotConfigured``, ``InvalidUri``, ``ResourceNotFound``,
  ``InvalidParams``, ``ApiError``, each with a structured, secret-free context.
- **Dual transport**: stdio (default, for desktop clients) and streamable HTTP
  served by FastAPI + uvicorn.

Package Structure
-----------------
- ``gong_mcp/config.py`` — configuration from environment / SSM
- ``gong_mcp/errors.py`` — error taxonomy
- ``gong_mcp/routing.py`` — ``gong://`` URI router and resource descriptors
- ``gong_mcp/transform.py`` — response flattening
- ``gong_mcp/adapter.py`` — protocol-independent facade
- ``gong_mcp/server.py`` — MCP binding and the FastAPI/HTTP application
- ``gong_mcp/main.py`` — CLI entry point
- ``gong_mcp/services/`` — Gong API client and metrics
- ``gong_mcp/tools/`` — the ``search_calls`` tool
- ``gong_mcp/api/`` — FastAPI routes and Pydantic schemas
"""

__version__ = "0.1.0"
