"""Tools exposed to MCP clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ToolDescriptor:
    """Name, description and JSON Schema of a callable tool."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)
