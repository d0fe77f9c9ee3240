"""Resource addressing for the ``gong://`` URI scheme.

Three address families exist::

    gong://status                     configuration diagnostics
    gong://users                      workspace users
    gong://calls/{callId}/transcript  transcript of one call

Matching is exact and case-sensitive.
"""

from __future__ import annotations

from dataclasses import dataclass

from gong_mcp.errors import InvalidUriError

SCHEME = "gong://"
STATUS_URI = "gong://status"
USERS_URI = "gong://users"
TRANSCRIPT_PREFIX = "gong://calls/"
TRANSCRIPT_SUFFIX = "/transcript"
TRANSCRIPT_TEMPLATE = "gong://calls/{callId}/transcript"


@dataclass(frozen=True)
class StatusAddress:
    pass


@dataclass(frozen=True)
class UserListAddress:
    pass


@dataclass(frozen=True)
class TranscriptAddress:
    call_id: str


ResourceAddress = StatusAddress | UserListAddress | TranscriptAddress


@dataclass(frozen=True)
class ResourceDescriptor:
    """A concrete resource the server advertises."""

    uri: str
    name: str
    description: str
    mime_type: str = "application/json"


@dataclass(frozen=True)
class ResourceTemplateDescriptor:
    """An RFC 6570 URI template the server advertises."""

    uri_template: str
    name: str
    description: str
    mime_type: str = "application/json"


STATIC_RESOURCES: tuple[ResourceDescriptor, ...] = (
    ResourceDescriptor(
        uri=STATUS_URI,
        name="Configuration Status",
        description="Check if the Gong API is configured correctly",
    ),
    ResourceDescriptor(
        uri=USERS_URI,
        name="Gong Users",
        description="List of users in your Gong workspace",
    ),
)

RESOURCE_TEMPLATES: tuple[ResourceTemplateDescriptor, ...] = (
    ResourceTemplateDescriptor(
        uri_template=TRANSCRIPT_TEMPLATE,
        name="Call Transcript",
        description="Retrieve the transcript for a specific Gong call by ID",
    ),
)


def parse_resource_uri(uri: str) -> ResourceAddress:
    """Resolve a raw resource address into a typed intent.

    Raises:
        InvalidUriError: ``reason`` in the context is ``missing_call_id`` for a
            transcript address with a blank id, ``unknown_resource`` for
            anything that is not a known address family.
    """
    if uri == STATUS_URI:
        return StatusAddress()
    if uri == USERS_URI:
        return UserListAddress()

    if (
        uri.startswith(TRANSCRIPT_PREFIX)
        and uri.endswith(TRANSCRIPT_SUFFIX)
        and len(uri) >= len(TRANSCRIPT_PREFIX) + len(TRANSCRIPT_SUFFIX)
    ):
        call_id = uri[len(TRANSCRIPT_PREFIX) : len(uri) - len(TRANSCRIPT_SUFFIX)]
        if not call_id.strip():
            raise InvalidUriError(
                "Call ID cannot be empty",
                {
                    "uri": uri,
                    "reason": "missing_call_id",
                    "expected": TRANSCRIPT_TEMPLATE,
                },
            )
        return TranscriptAddress(call_id=call_id)

    raise InvalidUriError(
        f"Unknown resource: {uri}",
        {
            "uri": uri,
            "reason": "unknown_resource",
            "known": [r.uri for r in STATIC_RESOURCES] + [t.uri_template for t in RESOURCE_TEMPLATES],
        },
    )
