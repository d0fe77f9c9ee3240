"""Shared test fixtures for the Gong MCP test suite."""

from __future__ import annotations

import json
import os
from collections.abc import Callable

import httpx
import pytest

from gong_mcp.adapter import GongAdapter
from gong_mcp.config import GongConfig
from gong_mcp.services.gong_client import GongClient

ACCESS_KEY = "test-access-key-123"
ACCESS_KEY_SECRET = "test-access-secret-456"


def pytest_configure(config):
    """Keep metrics local and make sure no real credentials leak into tests."""
    os.environ["METRICS_ENABLED"] = "false"
    for name in ("GONG_BASE_URL", "GONG_ACCESS_KEY", "GONG_ACCESS_KEY_SECRET", "AWS_EXECUTION_ENV"):
        os.environ.pop(name, None)


# ── Sample Gong payloads ─────────────────────────────────────────────


def make_call(call_id: str, title: str | None = "Acme demo", started: str | None = "2024-01-01T10:00:00Z",
              duration: int | None = 1800, **meta) -> dict:
    return {
        "metaData": {
            "id": call_id,
            "url": f"https://app.gong.io/call?id={call_id}",
            "title": title,
            "scheduled": started,
            "started": started,
            "duration": duration,
            "primaryUserId": "u1",
            "direction": "Conference",
            "scope": "External",
            "system": "Zoom",
            "language": "eng",
            "workspaceId": "ws-1",
            **meta,
        },
        "parties": [
            {
                "id": "p1",
                "emailAddress": "ana@acme.com",
                "name": "Ana Host",
                "title": "AE",
                "userId": "u1",
                "speakerId": "s1",
                "affiliation": "Internal",
                "methods": ["Invitee"],
            },
            {
                "id": "p2",
                "emailAddress": "bo@client.com",
                "name": "Bo Buyer",
                "speakerId": "s2",
                "affiliation": "External",
            },
        ],
        "content": {"structure": [{"name": "Intro", "duration": 120}]},
    }


def calls_page(calls: list[dict], cursor: str | None = None, total: int | None = None) -> dict:
    records = {
        "totalRecords": total if total is not None else len(calls),
        "currentPageSize": len(calls),
        "currentPageNumber": 0,
    }
    if cursor is not None:
        records["cursor"] = cursor
    return {"requestId": "req-1", "records": records, "calls": calls}


TRANSCRIPT_PAYLOAD = {
    "requestId": "req-2",
    "records": {"totalRecords": 1, "currentPageSize": 1, "currentPageNumber": 0},
    "callTranscripts": [
        {
            "callId": "c1",
            "transcript": [
                {
                    "speakerId": "s1",
                    "topic": "Intro",
                    "sentences": [
                        {"start": 0, "end": 1500, "text": "Hi there."},
                        {"start": 1500, "end": 3000, "text": "Thanks for joining."},
                    ],
                },
                {
                    "speakerId": "s2",
                    "topic": None,
                    "sentences": [{"start": 3100, "end": 4000, "text": "Happy to be here."}],
                },
                {
                    "speakerId": "s1",
                    "topic": "Pricing",
                    "sentences": [{"start": 4100, "end": 6000, "text": "Let's talk pricing."}],
                },
            ],
        }
    ],
}

USERS_PAYLOAD = {
    "requestId": "req-3",
    "records": {"totalRecords": 2, "currentPageSize": 2, "currentPageNumber": 0},
    "users": [
        {
            "id": "u1",
            "emailAddress": "ana@acme.com",
            "firstName": "Ana",
            "lastName": "Host",
            "title": "AE",
            "active": True,
            "managerId": "u9",
        },
        {"id": "u2", "emailAddress": "cy@acme.com", "active": False},
    ],
}


# ── Fixtures ─────────────────────────────────────────────────────────


class RecordingHandler:
    """``httpx.MockTransport`` handler that records requests and replays responses."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self._responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    def json_bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture
def gong_config() -> GongConfig:
    return GongConfig(
        base_url="https://api.gong.test",
        access_key=ACCESS_KEY,
        access_key_secret=ACCESS_KEY_SECRET,
    )


@pytest.fixture
def make_handler():
    """Factory: ``make_handler(json_data, status_code)`` or ``make_handler(callable)``."""

    def _make(data=None, status_code: int = 200) -> RecordingHandler:
        if callable(data):
            return RecordingHandler(data)
        return RecordingHandler(lambda request: httpx.Response(status_code, json=data))

    return _make


@pytest.fixture
def make_adapter(gong_config):
    """Factory for a configured adapter backed by a mock transport."""

    def _make(handler: RecordingHandler) -> GongAdapter:
        client = GongClient(gong_config, transport=httpx.MockTransport(handler))
        return GongAdapter(gong_config, client=client)

    return _make


@pytest.fixture
def call_factory():
    return make_call


@pytest.fixture
def page_factory():
    return calls_page


@pytest.fixture
def transcript_payload() -> dict:
    return json.loads(json.dumps(TRANSCRIPT_PAYLOAD))


@pytest.fixture
def users_payload() -> dict:
    return json.loads(json.dumps(USERS_PAYLOAD))
