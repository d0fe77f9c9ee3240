"""Flatten Gong API payloads into LLM-friendly JSON.

Gong responses are deeply nested (``metaData``, ``parties``, monologues of
sentences, ...).  The functions here project them onto flat dicts with
camelCase keys.  They are pure: no I/O, no hidden state, and the same
payload always yields the same output.  Missing or unexpected optional
fields become ``None`` instead of raising.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any

UNTITLED = "Untitled"

_PARTY_FIELDS = ("id", "name", "emailAddress", "title", "userId", "speakerId", "affiliation")


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _parse_iso(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _duration_seconds(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def _end_time(started: Any, duration: int | None) -> str | None:
    """``started + duration`` in the same ISO 8601 form, or ``None``."""
    start_dt = _parse_iso(started)
    if start_dt is None or duration is None:
        return None
    try:
        return (start_dt + timedelta(seconds=duration)).isoformat()
    except OverflowError:
        return None


# ── Calls ────────────────────────────────────────────────────────────


def call_summary(title: str, started: str | None, ended: str | None, duration: int | None) -> str:
    """One-line description such as ``'Acme demo, 2024-01-01 10:00 to 10:30 UTC (30 min)'``."""
    start_dt = _parse_iso(started)
    if start_dt is None:
        return f"{title}, time not recorded"

    end_dt = _parse_iso(ended)
    tz = start_dt.tzname() or ""
    window = start_dt.strftime("%Y-%m-%d %H:%M")
    if end_dt is not None:
        end_fmt = "%H:%M" if end_dt.date() == start_dt.date() else "%Y-%m-%d %H:%M"
        window += f" to {end_dt.strftime(end_fmt)}"
    if tz:
        window += f" {tz}"

    summary = f"{title}, {window}"
    if duration is not None:
        summary += f" ({round(duration / 60)} min)"
    return summary


def flatten_party(party: Any) -> dict[str, Any]:
    party = _as_dict(party)
    return {name: party.get(name) for name in _PARTY_FIELDS}


def flatten_call(record: Any) -> dict[str, Any]:
    """Flatten one ``/v2/calls/extensive`` call record."""
    record = _as_dict(record)
    meta = _as_dict(record.get("metaData"))

    title = meta.get("title") or UNTITLED
    started = meta.get("started")
    duration = _duration_seconds(meta.get("duration"))
    ended = _end_time(started, duration)

    return {
        "id": meta.get("id"),
        "title": title,
        "summary": call_summary(title, started, ended, duration),
        "scheduled": meta.get("scheduled"),
        "started": started,
        "ended": ended,
        "duration": duration,
        "direction": meta.get("direction"),
        "scope": meta.get("scope"),
        "system": meta.get("system"),
        "language": meta.get("language"),
        "workspaceId": meta.get("workspaceId"),
        "primaryUserId": meta.get("primaryUserId"),
        "url": meta.get("url"),
        "parties": [flatten_party(p) for p in _as_list(record.get("parties"))],
    }


def flatten_calls(records: Any) -> list[dict[str, Any]]:
    """Flatten a list of call records, keeping backend order."""
    return [flatten_call(r) for r in _as_list(records)]


# ── Transcripts ──────────────────────────────────────────────────────


def count_monologues(speaker_ids: Iterable[Any]) -> int:
    """Number of maximal runs of consecutive equal speaker ids."""
    runs = 0
    previous: Any = object()
    for speaker_id in speaker_ids:
        if runs == 0 or speaker_id != previous:
            runs += 1
        previous = speaker_id
    return runs


def flatten_transcript(call_transcript: Any) -> dict[str, Any]:
    """Flatten one entry of ``callTranscripts``.

    Monologues are unrolled into a single ordered sentence list.  The
    monologue count is re-derived from that list, so two adjacent backend
    monologues by the same speaker count once.
    """
    call_transcript = _as_dict(call_transcript)

    sentences: list[dict[str, Any]] = []
    for monologue in _as_list(call_transcript.get("transcript")):
        monologue = _as_dict(monologue)
        speaker_id = monologue.get("speakerId")
        topic = monologue.get("topic")
        for sentence in _as_list(monologue.get("sentences")):
            sentence = _as_dict(sentence)
            sentences.append(
                {
                    "speakerId": speaker_id,
                    "topic": topic,
                    "text": sentence.get("text"),
                    "startMs": sentence.get("start"),
                    "endMs": sentence.get("end"),
                }
            )

    speaker_ids = [s["speakerId"] for s in sentences]
    return {
        "callId": call_transcript.get("callId"),
        "sentences": sentences,
        "speakerCount": len({sid for sid in speaker_ids if isinstance(sid, (str, int))}),
        "sentenceCount": len(sentences),
        "monologueCount": count_monologues(speaker_ids),
    }


# ── Users ────────────────────────────────────────────────────────────


def flatten_user(user: Any) -> dict[str, Any]:
    user = _as_dict(user)
    first = user.get("firstName")
    last = user.get("lastName")
    name = " ".join(part for part in (first, last) if isinstance(part, str) and part) or None
    active = user.get("active")
    return {
        "id": user.get("id"),
        "email": user.get("emailAddress"),
        "firstName": first,
        "lastName": last,
        "name": name,
        "title": user.get("title"),
        "active": active if isinstance(active, bool) else None,
        "managerId": user.get("managerId"),
    }


def flatten_users(users: Any) -> list[dict[str, Any]]:
    return [flatten_user(u) for u in _as_list(users)]
