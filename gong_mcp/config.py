"""Centralized configuration for the Gong MCP server.

Value resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/gong-mcp/<VARIABLE_NAME>``.

Unlike most services, missing Gong credentials are **not** a startup error:
the server still runs, ``gong://status`` reports what is missing, and every
other request fails with ``NotConfigured``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ── Feature flag: running on AWS? ────────────────────────────────────
_ON_AWS = bool(os.getenv("AWS_EXECUTION_ENV"))

ENV_BASE_URL = "GONG_BASE_URL"
ENV_ACCESS_KEY = "GONG_ACCESS_KEY"
ENV_ACCESS_KEY_SECRET = "GONG_ACCESS_KEY_SECRET"
REQUIRED_ENV: tuple[str, ...] = (ENV_BASE_URL, ENV_ACCESS_KEY, ENV_ACCESS_KEY_SECRET)


# ── Secret resolution ────────────────────────────────────────────────

def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 is
    unavailable.  Errors are logged but never raised so that local-dev
    fallback still works.
    """
    try:
        import boto3  # noqa: PLC0415 — lazy import to avoid boto3 dep in tests

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"/gong-mcp/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _optional_env(name: str) -> str | None:
    """Return a config value from env-var or SSM, or ``None`` when unset."""
    value = (os.getenv(name) or "").strip()
    if value and not value.startswith("your_"):
        return value

    if _ON_AWS:
        ssm_value = _get_ssm_parameter(name)
        if ssm_value and ssm_value.strip():
            return ssm_value.strip()

    return None


# ── Gong credentials ────────────────────────────────────────────────


@dataclass(frozen=True)
class GongConfig:
    """Immutable Gong API credentials.

    Either all three values are present and non-empty, or there is no
    ``GongConfig`` at all; partial configuration cannot be constructed.
    """

    base_url: str
    access_key: str = field(repr=False)
    access_key_secret: str = field(repr=False)

    def __post_init__(self) -> None:
        for name in ("base_url", "access_key", "access_key_secret"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"GongConfig.{name} must be a non-empty string")

    @property
    def secrets(self) -> tuple[str, str]:
        return self.access_key, self.access_key_secret


def load_gong_config() -> GongConfig | None:
    """Build the Gong configuration from the environment, or ``None``.

    Called once at process start.  Logs which variables are missing so
    operators can fix the deployment without reading ``gong://status``.
    """
    values = {name: _optional_env(name) for name in REQUIRED_ENV}
    missing = [name for name, value in values.items() if value is None]
    if missing:
        logger.warning(
            "Gong API is not configured (missing: %s). "
            "Only gong://status will be available.",
            ", ".join(missing),
        )
        return None

    return GongConfig(
        base_url=values[ENV_BASE_URL].rstrip("/"),
        access_key=values[ENV_ACCESS_KEY],
        access_key_secret=values[ENV_ACCESS_KEY_SECRET],
    )


# ── Server ──────────────────────────────────────────────────────────

def _running_in_docker() -> bool:
    """Best-effort detection of a container runtime."""
    if os.getenv("DOCKER_ENV"):
        return True
    if Path("/.dockerenv").exists():
        return True
    try:
        return "docker" in Path("/proc/1/cgroup").read_text()
    except OSError:
        return False


SERVER_NAME: str = "gong-mcp"
MCP_TRANSPORT: str = os.getenv("MCP_TRANSPORT", "stdio")
SERVER_HOST: str = os.getenv("SERVER_HOST") or ("0.0.0.0" if _running_in_docker() else "127.0.0.1")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8080"))
