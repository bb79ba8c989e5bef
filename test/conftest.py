"""Session-wide test setup.

Environment comes from ``test/.env`` (if present) and ``test/.env.example``
before any ``docuvault`` module is imported, so the global engine and
settings never see a developer's real database or SMTP server.
"""

from __future__ import annotations

import os
from pathlib import Path

import httpx
import pytest
from dotenv import load_dotenv

TEST_ROOT = Path(__file__).resolve().parent

load_dotenv(TEST_ROOT / ".env", override=False)
load_dotenv(TEST_ROOT / ".env.example", override=False)

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOGFIRE_ENABLED", "false")

# ASGITransport requests use the client's base_url
LOCAL_URL_PREFIXES = ("http://localhost", "http://127.0.0.1", "http://testserver", "/")


def _reject_remote(url) -> None:
    target = str(url)
    if not target.startswith(LOCAL_URL_PREFIXES):
        raise RuntimeError(f"Test tried to reach a remote host: {target}")


@pytest.fixture(autouse=True)
def _no_remote_http(monkeypatch: pytest.MonkeyPatch):
    """Fail any httpx request that would leave the machine."""
    send_sync = httpx.Client.request
    send_async = httpx.AsyncClient.request

    def local_only(self, method, url, *args, **kwargs):
        _reject_remote(url)
        return send_sync(self, method, url, *args, **kwargs)

    async def local_only_async(self, method, url, *args, **kwargs):
        _reject_remote(url)
        return await send_async(self, method, url, *args, **kwargs)

    monkeypatch.setattr(httpx.Client, "request", local_only)
    monkeypatch.setattr(httpx.AsyncClient, "request", local_only_async)
