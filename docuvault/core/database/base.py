"""
Shared building blocks for DocuVault table models.

Every entity derives from ``Base``; keys come from ``generate_id`` and
timestamps from ``utc_now`` so rows written by the API, the CLI and the
migrations agree on format.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import ConfigDict
from sqlmodel import SQLModel


class Base(SQLModel):
    """Common SQLModel parent; JSON columns hold plain dicts and lists."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the form every timestamp column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_id() -> str:
    """Primary key for new rows: a 32 character uuid4 hex string."""
    return uuid.uuid4().hex
