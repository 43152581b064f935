"""Shared ID and clock helpers for all domain models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime


def generate_id() -> str:
    """Return a new random UUID string (v4).

    Conversations and messages get a fresh id at extraction time; ids are
    never derived from the source page so nothing about the share link
    leaks into exported documents.
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(UTC)
