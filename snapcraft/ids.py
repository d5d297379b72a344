"""Snapshot identifiers: a UTC timestamp followed by a random suffix."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone

ID_TIME_FORMAT = "%Y-%m-%dT%H-%M-%SZ"
ID_TIME_LENGTH = len("2006-01-02T15-04-05Z")


def new_id() -> str:
    """Return a new snapshot ID such as 2026-05-28T08-30-00Z-a1b2c3."""
    stamp = datetime.now(timezone.utc).strftime(ID_TIME_FORMAT)
    return f"{stamp}-{secrets.token_hex(3)}"


def parse_time(snapshot_id: str) -> datetime:
    """Extract the UTC timestamp from a snapshot ID."""
    if len(snapshot_id) < ID_TIME_LENGTH:
        raise ValueError(f"invalid snapshot id: {snapshot_id!r}")
    parsed = datetime.strptime(snapshot_id[:ID_TIME_LENGTH], ID_TIME_FORMAT)
    return parsed.replace(tzinfo=timezone.utc)