"""Append-only task history.

One JSON object per line: {"timestamp": ..., "event": ..., ...metadata}.
Lines are only ever appended; they are never rewritten or truncated
(except by a full reset).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from gitgud_tools.state.store import StateKey, StateStore

EVENT_ASSIGNED = "assigned"
EVENT_COMPLETED = "completed"
EVENT_SKIPPED = "skipped"


def append_history(store: StateStore, event: str, **metadata: Any) -> dict[str, Any]:
    """Append a single event record and return it."""
    record: dict[str, Any] = {"timestamp": datetime.now(timezone.utc).isoformat(), "event": event}
    record.update(metadata)
    store.append_line(StateKey.HISTORY, json.dumps(record))
    return record


def recent_history(store: StateStore, limit: int = 5) -> list[dict[str, Any]]:
    """Return the last `limit` parseable history records, oldest first."""
    if limit <= 0:
        return []
    records: list[dict[str, Any]] = []
    for line in store.read_lines(StateKey.HISTORY):
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(entry, dict):
            records.append(entry)
    return records[-limit:]
