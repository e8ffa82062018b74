"""Durable key-value state for GitGud.

Every piece of state (request counter, pending task, skip quota, streak,
stats, achievements, history) lives under a stable logical key. The engine
never holds state across invocations: it reads what it needs through a
``StateStore`` and writes back before the process exits.

Default location: ~/.gitgud/ (override with GITGUD_DATA_DIR)

Usage as module:
    from gitgud_tools.state.store import FileStateStore, StateKey
    store = FileStateStore()
    counter = read_int(store, StateKey.REQUEST_COUNTER)
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

DATA_DIR_ENV = "GITGUD_DATA_DIR"


def log(message: str) -> None:
    """Print message to stderr."""
    print(message, file=sys.stderr)


class StateKey(str, Enum):
    """Logical state keys, with the file name each one is stored under."""

    REQUEST_COUNTER = "request_counter"
    PENDING_TASK = "pending_task"
    SKIP_QUOTA = "daily_skips"
    LAST_SKIP_RESET = "last_skip_date"
    STREAK = "streak_data"
    STATS = "stats.json"
    ACHIEVEMENTS = "achievements.json"
    HISTORY = "task_history.jsonl"
    CONFIG = "config.json"
    LAST_ACTION = "last_action"


class StateStore(Protocol):
    """Minimal storage contract the engine and tracker depend on."""

    def read(self, key: StateKey) -> str | None: ...

    def write(self, key: StateKey, value: str) -> None: ...

    def delete(self, key: StateKey) -> None: ...

    def exists(self, key: StateKey) -> bool: ...

    def append_line(self, key: StateKey, line: str) -> None: ...

    def read_lines(self, key: StateKey) -> list[str]: ...


def utc_today() -> date:
    """Current calendar date in UTC. Skip resets and streaks roll over at UTC midnight."""
    return datetime.now(timezone.utc).date()


def default_data_dir() -> Path:
    """Return the data directory, honouring GITGUD_DATA_DIR."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".gitgud"


class FileStateStore:
    """One file per key under a data directory.

    Attributes:
        data_dir: Directory holding the state files.
    """

    def __init__(self, data_dir: Path | None = None) -> None:
        self.data_dir = data_dir if data_dir is not None else default_data_dir()

    def _path(self, key: StateKey) -> Path:
        return self.data_dir / key.value

    def _ensure_dir(self) -> None:
        if not self.data_dir.exists():
            self.data_dir.mkdir(parents=True, mode=0o700)

    def read(self, key: StateKey) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            log(f"Warning: could not read {path}: {e}")
            return None

    def write(self, key: StateKey, value: str) -> None:
        self._ensure_dir()
        self._path(key).write_text(value, encoding="utf-8")

    def delete(self, key: StateKey) -> None:
        self._path(key).unlink(missing_ok=True)

    def exists(self, key: StateKey) -> bool:
        return self._path(key).exists()

    def append_line(self, key: StateKey, line: str) -> None:
        self._ensure_dir()
        with self._path(key).open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    def read_lines(self, key: StateKey) -> list[str]:
        content = self.read(key)
        if not content:
            return []
        return [line for line in content.split("\n") if line.strip()]


class MemoryStateStore:
    """In-memory store, used by tests and dry runs."""

    def __init__(self, initial: dict[StateKey, str] | None = None) -> None:
        self.values: dict[StateKey, str] = dict(initial or {})

    def read(self, key: StateKey) -> str | None:
        value = self.values.get(key)
        return value.strip() if value is not None else None

    def write(self, key: StateKey, value: str) -> None:
        self.values[key] = value

    def delete(self, key: StateKey) -> None:
        self.values.pop(key, None)

    def exists(self, key: StateKey) -> bool:
        return key in self.values

    def append_line(self, key: StateKey, line: str) -> None:
        self.values[key] = self.values.get(key, "") + line + "\n"

    def read_lines(self, key: StateKey) -> list[str]:
        return [line for line in self.values.get(key, "").split("\n") if line.strip()]


# =============================================================================
# Typed readers - malformed values are treated as absent
# =============================================================================


def read_int(store: StateStore, key: StateKey, default: int = 0) -> int:
    raw = store.read(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def read_json(store: StateStore, key: StateKey, default: Any) -> Any:
    raw = store.read(key)
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return default


@dataclass
class Stats:
    """Lifetime task counters."""

    completed: int = 0
    skipped: int = 0
    total_assigned: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"completed": self.completed, "skipped": self.skipped, "total_assigned": self.total_assigned}

    @property
    def completion_rate(self) -> int:
        """Percentage of assigned tasks that were completed."""
        if self.total_assigned <= 0:
            return 0
        return round(self.completed * 100 / self.total_assigned)


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def read_stats(store: StateStore) -> Stats:
    data = read_json(store, StateKey.STATS, {})
    if not isinstance(data, dict):
        return Stats()
    return Stats(
        completed=_as_int(data.get("completed", 0)),
        skipped=_as_int(data.get("skipped", 0)),
        total_assigned=_as_int(data.get("total_assigned", 0)),
    )


def write_stats(store: StateStore, stats: Stats) -> None:
    store.write(StateKey.STATS, json.dumps(stats.to_dict()))


@dataclass
class StreakRecord:
    """Persisted streak: current run, date of last completion, best run."""

    current: int = 0
    last_completion_date: date | None = None
    best: int = 0

    def serialize(self) -> str:
        last = self.last_completion_date.isoformat() if self.last_completion_date else ""
        return f"{self.current}\n{last}\n{self.best}"


def read_streak(store: StateStore) -> StreakRecord:
    """Parse the three-line streak record.

    Each field is parsed independently; an unparseable field falls back to
    its default without discarding the others.
    """
    raw = store.read(StateKey.STREAK)
    if not raw:
        return StreakRecord()
    lines = raw.split("\n")

    def field(index: int) -> str:
        return lines[index].strip() if index < len(lines) else ""

    last_date: date | None
    try:
        last_date = date.fromisoformat(field(1)) if field(1) else None
    except ValueError:
        last_date = None

    return StreakRecord(current=_as_int(field(0)), last_completion_date=last_date, best=_as_int(field(2)))


def write_streak(store: StateStore, record: StreakRecord) -> None:
    store.write(StateKey.STREAK, record.serialize())


def read_achievements(store: StateStore) -> list[str]:
    data = read_json(store, StateKey.ACHIEVEMENTS, [])
    if not isinstance(data, list):
        return []
    unlocked: list[str] = []
    for item in data:
        if isinstance(item, str) and item not in unlocked:
            unlocked.append(item)
    return unlocked
