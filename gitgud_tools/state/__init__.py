"""Durable state access for GitGud.

Usage:
    from gitgud_tools.state import FileStateStore, StateKey, read_int
    store = FileStateStore()
    counter = read_int(store, StateKey.REQUEST_COUNTER)
"""

from gitgud_tools.state.journal import JournaledStore
from gitgud_tools.state.store import (
    FileStateStore,
    MemoryStateStore,
    StateKey,
    StateStore,
    Stats,
    StreakRecord,
    default_data_dir,
    read_achievements,
    read_int,
    read_json,
    read_stats,
    read_streak,
    utc_today,
    write_stats,
    write_streak,
)

__all__ = [
    "FileStateStore",
    "JournaledStore",
    "MemoryStateStore",
    "StateKey",
    "StateStore",
    "Stats",
    "StreakRecord",
    "default_data_dir",
    "read_achievements",
    "read_int",
    "read_json",
    "read_stats",
    "read_streak",
    "utc_today",
    "write_stats",
    "write_streak",
]
