"""Aggregate view of activity, streak, stats and achievements."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any

from gitgud_tools.config.manager import ConfigManager
from gitgud_tools.progress.tracker import ACHIEVEMENTS_BY_ID, ProgressTracker
from gitgud_tools.state.history import recent_history
from gitgud_tools.state.store import StateKey, StateStore, read_int, read_stats, read_streak, utc_today

HISTORY_LIMIT = 5


def summarize(
    store: StateStore,
    today: Callable[[], date] = utc_today,
    history_limit: int = HISTORY_LIMIT,
) -> dict[str, Any]:
    """Collect everything the `stats` command shows. Read-only.

    Remaining skips honour the lazy daily reset: if the last reset date is
    not today, the full quota is reported without touching the store.
    """
    config = ConfigManager(store).get()
    counter = read_int(store, StateKey.REQUEST_COUNTER)
    streak = read_streak(store)
    stats = read_stats(store)

    used_skips = read_int(store, StateKey.SKIP_QUOTA)
    if store.read(StateKey.LAST_SKIP_RESET) != today().isoformat():
        used_skips = 0

    unlocked = ProgressTracker(store, today=today).unlocked()
    achievements = []
    for achievement_id in unlocked:
        definition = ACHIEVEMENTS_BY_ID.get(achievement_id)
        label = f"{definition.emoji} {definition.name}" if definition else achievement_id
        achievements.append({"id": achievement_id, "label": label})

    return {
        "requests": counter,
        "next_task_in": config.frequency - (counter % config.frequency),
        "frequency": config.frequency,
        "current_streak": streak.current,
        "best_streak": streak.best,
        "completed": stats.completed,
        "skipped": stats.skipped,
        "total_assigned": stats.total_assigned,
        "completion_rate": stats.completion_rate,
        "difficulty": config.difficulty,
        "remaining_skips": config.daily_skips - used_skips,
        "max_skips": config.daily_skips,
        "pending_task": store.read(StateKey.PENDING_TASK),
        "achievements": achievements,
        "history": recent_history(store, history_limit),
    }
