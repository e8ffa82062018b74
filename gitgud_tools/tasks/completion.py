"""Mark the pending task as completed.

Updates the streak, bumps stats, unlocks achievements and clears the
pending task. With nothing pending this is a no-op.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from gitgud_tools.progress.tracker import Achievement, ProgressTracker, StreakUpdate
from gitgud_tools.state.history import EVENT_COMPLETED, append_history
from gitgud_tools.state.store import (
    StateKey,
    StateStore,
    Stats,
    StreakRecord,
    read_stats,
    utc_today,
    write_stats,
)


@dataclass
class CompletionResult:
    completed: bool
    message: str
    streak: StreakUpdate | None = None
    new_achievements: list[Achievement] = field(default_factory=list)
    stats: Stats | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed": self.completed,
            "message": self.message,
            "streak": (
                {
                    "current": self.streak.current,
                    "best": self.streak.best,
                    "last_date": self.streak.last_date.isoformat(),
                    "is_new_record": self.streak.is_new_record,
                }
                if self.streak
                else None
            ),
            "new_achievements": [{"id": a.id, "emoji": a.emoji, "name": a.name} for a in self.new_achievements],
            "stats": self.stats.to_dict() if self.stats else None,
        }


def complete_task(store: StateStore, today: Callable[[], date] = utc_today) -> CompletionResult:
    if not store.exists(StateKey.PENDING_TASK):
        return CompletionResult(completed=False, message="No pending task to complete.")

    tracker = ProgressTracker(store, today=today)
    streak = tracker.update_streak()

    stats = read_stats(store)
    stats.completed += 1
    write_stats(store, stats)

    record = StreakRecord(current=streak.current, last_completion_date=streak.last_date, best=streak.best)
    new_achievements = tracker.check_achievements(stats, record)

    store.delete(StateKey.PENDING_TASK)
    append_history(store, EVENT_COMPLETED, streak=streak.current)

    return CompletionResult(
        completed=True,
        message="Task completed!",
        streak=streak,
        new_achievements=new_achievements,
        stats=stats,
    )
