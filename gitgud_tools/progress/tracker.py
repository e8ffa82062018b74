"""Streak and achievement tracking.

Streaks count consecutive calendar days with at least one completed task.
Achievements are one-time badges: once an id is in the unlocked set it is
never removed (short of an explicit reset) and never reported again.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta

from gitgud_tools.state.store import (
    StateKey,
    StateStore,
    Stats,
    StreakRecord,
    read_achievements,
    read_streak,
    utc_today,
    write_streak,
)


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    emoji: str
    name: str
    target: int
    metric: str  # "completed" or "streak"

    def is_met(self, stats: Stats, streak: StreakRecord) -> bool:
        return self._value(stats, streak) >= self.target

    def progress(self, stats: Stats, streak: StreakRecord) -> str:
        suffix = " days" if self.metric == "streak" else ""
        return f"{self._value(stats, streak)}/{self.target}{suffix}"

    def _value(self, stats: Stats, streak: StreakRecord) -> int:
        return streak.current if self.metric == "streak" else stats.completed


# Evaluation order is the definition order
ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition("first_task", "🎯", "First Steps", 1, "completed"),
    AchievementDefinition("five_tasks", "✋", "Getting Hands Dirty", 5, "completed"),
    AchievementDefinition("ten_tasks", "📚", "Apprentice", 10, "completed"),
    AchievementDefinition("twentyfive_tasks", "🔨", "Craftsman", 25, "completed"),
    AchievementDefinition("fifty_tasks", "🎓", "Master", 50, "completed"),
    AchievementDefinition("hundred_tasks", "🏆", "Legend", 100, "completed"),
    AchievementDefinition("streak_3", "🔥", "Three in a Row", 3, "streak"),
    AchievementDefinition("streak_7", "📅", "Perfect Week", 7, "streak"),
    AchievementDefinition("streak_14", "💪", "Two Weeks Strong", 14, "streak"),
    AchievementDefinition("streak_30", "🥇", "Golden Month", 30, "streak"),
)

ACHIEVEMENTS_BY_ID = {a.id: a for a in ACHIEVEMENTS}


@dataclass(frozen=True)
class Achievement:
    """An unlocked badge as reported to the user."""

    id: str
    emoji: str
    name: str

    @property
    def label(self) -> str:
        return f"{self.emoji} {self.name}"


@dataclass
class StreakUpdate:
    current: int
    best: int
    last_date: date
    is_new_record: bool


def next_streak(record: StreakRecord, today: date) -> StreakRecord:
    """Apply one completion event to a streak record. Pure."""
    last = record.last_completion_date
    if last == today:
        current = record.current
    elif last is not None and last == today - timedelta(days=1):
        current = record.current + 1
    else:
        current = 1
    return StreakRecord(current=current, last_completion_date=today, best=max(record.best, current))


class ProgressTracker:
    """Persisted streak and achievement bookkeeping."""

    def __init__(self, store: StateStore, today: Callable[[], date] = utc_today) -> None:
        self.store = store
        self.today = today

    def current_streak(self) -> StreakRecord:
        return read_streak(self.store)

    def update_streak(self) -> StreakUpdate:
        previous = read_streak(self.store)
        today = self.today()
        updated = next_streak(previous, today)
        write_streak(self.store, updated)
        return StreakUpdate(
            current=updated.current,
            best=updated.best,
            last_date=today,
            is_new_record=updated.current > previous.best and updated.current > 1,
        )

    def unlocked(self) -> list[str]:
        return read_achievements(self.store)

    def check_achievements(self, stats: Stats, streak: StreakRecord) -> list[Achievement]:
        """Unlock every newly satisfied badge and return those, in definition order."""
        unlocked = read_achievements(self.store)
        new: list[Achievement] = []
        for definition in ACHIEVEMENTS:
            if definition.id in unlocked or not definition.is_met(stats, streak):
                continue
            unlocked.append(definition.id)
            new.append(Achievement(definition.id, definition.emoji, definition.name))

        if new:
            self.store.write(StateKey.ACHIEVEMENTS, json.dumps(unlocked))
        return new

    def all_achievements(self, stats: Stats, streak: StreakRecord) -> list[dict[str, object]]:
        unlocked = set(read_achievements(self.store))
        return [
            {
                "id": d.id,
                "emoji": d.emoji,
                "name": d.name,
                "unlocked": d.id in unlocked,
                "progress": d.progress(stats, streak),
            }
            for d in ACHIEVEMENTS
        ]


def achievement_progress(achievement_id: str, stats: Stats, streak: StreakRecord) -> str:
    definition = ACHIEVEMENTS_BY_ID.get(achievement_id)
    return definition.progress(stats, streak) if definition else ""
