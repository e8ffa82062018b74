"""Prompt-driven task assignment.

For every prompt the engine decides one of:
    continue      - let the assistant proceed
    skip_used     - a skip token was spent, pending task removed
    skip_denied   - skip requested but no skips left today
    pending_task  - a task is outstanding, block normal flow
    new_task      - the counter hit a multiple of `frequency`, task assigned

State lives entirely in the injected StateStore. Each call reads what it
needs, makes one decision, writes back and returns an Action. Platform
adapters turn the Action into their own hook envelope.

Usage as module:
    from gitgud_tools.tasks.engine import TaskEngine
    engine = TaskEngine(store)
    action = engine.process_prompt("write a function to parse dates")
"""

from __future__ import annotations

import random
import sys
import traceback
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from gitgud_tools.config.manager import Config, ConfigManager
from gitgud_tools.state.history import EVENT_ASSIGNED, EVENT_SKIPPED, append_history
from gitgud_tools.state.journal import JournaledStore
from gitgud_tools.state.store import (
    StateKey,
    StateStore,
    read_int,
    read_stats,
    read_streak,
    utc_today,
    write_stats,
)
from gitgud_tools.tasks.classifier import classify, difficulty_note, exercises_for, is_skip_request, is_trivial


def log(message: str) -> None:
    """Print message to stderr."""
    print(message, file=sys.stderr)


class ActionType(str, Enum):
    CONTINUE = "continue"
    SKIP_USED = "skip_used"
    SKIP_DENIED = "skip_denied"
    PENDING_TASK = "pending_task"
    NEW_TASK = "new_task"


@dataclass(frozen=True)
class Action:
    """What the adapter should present for one prompt."""

    type: ActionType
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "data": dict(self.data) or None}


CONTINUE = Action(ActionType.CONTINUE)


def format_task(category: str, exercise: str, difficulty: str) -> str:
    return f"[Category: {category}] {exercise} {difficulty_note(difficulty)}"


class TaskEngine:
    """Stateless decision engine over a StateStore.

    Attributes:
        store: Durable state backend.
        config: Configuration provider (defaults to one over the same store).
        rng: Random source for exercise selection.
        today: Callable returning the current calendar date (UTC by default).
    """

    def __init__(
        self,
        store: StateStore,
        config: ConfigManager | None = None,
        rng: random.Random | None = None,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self.store = store
        self.config = config if config is not None else ConfigManager(store)
        self.rng = rng if rng is not None else random.Random()
        self.today = today

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def process_prompt(self, prompt: str) -> Action:
        """Run the state machine, falling back to `continue` on any failure.

        Writes go through a journal. If the decision fails part way, every
        key it touched is restored so the store is left as it was found.
        """
        backend = self.store
        journal = JournaledStore(backend)
        self.store = journal
        try:
            return self.decide(prompt, self.config.get())
        except Exception as e:
            log(f"gitgud: internal error, letting prompt through: {e}")
            log(traceback.format_exc())
            try:
                journal.rollback()
            except Exception as rollback_error:
                log(f"gitgud: rollback failed: {rollback_error}")
            return CONTINUE
        finally:
            self.store = backend

    def decide(self, prompt: str, config: Config) -> Action:
        if not config.enabled:
            return CONTINUE

        self.daily_maintenance()

        if is_skip_request(prompt):
            return self._handle_skip(config)

        if self.has_pending_task():
            return self._pending(config)

        if is_trivial(prompt):
            return CONTINUE

        counter = read_int(self.store, StateKey.REQUEST_COUNTER) + 1
        self.store.write(StateKey.REQUEST_COUNTER, str(counter))

        if counter % config.frequency == 0:
            return self._assign(prompt, counter, config)
        return CONTINUE

    # -------------------------------------------------------------------------
    # State helpers
    # -------------------------------------------------------------------------

    def daily_maintenance(self) -> None:
        """Reset the skip quota on a new day and seed missing counters.

        Idempotent: a second call on the same day writes nothing.
        """
        today = self.today().isoformat()
        if self.store.read(StateKey.LAST_SKIP_RESET) != today:
            self.store.write(StateKey.SKIP_QUOTA, "0")
            self.store.write(StateKey.LAST_SKIP_RESET, today)

        if not self.store.exists(StateKey.REQUEST_COUNTER):
            self.store.write(StateKey.REQUEST_COUNTER, "0")
        if not self.store.exists(StateKey.SKIP_QUOTA):
            self.store.write(StateKey.SKIP_QUOTA, "0")
        if not self.store.exists(StateKey.STATS):
            write_stats(self.store, read_stats(self.store))

    def has_pending_task(self) -> bool:
        return self.store.exists(StateKey.PENDING_TASK)

    def pending_task(self) -> str | None:
        task = self.store.read(StateKey.PENDING_TASK)
        return task.replace("\n", " ") if task is not None else None

    def remaining_skips(self, config: Config) -> int:
        return config.daily_skips - read_int(self.store, StateKey.SKIP_QUOTA)

    def next_task_in(self, config: Config) -> int:
        """Number of qualifying prompts until the next assignment."""
        counter = read_int(self.store, StateKey.REQUEST_COUNTER)
        return config.frequency - (counter % config.frequency)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _handle_skip(self, config: Config) -> Action:
        if not self.has_pending_task():
            return CONTINUE

        used = read_int(self.store, StateKey.SKIP_QUOTA)
        remaining = config.daily_skips - used
        if remaining <= 0:
            return Action(ActionType.SKIP_DENIED, {"maxSkips": config.daily_skips})

        self.store.write(StateKey.SKIP_QUOTA, str(used + 1))
        self.store.delete(StateKey.PENDING_TASK)

        stats = read_stats(self.store)
        stats.skipped += 1
        write_stats(self.store, stats)
        append_history(self.store, EVENT_SKIPPED)

        return Action(ActionType.SKIP_USED, {"remainingSkips": remaining - 1, "maxSkips": config.daily_skips})

    def _pending(self, config: Config) -> Action:
        return Action(
            ActionType.PENDING_TASK,
            {
                "task": self.pending_task() or "",
                "remainingSkips": self.remaining_skips(config),
                "maxSkips": config.daily_skips,
            },
        )

    def _assign(self, prompt: str, request_number: int, config: Config) -> Action:
        category = classify(prompt)
        exercise = self.rng.choice(exercises_for(category))
        task = format_task(category, exercise, config.difficulty)
        self.store.write(StateKey.PENDING_TASK, task)

        stats = read_stats(self.store)
        stats.total_assigned += 1
        write_stats(self.store, stats)
        append_history(
            self.store,
            EVENT_ASSIGNED,
            request_number=request_number,
            category=category,
            difficulty=config.difficulty,
        )

        return Action(
            ActionType.NEW_TASK,
            {
                "task": task,
                "requestNumber": request_number,
                "category": category,
                "remainingSkips": self.remaining_skips(config),
                "maxSkips": config.daily_skips,
                "currentStreak": read_streak(self.store).current,
            },
        )
