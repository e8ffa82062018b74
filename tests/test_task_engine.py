"""Tests for the prompt-driven task assignment engine."""

import json
import random
from datetime import date, timedelta

import pytest

from gitgud_tools.config.manager import Config, ConfigManager
from gitgud_tools.state.history import recent_history
from gitgud_tools.state.store import MemoryStateStore, StateKey, Stats, read_int, read_stats, utc_today, write_stats
from gitgud_tools.tasks.classifier import exercises_for
from gitgud_tools.tasks.engine import CONTINUE, Action, ActionType, TaskEngine, format_task

TODAY = date(2026, 10, 17)
YESTERDAY = TODAY - timedelta(days=1)
FUNCTION_PROMPT = "write a function to add two numbers"


class RecordingStore(MemoryStateStore):
    """Memory store that records every write."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[StateKey] = []

    def write(self, key: StateKey, value: str) -> None:
        self.writes.append(key)
        super().write(key, value)


class BrokenStore(MemoryStateStore):
    """Store whose writes always fail."""

    def write(self, key: StateKey, value: str) -> None:
        raise OSError("disk full")


class FlakyStore(MemoryStateStore):
    """Memory store that fails writes or appends to chosen keys until healed."""

    def __init__(self, fail_writes: tuple[StateKey, ...] = (), fail_appends: tuple[StateKey, ...] = ()) -> None:
        super().__init__()
        self.fail_writes = set(fail_writes)
        self.fail_appends = set(fail_appends)

    def heal(self) -> None:
        self.fail_writes.clear()
        self.fail_appends.clear()

    def write(self, key: StateKey, value: str) -> None:
        if key in self.fail_writes:
            raise OSError(f"cannot write {key.value}")
        super().write(key, value)

    def append_line(self, key: StateKey, line: str) -> None:
        if key in self.fail_appends:
            raise OSError(f"cannot append to {key.value}")
        super().append_line(key, line)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def store() -> MemoryStateStore:
    return MemoryStateStore()


def make_engine(store: MemoryStateStore, seed: int = 0, **settings: object) -> TaskEngine:
    config = ConfigManager(store)
    for key, value in settings.items():
        assert config.set(key, value).success
    return TaskEngine(store, config=config, rng=random.Random(seed), today=lambda: TODAY)


def seed_pending(store: MemoryStateStore, task: str = "[Category: api] Do it (Difficulty: x)") -> None:
    store.write(StateKey.PENDING_TASK, task)
    store.write(StateKey.LAST_SKIP_RESET, TODAY.isoformat())


# =============================================================================
# Scenarios
# =============================================================================


class TestScenarios:
    """End-to-end prompt sequences."""

    def test_assigns_on_frequency_boundary(self, store: MemoryStateStore) -> None:
        """frequency=3: two continues, then a function-category task."""
        engine = make_engine(store, frequency=3)

        first = engine.process_prompt(FUNCTION_PROMPT)
        assert first == CONTINUE
        assert read_int(store, StateKey.REQUEST_COUNTER) == 1

        second = engine.process_prompt(FUNCTION_PROMPT)
        assert second == CONTINUE
        assert read_int(store, StateKey.REQUEST_COUNTER) == 2

        third = engine.process_prompt(FUNCTION_PROMPT)
        assert third.type == ActionType.NEW_TASK
        assert third.data["requestNumber"] == 3
        assert third.data["category"] == "function"
        assert third.data["remainingSkips"] == 3
        assert third.data["maxSkips"] == 3
        assert third.data["currentStreak"] == 0
        assert store.read(StateKey.PENDING_TASK) == third.data["task"]

    def test_skip_with_quota(self, store: MemoryStateStore) -> None:
        """A skip phrase spends a skip and clears the pending task."""
        seed_pending(store)
        engine = make_engine(store)

        action = engine.process_prompt("skip")

        assert action == Action(ActionType.SKIP_USED, {"remainingSkips": 2, "maxSkips": 3})
        assert not store.exists(StateKey.PENDING_TASK)
        assert read_int(store, StateKey.SKIP_QUOTA) == 1
        assert read_stats(store).skipped == 1
        assert recent_history(store)[-1]["event"] == "skipped"

    def test_skip_denied_when_quota_used(self, store: MemoryStateStore) -> None:
        """No skips left: the pending task stays."""
        seed_pending(store)
        store.write(StateKey.SKIP_QUOTA, "1")
        engine = make_engine(store, daily_skips=1)

        action = engine.process_prompt("skip")

        assert action == Action(ActionType.SKIP_DENIED, {"maxSkips": 1})
        assert store.exists(StateKey.PENDING_TASK)
        assert read_int(store, StateKey.SKIP_QUOTA) == 1
        assert read_stats(store).skipped == 0

    def test_trivial_prompt_never_counts(self, store: MemoryStateStore) -> None:
        """'ok' does not advance the counter, even with frequency=1."""
        engine = make_engine(store, frequency=1)
        for _ in range(5):
            assert engine.process_prompt("ok") == CONTINUE
        assert read_int(store, StateKey.REQUEST_COUNTER) == 0
        assert not store.exists(StateKey.PENDING_TASK)


# =============================================================================
# State machine transitions
# =============================================================================


class TestTransitions:
    """Per-step behaviour of the state machine."""

    def test_disabled_is_noop(self, store: MemoryStateStore) -> None:
        """With enabled=false nothing but the config is touched."""
        engine = make_engine(store, enabled="false", frequency=1)
        assert engine.process_prompt(FUNCTION_PROMPT) == CONTINUE
        assert set(store.values) == {StateKey.CONFIG}

    def test_skip_without_pending_is_noop(self, store: MemoryStateStore) -> None:
        engine = make_engine(store, frequency=1)
        assert engine.process_prompt("skip") == CONTINUE
        assert read_int(store, StateKey.REQUEST_COUNTER) == 0
        assert read_stats(store) == Stats()

    def test_pending_task_blocks_and_does_not_count(self, store: MemoryStateStore) -> None:
        """While a task is pending the counter is frozen."""
        seed_pending(store, "line one\nline two")
        store.write(StateKey.REQUEST_COUNTER, "4")
        engine = make_engine(store)

        action = engine.process_prompt(FUNCTION_PROMPT)

        assert action.type == ActionType.PENDING_TASK
        assert action.data == {"task": "line one line two", "remainingSkips": 3, "maxSkips": 3}
        assert read_int(store, StateKey.REQUEST_COUNTER) == 4

    def test_trivial_prompt_while_pending_still_reminds(self, store: MemoryStateStore) -> None:
        seed_pending(store)
        engine = make_engine(store)
        assert engine.process_prompt("ok").type == ActionType.PENDING_TASK

    def test_new_task_only_when_none_pending(self, store: MemoryStateStore) -> None:
        """After an assignment, further prompts get pending_task, never new_task."""
        engine = make_engine(store, frequency=1)
        assert engine.process_prompt(FUNCTION_PROMPT).type == ActionType.NEW_TASK
        for _ in range(3):
            assert engine.process_prompt(FUNCTION_PROMPT).type == ActionType.PENDING_TASK
        assert read_stats(store).total_assigned == 1

    def test_assignment_bookkeeping(self, store: MemoryStateStore) -> None:
        engine = make_engine(store, frequency=2, difficulty="hard")
        engine.process_prompt("please fix the crash in the parser")
        action = engine.process_prompt("please fix the crash in the parser")

        assert action.data["category"] == "debug"
        assert action.data["task"].startswith("[Category: debug] ")
        assert action.data["task"].endswith("(Difficulty: HARD - robust implementation with tests, types, documentation)")
        assert read_stats(store).total_assigned == 1
        entry = recent_history(store)[-1]
        assert entry["event"] == "assigned"
        assert entry["request_number"] == 2
        assert entry["category"] == "debug"
        assert entry["difficulty"] == "hard"

    def test_exercise_selection_is_deterministic(self, store: MemoryStateStore) -> None:
        """The injected random source decides the exercise."""
        engine = make_engine(store, seed=42, frequency=1)
        action = engine.process_prompt(FUNCTION_PROMPT)
        expected = random.Random(42).choice(exercises_for("function"))
        assert action.data["task"] == format_task("function", expected, "adaptive")

    def test_current_streak_reported(self, store: MemoryStateStore) -> None:
        store.write(StateKey.STREAK, f"4\n{YESTERDAY.isoformat()}\n4")
        engine = make_engine(store, frequency=1)
        assert engine.process_prompt(FUNCTION_PROMPT).data["currentStreak"] == 4

    def test_malformed_counter_treated_as_zero(self, store: MemoryStateStore) -> None:
        store.write(StateKey.REQUEST_COUNTER, "garbage")
        engine = make_engine(store)
        engine.process_prompt(FUNCTION_PROMPT)
        assert read_int(store, StateKey.REQUEST_COUNTER) == 1

    def test_malformed_stats_recovered_on_assignment(self, store: MemoryStateStore) -> None:
        store.write(StateKey.STATS, "{oops")
        engine = make_engine(store, frequency=1)
        engine.process_prompt(FUNCTION_PROMPT)
        assert read_stats(store) == Stats(total_assigned=1)

    def test_counter_only_advances_on_counted_prompts(self, store: MemoryStateStore) -> None:
        """Mixed sequence: only non-trivial, non-skip prompts with no task pending count."""
        engine = make_engine(store, frequency=3)
        sequence = [FUNCTION_PROMPT, "ok", "skip", FUNCTION_PROMPT, "thanks", FUNCTION_PROMPT]
        counters = []
        for prompt in sequence:
            engine.process_prompt(prompt)
            counters.append(read_int(store, StateKey.REQUEST_COUNTER))
        assert counters == [1, 1, 1, 2, 2, 3]
        assert store.exists(StateKey.PENDING_TASK)

        engine.process_prompt(FUNCTION_PROMPT)
        assert read_int(store, StateKey.REQUEST_COUNTER) == 3


# =============================================================================
# Daily maintenance
# =============================================================================


class TestDailyMaintenance:
    """Tests for the lazy daily skip reset."""

    def test_seeds_defaults(self, store: MemoryStateStore) -> None:
        make_engine(store).daily_maintenance()
        assert store.read(StateKey.REQUEST_COUNTER) == "0"
        assert store.read(StateKey.SKIP_QUOTA) == "0"
        assert store.read(StateKey.LAST_SKIP_RESET) == TODAY.isoformat()
        assert json.loads(store.read(StateKey.STATS) or "") == {"completed": 0, "skipped": 0, "total_assigned": 0}

    def test_second_call_same_day_is_noop(self) -> None:
        store = RecordingStore()
        engine = TaskEngine(store, today=lambda: TODAY)
        engine.daily_maintenance()
        store.writes.clear()
        engine.daily_maintenance()
        assert store.writes == []

    def test_new_day_resets_quota(self, store: MemoryStateStore) -> None:
        """Skips used yesterday are available again today."""
        store.write(StateKey.PENDING_TASK, "task")
        store.write(StateKey.SKIP_QUOTA, "3")
        store.write(StateKey.LAST_SKIP_RESET, YESTERDAY.isoformat())
        engine = make_engine(store)

        action = engine.process_prompt("skip")

        assert action == Action(ActionType.SKIP_USED, {"remainingSkips": 2, "maxSkips": 3})
        assert store.read(StateKey.LAST_SKIP_RESET) == TODAY.isoformat()

    def test_same_day_keeps_quota(self, store: MemoryStateStore) -> None:
        store.write(StateKey.SKIP_QUOTA, "2")
        store.write(StateKey.LAST_SKIP_RESET, TODAY.isoformat())
        make_engine(store).daily_maintenance()
        assert store.read(StateKey.SKIP_QUOTA) == "2"


# =============================================================================
# Failure handling
# =============================================================================


class TestFailureHandling:
    """Internal faults degrade to continue."""

    def test_write_failure_returns_continue(self, capsys: pytest.CaptureFixture[str]) -> None:
        engine = TaskEngine(BrokenStore(), today=lambda: TODAY)
        assert engine.process_prompt(FUNCTION_PROMPT) == CONTINUE
        assert "disk full" in capsys.readouterr().err

    def test_failed_assignment_leaves_no_partial_state(self, capsys: pytest.CaptureFixture[str]) -> None:
        """A failing pending-task write undoes the counter bump of the same prompt."""
        store = FlakyStore(fail_writes=(StateKey.PENDING_TASK,))
        engine = make_engine(store, frequency=3)

        assert engine.process_prompt(FUNCTION_PROMPT) == CONTINUE
        assert engine.process_prompt(FUNCTION_PROMPT) == CONTINUE
        before = dict(store.values)

        assert engine.process_prompt(FUNCTION_PROMPT) == CONTINUE
        assert "cannot write pending_task" in capsys.readouterr().err
        assert store.values == before
        assert read_int(store, StateKey.REQUEST_COUNTER) == 2
        assert not store.exists(StateKey.PENDING_TASK)
        assert read_stats(store).total_assigned == 0
        assert recent_history(store) == []
        assert engine.store is store

    def test_failed_history_append_rolls_back_assignment(self) -> None:
        """Pending task and stats written before a failing append are undone."""
        store = FlakyStore(fail_appends=(StateKey.HISTORY,))
        engine = make_engine(store, frequency=1)
        before = dict(store.values)

        assert engine.process_prompt(FUNCTION_PROMPT) == CONTINUE
        assert store.values == before
        assert not store.exists(StateKey.PENDING_TASK)
        assert read_stats(store) == Stats()

    def test_assignment_succeeds_once_store_recovers(self) -> None:
        """The prompt that failed to assign is retried cleanly by the next one."""
        store = FlakyStore(fail_writes=(StateKey.PENDING_TASK,))
        engine = make_engine(store, frequency=3)
        for _ in range(3):
            engine.process_prompt(FUNCTION_PROMPT)

        store.heal()
        action = engine.process_prompt(FUNCTION_PROMPT)
        assert action.type == ActionType.NEW_TASK
        assert action.data["requestNumber"] == 3
        assert read_stats(store).total_assigned == 1
        assert [e["event"] for e in recent_history(store)] == ["assigned"]

    def test_default_day_is_utc(self, store: MemoryStateStore) -> None:
        assert TaskEngine(store).today is utc_today

    def test_next_task_in(self, store: MemoryStateStore) -> None:
        store.write(StateKey.REQUEST_COUNTER, "7")
        engine = make_engine(store)
        assert engine.next_task_in(Config(frequency=5)) == 3

    def test_action_to_dict(self) -> None:
        assert CONTINUE.to_dict() == {"type": "continue", "data": None}
        action = Action(ActionType.SKIP_DENIED, {"maxSkips": 1})
        assert action.to_dict() == {"type": "skip_denied", "data": {"maxSkips": 1}}


def test_stats_untouched_when_counter_not_on_boundary(store: MemoryStateStore) -> None:
    """Counting a prompt does not change stats."""
    write_stats(store, Stats(completed=1))
    engine = make_engine(store, frequency=10)
    engine.process_prompt(FUNCTION_PROMPT)
    assert read_stats(store) == Stats(completed=1)
