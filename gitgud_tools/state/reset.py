"""Selective wipe-to-default operations.

Each reset is idempotent: running it twice leaves the same state as
running it once.
"""

from gitgud_tools.state.store import StateKey, StateStore, Stats, write_stats


def reset_counter(store: StateStore) -> None:
    """Zero the request counter and drop any pending task."""
    store.write(StateKey.REQUEST_COUNTER, "0")
    store.delete(StateKey.PENDING_TASK)


def reset_stats(store: StateStore) -> None:
    """Zero the lifetime stats and today's skip quota. Achievements are kept."""
    write_stats(store, Stats())
    store.write(StateKey.SKIP_QUOTA, "0")


def reset_all(store: StateStore) -> None:
    """Wipe counter, pending task, stats, skips, achievements, streak and history."""
    reset_counter(store)
    reset_stats(store)
    store.write(StateKey.ACHIEVEMENTS, "[]")
    store.delete(StateKey.STREAK)
    store.delete(StateKey.HISTORY)
    store.delete(StateKey.LAST_ACTION)
