"""Undo log over a StateStore.

One prompt touches several keys (counter, pending task, stats, history).
``JournaledStore`` remembers what each key held before it was first changed
so a failed decision can be rolled back and leave the store as it found it.

Usage as module:
    journal = JournaledStore(store)
    try:
        mutate(journal)
    except Exception:
        journal.rollback()
        raise
"""

from __future__ import annotations

from gitgud_tools.state.store import StateKey, StateStore, log

# Keys appended to line by line; the stored text keeps a trailing newline
LINE_KEYS = frozenset({StateKey.HISTORY})


class JournaledStore:
    """StateStore wrapper that records prior values for rollback.

    Attributes:
        store: The wrapped backend. Every call is passed through.
        saved: Original value of each changed key, None if it did not exist.
    """

    def __init__(self, store: StateStore) -> None:
        self.store = store
        self.saved: dict[StateKey, str | None] = {}

    def _remember(self, key: StateKey) -> None:
        if key in self.saved:
            return
        self.saved[key] = self.store.read(key) if self.store.exists(key) else None

    def read(self, key: StateKey) -> str | None:
        return self.store.read(key)

    def write(self, key: StateKey, value: str) -> None:
        self._remember(key)
        self.store.write(key, value)

    def delete(self, key: StateKey) -> None:
        self._remember(key)
        self.store.delete(key)

    def exists(self, key: StateKey) -> bool:
        return self.store.exists(key)

    def append_line(self, key: StateKey, line: str) -> None:
        self._remember(key)
        self.store.append_line(key, line)

    def read_lines(self, key: StateKey) -> list[str]:
        return self.store.read_lines(key)

    def rollback(self) -> list[StateKey]:
        """Put every changed key back. Returns the keys that could not be restored."""
        failed = []
        for key, original in self.saved.items():
            try:
                if original is None:
                    self.store.delete(key)
                elif key in LINE_KEYS and original:
                    self.store.write(key, original + "\n")
                else:
                    self.store.write(key, original)
            except OSError as e:
                log(f"Warning: could not restore {key.value}: {e}")
                failed.append(key)
        self.saved.clear()
        return failed
