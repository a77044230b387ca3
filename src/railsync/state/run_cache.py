"""Remote run ids cached per (cycle timestamp, browser, suite).

Repeated invocations within one attempt cycle must append to the same
TestRail run instead of opening a new one each time. The cycle is identified
by a timestamp pinned by the first process that reports.
"""

from __future__ import annotations

from railsync.state.store import KeyValueStore, safe_key

TIMESTAMP_KEY = "timestamp"


class TimestampPin:
    """Cycle timestamp written once and reused by every later process."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def get_or_pin(self, timestamp: str) -> str:
        """Return the pinned timestamp, pinning ``timestamp`` if none exists yet."""
        pinned = self._store.get(TIMESTAMP_KEY)
        if pinned:
            return pinned.strip()
        self._store.set(TIMESTAMP_KEY, str(timestamp))
        return str(timestamp)

    def clear(self) -> None:
        self._store.delete(TIMESTAMP_KEY)


class RunIdCache:
    """Maps (browser, suite) to a TestRail run id within one cycle."""

    def __init__(self, store: KeyValueStore, cycle: str = ""):
        self._store = store
        self._cycle = cycle

    def _key(self, browser_name: str, suite_id: str) -> str:
        return safe_key(self._cycle, browser_name, suite_id)

    def get(self, browser_name: str, suite_id: str) -> int | None:
        raw = self._store.get(self._key(browser_name, suite_id))
        if raw is None or not raw.strip().isdigit():
            return None
        return int(raw.strip())

    def set(self, browser_name: str, suite_id: str, run_id: int) -> None:
        self._store.set(self._key(browser_name, suite_id), str(run_id))

    def clear(self) -> None:
        self._store.clear()
