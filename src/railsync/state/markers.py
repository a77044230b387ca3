"""Failure markers: case ids that failed earlier in the current attempt cycle.

A marked case must not be reported as passed by a later, unrelated test in
the same cycle. Retry invocations are separate processes, so markers live in a
persistent store and are only removed by an explicit clear.
"""

from __future__ import annotations

from collections.abc import Iterable

from railsync.logging import get_logger
from railsync.state.store import KeyValueStore

logger = get_logger(__name__)


class FailureMarkerStore:
    """Persisted set of failed case ids."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def is_marked(self, case_id: int) -> bool:
        return self._store.get(str(case_id)) is not None

    def any_marked(self, case_ids: Iterable[int]) -> bool:
        return any(self.is_marked(case_id) for case_id in case_ids)

    def mark(self, case_id: int) -> None:
        """Create an empty marker for ``case_id``. Marking twice is a no-op."""
        self._store.set(str(case_id), "")

    def marked(self) -> list[int]:
        return sorted(int(key) for key in self._store.keys() if key.isdigit())

    def clear_all(self) -> None:
        """Drop every marker, starting a new attempt cycle."""
        self._store.clear()
        logger.info("Cleared failed test markers")
