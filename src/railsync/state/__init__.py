"""Local state that survives between runner processes of one attempt cycle."""

from railsync.state.markers import FailureMarkerStore
from railsync.state.run_cache import RunIdCache, TimestampPin
from railsync.state.store import FileStore, KeyValueStore, MemoryStore

__all__ = [
    "FailureMarkerStore",
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "RunIdCache",
    "TimestampPin",
]
