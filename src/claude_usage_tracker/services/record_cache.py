"""In-memory per-file cache of parsed usage records."""

import threading
from dataclasses import dataclass

from claude_usage_tracker.types import UsageRecord


@dataclass(frozen=True)
class CachedFile:
    modification_time: float
    records: tuple[UsageRecord, ...]


class RecordCache:
    """Caches parsed records per file path to avoid re-parsing JSONL files.

    An entry answers for a file only while its stored modification time is
    at least the file's current one. All access goes through one lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, CachedFile] = {}
        self.hits = 0
        self.misses = 0

    def get(self, path: str, modification_time: float) -> list[UsageRecord] | None:
        with self._lock:
            entry = self._entries.get(path)
            if entry is None or entry.modification_time < modification_time:
                self.misses += 1
                return None
            self.hits += 1
            return list(entry.records)

    def put(self, path: str, modification_time: float, records: list[UsageRecord]):
        with self._lock:
            current = self._entries.get(path)
            # A slower parse of an older version must not replace a newer entry
            if current is not None and current.modification_time > modification_time:
                return
            self._entries[path] = CachedFile(modification_time, tuple(records))

    def invalidate(self, path: str):
        with self._lock:
            self._entries.pop(path, None)

    def paths(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def clear(self):
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
