"""Cached, parallel ingestion of usage files into a sorted record stream."""

import logging
from concurrent.futures import ThreadPoolExecutor
from operator import attrgetter
from typing import Callable

from claude_usage_tracker.services.jsonl_parser import parse_file
from claude_usage_tracker.services.record_cache import RecordCache
from claude_usage_tracker.types import FileMetadata, UsageRecord

logger = logging.getLogger(__name__)

ParseFile = Callable[..., list[UsageRecord]]

DEFAULT_MAX_WORKERS = 4


class FileIngestor:
    """Loads usage records per file, re-parsing only files that changed."""

    def __init__(
        self,
        parse: ParseFile = parse_file,
        cache: RecordCache | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self._parse = parse
        self._cache = cache if cache is not None else RecordCache()
        self._max_workers = max(1, max_workers)

    @property
    def cache(self) -> RecordCache:
        return self._cache

    def load(self, file: FileMetadata) -> list[UsageRecord]:
        """Return the records of one file, from cache when it is fresh."""
        cached = self._cache.get(file.path, file.modification_time)
        if cached is not None:
            logger.debug("Cache hit for %s", file.path)
            return cached

        records = self._parse(file.path, project=file.project_path)
        self._cache.put(file.path, file.modification_time, records)
        logger.debug("Parsed %d records from %s", len(records), file.path)
        return list(records)

    def load_all(self, files: list[FileMetadata]) -> list[UsageRecord]:
        """Load all files and merge their records in timestamp order.

        Files are parsed on a worker pool. Per-file results are concatenated
        in the order of `files` before a stable sort, so records sharing a
        timestamp keep their file order.
        """
        if len(files) <= 1 or self._max_workers == 1:
            per_file = [self.load(f) for f in files]
        else:
            workers = min(self._max_workers, len(files))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                per_file = list(executor.map(self.load, files))

        merged = [record for records in per_file for record in records]
        merged.sort(key=attrgetter("timestamp"))
        return merged

    def prune(self, files: list[FileMetadata]) -> int:
        """Drop cache entries for paths missing from a full discovery pass."""
        known = {f.path for f in files}
        stale = [path for path in self._cache.paths() if path not in known]
        for path in stale:
            self._cache.invalidate(path)
        if stale:
            logger.debug("Dropped %d cached files no longer on disk", len(stale))
        return len(stale)

    def clear_cache(self):
        self._cache.clear()
