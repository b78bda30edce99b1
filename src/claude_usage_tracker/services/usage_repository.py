"""Single owner of usage data: discovery, ingestion, blocks and stats."""

import logging
import threading
from datetime import timedelta
from pathlib import Path
from typing import Optional

from claude_usage_tracker.services import aggregator
from claude_usage_tracker.services.file_discovery import (
    discover,
    filter_modified_today,
    filter_modified_within_hours,
)
from claude_usage_tracker.services.file_ingestor import FileIngestor
from claude_usage_tracker.services.session_blocks import (
    SessionBlockBuilder,
    active_block,
    auto_token_limit,
)
from claude_usage_tracker.types import SessionBlock, UsageRecord, UsageSnapshot, UsageStats
from claude_usage_tracker.utils.clock import SystemClock

logger = logging.getLogger(__name__)

CLAUDE_DATA_ROOT = Path.home() / ".claude"

# Files older than this many session windows cannot touch the live block
SESSION_FILE_LOOKBACK_WINDOWS = 2


class UsageRepository:
    """Answers usage queries from the JSONL logs under a Claude data root.

    Public methods are serialised on one lock so a refresh never interleaves
    with a cache invalidation. Raises DataRootNotFoundError when the data
    root is missing.
    """

    def __init__(
        self,
        data_root: str | Path | None = None,
        ingestor: FileIngestor | None = None,
        builder: SessionBlockBuilder | None = None,
        token_limit: int | None = None,
        clock=None,
    ):
        self._data_root = Path(data_root).expanduser() if data_root else CLAUDE_DATA_ROOT
        self._ingestor = ingestor or FileIngestor()
        self._builder = builder or SessionBlockBuilder()
        self._token_limit = token_limit if token_limit else None
        self._clock = clock or SystemClock()
        self._lock = threading.RLock()

    @property
    def data_root(self) -> Path:
        return self._data_root

    @property
    def projects_dir(self) -> Path:
        return self._data_root / "projects"

    @property
    def ingestor(self) -> FileIngestor:
        return self._ingestor

    def get_today_records(self) -> list[UsageRecord]:
        with self._lock:
            now = self._clock.now()
            files = filter_modified_today(discover(self._data_root), now=now)
            return aggregator.filter_today(self._ingestor.load_all(files), now)

    def get_all_records(self) -> list[UsageRecord]:
        with self._lock:
            files = discover(self._data_root)
            self._ingestor.prune(files)
            return self._ingestor.load_all(files)

    def get_usage_stats(self) -> UsageStats:
        with self._lock:
            return aggregator.aggregate(self.get_all_records())

    def get_session_blocks(self) -> list[SessionBlock]:
        with self._lock:
            now = self._clock.now()
            return self._builder.build(self._session_records(discover(self._data_root), now), now)

    def get_active_session_block(self) -> Optional[SessionBlock]:
        with self._lock:
            block = active_block(self.get_session_blocks())
            if block is None:
                return None
            return self._with_limit(block, self.get_auto_token_limit())

    def get_auto_token_limit(self) -> Optional[int]:
        """Largest block ever completed, over the full history."""
        with self._lock:
            now = self._clock.now()
            return auto_token_limit(self._builder.build(self.get_all_records(), now))

    def clear_cache(self):
        with self._lock:
            self._ingestor.clear_cache()
            logger.debug("Usage record cache cleared")

    def snapshot(self, reason: str = "manual") -> UsageSnapshot:
        """Compute every published figure from a single discovery pass."""
        with self._lock:
            now = self._clock.now()
            files = discover(self._data_root)
            self._ingestor.prune(files)
            all_records = self._ingestor.load_all(files)
            today = aggregator.filter_today(all_records, now)

            # Full history: the newest block may be live, the rest set the auto limit
            blocks = self._builder.build(all_records, now)
            auto_limit = auto_token_limit(blocks)

            snapshot = UsageSnapshot(
                taken_at=now,
                reason=reason,
                today_records=today,
                today_stats=aggregator.aggregate(today),
                all_stats=aggregator.aggregate(all_records),
                today_hourly_costs=aggregator.hourly_costs(today),
                active_block=self._with_limit(active_block(blocks), auto_limit),
                auto_token_limit=auto_limit,
            )
            logger.info(
                "Refresh (%s): %d files, %d records, today $%.2f",
                reason, len(files), len(all_records), snapshot.today_stats.total_cost,
            )
            return snapshot

    def _session_records(self, files, now) -> list[UsageRecord]:
        lookback = self._builder.window * SESSION_FILE_LOOKBACK_WINDOWS
        recent = filter_modified_within_hours(
            files, lookback / timedelta(hours=1), now=now,
        )
        return self._ingestor.load_all(recent)

    def _with_limit(self, block: Optional[SessionBlock], auto_limit: Optional[int]) -> Optional[SessionBlock]:
        if block is None:
            return None
        return block.with_token_limit(self._token_limit or auto_limit)
