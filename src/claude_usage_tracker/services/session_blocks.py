"""Group time-ordered usage records into fixed-length session blocks.

A block opens at a record's timestamp and lasts `window` (five hours by
default). A record joins the open block unless it arrives at or after the
block's end, or more than `window` after the block's previous record; in
either case a new block opens at that record. Only the newest block can be
active, and only the active block gets a burn rate and a projection.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Iterable, Optional

from claude_usage_tracker.types import (
    BurnRate,
    ProjectedUsage,
    SessionBlock,
    TokenCounts,
    UsageRecord,
)
from claude_usage_tracker.utils.date_utils import floor_to_hour

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=5)
DEFAULT_BURN_RATE_WINDOW = timedelta(minutes=60)

# Record spans shorter than this give no meaningful rate
MIN_BURN_RATE_ELAPSED = timedelta(seconds=60)


class SessionBlockBuilder:
    def __init__(
        self,
        window: timedelta = DEFAULT_WINDOW,
        live_tolerance: Optional[timedelta] = None,
        burn_rate_window: timedelta = DEFAULT_BURN_RATE_WINDOW,
        align_to_hour: bool = False,
    ):
        if window <= timedelta(0):
            raise ValueError("Session window must be positive")
        self.window = window
        self.live_tolerance = live_tolerance if live_tolerance is not None else window
        self.burn_rate_window = burn_rate_window
        self.align_to_hour = align_to_hour

    def build(self, records: Iterable[UsageRecord], now: datetime) -> list[SessionBlock]:
        """Split records (ascending by timestamp) into session blocks."""
        blocks: list[SessionBlock] = []
        current: SessionBlock | None = None

        for record in records:
            if current is None or self._starts_new_block(current, record.timestamp):
                current = self._open_block(record.timestamp)
                blocks.append(current)
            current.add_record(record)

        if current is not None and self._is_live(current, now):
            current.is_active = True
            current.burn_rate = self.burn_rate(current)
            current.projection = self.projection(current, now)
        logger.debug(
            "Built %d session blocks, last active: %s",
            len(blocks), current is not None and current.is_active,
        )
        return blocks

    def _starts_new_block(self, block: SessionBlock, timestamp: datetime) -> bool:
        if timestamp >= block.end_time:
            return True
        return block.actual_end_time is not None and timestamp - block.actual_end_time > self.window

    def _open_block(self, timestamp: datetime) -> SessionBlock:
        start = floor_to_hour(timestamp) if self.align_to_hour else timestamp
        return SessionBlock(
            id=str(uuid.uuid4()),
            start_time=start,
            end_time=start + self.window,
        )

    def _is_live(self, block: SessionBlock, now: datetime) -> bool:
        if block.actual_end_time is None:
            return False
        if not (block.start_time <= now < block.end_time):
            return False
        return now - block.actual_end_time <= self.live_tolerance

    def burn_rate(self, block: SessionBlock) -> BurnRate:
        """Token and cost rate over the trailing burn-rate window of a block."""
        if not block.records or block.actual_end_time is None:
            return BurnRate()

        window_start = max(block.start_time, block.actual_end_time - self.burn_rate_window)
        recent = [r for r in block.records if r.timestamp >= window_start]
        if not recent:
            return BurnRate()

        elapsed = recent[-1].timestamp - recent[0].timestamp
        if elapsed < MIN_BURN_RATE_ELAPSED:
            return BurnRate()

        tokens = sum((r.tokens for r in recent), TokenCounts()).total
        cost = sum(r.cost_usd for r in recent)
        minutes = elapsed.total_seconds() / 60
        return BurnRate(
            tokens_per_minute=max(0.0, tokens / minutes),
            cost_per_hour=max(0.0, cost / (minutes / 60)),
        )

    def projection(self, block: SessionBlock, now: datetime) -> ProjectedUsage:
        """Project block totals to the end of its window at the current rate."""
        remaining = max(0.0, (block.end_time - now).total_seconds() / 60)
        rate = block.burn_rate
        return ProjectedUsage(
            total_tokens=block.tokens.total + int(rate.tokens_per_minute * remaining),
            total_cost=block.cost_usd + rate.cost_per_hour * remaining / 60,
            remaining_minutes=remaining,
        )


def active_block(blocks: list[SessionBlock]) -> Optional[SessionBlock]:
    """Return the most recent active block, if any."""
    active = [b for b in blocks if b.is_active]
    if not active:
        return None
    return max(active, key=lambda b: b.actual_end_time or b.start_time)


def auto_token_limit(blocks: list[SessionBlock]) -> Optional[int]:
    """Largest token total reached by a completed block, used as a quota hint."""
    completed = [b.tokens.total for b in blocks if not b.is_active]
    if not completed:
        return None
    limit = max(completed)
    return limit if limit > 0 else None
