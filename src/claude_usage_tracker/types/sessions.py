"""Session block types: windows of usage with burn rate and projection."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Optional

from claude_usage_tracker.types.usage import TokenCounts, UsageRecord


@dataclass(frozen=True)
class BurnRate:
    tokens_per_minute: float = 0.0
    cost_per_hour: float = 0.0


@dataclass(frozen=True)
class ProjectedUsage:
    total_tokens: int = 0
    total_cost: float = 0.0
    remaining_minutes: float = 0.0


@dataclass
class SessionBlock:
    """A fixed-length usage window that starts at its first record.

    Records are appended with add_record() only while the block is the
    open block of a build pass. Once a newer block opens it is left alone.
    """
    id: str
    start_time: datetime
    end_time: datetime
    actual_end_time: Optional[datetime] = None
    is_active: bool = False
    records: list[UsageRecord] = field(default_factory=list)
    tokens: TokenCounts = field(default_factory=TokenCounts)
    cost_usd: float = 0.0
    models: set[str] = field(default_factory=set)
    burn_rate: BurnRate = field(default_factory=BurnRate)
    projection: Optional[ProjectedUsage] = None
    token_limit: Optional[int] = None

    def add_record(self, record: UsageRecord):
        self.records.append(record)
        self.tokens = self.tokens + record.tokens
        self.cost_usd += record.cost_usd
        self.models.add(record.model)
        self.actual_end_time = record.timestamp

    def with_token_limit(self, token_limit: Optional[int]) -> "SessionBlock":
        """Return a copy carrying the given quota threshold."""
        return replace(self, token_limit=token_limit)

    @property
    def duration(self) -> timedelta:
        return (self.actual_end_time or self.end_time) - self.start_time

    @property
    def duration_minutes(self) -> float:
        return self.duration.total_seconds() / 60.0

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def remaining_tokens(self) -> Optional[int]:
        if self.token_limit is None:
            return None
        return max(0, self.token_limit - self.tokens.total)

    @property
    def token_progress(self) -> Optional[float]:
        if not self.token_limit:
            return None
        return self.tokens.total / self.token_limit
