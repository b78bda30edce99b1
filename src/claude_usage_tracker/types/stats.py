"""Aggregated usage statistics."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from claude_usage_tracker.types.sessions import SessionBlock
from claude_usage_tracker.types.usage import TokenCounts, UsageRecord


@dataclass
class ModelUsage:
    model: str
    total_cost: float = 0.0
    tokens: TokenCounts = field(default_factory=TokenCounts)
    session_count: int = 0


@dataclass
class DailyUsage:
    date: str  # YYYY-MM-DD, local time
    total_cost: float = 0.0
    total_tokens: int = 0
    models_used: list[str] = field(default_factory=list)
    hourly_costs: list[float] = field(default_factory=lambda: [0.0] * 24)


@dataclass
class ProjectUsage:
    project_path: str
    project_name: str
    total_cost: float = 0.0
    total_tokens: int = 0
    session_count: int = 0
    last_used: Optional[datetime] = None

    @property
    def average_cost_per_session(self) -> float:
        return self.total_cost / self.session_count if self.session_count else 0.0


@dataclass
class UsageStats:
    total_cost: float = 0.0
    tokens: TokenCounts = field(default_factory=TokenCounts)
    session_count: int = 0
    by_model: list[ModelUsage] = field(default_factory=list)
    by_date: list[DailyUsage] = field(default_factory=list)
    by_project: list[ProjectUsage] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "UsageStats":
        return cls()

    @property
    def total_tokens(self) -> int:
        return self.tokens.total

    @property
    def average_cost_per_session(self) -> float:
        return self.total_cost / self.session_count if self.session_count else 0.0

    @property
    def average_tokens_per_session(self) -> int:
        return self.total_tokens // self.session_count if self.session_count else 0

    @property
    def cost_per_million_tokens(self) -> float:
        if not self.total_tokens:
            return 0.0
        return self.total_cost / self.total_tokens * 1_000_000


@dataclass
class UsageSnapshot:
    """Everything one refresh produced, published as a single value."""
    taken_at: datetime
    reason: str
    today_records: list[UsageRecord] = field(default_factory=list)
    today_stats: UsageStats = field(default_factory=UsageStats)
    all_stats: UsageStats = field(default_factory=UsageStats)
    today_hourly_costs: list[float] = field(default_factory=lambda: [0.0] * 24)
    active_block: Optional[SessionBlock] = None
    auto_token_limit: Optional[int] = None
