"""Type definitions for Claude Usage Tracker."""

from claude_usage_tracker.types.usage import TokenCounts, UsageRecord, make_dedup_key
from claude_usage_tracker.types.sessions import BurnRate, ProjectedUsage, SessionBlock
from claude_usage_tracker.types.stats import (
    DailyUsage,
    ModelUsage,
    ProjectUsage,
    UsageSnapshot,
    UsageStats,
)
from claude_usage_tracker.types.files import FileMetadata
from claude_usage_tracker.types.errors import DataRootNotFoundError

__all__ = [
    "TokenCounts",
    "UsageRecord",
    "make_dedup_key",
    "BurnRate",
    "ProjectedUsage",
    "SessionBlock",
    "DailyUsage",
    "ModelUsage",
    "ProjectUsage",
    "UsageSnapshot",
    "UsageStats",
    "FileMetadata",
    "DataRootNotFoundError",
]
