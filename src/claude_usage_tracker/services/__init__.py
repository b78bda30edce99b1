"""Services for Claude Usage Tracker."""

from claude_usage_tracker.services.file_ingestor import FileIngestor
from claude_usage_tracker.services.record_cache import RecordCache
from claude_usage_tracker.services.session_blocks import SessionBlockBuilder
from claude_usage_tracker.services.usage_repository import UsageRepository

__all__ = [
    "FileIngestor",
    "RecordCache",
    "SessionBlockBuilder",
    "UsageRepository",
]
