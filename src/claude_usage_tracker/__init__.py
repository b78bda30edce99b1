"""Claude Usage Tracker: usage and cost metrics from Claude Code JSONL logs."""

__version__ = "0.1.0"
