"""Shared test helpers."""

import json
import os
from datetime import datetime, timezone
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from claude_usage_tracker.types import TokenCounts, UsageRecord
from claude_usage_tracker.utils.pricing import cost_for

SONNET = "claude-sonnet-4-5-20250929"
OPUS = "claude-opus-4-5-20251101"
HAIKU = "claude-haiku-4-5-20251001"


def iso(dt: datetime) -> str:
    """Format like Claude Code does: UTC with a Z suffix."""
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def usage_line(
    timestamp: datetime,
    model: str | None = SONNET,
    input_tokens: int = 1000,
    output_tokens: int = 2000,
    cache_creation: int = 0,
    cache_read: int = 0,
    message_id: str | None = None,
    request_id: str | None = None,
    session_id: str | None = "session-1",
    cost: float | None = None,
) -> str:
    message = {
        "role": "assistant",
        "usage": {
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "cache_creation_input_tokens": cache_creation,
            "cache_read_input_tokens": cache_read,
        },
    }
    if model is not None:
        message["model"] = model
    if message_id is not None:
        message["id"] = message_id
    entry = {
        "type": "assistant",
        "timestamp": iso(timestamp),
        "message": message,
    }
    if request_id is not None:
        entry["requestId"] = request_id
    if session_id is not None:
        entry["sessionId"] = session_id
    if cost is not None:
        entry["costUSD"] = cost
    return json.dumps(entry)


def write_jsonl(path: Path, lines, mtime: datetime | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(line + "\n" for line in lines))
    if mtime is not None:
        set_mtime(path, mtime)
    return path


def append_jsonl(path: Path, lines, mtime: datetime | None = None) -> Path:
    with open(path, "a") as f:
        for line in lines:
            f.write(line + "\n")
    if mtime is not None:
        set_mtime(path, mtime)
    return path


def set_mtime(path: Path, when: datetime):
    ts = when.timestamp()
    os.utime(path, (ts, ts))


def make_record(
    timestamp: datetime,
    model: str = SONNET,
    input_tokens: int = 1000,
    output_tokens: int = 2000,
    cost: float | None = None,
    session_id: str | None = "session-1",
    project: str = "/home/wiz/projects/myapp",
    record_id: str | None = None,
) -> UsageRecord:
    tokens = TokenCounts(input_tokens=input_tokens, output_tokens=output_tokens)
    return UsageRecord(
        id=record_id or f"{timestamp.timestamp()}-{model}",
        timestamp=timestamp,
        model=model,
        tokens=tokens,
        cost_usd=cost if cost is not None else cost_for(model, tokens),
        project=project,
        session_id=session_id,
    )


def wait_for_refresh(coordinator):
    """Wait for the in-flight refresh thread and deliver its queued signals."""
    coordinator.wait(5000)
    QCoreApplication.processEvents()
