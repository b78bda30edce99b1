"""JSONL usage-record parser for Claude Code log files."""

import logging
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

import orjson

from claude_usage_tracker.types.usage import TokenCounts, UsageRecord, make_dedup_key
from claude_usage_tracker.utils.pricing import cost_for

logger = logging.getLogger(__name__)

# Max size for a single JSONL line (10MB)
MAX_LINE_SIZE = 10 * 1024 * 1024

# Model name used when an entry carries usage but no model
SYNTHETIC_MODEL = "<synthetic>"

NEWLINE = b"\n"

# Fractional seconds after HH:MM:SS, any number of digits
_FRACTION_RE = re.compile(r"(?<=:\d\d)\.(\d+)")


def parse_file(file_path: str | Path, project: str = "") -> list[UsageRecord]:
    """Parse every usage record in a JSONL file.

    The whole file is read as bytes and split on the newline byte. One
    dedup set is shared by all lines of the file. An unreadable file
    contributes no records.
    """
    path = Path(file_path)
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.warning("Cannot read usage file %s: %s", path, e)
        return []

    seen_ids: set[str] = set()
    records = []
    for line_num, line in enumerate(split_lines(data), start=1):
        if len(line) > MAX_LINE_SIZE:
            logger.warning(
                "Line %d in %s exceeds %dMB, skipping",
                line_num, path.name, MAX_LINE_SIZE // (1024 * 1024),
            )
            continue
        record = parse_line(line, seen_ids, project=project, source_file=str(path))
        if record is not None:
            records.append(record)
    return records


def split_lines(data: bytes) -> Iterator[bytes]:
    """Yield the non-empty newline-delimited lines of a byte buffer."""
    start = 0
    size = len(data)
    while start < size:
        end = data.find(NEWLINE, start)
        if end == -1:
            end = size
        line = data[start:end]
        if line.endswith(b"\r"):
            line = line[:-1]
        if line.strip():
            yield line
        start = end + 1


def parse_line(
    raw_line: bytes,
    seen_ids: set[str],
    *,
    project: str = "",
    source_file: str = "",
) -> Optional[UsageRecord]:
    """Turn one raw log line into a UsageRecord, or None.

    Lines that are not JSON objects, carry no usage block, have no
    parseable timestamp, report zero tokens, or repeat an already seen
    message/request id pair are dropped. seen_ids is updated in place.
    """
    try:
        raw = orjson.loads(raw_line)
    except orjson.JSONDecodeError as e:
        logger.debug("Malformed JSON line in %s: %s", source_file or "<input>", e)
        return None

    if not isinstance(raw, dict):
        return None

    message = raw.get("message")
    if not isinstance(message, dict):
        return None
    usage = message.get("usage")
    if not isinstance(usage, dict):
        return None

    timestamp = _parse_timestamp(raw.get("timestamp"))
    if timestamp is None:
        return None

    tokens = TokenCounts(
        input_tokens=_token_count(usage.get("input_tokens")),
        output_tokens=_token_count(usage.get("output_tokens")),
        cache_creation_tokens=_token_count(usage.get("cache_creation_input_tokens")),
        cache_read_tokens=_token_count(usage.get("cache_read_input_tokens")),
    )
    if tokens.total == 0:
        return None

    message_id = _optional_str(message.get("id"))
    request_id = _optional_str(raw.get("requestId"))
    dedup_key = make_dedup_key(message_id, request_id)
    if dedup_key is not None:
        if dedup_key in seen_ids:
            return None
        seen_ids.add(dedup_key)

    model = _optional_str(message.get("model")) or SYNTHETIC_MODEL

    cost = raw.get("costUSD")
    if isinstance(cost, (int, float)) and not isinstance(cost, bool):
        cost_usd = float(cost)
    else:
        cost_usd = cost_for(model, tokens)

    return UsageRecord(
        id=dedup_key or f"{timestamp.timestamp()}-{uuid.uuid4()}",
        timestamp=timestamp,
        model=model,
        tokens=tokens,
        cost_usd=cost_usd,
        project=project,
        source_file=source_file,
        session_id=_optional_str(raw.get("sessionId")),
        message_id=message_id,
        request_id=request_id,
    )


def _parse_timestamp(ts_value) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp such as "2026-02-13T12:00:00.123Z"."""
    if not isinstance(ts_value, str) or not ts_value:
        return None
    try:
        dt = datetime.fromisoformat(_normalise_fraction(ts_value.replace("Z", "+00:00")))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _normalise_fraction(ts_value: str) -> str:
    # fromisoformat on 3.10 only takes 3 or 6 fraction digits
    return _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), ts_value, count=1)


def _token_count(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(0, value)


def _optional_str(value) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None
