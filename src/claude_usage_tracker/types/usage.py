"""Record-level types for parsed usage data."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class TokenCounts:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0

    @property
    def total(self) -> int:
        return (self.input_tokens + self.output_tokens +
                self.cache_creation_tokens + self.cache_read_tokens)

    def __add__(self, other: "TokenCounts") -> "TokenCounts":
        if not isinstance(other, TokenCounts):
            return NotImplemented
        return TokenCounts(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cache_creation_tokens=self.cache_creation_tokens + other.cache_creation_tokens,
            cache_read_tokens=self.cache_read_tokens + other.cache_read_tokens,
        )


@dataclass(frozen=True)
class UsageRecord:
    """One accepted usage line. Never mutated after parsing."""
    id: str
    timestamp: datetime
    model: str
    tokens: TokenCounts
    cost_usd: float
    project: str = ""
    source_file: str = ""
    session_id: Optional[str] = None
    message_id: Optional[str] = None
    request_id: Optional[str] = None

    @property
    def total_tokens(self) -> int:
        return self.tokens.total

    @property
    def dedup_key(self) -> Optional[str]:
        return make_dedup_key(self.message_id, self.request_id)


def make_dedup_key(message_id: Optional[str], request_id: Optional[str]) -> Optional[str]:
    """Return "message_id:request_id", or None when either id is missing."""
    if not message_id or not request_id:
        return None
    return f"{message_id}:{request_id}"
