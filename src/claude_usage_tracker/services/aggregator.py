"""Cross-sectional usage statistics: totals and rollups by model, day, project.

Every function here is pure and recomputes from the records it is given.
Calendar grouping uses the local timezone unless `tz` is passed.
"""

from collections import defaultdict
from datetime import datetime, tzinfo
from typing import Iterable

from claude_usage_tracker.types import (
    DailyUsage,
    ModelUsage,
    ProjectUsage,
    TokenCounts,
    UsageRecord,
    UsageStats,
)
from claude_usage_tracker.utils.date_utils import day_key, hour_of_day, is_same_day
from claude_usage_tracker.utils.path_codec import project_name

HOURS_PER_DAY = 24
MINIMUM_SESSION_COUNT = 1


def aggregate(records: Iterable[UsageRecord], tz: tzinfo | None = None) -> UsageStats:
    records = list(records)
    if not records:
        return UsageStats.empty()

    return UsageStats(
        total_cost=sum_costs(records),
        tokens=sum_tokens(records),
        session_count=max(MINIMUM_SESSION_COUNT, _distinct_sessions(records)),
        by_model=aggregate_by_model(records),
        by_date=aggregate_by_date(records, tz=tz),
        by_project=aggregate_by_project(records),
    )


def aggregate_by_model(records: Iterable[UsageRecord]) -> list[ModelUsage]:
    """Group by exact model name, most expensive first."""
    result = [
        ModelUsage(
            model=model,
            total_cost=sum_costs(group),
            tokens=sum_tokens(group),
            session_count=_distinct_sessions(group),
        )
        for model, group in _group(records, lambda r: r.model).items()
    ]
    result.sort(key=lambda m: m.total_cost, reverse=True)
    return result


def aggregate_by_date(records: Iterable[UsageRecord], tz: tzinfo | None = None) -> list[DailyUsage]:
    """Group by local calendar day, oldest first."""
    result = [
        DailyUsage(
            date=date,
            total_cost=sum_costs(group),
            total_tokens=sum_tokens(group).total,
            models_used=sorted({r.model for r in group}),
            hourly_costs=hourly_costs(group, tz=tz),
        )
        for date, group in _group(records, lambda r: day_key(r.timestamp, tz)).items()
    ]
    result.sort(key=lambda d: d.date)
    return result


def aggregate_by_project(records: Iterable[UsageRecord]) -> list[ProjectUsage]:
    """Group by project path, most expensive first."""
    result = [
        ProjectUsage(
            project_path=project,
            project_name=project_name(project),
            total_cost=sum_costs(group),
            total_tokens=sum_tokens(group).total,
            session_count=_distinct_sessions(group),
            last_used=max(r.timestamp for r in group),
        )
        for project, group in _group(records, lambda r: r.project).items()
    ]
    result.sort(key=lambda p: p.total_cost, reverse=True)
    return result


def filter_today(
    records: Iterable[UsageRecord],
    reference: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[UsageRecord]:
    """Keep records on the same local calendar day as `reference` (default now)."""
    if reference is None:
        reference = datetime.now().astimezone()
    return [r for r in records if is_same_day(r.timestamp, reference, tz)]


def hourly_costs(records: Iterable[UsageRecord], tz: tzinfo | None = None) -> list[float]:
    """Cost summed into 24 local hour-of-day buckets."""
    costs = [0.0] * HOURS_PER_DAY
    for record in records:
        costs[hour_of_day(record.timestamp, tz)] += record.cost_usd
    return costs


def today_hourly_costs(
    records: Iterable[UsageRecord],
    reference: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[float]:
    return hourly_costs(filter_today(records, reference, tz), tz)


def sum_costs(records: Iterable[UsageRecord]) -> float:
    return sum(r.cost_usd for r in records)


def sum_tokens(records: Iterable[UsageRecord]) -> TokenCounts:
    return sum((r.tokens for r in records), TokenCounts())


def _distinct_sessions(records: Iterable[UsageRecord]) -> int:
    return len({r.session_id for r in records if r.session_id is not None})


def _group(records: Iterable[UsageRecord], key) -> dict[str, list[UsageRecord]]:
    groups: dict[str, list[UsageRecord]] = defaultdict(list)
    for record in records:
        groups[key(record)].append(record)
    return groups
