"""Tests for claude_usage_tracker.services.aggregator."""

from datetime import datetime, timedelta, timezone

import pytest

from claude_usage_tracker.services import aggregator
from claude_usage_tracker.types import UsageStats
from helpers import HAIKU, OPUS, SONNET, make_record

UTC = timezone.utc
DAY = datetime(2026, 2, 13, tzinfo=UTC)


@pytest.fixture
def records():
    return [
        make_record(DAY + timedelta(hours=9), model=SONNET, cost=1.0, session_id="s1",
                    project="/home/wiz/app", record_id="a"),
        make_record(DAY + timedelta(hours=9, minutes=30), model=OPUS, cost=4.0, session_id="s1",
                    project="/home/wiz/app", record_id="b"),
        make_record(DAY + timedelta(hours=15), model=SONNET, cost=2.0, session_id="s2",
                    project="/home/wiz/lib", record_id="c"),
        make_record(DAY - timedelta(hours=1), model=HAIKU, cost=0.5, session_id="s3",
                    project="/home/wiz/lib", record_id="d"),
    ]


class TestAggregate:
    def test_empty_input_gives_empty_stats(self):
        stats = aggregator.aggregate([])
        assert stats == UsageStats.empty()
        assert stats.session_count == 0

    def test_totals(self, records):
        stats = aggregator.aggregate(records, tz=UTC)
        assert stats.total_cost == pytest.approx(7.5)
        assert stats.total_tokens == sum(r.total_tokens for r in records)
        assert stats.session_count == 3

    def test_session_count_is_at_least_one(self):
        stats = aggregator.aggregate([make_record(DAY, session_id=None)])
        assert stats.session_count == 1

    def test_breakdowns_add_up_to_total(self, records):
        stats = aggregator.aggregate(records, tz=UTC)
        assert sum(m.total_cost for m in stats.by_model) == pytest.approx(stats.total_cost)
        assert sum(d.total_cost for d in stats.by_date) == pytest.approx(stats.total_cost)
        assert sum(p.total_cost for p in stats.by_project) == pytest.approx(stats.total_cost)
        assert sum(d.total_tokens for d in stats.by_date) == stats.total_tokens


class TestBreakdowns:
    def test_by_model_sorted_by_cost(self, records):
        by_model = aggregator.aggregate_by_model(records)
        assert [m.model for m in by_model] == [OPUS, SONNET, HAIKU]
        sonnet = by_model[1]
        assert sonnet.total_cost == pytest.approx(3.0)
        assert sonnet.session_count == 2

    def test_by_date_oldest_first(self, records):
        by_date = aggregator.aggregate_by_date(records, tz=UTC)
        assert [d.date for d in by_date] == ["2026-02-12", "2026-02-13"]
        today = by_date[1]
        assert today.total_cost == pytest.approx(7.0)
        assert today.models_used == sorted([OPUS, SONNET])
        assert today.hourly_costs[9] == pytest.approx(5.0)
        assert today.hourly_costs[15] == pytest.approx(2.0)

    def test_by_date_respects_zone(self, records):
        plus_ten = timezone(timedelta(hours=10))
        by_date = aggregator.aggregate_by_date(records, tz=plus_ten)
        # 15:00 UTC is the next morning at UTC+10
        assert [d.date for d in by_date] == ["2026-02-13", "2026-02-14"]

    def test_by_project(self, records):
        by_project = aggregator.aggregate_by_project(records)
        assert [p.project_name for p in by_project] == ["app", "lib"]
        app = by_project[0]
        assert app.project_path == "/home/wiz/app"
        assert app.total_cost == pytest.approx(5.0)
        assert app.session_count == 1
        assert app.last_used == DAY + timedelta(hours=9, minutes=30)
        assert app.average_cost_per_session == pytest.approx(5.0)


class TestToday:
    def test_filter_today(self, records):
        today = aggregator.filter_today(records, reference=DAY + timedelta(hours=20), tz=UTC)
        assert [r.id for r in today] == ["a", "b", "c"]

    def test_today_is_subset_of_all(self, records):
        today = aggregator.filter_today(records, reference=DAY + timedelta(hours=20), tz=UTC)
        today_stats = aggregator.aggregate(today, tz=UTC)
        all_stats = aggregator.aggregate(records, tz=UTC)
        assert set(r.id for r in today) <= set(r.id for r in records)
        assert today_stats.total_cost <= all_stats.total_cost
        assert today_stats.total_tokens <= all_stats.total_tokens

    def test_hourly_costs(self, records):
        costs = aggregator.hourly_costs(records, tz=UTC)
        assert len(costs) == 24
        assert sum(costs) == pytest.approx(7.5)
        assert costs[23] == pytest.approx(0.5)

    def test_today_hourly_costs(self, records):
        costs = aggregator.today_hourly_costs(records, reference=DAY + timedelta(hours=20), tz=UTC)
        assert sum(costs) == pytest.approx(7.0)
        assert costs[23] == 0.0

    def test_hourly_costs_empty(self):
        assert aggregator.hourly_costs([]) == [0.0] * 24


def test_sum_helpers(records):
    assert aggregator.sum_costs(records) == pytest.approx(7.5)
    assert aggregator.sum_tokens(records).total == sum(r.total_tokens for r in records)
    assert aggregator.sum_costs([]) == 0.0
