"""Tests for model pricing and cost calculation."""

import pytest

from claude_usage_tracker.types import TokenCounts
from claude_usage_tracker.utils.pricing import (
    DEFAULT_PRICING,
    PRICING_TABLE,
    cost_for,
    pricing_for,
)
from helpers import HAIKU, OPUS, SONNET

ONE_MILLION = TokenCounts(
    input_tokens=1_000_000,
    output_tokens=1_000_000,
    cache_creation_tokens=1_000_000,
    cache_read_tokens=1_000_000,
)


class TestPricingLookup:
    @pytest.mark.parametrize("model,expected", [
        (OPUS, 5.00 + 25.00 + 6.25 + 0.50),
        (SONNET, 3.00 + 15.00 + 3.75 + 0.30),
        (HAIKU, 1.00 + 5.00 + 1.25 + 0.10),
    ])
    def test_family_rates(self, model, expected):
        assert cost_for(model, ONE_MILLION) == pytest.approx(expected)

    def test_match_is_case_insensitive(self):
        assert pricing_for("Claude-SONNET-4") is pricing_for("claude-sonnet-4")

    def test_unknown_model_uses_most_expensive_family(self):
        assert pricing_for("gpt-4o") is DEFAULT_PRICING
        assert DEFAULT_PRICING.output_rate == max(p.output_rate for _, p in PRICING_TABLE)

    def test_empty_model_uses_default(self):
        assert pricing_for("") is DEFAULT_PRICING
        assert pricing_for(None) is DEFAULT_PRICING


class TestCostFor:
    def test_sonnet_example(self):
        tokens = TokenCounts(input_tokens=1000, output_tokens=2000)
        assert cost_for(SONNET, tokens) == pytest.approx(0.033)

    def test_zero_tokens_cost_nothing(self):
        assert cost_for(OPUS, TokenCounts()) == 0.0

    def test_cost_is_additive(self):
        a = TokenCounts(input_tokens=123, output_tokens=456, cache_read_tokens=7890)
        b = TokenCounts(input_tokens=1, output_tokens=2, cache_creation_tokens=3000)
        assert cost_for(SONNET, a + b) == pytest.approx(cost_for(SONNET, a) + cost_for(SONNET, b))
