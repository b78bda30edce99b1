"""Per-token model pricing and cost calculation."""

from dataclasses import dataclass

from claude_usage_tracker.types.usage import TokenCounts


@dataclass(frozen=True)
class ModelPricing:
    """USD cost per single token for each billed category."""
    input_rate: float
    output_rate: float
    cache_creation_rate: float
    cache_read_rate: float

    def cost_for(self, tokens: TokenCounts) -> float:
        return (
            tokens.input_tokens * self.input_rate
            + tokens.output_tokens * self.output_rate
            + tokens.cache_creation_tokens * self.cache_creation_rate
            + tokens.cache_read_tokens * self.cache_read_rate
        )


def _per_million(input: float, output: float, cache_create: float, cache_read: float) -> ModelPricing:
    return ModelPricing(
        input_rate=input / 1_000_000,
        output_rate=output / 1_000_000,
        cache_creation_rate=cache_create / 1_000_000,
        cache_read_rate=cache_read / 1_000_000,
    )


# Per 1M tokens (as of Nov 2025). Ordered: first substring match wins.
PRICING_TABLE: list[tuple[str, ModelPricing]] = [
    ("opus",   _per_million(5.00, 25.00, 6.25, 0.50)),
    ("sonnet", _per_million(3.00, 15.00, 3.75, 0.30)),
    ("haiku",  _per_million(1.00, 5.00,  1.25, 0.10)),
]

# Unknown models are billed at the most expensive known family
DEFAULT_PRICING: ModelPricing = max(
    (pricing for _, pricing in PRICING_TABLE),
    key=lambda p: p.output_rate,
)


def pricing_for(model: str) -> ModelPricing:
    """Match a model name to its pricing entry by case-insensitive substring."""
    name = (model or "").lower()
    for family, pricing in PRICING_TABLE:
        if family in name:
            return pricing
    return DEFAULT_PRICING


def cost_for(model: str, tokens: TokenCounts) -> float:
    """Calculate cost in USD for the given token counts and model."""
    return pricing_for(model).cost_for(tokens)
