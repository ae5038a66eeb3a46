"""
Pricing calculations and cache economics.

Computes per-model and aggregate cost from snapshot token counters, the
savings and ROI against a flat subscription, and what prompt caching saved.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from .rounding import js_round, round_cents, to_fixed
from claude_metrics.storage.models import ModelUsageCounters

logger = logging.getLogger(__name__)

DEFAULT_PRICING_KEY = "default"

TOKENS_PER_PRICE_UNIT = 1_000_000

# USD per month (Max plan)
SUBSCRIPTION_COST = 100


@dataclass(frozen=True)
class PricingEntry:
    """USD per 1M tokens for each billing category."""
    input: float
    output: float
    cache_read: float
    cache_write: float

    def __post_init__(self):
        """Validate prices are non-negative."""
        for name in ("input", "output", "cache_read", "cache_write"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} price cannot be negative")


@dataclass(frozen=True)
class PricingTable:
    """Pricing keyed by model id, with a default for unknown models."""
    prices: Dict[str, PricingEntry]

    def __post_init__(self):
        """Validate the default entry exists."""
        if DEFAULT_PRICING_KEY not in self.prices:
            raise ValueError(f"Pricing table requires a '{DEFAULT_PRICING_KEY}' entry")

    def get_pricing(self, model: str) -> PricingEntry:
        """Get pricing for a model, falling back to the default entry.

        Args:
            model: Model identifier (exact match)

        Returns:
            PricingEntry for the model
        """
        pricing = self.prices.get(model)
        if pricing is None:
            logger.debug("no pricing for %s, using default", model)
            return self.prices[DEFAULT_PRICING_KEY]
        return pricing

    def merged(self, overrides: Mapping[str, PricingEntry]) -> "PricingTable":
        """Return a new table with ``overrides`` applied on top."""
        prices = dict(self.prices)
        prices.update(overrides)
        return PricingTable(prices)


# Built-in pricing, December 2024
PRICING_TABLE = PricingTable({
    "claude-sonnet-4-5-20250929": PricingEntry(
        input=3, output=15, cache_read=0.30, cache_write=3.75
    ),
    "claude-opus-4-5-20251101": PricingEntry(
        input=15, output=75, cache_read=1.50, cache_write=18.75
    ),
    DEFAULT_PRICING_KEY: PricingEntry(
        input=3, output=15, cache_read=0.30, cache_write=3.75
    ),
})


def calculate_cost(
    model: str,
    usage: ModelUsageCounters,
    table: PricingTable = PRICING_TABLE,
) -> float:
    """Unrounded USD cost of one model's usage.

    Args:
        model: Model identifier
        usage: Token counters for the model
        table: Pricing table to use

    Returns:
        Sum over the four categories of tokens * price / 1M
    """
    pricing = table.get_pricing(model)
    return (
        usage.input_tokens * pricing.input / TOKENS_PER_PRICE_UNIT
        + usage.output_tokens * pricing.output / TOKENS_PER_PRICE_UNIT
        + usage.cache_read_tokens * pricing.cache_read / TOKENS_PER_PRICE_UNIT
        + usage.cache_write_tokens * pricing.cache_write / TOKENS_PER_PRICE_UNIT
    )


def calculate_roi(total_cost: float, subscription: float) -> int:
    """Cost as a whole-number percentage of the subscription price."""
    if subscription <= 0:
        return 0
    return int(to_fixed(total_cost / subscription * 100, 0))


@dataclass(frozen=True)
class CostReport:
    """Aggregate cost accounting for the whole snapshot."""
    model_costs: Dict[str, float]
    total_cost: float
    subscription: float
    savings: float
    roi: int
    total_input: int
    total_output: int
    total_cache_read: int
    total_cache_write: int

    def to_dict(self) -> Dict[str, Any]:
        subscription = self.subscription
        if isinstance(subscription, float) and subscription.is_integer():
            subscription = int(subscription)
        return {
            "totalInput": self.total_input,
            "totalOutput": self.total_output,
            "totalCacheRead": self.total_cache_read,
            "totalCacheWrite": self.total_cache_write,
            "totalCost": self.total_cost,
            "proSubscription": subscription,
            "savings": self.savings,
            "roi": self.roi,
            "modelCosts": dict(self.model_costs),
        }


def compute_cost_report(
    model_usage: Mapping[str, ModelUsageCounters],
    table: PricingTable = PRICING_TABLE,
    subscription: float = SUBSCRIPTION_COST,
) -> CostReport:
    """Compute per-model and total cost, savings and ROI.

    The total is summed from unrounded per-model costs and only rounded
    once at the end, so it can differ by a cent from the sum of the
    rounded per-model figures.
    """
    model_costs = {}
    total_cost = 0.0
    total_input = total_output = total_cache_read = total_cache_write = 0

    for model, usage in model_usage.items():
        cost = calculate_cost(model, usage, table)
        model_costs[model] = round_cents(cost)
        total_cost += cost
        total_input += usage.input_tokens
        total_output += usage.output_tokens
        total_cache_read += usage.cache_read_tokens
        total_cache_write += usage.cache_write_tokens

    savings = max(0.0, total_cost - subscription)

    return CostReport(
        model_costs=model_costs,
        total_cost=round_cents(total_cost),
        subscription=subscription,
        savings=round_cents(savings),
        roi=calculate_roi(total_cost, subscription),
        total_input=total_input,
        total_output=total_output,
        total_cache_read=total_cache_read,
        total_cache_write=total_cache_write,
    )


@dataclass(frozen=True)
class CacheReport:
    """Prompt-cache hit rate and the money it saved."""
    cache_read: int
    cache_write: int
    hit_rate: int
    savings: float
    fresh_tokens: int
    ratio: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "cacheRead": self.cache_read,
            "cacheWrite": self.cache_write,
            "hitRate": self.hit_rate,
            "savings": self.savings,
            "efficiency": {
                "freshTokens": self.fresh_tokens,
                "cachedTokens": self.cache_read,
                "ratio": self.ratio,
            },
        }


def compute_cache_report(
    model_usage: Mapping[str, ModelUsageCounters],
    table: PricingTable = PRICING_TABLE,
) -> CacheReport:
    """Compute cache hit rate, savings and efficiency.

    Savings compare cache reads against what the same tokens would have
    cost as fresh input. Cache write cost is not part of this figure.
    """
    fresh = cache_read = cache_write = 0
    savings = 0.0

    for model, usage in model_usage.items():
        pricing = table.get_pricing(model)
        fresh += usage.input_tokens
        cache_read += usage.cache_read_tokens
        cache_write += usage.cache_write_tokens

        would_have_cost = usage.cache_read_tokens * pricing.input / TOKENS_PER_PRICE_UNIT
        actual_cost = usage.cache_read_tokens * pricing.cache_read / TOKENS_PER_PRICE_UNIT
        savings += would_have_cost - actual_cost

    cache_total = cache_read + cache_write
    hit_rate = js_round(cache_read / cache_total * 100) if cache_total > 0 else 0
    ratio = to_fixed(cache_read / fresh, 1) if fresh > 0 else 0

    return CacheReport(
        cache_read=cache_read,
        cache_write=cache_write,
        hit_rate=hit_rate,
        savings=round_cents(savings),
        fresh_tokens=fresh,
        ratio=ratio,
    )


_MODEL_ID_PATTERN = re.compile(r"^claude-([a-z]+)-(\d+)-(\d+)(?:-\d{8})?$")


def model_display_name(model: str) -> str:
    """Short human name such as ``"Opus 4.5"`` for a model id."""
    match = _MODEL_ID_PATTERN.match(model)
    if match:
        family, major, minor = match.groups()
        return f"{family.capitalize()} {major}.{minor}"
    return "Opus 4.5" if "opus" in model else "Sonnet 4.5"


@dataclass(frozen=True)
class ModelBreakdown:
    """Per-model token and cost summary."""
    name: str
    full_name: str
    output_tokens: int
    percentage: int
    cost: float
    input_tokens: int
    cache_read: int
    cache_write: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "fullName": self.full_name,
            "outputTokens": self.output_tokens,
            "percentage": self.percentage,
            "cost": self.cost,
            "inputTokens": self.input_tokens,
            "cacheRead": self.cache_read,
            "cacheWrite": self.cache_write,
        }


def compute_model_breakdown(
    model_usage: Mapping[str, ModelUsageCounters],
    table: PricingTable = PRICING_TABLE,
) -> List[ModelBreakdown]:
    """Per-model summaries sorted by output tokens, largest first."""
    total_output = sum(usage.output_tokens for usage in model_usage.values())

    models = []
    for model, usage in model_usage.items():
        percentage = (
            js_round(usage.output_tokens / total_output * 100) if total_output > 0 else 0
        )
        models.append(ModelBreakdown(
            name=model_display_name(model),
            full_name=model,
            output_tokens=usage.output_tokens,
            percentage=percentage,
            cost=round_cents(calculate_cost(model, usage, table)),
            input_tokens=usage.input_tokens,
            cache_read=usage.cache_read_tokens,
            cache_write=usage.cache_write_tokens,
        ))

    return sorted(models, key=lambda m: m.output_tokens, reverse=True)
