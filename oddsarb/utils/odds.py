"""
Odds and probability utility functions.

Decimal odds only. All reporting precision lives here so every code
path rounds the same way: probabilities to 4 places, percentages and
stakes to 2 places.
"""

from __future__ import annotations

from typing import Iterable

# Decimal odds at or below this are not a valid betting price
MIN_DECIMAL_PRICE = 1.0

PROBABILITY_DECIMALS = 4
PERCENTAGE_DECIMALS = 2


def is_valid_price(price: float) -> bool:
    """True if the price is a usable decimal betting price."""
    return price > MIN_DECIMAL_PRICE


def odds_to_probability(odds: float) -> float:
    """Convert decimal odds to implied probability."""
    if odds <= 0:
        return 1.0
    return 1.0 / odds


def total_implied_probability(odds: Iterable[float]) -> float:
    """Sum of implied probabilities for one price per outcome.

    Below 1.0 means backing every outcome returns more than it costs.
    """
    return sum(odds_to_probability(o) for o in odds)


def arbitrage_percentage(total_probability: float) -> float:
    """Guaranteed return on total stake, as a percentage.

    (1 - total) / total, written as 1/total - 1 so the figure can be
    recomputed exactly from the reported odds.
    """
    return (1.0 / total_probability - 1.0) * 100.0


def stake_percentages(probabilities: list[float]) -> list[float]:
    """Split 100% of a stake so every outcome pays out the same amount.

    Each outcome's share is its implied probability over the total, so
    odds_i * share_i is identical for all i.
    """
    total = sum(probabilities)
    if total <= 0:
        return [0.0 for _ in probabilities]
    return [p / total * 100.0 for p in probabilities]


def guaranteed_profit(arb_pct: float, total_stake: float) -> float:
    """Profit locked in on total_stake at a given arbitrage percentage."""
    return total_stake * arb_pct / 100.0


def round_probability(value: float) -> float:
    return round(value, PROBABILITY_DECIMALS)


def round_percentage(value: float) -> float:
    return round(value, PERCENTAGE_DECIMALS)
