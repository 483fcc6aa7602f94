"""
Arbitrage evaluation for a single price assignment.

Backing every outcome of a market at prices o_1..o_n costs nothing
extra beyond the stake and pays o_i * s_i on whichever outcome wins.
Staking s_i proportional to 1/o_i makes that payout identical for all
outcomes, and the payout exceeds the total stake exactly when

    sum(1 / o_i) < 1.0

The profit on total stake is then (1 - sum) / sum.

All arithmetic runs at full precision. Rounding happens once, when the
opportunity is built, so the reported figures are consistent with each
other and the < 1.0 test is never affected by rounding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from oddsarb.arbitrage.selection import Assignment
from oddsarb.config import DEFAULT_TOTAL_STAKE
from oddsarb.utils.odds import (
    arbitrage_percentage,
    odds_to_probability,
    round_percentage,
    round_probability,
    stake_percentages,
    total_implied_probability,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutcomeLeg:
    """The price taken for one outcome."""

    outcome_id: str
    bookmaker: str
    odds: float
    implied_probability: float


@dataclass(frozen=True)
class StakeAllocation:
    """Share of the total stake to place on one outcome."""

    outcome_id: str
    bookmaker: str
    stake_percent: float
    required_stake: float  # In units of the configured total stake


@dataclass(frozen=True)
class ArbitrageOpportunity:
    """A guaranteed-profit assignment for one market."""

    market_id: str
    outcomes: tuple[OutcomeLeg, ...]
    total_implied_probability: float
    arbitrage_percentage: float
    stakes: tuple[StakeAllocation, ...]

    @property
    def bookmakers(self) -> list[str]:
        return sorted({leg.bookmaker for leg in self.outcomes})

    def to_dict(self) -> dict[str, Any]:
        """Export shape used by the JSON result file."""
        return {
            "market": self.market_id,
            "outcomes": [
                {
                    "outcomeId": leg.outcome_id,
                    "bookmaker": leg.bookmaker,
                    "odds": leg.odds,
                    "impliedProbability": leg.implied_probability,
                }
                for leg in self.outcomes
            ],
            "totalImpliedProbability": self.total_implied_probability,
            "arbitragePercentage": self.arbitrage_percentage,
            "betDistribution": [
                {
                    "outcomeId": s.outcome_id,
                    "bookmaker": s.bookmaker,
                    "betPercentage": s.stake_percent,
                    "requiredStake": s.required_stake,
                }
                for s in self.stakes
            ],
        }


class ArbitrageEvaluator:
    """Turns an assignment into an opportunity, or rejects it."""

    def __init__(self, total_stake: float = DEFAULT_TOTAL_STAKE):
        self._total_stake = total_stake

    @property
    def total_stake(self) -> float:
        return self._total_stake

    def evaluate(self, market_id: str, assignment: Assignment) -> Optional[ArbitrageOpportunity]:
        """Check an assignment for arbitrage.

        Args:
            market_id: Market the assignment belongs to
            assignment: One chosen price per outcome

        Returns:
            The opportunity, or None if the implied probabilities sum
            to 1.0 or more (or the assignment is empty).
        """
        if not assignment:
            return None

        probabilities = [odds_to_probability(p.price) for p in assignment]
        total = total_implied_probability(p.price for p in assignment)

        if total >= 1.0:
            logger.debug(
                "No arbitrage in market %s: total implied probability %.2f%%",
                market_id, total * 100,
            )
            return None

        shares = stake_percentages(probabilities)
        stake_scale = self._total_stake / 100.0

        return ArbitrageOpportunity(
            market_id=market_id,
            outcomes=tuple(
                OutcomeLeg(
                    outcome_id=p.outcome_id,
                    bookmaker=p.bookmaker,
                    odds=p.price,
                    implied_probability=round_probability(prob),
                )
                for p, prob in zip(assignment, probabilities)
            ),
            total_implied_probability=round_probability(total),
            arbitrage_percentage=round_percentage(arbitrage_percentage(total)),
            stakes=tuple(
                StakeAllocation(
                    outcome_id=p.outcome_id,
                    bookmaker=p.bookmaker,
                    stake_percent=round_percentage(share),
                    required_stake=round_percentage(share * stake_scale),
                )
                for p, share in zip(assignment, shares)
            ),
        )
