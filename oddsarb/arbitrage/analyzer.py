"""
Fixture-level arbitrage analysis.

Runs one search strategy over every market of a fixture and aggregates
the results. Markets are independent: a market that is missing prices,
has fewer than two outcomes, or blows the combination cap contributes
nothing and the rest of the fixture is still analyzed.

Strategies:
- BestOddsStrategy: one assignment per market from the best prices.
- TopKStrategy: every combination of the top-K prices per outcome,
  best few kept per market.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from oddsarb.arbitrage.catalog import OddsCatalog
from oddsarb.arbitrage.evaluator import ArbitrageEvaluator, ArbitrageOpportunity
from oddsarb.arbitrage.selection import (
    BestPriceSelector,
    OutcomePrice,
    TopKPriceRanker,
    count_combinations,
    generate_combinations,
)
from oddsarb.config import (
    DEFAULT_COMBINATION_CAP,
    DEFAULT_TOTAL_STAKE,
    MAX_RESULTS,
    MAX_TOP_K,
    MIN_RESULTS,
    MIN_TOP_K,
    AnalysisConfig,
    AnalysisMode,
    clamp,
)
from oddsarb.data.fixture import FixtureOdds

logger = logging.getLogger(__name__)

# A market with a single outcome cannot be arbitraged
MIN_OUTCOMES = 2


@dataclass(frozen=True)
class FixtureSummary:
    fixture_id: str
    participant1: str
    participant2: str
    tournament: str
    sport: str

    @classmethod
    def of(cls, fixture: FixtureOdds) -> "FixtureSummary":
        return cls(
            fixture_id=fixture.fixture_id,
            participant1=fixture.participant1,
            participant2=fixture.participant2,
            tournament=fixture.tournament,
            sport=fixture.sport,
        )


@dataclass(frozen=True)
class AnalysisResult:
    """Everything found for one fixture in one analysis pass."""

    fixture: FixtureSummary
    markets_analyzed: int
    active_bookmaker_count: int
    opportunities: tuple[ArbitrageOpportunity, ...] = ()
    mode: AnalysisMode = AnalysisMode.BEST_ODDS
    total_stake: float = DEFAULT_TOTAL_STAKE
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def opportunity_count(self) -> int:
        return len(self.opportunities)

    @property
    def best(self) -> Optional[ArbitrageOpportunity]:
        """Highest-profit opportunity, if any."""
        if not self.opportunities:
            return None
        return max(self.opportunities, key=lambda o: o.arbitrage_percentage)

    def to_dict(self) -> dict[str, Any]:
        """Export shape used by the JSON result file."""
        return {
            "fixture": {
                "fixtureId": self.fixture.fixture_id,
                "participant1": self.fixture.participant1,
                "participant2": self.fixture.participant2,
                "tournament": self.fixture.tournament,
                "sport": self.fixture.sport,
            },
            "analysis": {
                "mode": self.mode.value,
                "analyzedMarkets": self.markets_analyzed,
                "totalActiveBookmakers": self.active_bookmaker_count,
                "totalOpportunities": self.opportunity_count,
                "opportunities": [o.to_dict() for o in self.opportunities],
            },
            "timestamp": self.generated_at.isoformat(),
        }


# ─── Strategies ─────────────────────────────────────────────────────────────

class MarketStrategy(ABC):
    """How a single market is searched for opportunities."""

    mode: AnalysisMode

    def __init__(
        self,
        catalog: Optional[OddsCatalog] = None,
        evaluator: Optional[ArbitrageEvaluator] = None,
    ):
        self._catalog = catalog or OddsCatalog()
        self._evaluator = evaluator or ArbitrageEvaluator()

    @property
    def evaluator(self) -> ArbitrageEvaluator:
        return self._evaluator

    @abstractmethod
    def analyze_market(
        self,
        market_id: str,
        outcome_ids: Sequence[str],
        fixture: FixtureOdds,
        active_bookmakers: Sequence[str],
    ) -> list[ArbitrageOpportunity]:
        """Opportunities for one market with at least two outcomes."""


class BestOddsStrategy(MarketStrategy):
    """Single best price per outcome; at most one opportunity per market."""

    mode = AnalysisMode.BEST_ODDS

    def __init__(
        self,
        catalog: Optional[OddsCatalog] = None,
        evaluator: Optional[ArbitrageEvaluator] = None,
    ):
        super().__init__(catalog, evaluator)
        self._selector = BestPriceSelector(self._catalog)

    def analyze_market(
        self,
        market_id: str,
        outcome_ids: Sequence[str],
        fixture: FixtureOdds,
        active_bookmakers: Sequence[str],
    ) -> list[ArbitrageOpportunity]:
        best = self._selector.select(market_id, outcome_ids, fixture, active_bookmakers)

        if len(best) != len(outcome_ids):
            missing = [oid for oid in outcome_ids if oid not in best]
            logger.debug(
                "Not all outcomes have odds available for market %s (missing %s)",
                market_id, ", ".join(missing),
            )
            return []

        for outcome_id, candidate in best.items():
            logger.debug(
                "Best odds for outcome %s: %s at %s",
                outcome_id, candidate.price, candidate.bookmaker,
            )

        assignment = tuple(
            OutcomePrice(outcome_id=oid, bookmaker=best[oid].bookmaker, price=best[oid].price)
            for oid in outcome_ids
        )
        opportunity = self._evaluator.evaluate(market_id, assignment)
        return [opportunity] if opportunity else []


class TopKStrategy(MarketStrategy):
    """Every combination of the top-K prices per outcome."""

    mode = AnalysisMode.TOP_K

    def __init__(
        self,
        k: int = MAX_TOP_K,
        max_results: int = MAX_RESULTS,
        combination_cap: int = DEFAULT_COMBINATION_CAP,
        catalog: Optional[OddsCatalog] = None,
        evaluator: Optional[ArbitrageEvaluator] = None,
    ):
        super().__init__(catalog, evaluator)
        self.k = clamp(k, MIN_TOP_K, MAX_TOP_K)
        self.max_results = clamp(max_results, MIN_RESULTS, MAX_RESULTS)
        self.combination_cap = combination_cap
        self._ranker = TopKPriceRanker(self._catalog)

    def analyze_market(
        self,
        market_id: str,
        outcome_ids: Sequence[str],
        fixture: FixtureOdds,
        active_bookmakers: Sequence[str],
    ) -> list[ArbitrageOpportunity]:
        candidates = self._ranker.rank(market_id, fixture, active_bookmakers, self.k)
        logger.debug(
            "Analyzing market %s with Top-%d odds per outcome (%d combinations)",
            market_id, self.k, count_combinations(candidates),
        )

        combos = generate_combinations(candidates, self.combination_cap)
        opportunities = []
        for assignment in combos:
            opportunity = self._evaluator.evaluate(market_id, assignment)
            if opportunity:
                opportunities.append(opportunity)

        opportunities.sort(key=lambda o: o.arbitrage_percentage, reverse=True)
        return opportunities[: self.max_results]


# ─── Analyzer ───────────────────────────────────────────────────────────────

class MarketAnalyzer:
    """Analyzes every market of a fixture with one strategy.

    This is the main entry point of the core. It is a pure function of
    the snapshot and its parameters and raises nothing for empty or
    unprofitable input.
    """

    def __init__(
        self,
        strategy: Optional[MarketStrategy] = None,
        catalog: Optional[OddsCatalog] = None,
    ):
        self._catalog = catalog or OddsCatalog()
        self.strategy = strategy or BestOddsStrategy(self._catalog)

    @classmethod
    def for_parameters(
        cls,
        top_k: Optional[int] = None,
        max_results: int = MAX_RESULTS,
        combination_cap: int = DEFAULT_COMBINATION_CAP,
        total_stake: float = DEFAULT_TOTAL_STAKE,
    ) -> "MarketAnalyzer":
        """Top-K search when top_k > 1, single best odds otherwise."""
        catalog = OddsCatalog()
        evaluator = ArbitrageEvaluator(total_stake=total_stake)
        strategy: MarketStrategy
        if top_k is not None and top_k > 1:
            strategy = TopKStrategy(
                k=top_k,
                max_results=max_results,
                combination_cap=combination_cap,
                catalog=catalog,
                evaluator=evaluator,
            )
        else:
            strategy = BestOddsStrategy(catalog=catalog, evaluator=evaluator)
        return cls(strategy=strategy, catalog=catalog)

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "MarketAnalyzer":
        return cls.for_parameters(
            top_k=config.top_k,
            max_results=config.max_results,
            combination_cap=config.combination_cap,
            total_stake=config.total_stake,
        )

    @property
    def mode(self) -> AnalysisMode:
        return self.strategy.mode

    def analyze(self, fixture: FixtureOdds) -> AnalysisResult:
        """Find every arbitrage opportunity in a fixture."""
        active = self._catalog.active_bookmakers(fixture)
        markets = self._catalog.all_markets(fixture, active)

        logger.debug("Active bookmakers: %s", ", ".join(active) or "none")
        logger.debug("Available markets: %s", ", ".join(markets) or "none")

        opportunities: list[ArbitrageOpportunity] = []
        for market_id in markets:
            outcome_ids = self._catalog.outcomes_of(market_id, fixture, active)
            if len(outcome_ids) < MIN_OUTCOMES:
                logger.debug(
                    "Market %s has less than %d outcomes, skipping", market_id, MIN_OUTCOMES
                )
                continue

            found = self.strategy.analyze_market(market_id, outcome_ids, fixture, active)
            for opp in found:
                logger.debug(
                    "ARBITRAGE OPPORTUNITY in market %s: profit %.2f%% (%s)",
                    market_id, opp.arbitrage_percentage, ", ".join(opp.bookmakers),
                )
            opportunities.extend(found)

        logger.info(
            "Fixture %s: %d markets, %d active bookmakers, %d opportunities (%s)",
            fixture.fixture_id, len(markets), len(active),
            len(opportunities), self.mode.value,
        )

        return AnalysisResult(
            fixture=FixtureSummary.of(fixture),
            markets_analyzed=len(markets),
            active_bookmaker_count=len(active),
            opportunities=tuple(opportunities),
            mode=self.mode,
            total_stake=self.strategy.evaluator.total_stake,
        )
