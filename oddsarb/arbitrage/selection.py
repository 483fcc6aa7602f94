"""
Price selection and combination search.

Two ways of choosing one price per outcome for a market:

1. BEST PRICE: The single highest usable price per outcome across all
   active bookmakers. One assignment per market.

2. TOP-K: The K highest usable prices per outcome (K <= 3), then every
   cross-product assignment of those candidates. This finds
   opportunities the single-best view misses when the best prices are
   not all needed to get under 100% implied probability, and lets the
   caller rank several alternative bookmaker splits.

The cross product grows as K^outcomes, so generation is refused
outright above a fixed cap rather than truncated.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import product
from typing import Iterable, Mapping, Optional, Sequence

from oddsarb.arbitrage.catalog import OddsCatalog
from oddsarb.config import DEFAULT_COMBINATION_CAP, MAX_TOP_K, MIN_TOP_K, clamp
from oddsarb.data.fixture import FixtureOdds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceCandidate:
    """A usable price for an outcome and the bookmaker offering it."""

    bookmaker: str
    price: float


@dataclass(frozen=True)
class OutcomePrice:
    """One outcome's chosen price within an assignment."""

    outcome_id: str
    bookmaker: str
    price: float


# One OutcomePrice per outcome of the market, in outcome order
Assignment = tuple[OutcomePrice, ...]


def _usable_candidates(
    catalog: OddsCatalog,
    fixture: FixtureOdds,
    market_id: str,
    outcome_id: str,
    bookmakers: Iterable[str],
) -> list[PriceCandidate]:
    """Usable quotes for an outcome, in bookmaker-name order."""
    candidates = []
    for bookmaker in sorted(bookmakers):
        quote = catalog.quote(fixture, bookmaker, market_id, outcome_id)
        if quote is not None and quote.is_usable:
            candidates.append(PriceCandidate(bookmaker=bookmaker, price=quote.price))
    return candidates


class BestPriceSelector:
    """Picks the single best price per outcome.

    Ties go to the lexicographically smallest bookmaker name: bookmakers
    are scanned in name order and only a strictly greater price
    replaces the current best.
    """

    def __init__(self, catalog: Optional[OddsCatalog] = None):
        self._catalog = catalog or OddsCatalog()

    def select(
        self,
        market_id: str,
        outcome_ids: Sequence[str],
        fixture: FixtureOdds,
        active_bookmakers: Iterable[str],
    ) -> dict[str, PriceCandidate]:
        """Best price per outcome. Outcomes nobody prices are left out."""
        bookmakers = list(active_bookmakers)
        best: dict[str, PriceCandidate] = {}

        for outcome_id in outcome_ids:
            top: Optional[PriceCandidate] = None
            for candidate in _usable_candidates(
                self._catalog, fixture, market_id, outcome_id, bookmakers
            ):
                if top is None or candidate.price > top.price:
                    top = candidate
            if top is not None:
                best[outcome_id] = top

        return best


class TopKPriceRanker:
    """Keeps the K best prices per outcome, highest first."""

    def __init__(self, catalog: Optional[OddsCatalog] = None):
        self._catalog = catalog or OddsCatalog()

    def rank(
        self,
        market_id: str,
        fixture: FixtureOdds,
        active_bookmakers: Iterable[str],
        k: int = MAX_TOP_K,
    ) -> dict[str, list[PriceCandidate]]:
        """Candidate list per outcome of the market.

        Args:
            market_id: Market to rank
            fixture: Odds snapshot
            active_bookmakers: Bookmakers to draw prices from
            k: Prices to keep per outcome, clamped to [1, 3]

        Returns:
            {outcome_id: candidates sorted by price descending}. An
            outcome with no usable price maps to an empty list.
        """
        k = clamp(k, MIN_TOP_K, MAX_TOP_K)
        bookmakers = list(active_bookmakers)
        ranked: dict[str, list[PriceCandidate]] = {}

        for outcome_id in self._catalog.outcomes_of(market_id, fixture, bookmakers):
            candidates = _usable_candidates(
                self._catalog, fixture, market_id, outcome_id, bookmakers
            )
            # Stable sort keeps bookmaker-name order among equal prices
            candidates.sort(key=lambda c: c.price, reverse=True)
            ranked[outcome_id] = candidates[:k]

        return ranked


def count_combinations(candidate_lists: Mapping[str, Sequence[PriceCandidate]]) -> int:
    """Number of full assignments the candidate lists would produce."""
    return math.prod(len(c) for c in candidate_lists.values())


def generate_combinations(
    candidate_lists: Mapping[str, Sequence[PriceCandidate]],
    combination_cap: int = DEFAULT_COMBINATION_CAP,
) -> list[Assignment]:
    """Every assignment of one candidate per outcome.

    Enumeration is lexicographic over candidate-list order, so the
    first assignment takes every outcome's best price.

    Args:
        candidate_lists: {outcome_id: ranked candidates}, in outcome order
        combination_cap: Refuse to enumerate more assignments than this

    Returns:
        All assignments, or an empty list if any outcome has no
        candidates or the count exceeds the cap.
    """
    if not candidate_lists:
        return []

    total = count_combinations(candidate_lists)
    if total > combination_cap:
        logger.warning(
            "Generating %d combinations exceeds the limit of %d. Aborting.",
            total, combination_cap,
        )
        return []

    outcome_ids = list(candidate_lists)
    return [
        tuple(
            OutcomePrice(outcome_id=oid, bookmaker=c.bookmaker, price=c.price)
            for oid, c in zip(outcome_ids, combo)
        )
        for combo in product(*(candidate_lists[oid] for oid in outcome_ids))
    ]
