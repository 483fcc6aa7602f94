"""
Read-only projections over a fixture odds snapshot.

Answers which bookmakers are active, which markets and outcomes they
carry, and what a bookmaker currently quotes for an outcome. Every
collection comes back sorted (numeric ids numerically, then the rest
lexicographically) so downstream iteration never depends on the order
of the source document.
"""

from __future__ import annotations

from typing import Iterable, Optional

from oddsarb.data.fixture import BookmakerEntry, FixtureOdds, PriceQuote


def id_sort_key(value: str) -> tuple[int, int, str]:
    """Order numeric ids by value ahead of non-numeric ids."""
    if value.isascii() and value.isdecimal():
        return (0, int(value), value)
    return (1, 0, value)


class OddsCatalog:
    """Pure lookups over FixtureOdds. Never raises for missing data."""

    @staticmethod
    def active_bookmakers(fixture: FixtureOdds) -> list[str]:
        """Names of bookmakers flagged active, sorted."""
        return sorted(name for name, bm in fixture.bookmakers.items() if bm.is_active)

    @staticmethod
    def _active_entries(
        fixture: FixtureOdds, bookmakers: Iterable[str]
    ) -> list[BookmakerEntry]:
        entries = []
        for name in bookmakers:
            entry = fixture.bookmakers.get(name)
            if entry is not None and entry.is_active:
                entries.append(entry)
        return entries

    def all_markets(self, fixture: FixtureOdds, active_bookmakers: Iterable[str]) -> list[str]:
        """Union of market ids across the given active bookmakers."""
        markets: set[str] = set()
        for entry in self._active_entries(fixture, active_bookmakers):
            markets.update(entry.markets)
        return sorted(markets, key=id_sort_key)

    def outcomes_of(
        self,
        market_id: str,
        fixture: FixtureOdds,
        active_bookmakers: Iterable[str],
    ) -> list[str]:
        """Union of outcome ids for a market across the given active bookmakers."""
        outcomes: set[str] = set()
        for entry in self._active_entries(fixture, active_bookmakers):
            market = entry.markets.get(market_id)
            if market is not None:
                outcomes.update(market.outcomes)
        return sorted(outcomes, key=id_sort_key)

    @staticmethod
    def quote(
        fixture: FixtureOdds,
        bookmaker: str,
        market_id: str,
        outcome_id: str,
    ) -> Optional[PriceQuote]:
        """A bookmaker's primary-slot quote for an outcome, if it has one."""
        entry = fixture.bookmakers.get(bookmaker)
        if entry is None:
            return None
        market = entry.markets.get(market_id)
        if market is None:
            return None
        outcome = market.outcomes.get(outcome_id)
        if outcome is None:
            return None
        return outcome.primary_quote
