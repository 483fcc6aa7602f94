"""Shared test fixtures for odds arbitrage scanner tests."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Union

import pytest

from oddsarb.data.fixture import FixtureOdds, parse_fixture

# price, or (price, active)
QuoteSpec = Union[float, tuple[float, bool]]
# {bookmaker: {market_id: {outcome_id: QuoteSpec}}}
BookSpec = dict[str, dict[str, dict[str, QuoteSpec]]]


def _quote(spec: QuoteSpec, outcome_id: str) -> dict[str, Any]:
    price, active = spec if isinstance(spec, tuple) else (spec, True)
    return {
        "active": active,
        "price": price,
        "bookmakerOutcomeId": f"outcome_{outcome_id}",
        "changedAt": "2025-10-07T10:00:00Z",
        "playerName": None,
    }


def build_payload(
    books: BookSpec,
    inactive: Iterable[str] = (),
    fixture_id: str = "test_fixture_123",
) -> dict[str, Any]:
    """Odds API document for the given bookmaker prices."""
    inactive = set(inactive)
    return {
        "fixtureId": fixture_id,
        "participant1Name": "Team A",
        "participant2Name": "Team B",
        "sportName": "Soccer",
        "tournamentName": "Test League",
        "bookmakerOdds": {
            name: {
                "bookmakerIsActive": name not in inactive,
                "bookmakerFixtureId": f"{name}_fx",
                "fixturePath": f"{name}/test-path",
                "markets": {
                    market_id: {
                        "bookmakerMarketId": market_id,
                        "outcomes": {
                            outcome_id: {"players": {"0": _quote(spec, outcome_id)}}
                            for outcome_id, spec in outcomes.items()
                        },
                    }
                    for market_id, outcomes in markets.items()
                },
            }
            for name, markets in books.items()
        },
    }


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    return build_payload


@pytest.fixture
def make_fixture() -> Callable[..., FixtureOdds]:
    def _make(books: BookSpec, inactive: Iterable[str] = (), **kwargs: Any) -> FixtureOdds:
        return parse_fixture(build_payload(books, inactive=inactive, **kwargs))

    return _make


@pytest.fixture
def two_bookmaker_payload() -> dict[str, Any]:
    """Two active bookmakers on a two-way market plus an inactive one."""
    payload = build_payload(
        {
            "bookmaker1": {"101": {"101": 2.5, "102": 2.5}},
            "bookmaker2": {"101": {"101": 2.1, "102": 2.1}},
            "inactive_bookmaker": {"101": {"101": 9.0, "102": 9.0}, "202": {"201": 3.0, "202": 3.0}},
        },
        inactive=["inactive_bookmaker"],
    )
    return payload


@pytest.fixture
def two_bookmaker_fixture(two_bookmaker_payload) -> FixtureOdds:
    return parse_fixture(two_bookmaker_payload)
