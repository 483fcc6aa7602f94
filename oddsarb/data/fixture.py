"""
Fixture odds snapshot data model.

Defines the snapshot a data source hands to the analysis core and the
parser that turns the odds API's JSON document into it. The nesting
mirrors the wire format:

    fixture -> bookmakerOdds[bookmaker] -> markets[market]
            -> outcomes[outcome] -> players[slot] -> quote

Parsing is the only place the snapshot is validated. Anything that
reaches the analyzer is structurally sound.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from oddsarb.config import PRIMARY_SLOT
from oddsarb.errors import FixtureValidationError
from oddsarb.utils.odds import is_valid_price


@dataclass(frozen=True)
class PriceQuote:
    """One bookmaker's price for an outcome selector."""

    active: bool
    price: float  # Decimal odds
    changed_at: str = ""
    label: Optional[str] = None  # playerName on the wire
    bookmaker_outcome_id: Optional[str] = None
    limit: Optional[float] = None

    @property
    def is_usable(self) -> bool:
        """Active and a valid decimal price."""
        return self.active and is_valid_price(self.price)


@dataclass(frozen=True)
class OutcomeEntry:
    outcome_id: str
    players: dict[str, PriceQuote] = field(default_factory=dict)

    @property
    def primary_quote(self) -> Optional[PriceQuote]:
        return self.players.get(PRIMARY_SLOT)


@dataclass(frozen=True)
class MarketEntry:
    market_id: str
    outcomes: dict[str, OutcomeEntry] = field(default_factory=dict)
    bookmaker_market_id: Optional[str] = None


@dataclass(frozen=True)
class BookmakerEntry:
    """A bookmaker's markets for one fixture.

    Inactive entries are kept for traceability but never analyzed.
    """

    name: str
    is_active: bool
    markets: dict[str, MarketEntry] = field(default_factory=dict)
    bookmaker_fixture_id: Optional[str] = None
    fixture_path: Optional[str] = None


@dataclass(frozen=True)
class FixtureOdds:
    """A fixture's odds from every bookmaker, as of one snapshot."""

    fixture_id: str
    participant1: str = ""
    participant2: str = ""
    sport: str = ""
    tournament: str = ""
    bookmakers: dict[str, BookmakerEntry] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return f"{self.participant1} vs {self.participant2}"


# ─── Parsing ────────────────────────────────────────────────────────────────

def _require_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise FixtureValidationError(path, f"expected an object, got {type(value).__name__}")
    return value


def _require_key(data: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in data or data[key] is None:
        raise FixtureValidationError(f"{path}.{key}" if path else key, "missing required field")
    return data[key]


def _require_bool(data: Mapping[str, Any], key: str, path: str) -> bool:
    value = _require_key(data, key, path)
    if not isinstance(value, bool):
        raise FixtureValidationError(f"{path}.{key}", f"expected a boolean, got {value!r}")
    return value


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _parse_quote(data: Any, path: str) -> PriceQuote:
    data = _require_mapping(data, path)
    active = _require_bool(data, "active", path)
    price = _require_key(data, "price", path)
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise FixtureValidationError(f"{path}.price", f"expected a number, got {price!r}")
    try:
        price = float(price)
    except OverflowError:
        price = math.inf
    if not math.isfinite(price):
        raise FixtureValidationError(f"{path}.price", f"expected a finite number, got {price!r}")
    limit = data.get("limit")
    if isinstance(limit, bool) or not isinstance(limit, (int, float)) or not -1e300 < limit < 1e300:
        limit = None
    return PriceQuote(
        active=active,
        price=price,
        changed_at=str(data.get("changedAt") or ""),
        label=_optional_str(data.get("playerName")),
        bookmaker_outcome_id=_optional_str(data.get("bookmakerOutcomeId")),
        limit=None if limit is None else float(limit),
    )


def _parse_outcome(outcome_id: str, data: Any, path: str) -> OutcomeEntry:
    data = _require_mapping(data, path)
    players_path = f"{path}.players"
    players = _require_mapping(_require_key(data, "players", path), players_path)
    return OutcomeEntry(
        outcome_id=outcome_id,
        players={
            str(slot): _parse_quote(quote, f"{players_path}.{slot}")
            for slot, quote in players.items()
        },
    )


def _parse_market(market_id: str, data: Any, path: str) -> MarketEntry:
    data = _require_mapping(data, path)
    outcomes_path = f"{path}.outcomes"
    outcomes = _require_mapping(_require_key(data, "outcomes", path), outcomes_path)
    return MarketEntry(
        market_id=market_id,
        outcomes={
            str(oid): _parse_outcome(str(oid), outcome, f"{outcomes_path}.{oid}")
            for oid, outcome in outcomes.items()
        },
        bookmaker_market_id=_optional_str(data.get("bookmakerMarketId")),
    )


def _parse_bookmaker(name: str, data: Any, path: str) -> BookmakerEntry:
    data = _require_mapping(data, path)
    is_active = _require_bool(data, "bookmakerIsActive", path)
    markets_path = f"{path}.markets"
    markets = _require_mapping(_require_key(data, "markets", path), markets_path)
    return BookmakerEntry(
        name=name,
        is_active=is_active,
        markets={
            str(mid): _parse_market(str(mid), market, f"{markets_path}.{mid}")
            for mid, market in markets.items()
        },
        bookmaker_fixture_id=_optional_str(data.get("bookmakerFixtureId")),
        fixture_path=_optional_str(data.get("fixturePath")),
    )


def parse_fixture(data: Any) -> FixtureOdds:
    """Build a FixtureOdds snapshot from the odds API JSON document.

    Args:
        data: Decoded JSON (the same shape the API and the local
              fallback file use)

    Returns:
        The validated snapshot

    Raises:
        FixtureValidationError: a required field is missing or has the
            wrong type. The error names the offending path.
    """
    data = _require_mapping(data, "$")
    fixture_id = _require_key(data, "fixtureId", "")
    bookmaker_odds = _require_mapping(
        _require_key(data, "bookmakerOdds", ""), "bookmakerOdds"
    )
    return FixtureOdds(
        fixture_id=str(fixture_id),
        participant1=str(data.get("participant1Name") or ""),
        participant2=str(data.get("participant2Name") or ""),
        sport=str(data.get("sportName") or ""),
        tournament=str(data.get("tournamentName") or ""),
        bookmakers={
            str(name): _parse_bookmaker(str(name), entry, f"bookmakerOdds.{name}")
            for name, entry in bookmaker_odds.items()
        },
    )
