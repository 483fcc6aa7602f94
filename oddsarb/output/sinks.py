"""
Result sinks: console summary and JSON export.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

from oddsarb.arbitrage.analyzer import AnalysisResult
from oddsarb.config import AnalysisMode
from oddsarb.errors import ResultExportError
from oddsarb.utils.odds import guaranteed_profit

logger = logging.getLogger(__name__)


class ResultSink(ABC):
    """Consumes a finished analysis result."""

    @abstractmethod
    def emit(self, result: AnalysisResult) -> None:
        """Render or persist the result."""


class ConsoleSink(ResultSink):
    """Human-readable summary, one block per opportunity."""

    def __init__(self, write: Optional[Callable[[str], None]] = None):
        self._write = write or print

    def render(self, result: AnalysisResult) -> str:
        fx = result.fixture
        stake = result.total_stake
        lines = [
            "=" * 80,
            "ARBITRAGE ANALYSIS SUMMARY",
            "=" * 80,
            f"Fixture: {fx.participant1} vs {fx.participant2}",
            f"Tournament: {fx.tournament} ({fx.sport})",
            f"Mode: {result.mode.value}",
            f"Markets analyzed: {result.markets_analyzed}",
            f"Active bookmakers: {result.active_bookmaker_count}",
            f"Opportunities found: {result.opportunity_count}",
            "",
        ]

        if not result.opportunities:
            lines.append("No arbitrage opportunities found.")
            return "\n".join(lines)

        for idx, opp in enumerate(result.opportunities, start=1):
            odds_by_outcome = {leg.outcome_id: leg.odds for leg in opp.outcomes}
            lines.append(f"{idx}. Market {opp.market_id}")
            lines.append(f"   Profit: {opp.arbitrage_percentage:.2f}%")
            lines.append(
                f"   Total Implied Probability: {opp.total_implied_probability * 100:.2f}%"
            )
            lines.append(f"   Optimal Bet Distribution (for {stake:.2f} total):")
            for s in opp.stakes:
                lines.append(
                    f"     - Outcome {s.outcome_id}: {s.required_stake:.2f} at "
                    f"{s.bookmaker} (odds: {odds_by_outcome[s.outcome_id]})"
                )
            profit = guaranteed_profit(opp.arbitrage_percentage, stake)
            lines.append(f"   Guaranteed Profit: {profit:.2f} on {stake:.2f} stake")
            lines.append("")

        return "\n".join(lines)

    def emit(self, result: AnalysisResult) -> None:
        self._write("\n" + self.render(result))


class JsonFileSink(ResultSink):
    """Writes the result's export dict to a JSON file."""

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def emit(self, result: AnalysisResult) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8") as f:
                json.dump(result.to_dict(), f, indent=2)
        except OSError as e:
            raise ResultExportError(f"Failed to export results to {self._path}: {e}") from e
        logger.info("Results exported to %s", self._path)


def default_export_name(result: AnalysisResult) -> str:
    """File name the CLI uses when no output path is given."""
    if result.mode is AnalysisMode.TOP_K:
        return "arbitrage-results-topk.json"
    return "arbitrage-results.json"
