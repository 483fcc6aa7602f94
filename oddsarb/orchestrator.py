"""
Odds Arbitrage Scanner Orchestrator.

Main entry point that coordinates the full pipeline:
Odds Source → Snapshot Validation → Market Analyzer → Result Sinks

Supports two search modes:
1. Best odds: single highest price per outcome (default)
2. Top-K: every combination of the K best prices per outcome (--top-k 2|3)

Usage:
    python -m oddsarb.orchestrator
    python -m oddsarb.orchestrator --fixture-id id1000232463448499 --top-k 3
    python -m oddsarb.orchestrator --input data/market-data.json --no-export
    python -m oddsarb.orchestrator --batch-dir data/samples/
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from oddsarb.arbitrage.analyzer import AnalysisResult, MarketAnalyzer, TopKStrategy
from oddsarb.config import ScannerConfig
from oddsarb.data.sources import ApiOddsSource, FallbackOddsSource, FileOddsSource, OddsSource
from oddsarb.errors import OddsArbError
from oddsarb.output.sinks import ConsoleSink, JsonFileSink, ResultSink, default_export_name

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("oddsarb.orchestrator")


def build_source(config: ScannerConfig, input_path: Optional[Path] = None) -> OddsSource:
    """API first, local snapshot as fallback."""
    local = FileOddsSource(input_path or config.fallback_path)
    return FallbackOddsSource(primary=ApiOddsSource(config.api), secondary=local)


def calculate_arbitrage(
    source: OddsSource,
    analyzer: MarketAnalyzer,
    fixture_id: Optional[str] = None,
) -> AnalysisResult:
    """Fetch one fixture snapshot and analyze it."""
    fixture = source.fetch(fixture_id)

    logger.info(
        "Data source: %s",
        f"API (fixture: {fixture_id})" if fixture_id else "local snapshot",
    )
    logger.info("Analyzing fixture: %s", fixture.title)
    logger.info("Tournament: %s (%s)", fixture.tournament, fixture.sport)

    return analyzer.analyze(fixture)


def publish(result: AnalysisResult, sinks: list[ResultSink]) -> None:
    for sink in sinks:
        sink.emit(result)


def run_single(
    config: ScannerConfig,
    fixture_id: Optional[str],
    input_path: Optional[Path],
    output_path: Optional[Path],
    export: bool,
) -> None:
    """Analyze one fixture and publish the result."""
    analyzer = MarketAnalyzer.from_config(config.analysis)
    source = build_source(config, input_path)

    logger.info("=" * 60)
    logger.info("ODDS ARBITRAGE SCANNER - %s MODE", analyzer.mode.value.upper())
    logger.info("=" * 60)

    result = calculate_arbitrage(source, analyzer, fixture_id)

    sinks: list[ResultSink] = [ConsoleSink()]
    if export:
        sinks.append(JsonFileSink(output_path or config.output_dir / default_export_name(result)))
    publish(result, sinks)

    label = (
        f"Top-{analyzer.strategy.k}"
        if isinstance(analyzer.strategy, TopKStrategy)
        else "Best odds"
    )
    print(
        f"\n{label} market analysis completed. "
        f"Markets analyzed: {result.markets_analyzed}, "
        f"Active bookmakers: {result.active_bookmaker_count}, "
        f"Opportunities found: {result.opportunity_count}"
    )


def run_batch(config: ScannerConfig, batch_dir: Path) -> list[tuple[str, AnalysisResult]]:
    """Analyze every JSON snapshot in a directory.

    A file that fails to load or validate is logged and skipped.
    """
    analyzer = MarketAnalyzer.from_config(config.analysis)
    files = sorted(batch_dir.glob("*.json"))
    if not files:
        logger.warning("No JSON snapshots found in %s", batch_dir)

    results = []
    for path in files:
        try:
            result = calculate_arbitrage(FileOddsSource(path), analyzer)
        except OddsArbError as e:
            logger.error("Error analyzing %s: %s", path.name, e)
            continue
        results.append((path.name, result))

        best = result.best
        if best:
            logger.info(
                "%s: %d opportunities, best profit %.2f%% (market %s)",
                path.name, result.opportunity_count, best.arbitrage_percentage, best.market_id,
            )
        else:
            logger.info("%s: no arbitrage opportunities detected", path.name)

    print(f"\nBatch complete: {len(results)}/{len(files)} snapshots analyzed")
    for name, result in results:
        print(
            f"  {name}: {result.fixture.participant1} vs {result.fixture.participant2} | "
            f"markets {result.markets_analyzed} | bookmakers {result.active_bookmaker_count} | "
            f"opportunities {result.opportunity_count}"
        )
    return results


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Bookmaker Odds Arbitrage Scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m oddsarb.orchestrator
  python -m oddsarb.orchestrator --fixture-id id1000232463448499 --top-k 3
  python -m oddsarb.orchestrator --batch-dir data/samples/
        """,
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--fixture-id", type=str, help="Fetch this fixture from the odds API")
    source.add_argument("--batch-dir", type=Path, help="Analyze every JSON snapshot in a directory")

    parser.add_argument("--input", type=Path, help="Local snapshot file (default: fallback file)")
    parser.add_argument("--top-k", type=int, help="Search combinations of the K best prices (2-3)")
    parser.add_argument("--max-results", type=int, help="Opportunities kept per market in top-K mode (1-5)")
    parser.add_argument("--combination-cap", type=int, help="Maximum combinations per market")
    parser.add_argument("--stake", type=float, help="Total stake used for the bet distribution")
    parser.add_argument("--output", type=Path, help="JSON export path")
    parser.add_argument("--no-export", action="store_true", help="Skip the JSON export")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    overrides = {
        "top_k": args.top_k,
        "max_results": args.max_results,
        "combination_cap": args.combination_cap,
        "total_stake": args.stake,
    }

    try:
        config = ScannerConfig.from_env()
        logging.getLogger().setLevel(logging.DEBUG if args.verbose else config.log_level)
        config.analysis = replace(
            config.analysis, **{k: v for k, v in overrides.items() if v is not None}
        )

        if args.batch_dir:
            run_batch(config, args.batch_dir)
        else:
            run_single(
                config,
                fixture_id=args.fixture_id,
                input_path=args.input,
                output_path=args.output,
                export=not args.no_export,
            )
    except OddsArbError as e:
        logger.error("Arbitrage calculation failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
