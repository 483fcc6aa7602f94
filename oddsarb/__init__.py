"""
Bookmaker Odds Arbitrage Scanner

Ingests per-fixture odds snapshots from multiple bookmakers and finds
markets where a stake split across outcomes at different bookmakers'
prices locks in a guaranteed profit, either from the single best price
per outcome or from a bounded search over the top-K prices per outcome.
"""

__version__ = "0.1.0"
