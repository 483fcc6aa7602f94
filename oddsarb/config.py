"""
Configuration management for the Odds Arbitrage Scanner.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from oddsarb.errors import ConfigError

load_dotenv()


class AnalysisMode(Enum):
    BEST_ODDS = "best_odds"
    TOP_K = "top_k"


# Search bounds
MIN_TOP_K = 1
MAX_TOP_K = 3
MIN_RESULTS = 1
MAX_RESULTS = 5
DEFAULT_COMBINATION_CAP = 10_000
DEFAULT_TOTAL_STAKE = 100.0  # Stakes are reported per 100 units

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Selector slot holding the priced quote for an outcome
PRIMARY_SLOT = "0"


@dataclass(frozen=True)
class ApiConfig:
    """Remote odds API configuration."""
    base_url: str = "https://api.oddspapi.io"
    api_key: str = ""
    timeout_seconds: float = 10.0
    odds_format: str = "decimal"
    verbosity: int = 3


@dataclass(frozen=True)
class AnalysisConfig:
    """Arbitrage search parameters."""
    top_k: Optional[int] = None  # None or 1 = single best price per outcome
    max_results: int = MAX_RESULTS  # Per market, top-K mode only
    combination_cap: int = DEFAULT_COMBINATION_CAP
    total_stake: float = DEFAULT_TOTAL_STAKE

    def __post_init__(self):
        if self.combination_cap < 1:
            raise ConfigError(
                f"combination_cap must be a positive integer, got {self.combination_cap}"
            )
        if self.total_stake <= 0:
            raise ConfigError(f"total_stake must be positive, got {self.total_stake}")

    @property
    def mode(self) -> AnalysisMode:
        if self.top_k is not None and self.top_k > 1:
            return AnalysisMode.TOP_K
        return AnalysisMode.BEST_ODDS


@dataclass
class ScannerConfig:
    """Top-level scanner configuration."""
    api: ApiConfig = field(default_factory=ApiConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)

    fallback_path: Path = field(default_factory=lambda: Path("data/market-data.json"))
    output_dir: Path = field(default_factory=lambda: Path("data"))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ScannerConfig":
        """Load configuration from environment variables."""
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )
        return cls(
            api=ApiConfig(
                base_url=os.getenv("ODDS_API_BASE_URL", "https://api.oddspapi.io"),
                api_key=os.getenv("ODDS_API_KEY", ""),
                timeout_seconds=_env_number("ODDS_API_TIMEOUT", 10.0, float),
            ),
            analysis=AnalysisConfig(
                top_k=_env_number("ARB_TOP_K", None, int),
                max_results=_env_number("ARB_MAX_RESULTS", MAX_RESULTS, int),
                combination_cap=_env_number("ARB_COMBINATION_CAP", DEFAULT_COMBINATION_CAP, int),
                total_stake=_env_number("ARB_TOTAL_STAKE", DEFAULT_TOTAL_STAKE, float),
            ),
            fallback_path=Path(os.getenv("ODDS_FALLBACK_FILE", "data/market-data.json")),
            output_dir=Path(os.getenv("ARB_OUTPUT_DIR", "data")),
            log_level=log_level,
        )


def clamp(value: int, low: int, high: int) -> int:
    """Clamp an integer search parameter into [low, high]."""
    return max(low, min(high, value))


def _env_number(name: str, default, parse):
    """Read a numeric setting, unset or empty means default."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
