"""
Exception types raised outside the analysis core.

The analysis itself never raises for empty, partial or unprofitable
markets; these cover malformed snapshots and the I/O collaborators.
"""

from __future__ import annotations


class OddsArbError(Exception):
    """Base class for scanner errors."""


class FixtureValidationError(OddsArbError):
    """Snapshot cannot be interpreted as a fixture odds document."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid fixture odds at '{path}': {reason}")


class ConfigError(OddsArbError):
    """A setting from the environment or command line is unusable."""


class OddsSourceError(OddsArbError):
    """A data source failed to produce a snapshot."""


class ResultExportError(OddsArbError):
    """A result sink failed to render or persist a result."""
