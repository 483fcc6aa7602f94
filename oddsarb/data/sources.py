"""
Odds snapshot sources.

Provides the data-source side of the scanner: a remote odds API, a
local JSON snapshot, and a fallback chain that retries against the
local snapshot when the API is unavailable. Every source returns a
validated FixtureOdds.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import requests

from oddsarb.config import ApiConfig
from oddsarb.data.fixture import FixtureOdds, parse_fixture
from oddsarb.errors import FixtureValidationError, OddsSourceError

logger = logging.getLogger(__name__)


class OddsSource(ABC):
    """Abstract base class for fixture odds sources."""

    name: str = "source"

    @abstractmethod
    def fetch(self, fixture_id: Optional[str] = None) -> FixtureOdds:
        """Return the current odds snapshot for a fixture.

        Raises:
            OddsSourceError: the snapshot could not be obtained
            FixtureValidationError: the snapshot was malformed
        """


class FileOddsSource(OddsSource):
    """Local JSON snapshot, in the same shape the API returns.

    The file holds a single fixture, so fixture_id is ignored.
    """

    name = "file"

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def fetch(self, fixture_id: Optional[str] = None) -> FixtureOdds:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise OddsSourceError(
                f"Odds data file not found: {self._path}. Please ensure the file "
                f"exists or provide a fixture id to fetch from the API."
            ) from None
        except OSError as e:
            raise OddsSourceError(f"Failed to load odds data from {self._path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise OddsSourceError(f"Failed to load odds data from {self._path}: {e}") from e

        logger.info("Loaded odds snapshot from %s", self._path)
        return parse_fixture(data)


class ApiOddsSource(OddsSource):
    """Remote odds API (`GET {base_url}/v4/odds`)."""

    name = "api"

    def __init__(self, config: ApiConfig, session: Optional[requests.Session] = None):
        self._config = config
        self._session = session

    def fetch(self, fixture_id: Optional[str] = None) -> FixtureOdds:
        if not fixture_id:
            raise OddsSourceError("A fixture id is required to fetch odds from the API")

        url = f"{self._config.base_url.rstrip('/')}/v4/odds"
        params = {
            "fixtureId": fixture_id,
            "oddsFormat": self._config.odds_format,
            "verbosity": self._config.verbosity,
            "apiKey": self._config.api_key,
        }
        get = self._session.get if self._session else requests.get

        logger.info("Fetching odds for fixture %s from %s", fixture_id, url)
        try:
            resp = get(url, params=params, timeout=self._config.timeout_seconds)
            resp.raise_for_status()
            data = resp.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            reason = e.response.reason if e.response is not None else ""
            raise OddsSourceError(f"API Error: {status} {reason}".rstrip()) from e
        except requests.RequestException as e:
            raise OddsSourceError(f"API Error: {e}") from e
        except ValueError as e:
            raise OddsSourceError(f"API Error: response is not valid JSON ({e})") from e

        return parse_fixture(data)


class FallbackOddsSource(OddsSource):
    """Primary source with a secondary to fall back on.

    Without a fixture id there is nothing to ask the primary for, so
    the secondary is used directly. Errors from the secondary propagate.
    """

    name = "fallback"

    def __init__(self, primary: OddsSource, secondary: OddsSource):
        self._primary = primary
        self._secondary = secondary

    def fetch(self, fixture_id: Optional[str] = None) -> FixtureOdds:
        if not fixture_id:
            return self._secondary.fetch(fixture_id)

        try:
            return self._primary.fetch(fixture_id)
        except (OddsSourceError, FixtureValidationError) as e:
            logger.warning(
                "%s source failed (%s), falling back to %s source",
                self._primary.name, e, self._secondary.name,
            )
        return self._secondary.fetch(fixture_id)
