"""
Forecast Data Providers.

The dashboard never computes forecasts or risk scores itself; it asks a
provider for a ready-made ``DashboardData`` record once per session, at the
final stage boundary of the readiness state machine.

Provider contract
-----------------
``fetch_dashboard_data()`` returns a ``DashboardData`` or raises
``ProviderFailure``.  Calls must finish (or fail) in finite time and be safe
to retry, because the state machine may call again when configured with more
than one attempt.

Implementations
---------------
StubForecastProvider
    Returns the fixed twelve-month sample that ships with the dashboard.
    Used for demos and as the default when no backend is configured.

RemoteForecastProvider
    Fetches the forecast document from an HTTP backend with ``requests``
    (``GET {base_url}/forecasts/latest``).  Transport errors, non-200
    responses and schema mismatches all surface as ``ProviderFailure``.
"""

import logging
import time
from typing import Optional

import requests

from ..core.config import (
    FORECAST_PROVIDER, FORECAST_API_URL, FORECAST_API_TIMEOUT, FORECAST_API_PATH
)
from ..core.errors import ProviderFailure
from ..core.utils import risk_level_for_score
from ..models import DashboardData, ForecastPoint, RiskLevel

logger = logging.getLogger(__name__)


SAMPLE_SERIES = (
    ForecastPoint("Jan", 2000, 1400),
    ForecastPoint("Feb", 2200, 1300),
    ForecastPoint("Mar", 2100, 1600),
    ForecastPoint("Apr", 2600, 1400),
    ForecastPoint("May", 2800, 1500),
    ForecastPoint("Jun", 3200, 1300),
    ForecastPoint("Jul", 3100, 1800),
    ForecastPoint("Aug", 3400, 1900),
    ForecastPoint("Sep", 3800, 1600),
    ForecastPoint("Oct", 4100, 1400),
    ForecastPoint("Nov", 4300, 1500),
    ForecastPoint("Dec", 4800, 1700),
)

SAMPLE_INSIGHT = "Expected $400 spike in utilities next month due to winter season trends."


class ForecastDataProvider:
    """Interface for anything that can supply dashboard data."""

    def fetch_dashboard_data(self) -> DashboardData:
        raise NotImplementedError


class StubForecastProvider(ForecastDataProvider):
    """Serves the built-in sample forecast.

    ``latency`` delays each call, to mimic a slow backend in demos.
    """

    def __init__(self, data: Optional[DashboardData] = None, latency: float = 0.0):
        self.data = data or DashboardData(
            series=SAMPLE_SERIES,
            risk_level=RiskLevel.LOW,
            risk_score=22,
            insight=SAMPLE_INSIGHT,
        )
        self.latency = latency
        self.calls = 0

    def fetch_dashboard_data(self) -> DashboardData:
        self.calls += 1
        if self.latency > 0:
            time.sleep(self.latency)
        logger.debug(f"Stub provider serving {len(self.data.series)} forecast points")
        return self.data


class RemoteForecastProvider(ForecastDataProvider):
    """Fetches the forecast document from an HTTP backend.

    Thread safety: instances hold a ``requests.Session`` and are not
    thread-safe.  The dashboard calls the provider from a single thread.
    """

    def __init__(self, base_url: str = FORECAST_API_URL,
                 timeout: float = FORECAST_API_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{FORECAST_API_PATH}"

    def fetch_dashboard_data(self) -> DashboardData:
        """GET the latest forecast and parse it.

        Raises:
            ProviderFailure: on connection errors, timeouts, non-200
                responses, invalid JSON or a document that does not match
                the ``DashboardData`` schema.
        """
        try:
            res = self.session.get(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Forecast request to {self.url} failed: {e}")
            raise ProviderFailure(f"Forecast service unreachable: {e}") from e

        if res.status_code != 200:
            raise ProviderFailure(f"Forecast service returned HTTP {res.status_code}")

        try:
            payload = res.json()
        except ValueError as e:
            raise ProviderFailure("Forecast service returned invalid JSON") from e

        try:
            data = DashboardData.from_dict(payload)
        except ValueError as e:
            raise ProviderFailure(f"Forecast document rejected: {e}") from e

        expected = risk_level_for_score(data.risk_score)
        if expected != data.risk_level.value:
            # Logged, not rejected
            logger.warning(
                f"Forecast riskLevel {data.risk_level.value!r} does not match "
                f"riskScore {data.risk_score} (expected {expected!r})"
            )

        logger.info(f"Fetched forecast with {len(data.series)} points from {self.url}")
        return data


def get_provider(kind: str = FORECAST_PROVIDER, base_url: Optional[str] = None) -> ForecastDataProvider:
    """Build the provider named by ``kind`` ('stub' or 'remote')."""
    kind = (kind or 'stub').strip().lower()
    if kind == 'stub':
        return StubForecastProvider()
    if kind == 'remote':
        return RemoteForecastProvider(base_url or FORECAST_API_URL)
    raise ValueError(f"Unknown forecast provider: {kind!r}")
