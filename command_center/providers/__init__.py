"""
Forecast Data Providers.

Supply the DashboardData record that the readiness state machine publishes
once all processing stages have elapsed.
"""

from .forecast_provider import (
    ForecastDataProvider,
    StubForecastProvider,
    RemoteForecastProvider,
    get_provider,
    SAMPLE_SERIES,
    SAMPLE_INSIGHT,
)

__all__ = [
    'ForecastDataProvider',
    'StubForecastProvider',
    'RemoteForecastProvider',
    'get_provider',
    'SAMPLE_SERIES',
    'SAMPLE_INSIGHT',
]
