"""
Exception hierarchy for the dashboard.

Only ``ProviderFailure`` ever reaches the view, and it does so as the
``Failed`` readiness state rather than as a raised exception.  Invalid risk
scores are clamped (see ``core.utils.clamp_risk_score``) and stale timer
callbacks are dropped by the state machine, so neither has an exception
type of its own.
"""


class DashboardError(Exception):
    """Base class for every error raised by this package."""


class ProviderFailure(DashboardError):
    """The forecast data provider could not produce a DashboardData record."""


class ConfigurationError(DashboardError, ValueError):
    """Readiness configuration is internally inconsistent."""
