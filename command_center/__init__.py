"""
Financial Command Center - single-screen financial analytics dashboard.

This package provides:
- A staged readiness pipeline that gates when forecast data may be shown
- A provider interface for the forecast data (stub and HTTP backends)
- A pure view composer mapping readiness states to render plans
- Plotly renderers for the savings/expenses forecast and the risk gauge
- A Streamlit application and CLI launcher
"""

__version__ = "1.0.0"
__author__ = "Financial Command Center Team"

# Core imports
from .core.config import *
from .core.errors import DashboardError, ProviderFailure, ConfigurationError
from .core.utils import clamp_risk_score, risk_level_for_score

# Models
from .models import (
    RiskLevel,
    ForecastPoint,
    DashboardData,
    ReadinessState,
    Loading,
    Ready,
    Failed,
)

# Providers
from .providers import (
    ForecastDataProvider,
    StubForecastProvider,
    RemoteForecastProvider,
    get_provider,
)

# Pipeline
from .pipeline import (
    ReadinessConfig,
    ReadinessStateMachine,
    ManualScheduler,
    AsyncioScheduler,
)

# Visualization
from .visualization import chart_forecast_bands, chart_risk_gauge, arc_fraction

# Dashboard
from .dashboard import compose, ActionDispatcher, ActionEvent, run_dashboard

__all__ = [
    # Errors
    'DashboardError',
    'ProviderFailure',
    'ConfigurationError',

    # Utils
    'clamp_risk_score',
    'risk_level_for_score',

    # Models
    'RiskLevel',
    'ForecastPoint',
    'DashboardData',
    'ReadinessState',
    'Loading',
    'Ready',
    'Failed',

    # Providers
    'ForecastDataProvider',
    'StubForecastProvider',
    'RemoteForecastProvider',
    'get_provider',

    # Pipeline
    'ReadinessConfig',
    'ReadinessStateMachine',
    'ManualScheduler',
    'AsyncioScheduler',

    # Visualization
    'chart_forecast_bands',
    'chart_risk_gauge',
    'arc_fraction',

    # Dashboard
    'compose',
    'ActionDispatcher',
    'ActionEvent',
    'run_dashboard',

    # Metadata
    '__version__',
]
