"""
Data models for the Financial Command Center.
"""

from .data_models import (
    RiskLevel,
    ForecastPoint,
    DashboardData,
    ReadinessState,
    Loading,
    Ready,
    Failed,
)

__all__ = [
    'RiskLevel',
    'ForecastPoint',
    'DashboardData',
    'ReadinessState',
    'Loading',
    'Ready',
    'Failed',
]
