"""
Visualization Module.

Plotly renderers for the forecast chart and the risk gauge.
"""

from .forecast_chart import (
    ChartModel,
    build_chart_model,
    chart_forecast_bands,
    forecast_frame,
    point_from_customdata,
)
from .risk_gauge import GaugeModel, arc_fraction, build_gauge_model, chart_risk_gauge

__all__ = [
    'ChartModel',
    'build_chart_model',
    'chart_forecast_bands',
    'forecast_frame',
    'point_from_customdata',
    'GaugeModel',
    'arc_fraction',
    'build_gauge_model',
    'chart_risk_gauge',
]
