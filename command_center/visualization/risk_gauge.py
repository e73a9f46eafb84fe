"""
Risk Gauge Renderer

Draws the provided risk score as a circular progress ring with the score
and "<level> Risk" label in the centre.  No risk is computed here: the arc
is a linear function of the clamped score, so two renderers given the same
score always produce the same arc.
"""

import logging
from dataclasses import dataclass

import plotly.graph_objects as go

from ..core.config import (
    GAUGE_CIRCUMFERENCE, COLOR_TRACK, COLOR_SAVINGS, RISK_LEVEL_COLORS,
    RISK_SCORE_MAX,
)
from ..core.utils import clamp_risk_score
from .forecast_chart import create_plotly_theme

logger = logging.getLogger(__name__)


def arc_fraction(score) -> float:
    """Arc length as a fraction of the full ring: clamp(score, 0, 100) / 100."""
    return clamp_risk_score(score) / RISK_SCORE_MAX


def _level_name(level) -> str:
    return getattr(level, 'value', level)


def _format_score(value) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


@dataclass(frozen=True)
class GaugeModel:
    """What the gauge draws for one score."""
    score: float
    fraction: float
    value_label: str
    level_label: str
    color: str

    @property
    def stroke_dasharray(self) -> str:
        """SVG dash for a radius-40 ring, e.g. '55.22 251' for score 22."""
        return f"{self.fraction * GAUGE_CIRCUMFERENCE:g} {GAUGE_CIRCUMFERENCE}"


def build_gauge_model(risk_score, risk_level) -> GaugeModel:
    """Map the provided score and level onto the gauge."""
    clamped = clamp_risk_score(risk_score)
    level = _level_name(risk_level)
    return GaugeModel(
        score=clamped,
        fraction=arc_fraction(risk_score),
        value_label=_format_score(clamped),
        level_label=f"{level} Risk",
        color=RISK_LEVEL_COLORS.get(level, COLOR_SAVINGS),
    )


# =============================================================================
# RISK RADAR RING
# =============================================================================

def chart_risk_gauge(risk_score, risk_level, height: int = 220) -> go.Figure:
    """
    Circular progress ring for the risk score.
    """
    model = build_gauge_model(risk_score, risk_level)

    fig = go.Figure(go.Pie(
        values=[model.fraction, 1 - model.fraction],
        hole=0.8,
        sort=False,
        direction='clockwise',
        rotation=0,
        marker=dict(colors=[model.color, COLOR_TRACK], line=dict(width=0)),
        textinfo='none',
        hoverinfo='skip',
        showlegend=False,
    ))

    fig.add_annotation(
        text=f"<b>{model.value_label}</b>", x=0.5, y=0.56,
        xref='paper', yref='paper', showarrow=False,
        font=dict(size=34, color='#FFFFFF'),
    )
    fig.add_annotation(
        text=model.level_label.upper(), x=0.5, y=0.36,
        xref='paper', yref='paper', showarrow=False,
        font=dict(size=11, color=model.color),
    )

    theme = create_plotly_theme()
    theme['margin'] = dict(l=10, r=10, t=10, b=10)
    fig.update_layout(**theme, height=height)

    return fig
