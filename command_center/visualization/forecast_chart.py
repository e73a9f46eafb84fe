"""
Forecast Chart Renderer

Maps the ordered forecast series onto two overlaid area bands (savings and
expenses) that share one categorical time axis:

- X axis: one tick per period label, in array order (never re-sorted)
- Y axis: from min(0, smallest amount) up to max(savings, expenses)
- Hover: every point carries its source record as ``customdata`` so the
  tooltip shows exactly ``{period, savings, expenses}``
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

import pandas as pd
import plotly.graph_objects as go

from ..core.config import COLOR_SAVINGS, COLOR_EXPENSES, COLOR_AXIS, COLOR_GRID, COLOR_TEXT
from ..models import ForecastPoint

logger = logging.getLogger(__name__)


def create_plotly_theme():
    """Get consistent Plotly theme settings."""
    return dict(
        paper_bgcolor='rgba(0,0,0,0)',
        plot_bgcolor='rgba(0,0,0,0)',
        font=dict(family='Inter', color=COLOR_TEXT),
        margin=dict(l=40, r=30, t=10, b=30),
    )


def _fill_color(hex_color: str, alpha: float) -> str:
    r, g, b = (int(hex_color[i:i + 2], 16) for i in (1, 3, 5))
    return f'rgba({r}, {g}, {b}, {alpha})'


@dataclass(frozen=True)
class ChartModel:
    """Axis data for the forecast chart, in source order."""
    points: Tuple[ForecastPoint, ...]
    y_min: float
    y_max: float

    @property
    def periods(self) -> Tuple[str, ...]:
        return tuple(p.period for p in self.points)

    @property
    def savings(self) -> Tuple[float, ...]:
        return tuple(p.savings for p in self.points)

    @property
    def expenses(self) -> Tuple[float, ...]:
        return tuple(p.expenses for p in self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points

    def point_at(self, index: int) -> Dict[str, Any]:
        """The literal record displayed when hovering point ``index``."""
        return self.points[index].to_dict()


def build_chart_model(series: Sequence[ForecastPoint]) -> ChartModel:
    """Derive axis data from the series; an empty series gives a 0..0 axis."""
    points = tuple(series)
    amounts = [v for p in points for v in (p.savings, p.expenses)]
    y_max = max(amounts) if amounts else 0
    y_min = min(0, min(amounts)) if amounts else 0
    return ChartModel(points=points, y_min=y_min, y_max=y_max)


def point_from_customdata(row) -> ForecastPoint:
    """Rebuild the source point from one row of trace ``customdata``."""
    period, savings, expenses = row
    return ForecastPoint(period=period, savings=savings, expenses=expenses)


def forecast_frame(series: Sequence[ForecastPoint]) -> pd.DataFrame:
    """Tabular view of the series (period order preserved) with a net column."""
    df = pd.DataFrame(
        [p.to_dict() for p in series],
        columns=['period', 'savings', 'expenses'],
    )
    df['net'] = df['savings'] - df['expenses']
    return df


# =============================================================================
# SAVINGS VS EXPENSES BANDS
# =============================================================================

def chart_forecast_bands(series: Sequence[ForecastPoint], height: int = 360) -> go.Figure:
    """
    Overlaid savings / expenses area chart for the forecast series.
    """
    model = build_chart_model(series)
    customdata = [[p.period, p.savings, p.expenses] for p in model.points]

    fig = go.Figure()

    for name, values, color in (
        ('Savings', model.savings, COLOR_SAVINGS),
        ('Expenses', model.expenses, COLOR_EXPENSES),
    ):
        fig.add_trace(go.Scatter(
            x=list(model.periods),
            y=list(values),
            name=name,
            mode='lines',
            line=dict(color=color, width=3, shape='spline'),
            fill='tozeroy',
            fillcolor=_fill_color(color, 0.25),
            customdata=customdata,
            hovertemplate=(
                '<b>%{customdata[0]}</b><br>'
                'Savings: $%{customdata[1]:,.0f}<br>'
                'Expenses: $%{customdata[2]:,.0f}'
                f'<extra>{name}</extra>'
            ),
        ))

    # Pad the top so the highest band is not drawn on the frame edge
    upper = model.y_max * 1.05 if model.y_max > 0 else 1
    lower = model.y_min * 1.05 if model.y_min < 0 else 0

    fig.update_layout(
        **create_plotly_theme(),
        height=height,
        showlegend=True,
        legend=dict(orientation='h', y=1.02, x=1, xanchor='right', yanchor='bottom'),
        hovermode='closest',
    )
    fig.update_xaxes(
        type='category',
        categoryorder='array',
        categoryarray=list(model.periods),
        color=COLOR_AXIS,
        showgrid=False,
        showline=False,
    )
    fig.update_yaxes(
        range=[lower, upper],
        tickprefix='$',
        color=COLOR_AXIS,
        gridcolor=COLOR_GRID,
        griddash='dash',
        zeroline=False,
    )

    if model.is_empty:
        logger.debug("Rendering forecast chart with an empty series")
        fig.add_annotation(text="No forecast data available", x=0.5, y=0.5,
                           xref='paper', yref='paper', showarrow=False)

    return fig
