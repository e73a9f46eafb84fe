"""
Central Configuration Module for the Financial Command Center.

=== PURPOSE ===
Single source of truth for every tunable constant used across the dashboard:
the processing stages shown before data becomes visible, their timing, the
risk banding policy, the forecast provider endpoint and the palette shared
by the chart and gauge renderers.  Other modules import from here rather
than defining their own magic numbers.

=== DATA FLOW ===
  1. STAGE_LABELS / STAGE_OFFSETS_S feed ``ReadinessConfig`` which the
     readiness state machine consumes.
  2. RISK_BAND_* constants back ``risk_level_for_score``, which the remote
     provider uses to flag riskLevel / riskScore mismatches.
  3. FORECAST_API_* constants configure the remote forecast provider.
  4. The colour constants are read by the Plotly renderers and the CSS.

Values that differ per deployment can be overridden with environment
variables at import time.
"""

import math
import os
import logging

logger = logging.getLogger(__name__)


def _parse_offsets(raw):
    """Parse a comma separated list of seconds into a tuple of floats."""
    try:
        return tuple(float(part) for part in raw.split(',') if part.strip())
    except ValueError:
        logger.warning(f"[Config] Ignoring invalid stage offsets {raw!r}")
        return None


def _env_number(name, default, cast=float):
    """Read a numeric environment override, keeping the default if it does not parse."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"[Config] Ignoring invalid {name}={raw!r}, using {default}")
        return default


# ==========================================
# READINESS STAGES
# ==========================================
# Ordered labels of the perceived "analysis" work.  The number of labels is
# the stage count used by the state machine.
STAGE_LABELS = (
    "Analyzing Trends",
    "Calculating Risk",
    "Generating Forecast",
)

# Stage boundaries in seconds, measured from mount (not cumulative).  The
# last boundary is where the forecast provider is invoked.
DEFAULT_STAGE_OFFSETS_S = (1.5, 3.0, 4.5)
STAGE_OFFSETS_S = (
    _parse_offsets(os.environ.get("COMMAND_CENTER_STAGE_OFFSETS", ""))
    or DEFAULT_STAGE_OFFSETS_S
)

# Duration of the progress bar width animation in the loading card.
PROGRESS_TRANSITION_S = _env_number("COMMAND_CENTER_PROGRESS_TRANSITION", 0.5)

# How many times the provider is called at the final boundary before the
# session is marked as failed.
PROVIDER_ATTEMPTS = _env_number("COMMAND_CENTER_PROVIDER_ATTEMPTS", 1, int)

# ==========================================
# FORECAST PROVIDER
# ==========================================
# 'stub' serves the built-in sample, 'remote' calls FORECAST_API_URL
FORECAST_PROVIDER = os.environ.get("COMMAND_CENTER_PROVIDER", "stub")
FORECAST_API_URL = os.environ.get("COMMAND_CENTER_FORECAST_URL", "http://localhost:8000")
FORECAST_API_TIMEOUT = _env_number("COMMAND_CENTER_FORECAST_TIMEOUT", 10.0)
FORECAST_API_PATH = "/forecasts/latest"

# ==========================================
# RISK BANDING POLICY
# ==========================================
# Low <= 33, Med 34-66, High >= 67
RISK_SCORE_MIN = 0
RISK_SCORE_MAX = 100
RISK_BAND_LOW_MAX = 33
RISK_BAND_MED_MAX = 66

# ==========================================
# PALETTE
# ==========================================
COLOR_BACKGROUND = '#0B0A1A'
COLOR_SAVINGS = '#10B981'      # emerald
COLOR_EXPENSES = '#EF4444'     # red
COLOR_INDIGO = '#1E1B4B'
COLOR_TEXT = '#E0E0E0'
COLOR_AXIS = '#6b7280'
COLOR_GRID = '#2D2B42'
COLOR_TRACK = 'rgba(255,255,255,0.1)'

RISK_LEVEL_COLORS = {
    'Low': COLOR_SAVINGS,
    'Med': '#F59E0B',
    'High': COLOR_EXPENSES,
}

# Gauge ring geometry (radius 40 in a 100x100 viewBox)
GAUGE_RADIUS = 40
GAUGE_CIRCUMFERENCE = round(2 * math.pi * GAUGE_RADIUS)  # 251

# ==========================================
# PAGE TEXT
# ==========================================
PAGE_TITLE = "Financial Command Center"
PAGE_SUBTITLE = "Enterprise AI Insights powered by Gemini"
LOADING_TITLE = "Gemini AI Processing"
CHART_TITLE = "Projected Savings vs. Expenses"
CHART_BADGE = "12-Month Forecast"
GAUGE_TITLE = "Risk Radar"
GAUGE_CAPTION = "Your financial portfolio shows resilience. Keep maintaining the savings ratio."
INSIGHT_TITLE = "Smart Forecast"
ACTIONS_TITLE = "Quick Actions"
