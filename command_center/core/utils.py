"""
Utility functions for score handling and formatting.
"""

import logging

from command_center.core.config import (
    RISK_SCORE_MIN, RISK_SCORE_MAX, RISK_BAND_LOW_MAX, RISK_BAND_MED_MAX
)

logger = logging.getLogger(__name__)


def clamp(value, lower, upper):
    """Clamp value into [lower, upper]"""
    return max(lower, min(upper, value))


def clamp_risk_score(score):
    """Clamp a risk score into [0, 100] for rendering.

    Out-of-range scores are an upstream invariant violation; they are logged
    and clamped rather than raised so rendering is never interrupted.
    """
    clamped = clamp(score, RISK_SCORE_MIN, RISK_SCORE_MAX)
    if clamped != score:
        logger.debug(f"Risk score {score} outside [{RISK_SCORE_MIN}, {RISK_SCORE_MAX}], clamped to {clamped}")
    return clamped


def risk_level_for_score(score):
    """Map a risk score onto its band name ('Low', 'Med' or 'High')."""
    score = clamp_risk_score(score)
    if score <= RISK_BAND_LOW_MAX:
        return 'Low'
    if score <= RISK_BAND_MED_MAX:
        return 'Med'
    return 'High'


def format_currency(value):
    """Format an amount the way the chart axis does ($2000)."""
    return f"${value:,.0f}"
