"""
Core module for the Financial Command Center.

Contains configuration and base utilities.
"""

from command_center.core.config import *
from command_center.core.utils import clamp, clamp_risk_score, risk_level_for_score, format_currency

__all__ = [
    'clamp',
    'clamp_risk_score',
    'risk_level_for_score',
    'format_currency',
]
