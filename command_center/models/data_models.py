"""
Data models for the dashboard.

This module defines the **schema layer** of the Financial Command Center.
It provides typed dataclasses describing every record that flows from the
forecast data provider, through the readiness state machine, into the view
composer.

Dataclass hierarchy
-------------------
::

    ForecastPoint
        One reporting period of the forecast (period label, savings,
        expenses).  Array order is x-axis order.

    DashboardData
        Everything the ready view needs: the forecast series, the risk level
        and score, and the insight text.  Frozen, with the series held as a
        tuple, so nothing downstream can mutate it after the Ready
        transition.

    ReadinessState
        ``Loading(stage_index)``, ``Ready(data)`` or ``Failed(reason)``.

Serialisation
-------------
``DashboardData.from_dict`` accepts the JSON document returned by forecast
backends.  Both the historical field names (``chartData`` / ``month``) and
the descriptive ones (``series`` / ``period``) are understood; ``to_dict``
writes the historical names.

Banding policy
--------------
``riskLevel`` and ``riskScore`` are expected to agree (Low <= 33,
Med 34-66, High >= 67).  That is the provider's responsibility: nothing here
validates it, and out-of-range scores are only clamped at render time.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Tuple


# ============================================================================
# RISK LEVEL
# ============================================================================

class RiskLevel(Enum):
    """Risk band reported by the provider alongside the numeric score."""
    LOW = "Low"
    MED = "Med"
    HIGH = "High"

    @classmethod
    def parse(cls, value) -> "RiskLevel":
        """Normalise a raw risk level string.

        Common aliases (``"medium"``, ``"moderate"``, any casing) map onto
        the canonical members.

        Raises:
            ValueError: if the value does not name a risk band.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        mapping = {
            'low': cls.LOW,
            'med': cls.MED,
            'medium': cls.MED,
            'moderate': cls.MED,
            'high': cls.HIGH,
        }
        if key not in mapping:
            raise ValueError(f"Unknown risk level: {value!r}")
        return mapping[key]


# ============================================================================
# FORECAST POINT
# ============================================================================

@dataclass(frozen=True)
class ForecastPoint:
    """One period of the savings / expenses forecast."""
    period: str
    savings: float
    expenses: float

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ForecastPoint":
        """Build a point from ``{month|period, savings, expenses}``.

        Raises:
            ValueError: on a missing field, a non-numeric amount or a
                negative amount.
        """
        if not isinstance(raw, Mapping):
            raise ValueError(f"Forecast point must be an object, got {type(raw).__name__}")
        period = raw.get('period', raw.get('month'))
        if period is None:
            raise ValueError("Forecast point is missing its period label")
        try:
            savings = float(raw['savings'])
            expenses = float(raw['expenses'])
        except KeyError as e:
            raise ValueError(f"Forecast point {period!r} is missing {e.args[0]!r}") from e
        except (TypeError, ValueError) as e:
            raise ValueError(f"Forecast point {period!r} has a non-numeric amount") from e
        if savings < 0 or expenses < 0:
            raise ValueError(f"Forecast point {period!r} has a negative amount")
        return cls(period=str(period), savings=savings, expenses=expenses)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the literal record shown in the chart tooltip."""
        return {
            'period': self.period,
            'savings': self.savings,
            'expenses': self.expenses,
        }


# ============================================================================
# DASHBOARD DATA
# ============================================================================

@dataclass(frozen=True)
class DashboardData:
    """The record supplied by the forecast data provider.

    Attributes:
        series: Ordered forecast points, one per reporting period.
        risk_level: Risk band matching ``risk_score``.
        risk_score: Integer risk score, nominally in [0, 100].
        insight: Free-text insight shown in the Smart Forecast card.
    """
    series: Tuple[ForecastPoint, ...] = field(default_factory=tuple)
    risk_level: RiskLevel = RiskLevel.LOW
    risk_score: int = 0
    insight: str = ""

    def __post_init__(self):
        # Lists passed by callers are frozen into tuples
        if not isinstance(self.series, tuple):
            object.__setattr__(self, 'series', tuple(self.series))
        if not isinstance(self.risk_level, RiskLevel):
            object.__setattr__(self, 'risk_level', RiskLevel.parse(self.risk_level))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DashboardData":
        """Parse the JSON forecast document.

        Raises:
            ValueError: if the document does not match the schema.
        """
        if not isinstance(raw, Mapping):
            raise ValueError("Forecast document must be a JSON object")
        points = raw.get('series', raw.get('chartData'))
        if points is None:
            raise ValueError("Forecast document has no series")
        if isinstance(points, (str, bytes, Mapping)) or not isinstance(points, Iterable):
            raise ValueError("Forecast series must be a list")
        try:
            risk_score = int(raw['riskScore'])
            risk_level = RiskLevel.parse(raw['riskLevel'])
        except KeyError as e:
            raise ValueError(f"Forecast document is missing {e.args[0]!r}") from e
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError(f"Forecast document has an invalid risk field: {e}") from e
        return cls(
            series=tuple(ForecastPoint.from_dict(p) for p in points),
            risk_level=risk_level,
            risk_score=risk_score,
            insight=str(raw.get('insight', '')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise back to the forecast document format."""
        return {
            'chartData': [
                {'month': p.period, 'savings': p.savings, 'expenses': p.expenses}
                for p in self.series
            ],
            'riskLevel': self.risk_level.value,
            'riskScore': self.risk_score,
            'insight': self.insight,
        }


# ============================================================================
# READINESS STATES
# ============================================================================

@dataclass(frozen=True)
class ReadinessState:
    """Base class of the three readiness states."""

    @property
    def is_terminal(self) -> bool:
        return False


@dataclass(frozen=True)
class Loading(ReadinessState):
    """Processing stage ``stage_index`` is active."""
    stage_index: int = 0


@dataclass(frozen=True)
class Ready(ReadinessState):
    """Data is available and the dashboard may render it."""
    data: DashboardData = field(default_factory=DashboardData)

    @property
    def is_terminal(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed(ReadinessState):
    """The provider failed; ``reason`` is shown to the user."""
    reason: str = ""

    @property
    def is_terminal(self) -> bool:
        return True
