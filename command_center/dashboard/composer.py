"""
View Composer.

Pure function from the current ``ReadinessState`` to a render plan:

- ``Loading(i)`` -> ``LoadingPlan``: every stage label with status ``done``
  (index < i), ``active`` (index == i) or ``pending`` (index > i), plus the
  progress fraction ``(i + 1) / stage_count``.
- ``Ready(data)`` -> ``ReadyPlan``: four independent panels, each holding only
  its slice of ``data`` (chart <- series, gauge <- score and level,
  insight <- text, actions <- nothing).
- ``Failed(reason)`` -> ``FailedPlan``.

Plans are frozen dataclasses and ``data`` is itself frozen, so composing
never changes what the provider returned.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from ..core.config import STAGE_LABELS
from ..models import ForecastPoint, RiskLevel, ReadinessState, Loading, Ready, Failed
from .actions import ActionEvent, QUICK_ACTIONS

STAGE_DONE = "done"
STAGE_ACTIVE = "active"
STAGE_PENDING = "pending"


def stage_status(index: int, current: int) -> str:
    if index < current:
        return STAGE_DONE
    if index == current:
        return STAGE_ACTIVE
    return STAGE_PENDING


@dataclass(frozen=True)
class StageView:
    index: int
    label: str
    status: str


@dataclass(frozen=True)
class LoadingPlan:
    stages: Tuple[StageView, ...]
    progress: float

    @property
    def active_label(self) -> str:
        return next((s.label for s in self.stages if s.status == STAGE_ACTIVE), "")


@dataclass(frozen=True)
class ChartPanel:
    series: Tuple[ForecastPoint, ...]


@dataclass(frozen=True)
class GaugePanel:
    risk_score: int
    risk_level: RiskLevel


@dataclass(frozen=True)
class InsightPanel:
    insight: str


@dataclass(frozen=True)
class ActionPanel:
    actions: Tuple[ActionEvent, ...] = QUICK_ACTIONS


@dataclass(frozen=True)
class ReadyPlan:
    chart: ChartPanel
    gauge: GaugePanel
    insight: InsightPanel
    actions: ActionPanel

    @property
    def panels(self):
        return (self.chart, self.gauge, self.insight, self.actions)


@dataclass(frozen=True)
class FailedPlan:
    reason: str


RenderPlan = Union[LoadingPlan, ReadyPlan, FailedPlan]


def compose(state: ReadinessState, stage_labels: Sequence[str] = STAGE_LABELS) -> RenderPlan:
    """Build the render plan for one published state."""
    if isinstance(state, Loading):
        current = state.stage_index
        stages = tuple(
            StageView(index=i, label=label, status=stage_status(i, current))
            for i, label in enumerate(stage_labels)
        )
        return LoadingPlan(stages=stages, progress=(current + 1) / len(stage_labels))

    if isinstance(state, Ready):
        data = state.data
        return ReadyPlan(
            chart=ChartPanel(series=data.series),
            gauge=GaugePanel(risk_score=data.risk_score, risk_level=data.risk_level),
            insight=InsightPanel(insight=data.insight),
            actions=ActionPanel(),
        )

    if isinstance(state, Failed):
        return FailedPlan(reason=state.reason)

    raise TypeError(f"Unknown readiness state: {state!r}")
