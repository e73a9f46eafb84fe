"""
Financial Command Center Dashboard - Streamlit Web Interface.

- Staged processing card while the forecast is prepared
- Projected savings vs. expenses chart
- Risk Radar gauge and Smart Forecast insight
- Quick actions and sidebar navigation with toast notifications
"""

from .app import run_dashboard, get_dashboard_path
from .composer import (
    compose,
    stage_status,
    StageView,
    LoadingPlan,
    ReadyPlan,
    FailedPlan,
    ChartPanel,
    GaugePanel,
    InsightPanel,
    ActionPanel,
    STAGE_DONE,
    STAGE_ACTIVE,
    STAGE_PENDING,
)
from .actions import (
    ActionEvent,
    ActionDispatcher,
    Notification,
    NotificationKind,
    Notifier,
    RecordingNotifier,
    LoggingNotifier,
    StreamlitToastNotifier,
    NAVIGATION_ACTIONS,
    QUICK_ACTIONS,
)

__all__ = [
    'run_dashboard',
    'get_dashboard_path',
    'compose',
    'stage_status',
    'StageView',
    'LoadingPlan',
    'ReadyPlan',
    'FailedPlan',
    'ChartPanel',
    'GaugePanel',
    'InsightPanel',
    'ActionPanel',
    'STAGE_DONE',
    'STAGE_ACTIVE',
    'STAGE_PENDING',
    'ActionEvent',
    'ActionDispatcher',
    'Notification',
    'NotificationKind',
    'Notifier',
    'RecordingNotifier',
    'LoggingNotifier',
    'StreamlitToastNotifier',
    'NAVIGATION_ACTIONS',
    'QUICK_ACTIONS',
]
