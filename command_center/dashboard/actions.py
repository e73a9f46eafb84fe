"""
Dashboard action surface.

Every button on the dashboard (sidebar navigation and quick actions) maps to
one ``ActionEvent``.  Clicking it hands exactly one ``Notification`` to the
configured ``Notifier``, synchronously; nothing else happens in this
package.  What the notification leads to belongs to the collaborator behind
the notifier.

Notifiers
---------
StreamlitToastNotifier
    Shows the notification as an ``st.toast`` in the running app.
LoggingNotifier
    Writes the notification to the module logger (headless runs).
RecordingNotifier
    Keeps notifications in memory; used by tests.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import streamlit as st

logger = logging.getLogger(__name__)


class NotificationKind(Enum):
    INFO = "info"
    SUCCESS = "success"


@dataclass(frozen=True)
class Notification:
    """A fire-and-forget message raised by a user action."""
    title: str
    description: Optional[str] = None
    kind: NotificationKind = NotificationKind.INFO


class ActionEvent(Enum):
    """User actions available on the dashboard."""
    ACKNOWLEDGE_DASHBOARD = "acknowledge_dashboard"
    OPEN_ANALYTICS = "open_analytics"
    OPEN_RISK_SETTINGS = "open_risk_settings"
    OPEN_PROFILE = "open_profile"
    UPLOAD_STATEMENT = "upload_statement"
    ADD_EXPENSE = "add_expense"

    @property
    def label(self) -> str:
        return ACTION_CATALOG[self]['label']

    @property
    def icon(self) -> str:
        return ACTION_CATALOG[self]['icon']

    @property
    def notification(self) -> Notification:
        return ACTION_CATALOG[self]['notification']


ACTION_CATALOG = {
    ActionEvent.ACKNOWLEDGE_DASHBOARD: {
        'label': 'Dashboard',
        'icon': '🧭',
        'notification': Notification("Dashboard active"),
    },
    ActionEvent.OPEN_ANALYTICS: {
        'label': 'Analytics',
        'icon': '📊',
        'notification': Notification("Analytics incoming"),
    },
    ActionEvent.OPEN_RISK_SETTINGS: {
        'label': 'Risk Settings',
        'icon': '🛡️',
        'notification': Notification("Risk Settings"),
    },
    ActionEvent.OPEN_PROFILE: {
        'label': 'Profile',
        'icon': '👤',
        'notification': Notification("Profile Switcher"),
    },
    ActionEvent.UPLOAD_STATEMENT: {
        'label': 'Upload Statement',
        'icon': '⬆️',
        'notification': Notification(
            "Upload successful", "Processing bank statement...", NotificationKind.SUCCESS
        ),
    },
    ActionEvent.ADD_EXPENSE: {
        'label': 'Add Expense',
        'icon': '➕',
        'notification': Notification("Expense form opened", kind=NotificationKind.SUCCESS),
    },
}

# Sidebar order: the first three sit at the top, profile at the bottom
NAVIGATION_ACTIONS = (
    ActionEvent.ACKNOWLEDGE_DASHBOARD,
    ActionEvent.OPEN_ANALYTICS,
    ActionEvent.OPEN_RISK_SETTINGS,
    ActionEvent.OPEN_PROFILE,
)

QUICK_ACTIONS = (
    ActionEvent.UPLOAD_STATEMENT,
    ActionEvent.ADD_EXPENSE,
)


# ============================================================================
# NOTIFIERS
# ============================================================================

class Notifier:
    """Receives one notification per user action."""

    def notify(self, notification: Notification):
        raise NotImplementedError


class RecordingNotifier(Notifier):
    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, notification: Notification):
        self.notifications.append(notification)


class LoggingNotifier(Notifier):
    def notify(self, notification: Notification):
        suffix = f" - {notification.description}" if notification.description else ""
        logger.info(f"[{notification.kind.value}] {notification.title}{suffix}")


class StreamlitToastNotifier(Notifier):
    ICONS = {
        NotificationKind.INFO: "ℹ️",
        NotificationKind.SUCCESS: "✅",
    }

    def notify(self, notification: Notification):
        body = f"**{notification.title}**"
        if notification.description:
            body += f"  \n{notification.description}"
        st.toast(body, icon=self.ICONS[notification.kind])


# ============================================================================
# DISPATCH
# ============================================================================

class ActionDispatcher:
    """Turns each click into exactly one notification."""

    def __init__(self, notifier: Notifier):
        self.notifier = notifier
        self.counts: Dict[ActionEvent, int] = {}

    def dispatch(self, event: ActionEvent) -> Notification:
        notification = event.notification
        self.counts[event] = self.counts.get(event, 0) + 1
        logger.debug(f"Action {event.value} -> {notification.title!r}")
        self.notifier.notify(notification)
        return notification
