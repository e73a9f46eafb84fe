"""
Dashboard launcher.

Utility functions for starting the Streamlit server that hosts
``streamlit_app.py``.
"""

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from ..core.config import COLOR_BACKGROUND, COLOR_INDIGO, COLOR_SAVINGS, COLOR_TEXT

logger = logging.getLogger(__name__)


def get_dashboard_path() -> Path:
    """Get the path to the main streamlit app file."""
    return Path(__file__).parent / "streamlit_app.py"


def build_streamlit_command(port: int = 8501, headless: bool = True) -> List[str]:
    """Streamlit command line with the dashboard's dark theme."""
    return [
        sys.executable, "-m", "streamlit", "run",
        str(get_dashboard_path()),
        "--server.port", str(port),
        "--server.headless", "true" if headless else "false",
        "--browser.gatherUsageStats", "false",
        "--theme.base", "dark",
        "--theme.primaryColor", COLOR_SAVINGS,
        "--theme.backgroundColor", COLOR_BACKGROUND,
        "--theme.secondaryBackgroundColor", COLOR_INDIGO,
        "--theme.textColor", COLOR_TEXT,
    ]


def run_dashboard(port: int = 8501, provider: Optional[str] = None,
                  forecast_url: Optional[str] = None, headless: bool = True) -> int:
    """
    Launch the Streamlit dashboard and block until it exits.

    Args:
        port: Port to run on (default 8501)
        provider: 'stub' or 'remote'; passed to the app through the
            environment because Streamlit owns the app's argv.
        forecast_url: Base URL of the forecast service for 'remote'.
        headless: Do not let Streamlit open a browser itself.

    Returns:
        The Streamlit process exit code.
    """
    env = os.environ.copy()
    if provider:
        env["COMMAND_CENTER_PROVIDER"] = provider
    if forecast_url:
        env["COMMAND_CENTER_FORECAST_URL"] = forecast_url

    cmd = build_streamlit_command(port=port, headless=headless)
    logger.info(f"Starting dashboard: {' '.join(cmd)}")
    return subprocess.run(cmd, env=env).returncode
