#!/usr/bin/env python3
"""
Financial Command Center - Main CLI Entry Point
================================================

Single command-line entry point for the dashboard. Three modes:

DASHBOARD (default)  (launch_dashboard)
    Spawns a Streamlit subprocess running
    command_center/dashboard/streamlit_app.py, opens the browser after the
    server has had time to bind its port, and cleans the subprocess up on
    exit.

HEADLESS  (run_headless)
    Runs one readiness session on an asyncio event loop with a tqdm progress
    bar for the processing stages, then prints a text summary of the
    composed dashboard.  Exits 1 when the forecast provider fails.  Useful
    for checking a forecast backend without a browser.

HEALTH CHECK  (health_check)
    Verifies the required packages import and, for the remote provider,
    that the forecast service answers.

Usage:
    python run.py                           # Launch dashboard
    python run.py --headless                # Run one session in the terminal
    python run.py --provider remote --url http://localhost:8000
    python run.py --health-check
"""

import argparse
import asyncio
import atexit
import importlib
import logging
import os
import socket
import subprocess
import sys
import threading
import time
import webbrowser
from pathlib import Path
from typing import List

from tqdm import tqdm

from command_center.core.config import FORECAST_PROVIDER, FORECAST_API_URL
from command_center.core.errors import ConfigurationError
from command_center.core.utils import format_currency
from command_center.dashboard.actions import ActionDispatcher, ActionEvent, LoggingNotifier
from command_center.dashboard.app import build_streamlit_command
from command_center.dashboard.composer import compose, LoadingPlan, ReadyPlan, FailedPlan
from command_center.models import Loading, Ready
from command_center.pipeline import AsyncioScheduler, ReadinessConfig, ReadinessStateMachine
from command_center.providers import get_provider, RemoteForecastProvider
from command_center.visualization import build_chart_model, build_gauge_model

logger = logging.getLogger(__name__)


# ==========================================
# LOGGING SETUP
# ==========================================
# Dual-output logging: a verbose DEBUG-level log file for post-mortem
# debugging and a quieter console handler (WARNING by default, INFO with
# --verbose).  The log file is timestamped so successive runs don't
# overwrite each other.

def setup_logging(verbose: bool = False, log_dir: Path = None):
    """
    Configure the root logger with file and console handlers.

    Args:
        verbose: When True, lower the console handler to INFO level.
        log_dir: Directory for log files (default: logs/ next to this script).

    Returns:
        Path: Absolute path to the newly created log file.
    """
    log_dir = Path(log_dir) if log_dir else Path(__file__).parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = time.strftime('%Y%m%d_%H%M%S')
    log_file = log_dir / f"command_center_{timestamp}.log"

    file_formatter = logging.Formatter(
        '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicate log lines
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    return log_file


# ==========================================
# HEALTH CHECK UTILITIES
# ==========================================

REQUIRED_PACKAGES = ['streamlit', 'plotly', 'pandas', 'requests', 'tqdm']


def check_required_packages() -> List[str]:
    """Return the names of required packages that fail to import."""
    missing = []
    for name in REQUIRED_PACKAGES:
        try:
            importlib.import_module(name)
        except ImportError:
            missing.append(name)
    return missing


def health_check(provider_kind: str = FORECAST_PROVIDER, url: str = None) -> bool:
    """Print a short diagnostic report; True when everything is usable."""
    print("=" * 60)
    print("  Financial Command Center - Health Check")
    print("=" * 60)

    ok = True
    missing = check_required_packages()
    if missing:
        print(f"  ❌ Missing packages: {', '.join(missing)}")
        ok = False
    else:
        print("  ✅ Required packages installed")

    if provider_kind == 'remote':
        provider = RemoteForecastProvider(url or FORECAST_API_URL)
        try:
            provider.fetch_dashboard_data()
            print(f"  ✅ Forecast service reachable at {provider.url}")
        except Exception as e:
            print(f"  ❌ Forecast service check failed: {e}")
            ok = False
    else:
        print("  ℹ️  Using the built-in sample forecast (stub provider)")

    return ok


# ==========================================
# HEADLESS SESSION
# ==========================================

async def run_session(provider, config: ReadinessConfig):
    """Drive one readiness session on the running loop until it ends.

    The session is torn down on exit, including on cancellation.
    """
    loop = asyncio.get_running_loop()
    machine = ReadinessStateMachine(provider, AsyncioScheduler(loop), config)
    finished = loop.create_future()

    with tqdm(total=config.stage_count, desc=config.stage_labels[0], unit="stage",
              bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}]') as pbar:

        def on_state(state):
            if isinstance(state, Loading):
                pbar.set_description(config.stage_labels[state.stage_index])
                pbar.update(1)
            elif not finished.done():
                finished.set_result(state)

        machine.subscribe(on_state)
        # Loading(0) already counts as the first stage reached
        pbar.update(1)
        machine.start()
        try:
            return await finished
        finally:
            machine.teardown()


def describe_plan(plan) -> List[str]:
    """Text rendering of a composed plan for terminal output."""
    if isinstance(plan, FailedPlan):
        return [f"❌ Forecast unavailable: {plan.reason}"]

    if isinstance(plan, LoadingPlan):
        return [f"⏳ {plan.active_label} ({plan.progress:.0%})"]

    chart = build_chart_model(plan.chart.series)
    gauge = build_gauge_model(plan.gauge.risk_score, plan.gauge.risk_level)
    lines = []
    if chart.is_empty:
        lines.append("📊 Forecast: no data")
    else:
        lines.append(
            f"📊 Forecast: {len(chart.points)} periods "
            f"({chart.periods[0]} - {chart.periods[-1]}), peak {format_currency(chart.y_max)}"
        )
    lines.append(f"⚠️  Risk Radar: {gauge.value_label} {gauge.level_label} ({gauge.fraction:.0%} of ring)")
    lines.append(f"🧠 Smart Forecast: {plan.insight.insight}")
    lines.append("⚡ Quick Actions: " + ", ".join(a.label for a in plan.actions.actions))
    return lines


def run_headless(provider_kind: str = FORECAST_PROVIDER, url: str = None,
                 config: ReadinessConfig = None) -> int:
    """Run one session in the terminal and print the composed dashboard.

    Returns:
        0 when the session ends Ready, 1 when it ends Failed.
    """
    config = config or ReadinessConfig()
    provider = get_provider(provider_kind, url)

    state = asyncio.run(run_session(provider, config))
    plan = compose(state, config.stage_labels)

    for line in describe_plan(plan):
        tqdm.write(line)

    if isinstance(plan, ReadyPlan):
        # Same notification the sidebar's dashboard button raises
        ActionDispatcher(LoggingNotifier()).dispatch(ActionEvent.ACKNOWLEDGE_DASHBOARD)
    return 0 if isinstance(state, Ready) else 1


# ==========================================
# DASHBOARD LAUNCHER
# ==========================================

def is_port_in_use(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        return sock.connect_ex(('localhost', port)) == 0


def launch_dashboard(port: int = 8501, open_browser: bool = True,
                     provider_kind: str = FORECAST_PROVIDER, url: str = None) -> bool:
    """
    Launch the Streamlit dashboard as a managed subprocess.

    Returns:
        bool: True if the dashboard ran and exited cleanly (including Ctrl+C
              shutdown), False on errors (port conflicts, missing streamlit).
    """
    if is_port_in_use(port):
        print(f"⚠️  Port {port} is already in use. Choose another with --port")
        return False

    print(f"  📊 Starting Streamlit server on port {port}...")
    print(f"  🔗 URL: http://localhost:{port}")
    print("  Press Ctrl+C to stop the dashboard")
    sys.stdout.flush()

    env_overrides = {"COMMAND_CENTER_PROVIDER": provider_kind}
    if url:
        env_overrides["COMMAND_CENTER_FORECAST_URL"] = url
    env = dict(os.environ, **env_overrides)

    streamlit_process = None

    def cleanup():
        """Terminate the Streamlit subprocess on exit."""
        if streamlit_process and streamlit_process.poll() is None:
            streamlit_process.terminate()
            try:
                streamlit_process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                streamlit_process.kill()

    atexit.register(cleanup)

    try:
        if open_browser:
            def open_browser_delayed():
                time.sleep(3)  # Wait for server to start accepting connections
                try:
                    webbrowser.open(f"http://localhost:{port}")
                except Exception as e:
                    logger.warning(f"Failed to open browser: {e}")

            threading.Thread(target=open_browser_delayed, daemon=True).start()

        streamlit_process = subprocess.Popen(build_streamlit_command(port=port), env=env)
        streamlit_process.wait()
        return True

    except KeyboardInterrupt:
        print("\n\n✅ Dashboard stopped by user.")
        cleanup()
        return True
    except FileNotFoundError:
        print("\n❌ Streamlit not found. Install with: pip install streamlit plotly")
        return False


# ==========================================
# CLI
# ==========================================

def parse_args(argv=None):
    """
    Parse and return command-line arguments.

    Returns:
        argparse.Namespace with the parsed flags.
    """
    parser = argparse.ArgumentParser(
        description='Financial Command Center',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py                       Launch the dashboard
  python run.py --headless            Run one session in the terminal
  python run.py --provider remote --url http://localhost:8000
  python run.py --port 8502           Use custom port for dashboard
        """
    )

    parser.add_argument(
        '--headless',
        action='store_true',
        help='Run one readiness session in the terminal instead of the dashboard'
    )

    parser.add_argument(
        '--provider',
        choices=['stub', 'remote'],
        default=FORECAST_PROVIDER,
        help=f'Forecast data provider (default: {FORECAST_PROVIDER})'
    )

    parser.add_argument(
        '--url',
        type=str,
        help='Base URL of the forecast service for --provider remote'
    )

    parser.add_argument(
        '--port',
        type=int,
        default=8501,
        help='Port for Streamlit dashboard (default: 8501)'
    )

    parser.add_argument(
        '--no-browser',
        action='store_true',
        help='Do not automatically open browser'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed logging output'
    )

    parser.add_argument(
        '--health-check',
        action='store_true',
        help='Run system health check and exit'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Top-level entry point: parse CLI args and dispatch to the selected mode."""
    args = parse_args(argv)
    log_file = setup_logging(verbose=args.verbose)
    logger.debug(f"Logging to {log_file}")

    if args.health_check:
        sys.exit(0 if health_check(args.provider, args.url) else 1)

    try:
        if args.headless:
            sys.exit(run_headless(args.provider, args.url))
        if not launch_dashboard(port=args.port, open_browser=not args.no_browser,
                                provider_kind=args.provider, url=args.url):
            sys.exit(1)
    except ConfigurationError as e:
        print(f"❌ Invalid configuration: {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        print("\n\n👋 Cancelled by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()
