"""
Financial Command Center - Streamlit Application

Single-screen dashboard:
- Staged "Gemini AI Processing" card while the forecast is prepared
- Projected Savings vs. Expenses area chart (12-month forecast)
- Risk Radar gauge
- Smart Forecast insight
- Quick actions and sidebar navigation

Run with:
    streamlit run command_center/dashboard/streamlit_app.py
"""

import streamlit as st
from pathlib import Path
import logging
import sys
import time

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from command_center.core.config import (
    PAGE_TITLE, PAGE_SUBTITLE, LOADING_TITLE, CHART_TITLE, CHART_BADGE,
    GAUGE_TITLE, GAUGE_CAPTION, INSIGHT_TITLE, ACTIONS_TITLE,
    COLOR_BACKGROUND, FORECAST_PROVIDER,
)
from command_center.dashboard.actions import (
    ActionDispatcher, StreamlitToastNotifier, NAVIGATION_ACTIONS,
)
from command_center.dashboard.composer import (
    compose, LoadingPlan, ReadyPlan, FailedPlan, STAGE_DONE, STAGE_ACTIVE,
)
from command_center.pipeline import ManualScheduler, ReadinessStateMachine, ReadinessConfig
from command_center.providers import get_provider
from command_center.visualization import chart_forecast_bands, chart_risk_gauge, forecast_frame

logger = logging.getLogger(__name__)

SESSION_KEY = 'readiness_session'
DISPATCHER_KEY = 'action_dispatcher'

# ============================================================================
# PAGE CONFIG
# ============================================================================

st.set_page_config(
    page_title=PAGE_TITLE,
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded",
)


def load_custom_css(progress_transition_s: float):
    """Load custom CSS for the glass card styling."""
    st.markdown(f"""
    <style>
    .stApp {{
        background: {COLOR_BACKGROUND};
        font-family: 'Inter', sans-serif;
    }}

    .bento-card {{
        background: rgba(255, 255, 255, 0.03);
        backdrop-filter: blur(12px);
        border-radius: 16px;
        border: 1px solid rgba(255, 255, 255, 0.08);
        padding: 24px;
        margin-bottom: 16px;
    }}

    .main-header {{
        font-size: 2rem;
        font-weight: 700;
        margin-bottom: 0.25rem;
    }}

    .sub-header {{
        color: #9CA3AF;
        margin-bottom: 1.5rem;
    }}

    .loading-title {{
        font-size: 1.5rem;
        font-weight: 600;
        text-align: center;
        background: linear-gradient(90deg, #10B981 0%, #6366F1 100%);
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
        margin-bottom: 1.5rem;
    }}

    .stage-row {{ display: flex; align-items: center; gap: 16px; margin: 12px 0; }}
    .stage-dot {{
        width: 32px; height: 32px; border-radius: 50%;
        display: flex; align-items: center; justify-content: center;
        border: 2px solid #4B5563; color: #4B5563; font-size: 0.8rem;
    }}
    .stage-dot.done {{ border-color: #10B981; color: #10B981; background: rgba(16, 185, 129, 0.2); }}
    .stage-dot.active {{ border-color: #6366F1; color: #818CF8; background: rgba(99, 102, 241, 0.2); }}
    .stage-label {{ color: #9CA3AF; }}
    .stage-label.active {{ color: white; font-weight: 500; }}

    .stProgress > div > div > div > div {{
        background-color: #10B981;
        transition: width {progress_transition_s}s ease;
    }}

    .card-badge {{
        font-size: 0.75rem;
        color: #818CF8;
        background: rgba(99, 102, 241, 0.15);
        border: 1px solid rgba(99, 102, 241, 0.3);
        border-radius: 999px;
        padding: 4px 12px;
        float: right;
    }}

    .insight-text {{ font-size: 1.1rem; font-weight: 500; line-height: 1.3; }}

    #MainMenu {{visibility: hidden;}}
    footer {{visibility: hidden;}}
    </style>
    """, unsafe_allow_html=True)


# ============================================================================
# SESSION STATE
# ============================================================================

def start_session():
    """Create and start a readiness session for this browser session."""
    try:
        config = ReadinessConfig()
        provider = get_provider(FORECAST_PROVIDER)
    except ValueError as e:
        # ConfigurationError and unknown provider kinds
        logger.error(f"Invalid dashboard configuration: {e}")
        st.error(f"❌ Invalid configuration: {e}")
        st.stop()

    scheduler = ManualScheduler()
    machine = ReadinessStateMachine(provider, scheduler, config)
    machine.start()
    logger.info(f"Started readiness session with provider {FORECAST_PROVIDER!r}")
    st.session_state[SESSION_KEY] = {'machine': machine, 'scheduler': scheduler}
    return st.session_state[SESSION_KEY]


def get_session():
    if SESSION_KEY not in st.session_state:
        return start_session()
    return st.session_state[SESSION_KEY]


def reset_session():
    """Tear down the current session so the next run starts from Loading(0)."""
    session = st.session_state.pop(SESSION_KEY, None)
    if session:
        session['machine'].teardown()


def get_dispatcher() -> ActionDispatcher:
    if DISPATCHER_KEY not in st.session_state:
        st.session_state[DISPATCHER_KEY] = ActionDispatcher(StreamlitToastNotifier())
    return st.session_state[DISPATCHER_KEY]


# ============================================================================
# RENDERING
# ============================================================================

def render_loading(plan: LoadingPlan):
    """Stage list with check / spinner / number markers and a progress bar."""
    _, center, _ = st.columns([1, 2, 1])
    with center:
        rows = []
        for stage in plan.stages:
            if stage.status == STAGE_DONE:
                marker = "✓"
            elif stage.status == STAGE_ACTIVE:
                marker = "⟳"
            else:
                marker = str(stage.index + 1)
            label_class = "active" if stage.status == STAGE_ACTIVE else ""
            rows.append(
                f'<div class="stage-row"><div class="stage-dot {stage.status}">{marker}</div>'
                f'<span class="stage-label {label_class}">{stage.label}</span></div>'
            )
        st.markdown(
            f'<div class="bento-card"><div class="loading-title">🧠 {LOADING_TITLE}</div>'
            f'{"".join(rows)}</div>',
            unsafe_allow_html=True,
        )
        st.progress(plan.progress, text=plan.active_label)


def render_failed(plan: FailedPlan):
    _, center, _ = st.columns([1, 2, 1])
    with center:
        st.error(f"❌ Forecast unavailable: {plan.reason}")
        if st.button("🔄 Retry", use_container_width=True):
            reset_session()
            st.rerun()


def render_sidebar(dispatcher: ActionDispatcher):
    """Slim navigation sidebar; each button raises one notification."""
    st.sidebar.markdown("## 📈")
    for event in NAVIGATION_ACTIONS:
        if st.sidebar.button(f"{event.icon} {event.label}", key=f"nav_{event.value}",
                             use_container_width=True):
            dispatcher.dispatch(event)


def render_ready(plan: ReadyPlan, dispatcher: ActionDispatcher):
    render_sidebar(dispatcher)

    chart_col, side_col = st.columns([3, 1])

    with chart_col:
        st.markdown(
            f'<div class="bento-card"><span class="card-badge">{CHART_BADGE}</span>'
            f'<h4>📊 {CHART_TITLE}</h4></div>',
            unsafe_allow_html=True,
        )
        st.plotly_chart(chart_forecast_bands(plan.chart.series), use_container_width=True)
        with st.expander("Forecast detail"):
            st.dataframe(forecast_frame(plan.chart.series), use_container_width=True, hide_index=True)

    with side_col:
        st.markdown(f"##### ⚠️ {GAUGE_TITLE}")
        st.plotly_chart(
            chart_risk_gauge(plan.gauge.risk_score, plan.gauge.risk_level),
            use_container_width=True,
        )
        st.caption(GAUGE_CAPTION)

        st.markdown(
            f'<div class="bento-card"><p>🧠 {INSIGHT_TITLE}</p>'
            f'<p class="insight-text">{plan.insight.insight}</p>'
            f'<p style="font-size:0.8rem;color:#818CF8">View Detail Analysis ↘</p></div>',
            unsafe_allow_html=True,
        )

        st.markdown(f"##### {ACTIONS_TITLE}")
        for event in plan.actions.actions:
            if st.button(f"{event.icon} {event.label}", key=f"quick_{event.value}",
                         use_container_width=True):
                dispatcher.dispatch(event)


def render_header():
    st.markdown(f'<p class="main-header">{PAGE_TITLE}</p>', unsafe_allow_html=True)
    st.markdown(f'<p class="sub-header">{PAGE_SUBTITLE}</p>', unsafe_allow_html=True)


def main():
    session = get_session()
    machine = session['machine']
    scheduler = session['scheduler']

    load_custom_css(machine.config.progress_transition_s)

    # Fire every stage boundary that has elapsed since the previous run
    scheduler.run_pending()
    plan = compose(machine.state, machine.config.stage_labels)

    if isinstance(plan, LoadingPlan):
        render_loading(plan)
        deadline = scheduler.next_deadline()
        if deadline is not None:
            time.sleep(max(0.0, deadline - scheduler.now()))
        st.rerun()
    elif isinstance(plan, FailedPlan):
        render_failed(plan)
    else:
        render_header()
        render_ready(plan, get_dispatcher())


main()
