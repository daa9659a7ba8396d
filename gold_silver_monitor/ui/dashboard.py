"""Streamlit dashboard for the Gold/Silver ratio.

- Price cards: gold, silver, and the ratio
- Ratio chart with Hourly/Daily views
- On-demand AI market analysis with cited sources
"""

from pathlib import Path

import streamlit as st

from gold_silver_monitor.config import Settings
from gold_silver_monitor.data import GeminiFetcher, HistoryStore, SqliteKeyValueStore
from gold_silver_monitor.models import AnalysisResult, PriceSample, Timeframe
from gold_silver_monitor.tracker import HistoryController, IntervalTicker
from gold_silver_monitor.tracker.history import aggregate
from gold_silver_monitor.ui.chart import build_ratio_figure


# Seconds between re-renders of the live panel; fetches follow the refresh interval
RERENDER_SECONDS = 30


def format_card_value(value: float, is_currency: bool = True) -> str:
    """Format a card value as USD or as a plain two-decimal number."""
    if is_currency:
        return f"${value:,.2f}"
    return f"{value:.2f}"


def render_price_card(title: str, value: float, color: str, is_currency: bool = True) -> None:
    """Render one metric card."""
    st.markdown(
        f"""<div style="
            background: #1e293b;
            border: 1px solid #334155;
            border-radius: 12px;
            padding: 1.5rem;
            text-align: center;
        ">
            <div style="color: #94a3b8; font-size: 0.8rem; text-transform: uppercase; letter-spacing: 0.1em;">
                {title}
            </div>
            <div style="color: {color}; font-size: 2rem; font-weight: 700; margin-top: 0.5rem;">
                {format_card_value(value, is_currency)}
            </div>
        </div>""",
        unsafe_allow_html=True,
    )


def render_cards(current: PriceSample | None) -> None:
    col_gold, col_silver, col_ratio = st.columns(3)
    with col_gold:
        render_price_card("Gold Price (Oz)", current.gold_price if current else 0, "#facc15")
    with col_silver:
        render_price_card("Silver Price (Oz)", current.silver_price if current else 0, "#cbd5e1")
    with col_ratio:
        render_price_card(
            "Gold/Silver Ratio", current.ratio if current else 0, "#34d399", is_currency=False
        )


def render_analysis(analysis: AnalysisResult | None, has_data: bool) -> None:
    """Render the analysis text and its sources."""
    if analysis is None:
        hint = (
            "Click 'Generate Analysis' to get insights on the current ratio."
            if has_data
            else "Waiting for market data..."
        )
        st.markdown(
            f"<div style='color: #64748b; text-align: center; font-style: italic; padding: 2rem;'>{hint}</div>",
            unsafe_allow_html=True,
        )
        return

    st.write(analysis.text)
    if analysis.sources:
        st.caption("SOURCES")
        st.markdown("\n".join(f"- [{s.title}]({s.uri})" for s in analysis.sources))


# Controllers built by get_controller, by database path
_controllers: dict[Path, HistoryController] = {}


@st.cache_resource(show_spinner=False)
def get_controller(db_path: Path, _settings: Settings, _ticker=None) -> HistoryController:
    """
    Process-wide controller for one history database.

    All browser sessions share it, so only one ticker runs and one series is
    written. A controller replaced after a cache clear has its ticker stopped.
    """
    previous = _controllers.pop(db_path, None)
    if previous is not None:
        previous.close()

    store = HistoryStore(SqliteKeyValueStore(db_path))
    fetcher = GeminiFetcher(_settings)
    controller = HistoryController(store, fetcher, _settings)
    controller.start(_ticker or IntervalTicker(_settings.refresh_interval_ms / 1000))
    _controllers[db_path] = controller
    return controller


@st.fragment(run_every=RERENDER_SECONDS)
def render_live_panel(controller: HistoryController) -> None:
    """Cards, error banner and chart; re-run periodically to pick up ticker fetches."""
    if controller.error:
        st.error(controller.error)

    render_cards(controller.current)

    # Timeframe is a per-session view choice; the series itself is shared
    labels = {tf.label: tf for tf in Timeframe}
    current = st.session_state.get("timeframe", Timeframe.HOURLY)
    selected = st.radio(
        "Timeframe",
        options=list(labels.keys()),
        index=list(labels.values()).index(current),
        horizontal=True,
        label_visibility="collapsed",
    )
    timeframe = labels[selected]
    st.session_state["timeframe"] = timeframe

    st.plotly_chart(
        build_ratio_figure(
            aggregate(controller.history, timeframe, controller.tz), timeframe, controller.tz
        ),
        use_container_width=True,
    )


# =============================================================================
# MAIN APP
# =============================================================================

def main() -> None:
    """Main dashboard entry point."""
    st.set_page_config(
        page_title="Gold/Silver Monitor",
        page_icon="",
        layout="wide",
        initial_sidebar_state="collapsed",
    )

    st.markdown(
        """
        <style>
            .stApp { background-color: #0f172a; }
            .stMarkdown, .stText, p, span, label { color: #e2e8f0; }
            h1, h2, h3, h4 { color: #f1f5f9 !important; font-weight: 600 !important; }
            #MainMenu, footer, header { visibility: hidden; }
        </style>
        """,
        unsafe_allow_html=True,
    )

    settings = Settings()
    try:
        controller = get_controller(settings.db_path, settings)
    except ValueError as e:
        st.error(f"Configuration error: {e}")
        return

    col_title, col_button = st.columns([4, 1])
    with col_title:
        st.markdown(
            """<h1 style="margin: 0; color: #facc15;">Gold/Silver Monitor</h1>
            <div style="color: #94a3b8;">Real-time Ratio Calculator & Tracker</div>""",
            unsafe_allow_html=True,
        )
    with col_button:
        label = "Updating..." if controller.loading else "Update Now"
        if st.button(label, disabled=controller.loading, type="primary"):
            with st.spinner("Fetching live prices..."):
                controller.refresh()

    render_live_panel(controller)

    st.markdown("### AI Market Analysis")
    if st.button(
        "Analyzing..." if controller.analyzing else "Generate Analysis",
        disabled=controller.current is None or controller.analyzing,
    ):
        with st.spinner("Analyzing..."):
            controller.run_analysis()
    render_analysis(controller.analysis, controller.current is not None)

    st.caption(
        "Data is stored locally. Prices updated hourly. "
        "Disclaimer: Data provided by AI-powered search grounding. "
        "Not financial advice. Prices may be delayed."
    )


if __name__ == "__main__":
    main()
