"""Plotly chart of the ratio history, shared by the dashboard and HTML export."""

from datetime import tzinfo
from pathlib import Path

import plotly.graph_objects as go

from gold_silver_monitor.models import PriceSample, Timeframe
from gold_silver_monitor.tracker.history import to_frame


EMPTY_MESSAGE = "Waiting for data points..."

# Tick label formats per timeframe
TICK_FORMATS = {
    Timeframe.HOURLY: "%m/%d %H:%M",
    Timeframe.DAILY: "%b %d",
}


def build_ratio_figure(
    series: list[PriceSample],
    timeframe: Timeframe = Timeframe.HOURLY,
    tz: tzinfo | str | None = None,
) -> go.Figure:
    """Line chart of the ratio, with gold and silver prices in the hover."""
    fig = go.Figure()

    if not series:
        fig.add_annotation(
            text=EMPTY_MESSAGE,
            showarrow=False,
            font=dict(color="#64748b", size=14),
            xref="paper", yref="paper", x=0.5, y=0.5,
        )
    else:
        df = to_frame(series, tz)
        fig.add_trace(go.Scatter(
            x=df.index, y=df["ratio"].round(2),
            mode="lines+markers",
            line=dict(color="#fbbf24", width=3),
            marker=dict(size=6, color="#1e293b", line=dict(color="#fbbf24", width=1)),
            customdata=df[["gold", "silver"]].values,
            name="Ratio",
            hovertemplate=(
                "Ratio: %{y:.2f}<br>Gold: $%{customdata[0]:,.2f}"
                "<br>Silver: $%{customdata[1]:,.2f}<extra></extra>"
            ),
        ))

    subtitle = "Hourly Data" if timeframe is Timeframe.HOURLY else "Daily (last of day)"
    fig.update_layout(
        title=dict(text=f"Live Ratio Trend <span style='font-size:12px;color:#64748b'>{subtitle}</span>"),
        height=360,
        margin=dict(l=0, r=0, t=40, b=0),
        paper_bgcolor="#1e293b",
        plot_bgcolor="#1e293b",
        font=dict(color="#94a3b8"),
        xaxis=dict(
            showgrid=True, gridcolor="#334155", griddash="dash",
            tickformat=TICK_FORMATS[timeframe], visible=bool(series),
        ),
        yaxis=dict(showgrid=True, gridcolor="#334155", griddash="dash", visible=bool(series)),
        hovermode="x unified",
        showlegend=False,
    )
    return fig


def export_html(
    series: list[PriceSample],
    output_path: Path | str,
    timeframe: Timeframe = Timeframe.HOURLY,
    tz: tzinfo | str | None = None,
) -> Path:
    """Write the chart as a self-contained HTML file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = build_ratio_figure(series, timeframe, tz)
    fig.write_html(output_path, include_plotlyjs=True, full_html=True)
    return output_path
