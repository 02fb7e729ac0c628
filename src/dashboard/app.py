"""Streamlit dashboard for facility occupancy heatmaps.

Provides readings upload, capacity and threshold configuration, a
day-by-hour heatmap for overall and weekly views with a color legend,
and a table of the selected week's hourly summaries.
"""

from typing import Optional

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from src.analytics.heatmap_colors import COLOR_HEX, UtilizationColor
from src.analytics.heatmap_data import (
    TOOLTIP_KEYS,
    VIEWS,
    HeatmapDataProcessor,
    is_weekly_view,
)
from src.analytics.occupancy_processor import process_all_occupancy_data, summaries_to_records
from src.utils.date_utils import DAYS_OF_WEEK
from src.utils.i18n import make_translator
from src.utils.readings import parse_occupancy_csv


def build_heatmap_frame(
    processor: HeatmapDataProcessor,
    view: str,
    week_id: Optional[str],
    days: list[str],
    hours: list[int],
) -> pd.DataFrame:
    """Collect the cells of a view into a long-format DataFrame.

    Args:
        processor: Heatmap data processor over finalized maps.
        view: One of the heatmap view names.
        week_id: Selected week for weekly views.
        days: Weekday rows.
        hours: Hour columns.

    Returns:
        DataFrame with ``day``, ``hour``, ``fill``, ``text``, ``title`` and
        ``color`` columns, one row per cell.
    """
    rows = []
    for day in days:
        for hour in hours:
            cell = processor.cell(view, day, hour, week_id)
            rows.append(
                {
                    "day": day,
                    "hour": hour,
                    "fill": cell.color_fill_ratio,
                    "text": cell.display_text,
                    "title": cell.title,
                    "color": cell.color.value,
                }
            )
    return pd.DataFrame(rows, columns=["day", "hour", "fill", "text", "title", "color"])


def band_colorscale() -> list[list]:
    """Return a stepped plotly colorscale with one flat step per color band."""
    bands = list(UtilizationColor)
    scale = []
    for index, band in enumerate(bands):
        scale.append([index / len(bands), COLOR_HEX[band]])
        scale.append([(index + 1) / len(bands), COLOR_HEX[band]])
    return scale


def build_heatmap_figure(df: pd.DataFrame, days: list[str]) -> go.Figure:
    """Draw a heatmap frame with each cell in its utilization band color.

    Args:
        df: Output of :func:`build_heatmap_frame`.
        days: Row order, top to bottom.

    Returns:
        Plotly figure with the display text on the cells and the
        translated titles as hover text.
    """
    band_index = {band.value: index for index, band in enumerate(UtilizationColor)}
    frame = df.assign(band=df["color"].map(band_index))

    def grid(column: str) -> pd.DataFrame:
        return frame.pivot(index="day", columns="hour", values=column).reindex(days)

    bands = grid("band")
    fig = go.Figure(
        go.Heatmap(
            z=bands.values,
            x=[str(hour) for hour in bands.columns],
            y=list(bands.index),
            text=grid("text").values,
            texttemplate="%{text}",
            hovertext=grid("title").values,
            hovertemplate="%{hovertext}<extra></extra>",
            colorscale=band_colorscale(),
            zmin=-0.5,
            zmax=len(band_index) - 0.5,
            showscale=False,
            xgap=2,
            ygap=2,
        )
    )
    fig.update_layout(xaxis_title="Hour", yaxis_autorange="reversed")
    return fig


def main() -> None:
    """Entry point for the Streamlit dashboard."""
    st.set_page_config(page_title="Occupancy Heatmap", layout="wide")

    if "processed" not in st.session_state:
        st.session_state.processed = False
    if "weekly_map" not in st.session_state:
        st.session_state.weekly_map = None
    if "overall_map" not in st.session_state:
        st.session_state.overall_map = None

    st.title("Occupancy Heatmap Dashboard")

    with st.sidebar:
        st.header("Configuration")
        readings_file = st.file_uploader("Upload Readings (CSV)", type=["csv"])
        capacity = st.number_input("Maximum Capacity", min_value=1, value=100, step=1)
        high_threshold = st.slider("High Utilization Threshold (%)", 10, 100, 60, 5)
        view = st.selectbox("View", VIEWS)

    if readings_file is not None and st.button("Process Readings"):
        _run_processing(readings_file.getvalue().decode("utf-8"), int(capacity))

    tab1, tab2 = st.tabs(["Heatmap", "Weekly Details"])
    with tab1:
        _heatmap_tab(view, high_threshold)
    with tab2:
        _weekly_details_tab()


def _run_processing(csv_text: str, capacity: int) -> None:
    """Parse and aggregate uploaded readings into session state.

    Args:
        csv_text: Uploaded CSV content.
        capacity: Maximum capacity of the facility.
    """
    with st.spinner("Aggregating readings..."):
        readings = parse_occupancy_csv(csv_text)
        weekly_map, overall_map = process_all_occupancy_data(readings, capacity)

    st.session_state.weekly_map = weekly_map
    st.session_state.overall_map = overall_map
    st.session_state.processed = True
    st.success(f"Processed {len(readings)} readings across {len(weekly_map)} weeks")


def _heatmap_tab(view: str, high_threshold: int) -> None:
    """Render the heatmap of the selected view with its legend."""
    st.header("Heatmap")

    if not st.session_state.processed:
        st.info("Upload and process a readings file first")
        return

    weekly_map = st.session_state.weekly_map
    week_id = None
    if is_weekly_view(view):
        week_ids = weekly_map.week_ids()
        if not week_ids:
            st.info("No weekly data available")
            return
        week_id = st.selectbox("Week", week_ids, index=len(week_ids) - 1)

    processor = HeatmapDataProcessor(
        weekly_map,
        st.session_state.overall_map,
        high_threshold,
        TOOLTIP_KEYS[view],
        make_translator(),
    )
    df = build_heatmap_frame(processor, view, week_id, DAYS_OF_WEEK, list(range(24)))
    fig = build_heatmap_figure(df, DAYS_OF_WEEK)
    st.plotly_chart(fig, use_container_width=True)

    legend = processor.legend_items()
    cols = st.columns(len(legend))
    for col, item in zip(cols, legend):
        col.markdown(
            f"<span style='background:{COLOR_HEX[item.color]};padding:0 12px'>"
            f"</span> {item.label}",
            unsafe_allow_html=True,
        )


def _weekly_details_tab() -> None:
    """Render the hourly summaries of the selected week as a table."""
    st.header("Weekly Details")

    if not st.session_state.processed:
        st.info("Upload and process a readings file first")
        return

    weekly_map = st.session_state.weekly_map
    week_ids = weekly_map.week_ids()
    if not week_ids:
        st.info("No weekly data available")
        return

    week_id = st.selectbox("Week", week_ids, index=len(week_ids) - 1, key="details_week")
    records = [r for r in summaries_to_records(weekly_map) if r["week_id"] == week_id]
    st.dataframe(pd.DataFrame(records), use_container_width=True)


if __name__ == "__main__":
    main()
