# -*- coding: utf-8 -*-
import streamlit as st
import warnings

# --- Custom Modules ---
from config import DATE_LABELS
from data_loader import SnapshotLoadError, get_snapshot, get_world_geometry
from logging_config import get_logger, setup_logging
from map_view import render_interactive_map
from pipeline import DashboardState, SnapshotRequests, update_dashboard
from plotting import plot_world_map
from ui import (
    display_download_button,
    display_header_and_about,
    display_timeline,
    display_totals,
    setup_page_config,
)

# Suppress warnings for a cleaner app
warnings.filterwarnings("ignore")

logger = get_logger(__name__)

REQUESTS_KEY = "snapshot_requests"


@st.cache_resource
def init_logging() -> None:
    """Configures logging once per server process."""
    setup_logging()


class DashboardView:
    """
    Render target for one snapshot: owns the placeholders for the totals and
    the maps, so a re-render replaces the previous snapshot instead of stacking on it.
    """

    def __init__(self):
        self.totals_slot = st.empty()
        self.map_slot = st.empty()

    def clear(self):
        self.totals_slot.empty()
        self.map_slot.empty()

    def render(self, state: DashboardState):
        with self.totals_slot.container():
            display_totals(state.totals)

        with self.map_slot.container():
            if not state.countries:
                st.warning(f"The snapshot for {state.date_label} has no rows.")
                return
            bubble_tab, interactive_tab = st.tabs(["Bubble Map", "Interactive Map"])
            with bubble_tab:
                fig = plot_world_map(state.countries, state.top, state.date_label)
                st.plotly_chart(fig, use_container_width=True)
            with interactive_tab:
                render_interactive_map(
                    state.countries, state.top, get_world_geometry(), key=f"map_{state.date_label}"
                )

        display_download_button(state.countries, state.date_label)


def main() -> None:
    """Main function to run the Streamlit application."""
    init_logging()
    setup_page_config()
    display_header_and_about()

    if REQUESTS_KEY not in st.session_state:
        st.session_state[REQUESTS_KEY] = SnapshotRequests()
    snapshot_requests = st.session_state[REQUESTS_KEY]

    date_label = display_timeline(DATE_LABELS)
    st.header(f"Snapshot: {date_label}")

    view = DashboardView()
    ticket = snapshot_requests.issue(date_label)
    try:
        with st.spinner(f"Loading data for {date_label}..."):
            update_dashboard(ticket, snapshot_requests, view, get_snapshot)
    except SnapshotLoadError as e:
        logger.error("Snapshot unavailable", date_label=e.date_label, reason=e.reason)
        st.error(f"Data for {e.date_label} is unavailable: {e.reason}")
        st.stop()

    st.markdown("---")
    st.markdown("Data Source: [JHU CSSE COVID-19 Data](https://github.com/CSSEGISandData/COVID-19)")


if __name__ == "__main__":
    main()
