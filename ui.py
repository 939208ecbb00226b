# -*- coding: utf-8 -*-
"""
This module contains the UI components for the Streamlit application.
"""
from typing import Dict, Sequence

import streamlit as st

from aggregation import CountrySummary, Totals, summaries_to_frame
from schemas import country_summary_schema

DATE_LABEL_KEY = "date_label"


def format_number(num: int) -> str:
    """Formats an integer with thousands separators, e.g. 1234567 -> '1,234,567'."""
    return f"{int(num):,}"


def setup_page_config():
    """Sets the Streamlit page configuration."""
    st.set_page_config(
        page_title="COVID-19 Global Dashboard",
        page_icon="🦠",
        layout="wide",
    )


def display_header_and_about():
    """Displays the main title and the 'About' expander."""
    st.title("COVID-19 Global Dashboard")
    st.markdown(
        "Confirmed cases and deaths by country for a selected month. "
        "Pick a date on the timeline to reload the map."
    )
    with st.expander("About the data"):
        st.markdown(
            """
            - **Source:** Johns Hopkins CSSE daily reports, one report per selected month.
            - **Markers:** one per country, placed at the average of its reported locations.
              The marker radius grows with the square root of confirmed cases.
            - **Totals:** summed over every row of the report, including sub-national rows.
            """
        )


def _select_date(date_label: str):
    st.session_state[DATE_LABEL_KEY] = date_label


def display_timeline(date_labels: Sequence[str]) -> str:
    """
    Renders one button per date label.

    Returns:
        str: The currently selected date label (the first one until a button is clicked).
    """
    if DATE_LABEL_KEY not in st.session_state:
        st.session_state[DATE_LABEL_KEY] = date_labels[0]

    columns = st.columns(len(date_labels))
    for column, date_label in zip(columns, date_labels):
        column.button(
            date_label,
            key=f"timeline_{date_label}",
            type="primary" if date_label == st.session_state[DATE_LABEL_KEY] else "secondary",
            on_click=_select_date,
            args=(date_label,),
            use_container_width=True,
        )
    return st.session_state[DATE_LABEL_KEY]


def display_totals(totals: Totals):
    """Shows the grand totals of the current snapshot."""
    col1, col2 = st.columns(2)
    with col1:
        st.metric(label="Total Confirmed Cases", value=format_number(totals.grand_confirmed))
    with col2:
        st.metric(label="Total Deaths", value=format_number(totals.grand_deaths))


def display_download_button(summaries: Dict[str, CountrySummary], date_label: str):
    """
    Renders the download button in the sidebar.

    Args:
        summaries (dict): Country summaries of the current snapshot.
        date_label (str): The selected date label.
    """
    if not summaries:
        return
    table = country_summary_schema.validate(summaries_to_frame(summaries))
    st.sidebar.download_button(
        label="Download Country Summary (CSV)",
        data=table.to_csv(index=False).encode("utf-8"),
        file_name=f"covid_summary_{date_label}.csv",
        mime="text/csv",
        key="download_button",
    )
