import html
from typing import Any, Dict, Optional

import folium
from folium.features import DivIcon, GeoJson
from geopandas import GeoDataFrame
from streamlit_folium import st_folium

from aggregation import CountrySummary, has_coordinates
from config import LAND_FILL_COLOR, LAND_STROKE_COLOR, MAP_HEIGHT, MARKER_COLOR
from plotting import marker_radius, plottable
from ui import format_number

# --- Constants ---
DEFAULT_MAP_LOCATION = [20.0, 0.0]
DEFAULT_ZOOM = 2
FALLBACK_TILES = "OpenStreetMap"
# Callout elbow, in degrees: down from the country, then left to the label
CALLOUT_DROP = 10.0
CALLOUT_RUN = 20.0

# --- Helper Functions ---

def style_function(feature: Dict[str, Any]) -> Dict[str, Any]:
    """Flat grey land with dark borders for the country polygons."""
    return {
        'fillColor': LAND_FILL_COLOR,
        'color': LAND_STROKE_COLOR,
        'weight': 0.5,
        'fillOpacity': 1.0,
    }


def tooltip_html(summary: CountrySummary) -> str:
    return (
        f"{html.escape(summary.country)}<br>Confirmed: {format_number(summary.total_confirmed)}"
        f"<br>Deaths: {format_number(summary.total_deaths)}"
    )


def add_callout(m: folium.Map, top: CountrySummary) -> None:
    """Draws an elbow connector from the top country to its label."""
    elbow = [top.mean_lat - CALLOUT_DROP, top.mean_lon]
    end = [top.mean_lat - CALLOUT_DROP, top.mean_lon - CALLOUT_RUN]
    folium.PolyLine(
        locations=[[top.mean_lat, top.mean_lon], elbow, end],
        color=MARKER_COLOR,
        weight=1.5,
    ).add_to(m)
    label = (
        f'<div style="color: {MARKER_COLOR}; font-weight: bold; white-space: nowrap;">'
        f'Covid-19<br><span style="font-weight: normal;">'
        f'Highest confirmed cases: {html.escape(top.country)}</span></div>'
    )
    folium.Marker(
        location=end,
        icon=DivIcon(html=label, icon_size=(220, 36), icon_anchor=(220, 0)),
    ).add_to(m)

# --- Main Map Creation Function ---

def build_interactive_map(
    summaries: Dict[str, CountrySummary],
    top: Optional[CountrySummary],
    world: Optional[GeoDataFrame] = None,
) -> folium.Map:
    """
    Creates a Folium map with one circle marker per country.

    Args:
        summaries: Country summaries of the current snapshot.
        top: The country to annotate, usually ``aggregation.top_country(summaries)``.
        world: Country boundaries for the base layer; skipped when None.

    Returns:
        The assembled folium.Map.
    """
    has_outlines = world is not None and not world.empty
    # Grey country outlines stand in for a basemap; tiles only when they are unavailable
    m = folium.Map(
        location=DEFAULT_MAP_LOCATION,
        zoom_start=DEFAULT_ZOOM,
        tiles=None if has_outlines else FALLBACK_TILES,
    )

    if has_outlines:
        GeoJson(world, style_function=style_function, name="countries").add_to(m)

    for summary in plottable(summaries):
        folium.CircleMarker(
            location=[summary.mean_lat, summary.mean_lon],
            radius=marker_radius(summary.total_confirmed),
            color=MARKER_COLOR,
            weight=1,
            fill=True,
            fill_color=MARKER_COLOR,
            fill_opacity=0.6,
            tooltip=tooltip_html(summary),
        ).add_to(m)

    if top is not None and has_coordinates(top):
        add_callout(m, top)

    return m


def render_interactive_map(
    summaries: Dict[str, CountrySummary],
    top: Optional[CountrySummary],
    world: Optional[GeoDataFrame] = None,
    key: Optional[str] = None,
) -> None:
    """Displays the interactive map in the current Streamlit container."""
    m = build_interactive_map(summaries, top, world)
    st_folium(m, use_container_width=True, height=MAP_HEIGHT * 2 // 3, returned_objects=[], key=key)
