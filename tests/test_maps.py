import math

import folium
import geopandas as gpd
import plotly.graph_objects as go
import pytest
from shapely.geometry import box
from aggregation import CountrySummary, top_country
from map_view import build_interactive_map, tooltip_html
from plotting import hover_text, marker_radius, plot_world_map, plottable
from ui import format_number


@pytest.fixture
def summaries():
    return {
        "US": CountrySummary("US", 1_000_000, 60_000, 37.0, -95.0),
        "Italy": CountrySummary("Italy", 40_000, 5_000, 41.9, 12.6),
        "Nowhere": CountrySummary("Nowhere", 10, 0, math.nan, math.nan),
    }


def test_format_number():
    assert format_number(0) == "0"
    assert format_number(999) == "999"
    assert format_number(1234567) == "1,234,567"


def test_marker_radius_is_square_root_over_hundred():
    assert marker_radius(0) == 0
    assert marker_radius(10_000) == 1.0
    assert marker_radius(1_000_000) == 10.0


def test_plottable_skips_countries_without_coordinates(summaries):
    assert [s.country for s in plottable(summaries)] == ["US", "Italy"]


def test_hover_text(summaries):
    assert hover_text(summaries["Italy"]) == "Italy<br>Confirmed: 40,000<br>Deaths: 5,000"


def test_tooltip_escapes_country_name():
    summary = CountrySummary("Bosnia & Herzegovina", 1, 0, 44.0, 17.0)
    assert tooltip_html(summary).startswith("Bosnia &amp; Herzegovina<br>")


def test_plot_world_map_returns_figure_with_callout(summaries):
    fig = plot_world_map(summaries, top_country(summaries), "04-2020")

    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 2
    markers, callout = fig.data
    assert list(markers.lat) == [37.0, 41.9]
    assert list(markers.marker.size) == [20.0, 2 * math.sqrt(40_000) / 100]
    assert callout.text[0] == "<b>Covid-19</b><br>Highest confirmed cases: US"
    assert fig.layout.geo.projection.type == "mercator"


def test_plot_world_map_without_top(summaries):
    fig = plot_world_map(summaries, None, "04-2020")
    assert len(fig.data) == 1


def test_build_interactive_map(summaries):
    m = build_interactive_map(summaries, top_country(summaries))

    children = list(m._children.values())
    circles = [c for c in children if isinstance(c, folium.CircleMarker)]
    assert len(circles) == 2
    assert any(isinstance(c, folium.PolyLine) for c in children)
    assert any(isinstance(c, folium.Marker) for c in children)


def test_build_interactive_map_empty():
    m = build_interactive_map({}, None)
    children = list(m._children.values())
    assert not any(isinstance(c, (folium.CircleMarker, folium.PolyLine)) for c in children)


def test_interactive_map_uses_outlines_instead_of_tiles(summaries):
    world = gpd.GeoDataFrame(geometry=[box(-10, 35, 30, 60)], crs="EPSG:4326")
    m = build_interactive_map(summaries, None, world)

    children = list(m._children.values())
    assert not any(isinstance(c, folium.TileLayer) for c in children)
    assert any(isinstance(c, folium.GeoJson) for c in children)


def test_interactive_map_falls_back_to_open_tiles(summaries):
    m = build_interactive_map(summaries, None)

    tiles = [c for c in m._children.values() if isinstance(c, folium.TileLayer)]
    assert len(tiles) == 1
    assert "openstreetmap" in tiles[0].tiles
