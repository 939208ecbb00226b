import math
from typing import Dict, List, Optional

import plotly.graph_objects as go

from aggregation import CountrySummary, has_coordinates
from config import (
    LAND_FILL_COLOR,
    LAND_STROKE_COLOR,
    MAP_HEIGHT,
    MARKER_COLOR,
    MARKER_RADIUS_DIVISOR,
)
from ui import format_number


def marker_radius(confirmed: int) -> float:
    """Marker radius in pixels; the area grows linearly with confirmed cases."""
    return math.sqrt(max(confirmed, 0)) / MARKER_RADIUS_DIVISOR


def hover_text(summary: CountrySummary) -> str:
    return (
        f"{summary.country}<br>Confirmed: {format_number(summary.total_confirmed)}"
        f"<br>Deaths: {format_number(summary.total_deaths)}"
    )


def plottable(summaries: Dict[str, CountrySummary]) -> List[CountrySummary]:
    """Summaries that have a usable centroid, largest first so small markers stay on top."""
    points = [s for s in summaries.values() if has_coordinates(s)]
    return sorted(points, key=lambda s: (-s.total_confirmed, s.country))


def plot_world_map(
    summaries: Dict[str, CountrySummary],
    top: Optional[CountrySummary],
    date_label: str,
) -> go.Figure:
    """
    Generates a Mercator bubble map of confirmed cases per country with a
    callout on the country with the most confirmed cases.
    """
    points = plottable(summaries)
    fig = go.Figure()
    fig.add_trace(
        go.Scattergeo(
            lon=[p.mean_lon for p in points],
            lat=[p.mean_lat for p in points],
            text=[hover_text(p) for p in points],
            hoverinfo="text",
            mode="markers",
            name="Confirmed cases",
            # plotly sizes are diameters
            marker=dict(
                size=[2 * marker_radius(p.total_confirmed) for p in points],
                sizemode="diameter",
                color=MARKER_COLOR,
                opacity=0.7,
                line=dict(width=0.5, color="darkred"),
            ),
        )
    )

    if top is not None and has_coordinates(top):
        fig.add_trace(
            go.Scattergeo(
                lon=[top.mean_lon],
                lat=[top.mean_lat],
                mode="markers+text",
                text=[f"<b>Covid-19</b><br>Highest confirmed cases: {top.country}"],
                textposition="bottom left",
                textfont=dict(color=MARKER_COLOR, size=14),
                marker=dict(symbol="circle-open", size=14, color=MARKER_COLOR, line=dict(width=2)),
                hoverinfo="skip",
                showlegend=False,
            )
        )

    fig.update_geos(
        projection_type="mercator",
        showland=True,
        landcolor=LAND_FILL_COLOR,
        showcountries=True,
        countrycolor=LAND_STROKE_COLOR,
        lataxis_range=[-60, 85],
    )
    fig.update_layout(
        title=f"COVID-19 Confirmed Cases by Country ({date_label})",
        margin={"r": 0, "t": 40, "l": 0, "b": 0},
        height=MAP_HEIGHT,
        showlegend=False,
        template="plotly_white",
        font=dict(size=14),
    )
    return fig
