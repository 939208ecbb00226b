# config.py

"""
Central configuration file for the COVID-19 snapshot dashboard.
This file stores constants and settings to make the application more maintainable.
"""

import os
from typing import Final, Tuple

# Local directory holding one CSV per date label (e.g. "Data/04-2020.csv")
DATA_DIR: Final[str] = "Data"

# Date labels shown on the timeline, in display order
DATE_LABELS: Final[Tuple[str, ...]] = (
    "04-2020", "07-2020", "10-2020", "11-2020",
    "04-2021", "07-2021", "10-2021", "11-2021",
    "04-2022", "07-2022", "10-2022", "11-2022",
    "01-2023",
)

# Column names of the daily report format
COUNTRY_COLUMN: Final[str] = "Country_Region"
CONFIRMED_COLUMN: Final[str] = "Confirmed"
DEATHS_COLUMN: Final[str] = "Deaths"
LAT_COLUMN: Final[str] = "Lat"
LON_COLUMN: Final[str] = "Long_"
SNAPSHOT_COLUMNS: Final[Tuple[str, ...]] = (
    COUNTRY_COLUMN, CONFIRMED_COLUMN, DEATHS_COLUMN, LAT_COLUMN, LON_COLUMN,
)

# JHU CSSE daily reports, used when a snapshot is not available locally
REMOTE_SNAPSHOT_BASE_URL: Final[str] = (
    "https://raw.githubusercontent.com/CSSEGISandData/COVID-19/master/"
    "csse_covid_19_data/csse_covid_19_daily_reports/"
)
REQUEST_TIMEOUT_SECONDS: Final[int] = 60
CACHE_DIR: Final[str] = "cache"
CACHE_EXPIRATION_SECONDS: Final[int] = 7 * 24 * 60 * 60  # 7 days

# Country boundaries for the interactive map base layer
WORLD_GEOJSON_PATH: Final[str] = os.path.join(DATA_DIR, "world_countries.geojson")

# Map rendering
MARKER_RADIUS_DIVISOR: Final[float] = 100.0
MARKER_COLOR: Final[str] = "red"
LAND_FILL_COLOR: Final[str] = "#cccccc"
LAND_STROKE_COLOR: Final[str] = "#333333"
MAP_WIDTH: Final[int] = 1200
MAP_HEIGHT: Final[int] = 800

# Logging
LOG_LEVEL: Final[str] = os.environ.get("COVID_DASHBOARD_LOG_LEVEL", "INFO")
LOG_FORMAT: Final[str] = os.environ.get("COVID_DASHBOARD_LOG_FORMAT", "text")
