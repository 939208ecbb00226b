import os
import time
from datetime import datetime
from io import StringIO
from typing import Optional

import geopandas as gpd
import pandas as pd
import pandera as pa
import requests
import streamlit as st

from aggregation import coerce_snapshot
from config import (
    CACHE_DIR,
    CACHE_EXPIRATION_SECONDS,
    DATA_DIR,
    REMOTE_SNAPSHOT_BASE_URL,
    REQUEST_TIMEOUT_SECONDS,
    SNAPSHOT_COLUMNS,
    WORLD_GEOJSON_PATH,
)
from logging_config import get_logger
from schemas import snapshot_schema

logger = get_logger(__name__)


class SnapshotLoadError(Exception):
    """Raised when the snapshot for a date label cannot be loaded as a whole."""

    def __init__(self, date_label: str, reason: str):
        super().__init__(f"Could not load snapshot {date_label}: {reason}")
        self.date_label = date_label
        self.reason = reason


def remote_file_name(date_label: str) -> str:
    """
    Maps a 'MM-YYYY' date label to the daily report published on the last day
    of that month, e.g. '04-2020' -> '04-30-2020.csv'.
    """
    try:
        month_start = datetime.strptime(date_label, "%m-%Y")
    except (TypeError, ValueError) as e:
        raise ValueError(f"Date label must look like 'MM-YYYY', got {date_label!r}") from e
    month_end = pd.Timestamp(month_start) + pd.offsets.MonthEnd(0)
    return f"{month_end.strftime('%m-%d-%Y')}.csv"


def _read_snapshot_csv(source, date_label: str) -> pd.DataFrame:
    # Everything is read as text so that numeric coercion stays explicit
    try:
        return pd.read_csv(source, dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise SnapshotLoadError(date_label, f"malformed CSV ({e})") from e


def _fetch_remote_snapshot(date_label: str, cache_dir: str) -> pd.DataFrame:
    """
    Downloads the daily report matching ``date_label``. Results are cached to a
    local Parquet file and reused until they expire.
    """
    if not REMOTE_SNAPSHOT_BASE_URL:
        raise SnapshotLoadError(date_label, "no local file and no remote source configured")

    cache_file_path = os.path.join(cache_dir, f"{date_label}.parquet")

    if os.path.exists(cache_file_path):
        file_mod_time = os.path.getmtime(cache_file_path)
        if (time.time() - file_mod_time) < CACHE_EXPIRATION_SECONDS:
            try:
                return pd.read_parquet(cache_file_path)
            except Exception as e:
                logger.warning("Could not read cache file, refetching", path=cache_file_path, error=str(e))

    try:
        url = REMOTE_SNAPSHOT_BASE_URL + remote_file_name(date_label)
    except ValueError as e:
        raise SnapshotLoadError(date_label, str(e)) from e

    logger.info("Fetching remote snapshot", date_label=date_label, url=url)
    try:
        response = requests.get(url, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        raise SnapshotLoadError(date_label, f"server error ({e.response.status_code})") from e
    except requests.exceptions.RequestException as e:
        raise SnapshotLoadError(date_label, f"download failed ({e})") from e

    df = _read_snapshot_csv(StringIO(response.text), date_label)
    if all(col in df.columns for col in SNAPSHOT_COLUMNS):
        _write_cache(df[list(SNAPSHOT_COLUMNS)], cache_dir, cache_file_path)
    return df


def _write_cache(df: pd.DataFrame, cache_dir: str, cache_file_path: str) -> None:
    # The cache is optional; a read-only disk or a Parquet error only costs a refetch
    try:
        os.makedirs(cache_dir, exist_ok=True)
        df.to_parquet(cache_file_path)
    except (OSError, ValueError, ImportError) as e:
        logger.warning("Could not write cache file", path=cache_file_path, error=str(e))


def validate_snapshot(raw: pd.DataFrame, date_label: str) -> pd.DataFrame:
    """Checks the required columns, applies numeric coercion and validates the result."""
    missing = [col for col in SNAPSHOT_COLUMNS if col not in raw.columns]
    if missing:
        raise SnapshotLoadError(date_label, f"missing columns {missing}")

    try:
        return snapshot_schema.validate(coerce_snapshot(raw))
    except pa.errors.SchemaError as e:
        raise SnapshotLoadError(date_label, f"validation failed ({e})") from e


def load_snapshot(date_label: str, data_dir: str = DATA_DIR, cache_dir: str = CACHE_DIR) -> pd.DataFrame:
    """
    Loads the snapshot table for one date label.

    The local file ``<data_dir>/<date_label>.csv`` is preferred; when it does not
    exist the matching daily report is fetched from the remote archive.

    Raises:
        SnapshotLoadError: if the snapshot is unavailable or malformed. No
            partial table is ever returned.
    """
    path = os.path.join(data_dir, f"{date_label}.csv")
    if os.path.exists(path):
        logger.info("Loading local snapshot", date_label=date_label, path=path)
        raw = _read_snapshot_csv(path, date_label)
    else:
        raw = _fetch_remote_snapshot(date_label, cache_dir)

    snapshot = validate_snapshot(raw, date_label)
    logger.info("Snapshot loaded", date_label=date_label, rows=len(snapshot))
    return snapshot


@st.cache_data(show_spinner=False)
def get_snapshot(date_label: str) -> pd.DataFrame:
    """Cached ``load_snapshot`` for the app; failures are not cached."""
    return load_snapshot(date_label)


@st.cache_data(show_spinner=False)
def get_world_geometry() -> Optional[gpd.GeoDataFrame]:
    """
    Loads the GeoJSON file for country boundaries.
    Cached indefinitely as it's a static file.
    """
    if not os.path.exists(WORLD_GEOJSON_PATH):
        st.warning(f"Country boundaries not found at {WORLD_GEOJSON_PATH}; showing markers only.")
        return None
    gdf = gpd.read_file(WORLD_GEOJSON_PATH)
    return gdf[["geometry"]]
