# aggregation.py
"""
Per-country aggregation of a single snapshot.

A snapshot is a table of rows with the columns named in ``config.SNAPSHOT_COLUMNS``.
Field values may still be raw strings straight out of the CSV; the coercion
rules below are applied before any arithmetic:

- ``Confirmed`` / ``Deaths`` count as 0 unless they parse to a whole number
  between 0 and ``MAX_COUNT``. Fractions, negatives, overflowing values and
  non-finite values are all treated like text.
- ``Lat`` / ``Long_`` that are not finite numbers are treated as missing and
  skipped when averaging. A country with no usable coordinate gets NaN.
"""

from typing import Dict, Iterable, NamedTuple, Optional, Union

import numpy as np
import pandas as pd

from config import (
    CONFIRMED_COLUMN,
    COUNTRY_COLUMN,
    DEATHS_COLUMN,
    LAT_COLUMN,
    LON_COLUMN,
    SNAPSHOT_COLUMNS,
)
from logging_config import get_logger

logger = get_logger(__name__)

# Largest count kept exactly by a double, so sums stay exact in int64
MAX_COUNT = 2**53 - 1


class Row(NamedTuple):
    """One observation, in the column order of the daily report."""
    country: str
    confirmed: object
    deaths: object
    lat: object
    lon: object


class CountrySummary(NamedTuple):
    country: str
    total_confirmed: int
    total_deaths: int
    mean_lat: float
    mean_lon: float


class Totals(NamedTuple):
    grand_confirmed: int
    grand_deaths: int


class SnapshotSummary(NamedTuple):
    countries: Dict[str, CountrySummary]
    totals: Totals


Rows = Union[pd.DataFrame, Iterable[Row]]


def _to_numeric(values: pd.Series) -> pd.Series:
    # numpy result dtypes regardless of the reader's string dtype
    return pd.to_numeric(values.astype(object), errors="coerce")


def _coerce_count(values: pd.Series) -> pd.Series:
    numeric = _to_numeric(values)
    if numeric.dtype.kind not in "iuf":
        numeric = numeric.astype("float64")
    valid = numeric.notna() & (numeric >= 0) & (numeric <= MAX_COUNT)
    if numeric.dtype.kind == "f":
        valid &= np.isfinite(numeric) & (numeric == np.floor(numeric))
    return numeric.where(valid, 0).astype("int64")


def _coerce_coordinate(values: pd.Series) -> pd.Series:
    numeric = _to_numeric(values).astype("float64")
    return numeric.where(np.isfinite(numeric))


def coerce_snapshot(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Returns a copy of ``frame`` restricted to the snapshot columns with the
    numeric coercion rules applied. The input frame is left untouched.

    Raises:
        KeyError: if one of the snapshot columns is missing.
    """
    coerced = frame.loc[:, list(SNAPSHOT_COLUMNS)].copy()
    coerced[COUNTRY_COLUMN] = coerced[COUNTRY_COLUMN].fillna("").astype(str)
    coerced[CONFIRMED_COLUMN] = _coerce_count(coerced[CONFIRMED_COLUMN])
    coerced[DEATHS_COLUMN] = _coerce_count(coerced[DEATHS_COLUMN])
    coerced[LAT_COLUMN] = _coerce_coordinate(coerced[LAT_COLUMN])
    coerced[LON_COLUMN] = _coerce_coordinate(coerced[LON_COLUMN])
    return coerced.reset_index(drop=True)


def to_frame(rows: Rows) -> pd.DataFrame:
    """Builds a coerced snapshot table from a DataFrame or a sequence of Rows."""
    if isinstance(rows, pd.DataFrame):
        return coerce_snapshot(rows)
    frame = pd.DataFrame([tuple(row) for row in rows], columns=list(SNAPSHOT_COLUMNS))
    return coerce_snapshot(frame)


def _group_countries(frame: pd.DataFrame) -> Dict[str, CountrySummary]:
    grouped = frame.groupby(COUNTRY_COLUMN, sort=False).agg(
        total_confirmed=(CONFIRMED_COLUMN, "sum"),
        total_deaths=(DEATHS_COLUMN, "sum"),
        mean_lat=(LAT_COLUMN, "mean"),
        mean_lon=(LON_COLUMN, "mean"),
    )
    # itertuples keeps the int64 sums intact; iterrows would upcast them to float
    return {
        row.Index: CountrySummary(
            country=row.Index,
            total_confirmed=int(row.total_confirmed),
            total_deaths=int(row.total_deaths),
            mean_lat=float(row.mean_lat),
            mean_lon=float(row.mean_lon),
        )
        for row in grouped.itertuples()
    }


def _sum_totals(frame: pd.DataFrame) -> Totals:
    return Totals(
        grand_confirmed=int(frame[CONFIRMED_COLUMN].sum()),
        grand_deaths=int(frame[DEATHS_COLUMN].sum()),
    )


def aggregate(rows: Rows) -> Dict[str, CountrySummary]:
    """
    Groups rows by exact country name and reduces each group to a CountrySummary.

    The mapping has one entry per distinct country in the input. Its iteration
    order carries no meaning; use ``top_country`` for extremal lookups.
    """
    return _group_countries(to_frame(rows))


def totals(rows: Rows) -> Totals:
    """Grand confirmed/death sums across every row, independent of grouping."""
    return _sum_totals(to_frame(rows))


def summarize(rows: Rows) -> SnapshotSummary:
    """Computes ``aggregate`` and ``totals`` over a single coerced table."""
    frame = to_frame(rows)
    summary = SnapshotSummary(countries=_group_countries(frame), totals=_sum_totals(frame))
    logger.debug(
        "Snapshot summarized",
        rows=len(frame),
        countries=len(summary.countries),
        grand_confirmed=summary.totals.grand_confirmed,
        grand_deaths=summary.totals.grand_deaths,
    )
    return summary


def top_country(summaries: Dict[str, CountrySummary]) -> Optional[CountrySummary]:
    """The country with the most confirmed cases; ties go to the first name alphabetically."""
    return min(
        summaries.values(),
        key=lambda summary: (-summary.total_confirmed, summary.country),
        default=None,
    )


def has_coordinates(summary: CountrySummary) -> bool:
    return bool(np.isfinite(summary.mean_lat) and np.isfinite(summary.mean_lon))


def summaries_to_frame(summaries: Dict[str, CountrySummary]) -> pd.DataFrame:
    """Tabular view of the summaries, sorted by confirmed cases for display."""
    frame = pd.DataFrame(list(summaries.values()), columns=list(CountrySummary._fields))
    return frame.sort_values(
        ["total_confirmed", "country"], ascending=[False, True]
    ).reset_index(drop=True)
