# schemas.py
"""Data validation schemas for the COVID-19 dashboard."""

import pandera as pa
from pandera.typing import Series


class SnapshotSchema(pa.DataFrameModel):
    """Schema for one coerced daily snapshot table."""
    Country_Region: Series[str] = pa.Field(nullable=False)
    Confirmed: Series[int] = pa.Field(nullable=False, ge=0)
    Deaths: Series[int] = pa.Field(nullable=False, ge=0)
    Lat: Series[float] = pa.Field(nullable=True)
    Long_: Series[float] = pa.Field(nullable=True)


class CountrySummarySchema(pa.DataFrameModel):
    """Schema for the per-country summary table offered for download."""
    country: Series[str] = pa.Field(nullable=False, unique=True)
    total_confirmed: Series[int] = pa.Field(nullable=False, ge=0)
    total_deaths: Series[int] = pa.Field(nullable=False, ge=0)
    mean_lat: Series[float] = pa.Field(nullable=True)
    mean_lon: Series[float] = pa.Field(nullable=True)


snapshot_schema = SnapshotSchema
country_summary_schema = CountrySummarySchema
