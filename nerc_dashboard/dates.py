"""Conversion between fractional years on the line chart and calendar timestamps."""

from __future__ import annotations

import calendar
import math
from datetime import datetime, timedelta

import pandas as pd

from nerc_dashboard.data import BEGIN


def fractional_part(value: float) -> float:
    return value - math.floor(value)


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def date_from_fractional_year(value: float) -> datetime:
    """Turn e.g. ``2016.5`` into a timestamp inside 2016.

    The fraction of the year picks the day of year (1-based, so a fraction
    inside the first day lands on December 31st of the previous year); what
    is left of that day becomes the time of day, rounded to the nearest
    minute. The mapping never decreases as ``value`` grows.
    """
    year = math.trunc(value)
    day_value = fractional_part(value) * days_in_year(year)
    day_of_year = math.trunc(day_value)
    minutes = round(fractional_part(day_value) * 24 * 60)
    return datetime(year, 1, 1) + timedelta(days=day_of_year - 1, minutes=minutes)


def filter_by_begin(records: pd.DataFrame, start: datetime, end: datetime) -> pd.DataFrame:
    """Records whose begin timestamp lies in ``[start, end]``."""
    begin = records[BEGIN]
    return records[(begin >= pd.Timestamp(start)) & (begin <= pd.Timestamp(end))]
