"""Loading and normalisation of the NERC disturbance records and region boundaries."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import geopandas as gpd
import numpy as np
import pandas as pd

from nerc_dashboard.config import REGIONS

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"

EVENT_TYPE = "Event Type"
NERC_REGION = "NERC Region"
BEGIN_DATE = "Date Event Begin"
BEGIN_TIME = "Time Event Begin"
END_DATE = "Date of Restoration"
END_TIME = "Time of Restoration"
DEMAND_LOSS = "Demand Loss (MW)"
CUSTOMERS = "Number of Customers Affected"
YEAR = "Year"

BEGIN = "Begin"
END = "End"
DURATION = "Duration"
DEMAND_LOSS_MW = "demand_loss_mw"
CUSTOMERS_AFFECTED = "customers_affected"

TIMESTAMP_COLUMNS = [BEGIN_DATE, BEGIN_TIME, END_DATE, END_TIME]
REQUIRED_COLUMNS = [EVENT_TYPE, NERC_REGION, *TIMESTAMP_COLUMNS, DEMAND_LOSS, CUSTOMERS]

REGION_PROPERTY = "NERCregion"

EVENT_TYPE_MAP = {
    "Severe Weather/Transmission Interruption": "Severe Weather",
    "Severe Weather/Distribution Interruption": "Severe Weather",
    "Weather": "Severe Weather",
    "Sabotage - Operator Action(s)": "Sabotage",
    "Distribution Interruption ": "Distribution Interruption",
    "Sabotage ": "Sabotage",
    "Actual Physical Event": "Actual Physical Attack",
    " Vandalism": "Vandalism",
    "Vandalism ": "Vandalism",
    "Physical Attack": "Actual Physical Attack",
    "Transmission Interruption/Distribution Interruption": "Transmission Interruption",
    "Suspicious Activity ": "Suspicious Activity",
    "Severe Weather - Winter": "Severe Weather",
    "Severe Weather - Wind": "Severe Weather",
    "Severe Weather - Thunderstorms": "Severe Weather",
    "Natural Disaster/Transmission Interruption": "Natural Disaster",
    "Transmission Disruption": "Transmission Interruption",
    "Weather or Natural Disaster": "Severe Weather",
    "Suspected Physical Attack": "Suspicious Activity",
    "Potential Physical Attack": "Suspicious Activity",
    "Cyber Attack": "Cyber Event",
}

REGION_ALIASES = {
    "RF": "RFC",
    "SPP RE": "SPP",
    "PR": "",
    "SPP, SERC, TRE": "",
    "N/A": "",
}


class DataLoadError(Exception):
    pass


def normalize_event_type(label: str) -> str:
    return EVENT_TYPE_MAP.get(label, label)


def normalize_region(code: str) -> str:
    """Map a raw region code to one of the canonical regions, or ``""``."""
    code = REGION_ALIASES.get(code.strip(), code.strip())
    return code if code in REGIONS else ""


def parse_timestamps(dates: pd.Series, times: pd.Series) -> pd.Series:
    combined = dates.str.strip() + " " + times.str.strip()
    return pd.to_datetime(combined, format="mixed", errors="coerce")


def _contains_unknown(frame: pd.DataFrame, columns: Iterable[str]) -> pd.Series:
    mask = pd.Series(False, index=frame.index)
    for column in columns:
        mask |= frame[column].str.contains(UNKNOWN, regex=False)
    return mask


def derive_durations(frame: pd.DataFrame) -> pd.Series:
    """Restoration minus begin in milliseconds, ``"Unknown"`` if any timestamp is."""
    begin = parse_timestamps(frame[BEGIN_DATE], frame[BEGIN_TIME])
    end = parse_timestamps(frame[END_DATE], frame[END_TIME])
    unknown = _contains_unknown(frame, TIMESTAMP_COLUMNS) | begin.isna() | end.isna()
    millis = ((end - begin) / pd.Timedelta(milliseconds=1)).round().astype("Int64")
    return millis.astype(object).mask(unknown, UNKNOWN)


def derive_begin(frame: pd.DataFrame) -> pd.Series:
    """Begin timestamp; the date alone at midnight when only the time is unknown."""
    begin = parse_timestamps(frame[BEGIN_DATE], frame[BEGIN_TIME])
    date_only = pd.to_datetime(frame[BEGIN_DATE].str.strip(), format="mixed", errors="coerce")
    return begin.fillna(date_only)


def prepare_records(raw: pd.DataFrame) -> pd.DataFrame:
    missing = [column for column in REQUIRED_COLUMNS if column not in raw.columns]
    if missing:
        raise DataLoadError(f"record file lacks columns: {', '.join(missing)}")

    df = raw.copy()
    df[EVENT_TYPE] = df[EVENT_TYPE].map(normalize_event_type)
    df[NERC_REGION] = df[NERC_REGION].map(normalize_region)
    df[BEGIN] = derive_begin(df)
    df[END] = parse_timestamps(df[END_DATE], df[END_TIME])
    df[DURATION] = derive_durations(df)
    df[DEMAND_LOSS_MW] = pd.to_numeric(df[DEMAND_LOSS].str.replace(",", ""), errors="coerce")
    df[CUSTOMERS_AFFECTED] = pd.to_numeric(df[CUSTOMERS].str.replace(",", ""), errors="coerce")

    years = df[BEGIN].dt.year
    if YEAR in df.columns:
        years = pd.to_numeric(df[YEAR], errors="coerce").fillna(years)
    df[YEAR] = years.astype("Int64")

    unknown_regions = int((df[NERC_REGION] == "").sum())
    if unknown_regions:
        logger.debug("%d record(s) carry no usable NERC region", unknown_regions)
    return df


def load_records(path: Path) -> pd.DataFrame:
    try:
        raw = pd.read_csv(path, dtype=str, keep_default_na=False)
    except (OSError, ValueError, pd.errors.ParserError) as exc:
        raise DataLoadError(f"cannot read records from {path}: {exc}") from exc
    records = prepare_records(raw)
    logger.info("loaded %d disturbance records from %s", len(records), path)
    return records


def load_boundaries(path: Path) -> gpd.GeoDataFrame:
    # pyogrio reports unreadable sources as RuntimeError subclasses, fiona as ValueError
    try:
        boundaries = gpd.read_file(path)
    except (OSError, ValueError, RuntimeError) as exc:
        raise DataLoadError(f"cannot read region boundaries from {path}: {exc}") from exc
    if REGION_PROPERTY not in boundaries.columns:
        raise DataLoadError(f"boundary features in {path} lack the {REGION_PROPERTY!r} property")

    if boundaries.crs is None:
        boundaries = boundaries.set_crs("EPSG:4326")
    elif boundaries.crs.to_epsg() != 4326:
        boundaries = boundaries.to_crs("EPSG:4326")

    boundaries["region"] = boundaries[REGION_PROPERTY].astype(str)
    logger.info("loaded %d region boundaries from %s", len(boundaries), path)
    return boundaries


def display_value(value: object) -> str:
    if value is None or value == "" or (isinstance(value, float) and np.isnan(value)):
        return UNKNOWN
    return str(value)
