"""Shared fixtures: a handful of disturbance records and square region boundaries."""

import json

import pandas as pd
import pytest

from nerc_dashboard.bus import CATEGORY_SELECTED, REGION_SELECTED, EventBus
from nerc_dashboard.data import load_boundaries, prepare_records
from nerc_dashboard.geo import project_boundaries

COLUMNS = [
    "Event Type",
    "NERC Region",
    "Date Event Begin",
    "Time Event Begin",
    "Date of Restoration",
    "Time of Restoration",
    "Demand Loss (MW)",
    "Number of Customers Affected",
    "Year",
]

RAW_ROWS = [
    ["Severe Weather - Wind", "WECC", "1/5/2016", "10:00 AM", "1/5/2016", "2:00 PM", "100", "5,000", "2016"],
    ["Vandalism ", "RF", "3/10/2016", "8:30 AM", "3/10/2016", "9:30 AM", "", "", "2016"],
    ["Weather", "SERC", "7/1/2017", "Unknown", "7/2/2017", "Unknown", "Unknown", "Unknown", "2017"],
    ["Sabotage ", "SPP RE", "11/20/2017", "11:00 PM", "11/21/2017", "1:00 AM", "0", "0", "2017"],
    ["Fuel Supply Emergency", "PR", "2/2/2018", "6:00 AM", "2/2/2018", "7:00 AM", "", "", "2018"],
    ["Severe Weather/Transmission Interruption", "MRO", "6/15/2018", "4:00 PM", "6/16/2018", "4:00 PM", "250", "12,000", "2018"],
]

# lon/lat squares that do not touch each other
REGION_SQUARES = {
    "WECC": (-120, 35, -110, 45),
    "MRO": (-100, 40, -90, 48),
    "SPP": (-100, 30, -94, 38),
    "RFC": (-88, 37, -80, 43),
    "SERC": (-90, 30, -80, 36),
}


def raw_frame(rows=None):
    return pd.DataFrame(RAW_ROWS if rows is None else rows, columns=COLUMNS)


def raw_row(event_type, region, begin_date="1/1/2016", begin_time="1:00 AM",
            end_date="1/1/2016", end_time="3:00 AM", year="2016"):
    return [event_type, region, begin_date, begin_time, end_date, end_time, "", "", year]


def square_feature(region, bounds):
    min_x, min_y, max_x, max_y = bounds
    ring = [[min_x, min_y], [max_x, min_y], [max_x, max_y], [min_x, max_y], [min_x, min_y]]
    return {
        "type": "Feature",
        "properties": {"NERCregion": region},
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


@pytest.fixture()
def records():
    return prepare_records(raw_frame())


@pytest.fixture()
def csv_file(tmp_path):
    path = tmp_path / "nerc.csv"
    raw_frame().to_csv(path, index=False)
    return path


@pytest.fixture()
def geo_file(tmp_path):
    path = tmp_path / "combined.json"
    document = {
        "type": "FeatureCollection",
        "features": [square_feature(region, bounds) for region, bounds in REGION_SQUARES.items()],
    }
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture()
def projected(geo_file):
    return project_boundaries(load_boundaries(geo_file), 1200, 650)


@pytest.fixture()
def bus():
    return EventBus(CATEGORY_SELECTED, REGION_SELECTED)


@pytest.fixture()
def emitted(bus):
    """Payloads emitted on the bus, per event name."""
    seen = {CATEGORY_SELECTED: [], REGION_SELECTED: []}
    for name, payloads in seen.items():
        bus.register(name, payloads.append)
    return seen
