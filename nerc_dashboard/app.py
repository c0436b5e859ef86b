"""Wiring of the three linked views into one Bokeh document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import geopandas as gpd
import pandas as pd
from bokeh.document import Document
from bokeh.layouts import column, row
from bokeh.models import Button, Div, LayoutDOM

from nerc_dashboard.bus import CATEGORY_SELECTED, REGION_SELECTED, EventBus
from nerc_dashboard.config import (
    CARD_STYLE,
    GEO_PATH,
    RECORDS_PATH,
    BarChartConfig,
    CartogramConfig,
    LineChartConfig,
)
from nerc_dashboard.data import DataLoadError, load_boundaries, load_records
from nerc_dashboard.geo import project_boundaries
from nerc_dashboard.views.barchart import BarChart
from nerc_dashboard.views.cartogram import Cartogram
from nerc_dashboard.views.linechart import LineChart

logger = logging.getLogger(__name__)

TITLE = "NERC Grid Disruptions 2015-2021"


@dataclass
class Dashboard:
    bus: EventBus
    bar_chart: BarChart
    cartogram: Cartogram
    line_chart: LineChart
    records: pd.DataFrame
    boundaries: gpd.GeoDataFrame
    layout: LayoutDOM


def _card(title: str, *children) -> LayoutDOM:
    return column(
        Div(text=f"<b>{title}</b>"),
        *children,
        sizing_mode="stretch_width",
        styles={**CARD_STYLE, "gap": "6px"},
    )


def _header() -> Div:
    return Div(
        text=f"""
            <div style='display:flex; flex-direction:column; gap:4px;'>
                <h2 style='margin:0; font-weight:600;'>{TITLE}</h2>
                <p style='margin:0; color:#475569;'>
                    Click a cause or a bubble to filter by event type, click a region to outline its cluster,
                    and drag across the yearly chart to restrict every view to a time window.
                </p>
            </div>
        """,
        sizing_mode="stretch_width",
        styles={**CARD_STYLE, "gap": "4px"},
    )


def build_dashboard(
    doc: Document, geo_path: Path = GEO_PATH, csv_path: Path = RECORDS_PATH
) -> Optional[Dashboard]:
    """Load both inputs and add the dashboard to ``doc``.

    Returns ``None``, leaving ``doc`` untouched, when either input fails to load.
    """
    try:
        boundaries = load_boundaries(geo_path)
        records = load_records(csv_path)
    except DataLoadError:
        logger.exception("dashboard not started: input data could not be loaded")
        return None

    cartogram_config = CartogramConfig()
    margin = cartogram_config.margin
    projected = project_boundaries(
        boundaries,
        cartogram_config.width - margin["left"] - margin["right"],
        cartogram_config.height - margin["top"] - margin["bottom"],
    )

    bus = EventBus(CATEGORY_SELECTED, REGION_SELECTED)
    cartogram = Cartogram(cartogram_config, records, projected, bus=bus, doc=doc)
    bar_chart = BarChart(BarChartConfig(), records, bus=bus, doc=doc)
    line_chart = LineChart(LineChartConfig(), records, dependents=[bar_chart, cartogram], bus=bus, doc=doc)

    for view in (bar_chart, cartogram):
        bus.register(CATEGORY_SELECTED, view.on_category_selected)
        bus.register(REGION_SELECTED, view.on_region_selected)

    for view in (bar_chart, cartogram, line_chart):
        view.update()

    clear_button = Button(label="Clear time brush", button_type="primary", width=160)
    clear_button.on_click(line_chart.clear_brush)

    layout = column(
        _header(),
        _card("Disturbances per year (drag to brush a time window)", line_chart.figure, clear_button),
        _card("Event causes", bar_chart.figure),
        row(_card("Disturbances by NERC region", cartogram.figure), sizing_mode="stretch_width"),
        sizing_mode="stretch_width",
        styles={"gap": "12px", "background-color": "#f1f5f9", "padding": "16px"},
    )
    doc.add_root(layout)
    doc.title = TITLE
    doc.theme = "light_minimal"
    logger.info("dashboard ready: %d records across %d regions", len(records), len(projected))

    return Dashboard(
        bus=bus,
        bar_chart=bar_chart,
        cartogram=cartogram,
        line_chart=line_chart,
        records=records,
        boundaries=projected,
        layout=layout,
    )
