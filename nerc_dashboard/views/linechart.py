"""Yearly disturbance counts with a time brush that filters the other views."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import pandas as pd
from bokeh.events import DoubleTap, SelectionGeometry
from bokeh.models import (
    BoxAnnotation,
    BoxSelectTool,
    ColumnDataSource,
    DatetimeAxis,
    FixedTicker,
    LabelSet,
    NumeralTickFormatter,
    Range1d,
)
from bokeh.plotting import figure

from nerc_dashboard.config import LINE_COLOR, POINT_COLOR
from nerc_dashboard.data import YEAR
from nerc_dashboard.dates import date_from_fractional_year, filter_by_begin
from nerc_dashboard.views.base import ChartView, LinearScale

logger = logging.getLogger(__name__)

CALENDAR_RANGE = "calendar"
# Years are drawn short of the right edge, leaving room for the last label.
TRAILING_GAP_PX = 100


def yearly_counts(records: pd.DataFrame) -> List[Tuple[int, int]]:
    counts = records[YEAR].dropna().astype(int).value_counts().sort_index()
    return [(int(year), int(count)) for year, count in counts.items()]


def _epoch_ms(moment: datetime) -> float:
    return (pd.Timestamp(moment) - pd.Timestamp("1970-01-01")) / pd.Timedelta(milliseconds=1)


def calendar_ticks(start: datetime, end: datetime, months: int) -> List[Tuple[float, str]]:
    """Ticks every ``months`` months; only every other one carries a label."""
    ticks = pd.date_range(start, end, freq=f"{months}MS")
    return [(_epoch_ms(tick), tick.strftime("%B %Y") if i % 2 == 1 else "") for i, tick in enumerate(ticks)]


class LineChart(ChartView):
    def __init__(self, config, data, dependents: Sequence[ChartView], bus=None, doc=None) -> None:
        self.dependents = list(dependents)
        super().__init__(config, data, bus, doc)

    def init_vis(self) -> None:
        self.yearly: List[Tuple[int, int]] = []
        self.brush_range: Optional[Tuple[datetime, datetime]] = None
        self.brush_data: Optional[pd.DataFrame] = None
        self.x_scale = LinearScale(range_=(0, self.inner_width - TRAILING_GAP_PX))

        self.source = ColumnDataSource(data=dict(year=[], count=[], label=[]))
        self.brush_tool = BoxSelectTool(dimensions="width", continuous=True)
        self.figure = figure(
            x_range=Range1d(0, 1),
            y_range=Range1d(0, 1),
            x_axis_label="Time",
            y_axis_label="Occurrence",
            tools=[self.brush_tool],
            toolbar_location=None,
        )
        self.apply_geometry()
        self.figure.toolbar.active_drag = self.brush_tool

        self.figure.line(x="year", y="count", source=self.source, line_color=LINE_COLOR, line_width=2.5)
        self.points = self.figure.scatter(
            x="year", y="count", source=self.source, size=10,
            fill_color=POINT_COLOR, fill_alpha=0.4, line_color=None,
        )
        self.brush_tool.renderers = [self.points]
        self.figure.add_layout(
            LabelSet(x="year", y="count", text="label", source=self.source,
                     x_offset=-7, y_offset=7, text_font_size="10px")
        )

        year_axis = self.figure.xaxis[0]
        year_axis.formatter = NumeralTickFormatter(format="0")
        year_axis.ticker.desired_num_ticks = 6
        self.figure.yaxis.ticker.desired_num_ticks = 8
        self.figure.grid.grid_line_alpha = 0.2

        config = self.config
        ticks = calendar_ticks(config.calendar_start, config.calendar_end, config.calendar_tick_months)
        self.figure.extra_x_ranges = {
            CALENDAR_RANGE: Range1d(start=_epoch_ms(config.calendar_start), end=_epoch_ms(config.calendar_end))
        }
        self.calendar_axis = DatetimeAxis(
            x_range_name=CALENDAR_RANGE,
            ticker=FixedTicker(ticks=[tick for tick, _ in ticks]),
            major_label_overrides={tick: label for tick, label in ticks},
            major_label_text_alpha=0.7,
        )
        self.figure.add_layout(self.calendar_axis, "above")

        self.brush_box = BoxAnnotation(fill_color="gray", fill_alpha=0.15, visible=False)
        self.figure.add_layout(self.brush_box)

        self.figure.on_event(SelectionGeometry, self._on_selection_geometry)
        self.figure.on_event(DoubleTap, self._on_clear)

    def update(self) -> None:
        self.yearly = yearly_counts(self.data)
        if self.yearly:
            first, last = float(self.yearly[0][0]), float(self.yearly[-1][0])
            if first == last:
                first, last = first - 0.5, last + 0.5
            self.x_scale.domain = (first, last)
        logger.debug("line chart: %d years from %d records", len(self.yearly), len(self.data))
        self.render()

    def render(self) -> None:
        years = [year for year, _ in self.yearly]
        counts = [count for _, count in self.yearly]
        self.source.data = dict(year=years, count=counts, label=[str(count) for count in counts])
        self.figure.x_range.start = self.x_scale.invert(0)
        self.figure.x_range.end = self.x_scale.invert(self.inner_width)
        self.figure.y_range.end = max(counts, default=0) or 1

    def brushed(self, selection: Optional[Sequence[float]]) -> None:
        """Brush given in pixels along the plot area, or ``None`` once cleared."""
        if selection is None:
            self.clear_brush()
            return
        start_px, end_px = selection
        self.brush_years(self.x_scale.invert(start_px), self.x_scale.invert(end_px))

    def brush_years(self, start_year: float, end_year: float) -> None:
        start_year, end_year = sorted((start_year, end_year))
        start = date_from_fractional_year(start_year)
        end = date_from_fractional_year(end_year)
        self.brush_range = (start, end)
        self.brush_data = filter_by_begin(self.data, start, end)
        logger.debug("brush %s .. %s keeps %d records", start, end, len(self.brush_data))

        self.brush_box.left = start_year
        self.brush_box.right = end_year
        self.brush_box.visible = True
        self._push(self.brush_data)

    def clear_brush(self) -> None:
        self.brush_range = None
        self.brush_data = None
        self.brush_box.visible = False
        self.source.selected.indices = []
        self._push(self.data)

    def _push(self, records: pd.DataFrame) -> None:
        for view in self.dependents:
            view.set_data(records)
            view.update()

    def _on_selection_geometry(self, event: SelectionGeometry) -> None:
        geometry = event.geometry
        if geometry.get("type") != "rect":
            return
        self.brush_years(geometry["x0"], geometry["x1"])

    def _on_clear(self, event) -> None:
        self.clear_brush()
