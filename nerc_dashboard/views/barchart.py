"""Bar chart of disturbance counts per event cause."""

from __future__ import annotations

import logging
import math
from functools import partial
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd
from bokeh.events import Tap
from bokeh.models import ColumnDataSource, FactorRange, HoverTool, LabelSet, Range1d
from bokeh.plotting import figure

from nerc_dashboard.bus import CATEGORY_SELECTED
from nerc_dashboard.config import BAR_COLOR
from nerc_dashboard.data import EVENT_TYPE, NERC_REGION
from nerc_dashboard.selection import NOT_SELECTED, SELECTED, CategorySelection, highlight_class
from nerc_dashboard.views.base import ChartView, ease_cubic

logger = logging.getLogger(__name__)

HIGHLIGHT_STYLE = {
    "": (0.8, 0.0),
    SELECTED: (1.0, 1.0),
    NOT_SELECTED: (0.25, 0.0),
}


def estimate_text_width(text: str, font_px: float) -> float:
    return len(text) * font_px * 0.6


def wrap_label(text: str, width: float, measure: Callable[[str], float]) -> List[str]:
    """Greedily pack words into lines no wider than ``width``."""
    lines: List[str] = []
    line: List[str] = []
    for word in text.split():
        line.append(word)
        if len(line) > 1 and measure(" ".join(line)) > width:
            line.pop()
            lines.append(" ".join(line))
            line = [word]
    if line:
        lines.append(" ".join(line))
    return lines


def group_by_category(records: pd.DataFrame) -> List[Tuple[str, int]]:
    """Counts per cause for records with a region, largest first."""
    located = records[records[NERC_REGION] != ""]
    counts = located.groupby(EVENT_TYPE, sort=False).size().sort_values(ascending=False, kind="stable")
    return [(str(category), int(count)) for category, count in counts.items()]


def region_breakdown(records: pd.DataFrame, category: str) -> List[Tuple[str, int]]:
    located = records[(records[NERC_REGION] != "") & (records[EVENT_TYPE] == category)]
    counts = located.groupby(NERC_REGION, sort=False).size().sort_values(ascending=False, kind="stable")
    return [(str(region), int(count)) for region, count in counts.items()]


def _empty_bars() -> Dict[str, list]:
    return dict(category=[], count=[], top=[], label=[], label_alpha=[], breakdown=[], highlight=[], alpha=[], line_alpha=[])


class BarChart(ChartView):
    def init_vis(self) -> None:
        self.groups: List[Tuple[str, int]] = []
        self.selection = CategorySelection()
        self.bar_width = 1 - self.config.padding_inner

        self.source = ColumnDataSource(data=_empty_bars())
        self.figure = figure(
            x_range=FactorRange(),
            y_range=Range1d(0, 1),
            x_axis_label="Event Causes",
            y_axis_label="Counts",
            tools="",
            toolbar_location=None,
        )
        self.apply_geometry()
        self.bars = self.figure.vbar(
            x="category",
            top="top",
            width=self.bar_width,
            source=self.source,
            fill_color=BAR_COLOR,
            fill_alpha="alpha",
            line_color=BAR_COLOR,
            line_alpha="line_alpha",
            line_width=2,
        )
        self.labels = LabelSet(
            x="category",
            y="count",
            text="label",
            text_alpha="label_alpha",
            source=self.source,
            text_font_size=f"{self.config.label_font_px}px",
            text_align="center",
            y_offset=5,
        )
        self.figure.add_layout(self.labels)
        self.figure.add_tools(
            HoverTool(
                renderers=[self.bars],
                tooltips=f"""
                    <div style="{self.tooltip_style()}">
                        <div class="tooltip-title"><b>@category</b></div>
                        <div class="tooltip-subtitle">Total: @count</div>
                        <ul class="tooltip-list">@breakdown{{safe}}</ul>
                    </div>
                """,
            )
        )
        self.figure.xgrid.grid_line_color = None
        self.figure.yaxis.minor_tick_line_color = None
        self.figure.on_event(Tap, self._on_tap)

    @property
    def band_step(self) -> float:
        return self.inner_width / max(len(self.groups), 1)

    def update(self) -> None:
        self.groups = group_by_category(self.data)
        step = self.band_step
        self.bar_width = min(1 - self.config.padding_inner, self.config.max_bar_width / step) if step else 0.0
        logger.debug("bar chart: %d causes from %d records", len(self.groups), len(self.data))
        self.render()

    def render(self) -> None:
        categories = [category for category, _ in self.groups]
        counts = [count for _, count in self.groups]

        self.figure.x_range.factors = categories
        self.figure.y_range.end = max(counts, default=0) or 1
        self.bars.glyph.width = self.bar_width

        bandwidth = self.band_step * (1 - self.config.padding_inner)
        measure = partial(estimate_text_width, font_px=self.config.label_font_px)
        self.figure.xaxis.major_label_overrides = {
            category: "\n".join(wrap_label(category, bandwidth, measure)) for category in categories
        }

        breakdowns = [
            "".join(
                f'<li class="tooltip-listItem">{region}: {count}</li>'
                for region, count in region_breakdown(self.data, category)
            )
            for category in categories
        ]
        self.source.data = dict(
            category=categories,
            count=counts,
            top=[0] * len(counts),
            label=[str(count) for count in counts],
            label_alpha=[0.0] * len(counts),
            breakdown=breakdowns,
            **self._highlight_columns(categories),
        )
        self.animate(max(self.config.bar_transition_ms, self.config.label_transition_ms), self._entrance_frame)

    def _entrance_frame(self, elapsed_ms: float) -> None:
        grow = ease_cubic(elapsed_ms / self.config.bar_transition_ms)
        fade = ease_cubic(elapsed_ms / self.config.label_transition_ms)
        counts = self.source.data["count"]
        self.source.data = {
            **self.source.data,
            "top": [count * grow for count in counts],
            "label_alpha": [fade] * len(counts),
        }

    def _highlight_columns(self, categories: List[str]) -> Dict[str, list]:
        classes = [highlight_class(self.selection, category) for category in categories]
        return dict(
            highlight=classes,
            alpha=[HIGHLIGHT_STYLE[cls][0] for cls in classes],
            line_alpha=[HIGHLIGHT_STYLE[cls][1] for cls in classes],
        )

    def category_at(self, x: Optional[float], y: Optional[float]) -> Optional[str]:
        """Cause whose bar contains the data-space point, if any."""
        if x is None or y is None or not self.groups:
            return None
        index = math.floor(x)
        if not 0 <= index < len(self.groups):
            return None
        if abs(x - (index + 0.5)) > self.bar_width / 2:
            return None
        category, count = self.groups[index]
        return category if 0 <= y <= count else None

    def click_category(self, category: str) -> None:
        self.bus.emit(CATEGORY_SELECTED, self.selection.toggled(category))

    def click_blank(self) -> None:
        self.bus.emit(CATEGORY_SELECTED, frozenset())

    def _on_tap(self, event: Tap) -> None:
        category = self.category_at(event.x, event.y)
        if category is None:
            self.click_blank()
        else:
            self.click_category(category)

    def on_category_selected(self, selected) -> None:
        self.selection = CategorySelection.of(selected)
        categories = list(self.source.data["category"])
        self.source.data = {**self.source.data, **self._highlight_columns(categories)}

    def on_region_selected(self, regions) -> None:
        pass
