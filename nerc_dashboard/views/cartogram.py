"""Dorling cartogram: one packed bubble cluster per NERC region."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import geopandas as gpd
import numpy as np
import pandas as pd
from bokeh.events import Tap
from bokeh.models import BooleanFilter, CDSView, ColumnDataSource, HoverTool, Range1d
from bokeh.plotting import figure

from nerc_dashboard.bus import CATEGORY_SELECTED, REGION_SELECTED
from nerc_dashboard.config import BOUNDARY_COLOR, HOVER_STROKE_COLOR, REGION_COLOR_MAP, ForceSettings
from nerc_dashboard.data import (
    BEGIN_DATE,
    BEGIN_TIME,
    CUSTOMERS,
    DEMAND_LOSS,
    DURATION,
    END_DATE,
    END_TIME,
    EVENT_TYPE,
    NERC_REGION,
    UNKNOWN,
    display_value,
)
from nerc_dashboard.forces import ClusterNode, relax
from nerc_dashboard.geo import boundary_patches, region_anchors, region_at
from nerc_dashboard.packing import Circle, pack_enclose, pack_siblings
from nerc_dashboard.selection import NOT_SELECTED, SELECTED, CategorySelection, highlight_class
from nerc_dashboard.views.base import ChartView, sqrt_scale

logger = logging.getLogger(__name__)

FILL_ALPHA = {"": 0.8, SELECTED: 0.9, NOT_SELECTED: 0.15}

TOOLTIP_FIELDS = [
    ("Begin", "begin"),
    ("End", "end"),
    ("Event Type", "event_type"),
    ("Demand Loss (MW)", "demand_loss"),
    ("Number of Customers Affected", "customers"),
]


def located_records(records: pd.DataFrame) -> pd.DataFrame:
    """Records with a known duration and a canonical region."""
    return records[(records[DURATION] != UNKNOWN) & (records[NERC_REGION] != "")]


def _empty_events() -> Dict[str, list]:
    return dict(
        x=[], y=[], r=[], color=[], region=[], event_type=[], begin=[], end=[],
        demand_loss=[], customers=[], highlight=[], alpha=[],
    )


class Cartogram(ChartView):
    def __init__(
        self,
        config,
        data,
        boundaries: gpd.GeoDataFrame,
        bus=None,
        doc=None,
        force_settings: Optional[ForceSettings] = None,
    ) -> None:
        self.boundaries = boundaries
        self.anchors = region_anchors(boundaries)
        self.force_settings = force_settings or ForceSettings()
        super().__init__(config, data, bus, doc)

    def init_vis(self) -> None:
        self.records = located_records(self.data)
        self.clusters: List[ClusterNode] = []
        self.selection = CategorySelection()
        self.selected_regions = frozenset()

        self.figure = figure(
            x_range=Range1d(0, self.inner_width),
            y_range=Range1d(0, self.inner_height),
            tools="",
            toolbar_location=None,
        )
        self.apply_geometry()
        self.figure.axis.visible = False
        self.figure.grid.visible = False
        self.figure.outline_line_color = None

        self.boundary_source = ColumnDataSource(data=boundary_patches(self.boundaries))
        self.figure.patches(xs="xs", ys="ys", source=self.boundary_source, fill_color=None, line_color=BOUNDARY_COLOR)

        self.cluster_source = ColumnDataSource(data=dict(x=[], y=[], r=[], region=[], color=[], line_width=[]))
        self.figure.circle(
            x="x", y="y", radius="r", source=self.cluster_source,
            fill_color=None, line_color="color", line_width="line_width", line_alpha=0.6,
        )

        self.event_source = ColumnDataSource(data=_empty_events())
        self.active_filter = BooleanFilter(booleans=[])
        self.inert_filter = BooleanFilter(booleans=[])
        self.active_circles = self.figure.circle(
            x="x", y="y", radius="r", source=self.event_source, view=CDSView(filter=self.active_filter),
            fill_color="color", fill_alpha="alpha",
            line_color=HOVER_STROKE_COLOR, line_alpha=0, line_width=1,
            hover_fill_color="color", hover_fill_alpha="alpha",
            hover_line_color=HOVER_STROKE_COLOR, hover_line_alpha=1, hover_line_width=1,
        )
        self.inert_circles = self.figure.circle(
            x="x", y="y", radius="r", source=self.event_source, view=CDSView(filter=self.inert_filter),
            fill_color="color", fill_alpha="alpha", line_color=None,
        )
        items = "".join(f'<li class="tooltip-listItem">{label}: @{field}</li>' for label, field in TOOLTIP_FIELDS)
        self.figure.add_tools(
            HoverTool(
                renderers=[self.active_circles],
                tooltips=f'<div style="{self.tooltip_style()}"><ul class="tooltip-list">{items}</ul></div>',
            )
        )
        self.figure.on_event(Tap, self._on_tap)

    @property
    def center(self):
        return self.inner_width / 2, self.inner_height / 2

    def radius_for(self, durations: pd.Series) -> pd.Series:
        if durations.empty:
            return durations
        domain = (durations.min(), durations.max())
        radii = sqrt_scale(durations, domain, (self.config.min_radius, self.config.max_radius))
        return pd.Series(radii, index=durations.index)

    def layout_clusters(self, records: pd.DataFrame) -> List[ClusterNode]:
        """Pack each region's bubbles, then spread the regions around their anchors."""
        radii = self.radius_for(records[DURATION].astype(float))
        clusters = []
        for region, group in records.groupby(NERC_REGION, sort=False):
            circles = [Circle(radii[label], data=label) for label in group.index]
            pack_siblings(circles)
            enclosing = pack_enclose(circles)
            anchor = self.anchors.get(region)
            if anchor is None:
                logger.warning("no boundary feature for region %s; anchoring at canvas centre", region)
                anchor = self.center
            clusters.append(ClusterNode(region, enclosing.r, anchor[0], anchor[1], data=circles))
        relax(clusters, self.center, self.force_settings)
        return clusters

    def update(self) -> None:
        self.records = located_records(self.data)
        self.clusters = self.layout_clusters(self.records)
        logger.debug("cartogram: %d regions, %d bubbles", len(self.clusters), len(self.records))
        self.render()

    def render(self) -> None:
        self.cluster_source.data = dict(
            x=[cluster.x for cluster in self.clusters],
            y=[cluster.y for cluster in self.clusters],
            r=[cluster.r for cluster in self.clusters],
            region=[cluster.key for cluster in self.clusters],
            color=[REGION_COLOR_MAP.get(cluster.key, BOUNDARY_COLOR) for cluster in self.clusters],
            line_width=self._region_line_widths([cluster.key for cluster in self.clusters]),
        )

        events = _empty_events()
        for cluster in self.clusters:
            for circle in cluster.data:
                record = self.records.loc[circle.data]
                events["x"].append(cluster.x + circle.x)
                events["y"].append(cluster.y + circle.y)
                events["r"].append(circle.r)
                events["color"].append(REGION_COLOR_MAP.get(cluster.key, BOUNDARY_COLOR))
                events["region"].append(cluster.key)
                events["event_type"].append(record[EVENT_TYPE])
                events["begin"].append(f"{record[BEGIN_DATE]} {record[BEGIN_TIME]}")
                events["end"].append(f"{record[END_DATE]} {record[END_TIME]}")
                events["demand_loss"].append(display_value(record[DEMAND_LOSS]))
                events["customers"].append(display_value(record[CUSTOMERS]))
        events.update(self._selection_columns(events["event_type"]))
        self._set_filters(events["event_type"])
        self.event_source.data = events

    def _selection_columns(self, event_types: List[str]) -> Dict[str, list]:
        classes = [highlight_class(self.selection, event_type) for event_type in event_types]
        return dict(highlight=classes, alpha=[FILL_ALPHA[cls] for cls in classes])

    def _set_filters(self, event_types: List[str]) -> None:
        active = [self.selection.is_active(event_type) for event_type in event_types]
        self.active_filter.booleans = active
        self.inert_filter.booleans = [not flag for flag in active]

    def _region_line_widths(self, regions: List[str]) -> List[float]:
        return [3.0 if region in self.selected_regions else 1.0 for region in regions]

    def circle_at(self, x: Optional[float], y: Optional[float]) -> Optional[int]:
        """Row of the active bubble under the point, if any."""
        if x is None or y is None:
            return None
        data = self.event_source.data
        if not len(data["x"]):
            return None
        dist2 = (np.asarray(data["x"]) - x) ** 2 + (np.asarray(data["y"]) - y) ** 2
        inside = (dist2 <= np.asarray(data["r"]) ** 2) & np.asarray(self.active_filter.booleans, dtype=bool)
        if not inside.any():
            return None
        return int(np.where(inside, dist2, np.inf).argmin())

    def click_circle(self, event_type: str) -> None:
        selected = self.selection.released(event_type)
        if selected is not None:
            self.bus.emit(CATEGORY_SELECTED, selected)

    def click_region(self, region: Optional[str]) -> None:
        if region is None or self.selected_regions == {region}:
            self.bus.emit(REGION_SELECTED, frozenset())
        else:
            self.bus.emit(REGION_SELECTED, frozenset({region}))

    def _on_tap(self, event: Tap) -> None:
        row = self.circle_at(event.x, event.y)
        if row is not None:
            self.click_circle(self.event_source.data["event_type"][row])
        elif event.x is not None and event.y is not None:
            self.click_region(region_at(self.boundaries, event.x, event.y))

    def on_category_selected(self, selected) -> None:
        self.selection = CategorySelection.of(selected)
        event_types = list(self.event_source.data["event_type"])
        self._set_filters(event_types)
        self.event_source.data = {**self.event_source.data, **self._selection_columns(event_types)}

    def on_region_selected(self, regions) -> None:
        self.selected_regions = frozenset(regions or ())
        regions_drawn = list(self.cluster_source.data["region"])
        self.cluster_source.data = {**self.cluster_source.data, "line_width": self._region_line_widths(regions_drawn)}
