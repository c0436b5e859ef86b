"""Projection of the region boundaries onto the cartogram canvas."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import geopandas as gpd
from shapely.geometry import MultiPolygon, Point, Polygon

from nerc_dashboard.config import PROJECTED_CRS

logger = logging.getLogger(__name__)


def project_boundaries(boundaries: gpd.GeoDataFrame, width: float, height: float) -> gpd.GeoDataFrame:
    """Project, fit into ``width`` x ``height`` and attach the projected centroids."""
    if boundaries.crs is None:
        boundaries = boundaries.set_crs("EPSG:4326", allow_override=True)
    projected = boundaries.to_crs(PROJECTED_CRS)

    min_x, min_y, max_x, max_y = projected.total_bounds
    span_x, span_y = max_x - min_x, max_y - min_y
    scale = min(width / span_x if span_x else 1.0, height / span_y if span_y else 1.0)
    offset_x = (width - span_x * scale) / 2 - min_x * scale
    offset_y = (height - span_y * scale) / 2 - min_y * scale

    fitted = projected.copy()
    fitted["geometry"] = projected.geometry.affine_transform([scale, 0, 0, scale, offset_x, offset_y])
    centroids = fitted.geometry.centroid
    fitted["cx"] = centroids.x
    fitted["cy"] = centroids.y
    return fitted


def region_anchors(projected: gpd.GeoDataFrame) -> Dict[str, Tuple[float, float]]:
    return {row.region: (row.cx, row.cy) for row in projected.itertuples()}


def _polygons(geometry) -> List[Polygon]:
    if isinstance(geometry, Polygon):
        return [geometry]
    if isinstance(geometry, MultiPolygon):
        return list(geometry.geoms)
    return []


def boundary_patches(projected: gpd.GeoDataFrame) -> Dict[str, list]:
    xs, ys, regions = [], [], []
    for row in projected.itertuples():
        for polygon in _polygons(row.geometry):
            ring_x, ring_y = polygon.exterior.xy
            xs.append(list(ring_x))
            ys.append(list(ring_y))
            regions.append(row.region)
    return dict(xs=xs, ys=ys, region=regions)


def region_at(projected: gpd.GeoDataFrame, x: float, y: float) -> Optional[str]:
    point = Point(x, y)
    hits = projected[projected.geometry.contains(point)]
    if hits.empty:
        return None
    return str(hits["region"].iloc[0])
