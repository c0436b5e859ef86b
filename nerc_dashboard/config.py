"""Static settings shared by the dashboard views."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict

from bokeh.palettes import Dark2

BASE_PATH = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_PATH / "data"
GEO_PATH = DATA_DIR / "combined.json"
RECORDS_PATH = DATA_DIR / "nerc.csv"

REGIONS = ["SPP", "WECC", "MRO", "SERC", "TRE", "FRCC", "NPCC", "RFC"]
REGION_COLOR_MAP = {region: Dark2[8][i] for i, region in enumerate(REGIONS)}

# Continental US Albers equal-area
PROJECTED_CRS = "EPSG:5070"

BAR_COLOR = "#205cbd"
LINE_COLOR = "steelblue"
POINT_COLOR = "#222222"
HOVER_STROKE_COLOR = "#65676a"
BOUNDARY_COLOR = "gray"

CARD_STYLE = {
    "background-color": "#ffffff",
    "padding": "12px 14px",
    "border": "1px solid #e0e7f1",
    "border-radius": "10px",
    "box-shadow": "0 2px 6px rgba(15, 23, 42, 0.08)",
}


def _margin(top: int, right: int, bottom: int, left: int) -> Dict[str, int]:
    return {"top": top, "right": right, "bottom": bottom, "left": left}


@dataclass
class BarChartConfig:
    width: int = 1150
    height: int = 200
    margin: Dict[str, int] = field(default_factory=lambda: _margin(20, 20, 45, 30))
    max_bar_width: int = 60
    padding_inner: float = 0.1
    tooltip_padding: int = 15
    bar_transition_ms: int = 1000
    label_transition_ms: int = 1500
    label_font_px: int = 11


@dataclass
class CartogramConfig:
    width: int = 1200
    height: int = 650
    margin: Dict[str, int] = field(default_factory=lambda: _margin(0, 0, 0, 0))
    tooltip_padding: int = 15
    min_radius: float = 5
    max_radius: float = 22


@dataclass
class LineChartConfig:
    width: int = 1150
    height: int = 400
    margin: Dict[str, int] = field(default_factory=lambda: _margin(80, 50, 40, 30))
    tooltip_padding: int = 15
    calendar_start: datetime = datetime(2015, 1, 1)
    calendar_end: datetime = datetime(2021, 8, 1)
    calendar_tick_months: int = 6


@dataclass
class ForceSettings:
    center_strength: float = 0.02
    anchor_strength: float = 0.3
    charge_strength: float = -1.0
    collide_padding: float = 2.0
    collide_strength: float = 1.0
    velocity_decay: float = 0.4
    alpha_decay: float = 1 - 0.001 ** (1 / 300)
    alpha_threshold: float = 0.01
    max_iterations: int = 300
    seed: int = 42


FRAME_MS = 40
