"""Pieces shared by the three chart views."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Optional, Sequence

import numpy as np
import pandas as pd
from bokeh.document import Document

from nerc_dashboard.bus import EventBus
from nerc_dashboard.config import FRAME_MS

logger = logging.getLogger(__name__)


class LinearScale:
    def __init__(self, domain: Sequence[float] = (0.0, 1.0), range_: Sequence[float] = (0.0, 1.0)) -> None:
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        t = (value - d0) / (d1 - d0) if d1 != d0 else 0.5
        return r0 + t * (r1 - r0)

    def invert(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        t = (value - r0) / (r1 - r0) if r1 != r0 else 0.5
        return d0 + t * (d1 - d0)


def sqrt_scale(values: Sequence[float], domain: Sequence[float], range_: Sequence[float]) -> np.ndarray:
    """Square-root scale, so circle areas grow linearly with ``values``."""

    def signed_sqrt(v):
        return np.sign(v) * np.sqrt(np.abs(v))

    d0, d1 = signed_sqrt(np.asarray(domain, dtype=float))
    r0, r1 = range_
    v = signed_sqrt(np.asarray(values, dtype=float))
    t = (v - d0) / (d1 - d0) if d1 != d0 else np.full_like(v, 0.5)
    return r0 + t * (r1 - r0)


def ease_cubic(t: float) -> float:
    t = min(max(t, 0.0), 1.0)
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


class Transition:
    """Drives ``on_frame(elapsed_ms)`` from a periodic callback until ``duration_ms``.

    Without a live server session the final frame is applied right away.
    """

    def __init__(self, doc: Optional[Document], duration_ms: int, on_frame: Callable[[float], None]) -> None:
        self.doc = doc
        self.duration_ms = duration_ms
        self.on_frame = on_frame
        self.elapsed_ms = 0.0
        self._callback = None

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self) -> None:
        if self.doc is None or self.doc.session_context is None:
            self.on_frame(self.duration_ms)
            return
        self.on_frame(0.0)
        self._callback = self.doc.add_periodic_callback(self._tick, FRAME_MS)

    def _tick(self) -> None:
        self.elapsed_ms = min(self.elapsed_ms + FRAME_MS, self.duration_ms)
        self.on_frame(self.elapsed_ms)
        if self.elapsed_ms >= self.duration_ms:
            self.cancel()

    def cancel(self) -> None:
        if self._callback is not None:
            self.doc.remove_periodic_callback(self._callback)
            self._callback = None


class ChartView:
    """A figure bound to a record set that is replaced wholesale via ``set_data``."""

    def __init__(self, config: Any, data: pd.DataFrame, bus: Optional[EventBus] = None, doc: Optional[Document] = None) -> None:
        self.config = config
        self.data = data
        self.bus = bus
        self.doc = doc
        self._transition: Optional[Transition] = None
        self.init_vis()

    @property
    def inner_width(self) -> float:
        margin = self.config.margin
        return self.config.width - margin["left"] - margin["right"]

    @property
    def inner_height(self) -> float:
        margin = self.config.margin
        return self.config.height - margin["top"] - margin["bottom"]

    def configure(self, **options: Any) -> None:
        self.config = replace(self.config, **options)
        logger.debug("%s reconfigured: %s", type(self).__name__, sorted(options))
        self.apply_geometry()

    def apply_geometry(self) -> None:
        fig = self.figure
        margin = self.config.margin
        fig.width = self.config.width
        fig.height = self.config.height
        fig.min_border_top = margin["top"]
        fig.min_border_right = margin["right"]
        fig.min_border_bottom = margin["bottom"]
        fig.min_border_left = margin["left"]

    def set_data(self, records: pd.DataFrame) -> None:
        self.data = records

    def init_vis(self) -> None:
        raise NotImplementedError

    def update(self) -> None:
        raise NotImplementedError

    def render(self) -> None:
        raise NotImplementedError

    def animate(self, duration_ms: int, on_frame: Callable[[float], None]) -> None:
        if self._transition is not None:
            self._transition.cancel()
        self._transition = Transition(self.doc, duration_ms, on_frame)
        self._transition.start()

    def tooltip_style(self) -> str:
        padding = self.config.tooltip_padding
        return f"padding: {padding // 3}px; margin: {padding}px 0 0 {padding}px; max-width: 320px;"
