"""Force relaxation that spreads region clusters around their geographic anchors."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Tuple

import numpy as np

from nerc_dashboard.config import ForceSettings

logger = logging.getLogger(__name__)


@dataclass
class ClusterNode:
    key: str
    r: float
    x: float
    y: float
    anchor_x: float = field(init=False)
    anchor_y: float = field(init=False)
    vx: float = 0.0
    vy: float = 0.0
    data: Any = field(default=None, compare=False)

    def __post_init__(self) -> None:
        self.anchor_x, self.anchor_y = self.x, self.y


def _jiggle(rng: np.random.Generator) -> float:
    return (rng.random() - 0.5) * 1e-6


def _apply_charge(x, y, vx, vy, strength: float, alpha: float, rng: np.random.Generator) -> None:
    dx = x[None, :] - x[:, None]
    dy = y[None, :] - y[:, None]
    n = len(x)
    for i in range(n):
        for j in range(n):
            if i != j and dx[i, j] == 0 and dy[i, j] == 0:
                dx[i, j] = _jiggle(rng)
                dy[i, j] = _jiggle(rng)
    dist2 = dx * dx + dy * dy
    np.fill_diagonal(dist2, np.inf)
    dist2 = np.where(dist2 < 1, np.sqrt(dist2), dist2)
    weight = strength * alpha / dist2
    vx += (dx * weight).sum(axis=1)
    vy += (dy * weight).sum(axis=1)


def _apply_collide(x, y, vx, vy, radii, strength: float, rng: np.random.Generator) -> None:
    n = len(x)
    for i in range(n):
        xi, yi, ri = x[i] + vx[i], y[i] + vy[i], radii[i]
        for j in range(i + 1, n):
            rj = radii[j]
            r = ri + rj
            dx = xi - x[j] - vx[j]
            dy = yi - y[j] - vy[j]
            dist2 = dx * dx + dy * dy
            if dist2 >= r * r:
                continue
            if dx == 0:
                dx = _jiggle(rng)
                dist2 += dx * dx
            if dy == 0:
                dy = _jiggle(rng)
                dist2 += dy * dy
            dist = np.sqrt(dist2)
            push = (r - dist) / dist * strength
            dx *= push
            dy *= push
            share = rj * rj / (ri * ri + rj * rj)
            vx[i] += dx * share
            vy[i] += dy * share
            vx[j] -= dx * (1 - share)
            vy[j] -= dy * (1 - share)


def relax(
    nodes: Sequence[ClusterNode], center: Tuple[float, float], settings: Optional[ForceSettings] = None
) -> int:
    """Move ``nodes`` until alpha cools below the threshold; returns ticks run.

    Each tick pulls nodes weakly towards ``center`` and more firmly towards
    their anchors, pushes them apart, then resolves collisions at
    ``r + collide_padding``.
    """
    if not nodes:
        return 0

    settings = settings or ForceSettings()
    rng = np.random.default_rng(settings.seed)
    x = np.array([node.x for node in nodes], dtype=float)
    y = np.array([node.y for node in nodes], dtype=float)
    vx = np.array([node.vx for node in nodes], dtype=float)
    vy = np.array([node.vy for node in nodes], dtype=float)
    anchor_x = np.array([node.anchor_x for node in nodes], dtype=float)
    anchor_y = np.array([node.anchor_y for node in nodes], dtype=float)
    radii = np.array([node.r + settings.collide_padding for node in nodes], dtype=float)
    center_x, center_y = center

    alpha = 1.0
    ticks = 0
    while alpha > settings.alpha_threshold and ticks < settings.max_iterations:
        alpha += -alpha * settings.alpha_decay

        vx += (center_x - x) * settings.center_strength * alpha
        vy += (center_y - y) * settings.center_strength * alpha
        vx += (anchor_x - x) * settings.anchor_strength * alpha
        vy += (anchor_y - y) * settings.anchor_strength * alpha
        _apply_charge(x, y, vx, vy, settings.charge_strength, alpha, rng)
        _apply_collide(x, y, vx, vy, radii, settings.collide_strength, rng)

        vx *= 1 - settings.velocity_decay
        vy *= 1 - settings.velocity_decay
        x += vx
        y += vy
        ticks += 1

    logger.debug("relaxed %d clusters in %d ticks (alpha %.4f)", len(nodes), ticks, alpha)
    for node, px, py, pvx, pvy in zip(nodes, x, y, vx, vy):
        node.x, node.y, node.vx, node.vy = float(px), float(py), float(pvx), float(pvy)
    return ticks
