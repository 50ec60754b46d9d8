"""Zone geometry -- sector table, grid unit conversion, arc tessellation.

Angles are radians in the entity's local frame, 0 along the local +X axis,
increasing counter-clockwise in screen space. The facing direction is
+π/2 (local "down" once the host applies its rotation).
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from combatzones.core.types import GridContext, ZoneKind

FACING_ANGLE = math.pi / 2


@dataclass(frozen=True)
class ZoneSector:
    """Angular wedge ``[start, end]`` classified by facing."""

    kind: ZoneKind
    start: float
    end: float

    @property
    def span(self) -> float:
        return self.end - self.start


# Front half, a 60° flank each side, a 120° rear wedge. The 60° between each
# flank and the rear is deliberately left uncovered.
SECTORS: tuple[ZoneSector, ...] = (
    ZoneSector(ZoneKind.FRONT, 0.0, math.pi),
    ZoneSector(ZoneKind.FLANK_LEFT, math.pi, math.pi + math.pi / 3),
    ZoneSector(ZoneKind.FLANK_RIGHT, -math.pi / 3, 0.0),
    ZoneSector(ZoneKind.REAR, math.pi + math.pi / 3, math.pi + 2 * math.pi / 3),
)

SPOKE_ANGLES: tuple[float, ...] = (0.0, math.pi, -math.pi / 3, math.pi + math.pi / 3)


def is_metric(units: str | None, aliases: Iterable[str]) -> bool:
    """True when the scene's unit label names metres."""
    label = (units or "").strip().lower()
    return label in {a.strip().lower() for a in aliases}


def grid_distance_in_units(
    grid: GridContext,
    metric_factor: float,
    metric_aliases: Iterable[str],
) -> float:
    """Distance per grid cell in canonical units (feet)."""
    if is_metric(grid.units, metric_aliases):
        return grid.distance_per_cell * metric_factor
    return grid.distance_per_cell


def units_to_px(radius: float, grid_distance: float, pixels_per_cell: float) -> float:
    """Convert a canonical-unit radius to screen pixels.

    Raises ``ValueError`` for a non-positive grid scale.
    """
    if grid_distance <= 0 or pixels_per_cell <= 0:
        raise ValueError(
            f"grid scale must be positive (distance={grid_distance!r}, pixels={pixels_per_cell!r})"
        )
    return (radius / grid_distance) * pixels_per_cell


def polar(radius: float, angle: float) -> tuple[float, float]:
    return (radius * math.cos(angle), radius * math.sin(angle))


def arc_points(radius: float, start: float, end: float, max_step: float = math.pi / 36) -> np.ndarray:
    """Sample an arc into an (N, 2) array of local points, endpoints included."""
    n = max(2, int(math.ceil(abs(end - start) / max_step)) + 1)
    angles = np.linspace(start, end, n)
    return np.column_stack((radius * np.cos(angles), radius * np.sin(angles)))


def wedge_polygon(radius: float, start: float, end: float) -> np.ndarray:
    """Closed pie-slice outline: centre, then the arc from start to end."""
    return np.vstack((np.zeros((1, 2)), arc_points(radius, start, end)))


def rotate_points(points: np.ndarray, angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    rot = np.array([[c, -s], [s, c]])
    return points @ rot.T
