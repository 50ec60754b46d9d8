"""OpenCV drawing layer -- records zone draw calls and composites them.

A :class:`CvZoneLayer` is the drawable container handed to the renderer.
It keeps draw calls in entity-local coordinates; :meth:`composite`
rotates/translates them into frame space and rasterises with OpenCV,
alpha-blending each call the way the HUD overlays do.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

from combatzones.zones.geometry import arc_points, rotate_points

# BGR color type
Color = Tuple[int, int, int]


def rgb_to_bgr(color: int) -> Color:
    """24-bit 0xRRGGBB int to an OpenCV BGR tuple."""
    return (color & 0xFF, (color >> 8) & 0xFF, (color >> 16) & 0xFF)


@dataclass(frozen=True)
class DrawCall:
    kind: str  # "polygon", "polyline"
    points: np.ndarray  # Nx2 local coordinates
    color: int
    alpha: float
    width: float = 0.0


class CvZoneLayer:
    """Drawable container backed by a list of recorded draw calls."""

    def __init__(self) -> None:
        self.calls: list[DrawCall] = []
        self.offset: tuple[float, float] = (0.0, 0.0)
        self.rotation: float = 0.0
        self.destroyed = False

    # --- container surface used by the renderer ---

    def remove_children(self) -> None:
        self.calls.clear()

    def set_transform(self, x: float, y: float, rotation: float) -> None:
        self.offset = (float(x), float(y))
        self.rotation = float(rotation)

    def fill_polygon(self, points: Sequence[tuple[float, float]], color: int, alpha: float) -> None:
        self._record("polygon", np.asarray(points, dtype=float), color, alpha)

    def stroke_arc(
        self, radius: float, start: float, end: float, color: int, alpha: float, width: float
    ) -> None:
        self._record("polyline", arc_points(radius, start, end), color, alpha, width)

    def draw_line(
        self,
        start: tuple[float, float],
        end: tuple[float, float],
        color: int,
        alpha: float,
        width: float,
    ) -> None:
        self._record("polyline", np.array([start, end], dtype=float), color, alpha, width)

    def destroy(self) -> None:
        self.calls.clear()
        self.destroyed = True

    # --- rasterisation ---

    def count(self, kind: str) -> int:
        return sum(1 for c in self.calls if c.kind == kind)

    def to_frame_points(self, points: np.ndarray, origin: tuple[float, float]) -> np.ndarray:
        """Local points -> integer frame pixel coordinates."""
        world = rotate_points(points, self.rotation)
        world = world + np.array([origin[0] + self.offset[0], origin[1] + self.offset[1]])
        return np.round(world).astype(np.int32)

    def composite(self, frame: np.ndarray, origin: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
        """Draw all recorded calls onto ``frame`` in place.

        ``origin`` is the entity's top-left corner in frame pixels; the
        layer offset (set by the renderer) moves it to the entity centre.
        """
        if self.destroyed:
            return frame
        for call in self.calls:
            if call.alpha <= 0:
                continue
            pts = self.to_frame_points(call.points, origin).reshape((-1, 1, 2))
            color = rgb_to_bgr(call.color)
            overlay = frame.copy() if call.alpha < 1.0 else frame
            if call.kind == "polygon":
                cv2.fillPoly(overlay, [pts], color, cv2.LINE_AA)
            else:
                thickness = max(1, int(math.ceil(call.width)))
                cv2.polylines(overlay, [pts], False, color, thickness, cv2.LINE_AA)
            if overlay is not frame:
                cv2.addWeighted(overlay, call.alpha, frame, 1.0 - call.alpha, 0, frame)
        return frame

    def _record(self, kind: str, points: np.ndarray, color: int, alpha: float, width: float = 0.0) -> None:
        if self.destroyed:
            raise RuntimeError("Drawing on a destroyed zone layer")
        self.calls.append(DrawCall(kind, points, int(color), float(alpha), float(width)))
