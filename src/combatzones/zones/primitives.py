"""Zone draw primitives and their emission onto a drawable container.

Primitives are plain value objects in the entity's local frame (origin at
the entity centre, unrotated). ``build_zone_primitives`` produces them in
draw order; ``emit`` forwards each to the matching container call.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from combatzones.core.types import ZoneKind
from combatzones.zones.config import DisplaySnapshot
from combatzones.zones.geometry import (
    FACING_ANGLE,
    SECTORS,
    SPOKE_ANGLES,
    ZoneSector,
    polar,
    wedge_polygon,
)

# Reach radius must exceed the body radius by more than this to draw spokes
SPOKE_EPSILON_PX = 1.0

ARROW_HEAD_RATIO = 0.15
ARROW_WING_ANGLE = math.pi / 8

FACING_LINE_WIDTH = 3.0
ARC_LINE_WIDTH = 3.0
ARC_ALPHA = 0.8
SPOKE_LINE_WIDTH = 2.0
SPOKE_ALPHA = 0.5


@dataclass(frozen=True)
class WedgeFill:
    kind: ZoneKind
    radius: float
    start: float
    end: float
    color: int
    alpha: float


@dataclass(frozen=True)
class ArcStroke:
    kind: ZoneKind
    radius: float
    start: float
    end: float
    color: int
    alpha: float
    width: float


@dataclass(frozen=True)
class LineSegment:
    start: tuple[float, float]
    end: tuple[float, float]
    color: int
    alpha: float
    width: float


Primitive = Union[WedgeFill, ArcStroke, LineSegment]


def sector_color(sector: ZoneSector, look: DisplaySnapshot) -> int:
    if sector.kind is ZoneKind.FRONT:
        return look.front
    if sector.kind is ZoneKind.REAR:
        return look.rear
    return look.flank


def body_wedges(radius_px: float, look: DisplaySnapshot) -> list[WedgeFill]:
    return [
        WedgeFill(s.kind, radius_px, s.start, s.end, sector_color(s, look), look.alpha)
        for s in SECTORS
    ]


def facing_arrow(radius_px: float, look: DisplaySnapshot) -> list[LineSegment]:
    """Two-stroke arrowhead whose tip sits on the body radius at the facing."""
    tip = polar(radius_px, FACING_ANGLE)
    head = radius_px * ARROW_HEAD_RATIO
    strokes = []
    for wing in (FACING_ANGLE - ARROW_WING_ANGLE, FACING_ANGLE + ARROW_WING_ANGLE):
        dx, dy = polar(head, wing)
        strokes.append(
            LineSegment(tip, (tip[0] - dx, tip[1] - dy), look.facing, 1.0, FACING_LINE_WIDTH)
        )
    return strokes


def reach_arcs(radii_px: Sequence[float], look: DisplaySnapshot) -> list[ArcStroke]:
    return [
        ArcStroke(s.kind, r, s.start, s.end, sector_color(s, look), ARC_ALPHA, ARC_LINE_WIDTH)
        for r in radii_px
        for s in SECTORS
    ]


def sector_spokes(inner_px: float, outer_px: float, look: DisplaySnapshot) -> list[LineSegment]:
    return [
        LineSegment(polar(inner_px, a), polar(outer_px, a), look.spoke, SPOKE_ALPHA, SPOKE_LINE_WIDTH)
        for a in SPOKE_ANGLES
    ]


def build_zone_primitives(
    body_px: float,
    reach_px: Sequence[float],
    look: DisplaySnapshot,
) -> list[Primitive]:
    """Full primitive list for one entity, in draw order.

    ``reach_px`` is the ascending pixel radii with the body radius first.
    Rings beyond the body radius are only included when ``look.show_reach``.
    """
    prims: list[Primitive] = []
    prims.extend(body_wedges(body_px, look))
    prims.extend(facing_arrow(body_px, look))

    if look.show_reach:
        prims.extend(reach_arcs([r for r in reach_px[1:] if r > body_px], look))

    max_px = max(reach_px) if reach_px else body_px
    if max_px > body_px + SPOKE_EPSILON_PX:
        prims.extend(sector_spokes(body_px, max_px, look))
    return prims


def emit(container, primitives: Sequence[Primitive]) -> None:
    """Issue draw calls for ``primitives`` on ``container`` in order."""
    for p in primitives:
        if isinstance(p, WedgeFill):
            points = [tuple(pt) for pt in wedge_polygon(p.radius, p.start, p.end).tolist()]
            container.fill_polygon(points, p.color, p.alpha)
        elif isinstance(p, ArcStroke):
            container.stroke_arc(p.radius, p.start, p.end, p.color, p.alpha, p.width)
        elif isinstance(p, LineSegment):
            container.draw_line(p.start, p.end, p.color, p.alpha, p.width)
        else:
            raise TypeError(f"Unknown primitive {type(p).__name__}")
