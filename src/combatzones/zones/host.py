"""Host-side collaborator protocols.

The renderer only talks to the host through these shapes. The in-memory
implementations in :mod:`combatzones.scene` satisfy them, as would an
adapter over a real scene graph.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Optional, Protocol, runtime_checkable

from combatzones.core.types import EntityTransform, EquipmentItem, GridContext


@runtime_checkable
class DrawableContainer(Protocol):
    """Per-entity drawing layer owned by a single render record."""

    def remove_children(self) -> None: ...

    def set_transform(self, x: float, y: float, rotation: float) -> None: ...

    def fill_polygon(self, points: Sequence[tuple[float, float]], color: int, alpha: float) -> None: ...

    def stroke_arc(
        self, radius: float, start: float, end: float, color: int, alpha: float, width: float
    ) -> None: ...

    def draw_line(
        self,
        start: tuple[float, float],
        end: tuple[float, float],
        color: int,
        alpha: float,
        width: float,
    ) -> None: ...

    def destroy(self) -> None: ...


class BodyDataSource(Protocol):
    """Actor data; may also offer ``async derive_extended_data()``."""

    combat_zone_radius: Any


class Viewer(Protocol):
    viewer_id: str
    privileged: bool


class ZoneEntity(Protocol):
    entity_id: str
    visible: bool
    hovered: bool
    controlled: bool
    body: Optional[BodyDataSource]

    def transform(self) -> EntityTransform: ...

    def equipment(self) -> Sequence[EquipmentItem]: ...

    def is_owned_by(self, viewer_id: str) -> bool: ...

    def create_container(self) -> DrawableContainer: ...


class ZoneScene(Protocol):
    grid: Optional[GridContext]
    viewer: Viewer

    def entities(self) -> Iterable[ZoneEntity]: ...

    def contains(self, entity_id: str) -> bool: ...
