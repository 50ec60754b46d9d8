"""In-memory host scene: entities, actor body data, viewer."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from combatzones.core.types import EntityTransform, EquipmentItem, GridContext
from combatzones.scene.canvas import CvZoneLayer

GRID_LINE_COLOR = (40, 40, 40)
BACKGROUND_COLOR = (18, 18, 18)


@dataclass
class BodyData:
    """Actor body data with an asynchronous derivation step.

    ``combat_zone_radius`` stays as given until :meth:`derive_extended_data`
    runs; derivation copies ``derived_radius`` into it when one is set.
    """

    combat_zone_radius: Any = None
    derived_radius: float | None = None
    derive_delay_s: float = 0.0
    derive_calls: int = 0

    async def derive_extended_data(self) -> None:
        self.derive_calls += 1
        await asyncio.sleep(self.derive_delay_s)
        if self.derived_radius is not None:
            self.combat_zone_radius = self.derived_radius


@dataclass
class Viewer:
    viewer_id: str = "gm"
    privileged: bool = True


@dataclass
class SceneEntity:
    """A token on the scene; ``x``/``y`` is its top-left corner in pixels."""

    entity_id: str
    x: float = 0.0
    y: float = 0.0
    width_px: float = 100.0
    height_px: float = 100.0
    rotation_deg: float = 0.0
    visible: bool = True
    hovered: bool = False
    controlled: bool = False
    owners: frozenset[str] = frozenset()
    body: BodyData | None = None
    items: list[EquipmentItem] = field(default_factory=list)
    layer: CvZoneLayer | None = field(default=None, repr=False)
    layers_created: int = 0

    def transform(self) -> EntityTransform:
        return EntityTransform(
            rotation_rad=math.radians(self.rotation_deg),
            width_px=self.width_px,
            height_px=self.height_px,
        )

    def equipment(self) -> tuple[EquipmentItem, ...]:
        return tuple(self.items)

    def is_owned_by(self, viewer_id: str) -> bool:
        return viewer_id in self.owners

    def create_container(self) -> CvZoneLayer:
        self.layer = CvZoneLayer()
        self.layers_created += 1
        return self.layer


class Scene:
    """Ordered collection of entities on a gridded canvas."""

    def __init__(
        self,
        grid: GridContext | None = None,
        viewer: Viewer | None = None,
        entities: Iterable[SceneEntity] = (),
        width: int = 1280,
        height: int = 720,
    ):
        self.grid = grid
        self.viewer = viewer or Viewer()
        self.width = width
        self.height = height
        self._entities: dict[str, SceneEntity] = {}
        for e in entities:
            self.add(e)

    def add(self, entity: SceneEntity) -> None:
        if entity.entity_id in self._entities:
            raise ValueError(f"Duplicate entity id '{entity.entity_id}'")
        self._entities[entity.entity_id] = entity

    def remove(self, entity_id: str) -> SceneEntity | None:
        return self._entities.pop(entity_id, None)

    def get(self, entity_id: str) -> SceneEntity | None:
        return self._entities.get(entity_id)

    def entities(self) -> list[SceneEntity]:
        return list(self._entities.values())

    def contains(self, entity_id: str) -> bool:
        return entity_id in self._entities

    def render(self, frame: np.ndarray | None = None) -> np.ndarray:
        """Composite every entity's zone layer onto a (new) BGR frame."""
        if frame is None:
            frame = np.full((self.height, self.width, 3), BACKGROUND_COLOR, dtype=np.uint8)
            self._draw_grid(frame)
        for e in self._entities.values():
            if e.layer is not None and not e.layer.destroyed:
                e.layer.composite(frame, (e.x, e.y))
        return frame

    def _draw_grid(self, frame: np.ndarray) -> None:
        if self.grid is None or self.grid.pixels_per_cell <= 0:
            return
        step = self.grid.pixels_per_cell
        h, w = frame.shape[:2]
        for x in np.arange(0, w, step):
            frame[:, int(x)] = GRID_LINE_COLOR
        for y in np.arange(0, h, step):
            frame[int(y), :] = GRID_LINE_COLOR
