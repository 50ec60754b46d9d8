"""Zone render state machine.

Owns one :class:`EntityRenderRecord` per displayed entity in a side table
keyed by entity id. ``update`` decides between redraw and no-op by
comparing the freshly computed transform, reach set and display snapshot
with what was last drawn; ``clear`` tears the record down.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from combatzones.core.types import EntityTransform
from combatzones.reach.resolver import resolve_reaches
from combatzones.utils.logging import entity_context
from combatzones.zones.config import DisplaySnapshot, ZoneDisplayConfig
from combatzones.zones.geometry import grid_distance_in_units, units_to_px
from combatzones.zones.host import DrawableContainer, ZoneEntity, ZoneScene
from combatzones.zones.primitives import build_zone_primitives, emit
from combatzones.zones.visibility import reach_visible

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderState:
    """What was on screen after the last redraw; compared as a whole."""

    transform: EntityTransform
    reaches: tuple[float, ...]
    look: DisplaySnapshot


@dataclass
class EntityRenderRecord:
    """Derived render state for a single entity."""

    entity_id: str
    body_radius: float = 0.0
    reaches: tuple[float, ...] = ()
    transform: EntityTransform | None = None
    look: DisplaySnapshot | None = None
    cached: RenderState | None = None
    graphics: DrawableContainer | None = None
    dirty: bool = False
    redraws: int = 0

    @property
    def is_drawn(self) -> bool:
        return self.graphics is not None


def coerce_radius(value: Any) -> float:
    """Read a host-provided radius; anything non-numeric counts as zero."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


class ZoneRenderer:
    """Computes zone geometry per entity and redraws only on change."""

    def __init__(self, scene: ZoneScene, config: ZoneDisplayConfig | None = None):
        self._scene = scene
        self._config = config or ZoneDisplayConfig()
        self._records: dict[str, EntityRenderRecord] = {}

    @property
    def config(self) -> ZoneDisplayConfig:
        return self._config

    def apply_config(self, config: ZoneDisplayConfig) -> None:
        """Swap in new settings; records are re-evaluated on their next update."""
        self._config = config

    @property
    def tracked_ids(self) -> list[str]:
        return list(self._records)

    def record(self, entity_id: str) -> EntityRenderRecord | None:
        return self._records.get(entity_id)

    def mark_dirty(self, entity_id: str) -> bool:
        """Force the next ``update`` of this entity to redraw."""
        rec = self._records.get(entity_id)
        if rec is None:
            return False
        rec.dirty = True
        return True

    def mark_all_dirty(self) -> None:
        for rec in self._records.values():
            rec.dirty = True

    def body_radius(self, entity: ZoneEntity) -> float:
        """Declared combat-zone radius clamped to the configured floor."""
        raw = coerce_radius(getattr(entity.body, "combat_zone_radius", None))
        return max(raw, self._config.min_body_radius)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def update(self, entity: ZoneEntity) -> bool:
        """Bring the entity's overlay up to date. Returns True if it redrew."""
        with entity_context(entity.entity_id):
            return self._update(entity)

    def _update(self, entity: ZoneEntity) -> bool:
        cfg = self._config
        if not entity.visible or entity.body is None or not cfg.enabled:
            self.clear(entity)
            return False

        body = self.body_radius(entity)
        if body <= 0:
            self.clear(entity)
            return False

        grid = self._scene.grid
        if grid is None:
            logger.debug("No grid context, clearing zones for %s", entity.entity_id)
            self.clear(entity)
            return False
        grid_dist = grid_distance_in_units(grid, cfg.metric_factor, cfg.metric_aliases)
        if grid_dist <= 0 or grid.pixels_per_cell <= 0:
            logger.debug(
                "Unusable grid scale (%r units, %r px), clearing zones for %s",
                grid.distance_per_cell, grid.pixels_per_cell, entity.entity_id,
            )
            self.clear(entity)
            return False

        reaches = resolve_reaches(body, entity.equipment(), cfg.reach_rules)
        show_reach = reach_visible(entity, self._scene.viewer, cfg.reach_show_all)
        state = RenderState(
            transform=entity.transform(),
            reaches=reaches,
            look=cfg.snapshot(show_reach),
        )

        rec = self._records.get(entity.entity_id)
        if rec is None:
            rec = EntityRenderRecord(entity.entity_id)
            self._records[entity.entity_id] = rec
        rec.body_radius = body
        rec.reaches = state.reaches
        rec.transform = state.transform
        rec.look = state.look

        if not rec.dirty and rec.cached == state:
            return False

        self._redraw(entity, rec, state, grid_dist, grid.pixels_per_cell)
        rec.cached = state
        rec.dirty = False
        return True

    def clear(self, entity: ZoneEntity) -> None:
        """Destroy the entity's graphics and forget its render state."""
        rec = self._records.pop(entity.entity_id, None)
        if rec is None:
            return
        if rec.graphics is not None:
            rec.graphics.destroy()
            rec.graphics = None
        rec.cached = None
        logger.debug("Cleared zones for %s", entity.entity_id)

    def clear_all(self) -> None:
        for rec in self._records.values():
            if rec.graphics is not None:
                rec.graphics.destroy()
                rec.graphics = None
            rec.cached = None
        self._records.clear()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _redraw(
        self,
        entity: ZoneEntity,
        rec: EntityRenderRecord,
        state: RenderState,
        grid_dist: float,
        pixels_per_cell: float,
    ) -> None:
        container = rec.graphics
        if container is None:
            container = entity.create_container()
            rec.graphics = container
        container.remove_children()

        t = state.transform
        container.set_transform(t.width_px / 2, t.height_px / 2, t.rotation_rad)

        body_px = units_to_px(rec.body_radius, grid_dist, pixels_per_cell)
        reach_px = [units_to_px(r, grid_dist, pixels_per_cell) for r in state.reaches]
        emit(container, build_zone_primitives(body_px, reach_px, state.look))

        rec.redraws += 1
        logger.debug(
            "Redrew zones for %s: body=%.2fpx reaches=%s",
            entity.entity_id, body_px, [round(r, 2) for r in reach_px],
        )
