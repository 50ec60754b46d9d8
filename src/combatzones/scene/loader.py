"""Scene description loader (YAML via OmegaConf)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from omegaconf import OmegaConf

from combatzones.core.types import EquipmentItem, GridContext
from combatzones.scene.entity import BodyData, Scene, SceneEntity, Viewer

logger = logging.getLogger(__name__)


def _entity_from_dict(ed: dict, index: int) -> SceneEntity:
    eid = str(ed.get("id", f"ENT-{index}"))
    body = None
    if ed.get("body", True) is not False:
        body = BodyData(
            combat_zone_radius=ed.get("combat_zone_radius"),
            derived_radius=ed.get("derived_radius"),
        )
    items = [EquipmentItem.from_dict(dict(i)) for i in ed.get("equipment", []) or []]
    return SceneEntity(
        entity_id=eid,
        x=float(ed.get("x", 0.0)),
        y=float(ed.get("y", 0.0)),
        width_px=float(ed.get("width", 100.0)),
        height_px=float(ed.get("height", 100.0)),
        rotation_deg=float(ed.get("rotation", 0.0)),
        visible=bool(ed.get("visible", True)),
        hovered=bool(ed.get("hovered", False)),
        controlled=bool(ed.get("controlled", False)),
        owners=frozenset(str(o) for o in ed.get("owners", []) or []),
        body=body,
        items=items,
    )


def scene_from_dict(data: dict[str, Any]) -> Scene:
    """Build a :class:`Scene` from a plain dict.

    Keys: ``grid`` (distance, size, units), ``viewer`` (id, privileged),
    ``canvas`` (width, height) and an ``entities`` list.
    """
    grid_d = data.get("grid")
    grid = None
    if grid_d:
        grid = GridContext(
            distance_per_cell=float(grid_d.get("distance", 5.0)),
            pixels_per_cell=float(grid_d.get("size", 100.0)),
            units=str(grid_d.get("units", "ft")),
        )
    viewer_d = data.get("viewer", {}) or {}
    viewer = Viewer(
        viewer_id=str(viewer_d.get("id", "gm")),
        privileged=bool(viewer_d.get("privileged", True)),
    )
    canvas = data.get("canvas", {}) or {}
    scene = Scene(
        grid=grid,
        viewer=viewer,
        width=int(canvas.get("width", 1280)),
        height=int(canvas.get("height", 720)),
    )
    for i, ed in enumerate(data.get("entities", []) or []):
        try:
            scene.add(_entity_from_dict(dict(ed), i))
        except (TypeError, ValueError):
            logger.exception("Failed to parse entity #%d", i)
    return scene


def load_scene(path: str | Path) -> Scene:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scene not found: {path}")
    data = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
    if not isinstance(data, dict):
        raise ValueError(f"Scene file {path} must contain a mapping")
    return scene_from_dict(data)
