"""Shared pytest fixtures for combat-zone tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from omegaconf import OmegaConf

from combatzones.core.types import EquipmentItem, GridContext, ItemCategory
from combatzones.scene.entity import BodyData, Scene, SceneEntity, Viewer
from combatzones.zones.config import ZoneDisplayConfig


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo handler and propagation changes made by setup_logging()."""
    root = logging.getLogger("combatzones")
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    root.propagate = propagate


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def config_path(project_root: Path) -> Path:
    return project_root / "config" / "default.yaml"


@pytest.fixture
def default_config(config_path: Path):
    return OmegaConf.load(config_path)


@pytest.fixture
def longsword() -> EquipmentItem:
    return EquipmentItem(
        name="Longsword",
        category=ItemCategory.WEAPON,
        training_groups=frozenset({"blade"}),
        length="2'0\"",
    )


@pytest.fixture
def enabled_config() -> ZoneDisplayConfig:
    return ZoneDisplayConfig(enabled=True)


@pytest.fixture
def metric_grid() -> GridContext:
    """1 m cells drawn 50 px wide."""
    return GridContext(distance_per_cell=1.0, pixels_per_cell=50.0, units="m")


@pytest.fixture
def make_entity():
    def _make(entity_id: str = "E1", radius=3.0, items=(), **kwargs) -> SceneEntity:
        body = kwargs.pop("body", BodyData(combat_zone_radius=radius))
        return SceneEntity(entity_id=entity_id, body=body, items=list(items), **kwargs)

    return _make


@pytest.fixture
def scene(metric_grid: GridContext) -> Scene:
    return Scene(grid=metric_grid, viewer=Viewer("gm", privileged=True), width=400, height=300)
