"""Hierarchical YAML configuration system using OmegaConf."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from omegaconf import DictConfig, OmegaConf

from combatzones.core.bus import EventBus
from combatzones.core.types import ZoneEvent

logger = logging.getLogger(__name__)


class ZonesConfig:
    """Loads and merges YAML configuration files.

    Supports a base config with optional per-section overrides placed in
    ``display/``, ``units/`` and ``reach/`` next to the base file. Runtime
    changes go through :meth:`override`, which publishes
    ``config_changed`` on the bus so subscribers can re-evaluate.
    """

    def __init__(
        self,
        config_path: str | Path = "config/default.yaml",
        bus: EventBus | None = None,
    ):
        self._config_path = Path(config_path)
        self._config: DictConfig | None = None
        self._bus = bus

    def load(self, validate: bool = False) -> DictConfig:
        """Load base config and merge any section-level overrides.

        Args:
            validate: If True, validate the loaded config against the
                Pydantic schema and raise ``pydantic.ValidationError``
                on invalid values.
        """
        if not self._config_path.exists():
            raise FileNotFoundError(f"Config not found: {self._config_path}")

        base = OmegaConf.load(self._config_path)
        assert isinstance(base, DictConfig)

        config_dir = self._config_path.parent
        for subdir in ("display", "units", "reach"):
            sub_path = config_dir / subdir
            if sub_path.is_dir():
                for yaml_file in sorted(sub_path.glob("*.yaml")):
                    logger.debug("Merging config override %s", yaml_file)
                    base = OmegaConf.merge(base, OmegaConf.load(yaml_file))

        if validate or OmegaConf.select(base, "combat_zones.system.validate_config", default=False):
            from combatzones.core.config_schema import validate_config

            validate_config(OmegaConf.to_container(base, resolve=True))

        self._config = base
        return self._config

    @classmethod
    def from_dict(cls, data: dict, bus: EventBus | None = None) -> ZonesConfig:
        """Build an already-loaded config from a plain dict (tests, embedding)."""
        inst = cls(bus=bus)
        inst._config = OmegaConf.create(data)
        return inst

    def override(self, dotpath: str, value: Any) -> None:
        """Override a config value using dot notation and announce the change.

        Example: config.override("combat_zones.display.alpha", 0.3)
        """
        if self._config is None:
            raise RuntimeError("Config not loaded yet. Call load() first.")
        OmegaConf.update(self._config, dotpath, value)
        if self._bus is not None:
            self._bus.publish(ZoneEvent.CONFIG_CHANGED, key=dotpath, value=value)

    @property
    def bus(self) -> EventBus | None:
        return self._bus

    def get(self, dotpath: str, default: Any = None) -> Any:
        return OmegaConf.select(self.cfg, dotpath, default=default)

    @property
    def section(self) -> DictConfig:
        """The ``combat_zones`` root node (empty if absent)."""
        node = OmegaConf.select(self.cfg, "combat_zones")
        if node is None:
            return OmegaConf.create({})
        return node

    @property
    def cfg(self) -> DictConfig:
        if self._config is None:
            raise RuntimeError("Config not loaded yet. Call load() first.")
        return self._config
