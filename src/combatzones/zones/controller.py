"""Zone controller -- top-level wiring between host events and the renderer.

Ties together: settings + renderer + derivation coordinator.
Host triggers arrive either as direct method calls or as bus events
after :meth:`ZoneController.attach`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from combatzones.core.bus import EventBus
from combatzones.core.config import ZonesConfig
from combatzones.core.types import ZoneEvent
from combatzones.zones.config import ZoneDisplayConfig
from combatzones.zones.derivation import DerivationCoordinator
from combatzones.zones.host import ZoneEntity, ZoneScene
from combatzones.zones.renderer import ZoneRenderer

logger = logging.getLogger(__name__)

TOGGLE_KEY = "combat_zones.display.enabled"


class ZoneController:
    """Routes host events to zone updates, clears and derivations."""

    def __init__(
        self,
        scene: ZoneScene,
        settings: ZonesConfig,
        renderer: ZoneRenderer | None = None,
        derivation: DerivationCoordinator | None = None,
    ):
        self._scene = scene
        self._settings = settings
        self._renderer = renderer or ZoneRenderer(
            scene, ZoneDisplayConfig.from_omegaconf(settings.section)
        )
        self._derivation = derivation or DerivationCoordinator()
        self._derivation.set_callback(self._on_derived)
        self._bus: EventBus | None = None
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def renderer(self) -> ZoneRenderer:
        return self._renderer

    @property
    def derivation(self) -> DerivationCoordinator:
        return self._derivation

    # ------------------------------------------------------------------
    # Bus wiring
    # ------------------------------------------------------------------

    def attach(self, bus: EventBus) -> None:
        self._bus = bus
        handlers = {
            ZoneEvent.SCENE_READY: lambda **kw: self.on_scene_ready(),
            ZoneEvent.ENTITY_CONTROLLED: lambda entity, controlled=True, **kw: (
                self.on_entity_controlled(entity, controlled)
            ),
            ZoneEvent.ENTITY_HOVERED: lambda entity, hovered=True, **kw: (
                self.on_entity_hovered(entity, hovered)
            ),
            ZoneEvent.ENTITY_REFRESHED: lambda entity, **kw: self.on_entity_refreshed(entity),
            ZoneEvent.ENTITY_DESTROYED: lambda entity, **kw: self.on_entity_destroyed(entity),
            ZoneEvent.ACTOR_UPDATED: lambda entities=(), **kw: self.on_actor_updated(entities),
            ZoneEvent.ITEM_UPDATED: lambda entities=(), **kw: self.on_item_updated(entities),
            ZoneEvent.CONFIG_CHANGED: lambda key=None, value=None, **kw: (
                self.on_config_changed(key, value)
            ),
        }
        for event, handler in handlers.items():
            self._unsubscribers.append(bus.subscribe(event, handler))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._bus = None

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    def on_scene_ready(self) -> None:
        entities = list(self._scene.entities())
        for entity in entities:
            self._derive(entity)
        for entity in entities:
            self._renderer.update(entity)

    def on_entity_controlled(self, entity: ZoneEntity, controlled: bool) -> None:
        if controlled:
            self._derive(entity)
        self._renderer.update(entity)

    def on_entity_hovered(self, entity: ZoneEntity, hovered: bool) -> None:
        if hovered:
            self._derive(entity)
        self._renderer.update(entity)

    def on_entity_refreshed(self, entity: ZoneEntity) -> None:
        self._renderer.update(entity)

    def on_entity_destroyed(self, entity: ZoneEntity) -> None:
        self._derivation.cancel(entity.entity_id)
        self._renderer.clear(entity)

    def on_actor_updated(self, entities: Iterable[ZoneEntity]) -> None:
        """The actor behind ``entities`` changed; re-derive their data."""
        for entity in entities:
            self._derive(entity, force=True)

    def on_item_updated(self, entities: Iterable[ZoneEntity]) -> None:
        """An item owned by the actor behind ``entities`` changed."""
        for entity in entities:
            self._derive(entity, force=True)

    def on_config_changed(self, key: str | None = None, value: Any = None) -> None:
        was_enabled = self._renderer.config.enabled
        config = ZoneDisplayConfig.from_omegaconf(self._settings.section)
        self._renderer.apply_config(config)
        logger.info("Zone settings changed (%s=%r)", key, value)

        entities = list(self._scene.entities())
        if config.enabled and not was_enabled:
            for entity in entities:
                self._derive(entity)
        self.redraw_all(entities)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def toggle(self) -> bool:
        """Flip the feature toggle; returns the new state."""
        enabled = not bool(self._settings.get(TOGGLE_KEY, False))
        self._settings.override(TOGGLE_KEY, enabled)
        if self._bus is None or self._settings.bus is not self._bus:
            self.on_config_changed(TOGGLE_KEY, enabled)
        return enabled

    def redraw_all(self, entities: Iterable[ZoneEntity] | None = None) -> int:
        """Mark every record dirty and re-evaluate entities; returns redraw count."""
        self._renderer.mark_all_dirty()
        if entities is None:
            entities = list(self._scene.entities())
        redrawn = 0
        for entity in entities:
            if self._renderer.update(entity):
                redrawn += 1
        return redrawn

    # ------------------------------------------------------------------

    def _derive(self, entity: ZoneEntity, force: bool = False) -> None:
        try:
            self._derivation.request(entity, force=force)
        except RuntimeError:
            # No running event loop: synchronous host, data is used as-is
            logger.debug("No event loop for derivation of %s", entity.entity_id)

    def _on_derived(self, entity: ZoneEntity) -> None:
        if not self._scene.contains(entity.entity_id):
            logger.debug("Derivation finished for removed entity %s", entity.entity_id)
            return
        self._renderer.mark_dirty(entity.entity_id)
        self._renderer.update(entity)
