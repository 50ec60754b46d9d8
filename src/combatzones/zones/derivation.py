"""Asynchronous actor-data derivation with per-entity coalescing.

Some hosts only populate the combat-zone radius after an asynchronous
"derive extended data" call. The coordinator runs at most one such call
per entity at a time; forced requests that arrive while one is running
collapse into a single re-run once it finishes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from combatzones.utils.logging import entity_context
from combatzones.zones.host import ZoneEntity

logger = logging.getLogger(__name__)

DERIVE_METHOD = "derive_extended_data"


class DerivationCoordinator:
    """Schedules ``body.derive_extended_data()`` calls on the running loop.

    Args:
        on_complete: Called with the entity after a successful derivation.
            The callback is responsible for checking the entity is still
            part of the scene before touching render state.
    """

    def __init__(self, on_complete: Callable[[ZoneEntity], None] | None = None):
        self._on_complete = on_complete
        self._tasks: dict[str, asyncio.Task] = {}
        self._rerun: set[str] = set()
        self._derived: set[str] = set()
        self._entities: dict[str, ZoneEntity] = {}

    def set_callback(self, on_complete: Callable[[ZoneEntity], None]) -> None:
        self._on_complete = on_complete

    def in_flight(self, entity_id: str) -> bool:
        return entity_id in self._tasks

    def is_derived(self, entity_id: str) -> bool:
        return entity_id in self._derived

    def request(self, entity: ZoneEntity, force: bool = False) -> asyncio.Task | None:
        """Start a derivation for ``entity`` if one is needed.

        Returns the task doing the work (possibly one already running), or
        ``None`` when nothing needs doing.
        """
        body = entity.body
        if body is None or not callable(getattr(body, DERIVE_METHOD, None)):
            return None

        eid = entity.entity_id
        if force:
            self._derived.discard(eid)

        running = self._tasks.get(eid)
        if running is not None:
            if force:
                self._rerun.add(eid)
                self._entities[eid] = entity
            return running

        if eid in self._derived:
            return None

        return self._start(entity)

    def cancel(self, entity_id: str) -> None:
        """Abandon any derivation for an entity that left the scene."""
        task = self._tasks.pop(entity_id, None)
        if task is not None and not task.done():
            task.cancel()
        self._rerun.discard(entity_id)
        self._derived.discard(entity_id)
        self._entities.pop(entity_id, None)

    def cancel_all(self) -> None:
        for eid in list(self._tasks):
            self.cancel(eid)
        self._derived.clear()

    async def wait_idle(self) -> None:
        """Wait until no derivation (including queued re-runs) is pending."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    # ------------------------------------------------------------------

    def _start(self, entity: ZoneEntity) -> asyncio.Task:
        loop = asyncio.get_running_loop()
        eid = entity.entity_id
        self._entities[eid] = entity
        task = loop.create_task(self._run(entity), name=f"derive-{eid}")
        self._tasks[eid] = task
        return task

    async def _run(self, entity: ZoneEntity) -> None:
        eid = entity.entity_id
        with entity_context(eid):
            try:
                await getattr(entity.body, DERIVE_METHOD)()
            except Exception:
                logger.warning("Derivation failed for %s", eid, exc_info=True)
            else:
                self._derived.add(eid)
                if self._on_complete is not None:
                    try:
                        self._on_complete(entity)
                    except Exception:
                        logger.exception("Zone update after derivation failed for %s", eid)
            finally:
                # A cancelled task may have been replaced; only the owner re-runs
                if self._tasks.get(eid) is asyncio.current_task():
                    del self._tasks[eid]
                    if eid in self._rerun and eid in self._entities:
                        self._rerun.discard(eid)
                        self._derived.discard(eid)
                        self._start(self._entities[eid])
