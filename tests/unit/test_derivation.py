"""Tests for the asynchronous actor-data derivation coordinator."""

from __future__ import annotations

import asyncio
import logging
from types import SimpleNamespace

import pytest

from combatzones.scene.entity import BodyData
from combatzones.zones.derivation import DerivationCoordinator


class FailingBody:
    combat_zone_radius = 3.0

    def __init__(self):
        self.calls = 0

    async def derive_extended_data(self):
        self.calls += 1
        raise ValueError("actor data unavailable")


class TestRequest:
    def test_no_body_returns_none(self, make_entity):
        coord = DerivationCoordinator()
        assert coord.request(make_entity(body=None)) is None

    def test_body_without_derive_returns_none(self, make_entity):
        coord = DerivationCoordinator()
        entity = make_entity(body=SimpleNamespace(combat_zone_radius=3))
        assert coord.request(entity) is None

    def test_requires_running_loop(self, make_entity):
        coord = DerivationCoordinator()
        with pytest.raises(RuntimeError):
            coord.request(make_entity())

    @pytest.mark.asyncio
    async def test_derivation_updates_body_and_calls_back(self, make_entity):
        done = []
        coord = DerivationCoordinator(on_complete=done.append)
        entity = make_entity(body=BodyData(combat_zone_radius=0, derived_radius=5.0))

        task = coord.request(entity)
        assert task is not None
        assert coord.in_flight(entity.entity_id)
        await coord.wait_idle()

        assert entity.body.combat_zone_radius == 5.0
        assert done == [entity]
        assert coord.is_derived(entity.entity_id)
        assert not coord.in_flight(entity.entity_id)

    @pytest.mark.asyncio
    async def test_already_derived_is_skipped(self, make_entity):
        coord = DerivationCoordinator()
        entity = make_entity()
        coord.request(entity)
        await coord.wait_idle()
        assert coord.request(entity) is None
        assert entity.body.derive_calls == 1

    @pytest.mark.asyncio
    async def test_force_rederives(self, make_entity):
        coord = DerivationCoordinator()
        entity = make_entity()
        coord.request(entity)
        await coord.wait_idle()
        assert coord.request(entity, force=True) is not None
        await coord.wait_idle()
        assert entity.body.derive_calls == 2


class TestCoalescing:
    @pytest.mark.asyncio
    async def test_unforced_request_joins_running_task(self, make_entity):
        coord = DerivationCoordinator()
        entity = make_entity(body=BodyData(combat_zone_radius=3, derive_delay_s=0.01))
        first = coord.request(entity)
        second = coord.request(entity)
        assert first is second
        await coord.wait_idle()
        assert entity.body.derive_calls == 1

    @pytest.mark.asyncio
    async def test_forced_requests_collapse_into_one_rerun(self, make_entity):
        done = []
        coord = DerivationCoordinator(on_complete=done.append)
        entity = make_entity(body=BodyData(combat_zone_radius=3, derive_delay_s=0.01))
        coord.request(entity)
        for _ in range(5):
            coord.request(entity, force=True)
        await coord.wait_idle()
        assert entity.body.derive_calls == 2
        assert len(done) == 2

    @pytest.mark.asyncio
    async def test_entities_run_independently(self, make_entity):
        coord = DerivationCoordinator()
        a = make_entity("A", body=BodyData(combat_zone_radius=3, derive_delay_s=0.01))
        b = make_entity("B", body=BodyData(combat_zone_radius=3, derive_delay_s=0.01))
        assert coord.request(a) is not coord.request(b)
        await coord.wait_idle()
        assert a.body.derive_calls == 1
        assert b.body.derive_calls == 1


class TestFailureAndCancel:
    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, make_entity, caplog):
        done = []
        coord = DerivationCoordinator(on_complete=done.append)
        body = FailingBody()
        entity = make_entity(body=body)

        with caplog.at_level(logging.WARNING, logger="combatzones.zones.derivation"):
            coord.request(entity)
            await coord.wait_idle()

        assert body.calls == 1
        assert done == []
        assert not coord.is_derived(entity.entity_id)
        assert "Derivation failed for E1" in caplog.text

    @pytest.mark.asyncio
    async def test_failed_entity_can_retry(self, make_entity):
        coord = DerivationCoordinator()
        body = FailingBody()
        entity = make_entity(body=body)
        coord.request(entity)
        await coord.wait_idle()
        assert coord.request(entity) is not None
        await coord.wait_idle()
        assert body.calls == 2

    @pytest.mark.asyncio
    async def test_cancel_drops_callback(self, make_entity):
        done = []
        coord = DerivationCoordinator(on_complete=done.append)
        entity = make_entity(body=BodyData(combat_zone_radius=3, derive_delay_s=0.05))
        task = coord.request(entity)
        await asyncio.sleep(0)
        coord.request(entity, force=True)
        coord.cancel(entity.entity_id)
        await asyncio.gather(task, return_exceptions=True)
        await coord.wait_idle()

        assert task.cancelled()
        assert done == []
        assert not coord.in_flight(entity.entity_id)
        assert entity.body.derive_calls == 1

    @pytest.mark.asyncio
    async def test_cancel_all(self, make_entity):
        coord = DerivationCoordinator()
        entities = [
            make_entity(f"E{i}", body=BodyData(combat_zone_radius=3, derive_delay_s=0.05))
            for i in range(3)
        ]
        tasks = [coord.request(e) for e in entities]
        coord.cancel_all()
        await asyncio.gather(*tasks, return_exceptions=True)
        assert all(t.cancelled() for t in tasks)
        assert not any(coord.in_flight(e.entity_id) for e in entities)

    def test_cancel_unknown_entity(self):
        DerivationCoordinator().cancel("nobody")  # Should not raise

    @pytest.mark.asyncio
    async def test_cancelled_task_does_not_steal_rerun(self, make_entity):
        coord = DerivationCoordinator()
        entity = make_entity(body=BodyData(combat_zone_radius=3, derive_delay_s=0.05))
        old = coord.request(entity)
        await asyncio.sleep(0)
        coord.cancel(entity.entity_id)
        new = coord.request(entity)
        assert coord.request(entity, force=True) is new

        await asyncio.gather(old, return_exceptions=True)
        live = [
            t for t in asyncio.all_tasks()
            if t.get_name() == f"derive-{entity.entity_id}" and not t.done()
        ]
        assert live == [new]

        await coord.wait_idle()
        # cancelled run, replacement run, one queued re-run
        assert entity.body.derive_calls == 3
        assert coord.is_derived(entity.entity_id)

    @pytest.mark.asyncio
    async def test_rerun_uses_latest_entity(self, make_entity):
        done = []
        coord = DerivationCoordinator(on_complete=done.append)
        body = BodyData(combat_zone_radius=3, derive_delay_s=0.01)
        first = make_entity(body=body)
        second = make_entity(body=body)
        coord.request(first)
        coord.request(second, force=True)
        await coord.wait_idle()
        assert done[0] is first
        assert done[1] is second


class TestCompletionErrors:
    @pytest.mark.asyncio
    async def test_callback_error_is_logged(self, make_entity, caplog):
        def broken_update(entity):
            raise RuntimeError("render failed")

        coord = DerivationCoordinator(on_complete=broken_update)
        entity = make_entity()

        with caplog.at_level(logging.ERROR, logger="combatzones.zones.derivation"):
            task = coord.request(entity)
            await coord.wait_idle()

        assert task.exception() is None
        assert coord.is_derived(entity.entity_id)
        records = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(records) == 1
        assert "Zone update after derivation failed for E1" in records[0].getMessage()
        assert records[0].exc_info is not None
