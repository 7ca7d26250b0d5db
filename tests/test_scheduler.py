from __future__ import annotations

import asyncio
import contextlib
from datetime import datetime

from fastapi.testclient import TestClient

from bshop.db import SnapshotRepository
from bshop.main import create_app
from bshop.models import AppointmentStatus
from bshop.scheduler import run_completion_loop, run_sweep


def test_run_sweep(store, clock):
    appt = store.book("c1", "b1", "beard", "2024-01-10", "09:00")
    store.approve(appt.id)
    clock.now = datetime(2024, 1, 10, 9, 45)
    assert run_sweep(store) == 1
    assert run_sweep(store) == 0


def test_completion_loop_polls_until_cancelled(store, clock):
    appt = store.book("c1", "b1", "beard", "2024-01-10", "09:00")
    store.approve(appt.id)

    async def main():
        task = asyncio.create_task(run_completion_loop(store, 0.01))
        await asyncio.sleep(0.03)
        assert store.get_appointment(appt.id).status == AppointmentStatus.confirmed
        clock.now = datetime(2024, 1, 10, 9, 30)
        await asyncio.sleep(0.05)
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    asyncio.run(main())
    assert store.get_appointment(appt.id).status == AppointmentStatus.completed


def test_lifespan_starts_and_stops_sweeper(store, clock, test_settings):
    appt = store.book("c1", "b1", "beard", "2024-01-10", "09:00")
    store.approve(appt.id)
    clock.now = datetime(2024, 1, 10, 12, 0)

    settings = test_settings.model_copy(update={"sweep_interval_seconds": 0.01})
    with TestClient(create_app(settings=settings, store=store)) as client:
        assert client.get("/health").status_code == 200
    # first sweep runs as soon as the loop starts
    assert store.get_appointment(appt.id).status == AppointmentStatus.completed


def test_lifespan_bootstraps_sqlite_store(tmp_path, test_settings):
    url = f"sqlite:///{tmp_path / 'bshop.db'}"
    settings = test_settings.model_copy(update={"database_url": url})

    with TestClient(create_app(settings=settings)) as client:
        assert len(client.get("/api/services").json()) == 4
        resp = client.post(
            "/api/appointments",
            json={"clientId": "c1", "barberId": "b1", "serviceId": "2", "date": "2030-01-10", "time": "10:00"},
        )
        assert resp.status_code == 201
        appt_id = resp.json()["id"]

        resp = client.post(f"/api/appointments/{appt_id}/cancel", json={"reason": "sick"})
        assert resp.status_code == 200
        assert resp.json()["penalty"] == 12.5

    doc = SnapshotRepository.from_url(url).load("bshop-storage")
    stored = next(a for a in doc["appointments"] if a["id"] == appt_id)
    assert stored["status"] == "CANCELLED"
