import asyncio
import uuid

import pytest
from sqlalchemy import select

from conftest import ScriptedProber, fail, make_supplier, ok
from supplier_hub.models import Supplier
from supplier_hub.services.failover import HealthMonitor, SwitchProgressTracker


@pytest.mark.asyncio
async def test_run_once_evaluates_every_category(session_factory):
    async with session_factory() as session:
        await make_supplier(session, "Down", is_active=True)
        await make_supplier(session, "Up")
        await make_supplier(session, "Codex", category="codex", is_active=True)

    prober = ScriptedProber({"Down": fail(), "Up": ok(), "Codex": ok()})
    monitor = HealthMonitor(session_factory=session_factory, prober=prober, interval_seconds=60)

    results = await monitor.run_once()

    assert results["claude"].success is True
    assert results["codex"].success is False
    assert "no action needed" in results["codex"].message
    async with session_factory() as session:
        active = (
            await session.execute(
                select(Supplier.name).where(Supplier.category == "claude", Supplier.is_active == True)  # noqa: E712
            )
        ).scalars().all()
    assert active == ["Up"]


@pytest.mark.asyncio
async def test_start_and_stop(session_factory):
    monitor = HealthMonitor(
        session_factory=session_factory, prober=ScriptedProber(), interval_seconds=0.1, categories=[]
    )

    monitor.start()
    assert monitor.running is True
    await asyncio.sleep(0.05)
    await monitor.stop()

    assert monitor.running is False
    # 重复 stop 不报错
    await monitor.stop()


@pytest.mark.asyncio
async def test_loop_survives_failing_cycle(session_factory, monkeypatch):
    monitor = HealthMonitor(
        session_factory=session_factory, prober=ScriptedProber(), interval_seconds=0.1, categories=[]
    )
    calls = {"n": 0}

    async def flaky_run_once():
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("cycle failed")
        return {}

    monkeypatch.setattr(monitor, "run_once", flaky_run_once)
    monitor.start()
    await asyncio.sleep(0.35)
    await monitor.stop()

    assert calls["n"] >= 2


def test_progress_tracker_lifecycle():
    tracker = SwitchProgressTracker()
    a, b = uuid.uuid4(), uuid.uuid4()

    progress = tracker.start("claude", a, b)
    assert tracker.is_transitioning("claude") is True
    assert tracker.current("claude").switch_id == progress.switch_id
    assert progress.total_steps == 4

    tracker.advance(progress.switch_id, "activate", rollback_available=True)
    assert progress.completed_steps == 2
    assert progress.overall_progress == 50
    assert progress.rollback_available is True

    tracker.complete(progress.switch_id)
    assert progress.overall_progress == 100
    assert tracker.is_transitioning("claude") is False
    assert tracker.current("claude") is None
    assert tracker.latest("claude").switch_id == progress.switch_id
    assert tracker.get(progress.switch_id).is_completed is True


def test_progress_tracker_marks_evaluation_and_errors():
    tracker = SwitchProgressTracker()
    tracker.mark_evaluating("codex", True)
    assert tracker.is_transitioning("codex") is True
    tracker.mark_evaluating("codex", False)
    assert tracker.is_transitioning("codex") is False

    progress = tracker.start("codex", None, uuid.uuid4())
    tracker.fail(progress.switch_id, "store down")
    assert progress.has_error is True
    assert progress.error_message == "store down"
    assert tracker.is_transitioning("codex") is False
