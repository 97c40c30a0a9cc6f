import asyncio
import uuid

import pytest
from sqlalchemy import select

from conftest import ScriptedProber, fail, make_supplier, ok
from supplier_hub.models import HealthStatus, Supplier, SupplierHealthCheck
from supplier_hub.services.errors import NotFoundError
from supplier_hub.services.health import HealthAggregator, derive_status


@pytest.mark.parametrize(
    "is_healthy, failures, expected",
    [
        (True, 0, HealthStatus.HEALTHY),
        (False, 1, HealthStatus.DEGRADED),
        (False, 2, HealthStatus.DEGRADED),
        (False, 3, HealthStatus.UNHEALTHY),
        (False, 7, HealthStatus.UNHEALTHY),
    ],
)
def test_derive_status(is_healthy, failures, expected):
    assert derive_status(is_healthy, failures) == expected


@pytest.mark.asyncio
async def test_assess_accumulates_counters_across_calls(session):
    supplier = await make_supplier(session, "Alpha")
    prober = ScriptedProber({"Alpha": [fail(), fail(), fail(), ok(250)]})
    aggregator = HealthAggregator(session, prober)

    snapshots = [await aggregator.assess_by_id(supplier.id) for _ in range(4)]

    assert [s.consecutive_failures for s in snapshots] == [1, 2, 3, 0]
    assert [s.status for s in snapshots] == [
        HealthStatus.DEGRADED,
        HealthStatus.DEGRADED,
        HealthStatus.UNHEALTHY,
        HealthStatus.HEALTHY,
    ]
    last = snapshots[-1]
    assert last.is_healthy is True
    assert last.total_requests == 4
    assert last.failed_requests == 3
    assert last.uptime_percentage == pytest.approx(25.0)
    assert last.response_time_ms == 250

    stored = (
        await session.execute(
            select(Supplier).where(Supplier.id == supplier.id).execution_options(populate_existing=True)
        )
    ).scalar_one()
    assert stored.total_requests == 4
    assert stored.failed_requests == 3
    assert stored.consecutive_failures == 0
    assert stored.is_healthy is True
    assert stored.last_check_time is not None


@pytest.mark.asyncio
async def test_assess_increments_stored_failure_streak(session):
    supplier = await make_supplier(
        session, "Streak", consecutive_failures=4, total_requests=10, failed_requests=4, uptime_percentage=60.0
    )
    aggregator = HealthAggregator(session, ScriptedProber({"Streak": fail("timeout after 3000ms")}))

    health = await aggregator.assess(supplier)

    assert health.consecutive_failures == 5
    assert health.total_requests == 11
    assert health.failed_requests == 5
    assert health.uptime_percentage == pytest.approx(6 / 11 * 100)
    assert health.status == HealthStatus.UNHEALTHY
    assert health.error_message == "timeout after 3000ms"
    assert health.response_time_ms == 0


@pytest.mark.asyncio
async def test_assess_writes_health_check_rows(session):
    supplier = await make_supplier(session, "Logged")
    aggregator = HealthAggregator(session, ScriptedProber({"Logged": [ok(120), fail("boom")]}))

    await aggregator.assess(supplier)
    await aggregator.assess_by_id(supplier.id)

    rows = (
        await session.execute(
            select(SupplierHealthCheck)
            .where(SupplierHealthCheck.supplier_id == supplier.id)
            .order_by(SupplierHealthCheck.checked_at)
        )
    ).scalars().all()
    assert [r.status for r in rows] == ["healthy", "degraded"]
    assert rows[0].response_time_ms == 120
    assert rows[1].error_message == "boom"


@pytest.mark.asyncio
async def test_prober_exception_counts_as_failed_probe(session):
    supplier = await make_supplier(session, "Flaky")
    aggregator = HealthAggregator(session, ScriptedProber({"Flaky": RuntimeError("socket closed")}))

    health = await aggregator.assess(supplier)

    assert health.is_healthy is False
    assert health.status == HealthStatus.DEGRADED
    assert health.error_message == "socket closed"


@pytest.mark.asyncio
async def test_assess_all_filters_by_category(session):
    await make_supplier(session, "C1", category="claude")
    await make_supplier(session, "C2", category="claude")
    await make_supplier(session, "X1", category="codex")
    prober = ScriptedProber()
    aggregator = HealthAggregator(session, prober)

    results = await aggregator.assess_all("claude")

    assert len(results) == 2
    assert sorted(prober.calls) == ["C1", "C2"]


@pytest.mark.asyncio
async def test_assess_unknown_supplier(session):
    aggregator = HealthAggregator(session, ScriptedProber())
    with pytest.raises(NotFoundError):
        await aggregator.assess_by_id(uuid.uuid4())


@pytest.mark.asyncio
async def test_trend_needs_three_checks(session):
    supplier = await make_supplier(session, "Trendy")
    aggregator = HealthAggregator(session, ScriptedProber({"Trendy": ok(100)}))

    await aggregator.assess(supplier)
    await aggregator.assess_by_id(supplier.id)
    assert await aggregator.trend(supplier.id) is None

    await aggregator.assess_by_id(supplier.id)
    analysis = await aggregator.trend(supplier.id)
    assert analysis is not None
    assert analysis.supplier_id == supplier.id
    assert analysis.sample_size == 3
    assert analysis.success_rate == 100.0
    assert analysis.trend == "stable"


class SlowProber(ScriptedProber):
    """先让出事件循环再返回结果，使两次检查的探测阶段重叠"""

    async def probe(self, supplier):
        await asyncio.sleep(0.05)
        return await super().probe(supplier)


@pytest.mark.asyncio
async def test_concurrent_assessments_do_not_lose_counts(file_session_factory):
    async with file_session_factory() as seed_session:
        supplier = await make_supplier(seed_session, "Busy")
    prober = SlowProber({"Busy": fail()})

    async def run():
        async with file_session_factory() as sess:
            return await HealthAggregator(sess, prober).assess_by_id(supplier.id)

    first, second = await asyncio.gather(run(), run())

    assert sorted([first.consecutive_failures, second.consecutive_failures]) == [1, 2]
    assert sorted([first.total_requests, second.total_requests]) == [1, 2]
    async with file_session_factory() as check:
        stored = (await check.execute(select(Supplier).where(Supplier.id == supplier.id))).scalar_one()
    assert stored.total_requests == 2
    assert stored.failed_requests == 2
    assert stored.consecutive_failures == 2
    assert stored.uptime_percentage == pytest.approx(0.0)


@pytest.mark.asyncio
async def test_assess_supplier_deleted_mid_check(session):
    supplier = await make_supplier(session, "Gone")

    class DeletingProber:
        async def probe(self, target):
            await session.delete(target)
            await session.commit()
            return ok()

    with pytest.raises(NotFoundError):
        await HealthAggregator(session, DeletingProber()).assess(supplier)
