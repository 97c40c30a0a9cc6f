import uuid

import pytest
from sqlalchemy import func, select

from conftest import ScriptedProber, fail, make_supplier
from supplier_hub.models import Supplier
from supplier_hub.repositories import SupplierRepository
from supplier_hub.schemas import SupplierCreate, SupplierUpdate, mask_token
from supplier_hub.services.errors import NotFoundError, SupplierValidationError
from supplier_hub.services.suppliers import SupplierService, validate_fields


def _payload(name: str = "Anthropic Direct", **overrides) -> SupplierCreate:
    values = {
        "category": "claude",
        "name": name,
        "base_url": "https://api.anthropic.com",
        "auth_token": "sk-ant-0123456789abcdef",
    }
    values.update(overrides)
    return SupplierCreate(**values)


async def _count(session) -> int:
    return (await session.execute(select(func.count(Supplier.id)))).scalar_one()


def test_validate_fields_lists_every_problem():
    errors = validate_fields("gemini", "", "ftp://example.com", " ")
    assert errors == [
        "供应商名称不能为空",
        "访问URL格式不正确",
        "访问密钥不能为空",
        "供应商类型必须是 'claude' 或 'codex'",
    ]
    assert validate_fields("codex", "ok", "http://localhost:8080", "token") == []


def test_mask_token():
    assert mask_token("sk-ant-0123456789abcdef") == "sk-a...cdef"
    assert mask_token("short") == "****"
    assert mask_token("") == ""


@pytest.mark.asyncio
async def test_create_and_duplicate_name(session):
    svc = SupplierService(session)
    supplier = await svc.create_supplier(_payload())
    assert supplier.is_active is False
    assert supplier.auto_update is False

    with pytest.raises(SupplierValidationError) as exc:
        await svc.create_supplier(_payload())
    assert "已存在" in exc.value.message
    assert await _count(session) == 1


@pytest.mark.asyncio
async def test_create_rejects_invalid_payload_without_writing(session):
    svc = SupplierService(session)
    with pytest.raises(SupplierValidationError) as exc:
        await svc.create_supplier(_payload(base_url="api.anthropic.com", category="other"))
    assert len(exc.value.errors) == 2
    assert await _count(session) == 0


@pytest.mark.asyncio
async def test_update_partial_fields_and_activation(session):
    other = await make_supplier(session, "Other", is_active=True)
    target = await make_supplier(session, "Target")
    svc = SupplierService(session)

    updated = await svc.update_supplier(
        target.id, SupplierUpdate(base_url="https://relay.example.com", is_active=True, sort_order=3)
    )

    assert updated.base_url == "https://relay.example.com"
    assert updated.sort_order == 3
    assert updated.is_active is True
    assert updated.name == "Target"
    refreshed_other = await svc.get_supplier(other.id)
    assert refreshed_other.is_active is False


@pytest.mark.asyncio
async def test_update_rejects_name_taken_by_another_supplier(session):
    await make_supplier(session, "Taken")
    target = await make_supplier(session, "Mine")
    svc = SupplierService(session)

    with pytest.raises(SupplierValidationError):
        await svc.update_supplier(target.id, SupplierUpdate(name="Taken"))
    # 保持原名不算重名
    renamed = await svc.update_supplier(target.id, SupplierUpdate(name="Mine"))
    assert renamed.name == "Mine"


@pytest.mark.asyncio
async def test_delete_and_missing_supplier(session):
    supplier = await make_supplier(session, "Doomed")
    svc = SupplierService(session)

    assert await svc.delete_supplier(supplier.id) is True
    with pytest.raises(NotFoundError):
        await svc.delete_supplier(supplier.id)
    with pytest.raises(NotFoundError):
        await svc.get_supplier(uuid.uuid4())


@pytest.mark.asyncio
async def test_set_active_is_exclusive_within_category(session):
    a = await make_supplier(session, "A", is_active=True)
    b = await make_supplier(session, "B")
    x = await make_supplier(session, "X", category="codex", is_active=True)
    repo = SupplierRepository(session)

    assert await repo.set_active(b.id, True) is True

    active = await repo.list_suppliers("claude")
    assert [s.name for s in active if s.is_active] == ["B"]
    assert (await repo.get(x.id)).is_active is True
    assert (await repo.get(a.id)).is_active is False

    # 取消激活只影响自身
    assert await repo.set_active(b.id, False) is True
    assert await repo.get_active("claude") is None
    assert await repo.set_active(uuid.uuid4(), True) is False


@pytest.mark.asyncio
async def test_test_connection_leaves_health_counters_alone(session):
    supplier = await make_supplier(session, "Probe")
    prober = ScriptedProber({"Probe": fail("refused")})
    svc = SupplierService(session, prober)

    result = await svc.test_connection(supplier.id)

    assert result.success is False
    assert result.error == "refused"
    stored = await svc.get_supplier(supplier.id)
    assert stored.total_requests == 0
    assert stored.consecutive_failures == 0


@pytest.mark.asyncio
async def test_stats(session):
    await make_supplier(session, "C1", is_active=True)
    await make_supplier(session, "C2")
    await make_supplier(session, "X1", category="codex")

    stats = await SupplierService(session).get_stats()

    assert stats.claude == 2
    assert stats.codex == 1
    assert stats.total == 3
    assert stats.active_claude == "C1"
    assert stats.active_codex is None


@pytest.mark.asyncio
async def test_import_is_all_or_nothing(session):
    await make_supplier(session, "Existing")
    svc = SupplierService(session)

    with pytest.raises(SupplierValidationError) as exc:
        await svc.import_suppliers(
            [_payload("Fresh"), _payload("Existing"), _payload("Broken", base_url="nope")]
        )
    assert len(exc.value.errors) == 2
    assert await _count(session) == 1

    created = await svc.import_suppliers([_payload("One"), _payload("Two", category="codex")])
    assert [(s.name, s.sort_order) for s in created] == [("One", 0), ("Two", 1)]
    assert await _count(session) == 3


@pytest.mark.asyncio
async def test_import_rejects_duplicates_inside_batch(session):
    with pytest.raises(SupplierValidationError):
        await SupplierService(session).import_suppliers([_payload("Twin"), _payload("Twin")])
    assert await _count(session) == 0


@pytest.mark.asyncio
async def test_export_round_trips_into_import(session):
    await make_supplier(session, "Keep", opus_model="claude-opus")
    exported = await SupplierService(session).export_suppliers()

    assert exported[0].auth_token == "sk-keep-0123456789"
    assert exported[0].opus_model == "claude-opus"
    SupplierCreate.model_validate(exported[0].model_dump())
