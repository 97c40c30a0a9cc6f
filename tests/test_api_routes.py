import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from conftest import ScriptedProber, fail, make_supplier, ok
from supplier_hub.core.database import get_db
from supplier_hub.deps import get_health_prober
from supplier_hub.main import app

API = "/api/v1"


@pytest_asyncio.fixture
async def api(session_factory):
    prober = ScriptedProber()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_health_prober] = lambda: prober
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        client.prober = prober
        yield client
    app.dependency_overrides.clear()


def _body(name: str, category: str = "claude") -> dict:
    return {
        "category": category,
        "name": name,
        "base_url": f"https://{name.lower()}.example.com",
        "auth_token": "sk-live-abcdefghijklmnop",
    }


@pytest.mark.asyncio
async def test_supplier_crud_flow(api):
    resp = await api.post(f"{API}/suppliers", json=_body("Relay"))
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["success"] is True
    created = payload["data"]
    assert created["auth_token_masked"] == "sk-l...mnop"
    assert "auth_token" not in created
    supplier_id = created["id"]

    resp = await api.patch(f"{API}/suppliers/{supplier_id}", json={"timeout_ms": 5000})
    assert resp.json()["data"]["timeout_ms"] == 5000

    resp = await api.get(f"{API}/suppliers", params={"category": "claude"})
    assert [s["name"] for s in resp.json()["data"]] == ["Relay"]

    resp = await api.get(f"{API}/suppliers/{supplier_id}")
    assert resp.json()["data"]["name"] == "Relay"

    resp = await api.delete(f"{API}/suppliers/{supplier_id}")
    assert resp.json() == {"success": True, "data": True, "message": None}

    resp = await api.get(f"{API}/suppliers/{supplier_id}")
    assert resp.status_code == 200
    assert resp.json()["success"] is False
    assert resp.json()["message"] == "供应商不存在"


@pytest.mark.asyncio
async def test_validation_failures_are_reported_in_band(api):
    resp = await api.post(f"{API}/suppliers", json={**_body("Bad"), "base_url": "relay.example.com"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is False
    assert body["data"]["errors"] == ["访问URL格式不正确"]

    resp = await api.post(f"{API}/suppliers/validate", json={**_body("Bad"), "category": "gemini"})
    assert resp.json()["success"] is False
    assert resp.json()["data"] is False

    resp = await api.post(f"{API}/suppliers/validate", json=_body("Good"))
    assert resp.json() == {"success": True, "data": True, "message": None}


@pytest.mark.asyncio
async def test_malformed_body_is_rejected(api):
    resp = await api.post(f"{API}/suppliers", json={"name": "missing fields"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_stats_import_export(api):
    resp = await api.post(
        f"{API}/suppliers/import", json=[_body("One"), _body("Two", category="codex")]
    )
    assert resp.json()["success"] is True
    assert len(resp.json()["data"]) == 2

    first = resp.json()["data"][0]["id"]
    resp = await api.post(f"{API}/suppliers/{first}/activate", json={"is_active": True})
    assert resp.json()["data"] is True

    stats = (await api.get(f"{API}/suppliers/stats")).json()["data"]
    assert stats == {"claude": 1, "codex": 1, "total": 2, "active_claude": "One", "active_codex": None}

    exported = (await api.get(f"{API}/suppliers/export")).json()["data"]
    assert {e["name"] for e in exported} == {"One", "Two"}
    assert exported[0]["auth_token"] == "sk-live-abcdefghijklmnop"


@pytest.mark.asyncio
async def test_health_endpoints(api, session_factory):
    async with session_factory() as session:
        supplier = await make_supplier(session, "Checked")
    api.prober.outcomes["Checked"] = [fail(), ok(300), ok(300)]

    resp = await api.post(f"{API}/suppliers/{supplier.id}/health")
    health = resp.json()["data"]
    assert health["status"] == "degraded"
    assert health["consecutive_failures"] == 1

    resp = await api.post(f"{API}/suppliers/health")
    assert resp.json()["data"][0]["status"] == "healthy"

    resp = await api.get(f"{API}/suppliers/{supplier.id}/trend")
    assert resp.json()["success"] is True
    assert resp.json()["data"] is None

    await api.post(f"{API}/suppliers/{supplier.id}/health")
    trend = (await api.get(f"{API}/suppliers/{supplier.id}/trend")).json()["data"]
    assert trend["sample_size"] == 3
    assert trend["success_rate"] == pytest.approx(66.67)

    resp = await api.post(f"{API}/suppliers/{supplier.id}/test")
    assert resp.json()["success"] is True
    assert resp.json()["data"]["response_time_ms"] == 300


@pytest.mark.asyncio
async def test_failover_endpoints(api, session_factory):
    async with session_factory() as session:
        primary = await make_supplier(session, "Primary", is_active=True)
        backup = await make_supplier(session, "Backup")
    api.prober.outcomes.update({"Primary": fail(), "Backup": ok(500)})

    config = (await api.get(f"{API}/failover/claude/config")).json()["data"]
    assert config["max_consecutive_failures"] == 3

    resp = await api.put(f"{API}/failover/claude/config", json={**config, "min_success_rate": 150})
    assert resp.json()["success"] is False

    resp = await api.post(f"{API}/failover/claude/auto")
    result = resp.json()
    assert result["success"] is True
    assert result["data"]["to_supplier_id"] == str(backup.id)

    progress = (await api.get(f"{API}/failover/progress/{result['data']['switch_id']}")).json()
    assert progress["data"]["is_completed"] is True

    status = (await api.get(f"{API}/failover/claude/status")).json()["data"]
    assert status["active_supplier_name"] == "Backup"
    assert status["is_transitioning"] is False

    resp = await api.post(
        f"{API}/failover/switch",
        json={"from_supplier_id": str(backup.id), "to_supplier_id": str(primary.id)},
    )
    assert resp.json()["success"] is True

    resp = await api.post(
        f"{API}/failover/switch",
        json={"from_supplier_id": str(primary.id), "to_supplier_id": str(uuid.uuid4())},
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is False

    missing = (await api.get(f"{API}/failover/progress/unknown")).json()
    assert missing["success"] is False


@pytest.mark.asyncio
async def test_metrics_endpoint(api):
    await api.get(f"{API}/suppliers")
    resp = await api.get("/metrics")
    assert resp.status_code == 200
    assert "supplier_hub_request_total" in resp.text
    assert resp.headers["content-type"].startswith("text/plain")


@pytest.mark.asyncio
async def test_trace_id_is_echoed_or_generated(api):
    resp = await api.get(f"{API}/suppliers", headers={"X-Trace-Id": "desk-42"})
    assert resp.headers["X-Trace-Id"] == "desk-42"

    resp = await api.get(f"{API}/suppliers", headers={"X-Trace-Id": "x" * 100})
    generated = resp.headers["X-Trace-Id"]
    assert generated != "x" * 100
    assert len(generated) == 32

    resp = await api.get(f"{API}/suppliers")
    assert len(resp.headers["X-Trace-Id"]) == 32
