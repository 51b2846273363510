import pytest
from fastapi.testclient import TestClient

from cep_lookup.core.config import settings
from cep_lookup.main import create_app
from cep_lookup.routers.cep import service_dep

from .conftest import PAULISTA, FakeViaCep


@pytest.fixture
def client(upstream, make_service):
    app = create_app()
    app.dependency_overrides[service_dep] = lambda: make_service(upstream)
    return TestClient(app)


def test_health_reports_upstream_config(client):
    body = client.get("/v1/health").json()
    assert body["status"] == "ok"
    assert body["upstream"] == settings.VIACEP_BASE_URL
    assert body["timeout_ms"] == settings.CEP_TIMEOUT_MS


def test_app_starts_and_stops_cleanly(upstream, make_service):
    app = create_app()
    app.dependency_overrides[service_dep] = lambda: make_service(upstream)
    with TestClient(app) as c:
        assert c.get("/v1/cep/01310-100").status_code == 200


def test_cors_preflight_allows_api_key_header(client):
    r = client.options("/v1/cep/01310100", headers={
        "Origin": "https://app.example",
        "Access-Control-Request-Method": "GET",
        "Access-Control-Request-Headers": "x-api-key",
    })
    assert r.status_code == 200
    assert "x-api-key" in r.headers["access-control-allow-headers"].lower()


def test_get_cep_success(client):
    r = client.get("/v1/cep/01310100")
    assert r.status_code == 200
    body = r.json()
    assert body["cep"] == "01310-100"
    assert body["address"]["street"] == "Avenida Paulista"
    assert body["address"]["uf"] == "SP"
    assert r.headers["X-Request-Id"]


def test_request_id_is_echoed(client):
    r = client.get("/v1/ping", headers={"x-request-id": "abc-123"})
    assert r.headers["X-Request-Id"] == "abc-123"


@pytest.mark.parametrize("cep,status,kind", [
    ("123", 400, "INVALID_FORMAT"),
    ("00000000", 404, "NOT_FOUND"),
])
def test_get_cep_failures(client, cep, status, kind):
    r = client.get(f"/v1/cep/{cep}")
    assert r.status_code == status
    assert r.json()["detail"]["kind"] == kind


def test_upstream_outage_is_bad_gateway(make_service):
    app = create_app()
    app.dependency_overrides[service_dep] = lambda: make_service(FakeViaCep(status=503))
    r = TestClient(app).get("/v1/cep/01310100")
    assert r.status_code == 502
    assert r.json()["detail"]["message"] == "Erro de conexão. Verifique sua internet"


def test_drifted_upstream_is_bad_gateway(make_service):
    fake = FakeViaCep(bodies={"01310100": dict(PAULISTA, uf="SPX")})
    app = create_app()
    app.dependency_overrides[service_dep] = lambda: make_service(fake)
    r = TestClient(app).get("/v1/cep/01310100")
    assert r.status_code == 502
    assert r.json()["detail"]["kind"] == "INVALID_RESPONSE"


def test_batch_survives_one_drifted_item(make_service):
    fake = FakeViaCep(bodies={
        "01310100": PAULISTA,
        "22222222": dict(PAULISTA, cep="22222-222", uf="S"),
    })
    app = create_app()
    app.dependency_overrides[service_dep] = lambda: make_service(fake)
    r = TestClient(app).post("/v1/cep/batch", json={"ceps": ["01310100", "22222222"]})
    assert r.status_code == 200
    results = r.json()["results"]
    assert [i["input"] for i in results] == ["01310100", "22222222"]
    assert results[0]["address"]["uf"] == "SP"
    assert results[1]["address"] is None
    assert results[1]["error"] == "INVALID_RESPONSE"


def test_batch_preserves_order(client):
    r = client.post("/v1/cep/batch", json={"ceps": ["01310100", "99999999", "12"]})
    assert r.status_code == 200
    results = r.json()["results"]
    assert [i["input"] for i in results] == ["01310100", "99999999", "12"]
    assert results[0]["address"]["city"] == "São Paulo"
    assert results[1]["error"] == "NOT_FOUND"
    assert results[2]["error"] == "INVALID_FORMAT"


def test_batch_rejects_oversized_request(client, monkeypatch):
    monkeypatch.setattr(settings, "BATCH_MAX_ITEMS", 2)
    r = client.post("/v1/cep/batch", json={"ceps": ["1", "2", "3"]})
    assert r.status_code == 400


def test_batch_rejects_empty_list(client):
    assert client.post("/v1/cep/batch", json={"ceps": []}).status_code == 422


def test_api_key_required_when_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "secret")
    assert client.get("/v1/cep/01310100").status_code == 401
    assert client.get("/v1/cep/01310100", headers={"x-api-key": "secret"}).status_code == 200


def test_metrics_endpoint(client):
    client.get("/v1/cep/01310100")
    r = client.get("/v1/metrics")
    assert r.status_code == 200
    assert "cep_lookups_total" in r.text
