import satprep.api.health as health_api


def test_healthz_always_ok(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json().get("status") == "ok"


def test_readyz_in_memory_store(client):
    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "store": "memory"}


def test_readyz_ok_with_sql_store(client, sql_store, monkeypatch):
    monkeypatch.setattr(health_api, "get_store", lambda: sql_store)

    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "store": "sql"}


def test_readyz_missing_tables(client, sql_store, monkeypatch):
    class FakeInspector:
        def has_table(self, name):
            return False

    monkeypatch.setattr(health_api, "get_store", lambda: sql_store)
    monkeypatch.setattr(health_api, "inspect", lambda engine: FakeInspector())

    resp = client.get("/readyz")
    assert resp.status_code == 503
    assert "daily_challenge_sets" in resp.json()["detail"]


def test_readyz_db_unreachable(client, sql_store, monkeypatch):
    class BrokenEngine:
        def connect(self):
            raise RuntimeError("connection refused")

    monkeypatch.setattr(health_api, "get_store", lambda: sql_store)
    monkeypatch.setattr(health_api, "get_engine", lambda: BrokenEngine())

    resp = client.get("/readyz")
    assert resp.status_code == 503
    assert resp.json()["detail"] == "database unreachable"
