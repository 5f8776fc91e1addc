from fastapi.testclient import TestClient

from server import app


def test_health():
    client = TestClient(app)
    res = client.get("/")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert "python_version" in body
    assert "timestamp" in body


def test_main_serves_app_with_uvicorn(monkeypatch):
    import server

    calls = []
    monkeypatch.setenv("HEALTH_PORT", "9123")
    monkeypatch.setattr(server.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))

    server.main()

    assert calls == [(server.app, {"host": "0.0.0.0", "port": 9123})]
