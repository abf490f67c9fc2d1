from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from confpay.utils.rate_limit import check_rate_limit, rate_limit_health_info


def _make_app(times=2, seconds=60):
    app = FastAPI()

    @app.get("/limited")
    async def limited(request: Request):
        await check_rate_limit(request, times, seconds, scope="a")
        return {"ok": True}

    @app.get("/limitedB")
    async def limited_b(request: Request):
        await check_rate_limit(request, times, seconds, scope="b")
        return {"ok": True}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app


def test_rate_limit_fallback_blocks_after_limit(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_make_app(times=2, seconds=60))

    assert client.get("/limited").status_code == 200
    assert client.get("/limited").status_code == 200
    assert client.get("/limited").status_code == 429


def test_rate_limit_is_per_scope(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_make_app(times=1, seconds=60))

    assert client.get("/limited").status_code == 200
    assert client.get("/limitedB").status_code == 200
    assert client.get("/limited").status_code == 429


def test_rate_limit_disabled_never_blocks(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    app = _make_app(times=1, seconds=60)
    app.state.rate_limit_enabled = False
    client = TestClient(app)

    for _ in range(3):
        assert client.get("/limited").status_code == 200


def test_health_info_reports_disabled():
    app = _make_app()
    app.state.rate_limit_enabled = False
    info = TestClient(app).get("/rl_info").json()
    assert info["enabled"] is False
