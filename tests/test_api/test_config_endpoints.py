"""
설정 API 엔드포인트 테스트

/api/v1/config, /health API의 통합 테스트입니다.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from admin_api.dependencies import set_orchestrator, set_settings, set_store
from admin_api.middleware.auth import DEV_API_KEY, reset_api_key_auth
from admin_api.server import create_app
from propreload import ReloaderSettings


@pytest.fixture
def settings():
    return ReloaderSettings(env="dev")


@pytest.fixture
async def app_client(orchestrator, settings, monkeypatch):
    """테스트용 FastAPI 앱 클라이언트 (실제 저장소 + 가짜 마커)"""
    monkeypatch.setenv("ENV", "dev")
    monkeypatch.delenv("ADMIN_API_KEY", raising=False)
    monkeypatch.delenv("ADMIN_API_KEYS", raising=False)
    reset_api_key_auth()
    set_settings(settings)
    set_store(None)
    set_orchestrator(orchestrator)
    orchestrator.reload(force=True)

    app = create_app(debug=True)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-API-Key": DEV_API_KEY},
    ) as client:
        yield client

    set_orchestrator(None)
    set_store(None)
    set_settings(None)
    reset_api_key_auth()


class TestAuth:
    """API Key 인증"""

    @pytest.mark.asyncio
    async def test_missing_api_key(self, app_client):
        response = await app_client.get("/api/v1/config", headers={"X-API-Key": ""})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_api_key(self, app_client):
        response = await app_client.get("/api/v1/config", headers={"X-API-Key": "wrong"})

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "INVALID_API_KEY"


class TestSnapshotEndpoint:
    """GET /api/v1/config 테스트"""

    @pytest.mark.asyncio
    async def test_get_snapshot(self, app_client):
        response = await app_client.get("/api/v1/config")

        assert response.status_code == 200
        data = response.json()
        assert data["properties"] == {"foo": "fooval", "bar": "barval"}
        assert data["version"] == 1
        assert data["state"] == "idle"
        assert len(data["sources"]) == 2
        assert data["last_reloaded_at"] is not None

    @pytest.mark.asyncio
    async def test_get_property(self, app_client):
        response = await app_client.get("/api/v1/config/properties/foo")

        assert response.status_code == 200
        assert response.json() == {"key": "foo", "value": "fooval", "version": 1}

    @pytest.mark.asyncio
    async def test_get_property_not_found(self, app_client):
        response = await app_client.get("/api/v1/config/properties/missing")

        assert response.status_code == 404


class TestResolveEndpoint:
    """POST /api/v1/config/resolve 테스트"""

    @pytest.mark.asyncio
    async def test_resolve_with_value_and_default(self, app_client):
        response = await app_client.post(
            "/api/v1/config/resolve",
            json={"template": "${foo=x}/${port=8080}"},
        )

        assert response.status_code == 200
        assert response.json()["resolved"] == "fooval/8080"

    @pytest.mark.asyncio
    async def test_resolve_unresolved(self, app_client):
        response = await app_client.post(
            "/api/v1/config/resolve",
            json={"template": "${missing}"},
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "UNRESOLVED_PLACEHOLDER"

    @pytest.mark.asyncio
    async def test_resolve_unresolved_ignored(self, app_client):
        response = await app_client.post(
            "/api/v1/config/resolve",
            json={"template": "${missing}", "ignore_unresolvable": True},
        )

        assert response.status_code == 200
        assert response.json()["resolved"] == "${missing}"


class TestReloadEndpoint:
    """POST /api/v1/config/reload 테스트"""

    @pytest.mark.asyncio
    async def test_reload_without_change(self, app_client):
        response = await app_client.post("/api/v1/config/reload")

        assert response.status_code == 200
        assert response.json()["changed"] is False
        assert response.json()["version"] == 1

    @pytest.mark.asyncio
    async def test_reload_forced(self, app_client):
        response = await app_client.post("/api/v1/config/reload", params={"force": "true"})

        assert response.status_code == 200
        assert response.json()["changed"] is True
        assert response.json()["version"] == 2

    @pytest.mark.asyncio
    async def test_reload_picks_up_change(
        self, app_client, two_sources, write_properties, fake_markers
    ):
        write_properties("b.properties", bar="newBarVal")
        fake_markers.bump(two_sources[1])

        response = await app_client.post("/api/v1/config/reload")
        assert response.json()["changed"] is True

        response = await app_client.get("/api/v1/config/properties/bar")
        assert response.json()["value"] == "newBarVal"

    @pytest.mark.asyncio
    async def test_reload_listener_rejected(self, app_client, store):
        def reject():
            raise RuntimeError("busy")

        store.register_listener(pre=reject, name="pool")

        response = await app_client.post("/api/v1/config/reload", params={"force": "true"})

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["error"] == "LISTENER_REJECTED"
        assert detail["details"] == {"listener": "pool", "published": False}

    @pytest.mark.asyncio
    async def test_reload_source_failure(
        self, app_client, store, two_sources, write_properties, fake_markers
    ):
        write_properties("a.properties", text="bad=\\u12\n")
        fake_markers.bump(two_sources[0])

        response = await app_client.post("/api/v1/config/reload")

        assert response.status_code == 502
        assert response.json()["detail"]["error"] == "SOURCE_FAILED"
        assert store.read() == {"foo": "fooval", "bar": "barval"}


class TestUnavailable:
    """저장소 미초기화"""

    @pytest.mark.asyncio
    async def test_reload_without_orchestrator(self, settings, monkeypatch):
        monkeypatch.setenv("ENV", "dev")
        monkeypatch.delenv("ADMIN_API_KEY", raising=False)
        monkeypatch.delenv("ADMIN_API_KEYS", raising=False)
        reset_api_key_auth()
        set_settings(settings)
        set_store(None)
        set_orchestrator(None)
        app = create_app(debug=True)

        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers={"X-API-Key": DEV_API_KEY},
        ) as client:
            response = await client.post("/api/v1/config/reload")
            health = await client.get("/health")

        assert response.status_code == 503
        assert health.json()["status"] == "degraded"
        set_settings(None)


class TestHealthEndpoint:
    """GET /health 테스트"""

    @pytest.mark.asyncio
    async def test_health(self, app_client):
        response = await app_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["config_version"] == 1
        assert data["property_count"] == 2
        assert data["reload_state"] == "idle"

    @pytest.mark.asyncio
    async def test_readiness(self, app_client):
        response = await app_client.get("/health/ready")

        assert response.json() == {"status": "ready"}
