"""
Unit tests for the gateway service app.
"""

import pytest
from fastapi.testclient import TestClient

from service_gateway.app.auth.jwks import StaticKeySetSource
from service_gateway.app.auth.middleware import ACCESS_COOKIE, ACCESS_HEADER
from service_gateway.app.main import GatewayService, create_app
from shared.config import GatewayConfig
from shared.test_helpers import AUDIENCE, create_access_token, create_key_set, create_signing_key


@pytest.fixture(scope="module")
def signing_key():
    return create_signing_key()


@pytest.fixture
def environment():
    return {
        "AI_GATEWAY_API_KEY": "sk-gateway-key",
        "AI_GATEWAY_BASE_URL": "https://gateway.ai.cloudflare.com/v1/123/my-gw/openai/",
        "ANTHROPIC_API_KEY": "direct-key",
        "MOLTBOT_GATEWAY_TOKEN": "token",
        "PATH": "/usr/bin",
    }


@pytest.fixture
def config():
    return GatewayConfig(cf_access_team_domain="myteam", cf_access_aud=AUDIENCE, dev_mode=False)


@pytest.fixture
def client(config, signing_key, environment):
    """Create test client."""
    app = create_app(
        config=config,
        key_source=StaticKeySetSource(create_key_set(signing_key)),
        environment=environment,
    )
    return TestClient(app)


class TestGatewayService:
    """Test cases for GatewayService."""

    def test_root_endpoint(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "gateway"

    def test_health_is_public(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["dependencies"] == {"cloudflare_access": "configured"}
        assert "X-Request-ID" in response.headers

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_status_requires_token(self, client):
        response = client.get("/api/status")

        assert response.status_code == 401
        assert response.json()["code"] == "AUTHENTICATION_ERROR"

    def test_status_with_valid_token(self, client, signing_key):
        response = client.get("/api/status", headers={ACCESS_HEADER: create_access_token(signing_key)})

        assert response.status_code == 200
        assert response.json()["user"] == {"email": "john.doe@example.com", "sub": "user-123"}

    def test_status_with_cookie(self, client, signing_key):
        client.cookies.set(ACCESS_COOKIE, create_access_token(signing_key))
        response = client.get("/api/status")

        assert response.status_code == 200

    def test_status_with_expired_token(self, client, signing_key):
        token = create_access_token(signing_key, expires_in=-60)
        response = client.get("/api/status", headers={ACCESS_HEADER: token})

        assert response.status_code == 401
        body = response.json()
        assert body["code"] == "ACCESS_VERIFICATION_ERROR"
        assert body["request_id"]

    def test_container_env_lists_names_only(self, client, signing_key):
        response = client.get("/api/container/env", headers={ACCESS_HEADER: create_access_token(signing_key)})

        assert response.status_code == 200
        data = response.json()
        assert data["gateway_provider"] == "openai"
        assert data["variables"] == [
            "AI_GATEWAY_BASE_URL",
            "CLAWDBOT_GATEWAY_TOKEN",
            "OPENAI_API_KEY",
            "OPENAI_BASE_URL",
        ]
        assert "sk-gateway-key" not in response.text

    def test_container_env_requires_token(self, client):
        assert client.get("/api/container/env").status_code == 401

    def test_unconfigured_access_is_server_error(self, signing_key, environment):
        app = create_app(
            config=GatewayConfig(cf_access_team_domain=None, cf_access_aud=None, dev_mode=False),
            key_source=StaticKeySetSource(create_key_set(signing_key)),
            environment=environment,
        )
        response = TestClient(app).get("/api/status")

        assert response.status_code == 500
        assert response.json()["code"] == "CONFIGURATION_ERROR"

    def test_dev_mode_skips_access(self, environment):
        app = create_app(
            config=GatewayConfig(dev_mode=True),
            key_source=StaticKeySetSource({"keys": []}),
            environment=environment,
        )
        response = TestClient(app).get("/api/status")

        assert response.status_code == 200
        assert response.json()["dev_mode"] is True

    def test_service_exposed_on_app_state(self, config, signing_key):
        service = GatewayService(config=config, key_source=StaticKeySetSource(create_key_set(signing_key)))

        assert service.app.state.gateway_service is service
        assert service.environment_inputs() is not None
