"""
Rate limits follow the settings each application is built with
"""
import pytest
from fastapi.testclient import TestClient

from web3_signer.api.dependencies import configure_limiter, limiter
from web3_signer.core.config import Settings
from web3_signer.core.mfa_store import InMemoryMfaStore
from web3_signer.main import create_app

VERIFY_LOGIN = "/api/v1/mfa/verify-login"
PAYLOAD = {"userIdentifier": "alice@example.com", "token": "123456"}


@pytest.fixture
def build_client(test_settings):
    """Builds clients for apps with their own rate-limit settings"""
    limiter.reset()

    def _build(**overrides) -> TestClient:
        settings = Settings(environment="test", **overrides)
        return TestClient(create_app(settings=settings, store=InMemoryMfaStore()))

    yield _build

    limiter.reset()
    configure_limiter(test_settings)


@pytest.mark.integration
def test_code_checks_are_rate_limited(build_client):
    client = build_client(rate_limit_enabled=True, rate_limit_mfa_verify="3/minute")

    statuses = [client.post(VERIFY_LOGIN, json=PAYLOAD).status_code for _ in range(4)]

    assert statuses == [401, 401, 401, 429]


@pytest.mark.integration
def test_disabled_in_settings_overrides_enabled_limiter(build_client):
    limiter.enabled = True

    client = build_client(rate_limit_enabled=False, rate_limit_mfa_verify="3/minute")
    statuses = [client.post(VERIFY_LOGIN, json=PAYLOAD).status_code for _ in range(12)]

    assert limiter.enabled is False
    assert statuses == [401] * 12


@pytest.mark.integration
def test_latest_app_settings_apply(build_client):
    build_client(rate_limit_enabled=True, rate_limit_mfa_verify="1/minute")
    client = build_client(rate_limit_enabled=True, rate_limit_mfa_verify="5/minute")

    statuses = [client.post(VERIFY_LOGIN, json=PAYLOAD).status_code for _ in range(6)]

    assert statuses == [401] * 5 + [429]


@pytest.mark.integration
def test_default_limit_applies_to_other_routes(build_client):
    client = build_client(rate_limit_enabled=True, rate_limit_default="2/minute")

    statuses = [client.get("/").status_code for _ in range(3)]

    assert statuses == [200, 200, 429]
    assert "Rate limit exceeded" in client.get("/").json()["error"]


@pytest.mark.integration
def test_health_and_metrics_are_exempt(build_client):
    client = build_client(rate_limit_enabled=True, rate_limit_default="1/minute")

    assert [client.get("/health").status_code for _ in range(3)] == [200] * 3
    assert [client.get("/metrics").status_code for _ in range(3)] == [200] * 3
