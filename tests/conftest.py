"""
Pytest configuration and shared fixtures
"""
import os

import pytest

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["MFA_STORE_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"

from eth_account import Account  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from web3_signer.core.config import Settings  # noqa: E402
from web3_signer.core.mfa_store import InMemoryMfaStore  # noqa: E402
from web3_signer.services.mfa_service import MfaService  # noqa: E402

# Well-known development key (account #0 of the Hardhat/Anvil test mnemonic)
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: fast tests with no I/O")
    config.addinivalue_line("markers", "integration: tests that drive the HTTP app in-process")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(environment="test", rate_limit_enabled=False, log_level="WARNING")


@pytest.fixture
def test_account():
    """Local account used to produce signatures"""
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def mfa_store() -> InMemoryMfaStore:
    return InMemoryMfaStore()


@pytest.fixture
def mfa_service(mfa_store, test_settings) -> MfaService:
    return MfaService(store=mfa_store, settings=test_settings)


@pytest.fixture
def app(test_settings, mfa_store):
    """Fresh application with its own in-memory MFA store"""
    from web3_signer.main import create_app

    return create_app(settings=test_settings, store=mfa_store)


@pytest.fixture
def client(app) -> TestClient:
    """Synchronous test client"""
    return TestClient(app)
