import pytest
from fastapi.testclient import TestClient

from app.proxy.config import ProxyConfig, get_proxy_config
from app.utils_tests.backend_stub import BackendStub

TEST_BACKEND_URL = "http://backend.test"


@pytest.fixture
def proxy_config():
    return ProxyConfig(backend_url=TEST_BACKEND_URL, timeout=5.0)


@pytest.fixture
def backend(monkeypatch):
    """Replace the outbound HTTP client with a scripted backend."""
    stub = BackendStub()
    monkeypatch.setattr(
        "app.proxy.forwarder.create_backend_client", lambda config: stub.client(config)
    )
    return stub


@pytest.fixture
def test_client(proxy_config, backend):
    from app.server import app

    app.dependency_overrides[get_proxy_config] = lambda: proxy_config
    with TestClient(app, follow_redirects=False) as client:
        yield client
    app.dependency_overrides.clear()
