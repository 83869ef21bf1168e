"""pytest configuration."""
import json
import os
from unittest.mock import Mock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

# Test environment, set before the app is imported
os.environ["ENVIRONMENT"] = "testing"
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test_service_key"
os.environ["SUPABASE_ANON_KEY"] = "test_anon_key"
os.environ["API_BASE_URL"] = "http://backend.test"
os.environ["WEBHOOK_GENERATE_TITLE"] = "/webhook/gerarTitulo"
os.environ["WEBHOOK_GENERATE_SCRIPT"] = "/webhook/gerarRoteiro"
os.environ["WEBHOOK_PROCESS_VIDEO"] = "/webhook/processarVideo"
os.environ["WEBHOOK_PUBLISH_VIDEO"] = "/webhook/publicarVideo"
os.environ["YOUTUBE_API_ENDPOINT"] = "/api/youtube"
os.environ["YOUTUBE_API_KEY"] = "test_youtube_key"
os.environ["LOG_LEVEL"] = "DEBUG"

from studio.clients.http import get_http_client
from studio.clients.service_client import ServiceClient
from studio.logging.config import StructuredLogger
from studio.main import app
from studio.repositories.supabase import SupabaseRepository


class RecordingTransport:
    """httpx MockTransport handler that records requests and answers from a route table."""

    def __init__(self, routes=None, default=None):
        self.routes = routes or {}
        self.default = default
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for (method, path), response in self.routes.items():
            if request.method == method and request.url.path == path:
                return response(request) if callable(response) else response
        if self.default is not None:
            return self.default(request) if callable(self.default) else self.default
        return httpx.Response(404, text="not mocked")

    def json_bodies(self) -> list:
        return [json.loads(r.content) for r in self.requests if r.content]


def make_http_client(transport: RecordingTransport) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(transport))


@pytest.fixture(scope="session")
def setup_test_logging():
    """Plain text logs for tests."""
    StructuredLogger.setup_logging(log_level="DEBUG", enable_json=False)


@pytest.fixture(autouse=True)
def reset_client():
    """No Supabase client survives between tests."""
    SupabaseRepository.reset_client()
    yield
    SupabaseRepository.reset_client()
    app.dependency_overrides.clear()


@pytest.fixture
def client(setup_test_logging):
    """Test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def mock_supabase_client():
    """Fake Supabase client."""
    with patch("studio.repositories.supabase.create_client") as mock_create:
        mock_client = Mock()
        mock_create.return_value = mock_client

        mock_client.auth.sign_in_with_password.return_value = Mock(
            user=Mock(id="test_user_id", email="test@example.com"),
            session=Mock(
                access_token="test_access_token",
                refresh_token="test_refresh_token"
            )
        )
        mock_client.auth.get_session.return_value = None
        mock_client.auth.sign_out.return_value = None

        yield mock_client


@pytest.fixture
def transport():
    """Outbound HTTP fake; answers 404 until routes are added."""
    return RecordingTransport()


@pytest.fixture
def override_http(transport):
    """Route every outbound call of the app through `transport`."""
    async def _client():
        async with make_http_client(transport) as http_client:
            yield http_client

    app.dependency_overrides[get_http_client] = _client
    return transport


@pytest.fixture
def http_client(transport):
    """AsyncClient bound to `transport`."""
    return make_http_client(transport)


@pytest.fixture
def service_client(http_client):
    """ServiceClient bound to `transport`."""
    return ServiceClient(http_client=http_client)


@pytest.fixture
def sample_user_data():
    return {
        "email": "test@example.com",
        "password": "Test123!@#"
    }
