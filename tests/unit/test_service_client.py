"""Automation backend client tests."""
import asyncio

import httpx
import pytest

from studio.clients.service_client import ServiceClient, youtube_watch_url
from studio.exceptions.handlers import NetworkError, UpstreamHTTPError


class TestServiceClientUrls:
    """Endpoint and webhook URL construction."""

    def test_get_webhook(self, service_client):
        assert service_client.get_webhook("generateContent") == "http://backend.test/webhook/gerarConteudo"

    def test_unknown_key_yields_base_url(self, service_client):
        assert service_client.get_webhook("doesNotExist") == "http://backend.test"
        assert service_client.get_endpoint("doesNotExist") == "http://backend.test"

    def test_get_endpoint(self, service_client):
        assert service_client.get_endpoint("youtube") == "http://backend.test/api/youtube"

    def test_watch_url(self):
        assert youtube_watch_url("abc123") == "https://www.youtube.com/watch?v=abc123"


class TestServiceClientCall:
    """Request issuing and response handling."""

    def test_json_body_parsed(self, transport, service_client):
        transport.routes[("POST", "/webhook/gerarConteudo")] = httpx.Response(200, json=[{"ok": 1}])

        result = asyncio.run(service_client.generate_content({"tipo_geracao": "gerar_titulos"}))

        assert result == [{"ok": 1}]
        request = transport.requests[0]
        assert request.headers["content-type"] == "application/json"
        assert request.headers["accept"] == "application/json"
        assert transport.json_bodies() == [{"tipo_geracao": "gerar_titulos"}]

    def test_text_fallback(self, transport, service_client):
        transport.routes[("POST", "/webhook/update")] = httpx.Response(200, text="Workflow was started")

        result = asyncio.run(service_client.update_channel({"id_canal": 1}))

        assert result == "Workflow was started"
        assert transport.json_bodies() == [{"update_type": "updateChannel", "id_canal": 1}]

    def test_non_2xx_raises_with_status(self, transport, service_client):
        transport.routes[("POST", "/webhook/deletar")] = httpx.Response(404, text="not registered")

        with pytest.raises(UpstreamHTTPError) as exc_info:
            asyncio.run(service_client.delete_content(7, "deleteScript"))

        assert exc_info.value.upstream_status == 404
        assert "404" in str(exc_info.value)
        assert "not registered" in str(exc_info.value)

    def test_connect_error_becomes_network_error(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        client = ServiceClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)))

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(client.process_video("v1"))

        assert "Check your internet connection" in str(exc_info.value)

    def test_dropped_connection_becomes_network_error(self):
        def disconnect(request):
            raise httpx.RemoteProtocolError("Server disconnected without sending a response.", request=request)

        client = ServiceClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(disconnect)))

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(client.delete_content(5, "deleteVideo"))

        assert isinstance(exc_info.value.cause, httpx.RemoteProtocolError)
        assert exc_info.value.url.endswith("/webhook/deletar")

    def test_absolute_url_used_as_is(self, transport, service_client):
        transport.default = httpx.Response(200, json={})

        asyncio.run(service_client.call("https://elsewhere.test/hook", method="GET"))

        assert str(transport.requests[0].url) == "https://elsewhere.test/hook"

    def test_call_sends_json_body_and_headers(self, transport, service_client):
        transport.default = httpx.Response(200, json={"ok": True})

        asyncio.run(service_client.call(
            "/webhook/custom", json_body={"id": 1}, headers={"X-Trace": "t1"},
        ))

        request = transport.requests[0]
        assert request.method == "POST"
        assert request.headers["x-trace"] == "t1"
        assert request.headers["content-type"] == "application/json"
        assert transport.json_bodies() == [{"id": 1}]


class TestServiceClientWrappers:
    """Argument shaping of the webhook wrappers."""

    def test_clone_channel_links(self, transport, service_client):
        transport.default = httpx.Response(200, json={"success": True})

        asyncio.run(service_client.clone_channel(
            "https://youtube.com/@source",
            [{"id": "v1", "title": "First"}, {"id": "v2", "title": "Second"}],
            "Meu Canal",
            "coleta_titulo",
        ))

        body = transport.json_bodies()[0]
        assert body["videos"] == [
            {"title": "First", "link": "https://www.youtube.com/watch?v=v1"},
            {"title": "Second", "link": "https://www.youtube.com/watch?v=v2"},
        ]
        assert body["selectedVideoCount"] == 2
        assert body["action"] == "coleta_titulo"

    def test_publish_without_schedule(self, transport, service_client):
        transport.default = httpx.Response(200, json={})

        asyncio.run(service_client.publish_video("v9"))

        assert transport.json_bodies() == [{"videoId": "v9"}]
        assert transport.requests[0].url.path == "/webhook/publicarVideo"

    def test_publish_with_schedule(self, transport, service_client):
        transport.default = httpx.Response(200, json={})

        asyncio.run(service_client.publish_video("v9", "2026-01-01T10:00:00Z"))

        assert transport.json_bodies() == [{"videoId": "v9", "scheduleDate": "2026-01-01T10:00:00Z"}]

    def test_update_channel_image(self, transport, service_client):
        transport.default = httpx.Response(200, json={"success": True})

        asyncio.run(service_client.update_channel_image(3, {"type": "image/png", "base64": "AAA"}))

        assert transport.json_bodies() == [{
            "update_type": "imageChannel",
            "id_canal": 3,
            "image_data": {"type": "image/png", "base64": "AAA"},
        }]

    def test_generate_title_default_model(self, transport, service_client):
        transport.default = httpx.Response(200, json={})

        asyncio.run(service_client.generate_title("idea", "prompt"))

        assert transport.json_bodies() == [{"idea": "idea", "prompt": "prompt", "model": "sonnet-4"}]
        assert transport.requests[0].url.path == "/webhook/gerarTitulo"

    def test_async_context_manager_closes(self, transport, service_client):
        async def run():
            async with service_client as client:
                return client
        client = asyncio.run(run())
        assert client._client.is_closed
