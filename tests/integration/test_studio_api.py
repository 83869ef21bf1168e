"""Studio REST API tests."""
import json
from unittest.mock import patch

import httpx
import pytest
from fastapi import status

from studio.main import app
from studio.models.records import Channel, ScriptOverview, VideoWithChannel, Voice
from studio.repositories.supabase import SupabaseRepository
from studio.services.session import SessionService


def ack(request):
    return httpx.Response(200, json={"success": True})


class TestHealthAPI:

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "ok"
        assert data["supabase_configured"] is True

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "dash-42"})
        assert response.headers["x-request-id"] == "dash-42"
        assert client.get("/health").headers["x-request-id"]


class TestChannelsAPI:
    """/api/v1/channels"""

    def test_list_channels(self, client, override_http):
        with patch.object(SupabaseRepository, "list_channels", return_value=[Channel(id=1, nome_canal="A")]) as list_channels:
            response = client.get("/api/v1/channels?order=nome_canal")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()[0]["nome_canal"] == "A"
        list_channels.assert_called_once_with("nome_canal")

    def test_channel_not_found(self, client, override_http, mock_supabase_client):
        mock_supabase_client.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []
        response = client.get("/api/v1/channels/99")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "CHANNEL_NOT_FOUND"

    def test_save_settings(self, client, override_http):
        override_http.routes[("POST", "/webhook/update")] = ack

        with patch.object(SupabaseRepository, "update_channel") as update_channel, \
                patch.object(SupabaseRepository, "get_channel", return_value=Channel(id=3, voz_prefereida=7)):
            response = client.put("/api/v1/channels/3/settings", json={
                "voice_id": 7, "prompt_titulo": "pt", "media_chars": 1500,
            })

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["voz_prefereida"] == 7
        body = override_http.json_bodies()[0]
        assert body["update_type"] == "updateChannel"
        assert body["id_canal"] == 3
        assert update_channel.call_args.args[1]["media_chars"] == 1500

    def test_update_image_not_acknowledged(self, client, override_http):
        override_http.routes[("POST", "/webhook/update")] = httpx.Response(200, json={"success": False})
        response = client.put("/api/v1/channels/3/image", json={"type": "image/png", "base64": "AAA"})
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["error"]["code"] == "IMAGE_UPDATE_FAILED"

    def test_delete_channel(self, client, override_http):
        override_http.routes[("POST", "/webhook/deletar")] = ack

        with patch.object(SupabaseRepository, "list_channels", return_value=[]):
            response = client.delete("/api/v1/channels/5")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []
        assert override_http.json_bodies() == [{"id": 5, "deleteType": "deleteChannel"}]

    def test_backend_unavailable(self, client, override_http):
        override_http.routes[("POST", "/webhook/deletar")] = httpx.Response(503, text="down")
        response = client.delete("/api/v1/channels/5")
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["error"]["code"] == "UPSTREAM_ERROR"


class TestVoicesAPI:
    """/api/v1/voices and /api/v1/image-models"""

    def test_search_voices(self, client, override_http):
        voices = [
            Voice(id=1, nome_voz="Adam", plataforma="ElevenLabs"),
            Voice(id=2, nome_voz="Bia", plataforma="Minimax"),
        ]
        with patch.object(SupabaseRepository, "list_voices", return_value=voices):
            response = client.get("/api/v1/voices?platform=Minimax")
        assert [v["id"] for v in response.json()] == [2]

    def test_collect_metadata(self, client, override_http):
        override_http.routes[("GET", "/v1/voices/el1")] = httpx.Response(200, json={
            "voice_id": "el1", "name": "Adam", "labels": {"language": "en", "gender": "male"},
        })

        with patch.object(SupabaseRepository, "get_api_key", return_value="sk"):
            response = client.post("/api/v1/voices/collect", json={"platform": "ElevenLabs", "voice_id": "el1"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "nome_voz": "Adam", "idioma": "Inglês", "genero": "Masculino", "preview_url": None,
        }

    def test_collect_metadata_manual_platform(self, client, override_http):
        response = client.post("/api/v1/voices/collect", json={"platform": "Outros", "voice_id": "x"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "MANUAL_ENTRY_REQUIRED"

    def test_create_manual_voice(self, client, override_http):
        with patch.object(SupabaseRepository, "get_platform_id", return_value=9), \
                patch.object(SupabaseRepository, "insert_voice") as insert_voice:
            response = client.post("/api/v1/voices", json={
                "platform": "Outros", "voice_id": "v-1", "nome_voz": "Voz", "idioma": "Português", "genero": "Feminino",
            })
        assert response.status_code == status.HTTP_201_CREATED
        assert insert_voice.call_args.args[0]["id_plataforma"] == 9

    def test_delete_voice(self, client, override_http):
        with patch.object(SupabaseRepository, "delete_voice") as delete_voice:
            response = client.delete("/api/v1/voices/4")
        assert response.status_code == status.HTTP_204_NO_CONTENT
        delete_voice.assert_called_once_with(4)

    def test_preview(self, client, override_http):
        voice = Voice(id=4, plataforma="ElevenLabs", preview_url="https://cdn/a.mp3")
        with patch.object(SupabaseRepository, "get_voice", return_value=voice):
            response = client.get("/api/v1/voices/4/preview")
        assert response.json() == {"voice_id": 4, "preview_url": "https://cdn/a.mp3"}

    def test_create_image_model_with_name(self, client, override_http):
        with patch.object(SupabaseRepository, "insert_image_model") as insert_model:
            response = client.post("/api/v1/image-models", json={"air": "runware:1@1", "name": "Flux"})
        assert response.status_code == status.HTTP_201_CREATED
        insert_model.assert_called_once_with({"air": "runware:1@1", "name": "Flux"})
        assert override_http.requests == []


class TestCreditsAPI:
    """/api/v1/credits"""

    def test_credits(self, client, override_http):
        override_http.routes[("GET", "/v1/user/subscription")] = httpx.Response(
            200, json={"character_limit": 10000, "character_count": 2000}
        )
        with patch.object(SupabaseRepository, "get_api_key", return_value="sk"):
            response = client.get("/api/v1/credits/ElevenLabs")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["credits"] == 8000
        assert data["formatted"] == "8.000"

    def test_unsupported_platform(self, client):
        response = client.get("/api/v1/credits/Minimax")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_missing_key(self, client, override_http):
        with patch.object(SupabaseRepository, "get_api_key", return_value=None):
            response = client.get("/api/v1/credits/Runware")
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["error"]["code"] == "API_KEY_NOT_FOUND"


class TestVideosAPI:
    """/api/v1/videos"""

    def test_list_videos(self, client):
        videos = [VideoWithChannel(id=1, title="T", channelName="A")]
        with patch.object(SupabaseRepository, "list_videos_with_channels", return_value=videos):
            response = client.get("/api/v1/videos")
        assert response.json()[0]["channelName"] == "A"

    def test_generate_videos(self, client, override_http):
        override_http.routes[("POST", "/webhook/gerarVideo")] = ack

        response = client.post("/api/v1/videos/generate", json={
            "videos": [{"id": 3, "data_publicar": "2026-10-20T10:00", "zoom_types": ["in"]}],
        })

        assert response.status_code == status.HTTP_202_ACCEPTED
        assert override_http.json_bodies() == [{
            "videos": [{"id": 3, "data_publicar": "2026-10-20T10:00", "zoom_types": ["in"]}],
        }]

    def test_generate_needs_videos(self, client, override_http):
        response = client.post("/api/v1/videos/generate", json={"videos": []})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert override_http.requests == []

    def test_delete_video(self, client, override_http):
        override_http.routes[("POST", "/webhook/deletar")] = ack
        response = client.delete("/api/v1/videos/8")
        assert response.status_code == status.HTTP_200_OK
        assert override_http.json_bodies() == [{"id": 8, "deleteType": "deleteVideo"}]


class TestScriptsAPI:
    """/api/v1/scripts"""

    SCRIPTS = [
        ScriptOverview(id=1, canal_id=1, canal_nome="A", audio_path="a.mp3"),
        ScriptOverview(id=2, canal_id=2, canal_nome="B"),
    ]

    def test_list_scripts(self, client, override_http):
        with patch.object(SupabaseRepository, "list_scripts_overview", return_value=self.SCRIPTS):
            response = client.get("/api/v1/scripts?status=with_audio")
        assert [s["id"] for s in response.json()] == [1]

    def test_invalid_status(self, client, override_http):
        response = client.get("/api/v1/scripts?status=broken")
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_regenerate_image(self, client, override_http):
        override_http.routes[("POST", "/webhook/gerarConteudo")] = ack

        response = client.post("/api/v1/scripts/2/images/1/regenerate", json={
            "altura": 768, "largura": 1344, "modelo": "runware:1@1", "prompt": "castelo",
        })

        assert response.status_code == status.HTTP_200_OK
        body = override_http.json_bodies()[0]
        assert body["tipo_geracao"] == "regen_image"
        assert body["id_roteiro"] == 2

    def test_delete_script(self, client, override_http):
        override_http.routes[("POST", "/webhook/deletar")] = ack
        client.delete("/api/v1/scripts/6")
        assert json.loads(override_http.requests[0].content) == {"id": 6, "deleteType": "deleteScript"}


class TestAuthAPI:
    """/auth"""

    @pytest.fixture(autouse=True)
    def fresh_session(self):
        app.state.session_service = SessionService()
        yield

    def test_login_success(self, client, mock_supabase_client, sample_user_data):
        response = client.post("/auth/login", json=sample_user_data)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["access_token"] == "test_access_token"
        assert data["user_id"] == "test_user_id"

        session = client.get("/auth/session").json()
        assert session == {"authenticated": True, "user_id": "test_user_id", "email": "test@example.com"}

    def test_login_invalid_credentials(self, client, mock_supabase_client, sample_user_data):
        mock_supabase_client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        response = client.post("/auth/login", json=sample_user_data)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"

    def test_login_invalid_email(self, client):
        response = client.post("/auth/login", json={"email": "invalid_email", "password": "x"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_logout(self, client, mock_supabase_client, sample_user_data):
        client.post("/auth/login", json=sample_user_data)
        response = client.post("/auth/logout")
        assert response.status_code == status.HTTP_200_OK
        assert client.get("/auth/session").json()["authenticated"] is False
