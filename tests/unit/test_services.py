"""Channel, voice catalog, script library and session service tests."""
import asyncio
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from studio.exceptions.handlers import (
    AppValidationError,
    ExternalServiceError,
    NotFoundError,
)
from studio.models.api import VoiceWriteRequest
from studio.models.records import Channel, ScriptOverview, Voice
from studio.services.channels import ChannelService, resolve_preferred_voice
from studio.services.scripts import ScriptLibraryService, group_by_channel
from studio.services.session import SessionService
from studio.services.voices import AutoCollector, VoiceCatalogService, requires_manual_entry


class TestChannelService:
    """Channel settings and lifecycle."""

    def test_resolve_preferred_voice(self):
        voices = [Voice(id=1), Voice(id=2)]
        assert resolve_preferred_voice(Channel(id=1, voz_prefereida=2), voices).id == 2
        assert resolve_preferred_voice(Channel(id=1, voz_prefereida=5), voices).id == 1
        assert resolve_preferred_voice(None, voices).id == 1
        assert resolve_preferred_voice(Channel(id=1), []) is None

    def test_save_settings(self):
        client = Mock()
        client.update_channel = AsyncMock(return_value="ok")
        repository = Mock()
        repository.get_channel.return_value = Channel(id=3, voz_prefereida=8)
        service = ChannelService(client, repository)

        channel = asyncio.run(service.save_settings(
            3, voice_id=8, prompt_titulo="pt", prompt_roteiro="pr",
            caption_style={"type": "highlight"}, media_chars=0,
        ))

        assert channel.voz_prefereida == 8
        body = client.update_channel.await_args.args[0]
        assert body["id_canal"] == 3
        assert body["media_chars"] is None
        repository.update_channel.assert_called_once_with(3, {
            "prompt_titulo": "pt",
            "prompt_roteiro": "pr",
            "voz_prefereida": 8,
            "caption_style": {"type": "highlight"},
            "media_chars": None,
        })

    def test_update_image_not_acknowledged(self):
        client = Mock()
        client.update_channel_image = AsyncMock(return_value={"success": False})
        service = ChannelService(client, Mock())
        with pytest.raises(ExternalServiceError) as exc_info:
            asyncio.run(service.update_image(3, {"type": "image/png", "base64": "AAA"}))
        assert exc_info.value.error_code == "IMAGE_UPDATE_FAILED"

    def test_update_image_rereads_channel(self):
        client = Mock()
        client.update_channel_image = AsyncMock(return_value=[{"success": True}])
        repository = Mock()
        repository.get_channel.return_value = Channel(id=3, profile_image="https://cdn/new.png")
        service = ChannelService(client, repository)

        channel = asyncio.run(service.update_image(3, {"type": "image/png", "base64": "AAA"}))

        assert channel.profile_image == "https://cdn/new.png"

    def test_delete_channel_reloads(self):
        client = Mock()
        client.delete_content = AsyncMock(return_value={"success": True})
        repository = Mock()
        repository.list_channels.return_value = [Channel(id=1)]
        service = ChannelService(client, repository)

        remaining = asyncio.run(service.delete_channel(2))

        client.delete_content.assert_awaited_once_with(2, "deleteChannel")
        assert [c.id for c in remaining] == [1]


class TestVoiceCatalogService:
    """Voice metadata collection and persistence."""

    def test_manual_entry_platforms(self):
        assert requires_manual_entry("Outros")
        assert not requires_manual_entry("ElevenLabs")

    def test_collect_metadata(self, transport, http_client):
        transport.routes[("GET", "/v1/voices/el1")] = httpx.Response(200, json={
            "voice_id": "el1", "name": "Bella",
            "labels": {"language": "es", "gender": "female"},
            "preview_url": "https://cdn/bella.mp3",
        })
        repository = Mock()
        repository.get_api_key.return_value = "sk"
        service = VoiceCatalogService(http_client, repository)

        metadata = asyncio.run(service.collect_metadata("ElevenLabs", " el1 "))

        assert metadata.nome_voz == "Bella"
        assert metadata.idioma == "Espanhol"
        assert metadata.genero == "Feminino"
        assert transport.requests[0].url.path == "/v1/voices/el1"

    def test_collect_metadata_missing_key(self, http_client):
        repository = Mock()
        repository.get_api_key.return_value = None
        service = VoiceCatalogService(http_client, repository)
        with pytest.raises(ExternalServiceError) as exc_info:
            asyncio.run(service.collect_metadata("Minimax", "v"))
        assert exc_info.value.message == "Minimax API key not found in database"

    def test_collect_metadata_blank_id(self, http_client):
        service = VoiceCatalogService(http_client, Mock())
        with pytest.raises(AppValidationError):
            asyncio.run(service.collect_metadata("ElevenLabs", " "))

    def test_create_manual_voice(self, http_client):
        repository = Mock()
        repository.get_platform_id.return_value = 4
        service = VoiceCatalogService(http_client, repository)

        row = asyncio.run(service.create_voice(VoiceWriteRequest(
            platform="Outros", voice_id="custom-1", nome_voz="Voz", idioma="Português", genero="Masculino",
        )))

        assert row == {
            "voice_id": "custom-1",
            "id_plataforma": 4,
            "nome_voz": "Voz",
            "idioma": "Português",
            "genero": "Masculino",
            "preview_url": None,
        }
        repository.insert_voice.assert_called_once_with(row)

    def test_manual_voice_requires_fields(self, http_client):
        repository = Mock()
        repository.get_platform_id.return_value = 4
        service = VoiceCatalogService(http_client, repository)
        with pytest.raises(AppValidationError):
            asyncio.run(service.create_voice(VoiceWriteRequest(platform="Outros", voice_id="x")))
        repository.insert_voice.assert_not_called()

    def test_unknown_platform_row(self, http_client):
        repository = Mock()
        repository.get_platform_id.return_value = None
        service = VoiceCatalogService(http_client, repository)
        with pytest.raises(NotFoundError):
            asyncio.run(service.update_voice(1, VoiceWriteRequest(platform="Nada", voice_id="x")))

    def test_search_voices(self, http_client):
        repository = Mock()
        repository.list_voices.return_value = [
            Voice(id=1, nome_voz="Bella", plataforma="ElevenLabs", idioma="Espanhol"),
            Voice(id=2, nome_voz="Narrador", plataforma="Fish-Audio", idioma="pt"),
        ]
        service = VoiceCatalogService(http_client, repository)

        assert [v.id for v in asyncio.run(service.search_voices("espa"))] == [1]
        assert [v.id for v in asyncio.run(service.search_voices(platform="Fish-Audio"))] == [2]

    def test_create_image_model_looks_up_name(self, transport, http_client):
        transport.routes[("POST", "/v1")] = httpx.Response(200, json={"data": [{"models": [{"air": "a:1@1", "name": "Flux"}]}]})
        repository = Mock()
        repository.get_api_key.return_value = "rw"
        service = VoiceCatalogService(http_client, repository)

        row = asyncio.run(service.create_image_model("a:1@1"))

        assert row == {"air": "a:1@1", "name": "Flux"}
        repository.insert_image_model.assert_called_once_with(row)


class TestAutoCollector:
    """Debounced metadata lookups."""

    def test_last_input_wins(self):
        service = Mock()
        service.collect_metadata = AsyncMock(side_effect=lambda platform, voice_id: voice_id)

        async def run():
            collector = AutoCollector(service, delay=0.01)
            collector.on_input("ElevenLabs", "a")
            collector.on_input("ElevenLabs", "ab")
            result = await collector.latest()
            await collector.aclose()
            return result

        assert asyncio.run(run()) == "ab"
        service.collect_metadata.assert_awaited_once_with("ElevenLabs", "ab")

    def test_manual_platform_cancels(self):
        service = Mock()
        service.collect_metadata = AsyncMock()

        async def run():
            collector = AutoCollector(service, delay=0.01)
            collector.on_input("ElevenLabs", "a")
            assert collector.on_input("Outros", "a") is None
            await asyncio.sleep(0.03)
            return await collector.latest()

        assert asyncio.run(run()) is None
        service.collect_metadata.assert_not_awaited()


class TestScriptLibraryService:
    """Script browsing, re-render and deletion."""

    @pytest.fixture
    def repository(self):
        repo = Mock()
        repo.list_scripts_overview.return_value = [
            ScriptOverview(id=1, canal_id=1, canal_nome="A", audio_path="a.mp3"),
            ScriptOverview(id=2, canal_id=2, canal_nome="B", images_path=["1.png"], video_id=2),
            ScriptOverview(id=3, canal_id=1, canal_nome="A"),
        ]
        return repo

    def test_filters(self, repository):
        library = ScriptLibraryService(Mock(), repository)
        assert [s.id for s in asyncio.run(library.list_scripts())] == [1, 2, 3]
        assert [s.id for s in asyncio.run(library.list_scripts(channel_id=1))] == [1, 3]
        assert [s.id for s in asyncio.run(library.list_scripts(status="with_audio"))] == [1]
        assert [s.id for s in asyncio.run(library.list_scripts(status="with_video"))] == [2]

    def test_unknown_status(self, repository):
        library = ScriptLibraryService(Mock(), repository)
        with pytest.raises(AppValidationError):
            asyncio.run(library.list_scripts(status="broken"))

    def test_group_by_channel(self, repository):
        groups = group_by_channel(repository.list_scripts_overview.return_value)
        assert list(groups) == ["A", "B"]
        assert [s.id for s in groups["A"]] == [1, 3]

    def test_get_script_not_found(self, repository):
        library = ScriptLibraryService(Mock(), repository)
        with pytest.raises(NotFoundError):
            asyncio.run(library.get_script(99))

    def test_regenerate_image(self, repository):
        client = Mock()
        client.generate_content = AsyncMock(return_value={"success": True})
        library = ScriptLibraryService(client, repository)

        asyncio.run(library.regenerate_image(2, 0, {"altura": 768, "largura": 1344, "modelo": "m", "prompt": "p"}))

        payload = client.generate_content.await_args.args[0]
        assert payload["tipo_geracao"] == "regen_image"
        assert payload["id_roteiro"] == 2

    def test_delete_script(self, repository):
        client = Mock()
        client.delete_content = AsyncMock(return_value={"success": True})
        asyncio.run(ScriptLibraryService(client, repository).delete_script(3))
        client.delete_content.assert_awaited_once_with(3, "deleteScript")


class TestSessionService:
    """Dashboard session."""

    def test_login_success(self):
        repository = Mock()
        repository.sign_in.return_value = Mock(
            user=Mock(id="u1", email="a@b.com"),
            session=Mock(access_token="at", refresh_token="rt"),
        )
        session = SessionService(repository)

        assert asyncio.run(session.login("a@b.com", "pw")) is True
        assert session.is_authenticated
        assert session.access_token == "at"
        assert session.user_id == "u1"

    def test_invalid_credentials_return_false(self):
        error = Exception("Invalid login credentials")
        error.status = 400
        repository = Mock()
        repository.sign_in.side_effect = error
        session = SessionService(repository)

        assert asyncio.run(session.login("a@b.com", "wrong")) is False
        assert not session.is_authenticated

    def test_other_failures_raise(self):
        repository = Mock()
        repository.sign_in.side_effect = RuntimeError("connection reset")
        session = SessionService(repository)
        with pytest.raises(ExternalServiceError):
            asyncio.run(session.login("a@b.com", "pw"))

    def test_initialize_restores_session(self):
        repository = Mock()
        repository.get_session.return_value = {"access_token": "at", "user": {"id": "u1", "email": "a@b.com"}}
        session = SessionService(repository)

        assert asyncio.run(session.initialize()) is True
        assert session.email == "a@b.com"

    def test_logout_clears(self):
        repository = Mock()
        session = SessionService(repository)
        session.session = {"access_token": "at"}
        asyncio.run(session.logout())
        assert not session.is_authenticated
        repository.sign_out.assert_called_once()
